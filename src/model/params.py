"""
Domain Parameter Models

Parameter feed messages delivered to the client once per round.
"""
from pydantic import BaseModel

from .types import U64


class ElGamalParams(BaseModel):
    """Public domain parameters for one round"""
    p: U64  # Prime modulus, must be >= 3 to start a round
    a: U64  # Generator
