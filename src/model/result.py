"""
Result Sink Models
"""
from pydantic import BaseModel

from .types import I64


class ElGamalResult(BaseModel):
    """Recovered plaintext, published once per successful round"""
    value: I64


class RoundStatus(BaseModel):
    """Snapshot of round progress (never carries the ephemeral secret)"""
    round: int
    total_rounds: int
    waiting: bool
    finished: bool


class ParamsAck(RoundStatus):
    """Reply to a parameter event"""
    status: str
