"""
Encryption Endpoint Models

Request/response pair exchanged with the remote encryption endpoint.
"""
from pydantic import BaseModel

from .types import U64


class EncryptRequest(BaseModel):
    """Our public contribution b = a^n mod p"""
    public_key: U64


class EncryptResponse(BaseModel):
    """Ciphertext pair: y1 = a^k mod p, y2 = m * b^k mod p"""
    y1: U64
    y2: U64
