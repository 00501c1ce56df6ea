"""
ElGamal Client Models Package

Provides all Pydantic models for client <-> feed/endpoint/sink communication.
"""

# Domain parameters
from .params import ElGamalParams

# Encryption endpoint
from .encryption import EncryptRequest, EncryptResponse

# Result sink / status
from .result import ElGamalResult, RoundStatus, ParamsAck

from .types import U64, I64, U64_MAX, I64_MIN, I64_MAX

__all__ = [
    # Params
    "ElGamalParams",
    # Encryption
    "EncryptRequest",
    "EncryptResponse",
    # Result
    "ElGamalResult",
    "RoundStatus",
    "ParamsAck",
    # Types
    "U64",
    "I64",
    "U64_MAX",
    "I64_MIN",
    "I64_MAX",
]
