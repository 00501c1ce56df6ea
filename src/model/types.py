"""
Integer Types for Wire Models

Unsigned/signed 64-bit ranges enforced at the transport boundary.
"""
from typing import Annotated

from pydantic import Field

U64_MAX = 2**64 - 1
I64_MIN = -(2**63)
I64_MAX = 2**63 - 1

U64 = Annotated[int, Field(ge=0, le=U64_MAX)]
I64 = Annotated[int, Field(ge=I64_MIN, le=I64_MAX)]
