"""
Modular Arithmetic

Pure helpers over unsigned 64-bit operands. Python ints never overflow, so
mod_mul needs no widened intermediate.
"""

_U64_MOD = 1 << 64
_I64_SIGN = 1 << 63


def mod_mul(x: int, y: int, m: int) -> int:
    """(x * y) mod m"""
    if m < 1:
        raise ValueError(f"modulus must be >= 1, got {m}")
    return (x * y) % m


def mod_pow(base: int, exp: int, m: int) -> int:
    """
    base^exp mod m by square-and-multiply.

    mod_pow(_, 0, m) == 1 % m, so the result is 0 when m == 1.
    """
    if m < 1:
        raise ValueError(f"modulus must be >= 1, got {m}")
    if exp < 0:
        raise ValueError(f"exponent must be >= 0, got {exp}")

    result = 1 % m
    base %= m
    while exp > 0:
        if exp & 1:
            result = mod_mul(result, base, m)
        base = mod_mul(base, base, m)
        exp >>= 1
    return result


def as_int64(x: int) -> int:
    """Reinterpret a u64 value as a two's-complement signed 64-bit integer"""
    x %= _U64_MOD
    return x - _U64_MOD if x >= _I64_SIGN else x
