"""
Ephemeral Key Generation

Per-round secret exponent and the public contribution derived from it.
The randomness source is passed in by the caller (random.Random,
random.SystemRandom, or anything else exposing randint).
"""
from typing import Protocol

from service.crypto.modular import mod_pow


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int: ...


def draw_ephemeral_secret(p: int, rng: RandomSource) -> int:
    """Draw n uniformly from [1, p-2]"""
    if p < 3:
        raise ValueError(f"p must be >= 3 to draw a secret, got {p}")
    return rng.randint(1, p - 2)


def derive_public_contribution(a: int, n: int, p: int) -> int:
    """b = a^n mod p"""
    return mod_pow(a, n, p)
