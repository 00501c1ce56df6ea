"""
Round State and Parameter Handling
Tracks protocol progress and turns parameter events into round plans
"""
import logging
from dataclasses import dataclass
from typing import Optional

from model import ElGamalParams
from service.crypto.key_generation import (
    RandomSource,
    derive_public_contribution,
    draw_ephemeral_secret,
)

logger = logging.getLogger(__name__)

TOTAL_ROUNDS = 5


class InvalidParameters(ValueError):
    """Parameter event rejected for violating the domain constraints"""


@dataclass
class RoundState:
    """Mutable protocol progress, owned by the orchestrator"""
    round: int = 0
    waiting: bool = False  # True while one encrypt request is outstanding
    finished: bool = False  # Terminal: no more rounds run


@dataclass(frozen=True)
class RoundPlan:
    """Everything one round needs; dropped once its response is processed"""
    p: int
    a: int
    n: int  # Ephemeral secret, never transmitted
    public_key: int  # b = a^n mod p

    def __repr__(self) -> str:
        return f"RoundPlan(p={self.p}, a={self.a}, public_key={self.public_key})"


def handle_parameters(
    params: ElGamalParams,
    state: RoundState,
    rng: RandomSource,
    total_rounds: int = TOTAL_ROUNDS,
) -> Optional[RoundPlan]:
    """
    Validate a parameter event and plan a round if the state allows it.

    Returns None when a request is already outstanding or all rounds are
    done. Does not set `waiting`: the orchestrator does that only after the
    encryption endpoint answers the availability probe.

    Raises:
        InvalidParameters: p < 3 (state untouched)
    """
    if state.waiting or state.finished:
        return None

    if state.round >= total_rounds:
        state.finished = True
        logger.info(f"All {total_rounds} rounds are complete.")
        return None

    if params.p < 3:
        raise InvalidParameters(f"Invalid p={params.p}, must be >= 3")

    n = draw_ephemeral_secret(params.p, rng)
    b = derive_public_contribution(params.a, n, params.p)
    return RoundPlan(p=params.p, a=params.a, n=n, public_key=b)


def complete_round(state: RoundState, total_rounds: int = TOTAL_ROUNDS) -> None:
    """Successful response: advance by exactly one round"""
    state.round += 1
    state.waiting = False
    if state.round >= total_rounds:
        state.finished = True


def fail_round(state: RoundState) -> None:
    """Failed response: release the slot, the round is retried later"""
    state.waiting = False
