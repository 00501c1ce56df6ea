"""
ElGamal Round Orchestrator
Wires the parameter feed, the encryption endpoint and the result sink
around RoundState, with at most one encrypt request in flight
"""
import asyncio
import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import httpx

from model import ElGamalParams, RoundStatus
from round_state import (
    TOTAL_ROUNDS,
    InvalidParameters,
    RoundPlan,
    RoundState,
    complete_round,
    fail_round,
    handle_parameters,
)
from service.crypto.elgamal_decryption import recover
from service.crypto.key_generation import RandomSource
from service.endpoint.encryption_client import (
    EncryptionEndpoint,
    EncryptionOutcome,
    EncryptionSuccess,
    EndpointError,
    EndpointUnavailable,
)
from service.endpoint.result_sink import ResultSink

logger = logging.getLogger(__name__)


class ParamsOutcome(str, Enum):
    """What happened to one parameter event"""
    REQUESTED = "requested"      # Encrypt request sent
    IGNORED = "ignored"          # A request is already outstanding
    FINISHED = "finished"        # All rounds done
    REJECTED = "rejected"        # Invalid parameters
    UNAVAILABLE = "unavailable"  # Endpoint failed the availability probe
    BUSY = "busy"                # Another event is mid-probe


@dataclass
class PendingRequest:
    """The single in-flight encrypt request"""
    plan: RoundPlan
    task: asyncio.Task


class ElGamalOrchestrator:
    def __init__(
        self,
        endpoint: EncryptionEndpoint,
        sink: ResultSink,
        rng: Optional[RandomSource] = None,
        total_rounds: int = TOTAL_ROUNDS,
        probe_timeout: float = 1.0,
    ):
        self.endpoint = endpoint
        self.sink = sink
        self.rng = rng if rng is not None else random.Random()
        self.total_rounds = total_rounds
        self.probe_timeout = probe_timeout

        self.state = RoundState()
        self._pending: Optional[PendingRequest] = None
        self._params_lock = asyncio.Lock()

    # ========================================================================
    # Parameter feed
    # ========================================================================

    async def on_params(self, params: ElGamalParams) -> ParamsOutcome:
        if self._params_lock.locked():
            logger.debug("Parameter event dropped: previous event still probing")
            return ParamsOutcome.BUSY

        async with self._params_lock:
            try:
                plan = handle_parameters(params, self.state, self.rng, self.total_rounds)
            except InvalidParameters as e:
                logger.error(f"❌ {e}")
                return ParamsOutcome.REJECTED

            if plan is None:
                if self.state.finished:
                    return ParamsOutcome.FINISHED
                logger.debug("Parameter event ignored: waiting for encryption response")
                return ParamsOutcome.IGNORED

            if not await self.endpoint.probe(self.probe_timeout):
                logger.warning(f"⚠️  Encryption endpoint {self.endpoint.base_url} is not available yet.")
                return ParamsOutcome.UNAVAILABLE

            self.state.waiting = True
            logger.info(
                f"[Round {self.state.round + 1}] p={plan.p} a={plan.a} "
                f"b={plan.public_key}, calling encryption endpoint"
            )
            logger.debug(f"[Round {self.state.round + 1}] n={plan.n}")

            task = asyncio.create_task(self._exchange(plan))
            self._pending = PendingRequest(plan=plan, task=task)
            return ParamsOutcome.REQUESTED

    # ========================================================================
    # Encryption response
    # ========================================================================

    async def _exchange(self, plan: RoundPlan) -> None:
        try:
            outcome = await self.endpoint.encrypt(plan.public_key)
            await self._on_response(plan, outcome)
        except Exception as e:
            # CancelledError passes through to shutdown()
            fail_round(self.state)
            logger.error(f"❌ Round {self.state.round + 1} aborted: {e}", exc_info=True)
        finally:
            self._pending = None

    async def _on_response(self, plan: RoundPlan, outcome: EncryptionOutcome) -> None:
        if isinstance(outcome, EncryptionSuccess):
            x = recover(outcome.as_response(), plan.p, plan.n)
            try:
                await self.sink.publish(x)
            except httpx.HTTPError as e:
                fail_round(self.state)
                logger.error(f"❌ Failed to publish result for round {self.state.round + 1}: {e}")
                return

            complete_round(self.state, self.total_rounds)
            logger.info(
                f"[Round {self.state.round}] y1={outcome.y1} y2={outcome.y2} -> x={x} (published)"
            )
            if self.state.finished:
                logger.info(f"✓ Task complete: {self.total_rounds} rounds finished.")
        elif isinstance(outcome, (EndpointUnavailable, EndpointError)):
            fail_round(self.state)
            logger.error(f"❌ Encryption request failed: {outcome.reason}")
        else:
            raise TypeError(f"Unknown encryption outcome: {outcome!r}")

    # ========================================================================
    # Introspection / lifecycle
    # ========================================================================

    @property
    def pending(self) -> Optional[PendingRequest]:
        return self._pending

    def status(self) -> RoundStatus:
        return RoundStatus(
            round=self.state.round,
            total_rounds=self.total_rounds,
            waiting=self.state.waiting,
            finished=self.state.finished,
        )

    async def drain(self) -> None:
        """Wait for the outstanding request (if any) to be processed"""
        if self._pending is not None:
            await asyncio.shield(self._pending.task)

    async def shutdown(self) -> None:
        """Process stop: abandon the outstanding request"""
        pending = self._pending
        if pending is None:
            return
        pending.task.cancel()
        try:
            await pending.task
        except asyncio.CancelledError:
            pass
        logger.info("Outstanding encryption request abandoned at shutdown")
