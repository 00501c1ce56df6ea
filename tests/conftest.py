from __future__ import annotations

from typing import List

import httpx

from service.crypto.modular import mod_mul, mod_pow
from service.endpoint.encryption_client import EncryptionOutcome, EncryptionSuccess


class FixedRng:
    """randint() that always returns the same secret"""

    def __init__(self, value: int):
        self.value = value
        self.calls: List[tuple] = []

    def randint(self, a: int, b: int) -> int:
        self.calls.append((a, b))
        assert a <= self.value <= b
        return self.value


class FakeEndpoint:
    """Honest in-process encryption endpoint: encrypts `message` with ephemeral `k`"""

    base_url = "http://fake-endpoint"

    def __init__(self, p: int = 23, a: int = 5, k: int = 3, message: int = 15, available: bool = True):
        self.p = p
        self.a = a
        self.k = k
        self.message = message
        self.available = available
        self.probes = 0
        self.requests: List[int] = []
        self.outcomes: List[EncryptionOutcome] = []  # Scripted outcomes, consumed first
        self.gate = None  # asyncio.Event holding responses back when set
        self.probe_gate = None

    async def probe(self, timeout: float = 1.0) -> bool:
        self.probes += 1
        if self.probe_gate is not None:
            await self.probe_gate.wait()
        return self.available

    async def encrypt(self, public_key: int) -> EncryptionOutcome:
        self.requests.append(public_key)
        if self.gate is not None:
            await self.gate.wait()
        if self.outcomes:
            return self.outcomes.pop(0)
        y1 = mod_pow(self.a, self.k, self.p)
        y2 = mod_mul(self.message, mod_pow(public_key, self.k, self.p), self.p)
        return EncryptionSuccess(y1=y1, y2=y2)


class FakeSink:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.values: List[int] = []

    async def publish(self, value: int) -> None:
        if self.fail:
            raise httpx.ConnectError("sink down")
        self.values.append(value)
