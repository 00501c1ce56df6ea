import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional, Union

import httpx
from pydantic import ValidationError

from model import EncryptRequest, EncryptResponse

# Configure logger for encryption endpoint module
logger = logging.getLogger("encryption_endpoint")

PROBE_RETRY_INTERVAL = 0.1


# ============================================================================
# Response Outcomes
# ============================================================================

@dataclass(frozen=True)
class EncryptionSuccess:
    y1: int
    y2: int

    def as_response(self) -> EncryptResponse:
        return EncryptResponse(y1=self.y1, y2=self.y2)


@dataclass(frozen=True)
class EndpointUnavailable:
    reason: str


@dataclass(frozen=True)
class EndpointError:
    reason: str


EncryptionOutcome = Union[EncryptionSuccess, EndpointUnavailable, EndpointError]


# ============================================================================
# HTTP Client
# ============================================================================

class EncryptionEndpoint:
    """
    Remote ElGamal encryption service.

    GET  {base_url}/health           -> 200 when the service is up
    POST {base_url}/elgamal_encrypt  -> {"y1": ..., "y2": ...}
    """

    def __init__(
        self,
        base_url: str,
        request_timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        # None: wait for the response indefinitely
        self.request_timeout = request_timeout
        self._transport = transport

    def _client(self, timeout) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=self._transport,
        )

    async def probe(self, timeout: float = 1.0) -> bool:
        """Poll /health until it answers 200 or `timeout` seconds pass"""
        deadline = time.monotonic() + timeout
        async with self._client(timeout) as client:
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                try:
                    response = await client.get("/health", timeout=remaining)
                    if response.status_code == 200:
                        return True
                except httpx.HTTPError as e:
                    logger.debug(f"Health probe to {self.base_url} failed: {e}")
                await asyncio.sleep(PROBE_RETRY_INTERVAL)

    async def encrypt(self, public_key: int) -> EncryptionOutcome:
        """Send our public contribution, never raises"""
        request = EncryptRequest(public_key=public_key)
        try:
            async with self._client(self.request_timeout) as client:
                response = await client.post(
                    "/elgamal_encrypt",
                    json=request.model_dump()
                )
                response.raise_for_status()
                body = EncryptResponse.model_validate(response.json())
        except httpx.ConnectError as e:
            return EndpointUnavailable(reason=f"cannot reach {self.base_url}: {e}")
        except httpx.HTTPStatusError as e:
            return EndpointError(reason=f"HTTP {e.response.status_code}: {e.response.text}")
        except httpx.HTTPError as e:
            return EndpointError(reason=f"{type(e).__name__}: {e}")
        except (ValidationError, ValueError) as e:
            return EndpointError(reason=f"malformed response: {e}")

        return EncryptionSuccess(y1=body.y1, y2=body.y2)
