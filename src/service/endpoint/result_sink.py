import logging
from typing import Optional

import httpx

from model import ElGamalResult

logger = logging.getLogger(__name__)


class ResultSink:
    """Publishes recovered values as {"value": x} to a single URL"""

    def __init__(
        self,
        url: str,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def publish(self, value: int) -> None:
        """Raises httpx.HTTPError when the sink does not accept the result"""
        message = ElGamalResult(value=value)
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(self.url, json=message.model_dump())
            response.raise_for_status()
        logger.debug(f"Published {message.value} to {self.url}")
