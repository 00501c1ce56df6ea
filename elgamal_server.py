"""
ElGamal Reference Peer
Plays the other side of the exchange for local runs:
publishes domain parameters, encrypts random messages under the client's
public contribution and checks the values the client publishes back.
"""
import asyncio
import logging
import random
from contextlib import asynccontextmanager
from typing import List, Optional

import httpx
import uvicorn
from fastapi import FastAPI, HTTPException

from model import ElGamalParams, ElGamalResult, EncryptRequest, EncryptResponse
from service.crypto.modular import as_int64, mod_mul, mod_pow

logger = logging.getLogger("elgamal_server")

# Park-Miller: 2^31 - 1 with primitive root 16807
DEFAULT_P = 2147483647
DEFAULT_A = 16807


class PeerState:
    def __init__(self, p: int, a: int, rng: random.Random):
        self.p = p
        self.a = a
        self.rng = rng
        self.expected: Optional[int] = None  # Last message we encrypted
        self.received: List[int] = []
        self.matched = 0
        self.mismatched = 0

    def encrypt(self, public_key: int) -> EncryptResponse:
        k = self.rng.randint(1, self.p - 2)
        m = self.rng.randint(1, self.p - 1)
        y1 = mod_pow(self.a, k, self.p)
        y2 = mod_mul(m, mod_pow(public_key, k, self.p), self.p)
        self.expected = as_int64(m)
        return EncryptResponse(y1=y1, y2=y2)

    def check(self, value: int) -> bool:
        self.received.append(value)
        ok = self.expected is not None and value == self.expected
        if ok:
            self.matched += 1
        else:
            self.mismatched += 1
        return ok


async def publish_params(peer: PeerState, client_url: str, interval: float):
    """Push {p, a} to the client every `interval` seconds"""
    params = ElGamalParams(p=peer.p, a=peer.a)
    async with httpx.AsyncClient(timeout=5) as client:
        while True:
            try:
                response = await client.post(f"{client_url}/elgamal_params", json=params.model_dump())
                response.raise_for_status()
                logger.debug(f"Client answered {response.json().get('status')}")
            except httpx.HTTPError as e:
                logger.warning(f"Failed to publish params to {client_url}: {e}")
            await asyncio.sleep(interval)


def create_app(
    p: int = DEFAULT_P,
    a: int = DEFAULT_A,
    client_url: Optional[str] = None,
    interval: float = 1.0,
    rng: Optional[random.Random] = None,
) -> FastAPI:
    if p < 3:
        raise ValueError(f"p must be >= 3, got {p}")
    peer = PeerState(p, a, rng or random.Random())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan context manager for startup and shutdown events"""
        publisher = None
        if client_url:
            publisher = asyncio.create_task(publish_params(peer, client_url, interval))
        yield
        if publisher is not None:
            publisher.cancel()
            try:
                await publisher
            except asyncio.CancelledError:
                pass
        logger.info(f"[Server] Results: {peer.matched} matched, {peer.mismatched} mismatched")

    app = FastAPI(title="ElGamal Reference Peer", lifespan=lifespan)
    app.state.peer = peer

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "p": peer.p, "a": peer.a}

    @app.post("/elgamal_encrypt", response_model=EncryptResponse)
    async def elgamal_encrypt(request: EncryptRequest):
        """
        Encrypt a random message under the client's public contribution.
        """
        if not 1 <= request.public_key < peer.p:
            raise HTTPException(status_code=400, detail=f"public_key must be in [1, {peer.p - 1}]")
        response = peer.encrypt(request.public_key)
        logger.info(f"[Server] b={request.public_key} -> y1={response.y1} y2={response.y2}")
        return response

    @app.post("/elgamal_result")
    async def elgamal_result(result: ElGamalResult):
        """
        Receive a decrypted value from the client and compare it with the
        message we encrypted last.
        """
        ok = peer.check(result.value)
        if ok:
            logger.info(f"[Server] ✅ x={result.value} matches")
        else:
            logger.warning(f"[Server] ❌ x={result.value}, expected {peer.expected}")
        return {"match": ok, "received": len(peer.received)}

    return app


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="ElGamal Reference Peer")
    parser.add_argument("--port", type=int, default=8200, help="Port to run on")
    parser.add_argument("--host", type=str, default="0.0.0.0", help="Host to bind to")
    parser.add_argument("--p", type=int, default=DEFAULT_P, help="Prime modulus")
    parser.add_argument("--a", type=int, default=DEFAULT_A, help="Generator")
    parser.add_argument("--client-url", type=str, default=None, help="Client base URL to publish params to")
    parser.add_argument("--interval", type=float, default=1.0, help="Seconds between parameter events")
    parser.add_argument("--seed", type=int, default=None, help="PRNG seed")

    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='%(asctime)s | %(message)s', datefmt='%H:%M:%S')
    logger.info(f"[Server] Starting ElGamal reference peer on port {args.port}...")

    uvicorn.run(
        create_app(args.p, args.a, args.client_url, args.interval, random.Random(args.seed)),
        host=args.host,
        port=args.port
    )
