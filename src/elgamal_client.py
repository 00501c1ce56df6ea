"""
ElGamal Client - Decryption Participant Service
Receives domain parameters, asks the encryption endpoint for a ciphertext
under a fresh public contribution, recovers the plaintext and publishes it
"""
import logging
import os
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, HTTPException

from config import ClientSettings, load_settings
from model import ElGamalParams, ParamsAck, RoundStatus
from orchestrator import ElGamalOrchestrator
from service.endpoint.encryption_client import EncryptionEndpoint
from service.endpoint.result_sink import ResultSink

logger = logging.getLogger(__name__)


def build_orchestrator(settings: ClientSettings) -> ElGamalOrchestrator:
    return ElGamalOrchestrator(
        endpoint=EncryptionEndpoint(settings.endpoint_url, request_timeout=settings.request_timeout),
        sink=ResultSink(settings.sink_url),
        rng=settings.make_rng(),
        total_rounds=settings.total_rounds,
        probe_timeout=settings.probe_timeout,
    )


def create_app(
    settings: Optional[ClientSettings] = None,
    orchestrator: Optional[ElGamalOrchestrator] = None,
) -> FastAPI:
    settings = settings or ClientSettings()
    orchestrator = orchestrator or build_orchestrator(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("ElGamal client started.")
        yield
        await orchestrator.shutdown()
        logger.info("ElGamal client stopped.")

    app = FastAPI(title="ElGamal Client", lifespan=lifespan)
    app.state.orchestrator = orchestrator

    # ========================================================================
    # Parameter feed
    # ========================================================================

    @app.post("/elgamal_params", response_model=ParamsAck)
    async def receive_params(params: ElGamalParams):
        """파라미터 이벤트 수신 - 라운드 시작 가능하면 암호화 요청"""
        try:
            outcome = await orchestrator.on_params(params)
        except Exception as e:
            logger.error(f"❌ Parameter handling error: {e}", exc_info=True)
            raise HTTPException(status_code=500, detail=str(e))

        return ParamsAck(status=outcome.value, **orchestrator.status().model_dump())

    # ========================================================================
    # Introspection
    # ========================================================================

    @app.get("/status", response_model=RoundStatus)
    async def get_status():
        """현재 라운드 진행 상황 (비밀 값은 노출하지 않음)"""
        return orchestrator.status()

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    return app


# ============================================================================
# Main Entry Point
# ============================================================================

CONSOLE_FORMAT = '%(asctime)s | %(message)s'
DEBUG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
# Chatty libraries only go to the debug file
QUIET_LOGGERS = ('uvicorn', 'uvicorn.access', 'uvicorn.error', 'httpx', 'httpcore')


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt='%H:%M:%S'))
    return handler


def setup_logging(port: int, log_dir: str = "logs"):
    """Round log + debug log per port under `log_dir`, round progress on stdout."""
    os.makedirs(log_dir, exist_ok=True)

    rounds = _handler(
        logging.FileHandler(os.path.join(log_dir, f"elgamal_client_{port}.log")),
        logging.INFO, '%(asctime)s | %(levelname)s | %(message)s',
    )
    debug = _handler(
        logging.FileHandler(os.path.join(log_dir, f"debug_{port}.log")),
        logging.DEBUG, DEBUG_FORMAT,
    )
    console = _handler(logging.StreamHandler(sys.stdout), logging.INFO, CONSOLE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.handlers[:] = [rounds, debug, console]
    root_logger.setLevel(logging.DEBUG)

    for name in QUIET_LOGGERS:
        lib_logger = logging.getLogger(name)
        lib_logger.handlers[:] = [debug]
        lib_logger.propagate = False
        lib_logger.setLevel(logging.INFO)


def main(argv=None):
    settings = load_settings(argv)
    setup_logging(settings.port, settings.log_dir)

    logger.info("=" * 60)
    logger.info(f"🚀 ElGamal Client | Port {settings.port}")
    logger.info(f"   Endpoint: {settings.endpoint_url} | Sink: {settings.sink_url}")
    logger.info(f"   Rounds: {settings.total_rounds}")
    logger.info("=" * 60)

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_config=None,
        access_log=True
    )


if __name__ == "__main__":
    main()
