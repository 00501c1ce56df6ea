"""
Client Configuration

CLI flags win; otherwise ELGAMAL_* environment variables; otherwise defaults.
"""
import argparse
import os
import random
from typing import List, Optional

from pydantic import BaseModel, Field

from round_state import TOTAL_ROUNDS
from service.crypto.key_generation import RandomSource


class ClientSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8100
    endpoint_url: str = "http://localhost:8200"  # Encryption endpoint base URL
    sink_url: str = "http://localhost:8200/elgamal_result"
    total_rounds: int = Field(default=TOTAL_ROUNDS, ge=1)
    probe_timeout: float = Field(default=1.0, gt=0)
    request_timeout: Optional[float] = None  # None = no timeout on encrypt
    secure_random: bool = False  # SystemRandom instead of a seeded PRNG
    seed: Optional[int] = None
    log_dir: str = "logs"

    def make_rng(self) -> RandomSource:
        if self.secure_random:
            return random.SystemRandom()
        return random.Random(self.seed)


def _env_bool(name: str) -> Optional[bool]:
    value = os.getenv(name)
    if value is None:
        return None
    return value.strip().lower() in ("1", "true", "yes", "on")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="ElGamal decryption client")
    parser.add_argument("--host", type=str, default=os.getenv("ELGAMAL_HOST"), help="Host to bind to")
    parser.add_argument("--port", type=int, default=os.getenv("ELGAMAL_PORT"), help="Port to run on")
    parser.add_argument("--endpoint-url", type=str, default=os.getenv("ELGAMAL_ENDPOINT_URL"),
                        help="Encryption endpoint base URL")
    parser.add_argument("--sink-url", type=str, default=os.getenv("ELGAMAL_SINK_URL"),
                        help="URL results are POSTed to")
    parser.add_argument("--total-rounds", type=int, default=os.getenv("ELGAMAL_TOTAL_ROUNDS"),
                        help="Rounds to run before going idle")
    parser.add_argument("--probe-timeout", type=float, default=os.getenv("ELGAMAL_PROBE_TIMEOUT"),
                        help="Seconds to wait for the endpoint health probe")
    parser.add_argument("--request-timeout", type=float, default=os.getenv("ELGAMAL_REQUEST_TIMEOUT"),
                        help="Encrypt request timeout in seconds (default: none)")
    parser.add_argument("--secure-random", action="store_true", default=_env_bool("ELGAMAL_SECURE_RANDOM"),
                        help="Draw secrets from the OS CSPRNG")
    parser.add_argument("--seed", type=int, default=os.getenv("ELGAMAL_SEED"),
                        help="Seed for the PRNG (ignored with --secure-random)")
    parser.add_argument("--log-dir", type=str, default=os.getenv("ELGAMAL_LOG_DIR"), help="Log directory")
    return parser


def load_settings(argv: Optional[List[str]] = None) -> ClientSettings:
    args = build_parser().parse_args(argv)
    # Unset options fall through to the model defaults
    overrides = {key: value for key, value in vars(args).items() if value is not None}
    return ClientSettings(**overrides)
