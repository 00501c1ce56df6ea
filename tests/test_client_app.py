import time

from fastapi.testclient import TestClient

from config import ClientSettings, load_settings
from conftest import FakeEndpoint, FakeSink, FixedRng
from elgamal_client import build_orchestrator, create_app
from orchestrator import ElGamalOrchestrator


def _app(endpoint=None, sink=None, **kwargs):
    orch = ElGamalOrchestrator(endpoint or FakeEndpoint(), sink or FakeSink(), rng=FixedRng(6), **kwargs)
    return create_app(orchestrator=orch), orch


def test_health_and_initial_status():
    app, _ = _app()
    with TestClient(app) as client:
        assert client.get("/health").json() == {"status": "healthy"}
        assert client.get("/status").json() == {
            "round": 0,
            "total_rounds": 5,
            "waiting": False,
            "finished": False,
        }


def test_params_complete_a_round():
    sink = FakeSink()
    app, _ = _app(sink=sink)
    with TestClient(app) as client:
        ack = client.post("/elgamal_params", json={"p": 23, "a": 5}).json()
        assert ack["status"] == "requested"
        assert ack["waiting"] is True

        deadline = time.monotonic() + 5
        while client.get("/status").json()["round"] < 1 and time.monotonic() < deadline:
            time.sleep(0.01)
        assert client.get("/status").json()["round"] == 1
    assert sink.values == [15]


def test_unavailable_endpoint_reported():
    app, orch = _app(endpoint=FakeEndpoint(available=False))
    with TestClient(app) as client:
        ack = client.post("/elgamal_params", json={"p": 23, "a": 5}).json()
    assert ack["status"] == "unavailable"
    assert ack["round"] == 0 and ack["waiting"] is False


def test_small_modulus_rejected_without_error_status():
    app, _ = _app()
    with TestClient(app) as client:
        response = client.post("/elgamal_params", json={"p": 2, "a": 5})
    assert response.status_code == 200
    assert response.json()["status"] == "rejected"


def test_out_of_range_params_fail_validation():
    app, _ = _app()
    with TestClient(app) as client:
        assert client.post("/elgamal_params", json={"p": 2**64, "a": 5}).status_code == 422
        assert client.post("/elgamal_params", json={"p": -23, "a": 5}).status_code == 422
        assert client.post("/elgamal_params", json={"p": 23}).status_code == 422


def test_finished_client_stays_idle():
    app, orch = _app(total_rounds=1)
    orch.state.round = 1
    with TestClient(app) as client:
        for _ in range(2):
            assert client.post("/elgamal_params", json={"p": 23, "a": 5}).json()["status"] == "finished"
        assert client.get("/status").json()["finished"] is True


def test_settings_defaults_and_env(monkeypatch):
    monkeypatch.delenv("ELGAMAL_TOTAL_ROUNDS", raising=False)
    assert load_settings([]) == ClientSettings()

    monkeypatch.setenv("ELGAMAL_ENDPOINT_URL", "http://enc:9000")
    monkeypatch.setenv("ELGAMAL_TOTAL_ROUNDS", "3")
    monkeypatch.setenv("ELGAMAL_SECURE_RANDOM", "true")
    settings = load_settings(["--port", "9100", "--total-rounds", "7"])
    assert settings.endpoint_url == "http://enc:9000"
    assert settings.port == 9100
    assert settings.total_rounds == 7
    assert settings.secure_random is True


def test_seeded_rng_is_reproducible():
    a = ClientSettings(seed=42).make_rng()
    b = ClientSettings(seed=42).make_rng()
    assert [a.randint(1, 10**9) for _ in range(5)] == [b.randint(1, 10**9) for _ in range(5)]


def test_build_orchestrator_uses_settings():
    settings = ClientSettings(endpoint_url="http://enc:9000/", total_rounds=2, probe_timeout=0.5)
    orch = build_orchestrator(settings)
    assert orch.endpoint.base_url == "http://enc:9000"
    assert orch.total_rounds == 2
    assert orch.probe_timeout == 0.5


def test_setup_logging_routes_library_noise_to_debug_file(tmp_path):
    import logging

    from elgamal_client import QUIET_LOGGERS, setup_logging

    names = ("",) + QUIET_LOGGERS
    saved = {
        name: (logging.getLogger(name).handlers[:], logging.getLogger(name).propagate, logging.getLogger(name).level)
        for name in names
    }
    try:
        setup_logging(9100, str(tmp_path / "logs"))
        logging.getLogger("orchestrator").info("[Round 1] hello")
        logging.getLogger("orchestrator").debug("[Round 1] n=6")
        logging.getLogger("httpx").info("HTTP Request: GET /health")

        for handler in logging.getLogger().handlers:
            handler.flush()
        rounds_log = (tmp_path / "logs" / "elgamal_client_9100.log").read_text()
        debug_log = (tmp_path / "logs" / "debug_9100.log").read_text()
    finally:
        for name, (handlers, propagate, level) in saved.items():
            lib_logger = logging.getLogger(name)
            for handler in lib_logger.handlers:
                if handler not in handlers:
                    handler.close()
            lib_logger.handlers[:] = handlers
            lib_logger.propagate = propagate
            lib_logger.setLevel(level)

    assert "[Round 1] hello" in rounds_log
    assert "n=6" not in rounds_log
    assert "n=6" in debug_log
    assert "GET /health" in debug_log
    assert "GET /health" not in rounds_log
