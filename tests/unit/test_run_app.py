import importlib.util
from pathlib import Path

import httpx
import pytest

SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "run_app.py"


@pytest.fixture
def run_app():
    spec = importlib.util.spec_from_file_location("run_app", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class FakeProcess:
    def __init__(self, returncode=None) -> None:
        self.pid = 4242
        self.returncode = returncode
        self.terminated = False

    def poll(self):
        return self.returncode

    def terminate(self) -> None:
        self.terminated = True
        self.returncode = 0

    def wait(self, timeout=None):
        return self.returncode


def test_check_env_vars_reports_missing_keys(run_app, monkeypatch) -> None:
    monkeypatch.delenv("EXA_API_KEY", raising=False)
    monkeypatch.delenv("SEARCH_BACKEND", raising=False)
    monkeypatch.setenv("GOOGLE_API_KEY", "g")
    monkeypatch.setattr(run_app, "ROOT_DIR", Path("/nonexistent"))
    assert run_app.check_env_vars() == ["EXA_API_KEY"]


def test_wait_until_healthy_returns_true_on_ok(run_app, monkeypatch) -> None:
    real_client = httpx.Client

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/health"
        return httpx.Response(200, json={"status": "ok"})

    monkeypatch.setattr(
        run_app.httpx,
        "Client",
        lambda **kwargs: real_client(transport=httpx.MockTransport(handler), **kwargs),
    )
    assert run_app.wait_until_healthy(FakeProcess(), "http://127.0.0.1:8000/", 5.0)


def test_wait_until_healthy_stops_when_backend_exits(run_app) -> None:
    assert not run_app.wait_until_healthy(FakeProcess(returncode=1), "http://127.0.0.1:9", 5.0)


def test_stop_backend_terminates_running_process(run_app) -> None:
    proc = FakeProcess()
    run_app.stop_backend(proc)
    assert proc.terminated

    finished = FakeProcess(returncode=0)
    run_app.stop_backend(finished)
    assert not finished.terminated
    run_app.stop_backend(None)
