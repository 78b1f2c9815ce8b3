#!/usr/bin/env python3
"""Check credentials and serve the news digest API with uvicorn.

The backend runs as a child process so the runner can poll ``/health``
and report when the API is ready; Ctrl+C stops it cleanly.
"""

from __future__ import annotations

import argparse
import os
import subprocess
import sys
import time
from pathlib import Path

import httpx

from news_digest.config import Settings
from news_digest.logging_config import get_logger

ROOT_DIR = Path(__file__).resolve().parents[1]
UVICORN_APP = "news_digest.api.server:app"

logger = get_logger("scripts.run_app")


def check_env_vars() -> list[str]:
    """Return the names of required credentials missing from env and .env."""
    settings = Settings(_env_file=ROOT_DIR / ".env")
    missing = settings.missing_credentials()
    if missing:
        logger.error("credentials_missing", missing=missing, hint="set them in .env or the environment")
    else:
        logger.info(
            "credentials_ok",
            search_backend=settings.search_backend,
            model=settings.google_chat_model,
        )
    return missing


def launch_backend(host: str, port: int, reload: bool) -> subprocess.Popen:
    command = [sys.executable, "-m", "uvicorn", UVICORN_APP, "--host", host, "--port", str(port)]
    if reload:
        command.append("--reload")
    logger.info("backend_starting", app=UVICORN_APP, host=host, port=port, reload=reload)
    return subprocess.Popen(command, cwd=ROOT_DIR, env=os.environ.copy())  # noqa: S603


def wait_until_healthy(proc: subprocess.Popen, base_url: str, timeout: float) -> bool:
    """Poll ``/health`` until it answers 200, the child exits, or ``timeout`` passes."""

    health_url = f"{base_url.rstrip('/')}/health"
    deadline = time.monotonic() + timeout
    with httpx.Client(timeout=3.0) as client:
        while time.monotonic() < deadline and proc.poll() is None:
            try:
                if client.get(health_url).status_code == 200:
                    logger.info("backend_ready", url=base_url, docs=f"{base_url}/docs")
                    return True
            except httpx.HTTPError as exc:
                logger.debug("backend_poll_failed", error=str(exc))
            time.sleep(1.0)
    logger.warning("backend_not_ready", url=health_url, timeout=timeout, exited=proc.poll() is not None)
    return False


def stop_backend(proc: subprocess.Popen | None) -> None:
    if proc is None or proc.poll() is not None:
        return
    logger.info("backend_stopping", pid=proc.pid)
    proc.terminate()
    try:
        proc.wait(timeout=10)
    except subprocess.TimeoutExpired:
        logger.warning("backend_kill", pid=proc.pid)
        proc.kill()


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve the news digest API.")
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind (default: 127.0.0.1).")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind (default: 8000).")
    parser.add_argument(
        "--startup-timeout",
        type=float,
        default=30.0,
        help="Seconds to wait for the health endpoint.",
    )
    parser.add_argument("--reload", action="store_true", help="Enable uvicorn auto-reload.")
    parser.add_argument(
        "--skip-env-check",
        action="store_true",
        help="Start even if credentials are missing (the app will refuse to boot).",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()

    if not args.skip_env_check and check_env_vars():
        return 1

    proc = None
    try:
        proc = launch_backend(args.host, args.port, args.reload)
        wait_until_healthy(proc, f"http://{args.host}:{args.port}", args.startup_timeout)
        returncode = proc.wait()
        logger.info("backend_exited", returncode=returncode)
        return returncode
    except KeyboardInterrupt:
        logger.info("runner_interrupted")
        return 0
    finally:
        stop_backend(proc)


if __name__ == "__main__":
    raise SystemExit(main())
