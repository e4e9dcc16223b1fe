"""AppServer -- manage the uvicorn static server for the driven app.

Serves a built Particle Symphony web directory on a test port, waits for
the health endpoint, and stops the process on exit.
"""

from __future__ import annotations

import os
import signal
import socket
import subprocess
import sys
import time
from pathlib import Path

import requests
from loguru import logger

HEALTH_TIMEOUT = 30  # seconds to wait for server startup
HEALTH_INTERVAL = 0.5  # seconds between health polls


def _find_free_port() -> int:
    """Find an available TCP port."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("", 0))
        return s.getsockname()[1]


class AppServer:
    """Runs ``symphony_e2e.static_app`` under uvicorn in a subprocess.

    Args:
        app_dir: Built web directory to serve.
        port: TCP port to bind. 0 picks a free port.
        host: Bind address. Defaults to 127.0.0.1.
    """

    def __init__(self, app_dir: Path | str, port: int = 0, host: str = "127.0.0.1"):
        self.app_dir = Path(app_dir).resolve()
        self.host = host
        self.port = port or _find_free_port()
        self.base_url = f"http://{self.host}:{self.port}"
        self._process: subprocess.Popen | None = None

    @property
    def url(self) -> str:
        return self.base_url

    @property
    def is_running(self) -> bool:
        """True if the server process is alive."""
        return self._process is not None and self._process.poll() is None

    def start(self, timeout: float = HEALTH_TIMEOUT) -> None:
        """Start the server and block until healthy or timeout.

        Raises:
            RuntimeError: If server fails to start or become healthy.
        """
        if self.is_running:
            return

        env = os.environ.copy()
        env["SYMPHONY_APP_DIR"] = str(self.app_dir)
        src_dir = str(Path(__file__).resolve().parent.parent)
        existing = env.get("PYTHONPATH", "")
        env["PYTHONPATH"] = f"{src_dir}{os.pathsep}{existing}" if existing else src_dir

        cmd = [
            sys.executable, "-m", "uvicorn",
            "--factory", "symphony_e2e.static_app:create_app",
            "--host", self.host,
            "--port", str(self.port),
            "--log-level", "warning",
        ]
        logger.info(f"Serving {self.app_dir} on {self.base_url}")
        self._process = subprocess.Popen(
            cmd,
            env=env,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
        )

        if not self._wait_healthy(timeout):
            self.stop()
            raise RuntimeError(
                f"Server failed to become healthy within {timeout}s "
                f"on {self.base_url}"
            )

    def stop(self) -> None:
        """Stop the server process gracefully."""
        if self._process is None:
            return
        try:
            self._process.send_signal(signal.SIGTERM)
            self._process.wait(timeout=5)
        except (subprocess.TimeoutExpired, ProcessLookupError):
            self._process.kill()
            self._process.wait(timeout=2)
        finally:
            self._process = None

    def is_healthy(self) -> bool:
        """Check if the server responds to the health endpoint."""
        try:
            resp = requests.get(f"{self.base_url}/health", timeout=2)
            return resp.status_code == 200
        except (requests.ConnectionError, requests.Timeout):
            return False

    def _wait_healthy(self, timeout: float) -> bool:
        """Poll health endpoint until responsive or timeout."""
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if not self.is_running:
                return False
            if self.is_healthy():
                return True
            time.sleep(HEALTH_INTERVAL)
        return False

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *exc):
        self.stop()
