"""Daemon process control and the HTTP client CLI commands talk through."""

from __future__ import annotations

import json
import os
import signal
import subprocess
import sys
import time
from pathlib import Path
from typing import Any

import httpx

STATE_DIR = Path.home() / ".open-mobile-agent"
SOCKET_PATH = Path("/tmp/open-mobile-agent.sock")
PID_FILE = STATE_DIR / "daemon.pid"
LOG_FILE = STATE_DIR / "daemon.log"
BASE_URL = "http://open-mobile-agent"
SERVER_APP = "open_mobile_agent.daemon.server:app"
STARTUP_TIMEOUT = 5.0


def _uds_client(socket_path: Path, timeout: float) -> httpx.Client:
    return httpx.Client(
        transport=httpx.HTTPTransport(uds=str(socket_path)),
        base_url=BASE_URL,
        timeout=timeout,
    )


def _pid_running(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except OSError:
        return False
    return True


class DaemonController:
    """Start, stop and inspect the uvicorn daemon process."""

    def __init__(self, socket_path: Path = SOCKET_PATH) -> None:
        self.socket_path = socket_path
        STATE_DIR.mkdir(parents=True, exist_ok=True)

    def read_pid(self) -> int | None:
        if not PID_FILE.exists():
            return None
        try:
            return int(PID_FILE.read_text().strip())
        except ValueError:
            return None

    def health(self) -> bool:
        """Return True if the daemon socket answers /health."""
        if not self.socket_path.exists():
            return False
        with _uds_client(self.socket_path, timeout=1.0) as client:
            try:
                return client.get("/health").status_code == 200
            except httpx.HTTPError:
                return False

    def start(self) -> int:
        """Spawn the daemon; returns its PID, or -1 if one answers but the PID is unknown."""
        pid = self.read_pid()
        if pid and _pid_running(pid):
            return pid
        if pid:
            PID_FILE.unlink(missing_ok=True)
        if self.health():
            return -1

        args = [
            sys.executable,
            "-m",
            "uvicorn",
            SERVER_APP,
            "--uds",
            str(self.socket_path),
            "--log-level",
            "info",
        ]
        LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        with LOG_FILE.open("a", encoding="utf-8") as log_handle:
            proc = subprocess.Popen(
                args,
                stdout=log_handle,
                stderr=log_handle,
                start_new_session=True,
            )
        PID_FILE.write_text(str(proc.pid))
        return proc.pid

    def wait_until_healthy(self, timeout: float = STARTUP_TIMEOUT) -> None:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if self.health():
                return
            time.sleep(0.1)
        raise RuntimeError(f"Daemon did not become healthy in time; see {LOG_FILE}")

    def stop(self) -> bool:
        """Send SIGTERM and wait briefly for the process to exit."""
        pid = self.read_pid()
        if not pid:
            return False
        if not _pid_running(pid):
            PID_FILE.unlink(missing_ok=True)
            return False

        os.kill(pid, signal.SIGTERM)
        for _ in range(20):
            if not _pid_running(pid):
                PID_FILE.unlink(missing_ok=True)
                return True
            time.sleep(0.1)
        return False

    def status(self) -> dict[str, Any]:
        pid = self.read_pid()
        return {
            "pid": pid,
            "pid_running": _pid_running(pid) if pid else False,
            "socket": str(self.socket_path),
            "socket_exists": self.socket_path.exists(),
            "log_file": str(LOG_FILE),
        }


class DaemonClient:
    """HTTP client over the daemon's Unix Domain Socket.

    With ``auto_start`` the daemon is spawned on first use when it is not
    already answering.
    """

    def __init__(
        self,
        socket_path: Path = SOCKET_PATH,
        *,
        auto_start: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self.socket_path = socket_path
        self.auto_start = auto_start
        self.controller = DaemonController(socket_path)
        self._client = _uds_client(socket_path, timeout)
        self._ready = False

    def close(self) -> None:
        self._client.close()

    def request(
        self,
        method: str,
        path: str,
        json_body: dict[str, Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Send a request; ``timeout`` overrides the client default for slow calls."""
        if self.auto_start and not self._ready:
            self._ensure_running()
        kwargs: dict[str, Any] = {"json": json_body}
        if timeout is not None:
            kwargs["timeout"] = timeout
        return self._client.request(method, path, **kwargs)

    def _ensure_running(self) -> None:
        if not self.controller.health():
            self.controller.start()
            self.controller.wait_until_healthy()
        self._ready = True


def format_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)
