"""Daemon lifecycle CLI commands."""

from __future__ import annotations

from typing import Any

import httpx
import typer

from open_mobile_agent.cli.daemon_client import DaemonClient, DaemonController, format_json
from open_mobile_agent.cli.utils import JsonOption

app = typer.Typer(help="Start, stop and inspect the background daemon")


@app.command("start")
def daemon_start() -> None:
    """Start the daemon and wait until it answers /health."""
    controller = DaemonController()
    pid = controller.read_pid()
    if controller.health():
        typer.echo(f"Daemon already running (pid {pid or 'unknown'})")
        return

    pid = controller.start()
    try:
        controller.wait_until_healthy()
    except RuntimeError as exc:
        typer.echo(str(exc))
        raise typer.Exit(code=1) from exc
    typer.echo(f"Daemon started (pid {pid}) on {controller.socket_path}")


@app.command("stop")
def daemon_stop() -> None:
    """Stop the daemon process."""
    typer.echo("Daemon stopped" if DaemonController().stop() else "Daemon not running")


def _health() -> dict[str, Any] | None:
    client = DaemonClient(auto_start=False)
    try:
        return dict(client.request("GET", "/health").json())
    except httpx.HTTPError:
        return None
    finally:
        client.close()


@app.command("status")
def daemon_status(json_output: bool = JsonOption) -> None:
    """Show PID, socket, log file and health of the daemon."""
    status = DaemonController().status()
    status["health"] = _health() if status["socket_exists"] else None

    if json_output:
        typer.echo(format_json(status))
        return

    state = "running" if status["health"] else "stopped"
    typer.echo(f"Daemon {state} (pid {status['pid'] or '-'})")
    typer.echo(f"  socket: {status['socket']}")
    typer.echo(f"  log:    {status['log_file']}")
