"""Shared CLI helpers for rendering daemon responses."""

from __future__ import annotations

from typing import Any, NoReturn, cast

import typer

from open_mobile_agent.actions.selector import resolve_selector
from open_mobile_agent.cli.daemon_client import format_json
from open_mobile_agent.errors import AgentError

# Seconds of HTTP slack on top of an operation's own time budget.
REQUEST_SLACK = 15.0
FLOW_TIMEOUT = 60.0

DeviceOption = typer.Option(..., "--device", "-d", help="Device serial or simulator UDID")
PlatformOption = typer.Option("android", "--platform", "-p", help="android|ios")
JsonOption = typer.Option(False, "--json", help="Output JSON")


def _parse_response_json(resp: Any) -> dict[str, Any]:
    try:
        return cast(dict[str, Any], resp.json())
    except ValueError as exc:
        typer.echo(f"Failed to parse daemon response (HTTP {resp.status_code})")
        raise typer.Exit(code=1) from exc


def render_error(error: dict[str, Any]) -> NoReturn:
    """Print ``code: message`` plus a hint, then exit 1."""
    typer.echo(f"{error.get('code')}: {error.get('message')}")
    remediation = error.get("remediation")
    if remediation:
        typer.echo(f"Hint: {remediation}")
    raise typer.Exit(code=1)


def _maybe_render_message(data: dict[str, Any]) -> bool:
    message = data.get("message")
    if not message:
        return False
    typer.echo(f"✓ {message}")
    return True


def check_response(resp: Any) -> dict[str, Any]:
    """Return the response payload, or render its error and exit 1."""
    data = _parse_response_json(resp)
    if data.get("status") == "error" and isinstance(data.get("error"), dict):
        render_error(data["error"])
    return data


def handle_response(resp: Any, json_output: bool = False) -> dict[str, Any]:
    """Render a daemon response and return its payload.

    Errors always exit with status 1, also in JSON mode.
    """
    if json_output:
        data = _parse_response_json(resp)
        typer.echo(format_json(data))
        if data.get("status") == "error":
            raise typer.Exit(code=1)
        return data

    data = check_response(resp)
    if not _maybe_render_message(data):
        typer.echo(format_json(data))
    return data


def selector_payload(target: str, strategy: str | None) -> dict[str, str]:
    """Turn a CLI selector argument into request fields, exiting on bad input."""
    try:
        return resolve_selector(target, strategy).to_payload()
    except AgentError as exc:
        render_error(exc.to_dict())
