"""Low-level input commands: raw taps, swipes, text and maestro flows."""

from __future__ import annotations

from pathlib import Path

import typer

from open_mobile_agent.cli.daemon_client import DaemonClient
from open_mobile_agent.cli.utils import (
    FLOW_TIMEOUT,
    DeviceOption,
    JsonOption,
    PlatformOption,
    check_response,
    handle_response,
)

app = typer.Typer(help="Raw input commands (prefer 'element tap' where possible)")


@app.command("tap")
def input_tap(
    x: int = typer.Argument(..., help="X in raw screen pixels"),
    y: int = typer.Argument(..., help="Y in raw screen pixels"),
    device: str = DeviceOption,
    platform: str = PlatformOption,
    json_output: bool = JsonOption,
) -> None:
    """Tap screen coordinates."""
    client = DaemonClient(timeout=FLOW_TIMEOUT)
    resp = client.request(
        "POST",
        "/input/tap",
        json_body={"device_id": device, "platform": platform, "x": x, "y": y},
    )
    client.close()
    handle_response(resp, json_output=json_output)


@app.command("swipe")
def input_swipe(
    x1: int = typer.Argument(..., help="Start X"),
    y1: int = typer.Argument(..., help="Start Y"),
    x2: int = typer.Argument(..., help="End X"),
    y2: int = typer.Argument(..., help="End Y"),
    device: str = DeviceOption,
    platform: str = PlatformOption,
    duration_ms: int = typer.Option(300, "--duration-ms", help="Swipe duration in ms"),
    json_output: bool = JsonOption,
) -> None:
    """Swipe from (x1, y1) to (x2, y2)."""
    client = DaemonClient(timeout=FLOW_TIMEOUT)
    resp = client.request(
        "POST",
        "/input/swipe",
        json_body={
            "device_id": device,
            "platform": platform,
            "x1": x1,
            "y1": y1,
            "x2": x2,
            "y2": y2,
            "duration_ms": duration_ms,
        },
    )
    client.close()
    handle_response(resp, json_output=json_output)


@app.command("text")
def input_text(
    text: str = typer.Argument(..., help="Text to type into the focused field"),
    device: str = DeviceOption,
    platform: str = PlatformOption,
    json_output: bool = JsonOption,
) -> None:
    """Type text into the focused field."""
    client = DaemonClient(timeout=FLOW_TIMEOUT)
    resp = client.request(
        "POST",
        "/input/text",
        json_body={"device_id": device, "platform": platform, "text": text},
    )
    client.close()
    handle_response(resp, json_output=json_output)


@app.command("flow")
def input_flow(
    flow_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Maestro flow YAML"),
    device: str = DeviceOption,
    json_output: bool = JsonOption,
) -> None:
    """Run a maestro flow file against a device."""
    client = DaemonClient(timeout=FLOW_TIMEOUT)
    resp = client.request(
        "POST",
        "/flows/run",
        json_body={"device_id": device, "flow_yaml": flow_file.read_text(encoding="utf-8")},
    )
    client.close()
    if json_output:
        handle_response(resp, json_output=True)
        return
    data = check_response(resp)
    typer.echo(data.get("output") or "✓ Flow finished")
