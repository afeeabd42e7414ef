"""Screen inspection CLI commands."""

from __future__ import annotations

import typer

from open_mobile_agent.cli.daemon_client import DaemonClient, format_json
from open_mobile_agent.cli.utils import (
    DeviceOption,
    JsonOption,
    PlatformOption,
    check_response,
    handle_response,
)

app = typer.Typer(help="Screen inspection commands")


@app.command("hierarchy")
def ui_hierarchy(
    device: str = DeviceOption,
    platform: str = PlatformOption,
) -> None:
    """Print the pruned semantic hierarchy as JSON."""
    client = DaemonClient(timeout=90.0)
    resp = client.request(
        "POST", "/ui/hierarchy", json_body={"device_id": device, "platform": platform}
    )
    client.close()
    data = check_response(resp)
    if data.get("hierarchy") is None:
        typer.echo("Hierarchy is empty after pruning")
        return
    typer.echo(format_json(data["hierarchy"]))


@app.command("viewport")
def ui_viewport(
    device: str = DeviceOption,
    platform: str = PlatformOption,
    json_output: bool = JsonOption,
) -> None:
    """Show the screen size in raw pixels."""
    client = DaemonClient()
    resp = client.request(
        "POST", "/ui/viewport", json_body={"device_id": device, "platform": platform}
    )
    client.close()
    if json_output:
        handle_response(resp, json_output=True)
        return
    data = check_response(resp)
    typer.echo(f"{data['originalWidth']}x{data['originalHeight']}")
