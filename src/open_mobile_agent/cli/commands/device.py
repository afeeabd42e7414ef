"""Device discovery CLI commands."""

from __future__ import annotations

import typer

from open_mobile_agent.cli.daemon_client import DaemonClient
from open_mobile_agent.cli.utils import handle_response

app = typer.Typer(help="Device discovery commands")


@app.command("list")
def device_list(json_output: bool = typer.Option(False, "--json", help="Output JSON")) -> None:
    """List Android devices and booted iOS simulators."""
    client = DaemonClient()
    resp = client.request("GET", "/devices")
    client.close()

    if json_output:
        handle_response(resp, json_output=True)
        return

    devices = resp.json().get("devices", [])
    if not devices:
        typer.echo("No devices found")
        return
    for device in devices:
        typer.echo(f"{device['id']}  {device['type']:<8} {device['name']}")
