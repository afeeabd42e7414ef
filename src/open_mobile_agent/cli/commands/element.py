"""Selector-driven element commands: find, wait, scroll, tap and crop."""

from __future__ import annotations

import base64
from pathlib import Path

import typer

from open_mobile_agent.actions.executor import DEFAULT_MAX_SCROLLS, DEFAULT_SCROLL_DURATION_MS
from open_mobile_agent.actions.wait import DEFAULT_WAIT_TIMEOUT_MS
from open_mobile_agent.cli.daemon_client import DaemonClient, format_json
from open_mobile_agent.cli.utils import (
    REQUEST_SLACK,
    DeviceOption,
    JsonOption,
    PlatformOption,
    check_response,
    handle_response,
    selector_payload,
)

app = typer.Typer(help="Find and act on elements by selector")

SelectorArgument = typer.Argument(
    ..., help='Selector: text:"...", id:..., desc:"..." or a raw value with --strategy'
)
StrategyOption = typer.Option(
    None, "--strategy", "-s", help="testId|text|contentDescription (raw selector values)"
)


@app.command("find")
def element_find(
    selector: str = SelectorArgument,
    device: str = DeviceOption,
    platform: str = PlatformOption,
    strategy: str | None = StrategyOption,
    json_output: bool = JsonOption,
) -> None:
    """List every element matching a selector."""
    payload = selector_payload(selector, strategy)
    client = DaemonClient(timeout=90.0)
    resp = client.request(
        "POST", "/ui/find", json_body={"device_id": device, "platform": platform, **payload}
    )
    client.close()
    if json_output:
        handle_response(resp, json_output=True)
        return

    data = check_response(resp)
    elements = data.get("elements", [])
    if not elements:
        typer.echo(f"No elements match {selector}")
        return
    for element in elements:
        label = element.get("text") or element.get("contentDesc") or element.get("resourceId")
        typer.echo(
            f"{element['type']}  {label or '-'}  "
            f"center=({element.get('centerX')}, {element.get('centerY')})"
        )


@app.command("wait")
def element_wait(
    selector: str = SelectorArgument,
    device: str = DeviceOption,
    platform: str = PlatformOption,
    strategy: str | None = StrategyOption,
    timeout_ms: int = typer.Option(
        DEFAULT_WAIT_TIMEOUT_MS, "--timeout-ms", help="Give up after this many ms"
    ),
    json_output: bool = JsonOption,
) -> None:
    """Wait until an element matching the selector appears."""
    payload = selector_payload(selector, strategy)
    client = DaemonClient()
    resp = client.request(
        "POST",
        "/ui/wait",
        json_body={
            "device_id": device,
            "platform": platform,
            "timeout_ms": timeout_ms,
            **payload,
        },
        timeout=timeout_ms / 1000 + REQUEST_SLACK,
    )
    client.close()
    handle_response(resp, json_output=json_output)


@app.command("scroll")
def element_scroll(
    selector: str = SelectorArgument,
    device: str = DeviceOption,
    platform: str = PlatformOption,
    strategy: str | None = StrategyOption,
    direction: str = typer.Option("down", "--direction", help="up|down|left|right"),
    max_scrolls: int = typer.Option(DEFAULT_MAX_SCROLLS, "--max-scrolls", help="Swipe limit"),
    scroll_duration_ms: int = typer.Option(
        DEFAULT_SCROLL_DURATION_MS, "--duration-ms", help="Swipe duration in ms"
    ),
    json_output: bool = JsonOption,
) -> None:
    """Swipe until an element matching the selector is on screen."""
    payload = selector_payload(selector, strategy)
    client = DaemonClient()
    resp = client.request(
        "POST",
        "/ui/scroll",
        json_body={
            "device_id": device,
            "platform": platform,
            "direction": direction,
            "max_scrolls": max_scrolls,
            "scroll_duration_ms": scroll_duration_ms,
            **payload,
        },
        timeout=(max_scrolls + 1) * 60.0,
    )
    client.close()
    if json_output:
        handle_response(resp, json_output=True)
        return
    data = check_response(resp)
    element = data["element"]
    typer.echo(
        f"✓ Found after {data['scrollCount']} scroll(s) "
        f"at ({element.get('centerX')}, {element.get('centerY')})"
    )


@app.command("tap")
def element_tap(
    selector: str = SelectorArgument,
    device: str = DeviceOption,
    platform: str = PlatformOption,
    strategy: str | None = StrategyOption,
    json_output: bool = JsonOption,
) -> None:
    """Tap the center of the first element matching the selector."""
    payload = selector_payload(selector, strategy)
    client = DaemonClient(timeout=120.0)
    resp = client.request(
        "POST", "/ui/tap", json_body={"device_id": device, "platform": platform, **payload}
    )
    client.close()
    handle_response(resp, json_output=json_output)


@app.command("image")
def element_image(
    selector: str = SelectorArgument,
    device: str = DeviceOption,
    platform: str = PlatformOption,
    strategy: str | None = StrategyOption,
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the PNG here"),
) -> None:
    """Crop the first matching element out of a screenshot."""
    payload = selector_payload(selector, strategy)
    client = DaemonClient(timeout=120.0)
    resp = client.request(
        "POST",
        "/ui/element_image",
        json_body={"device_id": device, "platform": platform, **payload},
    )
    client.close()
    data = check_response(resp)
    if output is None:
        typer.echo(format_json(data))
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(base64.b64decode(data["data"]))
    typer.echo(f"✓ Saved -> {output}")
