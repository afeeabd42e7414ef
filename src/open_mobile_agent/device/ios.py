"""iOS driver - maestro for hierarchy and input, simctl for screenshots."""

from __future__ import annotations

import io
import json
import os
from typing import TYPE_CHECKING

from open_mobile_agent.device.maestro import (
    MaestroRunner,
    input_text_flow,
    swipe_flow,
    tap_flow,
)
from open_mobile_agent.device.models import DeviceInfo
from open_mobile_agent.device.runner import run_command
from open_mobile_agent.errors import (
    AgentError,
    command_failed_error,
    hierarchy_acquisition_error,
)

if TYPE_CHECKING:
    from PIL import Image

XCRUN_BIN = os.environ.get("OPEN_MOBILE_AGENT_XCRUN", "xcrun")


def parse_simctl_devices(raw: str) -> list[DeviceInfo]:
    """Extract booted simulators from `simctl list devices -j` output."""
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise command_failed_error("simctl list devices", f"invalid JSON: {exc}") from exc

    devices: list[DeviceInfo] = []
    runtimes = payload.get("devices") if isinstance(payload, dict) else None
    if not isinstance(runtimes, dict):
        return devices
    for runtime_devices in runtimes.values():
        if not isinstance(runtime_devices, list):
            continue
        for entry in runtime_devices:
            if not isinstance(entry, dict):
                continue
            if entry.get("state") == "Booted" and entry.get("udid") and entry.get("name"):
                devices.append(DeviceInfo(id=entry["udid"], name=entry["name"], type="ios"))
    return devices


class IosDriver:
    """Drives iOS simulators through maestro and xcrun."""

    def __init__(self, maestro: MaestroRunner | None = None, xcrun: str = XCRUN_BIN) -> None:
        self.maestro = maestro or MaestroRunner()
        self.xcrun = xcrun

    async def list_devices(self) -> list[DeviceInfo]:
        result = await run_command([self.xcrun, "simctl", "list", "devices", "booted", "-j"])
        return parse_simctl_devices(result.stdout)

    async def dump_hierarchy(self, device_id: str) -> str:
        """Return maestro's JSON hierarchy output."""
        try:
            return await self.maestro.hierarchy(device_id)
        except AgentError as exc:
            raise hierarchy_acquisition_error(device_id, "ios", exc.message) from exc

    async def tap(self, device_id: str, x: int, y: int) -> None:
        await self.maestro.run_flow(device_id, tap_flow(x, y))

    async def swipe(
        self, device_id: str, x1: int, y1: int, x2: int, y2: int, duration_ms: int = 300
    ) -> None:
        await self.maestro.run_flow(device_id, swipe_flow(x1, y1, x2, y2, duration_ms))

    async def type_text(self, device_id: str, text: str) -> None:
        await self.maestro.run_flow(device_id, input_text_flow(text))

    async def screenshot(self, device_id: str) -> Image.Image:
        from PIL import Image, UnidentifiedImageError

        result = await run_command(
            [self.xcrun, "simctl", "io", device_id, "screenshot", "--type=png", "-"]
        )
        try:
            image = Image.open(io.BytesIO(result.raw_stdout))
            image.load()
        except (UnidentifiedImageError, OSError) as exc:
            raise command_failed_error("simctl io screenshot", str(exc)) from exc
        return image
