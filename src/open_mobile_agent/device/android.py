"""Android driver - adb-backed hierarchy dumps, input and screenshots."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING, TypeVar

import structlog

from open_mobile_agent.device.models import DeviceInfo
from open_mobile_agent.errors import (
    AgentError,
    command_failed_error,
    device_offline_error,
    hierarchy_acquisition_error,
)

if TYPE_CHECKING:
    from adbutils import AdbClient, AdbDevice
    from PIL import Image

logger = structlog.get_logger()

DUMP_PATH = "/sdcard/window_dump.xml"

T = TypeVar("T")


def is_ascii(text: str) -> bool:
    return all(ord(char) < 128 for char in text)


def escape_input_text(text: str) -> str:
    """Encode text for 'input text', which treats %s as a space."""
    return text.replace(" ", "%s")


class AndroidDriver:
    """Talks to Android devices through adbutils."""

    def __init__(self, client: AdbClient | None = None) -> None:
        self._client = client

    @property
    def client(self) -> AdbClient:
        if self._client is None:
            from adbutils import adb

            self._client = adb
        return self._client

    async def list_devices(self) -> list[DeviceInfo]:
        """List online adb devices with a friendly model name."""

        def _list() -> list[DeviceInfo]:
            devices: list[DeviceInfo] = []
            for device in self.client.device_list():
                model = (device.prop.model or "").strip()
                name = model.replace("_", " ") if model else f"Android ({device.serial})"
                devices.append(DeviceInfo(id=device.serial, name=name, type="android"))
            return devices

        return await asyncio.to_thread(_list)

    async def dump_hierarchy(self, serial: str) -> str:
        """Dump the window hierarchy to the device and read it back."""

        def _dump(device: AdbDevice) -> str:
            dumped = device.shell2(["uiautomator", "dump", DUMP_PATH])
            if dumped.returncode != 0:
                raise hierarchy_acquisition_error(serial, "android", dumped.output.strip())
            content = device.shell2(["cat", DUMP_PATH])
            if content.returncode != 0 or "<hierarchy" not in content.output:
                reason = content.output.strip()[:200] or "empty dump"
                raise hierarchy_acquisition_error(serial, "android", reason)
            return str(content.output)

        return await self._call(serial, "uiautomator dump", _dump)

    async def tap(self, serial: str, x: int, y: int) -> None:
        await self._call(serial, "input tap", lambda device: device.click(x, y))

    async def swipe(
        self, serial: str, x1: int, y1: int, x2: int, y2: int, duration_ms: int = 300
    ) -> None:
        await self._call(
            serial,
            "input swipe",
            lambda device: device.swipe(x1, y1, x2, y2, duration_ms / 1000),
        )

    async def type_text(self, serial: str, text: str) -> None:
        """Type ASCII text through 'input text'."""
        escaped = escape_input_text(text)
        await self._call(
            serial, "input text", lambda device: device.shell(["input", "text", escaped])
        )

    async def screenshot(self, serial: str) -> Image.Image:
        image = await self._call(serial, "screencap", lambda device: device.screenshot())
        if image is None:
            raise command_failed_error("screencap", "device returned no image")
        return image

    async def _call(self, serial: str, operation: str, fn: Callable[[AdbDevice], T]) -> T:
        from adbutils import AdbError

        def _run() -> T:
            return fn(self.client.device(serial))

        try:
            return await asyncio.to_thread(_run)
        except AgentError:
            raise
        except AdbError as exc:
            logger.warning("adb_call_failed", serial=serial, operation=operation, error=str(exc))
            if "not found" in str(exc).lower() or "offline" in str(exc).lower():
                raise device_offline_error(serial) from exc
            raise command_failed_error(operation, str(exc)) from exc
