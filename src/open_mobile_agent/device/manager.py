"""Device manager - discovery and platform dispatch for device primitives."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from open_mobile_agent.device.android import AndroidDriver, is_ascii
from open_mobile_agent.device.ios import IosDriver
from open_mobile_agent.device.maestro import MaestroRunner, input_text_flow
from open_mobile_agent.device.models import DeviceInfo
from open_mobile_agent.ui.nodes import Platform, Viewport

if TYPE_CHECKING:
    from PIL import Image

logger = structlog.get_logger()


class DeviceManager:
    """Routes hierarchy dumps, input and screenshots to the right driver.

    Satisfies both the hierarchy source used by the fetcher and the device
    control used by element actions.
    """

    def __init__(
        self,
        android: AndroidDriver | None = None,
        ios: IosDriver | None = None,
        maestro: MaestroRunner | None = None,
    ) -> None:
        self.maestro = maestro or MaestroRunner()
        self.android = android or AndroidDriver()
        self.ios = ios or IosDriver(self.maestro)

    async def list_devices(self) -> list[DeviceInfo]:
        """List Android devices then booted iOS simulators.

        A platform whose tooling is missing or failing contributes no devices.
        """
        devices: list[DeviceInfo] = []
        for platform, driver in ((Platform.ANDROID, self.android), (Platform.IOS, self.ios)):
            try:
                devices.extend(await driver.list_devices())
            except Exception as exc:
                logger.info("device_discovery_failed", platform=platform.value, error=str(exc))
        logger.debug("devices_listed", count=len(devices))
        return devices

    def driver(self, platform: Platform | str) -> AndroidDriver | IosDriver:
        platform = Platform.parse(platform)
        return self.android if platform == Platform.ANDROID else self.ios

    async def dump_hierarchy(self, device_id: str, platform: Platform) -> str:
        return await self.driver(platform).dump_hierarchy(device_id)

    async def tap(self, device_id: str, platform: Platform | str, x: int, y: int) -> None:
        await self.driver(platform).tap(device_id, x, y)
        logger.debug("device_tap", device_id=device_id, x=x, y=y)

    async def swipe(
        self,
        device_id: str,
        platform: Platform | str,
        x1: int,
        y1: int,
        x2: int,
        y2: int,
        duration_ms: int = 300,
    ) -> None:
        await self.driver(platform).swipe(device_id, x1, y1, x2, y2, duration_ms)
        logger.debug("device_swipe", device_id=device_id, x1=x1, y1=y1, x2=x2, y2=y2)

    async def type_text(self, device_id: str, platform: Platform | str, text: str) -> None:
        """Type into the focused field.

        Android's 'input text' only handles ASCII; other text goes through maestro.
        """
        platform = Platform.parse(platform)
        if platform == Platform.ANDROID and is_ascii(text):
            await self.android.type_text(device_id, text)
            return
        if platform == Platform.ANDROID:
            logger.info("unicode_input_via_maestro", device_id=device_id)
            await self.maestro.run_flow(device_id, input_text_flow(text))
            return
        await self.ios.type_text(device_id, text)

    async def screenshot(self, device_id: str, platform: Platform | str) -> Image.Image:
        return await self.driver(platform).screenshot(device_id)

    async def viewport(self, device_id: str, platform: Platform | str) -> Viewport:
        """Screen size in raw pixels, read from a fresh screenshot."""
        image = await self.screenshot(device_id, platform)
        width, height = image.size
        return Viewport(original_width=width, original_height=height)

    async def run_flow(self, device_id: str, flow_yaml: str) -> str:
        return await self.maestro.run_flow(device_id, flow_yaml)
