"""Element actions - tap, scroll-to and crop by selector."""

from __future__ import annotations

import asyncio
import base64
import io
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

import structlog

from open_mobile_agent.errors import no_bounds_error, not_found_error, scroll_exhausted_error
from open_mobile_agent.ui.bounds import parse_bounds, round_half_up
from open_mobile_agent.ui.nodes import Platform, ScrollDirection, Strategy, Viewport
from open_mobile_agent.ui.query import ElementQuery, ElementWithCoordinates

if TYPE_CHECKING:
    from PIL import Image

logger = structlog.get_logger()

DEFAULT_MAX_SCROLLS = 5
DEFAULT_SCROLL_DURATION_MS = 300

# iOS hierarchy coordinates are points; simulator screenshots are 3x pixels.
IOS_SCALE_FACTOR = 3
IOS_SETTLE_MS = 1500
ANDROID_SETTLE_EXTRA_MS = 200


class DeviceControl(Protocol):
    """Device primitives the element actions drive."""

    async def tap(self, device_id: str, platform: Platform, x: int, y: int) -> None: ...

    async def swipe(
        self,
        device_id: str,
        platform: Platform,
        x1: int,
        y1: int,
        x2: int,
        y2: int,
        duration_ms: int = DEFAULT_SCROLL_DURATION_MS,
    ) -> None: ...

    async def viewport(self, device_id: str, platform: Platform) -> Viewport: ...

    async def screenshot(self, device_id: str, platform: Platform) -> Image.Image: ...


@dataclass(frozen=True)
class SwipeVector:
    """Start and end points of a swipe gesture."""

    x1: int
    y1: int
    x2: int
    y2: int

    def to_dict(self) -> dict[str, int]:
        return {"x1": self.x1, "y1": self.y1, "x2": self.x2, "y2": self.y2}


@dataclass
class TapResult:
    """Result of a tap-by-selector."""

    element: ElementWithCoordinates
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"success": True, "element": self.element, "message": self.message}


@dataclass
class ScrollResult:
    """Result of a scroll-to-element search."""

    element: ElementWithCoordinates
    scroll_count: int

    def to_dict(self) -> dict[str, Any]:
        return {"success": True, "element": self.element, "scrollCount": self.scroll_count}


def scale_factor(platform: Platform) -> int:
    """Pixels per hierarchy unit for a platform."""
    return IOS_SCALE_FACTOR if platform == Platform.IOS else 1


def settle_delay_ms(platform: Platform, scroll_duration_ms: int) -> int:
    """Time to let a swipe finish before re-querying.

    Maestro-driven swipes carry their own command overhead, so iOS waits longer.
    """
    if platform == Platform.IOS:
        return IOS_SETTLE_MS
    return scroll_duration_ms + ANDROID_SETTLE_EXTRA_MS


def compute_swipe_vector(
    viewport: Viewport,
    direction: ScrollDirection,
    platform: Platform,
) -> SwipeVector:
    """Calculate a swipe that scrolls content toward ``direction``.

    The finger moves opposite to the scroll: scrolling down swipes from below
    the center to above it. The swipe spans a third of the screen along the
    scroll axis, centered on the screen.
    """
    factor = scale_factor(platform)
    width = round_half_up(viewport.original_width / factor)
    height = round_half_up(viewport.original_height / factor)
    cx = round_half_up(width / 2)
    cy = round_half_up(height / 2)

    vertical = direction in (ScrollDirection.UP, ScrollDirection.DOWN)
    extent = height if vertical else width
    offset = round_half_up(extent / 3) // 2

    if direction == ScrollDirection.DOWN:
        return SwipeVector(cx, cy + offset, cx, cy - offset)
    if direction == ScrollDirection.UP:
        return SwipeVector(cx, cy - offset, cx, cy + offset)
    if direction == ScrollDirection.RIGHT:
        return SwipeVector(cx + offset, cy, cx - offset, cy)
    return SwipeVector(cx - offset, cy, cx + offset, cy)


class ElementActions:
    """Selector-driven actions built on the element query engine."""

    def __init__(
        self,
        query: ElementQuery,
        device: DeviceControl,
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.query = query
        self.device = device
        self._sleep = sleep

    async def tap_on_element(
        self,
        device_id: str,
        platform: Platform | str,
        selector: str,
        strategy: Strategy | str,
    ) -> TapResult:
        """Find an element and tap the center of the first match."""
        platform = Platform.parse(platform)
        strategy = Strategy.parse(strategy)
        element = await self._first_match(device_id, platform, selector, strategy)

        x, y = element.get("centerX"), element.get("centerY")
        if x is None or y is None:
            raise no_bounds_error(selector, element.get("bounds"))

        await self.device.tap(device_id, platform, x, y)
        logger.info("element_tapped", device_id=device_id, selector=selector, x=x, y=y)
        label = element.get("text") or selector
        return TapResult(element=element, message=f'Tapped on "{label}" at ({x}, {y})')

    async def scroll_to_element(
        self,
        device_id: str,
        platform: Platform | str,
        selector: str,
        strategy: Strategy | str,
        direction: ScrollDirection | str = ScrollDirection.DOWN,
        max_scrolls: int = DEFAULT_MAX_SCROLLS,
        scroll_duration_ms: int = DEFAULT_SCROLL_DURATION_MS,
    ) -> ScrollResult:
        """Swipe until the element shows up or ``max_scrolls`` is exhausted."""
        platform = Platform.parse(platform)
        strategy = Strategy.parse(strategy)
        direction = ScrollDirection.parse(direction)

        elements = await self.query.find(device_id, platform, selector, strategy)
        if elements:
            return ScrollResult(element=elements[0], scroll_count=0)

        viewport = await self.device.viewport(device_id, platform)
        vector = compute_swipe_vector(viewport, direction, platform)
        delay = settle_delay_ms(platform, scroll_duration_ms) / 1000
        start = time.time()

        for attempt in range(1, max_scrolls + 1):
            await self.device.swipe(
                device_id,
                platform,
                vector.x1,
                vector.y1,
                vector.x2,
                vector.y2,
                duration_ms=scroll_duration_ms,
            )
            logger.debug("scroll_swipe", attempt=attempt, **vector.to_dict())
            await self._sleep(delay)

            elements = await self.query.find(device_id, platform, selector, strategy)
            if elements:
                logger.info(
                    "scroll_matched",
                    selector=selector,
                    scroll_count=attempt,
                    elapsed_ms=round((time.time() - start) * 1000, 2),
                )
                return ScrollResult(element=elements[0], scroll_count=attempt)

        raise scroll_exhausted_error(selector, strategy.value, max_scrolls, direction.value)

    async def get_element_image(
        self,
        device_id: str,
        platform: Platform | str,
        selector: str,
        strategy: Strategy | str,
    ) -> str:
        """Return a base64 PNG crop of the first matching element."""
        platform = Platform.parse(platform)
        strategy = Strategy.parse(strategy)
        element = await self._first_match(device_id, platform, selector, strategy)

        bounds = parse_bounds(element.get("bounds"))
        if bounds is None:
            raise no_bounds_error(selector, element.get("bounds"))

        image = await self.device.screenshot(device_id, platform)
        factor = scale_factor(platform)
        left = max(0, bounds.left * factor)
        top = max(0, bounds.top * factor)
        width = min(bounds.width * factor, image.width - left)
        height = min(bounds.height * factor, image.height - top)
        if width <= 0 or height <= 0:
            raise no_bounds_error(selector, element.get("bounds"))

        cropped = image.crop((left, top, left + width, top + height))
        buffer = io.BytesIO()
        cropped.save(buffer, format="PNG")
        return base64.b64encode(buffer.getvalue()).decode("ascii")

    async def _first_match(
        self,
        device_id: str,
        platform: Platform,
        selector: str,
        strategy: Strategy,
    ) -> ElementWithCoordinates:
        elements = await self.query.find(device_id, platform, selector, strategy)
        if not elements:
            raise not_found_error(selector, strategy.value)
        return elements[0]
