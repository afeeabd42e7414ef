"""Wait engine - Fixed-interval polling for elements to appear."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import structlog

from open_mobile_agent.errors import timeout_error
from open_mobile_agent.ui.nodes import Platform, Strategy
from open_mobile_agent.ui.query import ElementQuery, ElementWithCoordinates

logger = structlog.get_logger()

DEFAULT_WAIT_TIMEOUT_MS = 10000
DEFAULT_POLL_INTERVAL = 1.0


@dataclass
class WaitResult:
    """Result of a successful wait."""

    message: str
    elapsed_ms: float
    polls: int
    elements: list[ElementWithCoordinates]

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON response."""
        return {
            "status": "done",
            "message": self.message,
            "elapsed_ms": round(self.elapsed_ms, 2),
            "polls": self.polls,
            "elements": self.elements,
        }


class WaitEngine:
    """Poll the hierarchy until an element matches or the timeout passes.

    Polling runs at a fixed interval with no backoff, so the worst-case
    detection latency is one interval. Acquisition and parse failures are not
    retried; they propagate on the poll that hit them.
    """

    def __init__(
        self,
        query: ElementQuery,
        default_timeout_ms: int = DEFAULT_WAIT_TIMEOUT_MS,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.query = query
        self.default_timeout_ms = default_timeout_ms
        self.poll_interval = poll_interval
        self._clock = clock
        self._sleep = sleep

    async def wait_for_element(
        self,
        device_id: str,
        platform: Platform | str,
        selector: str,
        strategy: Strategy | str,
        timeout_ms: int | None = None,
    ) -> WaitResult:
        """Wait for at least one element to match.

        Raises:
            AgentError: ERR_TIMEOUT when nothing matched before the deadline.
        """
        strategy = Strategy.parse(strategy)
        if timeout_ms is None:
            timeout_ms = self.default_timeout_ms
        start = self._clock()
        deadline = start + timeout_ms / 1000
        polls = 0

        while True:
            polls += 1
            elements = await self.query.find(device_id, platform, selector, strategy)
            now = self._clock()
            if elements:
                elapsed = (now - start) * 1000
                logger.info(
                    "wait_matched",
                    selector=selector,
                    strategy=strategy.value,
                    polls=polls,
                    elapsed_ms=round(elapsed, 2),
                )
                return WaitResult(
                    message=f'Found {len(elements)} element(s) matching "{selector}"',
                    elapsed_ms=elapsed,
                    polls=polls,
                    elements=elements,
                )

            remaining = deadline - now
            if remaining <= 0:
                break
            logger.debug("wait_poll", selector=selector, polls=polls)
            await self._sleep(min(self.poll_interval, remaining))
            if self._clock() >= deadline:
                break

        elapsed = (self._clock() - start) * 1000
        logger.info("wait_timeout", selector=selector, strategy=strategy.value, polls=polls)
        raise timeout_error(
            selector,
            strategy.value,
            timeout_ms,
            last_context={"polls": polls, "elapsed_ms": round(elapsed, 2)},
        )
