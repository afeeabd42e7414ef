"""Daemon core - wires the device layer to the hierarchy and action engines."""

import structlog

from open_mobile_agent.actions.executor import ElementActions
from open_mobile_agent.actions.wait import WaitEngine
from open_mobile_agent.device.manager import DeviceManager
from open_mobile_agent.ui.hierarchy import HierarchyFetcher
from open_mobile_agent.ui.query import ElementQuery

logger = structlog.get_logger()


class DaemonCore:
    """Central daemon coordinator owning all subsystems."""

    def __init__(self) -> None:
        self.device_manager = DeviceManager()
        self.fetcher = HierarchyFetcher(self.device_manager)
        self.query = ElementQuery(self.fetcher)
        self.wait_engine = WaitEngine(self.query)
        self.element_actions = ElementActions(self.query, self.device_manager)
        self._running = False

    async def start(self) -> None:
        logger.info("daemon_core_starting")
        self._running = True
        logger.info("daemon_core_started")

    async def stop(self) -> None:
        logger.info("daemon_core_stopping")
        self._running = False
        logger.info("daemon_core_stopped")

    @property
    def is_running(self) -> bool:
        """Check if daemon is running."""
        return self._running
