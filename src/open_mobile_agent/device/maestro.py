"""Maestro flow runner shared by the iOS driver and Android's unicode input."""

from __future__ import annotations

import contextlib
import json
import os
import tempfile
from pathlib import Path

import structlog

from open_mobile_agent.device.runner import run_command

logger = structlog.get_logger()

MAESTRO_BIN = os.environ.get("OPEN_MOBILE_AGENT_MAESTRO", "maestro")
FLOW_TIMEOUT = float(os.environ.get("OPEN_MOBILE_AGENT_FLOW_TIMEOUT", "30"))
HIERARCHY_TIMEOUT = 60.0

# An empty appId lets a flow run against whatever app is in the foreground.
FLOW_HEADER = 'appId: ""\n---\n'


def tap_flow(x: int, y: int) -> str:
    return f"- tapOn:\n    point: {x},{y}\n"


def swipe_flow(x1: int, y1: int, x2: int, y2: int, duration_ms: int | None = None) -> str:
    flow = f"- swipe:\n    start: {x1},{y1}\n    end: {x2},{y2}\n"
    if duration_ms is not None:
        flow += f"    duration: {duration_ms}\n"
    return flow


def input_text_flow(text: str) -> str:
    # JSON string literals are valid double-quoted YAML scalars.
    return f"- inputText: {json.dumps(text, ensure_ascii=False)}\n"


def with_flow_header(flow_yaml: str) -> str:
    """Prefix the config section maestro requires, unless one is present."""
    stripped = flow_yaml.lstrip()
    if stripped.startswith("appId:"):
        return flow_yaml
    if stripped.startswith("---"):
        stripped = stripped[3:].lstrip("\n")
    return FLOW_HEADER + stripped


class MaestroRunner:
    """Runs maestro commands against one device at a time."""

    def __init__(self, binary: str = MAESTRO_BIN, flow_timeout: float = FLOW_TIMEOUT) -> None:
        self.binary = binary
        self.flow_timeout = flow_timeout

    async def hierarchy(self, device_id: str) -> str:
        result = await run_command(
            [self.binary, "--device", device_id, "hierarchy"],
            timeout=HIERARCHY_TIMEOUT,
        )
        return result.stdout

    async def run_flow(self, device_id: str, flow_yaml: str) -> str:
        """Run a flow from a temporary file and return maestro's output.

        Raises:
            AgentError: ERR_COMMAND_FAILED on a failing flow, ERR_COMMAND_TIMEOUT
                once the flow timeout passes.
        """
        content = with_flow_header(flow_yaml)
        fd, name = tempfile.mkstemp(prefix="maestro_flow_", suffix=".yaml")
        path = Path(name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(content)
            logger.debug("maestro_flow_started", device_id=device_id, path=str(path))
            result = await run_command(
                [self.binary, "--device", device_id, "test", str(path)],
                timeout=self.flow_timeout,
            )
            logger.info("maestro_flow_finished", device_id=device_id)
            return result.stdout
        finally:
            with contextlib.suppress(FileNotFoundError):
                path.unlink()
