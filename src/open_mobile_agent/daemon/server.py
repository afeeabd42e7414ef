"""FastAPI server running over Unix Domain Socket."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from open_mobile_agent.daemon.core import DaemonCore
from open_mobile_agent.daemon.models import (
    DeviceRequest,
    ElementRequest,
    FlowRequest,
    ScrollRequest,
    SwipeRequest,
    TapRequest,
    TextRequest,
    WaitRequest,
)
from open_mobile_agent.errors import AgentError

logger = structlog.get_logger()

ResponsePayload = dict[str, Any]

NOT_FOUND_CODES = {"ERR_NOT_FOUND", "ERR_DEVICE_OFFLINE", "ERR_SCROLL_EXHAUSTED"}
TIMEOUT_CODES = {"ERR_TIMEOUT", "ERR_COMMAND_TIMEOUT"}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage daemon lifecycle."""
    logger.info("daemon_starting")
    app.state.core = DaemonCore()
    await app.state.core.start()
    yield
    logger.info("daemon_stopping")
    await app.state.core.stop()


app = FastAPI(
    title="Open Mobile Agent Daemon",
    version="0.1.0",
    lifespan=lifespan,
)


def _status_for(error: AgentError) -> int:
    if error.code in NOT_FOUND_CODES:
        return 404
    if error.code in TIMEOUT_CODES:
        return 408
    return 400


def _error_response(error: AgentError, status_code: int = 400) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "error": error.to_dict()},
    )


@app.exception_handler(AgentError)
async def agent_error_handler(request: Request, exc: AgentError) -> JSONResponse:
    logger.warning("request_failed", path=request.url.path, code=exc.code, message=exc.message)
    return _error_response(exc, status_code=_status_for(exc))


@app.get("/health")
async def health() -> ResponsePayload:
    """Health check endpoint."""
    core: DaemonCore = app.state.core
    return {"status": "ok", "running": core.is_running}


@app.get("/devices")
async def list_devices() -> ResponsePayload:
    """List Android devices and booted iOS simulators."""
    core: DaemonCore = app.state.core
    devices = await core.device_manager.list_devices()
    return {"devices": [device.to_dict() for device in devices]}


@app.post("/ui/hierarchy")
async def ui_hierarchy(req: DeviceRequest) -> ResponsePayload:
    """Return the pruned semantic hierarchy of the current screen."""
    core: DaemonCore = app.state.core
    tree = await core.fetcher.fetch(req.device_id, req.platform)
    return {"status": "done", "hierarchy": tree.to_dict() if tree is not None else None}


@app.post("/ui/viewport")
async def ui_viewport(req: DeviceRequest) -> ResponsePayload:
    core: DaemonCore = app.state.core
    viewport = await core.device_manager.viewport(req.device_id, req.platform)
    return {"status": "done", **viewport.to_dict()}


@app.post("/ui/find")
async def ui_find(req: ElementRequest) -> ResponsePayload:
    """Find all elements matching a selector."""
    core: DaemonCore = app.state.core
    elements = await core.query.find(req.device_id, req.platform, req.selector, req.strategy)
    return {"status": "done", "count": len(elements), "elements": elements}


@app.post("/ui/wait")
async def ui_wait(req: WaitRequest) -> ResponsePayload:
    """Block until an element matches or the timeout passes."""
    core: DaemonCore = app.state.core
    result = await core.wait_engine.wait_for_element(
        req.device_id, req.platform, req.selector, req.strategy, req.timeout_ms
    )
    return result.to_dict()


@app.post("/ui/scroll")
async def ui_scroll(req: ScrollRequest) -> ResponsePayload:
    """Scroll until an element appears."""
    core: DaemonCore = app.state.core
    result = await core.element_actions.scroll_to_element(
        req.device_id,
        req.platform,
        req.selector,
        req.strategy,
        direction=req.direction,
        max_scrolls=req.max_scrolls,
        scroll_duration_ms=req.scroll_duration_ms,
    )
    return result.to_dict()


@app.post("/ui/tap")
async def ui_tap(req: ElementRequest) -> ResponsePayload:
    """Tap the center of the first matching element."""
    core: DaemonCore = app.state.core
    result = await core.element_actions.tap_on_element(
        req.device_id, req.platform, req.selector, req.strategy
    )
    return result.to_dict()


@app.post("/ui/element_image")
async def ui_element_image(req: ElementRequest) -> ResponsePayload:
    core: DaemonCore = app.state.core
    image = await core.element_actions.get_element_image(
        req.device_id, req.platform, req.selector, req.strategy
    )
    return {"status": "done", "mime_type": "image/png", "data": image}


@app.post("/input/tap")
async def input_tap(req: TapRequest) -> ResponsePayload:
    """Tap raw screen coordinates."""
    core: DaemonCore = app.state.core
    await core.device_manager.tap(req.device_id, req.platform, req.x, req.y)
    return {"status": "done", "x": req.x, "y": req.y}


@app.post("/input/swipe")
async def input_swipe(req: SwipeRequest) -> ResponsePayload:
    core: DaemonCore = app.state.core
    await core.device_manager.swipe(
        req.device_id, req.platform, req.x1, req.y1, req.x2, req.y2, req.duration_ms
    )
    return {"status": "done"}


@app.post("/input/text")
async def input_text(req: TextRequest) -> ResponsePayload:
    """Type into the focused field."""
    core: DaemonCore = app.state.core
    await core.device_manager.type_text(req.device_id, req.platform, req.text)
    return {"status": "done", "length": len(req.text)}


@app.post("/flows/run")
async def run_flow(req: FlowRequest) -> ResponsePayload:
    """Run a maestro flow against a device."""
    core: DaemonCore = app.state.core
    output = await core.device_manager.run_flow(req.device_id, req.flow_yaml)
    return {"status": "done", "output": output}
