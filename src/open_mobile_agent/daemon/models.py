"""Pydantic request models for daemon endpoints."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

PlatformName = Literal["android", "ios"]
StrategyName = Literal["testId", "text", "contentDescription"]
DirectionName = Literal["up", "down", "left", "right"]


class DeviceRequest(BaseModel):
    device_id: str
    platform: PlatformName


class ElementRequest(DeviceRequest):
    selector: str = Field(min_length=1)
    strategy: StrategyName = "text"


class WaitRequest(ElementRequest):
    timeout_ms: int | None = Field(default=None, ge=0)


class ScrollRequest(ElementRequest):
    direction: DirectionName = "down"
    max_scrolls: int = Field(default=5, ge=0)
    scroll_duration_ms: int = Field(default=300, ge=0)


class TapRequest(DeviceRequest):
    x: int = Field(ge=0)
    y: int = Field(ge=0)


class SwipeRequest(DeviceRequest):
    x1: int = Field(ge=0)
    y1: int = Field(ge=0)
    x2: int = Field(ge=0)
    y2: int = Field(ge=0)
    duration_ms: int = Field(default=300, ge=0)


class TextRequest(DeviceRequest):
    text: str


class FlowRequest(BaseModel):
    device_id: str
    flow_yaml: str = Field(min_length=1)
