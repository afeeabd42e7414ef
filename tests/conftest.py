"""Pytest configuration and fixtures."""

from __future__ import annotations

import json
from collections.abc import Callable, Generator
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from PIL import Image

from open_mobile_agent.ui.nodes import Platform, Viewport


class FakeClock:
    """Monotonic clock advanced only by FakeClock.sleep."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class ScriptedSource:
    """Hierarchy source returning queued dumps; the last one repeats."""

    def __init__(self, *dumps: str | Exception) -> None:
        self.dumps = list(dumps)
        self.calls: list[tuple[str, Platform]] = []

    async def dump_hierarchy(self, device_id: str, platform: Platform) -> str:
        self.calls.append((device_id, platform))
        dump = self.dumps.pop(0) if len(self.dumps) > 1 else self.dumps[0]
        if isinstance(dump, Exception):
            raise dump
        return dump


class FakeDevice:
    """Records taps and swipes; serves a fixed screenshot."""

    def __init__(self, width: int = 1000, height: int = 1000) -> None:
        self.image = Image.new("RGB", (width, height), color=(255, 255, 255))
        self.taps: list[tuple[str, Platform, int, int]] = []
        self.swipes: list[tuple[int, int, int, int, int]] = []

    async def tap(self, device_id: str, platform: Platform, x: int, y: int) -> None:
        self.taps.append((device_id, platform, x, y))

    async def swipe(
        self,
        device_id: str,
        platform: Platform,
        x1: int,
        y1: int,
        x2: int,
        y2: int,
        duration_ms: int = 300,
    ) -> None:
        self.swipes.append((x1, y1, x2, y2, duration_ms))

    async def viewport(self, device_id: str, platform: Platform) -> Viewport:
        return Viewport(original_width=self.image.width, original_height=self.image.height)

    async def screenshot(self, device_id: str, platform: Platform) -> Image.Image:
        return self.image


def _android_dump(*nodes: str) -> str:
    """Wrap node XML in a single-window uiautomator dump."""
    body = "".join(nodes)
    return (
        "<?xml version='1.0' encoding='UTF-8' standalone='yes' ?>"
        '<hierarchy rotation="0">'
        f'<node class="android.widget.FrameLayout" bounds="[0,0][1000,1000]">{body}</node>'
        "</hierarchy>"
    )


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_device() -> FakeDevice:
    return FakeDevice()


@pytest.fixture
def scripted_source() -> type[ScriptedSource]:
    return ScriptedSource


@pytest.fixture
def android_dump() -> Callable[..., str]:
    return _android_dump


@pytest.fixture
def mock_adb() -> Generator[MagicMock, None, None]:
    """Mock adbutils for unit tests."""
    with patch("adbutils.adb") as mock:
        mock_device = MagicMock()
        mock_device.serial = "emulator-5554"
        mock_device.prop.model = "Pixel_7"
        mock.device_list.return_value = [mock_device]
        yield mock


@pytest.fixture
def sample_hierarchy_xml() -> bytes:
    """Sample UI hierarchy XML for testing."""
    return b"""<?xml version="1.0" encoding="UTF-8"?>
    <hierarchy rotation="0">
        <node class="android.widget.FrameLayout"
              package="com.example"
              clickable="false"
              bounds="[0,0][1080,2400]">
            <node class="android.widget.LinearLayout"
                  clickable="false"
                  bounds="[0,100][1080,2300]">
                <node class="android.widget.TextView"
                      resource-id="com.example:id/title"
                      text="Welcome"
                      clickable="false"
                      bounds="[100,150][980,200]" />
                <node class="android.widget.Button"
                      resource-id="com.example:id/login_button"
                      text="Sign In"
                      content-desc="Login button"
                      clickable="true"
                      enabled="true"
                      bounds="[200,400][880,500]" />
                <node class="android.widget.EditText"
                      resource-id="com.example:id/email_input"
                      text=""
                      content-desc="Email address"
                      clickable="true"
                      focusable="true"
                      bounds="[100,550][980,650]" />
                <node class="android.widget.CheckBox"
                      resource-id="com.example:id/remember_me"
                      text="Remember me"
                      clickable="true"
                      checked="false"
                      bounds="[100,700][400,750]" />
            </node>
        </node>
    </hierarchy>
    """


@pytest.fixture
def sample_ios_document() -> dict[str, Any]:
    """Maestro hierarchy JSON for a small iOS screen."""
    return {
        "attributes": {"bounds": "[0,0][390,844]"},
        "children": [
            {
                "attributes": {
                    "accessibilityText": "Welcome header",
                    "bounds": "[0,100][390,150]",
                },
            },
            {
                "attributes": {
                    "text": "Continue",
                    "resource-id": "continue_button",
                    "bounds": "[20,700][370,750]",
                },
                "clickable": True,
                "enabled": True,
            },
            {
                "attributes": {},
                "children": [
                    {"attributes": {"title": "Settings", "bounds": "[0,0][44,44]"}},
                ],
            },
        ],
    }


@pytest.fixture
def sample_ios_output(sample_ios_document: dict[str, Any]) -> str:
    """Maestro stdout: a status line, then the JSON document."""
    return "Running on iPhone 15\n" + json.dumps(sample_ios_document) + "\n"
