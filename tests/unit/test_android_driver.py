"""Tests for the adb-backed Android driver."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from adbutils import AdbError

from open_mobile_agent.device.android import AndroidDriver, escape_input_text, is_ascii
from open_mobile_agent.errors import AgentError


def _driver() -> tuple[AndroidDriver, MagicMock, MagicMock]:
    client = MagicMock()
    device = MagicMock()
    client.device.return_value = device
    return AndroidDriver(client), client, device


class TestListDevices:
    """Tests for list_devices."""

    @pytest.mark.asyncio
    async def test_uses_model_name(self) -> None:
        """Should show the model with underscores as spaces."""
        driver, client, _ = _driver()
        entry = MagicMock()
        entry.serial = "emulator-5554"
        entry.prop.model = "sdk_gphone64_arm64"
        client.device_list.return_value = [entry]

        devices = await driver.list_devices()

        assert [d.to_dict() for d in devices] == [
            {
                "id": "emulator-5554",
                "name": "sdk gphone64 arm64",
                "type": "android",
                "state": "booted",
            }
        ]

    @pytest.mark.asyncio
    async def test_falls_back_to_serial(self) -> None:
        driver, client, _ = _driver()
        entry = MagicMock()
        entry.serial = "R58M123"
        entry.prop.model = ""
        client.device_list.return_value = [entry]

        devices = await driver.list_devices()

        assert devices[0].name == "Android (R58M123)"

    @pytest.mark.asyncio
    async def test_default_client(self, mock_adb: MagicMock) -> None:
        """Should use the adbutils module client when none is given."""
        devices = await AndroidDriver().list_devices()
        assert devices[0].id == "emulator-5554"
        assert devices[0].name == "Pixel 7"


class TestDumpHierarchy:
    """Tests for dump_hierarchy."""

    @pytest.mark.asyncio
    async def test_dumps_then_reads_file(self) -> None:
        driver, client, device = _driver()
        device.shell2.side_effect = [
            SimpleNamespace(returncode=0, output="UI hierchary dumped to: /sdcard/window_dump.xml"),
            SimpleNamespace(returncode=0, output="<hierarchy><node /></hierarchy>"),
        ]

        xml = await driver.dump_hierarchy("emulator-5554")

        assert xml == "<hierarchy><node /></hierarchy>"
        client.device.assert_called_with("emulator-5554")
        assert device.shell2.call_args_list[0].args[0] == [
            "uiautomator",
            "dump",
            "/sdcard/window_dump.xml",
        ]

    @pytest.mark.asyncio
    async def test_failed_dump(self) -> None:
        driver, _, device = _driver()
        device.shell2.return_value = SimpleNamespace(
            returncode=137, output="ERROR: could not get idle state."
        )

        with pytest.raises(AgentError) as exc_info:
            await driver.dump_hierarchy("emulator-5554")

        assert exc_info.value.code == "ERR_HIERARCHY_ACQUISITION"
        assert "idle state" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_missing_xml(self) -> None:
        driver, _, device = _driver()
        device.shell2.side_effect = [
            SimpleNamespace(returncode=0, output="dumped"),
            SimpleNamespace(returncode=0, output=""),
        ]

        with pytest.raises(AgentError) as exc_info:
            await driver.dump_hierarchy("emulator-5554")

        assert exc_info.value.context["reason"] == "empty dump"


class TestInput:
    """Tests for tap, swipe and text input."""

    @pytest.mark.asyncio
    async def test_tap(self) -> None:
        driver, _, device = _driver()
        await driver.tap("emulator-5554", 60, 70)
        device.click.assert_called_once_with(60, 70)

    @pytest.mark.asyncio
    async def test_swipe_duration_in_seconds(self) -> None:
        driver, _, device = _driver()
        await driver.swipe("emulator-5554", 500, 666, 500, 334, duration_ms=300)
        device.swipe.assert_called_once_with(500, 666, 500, 334, 0.3)

    @pytest.mark.asyncio
    async def test_type_text_escapes_spaces(self) -> None:
        driver, _, device = _driver()
        await driver.type_text("emulator-5554", "hello world")
        device.shell.assert_called_once_with(["input", "text", "hello%sworld"])


class TestErrors:
    """Tests for adb error mapping."""

    @pytest.mark.asyncio
    async def test_unknown_device_is_offline(self) -> None:
        driver, client, _ = _driver()
        client.device.side_effect = AdbError("device 'nope' not found")

        with pytest.raises(AgentError) as exc_info:
            await driver.tap("nope", 1, 1)

        assert exc_info.value.code == "ERR_DEVICE_OFFLINE"

    @pytest.mark.asyncio
    async def test_other_adb_errors(self) -> None:
        driver, _, device = _driver()
        device.click.side_effect = AdbError("connection reset")

        with pytest.raises(AgentError) as exc_info:
            await driver.tap("emulator-5554", 1, 1)

        assert exc_info.value.code == "ERR_COMMAND_FAILED"
        assert exc_info.value.context["command"] == "input tap"


def test_is_ascii() -> None:
    assert is_ascii("Hello, world!")
    assert not is_ascii("Привет")


def test_escape_input_text() -> None:
    assert escape_input_text("a b  c") == "a%sb%s%sc"
