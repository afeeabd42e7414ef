"""Tests for maestro flow generation and the flow runner."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from open_mobile_agent.device import maestro
from open_mobile_agent.device.maestro import (
    MaestroRunner,
    input_text_flow,
    swipe_flow,
    tap_flow,
    with_flow_header,
)
from open_mobile_agent.device.runner import CommandResult
from open_mobile_agent.errors import command_failed_error


class TestFlowYaml:
    """Tests for flow snippets."""

    def test_tap(self) -> None:
        assert tap_flow(60, 70) == "- tapOn:\n    point: 60,70\n"

    def test_swipe(self) -> None:
        assert swipe_flow(1, 2, 3, 4, 300) == (
            "- swipe:\n    start: 1,2\n    end: 3,4\n    duration: 300\n"
        )

    def test_input_text_quotes_unicode_and_quotes(self) -> None:
        assert input_text_flow('Привет "you"') == '- inputText: "Привет \\"you\\""\n'

    def test_header_added(self) -> None:
        assert with_flow_header("- back\n") == 'appId: ""\n---\n- back\n'

    def test_leading_separator_is_replaced(self) -> None:
        assert with_flow_header("\n---\n- back\n") == 'appId: ""\n---\n- back\n'

    def test_existing_config_kept(self) -> None:
        flow = "appId: com.example\n---\n- launchApp\n"
        assert with_flow_header(flow) == flow


class TestMaestroRunner:
    """Tests for MaestroRunner."""

    @pytest.mark.asyncio
    async def test_run_flow_writes_and_removes_file(self) -> None:
        """Should run the flow from a temp file that is gone afterwards."""
        seen: dict[str, object] = {}

        async def fake_run(args: list[str], **kwargs: object) -> CommandResult:
            path = Path(args[-1])
            seen["args"] = args
            seen["content"] = path.read_text(encoding="utf-8")
            seen["timeout"] = kwargs.get("timeout")
            return CommandResult(returncode=0, stdout="Flow passed", stderr="")

        with patch.object(maestro, "run_command", side_effect=fake_run):
            output = await MaestroRunner("maestro", 30.0).run_flow("sim-1", tap_flow(5, 6))

        args = seen["args"]
        assert isinstance(args, list)
        assert args[:4] == ["maestro", "--device", "sim-1", "test"]
        assert seen["content"] == 'appId: ""\n---\n- tapOn:\n    point: 5,6\n'
        assert seen["timeout"] == 30.0
        assert output == "Flow passed"
        assert not Path(args[-1]).exists()

    @pytest.mark.asyncio
    async def test_failed_flow_still_cleans_up(self) -> None:
        paths: list[Path] = []

        async def failing_run(args: list[str], **_: object) -> CommandResult:
            paths.append(Path(args[-1]))
            raise command_failed_error("maestro test", "Assertion failed")

        with patch.object(maestro, "run_command", side_effect=failing_run):
            with pytest.raises(Exception, match="Command failed"):
                await MaestroRunner().run_flow("sim-1", "- back\n")

        assert paths and not paths[0].exists()

    @pytest.mark.asyncio
    async def test_hierarchy(self) -> None:
        run = AsyncMock(return_value=CommandResult(returncode=0, stdout="{}", stderr=""))
        with patch.object(maestro, "run_command", run):
            assert await MaestroRunner("maestro").hierarchy("sim-1") == "{}"
        assert run.call_args.args[0] == ["maestro", "--device", "sim-1", "hierarchy"]
