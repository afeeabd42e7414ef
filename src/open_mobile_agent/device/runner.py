"""Async subprocess helper for platform tools."""

from __future__ import annotations

import asyncio
import contextlib
import shlex
import shutil
from dataclasses import dataclass

import structlog

from open_mobile_agent.errors import (
    command_failed_error,
    command_timeout_error,
    tool_not_found_error,
)

logger = structlog.get_logger()


@dataclass
class CommandResult:
    """Captured output of a finished command."""

    returncode: int
    stdout: str
    stderr: str
    raw_stdout: bytes = b""


async def run_command(
    args: list[str],
    *,
    timeout: float | None = None,
    check: bool = True,
) -> CommandResult:
    """Run a command without a shell and capture its output.

    Raises:
        AgentError: ERR_TOOL_NOT_FOUND, ERR_COMMAND_TIMEOUT, or
            ERR_COMMAND_FAILED when ``check`` is set and the exit code is non-zero.
    """
    tool = args[0]
    if shutil.which(tool) is None:
        raise tool_not_found_error(tool)

    command = shlex.join(args)
    try:
        proc = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as exc:
        raise tool_not_found_error(tool) from exc

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except TimeoutError:
        logger.warning("command_timeout", command=command, timeout=timeout)
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
        await proc.wait()
        raise command_timeout_error(command, timeout or 0) from None

    result = CommandResult(
        returncode=proc.returncode if proc.returncode is not None else -1,
        stdout=stdout.decode(errors="replace"),
        stderr=stderr.decode(errors="replace"),
        raw_stdout=stdout,
    )
    logger.debug("command_finished", command=command, returncode=result.returncode)

    if check and result.returncode != 0:
        reason = (result.stderr or result.stdout or f"exit code {result.returncode}").strip()
        raise command_failed_error(command, reason)
    return result
