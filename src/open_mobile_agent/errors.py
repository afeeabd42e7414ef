"""Error model - Actionable errors with remediation hints."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

INSPECT_HINT = "Use 'ui hierarchy' to inspect the current screen and pick a selector that exists"


@dataclass
class AgentError(Exception):
    """
    Base error with context and remediation guidance.

    All errors should be actionable - tell the caller what went wrong
    and what they can do about it.
    """

    code: str
    message: str
    context: dict[str, Any] = field(default_factory=dict)
    remediation: str = ""

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
            "remediation": self.remediation,
        }


# Specific error constructors for common cases


def hierarchy_acquisition_error(device_id: str, platform: str, reason: str) -> AgentError:
    """Create error for a failed raw hierarchy dump."""
    return AgentError(
        code="ERR_HIERARCHY_ACQUISITION",
        message=f"Failed to get {platform} hierarchy from {device_id}: {reason}",
        context={"device_id": device_id, "platform": platform, "reason": reason},
        remediation="Check the device is booted and reachable with 'device list'",
    )


def hierarchy_parse_error(platform: str, reason: str, raw_prefix: str) -> AgentError:
    """Create error for malformed hierarchy output."""
    return AgentError(
        code="ERR_HIERARCHY_PARSE",
        message=f"Failed to parse {platform} hierarchy: {reason}",
        context={"platform": platform, "reason": reason, "raw": raw_prefix},
        remediation="Re-run the dump; if it keeps failing, check the platform tool version",
    )


def hierarchy_too_large_error(limit: str, value: int) -> AgentError:
    """Create error for a hierarchy exceeding depth or size ceilings."""
    return AgentError(
        code="ERR_HIERARCHY_TOO_LARGE",
        message=f"Hierarchy exceeds {limit} limit of {value}",
        context={"limit": limit, "value": value},
        remediation="The dump is malformed or cyclic; navigate to a simpler screen and retry",
    )


def not_found_error(selector: str, strategy: str) -> AgentError:
    """Create error for element not found."""
    return AgentError(
        code="ERR_NOT_FOUND",
        message=f'Element not found with {strategy}="{selector}"',
        context={"selector": selector, "strategy": strategy},
        remediation=INSPECT_HINT,
    )


def no_bounds_error(selector: str, bounds: str | None = None) -> AgentError:
    """Create error for a matched element without usable coordinates."""
    return AgentError(
        code="ERR_NO_BOUNDS",
        message=f'Element "{selector}" found but has no valid bounds',
        context={"selector": selector, "bounds": bounds},
        remediation="Pick a different match or a parent element that reports bounds",
    )


def timeout_error(
    selector: str, strategy: str, timeout_ms: float, last_context: dict[str, Any] | None = None
) -> AgentError:
    """Create error for a wait that never matched."""
    return AgentError(
        code="ERR_TIMEOUT",
        message=f'Timeout waiting for element "{selector}" after {int(timeout_ms)}ms',
        context={
            "selector": selector,
            "strategy": strategy,
            "timeout_ms": timeout_ms,
            "last_context": last_context,
        },
        remediation="Increase timeout or check the selector with 'ui hierarchy'",
    )


def scroll_exhausted_error(
    selector: str, strategy: str, max_scrolls: int, direction: str
) -> AgentError:
    """Create error for scroll search that ran out of attempts."""
    return AgentError(
        code="ERR_SCROLL_EXHAUSTED",
        message=(
            f'Element "{selector}" not found after {max_scrolls} scrolls {direction}. '
            "It may not exist or be in a different scroll direction."
        ),
        context={
            "selector": selector,
            "strategy": strategy,
            "max_scrolls": max_scrolls,
            "direction": direction,
        },
        remediation="Try the opposite direction or raise --max-scrolls",
    )


def invalid_strategy_error(strategy: str) -> AgentError:
    """Create error for unknown match strategy."""
    return AgentError(
        code="ERR_INVALID_STRATEGY",
        message=f"Invalid strategy: {strategy}",
        context={"strategy": strategy},
        remediation="Use one of: testId, text, contentDescription",
    )


def invalid_platform_error(platform: str) -> AgentError:
    """Create error for unknown platform tag."""
    return AgentError(
        code="ERR_INVALID_PLATFORM",
        message=f"Invalid platform: {platform}",
        context={"platform": platform},
        remediation="Use 'android' or 'ios'",
    )


def invalid_direction_error(direction: str) -> AgentError:
    """Create error for unknown scroll direction."""
    return AgentError(
        code="ERR_INVALID_DIRECTION",
        message=f"Invalid scroll direction: {direction}",
        context={"direction": direction},
        remediation="Use one of: up, down, left, right",
    )


def invalid_selector_error(selector: str) -> AgentError:
    """Create error for invalid selector syntax."""
    return AgentError(
        code="ERR_INVALID_SELECTOR",
        message=f"Invalid selector: {selector}",
        context={"selector": selector},
        remediation='Use text:"...", id:..., desc:"..." or pass --strategy explicitly',
    )


def tool_not_found_error(tool: str) -> AgentError:
    """Create error for a missing platform binary."""
    return AgentError(
        code="ERR_TOOL_NOT_FOUND",
        message=f"{tool} command not found",
        context={"tool": tool},
        remediation=f"Install {tool} and ensure it is in PATH.",
    )


def command_failed_error(command: str, reason: str) -> AgentError:
    """Create error for a platform command exiting non-zero."""
    return AgentError(
        code="ERR_COMMAND_FAILED",
        message=f"Command failed: {command}",
        context={"command": command, "reason": reason},
        remediation="Check the device connection and command arguments, then retry.",
    )


def command_timeout_error(command: str, timeout: float) -> AgentError:
    """Create error for a platform command that did not finish in time."""
    return AgentError(
        code="ERR_COMMAND_TIMEOUT",
        message=f"Command timed out after {timeout:g}s: {command}",
        context={"command": command, "timeout": timeout},
        remediation="The device may be busy; wait for it to settle and retry.",
    )


def device_offline_error(device_id: str) -> AgentError:
    """Create error for offline device."""
    return AgentError(
        code="ERR_DEVICE_OFFLINE",
        message=f"Device offline: {device_id}",
        context={"device_id": device_id},
        remediation="Check device connection with 'device list' and reconnect",
    )
