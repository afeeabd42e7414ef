"""Selector types and parser for CLI shorthand."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from open_mobile_agent.errors import invalid_selector_error
from open_mobile_agent.ui.nodes import Strategy


class Selector(ABC):
    """Base class for element selectors."""

    @property
    @abstractmethod
    def value(self) -> str:
        """The string handed to the matcher."""

    @property
    @abstractmethod
    def strategy(self) -> Strategy:
        """The match rule this selector uses."""

    def to_payload(self) -> dict[str, str]:
        """Convert to daemon request fields."""
        return {"selector": self.value, "strategy": self.strategy.value}


@dataclass
class TextSelector(Selector):
    """Selector for text: syntax."""

    text: str

    @property
    def value(self) -> str:
        return self.text

    @property
    def strategy(self) -> Strategy:
        return Strategy.TEXT


@dataclass
class TestIdSelector(Selector):
    """Selector for id: syntax (resource-id suffix)."""

    __test__ = False

    test_id: str

    @property
    def value(self) -> str:
        return self.test_id

    @property
    def strategy(self) -> Strategy:
        return Strategy.TEST_ID


@dataclass
class DescSelector(Selector):
    """Selector for desc: syntax."""

    desc: str

    @property
    def value(self) -> str:
        return self.desc

    @property
    def strategy(self) -> Strategy:
        return Strategy.CONTENT_DESCRIPTION


def _unquote(value: str) -> str:
    return value.strip('"').strip("'")


def parse_selector(target: str) -> Selector:
    """
    Parse selector shorthand.

    Supported formats:
    - text:"..." or text:'...' or text:value - TextSelector
    - id:resource_id - TestIdSelector
    - desc:"..." or desc:'...' or desc:value - DescSelector

    Args:
        target: The selector string to parse.

    Returns:
        Parsed Selector instance.

    Raises:
        AgentError: If selector format is invalid (ERR_INVALID_SELECTOR).
    """
    if not target:
        raise invalid_selector_error(target)

    if target.startswith("text:"):
        text = _unquote(target[5:])
        if text:
            return TextSelector(text=text)

    elif target.startswith("id:"):
        test_id = target[3:]
        if test_id:
            return TestIdSelector(test_id=test_id)

    elif target.startswith("desc:"):
        desc = _unquote(target[5:])
        if desc:
            return DescSelector(desc=desc)

    raise invalid_selector_error(target)


def resolve_selector(target: str, strategy: Strategy | str | None = None) -> Selector:
    """Build a selector from shorthand, or from a raw value plus explicit strategy."""
    if strategy is None:
        return parse_selector(target)
    if not target:
        raise invalid_selector_error(target)
    strategy = Strategy.parse(strategy)
    if strategy == Strategy.TEST_ID:
        return TestIdSelector(test_id=target)
    if strategy == Strategy.TEXT:
        return TextSelector(text=target)
    return DescSelector(desc=target)
