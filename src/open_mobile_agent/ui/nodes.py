"""Shared node model and enums for the semantic hierarchy."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from open_mobile_agent.errors import (
    invalid_direction_error,
    invalid_platform_error,
    invalid_strategy_error,
)


class Platform(Enum):
    """Device platform families."""

    ANDROID = "android"
    IOS = "ios"

    @classmethod
    def parse(cls, value: Platform | str) -> Platform:
        """Coerce a platform tag, raising ERR_INVALID_PLATFORM on unknown values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise invalid_platform_error(str(value)) from None


class Strategy(Enum):
    """Element matching strategies."""

    TEST_ID = "testId"
    TEXT = "text"
    CONTENT_DESCRIPTION = "contentDescription"

    @classmethod
    def parse(cls, value: Strategy | str) -> Strategy:
        """Coerce a strategy name, raising ERR_INVALID_STRATEGY on unknown values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise invalid_strategy_error(str(value)) from None


class ScrollDirection(Enum):
    """Scroll direction for scroll-to-element."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @classmethod
    def parse(cls, value: ScrollDirection | str) -> ScrollDirection:
        """Coerce a direction name, raising ERR_INVALID_DIRECTION on unknown values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise invalid_direction_error(str(value)) from None


@dataclass(frozen=True)
class NormalizedNode:
    """Platform-independent UI node.

    Instances are immutable; pruning builds new nodes instead of editing
    children in place, so a promoted child never aliases its old parent.
    """

    type: str
    text: str | None = None
    resource_id: str | None = None
    content_desc: str | None = None
    bounds: str | None = None
    clickable: bool = False
    enabled: bool = False
    focused: bool = False
    selected: bool = False
    children: tuple[NormalizedNode, ...] = ()

    @property
    def has_content(self) -> bool:
        return bool(self.text or self.content_desc)

    @property
    def has_identity(self) -> bool:
        """Whether the node carries an id, text or description of its own."""
        return bool(self.resource_id) or self.has_content

    def attributes(self) -> dict[str, Any]:
        """Public attributes without children; empty and false fields are omitted."""
        result: dict[str, Any] = {"type": self.type}
        if self.text:
            result["text"] = self.text
        if self.resource_id:
            result["resourceId"] = self.resource_id
        if self.content_desc:
            result["contentDesc"] = self.content_desc
        if self.bounds:
            result["bounds"] = self.bounds
        for flag in ("clickable", "enabled", "focused", "selected"):
            if getattr(self, flag):
                result[flag] = True
        return result

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable nested dict."""
        result = self.attributes()
        if self.children:
            result["children"] = [child.to_dict() for child in self.children]
        return result


def count_nodes(node: NormalizedNode | None) -> int:
    """Count nodes in a tree (0 for an absent tree)."""
    if node is None:
        return 0
    total = 0
    stack = [node]
    while stack:
        current = stack.pop()
        total += 1
        stack.extend(current.children)
    return total


@dataclass(frozen=True)
class Viewport:
    """Screen size in raw device pixels."""

    original_width: int
    original_height: int

    def to_dict(self) -> dict[str, Any]:
        return {"originalWidth": self.original_width, "originalHeight": self.original_height}
