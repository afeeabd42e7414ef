"""Bounds parsing for "[left,top][right,bottom]" rectangles."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any

BOUNDS_PATTERN = re.compile(r"\[(\d+),(\d+)\]\[(\d+),(\d+)\]")


@dataclass(frozen=True)
class Bounds:
    """Parsed element rectangle with derived center and size."""

    left: int
    top: int
    right: int
    bottom: int
    center_x: int
    center_y: int
    width: int
    height: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to the public coordinate schema."""
        return {
            "left": self.left,
            "top": self.top,
            "right": self.right,
            "bottom": self.bottom,
            "centerX": self.center_x,
            "centerY": self.center_y,
            "width": self.width,
            "height": self.height,
        }


def round_half_up(value: float) -> int:
    """Round .5 upward, the way device tooling reports centers."""
    return math.floor(value + 0.5)


def parse_bounds(raw: str | None) -> Bounds | None:
    """Parse bounds string '[left,top][right,bottom]'.

    Returns None when the string is missing or malformed; not every element
    is positioned, so callers treat absence as a normal state.
    """
    if not raw:
        return None
    match = BOUNDS_PATTERN.search(raw)
    if not match:
        return None

    left, top, right, bottom = (int(group) for group in match.groups())
    return Bounds(
        left=left,
        top=top,
        right=right,
        bottom=bottom,
        center_x=round_half_up((left + right) / 2),
        center_y=round_half_up((top + bottom) / 2),
        width=right - left,
        height=bottom - top,
    )
