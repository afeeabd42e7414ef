"""Platform tree normalizer - Android XML and iOS JSON into NormalizedNode."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from lxml import etree

from open_mobile_agent.errors import hierarchy_parse_error, hierarchy_too_large_error
from open_mobile_agent.ui.nodes import NormalizedNode

MAX_TEXT_LENGTH = 50
TRUNCATION_MARKER = "..."

MAX_TREE_DEPTH = 256
MAX_TREE_NODES = 20000

IOS_NODE_TYPE = "UIElement"
ANDROID_DEFAULT_TYPE = "unknown"

# Attribute priority for iOS text and description resolution
IOS_TEXT_KEYS = ("text", "accessibilityText", "title", "value")
IOS_DESC_KEYS = ("accessibilityText", "hintText")


@dataclass(frozen=True)
class AndroidRawNode:
    """A uiautomator <node> element."""

    element: etree._Element


@dataclass(frozen=True)
class IosRawNode:
    """A maestro hierarchy JSON object."""

    payload: Mapping[str, Any]


RawNode = AndroidRawNode | IosRawNode


@dataclass(frozen=True)
class NormalizerLimits:
    """Ceilings that turn malformed or cyclic input into a defined failure."""

    max_depth: int = MAX_TREE_DEPTH
    max_nodes: int = MAX_TREE_NODES


DEFAULT_LIMITS = NormalizerLimits()


def clean_value(value: Any) -> str | None:
    """Return the string value, or None when missing or whitespace-only."""
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def truncate_text(text: str | None) -> str | None:
    """Cap text at MAX_TEXT_LENGTH characters plus a trailing marker."""
    if text is None or len(text) <= MAX_TEXT_LENGTH:
        return text
    return text[:MAX_TEXT_LENGTH] + TRUNCATION_MARKER


def normalize(raw: RawNode, limits: NormalizerLimits = DEFAULT_LIMITS) -> NormalizedNode:
    """Normalize a raw platform tree into NormalizedNode form."""
    return _Walker(limits).walk(raw, depth=0)


class _Walker:
    """Single-use walker enforcing depth and node-count ceilings."""

    def __init__(self, limits: NormalizerLimits) -> None:
        self._limits = limits
        self._visited = 0

    def walk(self, raw: RawNode, depth: int) -> NormalizedNode:
        if depth > self._limits.max_depth:
            raise hierarchy_too_large_error("depth", self._limits.max_depth)
        self._visited += 1
        if self._visited > self._limits.max_nodes:
            raise hierarchy_too_large_error("node count", self._limits.max_nodes)

        if isinstance(raw, AndroidRawNode):
            node, children = _map_android(raw)
        else:
            node, children = _map_ios(raw)

        if not children:
            return node

        return replace(node, children=tuple(self.walk(child, depth + 1) for child in children))


def _map_android(raw: AndroidRawNode) -> tuple[NormalizedNode, list[RawNode]]:
    element = raw.element
    node = NormalizedNode(
        type=element.get("class") or ANDROID_DEFAULT_TYPE,
        text=truncate_text(clean_value(element.get("text"))),
        resource_id=clean_value(element.get("resource-id")),
        content_desc=clean_value(element.get("content-desc")),
        bounds=clean_value(element.get("bounds")),
        clickable=element.get("clickable") == "true",
        enabled=element.get("enabled") == "true",
        focused=element.get("focused") == "true",
        selected=element.get("selected") == "true",
    )
    children: list[RawNode] = [AndroidRawNode(child) for child in element if child.tag == "node"]
    return node, children


def _first_present(attributes: Mapping[str, Any], keys: tuple[str, ...]) -> str | None:
    for key in keys:
        value = clean_value(attributes.get(key))
        if value:
            return value
    return None


def _map_ios(raw: IosRawNode) -> tuple[NormalizedNode, list[RawNode]]:
    payload = raw.payload
    if not isinstance(payload, Mapping):
        raise hierarchy_parse_error("ios", "node is not a JSON object", repr(payload)[:200])

    attributes = payload.get("attributes") or {}
    if not isinstance(attributes, Mapping):
        raise hierarchy_parse_error(
            "ios", "attributes is not a JSON object", repr(attributes)[:200]
        )

    raw_children = payload.get("children") or []
    if not isinstance(raw_children, list):
        raise hierarchy_parse_error(
            "ios", "children is not a JSON array", repr(raw_children)[:200]
        )

    node = NormalizedNode(
        type=IOS_NODE_TYPE,
        text=truncate_text(_first_present(attributes, IOS_TEXT_KEYS)),
        resource_id=clean_value(attributes.get("resource-id")),
        content_desc=_first_present(attributes, IOS_DESC_KEYS),
        bounds=clean_value(attributes.get("bounds")),
        clickable=payload.get("clickable") is True,
        enabled=payload.get("enabled") is True,
        focused=payload.get("focused") is True,
        selected=payload.get("selected") is True,
    )
    children: list[RawNode] = [IosRawNode(child) for child in raw_children]
    return node, children
