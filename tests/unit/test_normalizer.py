"""Tests for the platform tree normalizer."""

from __future__ import annotations

from typing import Any

import pytest
from lxml import etree

from open_mobile_agent.errors import AgentError
from open_mobile_agent.ui.nodes import NormalizedNode, count_nodes
from open_mobile_agent.ui.normalizer import (
    AndroidRawNode,
    IosRawNode,
    NormalizerLimits,
    clean_value,
    normalize,
    truncate_text,
)


def _android(xml: str) -> NormalizedNode:
    return normalize(AndroidRawNode(etree.fromstring(xml)))


class TestAndroidMapping:
    """Tests for uiautomator node mapping."""

    def test_maps_attributes(self) -> None:
        node = _android(
            '<node class="android.widget.Button" text="OK" resource-id="app:id/ok" '
            'content-desc="Confirm" bounds="[0,0][10,10]" clickable="true" '
            'enabled="true" focused="false" selected="true" />'
        )
        assert node == NormalizedNode(
            type="android.widget.Button",
            text="OK",
            resource_id="app:id/ok",
            content_desc="Confirm",
            bounds="[0,0][10,10]",
            clickable=True,
            enabled=True,
            focused=False,
            selected=True,
        )

    def test_missing_class_defaults_to_unknown(self) -> None:
        assert _android("<node />").type == "unknown"

    def test_empty_and_whitespace_fields_are_absent(self) -> None:
        node = _android('<node class="View" text="" content-desc="   " resource-id="" />')
        assert node.text is None
        assert node.content_desc is None
        assert node.resource_id is None

    def test_only_literal_true_sets_flags(self) -> None:
        node = _android('<node class="View" clickable="TRUE" enabled="1" />')
        assert node.clickable is False
        assert node.enabled is False

    def test_long_text_is_truncated(self) -> None:
        node = _android(f'<node class="TextView" text="{"a" * 60}" />')
        assert node.text == "a" * 50 + "..."

    def test_children_keep_order_and_skip_non_nodes(self) -> None:
        node = _android(
            '<node class="Root"><node class="A" /><extra /><node class="B" /></node>'
        )
        assert [child.type for child in node.children] == ["A", "B"]


class TestIosMapping:
    """Tests for maestro JSON mapping."""

    def test_text_priority(self) -> None:
        node = normalize(
            IosRawNode({"attributes": {"title": "Title", "value": "Value", "text": ""}})
        )
        assert node.text == "Title"
        assert node.type == "UIElement"

    def test_accessibility_text_feeds_text_and_description(self) -> None:
        node = normalize(IosRawNode({"attributes": {"accessibilityText": "Close"}}))
        assert node.text == "Close"
        assert node.content_desc == "Close"

    def test_hint_text_is_description_fallback(self) -> None:
        node = normalize(IosRawNode({"attributes": {"hintText": "Search"}}))
        assert node.text is None
        assert node.content_desc == "Search"

    def test_flags_require_json_true(self) -> None:
        node = normalize(IosRawNode({"clickable": "true", "enabled": True, "attributes": {}}))
        assert node.clickable is False
        assert node.enabled is True

    def test_missing_attributes_and_children(self) -> None:
        node = normalize(IosRawNode({}))
        assert node == NormalizedNode(type="UIElement")

    def test_non_object_child_raises_parse_error(self) -> None:
        with pytest.raises(AgentError) as exc_info:
            normalize(IosRawNode({"children": ["oops"]}))
        assert exc_info.value.code == "ERR_HIERARCHY_PARSE"


class TestLimits:
    """Tests for depth and size ceilings."""

    @staticmethod
    def _chain(depth: int) -> dict[str, Any]:
        node: dict[str, Any] = {"attributes": {"text": "leaf"}}
        for _ in range(depth):
            node = {"children": [node]}
        return node

    def test_depth_limit(self) -> None:
        with pytest.raises(AgentError) as exc_info:
            normalize(IosRawNode(self._chain(5)), NormalizerLimits(max_depth=3))
        assert exc_info.value.code == "ERR_HIERARCHY_TOO_LARGE"

    def test_node_limit(self) -> None:
        wide = {"children": [{"attributes": {}} for _ in range(10)]}
        with pytest.raises(AgentError) as exc_info:
            normalize(IosRawNode(wide), NormalizerLimits(max_nodes=5))
        assert exc_info.value.code == "ERR_HIERARCHY_TOO_LARGE"

    def test_within_limits(self) -> None:
        tree = normalize(IosRawNode(self._chain(3)), NormalizerLimits(max_depth=3))
        assert count_nodes(tree) == 4


def test_clean_value() -> None:
    assert clean_value(None) is None
    assert clean_value(" \t") is None
    assert clean_value(" a ") == " a "


def test_truncate_text_boundary() -> None:
    assert truncate_text("x" * 50) == "x" * 50
    assert truncate_text("x" * 51) == "x" * 50 + "..."
