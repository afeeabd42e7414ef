"""Tests for the pruning/flattening engine."""

from __future__ import annotations

from typing import Any

from open_mobile_agent.ui.nodes import NormalizedNode
from open_mobile_agent.ui.pruner import FlattenPolicy, prune


def _node(type_: str = "View", *children: NormalizedNode, **fields: Any) -> NormalizedNode:
    return NormalizedNode(type=type_, children=tuple(children), **fields)


class TestDropRule:
    """Leaves without identity or clickability disappear."""

    def test_anonymous_leaf_dropped(self) -> None:
        assert prune(_node()) is None

    def test_clickable_leaf_kept(self) -> None:
        leaf = _node(clickable=True)
        assert prune(leaf) == leaf

    def test_leaf_with_id_kept(self) -> None:
        leaf = _node(resource_id="app:id/x")
        assert prune(leaf) is leaf

    def test_wrapper_of_dropped_children_dropped(self) -> None:
        assert prune(_node("Frame", _node(), _node())) is None


class TestFlattening:
    """Anonymous single-child wrappers collapse."""

    def test_three_level_chain_collapses_to_leaf(self) -> None:
        leaf = _node("TextView", text="Hello")
        tree = _node("Frame", _node("Linear", leaf))
        assert prune(tree) == leaf

    def test_wrapper_with_two_children_kept(self) -> None:
        a = _node("TextView", text="A")
        b = _node("TextView", text="B")
        result = prune(_node("Linear", a, b))
        assert result is not None
        assert result.children == (a, b)

    def test_wrapper_with_identity_not_flattened(self) -> None:
        leaf = _node("TextView", text="Hello")
        tree = _node("Frame", leaf, resource_id="app:id/frame")
        result = prune(tree)
        assert result is not None
        assert result.resource_id == "app:id/frame"
        assert result.children == (leaf,)

    def test_clickable_wrapper_collapses_into_text_child(self) -> None:
        leaf = _node("android.widget.TextView", text="Buy")
        assert prune(_node("Frame", leaf, clickable=True)) == leaf

    def test_clickable_wrapper_collapses_into_clickable_child(self) -> None:
        leaf = _node("ImageView", resource_id="app:id/icon", clickable=True)
        assert prune(_node("Frame", leaf, clickable=True)) == leaf

    def test_clickable_wrapper_kept_around_plain_child(self) -> None:
        leaf = _node("ImageView", resource_id="app:id/icon")
        result = prune(_node("Frame", leaf, clickable=True, bounds="[0,0][10,10]"))
        assert result is not None
        assert result.clickable
        assert result.children == (leaf,)

    def test_policy_markers_are_configurable(self) -> None:
        leaf = _node("ImageView", resource_id="app:id/icon")
        tree = _node("Frame", leaf, clickable=True)
        assert prune(tree, FlattenPolicy(keep_type_markers=("Image",))) == leaf
        assert prune(tree, FlattenPolicy(keep_type_markers=("image",))) != leaf
        relaxed = FlattenPolicy(keep_type_markers=("image",), case_sensitive=False)
        assert prune(tree, relaxed) == leaf


class TestInvariants:
    """Properties that hold for any tree."""

    def _tree(self) -> NormalizedNode:
        return _node(
            "Root",
            _node("Frame", _node("Linear", _node("TextView", text="Title"))),
            _node("Frame", _node(), _node(clickable=True)),
            _node("Frame", _node("Button", text="Go", clickable=True), clickable=True),
            _node(),
        )

    def test_idempotent(self) -> None:
        once = prune(self._tree())
        assert once is not None
        assert prune(once) == once

    def test_input_unchanged(self) -> None:
        tree = self._tree()
        snapshot = tree.to_dict()
        prune(tree)
        assert tree.to_dict() == snapshot

    def test_every_surviving_leaf_is_informative(self) -> None:
        result = prune(self._tree())
        assert result is not None
        stack = [result]
        while stack:
            node = stack.pop()
            if not node.children:
                assert node.has_identity or node.clickable
            stack.extend(node.children)
