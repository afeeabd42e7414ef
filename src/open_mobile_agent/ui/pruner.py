"""Pruning/flattening engine for normalized hierarchies.

Raw accessibility trees are several times deeper and wider than the part a
consumer can act on. The pruner removes structure-only leaves and collapses
anonymous single-child wrappers, bottom-up.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from open_mobile_agent.ui.nodes import NormalizedNode


@dataclass(frozen=True)
class FlattenPolicy:
    """Controls when a clickable anonymous wrapper may collapse into its child.

    A clickable wrapper with one child normally survives, since dropping it
    would lose the tap target's extent. It still collapses when the child is
    clickable itself or its type contains one of ``keep_type_markers``
    (substring match), i.e. the child already looks like the tap target.
    """

    keep_type_markers: tuple[str, ...] = ("Button", "Text")
    case_sensitive: bool = True

    def is_tap_target_like(self, node_type: str) -> bool:
        if self.case_sensitive:
            return any(marker in node_type for marker in self.keep_type_markers)
        lowered = node_type.lower()
        return any(marker.lower() in lowered for marker in self.keep_type_markers)

    def can_collapse_into(self, parent: NormalizedNode, child: NormalizedNode) -> bool:
        """Whether an anonymous parent may be replaced by its single child."""
        if not parent.clickable:
            return True
        return child.clickable or self.is_tap_target_like(child.type)


DEFAULT_FLATTEN_POLICY = FlattenPolicy()


def prune(
    node: NormalizedNode, policy: FlattenPolicy = DEFAULT_FLATTEN_POLICY
) -> NormalizedNode | None:
    """Prune and flatten a tree; returns None when nothing informative remains.

    The input is never modified. Running prune on its own output returns an
    equal tree.
    """
    children = tuple(
        pruned
        for pruned in (prune(child, policy) for child in node.children)
        if pruned is not None
    )

    # Flattening: anonymous wrapper around exactly one surviving child
    if len(children) == 1 and not node.has_identity:
        child = children[0]
        if policy.can_collapse_into(node, child):
            return child

    # Pruning: leaves must carry an id, content, or be tappable
    if not children and not (node.has_identity or node.clickable):
        return None

    if children == node.children:
        return node
    return replace(node, children=children)
