"""Element query engine - selector matching over the pruned hierarchy."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import structlog

from open_mobile_agent.ui.bounds import parse_bounds
from open_mobile_agent.ui.hierarchy import HierarchyFetcher
from open_mobile_agent.ui.nodes import NormalizedNode, Platform, Strategy

logger = structlog.get_logger()

ElementWithCoordinates = dict[str, Any]


def iter_preorder(root: NormalizedNode) -> Iterator[NormalizedNode]:
    """Yield nodes in document order."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def matches(node: NormalizedNode, selector: str, strategy: Strategy) -> bool:
    """Apply a single strategy's match rule to one node."""
    if strategy == Strategy.TEST_ID:
        # Suffix match tolerates package-qualified ids like "com.app:id/login"
        return node.resource_id is not None and node.resource_id.endswith(selector)
    value = node.text if strategy == Strategy.TEXT else node.content_desc
    return value is not None and selector.lower() in value.lower()


def element_with_coordinates(node: NormalizedNode) -> ElementWithCoordinates:
    """Copy a node's attributes and merge parsed bounds when available."""
    element = node.attributes()
    parsed = parse_bounds(node.bounds)
    if parsed is not None:
        element.update(parsed.to_dict())
    return element


def find_elements(
    root: NormalizedNode | None,
    selector: str,
    strategy: Strategy | str,
) -> list[ElementWithCoordinates]:
    """Collect every match in pre-order; an empty list means no match."""
    if root is None:
        return []
    strategy = Strategy.parse(strategy)
    return [
        element_with_coordinates(node)
        for node in iter_preorder(root)
        if matches(node, selector, strategy)
    ]


class ElementQuery:
    """Finds elements on the live screen through a HierarchyFetcher."""

    def __init__(self, fetcher: HierarchyFetcher) -> None:
        self.fetcher = fetcher

    async def hierarchy(self, device_id: str, platform: Platform | str) -> NormalizedNode | None:
        return await self.fetcher.fetch(device_id, platform)

    async def find(
        self,
        device_id: str,
        platform: Platform | str,
        selector: str,
        strategy: Strategy | str,
    ) -> list[ElementWithCoordinates]:
        """Fetch a fresh hierarchy and return all matches."""
        strategy = Strategy.parse(strategy)
        root = await self.fetcher.fetch(device_id, platform)
        found = find_elements(root, selector, strategy)
        logger.debug(
            "elements_found",
            device_id=device_id,
            selector=selector,
            strategy=strategy.value,
            count=len(found),
        )
        return found
