"""Hierarchy fetcher - raw dump to pruned semantic tree."""

from __future__ import annotations

import json
import time
from typing import Any, Protocol

import structlog
from lxml import etree

from open_mobile_agent.errors import (
    AgentError,
    hierarchy_acquisition_error,
    hierarchy_parse_error,
)
from open_mobile_agent.ui.nodes import NormalizedNode, Platform, count_nodes
from open_mobile_agent.ui.normalizer import (
    DEFAULT_LIMITS,
    AndroidRawNode,
    IosRawNode,
    NormalizerLimits,
    normalize,
)
from open_mobile_agent.ui.pruner import DEFAULT_FLATTEN_POLICY, FlattenPolicy, prune

logger = structlog.get_logger()

RAW_PREVIEW_CHARS = 200

# huge_tree lifts libxml2's 256-level cap; NormalizerLimits.max_depth is the ceiling.
_XML_PARSER = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=True)


class HierarchySource(Protocol):
    """Supplies raw hierarchy text for a device."""

    async def dump_hierarchy(self, device_id: str, platform: Platform) -> str: ...


def _android_root(document: etree._Element) -> etree._Element:
    """Pick the top node of a uiautomator dump.

    A single-window dump is ``hierarchy > node``; multi-window dumps keep the
    ``hierarchy`` element so every window survives.
    """
    if document.tag != "hierarchy":
        return document
    windows = [child for child in document if child.tag == "node"]
    if len(windows) == 1:
        return windows[0]
    return document


def parse_android_document(xml: str | bytes) -> etree._Element:
    """Parse uiautomator XML into an lxml element tree."""
    data = xml.encode() if isinstance(xml, str) else xml
    try:
        return etree.fromstring(data, _XML_PARSER)
    except etree.XMLSyntaxError as exc:
        preview = data[:RAW_PREVIEW_CHARS].decode(errors="replace")
        raise hierarchy_parse_error("android", str(exc), preview) from exc


def parse_ios_document(raw: str) -> dict[str, Any]:
    """Parse maestro hierarchy output, skipping any non-JSON prefix line."""
    start = raw.find("{")
    if start == -1:
        raise hierarchy_parse_error(
            "ios", "No JSON found in maestro hierarchy output", raw[:RAW_PREVIEW_CHARS]
        )
    json_text = raw[start:]
    try:
        document, _end = json.JSONDecoder().raw_decode(json_text)
    except json.JSONDecodeError as exc:
        raise hierarchy_parse_error("ios", str(exc), json_text[:RAW_PREVIEW_CHARS]) from exc
    if not isinstance(document, dict):
        raise hierarchy_parse_error(
            "ios", "hierarchy root is not a JSON object", json_text[:RAW_PREVIEW_CHARS]
        )
    return document


def build_android_hierarchy(
    xml: str | bytes,
    policy: FlattenPolicy = DEFAULT_FLATTEN_POLICY,
    limits: NormalizerLimits = DEFAULT_LIMITS,
) -> tuple[NormalizedNode, NormalizedNode | None]:
    """Return (normalized, pruned) trees for a uiautomator dump."""
    root = _android_root(parse_android_document(xml))
    normalized = normalize(AndroidRawNode(root), limits)
    return normalized, prune(normalized, policy)


def build_ios_hierarchy(
    raw: str,
    policy: FlattenPolicy = DEFAULT_FLATTEN_POLICY,
    limits: NormalizerLimits = DEFAULT_LIMITS,
) -> tuple[NormalizedNode, NormalizedNode | None]:
    """Return (normalized, pruned) trees for maestro hierarchy output."""
    document = parse_ios_document(raw)
    normalized = normalize(IosRawNode(document), limits)
    return normalized, prune(normalized, policy)


class HierarchyFetcher:
    """Fetches a fresh pruned hierarchy on every call; nothing is cached."""

    def __init__(
        self,
        source: HierarchySource,
        policy: FlattenPolicy = DEFAULT_FLATTEN_POLICY,
        limits: NormalizerLimits = DEFAULT_LIMITS,
    ) -> None:
        self._source = source
        self.policy = policy
        self.limits = limits

    async def fetch(self, device_id: str, platform: Platform | str) -> NormalizedNode | None:
        """Dump, parse, normalize and prune the current screen."""
        platform = Platform.parse(platform)
        start = time.time()
        raw = await self._acquire(device_id, platform)

        if platform == Platform.ANDROID:
            normalized, pruned = build_android_hierarchy(raw, self.policy, self.limits)
        else:
            normalized, pruned = build_ios_hierarchy(raw, self.policy, self.limits)

        elapsed = (time.time() - start) * 1000
        logger.info(
            "hierarchy_fetched",
            device_id=device_id,
            platform=platform.value,
            raw_nodes=count_nodes(normalized),
            pruned_nodes=count_nodes(pruned),
            elapsed_ms=round(elapsed, 2),
        )
        return pruned

    async def _acquire(self, device_id: str, platform: Platform) -> str:
        try:
            return await self._source.dump_hierarchy(device_id, platform)
        except AgentError as exc:
            if exc.code == "ERR_HIERARCHY_ACQUISITION":
                raise
            raise hierarchy_acquisition_error(device_id, platform.value, exc.message) from exc
        except Exception as exc:
            raise hierarchy_acquisition_error(device_id, platform.value, str(exc)) from exc
