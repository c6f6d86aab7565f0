"""
Visitation nodes: the scopes of a theme tree that compile to CSS.

A node pairs a path into the tree (root, a block, an element, or a
block's element) with the selector that scope compiles to. A node whose
selector is ``None`` exists for settings inheritance only and emits no CSS.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict

from .registry import BlockMetadata
from .schema import ELEMENTS

ROOT_BLOCK_SELECTOR = "body"


class VisitationNode(BaseModel):
    """A scope of the theme tree and its selectors."""

    model_config = ConfigDict(frozen=True)

    path: tuple[str, ...]
    selector: str | None
    duotone: str | None = None


def get_style_nodes(
    theme_json: Mapping[str, Any],
    selectors: Mapping[str, BlockMetadata] | None = None,
) -> list[VisitationNode]:
    """
    Enumerate the nodes that hold styles.

    Order: root, root elements, then each block followed by its elements.

    Args:
        theme_json: Theme tree.
        selectors: Block metadata keyed by block name.

    Returns:
        Style nodes in emission order.
    """
    selectors = selectors or {}
    styles = theme_json.get("styles")
    if not isinstance(styles, Mapping):
        return []

    nodes = [VisitationNode(path=("styles",), selector=ROOT_BLOCK_SELECTOR)]

    elements = styles.get("elements")
    if isinstance(elements, Mapping):
        for element in elements:
            nodes.append(
                VisitationNode(path=("styles", "elements", element), selector=ELEMENTS.get(element))
            )

    blocks = styles.get("blocks")
    if not isinstance(blocks, Mapping):
        return nodes

    for name, block in blocks.items():
        metadata = selectors.get(name)
        nodes.append(
            VisitationNode(
                path=("styles", "blocks", name),
                selector=metadata.selector if metadata else None,
                duotone=metadata.duotone if metadata else None,
            )
        )

        block_elements = block.get("elements") if isinstance(block, Mapping) else None
        if isinstance(block_elements, Mapping):
            for element in block_elements:
                nodes.append(
                    VisitationNode(
                        path=("styles", "blocks", name, "elements", element),
                        selector=metadata.elements.get(element) if metadata else None,
                    )
                )

    return nodes


def get_setting_nodes(
    theme_json: Mapping[str, Any],
    selectors: Mapping[str, BlockMetadata] | None = None,
) -> list[VisitationNode]:
    """Enumerate the nodes that hold settings: root, then each block."""
    selectors = selectors or {}
    settings = theme_json.get("settings")
    if not isinstance(settings, Mapping):
        return []

    nodes = [VisitationNode(path=("settings",), selector=ROOT_BLOCK_SELECTOR)]

    blocks = settings.get("blocks")
    if not isinstance(blocks, Mapping):
        return nodes

    for name in blocks:
        metadata = selectors.get(name)
        nodes.append(
            VisitationNode(
                path=("settings", "blocks", name),
                selector=metadata.selector if metadata else None,
            )
        )

    return nodes
