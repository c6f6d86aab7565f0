"""
Block type registry and the block metadata derived from it.

Every registered block type contributes a CSS selector, an optional
duotone target selector and one selector per element. Computing that
metadata walks the whole registry, so it is memoized in a cache that is
shared process-wide by default and rebuilt whenever the registry changes.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .schema import ELEMENTS

logger = logging.getLogger(__name__)


class BlockType(BaseModel):
    """A registered block type and its ``supports`` declaration."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Namespaced block name, e.g. 'core/image'")
    supports: dict[str, Any] = Field(default_factory=dict, description="Block supports")


class BlockMetadata(BaseModel):
    """Selectors a block compiles to."""

    model_config = ConfigDict(frozen=True)

    selector: str
    duotone: str | None = None
    elements: dict[str, str] = Field(default_factory=dict)


class BlockTypeRegistry:
    """Mutable collection of block types.

    ``revision`` increases on every change so caches can tell when the
    metadata they hold is stale.
    """

    def __init__(self) -> None:
        self._blocks: dict[str, BlockType] = {}
        self.revision = 0

    def register(self, name: str, supports: Mapping[str, Any] | None = None) -> BlockType:
        block_type = BlockType(name=name, supports=dict(supports or {}))
        self._blocks[name] = block_type
        self.revision += 1
        return block_type

    def unregister(self, name: str) -> None:
        if self._blocks.pop(name, None) is not None:
            self.revision += 1

    def is_registered(self, name: str) -> bool:
        return name in self._blocks

    def get_all_registered(self) -> dict[str, BlockType]:
        return dict(self._blocks)

    def clear(self) -> None:
        self._blocks.clear()
        self.revision += 1


def default_block_selector(block_name: str) -> str:
    """
    Selector used when a block does not declare one.

    Examples:
        >>> default_block_selector("core/paragraph")
        '.wp-block-paragraph'
        >>> default_block_selector("my-plugin/card")
        '.wp-block-my-plugin-card'
    """
    short_name = block_name.removeprefix("core/")
    return ".wp-block-" + short_name.replace("/", "-")


def compute_block_metadata(
    block_type: BlockType,
    elements: Mapping[str, str] = ELEMENTS,
) -> BlockMetadata:
    """Derive the selectors for one block type."""
    supports = block_type.supports

    selector = supports.get("__experimentalSelector")
    if not isinstance(selector, str):
        selector = default_block_selector(block_type.name)

    color_supports = supports.get("color")
    duotone = None
    if isinstance(color_supports, Mapping) and isinstance(
        color_supports.get("__experimentalDuotone"), str
    ):
        duotone = color_supports["__experimentalDuotone"]

    # Compound block selectors get the element appended to every branch.
    block_selectors = selector.split(",")
    element_selectors = {
        name: ",".join(f"{branch} {element_selector}" for branch in block_selectors)
        for name, element_selector in elements.items()
    }

    return BlockMetadata(selector=selector, duotone=duotone, elements=element_selectors)


class BlockMetadataCache:
    """Lazily computed, memoized block metadata for a registry."""

    def __init__(self, registry: BlockTypeRegistry, elements: Mapping[str, str] = ELEMENTS):
        self.registry = registry
        self.elements = dict(elements)
        self._metadata: dict[str, BlockMetadata] | None = None
        self._revision: int | None = None

    def get(self) -> dict[str, BlockMetadata]:
        """Return metadata keyed by block name, rebuilding it if the registry changed."""
        if self._metadata is None or self._revision != self.registry.revision:
            self._metadata = {
                name: compute_block_metadata(block_type, self.elements)
                for name, block_type in self.registry.get_all_registered().items()
            }
            self._revision = self.registry.revision
            logger.debug("Computed metadata for %d block types", len(self._metadata))
        return self._metadata

    def invalidate(self) -> None:
        """Drop the memoized metadata; the next ``get()`` recomputes it."""
        self._metadata = None
        self._revision = None

    def block_names(self) -> list[str]:
        return list(self.get())


# =============================================================================
# Process-wide defaults
# =============================================================================

_default_registry = BlockTypeRegistry()
_default_cache = BlockMetadataCache(_default_registry)


def get_block_type_registry() -> BlockTypeRegistry:
    """Return the process-wide block type registry."""
    return _default_registry


def get_blocks_metadata_cache() -> BlockMetadataCache:
    """Return the process-wide block metadata cache."""
    return _default_cache


def get_blocks_metadata() -> dict[str, BlockMetadata]:
    """Return the memoized metadata for the process-wide registry."""
    return _default_cache.get()
