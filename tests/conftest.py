"""Shared pytest fixtures for themejson tests."""

from pathlib import Path

import pytest

from themejson.core.registry import BlockMetadataCache, BlockTypeRegistry


@pytest.fixture
def block_registry() -> BlockTypeRegistry:
    """Return a registry with a few core block types."""
    registry = BlockTypeRegistry()
    registry.register("core/paragraph")
    registry.register("core/image", {"color": {"__experimentalDuotone": "img"}})
    registry.register("core/heading", {"__experimentalSelector": "h1, h2, h3, h4, h5, h6"})
    return registry


@pytest.fixture
def blocks_metadata(block_registry: BlockTypeRegistry) -> BlockMetadataCache:
    """Return a metadata cache over the test registry."""
    return BlockMetadataCache(block_registry)


@pytest.fixture
def manifest_file(tmp_path: Path) -> Path:
    """Write a themejson.toml registering the test blocks."""
    manifest = tmp_path / "themejson.toml"
    manifest.write_text(
        """
[stylesheet]
types = ["variables", "styles", "presets"]
origins = ["default", "theme", "custom"]

[[blocks]]
name = "core/paragraph"

[[blocks]]
name = "core/image"
duotone = "img"

[[blocks]]
name = "core/heading"
selector = "h1, h2, h3, h4, h5, h6"
""",
        encoding="utf-8",
    )
    return manifest
