import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .errors import make_manifest_error
from .presets import VALID_ORIGINS
from .registry import BlockTypeRegistry
from .theme_json import ALL_STYLESHEET_TYPES

MANIFEST_FILE = "themejson.toml"


@dataclass
class BlockConfig:
    """A block type to register before compiling.

    Examples in themejson.toml:

        [[blocks]]
        name = "core/image"
        duotone = "img"

        [[blocks]]
        name = "core/heading"
        selector = "h1, h2, h3, h4, h5, h6"
    """

    name: str
    selector: str | None = None  # Defaults to .wp-block-<name>
    duotone: str | None = None  # Duotone filter target, relative to the block

    def to_supports(self) -> dict[str, Any]:
        """Translate to a block ``supports`` declaration."""
        supports: dict[str, Any] = {}
        if self.selector:
            supports["__experimentalSelector"] = self.selector
        if self.duotone:
            supports["color"] = {"__experimentalDuotone": self.duotone}
        return supports


@dataclass
class StylesheetConfig:
    """Default arguments for stylesheet generation."""

    types: list[str] = field(default_factory=lambda: list(ALL_STYLESHEET_TYPES))
    origins: list[str] = field(default_factory=lambda: list(VALID_ORIGINS))


@dataclass
class CompilerManifest:
    """Compiler configuration from themejson.toml."""

    blocks: list[BlockConfig] = field(default_factory=list)
    stylesheet: StylesheetConfig = field(default_factory=StylesheetConfig)

    def register_blocks(self, registry: BlockTypeRegistry) -> None:
        """Register every configured block type into ``registry``."""
        for block in self.blocks:
            registry.register(block.name, block.to_supports())


def find_manifest(start: Path) -> Path | None:
    """Return themejson.toml in ``start`` or its nearest parent, if any."""
    start = start.resolve()
    for directory in (start, *start.parents):
        candidate = directory / MANIFEST_FILE
        if candidate.is_file():
            return candidate
    return None


def load_manifest(path: Path) -> CompilerManifest:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise make_manifest_error(f"Cannot read manifest: {e}", path) from e
    except tomllib.TOMLDecodeError as e:
        raise make_manifest_error(f"Invalid TOML: {e}", path) from e

    blocks_data = data.get("blocks", [])
    if not isinstance(blocks_data, list):
        raise make_manifest_error("'blocks' must be an array of tables", path, key="blocks")

    stylesheet_data = data.get("stylesheet", {})
    if not isinstance(stylesheet_data, dict):
        raise make_manifest_error("'stylesheet' must be a table", path, key="stylesheet")

    blocks = []
    for index, block in enumerate(blocks_data):
        name = block.get("name") if isinstance(block, dict) else None
        if not isinstance(name, str) or not name:
            raise make_manifest_error("Block entry needs a name", path, key=f"blocks.{index}")
        blocks.append(
            BlockConfig(
                name=name,
                selector=block.get("selector"),
                duotone=block.get("duotone"),
            )
        )

    types = stylesheet_data.get("types", list(ALL_STYLESHEET_TYPES))
    if not isinstance(types, list):
        raise make_manifest_error("'types' must be an array", path, key="stylesheet.types")
    for stylesheet_type in types:
        if stylesheet_type not in ALL_STYLESHEET_TYPES:
            raise make_manifest_error(
                f"Unknown stylesheet type '{stylesheet_type}'", path, key="stylesheet.types"
            )

    origins = stylesheet_data.get("origins", list(VALID_ORIGINS))
    if not isinstance(origins, list):
        raise make_manifest_error("'origins' must be an array", path, key="stylesheet.origins")
    for origin in origins:
        if origin not in VALID_ORIGINS:
            raise make_manifest_error(
                f"Unknown origin '{origin}'", path, key="stylesheet.origins"
            )

    return CompilerManifest(
        blocks=blocks,
        stylesheet=StylesheetConfig(types=list(types), origins=list(origins)),
    )
