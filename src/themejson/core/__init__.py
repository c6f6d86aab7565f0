"""Core themejson functionality: schema, presets, selectors, styles, compilation, loading."""

from .errors import ErrorContext, ManifestError, ThemeJSONError, ThemeLoadError
from .loader import load_merged_theme, load_theme, load_theme_data
from .manifest import BlockConfig, CompilerManifest, StylesheetConfig, load_manifest
from .presets import PRESETS_METADATA, VALID_ORIGINS, Origin
from .registry import (
    BlockMetadata,
    BlockMetadataCache,
    BlockType,
    BlockTypeRegistry,
    get_block_type_registry,
    get_blocks_metadata,
    get_blocks_metadata_cache,
)
from .schema import LATEST_SCHEMA
from .theme_json import CustomTemplate, StylesheetType, TemplatePart, ThemeJSON

__all__ = [
    "ThemeJSON",
    "CustomTemplate",
    "TemplatePart",
    "StylesheetType",
    "Origin",
    "VALID_ORIGINS",
    "PRESETS_METADATA",
    "LATEST_SCHEMA",
    "BlockType",
    "BlockMetadata",
    "BlockTypeRegistry",
    "BlockMetadataCache",
    "get_block_type_registry",
    "get_blocks_metadata",
    "get_blocks_metadata_cache",
    "load_theme",
    "load_theme_data",
    "load_merged_theme",
    "BlockConfig",
    "CompilerManifest",
    "StylesheetConfig",
    "load_manifest",
    "ThemeJSONError",
    "ThemeLoadError",
    "ManifestError",
    "ErrorContext",
]
