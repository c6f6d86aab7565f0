"""
Theme file loading.

Theme trees are stored as JSON (``theme.json``) or YAML (``theme.yaml``,
``theme.yml``). The loader only decodes; all structural checks happen
when the tree is compiled.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from .errors import make_load_error
from .presets import Origin
from .registry import BlockMetadataCache
from .theme_json import ThemeJSON

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


# =============================================================================
# Loading
# =============================================================================


def load_theme_data(path: Path) -> dict[str, Any]:
    """Read a raw theme tree from a JSON or YAML file.

    An empty file yields an empty tree.

    Raises:
        ThemeLoadError: If the file is missing, undecodable, or not a mapping.
    """
    if not path.exists():
        raise make_load_error("Theme file not found", path)

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise make_load_error(f"Cannot read theme file: {e}", path) from e

    if not content.strip():
        logger.warning(f"Empty theme file at {path}, using an empty tree")
        return {}

    try:
        if path.suffix.lower() in YAML_SUFFIXES:
            data = yaml.safe_load(content)
        else:
            data = json.loads(content)
    except yaml.YAMLError as e:
        raise make_load_error(f"Invalid YAML: {e}", path) from e
    except json.JSONDecodeError as e:
        raise make_load_error(f"Invalid JSON: {e}", path) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise make_load_error(
            f"Expected a mapping at the top level, got {type(data).__name__}", path
        )

    return data


def load_theme(
    path: Path,
    origin: str = Origin.THEME,
    *,
    blocks_metadata: BlockMetadataCache | None = None,
) -> ThemeJSON:
    """Load and compile a theme file.

    Args:
        path: JSON or YAML theme file.
        origin: Origin the tree is attributed to.
        blocks_metadata: Block metadata cache, the process-wide one by default.

    Returns:
        Compiled ThemeJSON.
    """
    data = load_theme_data(path)
    logger.debug(f"Loaded {origin} theme from {path}")
    return ThemeJSON(data, origin, blocks_metadata=blocks_metadata)


def load_merged_theme(
    sources: list[tuple[Path, str]],
    *,
    blocks_metadata: BlockMetadataCache | None = None,
) -> ThemeJSON:
    """Load several theme files and merge them in order.

    Args:
        sources: ``(path, origin)`` pairs, lowest precedence first.
        blocks_metadata: Block metadata cache shared by every tree.

    Returns:
        The merged ThemeJSON; an empty one when ``sources`` is empty.
    """
    result = ThemeJSON({}, Origin.DEFAULT, blocks_metadata=blocks_metadata)
    for path, origin in sources:
        result.merge(load_theme(path, origin, blocks_metadata=blocks_metadata))
    return result
