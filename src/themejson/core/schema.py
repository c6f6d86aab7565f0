"""
Theme tree schema and sanitizer.

The schema is data: nested dicts where a ``None`` leaf accepts any value
and a dict value is a sub-schema that the input must match structurally.
Block and element sections are generated at runtime from the names the
block registry currently knows.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping
from typing import Any

# =============================================================================
# Schema tables
# =============================================================================

VALID_TOP_LEVEL_KEYS: tuple[str, ...] = (
    "customTemplates",
    "settings",
    "styles",
    "templateParts",
    "version",
)

VALID_SETTINGS: dict[str, Any] = {
    "appearanceTools": None,
    "border": {
        "color": None,
        "radius": None,
        "style": None,
        "width": None,
    },
    "color": {
        "background": None,
        "custom": None,
        "customDuotone": None,
        "customGradient": None,
        "defaultGradients": None,
        "defaultPalette": None,
        "duotone": None,
        "gradients": None,
        "link": None,
        "palette": None,
        "text": None,
    },
    "custom": None,
    "layout": {
        "contentSize": None,
        "wideSize": None,
    },
    "spacing": {
        "blockGap": None,
        "margin": None,
        "padding": None,
        "units": None,
    },
    "typography": {
        "customFontSize": None,
        "dropCap": None,
        "fontFamilies": None,
        "fontSizes": None,
        "fontStyle": None,
        "fontWeight": None,
        "letterSpacing": None,
        "lineHeight": None,
        "textDecoration": None,
        "textTransform": None,
    },
}

VALID_STYLES: dict[str, Any] = {
    "border": {
        "color": None,
        "radius": None,
        "style": None,
        "width": None,
    },
    "color": {
        "background": None,
        "gradient": None,
        "text": None,
    },
    "filter": {
        "duotone": None,
    },
    "spacing": {
        "margin": None,
        "padding": None,
        "blockGap": None,
    },
    "typography": {
        "fontFamily": None,
        "fontSize": None,
        "fontStyle": None,
        "fontWeight": None,
        "letterSpacing": None,
        "lineHeight": None,
        "textDecoration": None,
        "textTransform": None,
    },
}

# Style properties only allowed under the root ``styles`` object.
TOP_LEVEL_ONLY_STYLES: frozenset[tuple[str, str]] = frozenset({("spacing", "blockGap")})

# Element name -> CSS selector.
ELEMENTS: dict[str, str] = {
    "link": "a",
    "h1": "h1",
    "h2": "h2",
    "h3": "h3",
    "h4": "h4",
    "h5": "h5",
    "h6": "h6",
}

LATEST_SCHEMA = 2


# =============================================================================
# Schema construction
# =============================================================================


def _styles_non_top_level() -> dict[str, Any]:
    styles = copy.deepcopy(VALID_STYLES)
    for section, prop in TOP_LEVEL_ONLY_STYLES:
        styles.get(section, {}).pop(prop, None)
    return styles


def build_schema(
    valid_block_names: Iterable[str],
    valid_element_names: Iterable[str],
) -> dict[str, Any]:
    """Build the ``settings``/``styles`` schema for the known blocks and elements."""
    styles_non_top_level = _styles_non_top_level()

    schema_styles_elements = {
        element: copy.deepcopy(styles_non_top_level) for element in valid_element_names
    }

    schema_styles_blocks: dict[str, Any] = {}
    schema_settings_blocks: dict[str, Any] = {}
    for block in valid_block_names:
        schema_settings_blocks[block] = copy.deepcopy(VALID_SETTINGS)
        schema_styles_blocks[block] = copy.deepcopy(styles_non_top_level)
        schema_styles_blocks[block]["elements"] = copy.deepcopy(schema_styles_elements)

    styles = copy.deepcopy(VALID_STYLES)
    styles["blocks"] = schema_styles_blocks
    styles["elements"] = schema_styles_elements

    settings = copy.deepcopy(VALID_SETTINGS)
    settings["blocks"] = schema_settings_blocks

    return {"styles": styles, "settings": settings}


# =============================================================================
# Sanitization
# =============================================================================


def remove_keys_not_in_schema(tree: Mapping[str, Any], schema: Mapping[str, Any]) -> dict[str, Any]:
    """
    Intersect ``tree`` with ``schema`` recursively.

    Keys missing from the schema are dropped. When the schema expects a
    sub-schema and the input holds anything other than a mapping, the key
    is dropped. Sub-trees that end up empty are removed.
    """
    result: dict[str, Any] = {}
    for key, value in tree.items():
        if key not in schema:
            continue

        sub_schema = schema[key]
        if not isinstance(sub_schema, Mapping):
            result[key] = value
            continue

        if not isinstance(value, Mapping):
            continue

        pruned = remove_keys_not_in_schema(value, sub_schema)
        if pruned:
            result[key] = pruned

    return result


def sanitize(
    input_tree: Any,
    valid_block_names: Iterable[str],
    valid_element_names: Iterable[str],
) -> dict[str, Any]:
    """
    Prune a raw theme tree down to the keys allowed by the schema.

    Never raises: anything unknown or malformed is omitted.

    Args:
        input_tree: Raw (already migrated) theme tree.
        valid_block_names: Block names known to the registry.
        valid_element_names: Element names allowed under ``elements``.

    Returns:
        A new sanitized tree.
    """
    if not isinstance(input_tree, Mapping):
        return {}

    output = {key: value for key, value in input_tree.items() if key in VALID_TOP_LEVEL_KEYS}
    schema = build_schema(valid_block_names, valid_element_names)

    for subtree in ("styles", "settings"):
        if subtree not in output:
            continue

        value = output[subtree]
        if not isinstance(value, Mapping):
            del output[subtree]
            continue

        pruned = remove_keys_not_in_schema(value, schema[subtree])
        if pruned:
            output[subtree] = pruned
        else:
            del output[subtree]

    return output
