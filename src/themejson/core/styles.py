"""
Declarations and rulesets.

Turns a style subtree into an ordered list of CSS declarations and
serializes declaration lists into rulesets. Declarations are emitted in
list order and never de-duplicated; later duplicates win in the browser.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from .paths import get

# =============================================================================
# Style property tables
# =============================================================================

# CSS property -> path of its value inside a style node.
PROPERTIES_METADATA: dict[str, tuple[str, ...]] = {
    "background": ("color", "gradient"),
    "background-color": ("color", "background"),
    "border-radius": ("border", "radius"),
    "border-top-left-radius": ("border", "radius", "topLeft"),
    "border-top-right-radius": ("border", "radius", "topRight"),
    "border-bottom-left-radius": ("border", "radius", "bottomLeft"),
    "border-bottom-right-radius": ("border", "radius", "bottomRight"),
    "border-color": ("border", "color"),
    "border-width": ("border", "width"),
    "border-style": ("border", "style"),
    "color": ("color", "text"),
    "font-family": ("typography", "fontFamily"),
    "font-size": ("typography", "fontSize"),
    "font-style": ("typography", "fontStyle"),
    "font-weight": ("typography", "fontWeight"),
    "letter-spacing": ("typography", "letterSpacing"),
    "line-height": ("typography", "lineHeight"),
    "margin": ("spacing", "margin"),
    "margin-top": ("spacing", "margin", "top"),
    "margin-right": ("spacing", "margin", "right"),
    "margin-bottom": ("spacing", "margin", "bottom"),
    "margin-left": ("spacing", "margin", "left"),
    "padding": ("spacing", "padding"),
    "padding-top": ("spacing", "padding", "top"),
    "padding-right": ("spacing", "padding", "right"),
    "padding-bottom": ("spacing", "padding", "bottom"),
    "padding-left": ("spacing", "padding", "left"),
    "--wp--style--block-gap": ("spacing", "blockGap"),
    "text-decoration": ("typography", "textDecoration"),
    "text-transform": ("typography", "textTransform"),
    "filter": ("filter", "duotone"),
}

# Style value path (dotted) -> settings path that must be non-null to emit it.
PROTECTED_PROPERTIES: dict[str, tuple[str, ...]] = {
    "spacing.blockGap": ("spacing", "blockGap"),
}

# =============================================================================
# Fixed root rules
# =============================================================================

ROOT_RESET_RULES = "body { margin: 0; }"

ALIGNMENT_RULES = (
    ".wp-site-blocks > .alignleft { float: left; margin-right: 2em; }"
    ".wp-site-blocks > .alignright { float: right; margin-left: 2em; }"
    ".wp-site-blocks > .aligncenter { justify-content: center; margin-left: auto; margin-right: auto; }"
)

BLOCK_GAP_RULES = (
    ".wp-site-blocks > * { margin-top: 0; margin-bottom: 0; }"
    ".wp-site-blocks > * + * { margin-top: var( --wp--style--block-gap ); }"
)

_VAR_PREFIX = "var:"


@dataclass(frozen=True)
class Declaration:
    """One CSS ``name: value`` pair."""

    name: str
    value: str


def format_css_value(value: Any) -> str:
    """Render a scalar tree value as CSS text."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def get_property_value(styles: Mapping[str, Any], path: Iterable[str]) -> Any:
    """
    Read a style value, expanding ``var:`` references.

    Examples:
        >>> get_property_value({"color": {"text": "var:preset|color|red"}}, ("color", "text"))
        'var(--wp--preset--color--red)'
    """
    value = get(styles, tuple(path), "")
    if not isinstance(value, str) or value == "":
        return value

    if value.startswith(_VAR_PREFIX):
        unwrapped_name = value[len(_VAR_PREFIX) :].replace("|", "--")
        value = f"var(--wp--{unwrapped_name})"

    return value


def _is_missing(value: Any) -> bool:
    # Zero is a valid CSS value; booleans and containers are not.
    return value is None or value == "" or isinstance(value, (bool, Mapping, list, tuple))


def compute_style_properties(
    styles: Any,
    settings: Mapping[str, Any] | None = None,
    properties: Mapping[str, tuple[str, ...]] = PROPERTIES_METADATA,
) -> list[Declaration]:
    """
    Map a style node to its CSS declarations.

    Protected properties are only emitted when the matching settings path
    holds a non-null value. Missing values and longhand groups (a dict such
    as ``{"top": ..., "left": ...}`` under ``margin``) are skipped.

    Args:
        styles: Style node of the theme tree.
        settings: Settings section used to gate protected properties.
        properties: CSS property -> style path table.

    Returns:
        Declarations in table order.
    """
    declarations: list[Declaration] = []
    if not styles or not isinstance(styles, Mapping):
        return declarations

    for css_property, value_path in properties.items():
        value = get_property_value(styles, value_path)

        protected_path = PROTECTED_PROPERTIES.get(".".join(value_path))
        if protected_path is not None and get(settings or {}, protected_path) is None:
            continue

        if _is_missing(value):
            continue

        declarations.append(Declaration(name=css_property, value=format_css_value(value)))

    return declarations


def to_ruleset(selector: str, declarations: Iterable[Declaration]) -> str:
    """
    Serialize declarations into a ruleset.

    Examples:
        >>> to_ruleset("body", [Declaration("color", "red")])
        'body{color: red;}'
        >>> to_ruleset("body", [])
        ''
    """
    declaration_block = "".join(f"{d.name}: {d.value};" for d in declarations)
    if not declaration_block:
        return ""
    return f"{selector}{{{declaration_block}}}"
