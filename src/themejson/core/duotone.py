"""
Duotone filter presets.

A duotone preset maps image luminance onto a gradient between its
colors. It compiles to two artifacts: a ``filter`` value referencing an
SVG filter by id, and the SVG ``<filter>`` markup itself.
"""

from __future__ import annotations

import html
import logging
from collections.abc import Mapping
from typing import Any

import tinycss2.color3

logger = logging.getLogger(__name__)

_LUMINANCE_MATRIX = " .299 .587 .114 0 0 .299 .587 .114 0 0 .299 .587 .114 0 0 .299 .587 .114 0 0 "


def parse_color(value: Any) -> tuple[float, float, float, float] | None:
    """
    Parse a CSS color into 0-255 channels and 0-1 alpha.

    Accepts anything CSS Color Level 3 does: hex, ``rgb()``, ``hsl()`` and
    named colors. Returns ``None`` for non-strings, ``currentColor`` and
    anything that does not parse.

    Examples:
        >>> parse_color("#f00")
        (255.0, 0.0, 0.0, 1.0)
        >>> parse_color("rgba(0, 0, 255, 0.5)")
        (0.0, 0.0, 255.0, 0.5)
        >>> parse_color("rgb(1.2.3, 0, 0)") is None
        True
    """
    if not isinstance(value, str):
        return None

    color = tinycss2.color3.parse_color(value)
    if color is None or isinstance(color, str):
        return None

    return (color.red * 255, color.green * 255, color.blue * 255, color.alpha)


def get_duotone_filter_id(preset: Mapping[str, Any]) -> str:
    """Id of the SVG filter for a preset."""
    return f"wp-duotone-{preset.get('slug', '')}"


def render_duotone_filter_preset(preset: Mapping[str, Any]) -> str:
    """
    CSS ``filter`` value for a duotone preset.

    Examples:
        >>> render_duotone_filter_preset({"slug": "blue-red"})
        "url('#wp-duotone-blue-red')"
    """
    filter_id = html.escape(get_duotone_filter_id(preset))
    return f"url('#{filter_id}')"


def _format_table_value(value: float) -> str:
    return f"{value:.6g}"


def get_duotone_filter_svg(preset: Mapping[str, Any]) -> str:
    """Render the hidden SVG document holding the filter for a preset."""
    tables: dict[str, list[str]] = {"r": [], "g": [], "b": [], "a": []}
    colors = preset.get("colors")
    for color in colors if isinstance(colors, list) else []:
        rgba = parse_color(color)
        if rgba is None:
            logger.debug("Skipping unparseable duotone color %r", color)
            continue
        r, g, b, a = rgba
        tables["r"].append(_format_table_value(r / 255))
        tables["g"].append(_format_table_value(g / 255))
        tables["b"].append(_format_table_value(b / 255))
        tables["a"].append(_format_table_value(a))

    filter_id = html.escape(get_duotone_filter_id(preset), quote=True)
    funcs = "".join(
        f'<feFunc{channel.upper()} type="table" tableValues="{" ".join(values)}" />'
        for channel, values in tables.items()
    )

    return (
        '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 0 0" width="0" height="0" '
        'focusable="false" role="none" '
        'style="visibility: hidden; position: absolute; left: -9999px; overflow: hidden;">'
        "<defs>"
        f'<filter id="{filter_id}">'
        f'<feColorMatrix color-interpolation-filters="sRGB" type="matrix" values="{_LUMINANCE_MATRIX}" />'
        f'<feComponentTransfer color-interpolation-filters="sRGB" >{funcs}</feComponentTransfer>'
        '<feComposite in2="SourceGraphic" operator="in" />'
        "</filter>"
        "</defs>"
        "</svg>"
    )
