"""
CSS safety filtering for untrusted theme trees.

A declaration is safe when its property is on the allow-list and its
value, tokenized as CSS, holds no blocks or delimiters that could break
out of a declaration. The only functions allowed are ``calc()``,
``var()``, gradients (with ``rgb()``/``hsl()`` color stops) and ``url()``
with a safe protocol on properties that take images.
"""

from __future__ import annotations

import html
import re
from collections.abc import Callable, Iterable, Mapping
from typing import Any

import tinycss2

SafetyCheck = Callable[[str, Any], bool]

SAFE_STYLE_PROPERTIES: frozenset[str] = frozenset(
    {
        "background",
        "background-color",
        "background-image",
        "background-position",
        "background-size",
        "background-repeat",
        "border",
        "border-radius",
        "border-width",
        "border-color",
        "border-style",
        "border-right",
        "border-right-color",
        "border-right-style",
        "border-right-width",
        "border-bottom",
        "border-bottom-color",
        "border-bottom-style",
        "border-bottom-width",
        "border-left",
        "border-left-color",
        "border-left-style",
        "border-left-width",
        "border-top",
        "border-top-color",
        "border-top-style",
        "border-top-width",
        "border-top-left-radius",
        "border-top-right-radius",
        "border-bottom-left-radius",
        "border-bottom-right-radius",
        "border-spacing",
        "border-collapse",
        "caption-side",
        "columns",
        "column-count",
        "column-fill",
        "column-gap",
        "column-rule",
        "column-span",
        "column-width",
        "color",
        "filter",
        "font",
        "font-family",
        "font-size",
        "font-style",
        "font-variant",
        "font-weight",
        "letter-spacing",
        "line-height",
        "text-align",
        "text-decoration",
        "text-indent",
        "text-transform",
        "height",
        "min-height",
        "max-height",
        "width",
        "min-width",
        "max-width",
        "margin",
        "margin-right",
        "margin-bottom",
        "margin-left",
        "margin-top",
        "padding",
        "padding-right",
        "padding-bottom",
        "padding-left",
        "padding-top",
        "flex",
        "flex-basis",
        "flex-direction",
        "flex-flow",
        "flex-grow",
        "flex-shrink",
        "gap",
        "row-gap",
        "grid-template-columns",
        "grid-auto-flow",
        "direction",
        "float",
        "list-style-type",
        "vertical-align",
        "--wp--style--block-gap",
    }
)

# Properties whose values may contain url().
URL_PROPERTIES: frozenset[str] = frozenset(
    {
        "background",
        "background-image",
        "filter",
    }
)

GRADIENT_PROPERTIES: frozenset[str] = frozenset({"background", "background-image"})

ALLOWED_PROTOCOLS: tuple[str, ...] = ("http", "https", "data")

_MATH_FUNCTIONS = frozenset({"calc", "var"})
_GRADIENT_FUNCTIONS = frozenset(
    f"{prefix}{kind}-gradient"
    for prefix in ("", "repeating-")
    for kind in ("linear", "radial", "conic")
)
_COLOR_FUNCTIONS = frozenset({"rgb", "rgba", "hsl", "hsla"})
_UNSAFE_DELIMITERS = frozenset({"&", "=", "\\", "}"})
_UNSAFE_BLOCKS = frozenset({"[] block", "{} block", "error"})
_SCHEME_RE = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.-]*):")
_HTML_CLASS_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def _is_safe_url(url: str) -> bool:
    url = url.strip()
    if not url:
        return False
    match = _SCHEME_RE.match(url)
    if not match:
        return True
    return match.group(1).lower() in ALLOWED_PROTOCOLS


def _url_function_target(function: Any) -> str | None:
    """The URL of a quoted ``url("...")``, or None if it holds anything else."""
    arguments = [token for token in function.arguments if token.type not in ("whitespace", "comment")]
    if len(arguments) != 1 or arguments[0].type != "string":
        return None
    return arguments[0].value


def _are_safe_tokens(
    tokens: Iterable[Any],
    property_name: str,
    *,
    in_calc: bool = False,
    in_gradient: bool = False,
) -> bool:
    for token in tokens:
        if token.type == "url":
            if in_calc or property_name not in URL_PROPERTIES or not _is_safe_url(token.value):
                return False

        elif token.type == "function":
            name = token.lower_name
            if name == "url":
                url = _url_function_target(token)
                if in_calc or property_name not in URL_PROPERTIES or url is None or not _is_safe_url(url):
                    return False
            elif name in _MATH_FUNCTIONS:
                if not _are_safe_tokens(
                    token.arguments, property_name, in_calc=True, in_gradient=in_gradient
                ):
                    return False
            elif name in _GRADIENT_FUNCTIONS and property_name in GRADIENT_PROPERTIES and not in_calc:
                if not _are_safe_tokens(token.arguments, property_name, in_gradient=True):
                    return False
            elif name in _COLOR_FUNCTIONS and in_gradient:
                if not _are_safe_tokens(
                    token.arguments, property_name, in_calc=in_calc, in_gradient=True
                ):
                    return False
            else:
                return False

        elif token.type == "() block":
            # Parentheses are only allowed for grouping inside calc().
            if not in_calc or not _are_safe_tokens(
                token.content, property_name, in_calc=True, in_gradient=in_gradient
            ):
                return False

        elif token.type in _UNSAFE_BLOCKS:
            return False

        elif token.type == "literal" and token.value in _UNSAFE_DELIMITERS:
            return False

    return True


def is_safe_css_declaration(property_name: str, property_value: Any) -> bool:
    """
    Check a single ``property: value`` declaration.

    Examples:
        >>> is_safe_css_declaration("color", "red")
        True
        >>> is_safe_css_declaration("color", "red; } body { display: none")
        False
        >>> is_safe_css_declaration("background", "linear-gradient(red, blue)")
        True
        >>> is_safe_css_declaration("color", "calc(1px + expression(alert(1)))")
        False
    """
    if property_name not in SAFE_STYLE_PROPERTIES:
        return False

    value = str(property_value).replace("\n", "").replace("\r", "").replace("\t", "").strip()
    # Escapes and comments are resolved by the tokenizer, so reject them up front.
    if not value or ";" in value or "\\" in value or "/*" in value:
        return False

    # An unclosed string, url or block swallows the trailing terminator.
    tokens = tinycss2.parse_component_value_list(f"{value};")
    if not tokens or tokens[-1].type != "literal" or tokens[-1].value != ";":
        return False
    return _are_safe_tokens(tokens[:-1], property_name)


def is_safe_html_text(value: Any) -> bool:
    """True when ``value`` is a string that HTML escaping leaves unchanged."""
    return isinstance(value, str) and html.escape(value, quote=True) == value


def is_safe_html_class(value: Any) -> bool:
    """True when ``value`` is usable as an HTML class name as-is."""
    return isinstance(value, str) and bool(_HTML_CLASS_RE.match(value))


def is_safe_preset(
    preset: Mapping[str, Any],
    value: Any,
    properties: tuple[str, ...],
    is_safe: SafetyCheck = is_safe_css_declaration,
) -> bool:
    """A preset is safe when its name and slug need no escaping and its value
    passes ``is_safe`` for every property it is used for."""
    if not is_safe_html_text(preset.get("name")) or not is_safe_html_class(preset.get("slug")):
        return False
    return all(is_safe(css_property, value) for css_property in properties)
