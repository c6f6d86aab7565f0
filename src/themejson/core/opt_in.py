"""
Opt-in settings expansion.

``appearanceTools: true`` is a directive: it turns on a fixed set of
settings without touching any of them the tree already sets, and is then
removed from the tree.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping, MutableMapping
from typing import Any

from .paths import lookup, set_path

APPEARANCE_TOOLS_OPT_INS: tuple[tuple[str, str], ...] = (
    ("border", "color"),
    ("border", "radius"),
    ("border", "style"),
    ("border", "width"),
    ("color", "link"),
    ("spacing", "blockGap"),
    ("spacing", "margin"),
    ("spacing", "padding"),
    ("typography", "lineHeight"),
)


def do_opt_in_into_settings(context: MutableMapping[str, Any]) -> None:
    """Enable every opt-in path that is absent from ``context``, in place."""
    for path in APPEARANCE_TOOLS_OPT_INS:
        section = path[0]
        if section in context and not isinstance(context[section], MutableMapping):
            continue
        # Explicit None is a real value (blockGap: null disables block gap).
        if lookup(context, path).is_absent:
            set_path(context, path, True)

    context.pop("appearanceTools", None)


def maybe_opt_in_into_settings(theme_json: Mapping[str, Any]) -> dict[str, Any]:
    """
    Expand ``appearanceTools`` at the root and per block.

    Args:
        theme_json: Sanitized theme tree.

    Returns:
        A new tree; the input is not modified.
    """
    new_theme_json = copy.deepcopy(dict(theme_json))
    settings = new_theme_json.get("settings")
    if not isinstance(settings, MutableMapping):
        return new_theme_json

    if settings.get("appearanceTools") is True:
        do_opt_in_into_settings(settings)

    blocks = settings.get("blocks")
    if isinstance(blocks, Mapping):
        for block in blocks.values():
            if isinstance(block, MutableMapping) and block.get("appearanceTools") is True:
                do_opt_in_into_settings(block)

    return new_theme_json
