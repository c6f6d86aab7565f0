"""
Migration of older theme tree versions to the current schema.

Version 1 trees used ``custom*`` flags for a few settings that version 2
renamed. Trees without a ``version`` key are treated as current.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping, MutableMapping
from typing import Any

from .paths import get, set_path, unset_path
from .schema import LATEST_SCHEMA

logger = logging.getLogger(__name__)

V1_TO_V2_RENAMED_PATHS: dict[str, str] = {
    "border.customRadius": "border.radius",
    "spacing.customMargin": "spacing.margin",
    "spacing.customPadding": "spacing.padding",
    "typography.customLineHeight": "typography.lineHeight",
}


def migrate(theme_json: Any) -> Any:
    """Return ``theme_json`` upgraded to the latest schema version.

    Non-mapping input is returned unchanged; the sanitizer discards it.
    """
    if not isinstance(theme_json, Mapping):
        return theme_json

    version = theme_json.get("version")
    # True and 1.0 compare equal to 1 but are not v1 trees.
    if type(version) is int and version == 1:
        logger.debug("Migrating theme tree from schema v1 to v%d", LATEST_SCHEMA)
        return _migrate_v1_to_v2(theme_json)

    return theme_json


def _migrate_v1_to_v2(old: Mapping[str, Any]) -> dict[str, Any]:
    new = copy.deepcopy(dict(old))
    if isinstance(new.get("settings"), MutableMapping):
        _rename_paths(new["settings"], V1_TO_V2_RENAMED_PATHS)
    new["version"] = 2
    return new


def _rename_paths(settings: MutableMapping[str, Any], paths_to_rename: dict[str, str]) -> None:
    _rename_settings(settings, paths_to_rename)

    blocks = settings.get("blocks")
    if isinstance(blocks, MutableMapping):
        for block_settings in blocks.values():
            if isinstance(block_settings, MutableMapping):
                _rename_settings(block_settings, paths_to_rename)


def _rename_settings(settings: MutableMapping[str, Any], paths_to_rename: dict[str, str]) -> None:
    for original, renamed in paths_to_rename.items():
        original_path = original.split(".")
        current_value = get(settings, original_path)
        if current_value is not None:
            set_path(settings, renamed.split("."), current_value)
            unset_path(settings, original_path)
