"""
Theme tree compiler.

``ThemeJSON`` holds one sanitized theme tree from a single origin and
compiles it into a stylesheet: CSS custom properties, block styles and
preset utility classes. Trees from several origins are combined with
``merge()`` before compiling.
"""

from __future__ import annotations

import copy
import logging
import warnings
from collections.abc import Callable, Iterable, Mapping, MutableMapping
from enum import StrEnum
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .duotone import get_duotone_filter_svg
from .nodes import ROOT_BLOCK_SELECTOR, VisitationNode, get_setting_nodes, get_style_nodes
from .opt_in import maybe_opt_in_into_settings
from .paths import get, set_path
from .presets import (
    PRESETS_METADATA,
    VALID_ORIGINS,
    Origin,
    PresetMetadata,
    compute_preset_classes,
    compute_preset_vars,
    compute_theme_vars,
    ordered_origins,
    rekey_presets_by_origin,
)
from .registry import BlockMetadataCache, get_blocks_metadata_cache
from .safecss import SafetyCheck, is_safe_css_declaration, is_safe_preset
from .schema import ELEMENTS, sanitize
from .schema_migration import migrate as migrate_schema
from .selectors import scope_selector
from .styles import (
    ALIGNMENT_RULES,
    BLOCK_GAP_RULES,
    PROPERTIES_METADATA,
    ROOT_RESET_RULES,
    compute_style_properties,
    to_ruleset,
)

logger = logging.getLogger(__name__)

Migration = Callable[[Any], Any]


class StylesheetType(StrEnum):
    """Sections of a compiled stylesheet, in output order."""

    VARIABLES = "variables"
    STYLES = "styles"
    PRESETS = "presets"


ALL_STYLESHEET_TYPES: tuple[str, ...] = tuple(t.value for t in StylesheetType)

# Deprecated string arguments to get_stylesheet().
_LEGACY_TYPES: dict[str, tuple[str, ...]] = {
    "block_styles": (StylesheetType.STYLES, StylesheetType.PRESETS),
    "css_variables": (StylesheetType.VARIABLES,),
}


class CustomTemplate(BaseModel):
    """A page template declared by the theme."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = ""
    post_types: list[str] = Field(default_factory=lambda: ["page"], alias="postTypes")


class TemplatePart(BaseModel):
    """A template part declared by the theme."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    area: str = ""


_ModelT = TypeVar("_ModelT", bound=BaseModel)


def _build_lenient(
    model: type[_ModelT], item: Mapping[str, Any], keys: tuple[str, ...]
) -> _ModelT:
    """Validate ``keys`` of ``item`` into ``model``, defaulting every field that fails."""
    values = {key: item[key] for key in keys if key in item}
    try:
        return model.model_validate(values)
    except ValidationError as e:
        invalid = {error["loc"][0] for error in e.errors() if error["loc"]}
        logger.debug("Defaulting invalid %s fields: %s", model.__name__, sorted(map(str, invalid)))
        valid = {key: value for key, value in values.items() if key not in invalid}
        return model.model_validate(valid)


def normalize_stylesheet_types(types: str | Iterable[str] | None) -> tuple[str, ...]:
    """Resolve the ``types`` argument of ``get_stylesheet`` to canonical section names."""
    if types is None:
        return ALL_STYLESHEET_TYPES

    if isinstance(types, str):
        warnings.warn(
            "Passing a string as 'types' to get_stylesheet() is deprecated; "
            "pass a list such as ['variables', 'styles', 'presets'] instead",
            DeprecationWarning,
            stacklevel=3,
        )
        return tuple(str(t) for t in _LEGACY_TYPES.get(types, ALL_STYLESHEET_TYPES))

    requested = {str(t) for t in types}
    return tuple(t for t in ALL_STYLESHEET_TYPES if t in requested)


class ThemeJSON:
    """
    A compiled theme tree from one origin.

    Construction migrates, sanitizes and expands the input, then keys
    every preset collection by origin. The tree is read-only afterwards
    except through ``merge()``.

    Example:
        theme = ThemeJSON({"settings": {"color": {"palette": [...]}}}, "theme")
        css = theme.get_stylesheet(["variables", "presets"])
    """

    def __init__(
        self,
        theme_json: Mapping[str, Any] | None = None,
        origin: str = Origin.THEME,
        *,
        blocks_metadata: BlockMetadataCache | None = None,
        migrate: Migration = migrate_schema,
    ) -> None:
        if origin not in VALID_ORIGINS:
            logger.debug("Unknown origin %r, falling back to 'theme'", origin)
            origin = Origin.THEME

        self.origin = str(origin)
        self._blocks_metadata = blocks_metadata or get_blocks_metadata_cache()

        migrated = migrate(copy.deepcopy(theme_json) if theme_json is not None else {})
        sanitized = sanitize(migrated, self._blocks_metadata.block_names(), list(ELEMENTS))
        self._theme_json: dict[str, Any] = maybe_opt_in_into_settings(sanitized)

        rekey_presets_by_origin(self._theme_json, get_setting_nodes(self._theme_json), self.origin)
        logger.debug(
            "Built %s theme tree with sections: %s",
            self.origin,
            ", ".join(self._theme_json) or "(none)",
        )

    # =========================================================================
    # Data access
    # =========================================================================

    def get_settings(self) -> dict[str, Any]:
        """The ``settings`` section, or an empty dict."""
        settings = self._theme_json.get("settings")
        return settings if isinstance(settings, dict) else {}

    def get_raw_data(self) -> dict[str, Any]:
        """The whole compiled tree."""
        return self._theme_json

    def get_custom_templates(self) -> dict[str, CustomTemplate]:
        """Page templates keyed by name. Items without a name are ignored."""
        items = self._theme_json.get("customTemplates")
        if not isinstance(items, list):
            return {}

        templates: dict[str, CustomTemplate] = {}
        for item in items:
            if isinstance(item, Mapping) and isinstance(item.get("name"), str):
                templates[item["name"]] = _build_lenient(
                    CustomTemplate, item, ("title", "postTypes")
                )
        return templates

    def get_template_parts(self) -> dict[str, TemplatePart]:
        """Template parts keyed by name. Items without a name are ignored."""
        items = self._theme_json.get("templateParts")
        if not isinstance(items, list):
            return {}

        parts: dict[str, TemplatePart] = {}
        for item in items:
            if isinstance(item, Mapping) and isinstance(item.get("name"), str):
                parts[item["name"]] = _build_lenient(TemplatePart, item, ("title", "area"))
        return parts

    # =========================================================================
    # Stylesheet
    # =========================================================================

    def get_stylesheet(
        self,
        types: str | Iterable[str] | None = None,
        origins: Iterable[str] = VALID_ORIGINS,
    ) -> str:
        """
        Compile the tree into CSS.

        Args:
            types: Sections to include: ``variables`` (preset and custom
                properties), ``styles`` (block styles), ``presets`` (utility
                classes). All by default. Sections always come out in that
                order.
            origins: Origins whose presets are included.

        Returns:
            Stylesheet text.
        """
        types = normalize_stylesheet_types(types)
        origins = tuple(origins)

        blocks_metadata = self._blocks_metadata.get()
        style_nodes = get_style_nodes(self._theme_json, blocks_metadata)
        setting_nodes = get_setting_nodes(self._theme_json, blocks_metadata)

        stylesheet = ""
        if StylesheetType.VARIABLES in types:
            stylesheet += self._get_css_variables(setting_nodes, origins)
        if StylesheetType.STYLES in types:
            stylesheet += self._get_block_classes(style_nodes)
        if StylesheetType.PRESETS in types:
            stylesheet += self._get_preset_classes(setting_nodes, origins)
        return stylesheet

    def _get_css_variables(self, nodes: list[VisitationNode], origins: tuple[str, ...]) -> str:
        stylesheet = ""
        for node in nodes:
            if node.selector is None:
                continue

            settings = get(self._theme_json, node.path, {})
            declarations = compute_preset_vars(settings, origins) + compute_theme_vars(settings)
            stylesheet += to_ruleset(node.selector, declarations)
        return stylesheet

    def _get_block_classes(self, style_nodes: list[VisitationNode]) -> str:
        block_rules = ""
        settings = self.get_settings()

        for node in style_nodes:
            if node.selector is None:
                continue

            styles = get(self._theme_json, node.path, {})
            declarations = compute_style_properties(styles, settings)

            # Filters apply to the duotone target, not the block itself.
            duotone_declarations = [d for d in declarations if d.name == "filter"]
            declarations = [d for d in declarations if d.name != "filter"]

            is_root = node.selector == ROOT_BLOCK_SELECTOR

            # Before the root ruleset, so a theme margin on body wins.
            if is_root:
                block_rules += ROOT_RESET_RULES

            block_rules += to_ruleset(node.selector, declarations)

            if node.duotone and duotone_declarations:
                block_rules += to_ruleset(
                    scope_selector(node.selector, node.duotone), duotone_declarations
                )

            if is_root:
                block_rules += ALIGNMENT_RULES
                if get(self._theme_json, ("settings", "spacing", "blockGap")) is not None:
                    block_rules += BLOCK_GAP_RULES

        return block_rules

    def _get_preset_classes(self, nodes: list[VisitationNode], origins: tuple[str, ...]) -> str:
        preset_rules = ""
        for node in nodes:
            if node.selector is None:
                continue

            settings = get(self._theme_json, node.path, {})
            preset_rules += compute_preset_classes(settings, node.selector, origins)
        return preset_rules

    def get_svg_filters(self, origins: Iterable[str] = VALID_ORIGINS) -> str:
        """SVG markup defining a filter for every duotone preset."""
        origins = ordered_origins(origins)
        nodes = get_setting_nodes(self._theme_json, self._blocks_metadata.get())

        filters = ""
        for node in nodes:
            duotone_presets = get(self._theme_json, node.path + ("color", "duotone"))
            if not isinstance(duotone_presets, Mapping):
                continue

            for origin in origins:
                presets = duotone_presets.get(origin)
                if not isinstance(presets, list):
                    continue
                for preset in presets:
                    if isinstance(preset, Mapping):
                        filters += get_duotone_filter_svg(preset)
        return filters

    # =========================================================================
    # Merge
    # =========================================================================

    def merge(self, incoming: ThemeJSON) -> None:
        """
        Merge another tree into this one; ``incoming`` wins.

        Mappings merge recursively. ``spacing.units`` and preset lists are
        replaced, never merged item by item. Theme presets whose slug is
        already a default preset are dropped unless the category allows
        overriding defaults.
        """
        incoming_data = incoming.get_raw_data()
        self._theme_json = _replace_recursive(self._theme_json, incoming_data)

        nodes = get_setting_nodes(incoming_data)
        slugs_global = _get_default_slugs(self._theme_json, ("settings",))

        for node in nodes:
            slugs = _merge_slugs(slugs_global, _get_default_slugs(self._theme_json, node.path))

            units_path = node.path + ("spacing", "units")
            units = get(incoming_data, units_path)
            if units is not None:
                set_path(self._theme_json, units_path, copy.deepcopy(units))

            for metadata in PRESETS_METADATA:
                override_preset = _should_override_preset(
                    self._theme_json, node.path, metadata.override
                )
                base_path = node.path + metadata.path

                for origin in VALID_ORIGINS:
                    path = base_path + (origin,)
                    content = get(incoming_data, path)
                    if content is None:
                        continue
                    content = copy.deepcopy(content)

                    if origin == Origin.THEME and metadata.use_default_names:
                        self._apply_default_names(content, base_path)

                    if origin != Origin.THEME or override_preset:
                        set_path(self._theme_json, path, content)
                    else:
                        slugs_for_preset = get(slugs, metadata.path, [])
                        set_path(self._theme_json, path, _filter_slugs(content, slugs_for_preset))

        logger.debug("Merged %s tree into %s tree", incoming.origin, self.origin)

    def _apply_default_names(self, content: Any, base_path: tuple[str, ...]) -> None:
        if not isinstance(content, list):
            return
        for item in content:
            if isinstance(item, MutableMapping) and "name" not in item:
                name = self._get_name_from_defaults(item.get("slug"), base_path)
                if name is not None:
                    item["name"] = name

    def _get_name_from_defaults(self, slug: Any, base_path: tuple[str, ...]) -> Any:
        default_content = get(self._theme_json, base_path + (Origin.DEFAULT.value,))
        if not isinstance(default_content, list):
            return None
        for item in default_content:
            if isinstance(item, Mapping) and item.get("slug") == slug:
                return item.get("name")
        return None

    # =========================================================================
    # Untrusted input
    # =========================================================================

    @staticmethod
    def remove_insecure_properties(
        theme_json: Mapping[str, Any],
        is_safe: SafetyCheck = is_safe_css_declaration,
        *,
        blocks_metadata: BlockMetadataCache | None = None,
        migrate: Migration = migrate_schema,
    ) -> dict[str, Any]:
        """
        Strip styles and presets that fail the CSS safety check.

        Args:
            theme_json: Untrusted raw theme tree.
            is_safe: Predicate over ``(property, value)``.
            blocks_metadata: Block metadata cache, the process-wide one by default.
            migrate: Schema migration applied before sanitizing.

        Returns:
            A sanitized tree containing only safe styles and presets.
        """
        cache = blocks_metadata or get_blocks_metadata_cache()
        metadata = cache.get()

        migrated = migrate(copy.deepcopy(theme_json))
        sanitized_tree = sanitize(migrated, list(metadata), list(ELEMENTS))

        safe: dict[str, Any] = {}
        for node in get_style_nodes(sanitized_tree, metadata):
            node_styles = get(sanitized_tree, node.path, {})
            if not node_styles:
                continue
            output = _remove_insecure_styles(node_styles, is_safe)
            if output:
                set_path(safe, node.path, output)

        for node in get_setting_nodes(sanitized_tree):
            node_settings = get(sanitized_tree, node.path, {})
            if not node_settings:
                continue
            output = _remove_insecure_settings(node_settings, is_safe)
            if output:
                set_path(safe, node.path, output)

        for section in ("styles", "settings"):
            if safe.get(section):
                sanitized_tree[section] = safe[section]
            else:
                sanitized_tree.pop(section, None)

        return sanitized_tree


# =============================================================================
# Helpers
# =============================================================================


def _replace_recursive(base: Mapping[str, Any], incoming: Mapping[str, Any]) -> dict[str, Any]:
    result = copy.deepcopy(dict(base))
    for key, value in incoming.items():
        if isinstance(value, Mapping) and isinstance(result.get(key), Mapping):
            result[key] = _replace_recursive(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def _get_default_slugs(data: Mapping[str, Any], node_path: tuple[str, ...]) -> dict[str, Any]:
    slugs: dict[str, Any] = {}
    for metadata in PRESETS_METADATA:
        presets = get(data, node_path + metadata.path + (Origin.DEFAULT.value,))
        if not isinstance(presets, list):
            continue
        set_path(
            slugs,
            metadata.path,
            [preset.get("slug") if isinstance(preset, Mapping) else None for preset in presets],
        )
    return slugs


def _merge_slugs(first: Mapping[str, Any], second: Mapping[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(dict(first))
    for key, value in second.items():
        existing = merged.get(key)
        if isinstance(existing, Mapping) and isinstance(value, Mapping):
            merged[key] = _merge_slugs(existing, value)
        elif isinstance(existing, list) and isinstance(value, list):
            merged[key] = existing + value
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _should_override_preset(
    theme_json: Mapping[str, Any],
    node_path: tuple[str, ...],
    override: tuple[str, ...] | bool,
) -> bool:
    if isinstance(override, bool):
        return override

    # Showing the defaults means theme presets must not replace them.
    value = get(theme_json, node_path + override)
    if value is not None:
        return not value

    value = get(theme_json, ("settings",) + override)
    if value is not None:
        return not value

    return True


def _filter_slugs(presets: Any, slugs: list[Any]) -> Any:
    if not slugs or not isinstance(presets, list):
        return presets
    return [
        preset
        for preset in presets
        if isinstance(preset, Mapping) and "slug" in preset and preset["slug"] not in slugs
    ]


def _remove_insecure_styles(
    node_styles: Mapping[str, Any], is_safe: SafetyCheck
) -> dict[str, Any]:
    output: dict[str, Any] = {}
    for declaration in compute_style_properties(node_styles):
        if not is_safe(declaration.name, declaration.value):
            continue
        path = PROPERTIES_METADATA[declaration.name]
        # Longhand groups are emitted through their own declarations.
        value = get(node_styles, path, {})
        if not isinstance(value, (Mapping, list)):
            set_path(output, path, value)
    return output


def _remove_insecure_settings(
    node_settings: Mapping[str, Any], is_safe: SafetyCheck
) -> dict[str, Any]:
    output: dict[str, Any] = {}
    for metadata in PRESETS_METADATA:
        presets = get(node_settings, metadata.path)
        if isinstance(presets, list):
            # Not keyed by origin yet.
            safe_presets = _safe_presets(presets, metadata, is_safe)
            if safe_presets:
                set_path(output, metadata.path, safe_presets)
            continue

        for origin in VALID_ORIGINS:
            path_with_origin = metadata.path + (origin,)
            presets = get(node_settings, path_with_origin)
            if not isinstance(presets, list):
                continue
            safe_presets = _safe_presets(presets, metadata, is_safe)
            if safe_presets:
                set_path(output, path_with_origin, safe_presets)
    return output


def _safe_presets(
    presets: list[Any], metadata: PresetMetadata, is_safe: SafetyCheck
) -> list[Any]:
    return [
        preset
        for preset in presets
        if isinstance(preset, Mapping)
        and is_safe_preset(preset, metadata.compute_value(preset), metadata.properties, is_safe)
    ]
