"""
Preset pipeline.

Presets bootstrap design-system values (colors, gradients, duotone
filters, font sizes, font families). Each category is described by a
``PresetMetadata`` entry; the pipeline reads presets per origin, derives
slugs and values, and renders CSS custom properties and utility classes.

Inside a compiled tree every preset collection is keyed by origin::

    {"color": {"palette": {"default": [...], "theme": [...], "custom": [...]}}}
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, MutableMapping
from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .duotone import render_duotone_filter_preset
from .nodes import ROOT_BLOCK_SELECTOR, VisitationNode
from .paths import get, set_path
from .selectors import append_to_selector
from .strings import to_kebab_case
from .styles import Declaration, format_css_value, to_ruleset


class Origin(StrEnum):
    """Provenance of a piece of configuration, least to most specific."""

    DEFAULT = "default"
    THEME = "theme"
    CUSTOM = "custom"


VALID_ORIGINS: tuple[str, ...] = tuple(origin.value for origin in Origin)

SLUG_PLACEHOLDER = "$slug"


# =============================================================================
# Metadata
# =============================================================================


class ValueKey(BaseModel):
    """Preset value read from a key of the preset entry."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["key"] = "key"
    key: str


class ValueFunc(BaseModel):
    """Preset value computed from the whole preset entry."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["func"] = "func"
    func: Callable[[Mapping[str, Any]], Any]


ValueSource = Annotated[ValueKey | ValueFunc, Field(discriminator="kind")]


class PresetMetadata(BaseModel):
    """How one preset category is found, valued and rendered."""

    model_config = ConfigDict(frozen=True)

    path: tuple[str, ...] = Field(description="Location of the presets inside a settings node")
    override: tuple[str, ...] | bool = Field(
        description="Whether theme presets may override default ones with the same slug, "
        "either literally or through the (inverted) setting at this path"
    )
    use_default_names: bool = Field(
        default=False, description="Theme presets inherit the name of same-slug defaults"
    )
    value: ValueSource
    css_vars: str = Field(description="Custom property template containing $slug")
    classes: dict[str, str] = Field(
        default_factory=dict, description="Class selector template -> CSS property"
    )
    properties: tuple[str, ...] = Field(
        default=(), description="CSS properties the preset value is used for"
    )

    def compute_value(self, preset: Mapping[str, Any]) -> Any:
        """Value of a preset entry, or None when it has none."""
        if isinstance(self.value, ValueKey):
            return preset.get(self.value.key)
        return self.value.func(preset)


PRESETS_METADATA: tuple[PresetMetadata, ...] = (
    PresetMetadata(
        path=("color", "palette"),
        override=("color", "defaultPalette"),
        value=ValueKey(key="color"),
        css_vars="--wp--preset--color--$slug",
        classes={
            ".has-$slug-color": "color",
            ".has-$slug-background-color": "background-color",
            ".has-$slug-border-color": "border-color",
        },
        properties=("color", "background-color", "border-color"),
    ),
    PresetMetadata(
        path=("color", "gradients"),
        override=("color", "defaultGradients"),
        value=ValueKey(key="gradient"),
        css_vars="--wp--preset--gradient--$slug",
        classes={".has-$slug-gradient-background": "background"},
        properties=("background",),
    ),
    PresetMetadata(
        path=("color", "duotone"),
        override=True,
        value=ValueFunc(func=render_duotone_filter_preset),
        css_vars="--wp--preset--duotone--$slug",
        classes={},
        properties=("filter",),
    ),
    PresetMetadata(
        path=("typography", "fontSizes"),
        override=True,
        use_default_names=True,
        value=ValueKey(key="size"),
        css_vars="--wp--preset--font-size--$slug",
        classes={".has-$slug-font-size": "font-size"},
        properties=("font-size",),
    ),
    PresetMetadata(
        path=("typography", "fontFamilies"),
        override=True,
        value=ValueKey(key="fontFamily"),
        css_vars="--wp--preset--font-family--$slug",
        classes={".has-$slug-font-family": "font-family"},
        properties=("font-family",),
    ),
)


# =============================================================================
# Origin keying
# =============================================================================


def rekey_presets_by_origin(
    theme_json: MutableMapping[str, Any],
    nodes: Iterable[VisitationNode],
    origin: str,
    presets_metadata: Iterable[PresetMetadata] = PRESETS_METADATA,
) -> None:
    """Wrap every bare preset list under ``origin``, in place.

    Collections already keyed by origin are left alone.
    """
    presets_metadata = tuple(presets_metadata)
    for node in nodes:
        for metadata in presets_metadata:
            path = node.path + metadata.path
            preset = get(theme_json, path)
            if preset is None:
                continue
            if isinstance(preset, list) or not preset:
                set_path(theme_json, path, {origin: preset})


def ordered_origins(origins: Iterable[str]) -> list[str]:
    """
    Restrict the canonical origin order to the requested origins.

    The caller chooses which origins take part; precedence always
    follows ``default, theme, custom``.

    Examples:
        >>> ordered_origins(["custom", "default"])
        ['default', 'custom']
    """
    requested = set(origins)
    return [origin for origin in VALID_ORIGINS if origin in requested]


def _iter_presets(
    settings: Mapping[str, Any],
    metadata: PresetMetadata,
    origins: Iterable[str],
) -> Iterable[tuple[str, Mapping[str, Any]]]:
    preset_per_origin = get(settings, metadata.path, {})
    if not isinstance(preset_per_origin, Mapping):
        return

    for origin in ordered_origins(origins):
        presets = preset_per_origin.get(origin)
        if not isinstance(presets, list):
            continue
        for preset in presets:
            if isinstance(preset, Mapping) and preset.get("slug") is not None:
                yield origin, preset


def get_settings_slugs(
    settings: Mapping[str, Any],
    metadata: PresetMetadata,
    origins: Iterable[str] = VALID_ORIGINS,
) -> list[str]:
    """Kebab-cased slugs in order of first introduction across origins."""
    slugs: dict[str, None] = {}
    for _origin, preset in _iter_presets(settings, metadata, origins):
        slugs.setdefault(to_kebab_case(preset["slug"]))
    return list(slugs)


def get_settings_values_by_slug(
    settings: Mapping[str, Any],
    metadata: PresetMetadata,
    origins: Iterable[str] = VALID_ORIGINS,
) -> dict[str, Any]:
    """
    Preset values keyed by kebab-cased slug.

    A later origin overwrites the value of an earlier one for the same
    slug, so ``custom`` wins over ``theme`` which wins over ``default``.
    Entries without a value are skipped.
    """
    result: dict[str, Any] = {}
    for _origin, preset in _iter_presets(settings, metadata, origins):
        value = metadata.compute_value(preset)
        if value is None:
            continue
        result[to_kebab_case(preset["slug"])] = value
    return result


def replace_slug_in_string(template: str, slug: str) -> str:
    """
    Substitute the literal ``$slug`` token.

    Examples:
        >>> replace_slug_in_string("--wp--preset--color--$slug", "red")
        '--wp--preset--color--red'
    """
    return template.replace(SLUG_PLACEHOLDER, slug)


# =============================================================================
# CSS output
# =============================================================================


def compute_preset_vars(
    settings: Mapping[str, Any],
    origins: Iterable[str] = VALID_ORIGINS,
) -> list[Declaration]:
    """Custom property declarations for every preset of a settings node."""
    origins = tuple(origins)
    declarations: list[Declaration] = []
    for metadata in PRESETS_METADATA:
        values_by_slug = get_settings_values_by_slug(settings, metadata, origins)
        for slug, value in values_by_slug.items():
            declarations.append(
                Declaration(
                    name=replace_slug_in_string(metadata.css_vars, slug),
                    value=format_css_value(value),
                )
            )
    return declarations


def compute_preset_classes(
    settings: Mapping[str, Any],
    selector: str,
    origins: Iterable[str] = VALID_ORIGINS,
) -> str:
    """
    Utility class rulesets for every preset of a settings node.

    Classes under the root selector are not prefixed, to keep their
    specificity low. Values use ``!important`` so preset classes win over
    block-level style declarations.
    """
    if selector == ROOT_BLOCK_SELECTOR:
        selector = ""

    origins = tuple(origins)
    stylesheet = ""
    for metadata in PRESETS_METADATA:
        slugs = get_settings_slugs(settings, metadata, origins)
        for class_template, css_property in metadata.classes.items():
            for slug in slugs:
                css_var = replace_slug_in_string(metadata.css_vars, slug)
                class_name = replace_slug_in_string(class_template, slug)
                stylesheet += to_ruleset(
                    append_to_selector(selector, class_name),
                    [Declaration(name=css_property, value=f"var({css_var}) !important")],
                )
    return stylesheet


def flatten_tree(tree: Mapping[str, Any], prefix: str = "", token: str = "--") -> dict[str, Any]:
    """
    Flatten a nested tree into ``token``-joined kebab-case keys.

    Examples:
        >>> flatten_tree({"some/property": "v", "nestedProperty": {"sub-property": "w"}})
        {'some-property': 'v', 'nested-property--sub-property': 'w'}
    """
    result: dict[str, Any] = {}
    for key, value in tree.items():
        new_key = prefix + to_kebab_case(key).replace("/", "-")
        if isinstance(value, Mapping):
            result.update(flatten_tree(value, new_key + token, token))
        else:
            result[new_key] = value
    return result


def compute_theme_vars(settings: Mapping[str, Any]) -> list[Declaration]:
    """``--wp--custom--*`` declarations for the ``custom`` settings subtree."""
    custom_values = get(settings, ("custom",), {})
    if not isinstance(custom_values, Mapping):
        return []

    return [
        Declaration(name=f"--wp--custom--{key}", value=format_css_value(value))
        for key, value in flatten_tree(custom_values).items()
        if value is not None
    ]
