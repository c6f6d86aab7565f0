"""Tests for the preset pipeline and duotone filters."""

from __future__ import annotations

import pytest


@pytest.fixture
def palette_settings() -> dict:
    return {
        "color": {
            "palette": {
                "default": [
                    {"slug": "red", "color": "#f00"},
                    {"slug": "blue", "color": "#00f"},
                ],
                "theme": [{"slug": "red", "color": "#e00"}],
                "custom": [{"slug": "green", "color": "#0f0"}],
            }
        }
    }


def _palette_metadata():
    from themejson.core.presets import PRESETS_METADATA

    return next(m for m in PRESETS_METADATA if m.path == ("color", "palette"))


class TestSlugsAndValues:
    def test_slugs_in_first_introduction_order(self, palette_settings):
        from themejson.core.presets import get_settings_slugs

        assert get_settings_slugs(palette_settings, _palette_metadata()) == ["red", "blue", "green"]

    def test_later_origin_wins(self, palette_settings):
        from themejson.core.presets import get_settings_values_by_slug

        values = get_settings_values_by_slug(palette_settings, _palette_metadata())
        assert values == {"red": "#e00", "blue": "#00f", "green": "#0f0"}

    def test_origins_filter_inclusion_not_precedence(self, palette_settings):
        from themejson.core.presets import get_settings_values_by_slug

        values = get_settings_values_by_slug(
            palette_settings, _palette_metadata(), ["theme", "default"]
        )
        assert values == {"red": "#e00", "blue": "#00f"}

    def test_custom_wins_over_default_for_same_slug(self):
        from themejson.core.presets import (
            compute_preset_classes,
            get_settings_slugs,
            get_settings_values_by_slug,
        )

        settings = {
            "color": {
                "palette": {
                    "default": [{"slug": "accent", "color": "#000"}],
                    "custom": [{"slug": "accent", "color": "#abc"}],
                }
            }
        }
        metadata = _palette_metadata()

        assert get_settings_values_by_slug(settings, metadata) == {"accent": "#abc"}
        assert get_settings_values_by_slug(settings, metadata, ["custom", "default"]) == {
            "accent": "#abc"
        }
        assert get_settings_values_by_slug(settings, metadata, ["default"]) == {"accent": "#000"}
        assert get_settings_slugs(settings, metadata) == ["accent"]
        assert compute_preset_classes(settings, "body").count(".has-accent-color{") == 1


    def test_slugs_kebab_cased(self):
        from themejson.core.presets import get_settings_values_by_slug

        settings = {"color": {"palette": {"theme": [{"slug": "Red One", "color": "#f00"}]}}}
        assert get_settings_values_by_slug(settings, _palette_metadata()) == {"red-one": "#f00"}

    def test_entries_without_slug_or_value_skipped(self):
        from themejson.core.presets import get_settings_slugs, get_settings_values_by_slug

        settings = {
            "color": {
                "palette": {"theme": [{"color": "#f00"}, {"slug": "empty"}, "junk"]},
            }
        }
        assert get_settings_values_by_slug(settings, _palette_metadata()) == {}
        assert get_settings_slugs(settings, _palette_metadata()) == ["empty"]


class TestPresetCss:
    def test_preset_vars(self, palette_settings):
        from themejson.core.presets import compute_preset_vars
        from themejson.core.styles import Declaration

        assert compute_preset_vars(palette_settings) == [
            Declaration("--wp--preset--color--red", "#e00"),
            Declaration("--wp--preset--color--blue", "#00f"),
            Declaration("--wp--preset--color--green", "#0f0"),
        ]

    def test_root_classes_unprefixed(self):
        from themejson.core.presets import compute_preset_classes

        settings = {"color": {"palette": {"theme": [{"slug": "red", "color": "#f00"}]}}}
        assert compute_preset_classes(settings, "body") == (
            ".has-red-color{color: var(--wp--preset--color--red) !important;}"
            ".has-red-background-color{background-color: var(--wp--preset--color--red) !important;}"
            ".has-red-border-color{border-color: var(--wp--preset--color--red) !important;}"
        )

    def test_block_classes_prefixed(self):
        from themejson.core.presets import compute_preset_classes

        settings = {"typography": {"fontSizes": {"theme": [{"slug": "large", "size": "2rem"}]}}}
        assert compute_preset_classes(settings, "h1, h2") == (
            "h1.has-large-font-size, h2.has-large-font-size"
            "{font-size: var(--wp--preset--font-size--large) !important;}"
        )

    def test_duotone_has_variable_but_no_class(self):
        from themejson.core.presets import compute_preset_classes, compute_preset_vars
        from themejson.core.styles import Declaration

        settings = {"color": {"duotone": {"theme": [{"slug": "blue-red", "colors": ["#00f", "#f00"]}]}}}
        assert compute_preset_vars(settings) == [
            Declaration("--wp--preset--duotone--blue-red", "url('#wp-duotone-blue-red')")
        ]
        assert compute_preset_classes(settings, "body") == ""

    def test_font_family_value(self):
        from themejson.core.presets import compute_preset_vars
        from themejson.core.styles import Declaration

        settings = {
            "typography": {
                "fontFamilies": {"theme": [{"slug": "system", "fontFamily": "-apple-system, sans-serif"}]}
            }
        }
        assert compute_preset_vars(settings) == [
            Declaration("--wp--preset--font-family--system", "-apple-system, sans-serif")
        ]


class TestRekey:
    def test_bare_lists_wrapped(self):
        from themejson.core.nodes import get_setting_nodes
        from themejson.core.presets import rekey_presets_by_origin

        tree = {
            "settings": {
                "color": {"palette": [{"slug": "red", "color": "#f00"}]},
                "typography": {"fontSizes": {"custom": [{"slug": "s", "size": "1px"}]}},
                "blocks": {"core/paragraph": {"color": {"gradients": []}}},
            }
        }
        rekey_presets_by_origin(tree, get_setting_nodes(tree), "theme")

        assert tree["settings"]["color"]["palette"] == {"theme": [{"slug": "red", "color": "#f00"}]}
        assert tree["settings"]["typography"]["fontSizes"] == {"custom": [{"slug": "s", "size": "1px"}]}
        assert tree["settings"]["blocks"]["core/paragraph"]["color"]["gradients"] == {"theme": []}


class TestCustomVariables:
    def test_flatten_tree(self):
        from themejson.core.presets import flatten_tree

        tree = {"some/property": "v", "nestedProperty": {"sub-property": "w"}}
        assert flatten_tree(tree) == {"some-property": "v", "nested-property--sub-property": "w"}

    def test_theme_vars(self):
        from themejson.core.presets import compute_theme_vars
        from themejson.core.styles import Declaration

        settings = {"custom": {"lineHeight": {"small": 1.2, "large": 1.8}, "fontPrimary": "Inter"}}
        assert compute_theme_vars(settings) == [
            Declaration("--wp--custom--line-height--small", "1.2"),
            Declaration("--wp--custom--line-height--large", "1.8"),
            Declaration("--wp--custom--font-primary", "Inter"),
        ]

    def test_theme_vars_without_custom(self):
        from themejson.core.presets import compute_theme_vars

        assert compute_theme_vars({}) == []
        assert compute_theme_vars({"custom": "flat"}) == []


class TestDuotone:
    def test_parse_color(self):
        from themejson.core.duotone import parse_color

        assert parse_color("#00f") == (0.0, 0.0, 255.0, 1.0)
        assert parse_color("rgb(255, 0, 0)") == (255.0, 0.0, 0.0, 1.0)
        assert parse_color("rgba(0, 0, 255, 0.5)") == (0.0, 0.0, 255.0, 0.5)

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("hsl(0, 100%, 50%)", (255.0, 0.0, 0.0, 1.0)),
            ("red", (255.0, 0.0, 0.0, 1.0)),
            ("White", (255.0, 255.0, 255.0, 1.0)),
            ("transparent", (0.0, 0.0, 0.0, 0.0)),
        ],
    )
    def test_parse_color_functions_and_names(self, value, expected):
        from themejson.core.duotone import parse_color

        assert parse_color(value) == pytest.approx(expected)

    @pytest.mark.parametrize(
        "value",
        ["not a color", "rgb(1.2.3, 0, 0)", "currentColor", "", None, 42, ["#fff"]],
    )
    def test_parse_color_malformed(self, value):
        from themejson.core.duotone import parse_color

        assert parse_color(value) is None

    def test_parse_color_percentages(self):
        from themejson.core.duotone import parse_color

        r, g, b, a = parse_color("rgba(100%, 0%, 0%, 0.25)")
        assert (r, g, b) == pytest.approx((255.0, 0.0, 0.0))
        assert a == pytest.approx(0.25)

    def test_filter_value(self):
        from themejson.core.duotone import render_duotone_filter_preset

        assert render_duotone_filter_preset({"slug": "blue-red"}) == "url('#wp-duotone-blue-red')"

    def test_filter_svg(self):
        from themejson.core.duotone import get_duotone_filter_svg

        svg = get_duotone_filter_svg({"slug": "blue-red", "colors": ["#0000ff", "#ff0000"]})
        assert svg.startswith("<svg")
        assert '<filter id="wp-duotone-blue-red">' in svg
        assert '<feFuncR type="table" tableValues="0 1" />' in svg
        assert '<feFuncG type="table" tableValues="0 0" />' in svg
        assert '<feFuncB type="table" tableValues="1 0" />' in svg
        assert '<feFuncA type="table" tableValues="1 1" />' in svg

    def test_filter_svg_skips_unparseable_colors(self):
        from themejson.core.duotone import get_duotone_filter_svg

        svg = get_duotone_filter_svg({"slug": "x", "colors": ["rgb(1.2.3, 0, 0)", "hsl(0, 0%, 100%)"]})
        assert '<feFuncR type="table" tableValues="1" />' in svg
        assert '<feFuncA type="table" tableValues="1" />' in svg

    def test_svg_filters_with_malformed_color(self, blocks_metadata):
        from themejson.core.theme_json import ThemeJSON

        theme = ThemeJSON(
            {"settings": {"color": {"duotone": [{"slug": "x", "colors": ["rgb(1.2.3, 0, 0)", "#fff"]}]}}},
            blocks_metadata=blocks_metadata,
        )
        svg = theme.get_svg_filters()
        assert '<filter id="wp-duotone-x">' in svg
        assert '<feFuncG type="table" tableValues="1" />' in svg
