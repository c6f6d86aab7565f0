"""Tests for CSS safety checks."""

from __future__ import annotations

import pytest


class TestSafeDeclaration:
    @pytest.mark.parametrize(
        "name,value",
        [
            ("color", "red"),
            ("color", "var(--wp--preset--color--red)"),
            ("width", "calc(100% - 2em)"),
            ("background", "linear-gradient(135deg, rgba(6, 147, 227, 1) 0%, rgb(155, 81, 224) 100%)"),
            ("background-image", "url('https://example.com/a.png')"),
            ("filter", "url('#wp-duotone-blue-red')"),
            ("font-size", 16),
            ("width", "calc((100% - 2em) / 2)"),
            ("margin", "calc(var(--wp--style--block-gap) * -1)"),
            ("background", "repeating-radial-gradient(circle, hsla(0, 0%, 0%, .5), transparent 10px)"),
            ("background-image", "url(data:image/gif,AAAA)"),
            ("font-family", '"Helvetica Neue", sans-serif'),
        ],
    )
    def test_safe(self, name, value):
        from themejson.core.safecss import is_safe_css_declaration

        assert is_safe_css_declaration(name, value) is True

    @pytest.mark.parametrize(
        "name,value",
        [
            ("position", "fixed"),
            ("color", "red; } body { display: none"),
            ("color", "red /* comment */"),
            ("width", "expression(alert(1))"),
            ("background-image", "url(javascript:alert(1))"),
            ("background-color", "url(https://example.com)"),
            ("color", ""),
            ("color", "a\\62 c"),
            ("color", "calc(1px + expression(alert(1)))"),
            ("border-color", "calc(0px + url(javascript:alert(1)))"),
            ("background-image", "calc(0px + url('https://example.com/a.png'))"),
            ("background-image", "url('javascript:alert(1)')"),
            ("background-image", "url('')"),
            ("color", "rgb(255, 0, 0)"),
            ("color", "linear-gradient(red, blue)"),
            ("width", "(100% - 2em)"),
            ("width", "calc(100% - 2em"),
            ("font-family", "'Helvetica"),
            ("color", "red } body { color: blue"),
            ("color", "a=b"),
            ("color", "[red]"),
        ],
    )
    def test_unsafe(self, name, value):
        from themejson.core.safecss import is_safe_css_declaration

        assert is_safe_css_declaration(name, value) is False


class TestSafePreset:
    def test_safe_preset(self):
        from themejson.core.safecss import is_safe_preset

        preset = {"name": "Red", "slug": "red", "color": "#f00"}
        assert is_safe_preset(preset, "#f00", ("color", "background-color")) is True

    @pytest.mark.parametrize(
        "preset",
        [
            {"name": "<b>Red</b>", "slug": "red"},
            {"name": "Red", "slug": "red one"},
            {"slug": "red"},
        ],
    )
    def test_unsafe_name_or_slug(self, preset):
        from themejson.core.safecss import is_safe_preset

        assert is_safe_preset(preset, "#f00", ("color",)) is False

    def test_custom_predicate(self):
        from themejson.core.safecss import is_safe_preset

        preset = {"name": "Red", "slug": "red"}
        assert is_safe_preset(preset, "#f00", ("color",), lambda name, value: False) is False
