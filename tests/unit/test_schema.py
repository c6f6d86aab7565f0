"""Tests for schema sanitizing, v1 migration and appearanceTools opt-in."""

from __future__ import annotations

import copy

import pytest

BLOCKS = ["core/paragraph", "core/image"]
ELEMENTS = ["link", "h1"]


@pytest.fixture
def raw_tree() -> dict:
    return {
        "version": 2,
        "unknownTopLevel": {"a": 1},
        "customTemplates": [{"name": "blank"}],
        "settings": {
            "color": {
                "palette": [{"slug": "red", "color": "#f00"}],
                "bogus": True,
            },
            "blocks": {
                "core/paragraph": {"typography": {"dropCap": False}},
                "plugin/unknown": {"color": {"custom": False}},
            },
        },
        "styles": {
            "spacing": {"blockGap": "1rem"},
            "elements": {
                "link": {"color": {"text": "blue"}},
                "marquee": {"color": {"text": "red"}},
            },
            "blocks": {
                "core/paragraph": {
                    "spacing": {"blockGap": "2rem", "margin": "0"},
                    "elements": {"link": {"color": {"text": "green"}}},
                },
            },
        },
    }


class TestSanitize:
    """Schema intersection."""

    def test_unknown_top_level_keys_dropped(self, raw_tree):
        from themejson.core.schema import sanitize

        result = sanitize(raw_tree, BLOCKS, ELEMENTS)
        assert "unknownTopLevel" not in result
        assert result["version"] == 2
        assert result["customTemplates"] == [{"name": "blank"}]

    def test_unknown_settings_dropped(self, raw_tree):
        from themejson.core.schema import sanitize

        result = sanitize(raw_tree, BLOCKS, ELEMENTS)
        assert result["settings"]["color"] == {"palette": [{"slug": "red", "color": "#f00"}]}

    def test_unknown_blocks_dropped(self, raw_tree):
        from themejson.core.schema import sanitize

        result = sanitize(raw_tree, BLOCKS, ELEMENTS)
        assert list(result["settings"]["blocks"]) == ["core/paragraph"]

    def test_unknown_elements_dropped(self, raw_tree):
        from themejson.core.schema import sanitize

        result = sanitize(raw_tree, BLOCKS, ELEMENTS)
        assert list(result["styles"]["elements"]) == ["link"]

    def test_block_gap_is_top_level_only(self, raw_tree):
        from themejson.core.schema import sanitize

        result = sanitize(raw_tree, BLOCKS, ELEMENTS)
        assert result["styles"]["spacing"] == {"blockGap": "1rem"}
        assert result["styles"]["blocks"]["core/paragraph"]["spacing"] == {"margin": "0"}
        assert result["styles"]["blocks"]["core/paragraph"]["elements"] == {
            "link": {"color": {"text": "green"}}
        }

    def test_idempotent(self, raw_tree):
        from themejson.core.schema import sanitize

        once = sanitize(raw_tree, BLOCKS, ELEMENTS)
        assert sanitize(once, BLOCKS, ELEMENTS) == once

    def test_does_not_mutate_input(self, raw_tree):
        from themejson.core.schema import sanitize

        before = copy.deepcopy(raw_tree)
        sanitize(raw_tree, BLOCKS, ELEMENTS)
        assert raw_tree == before

    def test_scalar_where_subtree_expected(self):
        from themejson.core.schema import sanitize

        result = sanitize({"settings": {"color": "red"}, "styles": "oops"}, BLOCKS, ELEMENTS)
        assert result == {}

    def test_non_mapping_input(self):
        from themejson.core.schema import sanitize

        assert sanitize(None, BLOCKS, ELEMENTS) == {}
        assert sanitize(["a"], BLOCKS, ELEMENTS) == {}


class TestMigration:
    """v1 to v2 renames."""

    def test_renames_root_and_block_settings(self):
        from themejson.core.schema_migration import migrate

        v1 = {
            "version": 1,
            "settings": {
                "border": {"customRadius": True},
                "spacing": {"customPadding": False, "customMargin": True},
                "blocks": {"core/group": {"typography": {"customLineHeight": True}}},
            },
        }
        result = migrate(v1)

        assert result["version"] == 2
        assert result["settings"]["border"] == {"radius": True}
        assert result["settings"]["spacing"] == {"padding": False, "margin": True}
        assert result["settings"]["blocks"]["core/group"]["typography"] == {"lineHeight": True}

    def test_input_not_mutated(self):
        from themejson.core.schema_migration import migrate

        v1 = {"version": 1, "settings": {"border": {"customRadius": True}}}
        migrate(v1)
        assert v1 == {"version": 1, "settings": {"border": {"customRadius": True}}}

    def test_current_and_missing_versions_untouched(self):
        from themejson.core.schema_migration import migrate

        v2 = {"version": 2, "settings": {"border": {"customRadius": True}}}
        assert migrate(v2) is v2
        unversioned = {"settings": {}}
        assert migrate(unversioned) is unversioned

    @pytest.mark.parametrize("version", [True, 1.0, "1"])
    def test_only_integer_one_is_migrated(self, version):
        from themejson.core.schema_migration import migrate

        tree = {"version": version, "settings": {"border": {"customRadius": True}}}
        assert migrate(tree) is tree



class TestOptIn:
    """appearanceTools expansion."""

    def test_enables_absent_settings(self):
        from themejson.core.opt_in import APPEARANCE_TOOLS_OPT_INS, maybe_opt_in_into_settings
        from themejson.core.paths import get

        result = maybe_opt_in_into_settings({"settings": {"appearanceTools": True}})
        for path in APPEARANCE_TOOLS_OPT_INS:
            assert get(result["settings"], path) is True
        assert "appearanceTools" not in result["settings"]

    def test_preserves_explicit_values(self):
        from themejson.core.opt_in import maybe_opt_in_into_settings

        tree = {
            "settings": {
                "appearanceTools": True,
                "border": {"color": False},
                "spacing": {"blockGap": None},
            }
        }
        result = maybe_opt_in_into_settings(tree)
        assert result["settings"]["border"]["color"] is False
        assert result["settings"]["border"]["radius"] is True
        assert result["settings"]["spacing"]["blockGap"] is None
        assert result["settings"]["spacing"]["margin"] is True

    def test_scalar_sections_left_alone(self):
        from themejson.core.opt_in import maybe_opt_in_into_settings

        result = maybe_opt_in_into_settings(
            {"settings": {"appearanceTools": True, "border": 5, "spacing": None}}
        )
        assert result["settings"]["border"] == 5
        assert result["settings"]["spacing"] is None
        assert result["settings"]["typography"] == {"lineHeight": True}


    def test_strict_boolean(self):
        from themejson.core.opt_in import maybe_opt_in_into_settings

        result = maybe_opt_in_into_settings({"settings": {"appearanceTools": "yes"}})
        assert result == {"settings": {"appearanceTools": "yes"}}

    def test_per_block(self):
        from themejson.core.opt_in import maybe_opt_in_into_settings

        tree = {"settings": {"blocks": {"core/group": {"appearanceTools": True}}}}
        result = maybe_opt_in_into_settings(tree)
        block = result["settings"]["blocks"]["core/group"]
        assert block["border"]["color"] is True
        assert "appearanceTools" not in block
        assert "border" not in result["settings"]
        assert tree == {"settings": {"blocks": {"core/group": {"appearanceTools": True}}}}
