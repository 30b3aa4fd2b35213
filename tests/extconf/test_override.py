"""Tests for local override files."""

import textwrap

from extconf.override import apply_override, load_override


def write_ini(path, content):
    path.write_text(textwrap.dedent(content))
    return path


class TestLoadOverride:
    """Test reading <name>.ini files."""

    def test_missing_file_is_none(self, tmp_path):
        assert load_override(tmp_path / "alpha.ini") is None

    def test_top_level_sections_and_dotted_keys(self, tmp_path):
        path = write_ini(tmp_path / "alpha.ini", """\
            ; local settings
            enabled = true
            templates = "views/"
            modules.navigation.priority = 10

            [private]
            # overrides the graph value
            setting = overridden ; trailing comment
            """)

        assert load_override(path) == {
            "enabled": "true",
            "templates": "views/",
            "modules": {"navigation": {"priority": "10"}},
            "private": {"setting": "overridden"},
        }

    def test_keys_are_case_sensitive(self, tmp_path):
        path = write_ini(tmp_path / "alpha.ini", """\
            helperEvents = onSave
            """)
        assert load_override(path) == {"helperEvents": "onSave"}

    def test_dotted_section_names_nest(self, tmp_path):
        path = write_ini(tmp_path / "alpha.ini", """\
            [private.db]
            host = localhost
            """)
        assert load_override(path) == {"private": {"db": {"host": "localhost"}}}

    def test_malformed_file_is_ignored(self, tmp_path):
        path = write_ini(tmp_path / "alpha.ini", """\
            enabled = true
            this line has no delimiter
            """)
        assert load_override(path) is None

    def test_repeated_key_keeps_last_value(self, tmp_path):
        path = write_ini(tmp_path / "alpha.ini", """\
            enabled = true
            enabled = false
            """)
        assert load_override(path) == {"enabled": "false"}

    def test_array_keys_collect_into_lists(self, tmp_path):
        path = write_ini(tmp_path / "alpha.ini", """\
            list[] = a
            list[] = b
            modules.navigation.tabs[] = one

            [private.db]
            hosts[] = primary
            hosts[] = "replica"
            """)

        assert load_override(path) == {
            "list": ["a", "b"],
            "modules": {"navigation": {"tabs": ["one"]}},
            "private": {"db": {"hosts": ["primary", "replica"]}},
        }

    def test_repeated_sections_merge(self, tmp_path):
        path = write_ini(tmp_path / "alpha.ini", """\
            [private]
            a = 1

            [private]
            a = 2
            b = 3
            """)
        assert load_override(path) == {"private": {"a": "2", "b": "3"}}


class TestApplyOverride:
    """Test merging an override over the graph config."""

    def test_override_wins_and_merges_nested(self):
        config = {"enabled": False, "private": {"a": "1", "b": "2"}}
        override = {"private": {"b": "3"}, "enabled": "true"}

        merged = apply_override(config, override)

        assert merged == {"enabled": "true", "private": {"a": "1", "b": "3"}}

    def test_inputs_are_not_modified(self):
        config = {"private": {"a": "1"}}
        override = {"private": {"a": "2"}}

        apply_override(config, override)

        assert config == {"private": {"a": "1"}}
        assert override == {"private": {"a": "2"}}

    def test_no_override_returns_copy(self):
        config = {"private": {"a": "1"}}
        merged = apply_override(config, None)

        assert merged == config
        merged["private"]["a"] = "changed"
        assert config["private"]["a"] == "1"
