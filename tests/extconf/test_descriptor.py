"""Tests for descriptor building and the read-only Descriptor view."""

import os
import pickle

import pytest

from extconf.descriptor import (
    Descriptor,
    build_descriptor,
    merge_trees,
    normalize_enabled,
    normalize_path,
)


class TestNormalizeEnabled:
    @pytest.mark.parametrize("value", [True, "1", "enabled", "true", "on"])
    def test_true_forms(self, value):
        assert normalize_enabled(value) is True

    @pytest.mark.parametrize("value", [False, None, "0", "off", "TRUE", "yes", 1, ""])
    def test_everything_else_is_false(self, value):
        assert normalize_enabled(value) is False


class TestNormalizePath:
    def test_single_trailing_separator(self):
        assert normalize_path("templates") == "templates" + os.sep
        assert normalize_path("templates//") == "templates" + os.sep
        assert normalize_path("templates\\") == "templates" + os.sep
        assert normalize_path("a/b/") == "a/b" + os.sep


class TestMergeTrees:
    def test_nested_merge(self):
        base = {"a": {"x": 1, "y": 2}, "b": [1, 2]}
        merged = merge_trees(base, {"a": {"y": 3}, "b": [9]})
        assert merged == {"a": {"x": 1, "y": 3}, "b": [9]}
        assert base == {"a": {"x": 1, "y": 2}, "b": [1, 2]}

    def test_scalar_replaces_mapping(self):
        assert merge_trees({"a": {"x": 1}}, {"a": "flat"}) == {"a": "flat"}


class TestBuildDescriptor:
    """Test finalizing merged configs."""

    def test_name_falls_back_to_directory(self):
        descriptor = build_descriptor({"enabled": True}, "alpha", "/ext/alpha/")
        assert descriptor["name"] == "alpha"

    def test_configured_name_kept(self):
        descriptor = build_descriptor({"name": "Alpha"}, "alpha", "/ext/alpha/")
        assert descriptor["name"] == "Alpha"

    def test_enabled_is_always_boolean(self):
        assert build_descriptor({"enabled": "on"}, "a", "/a/")["enabled"] is True
        assert build_descriptor({"enabled": "no"}, "a", "/a/")["enabled"] is False
        assert build_descriptor({}, "a", "/a/")["enabled"] is False

    def test_path_keys_normalized(self):
        descriptor = build_descriptor(
            {"templates": "views//", "languages": "lang", "helpers": "h/"}, "a", "/a/"
        )
        assert descriptor["templates"] == "views" + os.sep
        assert descriptor["languages"] == "lang" + os.sep
        assert descriptor["helpers"] == "h" + os.sep

    def test_single_helper_event_becomes_sequence(self):
        descriptor = build_descriptor({"helperEvents": "onSave"}, "a", "/a/")
        assert descriptor["helperEvents"] == ("onSave",)

    def test_path_injected(self):
        descriptor = build_descriptor({}, "alpha", "/ext/alpha/")
        assert descriptor["path"] == "/ext/alpha/"

    def test_input_not_modified(self):
        config = {"enabled": "true", "private": {"a": "1"}}
        build_descriptor(config, "a", "/a/")
        assert config == {"enabled": "true", "private": {"a": "1"}}


class TestDescriptor:
    """Test the read-only descriptor view."""

    def test_item_and_attribute_access(self):
        descriptor = Descriptor({"name": "Alpha", "private": {"db": {"host": "h"}}})
        assert descriptor.name == "Alpha"
        assert descriptor["private"]["db"]["host"] == "h"
        assert descriptor.private.db.host == "h"
        assert isinstance(descriptor.private, Descriptor)

    def test_missing_attribute_is_none(self):
        assert Descriptor({}).templates is None

    def test_lists_come_back_as_tuples(self):
        descriptor = Descriptor({"tags": ["a", {"b": 1}]})
        tags = descriptor["tags"]
        assert isinstance(tags, tuple)
        assert tags[1]["b"] == 1

    def test_read_only(self):
        descriptor = Descriptor({"name": "Alpha"})
        with pytest.raises(AttributeError):
            descriptor.name = "Other"
        with pytest.raises(TypeError):
            descriptor["name"] = "Other"

    def test_source_mutation_does_not_leak(self):
        source = {"private": {"a": "1"}}
        descriptor = Descriptor(source)
        source["private"]["a"] = "2"
        assert descriptor.private.a == "1"

    def test_equality_with_plain_trees(self):
        descriptor = Descriptor({"a": {"b": [1, 2]}})
        assert descriptor == {"a": {"b": [1, 2]}}
        assert descriptor == Descriptor({"a": {"b": [1, 2]}})
        assert descriptor != {"a": {}}

    def test_merged_returns_new_descriptor(self):
        descriptor = Descriptor({"name": "Alpha", "modules": {"feed": {"priority": "3"}}})
        merged = descriptor.merged(descriptor.modules.feed)

        assert merged["priority"] == "3"
        assert "priority" not in descriptor

    def test_to_dict_is_a_copy(self):
        descriptor = Descriptor({"private": {"a": "1"}})
        data = descriptor.to_dict()
        data["private"]["a"] = "2"
        assert descriptor.private.a == "1"

    def test_pickle_roundtrip(self):
        descriptor = Descriptor({"name": "Alpha", "tags": ["a"]})
        assert pickle.loads(pickle.dumps(descriptor)) == descriptor
