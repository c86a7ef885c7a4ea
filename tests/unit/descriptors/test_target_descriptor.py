"""Unit tests for the target descriptor model."""

import pytest

from buildplan.descriptors import BuildSettingsVersion, TargetDescriptor, TargetKind


class TestTargetDescriptor:
    def test_from_dict(self):
        target = TargetDescriptor.from_dict(
            {"name": "Grip", "kind": "Executable", "build_settings_version": "V2", "root_modules": ["Grip"]}
        )
        assert target.name == "Grip"
        assert target.kind is TargetKind.EXECUTABLE
        assert target.build_settings_version is BuildSettingsVersion.V2
        assert target.root_modules == ("Grip",)

    def test_defaults(self):
        target = TargetDescriptor.from_dict({"name": "Tool", "root_modules": []})
        assert target.kind is TargetKind.EXECUTABLE
        assert target.build_settings_version is BuildSettingsVersion.LATEST
        assert target.root_modules == ()

    def test_duplicate_roots_rejected(self):
        with pytest.raises(ValueError, match="duplicate root modules: A"):
            TargetDescriptor(name="T", root_modules=("A", "B", "A"))

    def test_missing_roots_raises(self):
        with pytest.raises(ValueError, match="Missing required field"):
            TargetDescriptor.from_dict({"name": "T"})

    def test_bad_roots_raise(self):
        with pytest.raises(ValueError, match="must be a list of module names"):
            TargetDescriptor.from_dict({"name": "T", "root_modules": "App"})

    def test_unknown_kind_raises(self):
        with pytest.raises(ValueError, match="Unknown target kind"):
            TargetDescriptor.from_dict({"name": "T", "kind": "Firmware", "root_modules": []})

    def test_unknown_settings_version_raises(self):
        with pytest.raises(ValueError, match="Unknown build settings version"):
            TargetDescriptor.from_dict({"name": "T", "build_settings_version": "V9", "root_modules": []})

    def test_kind_case_insensitive(self):
        assert TargetKind.from_string("testharness") is TargetKind.TEST_HARNESS

    @pytest.mark.parametrize("data", [["Core"], "Game", None])
    def test_non_object_descriptor_raises_value_error(self, data):
        with pytest.raises(ValueError, match="must be a JSON object"):
            TargetDescriptor.from_dict(data)

    def test_non_string_kind_raises_value_error(self):
        with pytest.raises(ValueError, match="Target kind must be a string"):
            TargetDescriptor.from_dict({"name": "T", "kind": None, "root_modules": []})

    def test_non_string_settings_version_raises_value_error(self):
        with pytest.raises(ValueError, match="Build settings version must be a string"):
            TargetDescriptor.from_dict({"name": "T", "build_settings_version": 2, "root_modules": []})

    def test_non_string_name_raises_value_error(self):
        with pytest.raises(ValueError, match="Target name must be a non-empty string"):
            TargetDescriptor.from_dict({"name": None, "root_modules": []})

    def test_to_dict(self):
        target = TargetDescriptor(name="Lib", kind=TargetKind.SHARED_LIBRARY, root_modules=("Core", "Net"))
        assert target.to_dict() == {
            "name": "Lib",
            "kind": "SharedLibrary",
            "build_settings_version": "Latest",
            "root_modules": ["Core", "Net"],
        }
