"""Unit tests for the module registry and its JSON loaders."""

import json

import pytest

from buildplan.descriptors import ModuleDescriptor, PCHUsageMode, TargetKind
from buildplan.registry import ModuleRegistry, RegistryError, list_samples, load_registry, load_sample, load_target


def _write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestModuleRegistry:
    """In-memory registry behaviour."""

    def test_declaration_order(self):
        registry = ModuleRegistry([ModuleDescriptor("B"), ModuleDescriptor("A"), ModuleDescriptor("C")])
        assert registry.names() == ["B", "A", "C"]
        assert registry.index_of("A") == 1
        assert len(registry) == 3

    def test_duplicate_name_raises(self):
        with pytest.raises(ValueError, match="Duplicate module name: A"):
            ModuleRegistry([ModuleDescriptor("A"), ModuleDescriptor("A")])

    def test_lookup(self):
        registry = ModuleRegistry([ModuleDescriptor("Core")])
        assert "Core" in registry
        assert "Net" not in registry
        assert registry.get("Net") is None
        assert registry["Core"].name == "Core"

    def test_unknown_lookups_raise_key_error(self):
        registry = ModuleRegistry([])
        with pytest.raises(KeyError, match="Unknown module"):
            registry["Core"]
        with pytest.raises(KeyError, match="Unknown module"):
            registry.index_of("Core")

    def test_from_dicts_wraps_errors(self):
        """Malformed descriptor data surfaces as RegistryError."""
        with pytest.raises(RegistryError):
            ModuleRegistry.from_dicts([{"name": "A"}, {"name": "A"}])
        with pytest.raises(RegistryError):
            ModuleRegistry.from_dicts([{"public": ["Core"]}])

    def test_to_dict(self):
        registry = ModuleRegistry.from_dicts([{"name": "Core"}, {"name": "Net", "public": ["Core"]}])
        data = registry.to_dict()
        assert [m["name"] for m in data["modules"]] == ["Core", "Net"]
        assert ModuleRegistry.from_dicts(data["modules"]).names() == ["Core", "Net"]


class TestLoadRegistry:
    """Loading registries from files and directories."""

    def test_load_single_file(self, tmp_path):
        path = _write_json(tmp_path / "modules.json", {"modules": [{"name": "Core"}, {"name": "Net", "public": ["Core"]}]})
        registry = load_registry(path)
        assert registry.names() == ["Core", "Net"]

    def test_load_directory_sorted_by_filename(self, tmp_path):
        """Directory loading reads files in sorted filename order."""
        _write_json(tmp_path / "b_net.json", {"name": "Net", "public": ["Core"]})
        _write_json(tmp_path / "a_core.json", {"name": "Core"})
        _write_json(tmp_path / "c_more.json", [{"name": "Http"}, {"name": "Json"}])
        (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")
        registry = load_registry(tmp_path)
        assert registry.names() == ["Core", "Net", "Http", "Json"]

    def test_missing_path_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Module registry not found"):
            load_registry(tmp_path / "missing.json")

    def test_invalid_json_raises(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(RegistryError, match="Invalid JSON"):
            load_registry(path)

    def test_wrong_shape_raises(self, tmp_path):
        path = _write_json(tmp_path / "modules.json", {"modules": "Core"})
        with pytest.raises(RegistryError, match="expected a module object"):
            load_registry(path)

    def test_duplicates_across_files_raise(self, tmp_path):
        _write_json(tmp_path / "a.json", {"name": "Core"})
        _write_json(tmp_path / "b.json", {"name": "Core"})
        with pytest.raises(RegistryError, match="Duplicate module name"):
            load_registry(tmp_path)


class TestLoadTarget:
    def test_load_target(self, tmp_path):
        path = _write_json(tmp_path / "game.json", {"name": "Game", "kind": "Executable", "root_modules": ["App"]})
        target = load_target(path)
        assert target.name == "Game"
        assert target.root_modules == ("App",)

    def test_missing_target_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Target descriptor not found"):
            load_target(tmp_path / "nope.json")

    def test_malformed_target_raises(self, tmp_path):
        path = _write_json(tmp_path / "game.json", {"name": "Game"})
        with pytest.raises(RegistryError, match="game.json"):
            load_target(path)


class TestSamples:
    """Packaged sample projects."""

    def test_list_samples(self):
        samples = list_samples()
        assert "grip" in samples
        assert "steam_demo" in samples

    def test_load_grip_sample(self):
        target, registry = load_sample("grip")
        assert target.name == "Grip"
        assert target.kind is TargetKind.EXECUTABLE
        assert target.root_modules == ("Grip",)
        grip = registry["Grip"]
        assert grip.pch_mode is PCHUsageMode.USE_SHARED_OR_EXPLICIT
        assert "Steamworks" not in grip.public_dependencies
        assert len(grip.public_dependencies) == 14
        assert len(grip.private_dependencies) == 6

    def test_unknown_sample_raises(self):
        with pytest.raises(FileNotFoundError, match="Unknown sample"):
            load_sample("does_not_exist")
