"""Unit tests for the module descriptor model."""

import pytest

from buildplan.descriptors import DependencyEdge, DependencyKind, ModuleDescriptor, PCHUsageMode
from buildplan.environment import Environment
from buildplan.predicates import AllOf, FeatureEnabled, PlatformIn

GRIP = {
    "name": "Grip",
    "pch_mode": "UseExplicitOrSharedPCHs",
    "public": ["Core", "Engine"],
    "private": ["Slate"],
    "conditional": [
        {
            "when": {"all": [{"feature": "GRIP_USE_STEAM"}, {"platform": ["Win64", "Linux", "Mac"]}]},
            "public": ["Steamworks"],
            "dynamic": ["OnlineSubsystemSteam"],
        }
    ],
}

STEAM_CONDITION = AllOf((FeatureEnabled("GRIP_USE_STEAM"), PlatformIn(("Win64", "Linux", "Mac"))))


class TestPCHUsageMode:
    def test_from_string(self):
        assert PCHUsageMode.from_string("UseSharedOrExplicit") is PCHUsageMode.USE_SHARED_OR_EXPLICIT
        assert PCHUsageMode.from_string("none") is PCHUsageMode.NONE

    def test_long_form_aliases(self):
        assert PCHUsageMode.from_string("UseExplicitOrSharedPCHs") is PCHUsageMode.USE_SHARED_OR_EXPLICIT
        assert PCHUsageMode.from_string("NoSharedPCHs") is PCHUsageMode.USE_EXPLICIT
        assert PCHUsageMode.from_string("NoPCHs") is PCHUsageMode.NONE

    def test_unknown_raises(self):
        with pytest.raises(ValueError, match="Unknown precompiled header mode"):
            PCHUsageMode.from_string("Sometimes")


class TestModuleDescriptorParsing:
    def test_from_dict(self):
        module = ModuleDescriptor.from_dict(GRIP)
        assert module.name == "Grip"
        assert module.pch_mode is PCHUsageMode.USE_SHARED_OR_EXPLICIT
        assert module.public_dependencies == ["Core", "Engine"]
        assert module.private_dependencies == ["Slate"]
        assert module.dynamically_loaded_dependencies == []

    def test_edge_declaration_order(self):
        """Unconditional groups come first (public, private, dynamic), then conditional blocks."""
        module = ModuleDescriptor.from_dict(GRIP)
        assert [(e.name, e.kind) for e in module.dependencies] == [
            ("Core", DependencyKind.PUBLIC),
            ("Engine", DependencyKind.PUBLIC),
            ("Slate", DependencyKind.PRIVATE),
            ("Steamworks", DependencyKind.PUBLIC),
            ("OnlineSubsystemSteam", DependencyKind.DYNAMIC),
        ]

    def test_platform_predicates_grouping(self):
        module = ModuleDescriptor.from_dict(GRIP)
        groups = module.platform_predicates
        assert groups[DependencyKind.PUBLIC] == [(STEAM_CONDITION, ["Steamworks"])]
        assert groups[DependencyKind.DYNAMIC] == [(STEAM_CONDITION, ["OnlineSubsystemSteam"])]
        assert DependencyKind.PRIVATE not in groups

    def test_missing_name_raises(self):
        with pytest.raises(ValueError, match="Missing required field"):
            ModuleDescriptor.from_dict({"public": ["Core"]})

    def test_bad_dependency_list_raises(self):
        with pytest.raises(ValueError, match="must be a list of module names"):
            ModuleDescriptor.from_dict({"name": "X", "public": "Core"})

    def test_conditional_block_needs_when(self):
        with pytest.raises(ValueError, match="'when' predicate"):
            ModuleDescriptor.from_dict({"name": "X", "conditional": [{"public": ["Core"]}]})

    def test_bad_predicate_raises_value_error(self):
        with pytest.raises(ValueError, match="Module 'X'"):
            ModuleDescriptor.from_dict({"name": "X", "conditional": [{"when": {"os": "Linux"}, "public": ["Core"]}]})

    def test_duplicates_are_collapsed(self):
        """Repeated names in one group keep only the first declaration."""
        module = ModuleDescriptor.from_dict({"name": "X", "public": ["Core", "Json", "Core"]})
        assert module.public_dependencies == ["Core", "Json"]

    def test_empty_name_rejected(self):
        with pytest.raises(ValueError, match="must not be empty"):
            ModuleDescriptor(name="")

    @pytest.mark.parametrize("pch_mode", [None, 3, ["UseExplicit"]])
    def test_non_string_pch_mode_raises_value_error(self, pch_mode):
        with pytest.raises(ValueError, match="Precompiled header mode must be a string"):
            ModuleDescriptor.from_dict({"name": "Core", "pch_mode": pch_mode})

    @pytest.mark.parametrize("data", [["Core"], "Core", None])
    def test_non_object_descriptor_raises_value_error(self, data):
        with pytest.raises(ValueError, match="must be a JSON object"):
            ModuleDescriptor.from_dict(data)

    def test_non_string_name_raises_value_error(self):
        with pytest.raises(ValueError, match="Module name must be a non-empty string"):
            ModuleDescriptor.from_dict({"name": 7})

    def test_conditional_must_be_list(self):
        with pytest.raises(ValueError, match="'conditional' must be a list"):
            ModuleDescriptor.from_dict({"name": "X", "conditional": None})

    def test_to_dict_round_trip(self):
        module = ModuleDescriptor.from_dict(GRIP)
        assert ModuleDescriptor.from_dict(module.to_dict()) == module


class TestEffectiveDependencies:
    def test_predicate_true_keeps_gated_edges(self):
        module = ModuleDescriptor.from_dict(GRIP)
        env = Environment.create("Win64", features={"GRIP_USE_STEAM": True})
        names = [e.name for e in module.effective_dependencies(env)]
        assert names == ["Core", "Engine", "Slate", "Steamworks", "OnlineSubsystemSteam"]

    def test_predicate_false_drops_gated_edges(self):
        module = ModuleDescriptor.from_dict(GRIP)
        env = Environment.create("Android", features={"GRIP_USE_STEAM": True})
        names = [e.name for e in module.effective_dependencies(env)]
        assert names == ["Core", "Engine", "Slate"]

    def test_feature_off_drops_gated_edges(self):
        module = ModuleDescriptor.from_dict(GRIP)
        names = [e.name for e in module.effective_dependencies(Environment.create("Win64"))]
        assert "Steamworks" not in names

    def test_edge_is_active(self):
        edge = DependencyEdge("Steamworks", DependencyKind.PUBLIC, PlatformIn(("Mac",)))
        assert edge.is_active(Environment.create("Mac"))
        assert not edge.is_active(Environment.create("Linux"))

    def test_dynamic_kind_not_linked(self):
        assert DependencyKind.PUBLIC.is_linked
        assert DependencyKind.PRIVATE.is_linked
        assert not DependencyKind.DYNAMIC.is_linked
