"""
Module descriptor model.

A ModuleDescriptor is the declarative record of one compilable unit: its
name, how it uses precompiled headers, and its dependency edges. Every edge
carries a relation kind (public, private or dynamic) and an optional
predicate that gates it on the build environment.

JSON form:
    {
        "name": "Grip",
        "pch_mode": "UseSharedOrExplicit",
        "public": ["Core", "Engine"],
        "private": ["Slate"],
        "dynamic": [],
        "conditional": [
            {
                "when": {"all": [{"feature": "GRIP_USE_STEAM"},
                                 {"platform": ["Win64", "Linux", "Mac"]}]},
                "public": ["Steamworks"],
                "dynamic": ["OnlineSubsystemSteam"]
            }
        ]
    }
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..environment import Environment
from ..predicates import Predicate, PredicateError, evaluate, parse_predicate, predicate_to_data


class PCHUsageMode(Enum):
    """How a module consumes precompiled headers."""

    NONE = "None"
    USE_EXPLICIT = "UseExplicit"
    USE_SHARED_OR_EXPLICIT = "UseSharedOrExplicit"

    @classmethod
    def from_string(cls, value: str) -> "PCHUsageMode":
        """Convert string to PCHUsageMode.

        Also accepts the long-form spellings "NoPCHs", "NoSharedPCHs" and
        "UseExplicitOrSharedPCHs".

        Raises:
            ValueError: If the mode is not recognised.
        """
        aliases = {
            "nopchs": cls.NONE,
            "nosharedpchs": cls.USE_EXPLICIT,
            "useexplicitorsharedpchs": cls.USE_SHARED_OR_EXPLICIT,
        }
        if not isinstance(value, str):
            raise ValueError(f"Precompiled header mode must be a string, got {value!r}")
        lowered = value.lower()
        if lowered in aliases:
            return aliases[lowered]
        for member in cls:
            if member.value.lower() == lowered:
                return member
        raise ValueError(f"Unknown precompiled header mode '{value}'")


class DependencyKind(Enum):
    """Relation kind of a dependency edge."""

    PUBLIC = "public"
    PRIVATE = "private"
    DYNAMIC = "dynamic"

    @property
    def is_linked(self) -> bool:
        """True for kinds that put the dependency on the link line."""
        return self is not DependencyKind.DYNAMIC


@dataclass(frozen=True)
class DependencyEdge:
    """One dependency edge of a module.

    Attributes:
        name: Name of the module depended upon
        kind: Relation kind
        condition: Gating predicate, or None for an unconditional edge
    """

    name: str
    kind: DependencyKind
    condition: Optional[Predicate] = None

    def is_active(self, environment: Environment) -> bool:
        return evaluate(self.condition, environment)


@dataclass(frozen=True)
class ModuleDescriptor:
    """
    Declarative record of one module.

    Attributes:
        name: Unique module identifier within a registry
        pch_mode: Precompiled header usage, passed through to the compiler driver
        dependencies: Edges in declaration order (unconditional groups first,
            then conditional blocks in the order they were declared)
    """

    name: str
    pch_mode: PCHUsageMode = PCHUsageMode.NONE
    dependencies: Tuple[DependencyEdge, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Module name must not be empty")
        # Ordered-set semantics per (kind, name, condition): first declaration wins
        seen = set()
        unique: List[DependencyEdge] = []
        for edge in self.dependencies:
            key = (edge.kind, edge.name, edge.condition)
            if key in seen:
                continue
            seen.add(key)
            unique.append(edge)
        object.__setattr__(self, "dependencies", tuple(unique))

    def _unconditional(self, kind: DependencyKind) -> List[str]:
        return [e.name for e in self.dependencies if e.kind is kind and e.condition is None]

    @property
    def public_dependencies(self) -> List[str]:
        """Unconditional public dependency names."""
        return self._unconditional(DependencyKind.PUBLIC)

    @property
    def private_dependencies(self) -> List[str]:
        """Unconditional private dependency names."""
        return self._unconditional(DependencyKind.PRIVATE)

    @property
    def dynamically_loaded_dependencies(self) -> List[str]:
        """Unconditional dynamically loaded dependency names."""
        return self._unconditional(DependencyKind.DYNAMIC)

    @property
    def platform_predicates(self) -> Dict[DependencyKind, List[Tuple[Predicate, List[str]]]]:
        """Predicate-gated edges grouped by kind, then by predicate in declaration order."""
        result: Dict[DependencyKind, List[Tuple[Predicate, List[str]]]] = {}
        for edge in self.dependencies:
            if edge.condition is None:
                continue
            groups = result.setdefault(edge.kind, [])
            for predicate, names in groups:
                if predicate == edge.condition:
                    names.append(edge.name)
                    break
            else:
                groups.append((edge.condition, [edge.name]))
        return result

    def effective_dependencies(self, environment: Environment) -> List[DependencyEdge]:
        """Edges active for the given environment, in declaration order."""
        return [edge for edge in self.dependencies if edge.is_active(environment)]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ModuleDescriptor":
        """
        Parse a module descriptor from its JSON form.

        Args:
            data: Raw descriptor dictionary

        Returns:
            ModuleDescriptor instance

        Raises:
            ValueError: If required fields are missing or invalid
        """
        if not isinstance(data, dict):
            raise ValueError(f"Module descriptor must be a JSON object, got {type(data).__name__}")
        try:
            name = data["name"]
        except KeyError as e:
            raise ValueError(f"Missing required field in module descriptor: {e}")
        if not isinstance(name, str) or not name:
            raise ValueError(f"Module name must be a non-empty string, got {name!r}")

        pch_mode = PCHUsageMode.from_string(data.get("pch_mode", "None"))

        edges: List[DependencyEdge] = []
        for kind in DependencyKind:
            for dep in _name_list(name, kind.value, data.get(kind.value, [])):
                edges.append(DependencyEdge(dep, kind))

        conditional = data.get("conditional", [])
        if not isinstance(conditional, list):
            raise ValueError(f"Module '{name}': 'conditional' must be a list of blocks")
        for block in conditional:
            if not isinstance(block, dict) or "when" not in block:
                raise ValueError(f"Module '{name}': conditional block needs a 'when' predicate")
            try:
                condition = parse_predicate(block["when"])
            except PredicateError as e:
                raise ValueError(f"Module '{name}': {e}")
            for kind in DependencyKind:
                for dep in _name_list(name, kind.value, block.get(kind.value, [])):
                    edges.append(DependencyEdge(dep, kind, condition))

        return cls(name=name, pch_mode=pch_mode, dependencies=tuple(edges))

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert back to the JSON form.

        Returns:
            Dictionary accepted by from_dict()
        """
        data: Dict[str, Any] = {"name": self.name, "pch_mode": self.pch_mode.value}
        for kind in DependencyKind:
            data[kind.value] = self._unconditional(kind)

        conditional: List[Dict[str, Any]] = []
        for edge in self.dependencies:
            if edge.condition is None:
                continue
            when = predicate_to_data(edge.condition)
            block = next((b for b in conditional if b["when"] == when), None)
            if block is None:
                block = {"when": when}
                conditional.append(block)
            block.setdefault(edge.kind.value, []).append(edge.name)
        if conditional:
            data["conditional"] = conditional
        return data


def _name_list(module: str, key: str, value: Any) -> List[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) and v for v in value):
        raise ValueError(f"Module '{module}': '{key}' must be a list of module names")
    return list(value)
