"""
Target descriptor model.

A TargetDescriptor describes the artifact being built: its kind, the build
settings version that selects default flag sets, and the root modules the
dependency walk starts from.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Tuple


class TargetKind(Enum):
    """Kind of artifact produced by a target."""

    EXECUTABLE = "Executable"
    SHARED_LIBRARY = "SharedLibrary"
    STATIC_LIBRARY = "StaticLibrary"
    TEST_HARNESS = "TestHarness"

    @classmethod
    def from_string(cls, value: str) -> "TargetKind":
        """Convert string to TargetKind (case-insensitive).

        Raises:
            ValueError: If the kind is not recognised.
        """
        if not isinstance(value, str):
            raise ValueError(f"Target kind must be a string, got {value!r}")
        for member in cls:
            if member.value.lower() == value.lower():
                return member
        raise ValueError(f"Unknown target kind '{value}'")


class BuildSettingsVersion(Enum):
    """Version tag selecting a target's default flag set."""

    V1 = "V1"
    V2 = "V2"
    LATEST = "Latest"

    @classmethod
    def from_string(cls, value: str) -> "BuildSettingsVersion":
        """Convert string to BuildSettingsVersion (case-insensitive).

        Raises:
            ValueError: If the version is not recognised.
        """
        if not isinstance(value, str):
            raise ValueError(f"Build settings version must be a string, got {value!r}")
        for member in cls:
            if member.value.lower() == value.lower():
                return member
        raise ValueError(f"Unknown build settings version '{value}'")


@dataclass(frozen=True)
class TargetDescriptor:
    """
    Declarative record of one build target.

    Attributes:
        name: Target name (e.g. "Grip")
        kind: Kind of artifact produced
        build_settings_version: Default flag set version
        root_modules: Modules the dependency walk starts from, in order
    """

    name: str
    kind: TargetKind = TargetKind.EXECUTABLE
    build_settings_version: BuildSettingsVersion = BuildSettingsVersion.LATEST
    root_modules: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        roots = tuple(self.root_modules)
        duplicates = sorted({name for name in roots if roots.count(name) > 1})
        if duplicates:
            raise ValueError(f"Target '{self.name}' lists duplicate root modules: {', '.join(duplicates)}")
        object.__setattr__(self, "root_modules", roots)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TargetDescriptor":
        """
        Parse a target descriptor from its JSON form.

        Args:
            data: Raw descriptor dictionary

        Returns:
            TargetDescriptor instance

        Raises:
            ValueError: If required fields are missing or invalid
        """
        if not isinstance(data, dict):
            raise ValueError(f"Target descriptor must be a JSON object, got {type(data).__name__}")
        try:
            name = data["name"]
            roots = data["root_modules"]
        except KeyError as e:
            raise ValueError(f"Missing required field in target descriptor: {e}")
        if not isinstance(name, str) or not name:
            raise ValueError(f"Target name must be a non-empty string, got {name!r}")

        if not isinstance(roots, list) or not all(isinstance(r, str) and r for r in roots):
            raise ValueError(f"Target '{name}': 'root_modules' must be a list of module names")

        return cls(
            name=name,
            kind=TargetKind.from_string(data.get("kind", "Executable")),
            build_settings_version=BuildSettingsVersion.from_string(data.get("build_settings_version", "Latest")),
            root_modules=tuple(roots),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to the JSON form."""
        return {
            "name": self.name,
            "kind": self.kind.value,
            "build_settings_version": self.build_settings_version.value,
            "root_modules": list(self.root_modules),
        }
