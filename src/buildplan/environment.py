"""Build environment record.

The environment is the explicit input every resolution pass is evaluated
against: target platform, architecture, configuration and a mapping of
compile-time feature flags. There is no process-wide "active" environment;
callers construct one and pass it to the resolver.
"""

import platform as _host_platform
import sys
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional


class Platform(Enum):
    """Known target platforms.

    Unrecognised identifiers map to OTHER so an environment can still be
    built for them; predicates never match OTHER.
    """

    WIN32 = "Win32"
    WIN64 = "Win64"
    LINUX = "Linux"
    LINUX_ARM64 = "LinuxArm64"
    MAC = "Mac"
    IOS = "IOS"
    ANDROID = "Android"
    OTHER = "Other"

    @classmethod
    def from_string(cls, value: str) -> "Platform":
        """Convert string to Platform, defaulting to OTHER if unknown."""
        if not isinstance(value, str):
            raise ValueError(f"Platform must be a string, got {value!r}")
        for member in cls:
            if member.value.lower() == value.lower():
                return member
        return cls.OTHER

    def __str__(self) -> str:
        return self.value


class Configuration(Enum):
    """Build configuration."""

    DEBUG = "Debug"
    DEVELOPMENT = "Development"
    SHIPPING = "Shipping"
    TEST = "Test"

    @classmethod
    def from_string(cls, value: str) -> "Configuration":
        """Convert string to Configuration (case-insensitive).

        Raises:
            ValueError: If the configuration name is not recognised.
        """
        if not isinstance(value, str):
            raise ValueError(f"Configuration must be a string, got {value!r}")
        for member in cls:
            if member.value.lower() == value.lower():
                return member
        valid = ", ".join(m.value for m in cls)
        raise ValueError(f"Unknown configuration '{value}' (expected one of: {valid})")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Environment:
    """Build environment a resolution pass is evaluated against.

    Attributes:
        platform: Target platform (OTHER for unrecognised platforms)
        architecture: Target architecture (e.g. "x64", "arm64")
        configuration: Build configuration
        features: Named compile-time feature flags
        platform_name: Platform identifier as supplied (keeps the spelling of OTHER platforms)
    """

    platform: Platform
    architecture: str = "x64"
    configuration: Configuration = Configuration.DEVELOPMENT
    features: Mapping[str, bool] = field(default_factory=dict, hash=False)
    platform_name: str = ""

    def __post_init__(self) -> None:
        if not self.platform_name:
            object.__setattr__(self, "platform_name", self.platform.value)
        # Read-only snapshot, not part of the hash
        object.__setattr__(self, "features", MappingProxyType(dict(self.features)))

    @classmethod
    def create(
        cls,
        platform: str,
        architecture: str = "x64",
        configuration: str = "Development",
        features: Optional[Mapping[str, bool]] = None,
    ) -> "Environment":
        """Build an environment from plain strings.

        Args:
            platform: Platform identifier (unknown names become Platform.OTHER)
            architecture: Architecture identifier
            configuration: Configuration name
            features: Feature flag mapping

        Returns:
            Environment instance
        """
        return cls(
            platform=Platform.from_string(platform),
            architecture=architecture,
            configuration=Configuration.from_string(configuration),
            features=dict(features or {}),
            platform_name=platform,
        )

    def is_feature_enabled(self, name: str) -> bool:
        """Return True if the named feature flag is set; missing flags are off."""
        return bool(self.features.get(name, False))

    def enabled_features(self) -> list[str]:
        """Sorted names of all enabled feature flags."""
        return sorted(name for name, enabled in self.features.items() if enabled)

    def describe(self) -> str:
        """One-line summary for logs."""
        parts = [f"platform={self.platform_name}", f"arch={self.architecture}", f"config={self.configuration.value}"]
        features = self.enabled_features()
        if features:
            parts.append(f"features={','.join(features)}")
        return " ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "platform": self.platform_name,
            "architecture": self.architecture,
            "configuration": self.configuration.value,
            "features": dict(sorted(self.features.items())),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Environment":
        """Deserialize from dictionary.

        Raises:
            ValueError: If the platform is missing, the configuration is unknown,
                or a feature value is not a boolean.
        """
        try:
            platform_name = data["platform"]
        except KeyError as e:
            raise ValueError(f"Missing required field in environment: {e}")
        features = data.get("features", {})
        if not isinstance(features, dict):
            raise ValueError("Environment 'features' must be an object of name: bool")
        for name, enabled in features.items():
            if not isinstance(enabled, bool):
                raise ValueError(f"Feature '{name}' must be true or false, got {enabled!r}")
        return cls.create(
            platform=platform_name,
            architecture=data.get("architecture", "x64"),
            configuration=data.get("configuration", "Development"),
            features=features,
        )


def _detect_host_platform() -> str:
    if sys.platform == "win32":
        return "Win64" if sys.maxsize > 2**32 else "Win32"
    if sys.platform == "darwin":
        return "Mac"
    if sys.platform.startswith("linux"):
        return "LinuxArm64" if _detect_host_architecture() == "arm64" else "Linux"
    return sys.platform


def _detect_host_architecture() -> str:
    machine = _host_platform.machine().lower()
    if machine in ("x86_64", "amd64"):
        return "x64"
    if machine in ("aarch64", "arm64"):
        return "arm64"
    if machine in ("i386", "i686", "x86"):
        return "x86"
    return machine or "unknown"


def detect_host_environment(
    configuration: str = "Development",
    features: Optional[Mapping[str, bool]] = None,
) -> Environment:
    """Build an Environment describing the machine we are running on.

    Args:
        configuration: Configuration name
        features: Feature flag mapping

    Returns:
        Environment for the host platform and architecture
    """
    return Environment.create(
        platform=_detect_host_platform(),
        architecture=_detect_host_architecture(),
        configuration=configuration,
        features=features,
    )
