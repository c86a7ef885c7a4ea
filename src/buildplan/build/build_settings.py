"""Build settings: default flag sets per settings version and configuration.

Design:
    A target's BuildSettingsVersion selects a base set of compile and link
    flags. The environment's Configuration selects an optimisation profile.
    Profiles declare the flag prefixes they control; those are stripped from
    the base set before the profile's own flags are appended, so the
    profile always wins and no flag is set twice.

    Definitions are derived rather than declared: BUILD_<CONFIGURATION>=1
    plus <FEATURE>=1 for every enabled feature flag.
"""

from dataclasses import dataclass
from typing import Iterable, List

from ..descriptors import BuildSettingsVersion
from ..environment import Configuration


@dataclass(frozen=True)
class ProfileFlags:
    """Flags one configuration profile controls.

    Attributes:
        name: Configuration name
        compile_flags: Compilation flags for this profile
        link_flags: Linker flags for this profile
        controlled_patterns: Flag prefixes this profile controls (stripped from base flags)
    """

    name: str
    compile_flags: tuple[str, ...]
    link_flags: tuple[str, ...]
    controlled_patterns: tuple[str, ...]


@dataclass(frozen=True)
class BuildFlags:
    """Flags resolved for one target/environment pair."""

    compile_flags: tuple[str, ...]
    link_flags: tuple[str, ...]
    definitions: tuple[str, ...]


_OPTIMISATION_PATTERNS = ("-O", "-g", "-flto", "-fno-fat-lto-objects", "-Wl,--gc-sections", "-fuse-linker-plugin")

BASE_FLAGS: dict[BuildSettingsVersion, tuple[tuple[str, ...], tuple[str, ...]]] = {
    BuildSettingsVersion.V1: (
        ("-std=c++14", "-fno-exceptions", "-O2"),
        (),
    ),
    BuildSettingsVersion.V2: (
        ("-std=c++17", "-fno-exceptions", "-Wshadow", "-O2"),
        ("-Wl,--as-needed",),
    ),
    BuildSettingsVersion.LATEST: (
        ("-std=c++20", "-fno-exceptions", "-Wshadow", "-Wundef", "-O2"),
        ("-Wl,--as-needed",),
    ),
}

PROFILES: dict[Configuration, ProfileFlags] = {
    Configuration.DEBUG: ProfileFlags(
        name="Debug",
        compile_flags=("-O0", "-g"),
        link_flags=(),
        controlled_patterns=_OPTIMISATION_PATTERNS,
    ),
    Configuration.DEVELOPMENT: ProfileFlags(
        name="Development",
        compile_flags=("-O2", "-g"),
        link_flags=(),
        controlled_patterns=_OPTIMISATION_PATTERNS,
    ),
    Configuration.SHIPPING: ProfileFlags(
        name="Shipping",
        compile_flags=("-O3", "-flto", "-fno-fat-lto-objects"),
        link_flags=("-flto", "-fuse-linker-plugin", "-Wl,--gc-sections"),
        controlled_patterns=_OPTIMISATION_PATTERNS,
    ),
    Configuration.TEST: ProfileFlags(
        name="Test",
        compile_flags=("-O2", "-g"),
        link_flags=(),
        controlled_patterns=_OPTIMISATION_PATTERNS,
    ),
}


def filter_base_flags(flags: Iterable[str], profile: ProfileFlags) -> List[str]:
    """Remove flags that the profile controls.

    Args:
        flags: Base flags from the settings version
        profile: The profile whose controlled patterns to filter

    Returns:
        Filtered list of flags with controlled patterns removed
    """
    return [f for f in flags if not any(f.startswith(p) for p in profile.controlled_patterns)]


def get_profile(configuration: Configuration) -> ProfileFlags:
    return PROFILES[configuration]


def get_build_flags(
    version: BuildSettingsVersion,
    configuration: Configuration,
    features: Iterable[str] = (),
) -> BuildFlags:
    """Resolve compile/link flags and definitions.

    Args:
        version: Target build settings version
        configuration: Environment configuration
        features: Names of enabled feature flags

    Returns:
        BuildFlags with profile flags applied over the version's base flags
    """
    profile = get_profile(configuration)
    base_compile, base_link = BASE_FLAGS[version]
    compile_flags = filter_base_flags(base_compile, profile) + list(profile.compile_flags)
    link_flags = filter_base_flags(base_link, profile) + list(profile.link_flags)

    definitions = [f"BUILD_{configuration.value.upper()}=1"]
    definitions.extend(f"{name}=1" for name in sorted(set(features)))

    return BuildFlags(
        compile_flags=tuple(compile_flags),
        link_flags=tuple(link_flags),
        definitions=tuple(definitions),
    )


def format_settings_banner(version: BuildSettingsVersion, configuration: Configuration) -> str:
    """Format a build settings banner for display."""
    return f"SETTINGS={version.value} CONFIG={configuration.value}"
