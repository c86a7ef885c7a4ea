"""Build settings and default flag sets."""

from .build_settings import BuildFlags, ProfileFlags, format_settings_banner, get_build_flags, get_profile

__all__ = ["BuildFlags", "ProfileFlags", "format_settings_banner", "get_build_flags", "get_profile"]
