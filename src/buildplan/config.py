"""Resolver configuration.

Settings come from explicit arguments first, then environment variables:
    BUILDPLAN_MAX_DEPTH  - maximum dependency traversal depth (default 256)
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_MAX_DEPTH = 256
MAX_DEPTH_ENV = "BUILDPLAN_MAX_DEPTH"


@dataclass(frozen=True)
class ResolverConfig:
    """Limits applied to a resolution pass.

    Attributes:
        max_depth: Longest dependency chain (counted in modules, roots included)
            the traversal will follow before failing with DepthExceededError
    """

    max_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self) -> None:
        if not isinstance(self.max_depth, int) or isinstance(self.max_depth, bool) or self.max_depth < 1:
            raise ValueError(f"max_depth must be a positive integer, got {self.max_depth!r}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, max_depth: Optional[int] = None) -> "ResolverConfig":
        """Build a config from environment variables.

        Args:
            environ: Variables to read (defaults to os.environ)
            max_depth: Explicit override taking precedence over the environment

        Returns:
            ResolverConfig instance

        Raises:
            ValueError: If BUILDPLAN_MAX_DEPTH is not a positive integer
        """
        if max_depth is not None:
            return cls(max_depth=max_depth)

        env = os.environ if environ is None else environ
        raw = env.get(MAX_DEPTH_ENV)
        if raw is None or raw.strip() == "":
            return cls()
        try:
            value = int(raw)
        except ValueError:
            raise ValueError(f"{MAX_DEPTH_ENV} must be an integer, got {raw!r}")
        return cls(max_depth=value)
