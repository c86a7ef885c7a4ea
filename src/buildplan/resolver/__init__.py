"""Conditional dependency resolution engine.

Public API:
    resolve: Resolve one target into a BuildPlan (raises ResolutionError).
    resolve_many: Resolve several targets concurrently.
    DependencyResolver: Resolver bound to one registry and config.
"""

from .errors import (
    CyclicDependencyError,
    DepthExceededError,
    ResolutionError,
    ResolutionErrorKind,
    UnknownModuleError,
)
from .models import BuildPlan, ResolutionOutcome
from .resolver import DependencyResolver, resolve, resolve_many

__all__ = [
    "BuildPlan",
    "CyclicDependencyError",
    "DependencyResolver",
    "DepthExceededError",
    "ResolutionError",
    "ResolutionErrorKind",
    "ResolutionOutcome",
    "UnknownModuleError",
    "resolve",
    "resolve_many",
]
