"""buildplan - conditional module dependency resolver.

Takes declarative module descriptors (public/private/dynamic dependency
edges, optionally gated by platform predicates) and a target descriptor, and
produces a deterministic, platform-correct build plan for a given build
environment.

Typical use:
    from buildplan import Environment, emit, load_sample, resolve

    target, registry = load_sample("steam_demo")
    plan = resolve(target, registry, Environment.create("Win64"))
    print(emit(plan).to_json())
"""

__version__ = "0.3.0"

from buildplan.config import ResolverConfig  # noqa: E402
from buildplan.descriptors import (  # noqa: E402
    BuildSettingsVersion,
    DependencyEdge,
    DependencyKind,
    ModuleDescriptor,
    PCHUsageMode,
    TargetDescriptor,
    TargetKind,
)
from buildplan.emitter import JsonFileSink, NullSink, PlanSink, SerializedPlan, emit, emit_to  # noqa: E402
from buildplan.environment import Configuration, Environment, Platform, detect_host_environment  # noqa: E402
from buildplan.registry import ModuleRegistry, RegistryError, load_registry, load_sample, load_target  # noqa: E402
from buildplan.resolver import (  # noqa: E402
    BuildPlan,
    CyclicDependencyError,
    DependencyResolver,
    DepthExceededError,
    ResolutionError,
    ResolutionErrorKind,
    ResolutionOutcome,
    UnknownModuleError,
    resolve,
    resolve_many,
)

__all__ = [
    "BuildPlan",
    "BuildSettingsVersion",
    "Configuration",
    "CyclicDependencyError",
    "DependencyEdge",
    "DependencyKind",
    "DependencyResolver",
    "DepthExceededError",
    "Environment",
    "JsonFileSink",
    "ModuleDescriptor",
    "ModuleRegistry",
    "NullSink",
    "PCHUsageMode",
    "PlanSink",
    "Platform",
    "RegistryError",
    "ResolutionError",
    "ResolutionErrorKind",
    "ResolutionOutcome",
    "ResolverConfig",
    "SerializedPlan",
    "TargetDescriptor",
    "TargetKind",
    "detect_host_environment",
    "emit",
    "emit_to",
    "load_registry",
    "load_sample",
    "load_target",
    "resolve",
    "resolve_many",
    "__version__",
]
