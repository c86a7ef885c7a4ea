"""Declarative module and target descriptors."""

from .module_descriptor import DependencyEdge, DependencyKind, ModuleDescriptor, PCHUsageMode
from .target_descriptor import BuildSettingsVersion, TargetDescriptor, TargetKind

__all__ = [
    "BuildSettingsVersion",
    "DependencyEdge",
    "DependencyKind",
    "ModuleDescriptor",
    "PCHUsageMode",
    "TargetDescriptor",
    "TargetKind",
]
