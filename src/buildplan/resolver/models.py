"""Data models produced by the dependency resolver.

- BuildPlan: the resolved, ordered, platform-specific module set for one target
- ResolutionOutcome: result of one target in a multi-target resolve_many() call
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..descriptors import DependencyEdge, DependencyKind, PCHUsageMode
from .errors import ResolutionError


@dataclass(frozen=True)
class BuildPlan:
    """Resolved build plan for one target.

    Attributes:
        target_name: Target the plan was resolved for
        ordered_modules: Every reachable module; each after all of its dependencies
        link_set: Modules to link, in ordered_modules order
        dynamic_set: Modules loaded at runtime only, in ordered_modules order
        precompiled_header_modes: Module name -> precompiled header mode
        compile_flags: Compilation flags for the target
        link_flags: Linker flags for the target
        definitions: Preprocessor definitions for the target
        edges: Effective (post-predicate) edges of every resolved module
    """

    target_name: str
    ordered_modules: Tuple[str, ...]
    link_set: Tuple[str, ...]
    dynamic_set: Tuple[str, ...]
    precompiled_header_modes: Dict[str, PCHUsageMode] = field(default_factory=dict)
    compile_flags: Tuple[str, ...] = ()
    link_flags: Tuple[str, ...] = ()
    definitions: Tuple[str, ...] = ()
    edges: Dict[str, Tuple[DependencyEdge, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        overlap = set(self.link_set) & set(self.dynamic_set)
        if overlap:
            raise ValueError(f"Modules cannot be both linked and dynamic: {', '.join(sorted(overlap))}")

    @property
    def module_count(self) -> int:
        return len(self.ordered_modules)

    def dependencies_of(self, name: str, kinds: Optional[Tuple[DependencyKind, ...]] = None) -> List[str]:
        """Effective dependency names of a resolved module.

        Args:
            name: Module name
            kinds: Restrict to these relation kinds (default: all)

        Raises:
            KeyError: If the module is not part of the plan
        """
        if name not in self.edges:
            raise KeyError(f"Module not in plan: {name}")
        return [e.name for e in self.edges[name] if kinds is None or e.kind in kinds]

    def is_linked(self, name: str) -> bool:
        return name in self.link_set

    def is_dynamic(self, name: str) -> bool:
        return name in self.dynamic_set

    def summary(self) -> str:
        """One-line summary for logs."""
        return (
            f"{self.target_name}: {len(self.ordered_modules)} modules "
            f"({len(self.link_set)} linked, {len(self.dynamic_set)} dynamic)"
        )


@dataclass
class ResolutionOutcome:
    """Result of resolving one target.

    Attributes:
        target_name: Target that was resolved
        plan: The plan, when resolution succeeded
        error: The failure, when resolution failed
    """

    target_name: str
    plan: Optional[BuildPlan] = None
    error: Optional[ResolutionError] = None

    @property
    def success(self) -> bool:
        return self.error is None and self.plan is not None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary (plan summarised, error in full)."""
        return {
            "target": self.target_name,
            "success": self.success,
            "summary": self.plan.summary() if self.plan is not None else None,
            "error": self.error.to_dict() if self.error is not None else None,
        }
