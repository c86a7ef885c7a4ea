"""Resolution errors.

All failures of a resolution pass are reported by raising a ResolutionError
subclass. Nothing is emitted on failure; the caller fixes the registry or
target descriptor and resolves again.
"""

from enum import Enum
from typing import Optional, Sequence


class ResolutionErrorKind(Enum):
    """Kind of resolution failure."""

    UNKNOWN_MODULE = "UnknownModule"
    CYCLIC_DEPENDENCY = "CyclicDependency"
    DEPTH_EXCEEDED = "DepthExceeded"


class ResolutionError(Exception):
    """Base class for resolution failures."""

    kind: ResolutionErrorKind

    def to_dict(self) -> dict:
        """Serialize for diagnostics output."""
        return {"kind": self.kind.value, "message": str(self)}


class UnknownModuleError(ResolutionError):
    """A root or a dependency names a module the registry does not declare.

    Attributes:
        module_name: The undeclared module
        parent: The module referencing it, or None when it is a target root
        target_name: Target being resolved
    """

    kind = ResolutionErrorKind.UNKNOWN_MODULE

    def __init__(self, module_name: str, parent: Optional[str], target_name: str = "") -> None:
        self.module_name = module_name
        self.parent = parent
        self.target_name = target_name
        if parent is None:
            referrer = f"target '{target_name}'" if target_name else "target roots"
        else:
            referrer = f"module '{parent}'"
        super().__init__(f"Unknown module '{module_name}' referenced by {referrer}")

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({"module": self.module_name, "parent": self.parent})
        return data


class CyclicDependencyError(ResolutionError, ValueError):
    """The effective dependency graph contains a cycle.

    Attributes:
        path: Cycle path, first and last entries equal (e.g. ["App", "Net", "App"])
    """

    kind = ResolutionErrorKind.CYCLIC_DEPENDENCY

    def __init__(self, path: Sequence[str]) -> None:
        self.path = list(path)
        super().__init__(f"Cyclic dependency detected: {' -> '.join(self.path)}")

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["path"] = list(self.path)
        return data


class DepthExceededError(ResolutionError):
    """A dependency chain is longer than the configured maximum depth.

    Attributes:
        max_depth: The configured limit
        path: The chain being followed when the limit was hit
    """

    kind = ResolutionErrorKind.DEPTH_EXCEEDED

    def __init__(self, max_depth: int, path: Sequence[str]) -> None:
        self.max_depth = max_depth
        self.path = list(path)
        shown = self.path if len(self.path) <= 8 else self.path[:4] + ["..."] + self.path[-3:]
        super().__init__(f"Dependency depth exceeds {max_depth}: {' -> '.join(shown)}")

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({"max_depth": self.max_depth, "path": list(self.path)})
        return data
