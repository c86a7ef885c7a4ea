"""Build plan emitter.

Serializes a resolved BuildPlan into the shape consumed by the external
toolchain driver, and defines the PlanSink protocol through which a
serialized plan is handed to that driver.

Emission is a pure transformation: ordered_modules ordering is preserved
exactly because link-line generation downstream is order-sensitive. emit()
only accepts a BuildPlan, so a failed resolution (which raises and never
produces one) cannot reach a sink.
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Protocol, runtime_checkable

from .descriptors import PCHUsageMode
from .resolver.models import BuildPlan

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


@dataclass
class SerializedPlan:
    """Toolchain-facing form of a build plan.

    Attributes:
        target: Target name
        ordered_modules: Module names in compile/link order
        link_set: Module names to pass to the linker
        dynamic_set: Module names to register as runtime-loadable, not linked
        precompiled_header_modes: Module name -> precompiled header mode string
        compile_flags: Compilation flags
        link_flags: Linker flags
        definitions: Preprocessor definitions
        schema_version: Version of this serialized layout
    """

    target: str
    ordered_modules: List[str]
    link_set: List[str]
    dynamic_set: List[str]
    precompiled_header_modes: Dict[str, str]
    compile_flags: List[str] = field(default_factory=list)
    link_flags: List[str] = field(default_factory=list)
    definitions: List[str] = field(default_factory=list)
    schema_version: int = SCHEMA_VERSION

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    def to_json(self, indent: int | None = 2) -> str:
        """Render as JSON, keeping key and list order stable."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SerializedPlan":
        """Create SerializedPlan from dictionary."""
        return cls(
            target=data["target"],
            ordered_modules=list(data["ordered_modules"]),
            link_set=list(data["link_set"]),
            dynamic_set=list(data["dynamic_set"]),
            precompiled_header_modes=dict(data.get("precompiled_header_modes", {})),
            compile_flags=list(data.get("compile_flags", [])),
            link_flags=list(data.get("link_flags", [])),
            definitions=list(data.get("definitions", [])),
            schema_version=data.get("schema_version", SCHEMA_VERSION),
        )


def emit(plan: BuildPlan) -> SerializedPlan:
    """Serialize a resolved plan.

    Modules without a recorded precompiled header mode are emitted as "None",
    the module default.

    Args:
        plan: Successfully resolved build plan

    Returns:
        SerializedPlan with ordering preserved exactly
    """
    return SerializedPlan(
        target=plan.target_name,
        ordered_modules=list(plan.ordered_modules),
        link_set=list(plan.link_set),
        dynamic_set=list(plan.dynamic_set),
        precompiled_header_modes={name: plan.precompiled_header_modes.get(name, PCHUsageMode.NONE).value for name in plan.ordered_modules},
        compile_flags=list(plan.compile_flags),
        link_flags=list(plan.link_flags),
        definitions=list(plan.definitions),
    )


@runtime_checkable
class PlanSink(Protocol):
    """Protocol for handing a serialized plan to the external toolchain.

    The toolchain driver (compiler/linker invocation, packaging) implements
    this to receive the plan; nothing in buildplan calls a compiler itself.
    """

    def apply(self, plan: SerializedPlan) -> None:
        """Consume a serialized plan.

        Args:
            plan: The serialized build plan.
        """
        ...


class NullSink:
    """No-op sink for testing and dry runs."""

    def apply(self, plan: SerializedPlan) -> None:
        """Discard the plan."""
        pass


class JsonFileSink:
    """Writes the serialized plan to a JSON file."""

    def __init__(self, path: Path, indent: int | None = 2) -> None:
        self.path = path
        self.indent = indent

    def apply(self, plan: SerializedPlan) -> None:
        """Write the plan, creating parent directories as needed."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(plan.to_json(indent=self.indent) + "\n", encoding="utf-8")
        logger.debug("Wrote build plan for %s to %s", plan.target, self.path)


def emit_to(plan: BuildPlan, sink: PlanSink) -> SerializedPlan:
    """Serialize a plan and hand it to a sink.

    Returns:
        The SerializedPlan that was applied
    """
    serialized = emit(plan)
    sink.apply(serialized)
    return serialized
