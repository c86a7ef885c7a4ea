"""Conditional dependency resolver.

Walks the module graph from a target's roots, evaluating every module's
predicate-gated edges against an explicit Environment, and produces a
deterministic, topologically ordered BuildPlan.

Algorithm:
    1. Every root must be declared in the registry.
    2. Depth-first traversal from the roots (in root order). Each visited
       module's edges are evaluated once; edges whose predicate is false are
       dropped for this pass.
    3. White/gray/black marking: reaching a gray (in-progress) module is a
       cycle and fails the whole pass with the cycle path.
    4. Kahn's algorithm over the effective edges yields the order. Among
       modules whose dependencies are all placed, the one declared first in
       the registry goes next.
    5. Roots and targets of public/private edges are linked. Targets of
       dynamic edges that are not linked anywhere form the dynamic set.

The registry is never mutated and no state is kept between calls, so one
resolver (or registry) may serve concurrent resolutions.
"""

import heapq
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple

from ..build import get_build_flags
from ..config import ResolverConfig
from ..descriptors import DependencyEdge, DependencyKind, TargetDescriptor
from ..environment import Environment
from ..registry import ModuleRegistry
from .errors import CyclicDependencyError, DepthExceededError, ResolutionError, UnknownModuleError
from .models import BuildPlan, ResolutionOutcome

logger = logging.getLogger(__name__)

_WHITE, _GRAY, _BLACK = 0, 1, 2


class DependencyResolver:
    """Resolves targets against one immutable module registry.

    Usage:
        resolver = DependencyResolver(registry)
        plan = resolver.resolve(target, Environment.create("Win64"))
        outcomes = resolver.resolve_many([game, server], environment)
    """

    def __init__(self, registry: ModuleRegistry, config: Optional[ResolverConfig] = None) -> None:
        self._registry = registry
        self._config = config if config is not None else ResolverConfig()

    @property
    def registry(self) -> ModuleRegistry:
        return self._registry

    @property
    def config(self) -> ResolverConfig:
        return self._config

    def resolve(self, target: TargetDescriptor, environment: Environment) -> BuildPlan:
        """Resolve a target into a build plan.

        Args:
            target: Target to resolve
            environment: Environment predicates are evaluated against

        Returns:
            The resolved BuildPlan

        Raises:
            UnknownModuleError: If a root or dependency is not declared
            CyclicDependencyError: If the effective graph has a cycle
            DepthExceededError: If a dependency chain exceeds config.max_depth
        """
        logger.debug("Resolving target %s (%s)", target.name, environment.describe())

        for root in target.root_modules:
            if root not in self._registry:
                raise UnknownModuleError(root, None, target.name)

        edges = self._walk(target, environment)
        ordered = self._topological_order(edges)
        link_set, dynamic_set = self._classify(target, edges, ordered)
        flags = get_build_flags(
            target.build_settings_version,
            environment.configuration,
            environment.enabled_features(),
        )

        plan = BuildPlan(
            target_name=target.name,
            ordered_modules=tuple(ordered),
            link_set=link_set,
            dynamic_set=dynamic_set,
            precompiled_header_modes={name: self._registry[name].pch_mode for name in ordered},
            compile_flags=flags.compile_flags,
            link_flags=flags.link_flags,
            definitions=flags.definitions,
            edges=edges,
        )
        logger.info("Resolved %s", plan.summary())
        return plan

    def resolve_many(
        self,
        targets: Sequence[TargetDescriptor],
        environment: Environment,
        max_workers: Optional[int] = None,
    ) -> List[ResolutionOutcome]:
        """Resolve several targets concurrently.

        Each target gets its own independent plan; a failure in one target
        does not affect the others.

        Args:
            targets: Targets to resolve
            environment: Environment shared by all targets
            max_workers: Thread pool size (default: executor default)

        Returns:
            One ResolutionOutcome per target, in input order
        """
        if not targets:
            return []

        def _resolve_one(target: TargetDescriptor) -> ResolutionOutcome:
            try:
                return ResolutionOutcome(target.name, plan=self.resolve(target, environment))
            except ResolutionError as e:
                logger.warning("Resolution failed for %s: %s", target.name, e)
                return ResolutionOutcome(target.name, error=e)

        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="buildplan-resolve") as executor:
            return list(executor.map(_resolve_one, targets))

    def _walk(self, target: TargetDescriptor, environment: Environment) -> Dict[str, Tuple[DependencyEdge, ...]]:
        """Depth-first traversal collecting the effective edges of every reachable module."""
        max_depth = self._config.max_depth
        color: Dict[str, int] = {}
        effective: Dict[str, Tuple[DependencyEdge, ...]] = {}

        def expand(name: str) -> Iterator[DependencyEdge]:
            module = self._registry[name]
            active = tuple(module.effective_dependencies(environment))
            dropped = len(module.dependencies) - len(active)
            if dropped:
                logger.debug("%s: %d predicate-gated edge(s) inactive", name, dropped)
            effective[name] = active
            return iter(active)

        for root in target.root_modules:
            if color.get(root, _WHITE) != _WHITE:
                continue
            color[root] = _GRAY
            path = [root]
            stack = [expand(root)]
            while stack:
                edge = next(stack[-1], None)
                if edge is None:
                    stack.pop()
                    color[path.pop()] = _BLACK
                    continue

                dep_name = edge.name
                state = color.get(dep_name, _WHITE)
                if state == _BLACK:
                    continue
                if state == _GRAY:
                    # Back edge
                    cycle_start = path.index(dep_name)
                    raise CyclicDependencyError(path[cycle_start:] + [dep_name])
                if dep_name not in self._registry:
                    raise UnknownModuleError(dep_name, path[-1], target.name)
                if len(path) >= max_depth:
                    raise DepthExceededError(max_depth, path + [dep_name])

                color[dep_name] = _GRAY
                path.append(dep_name)
                stack.append(expand(dep_name))

        return effective

    def _topological_order(self, edges: Dict[str, Tuple[DependencyEdge, ...]]) -> List[str]:
        """Order modules so every dependency precedes its dependents.

        Dynamic edges constrain the order as well as public and private ones,
        so a runtime-loaded module is always built before its loader, even
        when it is declared after it. Ties are broken by registry declaration
        order.
        """
        remaining: Dict[str, int] = {}
        dependents: Dict[str, List[str]] = {name: [] for name in edges}
        for name, module_edges in edges.items():
            deps = {e.name for e in module_edges}
            remaining[name] = len(deps)
            for dep in deps:
                dependents[dep].append(name)

        ready = [(self._registry.index_of(name), name) for name, count in remaining.items() if count == 0]
        heapq.heapify(ready)

        ordered: List[str] = []
        while ready:
            _, name = heapq.heappop(ready)
            ordered.append(name)
            for dependent in dependents[name]:
                remaining[dependent] -= 1
                if remaining[dependent] == 0:
                    heapq.heappush(ready, (self._registry.index_of(dependent), dependent))

        if len(ordered) != len(edges):
            # The traversal rejects cycles, so this only fires on an internal error
            stuck = sorted(name for name, count in remaining.items() if count > 0)
            raise RuntimeError(f"Topological sort left modules unplaced: {', '.join(stuck)}")
        return ordered

    @staticmethod
    def _classify(
        target: TargetDescriptor,
        edges: Dict[str, Tuple[DependencyEdge, ...]],
        ordered: List[str],
    ) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
        """Split reachable modules into link and dynamic sets (link wins)."""
        linked: Set[str] = set(target.root_modules)
        dynamic: Set[str] = set()
        for module_edges in edges.values():
            for edge in module_edges:
                if edge.kind is DependencyKind.DYNAMIC:
                    dynamic.add(edge.name)
                else:
                    linked.add(edge.name)
        dynamic -= linked
        return (
            tuple(name for name in ordered if name in linked),
            tuple(name for name in ordered if name in dynamic),
        )


def resolve(
    target: TargetDescriptor,
    registry: ModuleRegistry,
    environment: Environment,
    config: Optional[ResolverConfig] = None,
) -> BuildPlan:
    """Resolve a target into a build plan.

    Convenience wrapper around DependencyResolver.resolve().

    Raises:
        ResolutionError: On unknown modules, cycles or excessive depth
    """
    return DependencyResolver(registry, config).resolve(target, environment)


def resolve_many(
    targets: Sequence[TargetDescriptor],
    registry: ModuleRegistry,
    environment: Environment,
    config: Optional[ResolverConfig] = None,
    max_workers: Optional[int] = None,
) -> List[ResolutionOutcome]:
    """Resolve several targets concurrently against one registry.

    Convenience wrapper around DependencyResolver.resolve_many().
    """
    return DependencyResolver(registry, config).resolve_many(targets, environment, max_workers=max_workers)
