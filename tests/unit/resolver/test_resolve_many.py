"""Unit tests for concurrent multi-target resolution."""

import threading

from buildplan.descriptors import TargetDescriptor
from buildplan.environment import Environment
from buildplan.registry import ModuleRegistry
from buildplan.resolver import CyclicDependencyError, DependencyResolver, UnknownModuleError, resolve, resolve_many


def _registry() -> ModuleRegistry:
    return ModuleRegistry.from_dicts(
        [
            {"name": "Core"},
            {"name": "Net", "public": ["Core"]},
            {"name": "Client", "public": ["Net"]},
            {"name": "Server", "public": ["Net"], "private": ["Loop"]},
            {"name": "Loop", "public": ["Server"]},
        ]
    )


class TestResolveMany:
    def test_outcomes_in_input_order(self):
        targets = [
            TargetDescriptor(name="ClientGame", root_modules=("Client",)),
            TargetDescriptor(name="Broken", root_modules=("Missing",)),
            TargetDescriptor(name="NetOnly", root_modules=("Net",)),
        ]
        outcomes = resolve_many(targets, _registry(), Environment.create("Linux"), max_workers=3)
        assert [o.target_name for o in outcomes] == ["ClientGame", "Broken", "NetOnly"]
        assert [o.success for o in outcomes] == [True, False, True]
        assert outcomes[0].plan.ordered_modules == ("Core", "Net", "Client")
        assert isinstance(outcomes[1].error, UnknownModuleError)
        assert outcomes[2].plan.ordered_modules == ("Core", "Net")

    def test_failure_is_isolated(self):
        """A cyclic target fails without affecting the others."""
        targets = [
            TargetDescriptor(name="ServerGame", root_modules=("Server",)),
            TargetDescriptor(name="ClientGame", root_modules=("Client",)),
        ]
        outcomes = resolve_many(targets, _registry(), Environment.create("Linux"))
        assert isinstance(outcomes[0].error, CyclicDependencyError)
        assert outcomes[0].plan is None
        assert outcomes[1].success

    def test_matches_sequential_resolution(self):
        registry = _registry()
        env = Environment.create("Win64")
        targets = [TargetDescriptor(name=f"T{i}", root_modules=("Client", "Net")) for i in range(16)]
        expected = resolve(targets[0], registry, env).ordered_modules
        outcomes = DependencyResolver(registry).resolve_many(targets, env, max_workers=8)
        assert all(o.plan.ordered_modules == expected for o in outcomes)

    def test_empty_targets(self):
        assert resolve_many([], _registry(), Environment.create("Linux")) == []

    def test_concurrent_threads_share_registry(self):
        """Independent threads resolving against one registry get identical plans."""
        registry = _registry()
        env = Environment.create("Mac")
        target = TargetDescriptor(name="ClientGame", root_modules=("Client",))
        results = []
        lock = threading.Lock()

        def worker():
            plan = resolve(target, registry, env)
            with lock:
                results.append(plan.ordered_modules)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(results) == 8
        assert len(set(results)) == 1

    def test_outcome_to_dict(self):
        targets = [TargetDescriptor(name="Broken", root_modules=("Server",))]
        outcome = resolve_many(targets, _registry(), Environment.create("Linux"))[0]
        data = outcome.to_dict()
        assert data["success"] is False
        assert data["error"]["kind"] == "CyclicDependency"
        assert data["error"]["path"] == ["Server", "Loop", "Server"]
