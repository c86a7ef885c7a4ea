"""Immutable, declaration-ordered module registry."""

from typing import Any, Dict, Iterable, Iterator, List, Optional

from ..descriptors import ModuleDescriptor


class RegistryError(ValueError):
    """Raised when registry or target data cannot be loaded."""

    pass


class ModuleRegistry:
    """Read-only table of module descriptors keyed by name.

    Declaration order is preserved and used by the resolver as the
    deterministic tie-break between modules with no ordering constraint.
    The registry exposes no mutators, so one instance can be shared by any
    number of concurrent resolution calls.

    Usage:
        registry = ModuleRegistry([core, net, app])
        registry.get("Net")
        registry.index_of("App")  # 2
    """

    def __init__(self, modules: Iterable[ModuleDescriptor]) -> None:
        """Build a registry.

        Args:
            modules: Descriptors in declaration order.

        Raises:
            ValueError: If two descriptors share a name.
        """
        ordered: List[ModuleDescriptor] = []
        by_name: Dict[str, ModuleDescriptor] = {}
        for module in modules:
            if module.name in by_name:
                raise ValueError(f"Duplicate module name: {module.name}")
            by_name[module.name] = module
            ordered.append(module)
        self._modules = tuple(ordered)
        self._by_name = by_name
        self._index = {module.name: i for i, module in enumerate(ordered)}

    @classmethod
    def from_dicts(cls, data: Iterable[Dict[str, Any]]) -> "ModuleRegistry":
        """Build a registry from JSON-form descriptors.

        Raises:
            RegistryError: If any descriptor is malformed or names collide.
        """
        try:
            return cls(ModuleDescriptor.from_dict(item) for item in data)
        except ValueError as e:
            raise RegistryError(str(e)) from e

    def get(self, name: str) -> Optional[ModuleDescriptor]:
        """Return the descriptor for `name`, or None if undeclared."""
        return self._by_name.get(name)

    def __getitem__(self, name: str) -> ModuleDescriptor:
        try:
            return self._by_name[name]
        except KeyError:
            raise KeyError(f"Unknown module: {name}") from None

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[ModuleDescriptor]:
        return iter(self._modules)

    def __len__(self) -> int:
        return len(self._modules)

    def names(self) -> List[str]:
        """Module names in declaration order."""
        return [module.name for module in self._modules]

    def index_of(self, name: str) -> int:
        """Declaration index of a module.

        Raises:
            KeyError: If the module is not declared.
        """
        try:
            return self._index[name]
        except KeyError:
            raise KeyError(f"Unknown module: {name}") from None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the JSON form read by load_registry()."""
        return {"modules": [module.to_dict() for module in self._modules]}
