"""Module registry and loaders for registry/target JSON files.

Registry sources are plain JSON:
    - a file holding {"modules": [<module descriptor>, ...]}
    - or a directory of such files, read in sorted filename order; a file may
      also hold a single descriptor object

Declaration order (file order, then position within the file) is the
resolver's tie-break, so loading is deterministic for identical inputs.

Sample projects ship as package data under samples/ and are read through
importlib.resources so they work when installed as a wheel:
    grip/        - a racing game target with engine modules and a Steam block
    steam_demo/  - minimal Core/Net/SteamIntegration/App graph
"""

from __future__ import annotations

import json
import logging
from importlib import resources
from pathlib import Path
from typing import Any

from ..descriptors import TargetDescriptor
from .module_registry import ModuleRegistry, RegistryError

logger = logging.getLogger(__name__)

SAMPLES_DIR = "samples"


def _read_json(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise RegistryError(f"Invalid JSON in {path}: {e}") from e


def _module_entries(data: Any, source: str) -> list[dict[str, Any]]:
    if isinstance(data, dict) and "modules" in data:
        entries = data["modules"]
    elif isinstance(data, dict):
        entries = [data]
    else:
        entries = data
    if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
        raise RegistryError(f"{source}: expected a module object or a 'modules' list")
    return entries


def load_registry(path: Path) -> ModuleRegistry:
    """Load a module registry from a JSON file or a directory of JSON files.

    Args:
        path: Registry file or directory

    Returns:
        ModuleRegistry in declaration order

    Raises:
        FileNotFoundError: If the path does not exist
        RegistryError: If any file is malformed or module names collide
    """
    if not path.exists():
        raise FileNotFoundError(f"Module registry not found: {path}")

    files = sorted(path.glob("*.json")) if path.is_dir() else [path]
    entries: list[dict[str, Any]] = []
    for file_path in files:
        entries.extend(_module_entries(_read_json(file_path), str(file_path)))

    registry = ModuleRegistry.from_dicts(entries)
    logger.debug("Loaded %d modules from %s", len(registry), path)
    return registry


def load_target(path: Path) -> TargetDescriptor:
    """Load a target descriptor from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
        RegistryError: If the descriptor is malformed
    """
    if not path.is_file():
        raise FileNotFoundError(f"Target descriptor not found: {path}")
    try:
        return TargetDescriptor.from_dict(_read_json(path))
    except ValueError as e:
        if isinstance(e, RegistryError):
            raise
        raise RegistryError(f"{path}: {e}") from e


def list_samples() -> list[str]:
    """List the names of the packaged sample projects."""
    samples = []
    try:
        for entry in resources.files(__package__).joinpath(SAMPLES_DIR).iterdir():
            if entry.is_dir() and entry.joinpath("target.json").is_file():
                samples.append(entry.name)
    except (FileNotFoundError, TypeError, AttributeError):
        pass
    return sorted(samples)


def load_sample(name: str) -> tuple[TargetDescriptor, ModuleRegistry]:
    """Load a packaged sample project.

    Args:
        name: Sample name (see list_samples())

    Returns:
        (target, registry) tuple

    Raises:
        FileNotFoundError: If no such sample exists
    """
    sample_dir = resources.files(__package__).joinpath(SAMPLES_DIR).joinpath(name)
    target_file = sample_dir.joinpath("target.json")
    modules_file = sample_dir.joinpath("modules.json")
    if not target_file.is_file() or not modules_file.is_file():
        raise FileNotFoundError(f"Unknown sample '{name}' (available: {', '.join(list_samples())})")

    with target_file.open("r", encoding="utf-8") as f:
        target = TargetDescriptor.from_dict(json.load(f))
    with modules_file.open("r", encoding="utf-8") as f:
        registry = ModuleRegistry.from_dicts(_module_entries(json.load(f), f"sample {name}"))
    return target, registry


__all__ = [
    "ModuleRegistry",
    "RegistryError",
    "list_samples",
    "load_registry",
    "load_sample",
    "load_target",
]
