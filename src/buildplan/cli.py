"""
Command-line interface for buildplan.

This module provides the `buildplan` CLI, a thin driver around the resolver:
it loads a registry and target, resolves them for an environment, and emits
the serialized plan as JSON (stdout or file) or as a table.

Exit codes:
    0 - plan resolved and emitted
    1 - resolution failed (unknown module, cycle, depth exceeded)
    2 - invalid input (missing files, malformed registry, bad arguments,
        unwritable --output path)
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from rich.console import Console
from rich.table import Table

from buildplan import __version__
from buildplan.build import format_settings_banner
from buildplan.config import ResolverConfig
from buildplan.descriptors import TargetDescriptor
from buildplan.emitter import JsonFileSink, SerializedPlan, emit, emit_to
from buildplan.environment import Environment, Platform, detect_host_environment
from buildplan.output import TimedLogger, init_timer, log_detail, log_error, log_header, log_success, log_warning, set_verbose
from buildplan.registry import ModuleRegistry, RegistryError, list_samples, load_registry, load_sample, load_target
from buildplan.resolver import CyclicDependencyError, DependencyResolver, DepthExceededError, ResolutionError, UnknownModuleError

EXIT_OK = 0
EXIT_RESOLUTION_ERROR = 1
EXIT_INPUT_ERROR = 2


@dataclass
class ResolveArgs:
    """Arguments for the resolve command."""

    registry: Optional[Path] = None
    sample: Optional[str] = None
    target: Optional[Path] = None
    platform: Optional[str] = None
    arch: Optional[str] = None
    configuration: str = "Development"
    features: List[str] = field(default_factory=list)
    max_depth: Optional[int] = None
    format: str = "json"
    output: Optional[Path] = None
    verbose: bool = False


@dataclass
class ModulesArgs:
    """Arguments for the modules command."""

    registry: Optional[Path] = None
    sample: Optional[str] = None
    verbose: bool = False


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger().setLevel(logging.DEBUG if verbose else logging.WARNING)
    set_verbose(verbose)


def _load_inputs(
    registry_path: Optional[Path],
    sample: Optional[str],
    target_path: Optional[Path],
) -> tuple[Optional[TargetDescriptor], ModuleRegistry]:
    """Load the registry (and target, when one is available).

    Raises:
        FileNotFoundError: If a file or sample does not exist
        RegistryError: If registry/target data is malformed
        ValueError: If neither a registry nor a sample is given
    """
    target: Optional[TargetDescriptor] = None
    if sample:
        target, registry = load_sample(sample)
    elif registry_path is not None:
        registry = load_registry(registry_path)
    else:
        raise ValueError("Either --registry or --sample is required")

    if target_path is not None:
        target = load_target(target_path)
    return target, registry


def _build_environment(args: ResolveArgs) -> Environment:
    features = {name: True for name in args.features}
    host = detect_host_environment(configuration=args.configuration, features=features)
    if args.platform is None and args.arch is None:
        return host
    return Environment.create(
        platform=args.platform or host.platform_name,
        architecture=args.arch or host.architecture,
        configuration=args.configuration,
        features=features,
    )


def _report_resolution_error(error: ResolutionError) -> None:
    log_error(f"Resolution failed [{error.kind.value}]")
    if isinstance(error, CyclicDependencyError):
        log_detail(f"Cycle: {' -> '.join(error.path)}")
    elif isinstance(error, UnknownModuleError):
        log_detail(f"Module: {error.module_name}")
        log_detail(f"Referenced by: {error.parent if error.parent is not None else f'target {error.target_name}'}")
    elif isinstance(error, DepthExceededError):
        log_detail(f"Max depth: {error.max_depth}")
        log_detail(f"Chain: {' -> '.join(error.path)}")
    else:
        log_detail(str(error))


def _render_plan_table(serialized: SerializedPlan, console: Console) -> None:
    table = Table(title=f"Build plan: {serialized.target}")
    table.add_column("#", justify="right")
    table.add_column("Module", no_wrap=True)
    table.add_column("Role")
    table.add_column("PCH")
    link = set(serialized.link_set)
    for i, name in enumerate(serialized.ordered_modules, start=1):
        role = "link" if name in link else "dynamic"
        table.add_row(str(i), name, role, serialized.precompiled_header_modes.get(name, ""))
    console.print(table)
    if serialized.definitions:
        console.print(f"Definitions: {' '.join(serialized.definitions)}")
    console.print(f"Compile flags: {' '.join(serialized.compile_flags)}")
    if serialized.link_flags:
        console.print(f"Link flags: {' '.join(serialized.link_flags)}")


def resolve_command(args: ResolveArgs) -> int:
    """Resolve a target and emit its build plan.

    Examples:
        buildplan resolve --sample grip --platform Win64 --feature GRIP_USE_STEAM
        buildplan resolve --registry modules/ --target Game.target.json -o plan.json
        buildplan resolve --sample steam_demo --platform Android --format table
    """
    _configure_logging(args.verbose)
    init_timer()
    log_header("buildplan", __version__)

    try:
        config = ResolverConfig.from_env(max_depth=args.max_depth)
        environment = _build_environment(args)
        with TimedLogger("Loading module registry", phase=(1, 3)) as timed:
            target, registry = _load_inputs(args.registry, args.sample, args.target)
            timed.detail(f"Modules: {len(registry)}")
        if target is None:
            raise ValueError("--target is required with --registry")
    except (FileNotFoundError, RegistryError, ValueError) as e:
        log_error(str(e))
        return EXIT_INPUT_ERROR

    if environment.platform is Platform.OTHER:
        log_warning(f"Unrecognised platform '{environment.platform_name}': platform-gated dependencies are inactive")

    resolver = DependencyResolver(registry, config)
    try:
        with TimedLogger(f"Resolving {target.name} ({environment.describe()})", phase=(2, 3)) as timed:
            plan = resolver.resolve(target, environment)
            timed.detail(format_settings_banner(target.build_settings_version, environment.configuration))
            timed.detail(plan.summary())
    except ResolutionError as e:
        _report_resolution_error(e)
        return EXIT_RESOLUTION_ERROR

    try:
        with TimedLogger("Emitting build plan", phase=(3, 3)):
            if args.output is not None:
                serialized = emit_to(plan, JsonFileSink(args.output))
                log_detail(f"Plan: {args.output}")
            else:
                serialized = emit(plan)
    except OSError as e:
        log_error(f"Cannot write build plan to {args.output}: {e}")
        return EXIT_INPUT_ERROR

    if args.output is None:
        if args.format == "table":
            _render_plan_table(serialized, Console())
        else:
            print(serialized.to_json())

    log_success(f"Resolved {len(serialized.ordered_modules)} modules for {serialized.target}")
    return EXIT_OK


def modules_command(args: ModulesArgs) -> int:
    """List the modules of a registry in declaration order."""
    _configure_logging(args.verbose)
    try:
        _, registry = _load_inputs(args.registry, args.sample, None)
    except (FileNotFoundError, RegistryError, ValueError) as e:
        log_error(str(e))
        return EXIT_INPUT_ERROR

    table = Table(title="Modules")
    table.add_column("Module", no_wrap=True)
    table.add_column("PCH", no_wrap=True)
    table.add_column("Pub", justify="right")
    table.add_column("Priv", justify="right")
    table.add_column("Dyn", justify="right")
    table.add_column("Cond", justify="right")
    for module in registry:
        conditional = sum(1 for e in module.dependencies if e.condition is not None)
        table.add_row(
            module.name,
            module.pch_mode.value,
            str(len(module.public_dependencies)),
            str(len(module.private_dependencies)),
            str(len(module.dynamically_loaded_dependencies)),
            str(conditional),
        )
    Console().print(table)
    return EXIT_OK


def samples_command() -> int:
    """List packaged sample projects."""
    for name in list_samples():
        print(name)
    return EXIT_OK


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "-r",
        "--registry",
        type=Path,
        default=None,
        help="Module registry JSON file or directory of JSON files",
    )
    source.add_argument(
        "-s",
        "--sample",
        default=None,
        help="Use a packaged sample project (see `buildplan samples`)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="buildplan",
        description="buildplan - conditional module dependency resolver",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"buildplan {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Resolve a target into a build plan",
    )
    _add_source_arguments(resolve_parser)
    resolve_parser.add_argument(
        "-t",
        "--target",
        type=Path,
        default=None,
        help="Target descriptor JSON file (default: the sample's target)",
    )
    resolve_parser.add_argument(
        "-p",
        "--platform",
        default=None,
        help="Target platform, e.g. Win64, Linux, Mac, Android (default: host)",
    )
    resolve_parser.add_argument(
        "-a",
        "--arch",
        default=None,
        help="Target architecture, e.g. x64, arm64 (default: host)",
    )
    resolve_parser.add_argument(
        "-c",
        "--configuration",
        default="Development",
        help="Build configuration: Debug, Development, Shipping, Test (default: Development)",
    )
    resolve_parser.add_argument(
        "-f",
        "--feature",
        dest="features",
        action="append",
        default=[],
        help="Enable a feature flag (repeatable)",
    )
    resolve_parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Maximum dependency traversal depth (default: $BUILDPLAN_MAX_DEPTH or 256)",
    )
    resolve_parser.add_argument(
        "--format",
        choices=["json", "table"],
        default="json",
        help="Output format when writing to stdout (default: json)",
    )
    resolve_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Write the JSON plan to this file instead of stdout",
    )
    resolve_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output",
    )

    modules_parser = subparsers.add_parser(
        "modules",
        help="List the modules of a registry",
    )
    _add_source_arguments(modules_parser)
    modules_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output",
    )

    subparsers.add_parser(
        "samples",
        help="List packaged sample projects",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """buildplan - conditional module dependency resolver."""
    parser = build_parser()
    parsed = parser.parse_args(argv)

    if parsed.command == "resolve":
        return resolve_command(
            ResolveArgs(
                registry=parsed.registry,
                sample=parsed.sample,
                target=parsed.target,
                platform=parsed.platform,
                arch=parsed.arch,
                configuration=parsed.configuration,
                features=list(parsed.features),
                max_depth=parsed.max_depth,
                format=parsed.format,
                output=parsed.output,
                verbose=parsed.verbose,
            )
        )
    if parsed.command == "modules":
        return modules_command(ModulesArgs(registry=parsed.registry, sample=parsed.sample, verbose=parsed.verbose))
    if parsed.command == "samples":
        return samples_command()

    parser.print_help()
    return EXIT_INPUT_ERROR


if __name__ == "__main__":
    sys.exit(main())
