"""Platform predicate evaluator.

Predicates are boolean expressions over an Environment. They gate dependency
edges: an edge whose predicate is false for the environment being resolved is
dropped for that resolution pass.

Evaluation is pure and total. A well-formed predicate always yields True or
False and never raises:
- platform identifiers that are not known never match
- an environment whose platform is Platform.OTHER never satisfies PlatformIn
- feature flags missing from the environment count as disabled

JSON form (see parse_predicate()):
    {"platform": ["Win64", "Linux", "Mac"]}
    {"architecture": ["x64"]}
    {"configuration": ["Debug", "Development"]}
    {"feature": "GRIP_USE_STEAM"}
    {"all": [<predicate>, ...]}
    {"any": [<predicate>, ...]}
    {"not": <predicate>}
    true
"""

import logging
from dataclasses import dataclass
from typing import Any, Union

from .environment import Configuration, Environment, Platform

logger = logging.getLogger(__name__)

_KNOWN_PLATFORMS = frozenset(p.value.lower() for p in Platform if p is not Platform.OTHER)
_KNOWN_CONFIGURATIONS = frozenset(c.value.lower() for c in Configuration)


class PredicateError(ValueError):
    """Raised when predicate data is malformed."""

    pass


@dataclass(frozen=True)
class Always:
    """Predicate that is always true (an unconditional edge)."""

    def evaluate(self, environment: Environment) -> bool:
        return True

    def describe(self) -> str:
        return "always"


@dataclass(frozen=True)
class PlatformIn:
    """True when the environment's platform is one of `platforms`."""

    platforms: tuple[str, ...]

    def evaluate(self, environment: Environment) -> bool:
        if environment.platform is Platform.OTHER:
            return False
        current = environment.platform.value.lower()
        for name in self.platforms:
            if name.lower() not in _KNOWN_PLATFORMS:
                logger.debug("Ignoring unknown platform identifier %r in predicate", name)
                continue
            if name.lower() == current:
                return True
        return False

    def describe(self) -> str:
        return f"platform in {{{', '.join(self.platforms)}}}"


@dataclass(frozen=True)
class ArchitectureIn:
    """True when the environment's architecture is one of `architectures`."""

    architectures: tuple[str, ...]

    def evaluate(self, environment: Environment) -> bool:
        current = environment.architecture.lower()
        return any(arch.lower() == current for arch in self.architectures)

    def describe(self) -> str:
        return f"architecture in {{{', '.join(self.architectures)}}}"


@dataclass(frozen=True)
class ConfigurationIn:
    """True when the environment's configuration is one of `configurations`."""

    configurations: tuple[str, ...]

    def evaluate(self, environment: Environment) -> bool:
        current = environment.configuration.value.lower()
        return any(c.lower() in _KNOWN_CONFIGURATIONS and c.lower() == current for c in self.configurations)

    def describe(self) -> str:
        return f"configuration in {{{', '.join(self.configurations)}}}"


@dataclass(frozen=True)
class FeatureEnabled:
    """True when the named feature flag is enabled in the environment."""

    name: str

    def evaluate(self, environment: Environment) -> bool:
        return environment.is_feature_enabled(self.name)

    def describe(self) -> str:
        return f"feature {self.name}"


@dataclass(frozen=True)
class AllOf:
    """Conjunction. An empty AllOf is true."""

    children: tuple["Predicate", ...]

    def evaluate(self, environment: Environment) -> bool:
        return all(child.evaluate(environment) for child in self.children)

    def describe(self) -> str:
        return "(" + " and ".join(child.describe() for child in self.children) + ")" if self.children else "always"


@dataclass(frozen=True)
class AnyOf:
    """Disjunction. An empty AnyOf is false."""

    children: tuple["Predicate", ...]

    def evaluate(self, environment: Environment) -> bool:
        return any(child.evaluate(environment) for child in self.children)

    def describe(self) -> str:
        return "(" + " or ".join(child.describe() for child in self.children) + ")" if self.children else "never"


@dataclass(frozen=True)
class Not:
    """Negation."""

    child: "Predicate"

    def evaluate(self, environment: Environment) -> bool:
        return not self.child.evaluate(environment)

    def describe(self) -> str:
        return f"not {self.child.describe()}"


Predicate = Union[Always, PlatformIn, ArchitectureIn, ConfigurationIn, FeatureEnabled, AllOf, AnyOf, Not]

ALWAYS = Always()


def evaluate(predicate: "Predicate | None", environment: Environment) -> bool:
    """Evaluate a predicate against an environment.

    Args:
        predicate: Predicate to evaluate; None means unconditional
        environment: Environment to evaluate against

    Returns:
        True if the predicate holds for the environment
    """
    if predicate is None:
        return True
    return predicate.evaluate(environment)


def _string_list(key: str, value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise PredicateError(f"'{key}' predicate expects a string or list of strings, got {value!r}")
    return tuple(value)


def parse_predicate(data: Any) -> "Predicate":
    """Build a predicate from its JSON form.

    Args:
        data: Decoded JSON value (dict with exactly one key, or a boolean)

    Returns:
        Predicate instance

    Raises:
        PredicateError: If the data is not a well-formed predicate
    """
    if data is True:
        return ALWAYS
    if data is False:
        return AnyOf(())
    if not isinstance(data, dict) or len(data) != 1:
        raise PredicateError(f"Predicate must be a boolean or a single-key object, got {data!r}")

    ((key, value),) = data.items()
    if key == "platform":
        return PlatformIn(_string_list(key, value))
    if key == "architecture":
        return ArchitectureIn(_string_list(key, value))
    if key == "configuration":
        return ConfigurationIn(_string_list(key, value))
    if key == "feature":
        if not isinstance(value, str) or not value:
            raise PredicateError(f"'feature' predicate expects a flag name, got {value!r}")
        return FeatureEnabled(value)
    if key in ("all", "any"):
        if not isinstance(value, list):
            raise PredicateError(f"'{key}' predicate expects a list, got {value!r}")
        children = tuple(parse_predicate(child) for child in value)
        return AllOf(children) if key == "all" else AnyOf(children)
    if key == "not":
        return Not(parse_predicate(value))
    raise PredicateError(f"Unknown predicate type '{key}'")


def predicate_to_data(predicate: "Predicate") -> Any:
    """Convert a predicate back to its JSON form."""
    if isinstance(predicate, Always):
        return True
    if isinstance(predicate, PlatformIn):
        return {"platform": list(predicate.platforms)}
    if isinstance(predicate, ArchitectureIn):
        return {"architecture": list(predicate.architectures)}
    if isinstance(predicate, ConfigurationIn):
        return {"configuration": list(predicate.configurations)}
    if isinstance(predicate, FeatureEnabled):
        return {"feature": predicate.name}
    if isinstance(predicate, AllOf):
        return {"all": [predicate_to_data(c) for c in predicate.children]}
    if isinstance(predicate, AnyOf):
        if not predicate.children:
            return False
        return {"any": [predicate_to_data(c) for c in predicate.children]}
    if isinstance(predicate, Not):
        return {"not": predicate_to_data(predicate.child)}
    raise PredicateError(f"Not a predicate: {predicate!r}")
