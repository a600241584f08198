"""Resolution of ``allowedVersions`` expressions.

An expression is classified by the first strategy that applies, in this
order:

    1. regex          ``/^1\\./``        keep versions matching the pattern
    2. regex-exclude  ``!/beta/``       keep versions not matching
    3. scheme-range   native range of the active versioning scheme
    4. npm-fallback   npm range syntax, on schemes other than npm
    5. scheme-fallback range of the scheme's secondary ecosystem
                      (poetry -> pep440)

An expression no strategy accepts is a configuration error. The order is
fixed: an expression that is both a regex and a valid range is a regex.
"""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass
from typing import Callable, Iterable, TypeVar

from releasegate.errors import (
    ConfigValidationError,
    SchemeError,
    invalid_allowed_versions,
)
from releasegate.logging import StructuredLogger, get_logger
from releasegate.types import Release
from releasegate.versioning import npm
from releasegate.versioning.base import VersioningScheme

_logger = get_logger(__name__)

R = TypeVar("R", bound=Release)

# JavaScript spells named groups (?<name>...) and backreferences \k<name>
_JS_NAMED_GROUP = re.compile(r"\(\?<(?![=!])")
_JS_NAMED_BACKREF = re.compile(r"\\k<(\w+)>")


def _python_regex(source: str) -> str:
    """Rewrite JavaScript-only group syntax into its ``re`` spelling."""
    source = _JS_NAMED_GROUP.sub("(?P<", source)
    return _JS_NAMED_BACKREF.sub(r"(?P=\1)", source)


class RegexCache:
    """Thread-safe memo of compiled ``allowedVersions`` patterns.

    Keys are the literal expressions (``/^1\\./`` and ``!/^1\\./`` are
    separate entries); compilation is idempotent, so two threads racing on
    the same key simply produce equal patterns.
    """

    def __init__(self) -> None:
        self._patterns: dict[str, re.Pattern[str]] = {}
        self._lock = threading.Lock()

    def get(self, key: str, source: str) -> re.Pattern[str]:
        """Return the pattern for ``key``, compiling ``source`` on a miss.

        Raises:
            ConfigValidationError: If ``source`` is not a valid regex.
        """
        pattern = self._patterns.get(key)
        if pattern is not None:
            return pattern

        try:
            compiled = re.compile(source)
        except re.error as e:
            raise ConfigValidationError(
                f"Invalid regular expression in allowedVersions {key!r}: {e}",
                field="allowedVersions",
            ) from e

        with self._lock:
            return self._patterns.setdefault(key, compiled)

    def clear(self) -> None:
        with self._lock:
            self._patterns.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._patterns

    def __len__(self) -> int:
        return len(self._patterns)


default_regex_cache = RegexCache()


@dataclass(frozen=True)
class MatchContext:
    """Collaborators available to strategies while building a predicate."""

    scheme: VersioningScheme
    regex_cache: RegexCache
    logger: StructuredLogger
    dep_name: str | None = None


VersionPredicate = Callable[[str], bool]


@dataclass(frozen=True)
class AllowedVersionsStrategy:
    """One way of interpreting an ``allowedVersions`` expression."""

    name: str
    applies: Callable[[str, VersioningScheme], bool]
    build: Callable[[str, MatchContext], VersionPredicate]


@dataclass(frozen=True)
class AllowedVersionsMatcher:
    """A resolved expression: the winning strategy and its predicate."""

    expression: str
    strategy: str
    predicate: VersionPredicate

    def __call__(self, version: str) -> bool:
        return self.predicate(version)

    def filter(self, releases: Iterable[R]) -> list[R]:
        return [r for r in releases if self.predicate(r.version)]


# =============================================================================
# Strategies
# =============================================================================


def _is_regex(expression: str, scheme: VersioningScheme) -> bool:
    return len(expression) > 1 and expression.startswith("/") and expression.endswith("/")


def _build_regex(expression: str, ctx: MatchContext) -> VersionPredicate:
    pattern = ctx.regex_cache.get(expression, _python_regex(expression[1:-1]))
    return lambda version: pattern.search(version) is not None


def _is_negated_regex(expression: str, scheme: VersioningScheme) -> bool:
    return len(expression) > 2 and expression.startswith("!/") and expression.endswith("/")


def _build_negated_regex(expression: str, ctx: MatchContext) -> VersionPredicate:
    pattern = ctx.regex_cache.get(expression, _python_regex(expression[2:-1]))
    return lambda version: pattern.search(version) is None


def _is_scheme_range(expression: str, scheme: VersioningScheme) -> bool:
    return scheme.is_valid(expression)


def _build_scheme_range(expression: str, ctx: MatchContext) -> VersionPredicate:
    scheme = ctx.scheme
    return lambda version: scheme.matches(version, expression)


def _is_npm_fallback(expression: str, scheme: VersioningScheme) -> bool:
    return scheme.id != npm.ID and npm.valid_range(expression)


def _build_npm_fallback(expression: str, ctx: MatchContext) -> VersionPredicate:
    ctx.logger.debug(
        "Falling back to npm semver syntax for allowedVersions",
        dep_name=ctx.dep_name,
    )
    return lambda version: npm.satisfies(npm.coerce(version), expression)


def _is_scheme_fallback(expression: str, scheme: VersioningScheme) -> bool:
    fallback = scheme.fallback_scheme
    return fallback is not None and fallback.is_valid(expression)


def _build_scheme_fallback(expression: str, ctx: MatchContext) -> VersionPredicate:
    fallback = ctx.scheme.fallback_scheme
    if fallback is None:
        raise SchemeError(
            f"Versioning scheme '{ctx.scheme.id}' has no fallback scheme",
            scheme_id=ctx.scheme.id,
        )
    ctx.logger.debug(
        f"Falling back to {fallback.id} syntax for allowedVersions",
        dep_name=ctx.dep_name,
    )
    return lambda version: fallback.matches(version, expression)


STRATEGIES: tuple[AllowedVersionsStrategy, ...] = (
    AllowedVersionsStrategy("regex", _is_regex, _build_regex),
    AllowedVersionsStrategy("regex-exclude", _is_negated_regex, _build_negated_regex),
    AllowedVersionsStrategy("scheme-range", _is_scheme_range, _build_scheme_range),
    AllowedVersionsStrategy("npm-fallback", _is_npm_fallback, _build_npm_fallback),
    AllowedVersionsStrategy("scheme-fallback", _is_scheme_fallback, _build_scheme_fallback),
)


def classify_allowed_versions(
    expression: str,
    scheme: VersioningScheme,
) -> str | None:
    """Name the strategy that would handle ``expression``, or None."""
    for strategy in STRATEGIES:
        if strategy.applies(expression, scheme):
            return strategy.name
    return None


def resolve_allowed_versions(
    expression: str,
    scheme: VersioningScheme,
    *,
    regex_cache: RegexCache | None = None,
    logger: StructuredLogger | None = None,
    dep_name: str | None = None,
) -> AllowedVersionsMatcher:
    """Resolve an expression into a matcher.

    Args:
        expression: The ``allowedVersions`` value.
        scheme: Versioning scheme of the dependency.
        regex_cache: Pattern cache (defaults to the shared cache).
        logger: Diagnostics sink.
        dep_name: Dependency name for diagnostics.

    Returns:
        AllowedVersionsMatcher for the first applicable strategy.

    Raises:
        ConfigValidationError: If no strategy accepts the expression.
    """
    ctx = MatchContext(
        scheme=scheme,
        regex_cache=regex_cache if regex_cache is not None else default_regex_cache,
        logger=logger or _logger,
        dep_name=dep_name,
    )
    for strategy in STRATEGIES:
        if strategy.applies(expression, scheme):
            return AllowedVersionsMatcher(
                expression=expression,
                strategy=strategy.name,
                predicate=strategy.build(expression, ctx),
            )
    raise invalid_allowed_versions(expression)
