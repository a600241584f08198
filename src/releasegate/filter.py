"""Version eligibility filter.

Given the version a dependency currently uses, the registry's ``latest`` tag
and the published releases, the filter narrows the releases down to valid
upgrade targets in four stages:

    A. baseline   keep releases strictly greater than the current version
    B. deprecated drop deprecated releases unless the current one is deprecated
    C. allowed    apply the ``allowedVersions`` expression
    D. stability  drop pre-releases, then cap at the ``latest`` tag

The pipeline is linear. It stops in exactly one terminal state
(:class:`FilterExit`), which is reported alongside the surviving releases.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence

from releasegate.allowed import RegexCache, resolve_allowed_versions
from releasegate.logging import StructuredLogger, get_logger
from releasegate.policy import FilterPolicy
from releasegate.types import Release
from releasegate.versioning.base import VersioningScheme
from releasegate.versioning.registry import get_scheme

_logger = get_logger(__name__)


class FilterExit(str, Enum):
    """Terminal state the filter pipeline stopped in."""

    NO_CURRENT_VERSION = "no-current-version"  # nothing to compare against
    UNSTABLE_ALLOWED = "unstable-allowed"  # followTag / ignoreUnstable=false
    CURRENT_UNSTABLE = "current-unstable"  # same-release pre-releases kept
    NO_LATEST = "no-latest"  # stable only, no ceiling known
    LATEST_IGNORED = "latest-ignored"  # stable only, respectLatest=false
    AHEAD_OF_LATEST = "ahead-of-latest"  # stable only, already past latest
    CAPPED_AT_LATEST = "capped-at-latest"  # stable and <= latest


@dataclass(frozen=True)
class FilterResult:
    """Surviving releases plus how the pipeline ended.

    Attributes:
        releases: Eligible releases, in input order.
        exit: Terminal state of the pipeline.
        allowed_strategy: Strategy used for ``allowedVersions``, if any.
    """

    releases: tuple[Release, ...]
    exit: FilterExit
    allowed_strategy: str | None = None

    @property
    def versions(self) -> list[str]:
        return [r.version for r in self.releases]

    def __len__(self) -> int:
        return len(self.releases)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "exit": self.exit.value,
            "allowedVersionsStrategy": self.allowed_strategy,
            "releases": [r.to_dict() for r in self.releases],
        }


class VersionFilter:
    """Filters candidate releases for one dependency.

    The versioning scheme is injected, or looked up once from the default
    registry by ``policy.versioning``.

    Example:
        >>> vf = VersionFilter(FilterPolicy(versioning="npm"))
        >>> result = vf.evaluate("1.0.0", "2.0.0", releases)
        >>> result.versions
        ['1.1.0', '2.0.0']
    """

    def __init__(
        self,
        policy: FilterPolicy,
        scheme: VersioningScheme | None = None,
        *,
        regex_cache: RegexCache | None = None,
        logger: StructuredLogger | None = None,
    ) -> None:
        """Initialize the filter.

        Args:
            policy: Filter policy for the dependency.
            scheme: Versioning scheme; resolved from ``policy.versioning``
                when omitted.
            regex_cache: Cache for compiled ``allowedVersions`` patterns.
            logger: Diagnostics sink.

        Raises:
            SchemeNotFoundError: If ``policy.versioning`` is unknown.
        """
        self.policy = policy
        self.scheme = scheme if scheme is not None else get_scheme(policy.versioning)
        self._regex_cache = regex_cache
        self._logger = logger or _logger

    def filter(
        self,
        current_version: str | None,
        latest_version: str | None,
        releases: Sequence[Release],
    ) -> list[Release]:
        """Return the eligible releases (see :meth:`evaluate`)."""
        return list(self.evaluate(current_version, latest_version, releases).releases)

    def evaluate(
        self,
        current_version: str | None,
        latest_version: str | None,
        releases: Sequence[Release],
    ) -> FilterResult:
        """Run the filter pipeline.

        Args:
            current_version: Version currently in use; empty means unknown.
            latest_version: The registry's ``latest`` tag, if any.
            releases: Candidate releases in registry order.

        Returns:
            FilterResult with the eligible releases in input order.

        Raises:
            ConfigValidationError: If ``allowedVersions`` is not a valid
                regex, negated regex or range.
        """
        if not current_version:
            return FilterResult((), FilterExit.NO_CURRENT_VERSION)

        scheme = self.scheme
        candidates = [
            r for r in releases if scheme.is_greater_than(r.version, current_version)
        ]
        candidates = self._drop_deprecated(current_version, releases, candidates)

        strategy = None
        if self.policy.allowed_versions:
            matcher = resolve_allowed_versions(
                self.policy.allowed_versions,
                scheme,
                regex_cache=self._regex_cache,
                logger=self._logger,
                dep_name=self.policy.dep_name,
            )
            strategy = matcher.strategy
            candidates = matcher.filter(candidates)

        if self.policy.unstable_allowed:
            return self._result(candidates, FilterExit.UNSTABLE_ALLOWED, strategy)

        if not scheme.is_stable(current_version):
            candidates = [
                r
                for r in candidates
                if scheme.is_stable(r.version)
                or self._same_release(r.version, current_version)
            ]
            return self._result(candidates, FilterExit.CURRENT_UNSTABLE, strategy)

        candidates = [r for r in candidates if scheme.is_stable(r.version)]

        if not latest_version:
            return self._result(candidates, FilterExit.NO_LATEST, strategy)
        if self.policy.respect_latest is False:
            return self._result(candidates, FilterExit.LATEST_IGNORED, strategy)
        if scheme.is_greater_than(current_version, latest_version):
            return self._result(candidates, FilterExit.AHEAD_OF_LATEST, strategy)

        candidates = [
            r for r in candidates if not scheme.is_greater_than(r.version, latest_version)
        ]
        return self._result(candidates, FilterExit.CAPPED_AT_LATEST, strategy)

    def _drop_deprecated(
        self,
        current_version: str,
        releases: Sequence[Release],
        candidates: list[Release],
    ) -> list[Release]:
        """Don't move from a non-deprecated release onto a deprecated one."""
        if not self.policy.ignore_deprecated:
            return candidates

        current = next((r for r in releases if r.version == current_version), None)
        if current is None or current.is_deprecated:
            return candidates

        kept = []
        for release in candidates:
            if release.is_deprecated:
                self._logger.debug(
                    f"Skipping {self.policy.dep_name}@{release.version} "
                    "because it is deprecated",
                    dep_name=self.policy.dep_name,
                    version=release.version,
                )
            else:
                kept.append(release)
        return kept

    def _same_release(self, version: str, current_version: str) -> bool:
        """Whether both versions share major, minor and patch."""
        scheme = self.scheme
        return (
            scheme.get_major(version) == scheme.get_major(current_version)
            and scheme.get_minor(version) == scheme.get_minor(current_version)
            and scheme.get_patch(version) == scheme.get_patch(current_version)
        )

    @staticmethod
    def _result(
        candidates: list[Release],
        exit: FilterExit,
        strategy: str | None,
    ) -> FilterResult:
        return FilterResult(tuple(candidates), exit, strategy)


def filter_versions(
    policy: FilterPolicy,
    current_version: str | None,
    latest_version: str | None,
    releases: Sequence[Release],
    *,
    scheme: VersioningScheme | None = None,
    regex_cache: RegexCache | None = None,
    logger: StructuredLogger | None = None,
) -> list[Release]:
    """Return the releases that are valid upgrade targets.

    Args:
        policy: Filter policy for the dependency.
        current_version: Version currently in use; empty means unknown and
            yields no candidates.
        latest_version: The registry's ``latest`` tag, if any.
        releases: Candidate releases in registry order.
        scheme: Versioning scheme override (defaults to ``policy.versioning``).
        regex_cache: Cache for compiled ``allowedVersions`` patterns.
        logger: Diagnostics sink.

    Returns:
        Eligible releases, in input order.

    Raises:
        ConfigValidationError: If ``allowedVersions`` cannot be interpreted.
        SchemeNotFoundError: If ``policy.versioning`` is unknown.
    """
    version_filter = VersionFilter(
        policy, scheme, regex_cache=regex_cache, logger=logger
    )
    return version_filter.filter(current_version, latest_version, releases)
