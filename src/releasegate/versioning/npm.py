"""npm-flavoured semantic versioning.

This is the generic scheme: besides serving npm dependencies it provides the
loose range matching that other schemes fall back to when an
``allowedVersions`` expression is written in npm range syntax
(``^1.2.0``, ``~1.2``, ``1.x``, ``>=1.0.0 <2.0.0``, ``1.0.0 - 1.4.0``,
``^1.0.0 || ^2.0.0``).
"""

from __future__ import annotations

import re
from functools import lru_cache

from semantic_version import NpmSpec, Version

from releasegate.versioning.base import VersioningScheme

ID = "npm"

_COERCE_PATTERN = re.compile(r"(\d+)(?:\.(\d+))?(?:\.(\d+))?")
_OPERATOR_SPACING = re.compile(r"(<=|>=|<|>|=|\^|~)\s+")
_PRERELEASE_COMPARATOR = re.compile(r"(\d+)\.(\d+)\.(\d+)-[0-9A-Za-z.-]+")


@lru_cache(maxsize=1024)
def parse_version(version: str) -> Version | None:
    """Parse a strict semver string; a single leading ``v`` is tolerated."""
    cleaned = version.strip()
    if cleaned.startswith("v"):
        cleaned = cleaned[1:]
    try:
        return Version(cleaned)
    except ValueError:
        return None


def _normalize_range(spec: str) -> str:
    """Close the gap npm allows between an operator and its version."""
    return _OPERATOR_SPACING.sub(r"\1", spec.strip())


@lru_cache(maxsize=256)
def _parse_range(spec: str) -> NpmSpec | None:
    try:
        return NpmSpec(_normalize_range(spec))
    except ValueError:
        return None


def _prerelease_triples(spec: str) -> set[tuple[int, int, int]]:
    """(major, minor, patch) of every comparator in ``spec`` with a pre-release."""
    return {
        (int(major), int(minor), int(patch))
        for major, minor, patch in _PRERELEASE_COMPARATOR.findall(spec)
    }


def valid_range(spec: str) -> bool:
    """Whether ``spec`` parses as an npm range."""
    return bool(spec and spec.strip()) and _parse_range(spec) is not None


def coerce(version: str) -> Version | None:
    """Loosely coerce a string into a semver version.

    Takes the first ``major[.minor[.patch]]`` run found anywhere in the
    string and drops everything else, so ``"v2.1-jre"`` becomes ``2.1.0``.
    Returns None when the string contains no digits.
    """
    match = _COERCE_PATTERN.search(version)
    if match is None:
        return None
    major, minor, patch = (int(part or 0) for part in match.groups())
    return Version(f"{major}.{minor}.{patch}")


def satisfies(version: Version | None, spec: str) -> bool:
    """Whether a (coerced) version satisfies an npm range.

    A pre-release only satisfies a ``||`` alternative that names a
    pre-release of the same major.minor.patch, so ``2.0.0-beta.1`` is
    outside ``<2.0.0`` but inside ``>=2.0.0-alpha.1``.
    """
    if version is None or _parse_range(spec) is None:
        return False

    for alternative in spec.split("||"):
        npm_range = _parse_range(alternative)
        if npm_range is None or not npm_range.match(version):
            continue
        if version.prerelease:
            triple = (version.major, version.minor, version.patch)
            if triple not in _prerelease_triples(alternative):
                continue
        return True
    return False


class NpmScheme(VersioningScheme):
    """Semantic versioning with npm range syntax."""

    id = ID
    display_name = "npm"

    def parse(self, version: str) -> Version | None:
        return parse_version(version)

    def is_valid(self, spec: str) -> bool:
        return self.is_version(spec) or valid_range(spec)

    def matches(self, version: str, spec: str) -> bool:
        parsed = self.parse(version)
        if parsed is None:
            return False
        exact = self.parse(spec)
        if exact is not None:
            return parsed == exact
        return satisfies(parsed, spec)

    def is_stable(self, version: str) -> bool:
        parsed = self.parse(version)
        return parsed is not None and not parsed.prerelease

    def release_triple(self, version: str) -> tuple[int, int, int] | None:
        parsed = self.parse(version)
        if parsed is None:
            return None
        return (parsed.major, parsed.minor, parsed.patch)
