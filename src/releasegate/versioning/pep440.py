"""PEP 440 versioning (PyPI)."""

from __future__ import annotations

from functools import lru_cache

from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import InvalidVersion, Version

from releasegate.versioning.base import VersioningScheme

ID = "pep440"


@lru_cache(maxsize=1024)
def parse_version(version: str) -> Version | None:
    try:
        return Version(version)
    except InvalidVersion:
        return None


@lru_cache(maxsize=256)
def parse_specifier(spec: str) -> SpecifierSet | None:
    """Parse a PEP 440 specifier set such as ``>=1.0,!=1.3.*,<2``."""
    if not spec.strip():
        return None
    try:
        return SpecifierSet(spec)
    except InvalidSpecifier:
        return None


def release_triple(version: Version) -> tuple[int, int, int]:
    """Pad the release segment so ``1.2`` reads as (1, 2, 0)."""
    release = tuple(version.release) + (0, 0, 0)
    return (release[0], release[1], release[2])


class Pep440Scheme(VersioningScheme):
    """PEP 440 versions and specifier sets.

    Specifiers are evaluated with pre-releases admitted, so whether a
    pre-release candidate survives is decided by the stability policy rather
    than by the specifier.
    """

    id = ID
    display_name = "PEP 440"

    def parse(self, version: str) -> Version | None:
        return parse_version(version)

    def is_valid(self, spec: str) -> bool:
        return self.is_version(spec) or parse_specifier(spec) is not None

    def matches(self, version: str, spec: str) -> bool:
        parsed = self.parse(version)
        if parsed is None:
            return False
        exact = self.parse(spec)
        if exact is not None:
            return parsed == exact
        specifier = parse_specifier(spec)
        return specifier is not None and specifier.contains(parsed, prereleases=True)

    def is_stable(self, version: str) -> bool:
        parsed = self.parse(version)
        return parsed is not None and not parsed.is_prerelease

    def release_triple(self, version: str) -> tuple[int, int, int] | None:
        parsed = self.parse(version)
        return release_triple(parsed) if parsed is not None else None
