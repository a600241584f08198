"""Strict SemVer 2.0 scheme.

Only exact versions are valid specifiers here; range expressions in
``allowedVersions`` are handled by the npm fallback instead.
"""

from __future__ import annotations

from semantic_version import Version

from releasegate.versioning.base import VersioningScheme

ID = "semver"


class SemverScheme(VersioningScheme):
    """Strict semantic versioning (no ``v`` prefix, no ranges)."""

    id = ID
    display_name = "Semantic Versioning"

    def parse(self, version: str) -> Version | None:
        try:
            return Version(version)
        except ValueError:
            return None

    def is_valid(self, spec: str) -> bool:
        return self.is_version(spec)

    def matches(self, version: str, spec: str) -> bool:
        parsed = self.parse(version)
        return parsed is not None and parsed == self.parse(spec)

    def is_stable(self, version: str) -> bool:
        parsed = self.parse(version)
        return parsed is not None and not parsed.prerelease

    def release_triple(self, version: str) -> tuple[int, int, int] | None:
        parsed = self.parse(version)
        if parsed is None:
            return None
        return (parsed.major, parsed.minor, parsed.patch)
