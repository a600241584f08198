"""Type definitions for releasegate."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from releasegate.errors import ReleaseDataError


@dataclass(frozen=True)
class Release:
    """One published release of a dependency.

    Attributes:
        version: Version string, interpreted by the active versioning scheme.
        is_deprecated: Whether the registry marks this release as deprecated.
        release_timestamp: Publication time as reported by the registry.
        changelog_url: Link to release notes, if known.
    """

    version: str
    is_deprecated: bool = False
    release_timestamp: str | None = None
    changelog_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a registry-style dictionary."""
        data: dict[str, Any] = {"version": self.version}
        if self.is_deprecated:
            data["isDeprecated"] = True
        if self.release_timestamp:
            data["releaseTimestamp"] = self.release_timestamp
        if self.changelog_url:
            data["changelogUrl"] = self.changelog_url
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Release":
        """Create from a dictionary.

        Accepts registry camelCase keys (``isDeprecated``) as well as
        snake_case keys (``is_deprecated``).

        Raises:
            ReleaseDataError: If the version is missing or not a string,
                or ``isDeprecated`` is not a boolean.
        """
        version = data.get("version")
        if not isinstance(version, str) or not version:
            raise ReleaseDataError(f"Release entry has no version: {data!r}")

        deprecated = data.get("isDeprecated", data.get("is_deprecated"))
        if deprecated is None:
            deprecated = False
        if not isinstance(deprecated, bool):
            raise ReleaseDataError(
                f"isDeprecated must be a boolean, got {deprecated!r}"
            )
        return cls(
            version=version,
            is_deprecated=deprecated,
            release_timestamp=data.get(
                "releaseTimestamp", data.get("release_timestamp")
            ),
            changelog_url=data.get("changelogUrl", data.get("changelog_url")),
        )
