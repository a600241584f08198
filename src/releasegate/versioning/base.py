"""Versioning scheme interface.

A versioning scheme knows how one ecosystem spells, orders and constrains
versions. The filter only talks to schemes through this interface and never
parses version strings itself.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar


class VersioningScheme(ABC):
    """Comparison, validation and range matching for one ecosystem.

    Subclasses implement ``parse`` (returning an orderable object, or None for
    strings that are not versions in this scheme) plus the range handling in
    ``is_valid`` and ``matches``. Unparseable versions are never greater than
    anything, never stable and never match a range.

    Schemes hold no mutable state and may be shared between threads.
    """

    id: ClassVar[str]
    display_name: ClassVar[str]

    #: Scheme of a secondary ecosystem whose range syntax is accepted as a
    #: last resort for ``allowedVersions`` (e.g. poetry -> pep440).
    fallback_scheme: "VersioningScheme | None" = None

    @abstractmethod
    def parse(self, version: str) -> Any | None:
        """Parse a version string, returning None if it is not a version."""

    @abstractmethod
    def is_valid(self, spec: str) -> bool:
        """Whether ``spec`` is a version or a range in this scheme."""

    @abstractmethod
    def matches(self, version: str, spec: str) -> bool:
        """Whether ``version`` satisfies the range or version ``spec``."""

    @abstractmethod
    def is_stable(self, version: str) -> bool:
        """Whether ``version`` is a final (non pre-release) version."""

    @abstractmethod
    def release_triple(self, version: str) -> tuple[int, int, int] | None:
        """Return (major, minor, patch), or None if unparseable."""

    def is_version(self, version: str | None) -> bool:
        return bool(version) and self.parse(version) is not None

    def is_greater_than(self, version: str, other: str) -> bool:
        left = self.parse(version)
        right = self.parse(other)
        if left is None or right is None:
            return False
        return left > right

    def get_major(self, version: str) -> int | None:
        triple = self.release_triple(version)
        return triple[0] if triple else None

    def get_minor(self, version: str) -> int | None:
        triple = self.release_triple(version)
        return triple[1] if triple else None

    def get_patch(self, version: str) -> int | None:
        triple = self.release_triple(version)
        return triple[2] if triple else None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id!r}>"
