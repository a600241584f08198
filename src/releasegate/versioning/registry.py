"""Registry of versioning schemes.

This module provides a thread-safe registry for versioning schemes that
allows registration, lookup by id and enumeration.
"""

from __future__ import annotations

import threading
from typing import Iterator

from releasegate.errors import SchemeError, SchemeNotFoundError
from releasegate.versioning.base import VersioningScheme


class SchemeRegistry:
    """Thread-safe registry of versioning schemes keyed by id.

    Example:
        >>> registry = SchemeRegistry()
        >>> registry.register(NpmScheme())
        >>> scheme = registry.get("npm")
    """

    def __init__(self) -> None:
        self._schemes: dict[str, VersioningScheme] = {}
        self._lock = threading.RLock()

    def register(self, scheme: VersioningScheme, *, replace: bool = False) -> None:
        """Register a scheme.

        Args:
            scheme: Scheme instance to register.
            replace: Overwrite an existing scheme with the same id.

        Raises:
            SchemeError: If the id is already registered and ``replace`` is False.
        """
        with self._lock:
            if scheme.id in self._schemes and not replace:
                raise SchemeError(
                    f"Versioning scheme '{scheme.id}' is already registered",
                    scheme_id=scheme.id,
                )
            self._schemes[scheme.id] = scheme

    def unregister(self, scheme_id: str) -> VersioningScheme:
        """Remove and return a scheme.

        Raises:
            SchemeNotFoundError: If the scheme is not registered.
        """
        with self._lock:
            if scheme_id not in self._schemes:
                raise SchemeNotFoundError(
                    f"Versioning scheme '{scheme_id}' is not registered",
                    scheme_id=scheme_id,
                )
            return self._schemes.pop(scheme_id)

    def get(self, scheme_id: str) -> VersioningScheme:
        """Get a scheme by id.

        Raises:
            SchemeNotFoundError: If the scheme is not registered.
        """
        with self._lock:
            if scheme_id not in self._schemes:
                raise SchemeNotFoundError(
                    f"Versioning scheme '{scheme_id}' not found. "
                    f"Available: {', '.join(sorted(self._schemes))}",
                    scheme_id=scheme_id,
                )
            return self._schemes[scheme_id]

    def get_or_none(self, scheme_id: str) -> VersioningScheme | None:
        with self._lock:
            return self._schemes.get(scheme_id)

    def list_ids(self) -> list[str]:
        with self._lock:
            return sorted(self._schemes)

    def __contains__(self, scheme_id: object) -> bool:
        with self._lock:
            return scheme_id in self._schemes

    def __len__(self) -> int:
        with self._lock:
            return len(self._schemes)

    def __iter__(self) -> Iterator[VersioningScheme]:
        with self._lock:
            return iter(list(self._schemes.values()))


_default_registry: SchemeRegistry | None = None
_default_lock = threading.Lock()


def _create_default_registry() -> SchemeRegistry:
    from releasegate.versioning.npm import NpmScheme
    from releasegate.versioning.pep440 import Pep440Scheme
    from releasegate.versioning.poetry import PoetryScheme
    from releasegate.versioning.semver import SemverScheme

    registry = SchemeRegistry()
    for scheme in (NpmScheme(), SemverScheme(), Pep440Scheme(), PoetryScheme()):
        registry.register(scheme)
    return registry


def get_registry() -> SchemeRegistry:
    """Return the process-wide registry, populated with the built-in schemes."""
    global _default_registry

    with _default_lock:
        if _default_registry is None:
            _default_registry = _create_default_registry()
        return _default_registry


def get_scheme(scheme_id: str) -> VersioningScheme:
    """Look up a scheme in the default registry.

    Raises:
        SchemeNotFoundError: If the scheme id is unknown.
    """
    return get_registry().get(scheme_id)
