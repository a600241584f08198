"""Versioning schemes.

Components:
    - VersioningScheme: comparison/validation/matching interface
    - SchemeRegistry: thread-safe lookup by scheme id
    - NpmScheme, SemverScheme, Pep440Scheme, PoetryScheme: built-in schemes

Example:
    >>> from releasegate.versioning import get_scheme
    >>> npm = get_scheme("npm")
    >>> npm.matches("1.4.0", "^1.2.0")
    True
"""

from __future__ import annotations

from releasegate.versioning.base import VersioningScheme
from releasegate.versioning.npm import NpmScheme
from releasegate.versioning.pep440 import Pep440Scheme
from releasegate.versioning.poetry import PoetryScheme
from releasegate.versioning.registry import (
    SchemeRegistry,
    get_registry,
    get_scheme,
)
from releasegate.versioning.semver import SemverScheme

__all__ = [
    "VersioningScheme",
    "SchemeRegistry",
    "get_registry",
    "get_scheme",
    "NpmScheme",
    "SemverScheme",
    "Pep440Scheme",
    "PoetryScheme",
]
