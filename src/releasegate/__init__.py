"""releasegate - decide which published releases are valid upgrade targets."""

from releasegate.allowed import (
    AllowedVersionsMatcher,
    RegexCache,
    classify_allowed_versions,
    resolve_allowed_versions,
)
from releasegate.errors import (
    ConfigError,
    ConfigSourceError,
    ConfigValidationError,
    ReleaseDataError,
    ReleaseGateError,
    SchemeError,
    SchemeNotFoundError,
)
from releasegate.filter import FilterExit, FilterResult, VersionFilter, filter_versions
from releasegate.policy import FilterPolicy
from releasegate.types import Release
from releasegate.versioning import VersioningScheme, get_registry, get_scheme

__version__ = "0.1.0"

__all__ = [
    # Core
    "filter_versions",
    "VersionFilter",
    "FilterResult",
    "FilterExit",
    "FilterPolicy",
    "Release",
    # allowedVersions
    "resolve_allowed_versions",
    "classify_allowed_versions",
    "AllowedVersionsMatcher",
    "RegexCache",
    # Versioning
    "VersioningScheme",
    "get_registry",
    "get_scheme",
    # Errors
    "ReleaseGateError",
    "ConfigError",
    "ConfigValidationError",
    "ConfigSourceError",
    "SchemeError",
    "SchemeNotFoundError",
    "ReleaseDataError",
]
