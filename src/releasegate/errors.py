"""Exceptions raised by releasegate.

Hierarchy:
    ReleaseGateError
     +-- ConfigError
     |    +-- ConfigValidationError   (invalid user configuration)
     |    +-- ConfigSourceError       (unreadable configuration file)
     +-- SchemeError
     |    +-- SchemeNotFoundError     (unknown versioning scheme id)
     +-- ReleaseDataError             (malformed release list)
"""

from __future__ import annotations

import json
from typing import Any


class ReleaseGateError(Exception):
    """Base exception for releasegate."""

    pass


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigError(ReleaseGateError):
    """Base configuration error."""

    pass


class ConfigValidationError(ConfigError):
    """A user-supplied configuration value is invalid.

    Retrying with the same input cannot succeed, so callers are expected to
    report the problem and skip the affected dependency.

    Attributes:
        category: Fixed tag identifying config validation failures.
        field: Name of the offending configuration field.
        config_file: Configuration file the value came from.
        validation_error: Short summary, e.g. "Invalid `allowedVersions`".
        validation_message: Human-readable explanation.
    """

    category = "config-validation"

    def __init__(
        self,
        message: str,
        *,
        field: str,
        validation_error: str | None = None,
        config_file: str = "config",
    ) -> None:
        self.field = field
        self.config_file = config_file
        self.validation_error = validation_error or f"Invalid `{field}`"
        self.validation_message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "category": self.category,
            "field": self.field,
            "configFile": self.config_file,
            "validationError": self.validation_error,
            "validationMessage": self.validation_message,
        }


class ConfigSourceError(ConfigError):
    """Configuration source error."""

    pass


def invalid_allowed_versions(expression: str) -> ConfigValidationError:
    """Build the error raised for an unparseable ``allowedVersions`` value."""
    return ConfigValidationError(
        "The following allowedVersions does not parse as a valid version "
        "or range: " + json.dumps(expression),
        field="allowedVersions",
    )


# =============================================================================
# Scheme Errors
# =============================================================================


class SchemeError(ReleaseGateError):
    """Base exception for versioning scheme errors."""

    def __init__(self, message: str, scheme_id: str | None = None):
        self.scheme_id = scheme_id
        super().__init__(message)


class SchemeNotFoundError(SchemeError, LookupError):
    """Raised when a requested versioning scheme is not registered."""

    pass


# =============================================================================
# Release Data Errors
# =============================================================================


class ReleaseDataError(ReleaseGateError):
    """Raised when a release list cannot be read or is malformed."""

    pass
