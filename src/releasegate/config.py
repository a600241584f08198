"""Configuration loading for releasegate.

Policies and settings are assembled from several sources, merged in
ascending priority (later sources override earlier ones):

    ConfigSource[]
         |
         +---> DictConfigSource   (in-process mappings, priority 0)
         +---> FileConfigSource   (YAML, JSON, TOML, priority 50)
         +---> EnvConfigSource    (RELEASEGATE_* variables, priority 100)
         |
         v
    load_policy() -> FilterPolicy
    load_settings() -> Settings

A configuration file holds policy keys at the top level and an optional
``logging`` section:

    versioning: pep440
    allowedVersions: "<3.0"
    ignoreDeprecated: true
    logging:
      level: debug
      format: json

Usage:
    >>> policy = load_policy(
    ...     FileConfigSource("releasegate.yaml"),
    ...     EnvConfigSource(),
    ...     overrides={"depName": "requests"},
    ... )
"""

from __future__ import annotations

import json
import os
import tomllib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from releasegate.errors import ConfigSourceError, ConfigValidationError
from releasegate.policy import KEY_ALIASES, FilterPolicy

LOGGING_KEY = "logging"
OVERRIDE_PRIORITY = 1000

_TRUE_VALUES = ("true", "yes", "1", "on")
_FALSE_VALUES = ("false", "no", "0", "off")
_BOOL_KEYS = ("ignoreDeprecated", "ignoreUnstable", "respectLatest")


# =============================================================================
# Configuration Sources
# =============================================================================


class ConfigSource(ABC):
    """Abstract base class for configuration sources.

    Sources are merged in priority order (higher priority overrides lower).
    """

    def __init__(self, priority: int = 0) -> None:
        self._priority = priority

    @property
    def priority(self) -> int:
        return self._priority

    @abstractmethod
    def load(self) -> dict[str, Any]:
        """Load configuration from source.

        Returns:
            Dictionary of configuration values.
        """
        pass


class DictConfigSource(ConfigSource):
    """In-process mapping."""

    def __init__(self, data: dict[str, Any], priority: int = 0) -> None:
        super().__init__(priority)
        self._data = data

    def load(self) -> dict[str, Any]:
        return dict(self._data)


class FileConfigSource(ConfigSource):
    """File-based configuration source.

    Supports YAML, JSON and TOML, detected from the file extension.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        required: bool = False,
        priority: int = 50,
    ) -> None:
        """Initialize file source.

        Args:
            path: Path to configuration file.
            required: Raise error if file not found.
            priority: Source priority.
        """
        super().__init__(priority)
        self._path = Path(path)
        self._required = required

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[str, Any]:
        if not self._path.exists():
            if self._required:
                raise ConfigSourceError(f"Configuration file not found: {self._path}")
            return {}

        try:
            content = self._path.read_text(encoding="utf-8")
            data = self._parse(content)
        except ConfigSourceError:
            raise
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigSourceError(
                f"Failed to load configuration from {self._path}: {e}"
            ) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigSourceError(
                f"Configuration in {self._path} must be a mapping, "
                f"got {type(data).__name__}"
            )
        return data

    def _parse(self, content: str) -> Any:
        suffix = self._path.suffix.lower()
        if suffix in (".yaml", ".yml"):
            return yaml.safe_load(content)
        if suffix == ".json":
            return json.loads(content)
        if suffix == ".toml":
            return tomllib.loads(content)
        raise ConfigSourceError(f"Unsupported configuration format: {suffix}")


class EnvConfigSource(ConfigSource):
    """Environment variable configuration source.

    Example:
        RELEASEGATE_ALLOWED_VERSIONS="<2.0.0"
        RELEASEGATE_IGNORE_UNSTABLE=false
        RELEASEGATE_LOG_LEVEL=debug

        Will produce:
        {"allowedVersions": "<2.0.0", "ignoreUnstable": False,
         "logging": {"level": "debug"}}

    Variables that do not name a known option are ignored.
    """

    def __init__(
        self,
        prefix: str = "RELEASEGATE",
        priority: int = 100,
        environ: dict[str, str] | None = None,
    ) -> None:
        super().__init__(priority)
        self._prefix = f"{prefix}_"
        self._environ = environ

    def load(self) -> dict[str, Any]:
        environ = self._environ if self._environ is not None else os.environ
        snake_to_key = {snake: key for key, snake in KEY_ALIASES.items()}
        result: dict[str, Any] = {}

        for name, value in environ.items():
            if not name.startswith(self._prefix):
                continue
            suffix = name[len(self._prefix):].lower()

            if suffix.startswith("log_"):
                result.setdefault(LOGGING_KEY, {})[suffix[4:]] = value
                continue

            key = snake_to_key.get(suffix)
            if key is None:
                continue
            result[key] = _parse_bool(key, value) if key in _BOOL_KEYS else value

        return result


def _parse_bool(key: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigValidationError(
        f"{key} must be a boolean, got {value!r}",
        field=key,
    )


# =============================================================================
# Loading
# =============================================================================


def merge_sources(*sources: ConfigSource) -> dict[str, Any]:
    """Merge sources in ascending priority.

    Policy keys are normalized to their camelCase spelling so that
    ``allowed_versions`` in one source overrides ``allowedVersions`` in
    another. ``logging`` sections merge per key.
    """
    canonical = {snake: key for key, snake in KEY_ALIASES.items()}
    merged: dict[str, Any] = {}
    for source in sorted(sources, key=lambda s: s.priority):
        for key, value in source.load().items():
            key = canonical.get(key, key)
            if key == LOGGING_KEY and isinstance(value, dict):
                merged.setdefault(LOGGING_KEY, {}).update(value)
            else:
                merged[key] = value
    return merged


def load_policy(
    *sources: ConfigSource,
    overrides: dict[str, Any] | None = None,
) -> FilterPolicy:
    """Build a FilterPolicy from configuration sources.

    Args:
        *sources: Configuration sources.
        overrides: Values applied after all sources (e.g. CLI flags).

    Raises:
        ConfigValidationError: On unknown keys or ill-typed values.
        ConfigSourceError: If a source cannot be read.
    """
    if overrides:
        sources = (*sources, DictConfigSource(overrides, priority=OVERRIDE_PRIORITY))
    merged = merge_sources(*sources)
    merged.pop(LOGGING_KEY, None)
    return FilterPolicy.from_dict(merged)


@dataclass(frozen=True)
class Settings:
    """Process-level settings."""

    log_level: str = "INFO"
    log_format: str = "console"


def load_settings(*sources: ConfigSource) -> Settings:
    """Read the ``logging`` section of the merged configuration."""
    section = merge_sources(*sources).get(LOGGING_KEY) or {}
    if not isinstance(section, dict):
        raise ConfigValidationError(
            "logging must be a mapping",
            field=LOGGING_KEY,
        )
    defaults = Settings()
    return Settings(
        log_level=str(section.get("level", defaults.log_level)),
        log_format=str(section.get("format", defaults.log_format)),
    )
