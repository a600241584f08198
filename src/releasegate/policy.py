"""Per-dependency filter policy."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from typing import Any

from releasegate.errors import ConfigValidationError

# Config key (as written by users) -> dataclass field
KEY_ALIASES: dict[str, str] = {
    "versioning": "versioning",
    "allowedVersions": "allowed_versions",
    "followTag": "follow_tag",
    "ignoreDeprecated": "ignore_deprecated",
    "ignoreUnstable": "ignore_unstable",
    "respectLatest": "respect_latest",
    "depName": "dep_name",
}

_CONFIG_KEYS = {value: key for key, value in KEY_ALIASES.items()}
_BOOL_FIELDS = ("ignore_deprecated", "ignore_unstable", "respect_latest")
_STR_FIELDS = ("allowed_versions", "follow_tag", "dep_name")


@dataclass(frozen=True)
class FilterPolicy:
    """Filter configuration for a single dependency.

    The tri-state booleans distinguish "not configured" (None) from an
    explicit choice: only an explicit ``False`` disables unstable filtering
    or the latest-tag ceiling.

    Attributes:
        versioning: Id of the versioning scheme governing this dependency.
        allowed_versions: Allow-list expression (regex, negated regex, or range).
        follow_tag: Registry tag being followed instead of ``latest``.
        ignore_deprecated: Skip deprecated releases when the current one isn't.
        ignore_unstable: Drop pre-releases (default behaviour unless False).
        respect_latest: Never propose versions above the ``latest`` tag.
        dep_name: Dependency name, used in diagnostics only.
    """

    versioning: str = "npm"
    allowed_versions: str | None = None
    follow_tag: str | None = None
    ignore_deprecated: bool | None = None
    ignore_unstable: bool | None = None
    respect_latest: bool | None = None
    dep_name: str | None = None

    def __post_init__(self) -> None:
        """Validate field types."""
        if not isinstance(self.versioning, str) or not self.versioning:
            raise ConfigValidationError(
                f"versioning must be a non-empty string, got {self.versioning!r}",
                field="versioning",
            )
        for name in _STR_FIELDS:
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                raise ConfigValidationError(
                    f"{_CONFIG_KEYS[name]} must be a string, got {value!r}",
                    field=_CONFIG_KEYS[name],
                )
        for name in _BOOL_FIELDS:
            value = getattr(self, name)
            if value is not None and not isinstance(value, bool):
                raise ConfigValidationError(
                    f"{_CONFIG_KEYS[name]} must be a boolean, got {value!r}",
                    field=_CONFIG_KEYS[name],
                )

    @property
    def unstable_allowed(self) -> bool:
        """Whether stability and ceiling filtering are bypassed."""
        return bool(self.follow_tag) or self.ignore_unstable is False

    def with_overrides(self, **changes: Any) -> "FilterPolicy":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a config-style dictionary, omitting unset values."""
        return {
            _CONFIG_KEYS[key]: value
            for key, value in asdict(self).items()
            if value is not None
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FilterPolicy":
        """Create from a config mapping.

        Both camelCase (``allowedVersions``) and snake_case
        (``allowed_versions``) keys are accepted.

        Raises:
            ConfigValidationError: On unknown keys or ill-typed values.
        """
        field_names = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            name = KEY_ALIASES.get(key, key)
            if name not in field_names:
                raise ConfigValidationError(
                    f"Unknown filter option: {key!r}",
                    field=key,
                )
            kwargs[name] = value
        return cls(**kwargs)
