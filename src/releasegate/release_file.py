"""Reading release lists from JSON or YAML files.

Accepted shapes:

    ["1.0.0", "1.1.0", {"version": "1.2.0", "isDeprecated": true}]

or a registry-style document:

    {"releases": [...], "tags": {"latest": "1.1.0"}}
    {"releases": [...], "latestVersion": "1.1.0"}
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from releasegate.errors import ReleaseDataError
from releasegate.types import Release


@dataclass(frozen=True)
class ReleaseFile:
    """Releases read from a file, plus the ``latest`` tag if it had one."""

    releases: tuple[Release, ...]
    latest_version: str | None = None


def _parse_entry(entry: Any) -> Release:
    if isinstance(entry, str):
        return Release(version=entry)
    if isinstance(entry, dict):
        return Release.from_dict(entry)
    raise ReleaseDataError(f"Unsupported release entry: {entry!r}")


def parse_release_document(data: Any) -> ReleaseFile:
    """Interpret an already-decoded release document.

    Raises:
        ReleaseDataError: If the document has an unsupported shape.
    """
    latest = None
    if isinstance(data, dict):
        tags = data.get("tags") or {}
        if not isinstance(tags, dict):
            raise ReleaseDataError(f"tags must be a mapping, got {tags!r}")
        latest = data.get("latestVersion") or tags.get("latest")
        data = data.get("releases")

    if not isinstance(data, list):
        raise ReleaseDataError(
            "Release document must be a list or a mapping with a 'releases' list"
        )
    if latest is not None and not isinstance(latest, str):
        raise ReleaseDataError(f"latest version must be a string, got {latest!r}")

    return ReleaseFile(
        releases=tuple(_parse_entry(entry) for entry in data),
        latest_version=latest,
    )


def load_release_file(path: str | Path) -> ReleaseFile:
    """Load releases from a ``.json``, ``.yaml`` or ``.yml`` file.

    Raises:
        ReleaseDataError: If the file cannot be read or parsed.
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(content)
        else:
            data = json.loads(content)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ReleaseDataError(f"Failed to read releases from {path}: {e}") from e

    return parse_release_document(data)
