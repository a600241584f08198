"""Shared fixtures for releasegate tests."""

from __future__ import annotations

from typing import Callable

import pytest

from releasegate.allowed import RegexCache
from releasegate.logging import LogLevel, MemoryHandler, StructuredLogger, configure_logging
from releasegate.types import Release
from releasegate.versioning.base import VersioningScheme


# =============================================================================
# Test Doubles
# =============================================================================


class FakeScheme(VersioningScheme):
    """Dotted-integer versions with an optional ``-tag`` pre-release suffix.

    Every call is recorded. Specs are valid when they start with ``=`` (exact
    match), or always when ``accept_any_spec`` is set.
    """

    id = "fake"
    display_name = "Fake"

    def __init__(self, accept_any_spec: bool = False) -> None:
        self.accept_any_spec = accept_any_spec
        self.calls: list[tuple[str, tuple[str, ...]]] = []

    def parse(self, version: str):
        release, _, tag = version.partition("-")
        try:
            parts = tuple(int(p) for p in release.split("."))
        except ValueError:
            return None
        # Pre-releases sort before their release
        return parts + ((0, tag) if tag else (1, ""))

    def is_greater_than(self, version: str, other: str) -> bool:
        self.calls.append(("is_greater_than", (version, other)))
        return super().is_greater_than(version, other)

    def is_valid(self, spec: str) -> bool:
        self.calls.append(("is_valid", (spec,)))
        return self.accept_any_spec or spec.startswith("=")

    def matches(self, version: str, spec: str) -> bool:
        self.calls.append(("matches", (version, spec)))
        return spec.startswith("=") and version == spec[1:]

    def is_stable(self, version: str) -> bool:
        return self.parse(version) is not None and "-" not in version

    def release_triple(self, version: str):
        parsed = self.parse(version)
        if parsed is None:
            return None
        release = version.partition("-")[0].split(".") + ["0", "0", "0"]
        return (int(release[0]), int(release[1]), int(release[2]))


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def make_releases() -> Callable[..., list[Release]]:
    """Build releases from version strings; ``deprecated`` lists flagged ones."""

    def _make(*versions: str, deprecated: tuple[str, ...] = ()) -> list[Release]:
        return [Release(version=v, is_deprecated=v in deprecated) for v in versions]

    return _make


@pytest.fixture
def fake_scheme() -> FakeScheme:
    return FakeScheme()


@pytest.fixture
def log_handler() -> MemoryHandler:
    return MemoryHandler()


@pytest.fixture
def memory_logger(log_handler: MemoryHandler) -> StructuredLogger:
    """Debug-level logger that records into ``log_handler``."""
    return StructuredLogger("test", level=LogLevel.DEBUG, handlers=[log_handler])


@pytest.fixture
def regex_cache() -> RegexCache:
    return RegexCache()


@pytest.fixture(autouse=True)
def reset_logging():
    """Restore the default logging configuration after each test."""
    yield
    configure_logging()
