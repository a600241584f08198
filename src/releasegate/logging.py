"""Structured logging for releasegate.

Diagnostics are emitted as a message plus key/value fields so that operators
can audit why a release was dropped (for example ``dep_name`` and
``version`` on every "skipping deprecated release" record).

Components:
    - LogLevel / LogRecord: severity and the structured record
    - JSONFormatter, LogfmtFormatter, ConsoleFormatter: output formats
    - ConsoleHandler, MemoryHandler: output destinations
    - StructuredLogger: the logger itself, with ``bind()`` for fixed fields

Example:
    >>> from releasegate.logging import configure_logging, get_logger
    >>> configure_logging(level="debug", format="logfmt")
    >>> logger = get_logger("releasegate.filter").bind(dep_name="lodash")
    >>> logger.debug("Skipping deprecated release", version="4.17.0")
"""

from __future__ import annotations

import json
import sys
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, TextIO


class LogLevel(IntEnum):
    """Log severity levels."""

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40

    @classmethod
    def from_string(cls, level: str) -> "LogLevel":
        """Convert string to LogLevel (unknown names map to INFO)."""
        mapping = {
            "debug": cls.DEBUG,
            "info": cls.INFO,
            "warning": cls.WARNING,
            "warn": cls.WARNING,
            "error": cls.ERROR,
        }
        return mapping.get(level.lower(), cls.INFO)


@dataclass
class LogRecord:
    """A single structured log record."""

    timestamp: datetime
    level: LogLevel
    message: str
    logger_name: str
    fields: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "level": self.level.name.lower(),
            "message": self.message,
            "logger": self.logger_name,
            **self.fields,
        }


# =============================================================================
# Formatters
# =============================================================================


class LogFormatter(ABC):
    """Converts LogRecord objects to strings."""

    @abstractmethod
    def format(self, record: LogRecord) -> str:
        pass


class JSONFormatter(LogFormatter):
    """One JSON object per line."""

    def format(self, record: LogRecord) -> str:
        return json.dumps(record.to_dict(), default=str, ensure_ascii=False)


class LogfmtFormatter(LogFormatter):
    """key=value pairs, e.g. ``level=debug msg="Skipping" version=1.2.0``."""

    def format(self, record: LogRecord) -> str:
        parts = [
            f"ts={record.timestamp.isoformat()}",
            f"level={record.level.name.lower()}",
            f'msg="{self._escape(record.message)}"',
            f"logger={record.logger_name}",
        ]
        for key, value in record.fields.items():
            parts.append(f"{key}={self._format_value(value)}")
        return " ".join(parts)

    def _escape(self, value: str) -> str:
        return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")

    def _format_value(self, value: Any) -> str:
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return str(value)
        text = str(value)
        if not text or any(ch in text for ch in ' "='):
            return f'"{self._escape(text)}"'
        return text


class ConsoleFormatter(LogFormatter):
    """Human-readable single-line output."""

    def __init__(self, *, timestamp_format: str = "%Y-%m-%d %H:%M:%S") -> None:
        self._timestamp_format = timestamp_format

    def format(self, record: LogRecord) -> str:
        parts = [
            record.timestamp.strftime(self._timestamp_format),
            record.level.name.ljust(7),
            f"[{record.logger_name}]",
            record.message,
        ]
        if record.fields:
            parts.append(" ".join(f"{k}={v}" for k, v in record.fields.items()))
        return " ".join(parts)


# =============================================================================
# Handlers
# =============================================================================


class LogHandler(ABC):
    """Outputs formatted log records."""

    def __init__(
        self,
        formatter: LogFormatter | None = None,
        level: LogLevel = LogLevel.DEBUG,
    ) -> None:
        self.formatter = formatter or ConsoleFormatter()
        self.level = level
        self._lock = threading.Lock()

    @abstractmethod
    def emit(self, record: LogRecord) -> None:
        pass

    def handle(self, record: LogRecord) -> None:
        """Emit the record if it passes the handler level (thread-safe)."""
        if record.level >= self.level:
            with self._lock:
                self.emit(record)


class ConsoleHandler(LogHandler):
    """Writes to stderr, or to an explicit stream.

    The stream is resolved at emit time so that redirected ``sys.stderr``
    (test runners, CLI harnesses) is honoured.
    """

    def __init__(
        self,
        formatter: LogFormatter | None = None,
        level: LogLevel = LogLevel.DEBUG,
        stream: TextIO | None = None,
    ) -> None:
        super().__init__(formatter, level)
        self._stream = stream

    def emit(self, record: LogRecord) -> None:
        stream = self._stream or sys.stderr
        stream.write(self.formatter.format(record) + "\n")
        stream.flush()


class MemoryHandler(LogHandler):
    """Keeps records in memory."""

    def __init__(self, level: LogLevel = LogLevel.DEBUG) -> None:
        super().__init__(level=level)
        self.records: list[LogRecord] = []

    def emit(self, record: LogRecord) -> None:
        self.records.append(record)

    @property
    def messages(self) -> list[str]:
        return [r.message for r in self.records]

    def clear(self) -> None:
        self.records.clear()


# =============================================================================
# Structured Logger
# =============================================================================


class StructuredLogger:
    """Logger that attaches key/value fields to every record.

    Example:
        >>> logger = StructuredLogger("releasegate", level=LogLevel.DEBUG)
        >>> logger.add_handler(ConsoleHandler(formatter=JSONFormatter()))
        >>> logger.debug("Falling back", dep_name="requests")
    """

    def __init__(
        self,
        name: str,
        *,
        level: LogLevel = LogLevel.INFO,
        handlers: list[LogHandler] | None = None,
    ) -> None:
        self.name = name
        self.level = level
        self.handlers: list[LogHandler] = handlers if handlers is not None else []
        self._bound_fields: dict[str, Any] = {}

    def add_handler(self, handler: LogHandler) -> None:
        self.handlers.append(handler)

    def remove_handler(self, handler: LogHandler) -> None:
        self.handlers.remove(handler)

    def bind(self, **fields: Any) -> "StructuredLogger":
        """Create a child logger sharing handlers, with extra bound fields."""
        child = StructuredLogger(self.name, level=self.level, handlers=self.handlers)
        child._bound_fields = {**self._bound_fields, **fields}
        return child

    def is_enabled_for(self, level: LogLevel) -> bool:
        return level >= self.level

    def _log(self, level: LogLevel, message: str, **fields: Any) -> None:
        if level < self.level:
            return

        record = LogRecord(
            timestamp=datetime.now(timezone.utc),
            level=level,
            message=message,
            logger_name=self.name,
            fields={**self._bound_fields, **fields},
        )
        for handler in self.handlers:
            try:
                handler.handle(record)
            except Exception:
                # A broken sink must not change filtering results
                pass

    def debug(self, message: str, **fields: Any) -> None:
        self._log(LogLevel.DEBUG, message, **fields)

    def info(self, message: str, **fields: Any) -> None:
        self._log(LogLevel.INFO, message, **fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._log(LogLevel.WARNING, message, **fields)

    def error(self, message: str, **fields: Any) -> None:
        self._log(LogLevel.ERROR, message, **fields)


# =============================================================================
# Global Logger Management
# =============================================================================

_loggers: dict[str, StructuredLogger] = {}
_default_handlers: list[LogHandler] = []
_default_level: LogLevel = LogLevel.INFO
_lock = threading.Lock()

_FORMATTERS: dict[str, type[LogFormatter]] = {
    "console": ConsoleFormatter,
    "json": JSONFormatter,
    "logfmt": LogfmtFormatter,
}


def configure_logging(
    *,
    level: LogLevel | str = LogLevel.INFO,
    format: str = "console",
    handlers: list[LogHandler] | None = None,
) -> None:
    """Configure global logging settings.

    Loggers that already exist are reconfigured in place.

    Args:
        level: Default log level.
        format: Output format ("console", "json", "logfmt").
        handlers: Custom handlers (overrides format).
    """
    global _default_handlers, _default_level

    if isinstance(level, str):
        level = LogLevel.from_string(level)

    if handlers is None:
        formatter_cls = _FORMATTERS.get(format.lower(), ConsoleFormatter)
        handlers = [ConsoleHandler(formatter=formatter_cls(), level=level)]

    with _lock:
        _default_level = level
        _default_handlers = handlers
        for logger in _loggers.values():
            logger.level = level
            logger.handlers[:] = handlers


def get_logger(name: str) -> StructuredLogger:
    """Get or create a logger.

    Args:
        name: Logger name (usually __name__).
    """
    with _lock:
        if name not in _loggers:
            _loggers[name] = StructuredLogger(
                name,
                level=_default_level,
                handlers=list(_default_handlers),
            )
        return _loggers[name]


configure_logging()
