"""Tests for structured logging."""

from __future__ import annotations

import io
import json
from datetime import datetime, timezone

import pytest

from releasegate.logging import (
    ConsoleFormatter,
    ConsoleHandler,
    JSONFormatter,
    LogfmtFormatter,
    LogHandler,
    LogLevel,
    LogRecord,
    MemoryHandler,
    StructuredLogger,
    configure_logging,
    get_logger,
)


@pytest.fixture
def record() -> LogRecord:
    return LogRecord(
        timestamp=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        level=LogLevel.DEBUG,
        message='Skipping "lodash"',
        logger_name="releasegate.filter",
        fields={"dep_name": "lodash", "version": "4.17.0", "count": 2},
    )


class TestLogLevel:
    """Tests for LogLevel."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("debug", LogLevel.DEBUG),
            ("INFO", LogLevel.INFO),
            ("warn", LogLevel.WARNING),
            ("Error", LogLevel.ERROR),
            ("verbose", LogLevel.INFO),
        ],
    )
    def test_from_string(self, name, expected):
        assert LogLevel.from_string(name) is expected


class TestFormatters:
    """Tests for the output formatters."""

    def test_json(self, record):
        data = json.loads(JSONFormatter().format(record))

        assert data["level"] == "debug"
        assert data["logger"] == "releasegate.filter"
        assert data["dep_name"] == "lodash"
        assert data["count"] == 2

    def test_logfmt(self, record):
        line = LogfmtFormatter().format(record)

        assert 'msg="Skipping \\"lodash\\""' in line
        assert "dep_name=lodash" in line
        assert "version=4.17.0" in line
        assert "count=2" in line

    def test_logfmt_quotes_values_with_spaces(self):
        formatter = LogfmtFormatter()

        assert formatter._format_value("a b") == '"a b"'
        assert formatter._format_value(None) == "null"
        assert formatter._format_value(True) == "true"

    def test_console(self, record):
        line = ConsoleFormatter().format(record)

        assert line.startswith("2024-01-02 03:04:05 DEBUG")
        assert "[releasegate.filter]" in line
        assert "version=4.17.0" in line


class TestStructuredLogger:
    """Tests for StructuredLogger."""

    def test_level_threshold(self):
        handler = MemoryHandler()
        logger = StructuredLogger("test", level=LogLevel.INFO, handlers=[handler])

        logger.debug("hidden")
        logger.info("shown")

        assert handler.messages == ["shown"]
        assert not logger.is_enabled_for(LogLevel.DEBUG)

    def test_handler_level(self):
        handler = MemoryHandler(level=LogLevel.WARNING)
        logger = StructuredLogger("test", level=LogLevel.DEBUG, handlers=[handler])

        logger.info("hidden")
        logger.error("shown")

        assert handler.messages == ["shown"]

    def test_bind_adds_fields(self, memory_logger, log_handler):
        child = memory_logger.bind(dep_name="lodash")

        child.debug("message", version="1.0.0")

        assert log_handler.records[0].fields == {"dep_name": "lodash", "version": "1.0.0"}

    def test_broken_handler_is_isolated(self, log_handler):
        class BrokenHandler(LogHandler):
            def emit(self, record):
                raise RuntimeError("sink failed")

        logger = StructuredLogger(
            "test", level=LogLevel.DEBUG, handlers=[BrokenHandler(), log_handler]
        )
        logger.warning("still delivered")

        assert log_handler.messages == ["still delivered"]

    def test_console_handler_stream(self, memory_logger):
        stream = io.StringIO()
        memory_logger.add_handler(ConsoleHandler(formatter=JSONFormatter(), stream=stream))

        memory_logger.info("hello", dep_name="x")

        assert json.loads(stream.getvalue())["dep_name"] == "x"

    def test_remove_handler(self, memory_logger, log_handler):
        memory_logger.remove_handler(log_handler)
        memory_logger.error("dropped")

        assert log_handler.records == []


class TestGlobalConfiguration:
    """Tests for configure_logging and get_logger."""

    def test_get_logger_is_cached(self):
        assert get_logger("releasegate.test") is get_logger("releasegate.test")

    def test_reconfigures_existing_loggers(self):
        logger = get_logger("releasegate.test.reconfigure")
        handler = MemoryHandler()

        configure_logging(level="debug", handlers=[handler])
        logger.debug("visible")

        assert logger.level == LogLevel.DEBUG
        assert handler.messages == ["visible"]

    def test_format_selection(self, capsys):
        configure_logging(level="info", format="json")

        get_logger("releasegate.test.format").info("hello")

        assert json.loads(capsys.readouterr().err)["message"] == "hello"
