"""Unit tests for structured logging setup."""

import io
import json
import logging
from collections.abc import Iterator

import pytest
import structlog

from src.observability.logging import (
    HTTP_ENGINE_LOGGERS,
    bind_request_context,
    clear_request_context,
    configure_logging,
)


@pytest.fixture(autouse=True)
def restore_logging() -> Iterator[None]:
    """Restore structlog defaults and engine logger levels after each test."""
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()
    for name in HTTP_ENGINE_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET)


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_json_output(self) -> None:
        """Events are rendered as JSON lines with level and timestamp."""
        output = io.StringIO()
        configure_logging(output=output, json_format=True)

        structlog.get_logger("test").info("http_request_start", domain="example.com")

        record = json.loads(output.getvalue().strip())
        assert record["event"] == "http_request_start"
        assert record["domain"] == "example.com"
        assert record["level"] == "info"
        assert "timestamp" in record

    def test_level_filtering(self) -> None:
        """Events below the configured level are dropped."""
        output = io.StringIO()
        configure_logging(level=logging.WARNING, output=output)

        structlog.get_logger("test").info("ignored")

        assert output.getvalue() == ""

    def test_request_context(self) -> None:
        """A bound request id is attached until cleared."""
        output = io.StringIO()
        configure_logging(output=output, json_format=True)
        log = structlog.get_logger("test")

        bind_request_context("req-1")
        log.info("first")
        clear_request_context()
        log.info("second")

        first, second = (json.loads(line) for line in output.getvalue().splitlines())
        assert first["request_id"] == "req-1"
        assert "request_id" not in second


class TestHttpEngineLoggers:
    """Tests for the httpx and httpcore logger levels."""

    def test_quiet_at_info(self) -> None:
        """Engine loggers only pass warnings at INFO."""
        configure_logging(level=logging.INFO, output=io.StringIO())

        for name in HTTP_ENGINE_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_follow_error_level(self) -> None:
        """A level above WARNING is kept as is."""
        configure_logging(level=logging.ERROR, output=io.StringIO())

        assert logging.getLogger("httpx").level == logging.ERROR

    def test_verbose_at_debug(self) -> None:
        """DEBUG lets engine request lines through."""
        configure_logging(level=logging.DEBUG, output=io.StringIO())

        for name in HTTP_ENGINE_LOGGERS:
            assert logging.getLogger(name).level == logging.DEBUG
