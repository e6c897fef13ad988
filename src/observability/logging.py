"""Structured logging configuration."""

import logging
import sys
from typing import TextIO

import structlog


# Standard library loggers of the HTTP engine
HTTP_ENGINE_LOGGERS = ("httpx", "httpcore")


def configure_logging(
    level: int = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
) -> None:
    """Configure structured logging for the client and CLI.

    Sets up structlog with timestamps, log levels and contextvar binding,
    rendering either JSON lines or human readable console output.

    The httpx and httpcore loggers are held at WARNING unless ``level``
    is DEBUG.

    Args:
        level: Logging level (default: INFO).
        output: Output stream (default: stderr).
        json_format: Whether to use JSON format (default: True).
    """
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=output.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=output,
        level=level,
    )
    engine_level = level if level <= logging.DEBUG else max(level, logging.WARNING)
    for name in HTTP_ENGINE_LOGGERS:
        logging.getLogger(name).setLevel(engine_level)


def bind_request_context(request_id: str) -> None:
    """Bind a request identifier to all subsequent log messages.

    Args:
        request_id: Caller-chosen identifier for the request.
    """
    structlog.contextvars.bind_contextvars(request_id=request_id)


def clear_request_context() -> None:
    """Clear the request identifier from log messages."""
    structlog.contextvars.unbind_contextvars("request_id")
