"""Structured logging setup for the browser core and CLI."""

import logging
import sys
from typing import TextIO

import structlog


def configure_logging(
    *,
    json_output: bool = False,
    level: int = logging.INFO,
    stream: TextIO | None = None,
) -> None:
    """Configure structlog once per process.

    Args:
        json_output: Emit one JSON object per event instead of the coloured console format.
        level: Minimum level that gets rendered.
        stream: Where log lines go. Defaults to stderr so CLI output on stdout stays clean.
    """
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=stream is None and sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a named structlog logger."""
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
