"""Structured logging configuration using structlog."""

from __future__ import annotations

import logging
from typing import Any

import structlog

_VALID_FORMATS = ("console", "json")


def configure_logging(log_level: str = "INFO", log_format: str = "console") -> None:
    """Configure structlog for CLI and worker processes.

    ``log_format`` selects the final renderer: ``console`` for human readable
    output, ``json`` for log aggregation.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    if log_format not in _VALID_FORMATS:
        msg = f"log_format must be one of {', '.join(_VALID_FORMATS)}"
        raise ValueError(msg)

    renderer: Any
    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> Any:
    """Return a structlog logger bound to the given module name."""
    return structlog.get_logger(name)
