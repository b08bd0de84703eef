"""Structured logging setup shared by the CLI entry point and tests."""

from __future__ import annotations

import structlog


def configure_logging(level: str = "info") -> None:
    """Configure structlog for console output.

    Args:
        level: Minimum log level name ("debug", "info", "warning", ...).
    """
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(min_level=level.lower()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )
