"""Structured logging configuration using structlog."""

import logging
import sys

import structlog


def setup_logging(verbose: bool = False) -> None:
    """Configure structlog for the command-line tool.

    Log lines go to stderr so they never mix with rendered results.
    Only warnings and above are shown unless ``verbose`` is set.
    """
    log_level = logging.DEBUG if verbose else logging.WARNING

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,  # Allow reconfiguration
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a logger instance.

    Args:
        name: Optional logger name, typically __name__ of the module.
    """
    return structlog.get_logger(name)
