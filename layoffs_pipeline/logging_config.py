"""Structured logging configuration.

Events are rendered as JSON lines on stderr so stdout stays free for
command output.
"""

from __future__ import annotations

import sys
from typing import Any

import structlog

_CONFIGURED = False


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog logger with ISO timestamps, level and JSON output.
    """
    global _CONFIGURED
    if not _CONFIGURED:
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.processors.JSONRenderer(sort_keys=True),
            ],
            logger_factory=_stderr_logger,
            cache_logger_on_first_use=False,
        )
        _CONFIGURED = True
    return structlog.get_logger(name)


def _stderr_logger(*args: Any) -> structlog.PrintLogger:
    """Bind to whatever sys.stderr is at emit time."""
    return structlog.PrintLogger(file=sys.stderr)
