"""Layoffs pipeline exception hierarchy.

Each stage raises a specific error type so the CLI can report failures
without a traceback.
"""

from __future__ import annotations

from typing import Any


class LayoffsError(Exception):
    """Base exception for all pipeline failures."""


class LayoffsConfigError(LayoffsError):
    """Raised for invalid runtime configuration."""


class LayoffsIngestError(LayoffsError):
    """Raised when the source dataset is unavailable or malformed."""


class LayoffsTransformError(LayoffsError):
    """Raised for cleaning and analysis failures."""


class LayoffsDateParseError(LayoffsTransformError):
    """Raised when date text does not match the expected format."""

    def __init__(self, date_format: str, offending: dict[Any, Any]) -> None:
        self.date_format = date_format
        self.offending = offending
        preview = ", ".join(f"row {idx}: {value!r}" for idx, value in list(offending.items())[:5])
        super().__init__(
            f"{len(offending)} date value(s) do not match format '{date_format}' ({preview})"
        )
