"""World layoffs cleaning and analysis pipeline package."""

from . import analysis, clean, config, dedup, errors, ingest, io_utils, pipeline, quality, schema

__all__ = [
    "analysis",
    "clean",
    "config",
    "dedup",
    "errors",
    "ingest",
    "io_utils",
    "pipeline",
    "quality",
    "schema",
]
