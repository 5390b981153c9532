from __future__ import annotations

from pathlib import Path

import pandas as pd

from . import config, io_utils, schema
from .logging_config import get_logger

logger = get_logger(__name__)


def load_layoffs(path: Path | str = config.RAW_CSV_PATH) -> pd.DataFrame:
    """Read the source dataset and order its columns to the layoff schema."""
    raw = io_utils.load_raw_csv(path)
    schema.validate_columns(raw)
    extra = [column for column in raw.columns if column not in schema.LAYOFF_COLUMNS]
    if extra:
        logger.warning("source_extra_columns_ignored", columns=extra)
    raw = raw[schema.LAYOFF_COLUMNS]
    logger.info("source_loaded", path=str(path), rows=len(raw.index))
    return raw


def create_staging(raw_df: pd.DataFrame) -> pd.DataFrame:
    """Return an isolated working copy; the raw frame is never mutated downstream."""
    schema.validate_columns(raw_df)
    staging = raw_df.copy(deep=True)
    logger.info("staging_created", rows=len(staging.index))
    return staging
