from __future__ import annotations

from pathlib import Path
from typing import Any

import pandas as pd

from . import config
from .errors import LayoffsIngestError

# Literal "NULL" cells appear in the exported source table.
NULL_MARKERS = ["NULL", "null", "None"]


def ensure_output_dirs(output_dir: Path | str = config.DATA_DIR) -> None:
    """Create curated/analysis/quality directories if needed."""
    output_dir = Path(output_dir)
    for sub_dir in config.OUTPUT_SUBDIRS:
        (output_dir / sub_dir).mkdir(parents=True, exist_ok=True)


def load_raw_csv(path: Path | str = config.RAW_CSV_PATH) -> pd.DataFrame:
    """Load the raw layoffs CSV with every column read as text."""
    path = Path(path)
    if not path.is_file():
        raise LayoffsIngestError(
            f"Failed to read source at {path}: file does not exist. Provide an existing CSV file."
        )
    try:
        return pd.read_csv(
            path,
            dtype=str,
            keep_default_na=False,
            na_values=NULL_MARKERS,
            encoding="utf-8",
        )
    except (OSError, UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError) as error:
        raise LayoffsIngestError(f"Failed to read source at {path}: {error}") from error


def write_csv(df: pd.DataFrame, path: Path | str, index: bool = False) -> None:
    """Persist dataframe to CSV and ensure parent directory exists."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=index)


def is_blank(value: Any) -> bool:
    """True for null/empty string values."""
    if isinstance(value, str):
        return value.strip() == ""
    return value is None or bool(pd.isna(value))
