from __future__ import annotations

from typing import Any

import pandas as pd

from . import schema
from .logging_config import get_logger

logger = get_logger(__name__)

ROW_NUM_COLUMN = "row_num"


def rank_duplicates(df: pd.DataFrame, columns: list[str] | None = None) -> pd.DataFrame:
    """Number rows 1..k in order of appearance within each full-row group.

    Nulls compare equal, so two rows that are both missing ``industry`` still
    land in the same group.
    """
    key = columns or schema.LAYOFF_COLUMNS
    out = df.copy()
    out[ROW_NUM_COLUMN] = (
        out.groupby(key, dropna=False, sort=False).cumcount().astype("int64") + 1
    )
    return out


def remove_exact_duplicates(df: pd.DataFrame, columns: list[str] | None = None) -> pd.DataFrame:
    """Keep the first occurrence of every full-row group and drop the rest."""
    ranked = rank_duplicates(df, columns)
    keep = ranked[ROW_NUM_COLUMN].eq(1)
    removed = int((~keep).sum())
    out = ranked.loc[keep].drop(columns=ROW_NUM_COLUMN).reset_index(drop=True)
    logger.info("exact_duplicates_removed", rows_in=len(df.index), rows_out=len(out.index), removed=removed)
    return out


def duplicate_report(df: pd.DataFrame, columns: list[str] | None = None) -> pd.DataFrame:
    """List each duplicated full-row key with the number of copies found."""
    key = columns or schema.LAYOFF_COLUMNS
    ranked = rank_duplicates(df, key)
    rows: list[dict[str, Any]] = []
    grouped = ranked.groupby(key, dropna=False, sort=False)
    for _, group in grouped:
        if len(group.index) <= 1:
            continue
        first = group.iloc[0]
        row = {column: first[column] for column in key}
        row["dup_count"] = int(len(group.index))
        row["first_row_index"] = int(group.index[0])
        rows.append(row)
    report = pd.DataFrame(rows, columns=[*key, "dup_count", "first_row_index"])
    if report.empty:
        return report
    return report.sort_values(["company", "first_row_index"]).reset_index(drop=True)
