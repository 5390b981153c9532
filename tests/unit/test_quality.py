"""Unit tests for the data-quality reports."""

from __future__ import annotations

import pandas as pd

from layoffs_pipeline import clean, quality
from layoffs_pipeline.clean import CleaningResult


def test_quality_report_drops_to_zero_after_cleaning(raw_frame: pd.DataFrame) -> None:
    """Cleaning should clear every fixable rule."""
    pre = quality.build_data_quality_report(raw_frame, stage="pre").set_index("rule_id")
    post = quality.build_data_quality_report(clean.clean_layoffs(raw_frame).clean, stage="post").set_index(
        "rule_id"
    )

    assert pre.loc["R_DUP_001", "failed_count"] == 2
    assert pre.loc["R_MAG_001", "failed_count"] == 1
    for rule_id in ("R_DUP_001", "R_CMP_001", "R_IND_002", "R_CTY_001", "R_DAT_001", "R_MAG_001"):
        assert post.loc[rule_id, "failed_count"] == 0
    assert post.loc["R_IND_001", "failed_count"] == 1


def test_summarise_cleaning_changes_uses_step_counts() -> None:
    """Action rows report counts relative to the input size."""
    result = CleaningResult(
        clean=pd.DataFrame(),
        counts={"rows_in": 8, "exact_duplicates_removed": 2, "unreliable_rows_purged": 1},
    )

    actions = quality.summarise_cleaning_changes(result).set_index("action_id")

    assert actions.loc["A_CLEAN_001", "count"] == 2
    assert actions.loc["A_CLEAN_001", "percent"] == 25.0
    assert actions.loc["A_CLEAN_003", "count"] == 0


def test_before_after_comparison_tracks_row_retention(raw_frame: pd.DataFrame) -> None:
    """The comparison ends with the rows retained for analysis."""
    pre = quality.build_data_quality_report(raw_frame, stage="pre")
    post = quality.build_data_quality_report(clean.clean_layoffs(raw_frame).clean, stage="post")

    comparison = quality.build_before_after_comparison(
        pre_report=pre, post_report=post, total_records=9, clean_count=6
    )
    last = comparison.iloc[-1]

    assert last["rule_id"] == "R_ROWS"
    assert last["delta_count"] == -3
    assert comparison.set_index("rule_id").loc["R_DUP_001", "delta_count"] == -2
