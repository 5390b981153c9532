"""Unit tests for full-row duplicate resolution."""

from __future__ import annotations

from layoffs_pipeline import dedup
from tests.factories import make_frame, make_record


def test_remove_exact_duplicates_keeps_one_copy() -> None:
    """N identical rows should collapse to exactly one."""
    frame = make_frame([make_record() for _ in range(4)] + [make_record(company="Other")])

    deduped = dedup.remove_exact_duplicates(frame)

    assert deduped["company"].tolist() == ["Acme", "Other"]
    assert dedup.ROW_NUM_COLUMN not in deduped.columns


def test_rank_duplicates_numbers_rows_in_appearance_order() -> None:
    """Ranks restart per full-row group and follow row order."""
    frame = make_frame(
        [make_record(), make_record(company="Other"), make_record(), make_record()]
    )

    ranked = dedup.rank_duplicates(frame)

    assert ranked[dedup.ROW_NUM_COLUMN].tolist() == [1, 1, 2, 3]


def test_nulls_compare_equal_when_matching_rows() -> None:
    """Two rows missing the same fields are still duplicates."""
    frame = make_frame(
        [
            make_record(industry=None, funds_raised_millions=None),
            make_record(industry=None, funds_raised_millions=None),
        ]
    )

    deduped = dedup.remove_exact_duplicates(frame)

    assert len(deduped.index) == 1


def test_partial_matches_are_not_duplicates() -> None:
    """Rows differing in any single field are distinct events."""
    frame = make_frame([make_record(), make_record(stage="Series C"), make_record(date="3/7/2023")])

    deduped = dedup.remove_exact_duplicates(frame)

    assert len(deduped.index) == 3


def test_duplicate_report_lists_copy_counts() -> None:
    """The report should show each duplicated key once with its copy count."""
    frame = make_frame([make_record(), make_record(), make_record(), make_record(company="Solo")])

    report = dedup.duplicate_report(frame)

    assert report["company"].tolist() == ["Acme"]
    assert report["dup_count"].tolist() == [3]
    assert report["first_row_index"].tolist() == [0]
