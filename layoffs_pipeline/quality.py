from __future__ import annotations

from typing import Any

import pandas as pd

from . import schema
from .clean import CleaningResult


def build_data_quality_report(
    df: pd.DataFrame,
    stage: str = "pre",
    rules: dict[str, schema.RuleDef] | None = None,
) -> pd.DataFrame:
    """Evaluate the layoff rules on a frame and summarise failures per rule."""
    layoff_rules = rules or schema.LAYOFF_RULES
    flags = schema.validate_layoffs(df)
    report = schema.summarize_validation_flags(
        flags=flags,
        rules=layoff_rules,
        companies=df["company"],
        stage=stage,
    )
    return report.sort_values(["stage", "rule_id"]).reset_index(drop=True)


def summarise_cleaning_changes(result: CleaningResult) -> pd.DataFrame:
    """Count records affected by each deterministic cleaning action."""
    actions = {
        "A_CLEAN_001": ("exact_duplicates_removed", "Exact duplicate rows removed"),
        "A_CLEAN_002": ("invalid_dates_dropped", "Rows with unparseable dates dropped"),
        "A_CLEAN_003": ("industry_backfilled", "Null industry filled from the same company"),
        "A_CLEAN_004": ("unreliable_rows_purged", "Rows without any layoff magnitude purged"),
        "A_CLEAN_005": (
            "post_standardisation_duplicates_removed",
            "Rows made identical by standardisation removed",
        ),
    }
    rows = []
    denominator = result.counts.get("rows_in", 0)
    for action_id, (key, description) in actions.items():
        count = int(result.counts.get(key, 0))
        rows.append(
            {
                "action_id": action_id,
                "description": description,
                "count": count,
                "percent": round((count / denominator) * 100 if denominator else 0.0, 2),
            }
        )
    return pd.DataFrame(rows, columns=["action_id", "description", "count", "percent"])


def _lookup_metric(report: pd.DataFrame, rule_id: str) -> tuple[int, float]:
    """Fetch count and percent for a given rule_id from a quality report."""
    row = report.loc[report["rule_id"] == rule_id]
    if row.empty:
        return 0, 0.0
    first = row.iloc[0]
    return int(first["failed_count"]), float(first["failed_percent"])


def build_before_after_comparison(
    *,
    pre_report: pd.DataFrame,
    post_report: pd.DataFrame,
    total_records: int,
    clean_count: int,
) -> pd.DataFrame:
    """Create a compact pre-vs-post remediation comparison table."""
    rows: list[dict[str, Any]] = []
    for rule in schema.LAYOFF_RULES.values():
        pre_count, pre_percent = _lookup_metric(pre_report, rule.rule_id)
        post_count, post_percent = _lookup_metric(post_report, rule.rule_id)
        rows.append(
            {
                "metric": rule.description,
                "rule_id": rule.rule_id,
                "pre_count": pre_count,
                "pre_percent": round(pre_percent, 2),
                "post_count": post_count,
                "post_percent": round(post_percent, 2),
                "delta_count": post_count - pre_count,
                "delta_percent": round(post_percent - pre_percent, 2),
            }
        )

    clean_percent = (clean_count / total_records) * 100 if total_records else 0.0
    rows.append(
        {
            "metric": "Rows retained for analysis",
            "rule_id": "R_ROWS",
            "pre_count": total_records,
            "pre_percent": 100.0 if total_records else 0.0,
            "post_count": clean_count,
            "post_percent": round(clean_percent, 2),
            "delta_count": clean_count - total_records,
            "delta_percent": round(clean_percent - 100.0 if total_records else 0.0, 2),
        }
    )
    return pd.DataFrame(rows)
