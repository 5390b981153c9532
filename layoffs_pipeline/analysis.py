"""
analysis.py: descriptive aggregates over the cleaned layoffs table.

Every function takes the clean frame read-only and returns a new DataFrame,
so results can be computed in any order, printed, or persisted directly.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

import numpy as np
import pandas as pd

from . import config
from .logging_config import get_logger

logger = get_logger(__name__)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _magnitudes(df: pd.DataFrame) -> pd.DataFrame:
    """Return a working copy with numeric magnitude columns."""
    out = df.copy()
    out["total_laid_off"] = pd.to_numeric(out["total_laid_off"], errors="coerce").astype("float64")
    out["percentage_laid_off"] = pd.to_numeric(out["percentage_laid_off"], errors="coerce")
    out["funds_raised_millions"] = pd.to_numeric(out["funds_raised_millions"], errors="coerce")
    return out


def _dated(df: pd.DataFrame) -> pd.DataFrame:
    """Return rows with a known event date."""
    out = _magnitudes(df)
    out["date"] = pd.to_datetime(out["date"])
    return out.loc[out["date"].notna()].copy()


def _is_shutdown(percentage: pd.Series) -> pd.Series:
    """Flag records that laid off the whole workforce."""
    return percentage.eq(config.SHUTDOWN_PERCENTAGE).fillna(False).astype(bool)


def _percent_half_up(part: int, whole: int) -> float:
    """part / whole as a percentage rounded half-up to 2 decimals; NaN when whole is 0."""
    if not whole:
        return np.nan
    percent = Decimal(int(part)) / Decimal(int(whole)) * 100
    return float(percent.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


# ── Grouped magnitude summary ─────────────────────────────────────────────────

def magnitude_summary(df: pd.DataFrame, by: str = "stage") -> pd.DataFrame:
    """Sum and mean of total_laid_off per category, largest mean first."""
    work = _magnitudes(df)
    grouped = work.groupby(by, dropna=False, sort=True)["total_laid_off"]
    summary = pd.DataFrame(
        {
            "total_laid_off": grouped.sum(min_count=1),
            "avg_layoffs": grouped.mean(),
        }
    ).reset_index()
    return summary.sort_values(
        "avg_layoffs", ascending=False, na_position="last", kind="mergesort"
    ).reset_index(drop=True)


# ── Failure-rate normalisation ────────────────────────────────────────────────

def shutdown_rates(df: pd.DataFrame, by: str = "stage") -> pd.DataFrame:
    """Share of distinct companies per category with a full-shutdown record.

    A category with zero companies has no defined rate and reports NaN.
    """
    work = _magnitudes(df)
    work["shutdown_company"] = work["company"].where(_is_shutdown(work["percentage_laid_off"]))
    grouped = work.groupby(by, dropna=False, sort=True)
    counts = pd.DataFrame(
        {
            "total_companies": grouped["company"].nunique(),
            "companies_under": grouped["shutdown_company"].nunique(),
        }
    ).reset_index()
    counts["went_under_percent"] = [
        _percent_half_up(under, total)
        for under, total in zip(counts["companies_under"], counts["total_companies"])
    ]
    return counts.sort_values(
        "went_under_percent", ascending=False, na_position="last", kind="mergesort"
    ).reset_index(drop=True)


# ── Time-bucketed rolling total ───────────────────────────────────────────────

def rolling_monthly_totals(df: pd.DataFrame) -> pd.DataFrame:
    """Monthly layoff totals with a running prefix sum in chronological order."""
    work = _dated(df)
    work["month"] = work["date"].dt.strftime("%Y-%m")
    monthly = (
        work.groupby("month", sort=True)["total_laid_off"]
        .sum(min_count=1)
        .rename("total_off")
        .reset_index()
    )
    # Null months carry the running total forward; leading null months stay null.
    monthly["rolling_total"] = monthly["total_off"].cumsum(skipna=True).ffill()
    return monthly


# ── Per-period top-N ranking ──────────────────────────────────────────────────

def top_companies_by_year(df: pd.DataFrame, top_n: int = config.TOP_N_DEFAULT) -> pd.DataFrame:
    """Dense-rank companies by yearly layoffs and keep ranks 1..top_n per year."""
    work = _dated(df)
    work["year"] = work["date"].dt.year.astype("int64")
    company_year = (
        work.groupby(["company", "year"], dropna=False, sort=False)["total_laid_off"]
        .sum(min_count=1)
        .reset_index()
        .dropna(subset=["total_laid_off"])
    )
    company_year["ranking"] = (
        company_year.groupby("year")["total_laid_off"]
        .rank(method="dense", ascending=False)
        .astype("int64")
    )
    ranked = company_year.loc[company_year["ranking"] <= top_n]
    return ranked.sort_values(["year", "ranking", "company"]).reset_index(drop=True)[
        ["company", "year", "total_laid_off", "ranking"]
    ]


# ── Shutdown case studies ─────────────────────────────────────────────────────

def full_shutdowns(df: pd.DataFrame) -> pd.DataFrame:
    """Full-shutdown records, best funded first."""
    shutdown = _is_shutdown(pd.to_numeric(df["percentage_laid_off"], errors="coerce"))
    return df.loc[shutdown].sort_values(
        "funds_raised_millions",
        ascending=False,
        na_position="last",
        kind="mergesort",
        key=lambda funds: pd.to_numeric(funds, errors="coerce"),
    ).reset_index(drop=True)


def repeat_layoff_shutdowns(df: pd.DataFrame) -> pd.DataFrame:
    """Shutdown records of companies that had more than one layoff event."""
    events = df.groupby("company")["company"].transform("size")
    shutdown = _is_shutdown(pd.to_numeric(df["percentage_laid_off"], errors="coerce"))
    return df.loc[shutdown & events.gt(1)].sort_values("company", kind="mergesort").reset_index(drop=True)


def yearly_summary(df: pd.DataFrame) -> pd.DataFrame:
    """Per-year layoffs, average event size and months of data available."""
    work = _dated(df)
    work["year"] = work["date"].dt.year.astype("int64")
    work["month_num"] = work["date"].dt.month
    grouped = work.groupby("year")
    summary = pd.DataFrame(
        {
            "months": grouped["month_num"].nunique(),
            "layoffs": grouped["total_laid_off"].sum(min_count=1),
            "avg_layoff_event": grouped["total_laid_off"].mean(),
        }
    ).reset_index()
    return summary.sort_values("year", ascending=False).reset_index(drop=True)


def run_analysis(df: pd.DataFrame, top_n: int = config.TOP_N_DEFAULT) -> dict[str, pd.DataFrame]:
    """Compute every analysis table keyed by its output name."""
    results = {
        "stage_magnitude": magnitude_summary(df, by="stage"),
        "industry_magnitude": magnitude_summary(df, by="industry"),
        "stage_shutdown_rates": shutdown_rates(df, by="stage"),
        "industry_shutdown_rates": shutdown_rates(df, by="industry"),
        "monthly_rolling_totals": rolling_monthly_totals(df),
        "top_companies_by_year": top_companies_by_year(df, top_n=top_n),
        "full_shutdowns": full_shutdowns(df),
        "repeat_layoff_shutdowns": repeat_layoff_shutdowns(df),
        "yearly_summary": yearly_summary(df),
    }
    logger.info("analysis_complete", tables={name: len(table.index) for name, table in results.items()})
    return results
