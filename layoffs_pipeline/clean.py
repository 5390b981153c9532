from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from . import config, dedup, schema
from .errors import LayoffsDateParseError
from .logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class CleaningResult:
    """Clean frame plus the row counts each step touched."""

    clean: pd.DataFrame
    counts: dict[str, int] = field(default_factory=dict)


def _text_changes(before: pd.Series, after: pd.Series) -> pd.Series:
    """Mask rows whose non-null text value differs after a rule."""
    return before.notna() & after.notna() & before.ne(after)


# ── Field standardisation ─────────────────────────────────────────────────────

def trim_company(df: pd.DataFrame) -> pd.DataFrame:
    """Strip surrounding whitespace from company names."""
    out = df.copy()
    company = out["company"].astype("object")
    trimmed = company.where(company.isna(), company.astype(str).str.strip())
    changed = int(_text_changes(company, trimmed).sum())
    out["company"] = trimmed
    logger.info("company_trimmed", changed=changed)
    return out


def unify_industry(
    df: pd.DataFrame, prefix_map: dict[str, str] | None = None
) -> pd.DataFrame:
    """Collapse industry values sharing a case-sensitive prefix into one label."""
    mapping = config.INDUSTRY_PREFIX_MAP if prefix_map is None else prefix_map
    out = df.copy()
    industry = out["industry"].astype("object")
    text = industry.where(industry.notna(), "").astype(str)
    unified = industry.copy()
    for prefix, canonical in mapping.items():
        unified = unified.mask(text.str.startswith(prefix), canonical)
    changed = _text_changes(industry, unified)
    if changed.any():
        variants = sorted(industry[changed].astype(str).unique().tolist())
        logger.info("industry_unified", changed=int(changed.sum()), variants=variants)
    out["industry"] = unified
    return out


def unify_country(
    df: pd.DataFrame, punctuation: str = config.COUNTRY_TRAILING_PUNCTUATION
) -> pd.DataFrame:
    """Strip trailing punctuation from country names.

    Candidates are compared before committing: only values that actually
    change and still leave a non-empty name are rewritten.
    """
    out = df.copy()
    country = out["country"].astype("object")
    text = country.where(country.notna(), "").astype(str)
    stripped = text.str.rstrip().str.rstrip(punctuation).str.rstrip()
    commit = country.notna() & stripped.ne(text) & stripped.ne("")
    if commit.any():
        pairs = (
            pd.DataFrame({"before": text[commit], "after": stripped[commit]})
            .drop_duplicates()
            .sort_values("before")
        )
        for before, after in pairs.itertuples(index=False):
            logger.info("country_unified", before=before, after=after)
    out["country"] = country.mask(commit, stripped)
    return out


def _parse_date_value(value: Any, date_format: str) -> tuple[pd.Timestamp | Any, bool]:
    """Return the parsed date and a parse-failed flag for one source value."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return pd.NaT, False
    if isinstance(value, (pd.Timestamp, dt.datetime, dt.date)):
        return pd.Timestamp(value).normalize(), False
    value_str = str(value).strip()
    if value_str == "":
        return pd.NaT, False
    try:
        return pd.Timestamp(dt.datetime.strptime(value_str, date_format)), False
    except ValueError:
        return pd.NaT, True


def parse_event_date(
    df: pd.DataFrame,
    date_format: str = config.DATE_FORMAT,
    on_invalid: str = "raise",
) -> pd.DataFrame:
    """Convert month/day/year text into a calendar date column.

    Text that does not match ``date_format`` is reported row by row and either
    aborts the run (``raise``) or removes the offending rows (``drop``). It is
    never nulled silently.
    """
    out = df.copy()
    if pd.api.types.is_datetime64_any_dtype(out["date"]):
        out["date"] = out["date"].dt.normalize()
        return out

    parsed = out["date"].apply(lambda value: _parse_date_value(value, date_format))
    failed = parsed.apply(lambda item: bool(item[1]))
    if failed.any():
        offending = out.loc[failed, "date"].to_dict()
        for row_index, value in offending.items():
            logger.warning(
                "date_unparseable",
                row=int(row_index) if isinstance(row_index, int) else str(row_index),
                company=str(out.at[row_index, "company"]),
                value=str(value),
                expected_format=date_format,
            )
        if on_invalid != "drop":
            raise LayoffsDateParseError(date_format, offending)
        logger.warning("date_unparseable_rows_dropped", dropped=len(offending))

    out["date"] = pd.to_datetime(parsed.apply(lambda item: item[0]))
    if failed.any():
        out = out.loc[~failed].reset_index(drop=True)
    return out


def standardize_fields(
    df: pd.DataFrame,
    prefix_map: dict[str, str] | None = None,
    date_format: str = config.DATE_FORMAT,
    on_invalid_date: str = "raise",
) -> pd.DataFrame:
    """Apply every per-field rule; ``location`` passes through unchanged."""
    out = trim_company(df)
    out = unify_industry(out, prefix_map)
    out = unify_country(out)
    out = parse_event_date(out, date_format=date_format, on_invalid=on_invalid_date)
    return out


# ── Null / blank resolution ───────────────────────────────────────────────────

def normalize_blank_industry(df: pd.DataFrame) -> pd.DataFrame:
    """Turn blank industry strings into real nulls."""
    out = df.copy()
    industry = out["industry"].astype("object")
    blank = schema.blank_mask(industry) & industry.notna()
    out["industry"] = industry.mask(schema.blank_mask(industry), None)
    logger.info("blank_industry_nulled", changed=int(blank.sum()))
    return out


def industry_lookup(df: pd.DataFrame) -> dict[Any, Any]:
    """Map each company to the first non-null industry observed for it."""
    known = df.loc[~schema.blank_mask(df["industry"]) & df["company"].notna(), ["company", "industry"]]
    return known.drop_duplicates(subset="company", keep="first").set_index("company")["industry"].to_dict()


def backfill_industry(df: pd.DataFrame) -> pd.DataFrame:
    """Fill null industries from another record of the same company.

    Companies without any non-null industry keep their nulls.
    """
    out = df.copy()
    lookup = industry_lookup(out)
    industry = out["industry"].astype("object")
    missing = industry.isna()
    filled = industry.where(~missing, out["company"].map(lookup))
    backfilled = int((missing & filled.notna()).sum())
    still_missing = int(filled.isna().sum())
    out["industry"] = filled
    logger.info("industry_backfilled", backfilled=backfilled, still_missing=still_missing)
    return out


# ── Purge ─────────────────────────────────────────────────────────────────────

def purge_unreliable_rows(df: pd.DataFrame) -> pd.DataFrame:
    """Remove rows where both total_laid_off and percentage_laid_off are null."""
    total = pd.to_numeric(df["total_laid_off"], errors="coerce")
    percentage = pd.to_numeric(df["percentage_laid_off"], errors="coerce")
    unreliable = total.isna() & percentage.isna()
    out = df.loc[~unreliable].reset_index(drop=True)
    logger.info("unreliable_rows_purged", rows_in=len(df.index), rows_out=len(out.index))
    return out


# ── Full cleaning pass ────────────────────────────────────────────────────────

def clean_layoffs(
    staging_df: pd.DataFrame,
    prefix_map: dict[str, str] | None = None,
    date_format: str = config.DATE_FORMAT,
    on_invalid_date: str = "raise",
) -> CleaningResult:
    """Run dedup, standardisation, null resolution and purge over a staging copy."""
    counts: dict[str, int] = {"rows_in": len(staging_df.index)}

    out = schema.coerce_types(staging_df[schema.LAYOFF_COLUMNS])
    out = dedup.remove_exact_duplicates(out)
    counts["exact_duplicates_removed"] = counts["rows_in"] - len(out.index)

    before_std = out
    out = standardize_fields(
        out, prefix_map=prefix_map, date_format=date_format, on_invalid_date=on_invalid_date
    )
    counts["invalid_dates_dropped"] = len(before_std.index) - len(out.index)

    out = normalize_blank_industry(out)
    missing_before_fill = int(out["industry"].isna().sum())
    out = backfill_industry(out)
    counts["industry_backfilled"] = missing_before_fill - int(out["industry"].isna().sum())

    rows_before_purge = len(out.index)
    out = purge_unreliable_rows(out)
    counts["unreliable_rows_purged"] = rows_before_purge - len(out.index)

    rows_before_final = len(out.index)
    out = dedup.remove_exact_duplicates(out)
    counts["post_standardisation_duplicates_removed"] = rows_before_final - len(out.index)

    counts["rows_out"] = len(out.index)
    logger.info("cleaning_complete", **counts)
    return CleaningResult(clean=out, counts=counts)
