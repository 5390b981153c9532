from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd

from . import config, io_utils
from .errors import LayoffsIngestError
from .logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RuleDef:
    rule_id: str
    issue_type: str
    field_path: str
    description: str
    severity: str


LAYOFF_SCHEMA: list[dict[str, Any]] = [
    {
        "column": "company",
        "expected_dtype": "string",
        "nullable": False,
        "notes": "Company name; not unique, recurs across dates and industries.",
    },
    {
        "column": "location",
        "expected_dtype": "string",
        "nullable": False,
        "notes": "Headquarters city; already clean, passed through.",
    },
    {
        "column": "industry",
        "expected_dtype": "string",
        "nullable": True,
        "notes": "Blank normalised to null, backfilled from the same company.",
    },
    {
        "column": "total_laid_off",
        "expected_dtype": "Int64",
        "nullable": True,
        "notes": "Head count of the layoff event.",
    },
    {
        "column": "percentage_laid_off",
        "expected_dtype": "float in [0, 1]",
        "nullable": True,
        "notes": "Fraction of workforce laid off; 1 signals a full shutdown.",
    },
    {
        "column": "date",
        "expected_dtype": "datetime64",
        "nullable": True,
        "notes": "Event date, supplied as month/day/year text.",
    },
    {
        "column": "stage",
        "expected_dtype": "string",
        "nullable": True,
        "notes": "Funding stage (Seed, Series A-D, Post-IPO, ...).",
    },
    {
        "column": "country",
        "expected_dtype": "string",
        "nullable": False,
        "notes": "Country name; trailing punctuation stripped.",
    },
    {
        "column": "funds_raised_millions",
        "expected_dtype": "Int64",
        "nullable": True,
        "notes": "Total funds raised in millions of USD.",
    },
]

LAYOFF_COLUMNS = [item["column"] for item in LAYOFF_SCHEMA]

INTEGER_COLUMNS = ["total_laid_off", "funds_raised_millions"]

NUMERIC_COLUMNS = ["total_laid_off", "percentage_laid_off", "funds_raised_millions"]

LAYOFF_RULES: dict[str, RuleDef] = {
    "flag_exact_duplicate": RuleDef(
        rule_id="R_DUP_001",
        issue_type="Uniqueness",
        field_path="*",
        description="Row repeats an earlier row across every column.",
        severity="high",
    ),
    "flag_company_whitespace": RuleDef(
        rule_id="R_CMP_001",
        issue_type="Consistency",
        field_path="company",
        description="Company name carries leading or trailing whitespace.",
        severity="low",
    ),
    "flag_industry_missing": RuleDef(
        rule_id="R_IND_001",
        issue_type="Completeness",
        field_path="industry",
        description="Industry is null or blank.",
        severity="medium",
    ),
    "flag_industry_variant": RuleDef(
        rule_id="R_IND_002",
        issue_type="Consistency",
        field_path="industry",
        description="Industry is a non-canonical variant of a known label.",
        severity="medium",
    ),
    "flag_country_trailing_punctuation": RuleDef(
        rule_id="R_CTY_001",
        issue_type="Consistency",
        field_path="country",
        description="Country name ends with punctuation.",
        severity="medium",
    ),
    "flag_date_text": RuleDef(
        rule_id="R_DAT_001",
        issue_type="Validity",
        field_path="date",
        description="Event date is stored as text rather than a calendar date.",
        severity="medium",
    ),
    "flag_date_unparseable": RuleDef(
        rule_id="R_DAT_002",
        issue_type="Validity",
        field_path="date",
        description="Event date text does not match month/day/year.",
        severity="high",
    ),
    "flag_magnitude_missing": RuleDef(
        rule_id="R_MAG_001",
        issue_type="Completeness",
        field_path="total_laid_off|percentage_laid_off",
        description="Both total_laid_off and percentage_laid_off are null.",
        severity="high",
    ),
    "flag_magnitude_non_numeric": RuleDef(
        rule_id="R_MAG_002",
        issue_type="Validity",
        field_path="total_laid_off|percentage_laid_off",
        description="A layoff magnitude holds non-numeric text.",
        severity="high",
    ),
    "flag_percentage_out_of_range": RuleDef(
        rule_id="R_PCT_001",
        issue_type="Validity",
        field_path="percentage_laid_off",
        description="percentage_laid_off falls outside [0, 1].",
        severity="medium",
    ),
}


def schema_dictionary_df() -> pd.DataFrame:
    """Return a tabular data dictionary for the layoff schema."""
    return pd.DataFrame(LAYOFF_SCHEMA)


def validate_columns(df: pd.DataFrame) -> None:
    """Fail fast if the source is missing any schema column."""
    missing = [column for column in LAYOFF_COLUMNS if column not in df.columns]
    if missing:
        raise LayoffsIngestError(
            f"Source dataset is missing required columns: {', '.join(missing)}"
        )


def blank_mask(series: pd.Series) -> pd.Series:
    """Return True for null/blank values in a pandas Series."""
    return series.astype("object").map(io_utils.is_blank).astype(bool)


def _to_numeric(series: pd.Series) -> pd.Series:
    """Convert a Series to numeric values with invalid parsing as NaN."""
    return pd.to_numeric(series, errors="coerce")


def non_numeric_mask(series: pd.Series) -> pd.Series:
    """True where a non-blank value does not parse as a number."""
    return (~blank_mask(series)) & _to_numeric(series).isna()


def _to_nullable_int(series: pd.Series) -> pd.Series:
    """Cast to Int64 when every present value is integral, else keep floats."""
    numeric = _to_numeric(series)
    present = numeric.dropna().astype("float64")
    if present.empty or np.all(np.isclose(present, np.round(present))):
        return numeric.round().astype("Int64")
    logger.warning(
        "non_integral_values_kept_as_float",
        column=series.name,
        count=int((present != np.round(present)).sum()),
    )
    return numeric.astype("float64")


def coerce_types(df: pd.DataFrame) -> pd.DataFrame:
    """Coerce numeric columns to their schema dtypes, leaving text columns as-is.

    Non-blank text that is not a number becomes null; each affected column
    is reported with a warning.
    """
    out = df.copy()
    for column in NUMERIC_COLUMNS:
        invalid = non_numeric_mask(out[column])
        if invalid.any():
            logger.warning(
                "non_numeric_values_nulled",
                column=column,
                count=int(invalid.sum()),
                examples=sorted(out.loc[invalid, column].astype(str).unique().tolist())[:5],
            )
    for column in INTEGER_COLUMNS:
        out[column] = _to_nullable_int(out[column])
    out["percentage_laid_off"] = _to_numeric(out["percentage_laid_off"]).astype("float64")
    return out


def _is_date_text(value: Any) -> bool:
    """True for non-blank string values that still need date parsing."""
    return isinstance(value, str) and value.strip() != ""


def _industry_variant_mask(industry: pd.Series) -> pd.Series:
    """Flag industries that start with a known prefix but differ from its canonical label."""
    text = industry.astype("object").where(industry.notna(), "").astype(str)
    mask = pd.Series(False, index=industry.index)
    for prefix, canonical in config.INDUSTRY_PREFIX_MAP.items():
        mask |= text.str.startswith(prefix) & text.ne(canonical)
    return mask


def validate_layoffs(df: pd.DataFrame) -> pd.DataFrame:
    """Compute row-level validation flags for a raw or cleaned layoff frame."""
    flags = pd.DataFrame(index=df.index)

    flags["flag_exact_duplicate"] = df[LAYOFF_COLUMNS].duplicated(keep="first")

    company = df["company"].astype("object")
    company_text = company.where(company.notna(), "").astype(str)
    flags["flag_company_whitespace"] = company_text.ne(company_text.str.strip())

    flags["flag_industry_missing"] = blank_mask(df["industry"])
    flags["flag_industry_variant"] = _industry_variant_mask(df["industry"])

    country = df["country"].astype("object")
    country_text = country.where(country.notna(), "").astype(str).str.rstrip()
    stripped_country = country_text.str.rstrip(config.COUNTRY_TRAILING_PUNCTUATION)
    flags["flag_country_trailing_punctuation"] = country_text.ne(stripped_country) & stripped_country.ne("")

    date_is_text = df["date"].apply(_is_date_text)
    flags["flag_date_text"] = date_is_text
    parsed = pd.to_datetime(
        df["date"].where(date_is_text), format=config.DATE_FORMAT, errors="coerce"
    )
    flags["flag_date_unparseable"] = date_is_text & parsed.isna()

    total = _to_numeric(df["total_laid_off"])
    percentage = _to_numeric(df["percentage_laid_off"])
    flags["flag_magnitude_missing"] = total.isna() & percentage.isna()
    flags["flag_magnitude_non_numeric"] = non_numeric_mask(df["total_laid_off"]) | non_numeric_mask(
        df["percentage_laid_off"]
    )
    flags["flag_percentage_out_of_range"] = (percentage < 0) | (percentage > 1)

    return flags.fillna(False).astype(bool)


def summarize_validation_flags(
    flags: pd.DataFrame,
    rules: dict[str, RuleDef],
    companies: pd.Series,
    stage: str,
) -> pd.DataFrame:
    """Aggregate row-level validation flags into counts, rates, and examples."""
    rows: list[dict[str, Any]] = []
    denominator = len(flags.index)
    for flag_col, rule in rules.items():
        if flag_col not in flags.columns:
            continue
        mask = flags[flag_col].fillna(False).astype(bool)
        failed_count = int(mask.sum())
        failed_percent = float((failed_count / denominator) * 100) if denominator else 0.0
        examples = (
            companies[mask]
            .dropna()
            .astype(str)
            .str.strip()
            .drop_duplicates()
            .sort_values()
            .head(5)
            .tolist()
        )
        rows.append(
            {
                "stage": stage,
                "rule_id": rule.rule_id,
                "issue_type": rule.issue_type,
                "field_path": rule.field_path,
                "description": rule.description,
                "severity": rule.severity,
                "failed_count": failed_count,
                "failed_percent": round(failed_percent, 2),
                "example_companies": "|".join(examples),
            }
        )
    return pd.DataFrame(
        rows,
        columns=[
            "stage",
            "rule_id",
            "issue_type",
            "field_path",
            "description",
            "severity",
            "failed_count",
            "failed_percent",
            "example_companies",
        ],
    )
