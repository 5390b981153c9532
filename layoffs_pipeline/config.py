from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .errors import LayoffsConfigError

BASE_DIR = Path(__file__).resolve().parents[1]
DATA_DIR = BASE_DIR / "data"
RAW_DIR = DATA_DIR / "raw"
CURATED_SUBDIR = "curated"
ANALYSIS_SUBDIR = "analysis"
QUALITY_SUBDIR = "quality"
OUTPUT_SUBDIRS = (CURATED_SUBDIR, ANALYSIS_SUBDIR, QUALITY_SUBDIR)

RAW_CSV_PATH = RAW_DIR / "layoffs.csv"

CLEAN_FILENAME = "layoffs_clean.csv"

# Source dates are month/day/4-digit-year text, e.g. 3/6/2023.
DATE_FORMAT = "%m/%d/%Y"

# Case-sensitive prefix -> canonical industry label.
INDUSTRY_PREFIX_MAP = {
    "Crypto": "Crypto",
}

COUNTRY_TRAILING_PUNCTUATION = "."

SHUTDOWN_PERCENTAGE = 1.0

TOP_N_DEFAULT = 5

INVALID_DATE_POLICIES = ("raise", "drop")


@dataclass(frozen=True)
class PipelineConfig:
    """Validated runtime configuration.

    Attributes:
        input_path: Source CSV with the raw layoff records.
        output_dir: Root directory for curated, analysis and quality outputs.
        on_invalid_date: ``raise`` aborts on unparseable dates, ``drop`` removes those rows.
        top_n: Number of dense ranks reported per year.
    """

    input_path: Path
    output_dir: Path
    on_invalid_date: str = "raise"
    top_n: int = TOP_N_DEFAULT

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        """Build config from ``LAYOFFS_*`` environment variables."""
        input_value = os.getenv("LAYOFFS_INPUT_PATH", str(RAW_CSV_PATH))
        output_value = os.getenv("LAYOFFS_OUTPUT_DIR", str(DATA_DIR))
        policy = os.getenv("LAYOFFS_ON_INVALID_DATE", "raise")
        top_n_value = os.getenv("LAYOFFS_TOP_N", str(TOP_N_DEFAULT))
        return cls(
            input_path=Path(input_value).expanduser(),
            output_dir=Path(output_value).expanduser(),
            on_invalid_date=parse_invalid_date_policy(policy),
            top_n=parse_top_n(top_n_value),
        )


def parse_invalid_date_policy(raw_value: str) -> str:
    """Validate the invalid-date policy name."""
    policy = raw_value.strip().lower()
    if policy not in INVALID_DATE_POLICIES:
        raise LayoffsConfigError(
            f"Invalid date policy '{raw_value}': expected one of {', '.join(INVALID_DATE_POLICIES)}."
        )
    return policy


def parse_top_n(raw_value: str | int) -> int:
    """Parse a positive rank cutoff."""
    try:
        top_n = int(raw_value)
    except ValueError as error:
        raise LayoffsConfigError(
            f"Invalid LAYOFFS_TOP_N value: expected integer, got '{raw_value}'."
        ) from error
    if top_n < 1:
        raise LayoffsConfigError(f"Invalid LAYOFFS_TOP_N value: must be >= 1, got {top_n}.")
    return top_n
