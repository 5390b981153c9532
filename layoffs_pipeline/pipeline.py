from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import pandas as pd

from . import analysis, config, dedup, ingest, io_utils, quality
from .clean import CleaningResult, clean_layoffs
from .logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class PipelineResult:
    """Every table produced by one pipeline run."""

    raw: pd.DataFrame
    cleaning: CleaningResult
    quality_tables: dict[str, pd.DataFrame] = field(default_factory=dict)
    analysis_tables: dict[str, pd.DataFrame] = field(default_factory=dict)

    @property
    def clean(self) -> pd.DataFrame:
        """The cleaned layoff table."""
        return self.cleaning.clean


def run_cleaning(cfg: config.PipelineConfig) -> PipelineResult:
    """Ingest, stage and clean the source dataset, with quality reports."""
    raw = ingest.load_layoffs(cfg.input_path)
    staging = ingest.create_staging(raw)
    pre_report = quality.build_data_quality_report(staging, stage="pre")
    duplicates = dedup.duplicate_report(staging)

    cleaning = clean_layoffs(staging, on_invalid_date=cfg.on_invalid_date)

    post_report = quality.build_data_quality_report(cleaning.clean, stage="post")
    quality_tables = {
        "data_quality_report": pd.concat([pre_report, post_report], ignore_index=True),
        "before_after_comparison": quality.build_before_after_comparison(
            pre_report=pre_report,
            post_report=post_report,
            total_records=len(raw.index),
            clean_count=len(cleaning.clean.index),
        ),
        "cleaning_actions": quality.summarise_cleaning_changes(cleaning),
        "duplicate_report": duplicates,
    }
    return PipelineResult(raw=raw, cleaning=cleaning, quality_tables=quality_tables)


def run_pipeline(cfg: config.PipelineConfig) -> PipelineResult:
    """Run ingestion, cleaning and analysis end to end."""
    logger.info("pipeline_started", input_path=str(cfg.input_path), top_n=cfg.top_n)
    result = run_cleaning(cfg)
    result.analysis_tables = analysis.run_analysis(result.clean, top_n=cfg.top_n)
    logger.info("pipeline_finished", rows_out=len(result.clean.index))
    return result


def write_outputs(result: PipelineResult, output_dir: Path | str) -> list[Path]:
    """Persist the clean table, analysis tables and quality reports as CSV."""
    output_dir = Path(output_dir)
    io_utils.ensure_output_dirs(output_dir)
    written: list[Path] = []

    clean_out = result.clean.copy()
    clean_out["date"] = pd.to_datetime(clean_out["date"]).dt.strftime("%Y-%m-%d")
    clean_path = output_dir / config.CURATED_SUBDIR / config.CLEAN_FILENAME
    targets: list[tuple[pd.DataFrame, Path]] = [(clean_out, clean_path)]
    for name, table in result.quality_tables.items():
        targets.append((table, output_dir / config.QUALITY_SUBDIR / f"{name}.csv"))
    for name, table in result.analysis_tables.items():
        targets.append((table, output_dir / config.ANALYSIS_SUBDIR / f"{name}.csv"))

    for table, path in targets:
        io_utils.write_csv(table, path)
        written.append(path)
    logger.info("outputs_written", output_dir=str(output_dir), files=len(written))
    return written
