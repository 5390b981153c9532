"""Integration tests for the end-to-end pipeline and CLI."""

from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from layoffs_pipeline import cli, config, pipeline
from tests.factories import make_frame, make_record


@pytest.fixture
def source_csv(tmp_path: Path, raw_frame: pd.DataFrame) -> Path:
    """Write the shared raw fixture to disk the way the source export looks."""
    path = tmp_path / "layoffs.csv"
    raw_frame.fillna("NULL").to_csv(path, index=False)
    return path


def test_run_pipeline_produces_clean_table_and_analysis(source_csv: Path, tmp_path: Path) -> None:
    """A full run should clean the data and compute every analysis table."""
    cfg = config.PipelineConfig(input_path=source_csv, output_dir=tmp_path / "out")

    result = pipeline.run_pipeline(cfg)

    assert len(result.raw.index) == 9
    assert len(result.clean.index) == 6
    assert set(result.analysis_tables) >= {
        "stage_magnitude",
        "industry_magnitude",
        "stage_shutdown_rates",
        "industry_shutdown_rates",
        "monthly_rolling_totals",
        "top_companies_by_year",
    }
    rolling = result.analysis_tables["monthly_rolling_totals"]
    assert rolling["rolling_total"].iloc[-1] == rolling["total_off"].sum()


def test_raw_frame_is_untouched_by_run(source_csv: Path, tmp_path: Path) -> None:
    """The loaded source stays identical to the file after cleaning."""
    cfg = config.PipelineConfig(input_path=source_csv, output_dir=tmp_path / "out")

    result = pipeline.run_pipeline(cfg)

    assert " Airbnb" in result.raw["company"].tolist()
    assert len(result.raw.index) == 9


def test_cli_run_writes_outputs(source_csv: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """The run command should persist clean, analysis and quality CSVs."""
    output_dir = tmp_path / "out"

    exit_code = cli.main(["run", "--input", str(source_csv), "--output-dir", str(output_dir), "--top-n", "3"])

    assert exit_code == 0
    clean_path = output_dir / config.CURATED_SUBDIR / config.CLEAN_FILENAME
    assert clean_path.exists()
    assert (output_dir / config.ANALYSIS_SUBDIR / "top_companies_by_year.csv").exists()
    assert (output_dir / config.QUALITY_SUBDIR / "data_quality_report.csv").exists()
    written = pd.read_csv(clean_path)
    assert written["date"].dropna().str.match(r"^\d{4}-\d{2}-\d{2}$").all()
    assert str(clean_path) in capsys.readouterr().out


def test_cli_clean_skips_analysis(source_csv: Path, tmp_path: Path) -> None:
    """The clean command writes the curated table without analysis outputs."""
    output_dir = tmp_path / "out"

    exit_code = cli.main(["clean", "--input", str(source_csv), "--output-dir", str(output_dir)])

    assert exit_code == 0
    assert (output_dir / config.CURATED_SUBDIR / config.CLEAN_FILENAME).exists()
    assert not list((output_dir / config.ANALYSIS_SUBDIR).glob("*.csv"))


def test_cli_returns_error_for_missing_source(tmp_path: Path) -> None:
    """A missing source aborts the run with a non-zero exit code."""
    exit_code = cli.main(["run", "--input", str(tmp_path / "missing.csv"), "--output-dir", str(tmp_path)])

    assert exit_code == 1


def test_cli_invalid_dates_abort_unless_dropped(tmp_path: Path) -> None:
    """Unparseable dates fail the run by default and are dropped on request."""
    source = tmp_path / "layoffs.csv"
    make_frame([make_record(), make_record(company="Bad", date="2023/03/06")]).to_csv(source, index=False)

    failed = cli.main(["run", "--input", str(source), "--output-dir", str(tmp_path / "a")])
    dropped = cli.main(
        ["run", "--input", str(source), "--output-dir", str(tmp_path / "b"), "--on-invalid-date", "drop"]
    )

    assert failed == 1
    assert dropped == 0
    written = pd.read_csv(tmp_path / "b" / config.CURATED_SUBDIR / config.CLEAN_FILENAME)
    assert written["company"].tolist() == ["Acme"]
