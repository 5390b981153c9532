"""Unit tests for runtime configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from layoffs_pipeline import config
from layoffs_pipeline.errors import LayoffsConfigError


def test_from_env_reads_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Environment variables should populate every field."""
    monkeypatch.setenv("LAYOFFS_INPUT_PATH", str(tmp_path / "in.csv"))
    monkeypatch.setenv("LAYOFFS_OUTPUT_DIR", str(tmp_path / "out"))
    monkeypatch.setenv("LAYOFFS_ON_INVALID_DATE", "DROP")
    monkeypatch.setenv("LAYOFFS_TOP_N", "3")

    cfg = config.PipelineConfig.from_env()

    assert cfg.input_path == tmp_path / "in.csv"
    assert cfg.output_dir == tmp_path / "out"
    assert cfg.on_invalid_date == "drop"
    assert cfg.top_n == 3


def test_from_env_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """Without overrides the defaults point at the data directory."""
    for name in ("LAYOFFS_INPUT_PATH", "LAYOFFS_OUTPUT_DIR", "LAYOFFS_ON_INVALID_DATE", "LAYOFFS_TOP_N"):
        monkeypatch.delenv(name, raising=False)

    cfg = config.PipelineConfig.from_env()

    assert cfg.input_path == config.RAW_CSV_PATH
    assert cfg.on_invalid_date == "raise"
    assert cfg.top_n == config.TOP_N_DEFAULT


@pytest.mark.parametrize("value", ["zero", "0", "-2"])
def test_parse_top_n_rejects_invalid_values(value: str) -> None:
    """Rank cutoffs must be positive integers."""
    with pytest.raises(LayoffsConfigError):
        config.parse_top_n(value)


def test_parse_invalid_date_policy_rejects_unknown_policy() -> None:
    """Only raise and drop are supported."""
    with pytest.raises(LayoffsConfigError):
        config.parse_invalid_date_policy("ignore")
