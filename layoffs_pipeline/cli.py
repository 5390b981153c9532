"""Command line entry points for the layoffs pipeline."""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Sequence

from . import config, pipeline
from .errors import LayoffsError
from .logging_config import get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser."""
    parser = argparse.ArgumentParser(
        prog="layoffs-pipeline", description="Clean and analyse the world layoffs dataset"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    run_parser = subparsers.add_parser("run", help="Clean the dataset and compute every analysis table")
    _add_common_arguments(run_parser)
    run_parser.add_argument("--top-n", type=int, help="Dense ranks reported per year (default 5)")
    clean_parser = subparsers.add_parser("clean", help="Clean the dataset and write quality reports only")
    _add_common_arguments(clean_parser)
    return parser


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Register input/output arguments shared by every command."""
    parser.add_argument("--input", help="Override LAYOFFS_INPUT_PATH")
    parser.add_argument("--output-dir", help="Override LAYOFFS_OUTPUT_DIR")
    parser.add_argument(
        "--on-invalid-date",
        choices=config.INVALID_DATE_POLICIES,
        help="Abort on unparseable dates (raise) or drop those rows (drop)",
    )


def _resolve_config(args: argparse.Namespace) -> config.PipelineConfig:
    """Apply CLI overrides on top of the environment configuration."""
    cfg = config.PipelineConfig.from_env()
    if args.input:
        cfg = replace(cfg, input_path=Path(args.input).expanduser())
    if args.output_dir:
        cfg = replace(cfg, output_dir=Path(args.output_dir).expanduser())
    if args.on_invalid_date:
        cfg = replace(cfg, on_invalid_date=args.on_invalid_date)
    if getattr(args, "top_n", None) is not None:
        cfg = replace(cfg, top_n=config.parse_top_n(args.top_n))
    return cfg


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return a process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        cfg = _resolve_config(args)
        if args.command == "run":
            result = pipeline.run_pipeline(cfg)
        else:
            result = pipeline.run_cleaning(cfg)
        written = pipeline.write_outputs(result, cfg.output_dir)
    except LayoffsError as error:
        logger.error("pipeline_failed", command=args.command, error=str(error))
        return 1
    for path in written:
        print(path)
    return 0
