# scripts/run.py
from __future__ import annotations

import argparse
import logging
import sys
import time
import traceback
from pathlib import Path
from typing import Any

from sheetcheck.dataloader.config_loader import ConfigLoader
from sheetcheck.dataloader.dataset import DatasetLoader
from sheetcheck.errors import SheetcheckError
from sheetcheck.export.report_export import write_issues_csv, write_report_json
from sheetcheck.schemas.models import Config
from sheetcheck.validator import validate_dataset


def _setup_logging() -> None:
    """
    @brief
    Initializes global logging configuration.

    @details
    Sets the default logging level to INFO and defines a simple console format.
    """
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    @brief
    Parses command-line arguments for the validation run.

    @details
    --config is optional: without it the built-in defaults apply.
    """
    parser = argparse.ArgumentParser(
        prog="sheetcheck-run",
        description="Validate a clients/workers/tasks dataset snapshot: load → validate → export",
    )

    # (1) Config path argument
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config YAML (default: built-in defaults)",
    )

    # (2) Input dataset snapshot argument
    parser.add_argument(
        "--input",
        type=str,
        default="data/input/sample_dataset.json",
        help="Path to dataset JSON snapshot (default: data/input/sample_dataset.json)",
    )

    # (3) Output directory argument
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output directory for artifacts (default: Config.output_dir)",
    )

    return parser.parse_args(argv)


def run_validation(
    config_path: Path | None, input_path: Path, output_dir: Path | None
) -> dict[str, Any]:
    """
    @brief
    Executes one validation run end to end.

    @details
    (1) Load configuration (or defaults) and the dataset snapshot.
    (2) Run the validation pass with fix suggestions.
    (3) Export validation_report.json and issues.csv as configured.

    @returns
        Dictionary with validity flag, issue count, quality score and
        artifact paths.

    @raises
        SheetcheckError
            On configuration, data or export issues.
    """
    t0 = time.perf_counter()

    # (1) Load configuration and dataset
    if config_path is not None:
        logging.info("Loading config: %s", config_path)
        cfg = ConfigLoader().load(config_path)
    else:
        cfg = Config()
    out_dir = output_dir or Path(cfg.output_dir or "data/output")

    logging.info("Loading dataset: %s", input_path)
    dataset = DatasetLoader().load(input_path)

    # (2) Validate
    logging.info("Validating %d sheet(s)…", len(dataset))
    report = validate_dataset(dataset, cfg)

    # (3) Export artifacts
    report_path: Path | None = None
    issues_path: Path | None = None
    if cfg.report.write_report:
        report_path = write_report_json(report, out_dir)
    if cfg.report.write_issues_csv:
        issues_path = write_issues_csv(report.all_issues(), out_dir / "issues.csv")

    for analysis in report.sheet_analyses:
        logging.info(
            "Sheet %s: %d issue(s) (%d critical) %s",
            analysis.sheet_name,
            analysis.error_count,
            analysis.critical_count,
            ", ".join(analysis.error_types),
        )
    logging.info(
        "Validation finished in %.2f s: %d issue(s), quality score %.0f",
        time.perf_counter() - t0,
        report.total_errors,
        report.data_quality_score,
    )

    return {
        "valid": report.valid,
        "total_errors": report.total_errors,
        "data_quality_score": report.data_quality_score,
        "artifacts": {"validation_report": report_path, "issues_csv": issues_path},
    }


def main(argv: list[str] | None = None) -> int:
    """
    @brief
    CLI entry point.

    @details
    Exit codes:
      0 – no critical issues
      1 – critical issues found, or controlled failure (config/data/export)
      2 – unexpected crash
    """
    _setup_logging()
    args = _parse_args(argv)

    config_path = Path(args.config) if args.config else None
    output_dir = Path(args.output) if args.output else None

    try:
        result = run_validation(config_path, Path(args.input), output_dir)
        return 0 if result["valid"] else 1
    except SheetcheckError as e:
        logging.error(str(e))
        return 1
    except Exception:
        logging.error("Unexpected error occurred:")
        traceback.print_exc()
        return 2


if __name__ == "__main__":
    sys.exit(main())
