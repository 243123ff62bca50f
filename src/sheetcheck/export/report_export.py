# src/sheetcheck/export/report_export.py
from __future__ import annotations

import csv
import io
import json
import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

from sheetcheck.errors import ReportError
from sheetcheck.schemas.models import ValidationIssue, ValidationReport
from sheetcheck.schemas.values import to_text

logger = logging.getLogger(__name__)

ISSUE_COLUMNS = (
    "sheet_name",
    "row_index",
    "column_name",
    "kind",
    "severity",
    "message",
    "value",
    "suggested_value",
)


def write_report_json(
    report: ValidationReport, out_dir: Path, filename: str = "validation_report.json"
) -> Path:
    """
    @brief
    Writes the validation report as JSON atomically in UTF-8 encoding.

    @details
    Serializes the report through pydantic's JSON mode and replaces the
    target file in one filesystem operation.

    @params
        report : ValidationReport
            Report produced by a validation pass.
        out_dir : Path
            Directory where the file will be created.
        filename : str
            Target file name.

    @returns
        Path to the written file.

    @raises
        ReportError
            On serialization or write failure.
    """
    # (1) Serialize via pydantic JSON mode
    try:
        payload = json.dumps(report.model_dump(mode="json"), ensure_ascii=False, indent=2)
    except (TypeError, ValueError) as e:
        raise ReportError(
            f"report not JSON-serializable: {e}",
            source="export.write_report_json",
            suggested_action="Ensure cell values are primitives (str/float/int/bool/None).",
        ) from e

    # (2) Atomically write payload
    target = Path(out_dir) / filename
    _atomic_write_text(target, payload + "\n")
    logger.info("Validation report saved: %s", target)
    return target


def write_issues_csv(issues: Iterable[ValidationIssue], out_path: Path) -> Path:
    """
    @brief
    Exports issues as CSV, one row per issue, in canonical order.

    @details
    Sheet-scoped issues leave row_index and column_name empty. Values are
    rendered with the same text form the checks use.
    """
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=ISSUE_COLUMNS, lineterminator="\n")
    writer.writeheader()
    for issue in issues:
        fix = issue.suggested_fix
        writer.writerow(
            {
                "sheet_name": issue.sheet_name,
                "row_index": "" if issue.row_index is None else issue.row_index,
                "column_name": issue.column_name or "",
                "kind": issue.kind,
                "severity": issue.severity,
                "message": issue.message,
                "value": to_text(issue.value),
                "suggested_value": to_text(fix.value) if fix else "",
            }
        )

    _atomic_write_text(Path(out_path), buffer.getvalue())
    logger.info("Issues exported: %s", out_path)
    return Path(out_path)


def _atomic_write_text(path: Path, text: str, encoding: str = "utf-8") -> None:
    """
    @brief
    Performs atomic text file writing using a temporary file swap.

    @raises
        ReportError
            On write or rename failure.
    """
    # (1) Create temporary file near the target for atomicity
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=path.name + ".", dir=str(path.parent))
    except OSError as e:
        raise ReportError(
            f"cannot prepare output directory {path.parent}: {e}",
            source="export._atomic_write_text",
            suggested_action="Point the output directory at a writable folder.",
        ) from e

    try:
        with open(fd, "w", encoding=encoding, newline="") as f:
            f.write(text)
        os.replace(tmp_path, path)
    except OSError as e:
        # (2) Clean up temp file on error
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise ReportError(
            f"atomic write failed for {path}: {e}",
            source="export._atomic_write_text",
            suggested_action="Check output directory permissions and disk space.",
        ) from e


__all__ = ["ISSUE_COLUMNS", "write_issues_csv", "write_report_json"]
