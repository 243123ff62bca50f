# src/sheetcheck/fixes/apply.py
"""
@brief
Copy-on-write application of fixes and header mappings.

@details
Row indices are only meaningful for the snapshot a validation pass ran on.
These helpers never mutate their inputs: each returns a new snapshot built
from new row dictionaries.
Callers must re-validate the returned snapshot before applying more fixes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from sheetcheck.errors import DataError
from sheetcheck.schemas.models import FixSuggestion, RowFix

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]
FixLike = RowFix | Mapping[str, Any]

UNKNOWN_HEADER = "Unknown"


def _as_row_fix(fix: FixLike) -> RowFix:
    if isinstance(fix, RowFix):
        return fix
    try:
        return RowFix.model_validate(dict(fix))
    except (ValidationError, TypeError, ValueError) as e:
        raise DataError(
            message=f"Malformed fix: {e}",
            source="fixes.apply",
            suggested_action="Provide fixes as {sheet_name, row_index, changes} mappings.",
        ) from e


def apply_fixes_to_rows(rows: Sequence[Row], fixes: Iterable[FixLike]) -> list[dict[str, Any]]:
    """
    @brief
    Apply row-level change sets to a single sheet.

    @details
    Changes are merged over the existing row (new keys create columns).
    Fixes pointing outside [0, len(rows)) are ignored, not errors. Fixes
    are applied in order, so a later change to the same cell wins.

    @returns
        New list of rows; the input sequence and its rows are untouched.
    """
    new_rows: list[dict[str, Any]] = [dict(row) for row in rows]
    for fix in fixes:
        row_fix = _as_row_fix(fix)
        if not 0 <= row_fix.row_index < len(new_rows):
            logger.debug("Ignoring fix for out-of-range row %d", row_fix.row_index)
            continue
        new_rows[row_fix.row_index] = {**new_rows[row_fix.row_index], **row_fix.changes}
    return new_rows


def apply_fixes(
    dataset: Mapping[str, Sequence[Row]], fixes: Iterable[FixLike]
) -> dict[str, list[dict[str, Any]]]:
    """
    @brief
    Apply sheet-addressed fixes to a dataset snapshot.

    @details
    Groups fixes by sheet while preserving their order, then delegates to
    apply_fixes_to_rows. Fixes for sheets absent from the dataset are
    ignored. Sheets without fixes are copied row by row.

    @raises
        DataError
            If a fix does not name its sheet.
    """
    by_sheet: dict[str, list[RowFix]] = {}
    for fix in fixes:
        row_fix = _as_row_fix(fix)
        if row_fix.sheet_name is None:
            raise DataError(
                message="Dataset-level fix without sheet_name",
                source="fixes.apply_fixes",
                suggested_action="Set sheet_name on every fix or use apply_fixes_to_rows.",
            )
        if row_fix.sheet_name not in dataset:
            logger.debug("Ignoring fix for unknown sheet %r", row_fix.sheet_name)
            continue
        by_sheet.setdefault(row_fix.sheet_name, []).append(row_fix)

    return {
        name: apply_fixes_to_rows(rows, by_sheet.get(name, [])) for name, rows in dataset.items()
    }


def fixes_from_suggestions(suggestions: Iterable[FixSuggestion]) -> list[RowFix]:
    """Expand each suggestion into one RowFix per affected row."""
    return [
        RowFix(sheet_name=s.sheet_name, row_index=row_index, changes=dict(s.changes))
        for s in suggestions
        for row_index in s.affected_rows
    ]


def normalize_rows(rows: Sequence[Row], mapping: Mapping[str, str]) -> list[dict[str, Any]]:
    """
    Rename columns with a caller-supplied header mapping.

    Mapped headers are renamed, headers mapped to "Unknown" are dropped and
    unmapped headers are kept as they are.
    """
    normalized: list[dict[str, Any]] = []
    for row in rows:
        new_row: dict[str, Any] = {}
        for key, value in row.items():
            target = mapping.get(key)
            if not target:
                new_row[key] = value
            elif target != UNKNOWN_HEADER:
                new_row[target] = value
        normalized.append(new_row)
    return normalized


__all__ = ["apply_fixes", "apply_fixes_to_rows", "fixes_from_suggestions", "normalize_rows"]
