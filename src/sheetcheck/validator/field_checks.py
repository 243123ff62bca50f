# src/sheetcheck/validator/field_checks.py
"""
@brief
Field-level and structural checks for a single sheet.

@details
Each check is a pure function of (rows, parameters, sheet_name) returning a
list of ValidationIssue in row order. Malformed cells never raise: parse
failures are converted into issues on the spot.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from sheetcheck.schemas.models import CRITICAL, SuggestedFix, ValidationIssue
from sheetcheck.schemas.registry import (
    default_column_value,
    get_entity_definition,
    row_placeholder_id,
)
from sheetcheck.schemas.values import (
    clamp,
    is_blank,
    parse_json,
    tidy_number,
    to_number,
    to_text,
)

Rows = Sequence[Mapping[str, Any]]


def _missing_from_header(rows: Rows, fields: Iterable[str]) -> list[str]:
    # The first row stands in for the header; sparse later rows do not count.
    header = rows[0]
    return [field for field in fields if field not in header]


def validate_required_columns(
    rows: Rows, required_fields: Iterable[str], sheet_name: str
) -> list[ValidationIssue]:
    """
    @brief
    Flag required columns absent from the sheet header.

    @details
    One sheet-scoped `missing_column` issue per absent field. Empty sheets
    have no header to inspect and produce nothing.
    """
    if not rows:
        return []
    return [
        ValidationIssue(
            kind="missing_column",
            message=f"Missing required column: {column}",
            sheet_name=sheet_name,
            severity=CRITICAL,
        )
        for column in _missing_from_header(rows, required_fields)
    ]


def validate_entity_structure(
    rows: Rows, entity_type: str, sheet_name: str
) -> list[ValidationIssue]:
    """
    @brief
    Registry-driven required-column check with column-creation fixes.

    @details
    Same detection as validate_required_columns, using the entity's
    required fields. Each issue proposes a default for the new column
    (PriorityLevel -> 3, identifiers -> "NEW_<field>", others -> ""),
    to be applied to every row of the sheet.
    """
    definition = get_entity_definition(entity_type)
    if definition is None or not rows:
        return []
    return [
        ValidationIssue(
            kind="missing_column",
            message=f"Required column '{field}' is missing",
            sheet_name=sheet_name,
            severity=CRITICAL,
            suggested_fix=SuggestedFix(
                value=default_column_value(field),
                explanation=f"Add missing required column '{field}'",
                action="add_column",
                column=field,
            ),
        )
        for field in _missing_from_header(rows, definition.required_fields)
    ]


def validate_field_types(rows: Rows, entity_type: str, sheet_name: str) -> list[ValidationIssue]:
    """
    @brief
    Run every registered type predicate over every row.

    @details
    Only fields present in a row are checked. Failures yield
    `invalid_format` with the field formatter's output as suggested fix.
    Issues are ordered by row, then by the registry's field order.

    Identifier fixes are row-specific: a blank identifier gets a placeholder
    unique within the sheet (NEW_<field>_<row number>), so applying the
    fixes never introduces duplicate identifiers.
    """
    definition = get_entity_definition(entity_type)
    if definition is None:
        return []

    id_field = definition.id_field
    taken_ids = {to_text(row.get(id_field)).strip() for row in rows}

    issues: list[ValidationIssue] = []
    for row_index, row in enumerate(rows):
        for field, predicate in definition.field_types.items():
            if field not in row or predicate(row[field]):
                continue
            value = row[field]
            is_id = field == id_field
            formatter = definition.field_formats.get(field)
            fix = None
            if is_id and is_blank(value):
                fix = SuggestedFix(
                    value=row_placeholder_id(field, row_index, taken_ids),
                    explanation=f"Assign a unique placeholder {field}",
                )
            elif formatter is not None:
                fix = SuggestedFix(
                    value=formatter(value),
                    explanation=f"Format {field} according to requirements",
                )
            issues.append(
                ValidationIssue(
                    kind="invalid_format",
                    message=f"Invalid format for {field}: {to_text(value)}",
                    sheet_name=sheet_name,
                    row_index=row_index,
                    column_name=field,
                    severity=CRITICAL,
                    value=value,
                    affects_multiple=not is_id,
                    suggested_fix=fix,
                )
            )
    return issues


def validate_number_range(
    rows: Rows, field: str, min_value: float, max_value: float, sheet_name: str
) -> list[ValidationIssue]:
    """
    @brief
    Check that a column holds numbers within [min_value, max_value].

    @details
    Non-numeric (including absent) values yield `invalid_number` without a
    fix. Numbers outside the range yield `out_of_range` with the value
    clamped into range as fix.
    """
    issues: list[ValidationIssue] = []
    bounds = f"{tidy_number(float(min_value))}-{tidy_number(float(max_value))}"
    for row_index, row in enumerate(rows):
        value = row.get(field)
        num = to_number(value)
        if math.isnan(num):
            issues.append(
                ValidationIssue(
                    kind="invalid_number",
                    message=f"{field} must be a number, got {to_text(value) or 'nothing'}",
                    sheet_name=sheet_name,
                    row_index=row_index,
                    column_name=field,
                    severity=CRITICAL,
                    value=value,
                )
            )
            continue
        if min_value <= num <= max_value:
            continue
        issues.append(
            ValidationIssue(
                kind="out_of_range",
                message=f"{field} must be between {bounds}, got {to_text(value)}",
                sheet_name=sheet_name,
                row_index=row_index,
                column_name=field,
                severity=CRITICAL,
                value=value,
                affects_multiple=True,
                suggested_fix=SuggestedFix(
                    value=clamp(num, min_value, max_value),
                    explanation="Adjusted to valid range",
                ),
            )
        )
    return issues


def validate_json_field(rows: Rows, field: str, sheet_name: str) -> list[ValidationIssue]:
    """
    Flag cells of `field` whose text is not valid JSON; the fix resets them to "{}".

    Rows that do not carry the column at all are skipped.
    """
    issues: list[ValidationIssue] = []
    for row_index, row in enumerate(rows):
        if field not in row:
            continue
        value = row[field]
        try:
            parse_json(value)
        except ValueError as e:
            issues.append(
                ValidationIssue(
                    kind="invalid_json",
                    message=f"Invalid JSON in {field}: {e}",
                    sheet_name=sheet_name,
                    row_index=row_index,
                    column_name=field,
                    severity=CRITICAL,
                    value=value,
                    affects_multiple=True,
                    suggested_fix=SuggestedFix(
                        value="{}", explanation="Reset to empty JSON object"
                    ),
                )
            )
    return issues


__all__ = [
    "validate_entity_structure",
    "validate_field_types",
    "validate_json_field",
    "validate_number_range",
    "validate_required_columns",
]
