# src/sheetcheck/validator/cross_sheet.py
"""
@brief
Referential and capacity checks spanning clients, workers and tasks.

@details
Each function reads only the rows it is given and reports issues against
the sheet whose rows are at fault. Sheet names default to the canonical
entity keys but callers pass the actual names from the dataset.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from typing import Any

from sheetcheck.schemas.models import CRITICAL, SuggestedFix, ValidationIssue
from sheetcheck.schemas.registry import format_phase_window
from sheetcheck.schemas.values import (
    is_falsy,
    parse_json,
    split_list,
    tidy_number,
    to_number,
    to_text,
)

logger = logging.getLogger(__name__)

Rows = Sequence[Mapping[str, Any]]


def _skill_set(row: Mapping[str, Any], field: str) -> set[str]:
    return set(split_list(row.get(field)))


def validate_task_references(
    source_rows: Rows,
    target_rows: Rows,
    source_field: str,
    target_field: str,
    sheet_name: str,
) -> list[ValidationIssue]:
    """
    @brief
    Flag comma-listed references that do not resolve to a target row.

    @details
    Valid targets are the text forms of `target_field` across target_rows.
    Each unresolved token yields one `invalid_reference` issue scoped to the
    source row and `source_field`. No-op when either side is empty.
    """
    if not source_rows or not target_rows:
        return []

    valid_targets = {to_text(row.get(target_field)).strip() for row in target_rows}
    issues: list[ValidationIssue] = []
    for row_index, row in enumerate(source_rows):
        for ref in split_list(row.get(source_field)):
            if ref in valid_targets:
                continue
            issues.append(
                ValidationIssue(
                    kind="invalid_reference",
                    message=f"Referenced {target_field} '{ref}' not found",
                    sheet_name=sheet_name,
                    row_index=row_index,
                    column_name=source_field,
                    severity=CRITICAL,
                    value=row.get(source_field),
                )
            )
    return issues


def validate_worker_overload(workers: Rows, sheet_name: str = "workers") -> list[ValidationIssue]:
    """
    @brief
    Compare each worker's MaxLoadPerPhase against its number of slots.

    @details
    AvailableSlots must parse as a JSON array (absent counts as empty);
    otherwise `invalid_slots_format` is reported without a fix. A worker
    whose load exceeds its slot count gets `worker_overload` with the slot
    count as the proposed MaxLoadPerPhase.
    """
    issues: list[ValidationIssue] = []
    for row_index, worker in enumerate(workers):
        raw_slots = worker.get("AvailableSlots")
        try:
            slots = [] if raw_slots is None else parse_json(raw_slots)
        except ValueError as e:
            issues.append(
                ValidationIssue(
                    kind="invalid_slots_format",
                    message=f"AvailableSlots must be valid JSON array: {e}",
                    sheet_name=sheet_name,
                    row_index=row_index,
                    column_name="AvailableSlots",
                    severity=CRITICAL,
                    value=raw_slots,
                )
            )
            continue

        if not isinstance(slots, list):
            issues.append(
                ValidationIssue(
                    kind="invalid_slots_format",
                    message="AvailableSlots must be an array",
                    sheet_name=sheet_name,
                    row_index=row_index,
                    column_name="AvailableSlots",
                    severity=CRITICAL,
                    value=raw_slots,
                )
            )
            continue

        raw_load = worker.get("MaxLoadPerPhase")
        max_load = 1.0 if raw_load is None else to_number(raw_load)
        # NaN compares false: unparsable loads are left to the type check
        if len(slots) < max_load:
            issues.append(
                ValidationIssue(
                    kind="worker_overload",
                    message=(
                        f"Worker only has {len(slots)} slots but max load is "
                        f"{tidy_number(max_load)}"
                    ),
                    sheet_name=sheet_name,
                    row_index=row_index,
                    column_name="MaxLoadPerPhase",
                    severity=CRITICAL,
                    value=raw_load,
                    suggested_fix=SuggestedFix(
                        value=tidy_number(min(max_load, float(len(slots)))),
                        explanation="Adjusted to available slots",
                    ),
                )
            )
    return issues


def validate_skill_coverage(
    tasks: Rows, workers: Rows, sheet_name: str = "tasks"
) -> list[ValidationIssue]:
    """
    @brief
    Ensure every required skill is offered by at least one worker.

    @details
    Worker skills are unioned across the whole workers sheet. One
    `missing_skill` issue is emitted per uncovered skill token per task.
    """
    if not tasks or not workers:
        return []

    all_skills: set[str] = set()
    for worker in workers:
        all_skills |= _skill_set(worker, "Skills")

    issues: list[ValidationIssue] = []
    for row_index, task in enumerate(tasks):
        for skill in split_list(task.get("RequiredSkills")):
            if skill in all_skills:
                continue
            issues.append(
                ValidationIssue(
                    kind="missing_skill",
                    message=f"No worker has required skill: {skill}",
                    sheet_name=sheet_name,
                    row_index=row_index,
                    column_name="RequiredSkills",
                    severity=CRITICAL,
                    value=task.get("RequiredSkills"),
                )
            )
    return issues


def validate_phase_windows(tasks: Rows, sheet_name: str = "tasks") -> list[ValidationIssue]:
    """
    @brief
    Require PreferredPhases, when present, to be a JSON array.

    @details
    Unset windows (absent, blank, false or 0) are valid. Range strings such
    as "2-4" are reported here too; the fix expands them into an explicit
    array.
    """
    issues: list[ValidationIssue] = []
    for row_index, task in enumerate(tasks):
        raw = task.get("PreferredPhases")
        if is_falsy(raw):
            continue
        try:
            phases = parse_json(raw)
        except ValueError as e:
            message = f"PreferredPhases must be valid JSON: {e}"
        else:
            if isinstance(phases, list):
                continue
            message = "PreferredPhases must be a JSON array"
        issues.append(
            ValidationIssue(
                kind="invalid_phase_format",
                message=message,
                sheet_name=sheet_name,
                row_index=row_index,
                column_name="PreferredPhases",
                severity=CRITICAL,
                value=raw,
                affects_multiple=True,
                suggested_fix=SuggestedFix(
                    value=format_phase_window(raw),
                    explanation="Rewrite PreferredPhases as an explicit JSON array",
                ),
            )
        )
    return issues


def validate_max_concurrency(
    tasks: Rows, workers: Rows, sheet_name: str = "tasks"
) -> list[ValidationIssue]:
    """
    @brief
    Compare each task's MaxConcurrent with the number of qualified workers.

    @details
    A worker qualifies when its Skills cover every RequiredSkills token.
    Absent MaxConcurrent counts as 1; unparsable values are left to the
    type check.
    """
    worker_skills = [_skill_set(worker, "Skills") for worker in workers]

    issues: list[ValidationIssue] = []
    for row_index, task in enumerate(tasks):
        required = _skill_set(task, "RequiredSkills")
        qualified = sum(1 for skills in worker_skills if required <= skills)

        raw_max = task.get("MaxConcurrent")
        max_concurrent = 1.0 if raw_max is None else to_number(raw_max)
        if math.isnan(max_concurrent) or qualified >= max_concurrent:
            continue

        issues.append(
            ValidationIssue(
                kind="insufficient_workers",
                message=(
                    f"Only {qualified} qualified workers for "
                    f"{tidy_number(max_concurrent)} concurrent tasks"
                ),
                sheet_name=sheet_name,
                row_index=row_index,
                column_name="MaxConcurrent",
                severity=CRITICAL,
                value=raw_max,
                suggested_fix=SuggestedFix(
                    value=tidy_number(min(max_concurrent, float(qualified))),
                    explanation="Adjusted to available workers",
                ),
            )
        )

    logger.debug("Concurrency check: %d task(s), %d worker(s)", len(tasks), len(workers))
    return issues


__all__ = [
    "validate_max_concurrency",
    "validate_phase_windows",
    "validate_skill_coverage",
    "validate_task_references",
    "validate_worker_overload",
]
