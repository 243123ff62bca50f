# src/sheetcheck/validator/identity.py
from __future__ import annotations

from collections import defaultdict
from collections.abc import Mapping, Sequence
from typing import Any

from sheetcheck.schemas.models import CRITICAL, ValidationIssue
from sheetcheck.schemas.values import to_text


def check_duplicate_ids(
    rows: Sequence[Mapping[str, Any]], id_field: str, sheet_name: str
) -> list[ValidationIssue]:
    """
    @brief
    Detect identifiers shared by two or more rows.

    @details
    Rows are grouped by the text form of `id_field`; blank identifiers are
    not considered duplicates of each other. Every member of a duplicate
    group gets its own `duplicate_id` issue, so each offending row can be
    highlighted individually. Groups are reported in order of first
    appearance, members in row order.

    @params
        rows : Sequence[Mapping[str, Any]]
            Sheet rows.
        id_field : str
            Identifier column (ClientID, WorkerID, TaskID).
        sheet_name : str
            Sheet name attached to each issue.

    @returns
        One issue per row whose identifier is not unique.
    """
    # (1) Group row positions by identifier text
    groups: dict[str, list[int]] = defaultdict(list)
    for row_index, row in enumerate(rows):
        groups[to_text(row.get(id_field)).strip()].append(row_index)

    # (2) Fan out one issue per member of every non-trivial group
    issues: list[ValidationIssue] = []
    for identifier, members in groups.items():
        if not identifier or len(members) < 2:
            continue
        for row_index in members:
            issues.append(
                ValidationIssue(
                    kind="duplicate_id",
                    message=f"Duplicate {id_field} found: {identifier}",
                    sheet_name=sheet_name,
                    row_index=row_index,
                    column_name=id_field,
                    severity=CRITICAL,
                    value=rows[row_index].get(id_field),
                )
            )
    return issues


__all__ = ["check_duplicate_ids"]
