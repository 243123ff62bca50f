# tests/suggestions/test_synthesizer.py
from __future__ import annotations

import pytest

from sheetcheck.schemas.models import SuggestedFix, ValidationIssue
from sheetcheck.suggestions.synthesizer import (
    build_fix_suggestions,
    build_sheet_analyses,
    data_quality_score,
)


def mk_issue(
    kind: str = "invalid_format",
    row: int | None = 0,
    column: str | None = "PriorityLevel",
    value=None,
    fix=None,
    severity: str = "critical",
    multiple: bool = False,
    sheet: str = "clients",
) -> ValidationIssue:
    """
    @brief
    Factory for a ValidationIssue with an optional suggested fix value.
    """
    return ValidationIssue(
        kind=kind,
        message=f"{kind} at {row}",
        sheet_name=sheet,
        row_index=row,
        column_name=column,
        value=value,
        severity=severity,
        affects_multiple=multiple,
        suggested_fix=None if fix is None else SuggestedFix(value=fix, explanation="fix it"),
    )


# -----------------------------
# Affected rows
# -----------------------------
def test_bulk_fix_covers_rows_with_equal_raw_value() -> None:
    """
    @brief
    Rows holding the same offending value share one suggestion.

    @details
    The second issue for "7" is already covered by the first suggestion,
    so only one suggestion is produced for both rows.
    """
    # --- Arrange ---
    dataset = {
        "clients": [{"PriorityLevel": "7"}, {"PriorityLevel": 3}, {"PriorityLevel": "7"}]
    }
    issues = [
        mk_issue(row=0, value="7", fix=5, multiple=True),
        mk_issue(row=2, value="7", fix=5, multiple=True),
    ]

    # --- Act ---
    suggestions = build_fix_suggestions(issues, dataset)

    # --- Assert ---
    assert len(suggestions) == 1
    s = suggestions[0]
    assert s.affected_rows == [0, 2]
    assert s.changes == {"PriorityLevel": 5}
    assert s.applies_to_row == 0
    assert s.description.startswith("invalid_format: ")
    assert s.explanation == "fix it"


def test_bulk_matching_is_strict_about_types() -> None:
    dataset = {"clients": [{"PriorityLevel": "7"}, {"PriorityLevel": 7}]}
    issues = [mk_issue(row=0, value="7", fix=5, multiple=True)]
    assert build_fix_suggestions(issues, dataset)[0].affected_rows == [0]


def test_single_row_fix_and_issue_row_always_included() -> None:
    # --- Arrange ---
    dataset = {"workers": [{"MaxLoadPerPhase": 3}, {"MaxLoadPerPhase": 3}]}
    single = mk_issue(
        "worker_overload", row=1, column="MaxLoadPerPhase", value=3, fix=2, sheet="workers"
    )
    stale = mk_issue(row=1, column="Missing", value="x", fix="y", multiple=True, sheet="workers")

    # --- Act ---
    suggestions = build_fix_suggestions([single, stale], dataset)

    # --- Assert ---
    assert suggestions[0].affected_rows == [1]
    assert suggestions[1].affected_rows == [1]


def test_column_creation_applies_to_every_row() -> None:
    # --- Arrange ---
    issue = ValidationIssue(
        kind="missing_column",
        message="Required column 'ClientID' is missing",
        sheet_name="clients",
        suggested_fix=SuggestedFix(value="NEW_ClientID", action="add_column", column="ClientID"),
    )
    dataset = {"clients": [{"ClientName": "A"}, {"ClientName": "B"}, {"ClientName": "C"}]}

    # --- Act ---
    suggestions = build_fix_suggestions([issue], dataset)

    # --- Assert ---
    assert suggestions[0].affected_rows == [0, 1, 2]
    assert suggestions[0].changes == {"ClientID": "NEW_ClientID"}
    assert suggestions[0].applies_to_row is None


def test_issues_without_fix_or_rows_are_skipped() -> None:
    issues = [
        mk_issue("invalid_number", row=0, value="x"),
        ValidationIssue(
            kind="missing_column",
            message="m",
            sheet_name="empty",
            suggested_fix=SuggestedFix(value="", action="add_column", column="A"),
        ),
    ]
    assert build_fix_suggestions(issues, {"clients": [{}], "empty": []}) == []


# -----------------------------
# Ordering and truncation
# -----------------------------
def test_critical_first_then_input_order_and_truncation() -> None:
    """
    @brief
    Stable sort puts critical suggestions first and caps the list.
    """
    # --- Arrange ---
    dataset = {"clients": [{"PriorityLevel": n} for n in range(5)]}
    issues = [
        mk_issue("w1", row=0, value=0, fix=1, severity="warning"),
        mk_issue("c1", row=1, value=1, fix=1),
        mk_issue("w2", row=2, value=2, fix=1, severity="warning"),
        mk_issue("c2", row=3, value=3, fix=1),
    ]

    # --- Act ---
    full = build_fix_suggestions(issues, dataset)
    capped = build_fix_suggestions(issues, dataset, max_suggestions=3)

    # --- Assert ---
    assert [s.description.split(":")[0] for s in full] == ["c1", "c2", "w1", "w2"]
    assert [s.description.split(":")[0] for s in capped] == ["c1", "c2", "w1"]


# -----------------------------
# Score and analyses
# -----------------------------
@pytest.mark.parametrize("total, score", [(0, 100.0), (5, 90.0), (50, 0.0), (80, 0.0)])
def test_data_quality_score(total, score) -> None:
    assert data_quality_score(total) == score


def test_data_quality_score_custom_penalty() -> None:
    assert data_quality_score(4, penalty=5.0) == 80.0


def test_sheet_analyses_summarize_each_sheet() -> None:
    # --- Arrange ---
    errors = {
        "clients": [
            mk_issue("out_of_range", row=0, value="7", fix=5),
            mk_issue("invalid_format", row=0, value="7", fix=5),
            mk_issue("out_of_range", row=1, value="9", fix=5, severity="warning"),
            mk_issue("invalid_json", row=2, column="AttributesJSON", value="{", fix="{}"),
        ],
        "tasks": [],
    }

    # --- Act ---
    analyses = build_sheet_analyses(errors)

    # --- Assert ---
    clients, tasks = analyses
    assert clients.error_count == 4
    assert clients.critical_count == 3
    assert clients.error_types == ["out_of_range", "invalid_format", "invalid_json"]
    assert len(clients.sample_issues) == 3
    assert clients.sample_issues[0] == {
        "location": "clients[0].PriorityLevel",
        "error": "out_of_range at 0",
        "current_value": "7",
        "suggested_value": 5,
    }
    assert tasks.error_count == 0 and tasks.sample_issues == []
