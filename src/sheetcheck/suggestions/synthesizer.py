# src/sheetcheck/suggestions/synthesizer.py
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from sheetcheck.schemas.models import CRITICAL, FixSuggestion, SheetAnalysis, ValidationIssue
from sheetcheck.schemas.values import same_raw_value

logger = logging.getLogger(__name__)

DEFAULT_MAX_SUGGESTIONS = 10
DEFAULT_SCORE_PENALTY = 2.0


def _affected_rows(
    issue: ValidationIssue, column: str, rows: Sequence[Mapping[str, Any]]
) -> list[int]:
    """
    @brief
    Resolve the rows a fix should be applied to.

    @details
    Sheet-scoped fixes (column creation) apply to every row. Value-driven
    fixes apply to every row holding exactly the same raw value in
    `column`. Anything else applies to the issue's own row only.
    """
    if issue.row_index is None:
        return list(range(len(rows)))
    if not issue.affects_multiple:
        return [issue.row_index]

    matches = [
        idx
        for idx, row in enumerate(rows)
        if column in row and same_raw_value(row[column], issue.value)
    ]
    if issue.row_index not in matches:
        matches.append(issue.row_index)
        matches.sort()
    return matches


def build_fix_suggestions(
    issues: Iterable[ValidationIssue],
    dataset: Mapping[str, Sequence[Mapping[str, Any]]],
    max_suggestions: int = DEFAULT_MAX_SUGGESTIONS,
) -> list[FixSuggestion]:
    """
    @brief
    Turn fixable issues into presentation-ready suggestions.

    @details
    Every issue carrying a suggested fix yields one FixSuggestion, except
    value-driven issues whose row is already covered by an earlier bulk
    suggestion for the same sheet, column and kind. The result is stably
    sorted with critical suggestions first and truncated to
    `max_suggestions`.

    @params
        issues : Iterable[ValidationIssue]
            Issues in canonical order.
        dataset : Mapping[str, Sequence[Mapping[str, Any]]]
            Snapshot the issues were computed from.
        max_suggestions : int
            Upper bound of returned suggestions.

    @returns
        Ordered, truncated list of FixSuggestion.
    """
    suggestions: list[FixSuggestion] = []
    covered: dict[tuple[str, str, str], set[int]] = {}

    for issue in issues:
        fix = issue.suggested_fix
        if fix is None:
            continue
        column = issue.column_name or fix.column
        if column is None:
            logger.debug("Skipping fix without target column: %s", issue.location)
            continue

        # (1) Skip rows already handled by a bulk suggestion
        key = (issue.sheet_name, column, issue.kind)
        if issue.row_index is not None and issue.row_index in covered.get(key, set()):
            continue

        # (2) Resolve affected rows against the snapshot
        rows = dataset.get(issue.sheet_name, [])
        affected = _affected_rows(issue, column, rows)
        if not affected:
            continue
        if issue.affects_multiple:
            covered.setdefault(key, set()).update(affected)

        suggestions.append(
            FixSuggestion(
                description=f"{issue.kind}: {issue.message}",
                changes={column: fix.value},
                sheet_name=issue.sheet_name,
                column_name=column,
                applies_to_row=issue.row_index,
                affected_rows=affected,
                confidence=fix.confidence,
                explanation=fix.explanation or issue.message,
                severity=issue.severity,
            )
        )

    # (3) Critical first; sorted() is stable so same-severity order is kept
    ordered = sorted(suggestions, key=lambda s: s.severity != CRITICAL)
    return ordered[:max_suggestions]


def data_quality_score(total_errors: int, penalty: float = DEFAULT_SCORE_PENALTY) -> float:
    """Score in [0, 100]: 100 minus `penalty` points per issue."""
    return max(0.0, 100.0 - penalty * total_errors)


def build_sheet_analyses(
    errors: Mapping[str, Sequence[ValidationIssue]], sample_size: int = 3
) -> list[SheetAnalysis]:
    """Summarize issue counts, kinds and a few samples per sheet."""
    analyses: list[SheetAnalysis] = []
    for sheet_name, issues in errors.items():
        kinds: list[str] = []
        for issue in issues:
            if issue.kind not in kinds:
                kinds.append(issue.kind)
        samples = [
            {
                "location": issue.location,
                "error": issue.message,
                "current_value": issue.value,
                "suggested_value": issue.suggested_fix.value if issue.suggested_fix else None,
            }
            for issue in issues[:sample_size]
        ]
        analyses.append(
            SheetAnalysis(
                sheet_name=sheet_name,
                error_count=len(issues),
                critical_count=sum(1 for issue in issues if issue.severity == CRITICAL),
                error_types=kinds,
                sample_issues=samples,
            )
        )
    return analyses


__all__ = ["build_fix_suggestions", "build_sheet_analyses", "data_quality_score"]
