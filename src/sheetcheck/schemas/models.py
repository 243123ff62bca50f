# src/sheetcheck/schemas/models.py
"""
@brief
Pydantic data models for the sheetcheck validation engine.

@details
Defines the canonical shapes exchanged across the engine boundary:
    - ValidationIssue: one typed finding (sheet / row / column scoped)
    - SuggestedFix: replacement value attached to a fixable issue
    - FixSuggestion: synthesized, bulk-applicable fix for presentation
    - RowFix: one row-level change set accepted by the fix applier
    - SheetAnalysis / ValidationReport: aggregated pass output
    - Config: runtime configuration (from config.yaml)

All models are constructed fresh on each validation pass; the engine keeps
no state between calls.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

Severity = Literal["critical", "warning"]

CRITICAL: Severity = "critical"
WARNING: Severity = "warning"


class _StrictBaseModel(BaseModel):
    """
    @brief
    Base model enforcing strict defaults for configuration and data contracts.

    @details
    Forbids unknown fields and preserves exact naming rules.
    """

    model_config = {
        "extra": "forbid",  # Reject unknown fields
        "populate_by_name": True,  # Allow population by field name
        "use_enum_values": True,  # Export raw enum values if enums appear later
    }


class SuggestedFix(_StrictBaseModel):
    """
    @brief
    Concrete replacement proposed for a fixable issue.

    @details
    `value` is always a concrete cell value, never an instruction.
    Column-creation fixes (sheet-scoped `missing_column` issues) use
    action="add_column" and name the new column in `column`, because the
    issue itself carries no column coordinate.
    """

    value: Any = None
    explanation: str = ""
    confidence: float | None = Field(None, ge=0.0, le=1.0)
    action: Literal["replace", "add_column"] = "replace"
    column: str | None = None


class ValidationIssue(_StrictBaseModel):
    """
    @brief
    One validation finding.

    @details
    Sheet-level issues (e.g. missing_column) carry neither row_index nor
    column_name. Column-level issues are always row-scoped: a column_name
    without a row_index is rejected at construction time.

    @params
        kind : str
            Error taxonomy key (missing_column, invalid_format, ...).
        message : str
            Human-readable description.
        sheet_name : str
            Sheet the issue belongs to.
        row_index : int | None
            0-based row position within the validated snapshot.
        column_name : str | None
            Offending column.
        severity : Severity
            "critical" or "warning".
        value : Any
            Raw offending cell value, used to group identical-value fixes.
        affects_multiple : bool
            True when the fix depends only on the cell value and can be
            applied to every row sharing it.
        suggested_fix : SuggestedFix | None
            Proposed replacement, if one can be derived.
    """

    kind: str = Field(..., description="Error taxonomy key")
    message: str = Field(..., description="Human-readable description")
    sheet_name: str = Field(..., description="Sheet the issue belongs to")
    row_index: int | None = Field(None, ge=0, description="0-based row position")
    column_name: str | None = Field(None, description="Offending column")
    severity: Severity = Field(CRITICAL, description="critical | warning")
    value: Any = Field(None, description="Raw offending cell value")
    affects_multiple: bool = Field(False, description="Fix applies to equal-valued rows")
    suggested_fix: SuggestedFix | None = None

    @model_validator(mode="after")
    def _column_requires_row(self) -> ValidationIssue:
        if self.column_name is not None and self.row_index is None:
            raise ValueError("column-scoped issues must also carry row_index")
        return self

    @property
    def location(self) -> str:
        """Compact "sheet[row].column" label for logs and summaries."""
        label = self.sheet_name
        if self.row_index is not None:
            label += f"[{self.row_index}]"
        if self.column_name is not None:
            label += f".{self.column_name}"
        return label


class FixSuggestion(_StrictBaseModel):
    """
    @brief
    Presentation-ready fix derived from a ValidationIssue.

    @details
    `affected_rows` is never empty. For value-driven fixes it lists every
    row of the sheet holding the same raw offending value; for column
    creation it lists every row of the sheet.
    """

    description: str
    changes: dict[str, Any]
    sheet_name: str
    column_name: str | None = None
    applies_to_row: int | None = None
    affected_rows: list[int] = Field(..., min_length=1)
    confidence: float | None = Field(None, ge=0.0, le=1.0)
    explanation: str = ""
    severity: Severity = CRITICAL


class RowFix(_StrictBaseModel):
    """One change set for one row; sheet_name may be omitted for single-sheet use."""

    sheet_name: str | None = None
    row_index: int
    changes: dict[str, Any] = Field(default_factory=dict)


class SheetAnalysis(_StrictBaseModel):
    """
    @brief
    Per-sheet summary of a validation pass.
    """

    sheet_name: str
    error_count: int = 0
    critical_count: int = 0
    error_types: list[str] = Field(default_factory=list)
    sample_issues: list[dict[str, Any]] = Field(default_factory=list)


class ValidationReport(_StrictBaseModel):
    """
    @brief
    Complete output of one validation pass.

    @details
    `errors` preserves sheet order of the input dataset and, within a sheet,
    the orchestrator's check order followed by row order.
    """

    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(timespec="seconds")
    )
    valid: bool = True
    total_errors: int = 0
    errors: dict[str, list[ValidationIssue]] = Field(default_factory=dict)
    suggested_fixes: list[FixSuggestion] = Field(default_factory=list)
    data_quality_score: float = 100.0
    sheet_analyses: list[SheetAnalysis] = Field(default_factory=list)

    def all_issues(self) -> list[ValidationIssue]:
        """Flatten per-sheet issues in canonical order."""
        return [issue for issues in self.errors.values() for issue in issues]

    def count(self, kind: str) -> int:
        return sum(1 for issue in self.all_issues() if issue.kind == kind)


# ------------------------------------------------------------
# Runtime configuration
# ------------------------------------------------------------
class ReportConfig(BaseModel):
    """
    @brief
    Controls which artifacts the command-line runner writes.
    """

    write_report: bool = Field(True, description="Write validation_report.json")
    write_issues_csv: bool = Field(True, description="Write issues.csv (one row per issue)")


class Config(_StrictBaseModel):
    """
    @brief
    Represents the full runtime configuration loaded from config.yaml.

    @details
    Every field has a default, so an empty mapping yields a usable
    configuration. Unknown keys are rejected.
    """

    max_suggestions: int = Field(10, ge=1, description="Upper bound of presented fix suggestions")
    score_penalty_per_error: float = Field(
        2.0, ge=0.0, description="Quality score points deducted per issue"
    )
    include_suggestions: bool = Field(True, description="Synthesize fix suggestions")
    sheet_aliases: dict[str, str] = Field(
        default_factory=dict, description="Sheet name -> entity type (clients|workers|tasks)"
    )
    extra_required_columns: dict[str, list[str]] = Field(
        default_factory=dict, description="Required columns for unrecognized sheets"
    )
    severity_overrides: dict[str, Severity] = Field(
        default_factory=dict, description="Issue kind -> severity"
    )
    output_dir: str | None = "data/output"
    report: ReportConfig = Field(default_factory=ReportConfig.model_construct)


__all__ = [
    "CRITICAL",
    "WARNING",
    "Config",
    "FixSuggestion",
    "ReportConfig",
    "RowFix",
    "SheetAnalysis",
    "Severity",
    "SuggestedFix",
    "ValidationIssue",
    "ValidationReport",
]
