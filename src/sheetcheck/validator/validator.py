# src/sheetcheck/validator/validator.py
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any

from sheetcheck.dataloader.dataset import coerce_dataset
from sheetcheck.export.report_export import write_report_json
from sheetcheck.schemas.models import (
    CRITICAL,
    Config,
    FixSuggestion,
    ValidationIssue,
    ValidationReport,
)
from sheetcheck.schemas.registry import (
    CLIENTS,
    TASKS,
    WORKERS,
    get_entity_definition,
    resolve_entity_type,
)
from sheetcheck.suggestions.synthesizer import (
    build_fix_suggestions,
    build_sheet_analyses,
    data_quality_score,
)
from sheetcheck.validator.cross_sheet import (
    validate_max_concurrency,
    validate_phase_windows,
    validate_skill_coverage,
    validate_task_references,
    validate_worker_overload,
)
from sheetcheck.validator.field_checks import (
    validate_entity_structure,
    validate_field_types,
    validate_json_field,
    validate_number_range,
    validate_required_columns,
)
from sheetcheck.validator.identity import check_duplicate_ids

logger = logging.getLogger(__name__)

Rows = list[dict[str, Any]]
Enricher = Callable[[list[ValidationIssue], Mapping[str, Rows]], Iterable[FixSuggestion]]


# ---------------------------
# VALIDATOR CLASS (instance core)
# ----------------------------
class Validator:
    """
    @brief
    Rule orchestrator for one validation pass over a dataset snapshot.

    @details
    Resolves each sheet to an entity type, runs that type's checks in a
    fixed order and keeps the issues grouped per sheet:
        (1) structure  (2) field types  (3) duplicate identifiers
        (4) range / JSON / single-sheet capacity checks
        (5) cross-sheet checks, only when the complementary sheet exists
    Unrecognized sheets are only checked for the required columns
    configured in `Config.extra_required_columns`.

    Malformed cells never raise; they become issues. Only a dataset that
    does not have the sheet -> rows -> mapping shape raises DataError.
    """

    # ---------- Constructor ----------
    def __init__(
        self,
        dataset: Mapping[str, Any],
        cfg: Config | None = None,
        enrichers: Sequence[Enricher] = (),
    ) -> None:
        """
        @brief
        Initialize validation context.

        @details
        Copies the dataset into plain row dictionaries so the caller's
        snapshot is never touched, and resolves sheet names to entity
        types once.

        @params
            dataset : Mapping[str, Any]
                Sheet name -> rows (sequence of mappings or DataFrame).
            cfg : Config | None
                Runtime configuration; defaults apply when omitted.
            enrichers : Sequence[Enricher]
                Optional stages that append extra fix suggestions.
        """
        self.dataset: dict[str, Rows] = coerce_dataset(dataset)
        self.cfg = cfg or Config()
        self.enrichers = tuple(enrichers)

        # (1) Resolve sheet -> entity type lookup
        self.entity_types: dict[str, str | None] = {
            name: resolve_entity_type(name, self.cfg.sheet_aliases) for name in self.dataset
        }

        # (2) Initialize per-sheet accumulator
        self.errors: dict[str, list[ValidationIssue]] = {}

    # ---------- Public lifecycle API ----------
    def run_all_checks(self) -> None:
        """
        @brief
        Execute the full validation sequence for every sheet.

        @details
        Sheets are processed in dataset order; each sheet always receives
        an entry, possibly empty. Severity overrides from the configuration
        are applied last.
        """
        self.errors = {}
        for sheet_name, rows in self.dataset.items():
            issues = [self._with_severity(i) for i in self._check_sheet(sheet_name, rows)]
            self.errors[sheet_name] = issues
            logger.debug(
                "Sheet %r (%s): %d row(s), %d issue(s)",
                sheet_name,
                self.entity_types[sheet_name] or "unrecognized",
                len(rows),
                len(issues),
            )

        logger.info(
            "Validation pass: %d sheet(s), %d issue(s)",
            len(self.errors),
            sum(len(v) for v in self.errors.values()),
        )

    def build_report(self, with_suggestions: bool | None = None) -> ValidationReport:
        """
        @brief
        Assemble validation results into a ValidationReport.

        @details
        Synthesizes fix suggestions (unless disabled), appends suggestions
        from enrichers after the deterministic ones, and computes the data
        quality score and per-sheet analyses. The report is valid when no
        critical issue was found.

        @params
            with_suggestions : bool | None
                Overrides `Config.include_suggestions` when given.
        """
        issues = [issue for sheet_issues in self.errors.values() for issue in sheet_issues]
        include = self.cfg.include_suggestions if with_suggestions is None else with_suggestions

        suggestions: list[FixSuggestion] = []
        if include:
            suggestions = build_fix_suggestions(issues, self.dataset, self.cfg.max_suggestions)
            suggestions.extend(self._run_enrichers(issues))

        return ValidationReport(
            valid=not any(issue.severity == CRITICAL for issue in issues),
            total_errors=len(issues),
            errors={name: list(sheet_issues) for name, sheet_issues in self.errors.items()},
            suggested_fixes=suggestions,
            data_quality_score=data_quality_score(len(issues), self.cfg.score_penalty_per_error),
            sheet_analyses=build_sheet_analyses(self.errors),
        )

    def save_report(
        self,
        report: ValidationReport,
        out_dir: Path | None = None,
        filename: str = "validation_report.json",
    ) -> Path:
        """Write the report atomically (defaults to Config.output_dir)."""
        target_dir = out_dir or Path(self.cfg.output_dir or "data/output")
        return write_report_json(report, target_dir, filename=filename)

    # ---------- Per-sheet pipeline ----------
    def _check_sheet(self, sheet_name: str, rows: Rows) -> list[ValidationIssue]:
        entity_type = self.entity_types[sheet_name]
        definition = get_entity_definition(entity_type)
        if entity_type is None or definition is None:
            required = self.cfg.extra_required_columns.get(sheet_name)
            if not required:
                return []
            return validate_required_columns(rows, required, sheet_name)

        issues: list[ValidationIssue] = []
        # (1) Structural checks always run first
        issues += validate_entity_structure(rows, entity_type, sheet_name)
        # (2) Field type predicates
        issues += validate_field_types(rows, entity_type, sheet_name)
        # (3) Identity
        issues += check_duplicate_ids(rows, definition.id_field, sheet_name)
        # (4)-(5) Entity-specific range/JSON and cross-sheet checks
        if entity_type == CLIENTS:
            issues += self._check_clients(sheet_name, rows)
        elif entity_type == WORKERS:
            issues += validate_worker_overload(rows, sheet_name)
        elif entity_type == TASKS:
            issues += self._check_tasks(sheet_name, rows)
        return issues

    def _check_clients(self, sheet_name: str, rows: Rows) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        if rows and "PriorityLevel" in rows[0]:
            issues += validate_number_range(rows, "PriorityLevel", 1, 5, sheet_name)
        issues += validate_json_field(rows, "AttributesJSON", sheet_name)

        tasks_sheet = self._sheet_for(TASKS)
        if tasks_sheet is not None:
            issues += validate_task_references(
                rows, self.dataset[tasks_sheet], "RequestedTaskIDs", "TaskID", sheet_name
            )
        return issues

    def _check_tasks(self, sheet_name: str, rows: Rows) -> list[ValidationIssue]:
        issues = validate_phase_windows(rows, sheet_name)

        workers_sheet = self._sheet_for(WORKERS)
        if workers_sheet is not None:
            workers = self.dataset[workers_sheet]
            issues += validate_skill_coverage(rows, workers, sheet_name)
            issues += validate_max_concurrency(rows, workers, sheet_name)
        return issues

    # ---------- Utilities ----------
    def _sheet_for(self, entity_type: str) -> str | None:
        """First sheet (in dataset order) resolved to `entity_type`."""
        for name, resolved in self.entity_types.items():
            if resolved == entity_type:
                return name
        return None

    def _with_severity(self, issue: ValidationIssue) -> ValidationIssue:
        override = self.cfg.severity_overrides.get(issue.kind)
        if override is None or override == issue.severity:
            return issue
        return issue.model_copy(update={"severity": override})

    def _run_enrichers(self, issues: list[ValidationIssue]) -> list[FixSuggestion]:
        extra: list[FixSuggestion] = []
        for enricher in self.enrichers:
            try:
                produced = list(enricher(list(issues), self.dataset))
            except Exception as e:
                # A failing enricher contributes nothing; the pass still completes
                logger.warning("Enricher %r failed: %s", enricher, e, exc_info=True)
                continue
            extra.extend(produced)
        return extra


# ----------------------------
# THIN FACADE (static call)
# ----------------------------
def validate_dataset(
    dataset: Mapping[str, Any],
    cfg: Config | None = None,
    *,
    with_suggestions: bool | None = None,
    enrichers: Sequence[Enricher] = (),
) -> ValidationReport:
    """
    @brief
    High-level convenience wrapper for one validation pass.

    @details
    Creates a Validator, runs all checks and returns the report. Pure:
    identical input always yields an identical report (apart from its
    timestamp), and the input dataset is not modified.

    @params
        dataset : Mapping[str, Any]
            Sheet name -> rows.
        cfg : Config | None
            Runtime configuration.
        with_suggestions : bool | None
            Force fix suggestion synthesis on/off.
        enrichers : Sequence[Enricher]
            Optional suggestion enrichers (append-only).

    @returns
        ValidationReport with per-sheet issues, suggestions and score.
    """
    validator = Validator(dataset, cfg, enrichers=enrichers)
    validator.run_all_checks()
    return validator.build_report(with_suggestions=with_suggestions)


__all__ = ["Enricher", "Validator", "validate_dataset"]
