"""Deterministic validation engine for clients / workers / tasks datasets."""

from sheetcheck.fixes.apply import apply_fixes, apply_fixes_to_rows, fixes_from_suggestions
from sheetcheck.schemas.models import (
    Config,
    FixSuggestion,
    RowFix,
    ValidationIssue,
    ValidationReport,
)
from sheetcheck.validator import Validator, validate_dataset

__version__ = "0.1.0"

__all__ = [
    "Config",
    "FixSuggestion",
    "RowFix",
    "ValidationIssue",
    "ValidationReport",
    "Validator",
    "apply_fixes",
    "apply_fixes_to_rows",
    "fixes_from_suggestions",
    "validate_dataset",
]
