# src/sheetcheck/schemas/registry.py
"""
@brief
Static schema registry for the three recognized entity types.

@details
Each entity type (clients, workers, tasks) maps to an EntityDefinition with
its required columns, per-field type predicates and per-field formatters.
Predicates answer "is this raw cell acceptable?"; formatters return the
normalized replacement value offered as a fix. Every formatter output for a
field with a predicate satisfies that predicate whenever a valid value can
be derived at all, so applying fixes converges.

The entity set is closed, so the table below is fixed at import time.
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from sheetcheck.schemas.values import (
    clamp,
    is_blank,
    is_falsy,
    is_integer_value,
    parse_json,
    raw_tokens,
    round_half_up,
    split_list,
    tidy_number,
    to_number,
    to_text,
)

Predicate = Callable[[Any], bool]
Formatter = Callable[[Any], Any]

CLIENTS = "clients"
WORKERS = "workers"
TASKS = "tasks"

_PHASE_RANGE = re.compile(r"^\s*(\d+)\s*-\s*(\d+)\s*$")


@dataclass(frozen=True)
class EntityDefinition:
    """
    @brief
    Schema of one entity type.

    @params
        entity_type : str
            Registry key ("clients", "workers" or "tasks").
        id_field : str
            Column holding the entity identifier.
        required_fields : tuple[str, ...]
            Columns every sheet of this type must carry, in reporting order.
        field_types : Mapping[str, Predicate]
            Type predicates keyed by column.
        field_formats : Mapping[str, Formatter]
            Normalizers keyed by column, used to compute suggested fixes.
    """

    entity_type: str
    id_field: str
    required_fields: tuple[str, ...]
    field_types: Mapping[str, Predicate]
    field_formats: Mapping[str, Formatter]


# ----------------------------
# PREDICATES
# ----------------------------
def is_identifier(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def is_priority_level(value: Any) -> bool:
    num = to_number(value)
    return is_integer_value(num) and 1 <= num <= 5


def is_positive_integer(value: Any) -> bool:
    num = to_number(value)
    return is_integer_value(num) and num > 0


def is_duration(value: Any) -> bool:
    return to_number(value) >= 1


def is_json(value: Any) -> bool:
    try:
        parse_json(value)
    except ValueError:
        return False
    return True


def is_integer_array(value: Any) -> bool:
    try:
        parsed = parse_json(value)
    except ValueError:
        return False
    return isinstance(parsed, list) and all(is_integer_value(n) for n in parsed)


def is_optional_token_list(value: Any) -> bool:
    """Blank is allowed; otherwise no comma-separated token may be empty."""
    if is_blank(value):
        return True
    return all(raw_tokens(value))


def is_token_list(value: Any) -> bool:
    """Like is_optional_token_list, but blank is invalid."""
    if is_blank(value):
        return False
    return all(raw_tokens(value))


def is_phase_window(value: Any) -> bool:
    """Unset (blank, false, 0), a JSON integer array, or a "start-end" range."""
    if is_falsy(value):
        return True
    try:
        parsed = parse_json(value)
    except ValueError:
        match = _PHASE_RANGE.match(to_text(value))
        return bool(match) and int(match.group(1)) <= int(match.group(2))
    return isinstance(parsed, list) and all(is_integer_value(n) for n in parsed)


# ----------------------------
# FORMATTERS
# ----------------------------
def _identifier_formatter(field: str) -> Formatter:
    def format_identifier(value: Any) -> str:
        text = to_text(value).strip()
        return text or placeholder_id(field)

    return format_identifier


def placeholder_id(field: str) -> str:
    return f"NEW_{field}"


def row_placeholder_id(field: str, row_index: int, taken: set[str]) -> str:
    """
    Placeholder identifier unique within a sheet: NEW_<field>_<row number>.

    A numeric suffix is appended while the candidate collides with `taken`;
    the chosen value is added to `taken`.
    """
    base = f"{placeholder_id(field)}_{row_index + 1}"
    candidate, n = base, 1
    while candidate in taken:
        n += 1
        candidate = f"{base}_{n}"
    taken.add(candidate)
    return candidate


def _bounded_integer(value: Any, default: int, low: float, high: float = math.inf) -> int | float:
    num = to_number(value)
    if not math.isfinite(num):
        return default
    return clamp(round_half_up(num), low, high)


def format_priority_level(value: Any) -> int | float:
    return _bounded_integer(value, default=3, low=1, high=5)


def format_positive_integer(value: Any) -> int | float:
    return _bounded_integer(value, default=1, low=1)


def format_duration(value: Any) -> int | float:
    num = to_number(value)
    if not math.isfinite(num):
        return 1
    return tidy_number(max(1.0, num))


def format_token_list(value: Any) -> str:
    return ", ".join(split_list(value))


def format_json(value: Any) -> str:
    try:
        return json.dumps(parse_json(value), indent=2, ensure_ascii=False)
    except ValueError:
        return "{}"


def _compact(items: list[int]) -> str:
    return json.dumps(items, separators=(",", ":"))


def format_integer_array(value: Any) -> str:
    try:
        parsed = parse_json(value)
    except ValueError:
        return _compact([1])
    if not isinstance(parsed, list):
        return _compact([1])
    return _compact([int(n) for n in parsed if is_integer_value(n)])


def format_phase_window(value: Any) -> str:
    try:
        parsed = parse_json(value)
    except ValueError:
        match = _PHASE_RANGE.match(to_text(value))
        if match:
            start, end = int(match.group(1)), int(match.group(2))
            if start <= end:
                return _compact(list(range(start, end + 1)))
        return _compact([1])
    if isinstance(parsed, list):
        return _compact([int(n) for n in parsed if is_integer_value(n)])
    return _compact([1])


# ----------------------------
# REGISTRY TABLE
# ----------------------------
ENTITY_DEFINITIONS: Mapping[str, EntityDefinition] = MappingProxyType(
    {
        CLIENTS: EntityDefinition(
            entity_type=CLIENTS,
            id_field="ClientID",
            required_fields=("ClientID", "ClientName", "PriorityLevel"),
            field_types=MappingProxyType(
                {
                    "ClientID": is_identifier,
                    "PriorityLevel": is_priority_level,
                    "RequestedTaskIDs": is_optional_token_list,
                    "AttributesJSON": is_json,
                }
            ),
            field_formats=MappingProxyType(
                {
                    "ClientID": _identifier_formatter("ClientID"),
                    "PriorityLevel": format_priority_level,
                    "RequestedTaskIDs": format_token_list,
                    "AttributesJSON": format_json,
                }
            ),
        ),
        WORKERS: EntityDefinition(
            entity_type=WORKERS,
            id_field="WorkerID",
            required_fields=("WorkerID", "WorkerName", "AvailableSlots", "MaxLoadPerPhase"),
            field_types=MappingProxyType(
                {
                    "WorkerID": is_identifier,
                    "AvailableSlots": is_integer_array,
                    "MaxLoadPerPhase": is_positive_integer,
                    "Skills": is_optional_token_list,
                }
            ),
            field_formats=MappingProxyType(
                {
                    "WorkerID": _identifier_formatter("WorkerID"),
                    "AvailableSlots": format_integer_array,
                    "MaxLoadPerPhase": format_positive_integer,
                    "Skills": format_token_list,
                }
            ),
        ),
        TASKS: EntityDefinition(
            entity_type=TASKS,
            id_field="TaskID",
            required_fields=("TaskID", "TaskName", "Duration", "RequiredSkills"),
            field_types=MappingProxyType(
                {
                    "TaskID": is_identifier,
                    "Duration": is_duration,
                    "RequiredSkills": is_token_list,
                    "PreferredPhases": is_phase_window,
                    "MaxConcurrent": is_positive_integer,
                }
            ),
            field_formats=MappingProxyType(
                {
                    "TaskID": _identifier_formatter("TaskID"),
                    "Duration": format_duration,
                    "RequiredSkills": format_token_list,
                    "PreferredPhases": format_phase_window,
                    "MaxConcurrent": format_positive_integer,
                }
            ),
        ),
    }
)


def get_entity_definition(entity_type: str | None) -> EntityDefinition | None:
    """Return the definition for an entity key, or None for unknown types."""
    if not entity_type:
        return None
    return ENTITY_DEFINITIONS.get(entity_type.strip().lower())


def resolve_entity_type(
    sheet_name: str, aliases: Mapping[str, str] | None = None
) -> str | None:
    """
    @brief
    Map a sheet name onto an entity type key.

    @details
    Matching is case-insensitive. A configured alias ("Staff" -> "workers")
    takes precedence over the literal sheet name. Unrecognized sheets
    resolve to None and are skipped by entity-specific checks.
    """
    key = sheet_name.strip().lower()
    if aliases:
        lowered = {name.strip().lower(): target for name, target in aliases.items()}
        if key in lowered:
            key = lowered[key].strip().lower()
    return key if key in ENTITY_DEFINITIONS else None


def default_column_value(field: str) -> Any:
    """Value proposed for a newly created required column."""
    if field == "PriorityLevel":
        return 3
    if "ID" in field:
        return placeholder_id(field)
    return ""


__all__ = [
    "CLIENTS",
    "WORKERS",
    "TASKS",
    "ENTITY_DEFINITIONS",
    "EntityDefinition",
    "default_column_value",
    "get_entity_definition",
    "placeholder_id",
    "resolve_entity_type",
    "row_placeholder_id",
]
