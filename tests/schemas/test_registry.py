# tests/schemas/test_registry.py
from __future__ import annotations

import json

import pytest

from sheetcheck.schemas.registry import (
    ENTITY_DEFINITIONS,
    default_column_value,
    get_entity_definition,
    resolve_entity_type,
    row_placeholder_id,
)


def _types(entity: str):
    return ENTITY_DEFINITIONS[entity].field_types


def _formats(entity: str):
    return ENTITY_DEFINITIONS[entity].field_formats


def test_required_fields_match_entity_contracts() -> None:
    """
    @brief
    Required columns per entity type are fixed.
    """
    assert ENTITY_DEFINITIONS["clients"].required_fields == (
        "ClientID",
        "ClientName",
        "PriorityLevel",
    )
    assert ENTITY_DEFINITIONS["workers"].required_fields == (
        "WorkerID",
        "WorkerName",
        "AvailableSlots",
        "MaxLoadPerPhase",
    )
    assert ENTITY_DEFINITIONS["tasks"].required_fields == (
        "TaskID",
        "TaskName",
        "Duration",
        "RequiredSkills",
    )


def test_central_fields_have_predicate_and_formatter() -> None:
    """
    @brief
    Identifiers, priority, duration, load, slots and skills carry both
    a type predicate and a formatter.
    """
    central = {
        "clients": ["ClientID", "PriorityLevel"],
        "workers": ["WorkerID", "AvailableSlots", "MaxLoadPerPhase", "Skills"],
        "tasks": ["TaskID", "Duration", "RequiredSkills", "MaxConcurrent"],
    }
    for entity, fields in central.items():
        for field in fields:
            assert field in _types(entity), (entity, field)
            assert field in _formats(entity), (entity, field)


@pytest.mark.parametrize(
    "value, expected",
    [(1, True), ("5", True), (3.0, True), ("0", False), ("7", False), (2.5, False), (None, False)],
)
def test_priority_level_predicate(value, expected) -> None:
    assert _types("clients")["PriorityLevel"](value) is expected


@pytest.mark.parametrize(
    "value, expected",
    [("7", 5), ("0", 1), ("abc", 3), (None, 3), (2.4, 2), ("-3", 1)],
)
def test_priority_level_formatter_clamps_or_defaults(value, expected) -> None:
    """
    @brief
    PriorityLevel formatter clamps to [1, 5] and defaults to 3.
    """
    result = _formats("clients")["PriorityLevel"](value)
    assert result == expected
    assert _types("clients")["PriorityLevel"](result)


def test_identifier_predicate_and_formatter() -> None:
    is_id = _types("clients")["ClientID"]
    fmt = _formats("clients")["ClientID"]

    assert is_id("C1")
    assert not is_id("")
    assert not is_id("   ")
    assert not is_id(101)

    assert fmt(101) == "101"
    assert fmt("  C9 ") == "C9"
    assert fmt(None) == "NEW_ClientID"


def test_token_lists_optional_vs_required() -> None:
    """
    @brief
    RequestedTaskIDs and Skills allow blanks; RequiredSkills does not.
    """
    assert _types("clients")["RequestedTaskIDs"]("")
    assert _types("clients")["RequestedTaskIDs"]("T1, T2")
    assert not _types("clients")["RequestedTaskIDs"]("T1,,T2")
    assert _types("workers")["Skills"](None)

    assert not _types("tasks")["RequiredSkills"]("")
    assert not _types("tasks")["RequiredSkills"](None)
    assert _types("tasks")["RequiredSkills"]("coding")

    assert _formats("clients")["RequestedTaskIDs"](" T1 ,, T2,") == "T1, T2"


def test_attributes_json_formatter() -> None:
    fmt = _formats("clients")["AttributesJSON"]
    assert fmt('{"a":1}') == json.dumps({"a": 1}, indent=2)
    assert fmt("{bad") == "{}"
    assert _types("clients")["AttributesJSON"]("{}")
    assert not _types("clients")["AttributesJSON"]("{bad")


@pytest.mark.parametrize(
    "value, valid, fixed",
    [
        ("[1,2,3]", True, "[1,2,3]"),
        ("[1.0, 2]", True, "[1,2]"),
        ("[1, 2.5]", False, "[1]"),
        ('{"a": 1}', False, "[1]"),
        ("not json", False, "[1]"),
    ],
)
def test_available_slots(value, valid, fixed) -> None:
    assert _types("workers")["AvailableSlots"](value) is valid
    assert _formats("workers")["AvailableSlots"](value) == fixed


def test_positive_integer_fields() -> None:
    is_load = _types("workers")["MaxLoadPerPhase"]
    fmt = _formats("workers")["MaxLoadPerPhase"]

    assert is_load("3")
    assert not is_load(0)
    assert not is_load(1.5)
    assert fmt(0) == 1
    assert fmt("x") == 1
    assert fmt(2.6) == 3
    assert _formats("tasks")["MaxConcurrent"](-4) == 1


def test_duration_predicate_and_formatter() -> None:
    assert _types("tasks")["Duration"]("1")
    assert _types("tasks")["Duration"](2.5)
    assert not _types("tasks")["Duration"]("0.5")
    assert _formats("tasks")["Duration"]("0.5") == 1
    assert _formats("tasks")["Duration"]("nope") == 1
    assert _formats("tasks")["Duration"](2.5) == 2.5


@pytest.mark.parametrize(
    "value, valid, fixed",
    [
        ("[1,2]", True, "[1,2]"),
        ("2-4", True, "[2,3,4]"),
        ("4-2", False, "[1]"),
        ("3", False, "[1]"),
        ("soon", False, "[1]"),
    ],
)
def test_preferred_phases(value, valid, fixed) -> None:
    """
    @brief
    PreferredPhases accepts arrays and ranges; formatter yields arrays.
    """
    assert _types("tasks")["PreferredPhases"](value) is valid
    assert _formats("tasks")["PreferredPhases"](value) == fixed


@pytest.mark.parametrize("value", ["", None, False, 0])
def test_unset_preferred_phases_is_valid(value) -> None:
    assert _types("tasks")["PreferredPhases"](value)


def test_lookup_and_resolution() -> None:
    assert get_entity_definition("workers").id_field == "WorkerID"
    assert get_entity_definition("Tasks").id_field == "TaskID"
    assert get_entity_definition("inventory") is None
    assert get_entity_definition(None) is None

    assert resolve_entity_type("Clients ") == "clients"
    assert resolve_entity_type("Staff", {"staff": "workers"}) == "workers"
    assert resolve_entity_type("notes") is None


def test_default_column_values() -> None:
    assert default_column_value("PriorityLevel") == 3
    assert default_column_value("TaskID") == "NEW_TaskID"
    assert default_column_value("TaskName") == ""


def test_row_placeholder_ids_are_unique_within_sheet() -> None:
    """
    @brief
    Per-row placeholders avoid each other and existing identifiers.
    """
    # --- Arrange ---
    taken = {"C1", "NEW_ClientID_2"}

    # --- Act ---
    first = row_placeholder_id("ClientID", 0, taken)
    second = row_placeholder_id("ClientID", 1, taken)
    third = row_placeholder_id("ClientID", 1, taken)

    # --- Assert ---
    assert first == "NEW_ClientID_1"
    assert second == "NEW_ClientID_2_2"
    assert third == "NEW_ClientID_2_3"
    assert {first, second, third} <= taken
