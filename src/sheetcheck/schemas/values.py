# src/sheetcheck/schemas/values.py
"""
@brief
Coercion helpers for raw spreadsheet cell values.

@details
Cells arrive untyped: str, int, float, bool or None (absent). Every helper
here accepts any of these without raising, so predicates and checks can be
composed freely. Parsing failures are expressed as NaN (numbers) or as
ValueError from `parse_json`, which callers convert into issues.
"""

from __future__ import annotations

import json
import math
from typing import Any

NAN = float("nan")


def is_blank(value: Any) -> bool:
    """True for None, whitespace-only strings and NaN floats."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, float):
        return math.isnan(value)
    return False


def is_falsy(value: Any) -> bool:
    """Blank, False or numeric zero: cells a spreadsheet treats as unset."""
    if is_blank(value) or value is False:
        return True
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value == 0


def to_text(value: Any) -> str:
    """
    @brief
    Render a cell value as the text a spreadsheet would display.

    @details
    Integral floats lose their trailing ".0" (3.0 -> "3"), booleans are
    lower-cased JSON literals, containers become compact JSON. None renders
    as an empty string.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, dict)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)


def to_number(value: Any) -> float:
    """
    @brief
    Parse a cell value as a number.

    @details
    Booleans count as 1/0, numbers pass through, strings are trimmed and
    parsed as decimal floats. Blank, absent and unparsable values yield NaN.
    """
    if value is None:
        return NAN
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text or "_" in text:
            return NAN
        try:
            return float(text)
        except ValueError:
            return NAN
    return NAN


def is_integer_value(value: Any) -> bool:
    """True for ints and integral finite floats; booleans are not integers."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return math.isfinite(value) and value.is_integer()
    return False


def tidy_number(num: float) -> int | float:
    """Return an int for integral finite floats, the float otherwise."""
    if isinstance(num, int):
        return num
    if math.isfinite(num) and num.is_integer():
        return int(num)
    return num


def round_half_up(num: float) -> int:
    return math.floor(num + 0.5)


def clamp(num: float, low: float, high: float) -> int | float:
    return tidy_number(max(low, min(high, num)))


def parse_json(value: Any) -> Any:
    """
    Parse the text form of a cell as JSON.

    Raises ValueError (json.JSONDecodeError) when the text is not valid JSON
    or nests deeper than the decoder can follow.
    """
    try:
        return json.loads(to_text(value))
    except RecursionError as e:
        raise ValueError(f"JSON nesting too deep: {e}") from e


def raw_tokens(value: Any) -> list[str]:
    """Comma-split text form of a cell, each token trimmed, empties kept."""
    return [token.strip() for token in to_text(value).split(",")]


def split_list(value: Any) -> list[str]:
    """Comma-split text form of a cell, trimmed, empty tokens dropped."""
    return [token for token in raw_tokens(value) if token]


def same_raw_value(left: Any, right: Any) -> bool:
    """
    Strict equality of two raw cell values.

    Numbers compare by value (1 == 1.0) but booleans only match booleans,
    so a cell holding True is not the same as a cell holding 1.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if type(left) is not type(right):
        numeric = (int, float)
        if not (isinstance(left, numeric) and isinstance(right, numeric)):
            return False
    return bool(left == right)
