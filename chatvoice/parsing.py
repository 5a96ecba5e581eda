"""Shared parsing helpers for settings values and typed value edits."""

from __future__ import annotations

import math
import re


_TRUE_BOOLEAN_TOKENS = frozenset({"1", "true", "yes", "on"})
_FALSE_BOOLEAN_TOKENS = frozenset({"0", "false", "no", "off"})
_JSON_NUMBER_PATTERN = re.compile(
    r"-?(?:0|[1-9]\d*)(?P<fraction>\.\d+)?(?P<exponent>[eE][+-]?\d+)?",
    re.ASCII,
)


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def parse_permissive_boolean(value: object) -> bool | None:
    """Parse a permissive boolean token and return `None` for invalid values."""

    if isinstance(value, bool):
        return value

    normalized = normalize_optional_string(value)
    if normalized is None:
        return None

    token = normalized.lower()
    if token in _TRUE_BOOLEAN_TOKENS:
        return True
    if token in _FALSE_BOOLEAN_TOKENS:
        return False
    return None


def parse_finite_number(value: str) -> int | float | None:
    """Parse JSON number text: integral text as `int`, other numbers as `float`.

    Returns `None` for blank, non-JSON (`1_000`, `+1`, `.5`, `Infinity`),
    or overflowing input.
    """

    normalized = normalize_optional_string(value)
    if normalized is None:
        return None
    match = _JSON_NUMBER_PATTERN.fullmatch(normalized)
    if match is None:
        return None
    if match.group("fraction") is None and match.group("exponent") is None:
        return int(normalized)
    parsed = float(normalized)
    if not math.isfinite(parsed):
        return None
    return parsed
