"""Unit tests for typed value classification, rendering, and edit parsing."""

from __future__ import annotations

import pytest

from chatvoice.errors import MalformedStructure, MalformedValue
from chatvoice.models.typed_value import (
    ParsePolicy,
    TypedValue,
    ValueKind,
    classify,
    parse_edit,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("hello", ValueKind.STRING),
        (3, ValueKind.NUMBER),
        (0.5, ValueKind.NUMBER),
        (True, ValueKind.BOOLEAN),
        (False, ValueKind.BOOLEAN),
        ({"a": 1}, ValueKind.STRUCTURED),
        ([1, 2], ValueKind.STRUCTURED),
    ],
)
def test_classify_infers_kind_from_value(value: object, expected: ValueKind) -> None:
    """Booleans must not be classified as numbers even though bool subclasses int."""

    assert classify(value) is expected
    assert TypedValue(value).kind is expected


def test_typed_value_of_maps_none_to_empty_string() -> None:
    """A missing value is treated as an empty string."""

    value = TypedValue.of(None)

    assert value.value == ""
    assert value.kind is ValueKind.STRING


def test_as_text_renders_natural_forms() -> None:
    """Text forms feed query strings and header lines."""

    assert TypedValue(True).as_text() == "true"
    assert TypedValue(False).as_text() == "false"
    assert TypedValue(5.0).as_text() == "5"
    assert TypedValue(0.25).as_text() == "0.25"
    assert TypedValue({"a": [1, 2]}).as_text() == '{"a":[1,2]}'
    assert TypedValue("wav").as_text() == "wav"


def test_as_edit_text_pretty_prints_structured_values() -> None:
    """Editor text for structured values is indented JSON."""

    assert TypedValue({"a": 1}).as_edit_text() == '{\n  "a": 1\n}'
    assert TypedValue(7).as_edit_text() == "7"


def test_parse_edit_number_strict_rejects_non_numeric_text() -> None:
    """Strict number edits surface `MalformedValue` instead of substituting zero."""

    result = parse_edit("fast", ValueKind.NUMBER)

    assert result.ok is False
    assert isinstance(result.error, MalformedValue)
    assert result.error.raw_text == "fast"


def test_parse_edit_number_permissive_falls_back_to_zero() -> None:
    """Permissive number edits map unparseable text to `0`."""

    result = parse_edit("fast", ValueKind.NUMBER, ParsePolicy.PERMISSIVE)

    assert result.ok is True
    assert result.value == TypedValue(0)


def test_parse_edit_number_keeps_integers_integral() -> None:
    """Integral text parses to `int` and decimal text to `float`."""

    assert parse_edit("12", ValueKind.NUMBER).value == TypedValue(12)
    assert parse_edit(" 1.5 ", ValueKind.NUMBER).value == TypedValue(1.5)
    assert parse_edit("nan", ValueKind.NUMBER).ok is False
    assert parse_edit("inf", ValueKind.NUMBER).ok is False


def test_parse_edit_boolean_accepts_only_canonical_tokens_when_strict() -> None:
    """Strict boolean edits accept `true`/`false` only."""

    assert parse_edit("true", ValueKind.BOOLEAN).value == TypedValue(True)
    assert parse_edit("false", ValueKind.BOOLEAN).value == TypedValue(False)
    assert parse_edit("yes", ValueKind.BOOLEAN).ok is False


def test_parse_edit_boolean_permissive_treats_other_text_as_false() -> None:
    """Permissive boolean edits map anything but `true` to `False`."""

    result = parse_edit("yes", ValueKind.BOOLEAN, ParsePolicy.PERMISSIVE)

    assert result.value == TypedValue(False)


def test_parse_edit_structured_requires_object_or_array() -> None:
    """Structured edits reject invalid JSON and JSON scalars under any policy."""

    assert parse_edit('{"speed": 1}', ValueKind.STRUCTURED).value == TypedValue({"speed": 1})
    assert parse_edit("[1, 2]", ValueKind.STRUCTURED).value == TypedValue([1, 2])

    invalid = parse_edit("{not json", ValueKind.STRUCTURED, ParsePolicy.PERMISSIVE)
    scalar = parse_edit("42", ValueKind.STRUCTURED)

    assert isinstance(invalid.error, MalformedStructure)
    assert isinstance(scalar.error, MalformedStructure)


def test_parse_edit_string_is_taken_verbatim() -> None:
    """String edits never fail and keep surrounding whitespace."""

    result = parse_edit("  spaced ", ValueKind.STRING)

    assert result.value == TypedValue("  spaced ")


def test_parse_edit_number_strict_rejects_underscore_digits() -> None:
    """Python-only numeric spellings are not valid number edits."""

    assert parse_edit("1_000", ValueKind.NUMBER).ok is False
    assert parse_edit("1_000", ValueKind.NUMBER, ParsePolicy.PERMISSIVE).value == TypedValue(0)
