"""Typed values for schema-less provider parameters and headers.

Responsibilities:
- Infer the kind of an arbitrary JSON-like configuration value.
- Render values in their textual, native, and editor forms.
- Parse editor text back into typed values under an explicit parse policy.

Key types:
- `ValueKind`: the four supported value kinds.
- `TypedValue`: a value whose kind is always derived from the current value.
- `ParsePolicy`: strict or permissive handling of number/boolean edits.
- `EditResult`: inspectable outcome of `parse_edit`.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
import json
from typing import Any

from ..errors import MalformedStructure, MalformedValue
from ..parsing import parse_finite_number


class ValueKind(str, Enum):
    """Kinds a configuration value can take."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    STRUCTURED = "structured"


class ParsePolicy(str, Enum):
    """How number and boolean edits treat unparseable text.

    `STRICT` rejects the edit. `PERMISSIVE` substitutes `0` for numbers and
    `False` for any boolean text other than `true`.
    """

    STRICT = "strict"
    PERMISSIVE = "permissive"


def classify(value: Any) -> ValueKind:
    """Return the kind of a raw configuration value."""

    # bool is an int subclass, so it must be checked first.
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, int | float):
        return ValueKind.NUMBER
    if isinstance(value, Mapping | list | tuple):
        return ValueKind.STRUCTURED
    return ValueKind.STRING


def _format_number(value: int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True, slots=True)
class TypedValue:
    """A configuration value with an inferred kind.

    Attributes:
        value: Native value (`str`, `int`/`float`, `bool`, or a JSON-like tree).
    """

    value: Any

    @classmethod
    def of(cls, value: Any) -> TypedValue:
        """Wrap a raw value, passing existing `TypedValue` instances through."""

        if isinstance(value, TypedValue):
            return value
        if value is None:
            return cls("")
        return cls(value)

    @property
    def kind(self) -> ValueKind:
        """Kind derived from the current value."""

        return classify(self.value)

    def as_text(self) -> str:
        """Return the natural textual form used in query strings and headers."""

        kind = self.kind
        if kind is ValueKind.BOOLEAN:
            return "true" if self.value else "false"
        if kind is ValueKind.NUMBER:
            return _format_number(self.value)
        if kind is ValueKind.STRUCTURED:
            return json.dumps(self.value, ensure_ascii=False, separators=(",", ":"))
        return str(self.value)

    def as_json(self) -> Any:
        """Return the native value used in JSON bodies and persistence."""

        if self.kind is ValueKind.STRUCTURED and isinstance(self.value, tuple):
            return list(self.value)
        return self.value

    def as_edit_text(self) -> str:
        """Return the text an editor shows for this value."""

        if self.kind is ValueKind.STRUCTURED:
            return json.dumps(self.as_json(), ensure_ascii=False, indent=2)
        return self.as_text()


@dataclass(frozen=True, slots=True)
class EditResult:
    """Outcome of parsing editor text; exactly one of `value`/`error` is set."""

    value: TypedValue | None = None
    error: MalformedValue | None = None

    @property
    def ok(self) -> bool:
        """Return whether the edit parsed successfully."""

        return self.error is None


def parse_edit(
    raw_text: str,
    target_kind: ValueKind,
    policy: ParsePolicy = ParsePolicy.STRICT,
) -> EditResult:
    """Parse editor text into a value of `target_kind`.

    Structured text must decode to a JSON object or array regardless of
    `policy`. Boolean text is compared against the canonical `true`/`false`
    forms only.
    """

    if target_kind is ValueKind.STRING:
        return EditResult(value=TypedValue(raw_text))

    if target_kind is ValueKind.NUMBER:
        number = parse_finite_number(raw_text)
        if number is None:
            if policy is ParsePolicy.PERMISSIVE:
                return EditResult(value=TypedValue(0))
            return EditResult(error=MalformedValue(raw_text, ValueKind.NUMBER.value))
        return EditResult(value=TypedValue(number))

    if target_kind is ValueKind.BOOLEAN:
        token = raw_text.strip()
        if token == "true":
            return EditResult(value=TypedValue(True))
        if token == "false" or policy is ParsePolicy.PERMISSIVE:
            return EditResult(value=TypedValue(False))
        return EditResult(
            error=MalformedValue(
                raw_text,
                ValueKind.BOOLEAN.value,
                detail="Boolean values must be `true` or `false`.",
            )
        )

    if target_kind is ValueKind.STRUCTURED:
        try:
            parsed = json.loads(raw_text)
        except json.JSONDecodeError as exc:
            return EditResult(
                error=MalformedStructure(raw_text, detail=f"Invalid JSON: {exc.msg}.")
            )
        if not isinstance(parsed, dict | list):
            return EditResult(error=MalformedStructure(raw_text))
        return EditResult(value=TypedValue(parsed))

    raise ValueError(f"Unsupported value kind `{target_kind}`.")
