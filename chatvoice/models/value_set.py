"""Ordered named-value store for provider parameters and headers.

Responsibilities:
- Keep unique names mapped to `TypedValue` entries in insertion order.
- Refuse removal of protected names and insertion of duplicate or blank names.
- Commit editor text only when it parses against the entry's current kind.

The store holds no persistence logic; callers save the owning profile after
each successful mutation.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
import copy as _copy
from typing import Any

from ..errors import DuplicateKeyError, InvalidKeyError, ProtectedKeyError
from .typed_value import EditResult, ParsePolicy, TypedValue, parse_edit


PROTECTED_PARAMETER_KEYS = frozenset({"source_key", "format"})


class NamedValueSet:
    """Ordered mapping from unique names to typed values."""

    def __init__(
        self,
        entries: Mapping[str, Any] | None = None,
        protected: Iterable[str] = (),
    ) -> None:
        self._protected = frozenset(protected)
        self._entries: dict[str, TypedValue] = {}
        for name, value in (entries or {}).items():
            self._entries[str(name)] = TypedValue.of(value)

    @classmethod
    def parameters(cls, entries: Mapping[str, Any] | None = None) -> NamedValueSet:
        """Create a parameter set guarding `source_key` and `format`."""

        return cls(entries, protected=PROTECTED_PARAMETER_KEYS)

    @classmethod
    def headers(cls, entries: Mapping[str, Any] | None = None) -> NamedValueSet:
        """Create a header set with no protected names."""

        return cls(entries)

    @property
    def protected(self) -> frozenset[str]:
        return self._protected

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NamedValueSet):
            return NotImplemented
        return self._protected == other._protected and self._entries == other._entries

    def __repr__(self) -> str:
        return f"NamedValueSet({self.to_payload()!r})"

    def names(self) -> list[str]:
        """Return names in insertion order."""

        return list(self._entries)

    def items(self) -> list[tuple[str, TypedValue]]:
        """Return `(name, value)` pairs in insertion order."""

        return list(self._entries.items())

    def get(self, name: str) -> TypedValue | None:
        """Return the value stored under `name`, or `None` when absent."""

        return self._entries.get(name)

    def set(self, name: str, value: Any) -> None:
        """Overwrite or insert `name`; protection status is unchanged."""

        self._entries[name] = TypedValue.of(value)

    def add(self, name: str, value: Any) -> None:
        """Insert a new name, keeping the value's own kind.

        Raises:
            InvalidKeyError: If `name` is blank.
            DuplicateKeyError: If `name` is already present.
        """

        if not isinstance(name, str) or not name.strip():
            raise InvalidKeyError(str(name))
        if name in self._entries:
            raise DuplicateKeyError(name)
        self._entries[name] = TypedValue.of(value)

    def remove(self, name: str) -> None:
        """Remove `name`.

        Raises:
            ProtectedKeyError: If `name` is protected; the set is unchanged.
            InvalidKeyError: If `name` is not present.
        """

        if name in self._protected:
            raise ProtectedKeyError(name)
        if name not in self._entries:
            raise InvalidKeyError(name, detail=f"`{name}` does not exist.")
        del self._entries[name]

    def edit(
        self,
        name: str,
        raw_text: str,
        policy: ParsePolicy = ParsePolicy.STRICT,
    ) -> EditResult:
        """Parse `raw_text` against the current kind of `name` and commit on success.

        A failed parse leaves the previously committed value in place.
        """

        current = self._entries.get(name)
        if current is None:
            raise InvalidKeyError(name, detail=f"`{name}` does not exist.")
        result = parse_edit(raw_text, current.kind, policy)
        if result.ok and result.value is not None:
            self._entries[name] = result.value
        return result

    def copy(self) -> NamedValueSet:
        """Return an independent copy sharing no mutable entry state."""

        duplicate = NamedValueSet(protected=self._protected)
        duplicate._entries = {
            name: TypedValue(_copy.deepcopy(value.value))
            for name, value in self._entries.items()
        }
        return duplicate

    def to_payload(self) -> dict[str, Any]:
        """Return a JSON-serializable mapping of native values."""

        return {name: value.as_json() for name, value in self._entries.items()}

    def as_text_pairs(self) -> list[tuple[str, str]]:
        """Return `(name, text)` pairs for query strings and header lines."""

        return [(name, value.as_text()) for name, value in self._entries.items()]
