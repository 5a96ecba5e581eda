"""Domain exceptions for the synthesis pipeline, configuration model, and CLI.

Every error raised by the core derives from `ChatvoiceError` so callers can
classify failures without catching unrelated exceptions.
"""

from __future__ import annotations


class ChatvoiceError(RuntimeError):
    """Base class for all classified chatvoice failures."""


class ProtectedKeyError(ChatvoiceError):
    """Raised when removing a protected parameter such as `source_key` or `format`."""

    def __init__(self, name: str) -> None:
        super().__init__(f"`{name}` is a protected key and cannot be removed.")
        self.name = name


class DuplicateKeyError(ChatvoiceError):
    """Raised when adding a name that is already present."""

    def __init__(self, name: str, detail: str | None = None) -> None:
        super().__init__(detail or f"`{name}` already exists.")
        self.name = name


class InvalidKeyError(DuplicateKeyError):
    """Raised for blank or unknown names; rejected like a duplicate on add."""

    def __init__(self, name: str, detail: str | None = None) -> None:
        super().__init__(name, detail or "Key name must be a non-empty string.")


class MalformedValue(ChatvoiceError):
    """Raised when edited text cannot be parsed as the target value kind."""

    def __init__(self, raw_text: str, kind: str, detail: str | None = None) -> None:
        super().__init__(detail or f"`{raw_text}` is not a valid {kind} value.")
        self.raw_text = raw_text
        self.kind = kind


class MalformedStructure(MalformedValue):
    """Raised when structured-value text is not a JSON object or array."""

    def __init__(self, raw_text: str, detail: str | None = None) -> None:
        super().__init__(
            raw_text,
            "structured",
            detail or "Structured values must be a JSON object or array.",
        )


class HttpError(ChatvoiceError):
    """Raised for transport failures and non-success HTTP responses."""

    def __init__(self, status: int | None, detail: str | None = None) -> None:
        if detail is None:
            detail = (
                f"HTTP error, status = {status}"
                if status is not None
                else "HTTP transport error"
            )
        super().__init__(detail)
        self.status = status


class ProviderError(ChatvoiceError):
    """Raised when a provider reports a semantic failure in a success-shaped reply."""

    def __init__(self, message: str, *, code: object = None, provider: str = "") -> None:
        super().__init__(f"{provider} API error: {message}" if provider else message)
        self.message = message
        self.code = code
        self.provider = provider


class MalformedResponse(ChatvoiceError):
    """Raised when an expected field is absent or undecodable in a provider reply."""


class TranscodeError(ChatvoiceError):
    """Raised when the external audio converter reports failure."""


class PersistenceError(ChatvoiceError):
    """Raised when a configuration write fails; in-memory and stored state may differ."""


class ProfileNotFoundError(ChatvoiceError):
    """Raised when selecting or loading a profile name with no stored definition."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Profile `{name}` was not found.")
        self.name = name


class InvalidProfileError(ChatvoiceError, ValueError):
    """Raised when a stored profile payload is missing required fields."""


class CommandError(RuntimeError):
    """Raised when a specific CLI command stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped command error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint
