"""Provider profile model and persisted payload mapping.

Responsibilities:
- Describe one fully specified way to call a TTS backend.
- Bind source text through the `source_key` indirection without mutation.
- Map profiles to and from the persisted `{host, host_type, http_type, params,
  headers}` payload, defaulting optional fields with recorded diagnostics.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from ..errors import InvalidProfileError
from ..parsing import normalize_optional_string
from .value_set import PROTECTED_PARAMETER_KEYS, NamedValueSet


DEFAULT_HOST = "https://artrajz-vits-simple-api.hf.space/voice/vits"
DEFAULT_PROVIDER_KIND = "vits"
SOURCE_KEY = "source_key"
FORMAT_KEY = "format"


class HttpMethod(str, Enum):
    """HTTP methods a provider can be called with."""

    GET = "get"
    POST = "post"

    @classmethod
    def parse(cls, value: object) -> HttpMethod:
        """Parse a case-insensitive method token."""

        token = (normalize_optional_string(value) or "").lower()
        for method in cls:
            if method.value == token:
                return method
        raise InvalidProfileError(f"Unsupported `http_type` value `{value}`; use `get` or `post`.")


@dataclass(slots=True)
class ProviderProfile:
    """A named provider configuration.

    Attributes:
        name: Unique identifier within a registry.
        host: Target URL, possibly carrying its own query string.
        provider_kind: Tag selecting the response decoding strategy.
        http_method: Request method; `GET` when the stored profile omits it.
        parameters: Request parameters; always holds `source_key` and `format`.
        headers: Extra HTTP headers.
        diagnostics: Notes about fields defaulted while loading.
    """

    name: str
    host: str
    provider_kind: str = DEFAULT_PROVIDER_KIND
    http_method: HttpMethod = HttpMethod.GET
    parameters: NamedValueSet = field(default_factory=NamedValueSet.parameters)
    headers: NamedValueSet = field(default_factory=NamedValueSet.headers)
    diagnostics: tuple[str, ...] = ()

    @classmethod
    def blank(cls, name: str) -> ProviderProfile:
        """Create a new profile pointing at the default VITS endpoint."""

        return cls(
            name=name,
            host=DEFAULT_HOST,
            parameters=NamedValueSet.parameters(
                {SOURCE_KEY: "text", FORMAT_KEY: "wav", "text": ""}
            ),
        )

    @property
    def audio_format(self) -> str:
        """Declared output audio container, read from the `format` parameter."""

        value = self.parameters.get(FORMAT_KEY)
        return value.as_text() if value is not None else ""

    def resolve_source_parameter_key(self) -> str:
        """Return the parameter name that receives the text to synthesize."""

        value = self.parameters.get(SOURCE_KEY)
        if value is None:
            raise InvalidProfileError(f"Profile `{self.name}` has no `{SOURCE_KEY}` parameter.")
        return value.as_text()

    def with_source_text(self, text: str) -> ProviderProfile:
        """Return a copy whose source parameter holds `text`."""

        parameters = self.parameters.copy()
        parameters.set(self.resolve_source_parameter_key(), text)
        return replace(self, parameters=parameters, headers=self.headers.copy())

    def copy(self) -> ProviderProfile:
        """Return an independent copy of this profile."""

        return replace(self, parameters=self.parameters.copy(), headers=self.headers.copy())

    def to_payload(self) -> dict[str, Any]:
        """Return the persisted JSON shape."""

        return {
            "host": self.host,
            "host_type": self.provider_kind,
            "http_type": self.http_method.value,
            "params": self.parameters.to_payload(),
            "headers": self.headers.to_payload(),
        }

    @classmethod
    def from_payload(cls, name: str, payload: Mapping[str, Any]) -> ProviderProfile:
        """Build a profile from its persisted shape.

        Missing `http_type`, `host_type`, and `headers` are defaulted and noted
        in `diagnostics`.

        Raises:
            InvalidProfileError: If `host` or a protected parameter is missing,
                or a field has the wrong shape.
        """

        if not isinstance(payload, Mapping):
            raise InvalidProfileError(f"Profile `{name}` must be a JSON object.")

        diagnostics: list[str] = []
        host = normalize_optional_string(payload.get("host"))
        if host is None:
            raise InvalidProfileError(f"Profile `{name}` requires a non-empty `host`.")

        provider_kind = normalize_optional_string(payload.get("host_type"))
        if provider_kind is None:
            diagnostics.append(f"missing host_type, defaulted to {DEFAULT_PROVIDER_KIND}")
            provider_kind = DEFAULT_PROVIDER_KIND

        if payload.get("http_type") is None:
            diagnostics.append("missing http_type, defaulted to get")
            http_method = HttpMethod.GET
        else:
            http_method = HttpMethod.parse(payload["http_type"])

        raw_params = payload.get("params")
        if not isinstance(raw_params, Mapping):
            raise InvalidProfileError(f"Profile `{name}` requires a `params` object.")
        missing = sorted(PROTECTED_PARAMETER_KEYS.difference(raw_params))
        if missing:
            raise InvalidProfileError(
                f"Profile `{name}` is missing protected parameter(s): {', '.join(missing)}."
            )

        raw_headers = payload.get("headers")
        if raw_headers is None:
            diagnostics.append("missing headers, defaulted to empty")
            raw_headers = {}
        elif not isinstance(raw_headers, Mapping):
            raise InvalidProfileError(f"Profile `{name}` field `headers` must be an object.")

        return cls(
            name=name,
            host=host,
            provider_kind=provider_kind,
            http_method=http_method,
            parameters=NamedValueSet.parameters(raw_params),
            headers=NamedValueSet.headers(raw_headers),
            diagnostics=tuple(diagnostics),
        )
