"""HTTP request construction and dispatch for provider profiles.

Responsibilities:
- Build a GET request with profile parameters appended after the host's own
  query string, or a POST request with a JSON body of the parameter set.
- Attach profile headers, with `Content-Type: application/json` as an
  overridable POST default.
- Map transport failures to `HttpError`.
"""

from __future__ import annotations

import json

import requests
from requests.structures import CaseInsensitiveDict

from ..errors import HttpError, InvalidProfileError
from ..models.profile import HttpMethod, ProviderProfile
from ..telemetry.logger import RunLogger


_SENSITIVE_HEADER_MARKERS = ("auth", "key", "token", "secret", "cookie")
_MAX_ERROR_MESSAGE_CHARS = 180


def _check_header_encoding(profile: ProviderProfile, name: str, value: str) -> None:
    """Reject header lines that HTTP cannot carry (latin-1 only)."""

    try:
        name.encode("ascii")
        value.encode("latin-1")
    except UnicodeEncodeError as exc:
        raise InvalidProfileError(
            f"Profile `{profile.name}` header `{name}` contains characters HTTP headers "
            "cannot carry; use ASCII or Latin-1 text."
        ) from exc


def _short_message(text: str) -> str:
    """Normalize and cap user-facing transport message length."""

    compact = " ".join(text.split())
    if len(compact) <= _MAX_ERROR_MESSAGE_CHARS:
        return compact
    return f"{compact[: _MAX_ERROR_MESSAGE_CHARS - 1]}..."


class RequestDispatcher:
    """Send one provider request per call; holds no per-request state."""

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout_seconds: float | None = None,
        run_logger: RunLogger | None = None,
    ) -> None:
        self._session = session if session is not None else requests.Session()
        self._timeout_seconds = timeout_seconds
        self._run_logger = run_logger

    def build_request(self, profile: ProviderProfile) -> requests.PreparedRequest:
        """Return the prepared request for a profile with source text bound."""

        headers: CaseInsensitiveDict[str] = CaseInsensitiveDict()
        if profile.http_method is HttpMethod.POST:
            headers["Content-Type"] = "application/json"
        for name, value in profile.headers.as_text_pairs():
            _check_header_encoding(profile, name, value)
            headers[name] = value

        if profile.http_method is HttpMethod.GET:
            request = requests.Request(
                "GET",
                profile.host,
                params=profile.parameters.as_text_pairs(),
                headers=headers,
            )
        else:
            body = json.dumps(profile.parameters.to_payload(), ensure_ascii=False)
            request = requests.Request(
                "POST",
                profile.host,
                data=body.encode("utf-8"),
                headers=headers,
            )

        try:
            return request.prepare()
        except requests.RequestException as exc:
            raise InvalidProfileError(
                f"Profile `{profile.name}` has an invalid host `{profile.host}`: "
                f"{_short_message(str(exc))}"
            ) from exc

    def dispatch(self, profile: ProviderProfile) -> requests.Response:
        """Send the profile request and return the raw response.

        Raises:
            HttpError: On connection, timeout, or other transport failures.
        """

        prepared = self.build_request(profile)
        self._log_request(profile, prepared)
        try:
            return self._session.send(prepared, timeout=self._timeout_seconds)
        except requests.Timeout as exc:
            raise HttpError(None, detail="HTTP request timed out.") from exc
        except requests.RequestException as exc:
            raise HttpError(
                None,
                detail=f"HTTP transport error: {_short_message(str(exc))}",
            ) from exc
        except ValueError as exc:
            raise HttpError(
                None,
                detail=f"HTTP request could not be encoded: {_short_message(str(exc))}",
            ) from exc

    def _log_request(self, profile: ProviderProfile, prepared: requests.PreparedRequest) -> None:
        if self._run_logger is None:
            return
        header_tokens = [
            f"{name}:[redacted]" if is_sensitive_header(name) else f"{name}:{value}"
            for name, value in prepared.headers.items()
        ]
        self._run_logger.log_debug(
            "dispatch",
            "request",
            method=profile.http_method.value,
            profile=profile.name,
            params=",".join(profile.parameters.names()),
            headers=",".join(header_tokens),
        )


def is_sensitive_header(name: str) -> bool:
    """Return whether a header name suggests a credential value."""

    lowered = name.lower()
    return any(marker in lowered for marker in _SENSITIVE_HEADER_MARKERS)
