"""Provider response decoding into a single binary audio payload.

Responsibilities:
- Reject non-success HTTP responses.
- Dispatch on provider kind through a registrable strategy table.
- Decode JSON-wrapped hex audio (`minimax`) and pass raw audio bodies through.

Adding a provider kind means registering one more `DecodeStrategy`; the
dispatcher and orchestrator never branch on provider kind.
"""

from __future__ import annotations

import re
from typing import Any, Protocol

import requests

from ..errors import HttpError, MalformedResponse, ProviderError
from ..telemetry.logger import RunLogger


_HEX_PATTERN = re.compile(r"[0-9a-fA-F]*")


class DecodeStrategy(Protocol):
    """Decodes a successful provider response into audio bytes."""

    def decode(self, response: requests.Response) -> bytes:
        """Return audio bytes or raise a classified error."""


class RawAudioStrategy:
    """Treat the whole response body as audio."""

    def decode(self, response: requests.Response) -> bytes:
        return bytes(response.content)


def decode_hex_audio(hex_text: str) -> bytes:
    """Decode pairs of hex characters into bytes, in order.

    Raises:
        MalformedResponse: If the text has odd length or non-hex characters.
    """

    if len(hex_text) % 2 != 0:
        raise MalformedResponse("Hex audio payload has odd length.")
    if not _HEX_PATTERN.fullmatch(hex_text):
        raise MalformedResponse("Hex audio payload contains non-hex characters.")
    return bytes.fromhex(hex_text)


class MinimaxHexAudioStrategy:
    """Decode `{"base_resp": {...}, "data": {"audio": "<hex>"}}` replies."""

    _SUCCESS_STATUS_CODE = 0

    def __init__(self, run_logger: RunLogger | None = None) -> None:
        self._run_logger = run_logger

    def decode(self, response: requests.Response) -> bytes:
        try:
            payload = response.json()
        except ValueError as exc:
            raise MalformedResponse("Minimax response is not valid JSON.") from exc
        if not isinstance(payload, dict):
            raise MalformedResponse("Minimax response must be a JSON object.")

        base_resp = payload.get("base_resp")
        base_resp = base_resp if isinstance(base_resp, dict) else {}
        status_code = base_resp.get("status_code")
        if status_code != self._SUCCESS_STATUS_CODE:
            message = base_resp.get("status_msg") or "Unknown error"
            raise ProviderError(str(message), code=status_code, provider="Minimax")

        data = payload.get("data")
        hex_audio = data.get("audio") if isinstance(data, dict) else None
        if not isinstance(hex_audio, str) or not hex_audio:
            raise MalformedResponse("Minimax response missing data.audio field.")

        self._log_extra_info(payload.get("extra_info"))
        return decode_hex_audio(hex_audio)

    def _log_extra_info(self, extra_info: Any) -> None:
        if self._run_logger is None or not isinstance(extra_info, dict):
            return
        self._run_logger.log_debug(
            "normalize",
            "audio-info",
            audio_format=extra_info.get("audio_format", ""),
            audio_size=extra_info.get("audio_size", ""),
            audio_length_ms=extra_info.get("audio_length", ""),
        )


class ResponseNormalizer:
    """Provider-kind keyed table of decoding strategies."""

    def __init__(
        self,
        strategies: dict[str, DecodeStrategy] | None = None,
        default: DecodeStrategy | None = None,
    ) -> None:
        self._strategies: dict[str, DecodeStrategy] = dict(strategies or {})
        self._default = default if default is not None else RawAudioStrategy()

    @classmethod
    def with_builtin_strategies(cls, run_logger: RunLogger | None = None) -> ResponseNormalizer:
        """Create a normalizer knowing `vits` (raw) and `minimax` (hex JSON)."""

        return cls(
            {
                "vits": RawAudioStrategy(),
                "minimax": MinimaxHexAudioStrategy(run_logger=run_logger),
            }
        )

    def register(self, provider_kind: str, strategy: DecodeStrategy) -> None:
        """Register or replace the strategy for `provider_kind`."""

        self._strategies[provider_kind] = strategy

    def known_kinds(self) -> list[str]:
        return sorted(self._strategies)

    def normalize(self, response: requests.Response, provider_kind: str) -> bytes:
        """Decode a provider response into audio bytes.

        Raises:
            HttpError: If the HTTP status is not 2xx.
            ProviderError: If the provider reports a failure.
            MalformedResponse: If the expected audio field is missing or undecodable.
        """

        if not 200 <= response.status_code < 300:
            raise HttpError(response.status_code)
        strategy = self._strategies.get(provider_kind, self._default)
        return strategy.decode(response)
