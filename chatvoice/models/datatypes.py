"""Ephemeral records exchanged between synthesis, transcoding, and delivery.

Key types:
- `SynthesisRequest`, `AudioPayload`, `SynthesisResult`, `TranscodeOutcome`,
  and `DeliveryReceipt`.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..errors import ChatvoiceError
from .profile import ProviderProfile


@dataclass(frozen=True, slots=True)
class SynthesisRequest:
    """One text-to-speech call.

    Attributes:
        text: Source text to synthesize.
        language: Target language tag; informational only.
        profile: Profile with the source text already bound.
    """

    text: str
    language: str
    profile: ProviderProfile


@dataclass(frozen=True, slots=True)
class AudioPayload:
    """Binary audio returned by a provider.

    Attributes:
        data: Normalized audio bytes.
        audio_format: Declared container/codec from the profile `format` parameter.
        provider_kind: Provider kind that produced the audio.
    """

    data: bytes
    audio_format: str
    provider_kind: str


@dataclass(frozen=True, slots=True)
class SynthesisResult:
    """Audio or a classified failure for one synthesis call."""

    audio: AudioPayload | None = None
    failure: ChatvoiceError | None = None

    @property
    def ok(self) -> bool:
        """Return whether synthesis produced audio."""

        return self.failure is None and self.audio is not None


@dataclass(frozen=True, slots=True)
class TranscodeOutcome:
    """Result reported by an audio transcoder.

    Attributes:
        status: `success` or `failure`.
        file_path: Converted voice payload path on success.
        message: Human-readable detail, mostly for failures.
    """

    status: str
    file_path: Path | None = None
    message: str = ""

    @property
    def succeeded(self) -> bool:
        return self.status == "success"


@dataclass(frozen=True, slots=True)
class DeliveryReceipt:
    """Record of a voice payload handed to the message transport."""

    conversation: str
    payload_path: Path
    source_audio_path: Path | None = None
