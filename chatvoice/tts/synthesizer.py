"""Synthesis orchestration from source text to delivered voice message.

Responsibilities:
- Bind source text into a profile, dispatch the request, and normalize the reply.
- Report failures as classified `SynthesisResult` values without side effects.
- Hand successful audio to the transcoder and then to the message transport.

Each call is independent: no retry, no shared per-call state, no locking.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from ..audio.delivery import MessageTransport
from ..audio.transcoder import Transcoder
from ..errors import ChatvoiceError, TranscodeError
from ..models.datatypes import (
    AudioPayload,
    DeliveryReceipt,
    SynthesisRequest,
    SynthesisResult,
    TranscodeOutcome,
)
from ..models.profile import ProviderProfile
from ..telemetry.logger import RunLogger
from .dispatcher import RequestDispatcher
from .normalizer import ResponseNormalizer


class SynthesisOrchestrator:
    """Tie dispatcher, normalizer, transcoder, and transport together."""

    def __init__(
        self,
        dispatcher: RequestDispatcher,
        normalizer: ResponseNormalizer,
        transcoder: Transcoder | None = None,
        transport: MessageTransport | None = None,
        run_logger: RunLogger | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._normalizer = normalizer
        self._transcoder = transcoder
        self._transport = transport
        self._run_logger = run_logger

    def synthesize(self, text: str, profile: ProviderProfile, language: str = "") -> SynthesisResult:
        """Return audio for `text` or the classified failure that stopped it."""

        stage = "synthesize"
        self._log_start(stage, profile=profile.name, provider_kind=profile.provider_kind)
        try:
            request = SynthesisRequest(
                text=text,
                language=language,
                profile=profile.with_source_text(text),
            )
            response = self._dispatcher.dispatch(request.profile)
            data = self._normalizer.normalize(response, request.profile.provider_kind)
        except ChatvoiceError as exc:
            self._log_failure(stage, exc)
            return SynthesisResult(failure=exc)

        self._log_complete(stage, bytes=len(data))
        return SynthesisResult(
            audio=AudioPayload(
                data=data,
                audio_format=profile.audio_format,
                provider_kind=profile.provider_kind,
            )
        )

    def deliver(self, result: SynthesisResult, conversation: str) -> DeliveryReceipt:
        """Transcode successful audio and send it to `conversation`.

        Raises:
            ChatvoiceError: The failure carried by an unsuccessful `result`.
            TranscodeError: If conversion fails; nothing is sent.
        """

        if result.failure is not None:
            raise result.failure
        if result.audio is None:
            raise ChatvoiceError("Synthesis produced no audio.")
        transcoder = self._require_transcoder()
        audio = result.audio
        payload_path = self._run_transcode(
            lambda: transcoder.convert(audio.data, audio.audio_format)
        )
        return self._send(payload_path, conversation)

    def deliver_file(self, source_path: Path, conversation: str) -> DeliveryReceipt:
        """Transcode an existing audio file and send it to `conversation`."""

        transcoder = self._require_transcoder()
        payload_path = self._run_transcode(lambda: transcoder.convert_file(source_path))
        return self._send(payload_path, conversation)

    def _run_transcode(self, convert: Callable[[], TranscodeOutcome]) -> Path:
        stage = "transcode"
        self._log_start(stage)
        outcome = convert()
        if not outcome.succeeded or outcome.file_path is None:
            error = TranscodeError(outcome.message or "Audio transcoding failed.")
            self._log_failure(stage, error)
            raise error
        self._log_complete(stage)
        return outcome.file_path

    def _send(self, payload_path: Path, conversation: str) -> DeliveryReceipt:
        if self._transport is None:
            raise ChatvoiceError("No message transport is configured.")
        stage = "send"
        self._log_start(stage, conversation=conversation)
        receipt = self._transport.send_voice(payload_path, conversation)
        self._log_complete(stage, conversation=conversation)
        return receipt

    def _require_transcoder(self) -> Transcoder:
        if self._transcoder is None:
            raise ChatvoiceError("No audio transcoder is configured.")
        return self._transcoder

    def _log_start(self, stage: str, **context: object) -> None:
        if self._run_logger is not None:
            self._run_logger.log_stage_start(stage, **context)

    def _log_complete(self, stage: str, **context: object) -> None:
        if self._run_logger is not None:
            self._run_logger.log_stage_complete(stage, **context)

    def _log_failure(self, stage: str, exc: Exception) -> None:
        if self._run_logger is not None:
            self._run_logger.log_stage_failure(stage, type(exc).__name__)
