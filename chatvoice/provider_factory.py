"""Factory helpers wiring session settings into pipeline collaborators.

Responsibilities:
- Build the dispatcher, normalizer, transcoder, and transport for a session.
- Keep the CLI independent from concrete collaborator construction.

Notes:
- Built-in provider kinds are `vits` (raw audio body) and `minimax` (JSON with
  hex audio). Unknown kinds decode as raw audio.
"""

from __future__ import annotations

import requests

from .audio.delivery import OutboxTransport
from .audio.transcoder import FfmpegTranscoder
from .registry import SessionState
from .telemetry.logger import RunLogger
from .tts.dispatcher import RequestDispatcher
from .tts.normalizer import ResponseNormalizer
from .tts.synthesizer import SynthesisOrchestrator


class ProviderFactory:
    """Factory for session-scoped synthesis collaborators."""

    @staticmethod
    def create_dispatcher(
        session: SessionState,
        http_session: requests.Session | None = None,
    ) -> RequestDispatcher:
        """Create a request dispatcher honoring the configured timeout."""

        return RequestDispatcher(
            session=http_session,
            timeout_seconds=session.config.timeout_seconds,
            run_logger=session.run_logger,
        )

    @staticmethod
    def create_normalizer(run_logger: RunLogger | None = None) -> ResponseNormalizer:
        """Create a response normalizer with the built-in provider kinds."""

        return ResponseNormalizer.with_builtin_strategies(run_logger=run_logger)

    @staticmethod
    def create_transcoder(session: SessionState) -> FfmpegTranscoder:
        """Create an ffmpeg transcoder honoring the audio cache option."""

        return FfmpegTranscoder(
            audio_dir=session.config.resolved_audio_dir,
            ffmpeg_binary=session.config.ffmpeg_binary,
            sample_rate=session.config.sample_rate,
            keep_history=session.registry.cache_enabled,
        )

    @staticmethod
    def create_orchestrator(
        session: SessionState,
        http_session: requests.Session | None = None,
    ) -> SynthesisOrchestrator:
        """Create a fully wired synthesis orchestrator for a session."""

        return SynthesisOrchestrator(
            dispatcher=ProviderFactory.create_dispatcher(session, http_session),
            normalizer=ProviderFactory.create_normalizer(session.run_logger),
            transcoder=ProviderFactory.create_transcoder(session),
            transport=OutboxTransport(session.config.resolved_outbox_dir),
            run_logger=session.run_logger,
        )
