"""Audio transcoding and voice message delivery collaborators."""

from .delivery import MessageTransport, OutboxTransport
from .transcoder import FfmpegTranscoder, Transcoder

__all__ = ["FfmpegTranscoder", "MessageTransport", "OutboxTransport", "Transcoder"]
