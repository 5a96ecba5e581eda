"""Provider-agnostic text-to-speech request pipeline.

This package contains request dispatch, response normalization, and the
orchestrator that ties them to transcoding and delivery.
"""

from .dispatcher import RequestDispatcher
from .normalizer import (
    DecodeStrategy,
    MinimaxHexAudioStrategy,
    RawAudioStrategy,
    ResponseNormalizer,
    decode_hex_audio,
)
from .synthesizer import SynthesisOrchestrator

__all__ = [
    "DecodeStrategy",
    "MinimaxHexAudioStrategy",
    "RawAudioStrategy",
    "RequestDispatcher",
    "ResponseNormalizer",
    "SynthesisOrchestrator",
    "decode_hex_audio",
]
