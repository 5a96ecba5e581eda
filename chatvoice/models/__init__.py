"""Typed configuration and pipeline record models."""

from .datatypes import (
    AudioPayload,
    DeliveryReceipt,
    SynthesisRequest,
    SynthesisResult,
    TranscodeOutcome,
)
from .profile import HttpMethod, ProviderProfile
from .typed_value import EditResult, ParsePolicy, TypedValue, ValueKind, classify, parse_edit
from .value_set import PROTECTED_PARAMETER_KEYS, NamedValueSet

__all__ = [
    "AudioPayload",
    "DeliveryReceipt",
    "EditResult",
    "HttpMethod",
    "NamedValueSet",
    "PROTECTED_PARAMETER_KEYS",
    "ParsePolicy",
    "ProviderProfile",
    "SynthesisRequest",
    "SynthesisResult",
    "TranscodeOutcome",
    "TypedValue",
    "ValueKind",
    "classify",
    "parse_edit",
]
