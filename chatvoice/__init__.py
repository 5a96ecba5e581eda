"""Top-level package for chatvoice.

This package turns chat text into voice messages through user-configurable
text-to-speech provider profiles. The main entry points are
`ProfileRegistry` for profile management and `SynthesisOrchestrator` for
synthesis and delivery.
"""

from .registry import ProfileRegistry, SessionState
from .tts.synthesizer import SynthesisOrchestrator

__all__ = ["ProfileRegistry", "SessionState", "SynthesisOrchestrator", "__version__"]

__version__ = "0.1.0"
