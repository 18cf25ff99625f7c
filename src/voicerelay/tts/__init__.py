"""TTS package for voicerelay.

Request models, errors and the cache-backed synthesis pipeline.
"""

from .errors import (
    InputValidationError,
    TTSAPIError,
    TTSAuthError,
    TTSError,
    TTSTimeoutError,
)
from .models import SynthesisRequest, VoiceInfo, VoiceSettings

__all__ = [
    "InputValidationError",
    "SynthesisRequest",
    "TTSAPIError",
    "TTSAuthError",
    "TTSError",
    "TTSTimeoutError",
    "VoiceInfo",
    "VoiceSettings",
]
