"""TTS data models with validation."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ..config import ElevenLabsConfig
from .errors import InputValidationError

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass
class VoiceInfo:
    """Information about an available voice.

    Args:
        voice_id: Unique identifier for the voice
        name: Human-readable name of the voice
        provider: Provider name the voice belongs to
        category: Optional voice category (e.g., "premade", "cloned")
        description: Optional voice description
    """

    voice_id: str
    name: str
    provider: str = "elevenlabs"
    category: str | None = None
    description: str | None = None

    def __post_init__(self) -> None:
        """Validate voice information."""
        if not self.voice_id or not self.voice_id.strip():
            raise ValueError("voice_id cannot be empty")
        if not self.name or not self.name.strip():
            raise ValueError("name cannot be empty")

    def to_dict(self, simple: bool = False) -> dict[str, Any]:
        """Serialize for JSON responses, optionally projected to id and name."""
        if simple:
            return {"id": self.voice_id, "name": self.name}
        return {
            "id": self.voice_id,
            "name": self.name,
            "provider": self.provider,
            "category": self.category,
            "description": self.description,
        }


@dataclass(frozen=True)
class VoiceSettings:
    """Voice generation settings.

    Args:
        stability: Voice stability (0.0-1.0)
        similarity_boost: Voice similarity boost (0.0-1.0)
        style: Voice style exaggeration (0.0-1.0)
        use_speaker_boost: Whether to use speaker boost
    """

    stability: float = 0.4
    similarity_boost: float = 0.85
    style: float = 0.0
    use_speaker_boost: bool = True

    def __post_init__(self) -> None:
        """Validate voice settings."""
        if not 0.0 <= self.stability <= 1.0:
            raise ValueError("stability must be between 0.0 and 1.0")
        if not 0.0 <= self.similarity_boost <= 1.0:
            raise ValueError("similarity_boost must be between 0.0 and 1.0")
        if not 0.0 <= self.style <= 1.0:
            raise ValueError("style must be between 0.0 and 1.0")

    def to_dict(self) -> dict[str, Any]:
        return {
            "stability": self.stability,
            "similarity_boost": self.similarity_boost,
            "style": self.style,
            "use_speaker_boost": self.use_speaker_boost,
        }


def _parse_float(params: Mapping[str, Any], name: str, default: float) -> float:
    value = params.get(name)
    if value is None or value == "":
        return float(default)
    if isinstance(value, bool):
        raise InputValidationError(f"{name} must be a number")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InputValidationError(f"{name} must be a number") from None


def _parse_bool(params: Mapping[str, Any], name: str, default: bool) -> bool:
    value = params.get(name)
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    lowered = str(value).strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise InputValidationError(f"{name} must be a boolean")


def _parse_str(params: Mapping[str, Any], name: str, default: str) -> str:
    value = params.get(name)
    if value is None:
        return default
    value = str(value).strip()
    return value or default


@dataclass(frozen=True)
class SynthesisRequest:
    """A fully resolved synthesis request.

    Built from query parameters or a JSON body; every optional field falls
    back to the configured default so two requests that differ only in
    whether they spelled out a default resolve to the same request.
    """

    text: str
    voice_id: str
    model_id: str
    settings: VoiceSettings

    @classmethod
    def from_params(
        cls, params: Mapping[str, Any], defaults: ElevenLabsConfig
    ) -> "SynthesisRequest":
        """Validate request fields and apply defaults.

        Accepted fields: text, voice, model, stability, similarity, style,
        use_speaker_boost.

        Raises:
            InputValidationError: If text is missing or blank, or a numeric
                or boolean field cannot be parsed or is out of range.
        """
        raw_text = params.get("text")
        text = "" if raw_text is None else str(raw_text)
        if not text.strip():
            raise InputValidationError("No text provided")

        try:
            settings = VoiceSettings(
                stability=_parse_float(params, "stability", defaults.stability),
                similarity_boost=_parse_float(
                    params, "similarity", defaults.similarity_boost
                ),
                style=_parse_float(params, "style", defaults.style),
                use_speaker_boost=_parse_bool(
                    params, "use_speaker_boost", defaults.use_speaker_boost
                ),
            )
        except InputValidationError:
            raise
        except ValueError as e:
            raise InputValidationError(str(e)) from e

        return cls(
            text=text.strip(),
            voice_id=_parse_str(params, "voice", defaults.voice_id),
            model_id=_parse_str(params, "model", defaults.model_id),
            settings=settings,
        )
