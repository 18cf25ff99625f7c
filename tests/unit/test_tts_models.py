"""Unit tests for TTS data models validation logic."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from voicerelay.config import build_config
from voicerelay.tts.errors import InputValidationError
from voicerelay.tts.models import SynthesisRequest, VoiceInfo, VoiceSettings

DEFAULTS = build_config({}, env={}).elevenlabs


class TestVoiceInfo:
    """Test VoiceInfo validation and serialization."""

    def test_valid_voice_info_creation(self) -> None:
        """Test creating valid VoiceInfo with required fields."""
        voice = VoiceInfo(voice_id="voice_123", name="Rachel")

        assert voice.voice_id == "voice_123"
        assert voice.provider == "elevenlabs"
        assert voice.category is None

    def test_empty_voice_id_raises_error(self) -> None:
        """Test empty voice_id raises ValueError."""
        with pytest.raises(ValueError, match="voice_id cannot be empty"):
            VoiceInfo(voice_id="  ", name="Rachel")

    def test_empty_name_raises_error(self) -> None:
        """Test empty name raises ValueError."""
        with pytest.raises(ValueError, match="name cannot be empty"):
            VoiceInfo(voice_id="voice_123", name="")

    def test_to_dict_simple_projection(self) -> None:
        """Test simple projection keeps only id and name."""
        voice = VoiceInfo(voice_id="v", name="Rachel", category="premade")

        assert voice.to_dict(simple=True) == {"id": "v", "name": "Rachel"}
        assert voice.to_dict()["category"] == "premade"


class TestVoiceSettings:
    """Test VoiceSettings validation logic."""

    def test_default_values(self) -> None:
        """Test defaults match the relay defaults."""
        settings = VoiceSettings()

        assert settings.stability == 0.4
        assert settings.similarity_boost == 0.85
        assert settings.style == 0.0
        assert settings.use_speaker_boost is True

    @pytest.mark.parametrize("field", ["stability", "similarity_boost", "style"])
    def test_out_of_range_values_raise(self, field: str) -> None:
        """Test each bounded field rejects values above 1.0."""
        with pytest.raises(ValueError, match=f"{field} must be between"):
            VoiceSettings(**{field: 1.5})

    def test_to_dict(self) -> None:
        """Test dict form uses the upstream field names."""
        assert VoiceSettings(stability=0.5).to_dict() == {
            "stability": 0.5,
            "similarity_boost": 0.85,
            "style": 0.0,
            "use_speaker_boost": True,
        }


class TestSynthesisRequestFromParams:
    """Test request parsing, defaults and validation."""

    def test_defaults_applied(self) -> None:
        """Test omitted fields fall back to configured defaults."""
        request = SynthesisRequest.from_params({"text": "Hello"}, DEFAULTS)

        assert request.text == "Hello"
        assert request.voice_id == DEFAULTS.voice_id
        assert request.model_id == DEFAULTS.model_id
        assert request.settings == VoiceSettings(
            stability=0.4, similarity_boost=0.85, style=0.0, use_speaker_boost=True
        )

    def test_string_params_are_parsed(self) -> None:
        """Test query-string style values are converted."""
        request = SynthesisRequest.from_params(
            {
                "text": "Hello",
                "voice": "abc",
                "model": "eleven_turbo_v2_5",
                "stability": "0.6",
                "similarity": "0.5",
                "style": "0.2",
                "use_speaker_boost": "false",
            },
            DEFAULTS,
        )

        assert request.voice_id == "abc"
        assert request.model_id == "eleven_turbo_v2_5"
        assert request.settings.stability == 0.6
        assert request.settings.similarity_boost == 0.5
        assert request.settings.style == 0.2
        assert request.settings.use_speaker_boost is False

    def test_text_is_stripped(self) -> None:
        """Test surrounding whitespace is removed from text."""
        request = SynthesisRequest.from_params({"text": "  Hello  "}, DEFAULTS)

        assert request.text == "Hello"

    @pytest.mark.parametrize("text", [None, "", "   ", "\n\t"])
    def test_blank_text_raises(self, text) -> None:
        """Test missing or whitespace-only text is rejected."""
        with pytest.raises(InputValidationError, match="No text provided"):
            SynthesisRequest.from_params({"text": text}, DEFAULTS)

    def test_non_numeric_stability_raises(self) -> None:
        """Test unparseable numbers are input errors."""
        with pytest.raises(InputValidationError, match="stability must be a number"):
            SynthesisRequest.from_params({"text": "hi", "stability": "high"}, DEFAULTS)

    def test_out_of_range_setting_raises_input_error(self) -> None:
        """Test range violations surface as input errors, not ValueError only."""
        with pytest.raises(InputValidationError, match="style must be between"):
            SynthesisRequest.from_params({"text": "hi", "style": 3}, DEFAULTS)

    def test_invalid_boolean_raises(self) -> None:
        """Test unknown boolean spellings are rejected."""
        with pytest.raises(InputValidationError, match="use_speaker_boost"):
            SynthesisRequest.from_params(
                {"text": "hi", "use_speaker_boost": "maybe"}, DEFAULTS
            )

    def test_input_error_is_value_error(self) -> None:
        """Test InputValidationError can be caught as ValueError."""
        assert issubclass(InputValidationError, ValueError)
