"""Abstract base class for text-to-speech providers.

This module defines the interface that all TTS providers must implement,
ensuring consistent behavior across different TTS backends.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from ..tts.models import VoiceInfo, VoiceSettings


class TTSProvider(ABC):
    """Abstract base class for text-to-speech providers.

    All TTS providers must inherit from this class and implement
    whole-clip synthesis, streaming synthesis and voice listing.
    """

    name: str = "base"

    @abstractmethod
    async def synthesize(
        self,
        text: str,
        voice: str,
        model_id: str,
        settings: VoiceSettings | None = None,
    ) -> bytes:
        """Convert text to audio bytes.

        Args:
            text: The text to convert to speech
            voice: Voice ID to use for synthesis
            model_id: Provider model identifier
            settings: Optional voice settings

        Returns:
            Audio data as bytes (MP3)

        Raises:
            TTSError: If synthesis fails
        """
        pass

    @abstractmethod
    def stream(
        self,
        text: str,
        voice: str,
        model_id: str,
        settings: VoiceSettings | None = None,
    ) -> AsyncIterator[bytes]:
        """Yield audio chunks as the provider produces them.

        Raises:
            TTSError: If synthesis fails, possibly after some chunks
        """
        pass

    @abstractmethod
    async def list_voices(self) -> list[VoiceInfo]:
        """Return available voices for this provider.

        Raises:
            TTSError: If voice listing fails
        """
        pass
