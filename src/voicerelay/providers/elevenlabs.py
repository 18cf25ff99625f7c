"""ElevenLabs text-to-speech provider implementation."""

import asyncio
import json
import logging
import os
from collections.abc import AsyncIterator

import httpx
from elevenlabs.client import ElevenLabs

from ..config import DEFAULT_MODEL_ID
from ..tts.errors import TTSAPIError, TTSAuthError, TTSError, TTSTimeoutError
from ..tts.models import VoiceInfo, VoiceSettings
from .base import TTSProvider

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def _error_detail(error: Exception) -> str:
    """Return the upstream error body verbatim when the SDK exposes one."""
    body = getattr(error, "body", None)
    if body is None:
        return str(error)
    if isinstance(body, (dict, list)):
        return json.dumps(body)
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    return str(body)


class ElevenLabsProvider(TTSProvider):
    """ElevenLabs TTS provider implementation.

    Wraps the synchronous ElevenLabs SDK client; every call runs in a worker
    thread so the event loop keeps serving other requests, and every call is
    bounded by the client timeout.
    """

    name = "elevenlabs"

    def __init__(
        self, api_key: str | None = None, timeout: float | None = None
    ) -> None:
        """Initialize ElevenLabs provider.

        Args:
            api_key: ElevenLabs API key. If not provided, reads from
                    ELEVEN_API_KEY or ELEVENLABS_API_KEY environment variable.
            timeout: Seconds before an upstream call is abandoned

        Raises:
            TTSAuthError: If API key is not provided or invalid.
        """
        self._api_key = (
            api_key or os.getenv("ELEVEN_API_KEY") or os.getenv("ELEVENLABS_API_KEY")
        )
        if not self._api_key:
            raise TTSAuthError(
                "ElevenLabs API key not found. Set ELEVEN_API_KEY environment "
                "variable or provide api_key parameter."
            )

        self._timeout = timeout if timeout is not None else DEFAULT_TIMEOUT

        try:
            self._client = ElevenLabs(api_key=self._api_key, timeout=self._timeout)
        except Exception as e:
            raise TTSAuthError(f"Failed to initialize ElevenLabs client: {e}") from e

        # Cache for voices to avoid repeated API calls
        self._voices_cache: list[VoiceInfo] | None = None

    def _translate_error(self, error: Exception, action: str) -> TTSError:
        """Map an SDK or transport exception onto the TTS error hierarchy."""
        if isinstance(error, TTSError):
            return error
        if isinstance(error, httpx.TimeoutException):
            return TTSTimeoutError(
                f"{action} timed out after {self._timeout}s", None, error
            )

        message = str(error)
        status_code = getattr(error, "status_code", None)
        detail = _error_detail(error)

        if status_code == 401 or "unauthorized" in message.lower() or "401" in message:
            return TTSAuthError(f"Authentication failed: {detail}", error)
        if status_code == 429 or "429" in message:
            return TTSAPIError(f"Rate limit exceeded: {detail}", 429, error, detail)
        if (status_code is not None and status_code >= 500) or message[:1] == "5":
            return TTSAPIError(f"Server error: {detail}", status_code, error, detail)
        return TTSAPIError(f"{action} failed: {detail}", status_code, error, detail)

    async def _resolve_voice(self, voice: str) -> str:
        if voice:
            return voice
        voices = await self.list_voices()
        if not voices:
            raise TTSAPIError("No voices available")
        return voices[0].voice_id

    async def synthesize(
        self,
        text: str,
        voice: str,
        model_id: str = DEFAULT_MODEL_ID,
        settings: VoiceSettings | None = None,
    ) -> bytes:
        """Convert text to speech audio bytes.

        Args:
            text: Text to convert to speech
            voice: Voice ID to use for synthesis
            model_id: ElevenLabs model ID to use
            settings: Voice settings, provider defaults when omitted

        Returns:
            Audio data as bytes (MP3 format)

        Raises:
            TTSAPIError: If API call fails
            TTSTimeoutError: If the API does not answer within the timeout
            TTSAuthError: If authentication fails
            ValueError: If text is empty
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")

        voice = await self._resolve_voice(voice)
        settings = settings or VoiceSettings()

        def _sync_convert() -> bytes:
            audio_generator = self._client.text_to_speech.convert(
                voice_id=voice,
                text=text.strip(),
                model_id=model_id,
                voice_settings=settings.to_dict(),
            )
            # Collect all audio chunks
            return b"".join(audio_generator)

        try:
            audio_bytes = await asyncio.to_thread(_sync_convert)
        except Exception as e:
            raise self._translate_error(e, "API call") from e

        if not audio_bytes:
            raise TTSAPIError("No audio data received from API")

        logger.debug(f"Synthesized {len(audio_bytes)} bytes with voice {voice}")
        return audio_bytes

    async def stream(
        self,
        text: str,
        voice: str,
        model_id: str = DEFAULT_MODEL_ID,
        settings: VoiceSettings | None = None,
    ) -> AsyncIterator[bytes]:
        """Yield audio chunks from the ElevenLabs streaming endpoint.

        The SDK issues the request lazily, so upstream failures surface when
        the first chunk is pulled.

        Raises:
            TTSAPIError: If API call fails
            TTSTimeoutError: If the API stalls past the timeout
            ValueError: If text is empty
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")

        voice = await self._resolve_voice(voice)
        settings = settings or VoiceSettings()

        def _sync_open():
            return iter(
                self._client.text_to_speech.stream(
                    voice_id=voice,
                    text=text.strip(),
                    model_id=model_id,
                    voice_settings=settings.to_dict(),
                )
            )

        try:
            chunks = await asyncio.to_thread(_sync_open)
            while True:
                chunk = await asyncio.to_thread(next, chunks, None)
                if chunk is None:
                    break
                if chunk:
                    yield chunk
        except Exception as e:
            raise self._translate_error(e, "Streaming") from e

    async def list_voices(self) -> list[VoiceInfo]:
        """Get list of available voices.

        Results are cached after first call to avoid repeated API requests.

        Returns:
            List of VoiceInfo objects

        Raises:
            TTSAPIError: If API call fails
            TTSAuthError: If authentication fails
        """
        if self._voices_cache is not None:
            return self._voices_cache

        def _sync_get_voices() -> list[VoiceInfo]:
            response = self._client.voices.get_all()
            return [
                VoiceInfo(
                    voice_id=voice.voice_id,
                    name=voice.name,
                    provider=self.name,
                    category=getattr(voice, "category", None),
                    description=getattr(voice, "description", None),
                )
                for voice in response.voices
            ]

        try:
            voices = await asyncio.to_thread(_sync_get_voices)
        except Exception as e:
            raise self._translate_error(e, "Voice listing") from e

        self._voices_cache = voices
        return voices
