"""TTS pipeline orchestrator for voicerelay.

Coordinates the synthesis provider and the audio cache so HTTP handlers
only deal with request parsing and response shaping.
"""

import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass

from ..cache.keys import cache_key
from ..cache.manager import AudioCache
from ..providers.base import TTSProvider
from .models import SynthesisRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SynthesisResult:
    """Audio produced for a request plus where it came from."""

    audio: bytes
    key: str
    cached: bool


class TTSPipeline:
    """Orchestrates cached synthesis and uncached streaming.

    Example:
        pipeline = TTSPipeline(provider=ElevenLabsProvider(), cache=AudioCache())

        result = await pipeline.synthesize(request)
        # First call: SynthesisResult(audio=..., cached=False)
        result = await pipeline.synthesize(request)
        # Identical request: served from cache, no upstream call
    """

    def __init__(self, provider: TTSProvider, cache: AudioCache) -> None:
        self.provider = provider
        self.cache = cache

    async def synthesize(self, request: SynthesisRequest) -> SynthesisResult:
        """Return audio for a request, calling the provider only on a miss.

        Raises:
            TTSError: If the provider fails; nothing is cached in that case
        """
        key = cache_key(request)
        cached = key in self.cache

        async def _fetch() -> bytes:
            logger.info(
                f"Synthesizing {len(request.text)} chars "
                f"(voice: {request.voice_id}, model: {request.model_id})"
            )
            return await self.provider.synthesize(
                request.text,
                request.voice_id,
                request.model_id,
                request.settings,
            )

        audio = await self.cache.get_or_fetch(key, _fetch)
        return SynthesisResult(audio=audio, key=key, cached=cached)

    def stream(self, request: SynthesisRequest) -> AsyncIterator[bytes]:
        """Stream audio straight from the provider, bypassing the cache."""
        logger.info(
            f"Streaming {len(request.text)} chars (voice: {request.voice_id})"
        )
        return self.provider.stream(
            request.text,
            request.voice_id,
            request.model_id,
            request.settings,
        )
