"""Bounded LRU cache for synthesized audio.

Keeps the most recently used clips in process memory so repeated identical
requests never trigger a second paid upstream call. The cache is volatile:
it starts empty and is discarded with the process.
"""

import asyncio
import logging
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from typing import Any

from .models import CacheEntry

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 150


class AudioCache:
    """In-memory audio cache with a fixed entry budget.

    Entries are ordered by recency: ``put`` and a ``get`` hit both make a key
    the most recently used, and the least recently used key is evicted once
    the entry count would exceed ``capacity``.

    Example:
        cache = AudioCache(capacity=150)

        audio = await cache.get_or_fetch(
            key, lambda: provider.synthesize(text, voice)
        )
        # First call fetches and stores, later calls return the stored bytes
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY, coalesce: bool = True):
        """Initialize an empty cache.

        Args:
            capacity: Maximum number of entries kept at once
            coalesce: Share one in-flight fetch between concurrent misses
                for the same key

        Raises:
            ValueError: If capacity is less than 1
        """
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")

        self.capacity = capacity
        self.coalesce = coalesce
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._inflight: dict[str, asyncio.Future[bytes]] = {}

        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        # Membership test only, recency is left untouched
        return key in self._entries

    def get(self, key: str) -> bytes | None:
        """Return cached audio for an exact key match.

        A hit refreshes the key's recency. Never changes the entry count.

        Args:
            key: Cache key from ``cache_key``

        Returns:
            Audio bytes, or None on a miss
        """
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            logger.debug(f"Cache miss: {key[:12]}")
            return None

        self._entries.move_to_end(key)
        self.hits += 1
        logger.debug(f"Cache hit: {key[:12]} ({entry.size} bytes)")
        return entry.audio

    def put(self, key: str, audio: bytes) -> None:
        """Insert or replace the audio stored under ``key``.

        If the insert takes the cache over capacity, exactly one entry, the
        least recently used, is evicted before returning.

        Args:
            key: Cache key from ``cache_key``
            audio: Audio payload to store
        """
        self._entries[key] = CacheEntry(audio=bytes(audio))
        self._entries.move_to_end(key)

        if len(self._entries) > self.capacity:
            evicted_key, evicted = self._entries.popitem(last=False)
            self.evictions += 1
            logger.info(
                f"Evicted {evicted_key[:12]} ({evicted.size} bytes), "
                f"cache at capacity {self.capacity}"
            )

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> dict[str, Any]:
        """Return counters for health reporting."""
        return {
            "size": len(self._entries),
            "capacity": self.capacity,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "inflight": len(self._inflight),
        }

    async def get_or_fetch(
        self, key: str, fetch: Callable[[], Awaitable[bytes]]
    ) -> bytes:
        """Return cached audio, fetching and storing it on a miss.

        Nothing is stored when ``fetch`` fails; the error propagates to the
        caller. With ``coalesce`` enabled, callers that miss on a key while a
        fetch for it is already running wait for that fetch instead of
        starting their own.

        Args:
            key: Cache key from ``cache_key``
            fetch: Zero-argument coroutine factory producing the audio

        Returns:
            Audio bytes

        Raises:
            Exception: Whatever ``fetch`` raised
        """
        audio = self.get(key)
        if audio is not None:
            return audio

        if not self.coalesce:
            audio = await fetch()
            self.put(key, audio)
            return audio

        pending = self._inflight.get(key)
        if pending is not None:
            logger.debug(f"Joining in-flight fetch for {key[:12]}")
            try:
                return await asyncio.shield(pending)
            except asyncio.CancelledError:
                task = asyncio.current_task()
                if not pending.cancelled() or (task is not None and task.cancelling()):
                    raise
                # The leading caller was cancelled, not this one
                logger.debug(f"In-flight fetch for {key[:12]} cancelled, retrying")
                return await self.get_or_fetch(key, fetch)

        future: asyncio.Future[bytes] = asyncio.get_running_loop().create_future()
        self._inflight[key] = future
        try:
            audio = await fetch()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            future.set_exception(e)
            # Mark retrieved so an unawaited future does not log a warning
            future.exception()
            raise
        else:
            self.put(key, audio)
            future.set_result(audio)
            return audio
        finally:
            self._inflight.pop(key, None)
