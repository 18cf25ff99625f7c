"""Data models for cache storage."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class CacheEntry:
    """Cached synthesis result.

    Attributes:
        audio: Audio payload as returned by the provider, never mutated
        created_at: When this entry was stored
    """

    audio: bytes
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def size(self) -> int:
        return len(self.audio)
