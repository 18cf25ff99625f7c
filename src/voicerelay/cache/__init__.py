"""Bounded in-memory audio cache for voicerelay."""

from .keys import cache_key
from .manager import DEFAULT_CAPACITY, AudioCache
from .models import CacheEntry

__all__ = ["DEFAULT_CAPACITY", "AudioCache", "CacheEntry", "cache_key"]
