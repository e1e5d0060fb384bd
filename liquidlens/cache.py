"""
Humanize Result Cache

In-memory TTL cache for /humanize responses.
Key = SHA-256(text + display mode + catalog version).

A catalog reload bumps the version, so entries built against the old
catalog are never served again; they age out or get evicted.

Usage:
    from liquidlens.cache import humanize_cache
    cached = await humanize_cache.get(text, mode, version)
    if cached:
        return cached
    result = ...
    await humanize_cache.put(text, mode, version, result)
"""

from __future__ import annotations

import asyncio
import hashlib
import time
from typing import Optional

from liquidlens.config import settings


class HumanizeCache:
    """asyncio-locked in-memory cache with TTL eviction."""

    def __init__(self, ttl_seconds: int = 3600, max_entries: int = 500):
        self._cache: dict[str, tuple[float, dict]] = {}
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._lock = asyncio.Lock()
        self._hits = 0
        self._misses = 0

    @staticmethod
    def _make_key(text: str, mode: str, catalog_version: int) -> str:
        raw = f"{text}||{mode}||{catalog_version}"
        return hashlib.sha256(raw.encode()).hexdigest()

    async def get(self, text: str, mode: str, catalog_version: int) -> Optional[dict]:
        """Cached result if present and fresh, marked with cached=True."""
        key = self._make_key(text, mode, catalog_version)
        async with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                self._misses += 1
                return None

            ts, result = entry
            if time.monotonic() - ts > self._ttl:
                del self._cache[key]
                self._misses += 1
                return None

            self._hits += 1
            return {**result, "cached": True}

    async def put(self, text: str, mode: str, catalog_version: int, result: dict) -> None:
        key = self._make_key(text, mode, catalog_version)
        async with self._lock:
            if key not in self._cache and len(self._cache) >= self._max_entries:
                oldest_key = min(self._cache, key=lambda k: self._cache[k][0])
                del self._cache[oldest_key]
            self._cache[key] = (time.monotonic(), result)

    async def clear(self) -> None:
        async with self._lock:
            self._cache.clear()

    @property
    def stats(self) -> dict:
        total = self._hits + self._misses
        return {
            "entries": len(self._cache),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total, 3) if total > 0 else 0.0,
        }


humanize_cache = HumanizeCache(
    ttl_seconds=settings.CACHE_TTL,
    max_entries=settings.CACHE_MAX_ENTRIES,
)
