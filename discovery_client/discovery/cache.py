"""
TTL caching for endpoint directories.

Wraps any directory so repeated resolutions of the same service within the
TTL window are served from memory instead of the backing directory.
"""

import asyncio
import builtins
import logging
import time

from .core import Endpoint, EndpointDirectory

logger = logging.getLogger(__name__)


class CacheEntry:
    """Cached resolution result for one service."""

    def __init__(self, endpoints: builtins.list[Endpoint], ttl: float):
        self.endpoints = endpoints
        self.created_at = time.monotonic()
        self.ttl = ttl
        self.last_accessed = self.created_at
        self.access_count = 0

    def is_expired(self) -> bool:
        """Check if cache entry is expired."""
        return time.monotonic() - self.created_at > self.ttl

    def access(self) -> builtins.list[Endpoint]:
        """Access cache entry and update statistics."""
        self.last_accessed = time.monotonic()
        self.access_count += 1
        return self.endpoints.copy()


class CachingEndpointDirectory(EndpointDirectory):
    """Endpoint directory decorator with a TTL cache and LRU eviction.

    Errors from the backing directory are never cached.
    """

    def __init__(
        self, directory: EndpointDirectory, ttl: float = 30.0, max_size: int = 1000
    ):
        self.directory = directory
        self.ttl = ttl
        self.max_size = max_size
        self._cache: builtins.dict[str, CacheEntry] = {}
        self._lock = asyncio.Lock()
        self._stats = {"hits": 0, "misses": 0, "evictions": 0}

    async def resolve(self, service_name: str) -> builtins.list[Endpoint]:
        async with self._lock:
            entry = self._cache.get(service_name)
            if entry and not entry.is_expired():
                self._stats["hits"] += 1
                return entry.access()
            if entry:
                del self._cache[service_name]
            self._stats["misses"] += 1

        endpoints = await self.directory.resolve(service_name)

        async with self._lock:
            if service_name not in self._cache and len(self._cache) >= self.max_size:
                self._evict_lru()
            self._cache[service_name] = CacheEntry(list(endpoints), self.ttl)

        return list(endpoints)

    def _evict_lru(self) -> None:
        """Evict least recently used cache entry."""
        if not self._cache:
            return

        lru_key = min(self._cache, key=lambda k: self._cache[k].last_accessed)
        del self._cache[lru_key]
        self._stats["evictions"] += 1

    async def invalidate(self, service_name: str) -> None:
        """Invalidate the cache entry for a service."""
        async with self._lock:
            self._cache.pop(service_name, None)

    async def clear(self) -> None:
        """Clear all cache entries."""
        async with self._lock:
            self._cache.clear()

    def get_stats(self) -> builtins.dict[str, float | int]:
        """Get cache statistics."""
        total_requests = self._stats["hits"] + self._stats["misses"]
        hit_rate = self._stats["hits"] / total_requests if total_requests > 0 else 0.0

        return {
            **self._stats,
            "total_requests": total_requests,
            "hit_rate": hit_rate,
            "cache_size": len(self._cache),
        }
