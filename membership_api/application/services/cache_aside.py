"""Cache-aside store: get-or-compute with TTL and explicit invalidation.

Only successful results are written. A missing or disconnected cache, or one
raising CacheException, behaves as a miss on read, and a failed write is
logged without failing the caller. Concurrent misses on one key are not
deduplicated; the last write wins.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, TypeVar

from membership_api.domain.exceptions import CacheException
from membership_api.infrastructure.cache.cache_protocol import CacheProtocol

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CacheAsideStore:
    """Wrap a CacheProtocol backend (None disables caching)."""

    def __init__(self, cache: CacheProtocol | None) -> None:
        self._cache = cache

    async def _read(self, key: str) -> Any:
        if self._cache is None:
            return None
        try:
            return await self._cache.get(key)
        except CacheException as e:
            logger.warning("Cache read failed, falling back to upstream: %s", e.message)
            return None

    async def _write(self, key: str, value: object, ttl_seconds: int) -> None:
        if self._cache is None:
            return
        try:
            stored = await self._cache.set(key, value, ttl=ttl_seconds)
        except CacheException as e:
            logger.warning("Cache write failed: %s", e.message)
            return
        if not stored:
            logger.warning("Cache write skipped for %s (cache unavailable)", key)

    async def get_or_compute(
        self,
        key: str,
        ttl_seconds: int,
        compute: Callable[[], Awaitable[T]],
    ) -> T:
        """Return the cached value for key, or compute, store and return it.

        compute is not invoked on a hit. If compute raises, the exception
        propagates and nothing is cached.
        """
        cached = await self._read(key)
        if cached is not None:
            logger.info("Cache hit: %s", key)
            return cached
        logger.info("Cache miss: %s, fetching upstream", key)
        value = await compute()
        await self._write(key, value, ttl_seconds)
        return value

    async def invalidate(self, key: str) -> bool:
        """Delete key. Idempotent; returns False only if the cache could not be reached."""
        if self._cache is None:
            return True
        try:
            deleted = await self._cache.delete(key)
        except CacheException as e:
            logger.error("Cache invalidation failed: %s", e.message)
            return False
        if not deleted:
            logger.error("Cache invalidation failed for %s (cache unavailable)", key)
        return deleted
