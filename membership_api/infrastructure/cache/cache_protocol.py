"""Cache protocol for the cache-aside store (DIP)."""

from typing import Any, Protocol


class CacheProtocol(Protocol):
    """Protocol for cache backends (e.g. Redis). Used by CacheAsideStore.

    Backend failures are raised as CacheException; a backend that is simply
    not connected reports it through the return values instead.
    """

    def is_available(self) -> bool:
        """Return True if cache is connected and usable."""
        ...

    async def get(self, key: str) -> Any:
        """Return cached value or None."""
        ...

    async def set(self, key: str, value: Any, ttl: int) -> bool:
        """Store value with TTL in seconds. Returns False if not connected."""
        ...

    async def delete(self, key: str) -> bool:
        """Remove key from cache. Returns False if not connected."""
        ...
