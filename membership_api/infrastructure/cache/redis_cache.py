"""Redis-backed cache for upstream project, group and member lists.

Values are stored as JSON under keys from
membership_api.infrastructure.cache.keys, each with its own TTL.

A service that never connected (Redis disabled, or down at startup) is a
no-op: reads miss, writes and deletes return False. Once connected, a
command that fails is retried once after a reconnect; a failure that
persists raises CacheException, which the cache-aside store turns into a
miss or a logged write failure.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable, TypeVar

import redis.asyncio as redis

from membership_api.core.config import Settings, get_settings
from membership_api.core.constants import DEFAULT_CACHE_TTL_SECONDS
from membership_api.domain.exceptions import CacheException

logger = logging.getLogger(__name__)

T = TypeVar("T")

_RETRYABLE = (redis.ConnectionError, redis.TimeoutError)


class CacheService:
    """Async Redis cache with per-key TTL.

    Call connect() at startup and disconnect() at shutdown. A client passed
    in (tests, DI) is treated as already connected.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.redis = redis_client
        self.settings = settings or get_settings()
        self._connected = redis_client is not None

    async def connect(self) -> None:
        """Open the Redis connection; on failure the service stays disconnected."""
        if self.redis is not None:
            return
        password = self.settings.redis_password
        client = redis.Redis(
            host=self.settings.redis_host,
            port=self.settings.redis_port,
            db=self.settings.redis_db,
            password=password.get_secret_value() if password else None,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_keepalive=True,
        )
        try:
            await client.ping()
        except _RETRYABLE as e:
            logger.warning(
                "Redis connection failed: %s. Cache disabled, every read goes upstream.", e
            )
            await client.aclose()
            return
        self.redis = client
        self._connected = True
        logger.info(
            "Redis cache connected: %s:%s", self.settings.redis_host, self.settings.redis_port
        )

    async def disconnect(self) -> None:
        """Close the Redis connection. Call on app shutdown."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            self._connected = False
            logger.info("Redis cache disconnected")

    async def _reconnect(self) -> bool:
        """Drop the current client and connect again. Returns True if connected."""
        if self.redis is not None:
            try:
                await self.redis.aclose()
            except redis.RedisError:
                logger.debug("Ignoring error while closing stale Redis client")
        self.redis = None
        self._connected = False
        await self.connect()
        return self._connected

    async def _run(
        self, operation: str, key: str, command: Callable[[redis.Redis], Awaitable[T]]
    ) -> T:
        """Run command against the client, reconnecting once on connection loss.

        Raises:
            CacheException: the command failed and the retry (if any) did too.
        """
        try:
            return await command(self.redis)
        except _RETRYABLE as e:
            logger.warning("Cache %s for %s lost connection (%s), reconnecting", operation, key, e)
            if not await self._reconnect():
                raise CacheException(operation, key, f"Redis unreachable: {e}") from e
        except redis.RedisError as e:
            raise CacheException(operation, key, str(e)) from e
        try:
            return await command(self.redis)
        except redis.RedisError as e:
            raise CacheException(operation, key, f"failed after reconnect: {e}") from e

    def is_available(self) -> bool:
        """Return True if Redis is connected and usable."""
        return self._connected and self.redis is not None

    async def ping(self) -> bool:
        """Return True if Redis answers PING (readiness check)."""
        if not self.is_available() or self.redis is None:
            return False
        try:
            return bool(await self.redis.ping())
        except redis.RedisError:
            logger.warning("Redis ping failed")
            return False

    async def get(self, key: str) -> Any | None:
        """Return the JSON-decoded value for key, or None when missing.

        A value that is not valid JSON is logged and treated as missing.

        Raises:
            CacheException: Redis failed after one reconnect.
        """
        if not self.is_available():
            return None
        raw = await self._run("get", key, lambda client: client.get(key))
        if raw is None:
            logger.debug("Cache MISS: %s", key)
            return None
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Cache value for key %s is not valid JSON; treating as miss", key)
            return None
        logger.debug("Cache HIT: %s", key)
        return value

    async def set(self, key: str, value: Any, ttl: int = DEFAULT_CACHE_TTL_SECONDS) -> bool:
        """Store value as JSON with TTL in seconds.

        Returns False when the service is not connected.

        Raises:
            CacheException: Redis failed after one reconnect.
        """
        if not self.is_available():
            return False
        serialized = json.dumps(value)
        await self._run("set", key, lambda client: client.setex(key, ttl, serialized))
        logger.debug("Cache SET: %s (TTL: %ss)", key, ttl)
        return True

    async def delete(self, key: str) -> bool:
        """Remove key. Deleting a missing key still returns True.

        Returns False when the service is not connected.

        Raises:
            CacheException: Redis failed after one reconnect.
        """
        if not self.is_available():
            return False
        await self._run("delete", key, lambda client: client.delete(key))
        logger.debug("Cache DELETE: %s", key)
        return True
