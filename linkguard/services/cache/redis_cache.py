"""
LinkGuard Redis Cache

Shared cache backed by Redis, for deployments running several checkers.
"""

import json
import logging
from typing import Any, Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from linkguard.utils.constants import CACHE_KEY_PREFIX
from linkguard.utils.exceptions import CacheError

from .base import CacheAdapter

logger = logging.getLogger(__name__)


class RedisCacheAdapter(CacheAdapter):
    """
    Redis-backed cache.

    Values are stored as JSON under ``<prefix>:<key>``. Writes with a TTL use
    SETEX; writes with ``ttl=None`` use SET and never expire.
    Redis failures are raised as ``CacheError``.
    """

    def __init__(self, client: aioredis.Redis, prefix: str = CACHE_KEY_PREFIX):
        self.client = client
        self.prefix = prefix

    @classmethod
    def from_url(cls, redis_url: str, prefix: str = CACHE_KEY_PREFIX) -> "RedisCacheAdapter":
        client = aioredis.from_url(
            redis_url,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
        )
        return cls(client, prefix=prefix)

    def _prefixed(self, key: str) -> str:
        # checker keys already carry the prefix
        if key.startswith(f"{self.prefix}:"):
            return key
        return f"{self.prefix}:{key}"

    async def get(self, key: str, default: Any = None) -> Any:
        try:
            data = await self.client.get(self._prefixed(key))
        except RedisError as e:
            raise CacheError(f"Redis get failed for {key}: {e}") from e

        if data is None:
            return default

        try:
            return json.loads(data)
        except ValueError as e:
            raise CacheError(f"Corrupted cache entry for {key}: {e}") from e

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise CacheError(f"Value for {key} is not JSON serializable: {e}") from e

        try:
            if ttl is None:
                result = await self.client.set(self._prefixed(key), payload)
            else:
                result = await self.client.setex(self._prefixed(key), ttl, payload)
        except RedisError as e:
            raise CacheError(f"Redis set failed for {key}: {e}") from e

        logger.debug(f"Cache set: {key} (TTL: {ttl}s)")
        return bool(result)

    async def delete(self, key: str) -> bool:
        try:
            result = await self.client.delete(self._prefixed(key))
        except RedisError as e:
            raise CacheError(f"Redis delete failed for {key}: {e}") from e
        return int(result) > 0

    async def has(self, key: str) -> bool:
        try:
            result = await self.client.exists(self._prefixed(key))
        except RedisError as e:
            raise CacheError(f"Redis exists failed for {key}: {e}") from e
        return int(result) > 0

    async def clear(self) -> bool:
        try:
            keys = [key async for key in self.client.scan_iter(match=f"{self.prefix}:*")]
            if keys:
                await self.client.delete(*keys)
        except RedisError as e:
            raise CacheError(f"Redis clear failed: {e}") from e
        return True

    async def close(self) -> None:
        await self.client.aclose()
