"""
LinkGuard Cache Tests

Tests for the null, in-memory and Redis cache adapters.
"""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from linkguard.services.cache import MemoryCacheAdapter, NullCacheAdapter, RedisCacheAdapter
from linkguard.utils.exceptions import CacheError
from linkguard.utils.helpers import generate_cache_key


class TestNullCacheAdapter:
    """Tests for the no-op cache."""

    def test_always_misses(self):
        cache = NullCacheAdapter()

        async def run():
            assert await cache.set("key", {"a": 1}, 60) is True
            assert await cache.get("key") is None
            assert await cache.get("key", "fallback") == "fallback"
            assert await cache.has("key") is False
            assert await cache.get_many(["a", "b"]) == {"a": None, "b": None}
            assert await cache.delete("key") is True
            assert await cache.clear() is True

        asyncio.run(run())


class TestMemoryCacheAdapter:
    """Tests for the in-process cache."""

    def test_set_and_get(self, memory_cache):
        async def run():
            assert await memory_cache.set("key", {"url": "http://example.com"}, 60)
            assert await memory_cache.get("key") == {"url": "http://example.com"}
            assert await memory_cache.has("key")
            assert await memory_cache.get("missing", "default") == "default"

        asyncio.run(run())

    def test_entries_expire(self, memory_cache, clock):
        """Test an entry is gone once its TTL has elapsed."""
        async def run():
            await memory_cache.set("key", "value", 60)

            clock.advance(59)
            assert await memory_cache.get("key") == "value"

            clock.advance(1)
            assert await memory_cache.get("key") is None
            assert len(memory_cache) == 0

        asyncio.run(run())

    def test_no_ttl_never_expires(self, memory_cache, clock):
        async def run():
            await memory_cache.set("key", "value")
            clock.advance(10 ** 9)
            assert await memory_cache.get("key") == "value"

        asyncio.run(run())

    def test_delete_and_clear(self, memory_cache):
        async def run():
            await memory_cache.set("a", 1)
            await memory_cache.set("b", 2)

            assert await memory_cache.delete("a") is True
            assert await memory_cache.delete("a") is False

            await memory_cache.clear()
            assert len(memory_cache) == 0

        asyncio.run(run())

    def test_multi_key_operations(self, memory_cache):
        async def run():
            assert await memory_cache.set_many({"a": 1, "b": 2}, 60)
            assert await memory_cache.get_many(["a", "b", "c"], 0) == {"a": 1, "b": 2, "c": 0}

            await memory_cache.delete_many(["a", "b"])
            assert await memory_cache.get_many(["a", "b"]) == {"a": None, "b": None}

        asyncio.run(run())


def create_redis_client():
    """Create a mock redis.asyncio client."""
    client = MagicMock()
    client.get = AsyncMock(return_value=None)
    client.set = AsyncMock(return_value=True)
    client.setex = AsyncMock(return_value=True)
    client.delete = AsyncMock(return_value=1)
    client.exists = AsyncMock(return_value=0)
    client.aclose = AsyncMock()
    return client


class TestRedisCacheAdapter:
    """Tests for the Redis cache with a mocked client."""

    def test_get_decodes_json(self):
        client = create_redis_client()
        client.get.return_value = json.dumps({"url": "http://example.com"})
        cache = RedisCacheAdapter(client)

        value = asyncio.run(cache.get("key"))

        assert value == {"url": "http://example.com"}
        client.get.assert_awaited_once_with("linkguard:key")

    def test_get_miss_returns_default(self):
        cache = RedisCacheAdapter(create_redis_client())

        assert asyncio.run(cache.get("key", "default")) == "default"

    def test_checker_keys_are_not_prefixed_twice(self):
        client = create_redis_client()
        cache = RedisCacheAdapter(client)
        key = generate_cache_key("virustotal", "example.com")

        asyncio.run(cache.get(key))

        client.get.assert_awaited_once_with(key)

    def test_set_with_ttl_uses_setex(self):
        client = create_redis_client()
        cache = RedisCacheAdapter(client)

        assert asyncio.run(cache.set("key", {"a": 1}, 3600)) is True

        client.setex.assert_awaited_once_with("linkguard:key", 3600, json.dumps({"a": 1}))
        client.set.assert_not_called()

    def test_set_without_ttl_never_expires(self):
        client = create_redis_client()
        cache = RedisCacheAdapter(client)

        asyncio.run(cache.set("key", [1, 2]))

        client.set.assert_awaited_once_with("linkguard:key", json.dumps([1, 2]))
        client.setex.assert_not_called()

    def test_redis_errors_become_cache_errors(self):
        client = create_redis_client()
        client.get.side_effect = RedisConnectionError("connection refused")
        client.setex.side_effect = RedisConnectionError("connection refused")
        cache = RedisCacheAdapter(client)

        with pytest.raises(CacheError):
            asyncio.run(cache.get("key"))
        with pytest.raises(CacheError):
            asyncio.run(cache.set("key", 1, 60))

    def test_corrupted_entry(self):
        client = create_redis_client()
        client.get.return_value = "{not json"
        cache = RedisCacheAdapter(client)

        with pytest.raises(CacheError):
            asyncio.run(cache.get("key"))

    def test_unserializable_value(self):
        cache = RedisCacheAdapter(create_redis_client())

        with pytest.raises(CacheError):
            asyncio.run(cache.set("key", object(), 60))

    def test_delete_and_has(self):
        client = create_redis_client()
        client.exists.return_value = 1
        cache = RedisCacheAdapter(client)

        assert asyncio.run(cache.delete("key")) is True
        assert asyncio.run(cache.has("key")) is True
        client.exists.assert_awaited_once_with("linkguard:key")

    def test_clear_removes_prefixed_keys(self):
        client = create_redis_client()
        patterns = []

        async def scan_iter(match):
            patterns.append(match)
            for key in ("linkguard:a", "linkguard:b"):
                yield key

        client.scan_iter = scan_iter
        cache = RedisCacheAdapter(client)

        assert asyncio.run(cache.clear()) is True
        assert patterns == ["linkguard:*"]
        client.delete.assert_awaited_once_with("linkguard:a", "linkguard:b")

    def test_close(self):
        client = create_redis_client()

        asyncio.run(RedisCacheAdapter(client).close())

        client.aclose.assert_awaited_once()
