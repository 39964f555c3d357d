"""
LinkGuard Cache Adapters

Abstract cache contract plus the no-op adapter used when caching is off.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Mapping, Optional


class CacheAdapter(ABC):
    """
    Async key/value store used to memoize provider verdicts.

    Multi-key operations apply the single-key operation to each key
    independently; there is no atomicity across keys.

    Implementations raise ``CacheError`` when the backing store fails. The
    checker treats any read error as a miss and logs write errors.
    """

    @abstractmethod
    async def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value, or ``default`` on a miss."""
        pass

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Store a value for ``ttl`` seconds (``None``: never expires)."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove a key. Returns True if the store reports success."""
        pass

    @abstractmethod
    async def clear(self) -> bool:
        """Remove every entry owned by this adapter."""
        pass

    async def close(self) -> None:
        """Release connections held by the adapter."""
        pass

    async def has(self, key: str) -> bool:
        sentinel = object()
        return (await self.get(key, sentinel)) is not sentinel

    async def get_many(self, keys: Iterable[str], default: Any = None) -> Dict[str, Any]:
        return {key: await self.get(key, default) for key in keys}

    async def set_many(self, values: Mapping[str, Any], ttl: Optional[int] = None) -> bool:
        success = True
        for key, value in values.items():
            success = await self.set(key, value, ttl) and success
        return success

    async def delete_many(self, keys: Iterable[str]) -> bool:
        success = True
        for key in keys:
            success = await self.delete(key) and success
        return success


class NullCacheAdapter(CacheAdapter):
    """Cache that stores nothing: every read misses, every write succeeds."""

    async def get(self, key: str, default: Any = None) -> Any:
        return default

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        return True

    async def delete(self, key: str) -> bool:
        return True

    async def clear(self) -> bool:
        return True

    async def has(self, key: str) -> bool:
        return False

    async def get_many(self, keys: Iterable[str], default: Any = None) -> Dict[str, Any]:
        return {key: default for key in keys}

    async def set_many(self, values: Mapping[str, Any], ttl: Optional[int] = None) -> bool:
        return True

    async def delete_many(self, keys: Iterable[str]) -> bool:
        return True
