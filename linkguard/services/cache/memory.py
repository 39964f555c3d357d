"""
LinkGuard In-Memory Cache

Process-local cache with per-entry expiry.
"""

import logging
import time
from typing import Any, Dict, Optional, Tuple

from .base import CacheAdapter

logger = logging.getLogger(__name__)


class MemoryCacheAdapter(CacheAdapter):
    """
    Dictionary-backed cache.

    Entries written with ``ttl=None`` never expire. Expired entries are
    dropped lazily when they are read.
    """

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._store: Dict[str, Tuple[Any, Optional[float]]] = {}

    def _is_expired(self, expires_at: Optional[float]) -> bool:
        return expires_at is not None and self._clock() >= expires_at

    async def get(self, key: str, default: Any = None) -> Any:
        entry = self._store.get(key)
        if entry is None:
            return default

        value, expires_at = entry
        if self._is_expired(expires_at):
            del self._store[key]
            return default

        return value

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        expires_at = self._clock() + ttl if ttl is not None else None
        self._store[key] = (value, expires_at)
        return True

    async def delete(self, key: str) -> bool:
        return self._store.pop(key, None) is not None

    async def clear(self) -> bool:
        self._store.clear()
        return True

    def __len__(self) -> int:
        return len(self._store)
