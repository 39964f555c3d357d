"""
LinkGuard Cache Services

Cache adapters used to memoize provider verdicts.
"""

from .base import CacheAdapter, NullCacheAdapter
from .memory import MemoryCacheAdapter
from .redis_cache import RedisCacheAdapter

__all__ = [
    'CacheAdapter',
    'NullCacheAdapter',
    'MemoryCacheAdapter',
    'RedisCacheAdapter',
]
