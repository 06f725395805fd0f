"""Expiring in-memory caches"""

from watchwise_service.cache.ttl_cache import CacheEntry, CacheStats, TTLCache

__all__ = [
    "CacheEntry",
    "CacheStats",
    "TTLCache",
]
