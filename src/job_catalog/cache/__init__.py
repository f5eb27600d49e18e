"""
Two-tier cache for localized read results.

Usage:
    from job_catalog.cache import build_cache

    cache = build_cache()
    value = await cache.get_or_compute(key, compute, adapter)
    await cache.invalidate("job")
"""

from job_catalog.cache.backends import CacheBackend, MemoryCacheBackend, RedisCacheBackend
from job_catalog.cache.config import CacheSettings, get_cache_settings
from job_catalog.cache.read_through import ReadThroughCache, build_cache

__all__ = [
    "CacheBackend",
    "MemoryCacheBackend",
    "RedisCacheBackend",
    "CacheSettings",
    "get_cache_settings",
    "ReadThroughCache",
    "build_cache",
]
