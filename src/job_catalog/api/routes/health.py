"""
Health check endpoints.
"""

from typing import Any

from fastapi import APIRouter, Depends

from job_catalog import __version__
from job_catalog.api.dependencies import get_cache, get_store
from job_catalog.cache.backends import MemoryCacheBackend, RedisCacheBackend
from job_catalog.cache.read_through import ReadThroughCache
from job_catalog.storage.adapter import StoreAdapter

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(store: StoreAdapter = Depends(get_store)) -> dict[str, Any]:
    """
    Check overall API health.

    Returns:
        Health status and the active store implementation
    """
    return {
        "status": "healthy",
        "service": "job-catalog",
        "version": __version__,
        "store": type(store).__name__,
    }


@router.get("/health/cache")
async def cache_health(cache: ReadThroughCache = Depends(get_cache)) -> dict[str, Any]:
    """
    Report cache tiers and hit statistics.

    The mirror is reported as ``degraded`` when it does not answer a ping;
    reads keep working from the primary in that case.
    """
    primary: dict[str, Any] = {"backend": cache.primary.name, "status": "healthy"}
    if isinstance(cache.primary, MemoryCacheBackend):
        primary["entries"] = len(cache.primary)

    mirror: dict[str, Any] | None = None
    if isinstance(cache.mirror, RedisCacheBackend):
        reachable = await cache.mirror.ping()
        mirror = {
            "backend": cache.mirror.name,
            "status": "healthy" if reachable else "degraded",
        }

    return {
        "primary": primary,
        "mirror": mirror,
        "ttl_seconds": cache.ttl,
        "hits": cache.hits,
        "misses": cache.misses,
    }
