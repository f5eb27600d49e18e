"""
Two-tier read-through cache with prefix invalidation.

The primary tier is consulted on every read; the optional mirror receives a
copy of every populated entry and is purged alongside the primary. Mirror
failures never fail a request. There is no locking and no single-flight:
concurrent misses recompute independently and the last write wins.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from pydantic import TypeAdapter, ValidationError

from job_catalog.cache.backends import CacheBackend, MemoryCacheBackend, RedisCacheBackend
from job_catalog.cache.config import CacheSettings, get_cache_settings
from job_catalog.cache.keys import prefix_pattern
from job_catalog.core.exceptions import CacheBackendError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ReadThroughCache:
    """
    Read-through cache over a primary backend and an optional mirror.

    Usage:
        cache = ReadThroughCache(MemoryCacheBackend(), mirror=redis_backend)
        page = await cache.get_or_compute(key, compute, TypeAdapter(Page[JobView]))
        await cache.invalidate("job")
    """

    def __init__(
        self,
        primary: CacheBackend,
        mirror: CacheBackend | None = None,
        ttl: int = 60,
        mirror_reads: bool = False,
    ) -> None:
        """
        Initialize the cache.

        Args:
            primary: Fast cache consulted on every read
            mirror: Shared secondary store kept in sync, if any
            ttl: Default entry lifetime in seconds
            mirror_reads: Consult the mirror when the primary misses
        """
        self.primary = primary
        self.mirror = mirror
        self.ttl = ttl
        self.mirror_reads = mirror_reads
        self.hits = 0
        self.misses = 0

    @property
    def has_mirror(self) -> bool:
        return self.mirror is not None

    async def get_or_compute(
        self,
        key: str,
        compute: Callable[[], Awaitable[T]],
        adapter: TypeAdapter[T],
        ttl: int | None = None,
    ) -> T:
        """
        Return the cached value for ``key`` or compute and cache it.

        Args:
            key: Cache key
            compute: Coroutine factory producing the value on a miss
            adapter: Encodes/decodes the value to and from JSON
            ttl: Entry lifetime; defaults to the cache TTL

        Returns:
            Cached or freshly computed value

        Raises:
            Whatever ``compute`` raises; nothing is cached in that case.
        """
        ttl = self.ttl if ttl is None else ttl

        cached = await self._read(self.primary, key, adapter)
        if cached is not None:
            self.hits += 1
            logger.debug(f"Cache hit for {key}")
            return cached

        if self.mirror is not None and self.mirror_reads:
            mirrored = await self._read(self.mirror, key, adapter)
            if mirrored is not None:
                self.hits += 1
                logger.debug(f"Mirror hit for {key}")
                payload = adapter.dump_json(mirrored, by_alias=True).decode()
                await self._write(self.primary, key, payload, ttl)
                return mirrored

        self.misses += 1
        logger.debug(f"Cache miss for {key}")

        value = await compute()
        payload = adapter.dump_json(value, by_alias=True).decode()

        await self._write(self.primary, key, payload, ttl)
        if self.mirror is not None:
            await self._write(self.mirror, key, payload, ttl)

        return value

    async def invalidate(self, *prefixes: str) -> int:
        """
        Delete every key starting with one of ``prefixes`` in both tiers.

        Primary errors propagate; mirror errors are logged and the mirror is
        skipped.

        Returns:
            Number of primary keys removed
        """
        removed = 0
        for prefix in prefixes:
            pattern = prefix_pattern(prefix)

            keys = await self.primary.keys(pattern)
            removed += await self.primary.delete(keys)

            if self.mirror is None:
                continue
            try:
                mirror_keys = await self.mirror.keys(pattern)
                mirror_removed = await self.mirror.delete(mirror_keys)
            except CacheBackendError as e:
                logger.error(f"Mirror invalidation of {pattern} failed: {e}")
                continue
            logger.debug(f"Cleared {mirror_removed} mirror keys for {pattern}")

        logger.info(f"Cleared {removed} cache keys for {', '.join(prefixes)}")
        return removed

    async def close(self) -> None:
        """Release mirror connections."""
        if isinstance(self.mirror, RedisCacheBackend):
            await self.mirror.close()

    async def _read(
        self, backend: CacheBackend, key: str, adapter: TypeAdapter[T]
    ) -> T | None:
        try:
            raw = await backend.get(key)
        except CacheBackendError as e:
            logger.warning(f"Cache read from {backend.name} failed, falling through: {e}")
            return None
        if raw is None:
            return None
        try:
            return adapter.validate_json(raw)
        except ValidationError:
            logger.warning(f"Discarding undecodable {backend.name} entry {key}")
            return None

    async def _write(self, backend: CacheBackend, key: str, payload: str, ttl: int) -> None:
        try:
            await backend.set(key, payload, ttl)
        except CacheBackendError as e:
            logger.warning(f"Cache write to {backend.name} failed for {key}: {e}")


def build_cache(settings: CacheSettings | None = None) -> ReadThroughCache:
    """
    Construct the process-wide cache from settings.

    Called once at startup; the result is injected into every service.
    """
    settings = settings or get_cache_settings()

    mirror: CacheBackend | None = None
    if settings.is_mirror_enabled:
        mirror = RedisCacheBackend.from_url(
            settings.redis_url_effective, timeout=settings.redis_timeout
        )
        logger.info("Redis cache mirror enabled")

    return ReadThroughCache(
        MemoryCacheBackend(max_entries=settings.cache_max_entries),
        mirror=mirror,
        ttl=settings.cache_ttl_seconds,
        mirror_reads=settings.cache_mirror_reads,
    )
