"""
Cache backends.

Both tiers implement the same small async protocol: ``get``, ``set`` with a
TTL, ``keys`` by glob pattern (prefix wildcard, e.g. ``job*``) and ``delete``.
Values are serialized strings; encoding is the caller's concern.
"""

import fnmatch
import logging
import time
from typing import Protocol, runtime_checkable

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from job_catalog.core.exceptions import CacheBackendError

logger = logging.getLogger(__name__)


@runtime_checkable
class CacheBackend(Protocol):
    """Capability interface shared by the primary cache and the mirror."""

    name: str

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str, ttl: int) -> None: ...

    async def keys(self, pattern: str) -> list[str]: ...

    async def delete(self, keys: list[str]) -> int: ...


class MemoryCacheBackend:
    """
    In-process TTL cache.

    Entries expire ``ttl`` seconds after insertion (monotonic clock). When
    ``max_entries`` is reached the oldest entry is evicted first.
    """

    name = "memory"

    def __init__(self, max_entries: int = 10_000) -> None:
        self.max_entries = max_entries
        self._entries: dict[str, tuple[str, float]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _is_live(self, key: str, now: float) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False
        if entry[1] <= now:
            del self._entries[key]
            return False
        return True

    async def get(self, key: str) -> str | None:
        if not self._is_live(key, time.monotonic()):
            return None
        return self._entries[key][0]

    async def set(self, key: str, value: str, ttl: int) -> None:
        # Re-insert so dict order tracks insertion time
        self._entries.pop(key, None)
        while self._entries and len(self._entries) >= self.max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
        self._entries[key] = (value, time.monotonic() + ttl)

    async def keys(self, pattern: str) -> list[str]:
        now = time.monotonic()
        return [
            key
            for key in list(self._entries)
            if self._is_live(key, now) and fnmatch.fnmatchcase(key, pattern)
        ]

    async def delete(self, keys: list[str]) -> int:
        removed = 0
        for key in keys:
            if self._entries.pop(key, None) is not None:
                removed += 1
        return removed

    async def clear(self) -> None:
        self._entries.clear()


class RedisCacheBackend:
    """
    Shared cache mirror on Redis.

    Every Redis or connection failure surfaces as ``CacheBackendError`` so
    callers can fail open without knowing the driver.
    """

    name = "redis"

    def __init__(self, client: aioredis.Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str, timeout: float = 2.0) -> "RedisCacheBackend":
        client = aioredis.from_url(
            url,
            decode_responses=True,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
        )
        return cls(client)

    async def get(self, key: str) -> str | None:
        try:
            return await self._client.get(key)
        except (RedisError, OSError) as e:
            raise CacheBackendError(self.name, f"GET {key} failed: {e}") from e

    async def set(self, key: str, value: str, ttl: int) -> None:
        try:
            await self._client.set(key, value, ex=ttl)
        except (RedisError, OSError) as e:
            raise CacheBackendError(self.name, f"SET {key} failed: {e}") from e

    async def keys(self, pattern: str) -> list[str]:
        # SCAN instead of KEYS so large keyspaces don't block the server
        try:
            return [key async for key in self._client.scan_iter(match=pattern)]
        except (RedisError, OSError) as e:
            raise CacheBackendError(self.name, f"SCAN {pattern} failed: {e}") from e

    async def delete(self, keys: list[str]) -> int:
        if not keys:
            return 0
        try:
            return int(await self._client.delete(*keys))
        except (RedisError, OSError) as e:
            raise CacheBackendError(self.name, f"DEL failed: {e}") from e

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except (RedisError, OSError):
            return False

    async def close(self) -> None:
        await self._client.aclose()
