"""
Cache configuration settings.

Reads from environment variables. The in-process primary cache is always on;
the Redis mirror is optional and only used when a Redis location is set.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class CacheSettings(BaseSettings):
    """
    Cache configuration loaded from environment variables.

    Set REDIS_URL (or REDIS_HOST) to enable the shared mirror.
    """

    # Primary (in-process) cache
    cache_ttl_seconds: int = 60
    cache_max_entries: int = 10_000

    # Consult the mirror when the primary misses
    cache_mirror_reads: bool = False

    # Mirror (Redis); full URL takes precedence
    redis_url: str | None = None
    redis_host: str | None = None
    redis_port: int = 6379
    redis_db: int = 0
    redis_timeout: float = 2.0

    class Config:
        env_prefix = ""
        case_sensitive = False
        extra = "ignore"

    @property
    def is_mirror_enabled(self) -> bool:
        """Check if a Redis mirror is configured and should be used."""
        return bool(self.redis_url or self.redis_host)

    @property
    def redis_url_effective(self) -> str:
        """Get the Redis connection URL."""
        if self.redis_url:
            return self.redis_url
        return f"redis://{self.redis_host or 'localhost'}:{self.redis_port}/{self.redis_db}"


@lru_cache
def get_cache_settings() -> CacheSettings:
    """Get cached cache settings instance."""
    return CacheSettings()
