"""
PostgreSQL settings for the catalog store.

With neither DATABASE_URL nor DATABASE_PASSWORD set the API runs on the
in-memory store and the database commands of the CLI refuse to start.
"""

from functools import lru_cache
from urllib.parse import urlsplit

from pydantic_settings import BaseSettings

_ASYNC_SCHEME = "postgresql+asyncpg"


class DatabaseSettings(BaseSettings):
    """
    Catalog database configuration from the environment.

    DATABASE_URL wins over the DATABASE_HOST/PORT/NAME/USER/PASSWORD parts.
    Plain ``postgres://`` and ``postgresql://`` URLs are rewritten to the
    asyncpg driver.
    """

    database_url: str | None = None

    database_host: str = "localhost"
    database_port: int = 5432
    database_name: str = "job_catalog"
    database_user: str = "postgres"
    database_password: str = ""

    pool_size: int = 5
    pool_max_overflow: int = 10
    pool_timeout: int = 30

    # Server-side cap per statement; 0 disables it
    statement_timeout_ms: int = 5000

    # Startup migrations retry while the database is still coming up
    connect_attempts: int = 5

    echo_sql: bool = False

    class Config:
        env_prefix = ""
        case_sensitive = False
        extra = "ignore"

    @property
    def is_enabled(self) -> bool:
        return bool(self.database_url or self.database_password)

    @property
    def connection_url(self) -> str:
        """SQLAlchemy URL using the asyncpg driver."""
        if self.database_url:
            scheme, sep, rest = self.database_url.partition("://")
            if scheme in ("postgres", "postgresql"):
                return f"{_ASYNC_SCHEME}{sep}{rest}"
            return self.database_url
        return (
            f"{_ASYNC_SCHEME}://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )

    @property
    def display_target(self) -> str:
        """``host:port/name`` for log lines, never including credentials."""
        parts = urlsplit(self.connection_url)
        return f"{parts.hostname}:{parts.port or 5432}{parts.path}"

    @property
    def connect_args(self) -> dict:
        """asyncpg connect arguments applied to every pooled connection."""
        if self.statement_timeout_ms <= 0:
            return {}
        return {
            "server_settings": {"statement_timeout": str(self.statement_timeout_ms)}
        }


@lru_cache
def get_database_settings() -> DatabaseSettings:
    return DatabaseSettings()
