"""
Engine and session lifecycle for the SQL store.

Sessions handed out here translate driver failures into catalog errors, so
callers only ever see ``ConflictError`` (constraint violations) or
``StoreError`` (everything else the database raises).
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (  # type: ignore
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from job_catalog.core.exceptions import ConflictError, StoreError
from job_catalog.storage.config import DatabaseSettings, get_database_settings
from job_catalog.storage.migrations import run_migrations

logger = logging.getLogger(__name__)


class DatabaseConnection:
    """
    Owns the catalog's engine, its session factory and startup migrations.

    Usage:
        connection = DatabaseConnection()
        await connection.connect()

        async with connection.read_session() as session:
            rows = (await session.execute(stmt)).scalars().all()

        async with connection.session() as session:
            session.add(category)

        await connection.disconnect()
    """

    def __init__(self, settings: DatabaseSettings | None = None) -> None:
        self.settings = settings or get_database_settings()
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_connected(self) -> bool:
        return self._session_factory is not None

    async def connect(self) -> None:
        """
        Create the engine and bring the schema up to date.

        No-op when already connected or when no database is configured.
        Migrations are retried while the server refuses connections.
        """
        if self.is_connected:
            return

        if not self.settings.is_enabled:
            logger.warning("Database not configured, skipping connection")
            return

        logger.info(f"Connecting to catalog database {self.settings.display_target}")

        engine = create_async_engine(
            self.settings.connection_url,
            pool_size=self.settings.pool_size,
            max_overflow=self.settings.pool_max_overflow,
            pool_timeout=self.settings.pool_timeout,
            pool_pre_ping=True,
            connect_args=self.settings.connect_args,
            echo=self.settings.echo_sql,
        )

        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type((OperationalError, OSError)),
                stop=stop_after_attempt(self.settings.connect_attempts),
                wait=wait_exponential_jitter(initial=1, max=10),
                before_sleep=before_sleep_log(logger, logging.WARNING),
                reraise=True,
            ):
                with attempt:
                    await run_migrations(engine)
        except BaseException:
            await engine.dispose()
            raise
        logger.info("Catalog schema is up to date")

        self._engine = engine
        self._session_factory = async_sessionmaker(engine, expire_on_commit=False)

    async def disconnect(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()  # type: ignore
        self._engine = None
        self._session_factory = None
        logger.info("Catalog database connection closed")

    def _factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            raise StoreError("Database not connected. Call connect() first.")
        return self._session_factory

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Transactional session for writes.

        Commits when the block exits cleanly and rolls back otherwise.
        Integrity violations raised by flush or commit become
        ``ConflictError``; other database failures become ``StoreError``.
        Catalog errors raised inside the block pass through unchanged.
        """
        async with self._factory()() as session:
            try:
                yield session
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise ConflictError(f"Write rejected by the database: {e.orig}") from e
            except SQLAlchemyError as e:
                await session.rollback()
                raise StoreError(f"Database write failed: {e}") from e
            except BaseException:
                await session.rollback()
                raise

    @asynccontextmanager
    async def read_session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Session for the query path.

        Never commits; the transaction is rolled back on exit so nothing a
        reader does can be persisted. Database failures become ``StoreError``.
        """
        async with self._factory()() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                raise StoreError(f"Database read failed: {e}") from e
            finally:
                await session.rollback()
