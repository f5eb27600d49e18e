"""
Storage layer for catalog records.

Two adapters implement the same ``StoreAdapter`` contract: ``SqlStore`` over
PostgreSQL (activated when database credentials are configured) and
``MemoryStore`` for tests and database-less runs.

Usage:
    from job_catalog.storage import DatabaseConnection, SqlStore, get_database_settings

    settings = get_database_settings()
    if settings.is_enabled:
        connection = DatabaseConnection(settings)
        await connection.connect()
        store = SqlStore(connection)
"""

from job_catalog.storage.adapter import RELATIONS, TRANSLATABLE, Record, StoreAdapter
from job_catalog.storage.config import DatabaseSettings, get_database_settings
from job_catalog.storage.connection import DatabaseConnection
from job_catalog.storage.memory import MemoryStore
from job_catalog.storage.sql import SqlStore

__all__ = [
    "RELATIONS",
    "TRANSLATABLE",
    "Record",
    "StoreAdapter",
    "DatabaseSettings",
    "get_database_settings",
    "DatabaseConnection",
    "MemoryStore",
    "SqlStore",
]
