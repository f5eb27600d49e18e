"""
FastAPI application for the job catalog.

Provides REST API endpoints for localized job search and catalog management.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from job_catalog import __version__
from job_catalog.api.routes import categories, cities, countries, health, jobs
from job_catalog.cache.read_through import build_cache
from job_catalog.services import build_services
from job_catalog.storage.adapter import StoreAdapter
from job_catalog.storage.config import get_database_settings
from job_catalog.storage.connection import DatabaseConnection
from job_catalog.storage.memory import MemoryStore
from job_catalog.storage.sql import SqlStore

logger = logging.getLogger(__name__)

# =============================================================================
# Application Lifecycle
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application startup/shutdown lifecycle.

    Builds the store, the cache and the services once. A store or cache
    already placed on ``app.state`` (e.g. by tests) is reused.
    """
    # Startup
    connection: DatabaseConnection | None = None
    store: StoreAdapter | None = getattr(app.state, "store", None)
    if store is None:
        settings = get_database_settings()
        if settings.is_enabled:
            connection = DatabaseConnection(settings)
            await connection.connect()
            store = SqlStore(connection)
        else:
            logger.warning("Database not configured, using in-memory store")
            store = MemoryStore()

    cache = getattr(app.state, "cache", None) or build_cache()

    app.state.store = store
    app.state.cache = cache
    app.state.services = build_services(store, cache)

    yield

    # Shutdown
    await cache.close()
    if connection is not None:
        await connection.disconnect()


# =============================================================================
# Application Setup
# =============================================================================


app = FastAPI(
    title="Job Catalog API",
    description="""
# Job Catalog API

Multilingual job catalog with cached, filtered search.

## Features

- **Localized responses**: every entity is flattened into the requested
  language, falling back to its first translation
- **Lenient search**: unknown or malformed filter values are ignored
- **Read-through cache**: repeated reads are served from memory, with an
  optional Redis mirror; every write purges the affected namespaces

## Quick Start

1. **Search for jobs**:
   ```
   GET /jobs?search=python&jobTypes=FULL_TIME&lang=en
   ```

2. **Get one job**:
   ```
   GET /jobs/{id}?lang=ka
   ```
""",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


# =============================================================================
# Middleware
# =============================================================================


# CORS - allow all origins for development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Routes
# =============================================================================


app.include_router(health.router)
app.include_router(jobs.router)
app.include_router(categories.router)
app.include_router(cities.router)
app.include_router(countries.router)


# =============================================================================
# Root Endpoint
# =============================================================================


@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """API root - basic information."""
    return {
        "name": "Job Catalog API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }
