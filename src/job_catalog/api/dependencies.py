"""
Request-scoped access to the objects built in the application lifespan.
"""

from fastapi import HTTPException, Request

from job_catalog.cache.read_through import ReadThroughCache
from job_catalog.core.exceptions import (
    CatalogError,
    ConflictError,
    EntityNotFoundError,
    StoreError,
)
from job_catalog.services import (
    CategoriesService,
    CitiesService,
    CountriesService,
    JobsService,
    Services,
)
from job_catalog.storage.adapter import StoreAdapter


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_jobs_service(request: Request) -> JobsService:
    return get_services(request).jobs


def get_categories_service(request: Request) -> CategoriesService:
    return get_services(request).categories


def get_cities_service(request: Request) -> CitiesService:
    return get_services(request).cities


def get_countries_service(request: Request) -> CountriesService:
    return get_services(request).countries


def get_cache(request: Request) -> ReadThroughCache:
    return request.app.state.cache


def get_store(request: Request) -> StoreAdapter:
    return request.app.state.store


def to_http_exception(error: CatalogError) -> HTTPException:
    """Map a catalog error to the HTTP status it represents."""
    if isinstance(error, EntityNotFoundError):
        return HTTPException(status_code=404, detail=error.message)
    if isinstance(error, ConflictError):
        return HTTPException(status_code=409, detail=error.message)
    if isinstance(error, StoreError):
        return HTTPException(status_code=500, detail=error.message)
    return HTTPException(status_code=500, detail=str(error))
