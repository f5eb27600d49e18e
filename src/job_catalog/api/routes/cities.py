"""
City endpoints.
"""

from typing import Any

from fastapi import APIRouter, Depends, Path, Query

from job_catalog.api.dependencies import get_cities_service, to_http_exception
from job_catalog.core.exceptions import CatalogError
from job_catalog.core.models import CityCreate, CityUpdate
from job_catalog.services import CitiesService

router = APIRouter(prefix="/cities", tags=["Cities"])


@router.get("")
async def list_cities(
    lang: str | None = Query(default=None, description="Response language"),
    country_id: int | None = Query(
        default=None, ge=1, description="Only cities of this country"
    ),
    service: CitiesService = Depends(get_cities_service),
) -> dict[str, Any]:
    """List cities, optionally for one country (cached per country)."""
    try:
        cities = await service.find_all(lang, country_id=country_id)
    except CatalogError as e:
        raise to_http_exception(e) from e

    return {
        "success": True,
        "message": "Cities fetched successfully",
        "meta": {"total": len(cities)},
        "data": [c.model_dump(mode="json", by_alias=True) for c in cities],
    }


@router.get("/{city_id}")
async def get_city(
    city_id: int = Path(..., ge=1),
    lang: str | None = Query(default=None, description="Response language"),
    service: CitiesService = Depends(get_cities_service),
) -> dict[str, Any]:
    try:
        city = await service.find_one(city_id, lang)
    except CatalogError as e:
        raise to_http_exception(e) from e

    return {
        "success": True,
        "message": "City fetched successfully",
        "data": city.model_dump(mode="json", by_alias=True),
    }


@router.post("", status_code=201)
async def create_city(
    payload: CityCreate,
    lang: str | None = Query(default=None, description="Response language"),
    service: CitiesService = Depends(get_cities_service),
) -> dict[str, Any]:
    try:
        city = await service.create(payload, lang)
    except CatalogError as e:
        raise to_http_exception(e) from e

    return {
        "success": True,
        "message": "City created successfully",
        "data": city.model_dump(mode="json", by_alias=True),
    }


@router.patch("/{city_id}")
async def update_city(
    payload: CityUpdate,
    city_id: int = Path(..., ge=1),
    lang: str | None = Query(default=None, description="Response language"),
    service: CitiesService = Depends(get_cities_service),
) -> dict[str, Any]:
    try:
        city = await service.update(city_id, payload, lang)
    except CatalogError as e:
        raise to_http_exception(e) from e

    return {
        "success": True,
        "message": "City updated successfully",
        "data": city.model_dump(mode="json", by_alias=True),
    }


@router.delete("/{city_id}")
async def delete_city(
    city_id: int = Path(..., ge=1),
    service: CitiesService = Depends(get_cities_service),
) -> dict[str, Any]:
    try:
        await service.remove(city_id)
    except CatalogError as e:
        raise to_http_exception(e) from e

    return {"success": True, "message": "City deleted successfully"}
