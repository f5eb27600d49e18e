"""
Country endpoints.
"""

from typing import Any

from fastapi import APIRouter, Depends, Path, Query

from job_catalog.api.dependencies import get_countries_service, to_http_exception
from job_catalog.core.exceptions import CatalogError
from job_catalog.core.models import CountryCreate, CountryUpdate
from job_catalog.services import CountriesService

router = APIRouter(prefix="/countries", tags=["Countries"])


@router.get("")
async def list_countries(
    lang: str | None = Query(default=None, description="Response language"),
    service: CountriesService = Depends(get_countries_service),
) -> dict[str, Any]:
    """List all countries with their cities (cached)."""
    try:
        countries = await service.find_all(lang)
    except CatalogError as e:
        raise to_http_exception(e) from e

    return {
        "success": True,
        "message": "Countries fetched successfully",
        "meta": {"total": len(countries)},
        "data": [c.model_dump(mode="json", by_alias=True) for c in countries],
    }


@router.get("/{country_id}")
async def get_country(
    country_id: int = Path(..., ge=1),
    lang: str | None = Query(default=None, description="Response language"),
    service: CountriesService = Depends(get_countries_service),
) -> dict[str, Any]:
    try:
        country = await service.find_one(country_id, lang)
    except CatalogError as e:
        raise to_http_exception(e) from e

    return {
        "success": True,
        "message": "Country fetched successfully",
        "data": country.model_dump(mode="json", by_alias=True),
    }


@router.get("/{country_id}/cities")
async def get_country_cities(
    country_id: int = Path(..., ge=1),
    lang: str | None = Query(default=None, description="Response language"),
    service: CountriesService = Depends(get_countries_service),
) -> dict[str, Any]:
    """List the cities of one country."""
    try:
        cities = await service.find_cities(country_id, lang)
    except CatalogError as e:
        raise to_http_exception(e) from e

    return {
        "success": True,
        "message": "Cities fetched successfully",
        "meta": {"total": len(cities)},
        "data": [c.model_dump(mode="json", by_alias=True) for c in cities],
    }


@router.post("", status_code=201)
async def create_country(
    payload: CountryCreate,
    lang: str | None = Query(default=None, description="Response language"),
    service: CountriesService = Depends(get_countries_service),
) -> dict[str, Any]:
    try:
        country = await service.create(payload, lang)
    except CatalogError as e:
        raise to_http_exception(e) from e

    return {
        "success": True,
        "message": "Country created successfully",
        "data": country.model_dump(mode="json", by_alias=True),
    }


@router.patch("/{country_id}")
async def update_country(
    payload: CountryUpdate,
    country_id: int = Path(..., ge=1),
    lang: str | None = Query(default=None, description="Response language"),
    service: CountriesService = Depends(get_countries_service),
) -> dict[str, Any]:
    try:
        country = await service.update(country_id, payload, lang)
    except CatalogError as e:
        raise to_http_exception(e) from e

    return {
        "success": True,
        "message": "Country updated successfully",
        "data": country.model_dump(mode="json", by_alias=True),
    }


@router.delete("/{country_id}")
async def delete_country(
    country_id: int = Path(..., ge=1),
    service: CountriesService = Depends(get_countries_service),
) -> dict[str, Any]:
    """
    Delete a country.

    Fails with 409 while cities or jobs still reference it.
    """
    try:
        await service.remove(country_id)
    except CatalogError as e:
        raise to_http_exception(e) from e

    return {"success": True, "message": "Country deleted successfully"}
