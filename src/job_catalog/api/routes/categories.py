"""
Category endpoints.
"""

from typing import Any

from fastapi import APIRouter, Depends, Path, Query

from job_catalog.api.dependencies import get_categories_service, to_http_exception
from job_catalog.core.exceptions import CatalogError
from job_catalog.core.models import CategoryCreate, CategoryUpdate
from job_catalog.services import CategoriesService

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("")
async def list_categories(
    lang: str | None = Query(default=None, description="Response language"),
    service: CategoriesService = Depends(get_categories_service),
) -> dict[str, Any]:
    """List all categories (cached)."""
    try:
        categories = await service.find_all(lang)
    except CatalogError as e:
        raise to_http_exception(e) from e

    return {
        "success": True,
        "message": "Categories fetched successfully",
        "meta": {"total": len(categories)},
        "data": [c.model_dump(mode="json", by_alias=True) for c in categories],
    }


@router.get("/{category_id}")
async def get_category(
    category_id: int = Path(..., ge=1),
    lang: str | None = Query(default=None, description="Response language"),
    service: CategoriesService = Depends(get_categories_service),
) -> dict[str, Any]:
    try:
        category = await service.find_one(category_id, lang)
    except CatalogError as e:
        raise to_http_exception(e) from e

    return {
        "success": True,
        "message": "Category fetched successfully",
        "data": category.model_dump(mode="json", by_alias=True),
    }


@router.post("", status_code=201)
async def create_category(
    payload: CategoryCreate,
    lang: str | None = Query(default=None, description="Response language"),
    service: CategoriesService = Depends(get_categories_service),
) -> dict[str, Any]:
    try:
        category = await service.create(payload, lang)
    except CatalogError as e:
        raise to_http_exception(e) from e

    return {
        "success": True,
        "message": "Category created successfully",
        "data": category.model_dump(mode="json", by_alias=True),
    }


@router.patch("/{category_id}")
async def update_category(
    payload: CategoryUpdate,
    category_id: int = Path(..., ge=1),
    lang: str | None = Query(default=None, description="Response language"),
    service: CategoriesService = Depends(get_categories_service),
) -> dict[str, Any]:
    try:
        category = await service.update(category_id, payload, lang)
    except CatalogError as e:
        raise to_http_exception(e) from e

    return {
        "success": True,
        "message": "Category updated successfully",
        "data": category.model_dump(mode="json", by_alias=True),
    }


@router.delete("/{category_id}")
async def delete_category(
    category_id: int = Path(..., ge=1),
    service: CategoriesService = Depends(get_categories_service),
) -> dict[str, Any]:
    """
    Delete a category.

    Fails with 409 while jobs still reference it.
    """
    try:
        await service.remove(category_id)
    except CatalogError as e:
        raise to_http_exception(e) from e

    return {"success": True, "message": "Category deleted successfully"}
