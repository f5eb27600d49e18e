"""
Job search and management endpoints.
"""

from typing import Any

from fastapi import APIRouter, Depends, Path, Query, Request

from job_catalog.api.dependencies import get_jobs_service, to_http_exception
from job_catalog.core.exceptions import CatalogError
from job_catalog.core.models import JobCreate, JobsQuery, JobUpdate
from job_catalog.services import JobsService

router = APIRouter(prefix="/jobs", tags=["Jobs"])


# =============================================================================
# Endpoints
# =============================================================================


@router.get("")
async def search_jobs(
    request: Request,
    service: JobsService = Depends(get_jobs_service),
) -> dict[str, Any]:
    """
    Search active jobs.

    All query parameters are optional and parsed leniently: values that
    cannot be understood are ignored rather than rejected.

    ## Parameters

    - **page**, **limit**: 1-based page, page size (default 10, max 100)
    - **sort**: `postedAt`, `salaryMin`, `salaryMax` or `createdAt`
    - **order**: `asc` or `desc` (default `desc`)
    - **lang**: response language (default `en`)
    - **search**: free text over title, description and skills
    - **countryId**, **cityId**, **type**, **jobTypes**, **experience**,
      **category**, **remote**, **salaryMin**, **salaryMax**

    ## Example

    ```
    GET /jobs?category=IT&jobTypes=FULL_TIME,CONTRACT&lang=ka&page=2
    ```
    """
    query = JobsQuery.from_params(request.query_params)
    try:
        result = await service.search(query)
    except CatalogError as e:
        raise to_http_exception(e) from e

    page = result.model_dump(mode="json", by_alias=True)
    data = page.pop("data")
    return {
        "success": True,
        "message": "Jobs fetched successfully",
        "meta": page,
        "data": data,
    }


@router.get("/{job_id}")
async def get_job(
    job_id: int = Path(..., ge=1),
    lang: str | None = Query(default=None, description="Response language"),
    service: JobsService = Depends(get_jobs_service),
) -> dict[str, Any]:
    """Get one job, localized to ``lang``."""
    try:
        job = await service.find_one(job_id, lang)
    except CatalogError as e:
        raise to_http_exception(e) from e

    return {
        "success": True,
        "message": "Job fetched successfully",
        "data": job.model_dump(mode="json", by_alias=True),
    }


@router.post("", status_code=201)
async def create_job(
    payload: JobCreate,
    lang: str | None = Query(default=None, description="Response language"),
    service: JobsService = Depends(get_jobs_service),
) -> dict[str, Any]:
    """
    Create a job with its translations.

    The response is localized to ``lang``, or to the first translation's
    language when ``lang`` is omitted.
    """
    try:
        job = await service.create(payload, lang)
    except CatalogError as e:
        raise to_http_exception(e) from e

    return {
        "success": True,
        "message": "Job created successfully",
        "data": job.model_dump(mode="json", by_alias=True),
    }


@router.patch("/{job_id}")
async def update_job(
    payload: JobUpdate,
    job_id: int = Path(..., ge=1),
    lang: str | None = Query(default=None, description="Response language"),
    service: JobsService = Depends(get_jobs_service),
) -> dict[str, Any]:
    """
    Partially update a job.

    Submitted translations replace the existing translation of the same
    language or are added as new ones.
    """
    try:
        job = await service.update(job_id, payload, lang)
    except CatalogError as e:
        raise to_http_exception(e) from e

    return {
        "success": True,
        "message": "Job updated successfully",
        "data": job.model_dump(mode="json", by_alias=True),
    }


@router.delete("/{job_id}")
async def delete_job(
    job_id: int = Path(..., ge=1),
    service: JobsService = Depends(get_jobs_service),
) -> dict[str, Any]:
    try:
        await service.remove(job_id)
    except CatalogError as e:
        raise to_http_exception(e) from e

    return {"success": True, "message": "Job deleted successfully"}
