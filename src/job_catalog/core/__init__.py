"""Core module containing domain models and the error hierarchy."""

from job_catalog.core.exceptions import (
    CacheBackendError,
    CatalogError,
    ConflictError,
    EntityNotFoundError,
    StoreError,
)
from job_catalog.core.models import (
    DEFAULT_LANG,
    EntityType,
    Experience,
    JobsQuery,
    JobType,
    Page,
    SortField,
    SortOrder,
    WriteOp,
)

__all__ = [
    "DEFAULT_LANG",
    "EntityType",
    "Experience",
    "JobsQuery",
    "JobType",
    "Page",
    "SortField",
    "SortOrder",
    "WriteOp",
    "CatalogError",
    "EntityNotFoundError",
    "ConflictError",
    "StoreError",
    "CacheBackendError",
]
