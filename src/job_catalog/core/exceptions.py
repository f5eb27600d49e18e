"""
Exception hierarchy for the job catalog.

Input normalization problems are never raised: the query builder drops bad
values instead. Everything below is a real failure the caller must handle.
"""


class CatalogError(Exception):
    """Base exception for all catalog errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class EntityNotFoundError(CatalogError):
    """Single-entity lookup or write targeted an id that does not exist."""

    def __init__(self, entity_type: str, entity_id: int):
        super().__init__(
            f"{entity_type.capitalize()} with ID {entity_id} not found",
            {"entity_type": entity_type, "entity_id": entity_id},
        )
        self.entity_type = entity_type
        self.entity_id = entity_id


class ConflictError(CatalogError):
    """Write violates a uniqueness invariant (e.g. duplicate translation lang)."""


class StoreError(CatalogError):
    """Underlying relational store failed. Never retried by the core."""


class CacheBackendError(CatalogError):
    """A cache backend is unreachable or returned an error."""

    def __init__(self, backend: str, message: str):
        super().__init__(f"{backend}: {message}", {"backend": backend})
        self.backend = backend
