"""
Cache key construction.

Every key starts with its entity type's prefix so one ``<prefix>*`` pattern
purges the whole namespace on write.
"""

import hashlib

from job_catalog.core.models import EntityType
from job_catalog.query.predicates import QuerySpec


def entity_key(entity_type: EntityType, entity_id: int, lang: str) -> str:
    """Key for a single localized entity, e.g. ``job:42:en``."""
    return f"{entity_type.value}:{entity_id}:{lang}"


def list_key(entity_type: EntityType, lang: str, scope: str | int = "all") -> str:
    """Key for an unpaginated list, e.g. ``city:list:3:en``."""
    return f"{entity_type.value}:list:{scope}:{lang}"


def search_key(entity_type: EntityType, spec: QuerySpec, lang: str) -> str:
    """
    Key for a paginated search.

    Derived from the canonical JSON of the normalized spec, so logically equal
    requests share a key regardless of parameter order or enum casing.
    """
    digest = hashlib.sha256(spec.canonical().encode()).hexdigest()
    return f"{entity_type.value}:search:{lang}:{digest}"


def children_key(
    entity_type: EntityType, entity_id: int, children: str, lang: str
) -> str:
    """Key for a child collection, e.g. ``country:1:cities:en``."""
    return f"{entity_type.value}:{entity_id}:{children}:{lang}"


def prefix_pattern(prefix: str) -> str:
    return f"{prefix}*"
