"""
Persistent store adapter contract.

The core treats the relational store as a capability: query by predicate
tree, fetch by id, and write (create/update/delete). Records are plain
mappings carrying their ``translations`` and one level of relations.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from job_catalog.core.models import EntityType, WriteOp
from job_catalog.query.predicates import Predicate, Sort

Record = dict[str, Any]


@dataclass(frozen=True)
class Relation:
    """
    A relation attached to records of an entity type.

    ``many=False``: ``record[foreign_key]`` points at one ``target`` record.
    ``many=True``: all ``target`` records whose ``foreign_key`` equals the id.
    """

    target: EntityType
    foreign_key: str
    many: bool = False


RELATIONS: dict[EntityType, dict[str, Relation]] = {
    EntityType.JOB: {
        "category": Relation(EntityType.CATEGORY, "category_id"),
        "city": Relation(EntityType.CITY, "city_id"),
        "country": Relation(EntityType.COUNTRY, "country_id"),
        "user": Relation(EntityType.USER, "user_id"),
    },
    EntityType.CITY: {
        "country": Relation(EntityType.COUNTRY, "country_id"),
    },
    EntityType.COUNTRY: {
        "cities": Relation(EntityType.CITY, "country_id", many=True),
    },
    EntityType.CATEGORY: {},
    EntityType.USER: {},
}

TRANSLATABLE = frozenset(
    {EntityType.JOB, EntityType.CATEGORY, EntityType.CITY, EntityType.COUNTRY}
)

# Translation records are unique per (entity id, lang)
TRANSLATION_KEY = "lang"


@runtime_checkable
class StoreAdapter(Protocol):
    """Capability interface every store implementation provides."""

    async def query(
        self,
        entity_type: EntityType,
        predicate: Predicate | None = None,
        sort: Sort | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> tuple[list[Record], int]:
        """Return one page of matching records and the total match count."""
        ...

    async def get(self, entity_type: EntityType, entity_id: int) -> Record | None:
        """Return one record or None."""
        ...

    async def write(
        self, entity_type: EntityType, op: WriteOp, payload: Mapping[str, Any]
    ) -> Record:
        """
        Apply a write and return the affected record.

        Update and delete take the target id from ``payload["id"]``.
        Translations in an update are matched by language or created.

        Raises:
            EntityNotFoundError: Update/delete target does not exist
            ConflictError: Uniqueness or reference constraint violated
            StoreError: Any other store failure
        """
        ...
