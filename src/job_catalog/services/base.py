"""
Shared service plumbing.

A service owns one entity type: it reads through the cache, writes through
the store adapter and purges the cache namespaces whose views embed the
entity before a write returns.
"""

import logging
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any, ClassVar, Generic, TypeVar, cast

from pydantic import BaseModel, TypeAdapter

from job_catalog.cache.keys import entity_key, list_key
from job_catalog.cache.read_through import ReadThroughCache
from job_catalog.core.exceptions import EntityNotFoundError
from job_catalog.core.models import DEFAULT_LANG, EntityType, WriteOp
from job_catalog.localization.resolver import resolve, resolve_many
from job_catalog.localization.views import ProjectionView
from job_catalog.query.builder import resolve_lang
from job_catalog.query.predicates import Predicate, Sort
from job_catalog.storage.adapter import Record, StoreAdapter

logger = logging.getLogger(__name__)

V = TypeVar("V", bound=ProjectionView)

# Cache namespaces purged after a write to each entity type
INVALIDATES: dict[EntityType, tuple[EntityType, ...]] = {
    EntityType.JOB: (EntityType.JOB,),
    EntityType.CATEGORY: (EntityType.CATEGORY, EntityType.JOB),
    EntityType.CITY: (EntityType.CITY, EntityType.JOB, EntityType.COUNTRY),
    EntityType.COUNTRY: (EntityType.COUNTRY, EntityType.JOB, EntityType.CITY),
}


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, list):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    return value


def to_payload(data: BaseModel, partial: bool = False) -> dict[str, Any]:
    """
    Store payload from a validated write model.

    Enums become their values. With ``partial`` only fields the client sent
    are included.
    """
    return _plain(data.model_dump(exclude_unset=partial))


def response_lang(data: BaseModel | Mapping[str, Any] | None, lang: str | None) -> str:
    """
    Language used to localize a write result.

    Explicit ``lang`` wins; otherwise the first submitted translation's
    language, then the default.
    """
    if lang:
        return resolve_lang(lang)
    translations: Sequence[Any] | None = None
    if isinstance(data, BaseModel):
        translations = getattr(data, "translations", None)
    elif isinstance(data, Mapping):
        translations = data.get("translations")
    if translations:
        first = translations[0]
        return first["lang"] if isinstance(first, Mapping) else first.lang
    return DEFAULT_LANG


class EntityService(Generic[V]):
    """
    Cached reads and invalidating writes for one entity type.

    Subclasses set ``entity_type`` and ``view``.
    """

    entity_type: ClassVar[EntityType]
    view: type[V]

    def __init__(self, store: StoreAdapter, cache: ReadThroughCache) -> None:
        self.store = store
        self.cache = cache
        self._one = TypeAdapter(self.view)
        self._many = TypeAdapter(list[self.view])  # type: ignore[name-defined]

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def find_one(self, entity_id: int, lang: str | None = None) -> V:
        """
        Localized entity by id.

        Raises:
            EntityNotFoundError: No such entity (the miss is not cached)
        """
        lang = resolve_lang(lang)

        async def compute() -> V:
            record = await self.store.get(self.entity_type, entity_id)
            if record is None:
                raise EntityNotFoundError(self.entity_type.value, entity_id)
            return self._localize(record, lang)

        return await self.cache.get_or_compute(
            entity_key(self.entity_type, entity_id, lang), compute, self._one
        )

    async def _list(
        self,
        key: str,
        lang: str,
        predicate: Predicate | None = None,
        sort: Sort | None = None,
    ) -> list[V]:
        async def compute() -> list[V]:
            records, _ = await self.store.query(self.entity_type, predicate, sort)
            return resolve_many(records, lang, self.view)

        return await self.cache.get_or_compute(key, compute, self._many)

    async def find_all(self, lang: str | None = None) -> list[V]:
        """All entities, localized and ordered by id."""
        lang = resolve_lang(lang)
        return await self._list(list_key(self.entity_type, lang), lang)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def create(self, data: BaseModel, lang: str | None = None) -> V:
        record = await self._write(WriteOp.CREATE, to_payload(data))
        logger.info(f"Created {self.entity_type.value} {record['id']}")
        return self._localize(record, response_lang(data, lang))

    async def update(self, entity_id: int, data: BaseModel, lang: str | None = None) -> V:
        payload = {**to_payload(data, partial=True), "id": entity_id}
        record = await self._write(WriteOp.UPDATE, payload)
        logger.info(f"Updated {self.entity_type.value} {entity_id}")
        return self._localize(record, response_lang(data, lang))

    async def remove(self, entity_id: int) -> V:
        record = await self._write(WriteOp.DELETE, {"id": entity_id})
        logger.info(f"Deleted {self.entity_type.value} {entity_id}")
        return self._localize(record, response_lang(record, None))

    async def invalidate(self) -> int:
        """Purge this entity's cache namespace and every namespace embedding it."""
        prefixes = [t.value for t in INVALIDATES[self.entity_type]]
        return await self.cache.invalidate(*prefixes)

    async def _write(self, op: WriteOp, payload: dict[str, Any]) -> Record:
        record = await self.store.write(self.entity_type, op, payload)
        await self.invalidate()
        return record

    def _localize(self, record: Record, lang: str) -> V:
        # resolve only yields None for a missing record; writes always return one
        return cast(V, resolve(record, lang, self.view))
