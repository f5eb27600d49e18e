"""
In-memory store adapter.

Evaluates the predicate tree in Python over dict records. Used by the test
suite and as the fallback store when no database is configured. Ordering
matches PostgreSQL: NULLs last ascending, first descending, ties by id.
"""

import copy
import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from job_catalog.core.exceptions import ConflictError, EntityNotFoundError
from job_catalog.core.models import EntityType, SortOrder, WriteOp
from job_catalog.query.predicates import And, Comparison, Or, Predicate, Sort, TranslationMatch
from job_catalog.storage.adapter import RELATIONS, TRANSLATABLE, TRANSLATION_KEY, Record
from job_catalog.storage.upsert import duplicate_keys, upsert_by_key

logger = logging.getLogger(__name__)


def _compare(condition: Comparison, value: Any) -> bool:
    expected = condition.value
    op = condition.op

    if op == "eq":
        return value == expected
    if op == "in":
        return value in expected
    if op == "gte":
        return value is not None and value >= expected
    if op == "lte":
        return value is not None and value <= expected
    if op == "contains":
        return isinstance(value, str) and expected.casefold() in value.casefold()
    if op == "overlap":
        return bool(set(value or ()) & set(expected))
    raise ValueError(f"Unsupported comparison: {op}")


def evaluate(predicate: Predicate, record: Mapping[str, Any]) -> bool:
    """Evaluate a predicate tree against a hydrated record."""
    if isinstance(predicate, And):
        return all(evaluate(item, record) for item in predicate.items)
    if isinstance(predicate, Or):
        return any(evaluate(item, record) for item in predicate.items)
    if isinstance(predicate, Comparison):
        return _compare(predicate, record.get(predicate.field))
    if isinstance(predicate, TranslationMatch):
        owner = record if predicate.relation is None else record.get(predicate.relation)
        if not isinstance(owner, Mapping):
            return False
        return any(
            translation.get("lang") in predicate.langs
            and _compare(
                predicate.condition, translation.get(predicate.condition.field)
            )
            for translation in owner.get("translations") or []
        )
    raise ValueError(f"Unsupported predicate: {predicate!r}")


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MemoryStore:
    """
    Dict-backed store implementing the ``StoreAdapter`` contract.

    Usage:
        store = MemoryStore()
        store.seed(EntityType.COUNTRY, {"code": "GE", "translations": [...]})
        records, total = await store.query(EntityType.JOB, spec.predicate, spec.sort)
    """

    def __init__(self) -> None:
        self._tables: dict[EntityType, dict[int, Record]] = {t: {} for t in EntityType}
        self._next_id: dict[EntityType, int] = {t: 1 for t in EntityType}
        self.query_count = 0

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def query(
        self,
        entity_type: EntityType,
        predicate: Predicate | None = None,
        sort: Sort | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> tuple[list[Record], int]:
        self.query_count += 1

        rows = [self._hydrate(entity_type, r) for r in self._tables[entity_type].values()]
        if predicate is not None:
            rows = [r for r in rows if evaluate(predicate, r)]

        rows.sort(key=lambda r: r["id"])
        if sort is not None:
            # Stable sort keeps id order among equal values
            rows.sort(
                key=lambda r: (r.get(sort.field) is None, r.get(sort.field)),
                reverse=sort.order == SortOrder.DESC,
            )

        total = len(rows)
        end = None if limit is None else offset + limit
        return rows[offset:end], total

    async def get(self, entity_type: EntityType, entity_id: int) -> Record | None:
        self.query_count += 1
        record = self._tables[entity_type].get(entity_id)
        return None if record is None else self._hydrate(entity_type, record)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def write(
        self, entity_type: EntityType, op: WriteOp, payload: Mapping[str, Any]
    ) -> Record:
        if op == WriteOp.CREATE:
            entity_id = self.seed(entity_type, payload)
            return self._hydrate(entity_type, self._tables[entity_type][entity_id])

        entity_id = payload["id"]
        table = self._tables[entity_type]
        if entity_id not in table:
            raise EntityNotFoundError(entity_type.value, entity_id)

        if op == WriteOp.UPDATE:
            self._update(entity_type, table[entity_id], payload)
            return self._hydrate(entity_type, table[entity_id])

        if op == WriteOp.DELETE:
            self._check_unreferenced(entity_type, entity_id)
            record = self._hydrate(entity_type, table[entity_id])
            del table[entity_id]
            logger.debug(f"Deleted {entity_type.value} {entity_id}")
            return record

        raise ValueError(f"Unsupported write op: {op}")

    def seed(self, entity_type: EntityType, payload: Mapping[str, Any]) -> int:
        """
        Insert a record synchronously and return its id.

        Honors an explicit ``id``; otherwise assigns the next one.
        """
        data = copy.deepcopy(dict(payload))
        translations = data.pop("translations", None) or []

        duplicates = duplicate_keys(translations, TRANSLATION_KEY)
        if duplicates:
            raise ConflictError(
                f"Duplicate {entity_type.value} translation languages: {duplicates}"
            )
        self._check_references(entity_type, data)

        entity_id = data.get("id") or self._next_id[entity_type]
        if entity_id in self._tables[entity_type]:
            raise ConflictError(f"{entity_type.value} {entity_id} already exists")
        self._next_id[entity_type] = max(self._next_id[entity_type], entity_id + 1)

        now = _now()
        data["id"] = entity_id
        data.setdefault("created_at", now)
        if entity_type == EntityType.JOB:
            data.setdefault("posted_at", now)
            data.setdefault("is_active", True)
            data.setdefault("skills", [])
        if entity_type in TRANSLATABLE:
            data["translations"] = [dict(t) for t in translations]

        self._tables[entity_type][entity_id] = data
        logger.debug(f"Created {entity_type.value} {entity_id}")
        return entity_id

    def _update(
        self, entity_type: EntityType, record: Record, payload: Mapping[str, Any]
    ) -> None:
        changes = {
            k: copy.deepcopy(v)
            for k, v in payload.items()
            if k not in ("id", "translations")
        }
        self._check_references(entity_type, changes)
        record.update(changes)
        record["updated_at"] = _now()

        translations = payload.get("translations")
        if translations is not None and entity_type in TRANSLATABLE:
            created, updated = upsert_by_key(
                record["translations"], translations, TRANSLATION_KEY, create=dict
            )
            logger.debug(
                f"Upserted {entity_type.value} {record['id']} translations: "
                f"{created} created, {updated} updated"
            )

    # -------------------------------------------------------------------------
    # Relations
    # -------------------------------------------------------------------------

    def _check_references(self, entity_type: EntityType, data: Mapping[str, Any]) -> None:
        for relation in RELATIONS[entity_type].values():
            if relation.many:
                continue
            target_id = data.get(relation.foreign_key)
            if target_id is not None and target_id not in self._tables[relation.target]:
                raise ConflictError(
                    f"{relation.target.value.capitalize()} {target_id} does not exist"
                )

    def _check_unreferenced(self, entity_type: EntityType, entity_id: int) -> None:
        for owner_type, relations in RELATIONS.items():
            for relation in relations.values():
                if relation.many or relation.target != entity_type:
                    continue
                for row in self._tables[owner_type].values():
                    if row.get(relation.foreign_key) == entity_id:
                        raise ConflictError(
                            f"{entity_type.value.capitalize()} {entity_id} is still "
                            f"referenced by {owner_type.value} {row['id']}"
                        )

    def _hydrate(self, entity_type: EntityType, record: Record) -> Record:
        """Deep copy of ``record`` with one level of relations attached."""
        result = copy.deepcopy(record)
        for name, relation in RELATIONS[entity_type].items():
            table = self._tables[relation.target]
            if relation.many:
                result[name] = [
                    copy.deepcopy(row)
                    for _, row in sorted(table.items())
                    if row.get(relation.foreign_key) == record["id"]
                ]
            else:
                target = table.get(record.get(relation.foreign_key))
                result[name] = copy.deepcopy(target) if target is not None else None
        return result
