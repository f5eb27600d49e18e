"""
SQLAlchemy store adapter.

Compiles the predicate tree into SQLAlchemy expressions and maps ORM rows to
plain records. Translation writes go through the generic upsert-by-language.
"""

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import ColumnElement, and_, func, or_, select, true
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.interfaces import LoaderOption

from job_catalog.core.exceptions import ConflictError, EntityNotFoundError
from job_catalog.core.models import EntityType, SortOrder, WriteOp
from job_catalog.query.predicates import And, Comparison, Or, Predicate, Sort, TranslationMatch
from job_catalog.storage.adapter import RELATIONS, TRANSLATABLE, TRANSLATION_KEY, Record
from job_catalog.storage.connection import DatabaseConnection
from job_catalog.storage.models import (
    Base,
    Category,
    CategoryTranslation,
    City,
    CityTranslation,
    Country,
    CountryTranslation,
    Job,
    JobTranslation,
    User,
)
from job_catalog.storage.upsert import duplicate_keys, upsert_by_key

logger = logging.getLogger(__name__)

MODELS: dict[EntityType, type[Base]] = {
    EntityType.JOB: Job,
    EntityType.CATEGORY: Category,
    EntityType.CITY: City,
    EntityType.COUNTRY: Country,
    EntityType.USER: User,
}

TRANSLATION_MODELS: dict[EntityType, type[Base]] = {
    EntityType.JOB: JobTranslation,
    EntityType.CATEGORY: CategoryTranslation,
    EntityType.CITY: CityTranslation,
    EntityType.COUNTRY: CountryTranslation,
}


def _loader_options(entity_type: EntityType) -> list[LoaderOption]:
    """Eager loads for a record's translations and one level of relations."""
    model = MODELS[entity_type]
    options: list[LoaderOption] = []
    if entity_type in TRANSLATABLE:
        options.append(selectinload(model.translations))  # type: ignore[attr-defined]
    for name, relation in RELATIONS[entity_type].items():
        loader = selectinload(getattr(model, name))
        if relation.target in TRANSLATABLE:
            loader = loader.selectinload(MODELS[relation.target].translations)  # type: ignore[attr-defined]
        options.append(loader)
    return options


# =============================================================================
# Predicate Compilation
# =============================================================================


def _compare(column: Any, condition: Comparison) -> ColumnElement[bool]:
    value = condition.value
    op = condition.op

    if op == "eq":
        return column == value
    if op == "in":
        return column.in_(list(value))
    if op == "gte":
        return column >= value
    if op == "lte":
        return column <= value
    if op == "contains":
        return column.icontains(value, autoescape=True)
    if op == "overlap":
        return column.overlap(list(value))
    raise ValueError(f"Unsupported comparison: {op}")


def compile_predicate(model: type[Base], predicate: Predicate) -> ColumnElement[bool]:
    """
    Compile a predicate tree against an ORM model.

    Args:
        model: Mapped class the predicate applies to (e.g. ``Job``)
        predicate: Predicate tree

    Returns:
        SQLAlchemy boolean clause for a WHERE
    """
    if isinstance(predicate, And):
        return and_(*(compile_predicate(model, p) for p in predicate.items))
    if isinstance(predicate, Or):
        return or_(*(compile_predicate(model, p) for p in predicate.items))
    if isinstance(predicate, Comparison):
        return _compare(getattr(model, predicate.field), predicate)
    if isinstance(predicate, TranslationMatch):
        owner: Any = model
        if predicate.relation is not None:
            owner = getattr(model, predicate.relation).property.mapper.class_
        translation = owner.translations.property.mapper.class_
        clause = owner.translations.any(
            and_(
                translation.lang.in_(list(predicate.langs)),
                _compare(getattr(translation, predicate.condition.field), predicate.condition),
            )
        )
        if predicate.relation is not None:
            clause = getattr(model, predicate.relation).has(clause)
        return clause
    raise ValueError(f"Unsupported predicate: {predicate!r}")


# =============================================================================
# Row Mapping
# =============================================================================


def _columns(obj: Any) -> Record:
    mapper = sa_inspect(obj).mapper
    return {attr.key: getattr(obj, attr.key) for attr in mapper.column_attrs}


def to_record(obj: Any, entity_type: EntityType, nested: bool = True) -> Record:
    """
    Convert an ORM object to a plain record.

    Includes translations and, when ``nested``, one level of relations
    (related records carry translations but no relations of their own).
    """
    record = _columns(obj)
    if entity_type in TRANSLATABLE:
        record["translations"] = [_columns(t) for t in obj.translations]
    if not nested:
        return record

    for name, relation in RELATIONS[entity_type].items():
        value = getattr(obj, name)
        if relation.many:
            record[name] = [to_record(v, relation.target, nested=False) for v in value]
        else:
            record[name] = (
                None if value is None else to_record(value, relation.target, nested=False)
            )
    return record


# =============================================================================
# Store
# =============================================================================


class SqlStore:
    """
    PostgreSQL-backed store implementing the ``StoreAdapter`` contract.

    Reads use the connection's read-only session. Database failures arrive
    already mapped to ``ConflictError`` or ``StoreError``.

    Usage:
        connection = DatabaseConnection()
        await connection.connect()
        store = SqlStore(connection)
        records, total = await store.query(EntityType.JOB, spec.predicate, spec.sort)
    """

    def __init__(self, connection: DatabaseConnection) -> None:
        """
        Initialize store with database connection.

        Args:
            connection: Active database connection
        """
        self._connection = connection

    async def query(
        self,
        entity_type: EntityType,
        predicate: Predicate | None = None,
        sort: Sort | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> tuple[list[Record], int]:
        model: Any = MODELS[entity_type]
        where = true() if predicate is None else compile_predicate(model, predicate)

        stmt = select(model).where(where).options(*_loader_options(entity_type))
        if sort is not None:
            column = getattr(model, sort.field)
            stmt = stmt.order_by(
                column.desc() if sort.order == SortOrder.DESC else column.asc()
            )
        stmt = stmt.order_by(model.id.asc()).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)

        count_stmt = select(func.count()).select_from(model).where(where)

        async with self._connection.read_session() as session:
            rows = (await session.execute(stmt)).scalars().all()
            total = (await session.execute(count_stmt)).scalar_one()
            records = [to_record(row, entity_type) for row in rows]

        return records, total

    async def get(self, entity_type: EntityType, entity_id: int) -> Record | None:
        model: Any = MODELS[entity_type]
        stmt = (
            select(model)
            .where(model.id == entity_id)
            .options(*_loader_options(entity_type))
        )
        async with self._connection.read_session() as session:
            obj = (await session.execute(stmt)).scalar_one_or_none()
            return None if obj is None else to_record(obj, entity_type)

    async def write(
        self, entity_type: EntityType, op: WriteOp, payload: Mapping[str, Any]
    ) -> Record:
        if op == WriteOp.CREATE:
            entity_id = await self._create(entity_type, payload)
        elif op == WriteOp.UPDATE:
            entity_id = await self._update(entity_type, payload)
        elif op == WriteOp.DELETE:
            return await self._delete(entity_type, payload["id"])
        else:
            raise ValueError(f"Unsupported write op: {op}")

        record = await self.get(entity_type, entity_id)
        if record is None:
            raise EntityNotFoundError(entity_type.value, entity_id)
        return record

    async def _create(self, entity_type: EntityType, payload: Mapping[str, Any]) -> int:
        model: Any = MODELS[entity_type]
        data = dict(payload)
        translations = data.pop("translations", None) or []

        duplicates = duplicate_keys(translations, TRANSLATION_KEY)
        if duplicates:
            raise ConflictError(
                f"Duplicate {entity_type.value} translation languages: {duplicates}"
            )

        obj = model(**data)
        if entity_type in TRANSLATABLE:
            translation_model = TRANSLATION_MODELS[entity_type]
            obj.translations = [translation_model(**t) for t in translations]

        async with self._connection.session() as session:
            session.add(obj)
            await session.flush()
            logger.debug(f"Inserted {entity_type.value} {obj.id}")
            return obj.id

    async def _update(self, entity_type: EntityType, payload: Mapping[str, Any]) -> int:
        model: Any = MODELS[entity_type]
        entity_id = payload["id"]
        changes = {k: v for k, v in payload.items() if k not in ("id", "translations")}
        translations = payload.get("translations")

        options = (
            [selectinload(model.translations)] if entity_type in TRANSLATABLE else []
        )
        async with self._connection.session() as session:
            obj = await session.get(model, entity_id, options=options)
            if obj is None:
                raise EntityNotFoundError(entity_type.value, entity_id)

            for field, value in changes.items():
                setattr(obj, field, value)

            if translations is not None and entity_type in TRANSLATABLE:
                translation_model = TRANSLATION_MODELS[entity_type]
                created, updated = upsert_by_key(
                    obj.translations,
                    translations,
                    TRANSLATION_KEY,
                    create=lambda t: translation_model(**t),
                )
                logger.debug(
                    f"Upserted {entity_type.value} {entity_id} translations: "
                    f"{created} created, {updated} updated"
                )
            await session.flush()
        return entity_id

    async def _delete(self, entity_type: EntityType, entity_id: int) -> Record:
        record = await self.get(entity_type, entity_id)
        if record is None:
            raise EntityNotFoundError(entity_type.value, entity_id)

        model: Any = MODELS[entity_type]
        async with self._connection.session() as session:
            obj = await session.get(model, entity_id)
            if obj is None:
                raise EntityNotFoundError(entity_type.value, entity_id)
            await session.delete(obj)
            logger.debug(f"Deleted {entity_type.value} {entity_id}")
        return record
