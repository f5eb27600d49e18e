"""
Store-agnostic predicate tree and query specification.

Nodes are frozen pydantic models discriminated by ``kind`` so a whole
``QuerySpec`` serializes to one canonical JSON string (used for cache keys)
and can be compiled by any store adapter.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from job_catalog.core.models import SortField, SortOrder

ComparisonOp = Literal["eq", "in", "gte", "lte", "contains", "overlap"]


class _Node(BaseModel):
    model_config = ConfigDict(frozen=True)


class Comparison(_Node):
    """
    Compare one field of the record against a value.

    - ``eq``: equality
    - ``in``: set membership, ``value`` is a tuple
    - ``gte`` / ``lte``: numeric bounds (inclusive)
    - ``contains``: case-insensitive substring
    - ``overlap``: list column shares at least one element with ``value``
    """

    kind: Literal["comparison"] = "comparison"
    field: str
    op: ComparisonOp
    value: Any


class TranslationMatch(_Node):
    """
    Some translation satisfies ``condition`` with ``lang`` in ``langs``.

    ``relation`` names a related entity whose translations are searched
    (e.g. ``"category"``); ``None`` means the record's own translations.
    """

    kind: Literal["translation"] = "translation"
    relation: str | None = None
    langs: tuple[str, ...]
    condition: Comparison


class And(_Node):
    kind: Literal["and"] = "and"
    items: tuple["Predicate", ...]


class Or(_Node):
    kind: Literal["or"] = "or"
    items: tuple["Predicate", ...]


Predicate = Annotated[
    Union[Comparison, TranslationMatch, And, Or], Field(discriminator="kind")
]

And.model_rebuild()
Or.model_rebuild()


class Sort(_Node):
    field: str
    order: SortOrder = SortOrder.ASC


class QuerySpec(_Node):
    """Normalized search request: predicate + sort + offset/limit."""

    predicate: Predicate
    sort_field: SortField = SortField.POSTED_AT
    sort_order: SortOrder = SortOrder.DESC
    offset: int = 0
    limit: int = 10

    @property
    def sort(self) -> Sort:
        return Sort(field=self.sort_field.value, order=self.sort_order)

    @property
    def page(self) -> int:
        return self.offset // self.limit + 1

    def canonical(self) -> str:
        """Deterministic serialization; equal specs give equal strings."""
        return self.model_dump_json()


def eq(field: str, value: Any) -> Comparison:
    return Comparison(field=field, op="eq", value=value)


def in_(field: str, values: Any) -> Comparison:
    return Comparison(field=field, op="in", value=tuple(values))


def gte(field: str, value: float) -> Comparison:
    return Comparison(field=field, op="gte", value=value)


def lte(field: str, value: float) -> Comparison:
    return Comparison(field=field, op="lte", value=value)


def contains(field: str, value: str) -> Comparison:
    return Comparison(field=field, op="contains", value=value)


def overlap(field: str, values: Any) -> Comparison:
    return Comparison(field=field, op="overlap", value=tuple(values))
