"""
Job search query builder.

Turns an untrusted ``JobsQuery`` (or raw parameter mapping) into a normalized
``QuerySpec``. Invalid dimensions are dropped, never rejected, so a bad query
parameter degrades to "ignored" instead of an error.
"""

import logging
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any, TypeVar

from job_catalog.core.models import (
    DEFAULT_LANG,
    Experience,
    JobsQuery,
    JobType,
    SortField,
    SortOrder,
)
from job_catalog.query.predicates import (
    And,
    Or,
    Predicate,
    QuerySpec,
    TranslationMatch,
    contains,
    eq,
    gte,
    in_,
    lte,
    overlap,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

# Languages always searched in addition to the requested one
SEARCH_FALLBACK_LANGS = ("en", "ka")

DEFAULT_LIMIT = 10
MAX_LIMIT = 100
# Offsets past this overflow the integer bind parameter
MAX_OFFSET = 2**31 - 1

# Accepted sort spellings -> store field
_SORT_FIELDS = {
    "postedAt": SortField.POSTED_AT,
    "salaryMin": SortField.SALARY_MIN,
    "salaryMax": SortField.SALARY_MAX,
    "createdAt": SortField.CREATED_AT,
    **{field.value: field for field in SortField},
}

_JUNK_CATEGORY_VALUES = {"", "undefined", "null"}


def normalize_enum(value: str | None, enum_cls: type[E]) -> E | None:
    """
    Case-insensitively match ``value`` against an enum's values.

    Returns None for empty or unknown values instead of raising.
    """
    if not value:
        return None
    try:
        return enum_cls(value.strip().upper())
    except ValueError:
        return None


def _normalize_enum_list(values: Iterable[str | None], enum_cls: type[E]) -> list[str]:
    mapped = {normalize_enum(v, enum_cls) for v in values}
    return sorted(m.value for m in mapped if m is not None)


def _search_langs(lang: str) -> tuple[str, ...]:
    return tuple(sorted({lang, *SEARCH_FALLBACK_LANGS}))


def resolve_lang(lang: str | None) -> str:
    """Requested language, defaulting to ``en`` when blank."""
    if lang and lang.strip():
        return lang.strip()
    return DEFAULT_LANG


def build_jobs_query(raw: JobsQuery | Mapping[str, Any]) -> QuerySpec:
    """
    Build a normalized query specification for a job search.

    Args:
        raw: Parsed ``JobsQuery`` or a raw parameter mapping

    Returns:
        QuerySpec with an AND predicate tree, whitelisted sort, clamped paging
    """
    query = raw if isinstance(raw, JobsQuery) else JobsQuery.from_params(raw)
    lang = resolve_lang(query.lang)
    langs = _search_langs(lang)

    clauses: list[Predicate] = [eq("is_active", True)]

    # ─────────── Enum filters ───────────
    job_types = _normalize_enum_list(query.job_types, JobType)
    single_type = normalize_enum(query.type, JobType)
    if job_types:
        clauses.append(in_("type", job_types))
    elif single_type is not None:
        clauses.append(eq("type", single_type.value))

    experience = _normalize_enum_list(query.experience, Experience)
    if experience:
        clauses.append(in_("experience", experience))

    # ─────────── Relations ───────────
    if query.country_id is not None and query.country_id > 0:
        clauses.append(eq("country_id", query.country_id))
    if query.city_id is not None and query.city_id > 0:
        clauses.append(eq("city_id", query.city_id))

    categories = sorted(
        {
            c.strip()
            for c in query.category
            if c is not None and c.strip().lower() not in _JUNK_CATEGORY_VALUES
        }
    )
    if categories:
        clauses.append(
            TranslationMatch(
                relation="category",
                langs=langs,
                condition=in_("name", categories),
            )
        )

    # ─────────── Flags & ranges ───────────
    if query.remote is not None:
        clauses.append(eq("is_remote", query.remote))

    if query.salary_min is not None:
        clauses.append(gte("salary_min", query.salary_min))
    if query.salary_max is not None:
        clauses.append(lte("salary_max", query.salary_max))

    # ─────────── Free-text search ───────────
    search = (query.search or "").strip()
    if search:
        tokens = sorted(set(search.lower().split()))
        clauses.append(
            Or(
                items=(
                    TranslationMatch(langs=langs, condition=contains("title", search)),
                    TranslationMatch(
                        langs=langs, condition=contains("description", search)
                    ),
                    overlap("skills", tokens),
                )
            )
        )

    # ─────────── Sorting & pagination ───────────
    sort_field = _SORT_FIELDS.get(query.sort or "", SortField.POSTED_AT)
    order = (query.order or "").strip().lower()
    sort_order = SortOrder(order) if order in ("asc", "desc") else SortOrder.DESC

    limit = DEFAULT_LIMIT if query.limit is None else min(max(query.limit, 1), MAX_LIMIT)
    page = min(max(query.page or 1, 1), MAX_OFFSET // limit + 1)

    spec = QuerySpec(
        predicate=And(items=tuple(clauses)),
        sort_field=sort_field,
        sort_order=sort_order,
        offset=(page - 1) * limit,
        limit=limit,
    )
    logger.debug(f"Built job query spec: {spec.canonical()}")
    return spec
