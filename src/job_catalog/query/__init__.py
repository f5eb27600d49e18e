"""Search request normalization: predicate tree and query spec builder."""

from job_catalog.query.builder import build_jobs_query, normalize_enum, resolve_lang
from job_catalog.query.predicates import (
    And,
    Comparison,
    Or,
    Predicate,
    QuerySpec,
    Sort,
    TranslationMatch,
)

__all__ = [
    "build_jobs_query",
    "normalize_enum",
    "resolve_lang",
    "And",
    "Comparison",
    "Or",
    "Predicate",
    "QuerySpec",
    "Sort",
    "TranslationMatch",
]
