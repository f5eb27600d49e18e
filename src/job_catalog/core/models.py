"""
Domain models for the job catalog.

Enums, the lenient search query, write payloads and the paginated result
envelope. Localized read views live in ``job_catalog.localization.views``.
"""

import math
from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

DEFAULT_LANG = "en"

T = TypeVar("T")


# =============================================================================
# Enums
# =============================================================================


class EntityType(str, Enum):
    """
    Entity types known to the store.

    The value doubles as the cache-key prefix for the entity's namespace.
    """

    JOB = "job"
    CATEGORY = "category"
    CITY = "city"
    COUNTRY = "country"
    USER = "user"


class JobType(str, Enum):
    """Employment type of a job posting."""

    FULL_TIME = "FULL_TIME"
    PART_TIME = "PART_TIME"
    CONTRACT = "CONTRACT"
    INTERNSHIP = "INTERNSHIP"
    FREELANCE = "FREELANCE"
    TEMPORARY = "TEMPORARY"


class Experience(str, Enum):
    """Required seniority of a job posting."""

    INTERN = "INTERN"
    JUNIOR = "JUNIOR"
    MID = "MID"
    SENIOR = "SENIOR"
    LEAD = "LEAD"


class SortField(str, Enum):
    """Whitelisted job sort columns (store field names)."""

    POSTED_AT = "posted_at"
    SALARY_MIN = "salary_min"
    SALARY_MAX = "salary_max"
    CREATED_AT = "created_at"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class WriteOp(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class CatalogModel(BaseModel):
    """Base for models exposed over the API (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Lenient Search Query
# =============================================================================


def _lenient_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    if not math.isfinite(number) or not number.is_integer():
        return None
    return int(number)


def _lenient_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _lenient_str(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _lenient_list(value: Any) -> list[str | None]:
    if value is None:
        return []
    items = value if isinstance(value, (list, tuple)) else [value]
    result: list[str | None] = []
    for item in items:
        if item is None:
            result.append(None)
            continue
        text = _lenient_str(item)
        if text is None:
            continue
        result.extend(part.strip() for part in text.split(","))
    return result


_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


def _lenient_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    text = _lenient_str(value)
    if text is None:
        return None
    text = text.strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    return None


# Accepted spellings of every query parameter, mapped to field names
_PARAM_ALIASES = {
    "countryId": "country_id",
    "cityId": "city_id",
    "jobTypes": "job_types",
    "salaryMin": "salary_min",
    "salaryMax": "salary_max",
    "salary.min": "salary_min",
    "salary.max": "salary_max",
    "salary[min]": "salary_min",
    "salary[max]": "salary_max",
}


class JobsQuery(BaseModel):
    """
    Raw, partially untrusted job search request.

    Every field is parsed leniently: junk becomes ``None`` (or is dropped from
    lists) instead of raising. Semantic normalization (enum domains, clamping,
    sort whitelist) is the query builder's job.
    """

    model_config = ConfigDict(extra="ignore")

    page: int | None = None
    limit: int | None = None
    sort: str | None = None
    order: str | None = None
    lang: str | None = None
    search: str | None = None

    country_id: int | None = None
    city_id: int | None = None
    type: str | None = None

    salary_min: float | None = None
    salary_max: float | None = None

    category: list[str | None] = Field(default_factory=list)
    experience: list[str | None] = Field(default_factory=list)
    job_types: list[str | None] = Field(default_factory=list)

    remote: bool | None = None

    @model_validator(mode="before")
    @classmethod
    def _canonical_names(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return {}

        normalized: dict[str, Any] = {}
        for key, value in data.items():
            if key == "salary":
                if isinstance(value, Mapping):
                    normalized.setdefault("salary_min", value.get("min"))
                    normalized.setdefault("salary_max", value.get("max"))
                continue
            normalized[_PARAM_ALIASES.get(key, key)] = value
        return normalized

    @field_validator("page", "limit", "country_id", "city_id", mode="before")
    @classmethod
    def _parse_int(cls, value: Any) -> int | None:
        return _lenient_int(value)

    @field_validator("salary_min", "salary_max", mode="before")
    @classmethod
    def _parse_float(cls, value: Any) -> float | None:
        return _lenient_float(value)

    @field_validator("sort", "order", "lang", "search", "type", mode="before")
    @classmethod
    def _parse_str(cls, value: Any) -> str | None:
        return _lenient_str(value)

    @field_validator("category", "experience", "job_types", mode="before")
    @classmethod
    def _parse_list(cls, value: Any) -> list[str | None]:
        return _lenient_list(value)

    @field_validator("remote", mode="before")
    @classmethod
    def _parse_bool(cls, value: Any) -> bool | None:
        return _lenient_bool(value)

    @classmethod
    def from_params(cls, params: Any) -> "JobsQuery":
        """
        Build from request query parameters.

        Accepts a plain mapping or a multi-dict (``getlist``); repeated keys
        are collected into a list.
        """
        if hasattr(params, "getlist") and hasattr(params, "keys"):
            data: dict[str, Any] = {}
            for key in params.keys():
                values = params.getlist(key)
                data[key] = values[0] if len(values) == 1 else values
            return cls.model_validate(data)
        return cls.model_validate(params)


# =============================================================================
# Paginated Result
# =============================================================================


class Page(CatalogModel, Generic[T]):
    """One page of localized search results."""

    data: list[T]
    total_items: int
    total_pages: int
    page: int
    limit: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def build(cls, data: list[T], total_items: int, page: int, limit: int) -> "Page[T]":
        total_pages = math.ceil(total_items / limit) if limit else 0
        return cls(
            data=data,
            total_items=total_items,
            total_pages=total_pages,
            page=page,
            limit=limit,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        )


# =============================================================================
# Write Payloads
# =============================================================================


class NameTranslationIn(CatalogModel):
    """Translation record for entities with a single localized ``name``."""

    lang: str = Field(..., min_length=1)
    name: str


class JobTranslationIn(CatalogModel):
    lang: str = Field(..., min_length=1)
    title: str
    description: str
    company: str | None = None
    location: str | None = None
    benefits: str | None = None
    requirements: str | None = None


def _check_salary_range(salary_min: float | None, salary_max: float | None) -> None:
    if salary_min is not None and salary_max is not None and salary_min > salary_max:
        raise ValueError("salary_min must not exceed salary_max")


def _reject_nulls(model: BaseModel, fields: tuple[str, ...]) -> None:
    """Refuse an explicit null for a field whose column is NOT NULL."""
    nulls = [f for f in fields if f in model.model_fields_set and getattr(model, f) is None]
    if nulls:
        raise ValueError(f"{', '.join(nulls)} cannot be null")


class JobCreate(CatalogModel):
    type: JobType
    user_id: int
    country_id: int
    city_id: int
    category_id: int | None = None

    salary_min: float | None = Field(default=None, ge=0)
    salary_max: float | None = Field(default=None, ge=0)
    skills: list[str] = Field(default_factory=list)

    experience: Experience | None = None
    expires_at: datetime | None = None

    is_featured: bool = False
    is_remote: bool = False
    is_active: bool = True

    translations: list[JobTranslationIn]

    @model_validator(mode="after")
    def _salary_order(self) -> "JobCreate":
        _check_salary_range(self.salary_min, self.salary_max)
        return self


class JobUpdate(CatalogModel):
    type: JobType | None = None
    country_id: int | None = None
    city_id: int | None = None
    category_id: int | None = None

    salary_min: float | None = Field(default=None, ge=0)
    salary_max: float | None = Field(default=None, ge=0)
    skills: list[str] | None = None

    experience: Experience | None = None
    expires_at: datetime | None = None

    is_featured: bool | None = None
    is_remote: bool | None = None
    is_active: bool | None = None

    translations: list[JobTranslationIn] | None = None

    @model_validator(mode="after")
    def _check(self) -> "JobUpdate":
        _reject_nulls(
            self,
            (
                "type",
                "country_id",
                "city_id",
                "skills",
                "is_featured",
                "is_remote",
                "is_active",
                "translations",
            ),
        )
        _check_salary_range(self.salary_min, self.salary_max)
        return self


class CategoryCreate(CatalogModel):
    translations: list[NameTranslationIn] = Field(default_factory=list)


class CategoryUpdate(CatalogModel):
    translations: list[NameTranslationIn] | None = None

    @model_validator(mode="after")
    def _check(self) -> "CategoryUpdate":
        _reject_nulls(self, ("translations",))
        return self


class CityCreate(CatalogModel):
    country_id: int
    translations: list[NameTranslationIn]


class CityUpdate(CatalogModel):
    country_id: int | None = None
    translations: list[NameTranslationIn] | None = None

    @model_validator(mode="after")
    def _check(self) -> "CityUpdate":
        _reject_nulls(self, ("country_id", "translations"))
        return self


class CountryCreate(CatalogModel):
    code: str = Field(..., min_length=2, max_length=3)
    translations: list[NameTranslationIn]


class CountryUpdate(CatalogModel):
    code: str | None = Field(default=None, min_length=2, max_length=3)
    translations: list[NameTranslationIn] | None = None

    @model_validator(mode="after")
    def _check(self) -> "CountryUpdate":
        _reject_nulls(self, ("code", "translations"))
        return self
