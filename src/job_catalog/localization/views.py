"""
Localized read views.

Each entity has a statically declared projection. Only the fields listed on
a view are ever emitted, so raw translation collections and sensitive user
fields (password, email) cannot leak through serialization.
"""

from datetime import datetime
from typing import ClassVar

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from job_catalog.core.models import CatalogModel, Experience, JobType


class ProjectionView(CatalogModel):
    """Flat projection of a store record; unknown keys are discarded."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    # Nested relations resolved with the same language: field -> view class
    relations: ClassVar[dict[str, type["ProjectionView"]]] = {}

    id: int


class LocalizedView(ProjectionView):
    """Projection with one translation merged into its flat field set."""

    # Fields copied from the selected translation record
    localized_fields: ClassVar[tuple[str, ...]] = ()

    lang: str | None = Field(
        default=None, description="Language of the selected translation"
    )


class UserSummary(ProjectionView):
    """Public part of the owning user."""

    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    avatar: str | None = None


class CategoryView(LocalizedView):
    localized_fields = ("name",)

    name: str | None = None


class CountryRefView(LocalizedView):
    localized_fields = ("name",)

    code: str | None = None
    name: str | None = None


class CityRefView(LocalizedView):
    localized_fields = ("name",)

    country_id: int | None = None
    name: str | None = None


class CityView(CityRefView):
    relations = {"country": CountryRefView}

    country: CountryRefView | None = None


class CountryView(CountryRefView):
    relations = {"cities": CityRefView}

    cities: list[CityRefView] = Field(default_factory=list)


class JobView(LocalizedView):
    """Job with its translation and nested relations flattened to one language."""

    localized_fields = (
        "title",
        "description",
        "company",
        "location",
        "benefits",
        "requirements",
    )
    relations = {
        "category": CategoryView,
        "city": CityRefView,
        "country": CountryRefView,
        "user": UserSummary,
    }

    type: JobType
    salary_min: float | None = None
    salary_max: float | None = None
    skills: list[str] = Field(default_factory=list)
    experience: Experience | None = None

    is_remote: bool = False
    is_active: bool = True
    is_featured: bool = False

    expires_at: datetime | None = None
    posted_at: datetime | None = None
    created_at: datetime | None = None

    country_id: int | None = None
    city_id: int | None = None
    category_id: int | None = None
    user_id: int | None = None

    title: str | None = None
    description: str | None = None
    company: str | None = None
    location: str | None = None
    benefits: str | None = None
    requirements: str | None = None

    category: CategoryView | None = None
    city: CityRefView | None = None
    country: CountryRefView | None = None
    user: UserSummary | None = None
