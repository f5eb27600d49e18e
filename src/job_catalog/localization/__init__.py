"""Translation selection and flattened per-language views."""

from job_catalog.localization.resolver import resolve, resolve_many, select_translation
from job_catalog.localization.views import (
    CategoryView,
    CityRefView,
    CityView,
    CountryRefView,
    CountryView,
    JobView,
    LocalizedView,
    UserSummary,
)

__all__ = [
    "resolve",
    "resolve_many",
    "select_translation",
    "CategoryView",
    "CityRefView",
    "CityView",
    "CountryRefView",
    "CountryView",
    "JobView",
    "LocalizedView",
    "UserSummary",
]
