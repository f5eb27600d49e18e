"""
Catalog services.

Usage:
    from job_catalog.services import build_services

    services = build_services(store, cache)
    page = await services.jobs.search({"lang": "ka"})
"""

from dataclasses import dataclass

from job_catalog.cache.read_through import ReadThroughCache
from job_catalog.services.base import INVALIDATES, EntityService
from job_catalog.services.categories import CategoriesService
from job_catalog.services.cities import CitiesService
from job_catalog.services.countries import CountriesService
from job_catalog.services.jobs import JobsService
from job_catalog.storage.adapter import StoreAdapter


@dataclass
class Services:
    jobs: JobsService
    categories: CategoriesService
    cities: CitiesService
    countries: CountriesService


def build_services(store: StoreAdapter, cache: ReadThroughCache) -> Services:
    """Wire every service to one store and one cache."""
    return Services(
        jobs=JobsService(store, cache),
        categories=CategoriesService(store, cache),
        cities=CitiesService(store, cache),
        countries=CountriesService(store, cache),
    )


__all__ = [
    "INVALIDATES",
    "EntityService",
    "JobsService",
    "CategoriesService",
    "CitiesService",
    "CountriesService",
    "Services",
    "build_services",
]
