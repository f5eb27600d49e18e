"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime, timezone

import pytest

from job_catalog.cache.backends import MemoryCacheBackend
from job_catalog.cache.read_through import ReadThroughCache
from job_catalog.core.models import EntityType
from job_catalog.services import build_services
from job_catalog.storage.memory import MemoryStore


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help="Run live integration tests against DATABASE_URL / REDIS_URL",
    )


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "live: marks tests needing real services")


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless --run-live is specified."""
    if config.getoption("--run-live"):
        # Run all tests including live tests
        return

    skip_live = pytest.mark.skip(reason="Need --run-live option to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


# =============================================================================
# Catalog Fixtures
# =============================================================================


def _day(day: int) -> datetime:
    return datetime(2026, 1, day, 9, 0, tzinfo=timezone.utc)


def seed_catalog(store: MemoryStore) -> MemoryStore:
    """
    Populate a store with a small two-country catalog.

    Active jobs ordered by posted_at desc: 2, 3, 1, 5. Job 4 is inactive.
    """
    store.seed(
        EntityType.USER,
        {
            "id": 1,
            "email": "owner@example.com",
            "password": "hashed-secret",
            "username": "owner",
            "first_name": "Nino",
            "last_name": "Beridze",
            "avatar": None,
        },
    )

    store.seed(
        EntityType.COUNTRY,
        {
            "id": 1,
            "code": "GE",
            "translations": [
                {"lang": "en", "name": "Georgia"},
                {"lang": "ka", "name": "საქართველო"},
            ],
        },
    )
    store.seed(
        EntityType.COUNTRY,
        {
            "id": 2,
            "code": "DE",
            "translations": [
                {"lang": "de", "name": "Deutschland"},
                {"lang": "en", "name": "Germany"},
            ],
        },
    )

    store.seed(
        EntityType.CITY,
        {
            "id": 1,
            "country_id": 1,
            "translations": [
                {"lang": "en", "name": "Tbilisi"},
                {"lang": "ka", "name": "თბილისი"},
            ],
        },
    )
    store.seed(
        EntityType.CITY,
        {
            "id": 2,
            "country_id": 2,
            "translations": [{"lang": "de", "name": "Berlin"}],
        },
    )

    store.seed(
        EntityType.CATEGORY,
        {
            "id": 1,
            "translations": [
                {"lang": "en", "name": "IT"},
                {"lang": "ka", "name": "აიტი"},
            ],
        },
    )
    store.seed(
        EntityType.CATEGORY,
        {
            "id": 2,
            "translations": [
                {"lang": "ka", "name": "დიზაინი"},
                {"lang": "en", "name": "Design"},
            ],
        },
    )

    store.seed(
        EntityType.JOB,
        {
            "id": 1,
            "type": "FULL_TIME",
            "experience": "SENIOR",
            "country_id": 1,
            "city_id": 1,
            "category_id": 1,
            "user_id": 1,
            "salary_min": 3000,
            "salary_max": 5000,
            "skills": ["python", "fastapi"],
            "is_remote": True,
            "posted_at": _day(10),
            "translations": [
                {
                    "lang": "en",
                    "title": "Senior Python Developer",
                    "description": "Build public APIs",
                    "company": "Acme",
                },
                {
                    "lang": "ka",
                    "title": "უფროსი პითონ დეველოპერი",
                    "description": "საჯარო API-ების შექმნა",
                    "company": "აკმე",
                },
            ],
        },
    )
    store.seed(
        EntityType.JOB,
        {
            "id": 2,
            "type": "PART_TIME",
            "experience": "JUNIOR",
            "country_id": 1,
            "city_id": 1,
            "category_id": 2,
            "user_id": 1,
            "salary_min": 1000,
            "salary_max": 2000,
            "skills": ["figma"],
            "is_remote": False,
            "posted_at": _day(12),
            "translations": [
                {
                    "lang": "ka",
                    "title": "დიზაინერი",
                    "description": "ინტერფეისების დიზაინი",
                },
                {
                    "lang": "en",
                    "title": "UI Designer",
                    "description": "Design product interfaces",
                },
            ],
        },
    )
    store.seed(
        EntityType.JOB,
        {
            "id": 3,
            "type": "CONTRACT",
            "experience": "MID",
            "country_id": 2,
            "city_id": 2,
            "category_id": 1,
            "user_id": 1,
            "salary_min": 4000,
            "salary_max": 6000,
            "skills": ["golang", "kubernetes"],
            "is_remote": True,
            "posted_at": _day(11),
            "translations": [
                {
                    "lang": "en",
                    "title": "Backend Engineer",
                    "description": "Distributed systems in Go",
                },
                {
                    "lang": "fr",
                    "title": "Ingénieur Backend",
                    "description": "Systèmes distribués en Go",
                },
            ],
        },
    )
    store.seed(
        EntityType.JOB,
        {
            "id": 4,
            "type": "FULL_TIME",
            "experience": "SENIOR",
            "country_id": 2,
            "city_id": 2,
            "category_id": None,
            "user_id": 1,
            "salary_min": None,
            "salary_max": None,
            "skills": ["python"],
            "is_remote": False,
            "is_active": False,
            "posted_at": _day(13),
            "translations": [
                {
                    "lang": "en",
                    "title": "Archived Python Role",
                    "description": "No longer open",
                },
            ],
        },
    )
    store.seed(
        EntityType.JOB,
        {
            "id": 5,
            "type": "INTERNSHIP",
            "experience": "INTERN",
            "country_id": 1,
            "city_id": 1,
            "category_id": 1,
            "user_id": 1,
            "salary_min": 500,
            "salary_max": 800,
            "skills": [],
            "is_remote": False,
            "posted_at": _day(9),
            "translations": [
                {
                    "lang": "en",
                    "title": "Data Intern",
                    "description": "Learn SQL and reporting",
                },
            ],
        },
    )
    return store


@pytest.fixture
def store() -> MemoryStore:
    """Seeded in-memory store."""
    return seed_catalog(MemoryStore())


@pytest.fixture
def mirror() -> MemoryCacheBackend:
    """Second in-memory backend standing in for the shared mirror."""
    return MemoryCacheBackend()


@pytest.fixture
def cache(mirror) -> ReadThroughCache:
    """Read-through cache with an in-memory primary and mirror."""
    return ReadThroughCache(MemoryCacheBackend(), mirror=mirror, ttl=60)


@pytest.fixture
def services(store, cache):
    """All services wired to the seeded store and the test cache."""
    return build_services(store, cache)
