"""
End-to-end tests against real PostgreSQL and Redis.

Run with: pytest tests/e2e/ -v --run-live

DATABASE_URL (or the DATABASE_* variables) must point at a scratch database;
the tests create their own rows and delete them afterwards. The Redis tests
additionally need REDIS_URL.
"""

import os
import uuid

import pytest
import pytest_asyncio

from job_catalog.cache.backends import MemoryCacheBackend, RedisCacheBackend
from job_catalog.cache.read_through import ReadThroughCache
from job_catalog.core.exceptions import ConflictError
from job_catalog.core.models import (
    CategoryCreate,
    CityCreate,
    CountryCreate,
    EntityType,
    JobCreate,
    JobUpdate,
    WriteOp,
)
from job_catalog.services import build_services
from job_catalog.storage.connection import DatabaseConnection
from job_catalog.storage.sql import SqlStore

# Mark all tests in this module as requiring --run-live flag
pytestmark = pytest.mark.live


@pytest_asyncio.fixture
async def sql_store():
    """Store over a live database connection."""
    connection = DatabaseConnection()
    await connection.connect()
    if not connection.is_connected:
        pytest.skip("Database not configured")
    yield SqlStore(connection)
    await connection.disconnect()


@pytest_asyncio.fixture
async def catalog(sql_store):
    """Services plus one freshly inserted country, city, category and user."""
    services = build_services(sql_store, ReadThroughCache(MemoryCacheBackend()))
    suffix = uuid.uuid4().hex[:8]

    user = await sql_store.write(
        EntityType.USER,
        WriteOp.CREATE,
        {"email": f"live-{suffix}@example.com", "username": f"live-{suffix}"},
    )
    country = await services.countries.create(
        CountryCreate.model_validate(
            {"code": "ZZ", "translations": [{"lang": "en", "name": f"Country {suffix}"}]}
        )
    )
    city = await services.cities.create(
        CityCreate.model_validate(
            {
                "countryId": country.id,
                "translations": [
                    {"lang": "en", "name": "Capital"},
                    {"lang": "ka", "name": "დედაქალაქი"},
                ],
            }
        )
    )
    category = await services.categories.create(
        CategoryCreate.model_validate(
            {"translations": [{"lang": "en", "name": f"Live {suffix}"}]}
        )
    )

    ids = {
        "user": user["id"],
        "country": country.id,
        "city": city.id,
        "category": category.id,
        "suffix": suffix,
    }
    yield services, ids

    jobs, _ = await sql_store.query(EntityType.JOB)
    for job in jobs:
        if job["user_id"] == ids["user"]:
            await sql_store.write(EntityType.JOB, WriteOp.DELETE, {"id": job["id"]})
    await sql_store.write(EntityType.CATEGORY, WriteOp.DELETE, {"id": ids["category"]})
    await sql_store.write(EntityType.CITY, WriteOp.DELETE, {"id": ids["city"]})
    await sql_store.write(EntityType.COUNTRY, WriteOp.DELETE, {"id": ids["country"]})
    await sql_store.write(EntityType.USER, WriteOp.DELETE, {"id": ids["user"]})


def _job(ids, **overrides):
    data = {
        "type": "FULL_TIME",
        "userId": ids["user"],
        "countryId": ids["country"],
        "cityId": ids["city"],
        "categoryId": ids["category"],
        "salaryMin": 3000,
        "salaryMax": 5000,
        "skills": ["python", f"tag{ids['suffix']}"],
        "translations": [
            {"lang": "en", "title": "Live Python Developer", "description": "Live test"},
            {"lang": "ka", "title": "პითონ დეველოპერი", "description": "ტესტი"},
        ],
    }
    data.update(overrides)
    return JobCreate.model_validate(data)


class TestSqlSearch:
    """Tests for job search through PostgreSQL."""

    @pytest.mark.asyncio
    async def test_create_and_search(self, catalog):
        """Test a created job is found by category, skill and language."""
        services, ids = catalog
        job = await services.jobs.create(_job(ids))

        page = await services.jobs.search(
            {"category": f"Live {ids['suffix']}", "lang": "ka"}
        )

        assert [j.id for j in page.data] == [job.id]
        assert page.data[0].title == "პითონ დეველოპერი"
        assert page.data[0].city.name == "დედაქალაქი"

        page = await services.jobs.search({"search": f"tag{ids['suffix']}"})
        assert [j.id for j in page.data] == [job.id]

    @pytest.mark.asyncio
    async def test_salary_boundary(self, catalog):
        services, ids = catalog
        job = await services.jobs.create(_job(ids))
        category = f"Live {ids['suffix']}"

        included = await services.jobs.search({"category": category, "salary.min": "3000"})
        excluded = await services.jobs.search({"category": category, "salary.min": "5001"})

        assert [j.id for j in included.data] == [job.id]
        assert excluded.data == []

    @pytest.mark.asyncio
    async def test_update_upserts_translation(self, catalog):
        """Test an update replaces the en translation and keeps ka."""
        services, ids = catalog
        job = await services.jobs.create(_job(ids))

        updated = await services.jobs.update(
            job.id,
            JobUpdate.model_validate(
                {"translations": [{"lang": "en", "title": "Renamed", "description": "x"}]}
            ),
        )
        ka = await services.jobs.find_one(job.id, "ka")

        assert updated.title == "Renamed"
        assert ka.title == "პითონ დეველოპერი"

    @pytest.mark.asyncio
    async def test_delete_referenced_country(self, catalog):
        """Test the foreign key refusal surfaces as a conflict."""
        services, ids = catalog

        with pytest.raises(ConflictError):
            await services.countries.remove(ids["country"])


class TestRedisMirror:
    """Tests for the Redis cache mirror."""

    @pytest.mark.asyncio
    async def test_mirror_round_trip(self, catalog):
        """Test reads populate Redis and writes purge it."""
        if not os.environ.get("REDIS_URL"):
            pytest.skip("REDIS_URL not set")

        services, ids = catalog
        mirror = RedisCacheBackend.from_url(os.environ["REDIS_URL"])
        cache = ReadThroughCache(MemoryCacheBackend(), mirror=mirror, ttl=30)
        services.categories.cache = cache

        try:
            await services.categories.find_one(ids["category"], "en")
            assert f"category:{ids['category']}:en" in await mirror.keys("category*")

            await services.categories.invalidate()
            assert await mirror.keys(f"category:{ids['category']}:*") == []
        finally:
            await cache.close()
