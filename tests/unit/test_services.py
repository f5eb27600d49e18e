"""
Unit tests for the catalog services: cached reads, write invalidation and
localized results over a seeded in-memory store.
"""

import pytest
from pydantic import ValidationError

from job_catalog.cache.backends import MemoryCacheBackend
from job_catalog.cache.read_through import ReadThroughCache
from job_catalog.core.exceptions import (
    CacheBackendError,
    ConflictError,
    EntityNotFoundError,
)
from job_catalog.core.models import (
    CategoryCreate,
    CategoryUpdate,
    CityCreate,
    EntityType,
    JobCreate,
    JobUpdate,
)
from job_catalog.services import JobsService
from job_catalog.storage.memory import MemoryStore


class TestJobSearch:
    """Tests for JobsService.search."""

    @pytest.mark.asyncio
    async def test_localized_page(self, services):
        """Test results are localized and carry pagination metadata."""
        page = await services.jobs.search({"lang": "ka"})

        assert [job.id for job in page.data] == [2, 3, 1, 5]
        assert page.total_items == 4
        assert page.data[0].title == "დიზაინერი"
        assert page.data[0].category.name == "დიზაინი"
        # Job 3 has no ka translation: first translation (en) is used
        assert page.data[1].title == "Backend Engineer"
        assert page.data[1].lang == "en"
        assert page.data[1].city.name == "Berlin"

    @pytest.mark.asyncio
    async def test_read_through_idempotence(self, services, store):
        """Test a repeated search is byte-identical and skips the store."""
        params = {"category": "IT", "jobTypes": "FULL_TIME,CONTRACT"}

        first = await services.jobs.search(params)
        queries = store.query_count
        second = await services.jobs.search(params)

        assert store.query_count == queries
        assert first.model_dump_json() == second.model_dump_json()

    @pytest.mark.asyncio
    async def test_equivalent_requests_share_cache(self, services, store):
        """Test reordered and re-cased parameters hit the same entry."""
        await services.jobs.search({"jobTypes": "full_time", "experience": "senior"})
        queries = store.query_count
        await services.jobs.search({"experience": "SENIOR", "jobTypes": ["FULL_TIME"]})

        assert store.query_count == queries

    @pytest.mark.asyncio
    async def test_lenient_filtering(self, services):
        """Test junk values are ignored rather than rejected."""
        junk = await services.jobs.search(
            {"category": ["undefined", None, "Design"], "sort": "dropTable"}
        )
        clean = await services.jobs.search({"category": ["Design"]})

        assert junk.model_dump_json() == clean.model_dump_json()
        assert [job.id for job in junk.data] == [2]

    @pytest.mark.asyncio
    async def test_salary_boundary(self, services):
        """Test salary.min is an inclusive lower bound."""
        included = await services.jobs.search({"salary.min": "3000"})
        excluded = await services.jobs.search({"salary.min": "5001"})

        assert 1 in [job.id for job in included.data]
        assert 1 not in [job.id for job in excluded.data]

    @pytest.mark.asyncio
    async def test_pagination_boundary(self, cache):
        """Test page 3 of 25 jobs at limit 10."""
        store = MemoryStore()
        store.seed(EntityType.USER, {"id": 1, "email": "a@example.com"})
        store.seed(
            EntityType.COUNTRY,
            {"id": 1, "code": "GE", "translations": [{"lang": "en", "name": "Georgia"}]},
        )
        store.seed(
            EntityType.CITY,
            {"id": 1, "country_id": 1, "translations": [{"lang": "en", "name": "Tbilisi"}]},
        )
        for _ in range(25):
            store.seed(
                EntityType.JOB,
                {
                    "type": "FULL_TIME",
                    "country_id": 1,
                    "city_id": 1,
                    "user_id": 1,
                    "translations": [{"lang": "en", "title": "Job", "description": "-"}],
                },
            )

        page = await JobsService(store, cache).search({"page": "3", "limit": "10"})

        assert page.total_items == 25
        assert page.total_pages == 3
        assert page.has_next_page is False
        assert page.has_prev_page is True
        assert len(page.data) == 5

    @pytest.mark.asyncio
    async def test_user_summary_only(self, services):
        page = await services.jobs.search({})
        user = page.data[0].user.model_dump()

        assert user["username"] == "owner"
        assert "password" not in user
        assert "email" not in user


class TestFindOne:
    """Tests for single-entity reads."""

    @pytest.mark.asyncio
    async def test_translation_fallback(self, services):
        """Test exact language, then first translation."""
        ka = await services.categories.find_one(1, "ka")
        fr = await services.categories.find_one(1, "fr")

        assert ka.name == "აიტი"
        assert fr.name == "IT"
        assert fr.lang == "en"

    @pytest.mark.asyncio
    async def test_default_language(self, services):
        category = await services.categories.find_one(2)

        assert category.name == "Design"

    @pytest.mark.asyncio
    async def test_cached(self, services, store):
        await services.jobs.find_one(1, "en")
        queries = store.query_count
        await services.jobs.find_one(1, "en")

        assert store.query_count == queries

    @pytest.mark.asyncio
    async def test_not_found_not_cached(self, services, cache):
        """Test a missing entity raises and leaves no cache entry."""
        with pytest.raises(EntityNotFoundError) as exc_info:
            await services.jobs.find_one(99, "en")

        assert exc_info.value.message == "Job with ID 99 not found"
        assert await cache.primary.keys("job*") == []

    @pytest.mark.asyncio
    async def test_city_with_country(self, services):
        city = await services.cities.find_one(1, "ka")

        assert city.name == "თბილისი"
        assert city.country.name == "საქართველო"

    @pytest.mark.asyncio
    async def test_country_cities(self, services):
        cities = await services.countries.find_cities(2, "en")

        assert [(c.id, c.name, c.lang) for c in cities] == [(2, "Berlin", "de")]

    @pytest.mark.asyncio
    async def test_country_cities_missing_country(self, services):
        with pytest.raises(EntityNotFoundError):
            await services.countries.find_cities(99)


class TestLists:
    @pytest.mark.asyncio
    async def test_categories(self, services):
        categories = await services.categories.find_all("ka")

        assert [c.name for c in categories] == ["აიტი", "დიზაინი"]

    @pytest.mark.asyncio
    async def test_cities_by_country(self, services, cache):
        """Test per-country city lists are cached under their own scope."""
        cities = await services.cities.find_all("en", country_id=1)

        assert [c.id for c in cities] == [1]
        assert await cache.primary.keys("city:list:1:*") == ["city:list:1:en"]

    @pytest.mark.asyncio
    async def test_countries_embed_cities(self, services):
        countries = await services.countries.find_all("en")

        assert [c.name for c in countries] == ["Georgia", "Germany"]
        assert [city.id for city in countries[0].cities] == [1]


class TestWrites:
    """Tests for writes and cache invalidation."""

    async def _warm(self, services):
        await services.jobs.search({})
        await services.jobs.find_one(1, "en")
        await services.categories.find_all("en")
        await services.cities.find_all("en")
        await services.countries.find_all("en")

    @pytest.mark.asyncio
    async def test_job_write_scoped_invalidation(self, services, cache, mirror):
        """Test a job write clears job keys only, in both tiers."""
        await self._warm(services)

        await services.jobs.update(1, JobUpdate(is_remote=False))

        for backend in (cache.primary, mirror):
            assert await backend.keys("job*") == []
            assert await backend.keys("category*") != []
            assert await backend.keys("city*") != []
            assert await backend.keys("country*") != []

    @pytest.mark.asyncio
    async def test_category_write_cascades_to_jobs(self, services, cache):
        """Test jobs embedding a category are purged with it."""
        await self._warm(services)

        await services.categories.update(
            1,
            CategoryUpdate.model_validate(
                {"translations": [{"lang": "en", "name": "Tech"}]}
            ),
        )

        assert await cache.primary.keys("job*") == []
        assert await cache.primary.keys("category*") == []
        assert await cache.primary.keys("city*") != []

    @pytest.mark.asyncio
    async def test_city_write_cascades(self, services, cache):
        await self._warm(services)

        await services.cities.create(
            CityCreate.model_validate(
                {"countryId": 1, "translations": [{"lang": "en", "name": "Batumi"}]}
            )
        )

        assert await cache.primary.keys("country*") == []
        assert await cache.primary.keys("job*") == []
        assert await cache.primary.keys("category*") != []

    @pytest.mark.asyncio
    async def test_read_after_write_is_fresh(self, services):
        """Test a read right after an update sees the new value."""
        before = await services.jobs.find_one(1, "en")
        await services.jobs.update(
            1,
            JobUpdate.model_validate(
                {
                    "translations": [
                        {
                            "lang": "en",
                            "title": "Staff Python Developer",
                            "description": "x",
                        }
                    ]
                }
            ),
        )
        after = await services.jobs.find_one(1, "en")

        assert before.title == "Senior Python Developer"
        assert after.title == "Staff Python Developer"

    @pytest.mark.asyncio
    async def test_create_job_localized_to_first_translation(self, services):
        job = await services.jobs.create(
            JobCreate.model_validate(
                {
                    "type": "FREELANCE",
                    "userId": 1,
                    "countryId": 1,
                    "cityId": 1,
                    "categoryId": 2,
                    "skills": ["go"],
                    "translations": [
                        {"lang": "ka", "title": "ფრილანსერი", "description": "-"},
                        {"lang": "en", "title": "Freelancer", "description": "-"},
                    ],
                }
            )
        )

        assert job.id == 6
        assert job.title == "ფრილანსერი"
        assert job.category.name == "დიზაინი"

        page = await services.jobs.search({"jobTypes": "FREELANCE"})
        assert [j.id for j in page.data] == [6]

    @pytest.mark.asyncio
    async def test_create_with_explicit_lang(self, services):
        category = await services.categories.create(
            CategoryCreate.model_validate(
                {
                    "translations": [
                        {"lang": "ka", "name": "გაყიდვები"},
                        {"lang": "en", "name": "Sales"},
                    ]
                }
            ),
            lang="en",
        )

        assert category.name == "Sales"

    @pytest.mark.asyncio
    async def test_update_missing(self, services):
        with pytest.raises(EntityNotFoundError):
            await services.jobs.update(99, JobUpdate(is_remote=True))

    @pytest.mark.asyncio
    async def test_partial_salary_checked_against_stored_bound(self, services, store):
        """Test a lone salary bound cannot invert the stored range."""
        with pytest.raises(ConflictError):
            await services.jobs.update(1, JobUpdate(salary_min=6000))
        with pytest.raises(ConflictError):
            await services.jobs.update(1, JobUpdate(salary_max=2000))

        record = await store.get(EntityType.JOB, 1)
        assert (record["salary_min"], record["salary_max"]) == (3000, 5000)

    @pytest.mark.asyncio
    async def test_partial_salary_within_range(self, services):
        job = await services.jobs.update(1, JobUpdate(salary_min=4500))

        assert (job.salary_min, job.salary_max) == (4500, 5000)

    @pytest.mark.asyncio
    async def test_partial_salary_clearing_opposite_bound(self, services):
        """Test raising the minimum is fine when the maximum is cleared with it."""
        job = await services.jobs.update(
            1, JobUpdate.model_validate({"salaryMin": 9000, "salaryMax": None})
        )

        assert (job.salary_min, job.salary_max) == (9000, None)

    @pytest.mark.asyncio
    async def test_partial_salary_missing_job(self, services):
        with pytest.raises(EntityNotFoundError):
            await services.jobs.update(99, JobUpdate(salary_min=1))

    @pytest.mark.asyncio
    async def test_explicit_null_never_reaches_store(self, services, store):
        """Test a null job type is refused and search keeps working."""
        with pytest.raises(ValidationError):
            await services.jobs.update(1, JobUpdate.model_validate({"type": None}))

        assert (await store.get(EntityType.JOB, 1))["type"] == "FULL_TIME"
        page = await services.jobs.search({})
        assert [job.id for job in page.data] == [2, 3, 1, 5]

    @pytest.mark.asyncio
    async def test_clear_nullable_category(self, services):
        job = await services.jobs.update(1, JobUpdate.model_validate({"categoryId": None}))

        assert job.category is None

    @pytest.mark.asyncio
    async def test_remove(self, services):
        await services.jobs.find_one(5, "en")

        removed = await services.jobs.remove(5)

        assert removed.id == 5
        with pytest.raises(EntityNotFoundError):
            await services.jobs.find_one(5, "en")

    @pytest.mark.asyncio
    async def test_remove_referenced(self, services, cache):
        """Test a refused delete leaves the cache untouched."""
        await services.countries.find_all("en")

        with pytest.raises(ConflictError):
            await services.countries.remove(1)

        assert await cache.primary.keys("country*") != []

    @pytest.mark.asyncio
    async def test_broken_mirror_does_not_fail_writes(self, store):
        class BrokenMirror(MemoryCacheBackend):
            name = "broken"

            async def keys(self, pattern):
                raise CacheBackendError(self.name, "down")

        cache = ReadThroughCache(MemoryCacheBackend(), mirror=BrokenMirror())
        service = JobsService(store, cache)
        job = await service.update(1, JobUpdate(is_featured=True))

        assert job.is_featured is True
