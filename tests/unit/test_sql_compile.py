"""
Unit tests for the SQL store's predicate compilation and row mapping.

Statements are compiled against the PostgreSQL dialect; no database is
needed.
"""

from sqlalchemy import select
from sqlalchemy.dialects import postgresql

from job_catalog.core.models import EntityType
from job_catalog.query.builder import build_jobs_query
from job_catalog.query.predicates import TranslationMatch, contains, eq, in_, overlap
from job_catalog.storage.models import (
    Category,
    CategoryTranslation,
    City,
    CityTranslation,
    Country,
    Job,
    JobTranslation,
)
from job_catalog.storage.sql import compile_predicate, to_record


def _sql(model, predicate) -> str:
    stmt = select(model.id).where(compile_predicate(model, predicate))
    return str(stmt.compile(dialect=postgresql.dialect()))


class TestCompilePredicate:
    """Tests for compile_predicate."""

    def test_equality(self):
        assert "jobs.is_active = " in _sql(Job, eq("is_active", True))

    def test_membership(self):
        assert "jobs.type IN" in _sql(Job, in_("type", ["CONTRACT", "FULL_TIME"]))

    def test_skills_overlap(self):
        """Test skills use the array overlap operator."""
        assert "jobs.skills && " in _sql(Job, overlap("skills", ["python"]))

    def test_own_translations(self):
        """Test a translation match becomes an EXISTS over job_translations."""
        sql = _sql(
            Job,
            TranslationMatch(langs=("en", "ka"), condition=contains("title", "dev")),
        )

        assert "EXISTS" in sql
        assert "job_translations.lang IN" in sql
        assert "LIKE" in sql.upper()

    def test_related_translations(self):
        """Test a category match goes through the category relation."""
        sql = _sql(
            Job,
            TranslationMatch(
                relation="category", langs=("en",), condition=in_("name", ["IT"])
            ),
        )

        assert "categories" in sql
        assert "category_translations.name IN" in sql
        assert sql.count("EXISTS") == 2

    def test_full_search_spec(self):
        """Test a fully populated search compiles."""
        spec = build_jobs_query(
            {
                "search": "python",
                "category": ["IT"],
                "jobTypes": "FULL_TIME",
                "experience": "SENIOR",
                "countryId": "1",
                "cityId": "1",
                "remote": "true",
                "salaryMin": "1000",
                "salaryMax": "9000",
            }
        )
        sql = _sql(Job, spec.predicate)

        assert " OR " in sql
        assert "jobs.salary_min >= " in sql
        assert "jobs.salary_max <= " in sql


class TestToRecord:
    """Tests for ORM row to record mapping."""

    def test_translations_included(self):
        category = Category(
            id=1,
            translations=[CategoryTranslation(id=1, category_id=1, lang="en", name="IT")],
        )

        record = to_record(category, EntityType.CATEGORY)

        assert record["id"] == 1
        assert record["translations"] == [
            {"id": 1, "category_id": 1, "lang": "en", "name": "IT"}
        ]

    def test_one_level_of_relations(self):
        """Test relations are attached without their own relations."""
        country = Country(id=1, code="GE", translations=[])
        city = City(
            id=1,
            country_id=1,
            translations=[CityTranslation(id=1, city_id=1, lang="en", name="Tbilisi")],
        )
        city.country = country
        job = Job(
            id=1,
            type="FULL_TIME",
            skills=["python"],
            country_id=1,
            city_id=1,
            user_id=1,
            translations=[
                JobTranslation(id=1, job_id=1, lang="en", title="Dev", description="Code")
            ],
        )
        job.city = city
        job.country = country

        record = to_record(job, EntityType.JOB)

        assert record["city"]["translations"][0]["name"] == "Tbilisi"
        assert "country" not in record["city"]
        assert record["country"]["code"] == "GE"
        assert record["category"] is None
        assert record["translations"][0]["title"] == "Dev"
