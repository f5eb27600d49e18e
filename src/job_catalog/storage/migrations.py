"""
Database migrations for the catalog schema.

Tables come from the ORM metadata (``CREATE TABLE IF NOT EXISTS`` semantics);
the extra indexes below back the job search filters and are safely
re-runnable.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from job_catalog.storage.models import Base

# Indexes for the search read-path
MIGRATIONS: list[str] = [
    "CREATE INDEX IF NOT EXISTS idx_jobs_active_posted ON jobs(is_active, posted_at DESC);",
    "CREATE INDEX IF NOT EXISTS idx_jobs_type ON jobs(type);",
    "CREATE INDEX IF NOT EXISTS idx_jobs_experience ON jobs(experience);",
    "CREATE INDEX IF NOT EXISTS idx_jobs_country ON jobs(country_id);",
    "CREATE INDEX IF NOT EXISTS idx_jobs_city ON jobs(city_id);",
    "CREATE INDEX IF NOT EXISTS idx_jobs_category ON jobs(category_id);",
    "CREATE INDEX IF NOT EXISTS idx_jobs_salary ON jobs(salary_min, salary_max);",
    "CREATE INDEX IF NOT EXISTS idx_jobs_skills ON jobs USING GIN (skills);",
    "CREATE INDEX IF NOT EXISTS idx_job_translations_lang ON job_translations(lang);",
]


async def run_migrations(engine: AsyncEngine) -> None:
    """
    Run all migrations on database startup.

    This function is idempotent - it can be safely called multiple times.
    Tables and indexes are only created if they don't already exist.

    Args:
        engine: SQLAlchemy async engine
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        for migration in MIGRATIONS:
            await conn.execute(text(migration))
