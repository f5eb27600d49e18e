"""
Job service: cached paginated search plus CRUD.
"""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, TypeAdapter

from job_catalog.cache.keys import search_key
from job_catalog.core.exceptions import ConflictError, EntityNotFoundError
from job_catalog.core.models import EntityType, JobsQuery, Page
from job_catalog.localization.resolver import resolve_many
from job_catalog.localization.views import JobView
from job_catalog.query.builder import build_jobs_query, resolve_lang
from job_catalog.services.base import EntityService

logger = logging.getLogger(__name__)


class JobsService(EntityService[JobView]):
    """
    Job search and management.

    Usage:
        service = JobsService(store, cache)
        page = await service.search({"category": "IT", "lang": "ka"})
    """

    entity_type = EntityType.JOB
    view = JobView

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._page = TypeAdapter(Page[JobView])

    async def search(self, query: JobsQuery | Mapping[str, Any]) -> Page[JobView]:
        """
        Run a filtered, sorted, paginated job search.

        Invalid filter values are ignored. Results are cached per normalized
        query and language, so equivalent requests share one entry.

        Args:
            query: Parsed query or raw request parameters

        Returns:
            One page of localized jobs with pagination metadata
        """
        raw = query if isinstance(query, JobsQuery) else JobsQuery.from_params(query)
        spec = build_jobs_query(raw)
        lang = resolve_lang(raw.lang)

        async def compute() -> Page[JobView]:
            records, total = await self.store.query(
                EntityType.JOB,
                spec.predicate,
                spec.sort,
                offset=spec.offset,
                limit=spec.limit,
            )
            logger.debug(f"Job search matched {total} records")
            return Page[JobView].build(
                resolve_many(records, lang, JobView), total, spec.page, spec.limit
            )

        return await self.cache.get_or_compute(
            search_key(EntityType.JOB, spec, lang), compute, self._page
        )

    async def update(
        self, entity_id: int, data: BaseModel, lang: str | None = None
    ) -> JobView:
        """
        Partially update a job.

        A salary bound sent alone is checked against the stored opposite
        bound before anything is written.

        Raises:
            EntityNotFoundError: No such job
            ConflictError: The merged salary range would be inverted
        """
        sent = data.model_fields_set & {"salary_min", "salary_max"}
        if sent:
            current = await self.store.get(EntityType.JOB, entity_id)
            if current is None:
                raise EntityNotFoundError(EntityType.JOB.value, entity_id)
            merged = {field: current.get(field) for field in ("salary_min", "salary_max")}
            merged.update({field: getattr(data, field) for field in sent})
            low, high = merged["salary_min"], merged["salary_max"]
            if low is not None and high is not None and low > high:
                raise ConflictError(
                    f"Job {entity_id} salary_min ({low:g}) would exceed "
                    f"salary_max ({high:g})"
                )
        return await super().update(entity_id, data, lang)
