"""
City service.
"""

from job_catalog.cache.keys import list_key
from job_catalog.core.models import EntityType
from job_catalog.localization.views import CityView
from job_catalog.query.builder import resolve_lang
from job_catalog.query.predicates import eq
from job_catalog.services.base import EntityService


class CitiesService(EntityService[CityView]):
    entity_type = EntityType.CITY
    view = CityView

    async def find_all(
        self, lang: str | None = None, country_id: int | None = None
    ) -> list[CityView]:
        """
        All cities, optionally restricted to one country.

        Each scope is cached separately (``city:list:all:en``,
        ``city:list:3:en``).
        """
        lang = resolve_lang(lang)
        if country_id is None:
            return await super().find_all(lang)
        return await self._list(
            list_key(self.entity_type, lang, scope=country_id),
            lang,
            predicate=eq("country_id", country_id),
        )
