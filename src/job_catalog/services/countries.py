"""
Country service.
"""

from typing import Any

from pydantic import TypeAdapter

from job_catalog.cache.keys import children_key
from job_catalog.core.exceptions import EntityNotFoundError
from job_catalog.core.models import EntityType
from job_catalog.localization.views import CityRefView, CountryView
from job_catalog.query.builder import resolve_lang
from job_catalog.services.base import EntityService


class CountriesService(EntityService[CountryView]):
    entity_type = EntityType.COUNTRY
    view = CountryView

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._cities = TypeAdapter(list[CityRefView])

    async def find_cities(self, country_id: int, lang: str | None = None) -> list[CityRefView]:
        """
        Cities of one country, localized.

        Raises:
            EntityNotFoundError: Country does not exist
        """
        lang = resolve_lang(lang)

        async def compute() -> list[CityRefView]:
            record = await self.store.get(EntityType.COUNTRY, country_id)
            if record is None:
                raise EntityNotFoundError(EntityType.COUNTRY.value, country_id)
            return self._localize(record, lang).cities

        return await self.cache.get_or_compute(
            children_key(EntityType.COUNTRY, country_id, "cities", lang),
            compute,
            self._cities,
        )
