"""
Category service.
"""

from job_catalog.core.models import EntityType
from job_catalog.localization.views import CategoryView
from job_catalog.services.base import EntityService


class CategoriesService(EntityService[CategoryView]):
    entity_type = EntityType.CATEGORY
    view = CategoryView
