"""
Localization resolver.

Selects the best translation of a translatable record and flattens it into a
statically typed view. Pure functions, no I/O.
"""

from collections.abc import Mapping, Sequence
from typing import Any, TypeVar

from job_catalog.localization.views import LocalizedView, ProjectionView

V = TypeVar("V", bound=ProjectionView)


def select_translation(
    translations: Sequence[Mapping[str, Any]] | None, lang: str
) -> Mapping[str, Any] | None:
    """
    Pick the translation for ``lang``.

    Falls back to the first translation in collection order, then to None
    when the collection is empty.
    """
    if not translations:
        return None
    for translation in translations:
        if translation.get("lang") == lang:
            return translation
    return translations[0]


def resolve(entity: Mapping[str, Any] | None, lang: str, view: type[V]) -> V | None:
    """
    Produce the localized view of a store record.

    Args:
        entity: Raw record (may carry ``translations`` and nested relations)
        lang: Requested language
        view: View class describing the output projection

    Returns:
        View instance, or None when ``entity`` is None
    """
    if entity is None:
        return None

    data: dict[str, Any] = {
        key: value
        for key, value in entity.items()
        if key != "translations" and key not in view.relations
    }

    if issubclass(view, LocalizedView):
        translation = select_translation(entity.get("translations"), lang)
        for field in view.localized_fields:
            data[field] = translation.get(field) if translation else None
        data["lang"] = translation.get("lang") if translation else None

    for name, relation_view in view.relations.items():
        value = entity.get(name)
        if isinstance(value, Mapping):
            data[name] = resolve(value, lang, relation_view)
        elif isinstance(value, Sequence) and not isinstance(value, str):
            data[name] = [resolve(item, lang, relation_view) for item in value]

    return view.model_validate(data)


def resolve_many(
    entities: Sequence[Mapping[str, Any]], lang: str, view: type[V]
) -> list[V]:
    """Resolve a list of records; None entries are skipped."""
    resolved = (resolve(entity, lang, view) for entity in entities)
    return [item for item in resolved if item is not None]
