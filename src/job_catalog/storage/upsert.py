"""
Generic match-or-create by key.

Used for translation collections of every entity type (and by both store
adapters) so duplicate-language writes become updates instead of constraint
violations.
"""

from collections.abc import Callable, Iterable, Mapping, MutableMapping
from typing import Any, TypeVar

T = TypeVar("T")


def _key_of(item: Any, key: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(key)
    return getattr(item, key)


def _apply_fields(item: Any, changes: Mapping[str, Any]) -> None:
    if isinstance(item, MutableMapping):
        item.update(changes)
        return
    for field, value in changes.items():
        setattr(item, field, value)


def duplicate_keys(records: Iterable[Mapping[str, Any]], key: str) -> list[Any]:
    """Return key values that occur more than once, in first-seen order."""
    seen: set[Any] = set()
    duplicates: list[Any] = []
    for record in records:
        value = record.get(key)
        if value in seen and value not in duplicates:
            duplicates.append(value)
        seen.add(value)
    return duplicates


def upsert_by_key(
    items: list[T],
    changes: Iterable[Mapping[str, Any]],
    key: str,
    create: Callable[[Mapping[str, Any]], T],
    apply: Callable[[T, Mapping[str, Any]], None] = _apply_fields,
) -> tuple[int, int]:
    """
    Merge ``changes`` into ``items`` in place, matching on ``key``.

    Existing items get the change applied; unmatched changes are created via
    ``create`` and appended. Later changes for the same key win.

    Args:
        items: Existing collection (list of dicts or ORM objects)
        changes: Incoming records, each carrying ``key``
        key: Field identifying an item (e.g. ``"lang"``)
        create: Factory for new items
        apply: Updates an existing item; defaults to field assignment

    Returns:
        Tuple of (created, updated) counts
    """
    index = {_key_of(item, key): item for item in items}
    created = updated = 0

    for change in changes:
        match = index.get(change[key])
        if match is None:
            match = create(change)
            items.append(match)
            index[change[key]] = match
            created += 1
        else:
            apply(match, change)
            updated += 1

    return created, updated
