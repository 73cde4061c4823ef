from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

NOT_FOUND = -1


@dataclass(frozen=True, slots=True)
class InventoryLookup:
    has_item: bool
    item_index: int
    can_use: bool


def normalize_item_id(value: object) -> str:
    """Reduce a raw id, an ORM row or an ``{"id": ...}`` payload to its exact string form."""
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        for key in ("id", "_id"):
            if key in value and value[key] is not None:
                return normalize_item_id(value[key])
        return str(value)
    nested = getattr(value, "id", None)
    if nested is not None and nested is not value:
        return normalize_item_id(nested)
    return str(value)


def find_item(inventory: Sequence[object], item_id: object) -> InventoryLookup:
    target = normalize_item_id(item_id)
    item_index = next(
        (index for index, entry in enumerate(inventory) if normalize_item_id(entry) == target),
        NOT_FOUND,
    )
    has_item = item_index != NOT_FOUND
    # Usability has no extra conditions yet, so it mirrors membership.
    return InventoryLookup(has_item=has_item, item_index=item_index, can_use=has_item)
