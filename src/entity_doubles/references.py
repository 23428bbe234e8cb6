# entity_doubles/references.py
"""
Normalization of entity reference field values.

Accepted input shapes:

- a single entity handle: ``author``
- a mapping with an entity: ``{"entity": author}``
- a mapping with a None entity: ``{"entity": None}`` (explicit empty reference)
- a mapping with entity and target_id: ``{"entity": author, "target_id": 42}``
- a mapping with target_id only: ``{"target_id": 42}``
- a list or tuple of any of the above

Every shape is converted to a list of items of the form
``{"entity": handle, "target_id": handle.id()}``; target-id-only items are
kept as given. An ``entity`` value that is not a handle yields no item.
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Optional, Protocol, TypedDict, runtime_checkable

from entity_doubles.contracts import TargetIdMismatchError

ENTITY_KEY = "entity"
TARGET_ID_KEY = "target_id"


@runtime_checkable
class EntityHandle(Protocol):
    def id(self) -> Any: ...

    def get_entity_type_id(self) -> str: ...


class ReferenceItem(TypedDict, total=False):
    entity: EntityHandle
    target_id: Any


def is_handle(value: Any) -> bool:
    # Dynamic lookup: doubles may expose their methods through __getattr__.
    if value is None or isinstance(value, (Mapping, str, bytes, int, float)):
        return False
    return callable(getattr(value, "id", None)) and callable(getattr(value, "get_entity_type_id", None))


def _is_reference_mapping(value: Any) -> bool:
    return isinstance(value, Mapping) and (ENTITY_KEY in value or TARGET_ID_KEY in value)


def is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def contains_references(value: Any) -> bool:
    """
    Detect whether ``value`` encodes one or more entity references.

    Does not normalize; ``{"entity": None}`` counts as a reference.
    """
    if is_handle(value) or _is_reference_mapping(value):
        return True
    if not is_sequence(value):
        return False
    return any(is_handle(item) or _is_reference_mapping(item) for item in value)


def _format_id(value: Any) -> str:
    if value is None:
        return "None"
    if isinstance(value, (str, int, float, bool)):
        return str(value)
    return type(value).__name__


def normalize_item(entity: EntityHandle, explicit_target_id: Optional[Any] = None) -> ReferenceItem:
    entity_id = entity.id()
    if explicit_target_id is not None and explicit_target_id != entity_id:
        raise TargetIdMismatchError(
            f"Entity reference target_id mismatch: provided '{_format_id(explicit_target_id)}' "
            f"but entity has ID '{_format_id(entity_id)}'. "
            "Either omit target_id (it will be auto-populated) or ensure it matches the entity's ID."
        )
    return {"entity": entity, "target_id": entity_id}


def _normalize_one(value: Any) -> list[ReferenceItem]:
    if is_handle(value):
        return [normalize_item(value)]
    if not isinstance(value, Mapping):
        return []

    if ENTITY_KEY in value:
        entity = value[ENTITY_KEY]
        if not is_handle(entity):
            return []
        return [normalize_item(entity, value.get(TARGET_ID_KEY))]

    if TARGET_ID_KEY in value:
        return [value]  # type: ignore[list-item]
    return []


def normalize(value: Any) -> list[ReferenceItem]:
    """Normalize a raw reference field value into a list of reference items."""
    if is_sequence(value):
        out: list[ReferenceItem] = []
        for item in value:
            out.extend(_normalize_one(item))
        return out
    return _normalize_one(value)


def extract_handles(items: Sequence[Any]) -> dict[int, EntityHandle]:
    """Entities of normalized items, keyed by their position in ``items``."""
    handles: dict[int, EntityHandle] = {}
    for delta, item in enumerate(items):
        if isinstance(item, Mapping) and is_handle(item.get(ENTITY_KEY)):
            handles[delta] = item[ENTITY_KEY]
    return handles


def has_unresolved_references(items: Sequence[Any]) -> bool:
    """True if any item carries a target_id without an entity."""
    return any(
        isinstance(item, Mapping) and TARGET_ID_KEY in item and item.get(ENTITY_KEY) is None for item in items
    )
