# entity_doubles/capabilities.py
"""
Capability catalog.

A capability is a named interface a double can be declared to support. Each
capability lists the methods it declares itself (not the inherited ones) and
the kind of value each method returns, which is what lenient doubles fall
back to when a method has no resolver.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from entity_doubles._compat import StrEnum


class CapabilityTag(StrEnum):
    ENTITY = "entity"
    FIELDABLE = "fieldable"
    REVISIONABLE = "revisionable"
    TRANSLATABLE = "translatable"
    CONTENT_ENTITY = "content_entity"
    CONFIG_ENTITY = "config_entity"
    ENTITY_CHANGED = "entity_changed"
    ENTITY_OWNER = "entity_owner"
    ENTITY_PUBLISHED = "entity_published"
    FIELD_DEFINITION = "field_definition"
    FIELD_ITEM_LIST = "field_item_list"
    ENTITY_REFERENCE_FIELD_ITEM_LIST = "entity_reference_field_item_list"
    FIELD_ITEM = "field_item"
    ENTITY_REFERENCE_ITEM = "entity_reference_item"


class ReturnKind(StrEnum):
    NONE = "none"
    BOOL = "bool"
    INT = "int"
    STR = "str"
    LIST = "list"
    MAPPING = "mapping"


@dataclass(frozen=True)
class CapabilitySpec:
    tag: CapabilityTag
    parents: tuple[CapabilityTag, ...] = ()
    methods: Mapping[str, ReturnKind] = field(default_factory=dict)

    def declares(self, method: str) -> bool:
        return method in self.methods


_N = ReturnKind.NONE
_B = ReturnKind.BOOL
_I = ReturnKind.INT
_S = ReturnKind.STR
_L = ReturnKind.LIST
_M = ReturnKind.MAPPING


CATALOG: dict[CapabilityTag, CapabilitySpec] = {
    CapabilityTag.ENTITY: CapabilitySpec(
        tag=CapabilityTag.ENTITY,
        methods={
            "id": _N,
            "uuid": _N,
            "label": _N,
            "bundle": _S,
            "get_entity_type_id": _S,
            "is_new": _B,
            "enforce_is_new": _N,
            "language": _N,
            "save": _N,
            "delete": _N,
            "pre_save": _N,
            "post_save": _N,
            "to_url": _N,
            "to_link": _N,
            "access": _B,
            "create_duplicate": _N,
            "get_cache_tags": _L,
            "get_cache_contexts": _L,
            "get_cache_max_age": _I,
            "to_array": _M,
        },
    ),
    CapabilityTag.FIELDABLE: CapabilitySpec(
        tag=CapabilityTag.FIELDABLE,
        parents=(CapabilityTag.ENTITY,),
        methods={
            "has_field": _B,
            "get_field_definition": _N,
            "get_field_definitions": _M,
            "get": _N,
            "set": _N,
            "get_fields": _M,
            "validate": _L,
            "is_validation_required": _B,
        },
    ),
    CapabilityTag.REVISIONABLE: CapabilitySpec(
        tag=CapabilityTag.REVISIONABLE,
        parents=(CapabilityTag.ENTITY,),
        methods={
            "get_revision_id": _N,
            "is_new_revision": _B,
            "set_new_revision": _N,
            "is_default_revision": _B,
            "is_latest_revision": _B,
        },
    ),
    CapabilityTag.TRANSLATABLE: CapabilitySpec(
        tag=CapabilityTag.TRANSLATABLE,
        parents=(CapabilityTag.ENTITY,),
        methods={
            "is_translatable": _B,
            "has_translation": _B,
            "get_translation": _N,
            "add_translation": _N,
            "remove_translation": _N,
            "get_translation_languages": _M,
            "is_default_translation": _B,
        },
    ),
    CapabilityTag.CONTENT_ENTITY: CapabilitySpec(
        tag=CapabilityTag.CONTENT_ENTITY,
        parents=(CapabilityTag.FIELDABLE, CapabilityTag.REVISIONABLE, CapabilityTag.TRANSLATABLE),
        methods={
            "has_translation_changes": _B,
            "get_loaded_revision_id": _N,
        },
    ),
    CapabilityTag.CONFIG_ENTITY: CapabilitySpec(
        tag=CapabilityTag.CONFIG_ENTITY,
        parents=(CapabilityTag.ENTITY,),
        methods={
            "status": _B,
            "enable": _N,
            "disable": _N,
            "set_status": _N,
            "get_dependencies": _M,
            "is_installable": _B,
        },
    ),
    CapabilityTag.ENTITY_CHANGED: CapabilitySpec(
        tag=CapabilityTag.ENTITY_CHANGED,
        methods={
            "get_changed_time": _I,
            "set_changed_time": _N,
            "get_changed_time_across_translations": _I,
        },
    ),
    CapabilityTag.ENTITY_OWNER: CapabilitySpec(
        tag=CapabilityTag.ENTITY_OWNER,
        methods={
            "get_owner": _N,
            "get_owner_id": _N,
            "set_owner": _N,
            "set_owner_id": _N,
        },
    ),
    CapabilityTag.ENTITY_PUBLISHED: CapabilitySpec(
        tag=CapabilityTag.ENTITY_PUBLISHED,
        methods={
            "is_published": _B,
            "set_published": _N,
            "set_unpublished": _N,
        },
    ),
    CapabilityTag.FIELD_DEFINITION: CapabilitySpec(
        tag=CapabilityTag.FIELD_DEFINITION,
        methods={
            "get_name": _S,
            "get_type": _S,
            "get_label": _S,
            "is_required": _B,
            "is_multiple": _B,
            "get_setting": _N,
            "get_settings": _M,
        },
    ),
    CapabilityTag.FIELD_ITEM_LIST: CapabilitySpec(
        tag=CapabilityTag.FIELD_ITEM_LIST,
        methods={
            "first": _N,
            "get": _N,
            "is_empty": _B,
            "count": _I,
            "get_iterator": _L,
            "get_value": _L,
            "set_value": _N,
            "get_name": _S,
            "get_entity": _N,
            "get_field_definition": _N,
            "filter_empty_items": _N,
            "append_item": _N,
            "remove_item": _N,
            "access": _B,
            "validate": _L,
        },
    ),
    CapabilityTag.ENTITY_REFERENCE_FIELD_ITEM_LIST: CapabilitySpec(
        tag=CapabilityTag.ENTITY_REFERENCE_FIELD_ITEM_LIST,
        parents=(CapabilityTag.FIELD_ITEM_LIST,),
        methods={
            "referenced_entities": _L,
        },
    ),
    CapabilityTag.FIELD_ITEM: CapabilitySpec(
        tag=CapabilityTag.FIELD_ITEM,
        methods={
            "get_value": _M,
            "set_value": _N,
            "is_empty": _B,
            "get_parent": _N,
            "get_entity": _N,
            "get_field_definition": _N,
            "main_property_name": _S,
        },
    ),
    CapabilityTag.ENTITY_REFERENCE_ITEM: CapabilitySpec(
        tag=CapabilityTag.ENTITY_REFERENCE_ITEM,
        parents=(CapabilityTag.FIELD_ITEM,),
        methods={
            "has_new_entity": _B,
        },
    ),
}


def ancestry(tag: CapabilityTag) -> tuple[CapabilityTag, ...]:
    """Return ``tag`` followed by its parents, depth first, without repeats."""
    out: list[CapabilityTag] = []
    stack = [CapabilityTag(tag)]
    while stack:
        current = stack.pop(0)
        if current in out:
            continue
        out.append(current)
        stack[0:0] = list(CATALOG[current].parents)
    return tuple(out)


def expand(tags: Iterable[CapabilityTag]) -> tuple[CapabilityTag, ...]:
    """Closure of ``tags`` over their parents, in declaration order."""
    out: list[CapabilityTag] = []
    for tag in tags:
        for item in ancestry(tag):
            if item not in out:
                out.append(item)
    return tuple(out)


def declaring_capability(
    method: str,
    capabilities: Iterable[CapabilityTag],
    primary: Optional[CapabilityTag] = None,
) -> Optional[CapabilityTag]:
    """
    Find the capability that declares ``method``.

    The primary capability (and its parents) is searched first, then the
    remaining capabilities in order. Returns None when nothing declares it.
    """
    ordered = list(capabilities)
    if primary is not None:
        ordered = [primary, *(tag for tag in ordered if tag != primary)]
    for tag in ordered:
        for candidate in ancestry(tag):
            if CATALOG[candidate].declares(method):
                return candidate
    return None


def declared_methods(capabilities: Iterable[CapabilityTag]) -> frozenset[str]:
    names: set[str] = set()
    for tag in expand(capabilities):
        names.update(CATALOG[tag].methods)
    return frozenset(names)


def return_kind(method: str, capability: Optional[CapabilityTag]) -> ReturnKind:
    if capability is None:
        return ReturnKind.NONE
    return CATALOG[capability].methods.get(method, ReturnKind.NONE)


def neutral_default(kind: ReturnKind) -> Any:
    if kind is ReturnKind.BOOL:
        return False
    if kind is ReturnKind.INT:
        return 0
    if kind is ReturnKind.STR:
        return ""
    if kind is ReturnKind.LIST:
        return []
    if kind is ReturnKind.MAPPING:
        return {}
    return None
