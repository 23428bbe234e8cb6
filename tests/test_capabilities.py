from __future__ import annotations

import pytest

from entity_doubles.capabilities import (
    CATALOG,
    CapabilityTag,
    ReturnKind,
    ancestry,
    declared_methods,
    declaring_capability,
    expand,
    neutral_default,
    return_kind,
)


def test_every_parent_is_in_the_catalog() -> None:
    for spec in CATALOG.values():
        for parent in spec.parents:
            assert parent in CATALOG


def test_ancestry_is_depth_first_without_repeats() -> None:
    assert ancestry(CapabilityTag.CONTENT_ENTITY) == (
        CapabilityTag.CONTENT_ENTITY,
        CapabilityTag.FIELDABLE,
        CapabilityTag.ENTITY,
        CapabilityTag.REVISIONABLE,
        CapabilityTag.TRANSLATABLE,
    )


def test_expand_keeps_declaration_order() -> None:
    assert expand([CapabilityTag.ENTITY_OWNER, CapabilityTag.FIELDABLE]) == (
        CapabilityTag.ENTITY_OWNER,
        CapabilityTag.FIELDABLE,
        CapabilityTag.ENTITY,
    )


def test_declaring_capability_searches_primary_first() -> None:
    capabilities = [CapabilityTag.FIELD_ITEM_LIST, CapabilityTag.FIELDABLE]

    assert declaring_capability("get", capabilities) is CapabilityTag.FIELD_ITEM_LIST
    assert declaring_capability("get", capabilities, CapabilityTag.FIELDABLE) is CapabilityTag.FIELDABLE
    assert declaring_capability("nonexistent", capabilities) is None


def test_declared_methods_include_inherited_ones() -> None:
    names = declared_methods([CapabilityTag.ENTITY_REFERENCE_ITEM])

    assert "has_new_entity" in names
    assert "get_value" in names
    assert "referenced_entities" not in names


@pytest.mark.parametrize(
    ("kind", "expected"),
    [
        (ReturnKind.NONE, None),
        (ReturnKind.BOOL, False),
        (ReturnKind.INT, 0),
        (ReturnKind.STR, ""),
        (ReturnKind.LIST, []),
        (ReturnKind.MAPPING, {}),
    ],
)
def test_neutral_default_by_return_kind(kind: ReturnKind, expected: object) -> None:
    assert neutral_default(kind) == expected


def test_return_kind_falls_back_to_none() -> None:
    assert return_kind("is_published", CapabilityTag.ENTITY_PUBLISHED) is ReturnKind.BOOL
    assert return_kind("is_published", None) is ReturnKind.NONE
    assert return_kind("unknown", CapabilityTag.ENTITY) is ReturnKind.NONE


def test_capability_tags_render_as_their_value() -> None:
    assert str(CapabilityTag.FIELDABLE) == "fieldable"
    assert CapabilityTag("content_entity") is CapabilityTag.CONTENT_ENTITY
