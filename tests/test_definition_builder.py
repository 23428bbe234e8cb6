from __future__ import annotations

import pytest

from entity_doubles.builder import EntityDoubleDefinitionBuilder
from entity_doubles.capabilities import CapabilityTag
from entity_doubles.contracts import ConfigurationError, EntityDoubleDefinition, FieldDoubleDefinition


class PublishedTrait:
    def is_published(self) -> bool:
        return True


def test_builder_produces_a_complete_definition() -> None:
    owner = lambda: 7  # noqa: E731

    definition = (
        EntityDoubleDefinitionBuilder.create("node")
        .bundle("article")
        .id(1)
        .uuid("uuid-1")
        .label("Test Article")
        .field("title", "Test Article")
        .method("get_owner_id", owner)
        .context("tenant", "acme")
        .mutable()
        .lenient()
        .trait(PublishedTrait)
        .build()
    )

    assert isinstance(definition, EntityDoubleDefinition)
    assert definition.entity_type == "node"
    assert definition.bundle == "article"
    assert definition.id == 1
    assert definition.uuid == "uuid-1"
    assert definition.label == "Test Article"
    assert definition.get_field("title").value == "Test Article"
    assert definition.get_method("get_owner_id") is owner
    assert definition.context == {"tenant": "acme"}
    assert definition.mutable is True
    assert definition.lenient is True
    assert definition.traits == (PublishedTrait,)


def test_bundle_defaults_to_entity_type() -> None:
    assert EntityDoubleDefinitionBuilder.create("user").build().bundle == "user"


def test_declaring_fields_adds_fieldable() -> None:
    definition = EntityDoubleDefinitionBuilder.create("node").fields({"a": 1, "b": 2}).build()

    assert definition.interfaces == (CapabilityTag.FIELDABLE,)
    assert list(definition.fields) == ["a", "b"]


def test_fieldable_is_not_duplicated_when_implied() -> None:
    definition = (
        EntityDoubleDefinitionBuilder.create("node")
        .interface(CapabilityTag.CONTENT_ENTITY)
        .field("title", "x")
        .build()
    )

    assert definition.interfaces == (CapabilityTag.CONTENT_ENTITY,)


def test_field_definitions_are_kept_as_given() -> None:
    title = FieldDoubleDefinition("x")

    definition = EntityDoubleDefinitionBuilder.create("node").field("title", title).build()

    assert definition.get_field("title") is title


def test_from_interface_sets_the_primary_capability() -> None:
    definition = EntityDoubleDefinitionBuilder.from_interface("node", "content_entity").build()

    assert definition.primary_interface is CapabilityTag.CONTENT_ENTITY
    assert definition.interfaces == (CapabilityTag.CONTENT_ENTITY,)


def test_interfaces_are_deduplicated() -> None:
    definition = (
        EntityDoubleDefinitionBuilder.create("node")
        .interfaces(["entity_owner", CapabilityTag.ENTITY_OWNER, "entity_changed"])
        .primary_interface("entity_changed")
        .build()
    )

    assert definition.interfaces == (CapabilityTag.ENTITY_OWNER, CapabilityTag.ENTITY_CHANGED)
    assert definition.primary_interface is CapabilityTag.ENTITY_CHANGED


def test_unknown_interface_is_rejected() -> None:
    with pytest.raises(ValueError):
        EntityDoubleDefinitionBuilder.create("node").interface("nonexistent")


def test_from_definition_round_trips_without_the_stored_definition() -> None:
    original = (
        EntityDoubleDefinitionBuilder.create("node")
        .id(3)
        .field("title", "x")
        .with_context({"a": 1})
        .build()
        .with_context({"b": 2})
    )

    rebuilt = EntityDoubleDefinitionBuilder.from_definition(original).label("Relabeled").build()

    assert rebuilt.id == 3
    assert rebuilt.label == "Relabeled"
    assert rebuilt.context == {"a": 1, "b": 2}
    assert rebuilt.get_field("title") is original.get_field("title")
    assert original.label is None


def test_reserved_context_key_fails_at_build() -> None:
    builder = EntityDoubleDefinitionBuilder.create("node").context(EntityDoubleDefinition.CONTEXT_KEY, "x")

    with pytest.raises(ConfigurationError):
        builder.build()
