# entity_doubles/builder.py
"""
Fluent construction of entity double definitions.

    definition = (
        EntityDoubleDefinitionBuilder.create("node")
        .bundle("article")
        .id(1)
        .field("title", "Test Article")
        .method("get_owner_id", lambda: 7)
        .build()
    )

Declaring a field adds the ``fieldable`` capability; everything else is
validated by ``EntityDoubleDefinition`` itself when ``build()`` runs.
"""
from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any, Optional

from entity_doubles._compat import Self
from entity_doubles.capabilities import CapabilityTag, expand
from entity_doubles.contracts import EntityDoubleDefinition, FieldDoubleDefinition, Identifier


class EntityDoubleDefinitionBuilder:
    def __init__(self, entity_type: str) -> None:
        self._entity_type = entity_type
        self._bundle: Optional[str] = None
        self._id: Optional[Identifier] = None
        self._uuid: Optional[str] = None
        self._label: Optional[str] = None
        self._fields: dict[str, FieldDoubleDefinition] = {}
        self._interfaces: list[CapabilityTag] = []
        self._primary_interface: Optional[CapabilityTag] = None
        self._methods: dict[str, Callable[..., Any]] = {}
        self._context: dict[str, Any] = {}
        self._mutable = False
        self._lenient = False
        self._traits: list[type] = []

    @classmethod
    def create(cls, entity_type: str) -> EntityDoubleDefinitionBuilder:
        return cls(entity_type)

    @classmethod
    def from_interface(cls, entity_type: str, interface: CapabilityTag | str) -> EntityDoubleDefinitionBuilder:
        """Start a builder whose primary (and first declared) capability is ``interface``."""
        tag = CapabilityTag(interface)
        builder = cls(entity_type)
        builder._primary_interface = tag
        builder._interfaces.append(tag)
        return builder

    @classmethod
    def from_definition(cls, definition: EntityDoubleDefinition) -> EntityDoubleDefinitionBuilder:
        builder = cls(definition.entity_type)
        builder._bundle = definition.bundle
        builder._id = definition.id
        builder._uuid = definition.uuid
        builder._label = definition.label
        builder._fields = dict(definition.fields)
        builder._interfaces = list(definition.interfaces)
        builder._primary_interface = definition.primary_interface
        builder._methods = dict(definition.methods)
        builder._context = definition.user_context()
        builder._mutable = definition.mutable
        builder._lenient = definition.lenient
        builder._traits = list(definition.traits)
        return builder

    def bundle(self, bundle: str) -> Self:
        self._bundle = bundle
        return self

    def id(self, value: Optional[Identifier]) -> Self:
        self._id = value
        return self

    def uuid(self, value: Optional[str]) -> Self:
        self._uuid = value
        return self

    def label(self, value: Optional[str]) -> Self:
        self._label = value
        return self

    def field(self, name: str, value: Any) -> Self:
        self._fields[name] = value if isinstance(value, FieldDoubleDefinition) else FieldDoubleDefinition(value)
        return self

    def fields(self, values: Mapping[str, Any]) -> Self:
        for name, value in values.items():
            self.field(name, value)
        return self

    def interface(self, tag: CapabilityTag | str) -> Self:
        tag = CapabilityTag(tag)
        if tag not in self._interfaces:
            self._interfaces.append(tag)
        return self

    def interfaces(self, tags: Iterable[CapabilityTag | str]) -> Self:
        for tag in tags:
            self.interface(tag)
        return self

    def primary_interface(self, tag: CapabilityTag | str) -> Self:
        self._primary_interface = CapabilityTag(tag)
        return self.interface(tag)

    def method(self, name: str, implementation: Callable[..., Any]) -> Self:
        self._methods[name] = implementation
        return self

    def methods(self, implementations: Mapping[str, Callable[..., Any]]) -> Self:
        self._methods.update(implementations)
        return self

    def context(self, key: str, value: Any) -> Self:
        self._context[key] = value
        return self

    def with_context(self, values: Mapping[str, Any]) -> Self:
        self._context.update(values)
        return self

    def mutable(self, flag: bool = True) -> Self:
        self._mutable = flag
        return self

    def lenient(self, flag: bool = True) -> Self:
        self._lenient = flag
        return self

    def trait(self, mixin: type) -> Self:
        self._traits.append(mixin)
        return self

    def build(self) -> EntityDoubleDefinition:
        interfaces = list(self._interfaces)
        if self._fields and CapabilityTag.FIELDABLE not in expand(interfaces):
            interfaces.append(CapabilityTag.FIELDABLE)
        return EntityDoubleDefinition(
            entity_type=self._entity_type,
            bundle=self._bundle or self._entity_type,
            id=self._id,
            uuid=self._uuid,
            label=self._label,
            fields=self._fields,
            interfaces=tuple(interfaces),
            primary_interface=self._primary_interface,
            methods=self._methods,
            context=self._context,
            mutable=self._mutable,
            lenient=self._lenient,
            traits=tuple(self._traits),
        )
