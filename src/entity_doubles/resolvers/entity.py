# entity_doubles/resolvers/entity.py
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from entity_doubles.adapters.doubler import DoubleAdapter
from entity_doubles.capabilities import CapabilityTag
from entity_doubles.contracts import EntityDoubleDefinition, ImmutableDoubleError, UnknownFieldError
from entity_doubles.guardrails import DEFAULT_GUARDRAILS, GuardrailEnforcer
from entity_doubles.resolution import (
    PROPERTY_GET,
    PROPERTY_SET,
    DoubleBlueprint,
    DoubleKind,
    ResolutionChain,
    ResolverMap,
)
from entity_doubles.resolvers.field_list import FieldItemListDoubleBuilder
from entity_doubles.state import NOT_SET, MutableStateContainer


class EntityDoubleBuilder:
    """
    Builds the resolver map and the double for one entity definition.

    One builder backs exactly one double: the state container and the field
    caches it holds are never shared, even between doubles built from the
    same definition.
    """

    def __init__(
        self,
        definition: EntityDoubleDefinition,
        *,
        adapter: DoubleAdapter,
        state: Optional[MutableStateContainer] = None,
        guardrails: GuardrailEnforcer = DEFAULT_GUARDRAILS,
    ) -> None:
        self.definition = definition.with_context({})
        self._adapter = adapter
        self._guardrails = guardrails
        if state is None and self.definition.mutable:
            state = MutableStateContainer()
        self.state = state
        self._field_lists: dict[str, FieldItemListDoubleBuilder] = {}
        self._field_definitions: dict[str, Any] = {}
        self._double: Any = None
        self.chain = ResolutionChain(
            resolvers=self.build_resolvers(),
            context=self.definition.context,
            overrides=self.definition.methods,
            capabilities=self.definition.capabilities(),
            primary_capability=self.definition.primary_interface,
            guardrails=guardrails,
            lenient=self.definition.lenient,
        )

    @property
    def fieldable(self) -> bool:
        return CapabilityTag.FIELDABLE in self.definition.capabilities()

    # -- fields ----------------------------------------------------------------

    def field_list(self, name: str) -> FieldItemListDoubleBuilder:
        builder = self._field_lists.get(name)
        if builder is not None:
            return builder
        field_definition = self.definition.get_field(name)
        if field_definition is None:
            raise UnknownFieldError(name, self.definition.entity_type)
        builder = FieldItemListDoubleBuilder(
            self.definition,
            field_name=name,
            field_definition=field_definition,
            adapter=self._adapter,
            parent=self.build,
            field_definition_double=lambda: self.field_definition(name),
            state=self.state,
            guardrails=self._guardrails,
        )
        self._field_lists[name] = builder
        return builder

    def field_definition(self, name: str) -> Any:
        if not self.definition.has_field(name):
            return None
        double = self._field_definitions.get(name)
        if double is None:
            chain = ResolutionChain(
                resolvers={"get_name": lambda context: name},
                context=self.definition.context,
                capabilities=(CapabilityTag.FIELD_DEFINITION,),
                guardrails=self._guardrails,
                lenient=self.definition.lenient,
            )
            double = self._adapter.instantiate(
                DoubleBlueprint(kind=DoubleKind.FIELD_DEFINITION, name=name, chain=chain)
            )
            self._field_definitions[name] = double
        return double

    # -- resolvers -------------------------------------------------------------

    def build_resolvers(self) -> ResolverMap:
        definition = self.definition
        resolvers: ResolverMap = {
            "get_entity_type_id": lambda context: definition.entity_type,
            "id": lambda context: definition.id,
            "uuid": lambda context: definition.uuid,
            "label": lambda context: definition.label,
            "bundle": lambda context: definition.bundle,
            "is_new": lambda context: definition.id is None,
        }
        if not self.fieldable:
            return resolvers

        def get(context: Mapping[str, Any], name: str) -> Any:
            return self.field_list(name).build()

        def set_(context: Mapping[str, Any], name: str, value: Any, notify: bool = True) -> Any:
            if not definition.mutable or self.state is None:
                raise ImmutableDoubleError(name)
            if not definition.has_field(name):
                raise UnknownFieldError(name, definition.entity_type)
            self.state.write(name, None, value)
            return self.build()

        def get_property(context: Mapping[str, Any], name: str) -> Any:
            if not definition.has_field(name):
                return NOT_SET
            return self.chain.invoke("get", name)

        def set_property(context: Mapping[str, Any], name: str, value: Any) -> Any:
            if not definition.has_field(name):
                return NOT_SET
            self.chain.invoke("set", name, value)
            return None

        resolvers.update(
            {
                "has_field": lambda context, name: definition.has_field(name),
                "get_field_definition": lambda context, name: self.field_definition(name),
                "get_field_definitions": lambda context: {
                    name: self.field_definition(name) for name in definition.fields
                },
                "get": get,
                "get_fields": lambda context, include_computed=True: {
                    name: self.chain.invoke("get", name) for name in definition.fields
                },
                "set": set_,
                PROPERTY_GET: get_property,
                PROPERTY_SET: set_property,
            }
        )
        return resolvers

    # -- double ----------------------------------------------------------------

    def blueprint(self) -> DoubleBlueprint:
        definition = self.definition
        return DoubleBlueprint(
            kind=DoubleKind.ENTITY,
            name=f"{definition.entity_type}:{definition.bundle}:{definition.id}",
            chain=self.chain,
            properties=tuple(definition.fields) if self.fieldable else (),
            traits=definition.traits,
        )

    def build(self) -> Any:
        if self._double is None:
            self._double = self._adapter.instantiate(self.blueprint())
        return self._double
