# entity_doubles/resolvers/field_list.py
from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Optional

from entity_doubles.adapters.doubler import DoubleAdapter
from entity_doubles.capabilities import CapabilityTag
from entity_doubles.contracts import (
    EntityDoubleDefinition,
    FieldDoubleDefinition,
    ImmutableDoubleError,
    MissingResolverError,
    UnresolvedReferenceError,
)
from entity_doubles.guardrails import DEFAULT_GUARDRAILS, GuardrailEnforcer
from entity_doubles.references import (
    ENTITY_KEY,
    TARGET_ID_KEY,
    contains_references,
    extract_handles,
    has_unresolved_references,
    is_sequence,
    normalize,
)
from entity_doubles.resolution import (
    PROPERTY_GET,
    PROPERTY_SET,
    DoubleBlueprint,
    DoubleKind,
    ResolutionChain,
    ResolverMap,
)
from entity_doubles.resolvers.field_item import VALUE_KEY, FieldItemDoubleBuilder, item_is_empty
from entity_doubles.state import NOT_SET, MutableStateContainer


def plain_items(raw: Any) -> list[dict[str, Any]]:
    if raw is None:
        return []
    if isinstance(raw, Mapping):
        return [dict(raw)]
    if is_sequence(raw):
        return [dict(value) if isinstance(value, Mapping) else {"value": value} for value in raw]
    return [{"value": raw}]


class FieldItemListDoubleBuilder:
    """
    Builds the double for one field of an entity double.

    The field value is evaluated once (callables receive the resolver context)
    and classified as entity references or plain values. Item doubles are
    cached by delta until a whole-field write replaces the list, which also
    reclassifies it.
    """

    def __init__(
        self,
        definition: EntityDoubleDefinition,
        *,
        field_name: str,
        field_definition: FieldDoubleDefinition,
        adapter: DoubleAdapter,
        parent: Callable[[], Any],
        field_definition_double: Callable[[], Any],
        state: Optional[MutableStateContainer] = None,
        guardrails: GuardrailEnforcer = DEFAULT_GUARDRAILS,
    ) -> None:
        self._definition = definition
        self.field_name = field_name
        self._field_definition = field_definition
        self._adapter = adapter
        self._parent = parent
        self._field_definition_double = field_definition_double
        self._state = state
        self._guardrails = guardrails
        self._base: Any = NOT_SET
        self._items: dict[int, FieldItemDoubleBuilder] = {}
        self._revision = self._current_revision()
        self._double: Any = None
        self._is_reference = contains_references(self.raw_value())
        self.chain = ResolutionChain(
            resolvers=self.build_resolvers(),
            context=definition.context,
            capabilities=self.capabilities,
            primary_capability=self.capabilities[0],
            guardrails=guardrails,
            lenient=definition.lenient,
        )

    @property
    def is_reference(self) -> bool:
        """Current classification; a whole-field write may change it."""
        self._sync()
        return self._is_reference

    @property
    def capabilities(self) -> tuple[CapabilityTag, ...]:
        if self.is_reference:
            return (CapabilityTag.ENTITY_REFERENCE_FIELD_ITEM_LIST, CapabilityTag.FIELD_ITEM_LIST)
        return (CapabilityTag.FIELD_ITEM_LIST,)

    def parent(self) -> Any:
        return self._parent()

    # -- values ----------------------------------------------------------------

    def _current_revision(self) -> int:
        return self._state.revision(self.field_name) if self._state is not None else 0

    def _sync(self) -> None:
        revision = self._current_revision()
        if revision != self._revision:
            self._revision = revision
            self._items.clear()
            self._is_reference = contains_references(self.raw_value())

    def raw_value(self) -> Any:
        if self._state is not None and self._state.has_write(self.field_name, None):
            return self._state.read(self.field_name, None)
        if self._base is NOT_SET:
            self._base = self._field_definition.resolve(self._definition.context)
        return self._base

    def item_values(self) -> list[dict[str, Any]]:
        raw = self.raw_value()
        if contains_references(raw):
            values: list[dict[str, Any]] = [dict(item) for item in normalize(raw)]
        else:
            values = plain_items(raw)

        if self._state is not None:
            for delta in self._state.written_deltas(self.field_name):
                written = self._state.read(self.field_name, delta)
                if delta < len(values):
                    values[delta] = dict(written)
                elif delta == len(values):
                    values.append(dict(written))
        return values

    def item_value(self, delta: int) -> dict[str, Any]:
        values = self.item_values()
        if 0 <= delta < len(values):
            return values[delta]
        return {}

    def record_item(self, delta: int, value: Mapping[str, Any]) -> None:
        if not self._definition.mutable or self._state is None:
            raise ImmutableDoubleError(self.field_name)
        self._state.write(self.field_name, delta, dict(value))

    def item(self, delta: int) -> FieldItemDoubleBuilder:
        self._sync()
        builder = self._items.get(delta)
        if builder is None:
            builder = FieldItemDoubleBuilder(
                self._definition,
                items=self,
                delta=delta,
                is_reference=self._is_reference,
                adapter=self._adapter,
                guardrails=self._guardrails,
            )
            self._items[delta] = builder
        return builder

    # -- resolvers -------------------------------------------------------------

    def build_resolvers(self) -> ResolverMap:
        def first(context: Mapping[str, Any]) -> Any:
            return self.item(0).build()

        def get(context: Mapping[str, Any], delta: int) -> Any:
            if not 0 <= delta < len(self.item_values()):
                return None
            return self.item(delta).build()

        def is_empty(context: Mapping[str, Any]) -> bool:
            return all(item_is_empty(value, is_reference=self.is_reference) for value in self.item_values())

        def count(context: Mapping[str, Any]) -> int:
            return len(self.item_values())

        def get_iterator(context: Mapping[str, Any]) -> list[Any]:
            return [self.item(delta).build() for delta in range(len(self.item_values()))]

        def get_value(context: Mapping[str, Any]) -> list[dict[str, Any]]:
            return self.item_values()

        def set_value(context: Mapping[str, Any], values: Any, notify: bool = True) -> Any:
            if not self._definition.mutable or self._state is None:
                raise ImmutableDoubleError(self.field_name)
            self._state.write(self.field_name, None, values)
            return self.build()

        def get_property(context: Mapping[str, Any], name: str) -> Any:
            return self.item(0).chain.invoke(PROPERTY_GET, name)

        def set_property(context: Mapping[str, Any], name: str, value: Any) -> Any:
            return self.item(0).chain.invoke(PROPERTY_SET, name, value)

        def referenced_entities(context: Mapping[str, Any]) -> list[Any]:
            if not self.is_reference:
                raise MissingResolverError(
                    "referenced_entities", CapabilityTag.ENTITY_REFERENCE_FIELD_ITEM_LIST.value
                )
            values = self.item_values()
            if has_unresolved_references(values):
                raise UnresolvedReferenceError(self.field_name)
            return list(extract_handles(values).values())

        # referenced_entities exists on every list and follows its current classification.
        return {
            "first": first,
            "get": get,
            "is_empty": is_empty,
            "count": count,
            "get_iterator": get_iterator,
            "get_value": get_value,
            "set_value": set_value,
            "get_name": lambda context: self.field_name,
            "get_entity": lambda context: self.parent(),
            "get_field_definition": lambda context: self._field_definition_double(),
            "referenced_entities": referenced_entities,
            PROPERTY_GET: get_property,
            PROPERTY_SET: set_property,
        }

    # -- double ----------------------------------------------------------------

    def blueprint(self) -> DoubleBlueprint:
        properties = self.item(0).property_names()
        if self._definition.mutable:
            # Whole-field writes may switch between plain and reference items.
            properties += tuple(
                name for name in (VALUE_KEY, ENTITY_KEY, TARGET_ID_KEY) if name not in properties
            )
        return DoubleBlueprint(
            kind=DoubleKind.FIELD_ITEM_LIST,
            name=self.field_name,
            chain=self.chain,
            properties=properties,
        )

    def build(self) -> Any:
        if self._double is None:
            self._double = self._adapter.instantiate(self.blueprint())
        return self._double
