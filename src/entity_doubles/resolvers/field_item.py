# entity_doubles/resolvers/field_item.py
from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Optional

from entity_doubles.adapters.doubler import DoubleAdapter
from entity_doubles.capabilities import CapabilityTag
from entity_doubles.contracts import EntityDoubleDefinition, ImmutableDoubleError
from entity_doubles.guardrails import DEFAULT_GUARDRAILS, GuardrailEnforcer
from entity_doubles.references import ENTITY_KEY, TARGET_ID_KEY, is_handle, normalize, normalize_item
from entity_doubles.resolution import (
    PROPERTY_GET,
    PROPERTY_SET,
    DoubleBlueprint,
    DoubleKind,
    ResolutionChain,
    ResolverMap,
)
from entity_doubles.state import NOT_SET

if TYPE_CHECKING:
    from entity_doubles.resolvers.field_list import FieldItemListDoubleBuilder

VALUE_KEY = "value"


def coerce_item_value(value: Any, *, is_reference: bool) -> dict[str, Any]:
    """Turn whatever was passed to ``set_value()`` into an item mapping."""
    if value is None:
        return {}
    if is_reference:
        if is_handle(value) or isinstance(value, Mapping):
            items = normalize(value)
            return dict(items[0]) if items else {}
        return {TARGET_ID_KEY: value}
    if isinstance(value, Mapping):
        return dict(value)
    return {VALUE_KEY: value}


def item_is_empty(item: Mapping[str, Any], *, is_reference: bool) -> bool:
    if is_reference:
        return item.get(ENTITY_KEY) is None and item.get(TARGET_ID_KEY) is None
    return all(value is None for value in item.values())


class FieldItemDoubleBuilder:
    """
    Builds the double for one item (one delta) of a field.

    The item reads its value through the owning list builder on every call,
    so writes recorded in the state container are always visible.
    """

    def __init__(
        self,
        definition: EntityDoubleDefinition,
        *,
        items: FieldItemListDoubleBuilder,
        delta: int,
        is_reference: bool,
        adapter: DoubleAdapter,
        guardrails: GuardrailEnforcer = DEFAULT_GUARDRAILS,
    ) -> None:
        self._definition = definition
        self._items = items
        self._delta = delta
        self._is_reference = is_reference
        self._adapter = adapter
        self._double: Any = None
        self.chain = ResolutionChain(
            resolvers=self.build_resolvers(),
            context=definition.context,
            capabilities=self.capabilities,
            primary_capability=self.capabilities[0],
            guardrails=guardrails,
            lenient=definition.lenient,
        )

    @property
    def field_name(self) -> str:
        return self._items.field_name

    @property
    def capabilities(self) -> tuple[CapabilityTag, ...]:
        if self._is_reference:
            return (CapabilityTag.ENTITY_REFERENCE_ITEM, CapabilityTag.FIELD_ITEM)
        return (CapabilityTag.FIELD_ITEM,)

    @property
    def main_property(self) -> str:
        return TARGET_ID_KEY if self._is_reference else VALUE_KEY

    def property_names(self) -> tuple[str, ...]:
        base = (ENTITY_KEY, TARGET_ID_KEY) if self._is_reference else (VALUE_KEY,)
        extra = tuple(key for key in self._current() if key not in base)
        return base + extra

    def _current(self) -> dict[str, Any]:
        return self._items.item_value(self._delta)

    def _guard_mutable(self) -> None:
        if not self._definition.mutable:
            raise ImmutableDoubleError(self.field_name)

    def _write(self, value: dict[str, Any]) -> None:
        self._items.record_item(self._delta, value)

    # -- resolvers -------------------------------------------------------------

    def build_resolvers(self) -> ResolverMap:
        def get_value(context: Mapping[str, Any]) -> dict[str, Any]:
            return dict(self._current())

        def set_value(context: Mapping[str, Any], value: Any, notify: bool = True) -> None:
            self._guard_mutable()
            self._write(coerce_item_value(value, is_reference=self._is_reference))

        def is_empty(context: Mapping[str, Any]) -> bool:
            return item_is_empty(self._current(), is_reference=self._is_reference)

        def get_parent(context: Mapping[str, Any]) -> Any:
            return self._items.build()

        def get_entity(context: Mapping[str, Any]) -> Any:
            return self._items.parent()

        def main_property_name(context: Mapping[str, Any]) -> str:
            return self.main_property

        def get_property(context: Mapping[str, Any], name: str) -> Any:
            current = self._current()
            if name in current:
                return current[name]
            if name in self.property_names():
                return None
            return NOT_SET

        def set_property(context: Mapping[str, Any], name: str, value: Any) -> Any:
            if name not in self.property_names():
                return NOT_SET
            self._guard_mutable()
            self._write(self._with_property(name, value))
            return None

        resolvers: ResolverMap = {
            "get_value": get_value,
            "set_value": set_value,
            "is_empty": is_empty,
            "get_parent": get_parent,
            "get_entity": get_entity,
            "main_property_name": main_property_name,
            PROPERTY_GET: get_property,
            PROPERTY_SET: set_property,
        }
        if self._is_reference:
            resolvers["has_new_entity"] = lambda context: (
                self._current().get(ENTITY_KEY) is not None and self._current().get(TARGET_ID_KEY) is None
            )
        return resolvers

    def _with_property(self, name: str, value: Any) -> dict[str, Any]:
        current = self._current()
        if not self._is_reference or name not in (ENTITY_KEY, TARGET_ID_KEY):
            return {**current, name: value}

        rest = {key: val for key, val in current.items() if key not in (ENTITY_KEY, TARGET_ID_KEY)}
        if name == ENTITY_KEY:
            if value is None:
                return rest
            return {**rest, **normalize_item(value)}
        entity: Optional[Any] = current.get(ENTITY_KEY)
        if entity is not None and entity.id() == value:
            return {**rest, ENTITY_KEY: entity, TARGET_ID_KEY: value}
        return {**rest, TARGET_ID_KEY: value}

    # -- double ----------------------------------------------------------------

    def blueprint(self) -> DoubleBlueprint:
        return DoubleBlueprint(
            kind=DoubleKind.FIELD_ITEM,
            name=f"{self.field_name}[{self._delta}]",
            chain=self.chain,
            properties=self.property_names(),
        )

    def build(self) -> Any:
        if self._double is None:
            self._double = self._adapter.instantiate(self.blueprint())
        return self._double
