# entity_doubles/factory.py
from __future__ import annotations

import logging
from typing import Any, Optional

from entity_doubles.adapters.dispatch import DispatchDoubleAdapter
from entity_doubles.adapters.doubler import DoubleAdapter
from entity_doubles.adapters.mock import MockDoubleAdapter
from entity_doubles.contracts import EntityDoubleDefinition
from entity_doubles.guardrails import DEFAULT_GUARDRAILS, GuardrailEnforcer
from entity_doubles.resolvers.entity import EntityDoubleBuilder
from entity_doubles.sequence import IdSequence
from entity_doubles.settings import DoubleSettings, get_settings
from entity_doubles.state import MutableStateContainer

logger = logging.getLogger(__name__)

ADAPTERS: dict[str, type] = {
    "dispatch": DispatchDoubleAdapter,
    "mock": MockDoubleAdapter,
}


class EntityDoubleFactory:
    """Creates entity doubles from definitions through one adapter."""

    def __init__(
        self,
        adapter: Optional[DoubleAdapter] = None,
        *,
        guardrails: GuardrailEnforcer = DEFAULT_GUARDRAILS,
        sequence: Optional[IdSequence] = None,
    ) -> None:
        self.adapter: DoubleAdapter = adapter if adapter is not None else DispatchDoubleAdapter()
        self.guardrails = guardrails
        self.sequence = sequence if sequence is not None else IdSequence()

    @classmethod
    def from_settings(
        cls,
        settings: Optional[DoubleSettings] = None,
        *,
        guardrails: GuardrailEnforcer = DEFAULT_GUARDRAILS,
    ) -> EntityDoubleFactory:
        settings = settings or get_settings()
        adapter = ADAPTERS[settings.adapter]()
        return cls(adapter, guardrails=guardrails, sequence=IdSequence(start=settings.id_start))

    def builder(self, definition: EntityDoubleDefinition) -> EntityDoubleBuilder:
        state = MutableStateContainer() if definition.mutable else None
        return EntityDoubleBuilder(definition, adapter=self.adapter, state=state, guardrails=self.guardrails)

    def create(self, definition: EntityDoubleDefinition) -> Any:
        double = self.builder(definition).build()
        logger.debug(
            "Built %s double for %s:%s (mutable=%s, lenient=%s)",
            type(self.adapter).__name__,
            definition.entity_type,
            definition.bundle,
            definition.mutable,
            definition.lenient,
        )
        return double

    def create_mutable(self, definition: EntityDoubleDefinition) -> Any:
        return self.create(definition.with_mutable(True))

    def create_with_id(self, definition: EntityDoubleDefinition) -> Any:
        """Create a double, filling a missing id and uuid from the factory's sequence."""
        update: dict[str, Any] = {}
        if definition.id is None:
            update["id"] = self.sequence.next_id()
        if definition.uuid is None:
            update["uuid"] = self.sequence.next_uuid()
        if update:
            # Drop the stored definition; it still carries the old identity.
            update["context"] = definition.user_context()
            definition = definition.model_copy(update=update)
        return self.create(definition)
