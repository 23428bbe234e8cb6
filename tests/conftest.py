from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from entity_doubles.adapters.dispatch import DispatchDoubleAdapter
from entity_doubles.builder import EntityDoubleDefinitionBuilder
from entity_doubles.capabilities import CapabilityTag
from entity_doubles.contracts import EntityDoubleDefinition
from entity_doubles.factory import EntityDoubleFactory
from entity_doubles.pytest_plugin import (  # noqa: F401
    double_factory,
    entity_definition,
    id_sequence,
    mock_double_factory,
)


@pytest.fixture
def factory() -> EntityDoubleFactory:
    return EntityDoubleFactory(DispatchDoubleAdapter())


@pytest.fixture
def make_definition() -> Callable[..., EntityDoubleDefinition]:
    def _make_definition(
        *,
        entity_type: str = "node",
        bundle: str | None = None,
        id: int | str | None = 1,
        label: str | None = "Test Node",
        fields: dict[str, Any] | None = None,
        interfaces: tuple[CapabilityTag, ...] = (CapabilityTag.FIELDABLE,),
        methods: dict[str, Callable[..., Any]] | None = None,
        mutable: bool = False,
        lenient: bool = False,
        **extra: Any,
    ) -> EntityDoubleDefinition:
        return EntityDoubleDefinition(
            entity_type=entity_type,
            bundle=bundle or entity_type,
            id=id,
            label=label,
            fields=fields or {},
            interfaces=interfaces,
            methods=methods or {},
            mutable=mutable,
            lenient=lenient,
            **extra,
        )

    return _make_definition


@pytest.fixture
def make_entity(
    factory: EntityDoubleFactory,
    make_definition: Callable[..., EntityDoubleDefinition],
) -> Callable[..., Any]:
    def _make_entity(**kwargs: Any) -> Any:
        return factory.create(make_definition(**kwargs))

    return _make_entity


@pytest.fixture
def make_handle(factory: EntityDoubleFactory) -> Callable[..., Any]:
    """Entity doubles with no fields, for use as reference targets."""

    def _make_handle(entity_id: int | str | None, *, entity_type: str = "user", label: str | None = None) -> Any:
        return factory.create(
            EntityDoubleDefinitionBuilder.create(entity_type).id(entity_id).label(label).build()
        )

    return _make_handle
