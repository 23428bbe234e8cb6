# entity_doubles/pytest_plugin.py
"""pytest fixtures for building entity doubles; registered through the ``pytest11`` entry point."""
from __future__ import annotations

from collections.abc import Callable

import pytest

from entity_doubles.adapters.mock import MockDoubleAdapter
from entity_doubles.builder import EntityDoubleDefinitionBuilder
from entity_doubles.factory import EntityDoubleFactory
from entity_doubles.sequence import IdSequence
from entity_doubles.settings import get_settings


@pytest.fixture
def id_sequence() -> IdSequence:
    return IdSequence(start=get_settings().id_start)


@pytest.fixture
def double_factory(id_sequence: IdSequence) -> EntityDoubleFactory:
    factory = EntityDoubleFactory.from_settings()
    factory.sequence = id_sequence
    return factory


@pytest.fixture
def mock_double_factory(id_sequence: IdSequence) -> EntityDoubleFactory:
    return EntityDoubleFactory(MockDoubleAdapter(), sequence=id_sequence)


@pytest.fixture
def entity_definition() -> Callable[[str], EntityDoubleDefinitionBuilder]:
    return EntityDoubleDefinitionBuilder.create
