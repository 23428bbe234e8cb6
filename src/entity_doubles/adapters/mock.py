# entity_doubles/adapters/mock.py
"""
``unittest.mock`` adapter.

Doubles are spec'd ``NonCallableMock`` objects: every method is a child
``Mock`` whose side effect is the resolved callable, so tests keep the usual
call assertions (``double.get.assert_called_once_with("title")``). Properties
are ``PropertyMock``s routed through the ``__get``/``__set`` resolvers.
"""
from __future__ import annotations

from collections.abc import Callable
from types import MethodType
from typing import Any
from unittest.mock import Mock, NonCallableMagicMock, NonCallableMock, PropertyMock

from entity_doubles.resolution import PROPERTY_GET, PROPERTY_SET, DoubleBlueprint, DoubleKind, ResolutionChain
from entity_doubles.state import NOT_SET

_LIST_MAGICS = ("__len__", "__iter__", "__getitem__")


def _property_accessor(chain: ResolutionChain, name: str) -> Callable[..., Any]:
    def accessor(*args: Any) -> Any:
        if args:
            result = chain.invoke(PROPERTY_SET, name, args[0])
            if result is NOT_SET:
                raise AttributeError(f"Cannot set '{name}'")
            return None
        value = chain.invoke(PROPERTY_GET, name)
        if value is NOT_SET:
            raise AttributeError(name)
        return value

    return accessor


def _list_item(chain: ResolutionChain) -> Callable[[int], Any]:
    def getitem(delta: int) -> Any:
        item = chain.invoke("get", delta)
        if item is None:
            raise IndexError(delta)
        return item

    return getitem


class MockDoubleAdapter:
    """Builds doubles as ``unittest.mock`` objects restricted to their declared methods."""

    def instantiate(self, blueprint: DoubleBlueprint) -> Any:
        chain = blueprint.chain
        methods = sorted(
            name
            for name in chain.declared_names() | chain.guardrails.guarded_methods()
            if name not in (PROPERTY_GET, PROPERTY_SET)
        )
        properties = [name for name in blueprint.properties if name not in methods]
        is_list = blueprint.kind is DoubleKind.FIELD_ITEM_LIST

        # Properties stay out of the spec: a getter raising AttributeError must not yield a child mock.
        spec = [*methods, *(_LIST_MAGICS if is_list else ())]
        mock_class = NonCallableMagicMock if is_list else NonCallableMock
        double = mock_class(spec=spec, name=blueprint.name)

        for name in methods:
            setattr(double, name, Mock(side_effect=chain.resolve(name).call))

        if chain.handles(PROPERTY_GET):
            for name in properties:
                # NonCallableMock creates a subclass per instance; properties stay local.
                setattr(type(double), name, PropertyMock(side_effect=_property_accessor(chain, name)))

        if is_list:
            double.__len__.side_effect = lambda: int(chain.invoke("count"))
            double.__iter__.side_effect = lambda: iter(chain.invoke("get_iterator"))
            double.__getitem__.side_effect = _list_item(chain)

        for trait in reversed(blueprint.traits):
            for name, attr in vars(trait).items():
                if name.startswith("__") or chain.handles(name):
                    continue
                if isinstance(attr, (staticmethod, classmethod)):
                    setattr(double, name, getattr(trait, name))
                elif callable(attr):
                    setattr(double, name, MethodType(attr, double))
        return double
