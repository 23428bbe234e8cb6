# entity_doubles/adapters/dispatch.py
"""
Plain Python adapter.

Each blueprint becomes a dedicated class whose methods are the resolved
callables of its chain. Names the class does not define fall through to
``__getattr__``, which serves property-style reads and then the remaining
stages of the resolution chain (guardrail, lenient default, missing resolver).
Trait mixins are placed between the two, so wired resolvers shadow trait
methods and trait methods shadow the fallback stages.
"""
from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

from entity_doubles.contracts import MissingResolverError
from entity_doubles.resolution import PROPERTY_GET, PROPERTY_SET, DoubleBlueprint, DoubleKind
from entity_doubles.state import NOT_SET


class DispatchDouble:
    _blueprint: DoubleBlueprint

    def __init__(self, blueprint: DoubleBlueprint) -> None:
        object.__setattr__(self, "_blueprint", blueprint)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        chain = self._blueprint.chain
        if chain.handles(PROPERTY_GET):
            value = chain.invoke(PROPERTY_GET, name)
            if value is not NOT_SET:
                return value
        if chain.declares(name):
            return chain.resolve(name).call
        raise MissingResolverError(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return
        chain = self._blueprint.chain
        if chain.handles(PROPERTY_SET) and chain.invoke(PROPERTY_SET, name, value) is not NOT_SET:
            return
        raise AttributeError(f"Cannot set '{name}' on {self!r}: not a field or item property")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._blueprint.name}>"


class DispatchListDouble(DispatchDouble):
    def __len__(self) -> int:
        return int(self._blueprint.chain.invoke("count"))

    def __iter__(self) -> Iterator[Any]:
        return iter(self._blueprint.chain.invoke("get_iterator"))

    def __getitem__(self, delta: int) -> Any:
        item = self._blueprint.chain.invoke("get", delta)
        if item is None:
            raise IndexError(delta)
        return item


def _wire(name: str, call: Callable[..., Any]) -> Callable[..., Any]:
    def method(self: DispatchDouble, *args: Any, **kwargs: Any) -> Any:
        return call(*args, **kwargs)

    method.__name__ = name
    method.__qualname__ = name
    return method


class DispatchDoubleAdapter:
    """Builds doubles as instances of classes synthesized per blueprint."""

    def base_class(self, blueprint: DoubleBlueprint) -> type[DispatchDouble]:
        if blueprint.kind is DoubleKind.FIELD_ITEM_LIST:
            return DispatchListDouble
        return DispatchDouble

    def instantiate(self, blueprint: DoubleBlueprint) -> Any:
        chain = blueprint.chain
        namespace: dict[str, Any] = {
            name: _wire(name, chain.resolve(name).call)
            for name in chain.method_names()
            if name not in (PROPERTY_GET, PROPERTY_SET)
        }
        namespace["__module__"] = __name__
        class_name = "".join(part.title() for part in blueprint.kind.value.split("_")) + "Double"
        cls = type(class_name, (*blueprint.traits, self.base_class(blueprint)), namespace)
        return cls(blueprint)
