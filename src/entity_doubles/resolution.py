# entity_doubles/resolution.py
"""
Method resolution for doubles.

Every method call on a double is resolved through a fixed chain; the first
stage that matches wins:

1. explicit override from the definition, called with the raw arguments
2. core resolver from the builder, called as ``resolver(context, *args)``
3. guardrail, raising ``UnsupportedOperationError`` with its reason
4. lenient default, when the definition is lenient
5. ``MissingResolverError`` naming the method and its declaring capability

Overrides therefore bypass guardrails, and leniency never softens a
guardrail.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from entity_doubles._compat import StrEnum, TypeAlias
from entity_doubles.capabilities import (
    CapabilityTag,
    declared_methods,
    declaring_capability,
    neutral_default,
    return_kind,
)
from entity_doubles.contracts import MissingResolverError, UnsupportedOperationError
from entity_doubles.guardrails import DEFAULT_GUARDRAILS, GuardrailEnforcer

logger = logging.getLogger(__name__)

Resolver: TypeAlias = Callable[..., Any]
ResolverMap: TypeAlias = dict[str, Resolver]

# Reserved resolver names backing property-style access (``double.title``,
# ``item.value = 1``). Both return NOT_SET when the name is not a property.
PROPERTY_GET = "__get"
PROPERTY_SET = "__set"


class ResolutionStage(StrEnum):
    OVERRIDE = "override"
    CORE = "core"
    GUARDRAIL = "guardrail"
    LENIENT = "lenient"
    MISSING = "missing"


class DoubleKind(StrEnum):
    ENTITY = "entity"
    FIELD_DEFINITION = "field_definition"
    FIELD_ITEM_LIST = "field_item_list"
    FIELD_ITEM = "field_item"


@dataclass(frozen=True)
class MethodResolution:
    method: str
    stage: ResolutionStage
    call: Callable[..., Any]


@dataclass(frozen=True)
class ResolutionChain:
    resolvers: Mapping[str, Resolver]
    context: Mapping[str, Any] = field(default_factory=dict)
    overrides: Mapping[str, Callable[..., Any]] = field(default_factory=dict)
    capabilities: tuple[CapabilityTag, ...] = ()
    primary_capability: Optional[CapabilityTag] = None
    guardrails: GuardrailEnforcer = DEFAULT_GUARDRAILS
    lenient: bool = False

    def handles(self, method: str) -> bool:
        """True if an override or a core resolver exists for ``method``."""
        return method in self.overrides or method in self.resolvers

    def declares(self, method: str) -> bool:
        """True if calling ``method`` is meaningful on this double, even if it fails."""
        return (
            self.handles(method)
            or self.guardrails.is_guarded(method)
            or self.declaring_capability(method) is not None
        )

    def declaring_capability(self, method: str) -> Optional[CapabilityTag]:
        return declaring_capability(method, self.capabilities, self.primary_capability)

    def method_names(self) -> tuple[str, ...]:
        """Names with an override or a core resolver, in a stable order."""
        return tuple(sorted({*self.overrides, *self.resolvers}))

    def declared_names(self) -> frozenset[str]:
        return frozenset({*self.method_names(), *declared_methods(self.capabilities)})

    def resolve(self, method: str) -> MethodResolution:
        override = self.overrides.get(method)
        if override is not None:
            return MethodResolution(method, ResolutionStage.OVERRIDE, override)

        resolver = self.resolvers.get(method)
        if resolver is not None:
            context = self.context

            def _call_resolver(*args: Any, **kwargs: Any) -> Any:
                return resolver(context, *args, **kwargs)

            return MethodResolution(method, ResolutionStage.CORE, _call_resolver)

        if self.guardrails.is_guarded(method):
            reason = self.guardrails.reason_for(method)

            def _refuse(*args: Any, **kwargs: Any) -> Any:
                logger.debug("Guardrail refused %s", method)
                raise UnsupportedOperationError(method, reason)

            return MethodResolution(method, ResolutionStage.GUARDRAIL, _refuse)

        capability = self.declaring_capability(method)
        if self.lenient:
            kind = return_kind(method, capability)

            def _neutral(*args: Any, **kwargs: Any) -> Any:
                logger.debug("Lenient default for %s (%s)", method, kind.value)
                return neutral_default(kind)

            return MethodResolution(method, ResolutionStage.LENIENT, _neutral)

        capability_name = capability.value if capability is not None else None

        def _missing(*args: Any, **kwargs: Any) -> Any:
            logger.debug("No resolver for %s (declared by %s)", method, capability_name or "unknown")
            raise MissingResolverError(method, capability_name)

        return MethodResolution(method, ResolutionStage.MISSING, _missing)

    def invoke(self, method: str, *args: Any, **kwargs: Any) -> Any:
        return self.resolve(method).call(*args, **kwargs)


@dataclass(frozen=True)
class DoubleBlueprint:
    """Everything an adapter needs to instantiate one double."""

    kind: DoubleKind
    name: str
    chain: ResolutionChain
    properties: tuple[str, ...] = ()
    traits: tuple[type, ...] = ()

    @property
    def capabilities(self) -> tuple[CapabilityTag, ...]:
        return self.chain.capabilities

    @property
    def resolvers(self) -> Mapping[str, Resolver]:
        return self.chain.resolvers
