"""Test doubles for entities, built from declarative definitions."""

from entity_doubles.builder import EntityDoubleDefinitionBuilder
from entity_doubles.capabilities import CapabilityTag
from entity_doubles.contracts import (
    ConfigurationError,
    DoubleError,
    EntityDoubleDefinition,
    FieldDoubleDefinition,
    ImmutableDoubleError,
    MissingResolverError,
    TargetIdMismatchError,
    UnknownFieldError,
    UnresolvedReferenceError,
    UnsupportedOperationError,
)
from entity_doubles.factory import EntityDoubleFactory
from entity_doubles.guardrails import DEFAULT_GUARDRAILS, GuardrailEnforcer
from entity_doubles.sequence import IdSequence

__all__ = [
    "CapabilityTag",
    "ConfigurationError",
    "DEFAULT_GUARDRAILS",
    "DoubleError",
    "EntityDoubleDefinition",
    "EntityDoubleDefinitionBuilder",
    "EntityDoubleFactory",
    "FieldDoubleDefinition",
    "GuardrailEnforcer",
    "IdSequence",
    "ImmutableDoubleError",
    "MissingResolverError",
    "TargetIdMismatchError",
    "UnknownFieldError",
    "UnresolvedReferenceError",
    "UnsupportedOperationError",
]
