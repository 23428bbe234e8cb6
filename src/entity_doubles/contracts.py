# entity_doubles/contracts.py
from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, ClassVar, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from entity_doubles._compat import Self
from entity_doubles.capabilities import CapabilityTag, declaring_capability, expand

# ------------------------------------------------------------------------------
# Errors
# ------------------------------------------------------------------------------


class DoubleError(Exception):
    """Base class for every error raised while building or driving a double."""


class ConfigurationError(DoubleError):
    """Raised when a definition cannot be constructed as requested."""


class TargetIdMismatchError(DoubleError, ValueError):
    """Raised when an explicit target_id disagrees with the referenced entity's id."""


class ImmutableDoubleError(DoubleError, PermissionError):
    """Raised when a field write is attempted on a double that is not mutable."""

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(
            f"Cannot modify field '{field_name}' on an immutable double. "
            "Build the double with mutable=True (or use create_mutable()) to allow writes."
        )


class UnsupportedOperationError(DoubleError, NotImplementedError):
    """Raised when a guarded method is called without an explicit override."""

    def __init__(self, method: str, reason: str) -> None:
        self.method = method
        self.reason = reason
        super().__init__(f"Method '{method}' is not supported by entity doubles: {reason}")


class MissingResolverError(DoubleError, AttributeError):
    """Raised when a method has no override, no resolver and no guardrail."""

    def __init__(self, method: str, capability: Optional[str] = None) -> None:
        self.method = method
        self.capability = capability or "unknown"
        super().__init__(
            f"No resolver for method '{method}' (declared by {self.capability}). "
            "Provide it through the definition's methods or build the double in lenient mode."
        )


class UnresolvedReferenceError(DoubleError, LookupError):
    """Raised when referenced entities are requested but items only carry target ids."""

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(
            f"Field '{field_name}' has items with a target_id but no entity; "
            "referenced_entities() cannot return them. Pass entity doubles instead of bare target ids."
        )


class UnknownFieldError(DoubleError, LookupError):
    """Raised when a field is accessed that the definition does not declare."""

    def __init__(self, field_name: str, entity_type: str) -> None:
        self.field_name = field_name
        super().__init__(f"Field '{field_name}' is not defined on the '{entity_type}' double.")


# ------------------------------------------------------------------------------
# Shared BaseModel config helpers
# ------------------------------------------------------------------------------

_IMMUTABLE_DEFINITION_CONFIG = ConfigDict(
    extra="forbid",
    frozen=True,
    arbitrary_types_allowed=True,
    use_enum_values=False,  # keep enums as enums in Python
)

Identifier = Union[int, str]

# ------------------------------------------------------------------------------
# Definitions
# ------------------------------------------------------------------------------


class FieldDoubleDefinition(BaseModel):
    """
    A single field's modeled value.

    The value is a scalar, a sequence of values, a reference shape, or a
    callable taking the resolver context. Callables are evaluated lazily, once
    per field-list double.
    """

    model_config = _IMMUTABLE_DEFINITION_CONFIG

    value: Any = None

    def __init__(self, value: Any = None, **data: Any) -> None:
        super().__init__(value=value, **data)

    @property
    def is_callable(self) -> bool:
        return callable(self.value)

    def resolve(self, context: Mapping[str, Any]) -> Any:
        if self.is_callable:
            return self.value(context)
        return self.value


class EntityDoubleDefinition(BaseModel):
    """Immutable description of an entity double."""

    CONTEXT_KEY: ClassVar[str] = "_definition"

    model_config = _IMMUTABLE_DEFINITION_CONFIG

    entity_type: str
    bundle: str = ""
    id: Optional[Identifier] = None
    uuid: Optional[str] = None
    label: Optional[str] = None
    fields: dict[str, FieldDoubleDefinition] = Field(default_factory=dict)
    interfaces: tuple[CapabilityTag, ...] = ()
    primary_interface: Optional[CapabilityTag] = None
    methods: dict[str, Callable[..., Any]] = Field(default_factory=dict)
    context: dict[str, Any] = Field(default_factory=dict)
    mutable: bool = False
    lenient: bool = False
    traits: tuple[type, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _default_bundle(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("bundle") and data.get("entity_type"):
            return {**data, "bundle": data["entity_type"]}
        return data

    @field_validator("fields", mode="before")
    @classmethod
    def _wrap_field_values(cls, value: object) -> object:
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            return value
        return {
            str(name): item if isinstance(item, FieldDoubleDefinition) else FieldDoubleDefinition(item)
            for name, item in value.items()
        }

    @field_validator("interfaces", "traits", mode="before")
    @classmethod
    def _coerce_sequences(cls, value: object) -> object:
        if value is None:
            return ()
        if isinstance(value, (list, set, frozenset)):
            return tuple(value)
        return value

    @field_validator("context", mode="after")
    @classmethod
    def _reject_reserved_context_key(cls, value: dict[str, Any]) -> dict[str, Any]:
        if cls.CONTEXT_KEY in value:
            raise ConfigurationError(f'The context key "{cls.CONTEXT_KEY}" is reserved for the definition itself.')
        return value

    @model_validator(mode="after")
    def _validate_fieldable(self) -> Self:
        if self.fields and CapabilityTag.FIELDABLE not in self.capabilities():
            raise ConfigurationError(
                "Fields can only be defined when FieldableEntityInterface is listed in interfaces "
                f"(capability '{CapabilityTag.FIELDABLE.value}'); got fields {sorted(self.fields)} "
                f"for entity type '{self.entity_type}'."
            )
        return self

    # -- queries ---------------------------------------------------------------

    def capabilities(self) -> tuple[CapabilityTag, ...]:
        """Declared interfaces expanded over their parents; always includes ``entity``."""
        declared = list(self.interfaces)
        if self.primary_interface is not None and self.primary_interface not in declared:
            declared.insert(0, self.primary_interface)
        return expand([*declared, CapabilityTag.ENTITY])

    def has_interface(self, tag: CapabilityTag | str) -> bool:
        try:
            return CapabilityTag(tag) in self.interfaces
        except ValueError:
            return False

    def has_field(self, name: str) -> bool:
        return name in self.fields

    def get_field(self, name: str) -> FieldDoubleDefinition | None:
        return self.fields.get(name)

    def has_method(self, name: str) -> bool:
        return name in self.methods

    def get_method(self, name: str) -> Callable[..., Any] | None:
        return self.methods.get(name)

    def get_declaring_interface(self, method: str) -> CapabilityTag | None:
        return declaring_capability(method, self.interfaces, self.primary_interface)

    # -- copies ----------------------------------------------------------------

    def with_context(self, context: Mapping[str, Any]) -> EntityDoubleDefinition:
        """
        Return a definition whose context also holds ``context`` and the
        definition itself under ``CONTEXT_KEY``.

        Returns ``self`` when nothing would change.
        """
        if self.CONTEXT_KEY in context:
            raise ConfigurationError(f'The context key "{self.CONTEXT_KEY}" is reserved for the definition itself.')
        stored = self.context.get(self.CONTEXT_KEY, self)
        merged = {**self.context, **context, self.CONTEXT_KEY: stored}
        if merged == self.context:
            return self
        return self.model_copy(update={"context": merged})

    def with_mutable(self, mutable: bool) -> EntityDoubleDefinition:
        if bool(mutable) == self.mutable:
            return self
        # The stored definition would still carry the old flag.
        return self.model_copy(update={"mutable": bool(mutable), "context": self.user_context()})

    def user_context(self) -> dict[str, Any]:
        """Context without the reserved definition entry."""
        return {key: value for key, value in self.context.items() if key != self.CONTEXT_KEY}
