# entity_doubles/guardrails.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

_PERSISTENCE = "Entity doubles have no storage backend; persistence operations need a real entity storage handler."
_ROUTING = "Entity doubles have no router; URL generation needs the routing system and link templates."
_ACCESS = "Entity doubles have no access control handler; stub access() with a method override."
_DUPLICATION = "Duplicating a double would need the entity type's storage and UUID services."
_TRANSLATION = "Entity doubles are monolingual; translations need the language manager and translation storage."
_VALIDATION = "Entity doubles have no typed data validator; stub validate() with a method override."

GUARDRAILS: Mapping[str, str] = MappingProxyType(
    {
        "save": _PERSISTENCE,
        "delete": _PERSISTENCE,
        "pre_save": _PERSISTENCE,
        "post_save": _PERSISTENCE,
        "to_url": _ROUTING,
        "to_link": _ROUTING,
        "access": _ACCESS,
        "create_duplicate": _DUPLICATION,
        "get_translation": _TRANSLATION,
        "add_translation": _TRANSLATION,
        "remove_translation": _TRANSLATION,
        "validate": _VALIDATION,
    }
)


@dataclass(frozen=True)
class GuardrailEnforcer:
    """Methods no double supports, each with the reason given to the caller."""

    table: Mapping[str, str] = field(default_factory=lambda: GUARDRAILS)

    def is_guarded(self, method: str) -> bool:
        return method in self.table

    def reason_for(self, method: str) -> str:
        try:
            return self.table[method]
        except KeyError:
            raise KeyError(f"No guardrail registered for method '{method}'") from None

    def guarded_methods(self) -> frozenset[str]:
        return frozenset(self.table)

    def with_guardrails(self, extra: Mapping[str, str]) -> GuardrailEnforcer:
        return GuardrailEnforcer(table=MappingProxyType({**self.table, **extra}))


DEFAULT_GUARDRAILS = GuardrailEnforcer()
