from __future__ import annotations

from typing import Any, Protocol

from entity_doubles.resolution import DoubleBlueprint


class DoubleAdapter(Protocol):
    """Adapter interface for turning a blueprint into a concrete double."""

    def instantiate(self, blueprint: DoubleBlueprint) -> Any:
        """Create the double, wire every resolver of the blueprint, and return it."""
        ...
