# entity_doubles/sequence.py
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class IdSequence:
    """
    Auto-increment identifiers and UUIDs for doubles.

    Instances are injected (see the ``id_sequence`` pytest fixture) so that
    each test starts from the same values; nothing here is module-level state.
    """

    start: int = 1
    _next_id: int = field(init=False, repr=False)
    _next_uuid: int = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self._next_id = self.start
        self._next_uuid = 1

    def next_id(self) -> int:
        value = self._next_id
        self._next_id += 1
        return value

    def next_uuid(self) -> str:
        value = self._next_uuid
        self._next_uuid += 1
        return f"{value:08x}-0000-0000-0000-000000000000"
