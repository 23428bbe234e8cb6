# entity_doubles/state.py
from __future__ import annotations

from typing import Any, Final, Optional


class _NotSet:
    __slots__ = ()

    def __repr__(self) -> str:
        return "NOT_SET"

    def __bool__(self) -> bool:
        return False


NOT_SET: Final = _NotSet()


class MutableStateContainer:
    """
    Writes recorded against one mutable double.

    Keys are ``(field_name, delta)``; a ``None`` delta records a write of the
    whole field. Reads prefer these writes over the definition's values, which
    are never touched. A whole-field write supersedes earlier per-delta writes
    of the same field.
    """

    def __init__(self) -> None:
        self._writes: dict[tuple[str, Optional[int]], Any] = {}
        self._revisions: dict[str, int] = {}

    def write(self, field_name: str, delta: Optional[int], value: Any) -> None:
        if delta is None:
            for key in [key for key in self._writes if key[0] == field_name and key[1] is not None]:
                del self._writes[key]
            self._revisions[field_name] = self._revisions.get(field_name, 0) + 1
        self._writes[(field_name, delta)] = value

    def read(self, field_name: str, delta: Optional[int] = None) -> Any:
        return self._writes.get((field_name, delta), NOT_SET)

    def has_write(self, field_name: str, delta: Optional[int] = None) -> bool:
        return (field_name, delta) in self._writes

    def written_deltas(self, field_name: str) -> list[int]:
        return sorted(key[1] for key in self._writes if key[0] == field_name and key[1] is not None)

    def revision(self, field_name: str) -> int:
        """Number of whole-field writes recorded for ``field_name``."""
        return self._revisions.get(field_name, 0)

    def written_fields(self) -> list[str]:
        return sorted({key[0] for key in self._writes})

    def __len__(self) -> int:
        return len(self._writes)

    def __repr__(self) -> str:
        return f"MutableStateContainer(writes={len(self._writes)})"
