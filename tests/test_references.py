from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from entity_doubles.contracts import TargetIdMismatchError
from entity_doubles.references import (
    contains_references,
    extract_handles,
    has_unresolved_references,
    is_handle,
    normalize,
)


@pytest.fixture
def author(make_handle: Callable[..., Any]) -> Any:
    return make_handle(42)


def test_is_handle_accepts_doubles_only(author: Any) -> None:
    assert is_handle(author)
    assert not is_handle(None)
    assert not is_handle(42)
    assert not is_handle("42")
    assert not is_handle({"entity": author})


def test_single_handle_is_normalized(author: Any) -> None:
    assert normalize(author) == [{"entity": author, "target_id": 42}]


def test_entity_mapping_gets_its_target_id(author: Any) -> None:
    assert normalize({"entity": author}) == [{"entity": author, "target_id": 42}]
    assert normalize({"entity": author, "target_id": 42}) == [{"entity": author, "target_id": 42}]


def test_target_id_mismatch_names_both_ids(author: Any) -> None:
    with pytest.raises(TargetIdMismatchError, match="provided '999' but entity has ID '42'"):
        normalize({"entity": author, "target_id": 999})


def test_mismatch_is_a_value_error(author: Any) -> None:
    with pytest.raises(ValueError):
        normalize([{"entity": author, "target_id": 7}])


def test_explicit_empty_reference_is_detectable_but_empty() -> None:
    assert normalize({"entity": None}) == []
    assert contains_references({"entity": None})


def test_target_id_only_mapping_passes_through() -> None:
    assert normalize({"target_id": 5}) == [{"target_id": 5}]


def test_sequences_skip_empty_references(author: Any, make_handle: Callable[..., Any]) -> None:
    editor = make_handle(7)

    items = normalize([author, {"entity": None}, {"entity": editor}, {"target_id": 3}])

    assert items == [
        {"entity": author, "target_id": 42},
        {"entity": editor, "target_id": 7},
        {"target_id": 3},
    ]


def test_handle_without_id_normalizes_to_none_target(make_handle: Callable[..., Any]) -> None:
    unsaved = make_handle(None)

    assert normalize(unsaved) == [{"entity": unsaved, "target_id": None}]


def test_scalars_are_not_references() -> None:
    assert normalize(None) == []
    assert normalize("plain") == []
    assert normalize(12) == []
    assert not contains_references("plain")
    assert not contains_references([1, 2, 3])
    assert not contains_references({"value": 1})


def test_non_handle_entity_value_normalizes_to_nothing(author: Any) -> None:
    assert contains_references({"entity": 5})
    assert normalize({"entity": 5}) == []
    assert normalize({"entity": "not-a-handle", "target_id": 5}) == []
    assert normalize([{"entity": 5}, author]) == [{"entity": author, "target_id": 42}]


def test_normalize_is_idempotent(author: Any, make_handle: Callable[..., Any]) -> None:
    raw = [author, {"entity": make_handle(7), "target_id": 7}, {"target_id": 3}, {"entity": None}]

    once = normalize(raw)

    assert normalize(once) == once


def test_extract_handles_keeps_positions(author: Any) -> None:
    items = normalize([{"target_id": 1}, author])

    assert extract_handles(items) == {1: author}


def test_unresolved_references() -> None:
    assert has_unresolved_references(normalize([{"target_id": 1}, {"target_id": 2}]))
    assert not has_unresolved_references([])
