from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import pytest

from entity_doubles.capabilities import CapabilityTag
from entity_doubles.contracts import EntityDoubleDefinition, MissingResolverError, UnsupportedOperationError
from entity_doubles.resolution import ResolutionChain, ResolutionStage


def test_override_beats_core_resolver() -> None:
    chain = ResolutionChain(resolvers={"id": lambda context: 1}, overrides={"id": lambda: 99})

    resolution = chain.resolve("id")

    assert resolution.stage is ResolutionStage.OVERRIDE
    assert chain.invoke("id") == 99


def test_core_resolver_receives_context_then_arguments() -> None:
    seen: list[Any] = []
    chain = ResolutionChain(
        resolvers={"get": lambda context, name: seen.append((context["who"], name)) or name.upper()},
        context={"who": "ctx"},
    )

    assert chain.invoke("get", "title") == "TITLE"
    assert seen == [("ctx", "title")]
    assert chain.resolve("get").stage is ResolutionStage.CORE


def test_overrides_receive_raw_arguments() -> None:
    chain = ResolutionChain(resolvers={}, overrides={"get_owner_id": lambda *args: args})

    assert chain.invoke("get_owner_id", 1, 2) == (1, 2)


def test_guardrail_refuses_with_its_reason() -> None:
    chain = ResolutionChain(resolvers={}, capabilities=(CapabilityTag.ENTITY,))

    assert chain.resolve("save").stage is ResolutionStage.GUARDRAIL
    with pytest.raises(UnsupportedOperationError, match="Method 'save' is not supported by entity doubles") as exc:
        chain.invoke("save")
    assert exc.value.method == "save"
    assert "storage" in exc.value.reason


def test_guardrail_error_is_not_implemented_error() -> None:
    chain = ResolutionChain(resolvers={})

    with pytest.raises(NotImplementedError):
        chain.invoke("to_url")


def test_override_bypasses_guardrail(make_entity: Callable[..., Any]) -> None:
    entity = make_entity(methods={"save": lambda: "saved", "to_url": lambda *args: "/node/1"})

    assert entity.save() == "saved"
    assert entity.to_url("canonical") == "/node/1"


def test_lenient_mode_never_softens_guardrails() -> None:
    chain = ResolutionChain(resolvers={}, lenient=True)

    with pytest.raises(UnsupportedOperationError):
        chain.invoke("delete")


@pytest.mark.parametrize(
    ("method", "expected"),
    [
        ("is_published", False),
        ("get_changed_time", 0),
        ("get_cache_tags", []),
        ("get_translation_languages", {}),
        ("get_owner", None),
        ("bundle_of_nothing", None),
    ],
)
def test_lenient_defaults_follow_declared_return_kind(method: str, expected: object) -> None:
    chain = ResolutionChain(
        resolvers={},
        capabilities=(
            CapabilityTag.ENTITY_PUBLISHED,
            CapabilityTag.ENTITY_CHANGED,
            CapabilityTag.ENTITY_OWNER,
            CapabilityTag.TRANSLATABLE,
            CapabilityTag.ENTITY,
        ),
        lenient=True,
    )

    assert chain.resolve(method).stage is ResolutionStage.LENIENT
    assert chain.invoke(method) == expected


def test_missing_resolver_names_declaring_capability() -> None:
    chain = ResolutionChain(resolvers={}, capabilities=(CapabilityTag.ENTITY_OWNER,))

    with pytest.raises(MissingResolverError, match="get_owner_id.*entity_owner") as exc:
        chain.invoke("get_owner_id")
    assert exc.value.capability == "entity_owner"


def test_missing_resolver_for_undeclared_method_says_unknown() -> None:
    chain = ResolutionChain(resolvers={})

    assert chain.resolve("frobnicate").stage is ResolutionStage.MISSING
    with pytest.raises(MissingResolverError, match="declared by unknown"):
        chain.invoke("frobnicate")


def test_declares_covers_handled_guarded_and_catalog_methods() -> None:
    chain = ResolutionChain(
        resolvers={"custom": lambda context: 1},
        capabilities=(CapabilityTag.ENTITY_OWNER,),
    )

    assert chain.declares("custom")
    assert chain.declares("save")
    assert chain.declares("get_owner")
    assert not chain.declares("frobnicate")
    assert chain.method_names() == ("custom",)
    assert "get_owner" in chain.declared_names()


def test_fallthrough_is_logged_at_debug(caplog: pytest.LogCaptureFixture) -> None:
    chain = ResolutionChain(resolvers={}, lenient=True, capabilities=(CapabilityTag.ENTITY_PUBLISHED,))

    with caplog.at_level(logging.DEBUG, logger="entity_doubles.resolution"):
        chain.invoke("is_published")

    assert "Lenient default for is_published (bool)" in caplog.text


def test_entity_resolvers_see_the_definition_in_context(factory: Any) -> None:
    definition = EntityDoubleDefinition(
        entity_type="node",
        id=5,
        interfaces=[CapabilityTag.FIELDABLE],
        fields={"double_id": lambda context: context[EntityDoubleDefinition.CONTEXT_KEY].id * 2},
        context={"tenant": "acme"},
    )

    entity = factory.create(definition)

    assert entity.double_id.value == 10
