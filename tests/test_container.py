from __future__ import annotations

import logging
from typing import Any

import pytest
from fixtures import Animal, Greeter, Tiger

from diforge.container import Container
from diforge.definitions import (
    ConstructorSelector,
    Definition,
    LookupOverride,
    ReplaceOverride,
    Scope,
)
from diforge.exceptions import (
    ComponentTypeMismatchError,
    ConstructorArgumentsNotAllowedError,
    DuplicateComponentError,
    NoSuchComponentError,
    NoUniqueComponentError,
    NotAFactoryError,
)
from diforge.lock_mode import LockMode
from diforge.strategy import SimpleInstantiationStrategy


class TigerFactory:
    def __init__(self, shared: bool = True) -> None:
        self.shared = shared
        self.produced = 0

    def produce(self) -> Tiger:
        self.produced += 1
        return Tiger()

    def produced_type(self) -> type[Any] | None:
        return Tiger

    def is_shared(self) -> bool:
        return self.shared


class Uppercase:
    def reimplement(self, receiver, method, args, kwargs):  # noqa: ANN001, ANN202
        return method.function(receiver, *args, **kwargs).upper()


def test_shared_components_are_created_once(container: Container) -> None:
    container.add_definition("tiger", Definition(Tiger))

    assert container.resolve("tiger") is container.resolve("tiger")
    assert container.is_shared("tiger")
    assert not container.is_fresh("tiger")


def test_fresh_components_are_created_per_request(container: Container) -> None:
    container.add_definition("tiger", Definition(Tiger, scope=Scope.FRESH))

    assert container.resolve("tiger") is not container.resolve("tiger")
    assert container.is_fresh("tiger")
    assert not container.is_shared("tiger")


def test_unknown_component_fails(container: Container) -> None:
    with pytest.raises(NoSuchComponentError, match="missing") as exc_info:
        container.resolve("missing")

    assert exc_info.value.name == "missing"
    assert "missing" not in container
    with pytest.raises(NoSuchComponentError):
        container.get_definition("missing")


def test_shared_greeter_looks_up_fresh_tigers(container: Container) -> None:
    container.add_definition("tiger", Definition(Tiger, scope=Scope.FRESH))
    container.add_definition(
        "greeter",
        Definition(Greeter, overrides=[LookupOverride("lookup", "tiger")]),
    )

    greeter = container.resolve("greeter", Greeter)

    assert greeter is container.resolve("greeter")
    assert isinstance(greeter.lookup(), Tiger)
    assert greeter.lookup() is not greeter.lookup()
    assert greeter.introduce() == "Hello, keeper! Meet Tiger."


def test_lookup_of_shared_target_returns_the_singleton(container: Container) -> None:
    container.add_definition("tiger", Definition(Tiger))
    container.add_definition(
        "greeter",
        Definition(Greeter, scope=Scope.FRESH, overrides=[LookupOverride("lookup", "tiger")]),
    )

    first = container.resolve("greeter")
    second = container.resolve("greeter")

    assert first is not second
    assert first.lookup() is second.lookup() is container.resolve("tiger")


def test_replace_override_uses_registered_replacer(container: Container) -> None:
    container.add_definition("uppercase", Definition(Uppercase))
    container.add_definition(
        "greeter",
        Definition(
            Greeter,
            constructor_selector=ConstructorSelector(args=("Hi",)),
            overrides=[ReplaceOverride("hello", "uppercase")],
        ),
    )

    assert container.resolve("greeter").hello("Ann") == "HI, ANN!"


def test_factory_product_is_returned_instead_of_factory(container: Container) -> None:
    container.add_definition("tiger", Definition(TigerFactory))

    product = container.resolve("tiger")
    producer = container.resolve_producer("tiger")

    assert isinstance(product, Tiger)
    assert product is container.resolve_product("tiger")
    assert isinstance(producer, TigerFactory)
    assert producer.produced == 1


def test_unshared_factory_produces_per_request(container: Container) -> None:
    container.add_instance("tiger", TigerFactory(shared=False))

    assert container.resolve("tiger") is not container.resolve("tiger")
    assert container.resolve_producer("tiger").produced == 2
    assert not container.is_shared("tiger")


def test_lookup_redirect_receives_factory_product(container: Container) -> None:
    container.add_instance("tiger", TigerFactory(shared=False))
    container.add_definition(
        "greeter",
        Definition(Greeter, overrides=[LookupOverride("lookup", "tiger")]),
    )

    greeter = container.resolve("greeter")

    assert isinstance(greeter.lookup(), Tiger)
    assert greeter.lookup() is not greeter.lookup()


def test_producer_of_plain_component_fails(container: Container) -> None:
    container.add_definition("tiger", Definition(Tiger))

    with pytest.raises(NotAFactoryError, match="tiger"):
        container.resolve_producer("tiger")


def test_required_type_is_checked(container: Container) -> None:
    container.add_definition("tiger", Definition(Tiger))

    assert isinstance(container.resolve("tiger", Animal), Tiger)
    with pytest.raises(ComponentTypeMismatchError, match="Greeter") as exc_info:
        container.resolve("tiger", Greeter)

    assert exc_info.value.required_type is Greeter
    assert exc_info.value.actual_type is Tiger


def test_duplicate_names_replace_by_default(container: Container) -> None:
    container.add_definition("animal", Definition(Tiger))
    first = container.resolve("animal")

    container.add_definition("animal", Definition(Animal))

    assert type(container.resolve("animal")) is Animal
    assert container.resolve("animal") is not first


def test_duplicate_names_fail_when_overriding_is_disabled() -> None:
    container = Container(allow_definition_overriding=False)
    container.add_definition("animal", Definition(Tiger))

    with pytest.raises(DuplicateComponentError, match="animal"):
        container.add_instance("animal", Animal())


def test_registered_instances_are_returned_as_is(container: Container) -> None:
    tiger = Tiger()
    container.add_instance("tiger", tiger)

    assert container.resolve("tiger") is tiger
    assert container.is_shared("tiger")
    assert container.names() == ("tiger",)
    assert "tiger" in container


def test_get_type_and_type_match(container: Container) -> None:
    container.add_definition("greeter", Definition(Greeter))
    container.add_definition("tiger", Definition(TigerFactory))
    container.add_definition("fresh_tiger", Definition(TigerFactory, scope=Scope.FRESH))

    assert container.get_type("greeter") is Greeter
    assert container.get_type("tiger") is Tiger
    assert container.get_type("fresh_tiger") is None
    assert container.is_type_match("tiger", Animal)
    assert not container.is_type_match("greeter", Animal)
    assert not container.is_type_match("fresh_tiger", Animal)


def test_close_drops_shared_instances_and_synthesized_types(container: Container) -> None:
    container.add_definition(
        "greeter",
        Definition(Greeter, overrides=[LookupOverride("lookup", "tiger")]),
    )
    first = container.resolve("greeter")

    container.close()
    second = container.resolve("greeter")

    assert second is not first
    assert type(second) is not type(first)
    assert container.contains("greeter")


def test_context_manager_closes_container() -> None:
    with Container() as container:
        container.add_definition("tiger", Definition(Tiger))
        first = container.resolve("tiger")

    assert container.resolve("tiger") is not first


def test_plain_strategy_serves_definitions_without_overrides() -> None:
    container = Container(strategy=SimpleInstantiationStrategy())
    container.add_definition("greeter", Definition(Greeter))

    assert type(container.resolve("greeter")) is Greeter


def test_component_creation_is_logged(
    container: Container,
    caplog: pytest.LogCaptureFixture,
) -> None:
    container.add_definition("tiger", Definition(Tiger, scope=Scope.FRESH))

    with caplog.at_level(logging.DEBUG, logger="diforge.container"):
        container.resolve("tiger")

    assert "Creating fresh instance of component 'tiger'" in caplog.text


def test_fresh_components_accept_per_request_constructor_arguments(container: Container) -> None:
    container.add_definition(
        "greeter",
        Definition(
            Greeter,
            scope=Scope.FRESH,
            constructor_selector=ConstructorSelector(args=("Hi",)),
            overrides=[LookupOverride("lookup", "tiger")],
        ),
    )

    default = container.resolve("greeter")
    custom = container.resolve(
        "greeter",
        Greeter,
        constructor_selector=ConstructorSelector(kwargs={"greeting": "Hey"}),
    )

    assert default.hello("Ann") == "Hi, Ann!"
    assert custom.hello("Ann") == "Hey, Ann!"
    assert type(custom) is type(default)


def test_constructor_arguments_are_rejected_for_shared_components(container: Container) -> None:
    container.add_definition("greeter", Definition(Greeter))
    container.add_instance("tiger", Tiger())
    selector = ConstructorSelector(args=("Hi",))

    with pytest.raises(ConstructorArgumentsNotAllowedError, match="greeter"):
        container.resolve("greeter", constructor_selector=selector)
    with pytest.raises(ConstructorArgumentsNotAllowedError, match="tiger"):
        container.resolve("tiger", constructor_selector=selector)


def test_resolve_by_type_returns_the_single_match(container: Container) -> None:
    container.add_definition("greeter", Definition(Greeter))
    container.add_definition("tiger", Definition(TigerFactory))

    assert container.resolve_by_type(Greeter) is container.resolve("greeter")
    assert container.resolve_by_type(Tiger) is container.resolve("tiger")


def test_resolve_by_type_passes_constructor_arguments(container: Container) -> None:
    container.add_definition("greeter", Definition(Greeter, scope=Scope.FRESH))

    greeter = container.resolve_by_type(
        Greeter,
        constructor_selector=ConstructorSelector(args=("Hey",)),
    )

    assert greeter.hello("Ann") == "Hey, Ann!"


def test_resolve_by_type_without_match_fails(container: Container) -> None:
    container.add_definition("greeter", Definition(Greeter))

    with pytest.raises(NoSuchComponentError, match="Animal") as exc_info:
        container.resolve_by_type(Animal)

    assert exc_info.value.required_type is Animal
    assert exc_info.value.name is None


def test_resolve_by_type_with_several_matches_fails(container: Container) -> None:
    container.add_instance("tiger", Tiger())
    container.add_definition("animal", Definition(Animal))

    with pytest.raises(NoUniqueComponentError, match="found 2: tiger, animal") as exc_info:
        container.resolve_by_type(Animal)

    assert exc_info.value.candidates == ("tiger", "animal")
    assert isinstance(exc_info.value, NoSuchComponentError)


def test_unlocked_container_serves_single_threaded_hosts() -> None:
    container = Container(lock_mode=LockMode.NONE)
    container.add_definition("tiger", Definition(Tiger, scope=Scope.FRESH))
    container.add_definition(
        "greeter",
        Definition(Greeter, overrides=[LookupOverride("lookup", "tiger")]),
    )

    greeter = container.resolve("greeter")

    assert greeter is container.resolve("greeter")
    assert greeter.introduce() == "Hello, keeper! Meet Tiger."
    assert container._lock is None
    synthesizer = container._strategy.synthesizer
    assert synthesizer._lock is None
    assert synthesizer._dispatch_resolver._lock is None
    assert synthesizer.synthesized_count == 1

    container.close()

    assert container.resolve("greeter") is not greeter
    assert synthesizer.synthesized_count == 1
