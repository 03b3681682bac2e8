"""Component types and stubs shared across diforge tests."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from diforge.exceptions import NoSuchComponentError, NotAFactoryError
from diforge.methods import OverridableMethod


class Animal:
    pass


class Tiger(Animal):
    pass


class Greeter:
    def __init__(self, greeting: str = "Hello") -> None:
        self.greeting = greeting

    def lookup(self) -> Animal:
        raise NotImplementedError

    def hello(self, name: str) -> str:
        """Greet ``name``."""
        return f"{self.greeting}, {name}!"

    def introduce(self) -> str:
        return f"{self.hello('keeper')} Meet {type(self.lookup()).__name__}."


class StubResolver:
    """Resolver that builds components from plain callables and records lookups."""

    def __init__(self) -> None:
        self.factories: dict[str, Callable[[], Any]] = {}
        self.calls: list[str] = []

    def resolve(self, name: str) -> Any:
        self.calls.append(name)
        factory = self.factories.get(name)
        if factory is None:
            raise NoSuchComponentError(name)
        return factory()

    def resolve_producer(self, name: str) -> Any:
        raise NotAFactoryError(name)


class RecordingReplacer:
    """Replacer that records every call and returns a fixed result."""

    def __init__(self, result: Any = "replaced") -> None:
        self.result = result
        self.calls: list[tuple[Any, OverridableMethod, tuple[Any, ...], dict[str, Any]]] = []

    def reimplement(
        self,
        receiver: Any,
        method: OverridableMethod,
        args: tuple[Any, ...],
        kwargs: Mapping[str, Any],
    ) -> Any:
        self.calls.append((receiver, method, args, dict(kwargs)))
        return self.result
