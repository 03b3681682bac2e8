from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from diforge.methods import OverridableMethod


class ComponentResolver(Protocol):
    """Protocol for the container that owns synthesized instances.

    Interceptors call back into it at method-call time, so any object with
    these two methods (a stub in tests included) can back an instance.
    """

    def resolve(self, name: str) -> Any:
        """Return the product registered under ``name``.

        Raises ``NoSuchComponentError`` for unknown names. When the component is
        a ``Factory`` the result of ``produce()`` is returned, not the factory.
        """

    def resolve_producer(self, name: str) -> Any:
        """Return the component registered under ``name`` itself, never its product."""


@runtime_checkable
class Factory(Protocol):
    """Capability of a component that produces another object.

    The container hands out ``produce()`` results in place of the component;
    ``is_shared()`` tells it whether to cache that result.
    """

    def produce(self) -> Any:
        """Create (or return) the produced object."""

    def produced_type(self) -> type[Any] | None:
        """Return the type of the produced object, if known in advance."""

    def is_shared(self) -> bool:
        """Return True if the produced object should be created once and cached."""


@runtime_checkable
class MethodReplacer(Protocol):
    """Capability that fully reimplements a redirected method."""

    def reimplement(
        self,
        receiver: Any,
        method: OverridableMethod,
        args: tuple[Any, ...],
        kwargs: Mapping[str, Any],
    ) -> Any:
        """Run in place of ``method`` called on ``receiver`` and return its result."""
