from __future__ import annotations

import logging
import threading
from contextlib import AbstractContextManager, nullcontext
from types import TracebackType
from typing import Any, TypeVar, overload

from typing_extensions import Self

from diforge.container_interface import Factory
from diforge.defaults import DEFAULT_LOCK_MODE
from diforge.definitions import ConstructorSelector, Definition, Scope
from diforge.exceptions import (
    ComponentTypeMismatchError,
    ConstructorArgumentsNotAllowedError,
    DuplicateComponentError,
    NoSuchComponentError,
    NoUniqueComponentError,
    NotAFactoryError,
)
from diforge.lock_mode import LockMode
from diforge.strategy import InstantiationStrategy, SubclassingInstantiationStrategy

T = TypeVar("T")

_MISSING: Any = object()
logger = logging.getLogger(__name__)


class Container:
    """In-memory owner of component definitions.

    Shared components are created once and cached; fresh components are
    created on every request. Components implementing ``Factory`` are
    transparently replaced by their product unless the producer is asked for
    explicitly with ``resolve_producer``.
    """

    def __init__(
        self,
        *,
        strategy: InstantiationStrategy | None = None,
        lock_mode: LockMode = DEFAULT_LOCK_MODE,
        allow_definition_overriding: bool = True,
    ) -> None:
        """Initialize the container.

        Args:
            strategy: Instantiation strategy; defaults to ``SubclassingInstantiationStrategy``.
            lock_mode: Locking for shared instances and synthesis caches.
            allow_definition_overriding: Whether registering a taken name replaces it.

        """
        self._strategy = strategy or SubclassingInstantiationStrategy(lock_mode=lock_mode)
        self._allow_definition_overriding = allow_definition_overriding
        self._definitions: dict[str, Definition] = {}
        self._instances: dict[str, Any] = {}
        self._shared_instances: dict[str, Any] = {}
        self._factory_products: dict[str, Any] = {}
        self._lock: threading.RLock | None = (
            threading.RLock() if lock_mode is LockMode.THREAD else None
        )

    def add_definition(self, name: str, definition: Definition) -> None:
        """Register ``definition`` under ``name``.

        Raises:
            DuplicateComponentError: ``name`` is taken and overriding is disabled.

        """
        with self._guard():
            self._check_name_available(name)
            self._forget(name)
            self._definitions[name] = definition
        logger.debug(
            "Registered component '%s': %s scope=%s overrides=%d",
            name,
            definition.target_type.__qualname__,
            definition.scope.name,
            len(definition.overrides),
        )

    def add_instance(self, name: str, instance: Any) -> None:
        """Register an already built object as a shared component."""
        with self._guard():
            self._check_name_available(name)
            self._forget(name)
            self._instances[name] = instance

    def contains(self, name: str) -> bool:
        return name in self._definitions or name in self._instances

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.contains(name)

    def names(self) -> tuple[str, ...]:
        """Get all registered component names in registration order."""
        return (*self._instances, *self._definitions)

    def get_definition(self, name: str) -> Definition:
        definition = self._definitions.get(name)
        if definition is None:
            raise NoSuchComponentError(name)
        return definition

    @overload
    def resolve(
        self,
        name: str,
        *,
        constructor_selector: ConstructorSelector | None = None,
    ) -> Any: ...

    @overload
    def resolve(
        self,
        name: str,
        required_type: type[T],
        *,
        constructor_selector: ConstructorSelector | None = None,
    ) -> T: ...

    def resolve(
        self,
        name: str,
        required_type: type[Any] | None = None,
        *,
        constructor_selector: ConstructorSelector | None = None,
    ) -> Any:
        """Return the product registered under ``name``.

        Args:
            name: Component name.
            required_type: If given, the result must be an instance of this type.
            constructor_selector: Constructor arguments for this request only.
                Overrides the selector stored on the definition.

        Raises:
            NoSuchComponentError: ``name`` is not registered.
            ComponentTypeMismatchError: The result is not a ``required_type``.
            ConstructorArgumentsNotAllowedError: ``constructor_selector`` was given
                for a component that is not fresh-scoped.

        """
        product = self.resolve_product(name, constructor_selector=constructor_selector)
        return self._check_type(name, product, required_type)

    def resolve_by_type(
        self,
        required_type: type[T],
        *,
        constructor_selector: ConstructorSelector | None = None,
    ) -> T:
        """Return the product of the only component matching ``required_type``.

        Matching follows ``is_type_match``, so fresh-scoped factories whose
        product type is unknown never match.

        Raises:
            NoSuchComponentError: No component matches.
            NoUniqueComponentError: More than one component matches.

        """
        candidates = [name for name in self.names() if self.is_type_match(name, required_type)]
        if not candidates:
            raise NoSuchComponentError(required_type=required_type)
        if len(candidates) > 1:
            raise NoUniqueComponentError(required_type, candidates)
        return self.resolve(
            candidates[0],
            required_type,
            constructor_selector=constructor_selector,
        )

    def resolve_product(
        self,
        name: str,
        *,
        constructor_selector: ConstructorSelector | None = None,
    ) -> Any:
        """Return the component, or the result of ``produce()`` if it is a ``Factory``."""
        component = self._component(name, constructor_selector)
        if isinstance(component, Factory):
            return self._product(name, component)
        return component

    def resolve_producer(self, name: str, required_type: type[Any] | None = None) -> Any:
        """Return the ``Factory`` registered under ``name`` itself.

        Raises:
            NotAFactoryError: The component does not implement ``Factory``.

        """
        component = self._component(name)
        if not isinstance(component, Factory):
            raise NotAFactoryError(name)
        return self._check_type(name, component, required_type)

    def is_shared(self, name: str) -> bool:
        """Check whether repeated requests for ``name`` return the same object."""
        if name in self._instances:
            component = self._instances[name]
            return not isinstance(component, Factory) or component.is_shared()
        definition = self.get_definition(name)
        if definition.scope is not Scope.SHARED:
            return False
        if issubclass(definition.target_type, Factory):
            return self._component(name).is_shared()
        return True

    def is_fresh(self, name: str) -> bool:
        """Check whether every request for ``name`` creates a new object."""
        if name in self._instances:
            return False
        return self.get_definition(name).scope is Scope.FRESH

    def get_type(self, name: str) -> type[Any] | None:
        """Return the type ``resolve(name)`` produces, without creating fresh instances.

        Shared factories are created to ask for their ``produced_type()``.
        """
        if name in self._instances:
            component = self._instances[name]
            if isinstance(component, Factory):
                return component.produced_type()
            return type(component)

        definition = self.get_definition(name)
        if not issubclass(definition.target_type, Factory):
            return definition.target_type
        if definition.scope is Scope.SHARED:
            return self._component(name).produced_type()
        return None

    def is_type_match(self, name: str, type_to_match: type[Any]) -> bool:
        component_type = self.get_type(name)
        return component_type is not None and issubclass(component_type, type_to_match)

    def close(self) -> None:
        """Drop shared instances, factory products and synthesized subclasses.

        Registered definitions and instances added with ``add_instance`` stay.
        """
        with self._guard():
            self._shared_instances.clear()
            self._factory_products.clear()
        self._strategy.clear_cache()
        logger.debug("Container closed")

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def _component(
        self,
        name: str,
        constructor_selector: ConstructorSelector | None = None,
    ) -> Any:
        instance = self._instances.get(name, _MISSING)
        if instance is not _MISSING:
            if constructor_selector is not None:
                raise ConstructorArgumentsNotAllowedError(name)
            return instance

        definition = self.get_definition(name)
        if definition.scope is Scope.FRESH:
            return self._create(name, definition, constructor_selector)
        if constructor_selector is not None:
            raise ConstructorArgumentsNotAllowedError(name)

        shared = self._shared_instances.get(name, _MISSING)
        if shared is not _MISSING:
            return shared
        with self._guard():
            shared = self._shared_instances.get(name, _MISSING)
            if shared is _MISSING:
                shared = self._create(name, definition)
                self._shared_instances[name] = shared
        return shared

    def _product(self, name: str, factory: Factory) -> Any:
        if not factory.is_shared():
            return factory.produce()

        product = self._factory_products.get(name, _MISSING)
        if product is not _MISSING:
            return product
        with self._guard():
            product = self._factory_products.get(name, _MISSING)
            if product is _MISSING:
                product = factory.produce()
                self._factory_products[name] = product
        return product

    def _create(
        self,
        name: str,
        definition: Definition,
        constructor_selector: ConstructorSelector | None = None,
    ) -> Any:
        logger.debug(
            "Creating %s instance of component '%s' (%s)",
            definition.scope.name.lower(),
            name,
            definition.target_type.__qualname__,
        )
        return self._strategy.instantiate(definition, self, constructor_selector)

    def _check_type(self, name: str, value: Any, required_type: type[Any] | None) -> Any:
        if required_type is not None and not isinstance(value, required_type):
            raise ComponentTypeMismatchError(name, required_type, type(value))
        return value

    def _check_name_available(self, name: str) -> None:
        if self.contains(name) and not self._allow_definition_overriding:
            raise DuplicateComponentError(name)

    def _forget(self, name: str) -> None:
        self._definitions.pop(name, None)
        self._instances.pop(name, None)
        self._shared_instances.pop(name, None)
        self._factory_products.pop(name, None)

    def _guard(self) -> AbstractContextManager[Any]:
        return self._lock if self._lock is not None else nullcontext()
