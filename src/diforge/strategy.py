from __future__ import annotations

from typing import Any, Protocol

from diforge.constructors import ConstructorResolver
from diforge.container_interface import ComponentResolver
from diforge.defaults import DEFAULT_LOCK_MODE
from diforge.definitions import DEFAULT_CONSTRUCTOR_SELECTOR, ConstructorSelector, Definition
from diforge.exceptions import MethodInjectionNotSupportedError
from diforge.lock_mode import LockMode
from diforge.synthesis.synthesizer import SubclassSynthesizer


class InstantiationStrategy(Protocol):
    """Protocol for turning a definition into a live instance."""

    def instantiate(
        self,
        definition: Definition,
        owner: ComponentResolver,
        constructor_selector: ConstructorSelector | None = None,
    ) -> Any:
        """Create one instance of ``definition`` owned by ``owner``."""

    def clear_cache(self) -> None:
        """Drop any cached artifacts."""


class SimpleInstantiationStrategy:
    """Constructs target types directly; method injection is not supported."""

    def __init__(self, *, constructor_resolver: ConstructorResolver | None = None) -> None:
        self._constructor_resolver = constructor_resolver or ConstructorResolver()

    def instantiate(
        self,
        definition: Definition,
        owner: ComponentResolver,
        constructor_selector: ConstructorSelector | None = None,
    ) -> Any:
        """Create one instance of ``definition``.

        Args:
            definition: Component definition to instantiate.
            owner: Container the instance resolves redirect targets from.
            constructor_selector: Overrides the selector stored on ``definition``.

        """
        selector = (
            constructor_selector
            or definition.constructor_selector
            or DEFAULT_CONSTRUCTOR_SELECTOR
        )
        if definition.has_overrides:
            return self.instantiate_with_method_injection(definition, owner, selector)

        target_type = definition.target_type
        args, kwargs = self._constructor_resolver.select(target_type, selector)
        return target_type(*args, **kwargs)

    def instantiate_with_method_injection(
        self,
        definition: Definition,
        owner: ComponentResolver,
        constructor_selector: ConstructorSelector,
    ) -> Any:
        msg = (
            f"Method injection is not supported by {type(self).__name__}; "
            f"'{definition.target_type.__qualname__}' declares {len(definition.overrides)} "
            "override(s). Use SubclassingInstantiationStrategy."
        )
        raise MethodInjectionNotSupportedError(msg)

    def clear_cache(self) -> None:
        return None


class SubclassingInstantiationStrategy(SimpleInstantiationStrategy):
    """Default strategy: synthesizes subclasses when a definition has overrides."""

    def __init__(
        self,
        *,
        lock_mode: LockMode = DEFAULT_LOCK_MODE,
        synthesizer: SubclassSynthesizer | None = None,
        constructor_resolver: ConstructorResolver | None = None,
    ) -> None:
        constructor_resolver = constructor_resolver or ConstructorResolver()
        super().__init__(constructor_resolver=constructor_resolver)
        self._synthesizer = synthesizer or SubclassSynthesizer(
            lock_mode=lock_mode,
            constructor_resolver=constructor_resolver,
        )

    @property
    def synthesizer(self) -> SubclassSynthesizer:
        return self._synthesizer

    def instantiate_with_method_injection(
        self,
        definition: Definition,
        owner: ComponentResolver,
        constructor_selector: ConstructorSelector,
    ) -> Any:
        synthesized_type = self._synthesizer.obtain_synthesized_type(
            definition.target_type,
            definition.overrides,
        )
        return self._synthesizer.instantiate(synthesized_type, owner, constructor_selector)

    def clear_cache(self) -> None:
        self._synthesizer.clear_cache()
