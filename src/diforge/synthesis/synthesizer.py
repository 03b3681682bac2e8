from __future__ import annotations

import logging
import threading
from contextlib import AbstractContextManager, nullcontext
from dataclasses import dataclass, field
from typing import Any

from diforge.constructors import ConstructorResolver
from diforge.container_interface import ComponentResolver
from diforge.defaults import DEFAULT_LOCK_MODE, DISPATCH_TABLE_ATTRIBUTE, RESOLVER_ATTRIBUTE
from diforge.definitions import DEFAULT_CONSTRUCTOR_SELECTOR, ConstructorSelector, MethodOverrides
from diforge.dispatch import DispatchResolver, DispatchTable
from diforge.exceptions import SubclassSynthesisError
from diforge.lock_mode import LockMode
from diforge.synthesis.planner import SubclassGenerationPlan, SubclassPlanner
from diforge.synthesis.renderer import SubclassTemplateRenderer

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, eq=False)
class SynthesizedType:
    """A generated subclass of ``target_type`` enforcing ``dispatch_table``.

    Compared by identity: the synthesizer hands out one object per distinct
    ``(target_type, overrides)`` pair.
    """

    target_type: type[Any]
    overrides: MethodOverrides
    generated_type: type[Any]
    dispatch_table: DispatchTable
    source: str = field(repr=False)


class SubclassSynthesizer:
    """Generates, caches and instantiates subclasses with redirected methods."""

    def __init__(
        self,
        *,
        lock_mode: LockMode = DEFAULT_LOCK_MODE,
        dispatch_resolver: DispatchResolver | None = None,
        constructor_resolver: ConstructorResolver | None = None,
    ) -> None:
        self._dispatch_resolver = dispatch_resolver or DispatchResolver(lock_mode=lock_mode)
        self._constructor_resolver = constructor_resolver or ConstructorResolver()
        self._renderer = SubclassTemplateRenderer()
        self._synthesized: dict[tuple[type[Any], MethodOverrides], SynthesizedType] = {}
        self._lock: threading.Lock | None = (
            threading.Lock() if lock_mode is LockMode.THREAD else None
        )

    @property
    def synthesized_count(self) -> int:
        """Number of subclasses currently held by the cache."""
        return len(self._synthesized)

    def obtain_synthesized_type(
        self,
        target_type: type[Any],
        overrides: MethodOverrides,
    ) -> SynthesizedType:
        """Get the synthesized subclass for a type and override set, generating it once.

        Definitions that are distinct objects but carry structurally equal
        overrides share the same result.

        Args:
            target_type: Class to specialize.
            overrides: Overrides the subclass must enforce.

        """
        key = (target_type, overrides)
        synthesized = self._synthesized.get(key)
        if synthesized is not None:
            return synthesized

        with self._guard():
            synthesized = self._synthesized.get(key)
            if synthesized is None:
                synthesized = self._synthesize(target_type, overrides)
                self._synthesized[key] = synthesized
            else:
                logger.debug("Reusing synthesized subclass for %s", target_type.__qualname__)
        return synthesized

    def instantiate(
        self,
        synthesized_type: SynthesizedType,
        resolver: ComponentResolver,
        constructor_selector: ConstructorSelector | None = None,
    ) -> Any:
        """Construct an instance of the synthesized subclass.

        The dispatch table and ``resolver`` are bound before ``__init__`` runs,
        so redirected methods already work inside the constructor.

        Raises:
            ConstructorNotFoundError: No constructor matches ``constructor_selector``.

        """
        selector = constructor_selector or DEFAULT_CONSTRUCTOR_SELECTOR
        args, kwargs = self._constructor_resolver.select(synthesized_type.target_type, selector)
        dispatch_table = synthesized_type.dispatch_table

        def bind_state(instance: Any) -> None:
            object.__setattr__(instance, DISPATCH_TABLE_ATTRIBUTE, dispatch_table)
            object.__setattr__(instance, RESOLVER_ATTRIBUTE, resolver)

        return self._constructor_resolver.construct(
            synthesized_type.generated_type,
            args,
            kwargs,
            prepare=bind_state,
        )

    def clear_cache(self) -> None:
        """Drop cached subclasses; live instances keep their class."""
        with self._guard():
            self._synthesized.clear()
        self._dispatch_resolver.clear_cache()

    def _synthesize(self, target_type: type[Any], overrides: MethodOverrides) -> SynthesizedType:
        dispatch_table = self._dispatch_resolver.build_dispatch_table(target_type, overrides)
        plan = SubclassPlanner(dispatch_table=dispatch_table).build()
        source = self._renderer.get_subclass_code(plan=plan)

        namespace: dict[str, Any] = {"__name__": target_type.__module__, **plan.bindings}
        try:
            exec(source, namespace)  # noqa: S102
        except TypeError as error:
            msg = f"Cannot synthesize a subclass of '{target_type.__qualname__}': {error}"
            raise SubclassSynthesisError(msg) from error

        generated_type = namespace[plan.class_name]
        self._expose_originals(generated_type=generated_type, plan=plan)
        return SynthesizedType(
            target_type=target_type,
            overrides=overrides,
            generated_type=generated_type,
            dispatch_table=dispatch_table,
            source=source,
        )

    def _expose_originals(self, *, generated_type: type[Any], plan: SubclassGenerationPlan) -> None:
        # inspect.signature() follows __wrapped__ to the original parameters.
        for method_plan in plan.methods:
            generated = vars(generated_type)[method_plan.method_name]
            binding = plan.bindings[method_plan.binding_name]
            original = binding.default_function if method_plan.is_overloaded else binding.function
            generated.__wrapped__ = original
            generated.__doc__ = original.__doc__

    def _guard(self) -> AbstractContextManager[Any]:
        return self._lock if self._lock is not None else nullcontext()
