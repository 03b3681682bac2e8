from __future__ import annotations

import inspect
from collections.abc import Callable, Mapping
from contextvars import ContextVar
from typing import Any

from diforge.definitions import ConstructorSelector
from diforge.exceptions import ConstructorNotFoundError
from diforge.methods import MethodIntrospector, format_param_types

_pending_preparation: ContextVar[tuple[type[Any], Callable[[Any], None]] | None] = ContextVar(
    "diforge_pending_preparation",
    default=None,
)


def allocate_instance(
    parent: Any,
    cls: type[Any],
    args: tuple[Any, ...],
    kwargs: Mapping[str, Any],
) -> Any:
    """Run the parent ``__new__`` for a synthesized class and apply the pending preparation.

    ``parent`` is the ``super()`` object of the generated ``__new__``.
    """
    parent_new = parent.__new__
    if parent_new is object.__new__:
        instance = parent_new(cls)
    else:
        instance = parent_new(cls, *args, **kwargs)

    pending = _pending_preparation.get()
    if pending is not None and isinstance(instance, pending[0]):
        _pending_preparation.set(None)
        pending[1](instance)
    return instance


class ConstructorResolver:
    """Matches a ``ConstructorSelector`` against the ``__init__`` of a class."""

    def __init__(self, *, introspector: MethodIntrospector | None = None) -> None:
        self._introspector = introspector or MethodIntrospector()

    def select(
        self,
        target_type: type[Any],
        selector: ConstructorSelector,
    ) -> tuple[tuple[Any, ...], dict[str, Any]]:
        """Validate the selector and return the positional and keyword arguments to pass.

        Raises:
            ConstructorNotFoundError: The declared parameter types differ from ``__init__``
                or the arguments do not bind to it.

        """
        args = tuple(selector.args)
        kwargs = dict(selector.kwargs)

        if selector.param_types is not None:
            actual_types = self.constructor_param_types(target_type)
            if actual_types != selector.param_types:
                msg = (
                    f"No constructor '{target_type.__qualname__}"
                    f"({format_param_types(selector.param_types)})'; "
                    f"available: '{target_type.__qualname__}({format_param_types(actual_types)})'."
                )
                raise ConstructorNotFoundError(msg)

        try:
            signature = inspect.signature(target_type)
        except (TypeError, ValueError):
            return args, kwargs

        try:
            signature.bind(*args, **kwargs)
        except TypeError as error:
            msg = (
                f"No constructor of '{target_type.__qualname__}' accepts "
                f"{self._describe_arguments(args, kwargs)}: {error}"
            )
            raise ConstructorNotFoundError(msg) from error
        return args, kwargs

    def constructor_param_types(self, target_type: type[Any]) -> tuple[Any, ...]:
        """Resolve the annotated parameter types of ``target_type.__init__``."""
        init_callable = target_type.__init__
        if init_callable is object.__init__:
            return ()
        try:
            return self._introspector.param_types(init_callable)
        except (TypeError, ValueError) as error:
            msg = f"Cannot inspect the constructor of '{target_type.__qualname__}'."
            raise ConstructorNotFoundError(msg) from error

    def construct(
        self,
        cls: type[Any],
        args: tuple[Any, ...],
        kwargs: Mapping[str, Any],
        *,
        prepare: Callable[[Any], None],
    ) -> Any:
        """Create an instance of ``cls`` through its metaclass, as ``cls(*args, **kwargs)`` would.

        ``cls`` must allocate through ``allocate_instance``: ``prepare`` runs on
        the new instance between ``__new__`` and ``__init__``, so state it binds
        is visible to methods that ``__init__`` calls.
        """
        token = _pending_preparation.set((cls, prepare))
        try:
            return cls(*args, **kwargs)
        finally:
            _pending_preparation.reset(token)

    def _describe_arguments(self, args: tuple[Any, ...], kwargs: Mapping[str, Any]) -> str:
        if not args and not kwargs:
            return "no arguments"
        return f"{len(args)} positional and {len(kwargs)} keyword argument(s)"
