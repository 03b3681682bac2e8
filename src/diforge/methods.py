from __future__ import annotations

import inspect
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from functools import singledispatchmethod
from inspect import Parameter
from types import MappingProxyType
from typing import Any, get_type_hints

from diforge.definitions import ParamTypes

_CONSTRUCTOR_NAMES = frozenset({"__init__", "__new__", "__init_subclass__", "__class_getitem__"})
_MISSING_ANNOTATION: Any = object()


def format_param_types(param_types: Sequence[Any]) -> str:
    """Render parameter types the way they read in a signature."""
    return ", ".join(_format_type(param_type) for param_type in param_types)


def _format_type(value: Any) -> str:
    if value is Any:
        return "Any"
    qualname = getattr(value, "__qualname__", None)
    if isinstance(value, type) and isinstance(qualname, str):
        return qualname
    return repr(value)


@dataclass(frozen=True, slots=True)
class MethodSignature:
    """Stable identity of a method: its name and ordered parameter types."""

    name: str
    param_types: ParamTypes

    def __str__(self) -> str:
        return f"{self.name}({format_param_types(self.param_types)})"


@dataclass(frozen=True, slots=True, eq=False)
class OverridableMethod:
    """A method that a synthesized subclass may intercept.

    Instances are the method identity handed to replacers: ``function`` is the
    original, undecorated implementation and ``owner`` the class defining it.
    """

    signature: MethodSignature
    function: Callable[..., Any]
    owner: type[Any]

    @property
    def name(self) -> str:
        return self.signature.name

    def __repr__(self) -> str:
        return f"<OverridableMethod {self.owner.__qualname__}.{self.signature}>"


@dataclass(frozen=True, slots=True, eq=False)
class OverloadSet:
    """The overloads registered on a ``functools.singledispatchmethod``."""

    name: str
    dispatcher: Any
    methods: tuple[OverridableMethod, ...]
    by_function: Mapping[Callable[..., Any], OverridableMethod] = field(repr=False)

    @property
    def default_function(self) -> Callable[..., Any]:
        """The implementation registered for ``object``, i.e. the decorated function."""
        return self.dispatcher.registry[object]

    def select(self, args: tuple[Any, ...]) -> OverridableMethod:
        """Pick the overload a call with ``args`` dispatches to."""
        if not args:
            msg = f"{self.name} requires at least 1 positional argument"
            raise TypeError(msg)
        implementation = self.dispatcher.dispatch(args[0].__class__)
        return self.by_function[implementation]


@dataclass(frozen=True, slots=True)
class TypeMethods:
    """Methods of a type, split into overridable ones and everything else."""

    target_type: type[Any]
    methods: tuple[OverridableMethod, ...]
    overloads: Mapping[str, OverloadSet]
    non_overridable: Mapping[str, str]
    """Member name to the reason it cannot be intercepted."""

    def by_name(self, name: str) -> tuple[OverridableMethod, ...]:
        return tuple(method for method in self.methods if method.name == name)


class MethodIntrospector:
    """Enumerates the overridable instance methods of a class."""

    def inspect_type(self, target_type: type[Any]) -> TypeMethods:
        """Collect the most-derived member for every name along the MRO."""
        members: dict[str, tuple[type[Any], Any]] = {}
        for klass in target_type.__mro__:
            if klass is object or klass.__module__ == "builtins":
                continue
            for name, attribute in vars(klass).items():
                members.setdefault(name, (klass, attribute))

        class_is_final = bool(getattr(target_type, "__final__", False))
        methods: list[OverridableMethod] = []
        overloads: dict[str, OverloadSet] = {}
        non_overridable: dict[str, str] = {}

        for name, (owner, attribute) in members.items():
            reason = self._non_overridable_reason(name, attribute)
            if reason is None and class_is_final and self._is_method(attribute):
                reason = "class is marked final"
            if reason is not None:
                non_overridable[name] = reason
                continue

            if isinstance(attribute, singledispatchmethod):
                overload_set = self._overload_set(name=name, owner=owner, attribute=attribute)
                overloads[name] = overload_set
                methods.extend(overload_set.methods)
            elif inspect.isfunction(attribute):
                methods.append(
                    OverridableMethod(
                        signature=MethodSignature(name, self.param_types(attribute)),
                        function=attribute,
                        owner=owner,
                    ),
                )

        return TypeMethods(
            target_type=target_type,
            methods=tuple(methods),
            overloads=MappingProxyType(overloads),
            non_overridable=MappingProxyType(non_overridable),
        )

    def param_types(
        self,
        function: Callable[..., Any],
        *,
        skip_first_parameter: bool = True,
    ) -> ParamTypes:
        """Resolve the parameter annotations of ``function``; missing ones read as ``Any``."""
        parameters = tuple(inspect.signature(function).parameters.values())
        if skip_first_parameter:
            parameters = parameters[1:]
        annotations = self._resolved_type_hints(function)

        param_types: list[Any] = []
        for parameter in parameters:
            param_types.append(
                self._parameter_annotation(
                    parameter=parameter,
                    annotations=annotations,
                    fallback=Any,
                ),
            )
        return tuple(param_types)

    def _overload_set(
        self,
        *,
        name: str,
        owner: type[Any],
        attribute: singledispatchmethod[Any],
    ) -> OverloadSet:
        dispatcher = attribute.dispatcher
        registered_types: dict[Callable[..., Any], list[Any]] = {}
        for registered_type, implementation in dispatcher.registry.items():
            registered_types.setdefault(implementation, []).append(registered_type)

        by_function: dict[Callable[..., Any], OverridableMethod] = {}
        methods: list[OverridableMethod] = []
        for implementation, dispatch_types in registered_types.items():
            # Registry keys are unique per implementation; annotations can repeat.
            param_types = self.param_types(implementation)
            signature = MethodSignature(name, (dispatch_types[0], *param_types[1:]))
            method = OverridableMethod(signature=signature, function=implementation, owner=owner)
            by_function[implementation] = method
            methods.append(method)

        return OverloadSet(
            name=name,
            dispatcher=dispatcher,
            methods=tuple(methods),
            by_function=MappingProxyType(by_function),
        )

    def _non_overridable_reason(self, name: str, attribute: Any) -> str | None:
        if name in _CONSTRUCTOR_NAMES:
            return "constructors are not methods"
        if isinstance(attribute, staticmethod):
            return "static methods are not bound to an instance"
        if isinstance(attribute, classmethod):
            return "class methods are not bound to an instance"
        if isinstance(attribute, property):
            return "properties are not methods"
        if isinstance(attribute, singledispatchmethod):
            if getattr(attribute.func, "__final__", False):
                return "method is marked final"
            return None
        if inspect.isfunction(attribute) and getattr(attribute, "__final__", False):
            return "method is marked final"
        return None

    def _is_method(self, attribute: Any) -> bool:
        return inspect.isfunction(attribute) or isinstance(attribute, singledispatchmethod)

    def _parameter_annotation(
        self,
        *,
        parameter: Parameter,
        annotations: dict[str, Any],
        fallback: Any,
    ) -> Any:
        annotation = annotations.get(parameter.name, _MISSING_ANNOTATION)
        if annotation is not _MISSING_ANNOTATION:
            return annotation

        raw_annotation = parameter.annotation
        if raw_annotation is not Parameter.empty and not isinstance(raw_annotation, str):
            return raw_annotation
        return fallback

    def _resolved_type_hints(self, function: Callable[..., Any]) -> dict[str, Any]:
        try:
            return get_type_hints(function)
        except (AttributeError, NameError, TypeError):
            return {}
