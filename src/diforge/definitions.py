from __future__ import annotations

import inspect
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum, auto
from types import MappingProxyType
from typing import Any, TypeAlias

from diforge.exceptions import InvalidDefinitionError

ParamTypes: TypeAlias = tuple[Any, ...]
"""Ordered parameter annotations of a method or constructor, ``self`` excluded."""


class Scope(Enum):
    """Defines how many instances of a component the container hands out."""

    SHARED = auto()
    """A single instance is created and shared for the lifetime of the container."""

    FRESH = auto()
    """A new instance is created every time the component is requested."""


@dataclass(frozen=True, slots=True)
class LookupOverride:
    """Redirect a method to return a component looked up at call time."""

    method_name: str
    target_component_name: str
    param_types: ParamTypes | None = None
    """Exact parameter types of the overridden method, or ``None`` to match by name."""

    def __post_init__(self) -> None:
        if self.param_types is not None:
            object.__setattr__(self, "param_types", tuple(self.param_types))

    def matches(self, method_name: str, param_types: ParamTypes) -> bool:
        """Return True if this override applies to the given signature."""
        if method_name != self.method_name:
            return False
        return self.param_types is None or self.param_types == param_types


@dataclass(frozen=True, slots=True)
class ReplaceOverride:
    """Redirect a method to the ``reimplement`` operation of a replacer component."""

    method_name: str
    replacer_component_name: str
    param_types: ParamTypes | None = None
    """Exact parameter types of the overridden method, or ``None`` to match by name."""

    def __post_init__(self) -> None:
        if self.param_types is not None:
            object.__setattr__(self, "param_types", tuple(self.param_types))

    def matches(self, method_name: str, param_types: ParamTypes) -> bool:
        """Return True if this override applies to the given signature."""
        if method_name != self.method_name:
            return False
        return self.param_types is None or self.param_types == param_types


MethodOverride: TypeAlias = LookupOverride | ReplaceOverride


class MethodOverrides:
    """Ordered set of method overrides.

    Iteration follows insertion order, while equality and hashing ignore it:
    two override sets with the same members are one cache key.
    """

    __slots__ = ("_items", "_members")

    def __init__(self, overrides: Iterable[MethodOverride] = ()) -> None:
        items: dict[MethodOverride, None] = {}
        for override in overrides:
            if not isinstance(override, (LookupOverride, ReplaceOverride)):
                msg = f"Expected LookupOverride or ReplaceOverride, got {override!r}."
                raise InvalidDefinitionError(msg)
            items[override] = None
        self._items: tuple[MethodOverride, ...] = tuple(items)
        self._members = frozenset(self._items)

    def __iter__(self) -> Iterator[MethodOverride]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __contains__(self, override: object) -> bool:
        return override in self._members

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MethodOverrides):
            return NotImplemented
        return self._members == other._members

    def __hash__(self) -> int:
        return hash(self._members)

    def __repr__(self) -> str:
        return f"MethodOverrides({list(self._items)!r})"

    def by_name(self, method_name: str) -> tuple[MethodOverride, ...]:
        """Get all overrides declared for a method name, in insertion order."""
        return tuple(override for override in self._items if override.method_name == method_name)


@dataclass(frozen=True, slots=True)
class ConstructorSelector:
    """Selects the constructor call used to build an instance.

    ``param_types`` pins the expected ``__init__`` signature; ``args`` and
    ``kwargs`` are the values passed to it.
    """

    param_types: ParamTypes | None = None
    args: tuple[Any, ...] = ()
    kwargs: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.param_types is not None:
            object.__setattr__(self, "param_types", tuple(self.param_types))
        object.__setattr__(self, "args", tuple(self.args))
        object.__setattr__(self, "kwargs", MappingProxyType(dict(self.kwargs)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConstructorSelector):
            return NotImplemented
        return (
            self.param_types == other.param_types
            and self.args == other.args
            and dict(self.kwargs) == dict(other.kwargs)
        )

    def __hash__(self) -> int:
        return hash((self.param_types, self.args, tuple(sorted(self.kwargs.items()))))


DEFAULT_CONSTRUCTOR_SELECTOR = ConstructorSelector()


@dataclass(frozen=True, slots=True)
class Definition:
    """A declarative description of one component.

    Definitions are built by a definition source and never mutated by the
    instantiation engine. Equality is structural.
    """

    target_type: type[Any]
    scope: Scope = Scope.SHARED
    constructor_selector: ConstructorSelector | None = None
    overrides: MethodOverrides = field(default_factory=MethodOverrides)

    def __post_init__(self) -> None:
        if not inspect.isclass(self.target_type):
            msg = f"Definition target must be a class, got {self.target_type!r}."
            raise InvalidDefinitionError(msg)
        if not isinstance(self.overrides, MethodOverrides):
            object.__setattr__(self, "overrides", MethodOverrides(self.overrides))

    @property
    def has_overrides(self) -> bool:
        """Check whether instantiating this definition requires method injection."""
        return bool(self.overrides)

    @property
    def is_shared(self) -> bool:
        return self.scope is Scope.SHARED
