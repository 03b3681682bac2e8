from __future__ import annotations

import itertools
import keyword
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from diforge.defaults import (
    DISPATCH_TABLE_ATTRIBUTE,
    RESOLVER_ATTRIBUTE,
    SYNTHESIZED_CLASS_SUFFIX,
)
from diforge.dispatch import DispatchTable
from diforge.exceptions import SubclassSynthesisError

_BASE_BINDING = "_target_type"
_CLASS_COUNTER = itertools.count(1)


@dataclass(frozen=True, slots=True)
class RedirectedMethodPlan:
    """A method name that gets a generated body on the subclass."""

    method_name: str
    binding_name: str
    """Module global holding the ``OverridableMethod`` or ``OverloadSet``."""
    is_overloaded: bool
    signatures: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class SubclassGenerationPlan:
    """Deterministic plan consumed by the renderer."""

    class_name: str
    target_type: type[Any]
    base_binding: str
    table_attr: str
    resolver_attr: str
    methods: tuple[RedirectedMethodPlan, ...]
    bindings: Mapping[str, Any]
    """Globals the rendered module expects before it is executed."""
    lookup_count: int
    replace_count: int
    passthrough_count: int


class SubclassPlanner:
    """Builds metadata for rendering one synthesized subclass."""

    def __init__(self, *, dispatch_table: DispatchTable) -> None:
        self._table = dispatch_table

    def build(self) -> SubclassGenerationPlan:
        target_type = self._table.target_type
        type_methods = self._table.type_methods
        bindings: dict[str, Any] = {_BASE_BINDING: target_type}
        methods: list[RedirectedMethodPlan] = []

        for index, name in enumerate(self._table.redirected_names()):
            self._validate_method_name(name)
            overload_set = type_methods.overloads.get(name)
            if overload_set is not None:
                binding_name = f"_overloads_{index}"
                bindings[binding_name] = overload_set
                signatures = tuple(str(method.signature) for method in overload_set.methods)
            else:
                (method,) = type_methods.by_name(name)
                binding_name = f"_method_{index}"
                bindings[binding_name] = method
                signatures = (str(method.signature),)
            methods.append(
                RedirectedMethodPlan(
                    method_name=name,
                    binding_name=binding_name,
                    is_overloaded=overload_set is not None,
                    signatures=signatures,
                ),
            )

        lookup_count, replace_count = self._table.redirect_counts()
        return SubclassGenerationPlan(
            class_name=(
                f"{target_type.__name__}__{SYNTHESIZED_CLASS_SUFFIX}_{next(_CLASS_COUNTER)}"
            ),
            target_type=target_type,
            base_binding=_BASE_BINDING,
            table_attr=DISPATCH_TABLE_ATTRIBUTE,
            resolver_attr=RESOLVER_ATTRIBUTE,
            methods=tuple(methods),
            bindings=MappingProxyType(bindings),
            lookup_count=lookup_count,
            replace_count=replace_count,
            passthrough_count=len(self._table) - lookup_count - replace_count,
        )

    def _validate_method_name(self, name: str) -> None:
        if not name.isidentifier() or keyword.iskeyword(name):
            msg = (
                f"Cannot generate an override for '{self._table.target_type.__qualname__}.{name}': "
                "the method name is not a valid identifier."
            )
            raise SubclassSynthesisError(msg)
