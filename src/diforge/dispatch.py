from __future__ import annotations

import logging
import threading
from collections.abc import Iterator, Mapping
from contextlib import AbstractContextManager, nullcontext
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, ClassVar, TypeAlias

from diforge.defaults import DEFAULT_LOCK_MODE
from diforge.definitions import LookupOverride, MethodOverride, MethodOverrides, ReplaceOverride
from diforge.exceptions import NonOverridableMethodError, OverrideTargetNotFoundError
from diforge.interceptors import LOOKUP_INTERCEPTOR, REPLACE_INTERCEPTOR, MethodCall
from diforge.lock_mode import LockMode
from diforge.methods import MethodIntrospector, MethodSignature, TypeMethods
from diforge.overrides import OverrideRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Passthrough:
    """Calls keep the behavior of the original type."""

    is_passthrough: ClassVar[bool] = True


@dataclass(frozen=True, slots=True)
class LookupRedirect:
    """Calls return the component named by ``override``."""

    override: LookupOverride
    is_passthrough: ClassVar[bool] = False

    def invoke(self, call: MethodCall) -> Any:
        return LOOKUP_INTERCEPTOR.invoke(call, self.override)


@dataclass(frozen=True, slots=True)
class ReplaceRedirect:
    """Calls are delegated to the replacer named by ``override``."""

    override: ReplaceOverride
    is_passthrough: ClassVar[bool] = False

    def invoke(self, call: MethodCall) -> Any:
        return REPLACE_INTERCEPTOR.invoke(call, self.override)


PASSTHROUGH = Passthrough()

DispatchEntry: TypeAlias = Passthrough | LookupRedirect | ReplaceRedirect


@dataclass(frozen=True, slots=True)
class DispatchTable:
    """Frozen mapping from every overridable method signature to its behavior.

    Tables compare equal when they cover the same type with pointwise equal
    entries.
    """

    target_type: type[Any]
    entries: Mapping[MethodSignature, DispatchEntry]
    type_methods: TypeMethods = field(compare=False, repr=False)

    def __getitem__(self, signature: MethodSignature) -> DispatchEntry:
        return self.entries[signature]

    def __iter__(self) -> Iterator[MethodSignature]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def redirected_names(self) -> tuple[str, ...]:
        """Get method names with at least one redirected signature, in table order."""
        names: dict[str, None] = {}
        for signature, entry in self.entries.items():
            if not entry.is_passthrough:
                names[signature.name] = None
        return tuple(names)

    def redirect_counts(self) -> tuple[int, int]:
        """Count lookup and replace redirects."""
        lookup_count = sum(isinstance(entry, LookupRedirect) for entry in self.entries.values())
        replace_count = sum(isinstance(entry, ReplaceRedirect) for entry in self.entries.values())
        return lookup_count, replace_count


class DispatchResolver:
    """Builds and caches dispatch tables per ``(target_type, overrides)`` pair."""

    def __init__(
        self,
        *,
        lock_mode: LockMode = DEFAULT_LOCK_MODE,
        introspector: MethodIntrospector | None = None,
    ) -> None:
        self._introspector = introspector or MethodIntrospector()
        self._tables: dict[tuple[type[Any], MethodOverrides], DispatchTable] = {}
        self._lock: threading.Lock | None = (
            threading.Lock() if lock_mode is LockMode.THREAD else None
        )

    def build_dispatch_table(
        self,
        target_type: type[Any],
        overrides: MethodOverrides,
    ) -> DispatchTable:
        """Get the dispatch table for a type and override set, building it once.

        Args:
            target_type: Class whose methods are dispatched.
            overrides: Overrides declared by the definition.

        Raises:
            AmbiguousOverrideError: More than one override applies to a method.
            NonOverridableMethodError: An override targets a member that cannot be intercepted.
            OverrideTargetNotFoundError: An override matches no method of ``target_type``.

        """
        key = (target_type, overrides)
        table = self._tables.get(key)
        if table is not None:
            return table

        with self._guard():
            table = self._tables.get(key)
            if table is None:
                table = self._build(target_type, overrides)
                self._tables[key] = table
        return table

    def clear_cache(self) -> None:
        with self._guard():
            self._tables.clear()

    def _build(self, target_type: type[Any], overrides: MethodOverrides) -> DispatchTable:
        type_methods = self._introspector.inspect_type(target_type)
        registry = OverrideRegistry(overrides)

        for override in overrides:
            reason = type_methods.non_overridable.get(override.method_name)
            if reason is not None:
                raise NonOverridableMethodError(target_type, override.method_name, reason)

        unmatched = registry.unmatched(method.signature for method in type_methods.methods)
        if unmatched:
            raise OverrideTargetNotFoundError(target_type, unmatched[0])

        entries: dict[MethodSignature, DispatchEntry] = {}
        for method in type_methods.methods:
            override = registry.resolve_override(
                method.name,
                method.signature.param_types,
                overload_count=len(type_methods.by_name(method.name)),
            )
            entries[method.signature] = self._entry(override)

        table = DispatchTable(
            target_type=target_type,
            entries=MappingProxyType(entries),
            type_methods=type_methods,
        )
        logger.debug(
            "Dispatch table built for %s: method_count=%d redirected=%s",
            target_type.__qualname__,
            len(entries),
            table.redirected_names(),
        )
        return table

    def _entry(self, override: MethodOverride | None) -> DispatchEntry:
        if override is None:
            return PASSTHROUGH
        if isinstance(override, LookupOverride):
            return LookupRedirect(override)
        return ReplaceRedirect(override)

    def _guard(self) -> AbstractContextManager[Any]:
        return self._lock if self._lock is not None else nullcontext()
