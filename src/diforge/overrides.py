from __future__ import annotations

from collections.abc import Iterable

from diforge.definitions import MethodOverride, MethodOverrides, ParamTypes
from diforge.exceptions import AmbiguousOverrideError
from diforge.methods import MethodSignature


class OverrideRegistry:
    """Looks up the override that applies to a call site of one definition.

    Exact-signature overrides (``param_types`` given) win over name-only ones.
    """

    def __init__(self, overrides: MethodOverrides) -> None:
        self._overrides = overrides
        self._exact: dict[MethodSignature, list[MethodOverride]] = {}
        self._by_name: dict[str, list[MethodOverride]] = {}
        for override in overrides:
            if override.param_types is None:
                self._by_name.setdefault(override.method_name, []).append(override)
            else:
                signature = MethodSignature(override.method_name, override.param_types)
                self._exact.setdefault(signature, []).append(override)

    def resolve_override(
        self,
        method_name: str,
        param_types: ParamTypes,
        *,
        overload_count: int = 1,
    ) -> MethodOverride | None:
        """Get the override for a method, or None if calls pass through.

        Args:
            method_name: Name of the method being dispatched.
            param_types: Parameter types of the method, ``self`` excluded.
            overload_count: Number of methods sharing ``method_name`` on the type.

        """
        exact = self._exact.get(MethodSignature(method_name, tuple(param_types)), [])
        if len(exact) > 1:
            raise AmbiguousOverrideError(method_name, exact)
        if exact:
            return exact[0]

        name_only = self._by_name.get(method_name, [])
        if len(name_only) > 1:
            raise AmbiguousOverrideError(method_name, name_only)
        if name_only and overload_count > 1:
            raise AmbiguousOverrideError(method_name, name_only)
        if name_only:
            return name_only[0]
        return None

    def unmatched(self, signatures: Iterable[MethodSignature]) -> tuple[MethodOverride, ...]:
        """Get the overrides that apply to none of ``signatures``."""
        signatures = tuple(signatures)
        return tuple(
            override
            for override in self._overrides
            if not any(
                override.matches(signature.name, signature.param_types)
                for signature in signatures
            )
        )
