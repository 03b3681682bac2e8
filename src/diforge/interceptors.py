from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from diforge.container_interface import ComponentResolver, MethodReplacer
from diforge.definitions import LookupOverride, ReplaceOverride
from diforge.exceptions import InvalidReplacerError
from diforge.methods import OverridableMethod


@dataclass(frozen=True, slots=True)
class MethodCall:
    """One invocation of a redirected method on a synthesized instance."""

    receiver: Any
    method: OverridableMethod
    args: tuple[Any, ...]
    kwargs: Mapping[str, Any]
    resolver: ComponentResolver


class LookupOverrideInterceptor:
    """Returns a component looked up in the owning container.

    The lookup happens on every call, so a fresh-scoped target yields a new
    object per invocation. Call arguments are ignored.
    """

    __slots__ = ()

    def invoke(self, call: MethodCall, override: LookupOverride) -> Any:
        return call.resolver.resolve(override.target_component_name)


class ReplaceOverrideInterceptor:
    """Delegates the call to a ``MethodReplacer`` component.

    The replacer is resolved again on every call and never cached on the
    instance, so a fresh-scoped replacer is honored too.
    """

    __slots__ = ()

    def invoke(self, call: MethodCall, override: ReplaceOverride) -> Any:
        replacer = call.resolver.resolve(override.replacer_component_name)
        if not isinstance(replacer, MethodReplacer):
            msg = (
                f"Component '{override.replacer_component_name}' used to replace "
                f"'{call.method.signature}' has no reimplement() method, "
                f"got {type(replacer).__qualname__}."
            )
            raise InvalidReplacerError(msg)
        return replacer.reimplement(call.receiver, call.method, call.args, call.kwargs)


LOOKUP_INTERCEPTOR = LookupOverrideInterceptor()
REPLACE_INTERCEPTOR = ReplaceOverrideInterceptor()
