from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class DIForgeError(Exception):
    """Represent a base class for all diforge-specific failures.

    Catch this type when you want to handle any diforge error path without
    matching each concrete exception class individually. Failures raised by a
    redirect target or a replacer are never wrapped in this type.
    """


class DIForgeConfigurationError(DIForgeError):
    """Signal a definition that cannot be turned into an instance.

    Configuration errors are detected eagerly, while the dispatch table is
    built or when the instantiation strategy is entered, and are fatal to that
    instantiation attempt.
    """


class InvalidDefinitionError(DIForgeConfigurationError):
    """Signal a malformed definition, for example a non-class target type."""


class AmbiguousOverrideError(DIForgeConfigurationError):
    """Signal that more than one override could apply to a method.

    Raised while building a dispatch table when two overrides match the same
    method, or when a name-only override targets a method with several
    overloads.

    Typical fix is passing explicit ``param_types`` on the override.
    """

    def __init__(self, method_name: str, overrides: Sequence[Any]) -> None:
        self.method_name = method_name
        self.overrides = tuple(overrides)
        conflicting = ", ".join(repr(override) for override in self.overrides)
        super().__init__(
            f"Ambiguous override for method '{method_name}': {conflicting}. "
            "Pass explicit param_types to select a single method.",
        )


class NonOverridableMethodError(DIForgeConfigurationError):
    """Signal an override that targets a member which cannot be intercepted.

    Constructors, static methods, class methods, properties and anything marked
    with ``typing.final`` cannot be redirected.
    """

    def __init__(self, target_type: type, method_name: str, reason: str) -> None:
        self.target_type = target_type
        self.method_name = method_name
        self.reason = reason
        super().__init__(
            f"Method '{target_type.__qualname__}.{method_name}' cannot be overridden: {reason}.",
        )


class OverrideTargetNotFoundError(DIForgeConfigurationError):
    """Signal an override that matches no method of the target type."""

    def __init__(self, target_type: type, override: Any) -> None:
        self.target_type = target_type
        self.override = override
        super().__init__(
            f"No method of '{target_type.__qualname__}' matches override {override!r}.",
        )


class ConstructorNotFoundError(DIForgeConfigurationError):
    """Signal that no constructor accepts the selected signature or arguments.

    Typical fixes include passing arguments that bind to ``__init__`` or
    correcting ``ConstructorSelector.param_types``.
    """


class SubclassSynthesisError(DIForgeConfigurationError):
    """Signal that a subclass of the target type could not be generated."""


class MethodInjectionNotSupportedError(DIForgeConfigurationError):
    """Signal a definition with overrides handed to a strategy without synthesis."""


class InvalidReplacerError(DIForgeError):
    """Signal that a replacer component does not implement ``reimplement``."""


class NoSuchComponentError(DIForgeError):
    """Signal that no component matches a requested name or type.

    ``name`` is set for lookups by name, ``required_type`` for lookups by type.
    """

    def __init__(
        self,
        name: str | None = None,
        *,
        required_type: type | None = None,
        message: str | None = None,
    ) -> None:
        self.name = name
        self.required_type = required_type
        if message is None:
            if name is None and required_type is not None:
                message = f"No component of type '{required_type.__qualname__}' is registered."
            else:
                message = f"No component named '{name}' is registered."
        super().__init__(message)


class NoUniqueComponentError(NoSuchComponentError):
    """Signal that a lookup by type matched more than one component.

    Typical fix is resolving by name instead.
    """

    def __init__(self, required_type: type, candidates: Sequence[str]) -> None:
        self.candidates = tuple(candidates)
        super().__init__(
            required_type=required_type,
            message=(
                f"Expected a single component of type '{required_type.__qualname__}', "
                f"found {len(self.candidates)}: {', '.join(self.candidates)}."
            ),
        )


class ConstructorArgumentsNotAllowedError(DIForgeError):
    """Signal explicit constructor arguments for a component that is not created per request.

    Arguments can only be passed when resolving FRESH definitions; shared
    components and registered instances are created at most once.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Component '{name}' is not fresh-scoped; constructor arguments are only "
            "accepted when a new instance is created for the request.",
        )


class DuplicateComponentError(DIForgeError):
    """Signal re-registration of a name when definition overriding is disabled."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Component '{name}' is already registered and definition overriding is disabled.",
        )


class ComponentTypeMismatchError(DIForgeError):
    """Signal that a resolved component is not an instance of the required type."""

    def __init__(self, name: str, required_type: type, actual_type: type) -> None:
        self.name = name
        self.required_type = required_type
        self.actual_type = actual_type
        super().__init__(
            f"Component '{name}' is of type '{actual_type.__qualname__}', "
            f"expected '{required_type.__qualname__}'.",
        )


class NotAFactoryError(DIForgeError):
    """Signal a producer lookup for a component that is not a ``Factory``."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Component '{name}' is not a factory and has no producer.")
