from __future__ import annotations

import pytest

import diforge
from diforge.definitions import LookupOverride
from diforge.exceptions import (
    AmbiguousOverrideError,
    ComponentTypeMismatchError,
    ConstructorArgumentsNotAllowedError,
    ConstructorNotFoundError,
    DIForgeConfigurationError,
    DIForgeError,
    DuplicateComponentError,
    InvalidDefinitionError,
    InvalidReplacerError,
    MethodInjectionNotSupportedError,
    NonOverridableMethodError,
    NoSuchComponentError,
    NoUniqueComponentError,
    NotAFactoryError,
    OverrideTargetNotFoundError,
    SubclassSynthesisError,
)


@pytest.mark.parametrize(
    "error_type",
    [
        InvalidDefinitionError,
        AmbiguousOverrideError,
        NonOverridableMethodError,
        OverrideTargetNotFoundError,
        ConstructorNotFoundError,
        SubclassSynthesisError,
        MethodInjectionNotSupportedError,
    ],
)
def test_configuration_errors_share_a_base(error_type: type[Exception]) -> None:
    assert issubclass(error_type, DIForgeConfigurationError)
    assert issubclass(error_type, DIForgeError)


@pytest.mark.parametrize(
    "error_type",
    [
        InvalidReplacerError,
        NoSuchComponentError,
        NoUniqueComponentError,
        ConstructorArgumentsNotAllowedError,
        DuplicateComponentError,
        ComponentTypeMismatchError,
        NotAFactoryError,
    ],
)
def test_resolution_errors_are_not_configuration_errors(error_type: type[Exception]) -> None:
    assert issubclass(error_type, DIForgeError)
    assert not issubclass(error_type, DIForgeConfigurationError)


def test_error_messages_name_the_offender() -> None:
    override = LookupOverride("missing", "tiger")

    assert str(NonOverridableMethodError(int, "bit_length", "method is marked final")) == (
        "Method 'int.bit_length' cannot be overridden: method is marked final."
    )
    assert "missing" in str(OverrideTargetNotFoundError(int, override))
    assert str(NoSuchComponentError("tiger")) == "No component named 'tiger' is registered."
    assert "'tiger'" in str(NotAFactoryError("tiger"))


def test_public_api_exports_exceptions() -> None:
    for name in ("DIForgeError", "DIForgeConfigurationError", "AmbiguousOverrideError"):
        assert name in diforge.__all__
        assert getattr(diforge, name) is getattr(diforge.exceptions, name)


def test_lookup_by_type_errors_describe_the_type() -> None:
    missing = NoSuchComponentError(required_type=int)
    ambiguous = NoUniqueComponentError(int, ["first", "second"])

    assert str(missing) == "No component of type 'int' is registered."
    assert str(ambiguous) == "Expected a single component of type 'int', found 2: first, second."
    assert ambiguous.required_type is int
    assert ambiguous.name is None
