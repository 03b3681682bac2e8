from diforge.container import Container
from diforge.container_interface import ComponentResolver, Factory, MethodReplacer
from diforge.definitions import (
    ConstructorSelector,
    Definition,
    LookupOverride,
    MethodOverrides,
    ReplaceOverride,
    Scope,
)
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
from diforge.lock_mode import LockMode
from diforge.methods import MethodSignature, OverridableMethod
from diforge.strategy import SimpleInstantiationStrategy, SubclassingInstantiationStrategy

__all__ = [
    "AmbiguousOverrideError",
    "ComponentResolver",
    "ComponentTypeMismatchError",
    "ConstructorArgumentsNotAllowedError",
    "ConstructorNotFoundError",
    "ConstructorSelector",
    "Container",
    "DIForgeConfigurationError",
    "DIForgeError",
    "Definition",
    "DuplicateComponentError",
    "Factory",
    "InvalidDefinitionError",
    "InvalidReplacerError",
    "LockMode",
    "LookupOverride",
    "MethodInjectionNotSupportedError",
    "MethodOverrides",
    "MethodReplacer",
    "MethodSignature",
    "NoSuchComponentError",
    "NoUniqueComponentError",
    "NonOverridableMethodError",
    "NotAFactoryError",
    "OverridableMethod",
    "OverrideTargetNotFoundError",
    "ReplaceOverride",
    "Scope",
    "SimpleInstantiationStrategy",
    "SubclassSynthesisError",
    "SubclassingInstantiationStrategy",
]
