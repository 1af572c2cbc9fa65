from rewire._internal.reflection import BUILTIN, ParameterDescriptor
from rewire.container import Container
from rewire.container_context import ContainerContext, container_context
from rewire.exceptions import (
    RewireBindingError,
    RewireCircularDependencyError,
    RewireContainerNotSetError,
    RewireEntryNotFoundError,
    RewireError,
    RewireInvalidCallableError,
    RewireLogicError,
    RewireMissingParameterTypeError,
    RewireNotInstantiableError,
    RewireResolutionError,
    RewireUnresolvableParameterError,
)
from rewire.lock_mode import LockMode
from rewire.markers import Interface

__all__ = [
    "BUILTIN",
    "Container",
    "ContainerContext",
    "Interface",
    "LockMode",
    "ParameterDescriptor",
    "RewireBindingError",
    "RewireCircularDependencyError",
    "RewireContainerNotSetError",
    "RewireEntryNotFoundError",
    "RewireError",
    "RewireInvalidCallableError",
    "RewireLogicError",
    "RewireMissingParameterTypeError",
    "RewireNotInstantiableError",
    "RewireResolutionError",
    "RewireUnresolvableParameterError",
    "container_context",
]
