from __future__ import annotations

from typing import Any


class RewireError(Exception):
    """Represent a base class for all rewire-specific failures.

    Catch this type when you want to handle any container error path without
    matching each concrete exception class individually.
    """


class RewireBindingError(RewireError):
    """Signal an invalid binding registration.

    Raised by ``Container.bind`` (and ``singleton``/``bind_if``) when no
    concrete is given and the abstract is not a class, so there is nothing the
    container could construct for it.

    Typical fix is passing an explicit concrete class or factory.
    """


class RewireLogicError(RewireError):
    """Signal an alias graph that can never canonicalize.

    Raised by ``Container.alias`` when an identifier would be aliased to itself,
    either directly or through a chain of existing aliases.
    """


class RewireResolutionError(RewireError):
    """Represent a failure while building an object graph.

    Instances carry the identifier that was being resolved and a snapshot of
    the build stack at the moment of failure, outermost concrete first.
    """

    def __init__(
        self,
        message: str,
        *,
        identifier: Any = None,
        build_stack: tuple[Any, ...] = (),
    ) -> None:
        super().__init__(message)
        self.identifier = identifier
        self.build_stack = build_stack


class RewireNotInstantiableError(RewireResolutionError):
    """Signal that a concrete cannot be constructed.

    Raised by ``Container.make``/``Container.build`` when the resolved concrete
    is a string name, an ``Interface`` token without a default, an abstract
    base class or a protocol, and no binding points it at something buildable.

    A constructor parameter typed with such a class falls back to its default
    value when it has one.
    """


class RewireUnresolvableParameterError(RewireResolutionError):
    """Signal a primitive parameter that has no value source.

    Raised when a builtin-typed (or unannotated) constructor parameter has no
    parameter override, no contextual binding keyed by its name and no default.

    Typical fixes include ``container.when(Service).needs("name").give(value)``
    or passing the value in ``make(Service, {"name": value})``.
    """

    def __init__(
        self,
        message: str,
        *,
        parameter: str,
        declaring: Any,
        identifier: Any = None,
        build_stack: tuple[Any, ...] = (),
    ) -> None:
        super().__init__(message, identifier=identifier, build_stack=build_stack)
        self.parameter = parameter
        self.declaring = declaring


class RewireMissingParameterTypeError(RewireResolutionError):
    """Signal a class parameter whose declared type cannot be derived.

    Common trigger is a string forward reference that ``typing.get_type_hints``
    cannot evaluate in the declaring module.
    """


class RewireCircularDependencyError(RewireResolutionError):
    """Signal a concrete that requires itself while it is being built.

    The ``build_stack`` attribute lists the chain of concretes that led back to
    the concrete being built.
    """


class RewireEntryNotFoundError(RewireError):
    """Signal that ``Container.get`` was asked for an unknown identifier.

    Raised only when the identifier was never bound, aliased or registered as
    an instance and resolving it failed. When the identifier is known the
    underlying resolution error propagates unchanged instead.
    """

    def __init__(self, identifier: Any) -> None:
        super().__init__(f"No entry was found for identifier [{identifier!r}].")
        self.identifier = identifier


class RewireInvalidCallableError(RewireError):
    """Signal a ``Container.call`` target that cannot be invoked.

    Raised for ``"Identifier@method"`` references without a method name and for
    ``(target, "method")`` pairs whose target has no such attribute. Also raised by
    ``Container.bind_method`` for a ``(target, "method")`` pair whose target is
    a string identifier.
    """


class RewireContainerNotSetError(RewireError):
    """Signal use of ``container_context`` before a container is bound.

    Typical fix is calling ``container_context.set_current(container)`` during
    application startup before resolution calls.
    """
