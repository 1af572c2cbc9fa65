from __future__ import annotations

import logging
from collections.abc import Generator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from rewire._internal.contextual import MISSING
from rewire._internal.type_checks import call_with_supported_args, format_identifier, is_factory
from rewire.exceptions import (
    RewireCircularDependencyError,
    RewireMissingParameterTypeError,
    RewireNotInstantiableError,
    RewireUnresolvableParameterError,
)
from rewire.markers import Interface

if TYPE_CHECKING:
    from rewire._internal.aliases import AliasRegistry
    from rewire._internal.bindings import BindingRegistry
    from rewire._internal.contextual import ContextualBindingStore
    from rewire._internal.extenders import ExtensionRegistry
    from rewire._internal.lifecycle import LifecycleHooks
    from rewire._internal.reflection import ParameterDescriptor, Reflection, Reflector
    from rewire.container import Container

logger = logging.getLogger(__name__)

_NO_OVERRIDES: Mapping[str, Any] = {}


@dataclass(frozen=True, slots=True)
class _Resolved:
    value: Any


@dataclass(frozen=True, slots=True)
class _NotInstantiable:
    error: RewireNotInstantiableError


class BuildPipeline:
    """Resolve identifiers into instances by recursively building their dependencies.

    The pipeline owns two stacks. The build stack holds the concretes whose
    constructors are currently being satisfied; its top is the anchor for
    contextual bindings. The override stack holds one parameter mapping per
    ``resolve`` call; only the innermost mapping applies. Both stacks are
    restored when a call unwinds, whether it returns or raises.
    """

    def __init__(
        self,
        container: Container,
        *,
        aliases: AliasRegistry,
        bindings: BindingRegistry,
        contextual: ContextualBindingStore,
        extenders: ExtensionRegistry,
        hooks: LifecycleHooks,
        reflector: Reflector,
    ) -> None:
        self._container = container
        self._aliases = aliases
        self._bindings = bindings
        self._contextual = contextual
        self._extenders = extenders
        self._hooks = hooks
        self._reflector = reflector
        self._build_stack: list[Any] = []
        self._with: list[Mapping[str, Any]] = []

    @property
    def build_stack(self) -> tuple[Any, ...]:
        return tuple(self._build_stack)

    @property
    def override_depth(self) -> int:
        return len(self._with)

    def resolve(self, abstract: Any, parameters: Mapping[str, Any] | None = None) -> Any:
        """Resolve ``abstract``, honoring shared instances, bindings and contextual overrides.

        Args:
            abstract: Identifier to resolve; aliases are followed first.
            parameters: Constructor arguments by parameter name. Non-empty
                parameters force a fresh build that bypasses the shared cache.

        Returns:
            The resolved instance after extenders and resolving callbacks ran.

        """
        parameters = dict(parameters) if parameters else {}
        abstract = self._aliases.canonicalize(abstract)

        contextual = self.contextual_concrete(abstract)
        needs_contextual_build = bool(parameters) or contextual is not MISSING

        if self._bindings.has_instance(abstract) and not needs_contextual_build:
            return self._bindings.get_instance(abstract)

        with self.overrides(parameters):
            concrete = contextual if contextual is not MISSING else self._concrete_for(abstract)

            if self._is_buildable(concrete, abstract):
                instance = self.build(concrete)
            else:
                instance = self._container.make(concrete, parameters)

            instance = self._extenders.apply(abstract, instance, self._container)

            if self._bindings.is_shared(abstract) and not needs_contextual_build:
                self._bindings.set_instance(abstract, instance)

            self._hooks.fire_resolving(abstract, instance, self._container)
            self._bindings.mark_resolved(abstract)

        return instance

    def build(self, concrete: Any) -> Any:
        """Instantiate ``concrete`` without consulting bindings for it.

        Factories are called with ``(container, parameters)`` and their result
        is returned as is. Classes are reflected and every constructor
        parameter is resolved before the class is instantiated.
        """
        if is_factory(concrete):
            return call_with_supported_args(concrete, self._container, self.current_overrides())

        reflection = self._reflector.reflect(concrete)
        if not reflection.is_instantiable():
            raise self._not_instantiable(concrete)

        if concrete in self._build_stack:
            trail = " -> ".join(format_identifier(item) for item in (*self._build_stack, concrete))
            msg = f"Circular dependency detected while building [{format_identifier(concrete)}]: {trail}."
            raise RewireCircularDependencyError(
                msg,
                identifier=concrete,
                build_stack=self.build_stack,
            )

        logger.debug("Building %s", reflection.name)
        with self._building(concrete):
            args, kwargs = self.resolve_dependencies(reflection)

        return reflection.invoke(args, kwargs)

    def resolve_dependencies(self, reflection: Reflection) -> tuple[list[Any], dict[str, Any]]:
        """Resolve every parameter of ``reflection`` into call arguments."""
        overrides = self.current_overrides()
        args: list[Any] = []
        kwargs: dict[str, Any] = {}

        for dependency in reflection.parameters:
            if dependency.name in overrides:
                value = overrides[dependency.name]
            elif dependency.is_builtin:
                value = self._resolve_primitive(dependency, reflection)
            else:
                value = self._resolve_class(dependency, reflection)

            if dependency.is_positional:
                args.append(value)
            else:
                kwargs[dependency.name] = value

        return args, kwargs

    def current_overrides(self) -> Mapping[str, Any]:
        return self._with[-1] if self._with else _NO_OVERRIDES

    def contextual_concrete(self, abstract: Any) -> Any:
        """Return the contextual override of ``abstract`` for the current anchor, or ``MISSING``."""
        if not self._build_stack:
            return MISSING
        return self._contextual.lookup(
            self._build_stack[-1],
            abstract,
            self._aliases.aliases_of(abstract),
        )

    @contextmanager
    def overrides(self, parameters: Mapping[str, Any]) -> Generator[None, None, None]:
        self._with.append(parameters)
        try:
            yield
        finally:
            self._with.pop()

    @contextmanager
    def _building(self, concrete: Any) -> Generator[None, None, None]:
        self._build_stack.append(concrete)
        try:
            yield
        finally:
            self._build_stack.pop()

    def _concrete_for(self, abstract: Any) -> Any:
        binding = self._bindings.get_binding(abstract)
        if binding is not None:
            return binding.concrete

        if isinstance(abstract, Interface) and abstract.default is not None:
            return abstract.default

        # Unbound identifiers are their own concrete, so classes autowire.
        return abstract

    def _is_buildable(self, concrete: Any, abstract: Any) -> bool:
        return concrete is abstract or concrete == abstract or is_factory(concrete)

    def _resolve_primitive(self, dependency: ParameterDescriptor, reflection: Reflection) -> Any:
        # Parameter names are not identifiers, so aliases do not apply.
        concrete = (
            self._contextual.find(self._build_stack[-1], dependency.name)
            if self._build_stack
            else MISSING
        )
        if concrete is not MISSING:
            return call_with_supported_args(concrete, self._container) if is_factory(concrete) else concrete

        if dependency.has_default:
            return dependency.default_value()

        msg = f"Unresolvable dependency resolving [{dependency.name}] in class {reflection.name}."
        raise RewireUnresolvableParameterError(
            msg,
            parameter=dependency.name,
            declaring=reflection.target,
            identifier=reflection.target,
            build_stack=self.build_stack,
        )

    def _resolve_class(self, dependency: ParameterDescriptor, reflection: Reflection) -> Any:
        if dependency.declared_type is None:
            msg = f"Cannot get the type of parameter [{dependency.name}] in class {reflection.name}."
            raise RewireMissingParameterTypeError(
                msg,
                identifier=reflection.target,
                build_stack=self.build_stack,
            )

        outcome = self._make_dependency(dependency.declared_type)
        if isinstance(outcome, _NotInstantiable):
            # Optional dependencies fall back to their default value.
            if dependency.has_default:
                return dependency.default_value()
            raise outcome.error
        return outcome.value

    def _make_dependency(self, token: Any) -> _Resolved | _NotInstantiable:
        try:
            return _Resolved(self._container.make(token))
        except RewireNotInstantiableError as error:
            return _NotInstantiable(error)

    def _not_instantiable(self, concrete: Any) -> RewireNotInstantiableError:
        msg = f"Target [{format_identifier(concrete)}] is not instantiable"
        if self._build_stack:
            previous = ", ".join(format_identifier(item) for item in self._build_stack)
            msg += f" while building [{previous}]."
        else:
            msg += "."
        return RewireNotInstantiableError(msg, identifier=concrete, build_stack=self.build_stack)
