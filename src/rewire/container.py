from __future__ import annotations

import functools
import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from contextlib import AbstractContextManager, nullcontext
from typing import Any, TypeVar, overload

from rewire._internal.aliases import AliasRegistry
from rewire._internal.bindings import Binding, BindingRegistry
from rewire._internal.bound_method import BoundMethod, CallTarget, method_binding_key
from rewire._internal.build import BuildPipeline
from rewire._internal.contextual import ContextualBindingBuilder, ContextualBindingStore
from rewire._internal.extenders import Extender, ExtensionRegistry
from rewire._internal.lifecycle import LifecycleHooks, ReboundCallback, ResolvingCallback
from rewire._internal.reflection import Reflector
from rewire._internal.type_checks import call_with_supported_args, is_factory, is_runtime_class
from rewire.defaults import DEFAULT_BUILTIN_TYPES, DEFAULT_LOCK_MODE
from rewire.exceptions import RewireBindingError, RewireEntryNotFoundError, RewireError
from rewire.lock_mode import LockMode

T = TypeVar("T")
F = TypeVar("F", bound=Callable[..., Any])

logger = logging.getLogger(__name__)


def _synchronized(method: F) -> F:
    @functools.wraps(method)
    def wrapper(self: Container, *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


def _as_tuple(value: Any) -> tuple[Any, ...]:
    if isinstance(value, (list, tuple, set, frozenset)):
        return tuple(value)
    return (value,)


class Container:
    """Register abstractions and resolve object graphs with constructor injection.

    Identifiers are strings, classes, or ``Interface`` tokens. A class that was
    never registered resolves to itself, so concrete classes autowire without
    any registration. Bindings map an identifier to a class, a factory or
    another identifier; shared bindings cache the first instance they build.

    Contextual bindings replace a dependency only while a specific concrete is
    being built::

        container.when(ReportService).needs(Storage).give(S3Storage)

    Every public operation runs under one reentrant lock per container unless
    ``lock_mode=LockMode.NONE`` is selected.
    """

    def __init__(
        self,
        *,
        lock_mode: LockMode = DEFAULT_LOCK_MODE,
        builtin_types: Iterable[type[Any]] | None = None,
    ) -> None:
        """Initialize an empty container.

        Args:
            lock_mode: Locking strategy for container operations.
            builtin_types: Types resolved as primitives (overrides, contextual
                values and defaults only) instead of through the container.
                Defaults to ``rewire.defaults.DEFAULT_BUILTIN_TYPES``.

        """
        self._lock_mode = lock_mode
        self._lock: AbstractContextManager[Any] = (
            threading.RLock() if lock_mode is LockMode.THREAD else nullcontext()
        )

        self._aliases = AliasRegistry()
        self._bindings = BindingRegistry()
        self._contextual = ContextualBindingStore()
        self._extenders = ExtensionRegistry()
        self._hooks = LifecycleHooks()
        self._reflector = Reflector(
            DEFAULT_BUILTIN_TYPES if builtin_types is None else builtin_types,
        )
        self._tags: dict[str, list[Any]] = {}
        self._method_bindings: dict[str, Callable[..., Any]] = {}

        self._pipeline = BuildPipeline(
            self,
            aliases=self._aliases,
            bindings=self._bindings,
            contextual=self._contextual,
            extenders=self._extenders,
            hooks=self._hooks,
            reflector=self._reflector,
        )
        self._bound_method = BoundMethod(self, self._pipeline, self._reflector)

        self._register_self()

    @property
    def lock_mode(self) -> LockMode:
        return self._lock_mode

    # Registration

    @_synchronized
    def bind(self, abstract: Any, concrete: Any = None, shared: bool = False) -> None:  # noqa: FBT001, FBT002
        """Register a binding with the container.

        Args:
            abstract: Identifier being bound.
            concrete: Class, factory ``(container, parameters) -> object`` or
                another identifier. Defaults to ``abstract`` itself when it is a
                class.
            shared: Cache the first resolved instance and reuse it.

        Raises:
            RewireBindingError: If ``concrete`` is omitted and ``abstract`` is
                not a class.

        """
        if concrete is None:
            if not is_runtime_class(abstract):
                msg = f"Cannot bind the non-instantiable [{abstract!r}] to itself."
                raise RewireBindingError(msg)
            concrete = abstract

        self._drop_stale_instances(abstract)

        # Anything that is not a plain factory is wrapped, so every stored
        # concrete is a resolver that extenders and rebinds treat alike.
        if not is_factory(concrete):
            concrete = self._get_closure(abstract, concrete)

        self._bindings.set_binding(abstract, Binding(concrete=concrete, shared=shared))
        logger.debug("Bound %r (shared=%s)", abstract, shared)

        if self.resolved(abstract):
            self._rebound(abstract)

    @_synchronized
    def bind_if(self, abstract: Any, concrete: Any = None, shared: bool = False) -> None:  # noqa: FBT001, FBT002
        """Register a binding unless ``abstract`` is already bound."""
        if not self.bound(abstract):
            self.bind(abstract, concrete, shared)

    def singleton(self, abstract: Any, concrete: Any = None) -> None:
        """Register a shared binding."""
        self.bind(abstract, concrete, shared=True)

    def singleton_if(self, abstract: Any, concrete: Any = None) -> None:
        """Register a shared binding unless ``abstract`` is already bound."""
        self.bind_if(abstract, concrete, shared=True)

    @_synchronized
    def unbind(self, abstract: Any) -> None:
        """Drop the binding, the cached instance and the resolved flag of ``abstract``."""
        self._bindings.remove_binding(abstract)
        self._bindings.forget_instance(abstract)
        self._bindings.forget_resolved(abstract)

    @_synchronized
    def instance(self, abstract: Any, instance: T) -> T:
        """Register an existing object as the shared instance of ``abstract``.

        ``abstract`` stops being an alias. Rebound callbacks fire when it was
        bound before.

        Returns:
            The registered ``instance``.

        """
        self._aliases.remove_abstract_reference(abstract)

        is_bound = self.bound(abstract)

        self._aliases.forget(abstract)
        self._bindings.set_instance(abstract, instance)
        logger.debug("Registered instance for %r", abstract)

        if is_bound:
            self._rebound(abstract)

        return instance

    @_synchronized
    def alias(self, abstract: Any, alias: Any) -> None:
        """Make ``alias`` resolve to whatever ``abstract`` resolves to."""
        self._aliases.alias(abstract, alias)

    @_synchronized
    def extend(self, abstract: Any, closure: Extender) -> None:
        """Decorate the instances of ``abstract`` with ``closure(instance, container)``.

        A cached shared instance is decorated immediately; otherwise the
        closure joins the chain applied to every future resolution.
        """
        abstract = self._aliases.canonicalize(abstract)

        if self._bindings.has_instance(abstract):
            extended = call_with_supported_args(closure, self._bindings.get_instance(abstract), self)
            self._bindings.set_instance(abstract, extended)
            self._rebound(abstract)
        else:
            self._extenders.add(abstract, closure)
            if self.resolved(abstract):
                self._rebound(abstract)

    @_synchronized
    def tag(self, abstracts: Any, tags: str | Iterable[str]) -> None:
        """Assign each of ``tags`` to every identifier in ``abstracts``."""
        for tag in _as_tuple(tags):
            self._tags.setdefault(tag, []).extend(_as_tuple(abstracts))

    @_synchronized
    def tagged(self, tag: str) -> list[Any]:
        """Resolve every identifier assigned to ``tag``, in registration order."""
        return [self.make(abstract) for abstract in self._tags.get(tag, ())]

    def when(self, concrete: Any) -> ContextualBindingBuilder:
        """Start a contextual binding for one concrete or a list of concretes."""
        with self._lock:
            concretes = tuple(self._aliases.canonicalize(item) for item in _as_tuple(concrete))
        return ContextualBindingBuilder(self, concretes)

    @_synchronized
    def add_contextual_binding(self, concrete: Any, abstract: Any, implementation: Any) -> None:
        """Use ``implementation`` for ``abstract`` while ``concrete`` is being built.

        An alias is stored under its canonical identifier and under its own
        name, which is the key builtin parameters of that name look up.
        """
        canonical = self._aliases.canonicalize(abstract)
        self._contextual.add(concrete, canonical, implementation)
        if canonical != abstract:
            self._contextual.add(concrete, abstract, implementation)
        logger.debug("Contextual binding %r needs %r -> %r", concrete, abstract, implementation)

    @_synchronized
    def set(self, identifier: Any, value: Any) -> None:
        """Bind ``identifier`` to ``value``.

        Plain callables become factories; anything else, classes included, is
        returned as is on every resolution.
        """
        self.bind(identifier, value if is_factory(value) else lambda *_: value)

    # Method bindings

    @_synchronized
    def bind_method(self, method: str | tuple[Any, str], callback: Callable[..., Any]) -> None:
        """Resolve ``call((Class, "method"))`` through ``callback(instance, container)``."""
        self._method_bindings[method_binding_key(method)] = callback

    @_synchronized
    def has_method_binding(self, method: str) -> bool:
        return method in self._method_bindings

    @_synchronized
    def call_method_binding(self, method: str, instance: Any) -> Any:
        return call_with_supported_args(self._method_bindings[method], instance, self)

    # Resolution

    @overload
    def make(self, abstract: type[T], parameters: Mapping[str, Any] | None = None) -> T: ...

    @overload
    def make(self, abstract: Any, parameters: Mapping[str, Any] | None = None) -> Any: ...

    @_synchronized
    def make(self, abstract: Any, parameters: Mapping[str, Any] | None = None) -> Any:
        """Resolve ``abstract`` from the container.

        Args:
            abstract: Identifier to resolve.
            parameters: Constructor arguments by name. Passing any forces a new
                instance even for shared bindings.

        Raises:
            RewireNotInstantiableError: If the concrete cannot be constructed.
            RewireUnresolvableParameterError: If a primitive parameter has no
                value source.
            RewireMissingParameterTypeError: If a parameter annotation cannot
                be evaluated.
            RewireCircularDependencyError: If a concrete depends on itself.

        """
        return self._pipeline.resolve(abstract, parameters)

    @_synchronized
    def get(self, identifier: Any) -> Any:
        """Resolve ``identifier``, reporting unknown identifiers distinctly.

        Raises:
            RewireEntryNotFoundError: If resolution failed and ``identifier``
                was never bound, aliased or registered as an instance.

        """
        try:
            return self._pipeline.resolve(identifier)
        except RewireError as error:
            if self.has(identifier):
                raise
            raise RewireEntryNotFoundError(identifier) from error

    @_synchronized
    def build(self, concrete: Any) -> Any:
        """Instantiate ``concrete`` directly, bypassing its bindings and cache."""
        return self._pipeline.build(concrete)

    @_synchronized
    def call(
        self,
        callback: CallTarget,
        parameters: Mapping[str, Any] | None = None,
        default_method: str | None = None,
    ) -> Any:
        """Call ``callback`` with its parameters injected.

        Args:
            callback: A callable, a ``(target, "method")`` pair or an
                ``"Identifier@method"`` reference. Class targets and string
                identifiers are resolved from the container first.
            parameters: Argument values by parameter name.
            default_method: Method used when the reference names none.

        """
        return self._bound_method.call(callback, parameters, default_method)

    def wrap(self, callback: CallTarget, parameters: Mapping[str, Any] | None = None) -> Callable[[], Any]:
        """Return a zero-argument callable that runs ``call(callback, parameters)``."""
        return functools.partial(self.call, callback, parameters)

    def factory(self, abstract: Any) -> Callable[[], Any]:
        """Return a zero-argument callable that resolves ``abstract``."""
        return functools.partial(self.make, abstract)

    # Introspection

    @_synchronized
    def bound(self, abstract: Any) -> bool:
        """Return true when ``abstract`` has a binding, an instance or is an alias."""
        return (
            self._bindings.has_binding(abstract)
            or self._bindings.has_instance(abstract)
            or self._aliases.is_alias(abstract)
        )

    def has(self, identifier: Any) -> bool:
        return self.bound(identifier)

    def __contains__(self, identifier: object) -> bool:
        return self.bound(identifier)

    @_synchronized
    def resolved(self, abstract: Any) -> bool:
        """Return true when ``abstract`` was resolved or holds a shared instance."""
        return self._bindings.is_resolved(self._aliases.canonicalize(abstract))

    @_synchronized
    def is_shared(self, abstract: Any) -> bool:
        return self._bindings.is_shared(self._aliases.canonicalize(abstract))

    @_synchronized
    def is_alias(self, name: Any) -> bool:
        return self._aliases.is_alias(name)

    @_synchronized
    def get_alias(self, abstract: Any) -> Any:
        """Return the canonical identifier ``abstract`` resolves through aliases to."""
        return self._aliases.canonicalize(abstract)

    @_synchronized
    def get_bindings(self) -> Mapping[Any, Binding]:
        return self._bindings.bindings()

    # Lifecycle callbacks

    @_synchronized
    def resolving(self, abstract: Any, callback: ResolvingCallback | None = None) -> None:
        """Register a callback run with ``(instance, container)`` after resolution.

        With a single callable argument the callback applies to every
        resolution; otherwise only to ``abstract`` and instances of it.
        """
        if callback is None:
            self._hooks.add_global_resolving(self._require_callback(abstract))
        else:
            self._hooks.add_resolving(self._aliases.canonicalize(abstract), callback)

    @_synchronized
    def after_resolving(self, abstract: Any, callback: ResolvingCallback | None = None) -> None:
        """Register a callback run right after the matching resolving callbacks."""
        if callback is None:
            self._hooks.add_global_after_resolving(self._require_callback(abstract))
        else:
            self._hooks.add_after_resolving(self._aliases.canonicalize(abstract), callback)

    @_synchronized
    def rebinding(self, abstract: Any, callback: ReboundCallback) -> Any:
        """Register ``callback(container, instance)`` for rebinds of ``abstract``.

        When ``abstract`` is already bound it is resolved right away, the
        callback receives that instance once, and the instance is returned.
        """
        abstract = self._aliases.canonicalize(abstract)
        self._hooks.add_rebound(abstract, callback)

        if not self.bound(abstract):
            return None

        instance = self.make(abstract)
        call_with_supported_args(callback, self, instance)
        return instance

    def refresh(self, abstract: Any, target: object, method: str) -> Any:
        """Call ``target.method(instance)`` whenever ``abstract`` is rebound."""
        return self.rebinding(
            abstract,
            lambda _container, instance: getattr(target, method)(instance),
        )

    # Teardown

    @_synchronized
    def forget_extenders(self, abstract: Any) -> None:
        self._extenders.forget(self._aliases.canonicalize(abstract))

    @_synchronized
    def forget_instance(self, abstract: Any) -> None:
        self._bindings.forget_instance(self._aliases.canonicalize(abstract))

    @_synchronized
    def forget_instances(self) -> None:
        self._bindings.forget_instances()

    @_synchronized
    def flush(self) -> None:
        """Drop every binding, alias, cached instance and resolved flag.

        Tags, extenders, contextual bindings and callbacks are kept.
        """
        self._aliases.clear()
        self._bindings.clear()
        self._register_self()

    # Internals

    def _register_self(self) -> None:
        self._bindings.set_instance(type(self), self)

    def _get_closure(self, abstract: Any, concrete: Any) -> Callable[..., Any]:
        def resolver(container: Container, parameters: Mapping[str, Any] | None = None) -> Any:
            if concrete is abstract or concrete == abstract:
                return container.build(concrete)
            return container.make(concrete, parameters)

        return resolver

    def _drop_stale_instances(self, abstract: Any) -> None:
        self._bindings.forget_instance(abstract)
        self._aliases.forget(abstract)

    def _rebound(self, abstract: Any) -> None:
        instance = self.make(abstract)
        logger.debug("Rebound %r", abstract)
        for callback in self._hooks.rebound_callbacks(abstract):
            call_with_supported_args(callback, self, instance)

    def _require_callback(self, candidate: Any) -> ResolvingCallback:
        if not is_factory(candidate):
            msg = f"A global resolving callback must be callable, got {candidate!r}."
            raise RewireBindingError(msg)
        return candidate
