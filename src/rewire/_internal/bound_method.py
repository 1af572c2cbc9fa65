from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from rewire._internal.type_checks import format_identifier, is_identifier_like, is_runtime_class
from rewire.exceptions import RewireInvalidCallableError

if TYPE_CHECKING:
    from rewire._internal.build import BuildPipeline
    from rewire._internal.reflection import Reflector
    from rewire.container import Container

CallTarget = Callable[..., Any] | str | tuple[Any, str]
"""A callable, an ``"Identifier@method"`` reference or a ``(target, "method")`` pair."""


def method_binding_key(method: str | tuple[Any, str]) -> str:
    """Normalize a method reference into its ``"ClassName@method"`` binding key."""
    if isinstance(method, tuple):
        target, name = method
        if isinstance(target, str):
            msg = f"Method binding target [{target}] for [{name}] must be a class or an instance."
            raise RewireInvalidCallableError(msg)
        owner = target if is_runtime_class(target) else type(target)
        return f"{owner.__name__}@{name}"
    return method


class BoundMethod:
    """Invoke callables with their parameters injected by the container.

    Parameters are resolved by the same rules as constructor parameters:
    explicit overrides by name first, then contextual bindings and defaults for
    primitives, then container resolution for classes.
    """

    def __init__(self, container: Container, pipeline: BuildPipeline, reflector: Reflector) -> None:
        self._container = container
        self._pipeline = pipeline
        self._reflector = reflector

    def call(
        self,
        callback: CallTarget,
        parameters: Mapping[str, Any] | None = None,
        default_method: str | None = None,
    ) -> Any:
        if isinstance(callback, str):
            callback = self._parse_reference(callback, default_method)
        elif is_runtime_class(callback) and default_method is not None:
            callback = (callback, default_method)

        if isinstance(callback, tuple):
            return self._call_bound_method(callback, parameters)

        return self._call_with_dependencies(callback, parameters)

    def _parse_reference(self, reference: str, default_method: str | None) -> tuple[Any, str]:
        identifier, _, method = reference.partition("@")
        method = method or default_method or ""
        if not method:
            msg = f"Method not provided for call target [{reference}]."
            raise RewireInvalidCallableError(msg)
        return identifier, method

    def _call_bound_method(
        self,
        reference: tuple[Any, str],
        parameters: Mapping[str, Any] | None,
    ) -> Any:
        target, method = reference
        instance = self._container.make(target) if is_identifier_like(target) else target

        binding_key = method_binding_key((instance, method))
        if self._container.has_method_binding(binding_key):
            return self._container.call_method_binding(binding_key, instance)

        func = getattr(instance, method, None)
        if func is None or not callable(func):
            msg = f"Call target [{format_identifier(type(instance))}] has no callable method [{method}]."
            raise RewireInvalidCallableError(msg)

        return self._call_with_dependencies(func, parameters)

    def _call_with_dependencies(
        self,
        func: Callable[..., Any],
        parameters: Mapping[str, Any] | None,
    ) -> Any:
        reflection = self._reflector.reflect_callable(func)
        with self._pipeline.overrides(dict(parameters) if parameters else {}):
            args, kwargs = self._pipeline.resolve_dependencies(reflection)
        return reflection.invoke(args, kwargs)
