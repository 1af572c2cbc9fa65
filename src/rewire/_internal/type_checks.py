from __future__ import annotations

import inspect
import types
from collections.abc import Callable
from typing import Any, TypeGuard

from rewire.markers import Interface


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def is_factory(candidate: object) -> TypeGuard[Callable[..., Any]]:
    """Return true when candidate is a plain factory rather than a constructible type."""
    return callable(candidate) and not is_runtime_class(candidate)


def is_identifier_like(candidate: object) -> bool:
    """Return true for values that name a binding rather than implement one."""
    return isinstance(candidate, (str, Interface)) or is_runtime_class(candidate)


def format_identifier(identifier: object) -> str:
    if isinstance(identifier, str):
        return identifier
    if isinstance(identifier, Interface):
        return identifier.name
    if is_runtime_class(identifier):
        return identifier.__name__
    return getattr(identifier, "__qualname__", None) or type(identifier).__name__


def call_with_supported_args(callback: Callable[..., Any], *args: Any) -> Any:
    """Call ``callback`` with as many leading positional ``args`` as it accepts.

    Factories and callbacks registered with the container may ignore the
    trailing arguments the container passes, for example ``lambda c: Db()``
    for a factory that never looks at parameter overrides.
    """
    return callback(*args[: _positional_capacity(callback, len(args))])


def _positional_capacity(callback: Callable[..., Any], available: int) -> int:
    try:
        parameters = inspect.signature(callback).parameters.values()
    except (TypeError, ValueError):
        return available

    capacity = 0
    for parameter in parameters:
        if parameter.kind is inspect.Parameter.VAR_POSITIONAL:
            return available
        if parameter.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            capacity += 1
    return min(capacity, available)


__all__ = [
    "call_with_supported_args",
    "format_identifier",
    "is_factory",
    "is_identifier_like",
    "is_runtime_class",
]
