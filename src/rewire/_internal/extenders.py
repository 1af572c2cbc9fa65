from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rewire._internal.type_checks import call_with_supported_args

if TYPE_CHECKING:
    from rewire.container import Container

Extender = Callable[..., Any]
"""A decorator receiving ``(instance, container)`` and returning the next value."""


class ExtensionRegistry:
    """Keep ordered decorator chains per canonical abstract."""

    def __init__(self) -> None:
        self._extenders: dict[Any, list[Extender]] = {}

    def add(self, abstract: Any, extender: Extender) -> None:
        self._extenders.setdefault(abstract, []).append(extender)

    def apply(self, abstract: Any, instance: Any, container: Container) -> Any:
        """Thread ``instance`` through every extender of ``abstract`` in registration order."""
        for extender in self._extenders.get(abstract, ()):
            instance = call_with_supported_args(extender, instance, container)
        return instance

    def forget(self, abstract: Any) -> None:
        self._extenders.pop(abstract, None)
