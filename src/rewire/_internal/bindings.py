from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

Resolver = Callable[..., Any]
"""A binding resolver, called with ``(container, parameters)``."""


@dataclass(frozen=True, slots=True)
class Binding:
    """Registered concrete resolver for an abstract identifier."""

    concrete: Resolver
    shared: bool = False


class BindingRegistry:
    """Own the binding records, the shared instance cache and the resolved set.

    Keys are identifiers exactly as the caller passed them. Canonicalization
    through aliases happens in the container before the registry is consulted.
    """

    def __init__(self) -> None:
        self._bindings: dict[Any, Binding] = {}
        self._instances: dict[Any, Any] = {}
        self._resolved: set[Any] = set()

    def set_binding(self, abstract: Any, binding: Binding) -> None:
        self._bindings[abstract] = binding

    def get_binding(self, abstract: Any) -> Binding | None:
        return self._bindings.get(abstract)

    def has_binding(self, abstract: Any) -> bool:
        return abstract in self._bindings

    def remove_binding(self, abstract: Any) -> None:
        self._bindings.pop(abstract, None)

    def bindings(self) -> Mapping[Any, Binding]:
        return MappingProxyType(self._bindings)

    def set_instance(self, abstract: Any, instance: Any) -> None:
        self._instances[abstract] = instance

    def get_instance(self, abstract: Any) -> Any:
        return self._instances[abstract]

    def has_instance(self, abstract: Any) -> bool:
        return abstract in self._instances

    def forget_instance(self, abstract: Any) -> None:
        self._instances.pop(abstract, None)

    def forget_instances(self) -> None:
        self._instances.clear()

    def is_shared(self, abstract: Any) -> bool:
        if abstract in self._instances:
            return True
        binding = self._bindings.get(abstract)
        return binding is not None and binding.shared

    def mark_resolved(self, abstract: Any) -> None:
        self._resolved.add(abstract)

    def is_resolved(self, abstract: Any) -> bool:
        return abstract in self._resolved or abstract in self._instances

    def forget_resolved(self, abstract: Any) -> None:
        self._resolved.discard(abstract)

    def clear(self) -> None:
        self._bindings.clear()
        self._instances.clear()
        self._resolved.clear()
