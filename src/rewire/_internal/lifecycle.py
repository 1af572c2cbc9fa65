from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from rewire._internal.type_checks import call_with_supported_args, is_runtime_class

if TYPE_CHECKING:
    from rewire.container import Container

ResolvingCallback = Callable[..., None]
ReboundCallback = Callable[..., None]


@dataclass(slots=True)
class _CallbackGroup:
    resolving: list[ResolvingCallback] = field(default_factory=list)
    after_resolving: list[ResolvingCallback] = field(default_factory=list)


class LifecycleHooks:
    """Hold resolving, after-resolving and rebound callbacks.

    Per-type callbacks are grouped by key so that a key's after-resolving
    callbacks run right after its resolving callbacks. Keys keep the order in
    which they first received a callback.
    """

    def __init__(self) -> None:
        self._global = _CallbackGroup()
        self._groups: dict[Any, _CallbackGroup] = {}
        self._rebound: dict[Any, list[ReboundCallback]] = {}

    def add_resolving(self, abstract: Any, callback: ResolvingCallback) -> None:
        self._groups.setdefault(abstract, _CallbackGroup()).resolving.append(callback)

    def add_after_resolving(self, abstract: Any, callback: ResolvingCallback) -> None:
        self._groups.setdefault(abstract, _CallbackGroup()).after_resolving.append(callback)

    def add_global_resolving(self, callback: ResolvingCallback) -> None:
        self._global.resolving.append(callback)

    def add_global_after_resolving(self, callback: ResolvingCallback) -> None:
        self._global.after_resolving.append(callback)

    def fire_resolving(self, abstract: Any, instance: Any, container: Container) -> None:
        """Run every callback that applies to ``instance`` resolved as ``abstract``.

        A per-type group applies when its key is ``abstract`` itself or a class
        that ``instance`` is an instance of.
        """
        self._fire_group(self._global, instance, container)

        for key, group in list(self._groups.items()):
            if key == abstract or (is_runtime_class(key) and isinstance(instance, key)):
                self._fire_group(group, instance, container)

    def add_rebound(self, abstract: Any, callback: ReboundCallback) -> None:
        self._rebound.setdefault(abstract, []).append(callback)

    def rebound_callbacks(self, abstract: Any) -> tuple[ReboundCallback, ...]:
        return tuple(self._rebound.get(abstract, ()))

    def _fire_group(self, group: _CallbackGroup, instance: Any, container: Container) -> None:
        for callback in tuple(group.resolving):
            call_with_supported_args(callback, instance, container)
        for callback in tuple(group.after_resolving):
            call_with_supported_args(callback, instance, container)
