from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from rewire._internal.bound_method import CallTarget
from rewire.container import Container
from rewire.exceptions import RewireContainerNotSetError


class ContainerContext:
    """Process-wide handle to one explicitly initialized container.

    The handle starts empty. Bind the application container once during
    startup with ``set_current`` and release it with ``clear`` during
    teardown (or between tests). The binding is process-global for this
    ``ContainerContext`` instance; it is not task-local or thread-local.
    """

    def __init__(self) -> None:
        self._container: Container | None = None

    def set_current(self, container: Container) -> None:
        """Set the shared active container."""
        self._container = container

    def get_current(self) -> Container:
        """Return the shared active container or raise when not bound."""
        if self._container is None:
            msg = (
                "Container is not set for container_context. "
                "Call container_context.set_current(container) before using container_context."
            )
            raise RewireContainerNotSetError(msg)
        return self._container

    def clear(self) -> None:
        """Release the active container."""
        self._container = None

    @property
    def is_set(self) -> bool:
        return self._container is not None

    def make(self, abstract: Any, parameters: Mapping[str, Any] | None = None) -> Any:
        """Resolve ``abstract`` from the active container."""
        return self.get_current().make(abstract, parameters)

    def call(
        self,
        callback: CallTarget,
        parameters: Mapping[str, Any] | None = None,
        default_method: str | None = None,
    ) -> Any:
        """Call ``callback`` with dependencies injected by the active container."""
        return self.get_current().call(callback, parameters, default_method)


container_context = ContainerContext()

__all__ = ["ContainerContext", "container_context"]
