from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from rewire.exceptions import RewireBindingError

if TYPE_CHECKING:
    from typing_extensions import Self

    from rewire.container import Container

MISSING: Any = object()


class ContextualBindingStore:
    """Store overrides keyed by the concrete being built and the dependency it needs.

    Anchors are compared against the top of the build stack at lookup time, so
    an override applies only to the direct dependencies of its anchor and never
    to deeper levels of the object graph.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[Any, Any], Any] = {}

    def add(self, anchor: Any, abstract: Any, implementation: Any) -> None:
        self._entries[(anchor, abstract)] = implementation

    def find(self, anchor: Any, abstract: Any) -> Any:
        """Return the override for ``(anchor, abstract)`` or ``MISSING``."""
        return self._entries.get((anchor, abstract), MISSING)

    def lookup(self, anchor: Any, abstract: Any, aliases: Iterable[Any]) -> Any:
        """Return the override for ``abstract`` or one of its aliases, else ``MISSING``.

        The canonical key wins over aliases; aliases are tried in the order
        they were registered.
        """
        if not self._entries:
            return MISSING

        found = self.find(anchor, abstract)
        if found is not MISSING:
            return found

        for alias in aliases:
            found = self.find(anchor, alias)
            if found is not MISSING:
                return found

        return MISSING

    def __len__(self) -> int:
        return len(self._entries)


class ContextualBindingBuilder:
    """Fluent ``when(...).needs(...).give(...)`` registration helper."""

    def __init__(self, container: Container, concretes: tuple[Any, ...]) -> None:
        self._container = container
        self._concretes = concretes
        self._needs: Any = MISSING

    def needs(self, abstract: Any) -> Self:
        """Define the abstract target that depends on the context.

        Args:
            abstract: Dependency identifier, or a parameter name for builtin
                parameters.

        """
        self._needs = abstract
        return self

    def give(self, implementation: Any) -> None:
        """Define the implementation used while building the anchored concretes.

        Args:
            implementation: Concrete class, factory, identifier or, for builtin
                parameters, the value itself.

        """
        if self._needs is MISSING:
            msg = "Call needs() before give() when defining a contextual binding."
            raise RewireBindingError(msg)

        for concrete in self._concretes:
            self._container.add_contextual_binding(concrete, self._needs, implementation)
