from __future__ import annotations

import logging
from typing import Any

from rewire._internal.type_checks import format_identifier
from rewire.exceptions import RewireLogicError

logger = logging.getLogger(__name__)


class AliasRegistry:
    """Canonicalize identifiers through alias chains.

    Edges point from an alias to the identifier it stands for. A reverse index
    keyed by the aliased identifier keeps every alias in registration order,
    which contextual binding lookups walk when the canonical key has no match.

    Cycles are rejected when an edge is written, so following edges from any
    identifier always reaches a fixed point.
    """

    def __init__(self) -> None:
        self._aliases: dict[Any, Any] = {}
        self._abstract_aliases: dict[Any, list[Any]] = {}

    def alias(self, abstract: Any, name: Any) -> None:
        """Register ``name`` as an alias of ``abstract``.

        Args:
            abstract: Identifier the alias resolves to.
            name: New alternate identifier.

        Raises:
            RewireLogicError: If ``name`` is ``abstract`` or the new edge would
                close a cycle through existing aliases.

        """
        if name == abstract:
            msg = f"[{format_identifier(abstract)}] is aliased to itself."
            raise RewireLogicError(msg)

        if name in self._chain(abstract):
            msg = (
                f"Aliasing [{format_identifier(name)}] to [{format_identifier(abstract)}] "
                "would create an alias cycle."
            )
            raise RewireLogicError(msg)

        previous = self._aliases.get(name)
        if previous is not None and name in self._abstract_aliases.get(previous, ()):
            self._abstract_aliases[previous].remove(name)

        self._aliases[name] = abstract
        self._abstract_aliases.setdefault(abstract, []).append(name)
        logger.debug("Aliased %r to %r", name, abstract)

    def is_alias(self, name: Any) -> bool:
        return name in self._aliases

    def canonicalize(self, identifier: Any) -> Any:
        """Follow alias edges from ``identifier`` to their fixed point."""
        return self._chain(identifier)[-1]

    def aliases_of(self, abstract: Any) -> tuple[Any, ...]:
        return tuple(self._abstract_aliases.get(abstract, ()))

    def forget(self, identifier: Any) -> None:
        """Drop the outgoing edge of ``identifier`` only."""
        self._aliases.pop(identifier, None)

    def remove_abstract_reference(self, searched: Any) -> None:
        """Scrub ``searched`` from every reverse alias list.

        Used when an alias becomes a direct instance binding: contextual
        lookups must stop treating it as an alternate name of its old target.
        """
        if searched not in self._aliases:
            return

        for abstract, aliases in self._abstract_aliases.items():
            self._abstract_aliases[abstract] = [alias for alias in aliases if alias != searched]

    def clear(self) -> None:
        self._aliases.clear()
        self._abstract_aliases.clear()

    def _chain(self, identifier: Any) -> list[Any]:
        """Return every identifier visited from ``identifier``, the fixed point last."""
        chain = [identifier]
        visited = {identifier}
        current = identifier
        while current in self._aliases:
            current = self._aliases[current]
            if current in visited:
                msg = f"[{format_identifier(identifier)}] is part of an alias cycle."
                raise RewireLogicError(msg)
            visited.add(current)
            chain.append(current)
        return chain
