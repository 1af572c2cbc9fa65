from __future__ import annotations

from typing import Any


class Interface:
    """Name an abstraction that has no runtime class of its own.

    Interface tokens compare by identity, so two tokens with the same name are
    distinct identifiers. Bind an implementation to the token like any other
    identifier. When nothing is bound, the container resolves ``default``
    instead; without a default the token is not instantiable.

    Constructor parameters opt into a token through ``typing.Annotated``
    metadata, keeping the runtime annotation usable by type checkers.

    Examples:
        .. code-block:: python

            from typing import Annotated, Protocol

            from rewire import Interface


            class Cache(Protocol):
                def get(self, key: str) -> bytes | None: ...


            class MemoryCache:
                def get(self, key: str) -> bytes | None:
                    return None


            CacheToken = Interface("cache", default=MemoryCache)


            class Service:
                def __init__(self, cache: Annotated[Cache, CacheToken]) -> None:
                    self.cache = cache

    """

    __slots__ = ("default", "name")

    def __init__(self, name: str, default: Any = None) -> None:
        self.name = name
        self.default = default

    def __repr__(self) -> str:
        return f"Interface({self.name!r})"
