"""Ports for the storage that holds the items a fragment describes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, TypeVar, runtime_checkable

from itemmirror.domain.errors import StoreError

if TYPE_CHECKING:
    from collections.abc import Awaitable


@dataclass(frozen=True, slots=True)
class StoreEntry:
    """One child of a listed folder."""

    name: str
    is_container: bool
    path: str


@runtime_checkable
class ItemStore(Protocol):
    """Asynchronous access to a hierarchical item store.

    Paths are ``/``-separated and relative to the store's own root. Every call
    may fail independently; implementations raise ``StoreError`` subclasses.
    """

    async def list(self, path: str) -> list[StoreEntry]: ...

    async def create_container(self, path: str) -> None: ...

    async def create_leaf(self, path: str, content: bytes) -> None: ...

    async def read_leaf(self, path: str) -> bytes: ...

    async def delete_container(self, path: str) -> None: ...

    async def delete_leaf(self, path: str) -> None: ...

    async def move(self, source: str, destination: str) -> None: ...

    async def exists(self, path: str) -> bool: ...


@runtime_checkable
class PublicUrlProvider(Protocol):
    """Optional capability of stores that can share items by URL."""

    async def public_url(self, path: str) -> str: ...


T = TypeVar("T")


async def call_store(awaitable: Awaitable[T], *, path: str, action: str) -> T:
    """Await a store call, reporting any failure as ``StoreError``."""

    try:
        return await awaitable
    except StoreError:
        raise
    except Exception as exc:
        raise StoreError(f"Item store failed to {action} {path}: {exc}", path=path) from exc


__all__ = ["ItemStore", "PublicUrlProvider", "StoreEntry", "call_store"]
