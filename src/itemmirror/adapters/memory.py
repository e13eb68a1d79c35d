"""Item store kept entirely in process memory.

Folders and leaves live in one insertion-ordered mapping keyed by normalized
path, so listings come back in creation order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from itemmirror.domain.errors import ItemExistsError, ItemNotFoundError, StoreError
from itemmirror.domain.model.schema import PATH_SEPARATOR, join_path
from itemmirror.domain.ports import ItemStore, StoreEntry

if TYPE_CHECKING:
    from collections.abc import Iterable

log = getLogger(__name__)

_ROOT = ""


def normalize(path: str) -> str:
    parts = [part for part in path.split(PATH_SEPARATOR) if part not in ("", ".")]
    if ".." in parts:
        raise StoreError(f"Path {path!r} escapes the store root", path=path)
    return PATH_SEPARATOR.join(parts)


def _parent(path: str) -> str:
    head, _, _ = path.rpartition(PATH_SEPARATOR)
    return head


@dataclass(slots=True)
class InMemoryItemStore:
    """``ItemStore`` for tests and scratch sessions; ``None`` marks a folder."""

    items: dict[str, bytes | None] = field(default_factory=lambda: {_ROOT: None})

    @classmethod
    def with_entries(cls, entries: Iterable[str]) -> InMemoryItemStore:
        """Build a store from paths; a trailing ``/`` marks a folder."""

        store = cls()
        for entry in entries:
            path = normalize(entry)
            for ancestor in _ancestors(path):
                store.items.setdefault(ancestor, None)
            store.items[path] = None if entry.endswith(PATH_SEPARATOR) else b""
        return store

    async def list(self, path: str) -> list[StoreEntry]:
        folder = self._require_container(path)
        entries: list[StoreEntry] = []
        for candidate, content in self.items.items():
            if candidate == folder or _parent(candidate) != folder:
                continue
            name = candidate.rpartition(PATH_SEPARATOR)[2]
            entries.append(
                StoreEntry(name=name, is_container=content is None, path=join_path(folder, name))
            )
        return entries

    async def create_container(self, path: str) -> None:
        key = self._require_new(path)
        self.items[key] = None

    async def create_leaf(self, path: str, content: bytes) -> None:
        key = normalize(path)
        if self.items.get(key, b"") is None:
            raise ItemExistsError(f"A folder already exists at {path!r}", path=path)
        self._require_container(_parent(key))
        self.items[key] = bytes(content)

    async def read_leaf(self, path: str) -> bytes:
        key = normalize(path)
        content = self.items.get(key)
        if content is None:
            raise ItemNotFoundError(f"No leaf at {path!r}", path=path)
        return content

    async def delete_container(self, path: str) -> None:
        key = self._require_container(path)
        if key == _ROOT:
            raise StoreError("Refusing to delete the store root", path=path)
        prefix = key + PATH_SEPARATOR
        for candidate in [item for item in self.items if item == key or item.startswith(prefix)]:
            del self.items[candidate]

    async def delete_leaf(self, path: str) -> None:
        key = normalize(path)
        if key not in self.items or self.items[key] is None:
            raise ItemNotFoundError(f"No leaf at {path!r}", path=path)
        del self.items[key]

    async def move(self, source: str, destination: str) -> None:
        origin = normalize(source)
        target = self._require_new(destination)
        if origin not in self.items or origin == _ROOT:
            raise ItemNotFoundError(f"Nothing to move at {source!r}", path=source)
        prefix = origin + PATH_SEPARATOR
        moved = {
            target + item[len(origin) :]: content
            for item, content in self.items.items()
            if item == origin or item.startswith(prefix)
        }
        for item in [item for item in self.items if item == origin or item.startswith(prefix)]:
            del self.items[item]
        self.items.update(moved)
        log.debug("Moved %s to %s", origin, target)

    async def exists(self, path: str) -> bool:
        return normalize(path) in self.items

    # ----------------------------------------------------------------- helpers

    def _require_container(self, path: str) -> str:
        key = normalize(path)
        if key not in self.items or self.items[key] is not None:
            raise ItemNotFoundError(f"No folder at {path!r}", path=path)
        return key

    def _require_new(self, path: str) -> str:
        key = normalize(path)
        if key in self.items:
            raise ItemExistsError(f"An item already exists at {path!r}", path=path)
        self._require_container(_parent(key))
        return key


def _ancestors(path: str) -> Iterable[str]:
    parts = path.split(PATH_SEPARATOR)
    for index in range(1, len(parts)):
        yield PATH_SEPARATOR.join(parts[:index])


if TYPE_CHECKING:
    _store_check: ItemStore = InMemoryItemStore()
