"""Item store backed by a directory on local disk."""

from __future__ import annotations

import asyncio
import os
import shutil
from dataclasses import dataclass
from logging import getLogger
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, TypeVar

from itemmirror.domain.errors import ItemExistsError, ItemNotFoundError, StoreError
from itemmirror.domain.model.schema import join_path
from itemmirror.domain.ports import ItemStore, PublicUrlProvider

from .schema import FileStat
from .translator import to_store_entry

if TYPE_CHECKING:
    from collections.abc import Callable

    from itemmirror.domain.ports import StoreEntry

log = getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True)
class FileSystemItemStore:
    """``ItemStore`` rooted at ``root``; blocking calls run in worker threads."""

    root: Path

    def __post_init__(self) -> None:
        self.root = Path(self.root).resolve()

    # ------------------------------------------------------------------- paths

    def resolve(self, path: str) -> Path:
        """Map a store path onto disk, refusing anything outside ``root``."""

        relative = PurePosixPath(path.strip("/") or ".")
        if relative.is_absolute() or ".." in relative.parts:
            raise StoreError(f"Path {path!r} escapes the store root", path=path)
        return self.root.joinpath(*relative.parts)

    # -------------------------------------------------------------- operations

    async def list(self, path: str) -> list[StoreEntry]:
        return await asyncio.to_thread(_scan, self.resolve(path), path)

    async def create_container(self, path: str) -> None:
        target = self.resolve(path)
        await asyncio.to_thread(self._guarded, path, target.mkdir, exists=FileExistsError)

    async def create_leaf(self, path: str, content: bytes) -> None:
        target = self.resolve(path)
        await asyncio.to_thread(self._write, path, target, content)

    def _write(self, path: str, target: Path, content: bytes) -> None:
        if target.is_dir():
            raise ItemExistsError(f"A folder already exists at {path!r}", path=path)
        if not target.parent.is_dir():
            raise ItemNotFoundError(f"No parent folder for {path!r}", path=path)
        target.write_bytes(content)

    async def read_leaf(self, path: str) -> bytes:
        target = self.resolve(path)
        return await asyncio.to_thread(self._guarded, path, target.read_bytes)

    async def delete_container(self, path: str) -> None:
        target = self.resolve(path)
        if target == self.root:
            raise StoreError("Refusing to delete the store root", path=path)
        if not target.is_dir():
            raise ItemNotFoundError(f"No folder at {path!r}", path=path)
        await asyncio.to_thread(shutil.rmtree, target)

    async def delete_leaf(self, path: str) -> None:
        target = self.resolve(path)
        await asyncio.to_thread(self._guarded, path, target.unlink)

    async def move(self, source: str, destination: str) -> None:
        origin = self.resolve(source)
        target = self.resolve(destination)
        if not origin.exists():
            raise ItemNotFoundError(f"Nothing to move at {source!r}", path=source)
        if target.exists():
            raise ItemExistsError(f"Destination {destination!r} already exists", path=destination)
        await asyncio.to_thread(origin.rename, target)

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(self.resolve(path).exists)

    async def public_url(self, path: str) -> str:
        return self.resolve(path).as_uri()

    # ----------------------------------------------------------------- helpers

    @staticmethod
    def _guarded(
        path: str,
        action: Callable[[], T],
        *,
        exists: type[OSError] | None = None,
    ) -> T:
        try:
            return action()
        except FileNotFoundError as exc:
            raise ItemNotFoundError(f"No item at {path!r}", path=path) from exc
        except OSError as exc:
            if exists is not None and isinstance(exc, exists):
                raise ItemExistsError(f"An item already exists at {path!r}", path=path) from exc
            raise StoreError(f"Could not access {path!r}: {exc}", path=path) from exc


def _scan(directory: Path, path: str) -> list[StoreEntry]:
    if not directory.is_dir():
        raise ItemNotFoundError(f"No folder at {path!r}", path=path)
    with os.scandir(directory) as entries:
        stats = [
            FileStat.from_dir_entry(entry, path=join_path(path, entry.name)) for entry in entries
        ]
    stats.sort(key=lambda stat: stat.name)
    log.debug("Listed %d entries in %s", len(stats), directory)
    return [to_store_entry(stat) for stat in stats]


if TYPE_CHECKING:
    _store_check: ItemStore = FileSystemItemStore(Path())
    _url_check: PublicUrlProvider = FileSystemItemStore(Path())
