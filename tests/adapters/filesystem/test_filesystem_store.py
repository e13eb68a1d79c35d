from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from itemmirror.adapters.filesystem import FileStat, FileSystemItemStore, to_store_entry
from itemmirror.domain.errors import ItemExistsError, ItemNotFoundError, StoreError
from itemmirror.domain.ports import ItemStore, PublicUrlProvider, StoreEntry

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def store(tmp_path: Path) -> FileSystemItemStore:
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "inner.txt").write_text("inner")
    (tmp_path / "b.txt").write_text("bee")
    (tmp_path / "a.txt").write_text("a")
    return FileSystemItemStore(tmp_path)


def test_filesystem_store_satisfies_ports(store: FileSystemItemStore) -> None:
    assert isinstance(store, ItemStore)
    assert isinstance(store, PublicUrlProvider)


def test_listing_is_sorted_by_name(store: FileSystemItemStore) -> None:
    entries = asyncio.run(store.list(""))

    assert entries == [
        StoreEntry(name="a.txt", is_container=False, path="a.txt"),
        StoreEntry(name="b.txt", is_container=False, path="b.txt"),
        StoreEntry(name="docs", is_container=True, path="docs"),
    ]
    assert asyncio.run(store.list("docs")) == [
        StoreEntry(name="inner.txt", is_container=False, path="docs/inner.txt")
    ]


def test_leaf_and_container_operations(store: FileSystemItemStore, tmp_path: Path) -> None:
    async def scenario() -> bytes:
        await store.create_container("new")
        await store.create_leaf("new/file.txt", b"data")
        await store.move("new/file.txt", "new/renamed.txt")
        content = await store.read_leaf("new/renamed.txt")
        await store.delete_leaf("a.txt")
        await store.delete_container("docs")
        return content

    assert asyncio.run(scenario()) == b"data"
    assert (tmp_path / "new" / "renamed.txt").exists()
    assert not (tmp_path / "a.txt").exists()
    assert not (tmp_path / "docs").exists()


def test_missing_and_existing_paths(store: FileSystemItemStore) -> None:
    with pytest.raises(ItemNotFoundError):
        asyncio.run(store.list("missing"))
    with pytest.raises(ItemNotFoundError):
        asyncio.run(store.read_leaf("missing.txt"))
    with pytest.raises(ItemNotFoundError):
        asyncio.run(store.delete_leaf("missing.txt"))
    with pytest.raises(ItemExistsError):
        asyncio.run(store.create_container("docs"))
    with pytest.raises(ItemExistsError):
        asyncio.run(store.move("a.txt", "b.txt"))
    assert asyncio.run(store.exists("docs/inner.txt"))


def test_paths_cannot_escape_root(store: FileSystemItemStore) -> None:
    with pytest.raises(StoreError):
        asyncio.run(store.read_leaf("../outside.txt"))
    with pytest.raises(StoreError):
        asyncio.run(store.delete_container(""))


def test_public_url_is_a_file_uri(store: FileSystemItemStore, tmp_path: Path) -> None:
    url = asyncio.run(store.public_url("a.txt"))

    assert url == (tmp_path / "a.txt").resolve().as_uri()


def test_file_stat_translation() -> None:
    stat = FileStat.model_validate(
        {"name": "docs", "path": "root/docs", "is_dir": True, "modified": 0, "ignored": 1}
    )

    assert stat.modified is not None
    assert stat.modified.year == 1970
    assert to_store_entry(stat) == StoreEntry(name="docs", is_container=True, path="root/docs")

    with pytest.raises(ValidationError):
        FileStat.model_validate({"name": "", "path": "x", "is_dir": False})
