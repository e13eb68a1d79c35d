from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from itemmirror.adapters.filesystem import FileSystemItemStore
from itemmirror.adapters.fragment_repository import StoreFragmentRepository
from itemmirror.adapters.memory import InMemoryItemStore
from itemmirror.app import ItemMirror, open_filesystem_mirror
from itemmirror.config import FragmentConfig
from itemmirror.domain.errors import InvalidStateError, ItemExistsError, StoreError
from itemmirror.domain.model import CreateItem, FragmentDocument, PhantomNote
from tests.support.stores import FailingDeleteStore


def _open(store: InMemoryItemStore, folder: str = "") -> ItemMirror:
    return asyncio.run(ItemMirror.open(store, folder))


def _by_local_item(mirror: ItemMirror, name: str) -> str:
    for record in mirror.associations():
        if record.local_item == name:
            return record.id
    raise AssertionError(f"no association for {name}")


def test_open_synthesizes_fragment_from_listing() -> None:
    store = InMemoryItemStore.with_entries(["a.txt", "docs/"])

    mirror = _open(store)

    assert [record.local_item for record in mirror.associations()] == ["a.txt", "docs"]
    assert mirror.document.item_driver == FragmentConfig().item_driver
    assert mirror.last_result is not None
    assert len(mirror.last_result.added) == 2
    saved = FragmentDocument.from_text(store.items["XooML2.xml"].decode())
    assert saved.list_associations() == mirror.document.list_associations()


def test_reopening_keeps_identities() -> None:
    store = InMemoryItemStore.with_entries(["a.txt"])
    first = _open(store)

    second = _open(store)

    assert second.document.list_associations() == first.document.list_associations()
    assert second.last_result is not None
    assert not second.last_result.changed


def test_refresh_picks_up_store_changes() -> None:
    store = InMemoryItemStore.with_entries(["a.txt"])
    mirror = _open(store)
    asyncio.run(store.delete_leaf("a.txt"))
    asyncio.run(store.create_leaf("b.txt", b""))

    result = asyncio.run(mirror.refresh())

    assert len(result.removed) == 1
    assert [record.local_item for record in mirror.associations()] == ["b.txt"]


def test_save_bumps_write_generation_and_persists() -> None:
    store = InMemoryItemStore()
    mirror = _open(store)
    generation = mirror.document.write_generation

    asyncio.run(mirror.save())

    assert mirror.document.write_generation != generation
    assert mirror.document.write_generation in store.items["XooML2.xml"].decode()


def test_create_associations_of_each_supported_kind() -> None:
    store = InMemoryItemStore()
    mirror = _open(store)

    async def scenario() -> tuple[str, str, str]:
        note = await mirror.create_association(PhantomNote(display_text="remember"))
        leaf = await mirror.create_association(
            CreateItem(display_text="A", item_name="a.txt", is_grouping_item=False)
        )
        folder = await mirror.create_association(
            CreateItem(display_text="Docs", item_name="docs", is_grouping_item=True)
        )
        return note, leaf, folder

    note, leaf, folder = asyncio.run(scenario())

    assert store.items["a.txt"] == b""
    assert store.items["docs"] is None
    assert mirror.document.list_associations() == [note, leaf, folder]
    assert asyncio.run(mirror.refresh()).changed is False
    assert note in store.items["XooML2.xml"].decode()


@pytest.mark.parametrize(
    ("entries", "name", "is_grouping_item"),
    [
        (["a.txt"], "a.txt", False),
        (["docs/"], "docs", True),
        (["docs/"], "docs", False),
    ],
)
def test_create_item_refuses_existing_name(
    entries: list[str], name: str, is_grouping_item: bool
) -> None:
    store = InMemoryItemStore.with_entries(entries)
    if name == "a.txt":
        store.items[name] = b"precious"
    mirror = _open(store)
    before = dict(store.items)
    associations = mirror.document.list_associations()
    generation = mirror.document.write_generation

    with pytest.raises(ItemExistsError):
        asyncio.run(
            mirror.create_association(
                CreateItem(display_text="dup", item_name=name, is_grouping_item=is_grouping_item)
            )
        )

    assert store.items == before
    assert mirror.document.list_associations() == associations
    assert mirror.document.write_generation == generation


def test_create_item_keeps_existing_file_on_disk(tmp_path: Path) -> None:
    (tmp_path / "a.txt").write_text("precious")
    store = FileSystemItemStore(tmp_path)
    mirror = asyncio.run(ItemMirror.open(store))

    with pytest.raises(ItemExistsError):
        asyncio.run(
            mirror.create_association(
                CreateItem(display_text="a", item_name="a.txt", is_grouping_item=False)
            )
        )

    assert (tmp_path / "a.txt").read_text() == "precious"
    assert len(mirror.associations()) == 1


def test_delete_association_removes_store_item() -> None:
    store = InMemoryItemStore.with_entries(["a.txt", "docs/inner.txt"])
    mirror = _open(store)

    asyncio.run(mirror.delete_association(_by_local_item(mirror, "a.txt")))
    asyncio.run(mirror.delete_association(_by_local_item(mirror, "docs")))

    assert mirror.document.list_associations() == []
    assert list(store.items) == ["", "XooML2.xml"]


def test_delete_phantom_leaves_store_untouched() -> None:
    store = InMemoryItemStore.with_entries(["a.txt"])
    mirror = _open(store)
    note = asyncio.run(mirror.create_association(PhantomNote(display_text="note")))

    asyncio.run(mirror.delete_association(note))

    assert "a.txt" in store.items
    assert len(mirror.document) == 1


def test_failed_store_delete_keeps_association() -> None:
    store = FailingDeleteStore()
    store.items["a.txt"] = b""
    mirror = _open(store)
    guid = _by_local_item(mirror, "a.txt")

    with pytest.raises(StoreError):
        asyncio.run(mirror.delete_association(guid))

    assert mirror.document.list_associations() == [guid]


def test_rename_moves_item_and_updates_fragment_path() -> None:
    store = InMemoryItemStore.with_entries(["docs/"])
    mirror = _open(store)
    guid = _by_local_item(mirror, "docs")

    asyncio.run(mirror.rename_association_local_item(guid, "papers"))

    assert "papers" in store.items
    assert "docs" not in store.items
    assert mirror.document.get_association_local_item(guid) == "papers"
    assert mirror.document.get_association_associated_xooml_fragment(guid) == "papers/XooML2.xml"
    assert mirror.document.get_association_display_text(guid) == "docs"
    assert asyncio.run(mirror.refresh()).changed is False


def test_rename_requires_local_item() -> None:
    mirror = _open(InMemoryItemStore())
    note = asyncio.run(mirror.create_association(PhantomNote(display_text="note")))

    with pytest.raises(InvalidStateError):
        asyncio.run(mirror.rename_association_local_item(note, "other"))


def test_open_child_mirrors_the_grouping_item() -> None:
    store = InMemoryItemStore.with_entries(["docs/inner.txt", "a.txt"])
    mirror = _open(store)

    child = asyncio.run(mirror.open_child(_by_local_item(mirror, "docs")))

    assert child.creator is mirror
    assert child.folder == "docs"
    assert [record.local_item for record in child.associations()] == ["inner.txt"]
    assert "docs/XooML2.xml" in store.items

    with pytest.raises(InvalidStateError):
        asyncio.run(mirror.open_child(_by_local_item(mirror, "a.txt")))


def test_public_url_depends_on_store_support(tmp_path: Path) -> None:
    (tmp_path / "a.txt").write_text("a")
    memory = _open(InMemoryItemStore.with_entries(["a.txt"]))
    disk = asyncio.run(ItemMirror.open(FileSystemItemStore(tmp_path)))

    assert asyncio.run(memory.public_url(_by_local_item(memory, "a.txt"))) is None
    url = asyncio.run(disk.public_url(_by_local_item(disk, "a.txt")))
    assert url == (tmp_path / "a.txt").resolve().as_uri()


def test_namespace_config_defers_other_namespaces() -> None:
    store = InMemoryItemStore.with_entries(["a.txt"])
    mirror = _open(store)
    guid = _by_local_item(mirror, "a.txt")
    mirror.document.set_association_namespace_attribute("rank", "1", guid, "urn:other")
    asyncio.run(mirror.save())

    reopened = asyncio.run(
        ItemMirror.open(
            store,
            repository=StoreFragmentRepository(store),
            config=FragmentConfig(namespace="urn:mine"),
        )
    )

    assert reopened.document.get_association_namespace_attribute("rank", guid, "urn:other") == "1"


def test_open_filesystem_mirror_reads_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "a.txt").write_text("a")
    monkeypatch.setenv("ITEMMIRROR_ROOT", str(tmp_path))
    monkeypatch.setenv("ITEMMIRROR_FRAGMENT_FILENAME", "meta.xml")
    monkeypatch.setenv("ITEMMIRROR_ITEM_DRIVER", "disk")

    mirror = asyncio.run(open_filesystem_mirror())

    assert (tmp_path / "meta.xml").exists()
    assert mirror.document.item_driver == "disk"
    assert [record.local_item for record in mirror.associations()] == ["a.txt"]
