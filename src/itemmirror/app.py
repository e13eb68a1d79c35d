"""Application orchestration entry points.

``ItemMirror`` is a session over one folder: it owns the parsed fragment, keeps
it reconciled with the item store and performs edits that touch both the store
and the fragment. Every store-backed edit persists the fragment afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from itemmirror.adapters.filesystem import FileSystemItemStore
from itemmirror.adapters.fragment_repository import StoreFragmentRepository
from itemmirror.config import FragmentConfig, get_fragment_config, get_storage_config
from itemmirror.domain.errors import InvalidStateError, ItemExistsError
from itemmirror.domain.model import CreateItem, FragmentDocument
from itemmirror.domain.model.attributes import require_text
from itemmirror.domain.model.schema import DEFAULT_FRAGMENT_FILENAME, join_path
from itemmirror.domain.ports import PublicUrlProvider, call_store
from itemmirror.domain.reconciliation import ReconciliationEngine

if TYPE_CHECKING:
    from pathlib import Path

    from itemmirror.domain.model import AssociationRecord, CreationRequest
    from itemmirror.domain.ports import FragmentRepository, ItemStore
    from itemmirror.domain.reconciliation import ReconciliationResult

log = getLogger(__name__)


@dataclass(slots=True, eq=False)
class ItemMirror:
    """Session binding a fragment to the folder it describes."""

    store: ItemStore
    folder: str
    document: FragmentDocument
    repository: FragmentRepository
    engine: ReconciliationEngine
    config: FragmentConfig = field(default_factory=FragmentConfig)
    creator: ItemMirror | None = None
    last_result: ReconciliationResult | None = None

    @classmethod
    async def open(
        cls,
        store: ItemStore,
        folder: str = "",
        *,
        repository: FragmentRepository | None = None,
        config: FragmentConfig | None = None,
        creator: ItemMirror | None = None,
    ) -> ItemMirror:
        """Load or synthesize the fragment for ``folder`` and reconcile it once."""

        config = config or FragmentConfig()
        repository = repository or StoreFragmentRepository(store)
        fragment_filename = getattr(repository, "fragment_filename", DEFAULT_FRAGMENT_FILENAME)

        text = await call_store(repository.load(folder), path=folder, action="load")
        if text is None:
            log.info("No fragment for %r; building one from the listing", folder or "/")
            document = FragmentDocument(
                item_driver=config.item_driver,
                sync_driver=config.sync_driver,
                xooml_driver=config.xooml_driver,
                fragment_filename=fragment_filename,
            )
        else:
            document = FragmentDocument.from_text(
                text, namespace=config.namespace, fragment_filename=fragment_filename
            )

        engine = ReconciliationEngine(
            store=store,
            repository=repository,
            ignored_names=frozenset({fragment_filename}),
        )
        mirror = cls(
            store=store,
            folder=folder,
            document=document,
            repository=repository,
            engine=engine,
            config=config,
            creator=creator,
        )
        await mirror.refresh()
        return mirror

    # ----------------------------------------------------------------- syncing

    async def refresh(self) -> ReconciliationResult:
        """Reconcile with the store and persist the fragment."""

        self.last_result = await self.engine.reconcile(self.document, self.folder)
        return self.last_result

    async def save(self) -> None:
        self.document.touch()
        await call_store(
            self.repository.save(self.folder, self.document.to_text()),
            path=self.folder,
            action="save",
        )

    # ------------------------------------------------------------------- edits

    async def create_association(self, request: CreationRequest) -> str:
        """Create an association; new items are created in the store first."""

        if isinstance(request, CreateItem):
            path = self._item_path(request.item_name)
            if await call_store(self.store.exists(path), path=path, action="create"):
                raise ItemExistsError(f"An item already exists at {path!r}", path=path)
            if request.is_grouping_item:
                await call_store(self.store.create_container(path), path=path, action="create")
            else:
                await call_store(self.store.create_leaf(path, b""), path=path, action="create")
            log.info("Created %s %s", "folder" if request.is_grouping_item else "item", path)
        guid = self.document.create_association(request)
        await self.save()
        return guid

    async def delete_association(self, guid: str) -> None:
        """Delete an association and, unless it has no local item, the item itself."""

        record = self.document.association(guid)
        if record.local_item:
            path = self._item_path(record.local_item)
            if record.is_grouping:
                await call_store(self.store.delete_container(path), path=path, action="delete")
            else:
                await call_store(self.store.delete_leaf(path), path=path, action="delete")
            log.info("Deleted %s", path)
        self.document.delete_association(guid)
        await self.save()

    async def rename_association_local_item(self, guid: str, new_name: str) -> None:
        new_name = require_text(new_name, label="new local item name")
        record = self.document.association(guid)
        old_name = record.local_item
        if not old_name:
            raise InvalidStateError(f"Association {guid} has no local item to rename")

        source = self._item_path(old_name)
        await call_store(
            self.store.move(source, self._item_path(new_name)), path=source, action="move"
        )
        self.document.set_association_local_item(guid, new_name)
        if record.associated_item == old_name:
            self.document.set_association_associated_item(guid, new_name)
        if record.is_grouping and record.associated_xooml_fragment == join_path(
            old_name, self.document.fragment_filename
        ):
            self.document.set_association_associated_xooml_fragment(
                guid, join_path(new_name, self.document.fragment_filename)
            )
        await self.save()

    # ----------------------------------------------------------------- queries

    async def open_child(self, guid: str) -> ItemMirror:
        """Open a session for the folder behind a grouping association."""

        record = self.document.association(guid)
        if not record.is_grouping:
            raise InvalidStateError(f"Association {guid} is not a grouping item")
        name = record.local_item or record.associated_item
        if not name:
            raise InvalidStateError(f"Association {guid} has no folder to open")
        return await ItemMirror.open(
            self.store,
            self._item_path(name),
            repository=self.repository,
            config=self.config,
            creator=self,
        )

    async def public_url(self, guid: str) -> str | None:
        record = self.document.association(guid)
        if not record.local_item or not isinstance(self.store, PublicUrlProvider):
            return None
        path = self._item_path(record.local_item)
        return await call_store(self.store.public_url(path), path=path, action="share")

    def associations(self) -> list[AssociationRecord]:
        return list(self.document)

    def _item_path(self, name: str) -> str:
        return join_path(self.folder, name)


async def open_filesystem_mirror(folder: str = "", *, root: Path | str | None = None) -> ItemMirror:
    """Open a session on local disk using environment configuration."""

    storage = get_storage_config(root=root)
    store = FileSystemItemStore(storage.resolve_root())
    repository = StoreFragmentRepository(store, fragment_filename=storage.fragment_filename)
    return await ItemMirror.open(
        store, folder, repository=repository, config=get_fragment_config()
    )
