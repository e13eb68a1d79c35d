"""Reconcile a fragment's associations with a live listing of its folder.

The engine never learns what changed in the store. It diffs the document's
local items against the current listing and then persists the result:

1. snapshot ``(id, local_item)`` pairs in document order
2. list the folder once and keep a working copy of the entries
3. removal pass: each association with a local item consumes the first entry
   of the same name; associations without a match are deleted
4. addition pass: every unconsumed entry becomes a new association
5. save the serialized document through the fragment repository

Store calls are awaited one at a time. A failure aborts the remaining steps and
leaves earlier document mutations in place.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from itemmirror.domain.model.requests import CreateItem
from itemmirror.domain.model.schema import DEFAULT_FRAGMENT_FILENAME
from itemmirror.domain.ports.item_store import call_store

if TYPE_CHECKING:
    from itemmirror.domain.model.fragment import FragmentDocument
    from itemmirror.domain.ports import FragmentRepository, ItemStore, StoreEntry

log = getLogger(__name__)


@dataclass(slots=True)
class ReconciliationResult:
    """Identities touched by one reconciliation run."""

    removed: list[str] = field(default_factory=list[str])
    added: list[str] = field(default_factory=list[str])
    kept: list[str] = field(default_factory=list[str])
    persisted: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.removed or self.added)


@dataclass(slots=True)
class ReconciliationEngine:
    """Make a fragment's association list match its folder, then persist it."""

    store: ItemStore
    repository: FragmentRepository
    ignored_names: frozenset[str] = frozenset({DEFAULT_FRAGMENT_FILENAME})

    async def reconcile(self, document: FragmentDocument, folder: str) -> ReconciliationResult:
        result = ReconciliationResult()
        snapshot = [(record.id, record.local_item) for record in document]

        listing = await call_store(self.store.list(folder), path=folder, action="list")
        ignored = self.ignored_names | {document.fragment_filename}
        remaining: list[StoreEntry] = [entry for entry in listing if entry.name not in ignored]

        for guid, local_item in snapshot:
            if not local_item:
                continue
            index = _first_match(remaining, local_item)
            if index is None:
                document.delete_association(guid)
                result.removed.append(guid)
                log.info("Removed association %s: %s no longer in %s", guid, local_item, folder)
            else:
                del remaining[index]
                result.kept.append(guid)

        for entry in remaining:
            guid = document.create_association(
                CreateItem(
                    display_text=entry.name,
                    item_name=entry.name,
                    is_grouping_item=entry.is_container,
                )
            )
            result.added.append(guid)
            log.info("Added association %s for %s in %s", guid, entry.name, folder)

        await call_store(
            self.repository.save(folder, document.to_text()), path=folder, action="save"
        )
        result.persisted = True
        log.debug(
            "Reconciled %s: %d removed, %d added, %d kept",
            folder,
            len(result.removed),
            len(result.added),
            len(result.kept),
        )
        return result

    def reconcile_sync(self, document: FragmentDocument, folder: str) -> ReconciliationResult:
        """Blocking wrapper around ``reconcile`` for synchronous callers."""
        return asyncio.run(self.reconcile(document, folder))


def _first_match(entries: list[StoreEntry], name: str) -> int | None:
    for index, entry in enumerate(entries):
        if entry.name == name:
            return index
    return None


__all__ = ["ReconciliationEngine", "ReconciliationResult"]
