"""Fragment persistence on top of any item store."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from itemmirror.domain.model.schema import DEFAULT_FRAGMENT_FILENAME, join_path
from itemmirror.domain.ports import FragmentRepository

if TYPE_CHECKING:
    from itemmirror.domain.ports import ItemStore

log = getLogger(__name__)

ENCODING = "utf-8"


@dataclass(slots=True)
class StoreFragmentRepository:
    """Read and write ``<folder>/<fragment_filename>`` through ``store``."""

    store: ItemStore
    fragment_filename: str = DEFAULT_FRAGMENT_FILENAME

    def path_for(self, folder: str) -> str:
        return join_path(folder, self.fragment_filename)

    async def load(self, folder: str) -> str | None:
        path = self.path_for(folder)
        if not await self.store.exists(path):
            log.debug("No fragment at %s", path)
            return None
        content = await self.store.read_leaf(path)
        return content.decode(ENCODING)

    async def save(self, folder: str, text: str) -> None:
        path = self.path_for(folder)
        await self.store.create_leaf(path, text.encode(ENCODING))
        log.debug("Saved fragment to %s", path)


if TYPE_CHECKING:
    from itemmirror.adapters.memory import InMemoryItemStore

    _repository_check: FragmentRepository = StoreFragmentRepository(InMemoryItemStore())
