"""Translate filesystem stat records into domain store entries."""

from __future__ import annotations

from typing import TYPE_CHECKING

from itemmirror.domain.ports import StoreEntry

if TYPE_CHECKING:
    from .schema import FileStat


def to_store_entry(stat: FileStat) -> StoreEntry:
    return StoreEntry(name=stat.name, is_container=stat.is_dir, path=stat.path)


__all__ = ["to_store_entry"]
