"""Domain port definitions for adapters."""

from __future__ import annotations

from .fragment_repository import FragmentRepository
from .item_store import ItemStore, PublicUrlProvider, StoreEntry, call_store

__all__ = [
    "FragmentRepository",
    "ItemStore",
    "PublicUrlProvider",
    "StoreEntry",
    "call_store",
]
