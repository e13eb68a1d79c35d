"""Public interface for the local filesystem adapter."""

from __future__ import annotations

from .client import FileSystemItemStore
from .schema import FileStat
from .translator import to_store_entry

__all__ = [
    "FileStat",
    "FileSystemItemStore",
    "to_store_entry",
]
