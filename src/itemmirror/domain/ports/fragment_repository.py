"""Port for loading and saving serialized fragments."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class FragmentRepository(Protocol):
    """Persistence contract for the fragment describing one folder."""

    async def load(self, folder: str) -> str | None:
        """Return the serialized fragment for ``folder`` or ``None`` if none exists."""
        ...

    async def save(self, folder: str, text: str) -> None: ...


__all__ = ["FragmentRepository"]
