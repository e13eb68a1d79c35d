"""Error taxonomy shared by the fragment model, the engine and the adapters."""

from __future__ import annotations


class ItemMirrorError(Exception):
    """Base class for all errors raised by itemmirror."""


class NullArgumentError(ItemMirrorError, ValueError):
    """Raised when a required argument is missing or empty."""


class InvalidTypeError(ItemMirrorError, TypeError):
    """Raised when an argument has the wrong type, including malformed GUIDs."""


class InvalidStateError(ItemMirrorError):
    """Raised when an operation's precondition on the current state does not hold."""


class InvalidArgumentError(ItemMirrorError, ValueError):
    """Raised when an argument refers to something that does not exist."""


class MissingParameterError(ItemMirrorError, ValueError):
    """Raised when creation options match none of the supported request shapes."""


class UnsupportedCreationKindError(ItemMirrorError, NotImplementedError):
    """Raised for recognised but unimplemented association creation kinds."""

    def __init__(self, message: str, *, kind: int) -> None:
        super().__init__(message)
        self.kind = kind


class FragmentParseError(ItemMirrorError, ValueError):
    """Raised when a serialized fragment cannot be parsed."""


class StoreError(ItemMirrorError):
    """Wraps any failure reported by an item store."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class ItemNotFoundError(StoreError):
    """Raised by item stores when a path does not exist."""


class ItemExistsError(StoreError):
    """Raised by item stores when creating a path that already exists."""


__all__ = [
    "FragmentParseError",
    "InvalidArgumentError",
    "InvalidStateError",
    "InvalidTypeError",
    "ItemExistsError",
    "ItemMirrorError",
    "ItemNotFoundError",
    "MissingParameterError",
    "NullArgumentError",
    "StoreError",
    "UnsupportedCreationKindError",
]
