"""GUID helpers for association and fragment identities."""

from __future__ import annotations

import re
from uuid import uuid4

from .errors import InvalidTypeError, NullArgumentError

_GUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def new_guid() -> str:
    """Return a fresh random identity."""
    return str(uuid4())


def is_guid(value: object) -> bool:
    return isinstance(value, str) and _GUID_PATTERN.match(value) is not None


def require_guid(value: object) -> str:
    """Return ``value`` if it is a well-formed GUID, raising otherwise."""

    if value is None or value == "":
        raise NullArgumentError("GUID is required")
    if not isinstance(value, str) or _GUID_PATTERN.match(value) is None:
        raise InvalidTypeError(f"Expected a GUID, got {value!r}")
    return value
