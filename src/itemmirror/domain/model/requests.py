"""Association creation requests.

Each request variant carries exactly the fields its creation kind needs and
validates them on construction, so ``FragmentDocument.create_association`` can
dispatch on the variant type alone.

Kinds (numbering follows the XooML tooling):

1. phantom text association (``PhantomNote``)
2. link to an existing non-grouping item (``LinkItem``)
3. link to an existing non-grouping item with a local copy (unsupported)
4. link to an existing grouping item (unsupported)
5. link to an existing grouping item with a local copy (unsupported)
6. new local non-grouping item (``CreateItem``)
7. new local grouping item (``CreateItem`` with ``is_grouping_item=True``)
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import IntEnum
from typing import TypeAlias

from itemmirror.domain.errors import InvalidTypeError, MissingParameterError, NullArgumentError


class CreationKind(IntEnum):
    PHANTOM = 1
    LINK_NON_GROUPING = 2
    LINK_NON_GROUPING_LOCAL = 3
    LINK_GROUPING = 4
    LINK_GROUPING_LOCAL = 5
    CREATE_NON_GROUPING = 6
    CREATE_GROUPING = 7


def _require_field(value: object, name: str) -> None:
    if value is None or value == "":
        raise MissingParameterError(f"{name} is required")
    if not isinstance(value, str):
        raise InvalidTypeError(f"{name} must be a string, got {type(value).__name__}")


def _require_flag(value: object, name: str) -> None:
    if not isinstance(value, bool):
        raise InvalidTypeError(f"{name} must be a bool, got {type(value).__name__}")


@dataclass(frozen=True, slots=True, kw_only=True)
class PhantomNote:
    """Metadata-only association that never maps to a stored item."""

    display_text: str

    def __post_init__(self) -> None:
        _require_field(self.display_text, "display_text")

    @property
    def kind(self) -> CreationKind:
        return CreationKind.PHANTOM


@dataclass(frozen=True, slots=True, kw_only=True)
class LinkItem:
    """Association pointing at an existing non-grouping item by URI."""

    display_text: str
    item_uri: str
    local_item_requested: bool = False

    def __post_init__(self) -> None:
        _require_field(self.display_text, "display_text")
        _require_field(self.item_uri, "item_uri")
        _require_flag(self.local_item_requested, "local_item_requested")

    @property
    def kind(self) -> CreationKind:
        if self.local_item_requested:
            return CreationKind.LINK_NON_GROUPING_LOCAL
        return CreationKind.LINK_NON_GROUPING


@dataclass(frozen=True, slots=True, kw_only=True)
class LinkGroupingItem:
    """Association pointing at an existing grouping item and its fragment driver."""

    display_text: str
    grouping_item_uri: str
    xooml_driver_uri: str
    local_item_requested: bool = False

    def __post_init__(self) -> None:
        _require_field(self.display_text, "display_text")
        _require_field(self.grouping_item_uri, "grouping_item_uri")
        _require_field(self.xooml_driver_uri, "xooml_driver_uri")
        _require_flag(self.local_item_requested, "local_item_requested")

    @property
    def kind(self) -> CreationKind:
        if self.local_item_requested:
            return CreationKind.LINK_GROUPING_LOCAL
        return CreationKind.LINK_GROUPING


@dataclass(frozen=True, slots=True, kw_only=True)
class CreateItem:
    """Association for a new item stored alongside the fragment."""

    display_text: str
    item_name: str
    is_grouping_item: bool

    def __post_init__(self) -> None:
        _require_field(self.display_text, "display_text")
        _require_field(self.item_name, "item_name")
        _require_flag(self.is_grouping_item, "is_grouping_item")

    @property
    def kind(self) -> CreationKind:
        if self.is_grouping_item:
            return CreationKind.CREATE_GROUPING
        return CreationKind.CREATE_NON_GROUPING


CreationRequest: TypeAlias = PhantomNote | LinkItem | LinkGroupingItem | CreateItem

CREATION_REQUEST_TYPES = (PhantomNote, LinkItem, LinkGroupingItem, CreateItem)

# (required keys, optional keys) per request shape
_OPTION_SHAPES: tuple[tuple[type[CreationRequest], frozenset[str], frozenset[str]], ...] = (
    (PhantomNote, frozenset({"display_text"}), frozenset()),
    (LinkItem, frozenset({"display_text", "item_uri"}), frozenset({"local_item_requested"})),
    (
        LinkGroupingItem,
        frozenset({"display_text", "grouping_item_uri", "xooml_driver_uri"}),
        frozenset({"local_item_requested"}),
    ),
    (CreateItem, frozenset({"display_text", "item_name", "is_grouping_item"}), frozenset()),
)


def creation_request_from_options(options: Mapping[str, object] | None) -> CreationRequest:
    """Pick the request variant whose field set matches ``options`` exactly.

    All required keys must be present and no keys outside the variant's
    required and optional sets may appear; otherwise ``MissingParameterError``.
    """

    if options is None:
        raise NullArgumentError("creation options are required")
    if not isinstance(options, Mapping):
        raise InvalidTypeError(f"creation options must be a mapping, got {type(options).__name__}")

    keys = frozenset(options)
    for request_type, required, optional in _OPTION_SHAPES:
        if required <= keys <= required | optional:
            return request_type(**options)  # type: ignore[arg-type]
    raise MissingParameterError(
        f"creation options {sorted(keys)} do not match any association creation kind"
    )
