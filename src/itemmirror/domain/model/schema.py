"""XooML2 vocabulary: element names, attribute names and schema defaults."""

from __future__ import annotations

from typing import Final

XOOML_NAMESPACE: Final[str] = "http://kftf.ischool.washington.edu/xmlns/xooml"
XSI_NAMESPACE: Final[str] = "http://www.w3.org/2001/XMLSchema-instance"
XML_NAMESPACE: Final[str] = "http://www.w3.org/XML/1998/namespace"

DEFAULT_SCHEMA_VERSION: Final[str] = "0.54"
DEFAULT_SCHEMA_LOCATION: Final[str] = XOOML_NAMESPACE
DEFAULT_FRAGMENT_FILENAME: Final[str] = "XooML2.xml"
ITEM_DESCRIBED_SELF: Final[str] = "."
PATH_SEPARATOR: Final[str] = "/"

FRAGMENT_ELEMENT: Final[str] = "fragment"
ASSOCIATION_ELEMENT: Final[str] = "association"
FRAGMENT_NAMESPACE_ELEMENT: Final[str] = "fragmentNamespaceElement"
ASSOCIATION_NAMESPACE_ELEMENT: Final[str] = "associationNamespaceElement"
# Older writers used these names for the same containers.
FRAGMENT_NAMESPACE_ELEMENT_ALIASES: Final[frozenset[str]] = frozenset(
    {FRAGMENT_NAMESPACE_ELEMENT, "fragmentNamespaceData"}
)
ASSOCIATION_NAMESPACE_ELEMENT_ALIASES: Final[frozenset[str]] = frozenset(
    {ASSOCIATION_NAMESPACE_ELEMENT, "associationNamespaceData"}
)

# fragment common attributes
SCHEMA_VERSION: Final[str] = "schemaVersion"
SCHEMA_LOCATION: Final[str] = "schemaLocation"
ITEM_DESCRIBED: Final[str] = "itemDescribed"
DISPLAY_NAME: Final[str] = "displayName"
ITEM_DRIVER: Final[str] = "itemDriver"
SYNC_DRIVER: Final[str] = "syncDriver"
XOOML_DRIVER: Final[str] = "xooMLDriver"
WRITE_GENERATION: Final[str] = "GUIDGeneratedOnLastWrite"

FRAGMENT_COMMON_ATTRIBUTES: Final[tuple[str, ...]] = (
    SCHEMA_VERSION,
    SCHEMA_LOCATION,
    ITEM_DESCRIBED,
    DISPLAY_NAME,
    ITEM_DRIVER,
    SYNC_DRIVER,
    XOOML_DRIVER,
    WRITE_GENERATION,
)

# association common attributes
ASSOCIATION_ID: Final[str] = "ID"
DISPLAY_TEXT: Final[str] = "displayText"
ASSOCIATED_XOOML_FRAGMENT: Final[str] = "associatedXooMLFragment"
ASSOCIATED_XOOML_DRIVER: Final[str] = "associatedXooMLDriver"
ASSOCIATED_SYNC_DRIVER: Final[str] = "associatedSyncDriver"
ASSOCIATED_ITEM_DRIVER: Final[str] = "associatedItemDriver"
ASSOCIATED_ITEM: Final[str] = "associatedItem"
LOCAL_ITEM: Final[str] = "localItem"
IS_GROUPING: Final[str] = "isGrouping"

ASSOCIATION_COMMON_ATTRIBUTES: Final[tuple[str, ...]] = (
    ASSOCIATION_ID,
    DISPLAY_TEXT,
    ASSOCIATED_XOOML_FRAGMENT,
    ASSOCIATED_XOOML_DRIVER,
    ASSOCIATED_SYNC_DRIVER,
    ASSOCIATED_ITEM_DRIVER,
    ASSOCIATED_ITEM,
    LOCAL_ITEM,
    IS_GROUPING,
)


def join_path(root: str, leaf: str) -> str:
    """Join two store paths with a single separator."""

    if root in ("", ITEM_DESCRIBED_SELF, PATH_SEPARATOR):
        return leaf
    return root.rstrip(PATH_SEPARATOR) + PATH_SEPARATOR + leaf.lstrip(PATH_SEPARATOR)
