"""Public fragment model surface."""

from __future__ import annotations

from itemmirror.domain.model.association import AssociationFields, AssociationRecord
from itemmirror.domain.model.attributes import AttributeStore, ForeignElement, NamespaceData
from itemmirror.domain.model.fragment import FragmentDocument
from itemmirror.domain.model.requests import (
    CreateItem,
    CreationKind,
    CreationRequest,
    LinkGroupingItem,
    LinkItem,
    PhantomNote,
    creation_request_from_options,
)

__all__ = [
    "AssociationFields",
    "AssociationRecord",
    "AttributeStore",
    "CreateItem",
    "CreationKind",
    "CreationRequest",
    "ForeignElement",
    "FragmentDocument",
    "LinkGroupingItem",
    "LinkItem",
    "NamespaceData",
    "PhantomNote",
    "creation_request_from_options",
]
