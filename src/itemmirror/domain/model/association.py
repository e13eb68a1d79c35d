"""Association records: one entry of a fragment.

Two construction paths exist. ``AssociationRecord.from_element`` copies common
attributes verbatim from a parsed ``<association>`` element and leaves absent
ones as ``None``. ``AssociationRecord.from_fields`` builds a brand-new record
whose optional fields default to ``""``/``False`` and whose identity is always
freshly minted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from itemmirror.domain.errors import FragmentParseError
from itemmirror.domain.identity import new_guid

from . import schema
from .attributes import AttributeStore, ForeignElement
from .xml_codec import (
    INDENT,
    absorb_namespace_element,
    attribute_markup,
    capture,
    extension_lines,
    format_bool,
    is_namespace_container,
    load_foreign_namespace,
    namespace_lines,
    parse_bool,
    split_tag,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from xml.etree.ElementTree import Element

    from .xml_codec import SourceMarkup

# attribute name on the wire -> record field
_COMMON_FIELDS: dict[str, str] = {
    schema.ASSOCIATION_ID: "id",
    schema.DISPLAY_TEXT: "display_text",
    schema.ASSOCIATED_XOOML_FRAGMENT: "associated_xooml_fragment",
    schema.ASSOCIATED_XOOML_DRIVER: "associated_xooml_driver",
    schema.ASSOCIATED_SYNC_DRIVER: "associated_sync_driver",
    schema.ASSOCIATED_ITEM_DRIVER: "associated_item_driver",
    schema.ASSOCIATED_ITEM: "associated_item",
    schema.LOCAL_ITEM: "local_item",
    schema.IS_GROUPING: "is_grouping",
}


@dataclass(frozen=True, slots=True, kw_only=True)
class AssociationFields:
    """Caller-supplied values for a new association; the identity is never taken."""

    display_text: str = ""
    associated_xooml_fragment: str = ""
    associated_xooml_driver: str = ""
    associated_sync_driver: str = ""
    associated_item_driver: str = ""
    associated_item: str = ""
    local_item: str = ""
    is_grouping: bool = False


@dataclass(eq=False, kw_only=True)
class AssociationRecord:
    """Identity plus common and namespace attributes for one child entry."""

    id: str
    display_text: str | None = None
    associated_xooml_fragment: str | None = None
    associated_xooml_driver: str | None = None
    associated_sync_driver: str | None = None
    associated_item_driver: str | None = None
    associated_item: str | None = None
    local_item: str | None = None
    is_grouping: bool | None = None

    attributes: AttributeStore = field(default_factory=AttributeStore, repr=False)
    extensions: list[ForeignElement] = field(default_factory=list[ForeignElement], repr=False)
    # unknown attributes on the <association> element, keyed by Clark name
    extra_attributes: dict[str, str] = field(default_factory=dict[str, str], repr=False)

    # ----------------------------------------------------------------- building

    @classmethod
    def from_fields(
        cls,
        fields: AssociationFields,
        *,
        on_change: Callable[[], None] | None = None,
    ) -> AssociationRecord:
        return cls(
            id=new_guid(),
            display_text=fields.display_text or "",
            associated_xooml_fragment=fields.associated_xooml_fragment or "",
            associated_xooml_driver=fields.associated_xooml_driver or "",
            associated_sync_driver=fields.associated_sync_driver or "",
            associated_item_driver=fields.associated_item_driver or "",
            associated_item=fields.associated_item or "",
            local_item=fields.local_item or "",
            is_grouping=bool(fields.is_grouping),
            attributes=AttributeStore(on_change=on_change, loader=load_foreign_namespace),
        )

    @classmethod
    def from_element(
        cls,
        element: Element,
        *,
        active_namespace: str | None = None,
        on_change: Callable[[], None] | None = None,
        source: SourceMarkup | None = None,
    ) -> AssociationRecord:
        values: dict[str, str | bool | None] = {}
        extra: dict[str, str] = {}
        for name, value in element.attrib.items():
            uri, local = split_tag(name)
            field_name = _COMMON_FIELDS.get(local) if uri in (None, schema.XOOML_NAMESPACE) else None
            if field_name is None:
                extra[name] = value
            elif field_name == "is_grouping":
                values[field_name] = parse_bool(value)
            else:
                values[field_name] = value

        identity = values.pop("id", None)
        if not isinstance(identity, str) or not identity:
            raise FragmentParseError("association element is missing its ID attribute")

        store = AttributeStore(on_change=on_change, loader=load_foreign_namespace)
        extensions: list[ForeignElement] = []
        for child in element:
            if is_namespace_container(child, schema.ASSOCIATION_NAMESPACE_ELEMENT_ALIASES):
                absorb_namespace_element(
                    child, store, extensions, active_namespace=active_namespace, source=source
                )
            else:
                extensions.append(capture(child, source=source))

        return cls(
            id=identity,
            attributes=store,
            extensions=extensions,
            extra_attributes=extra,
            **values,  # type: ignore[arg-type]
        )

    # ------------------------------------------------------------------ queries

    @property
    def is_phantom(self) -> bool:
        """True when the association does not stand for a stored item."""
        return not (self.is_grouping or self.local_item)

    @property
    def child_fragment_path(self) -> str | None:
        """Path of the fragment describing this association's grouping item."""

        if not self.is_grouping:
            return None
        if self.associated_xooml_fragment:
            return self.associated_xooml_fragment
        folder = self.local_item or self.associated_item
        if not folder:
            return None
        return schema.join_path(folder, schema.DEFAULT_FRAGMENT_FILENAME)

    def common_attributes(self) -> dict[str, str]:
        """Common attributes as they appear on the wire, skipping absent ones."""

        rendered: dict[str, str] = {}
        for wire_name, field_name in _COMMON_FIELDS.items():
            value = getattr(self, field_name)
            if value is None:
                continue
            rendered[wire_name] = format_bool(value) if isinstance(value, bool) else value
        return rendered

    # ---------------------------------------------------------------- emission

    def to_lines(self, *, depth: int = 1) -> list[str]:
        attributes = attribute_markup(
            [*self.common_attributes().items(), *self.extra_attributes.items()]
        )
        children = [
            *namespace_lines(schema.ASSOCIATION_NAMESPACE_ELEMENT, self.attributes, depth=depth + 1),
            *extension_lines(self.extensions, depth=depth + 1),
        ]
        indent = INDENT * depth
        opening = f"{indent}<{schema.ASSOCIATION_ELEMENT}{attributes}"
        if not children:
            return [opening + "/>"]
        return [opening + ">", *children, f"{indent}</{schema.ASSOCIATION_ELEMENT}>"]

