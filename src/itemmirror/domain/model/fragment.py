"""Fragment documents: the XooML2 metadata describing one grouping item.

A ``FragmentDocument`` is an explicit in-memory model: fragment common
attributes, fragment-level namespace data and an ordered collection of
``AssociationRecord`` keyed by identity. ``to_text``/``from_text`` convert it to
and from the persisted XML form. Elements the model does not understand are
carried along as ``ForeignElement`` markup.

Every successful mutation regenerates ``write_generation``, which doubles as an
ETag for the persisted fragment.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, overload

from itemmirror.domain.errors import (
    FragmentParseError,
    InvalidArgumentError,
    InvalidTypeError,
    UnsupportedCreationKindError,
)
from itemmirror.domain.identity import new_guid, require_guid

from . import schema
from .association import AssociationFields, AssociationRecord
from .attributes import AttributeStore, ForeignElement, require_text
from .requests import (
    CREATION_REQUEST_TYPES,
    CreateItem,
    LinkGroupingItem,
    LinkItem,
    PhantomNote,
)
from .xml_codec import (
    SourceMarkup,
    absorb_namespace_element,
    attribute_markup,
    capture,
    extension_lines,
    is_namespace_container,
    load_foreign_namespace,
    namespace_lines,
    parse_root,
    split_tag,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .requests import CreationRequest

log = getLogger(__name__)


class _CommonAttribute:
    """Fragment common attribute exposed as a property that bumps the generation."""

    def __init__(self, wire_name: str) -> None:
        self.wire_name = wire_name

    @overload
    def __get__(self, instance: None, owner: type[FragmentDocument]) -> _CommonAttribute: ...

    @overload
    def __get__(self, instance: FragmentDocument, owner: type[FragmentDocument]) -> str | None: ...

    def __get__(
        self, instance: FragmentDocument | None, owner: type[FragmentDocument]
    ) -> _CommonAttribute | str | None:
        if instance is None:
            return self
        return instance._common.get(self.wire_name)  # noqa: SLF001

    def __set__(self, instance: FragmentDocument, value: str) -> None:
        if not isinstance(value, str):
            raise InvalidTypeError(f"{self.wire_name} must be a string, got {value!r}")
        instance._common[self.wire_name] = value  # noqa: SLF001
        instance.touch()


class FragmentDocument:
    """In-memory XooML2 fragment with association and namespace accessors."""

    schema_version = _CommonAttribute(schema.SCHEMA_VERSION)
    schema_location = _CommonAttribute(schema.SCHEMA_LOCATION)
    item_described = _CommonAttribute(schema.ITEM_DESCRIBED)
    display_name = _CommonAttribute(schema.DISPLAY_NAME)
    item_driver = _CommonAttribute(schema.ITEM_DRIVER)
    sync_driver = _CommonAttribute(schema.SYNC_DRIVER)
    xooml_driver = _CommonAttribute(schema.XOOML_DRIVER)

    def __init__(
        self,
        *,
        schema_version: str | None = schema.DEFAULT_SCHEMA_VERSION,
        schema_location: str | None = schema.DEFAULT_SCHEMA_LOCATION,
        item_described: str | None = schema.ITEM_DESCRIBED_SELF,
        display_name: str | None = None,
        item_driver: str | None = None,
        sync_driver: str | None = None,
        xooml_driver: str | None = None,
        write_generation: str | None = None,
        fragment_filename: str = schema.DEFAULT_FRAGMENT_FILENAME,
    ) -> None:
        self._common: dict[str, str | None] = {
            schema.SCHEMA_VERSION: schema_version,
            schema.SCHEMA_LOCATION: schema_location,
            schema.ITEM_DESCRIBED: item_described,
            schema.DISPLAY_NAME: display_name,
            schema.ITEM_DRIVER: item_driver,
            schema.SYNC_DRIVER: sync_driver,
            schema.XOOML_DRIVER: xooml_driver,
            schema.WRITE_GENERATION: write_generation or new_guid(),
        }
        self.fragment_filename = fragment_filename
        self._associations: dict[str, AssociationRecord] = {}
        self._attributes = AttributeStore(on_change=self.touch, loader=load_foreign_namespace)
        self._extensions: list[ForeignElement] = []
        self._extra_attributes: dict[str, str] = {}

    # ------------------------------------------------------------ write marker

    @property
    def write_generation(self) -> str | None:
        return self._common[schema.WRITE_GENERATION]

    def touch(self) -> str:
        """Regenerate the write generation and return it."""

        generation = new_guid()
        self._common[schema.WRITE_GENERATION] = generation
        return generation

    def list_fragment_common_attributes(self) -> list[str]:
        names = [name for name in schema.FRAGMENT_COMMON_ATTRIBUTES if self._common.get(name)]
        return names + list(self._extra_attributes)

    # ------------------------------------------------------------ associations

    def create_association(self, request: CreationRequest) -> str:
        """Add an association described by ``request`` and return its identity."""

        if not isinstance(request, CREATION_REQUEST_TYPES):
            raise InvalidTypeError(f"Unknown creation request {type(request).__name__}")

        if isinstance(request, PhantomNote):
            fields = AssociationFields(display_text=request.display_text)
        elif isinstance(request, LinkItem):
            if request.local_item_requested:
                raise UnsupportedCreationKindError(
                    "Linking an item with a local copy is not supported", kind=request.kind
                )
            fields = AssociationFields(
                display_text=request.display_text,
                associated_item=request.item_uri,
            )
        elif isinstance(request, LinkGroupingItem):
            raise UnsupportedCreationKindError(
                "Linking an existing grouping item is not supported", kind=request.kind
            )
        else:
            fields = self._fields_for_new_item(request)

        record = AssociationRecord.from_fields(fields, on_change=self.touch)
        self._associations[record.id] = record
        self.touch()
        log.debug("Created %s association %s (%s)", request.kind.name, record.id, fields.display_text)
        return record.id

    def _fields_for_new_item(self, request: CreateItem) -> AssociationFields:
        fragment_path = (
            schema.join_path(request.item_name, self.fragment_filename)
            if request.is_grouping_item
            else ""
        )
        return AssociationFields(
            display_text=request.display_text,
            associated_item=request.item_name,
            local_item=request.item_name,
            associated_xooml_fragment=fragment_path,
            is_grouping=request.is_grouping_item,
        )

    def delete_association(self, guid: str) -> None:
        guid = require_guid(guid)
        if guid not in self._associations:
            raise InvalidArgumentError(f"Association {guid} does not exist")
        del self._associations[guid]
        self.touch()

    def list_associations(self) -> list[str]:
        return list(self._associations)

    def association(self, guid: str) -> AssociationRecord:
        guid = require_guid(guid)
        try:
            return self._associations[guid]
        except KeyError as exc:
            raise InvalidArgumentError(f"Association {guid} does not exist") from exc

    def __iter__(self) -> Iterator[AssociationRecord]:
        return iter(list(self._associations.values()))

    def __len__(self) -> int:
        return len(self._associations)

    # ------------------------------------------------ association common data

    def get_association_display_text(self, guid: str) -> str | None:
        return self.association(guid).display_text

    def set_association_display_text(self, guid: str, display_text: str) -> None:
        self._set_association_field(guid, "display_text", display_text)

    def get_association_local_item(self, guid: str) -> str | None:
        return self.association(guid).local_item

    def set_association_local_item(self, guid: str, local_item: str) -> None:
        self._set_association_field(guid, "local_item", local_item)

    def get_association_associated_item(self, guid: str) -> str | None:
        return self.association(guid).associated_item

    def set_association_associated_item(self, guid: str, associated_item: str) -> None:
        self._set_association_field(guid, "associated_item", associated_item)

    def get_association_associated_xooml_fragment(self, guid: str) -> str | None:
        return self.association(guid).associated_xooml_fragment

    def set_association_associated_xooml_fragment(self, guid: str, fragment_uri: str) -> None:
        self._set_association_field(guid, "associated_xooml_fragment", fragment_uri)

    def get_association_associated_xooml_driver(self, guid: str) -> str | None:
        return self.association(guid).associated_xooml_driver

    def set_association_associated_xooml_driver(self, guid: str, driver: str) -> None:
        self._set_association_field(guid, "associated_xooml_driver", driver)

    def get_association_associated_sync_driver(self, guid: str) -> str | None:
        return self.association(guid).associated_sync_driver

    def set_association_associated_sync_driver(self, guid: str, driver: str) -> None:
        self._set_association_field(guid, "associated_sync_driver", driver)

    def get_association_associated_item_driver(self, guid: str) -> str | None:
        return self.association(guid).associated_item_driver

    def set_association_associated_item_driver(self, guid: str, driver: str) -> None:
        self._set_association_field(guid, "associated_item_driver", driver)

    def is_association_grouping(self, guid: str) -> bool:
        return bool(self.association(guid).is_grouping)

    def set_association_grouping(self, guid: str, is_grouping: bool) -> None:
        record = self.association(guid)
        if not isinstance(is_grouping, bool):
            raise InvalidTypeError(f"is_grouping must be a bool, got {is_grouping!r}")
        record.is_grouping = is_grouping
        self.touch()

    def is_association_phantom(self, guid: str) -> bool:
        return self.association(guid).is_phantom

    def get_association_child_fragment_path(self, guid: str) -> str | None:
        return self.association(guid).child_fragment_path

    def list_association_common_attributes(self, guid: str) -> list[str]:
        record = self.association(guid)
        return list(record.common_attributes()) + list(record.extra_attributes)

    def _set_association_field(self, guid: str, field_name: str, value: str) -> None:
        record = self.association(guid)
        if not isinstance(value, str):
            raise InvalidTypeError(f"{field_name} must be a string, got {value!r}")
        setattr(record, field_name, value)
        self.touch()

    # ------------------------------------------------ fragment namespace data

    def get_fragment_namespace_attribute(self, name: str, namespace: str) -> str | None:
        return self._attributes.get(name, namespace)

    def set_fragment_namespace_attribute(self, name: str, value: str, namespace: str) -> None:
        self._attributes.set(name, value, namespace)

    def add_fragment_namespace_attribute(self, name: str, namespace: str) -> None:
        self._attributes.add(name, namespace)

    def remove_fragment_namespace_attribute(self, name: str, namespace: str) -> None:
        self._attributes.remove(name, namespace)

    def list_fragment_namespace_attributes(self, namespace: str) -> list[str]:
        return self._attributes.list_attributes(namespace)

    def has_fragment_namespace(self, namespace: str) -> bool:
        return self._attributes.has_namespace(namespace)

    def get_fragment_namespace_data(self, namespace: str) -> str | None:
        return self._attributes.get_data(namespace)

    def set_fragment_namespace_data(self, data: str, namespace: str) -> None:
        self._attributes.set_data(data, namespace)

    def list_fragment_namespaces(self) -> list[str]:
        return self._attributes.namespaces()

    # --------------------------------------------- association namespace data

    def get_association_namespace_attribute(
        self, name: str, guid: str, namespace: str
    ) -> str | None:
        return self.association(guid).attributes.get(name, namespace)

    def set_association_namespace_attribute(
        self, name: str, value: str, guid: str, namespace: str
    ) -> None:
        self.association(guid).attributes.set(name, value, namespace)

    def add_association_namespace_attribute(self, name: str, guid: str, namespace: str) -> None:
        self.association(guid).attributes.add(name, namespace)

    def remove_association_namespace_attribute(self, name: str, guid: str, namespace: str) -> None:
        self.association(guid).attributes.remove(name, namespace)

    def list_association_namespace_attributes(self, guid: str, namespace: str) -> list[str]:
        return self.association(guid).attributes.list_attributes(namespace)

    def has_association_namespace(self, guid: str, namespace: str) -> bool:
        return self.association(guid).attributes.has_namespace(namespace)

    def get_association_namespace_data(self, guid: str, namespace: str) -> str | None:
        return self.association(guid).attributes.get_data(namespace)

    def set_association_namespace_data(self, data: str, guid: str, namespace: str) -> None:
        self.association(guid).attributes.set_data(data, namespace)

    # ------------------------------------------------------------ serializing

    def to_text(self) -> str:
        """Render the canonical XooML2 form of this fragment."""

        common = [(name, value) for name, value in self._common.items() if value is not None]
        attributes = attribute_markup([*common, *self._extra_attributes.items()])
        lines = [f"<{schema.FRAGMENT_ELEMENT} xmlns=\"{schema.XOOML_NAMESPACE}\"{attributes}>"]
        lines.extend(namespace_lines(schema.FRAGMENT_NAMESPACE_ELEMENT, self._attributes, depth=1))
        lines.extend(extension_lines(self._extensions, depth=1))
        for record in self._associations.values():
            lines.extend(record.to_lines(depth=1))
        lines.append(f"</{schema.FRAGMENT_ELEMENT}>")
        return "\n".join(lines) + "\n"

    @classmethod
    def from_text(
        cls,
        text: str | bytes,
        *,
        namespace: str | None = None,
        fragment_filename: str = schema.DEFAULT_FRAGMENT_FILENAME,
    ) -> FragmentDocument:
        """Parse a serialized fragment.

        ``namespace`` names the namespace this consumer owns. When given, namespace
        containers for any other URI are preserved as raw markup until addressed.
        Children may appear in any order.
        """

        if text is None:
            raise FragmentParseError("fragment text is required")
        root = parse_root(text)
        source = SourceMarkup.scan(text, root)
        uri, local = split_tag(root.tag)
        if local != schema.FRAGMENT_ELEMENT or uri not in (None, schema.XOOML_NAMESPACE):
            raise FragmentParseError(f"Expected a <fragment> root element, got {root.tag}")
        if namespace is not None:
            namespace = require_text(namespace, label="namespace URI")

        document = cls(
            schema_version=None,
            schema_location=None,
            item_described=None,
            write_generation=None,
            fragment_filename=fragment_filename,
        )
        document._common[schema.WRITE_GENERATION] = None
        document._load_root_attributes(root.attrib)

        for child in root:
            child_uri, child_local = split_tag(child.tag)
            if child_local == schema.ASSOCIATION_ELEMENT and child_uri in (
                None,
                schema.XOOML_NAMESPACE,
            ):
                record = AssociationRecord.from_element(
                    child, active_namespace=namespace, on_change=document.touch, source=source
                )
                if record.id in document._associations:
                    raise FragmentParseError(f"Duplicate association ID {record.id}")
                document._associations[record.id] = record
            elif is_namespace_container(child, schema.FRAGMENT_NAMESPACE_ELEMENT_ALIASES):
                absorb_namespace_element(
                    child,
                    document._attributes,
                    document._extensions,
                    active_namespace=namespace,
                    source=source,
                )
            else:
                document._extensions.append(capture(child, source=source))
        return document

    def _load_root_attributes(self, attributes: dict[str, str]) -> None:
        for name, value in attributes.items():
            uri, local = split_tag(name)
            if uri in (None, schema.XOOML_NAMESPACE) and local in self._common:
                self._common[local] = value
            else:
                self._extra_attributes[name] = value

    def __repr__(self) -> str:
        return (
            f"FragmentDocument(item_described={self.item_described!r}, "
            f"associations={len(self._associations)}, "
            f"write_generation={self.write_generation!r})"
        )
