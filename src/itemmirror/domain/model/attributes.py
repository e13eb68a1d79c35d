"""Namespace-partitioned attribute storage.

Every fragment and every association owns one ``AttributeStore``. The store maps
a namespace URI to a ``NamespaceData`` container holding string attributes and a
single opaque data payload. Containers for namespaces the current consumer does
not own are kept as ``ForeignElement`` markup until somebody writes to them.

Mutations are reported to the owning document through ``on_change`` so that the
fragment's write generation moves with every successful write.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeAlias

from itemmirror.domain.errors import InvalidStateError, InvalidTypeError, NullArgumentError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

DEFAULT_ADDED_VALUE = ""
_ATTRIBUTE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_.\-]*$")


@dataclass(frozen=True, slots=True)
class ForeignElement:
    """An XML element kept as serialized markup and re-emitted unchanged."""

    markup: str
    tag: str
    namespace_uri: str | None = None


@dataclass(slots=True)
class NamespaceData:
    """Attributes and opaque payload an application stores under one namespace."""

    attributes: dict[str, str] = field(default_factory=dict[str, str])
    data: str = ""
    extensions: list[ForeignElement] = field(default_factory=list[ForeignElement])


NamespaceLoader: TypeAlias = "Callable[[ForeignElement], NamespaceData]"


def _noop() -> None:
    return None


def require_text(value: object, *, label: str) -> str:
    if value is None or value == "":
        raise NullArgumentError(f"{label} is required")
    if not isinstance(value, str):
        raise InvalidTypeError(f"{label} must be a string, got {type(value).__name__}")
    return value


def require_attribute_name(value: object) -> str:
    name = require_text(value, label="attribute name")
    if _ATTRIBUTE_NAME.match(name) is None or name.lower().startswith("xmlns"):
        raise InvalidTypeError(f"{name!r} is not a valid attribute name")
    return name


class AttributeStore:
    """Attribute container addressed by (namespace, name) for one owner."""

    def __init__(
        self,
        *,
        on_change: Callable[[], None] | None = None,
        loader: NamespaceLoader | None = None,
    ) -> None:
        self._entries: dict[str, NamespaceData | ForeignElement] = {}
        self._on_change = on_change or _noop
        self._loader = loader

    # ------------------------------------------------------------------ queries

    def get(self, name: str, namespace: str) -> str | None:
        name = require_text(name, label="attribute name")
        container = self._container(namespace, create=False)
        if container is None:
            return None
        return container.attributes.get(name)

    def list_attributes(self, namespace: str) -> list[str]:
        container = self._container(namespace, create=False)
        if container is None:
            return []
        return list(container.attributes)

    def has_namespace(self, namespace: str) -> bool:
        namespace = require_text(namespace, label="namespace URI")
        return namespace in self._entries

    def namespaces(self) -> list[str]:
        return list(self._entries)

    def get_data(self, namespace: str) -> str | None:
        container = self._container(namespace, create=False)
        if container is None:
            return None
        return container.data

    # ---------------------------------------------------------------- mutations

    def set(self, name: str, value: str, namespace: str) -> None:
        name = require_attribute_name(name)
        if not isinstance(value, str):
            raise InvalidTypeError(f"attribute value must be a string, got {value!r}")
        container = self._writable(namespace)
        container.attributes[name] = value
        self._on_change()

    def add(self, name: str, namespace: str) -> None:
        name = require_attribute_name(name)
        container = self._writable(namespace)
        if name in container.attributes:
            raise InvalidStateError(f"attribute {name!r} already exists in {namespace}")
        container.attributes[name] = DEFAULT_ADDED_VALUE
        self._on_change()

    def remove(self, name: str, namespace: str) -> None:
        name = require_text(name, label="attribute name")
        container = self._container(namespace, create=False)
        if container is None or name not in container.attributes:
            raise InvalidStateError(f"attribute {name!r} does not exist in {namespace}")
        del self._writable(namespace).attributes[name]
        self._on_change()

    def set_data(self, data: str, namespace: str) -> None:
        if data is None:
            raise NullArgumentError("namespace data is required")
        if not isinstance(data, str):
            raise InvalidTypeError(f"namespace data must be a string, got {type(data).__name__}")
        container = self._writable(namespace)
        container.data = data
        self._on_change()

    # ------------------------------------------------------- codec entry points

    def load(self, namespace: str, container: NamespaceData) -> None:
        """Install a parsed container without reporting a change."""
        self._entries[namespace] = container

    def defer(self, namespace: str, element: ForeignElement) -> None:
        """Keep a namespace container as markup until it is written to."""
        self._entries[namespace] = element

    def items(self) -> Iterator[tuple[str, NamespaceData | ForeignElement]]:
        yield from self._entries.items()

    # ------------------------------------------------------------------ helpers

    def _container(self, namespace: str, *, create: bool) -> NamespaceData | None:
        namespace = require_text(namespace, label="namespace URI")
        entry = self._entries.get(namespace)
        if isinstance(entry, ForeignElement):
            entry = self._promote(namespace, entry) if create else self._peek(namespace, entry)
        if entry is None and create:
            entry = NamespaceData()
            self._entries[namespace] = entry
        return entry

    def _writable(self, namespace: str) -> NamespaceData:
        container = self._container(namespace, create=True)
        if container is None:
            raise InvalidStateError(f"namespace {namespace} cannot be written")
        return container

    def _peek(self, namespace: str, element: ForeignElement) -> NamespaceData:
        # readers get a parsed copy; the preserved markup stays in place
        if self._loader is None:
            raise InvalidStateError(f"namespace {namespace} is preserved as raw markup")
        return self._loader(element)

    def _promote(self, namespace: str, element: ForeignElement) -> NamespaceData:
        container = self._peek(namespace, element)
        self._entries[namespace] = container
        return container

    def __contains__(self, namespace: object) -> bool:
        return namespace in self._entries

    def __len__(self) -> int:
        return len(self._entries)
