"""Low-level XooML2 XML helpers.

Parsing goes through ``xml.etree.ElementTree``; ``SourceMarkup`` remembers where
each element sat in the input so foreign elements are re-emitted as they were
read. Emission is written by hand so the fragment keeps XooML as its default
namespace and every namespace container declares its own URI as a local default
namespace, instead of the generated ``ns0`` prefixes ElementTree would produce.
"""

from __future__ import annotations

import copy
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import TYPE_CHECKING
from xml.parsers import expat
from xml.sax.saxutils import escape, quoteattr

from itemmirror.domain.errors import FragmentParseError

from .attributes import AttributeStore, ForeignElement, NamespaceData
from .schema import XML_NAMESPACE, XOOML_NAMESPACE, XSI_NAMESPACE

if TYPE_CHECKING:
    from collections.abc import Iterable

INDENT = "  "


def split_tag(tag: str) -> tuple[str | None, str]:
    """Split a Clark-notation name into ``(namespace_uri, local_name)``."""

    if tag.startswith("{"):
        uri, _, local = tag[1:].partition("}")
        return uri, local
    return None, tag


def parse_root(text: str | bytes) -> ET.Element:
    try:
        return ET.fromstring(text)
    except ET.ParseError as exc:
        raise FragmentParseError(f"Malformed fragment: {exc}") from exc


@dataclass(frozen=True, slots=True)
class SourceMarkup:
    """Original text of a parsed fragment with the byte span of every element."""

    data: bytes
    spans: dict[ET.Element, tuple[int, int]]

    @classmethod
    def scan(cls, text: str | bytes, root: ET.Element) -> SourceMarkup:
        data = text.encode("utf-8") if isinstance(text, str) else text
        starts: list[int] = []
        ends: dict[int, int] = {}
        open_elements: list[int] = []
        parser = expat.ParserCreate()

        def on_start(_name: str, _attributes: dict[str, str]) -> None:
            open_elements.append(len(starts))
            starts.append(parser.CurrentByteIndex)

        def on_end(_name: str) -> None:
            ends[open_elements.pop()] = _tag_end(data, parser.CurrentByteIndex)

        parser.StartElementHandler = on_start
        parser.EndElementHandler = on_end
        try:
            parser.Parse(data, True)
        except expat.ExpatError as exc:
            raise FragmentParseError(f"Malformed fragment: {exc}") from exc

        spans = {
            element: (start, ends[index])
            for index, (element, start) in enumerate(zip(root.iter(), starts, strict=True))
        }
        return cls(data=data, spans=spans)

    def markup_for(self, element: ET.Element) -> str | None:
        """Source text of ``element``, or ``None`` when it cannot stand alone."""

        span = self.spans.get(element)
        if span is None:
            return None
        try:
            markup = self.data[span[0] : span[1]].decode("utf-8")
            reparsed = ET.fromstring(markup)
        except (UnicodeDecodeError, ET.ParseError):
            # relies on a prefix declared by an ancestor
            return None
        if reparsed.tag != element.tag or reparsed.attrib != element.attrib:
            return None
        return markup


def _tag_end(data: bytes, index: int) -> int:
    """Offset just past the tag starting at ``index``, skipping quoted values."""

    quote: int | None = None
    for offset in range(index, len(data)):
        byte = data[offset]
        if quote is not None:
            if byte == quote:
                quote = None
        elif byte in (0x22, 0x27):
            quote = byte
        elif byte == 0x3E:
            return offset + 1
    raise FragmentParseError("Unterminated tag in fragment")


def parse_bool(value: str | None) -> bool | None:
    if value is None:
        return None
    normalized = value.strip().lower()
    if normalized == "true":
        return True
    if normalized == "false":
        return False
    raise FragmentParseError(f"Expected 'true' or 'false', got {value!r}")


def format_bool(value: bool) -> str:
    return "true" if value else "false"


def capture(
    element: ET.Element,
    *,
    keep_tail: bool = False,
    source: SourceMarkup | None = None,
) -> ForeignElement:
    """Keep ``element`` as markup so it can be written back unchanged.

    The original text is used when ``source`` has it; otherwise the element is
    re-serialized, which may rename its namespace prefixes.
    """

    uri, _ = split_tag(element.tag)
    markup = source.markup_for(element) if source is not None else None
    if markup is None:
        clone = copy.deepcopy(element)
        clone.tail = None
        markup = ET.tostring(clone, encoding="unicode")
    if keep_tail and element.tail:
        markup += escape(element.tail)
    return ForeignElement(markup=markup, tag=element.tag, namespace_uri=uri)


def is_namespace_container(element: ET.Element, local_names: frozenset[str]) -> bool:
    uri, local = split_tag(element.tag)
    return local in local_names and uri is not None and uri != XOOML_NAMESPACE


def parse_namespace_element(
    element: ET.Element, *, source: SourceMarkup | None = None
) -> tuple[str, NamespaceData]:
    uri, _ = split_tag(element.tag)
    if uri is None:
        raise FragmentParseError(f"Namespace element {element.tag} has no namespace URI")
    attributes: dict[str, str] = {}
    for name, value in element.attrib.items():
        attribute_uri, local = split_tag(name)
        attributes[local if attribute_uri in (None, uri) else name] = value
    container = NamespaceData(
        attributes=attributes,
        data=element.text or "",
        extensions=[capture(child, keep_tail=True, source=source) for child in element],
    )
    return uri, container


def load_foreign_namespace(element: ForeignElement) -> NamespaceData:
    """Turn preserved namespace markup back into a structured container."""

    root = parse_root(element.markup)
    _, container = parse_namespace_element(
        root, source=SourceMarkup.scan(element.markup, root)
    )
    return container


def absorb_namespace_element(
    element: ET.Element,
    store: AttributeStore,
    extensions: list[ForeignElement],
    *,
    active_namespace: str | None,
    source: SourceMarkup | None = None,
) -> None:
    """Route one namespace container into ``store`` or keep it as markup."""

    uri, _ = split_tag(element.tag)
    if uri is None or uri in store:
        # duplicate containers for a URI are kept verbatim
        extensions.append(capture(element, source=source))
        return
    if active_namespace is None or uri == active_namespace:
        _, container = parse_namespace_element(element, source=source)
        store.load(uri, container)
    else:
        store.defer(uri, capture(element, source=source))


def attribute_markup(attributes: Iterable[tuple[str, str]]) -> str:
    """Render attributes, declaring prefixes for namespace-qualified names."""

    declarations: dict[str, str] = {}
    rendered: list[str] = []
    for name, value in attributes:
        uri, local = split_tag(name)
        if uri is None:
            rendered.append(f" {name}={quoteattr(value)}")
            continue
        prefix = _prefix_for(uri, declarations)
        rendered.append(f" {prefix}:{local}={quoteattr(value)}")
    declared = "".join(f" xmlns:{prefix}={quoteattr(uri)}" for uri, prefix in declarations.items())
    return declared + "".join(rendered)


def _prefix_for(uri: str, declarations: dict[str, str]) -> str:
    if uri == XML_NAMESPACE:
        return "xml"
    if uri not in declarations:
        declarations[uri] = "xsi" if uri == XSI_NAMESPACE else f"ns{len(declarations)}"
    return declarations[uri]


def namespace_element_markup(local_name: str, uri: str, container: NamespaceData) -> str:
    attributes = attribute_markup(container.attributes.items())
    body = escape(container.data) + "".join(ext.markup for ext in container.extensions)
    opening = f"<{local_name} xmlns={quoteattr(uri)}{attributes}"
    if not body:
        return opening + "/>"
    return f"{opening}>{body}</{local_name}>"


def namespace_lines(local_name: str, store: AttributeStore, *, depth: int) -> list[str]:
    indent = INDENT * depth
    lines: list[str] = []
    for uri, entry in store.items():
        if isinstance(entry, ForeignElement):
            lines.append(indent + entry.markup)
        else:
            lines.append(indent + namespace_element_markup(local_name, uri, entry))
    return lines


def extension_lines(extensions: Iterable[ForeignElement], *, depth: int) -> list[str]:
    indent = INDENT * depth
    return [indent + element.markup for element in extensions]
