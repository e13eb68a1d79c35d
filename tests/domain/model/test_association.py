from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from itemmirror.domain.errors import FragmentParseError
from itemmirror.domain.identity import is_guid
from itemmirror.domain.model.association import AssociationFields, AssociationRecord

XOOML = "http://kftf.ischool.washington.edu/xmlns/xooml"
GUID = "3f2504e0-4f89-41d3-9a0c-0305e82c3301"


def test_from_fields_defaults_optional_fields_and_mints_identity() -> None:
    record = AssociationRecord.from_fields(AssociationFields(display_text="note"))

    assert is_guid(record.id)
    assert record.display_text == "note"
    assert record.local_item == ""
    assert record.associated_item == ""
    assert record.associated_xooml_fragment == ""
    assert record.associated_xooml_driver == ""
    assert record.is_grouping is False
    assert record.is_phantom


def test_from_fields_never_reuses_identity() -> None:
    fields = AssociationFields(display_text="same")

    first = AssociationRecord.from_fields(fields)
    second = AssociationRecord.from_fields(fields)

    assert first.id != second.id


def test_associated_item_driver_does_not_populate_associated_item() -> None:
    record = AssociationRecord.from_fields(
        AssociationFields(display_text="doc", associated_item_driver="drive")
    )

    assert record.associated_item_driver == "drive"
    assert record.associated_item == ""


def test_from_element_keeps_absent_attributes_as_none() -> None:
    element = ET.fromstring(f'<association xmlns="{XOOML}" ID="{GUID}" displayText="a.txt"/>')

    record = AssociationRecord.from_element(element)

    assert record.id == GUID
    assert record.display_text == "a.txt"
    assert record.local_item is None
    assert record.is_grouping is None
    assert record.common_attributes() == {"ID": GUID, "displayText": "a.txt"}


def test_from_element_parses_grouping_flag_and_keeps_unknown_attributes() -> None:
    element = ET.fromstring(
        f'<association xmlns="{XOOML}" xmlns:x="urn:x" ID="{GUID}" localItem="docs"'
        ' isGrouping="true" x:flag="1"/>'
    )

    record = AssociationRecord.from_element(element)

    assert record.is_grouping is True
    assert record.extra_attributes == {"{urn:x}flag": "1"}
    assert record.child_fragment_path == "docs/XooML2.xml"


def test_from_element_requires_identity() -> None:
    element = ET.fromstring(f'<association xmlns="{XOOML}" displayText="orphan"/>')

    with pytest.raises(FragmentParseError):
        AssociationRecord.from_element(element)


def test_from_element_rejects_malformed_grouping_flag() -> None:
    element = ET.fromstring(f'<association xmlns="{XOOML}" ID="{GUID}" isGrouping="maybe"/>')

    with pytest.raises(FragmentParseError):
        AssociationRecord.from_element(element)


def test_phantom_and_child_fragment_path() -> None:
    leaf = AssociationRecord(id=GUID, local_item="a.txt", is_grouping=False)
    folder = AssociationRecord(
        id=GUID, local_item="docs", is_grouping=True, associated_xooml_fragment="docs/meta.xml"
    )
    note = AssociationRecord(id=GUID, display_text="just text")

    assert not leaf.is_phantom
    assert leaf.child_fragment_path is None
    assert folder.child_fragment_path == "docs/meta.xml"
    assert note.is_phantom
    assert note.child_fragment_path is None


def test_to_lines_self_closes_without_children() -> None:
    record = AssociationRecord(id=GUID, display_text="a & b", is_grouping=False)

    assert record.to_lines(depth=1) == [
        f'  <association ID="{GUID}" displayText="a &amp; b" isGrouping="false"/>'
    ]


def test_to_lines_emits_namespace_children() -> None:
    record = AssociationRecord.from_fields(AssociationFields(display_text="a"))
    record.attributes.set("color", "red", "urn:app")

    lines = record.to_lines(depth=1)

    assert lines[0].startswith("  <association ")
    assert lines[1] == '    <associationNamespaceElement xmlns="urn:app" color="red"/>'
    assert lines[-1] == "  </association>"
