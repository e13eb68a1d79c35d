from __future__ import annotations

import pytest

from itemmirror.domain.errors import FragmentParseError
from itemmirror.domain.model.xml_codec import (
    attribute_markup,
    format_bool,
    parse_bool,
    parse_root,
    split_tag,
)

XSI = "http://www.w3.org/2001/XMLSchema-instance"


def test_split_tag_handles_clark_names() -> None:
    assert split_tag("{urn:a}item") == ("urn:a", "item")
    assert split_tag("item") == (None, "item")


def test_bool_parsing_is_strict() -> None:
    assert parse_bool("true") is True
    assert parse_bool(" False ") is False
    assert parse_bool(None) is None
    assert format_bool(True) == "true"

    with pytest.raises(FragmentParseError):
        parse_bool("1")


def test_attribute_markup_declares_prefixes_for_qualified_names() -> None:
    markup = attribute_markup(
        [("plain", 'say "hi"'), (f"{{{XSI}}}type", "t"), ("{urn:a}flag", "1")]
    )

    assert markup == (
        f' xmlns:xsi="{XSI}" xmlns:ns1="urn:a"'
        ' plain=\'say "hi"\' xsi:type="t" ns1:flag="1"'
    )


def test_parse_root_wraps_syntax_errors() -> None:
    with pytest.raises(FragmentParseError):
        parse_root("<unclosed>")
