from __future__ import annotations

import pytest

from itemmirror.domain.errors import InvalidTypeError, MissingParameterError, NullArgumentError
from itemmirror.domain.model.requests import (
    CreateItem,
    CreationKind,
    LinkGroupingItem,
    LinkItem,
    PhantomNote,
    creation_request_from_options,
)


def test_options_with_only_display_text_build_a_phantom_note() -> None:
    request = creation_request_from_options({"display_text": "note"})

    assert request == PhantomNote(display_text="note")
    assert request.kind is CreationKind.PHANTOM


def test_link_options_pick_kind_two_or_three() -> None:
    plain = creation_request_from_options({"display_text": "doc", "item_uri": "http://x/doc"})
    local = creation_request_from_options(
        {"display_text": "doc", "item_uri": "http://x/doc", "local_item_requested": True}
    )

    assert isinstance(plain, LinkItem)
    assert plain.kind is CreationKind.LINK_NON_GROUPING
    assert local.kind is CreationKind.LINK_NON_GROUPING_LOCAL


def test_grouping_link_options_pick_kind_four_or_five() -> None:
    options: dict[str, object] = {
        "display_text": "docs",
        "grouping_item_uri": "http://x/docs",
        "xooml_driver_uri": "driver",
    }

    assert creation_request_from_options(options).kind is CreationKind.LINK_GROUPING
    options["local_item_requested"] = True
    request = creation_request_from_options(options)
    assert isinstance(request, LinkGroupingItem)
    assert request.kind is CreationKind.LINK_GROUPING_LOCAL


def test_create_options_pick_kind_six_or_seven() -> None:
    leaf = creation_request_from_options(
        {"display_text": "a", "item_name": "a.txt", "is_grouping_item": False}
    )
    folder = creation_request_from_options(
        {"display_text": "b", "item_name": "b", "is_grouping_item": True}
    )

    assert leaf == CreateItem(display_text="a", item_name="a.txt", is_grouping_item=False)
    assert leaf.kind is CreationKind.CREATE_NON_GROUPING
    assert folder.kind is CreationKind.CREATE_GROUPING


@pytest.mark.parametrize(
    "options",
    [
        {},
        {"item_uri": "http://x"},
        {"display_text": "a", "item_name": "a.txt"},
        {"display_text": "a", "unknown": "value"},
        {"display_text": "a", "item_uri": "u", "item_name": "n", "is_grouping_item": False},
    ],
)
def test_unrecognized_option_shapes_are_missing_parameters(options: dict[str, object]) -> None:
    with pytest.raises(MissingParameterError):
        creation_request_from_options(options)


def test_options_must_be_a_mapping() -> None:
    with pytest.raises(NullArgumentError):
        creation_request_from_options(None)

    with pytest.raises(InvalidTypeError):
        creation_request_from_options(["display_text"])  # type: ignore[arg-type]


def test_request_fields_are_validated_on_construction() -> None:
    with pytest.raises(MissingParameterError):
        PhantomNote(display_text="")

    with pytest.raises(InvalidTypeError):
        CreateItem(display_text="a", item_name="a", is_grouping_item="yes")  # type: ignore[arg-type]

    with pytest.raises(InvalidTypeError):
        LinkItem(display_text=3, item_uri="u")  # type: ignore[arg-type]
