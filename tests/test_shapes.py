from __future__ import annotations

import pytest

from canews.models.enums import GroupKind
from canews.normalization.shapes import (
    GENERAL_MARKERS,
    SPORTS_MARKERS,
    ContainerGroup,
    SelfEvent,
    classify_group,
    iter_group_records,
)


@pytest.mark.parametrize(
    "group",
    [
        {"date": "2025-08-05", "event": "Basketball (JV Boys)"},
        {"date": "2025-08-05", "opponent": "Central"},
        {"time": "4:15 PM"},
        {"sport": "Soccer", "events": "not a list"},
    ],
)
def test_marker_keys_without_events_list_is_self(group: dict) -> None:
    shape = classify_group(group, SPORTS_MARKERS)
    assert isinstance(shape, SelfEvent)
    assert shape.kind == GroupKind.SELF
    assert shape.record == group


def test_events_list_is_container() -> None:
    group = {"date": "2025-08-05", "day": "Tuesday", "events": [{"event": "Soccer"}]}
    shape = classify_group(group, SPORTS_MARKERS)
    assert isinstance(shape, ContainerGroup)
    assert shape.kind == GroupKind.CONTAINER
    assert shape.events == [{"event": "Soccer"}]


def test_markers_and_events_list_is_container() -> None:
    group = {"sport": "Soccer", "events": []}
    assert isinstance(classify_group(group, SPORTS_MARKERS), ContainerGroup)


def test_neither_markers_nor_events_yields_nothing() -> None:
    assert classify_group({"date": "2025-08-05", "day": "Tuesday"}, SPORTS_MARKERS) is None
    assert classify_group("Basketball", SPORTS_MARKERS) is None
    assert list(iter_group_records([{"date": "2025-08-05"}], SPORTS_MARKERS)) == []


def test_lenient_takes_unmarked_mapping_as_self() -> None:
    assert isinstance(classify_group({"date": "01-05"}, GENERAL_MARKERS, lenient=True), SelfEvent)


def test_markers_are_domain_specific() -> None:
    # 'title' marks a general event but not a sports one
    group = {"title": "Spirit Week"}
    assert classify_group(group, SPORTS_MARKERS) is None
    assert isinstance(classify_group(group, GENERAL_MARKERS), SelfEvent)


def test_walk_yields_records_with_their_parent_group() -> None:
    groups = [
        {"date": "2025-08-05", "event": "Golf"},
        {
            "date": "2025-08-06",
            "events": [{"event": "Soccer"}, "garbage", {"event": "Tennis"}],
        },
        {"date": "2025-08-07"},
    ]
    records = list(iter_group_records(groups, SPORTS_MARKERS))

    assert [record["event"] for record, _ in records] == ["Golf", "Soccer", "Tennis"]
    assert records[0][1] is None
    assert records[1][1]["date"] == "2025-08-06"
    assert records[2][1]["date"] == "2025-08-06"


def test_walk_descends_into_nested_containers() -> None:
    groups = [
        {
            "date": "2025-08-06",
            "events": [{"day": "Wednesday", "events": [{"event": "Swim"}]}],
        }
    ]
    records = list(iter_group_records(groups, SPORTS_MARKERS))

    assert len(records) == 1
    record, parent = records[0]
    assert record == {"event": "Swim"}
    assert parent["day"] == "Wednesday"
