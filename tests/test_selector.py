"""Unit tests for the FIFO selector."""

from __future__ import annotations

from datetime import date

import pytest

from freezer.errors import NoItemsAvailableError
from freezer.selector import (
    Candidate,
    Component,
    complete_count,
    fifo_order,
    select_single_set,
)


def _item(item_id: int, day: int, item_type: str = "MEAL", active: bool = True) -> Candidate:
    return Candidate(id=item_id, frozen_at=date(2024, 1, day), item_type=item_type, is_active=active)


def test_oldest_item_is_selected_without_composition():
    candidates = [_item(3, 5), _item(1, 9), _item(2, 2)]

    assert select_single_set([], candidates) == [2]


def test_same_day_items_are_ordered_by_id():
    candidates = [_item(7, 4), _item(5, 4), _item(6, 4)]

    assert [c.id for c in fifo_order(candidates)] == [5, 6, 7]
    assert select_single_set([Component(quantity=2)], candidates) == [5, 6]


def test_inactive_items_are_never_selected():
    candidates = [_item(1, 1, active=False), _item(2, 3)]

    assert select_single_set([], candidates) == [2]
    assert complete_count([], candidates) == 1


def test_no_active_items_raises():
    with pytest.raises(NoItemsAvailableError) as excinfo:
        select_single_set([], [_item(1, 1, active=False)])

    assert excinfo.value.code == "no_items_available"
    assert excinfo.value.details == {"available": 0}


def test_incomplete_set_is_rejected_instead_of_partial():
    components = [Component(quantity=1, item_type="MEAL"), Component(quantity=1, item_type="SIDE")]

    with pytest.raises(NoItemsAvailableError):
        select_single_set(components, [_item(1, 1, "MEAL"), _item(2, 2, "MEAL")])


def test_typed_components_are_filled_before_wildcards():
    # The oldest item is the only SIDE; the wildcard must not consume it.
    candidates = [_item(1, 1, "SIDE"), _item(2, 2, "MEAL"), _item(3, 3, "SAUCE")]
    components = [Component(quantity=1), Component(quantity=1, item_type="SIDE")]

    assert select_single_set(components, candidates) == [1, 2]


def test_selection_is_returned_in_fifo_order():
    candidates = [_item(1, 3, "SIDE"), _item(2, 1, "MEAL")]
    components = [Component(quantity=1, item_type="SIDE"), Component(quantity=1, item_type="MEAL")]

    assert select_single_set(components, candidates) == [2, 1]


@pytest.mark.parametrize(
    ("components", "types", "expected"),
    [
        ([], ["MEAL", "MEAL", "SIDE"], 3),
        ([Component(quantity=2)], ["MEAL", "MEAL", "SIDE"], 1),
        ([Component(quantity=1, item_type="MEAL"), Component(quantity=1, item_type="SIDE")],
         ["MEAL", "MEAL", "SIDE"], 1),
        ([Component(quantity=1, item_type="SOUP")], ["MEAL"], 0),
    ],
)
def test_complete_count(components, types, expected):
    candidates = [_item(index + 1, index + 1, item_type) for index, item_type in enumerate(types)]

    assert complete_count(components, candidates) == expected


def test_zero_quantity_components_are_ignored():
    candidates = [_item(1, 1, "MEAL")]

    assert select_single_set([Component(quantity=0, item_type="SIDE")], candidates) == [1]
