from __future__ import annotations

import pytest

from freezer.db.inventory import get_item, takeout_items
from freezer.db.meal_sets import (
    choose_fifo_items_for_single_set,
    get_set,
    list_sets,
    takeout_set,
)
from freezer.errors import BusinessRuleError, NoItemsAvailableError, NotFoundError
from freezer.models.inventory import ItemFilters

MEAL_AND_SIDE = [{"item_type": "MEAL", "quantity": 1}, {"item_type": "SIDE", "quantity": 1}]


def test_fifo_picks_oldest_item_of_set(make_set, freeze):
    chili = make_set("Chili")
    freeze("Chili", age=3, meal_set_id=chili.id)
    oldest = freeze("Chili", age=9, meal_set_id=chili.id)
    freeze("Other", age=20)

    assert choose_fifo_items_for_single_set(chili.id) == [oldest.id]


def test_fifo_selection_does_not_mutate(make_set, freeze):
    chili = make_set("Chili")
    item = freeze("Chili", meal_set_id=chili.id)

    choose_fifo_items_for_single_set(chili.id)
    choose_fifo_items_for_single_set(chili.id)

    assert get_item(item.id).is_active is True


def test_fifo_for_unknown_or_empty_set(make_set):
    empty = make_set("Empty")

    with pytest.raises(NotFoundError) as missing:
        choose_fifo_items_for_single_set(999)
    with pytest.raises(NoItemsAvailableError):
        choose_fifo_items_for_single_set(empty.id)

    assert missing.value.code == "meal_set_not_found"


def test_composition_needs_every_component(make_set, freeze):
    plate = make_set("Schnitzel plate", components=MEAL_AND_SIDE)
    meal = freeze("Schnitzel", age=5, item_type="MEAL", meal_set_id=plate.id)
    freeze("Schnitzel", age=4, item_type="MEAL", meal_set_id=plate.id)

    with pytest.raises(NoItemsAvailableError):
        takeout_set(plate.id)

    side = freeze("Potato salad", age=1, item_type="SIDE", meal_set_id=plate.id)
    assert takeout_set(plate.id) == [meal.id, side.id]


def test_takeout_set_consumes_in_fifo_order(make_set, freeze):
    chili = make_set("Chili")
    first = freeze("Chili", age=10, meal_set_id=chili.id)
    second = freeze("Chili", age=10, meal_set_id=chili.id)

    assert takeout_set(chili.id) == [first.id]
    assert takeout_set(chili.id) == [second.id]
    with pytest.raises(NoItemsAvailableError):
        takeout_set(chili.id)


def test_takeout_set_with_explicit_items(make_set, freeze):
    chili = make_set("Chili")
    freeze("Chili", age=10, meal_set_id=chili.id)
    newer = freeze("Chili", age=1, meal_set_id=chili.id)

    assert takeout_set(chili.id, [newer.id]) == [newer.id]
    assert get_item(newer.id).is_active is False


def test_explicit_items_must_belong_to_set(make_set, freeze):
    chili = make_set("Chili")
    soup = make_set("Soup")
    mine = freeze("Chili", meal_set_id=chili.id)
    foreign = freeze("Soup", meal_set_id=soup.id)

    with pytest.raises(BusinessRuleError) as excinfo:
        takeout_set(chili.id, [mine.id, foreign.id])

    assert excinfo.value.code == "item_not_in_set"
    assert get_item(mine.id).is_active is True


def test_explicit_takeout_of_taken_item_fails(make_set, freeze):
    chili = make_set("Chili")
    item = freeze("Chili", meal_set_id=chili.id)
    takeout_items([item.id])

    with pytest.raises(BusinessRuleError) as excinfo:
        takeout_set(chili.id, [item.id])

    assert excinfo.value.code == "items_unavailable"


def test_list_sets_summaries(make_set, freeze):
    chili = make_set("Chili")
    plate = make_set("Plate", components=MEAL_AND_SIDE, is_vegan=True)
    old = freeze("Chili", age=8, meal_set_id=chili.id)
    freeze("Chili", age=2, meal_set_id=chili.id)
    freeze("Pasta", age=1, item_type="MEAL", meal_set_id=plate.id)

    summaries = {summary.name: summary for summary in list_sets()}

    assert list(summaries) == ["Chili", "Plate"]
    assert summaries["Chili"].complete_count == 2
    assert summaries["Chili"].active_count == 2
    assert summaries["Chili"].fifo_item_ids == [old.id]
    assert summaries["Chili"].fifo_ids == [old.id_code]
    assert summaries["Plate"].complete_count == 0
    assert summaries["Plate"].fifo_ids == []
    assert summaries["Plate"].is_veggie is True


def test_list_sets_filters(make_set, freeze):
    make_set("Beef chili")
    veggie = make_set("Veggie chili", is_veggie=True)
    stew = make_set("Stew")
    freeze("Stew", age=100, best_before_days=90, meal_set_id=stew.id)

    assert [s.id for s in list_sets(ItemFilters(q="veggie"))] == [veggie.id]
    assert [s.id for s in list_sets(ItemFilters(veggie=True))] == [veggie.id]
    expiring = list_sets(ItemFilters(expiring=True))
    assert [s.id for s in expiring] == [stew.id]
    assert expiring[0].is_expiring is True


def test_get_set_lists_all_active_items_fifo(make_set, freeze):
    chili = make_set("Chili", components=[{"quantity": 2}])
    newest = freeze("Chili", age=1, meal_set_id=chili.id)
    oldest = freeze("Chili", age=5, meal_set_id=chili.id)
    middle = freeze("Chili", age=3, meal_set_id=chili.id)
    gone = freeze("Chili", age=9, meal_set_id=chili.id)
    takeout_items([gone.id])

    detail = get_set(chili.id)

    assert [item.id for item in detail.items] == [oldest.id, middle.id, newest.id]
    assert detail.fifo_item_ids == [oldest.id, middle.id]
    assert detail.complete_count == 1
    assert detail.components[0].quantity == 2
    assert detail.components[0].item_type is None
