from __future__ import annotations

from datetime import date, timedelta

import pytest

from freezer.db.containers import create_container
from freezer.db.inventory import (
    create_item,
    get_item,
    list_items,
    mark_taken_out,
    takeout_items,
)
from freezer.db.models import InventoryItemORM
from freezer.db.recipes import create_recipe
from freezer.db.repository import get_session, session_scope
from freezer.errors import BusinessRuleError
from freezer.models.inventory import ItemFilters


def test_create_item_assigns_code_and_best_before(freeze, days_ago):
    item = freeze("Goulash", age=10)

    assert item.id_code == f"F-{item.id:05d}"
    assert item.frozen_at == days_ago(10)
    assert item.computed_best_before == days_ago(10) + timedelta(days=90)
    assert item.is_active is True
    assert item.storage_type == "FREE"


def test_explicit_id_code_must_be_unique(freeze):
    freeze("Goulash", id_code="G-1")

    with pytest.raises(BusinessRuleError) as excinfo:
        freeze("Goulash again", id_code="G-1")

    assert excinfo.value.code == "duplicate_id_code"


def test_generated_code_skips_codes_taken_manually(freeze):
    first = freeze("Soup")
    # Claim the code the next row would get.
    freeze("Manual", id_code=f"F-{first.id + 2:05d}")

    third = freeze("Stew")

    assert third.id_code == f"F-{third.id:05d}-2"


def test_recipe_shelf_life_is_used_unless_overridden(freeze):
    recipe = create_recipe(name="Lentil dal", default_best_before_days=30)

    from_recipe = freeze("Dal", recipe_id=recipe.id)
    explicit = freeze("Dal", recipe_id=recipe.id, best_before_days=5)

    assert from_recipe.computed_best_before == date.today() + timedelta(days=30)
    assert explicit.computed_best_before == date.today() + timedelta(days=5)


@pytest.mark.parametrize(
    ("fields", "code"),
    [
        ({"storage_type": "BOX"}, "container_required"),
        ({"storage_type": "BOX", "container_id": 999}, "unknown_container"),
        ({"storage_type": "FREEZER_BAG", "container_id": 1}, "container_not_allowed"),
        ({"meal_set_id": 999}, "unknown_meal_set"),
        ({"recipe_id": 999}, "unknown_recipe"),
    ],
)
def test_create_item_rejects_invalid_references(freeze, fields, code):
    create_container(container_code="B-01")

    with pytest.raises(BusinessRuleError) as excinfo:
        freeze("Broken", **fields)

    assert excinfo.value.code == code


def test_inactive_container_cannot_receive_items(freeze):
    box = create_container(container_code="B-02", is_active=False)

    with pytest.raises(BusinessRuleError) as excinfo:
        freeze("Curry", storage_type="BOX", container_id=box.id)

    assert excinfo.value.code == "container_inactive"


def test_item_in_box_reports_container_code(freeze):
    box = create_container(container_code="B-03")

    item = freeze("Curry", storage_type="BOX", container_id=box.id)

    assert item.container_code == "B-03"
    assert get_item(item.id).container_code == "B-03"


def test_list_items_is_fifo_and_split_by_view(freeze):
    newest = freeze("Pesto", age=1, item_type="SAUCE")
    oldest = freeze("Chili", age=20)
    peas = freeze("Peas", age=30, item_type="INGREDIENT")

    single = list_items("single")
    ingredients = list_items("ingredient")
    fallback = list_items("unknown-view")

    assert [item.id for item in single] == [oldest.id, newest.id]
    assert [item.id for item in ingredients] == [peas.id]
    assert [item.id for item in fallback] == [oldest.id, newest.id]


def test_list_items_filters(freeze):
    freeze("Beef stew", age=2)
    tofu = freeze("Tofu curry", age=3, is_vegan=True)
    old = freeze("Old lasagne", age=100, best_before_days=95)

    assert [i.id for i in list_items(filters=ItemFilters(q="CURRY"))] == [tofu.id]
    assert [i.id for i in list_items(filters=ItemFilters(veggie=True))] == [tofu.id]
    assert tofu.is_veggie is True

    expiring = list_items(filters=ItemFilters(expiring=True))
    assert [i.id for i in expiring] == [old.id]
    assert expiring[0].is_expiring is True


def test_list_items_search_escapes_wildcards(freeze):
    freeze("100% beef")
    freeze("1000 dumplings")

    assert [i.name for i in list_items(filters=ItemFilters(q="0%"))] == ["100% beef"]


def test_list_items_pagination_is_clamped(freeze):
    for age in range(5):
        freeze(f"Portion {age}", age=age)

    assert len(list_items(limit=2)) == 2
    assert len(list_items(limit=0)) == 1
    assert len(list_items(limit=500)) == 5
    assert len(list_items(limit=2, offset=4)) == 1
    assert len(list_items(offset=-3)) == 5


def test_takeout_items_marks_items_inactive(freeze):
    first = freeze("A")
    second = freeze("B")

    assert takeout_items([second.id, first.id, second.id]) == [second.id, first.id]

    assert list_items() == []
    with session_scope() as session:
        row = session.get(InventoryItemORM, first.id)
        assert row.is_active is False
        assert row.taken_out_at is not None


def test_takeout_is_all_or_nothing(freeze):
    kept = freeze("Still here")
    gone = freeze("Gone")
    takeout_items([gone.id])

    with pytest.raises(BusinessRuleError) as excinfo:
        takeout_items([kept.id, gone.id, 424242])

    assert excinfo.value.code == "items_unavailable"
    assert excinfo.value.details == {"missing": [424242], "taken_out": [gone.id]}
    assert get_item(kept.id).is_active is True


def test_takeout_without_ids_is_rejected():
    with pytest.raises(BusinessRuleError) as excinfo:
        takeout_items([])

    assert excinfo.value.code == "no_items_selected"


def test_takeout_rejects_rows_changed_by_another_session(freeze):
    contested = freeze("Contested")
    bystander = freeze("Bystander")
    first, second = get_session(), get_session()
    try:
        # The second session holds both rows as active before the first one commits.
        assert second.get(InventoryItemORM, contested.id).is_active is True
        assert second.get(InventoryItemORM, bystander.id).is_active is True
        mark_taken_out(first, [contested.id])
        first.commit()
        taken_out_at = get_item(contested.id).taken_out_at

        with pytest.raises(BusinessRuleError) as excinfo:
            mark_taken_out(second, [bystander.id, contested.id])
        second.rollback()
    finally:
        first.close()
        second.close()

    assert excinfo.value.code == "items_unavailable"
    assert excinfo.value.details == {"item_ids": [bystander.id, contested.id]}
    assert get_item(bystander.id).is_active is True
    assert get_item(contested.id).taken_out_at == taken_out_at
