from __future__ import annotations

import pytest

from freezer.db.recipes import create_recipe, get_recipe, list_recipes, update_recipe
from freezer.errors import NotFoundError


def test_create_and_fetch_recipe():
    recipe = create_recipe(name="Minestrone", recipe_type="SOUP", yield_portions=6, is_vegan=True)

    assert recipe.is_veggie is True
    assert get_recipe(recipe.id).name == "Minestrone"
    assert get_recipe(999) is None


def test_list_recipes_search_and_flags():
    create_recipe(name="Beef ragu", tags_text="pasta, slow")
    veggie = create_recipe(name="Spinach lasagne", tags_text="pasta", is_veggie=True)
    vegan = create_recipe(name="Chana masala", recipe_type="MEAL", is_vegan=True)

    assert {r.name for r in list_recipes(search="PASTA")} == {"Beef ragu", "Spinach lasagne"}
    assert {r.id for r in list_recipes(veggie=True)} == {veggie.id, vegan.id}
    assert [r.id for r in list_recipes(vegan=True)] == [vegan.id]
    assert [r.id for r in list_recipes(recipe_type="SOUP")] == []


def test_list_recipes_sorting_and_paging():
    create_recipe(name="B", kcal_per_portion=300)
    create_recipe(name="A", kcal_per_portion=None)
    create_recipe(name="C", kcal_per_portion=100)

    assert [r.name for r in list_recipes()] == ["A", "B", "C"]
    assert [r.name for r in list_recipes(sort="kcal")] == ["C", "B", "A"]
    assert [r.name for r in list_recipes(sort="nonsense")] == ["A", "B", "C"]
    assert [r.name for r in list_recipes(limit=1, offset=1)] == ["B"]


def test_update_recipe_only_touches_given_fields():
    recipe = create_recipe(name="Dal", kcal_per_portion=420, tags_text="lentils")

    updated = update_recipe(recipe.id, kcal_per_portion=380, is_vegan=True)

    assert updated.kcal_per_portion == 380
    assert updated.tags_text == "lentils"
    assert updated.is_veggie is True


def test_update_missing_recipe():
    with pytest.raises(NotFoundError) as excinfo:
        update_recipe(12, name="Ghost")

    assert excinfo.value.code == "recipe_not_found"
