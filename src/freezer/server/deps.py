"""Dependency definitions for the freezer inventory API server."""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence

from fastapi import Query

from freezer.db.containers import (
    create_container,
    create_type,
    list_containers,
    list_types,
    update_container,
)
from freezer.db.inventory import create_item, list_items, takeout_items
from freezer.db.meal_sets import create_set, get_set, list_sets, takeout_set
from freezer.db.recipes import create_recipe, list_recipes, update_recipe
from freezer.models.containers import Container, ContainerType
from freezer.models.inventory import InventoryItem, ItemFilters, MealSetDetail, MealSetSummary
from freezer.models.recipes import Recipe

MealSetProvider = Callable[[ItemFilters, int, int], List[MealSetSummary]]
MealSetFetcher = Callable[[int], MealSetDetail]
MealSetCreator = Callable[[dict], MealSetDetail]
MealSetTakeout = Callable[[int, Optional[Sequence[int]]], List[int]]
InventoryProvider = Callable[[str, ItemFilters, int, int], List[InventoryItem]]
InventoryCreator = Callable[[dict], InventoryItem]
InventoryTakeout = Callable[[Sequence[int]], List[int]]
ContainerTypeProvider = Callable[[], List[ContainerType]]
ContainerTypeCreator = Callable[[dict], ContainerType]
ContainerProvider = Callable[[str], List[Container]]
ContainerCreator = Callable[[dict], Container]
ContainerUpdater = Callable[[int, dict], Container]
RecipeProvider = Callable[..., List[Recipe]]
RecipeCreator = Callable[[dict], Recipe]
RecipeUpdater = Callable[[int, dict], Recipe]


def get_filters(
    q: str = Query(default="", max_length=255),
    veggie: Optional[str] = Query(default=None),
    expiring: Optional[str] = Query(default=None),
) -> ItemFilters:
    """Collect the shared listing filters; any non-empty flag other than ``0`` enables it."""

    return ItemFilters(q=q.strip(), veggie=parse_flag(veggie), expiring=parse_flag(expiring))


def parse_flag(value: Optional[str]) -> bool:
    return bool(value) and value.strip().lower() not in {"0", "false", "no", "off"}


def get_meal_set_provider() -> MealSetProvider:
    return lambda filters, limit, offset: list_sets(filters, limit, offset)


def get_meal_set_fetcher() -> MealSetFetcher:
    return get_set


def get_meal_set_creator() -> MealSetCreator:
    return lambda payload: create_set(**payload)


def get_meal_set_takeout() -> MealSetTakeout:
    return lambda meal_set_id, item_ids: takeout_set(meal_set_id, item_ids)


def get_inventory_provider() -> InventoryProvider:
    return lambda view, filters, limit, offset: list_items(view, filters, limit, offset)


def get_inventory_creator() -> InventoryCreator:
    return lambda payload: create_item(**payload)


def get_inventory_takeout() -> InventoryTakeout:
    return takeout_items


def get_container_type_provider() -> ContainerTypeProvider:
    return list_types


def get_container_type_creator() -> ContainerTypeCreator:
    return lambda payload: create_type(**payload)


def get_container_provider() -> ContainerProvider:
    return list_containers


def get_container_creator() -> ContainerCreator:
    return lambda payload: create_container(**payload)


def get_container_updater() -> ContainerUpdater:
    return lambda container_id, payload: update_container(container_id, **payload)


def get_recipe_provider() -> RecipeProvider:
    return list_recipes


def get_recipe_creator() -> RecipeCreator:
    return lambda payload: create_recipe(**payload)


def get_recipe_updater() -> RecipeUpdater:
    return lambda recipe_id, payload: update_recipe(recipe_id, **payload)
