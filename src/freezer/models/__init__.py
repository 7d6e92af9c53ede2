"""Pydantic models defining shared data contracts."""

from freezer.models.containers import Container, ContainerType
from freezer.models.inventory import (
    InventoryItem,
    ItemFilters,
    MealSetComponent,
    MealSetDetail,
    MealSetSummary,
    TakeoutResult,
)
from freezer.models.recipes import Recipe

__all__ = [
    "Container",
    "ContainerType",
    "InventoryItem",
    "ItemFilters",
    "MealSetComponent",
    "MealSetDetail",
    "MealSetSummary",
    "Recipe",
    "TakeoutResult",
]
