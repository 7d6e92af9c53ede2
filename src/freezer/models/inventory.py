"""Inventory and meal-set data models."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ItemType = Literal["MEAL", "SIDE", "SAUCE", "SOUP", "INGREDIENT", "OTHER"]
StorageType = Literal["FREE", "FREEZER_BAG", "VACUUM_BAG", "BOX"]

STORAGE_STANDARDS: tuple[str, ...] = ("FREE", "FREEZER_BAG", "VACUUM_BAG")


class InventoryItem(BaseModel):
    """A single frozen item."""

    id: int
    id_code: str
    name: str
    item_type: str
    frozen_at: date
    computed_best_before: Optional[date] = None
    meal_set_id: Optional[int] = None
    container_id: Optional[int] = None
    container_code: Optional[str] = None
    recipe_id: Optional[int] = None
    storage_type: str = "FREE"
    is_veggie: bool = False
    is_vegan: bool = False
    is_expiring: bool = False
    is_active: bool = True
    taken_out_at: Optional[datetime] = None
    note: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class MealSetComponent(BaseModel):
    """Number of items (of a type, or of any type when unset) one set requires."""

    item_type: Optional[ItemType] = None
    quantity: int = Field(default=1, ge=1, le=50)

    model_config = ConfigDict(frozen=True)


class MealSetSummary(BaseModel):
    """Meal set card as shown in listings."""

    id: int
    name: str
    is_veggie: bool = False
    is_vegan: bool = False
    is_expiring: bool = False
    complete_count: int = 0
    active_count: int = 0
    fifo_ids: list[str] = Field(default_factory=list)
    fifo_item_ids: list[int] = Field(default_factory=list)
    note: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class MealSetDetail(MealSetSummary):
    """Meal set with its composition and all active items in FIFO order."""

    components: list[MealSetComponent] = Field(default_factory=list)
    items: list[InventoryItem] = Field(default_factory=list)


class ItemFilters(BaseModel):
    """Shared listing filters for meal sets and items."""

    q: str = ""
    veggie: bool = False
    expiring: bool = False

    model_config = ConfigDict(frozen=True)


class TakeoutResult(BaseModel):
    ok: bool = True
    item_ids: list[int]
