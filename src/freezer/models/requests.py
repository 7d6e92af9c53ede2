"""Request payload models shared by the HTTP API and the CLI seeder."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from freezer.models.containers import Material, Shape
from freezer.models.inventory import ItemType, MealSetComponent, StorageType
from freezer.models.recipes import RecipeType


class _Request(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


class _DietFlagsRequest(_Request):
    @model_validator(mode="before")
    @classmethod
    def vegan_implies_veggie(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("is_vegan"):
            data = {**data, "is_veggie": True}
        return data


class MealSetCreateRequest(_DietFlagsRequest):
    name: str = Field(min_length=1, max_length=255)
    is_veggie: bool = False
    is_vegan: bool = False
    note: Optional[str] = Field(default=None, max_length=1000)
    components: list[MealSetComponent] = Field(default_factory=list, max_length=20)


class InventoryCreateRequest(_DietFlagsRequest):
    name: str = Field(min_length=1, max_length=255)
    item_type: ItemType = "MEAL"
    id_code: Optional[str] = Field(default=None, min_length=1, max_length=32)
    frozen_at: Optional[date] = None
    best_before_days: Optional[int] = Field(default=None, ge=1, le=3650)
    meal_set_id: Optional[int] = Field(default=None, ge=1)
    recipe_id: Optional[int] = Field(default=None, ge=1)
    storage_type: StorageType = "FREE"
    container_id: Optional[int] = Field(default=None, ge=1)
    is_veggie: bool = False
    is_vegan: bool = False
    note: Optional[str] = Field(default=None, max_length=500)


class TakeoutRequest(BaseModel):
    item_ids: Optional[list[int]] = None

    @model_validator(mode="after")
    def dedupe_ids(self) -> "TakeoutRequest":
        """Collapse repeated ids, keeping the first occurrence."""
        if self.item_ids:
            self.item_ids = list(dict.fromkeys(self.item_ids))
        return self


class ContainerTypeCreateRequest(_Request):
    shape: Shape
    volume_ml: int = Field(gt=0)
    height_mm: Optional[int] = Field(default=None, gt=0)
    width_mm: Optional[int] = Field(default=None, gt=0)
    length_mm: Optional[int] = Field(default=None, gt=0)
    material: Optional[Material] = None
    note: Optional[str] = Field(default=None, max_length=100)


class ContainerCreateRequest(_Request):
    container_code: str = Field(min_length=1, max_length=64)
    container_type_id: Optional[int] = Field(default=None, ge=1)
    note: Optional[str] = Field(default=None, max_length=200)
    is_active: bool = True


class ContainerUpdateRequest(_Request):
    container_code: Optional[str] = Field(default=None, min_length=1, max_length=64)
    container_type_id: Optional[int] = Field(default=None, ge=1)
    note: Optional[str] = Field(default=None, max_length=200)
    is_active: Optional[bool] = None


class RecipeCreateRequest(_DietFlagsRequest):
    name: str = Field(min_length=1, max_length=255)
    recipe_type: RecipeType = "MEAL"
    yield_portions: Optional[int] = Field(default=None, ge=1, le=100)
    kcal_per_portion: Optional[int] = Field(default=None, ge=0, le=10000)
    default_best_before_days: Optional[int] = Field(default=None, ge=1, le=3650)
    tags_text: Optional[str] = Field(default=None, max_length=255)
    ingredients_text: Optional[str] = None
    prep_text: Optional[str] = None
    reheat_text: Optional[str] = None
    is_veggie: bool = False
    is_vegan: bool = False


class RecipeUpdateRequest(_DietFlagsRequest):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    recipe_type: Optional[RecipeType] = None
    yield_portions: Optional[int] = Field(default=None, ge=1, le=100)
    kcal_per_portion: Optional[int] = Field(default=None, ge=0, le=10000)
    default_best_before_days: Optional[int] = Field(default=None, ge=1, le=3650)
    tags_text: Optional[str] = Field(default=None, max_length=255)
    ingredients_text: Optional[str] = None
    prep_text: Optional[str] = None
    reheat_text: Optional[str] = None
    is_veggie: Optional[bool] = None
    is_vegan: Optional[bool] = None

    @field_validator("name", "recipe_type", "is_veggie", "is_vegan")
    @classmethod
    def not_null(cls, value: Any) -> Any:
        """These columns can be omitted but never cleared."""
        if value is None:
            raise ValueError("may not be null")
        return value
