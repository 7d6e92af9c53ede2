"""Recipe catalog data models."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

RecipeType = Literal["MEAL", "SIDE", "SAUCE", "SOUP", "BASE", "OTHER"]


class Recipe(BaseModel):
    """Recipe as stored in the catalog."""

    id: int
    name: str
    recipe_type: str = "MEAL"
    yield_portions: Optional[int] = None
    kcal_per_portion: Optional[int] = None
    default_best_before_days: Optional[int] = None
    tags_text: Optional[str] = None
    ingredients_text: Optional[str] = None
    prep_text: Optional[str] = None
    reheat_text: Optional[str] = None
    is_veggie: bool = False
    is_vegan: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(frozen=True)
