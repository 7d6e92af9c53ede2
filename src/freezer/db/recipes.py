"""Recipe catalog data access helpers."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import or_, select

from freezer.errors import NotFoundError
from freezer.models.recipes import Recipe

from .inventory import text_match
from .models import RecipeORM
from .repository import clamp_page, session_scope

RECIPE_SORTS = {
    "name": (RecipeORM.name, RecipeORM.id),
    "updated": (RecipeORM.updated_at.desc(), RecipeORM.id.desc()),
    "kcal": (RecipeORM.kcal_per_portion.is_(None), RecipeORM.kcal_per_portion, RecipeORM.name),
}

_FIELDS = (
    "name",
    "recipe_type",
    "yield_portions",
    "kcal_per_portion",
    "default_best_before_days",
    "tags_text",
    "ingredients_text",
    "prep_text",
    "reheat_text",
    "is_veggie",
    "is_vegan",
)


def _to_model(row: RecipeORM) -> Recipe:
    payload = {field: getattr(row, field) for field in _FIELDS}
    payload.update(id=row.id, created_at=row.created_at, updated_at=row.updated_at)
    return Recipe.model_validate(payload)


def list_recipes(
    *,
    search: str = "",
    recipe_type: Optional[str] = None,
    veggie: bool = False,
    vegan: bool = False,
    sort: str = "name",
    limit: Optional[int] = None,
    offset: Optional[int] = None,
) -> List[Recipe]:
    page_limit, page_offset = clamp_page(limit, offset, default=50, maximum=200)

    stmt = select(RecipeORM)
    if search:
        stmt = stmt.where(
            or_(text_match(RecipeORM.name, search), text_match(RecipeORM.tags_text, search))
        )
    if recipe_type:
        stmt = stmt.where(RecipeORM.recipe_type == recipe_type)
    if vegan:
        stmt = stmt.where(RecipeORM.is_vegan.is_(True))
    elif veggie:
        stmt = stmt.where(or_(RecipeORM.is_veggie.is_(True), RecipeORM.is_vegan.is_(True)))
    stmt = stmt.order_by(*RECIPE_SORTS.get(sort, RECIPE_SORTS["name"]))

    with session_scope() as session:
        rows = session.execute(stmt.limit(page_limit).offset(page_offset)).scalars().all()
        return [_to_model(row) for row in rows]


def get_recipe(recipe_id: int) -> Optional[Recipe]:
    with session_scope() as session:
        row = session.get(RecipeORM, recipe_id)
        if row is None:
            return None
        return _to_model(row)


def create_recipe(**fields: object) -> Recipe:
    with session_scope() as session:
        row = RecipeORM(**{key: value for key, value in fields.items() if key in _FIELDS})
        if row.is_vegan:
            row.is_veggie = True
        session.add(row)
        session.flush()
        session.refresh(row)
        return _to_model(row)


def update_recipe(recipe_id: int, **fields: object) -> Recipe:
    """Apply a partial update; only keys present in ``fields`` are touched."""

    with session_scope() as session:
        row = session.get(RecipeORM, recipe_id)
        if row is None:
            raise NotFoundError("recipe_not_found", f"Recipe {recipe_id} not found")

        for key, value in fields.items():
            if key in _FIELDS:
                setattr(row, key, value)
        if row.is_vegan:
            row.is_veggie = True

        session.flush()
        session.refresh(row)
        return _to_model(row)
