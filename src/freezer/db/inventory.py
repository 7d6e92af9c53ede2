"""Inventory item data access helpers (intake, listing, take-out)."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, List, Optional

from sqlalchemy import ColumnElement, func, or_, select, update
from sqlalchemy.orm import Session

from freezer import metrics
from freezer.config import get_settings
from freezer.errors import BusinessRuleError, FreezerError
from freezer.models.inventory import InventoryItem, ItemFilters
from freezer.selector import Candidate

from .models import ContainerORM, InventoryItemORM, MealSetORM, RecipeORM
from .repository import clamp_page, session_scope

logger = logging.getLogger(__name__)

ID_CODE_PREFIX = "F-"
INGREDIENT_TYPE = "INGREDIENT"
INVENTORY_VIEWS = ("single", "ingredient")


def expiring_cutoff(today: Optional[date] = None) -> date:
    """Last best-before date that still counts as expiring soon."""

    return (today or date.today()) + timedelta(days=get_settings().expiring_days)


def is_expiring(best_before: Optional[date], cutoff: date) -> bool:
    return best_before is not None and best_before <= cutoff


def active_clause() -> ColumnElement[bool]:
    return InventoryItemORM.is_active.is_(True)


def text_match(column, query: str) -> ColumnElement[bool]:
    return func.lower(column).contains(query.lower(), autoescape=True)


def display_code(row: InventoryItemORM) -> str:
    return row.id_code or f"{ID_CODE_PREFIX}{row.id:05d}"


def to_candidate(row: InventoryItemORM) -> Candidate:
    return Candidate(
        id=row.id,
        frozen_at=row.frozen_at,
        item_type=row.item_type,
        is_active=row.is_active,
    )


def to_model(
    row: InventoryItemORM,
    container_code: Optional[str] = None,
    cutoff: Optional[date] = None,
) -> InventoryItem:
    return InventoryItem.model_validate(
        {
            "id": row.id,
            "id_code": display_code(row),
            "name": row.name,
            "item_type": row.item_type,
            "frozen_at": row.frozen_at,
            "computed_best_before": row.computed_best_before,
            "meal_set_id": row.meal_set_id,
            "container_id": row.container_id,
            "container_code": container_code,
            "recipe_id": row.recipe_id,
            "storage_type": row.storage_type,
            "is_veggie": row.is_veggie or row.is_vegan,
            "is_vegan": row.is_vegan,
            "is_expiring": row.is_active
            and is_expiring(row.computed_best_before, cutoff or expiring_cutoff()),
            "is_active": row.is_active,
            "taken_out_at": row.taken_out_at,
            "note": row.note,
        }
    )


def list_items(
    view: str = "single",
    filters: Optional[ItemFilters] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
) -> List[InventoryItem]:
    """Return active items in FIFO order, restricted to the requested view."""

    filters = filters or ItemFilters()
    if view not in INVENTORY_VIEWS:
        view = INVENTORY_VIEWS[0]
    page_limit, page_offset = clamp_page(limit, offset)
    cutoff = expiring_cutoff()

    stmt = (
        select(InventoryItemORM, ContainerORM.container_code)
        .outerjoin(ContainerORM, ContainerORM.id == InventoryItemORM.container_id)
        .where(active_clause())
    )
    if view == "ingredient":
        stmt = stmt.where(InventoryItemORM.item_type == INGREDIENT_TYPE)
    else:
        stmt = stmt.where(InventoryItemORM.item_type != INGREDIENT_TYPE)
    if filters.q:
        stmt = stmt.where(
            or_(
                text_match(InventoryItemORM.name, filters.q),
                text_match(InventoryItemORM.id_code, filters.q),
            )
        )
    if filters.veggie:
        stmt = stmt.where(
            or_(InventoryItemORM.is_veggie.is_(True), InventoryItemORM.is_vegan.is_(True))
        )
    if filters.expiring:
        stmt = stmt.where(
            InventoryItemORM.computed_best_before.is_not(None),
            InventoryItemORM.computed_best_before <= cutoff,
        )
    stmt = stmt.order_by(InventoryItemORM.frozen_at, InventoryItemORM.id)
    stmt = stmt.limit(page_limit).offset(page_offset)

    with session_scope() as session:
        rows = session.execute(stmt).all()
        return [to_model(row, code, cutoff) for row, code in rows]


def get_item(item_id: int) -> Optional[InventoryItem]:
    with session_scope() as session:
        row = session.get(InventoryItemORM, item_id)
        if row is None:
            return None
        container = session.get(ContainerORM, row.container_id) if row.container_id else None
        return to_model(row, container.container_code if container else None)


def _resolve_best_before_days(
    session: Session,
    recipe_id: Optional[int],
    best_before_days: Optional[int],
) -> int:
    if recipe_id is not None:
        recipe = session.get(RecipeORM, recipe_id)
        if recipe is None:
            raise BusinessRuleError("unknown_recipe", f"Recipe {recipe_id} does not exist")
        if best_before_days is None and recipe.default_best_before_days:
            return recipe.default_best_before_days
    return best_before_days or get_settings().default_best_before_days


def _validate_storage(session: Session, storage_type: str, container_id: Optional[int]) -> None:
    if storage_type != "BOX":
        if container_id is not None:
            raise BusinessRuleError(
                "container_not_allowed",
                f"Storage type {storage_type} cannot be assigned to a box",
            )
        return

    if container_id is None:
        raise BusinessRuleError("container_required", "Storage type BOX needs a container_id")
    container = session.get(ContainerORM, container_id)
    if container is None:
        raise BusinessRuleError("unknown_container", f"Container {container_id} does not exist")
    if not container.is_active:
        raise BusinessRuleError(
            "container_inactive", f"Container {container.container_code} is not active"
        )


def _id_code_taken(session: Session, id_code: str) -> bool:
    return session.execute(
        select(InventoryItemORM.id).where(InventoryItemORM.id_code == id_code).limit(1)
    ).first() is not None


def _assign_id_code(session: Session, row: InventoryItemORM) -> None:
    base = f"{ID_CODE_PREFIX}{row.id:05d}"
    candidate = base
    suffix = 1
    while _id_code_taken(session, candidate):
        suffix += 1
        candidate = f"{base}-{suffix}"
    row.id_code = candidate


def create_item(
    *,
    name: str,
    item_type: str = "MEAL",
    id_code: Optional[str] = None,
    frozen_at: Optional[date] = None,
    best_before_days: Optional[int] = None,
    meal_set_id: Optional[int] = None,
    recipe_id: Optional[int] = None,
    storage_type: str = "FREE",
    container_id: Optional[int] = None,
    is_veggie: bool = False,
    is_vegan: bool = False,
    note: Optional[str] = None,
) -> InventoryItem:
    """Record a newly frozen item and compute its best-before date."""

    with session_scope() as session:
        if meal_set_id is not None and session.get(MealSetORM, meal_set_id) is None:
            raise BusinessRuleError("unknown_meal_set", f"Meal set {meal_set_id} does not exist")
        _validate_storage(session, storage_type, container_id)
        if id_code and _id_code_taken(session, id_code):
            raise BusinessRuleError("duplicate_id_code", f"ID code {id_code} is already in use")

        frozen = frozen_at or date.today()
        days = _resolve_best_before_days(session, recipe_id, best_before_days)
        row = InventoryItemORM(
            id_code=id_code,
            name=name,
            item_type=item_type,
            frozen_at=frozen,
            computed_best_before=frozen + timedelta(days=days),
            meal_set_id=meal_set_id,
            recipe_id=recipe_id,
            storage_type=storage_type,
            container_id=container_id,
            is_veggie=is_veggie or is_vegan,
            is_vegan=is_vegan,
            note=note,
            is_active=True,
        )
        session.add(row)
        session.flush()
        if not row.id_code:
            _assign_id_code(session, row)
            session.flush()

        container = session.get(ContainerORM, container_id) if container_id else None
        logger.info(
            "Item frozen id=%s code=%s type=%s best_before=%s",
            row.id,
            row.id_code,
            row.item_type,
            row.computed_best_before,
        )
        return to_model(row, container.container_code if container else None)


def mark_taken_out(
    session: Session,
    item_ids: Iterable[int],
    *,
    meal_set_id: Optional[int] = None,
) -> List[int]:
    """Flip the given items to inactive inside the caller's transaction.

    Every id must exist and still be active (and belong to ``meal_set_id`` when
    given); otherwise nothing is changed and :class:`BusinessRuleError` is raised.
    """

    ids = list(dict.fromkeys(int(item_id) for item_id in item_ids))
    if not ids:
        raise BusinessRuleError("no_items_selected", "No inventory items were selected")

    rows = (
        session.execute(
            select(InventoryItemORM).where(InventoryItemORM.id.in_(ids)).with_for_update()
        )
        .scalars()
        .all()
    )
    found = {row.id: row for row in rows}
    missing = [item_id for item_id in ids if item_id not in found]
    taken = [item_id for item_id in ids if item_id in found and not found[item_id].is_active]
    if missing or taken:
        raise BusinessRuleError(
            "items_unavailable",
            "Some items do not exist or were already taken out",
            details={"missing": missing, "taken_out": taken},
        )
    if meal_set_id is not None:
        foreign = [item_id for item_id in ids if found[item_id].meal_set_id != meal_set_id]
        if foreign:
            raise BusinessRuleError(
                "item_not_in_set",
                f"Items do not belong to meal set {meal_set_id}",
                details={"item_ids": foreign},
            )

    taken_out_at = datetime.now(timezone.utc).replace(tzinfo=None)
    result = session.execute(
        update(InventoryItemORM)
        .where(InventoryItemORM.id.in_(ids), active_clause())
        .values(is_active=False, taken_out_at=taken_out_at)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != len(ids):
        # Another transaction flipped one of the rows between our read and write.
        raise BusinessRuleError(
            "items_unavailable",
            "Items were taken out concurrently",
            details={"item_ids": ids},
        )
    return ids


def takeout_items(item_ids: Iterable[int]) -> List[int]:
    """Atomically take out an explicit list of items."""

    try:
        with session_scope() as session:
            changed = mark_taken_out(session, item_ids)
    except FreezerError as exc:
        metrics.TAKEOUT_FAILURES.labels(code=exc.code).inc()
        logger.info("Take-out rejected code=%s details=%s", exc.code, exc.details)
        raise

    metrics.ITEMS_TAKEN_OUT.labels(source="items").inc(len(changed))
    logger.info("Items taken out ids=%s", changed)
    return changed
