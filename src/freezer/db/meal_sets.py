"""Meal-set data access helpers and FIFO take-out."""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import List, Optional, Sequence

from sqlalchemy import exists, or_, select
from sqlalchemy.orm import Session

from freezer import metrics
from freezer.errors import FreezerError, NoItemsAvailableError, NotFoundError
from freezer.models.inventory import (
    ItemFilters,
    MealSetComponent,
    MealSetDetail,
    MealSetSummary,
)
from freezer.selector import Component, complete_count, select_single_set

from .inventory import (
    active_clause,
    display_code,
    expiring_cutoff,
    is_expiring,
    mark_taken_out,
    text_match,
    to_candidate,
    to_model,
)
from .models import ContainerORM, InventoryItemORM, MealSetComponentORM, MealSetORM
from .repository import clamp_page, session_scope

logger = logging.getLogger(__name__)

ActiveRows = List[tuple[InventoryItemORM, Optional[str]]]


def _not_found(meal_set_id: int) -> NotFoundError:
    return NotFoundError("meal_set_not_found", f"Meal set {meal_set_id} not found")


def _load_components(session: Session, set_ids: Sequence[int]) -> dict[int, list[Component]]:
    components: dict[int, list[Component]] = defaultdict(list)
    if not set_ids:
        return components
    rows = session.execute(
        select(MealSetComponentORM)
        .where(MealSetComponentORM.meal_set_id.in_(set_ids))
        .order_by(MealSetComponentORM.id)
    ).scalars()
    for row in rows:
        components[row.meal_set_id].append(
            Component(quantity=row.quantity, item_type=row.item_type)
        )
    return components


def _load_active_items(session: Session, set_ids: Sequence[int]) -> dict[int, ActiveRows]:
    items: dict[int, ActiveRows] = defaultdict(list)
    if not set_ids:
        return items
    rows = session.execute(
        select(InventoryItemORM, ContainerORM.container_code)
        .outerjoin(ContainerORM, ContainerORM.id == InventoryItemORM.container_id)
        .where(InventoryItemORM.meal_set_id.in_(set_ids), active_clause())
        .order_by(InventoryItemORM.frozen_at, InventoryItemORM.id)
    ).all()
    for row, code in rows:
        items[row.meal_set_id].append((row, code))
    return items


def _fifo_selection(components: Sequence[Component], rows: ActiveRows) -> list[int]:
    try:
        return select_single_set(components, (to_candidate(row) for row, _ in rows))
    except NoItemsAvailableError:
        return []


def _summary_fields(
    meal_set: MealSetORM,
    components: Sequence[Component],
    rows: ActiveRows,
    cutoff: date,
) -> dict[str, object]:
    by_id = {row.id: row for row, _ in rows}
    selection = _fifo_selection(components, rows)
    return {
        "id": meal_set.id,
        "name": meal_set.name,
        "is_veggie": meal_set.is_veggie or meal_set.is_vegan,
        "is_vegan": meal_set.is_vegan,
        "is_expiring": any(is_expiring(row.computed_best_before, cutoff) for row, _ in rows),
        "complete_count": complete_count(components, (to_candidate(row) for row, _ in rows)),
        "active_count": len(rows),
        "fifo_ids": [display_code(by_id[item_id]) for item_id in selection],
        "fifo_item_ids": selection,
        "note": meal_set.note,
    }


def list_sets(
    filters: Optional[ItemFilters] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
) -> List[MealSetSummary]:
    """Return meal sets ordered by name, with their next FIFO selection."""

    filters = filters or ItemFilters()
    page_limit, page_offset = clamp_page(limit, offset)
    cutoff = expiring_cutoff()

    stmt = select(MealSetORM)
    if filters.q:
        stmt = stmt.where(text_match(MealSetORM.name, filters.q))
    if filters.veggie:
        stmt = stmt.where(or_(MealSetORM.is_veggie.is_(True), MealSetORM.is_vegan.is_(True)))
    if filters.expiring:
        stmt = stmt.where(
            exists().where(
                InventoryItemORM.meal_set_id == MealSetORM.id,
                active_clause(),
                InventoryItemORM.computed_best_before.is_not(None),
                InventoryItemORM.computed_best_before <= cutoff,
            )
        )
    stmt = stmt.order_by(MealSetORM.name, MealSetORM.id).limit(page_limit).offset(page_offset)

    with session_scope() as session:
        sets = session.execute(stmt).scalars().all()
        set_ids = [meal_set.id for meal_set in sets]
        components = _load_components(session, set_ids)
        items = _load_active_items(session, set_ids)
        return [
            MealSetSummary.model_validate(
                _summary_fields(meal_set, components[meal_set.id], items[meal_set.id], cutoff)
            )
            for meal_set in sets
        ]


def _detail(session: Session, meal_set: MealSetORM) -> MealSetDetail:
    cutoff = expiring_cutoff()
    components = _load_components(session, [meal_set.id])[meal_set.id]
    rows = _load_active_items(session, [meal_set.id])[meal_set.id]
    payload = _summary_fields(meal_set, components, rows, cutoff)
    payload["components"] = [
        MealSetComponent(item_type=component.item_type, quantity=component.quantity)
        for component in components
    ]
    payload["items"] = [to_model(row, code, cutoff) for row, code in rows]
    return MealSetDetail.model_validate(payload)


def get_set(meal_set_id: int) -> MealSetDetail:
    """Return a meal set with all of its active items in FIFO order."""

    with session_scope() as session:
        meal_set = session.get(MealSetORM, meal_set_id)
        if meal_set is None:
            raise _not_found(meal_set_id)
        return _detail(session, meal_set)


def create_set(
    *,
    name: str,
    is_veggie: bool = False,
    is_vegan: bool = False,
    note: Optional[str] = None,
    components: Sequence[MealSetComponent | dict] = (),
) -> MealSetDetail:
    with session_scope() as session:
        meal_set = MealSetORM(
            name=name,
            is_veggie=is_veggie or is_vegan,
            is_vegan=is_vegan,
            note=note,
        )
        session.add(meal_set)
        session.flush()
        for component in components:
            parsed = MealSetComponent.model_validate(component)
            session.add(
                MealSetComponentORM(
                    meal_set_id=meal_set.id,
                    item_type=parsed.item_type,
                    quantity=parsed.quantity,
                )
            )
        session.flush()
        logger.info("Meal set created id=%s name=%s", meal_set.id, meal_set.name)
        return _detail(session, meal_set)


def _choose(session: Session, meal_set_id: int) -> list[int]:
    if session.get(MealSetORM, meal_set_id) is None:
        raise _not_found(meal_set_id)
    components = _load_components(session, [meal_set_id])[meal_set_id]
    rows = _load_active_items(session, [meal_set_id])[meal_set_id]
    return select_single_set(components, (to_candidate(row) for row, _ in rows))


def choose_fifo_items_for_single_set(meal_set_id: int) -> list[int]:
    """Ids of the oldest active items forming one complete set (no mutation)."""

    with session_scope() as session:
        return _choose(session, meal_set_id)


def takeout_set(meal_set_id: int, item_ids: Optional[Sequence[int]] = None) -> list[int]:
    """Take out one unit of a meal set.

    Without explicit ``item_ids`` the FIFO selection is used. Selection and the
    status flip share one transaction, so either every item is taken out or none.
    """

    source = "explicit" if item_ids else "fifo"
    try:
        with session_scope() as session:
            if item_ids:
                if session.get(MealSetORM, meal_set_id) is None:
                    raise _not_found(meal_set_id)
                selected: Sequence[int] = item_ids
            else:
                selected = _choose(session, meal_set_id)
            changed = mark_taken_out(session, selected, meal_set_id=meal_set_id)
    except FreezerError as exc:
        metrics.TAKEOUT_FAILURES.labels(code=exc.code).inc()
        logger.info(
            "Meal set take-out rejected set=%s code=%s details=%s",
            meal_set_id,
            exc.code,
            exc.details,
        )
        raise

    metrics.ITEMS_TAKEN_OUT.labels(source=source).inc(len(changed))
    logger.info("Meal set taken out set=%s source=%s ids=%s", meal_set_id, source, changed)
    return changed
