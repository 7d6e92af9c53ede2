"""FIFO selection of inventory items for meal-set take-out.

Active items are consumed oldest-frozen first. Items frozen on the same date are
taken in insertion order (ascending id). A meal set's composition decides how
many items of which type make up one complete set; a set without a composition
is complete with a single item of any type.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Sequence

from freezer.errors import NoItemsAvailableError


@dataclass(frozen=True)
class Candidate:
    """Minimal view of an inventory row needed for selection."""

    id: int
    frozen_at: date
    item_type: str = "MEAL"
    is_active: bool = True


@dataclass(frozen=True)
class Component:
    """Part of a meal set's composition; ``item_type`` of None matches any item."""

    quantity: int = 1
    item_type: Optional[str] = None

    def matches(self, candidate: Candidate) -> bool:
        return self.item_type is None or candidate.item_type == self.item_type


DEFAULT_COMPOSITION: tuple[Component, ...] = (Component(quantity=1),)


def fifo_key(candidate: Candidate) -> tuple[date, int]:
    return (candidate.frozen_at, candidate.id)


def fifo_order(candidates: Iterable[Candidate]) -> List[Candidate]:
    """Return the active candidates sorted by freeze date, then id."""

    return sorted((c for c in candidates if c.is_active), key=fifo_key)


def _normalize(components: Sequence[Component]) -> List[Component]:
    parts = [component for component in components if component.quantity > 0]
    if not parts:
        parts = list(DEFAULT_COMPOSITION)
    # Typed components claim their items before wildcards can take them.
    return sorted(parts, key=lambda component: component.item_type is None)


def _pick(components: List[Component], ordered: List[Candidate]) -> Optional[List[Candidate]]:
    taken: set[int] = set()
    picks: List[Candidate] = []
    for component in components:
        matching = [c for c in ordered if c.id not in taken and component.matches(c)]
        if len(matching) < component.quantity:
            return None
        chosen = matching[: component.quantity]
        taken.update(c.id for c in chosen)
        picks.extend(chosen)
    return sorted(picks, key=fifo_key)


def select_single_set(
    components: Sequence[Component],
    candidates: Iterable[Candidate],
) -> List[int]:
    """Pick the ids of the oldest items forming one complete set.

    Raises :class:`NoItemsAvailableError` when not even one set can be completed;
    a partial selection is never returned.
    """

    ordered = fifo_order(candidates)
    picks = _pick(_normalize(components), ordered)
    if picks is None:
        raise NoItemsAvailableError(
            details={"available": len(ordered)},
        )
    return [c.id for c in picks]


def complete_count(components: Sequence[Component], candidates: Iterable[Candidate]) -> int:
    """Number of full sets that can be assembled by repeated FIFO selection."""

    parts = _normalize(components)
    remaining = fifo_order(candidates)
    count = 0
    while True:
        picks = _pick(parts, remaining)
        if picks is None:
            return count
        count += 1
        used = {c.id for c in picks}
        remaining = [c for c in remaining if c.id not in used]


__all__ = [
    "Candidate",
    "Component",
    "complete_count",
    "fifo_order",
    "select_single_set",
]
