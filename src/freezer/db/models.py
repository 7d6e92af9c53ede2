"""SQLAlchemy models representing freezer inventory tables."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base class for freezer ORM models."""


class ContainerTypeORM(Base):
    """Box shape/volume/material definition."""

    __tablename__ = "container_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    shape: Mapped[str] = mapped_column(String(16), nullable=False)
    volume_ml: Mapped[int] = mapped_column(Integer, nullable=False)
    height_mm: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    width_mm: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    length_mm: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    material: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    note: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )


class ContainerORM(Base):
    """Physical storage box labelled with a unique code."""

    __tablename__ = "containers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    container_code: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    container_type_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("container_types.id"), nullable=True
    )
    note: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class RecipeORM(Base):
    """Recipe catalog entry."""

    __tablename__ = "recipes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    recipe_type: Mapped[str] = mapped_column(String(16), nullable=False, default="MEAL")
    yield_portions: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    kcal_per_portion: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    default_best_before_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    tags_text: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    ingredients_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    prep_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reheat_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_veggie: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_vegan: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class MealSetORM(Base):
    """Named grouping of items that together make one meal."""

    __tablename__ = "meal_sets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_veggie: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_vegan: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )


class MealSetComponentORM(Base):
    """How many items (optionally of one type) a single meal set requires."""

    __tablename__ = "meal_set_components"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    meal_set_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("meal_sets.id", ondelete="CASCADE"), nullable=False
    )
    item_type: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)


class InventoryItemORM(Base):
    """Frozen item; rows are never deleted, only flagged inactive on take-out."""

    __tablename__ = "inventory_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id_code: Mapped[Optional[str]] = mapped_column(String(32), nullable=True, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    item_type: Mapped[str] = mapped_column(String(16), nullable=False, default="MEAL")
    frozen_at: Mapped[date] = mapped_column(Date, nullable=False)
    computed_best_before: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    meal_set_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("meal_sets.id"), nullable=True
    )
    container_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("containers.id"), nullable=True
    )
    recipe_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("recipes.id"), nullable=True
    )
    storage_type: Mapped[str] = mapped_column(String(16), nullable=False, default="FREE")
    is_veggie: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_vegan: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    taken_out_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_inventory_items_fifo", "meal_set_id", "is_active", "frozen_at", "id"),
    )


__all__ = [
    "Base",
    "ContainerTypeORM",
    "ContainerORM",
    "RecipeORM",
    "MealSetORM",
    "MealSetComponentORM",
    "InventoryItemORM",
]
