"""Storage container data models."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

Shape = Literal["RECT", "ROUND", "OVAL"]
Material = Literal["PLASTIC", "GLASS"]


class ContainerType(BaseModel):
    id: int
    shape: str
    volume_ml: int
    height_mm: Optional[int] = None
    width_mm: Optional[int] = None
    length_mm: Optional[int] = None
    material: Optional[str] = None
    note: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class Container(BaseModel):
    """Storage box, flattened with the shape/volume/material of its type."""

    id: int
    container_code: str
    container_type_id: Optional[int] = None
    shape: Optional[str] = None
    volume_ml: Optional[int] = None
    material: Optional[str] = None
    note: Optional[str] = None
    is_active: bool = True

    model_config = ConfigDict(frozen=True)
