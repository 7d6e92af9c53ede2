"""Container type and container (box) data access helpers."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from freezer.errors import BusinessRuleError, NotFoundError
from freezer.models.containers import Container, ContainerType

from .models import ContainerORM, ContainerTypeORM
from .repository import session_scope

_UNSET = object()
ACTIVE_FILTERS = ("1", "0", "all")


def _type_to_model(row: ContainerTypeORM) -> ContainerType:
    return ContainerType.model_validate(
        {
            "id": row.id,
            "shape": row.shape,
            "volume_ml": row.volume_ml,
            "height_mm": row.height_mm,
            "width_mm": row.width_mm,
            "length_mm": row.length_mm,
            "material": row.material,
            "note": row.note,
        }
    )


def _to_model(row: ContainerORM, container_type: Optional[ContainerTypeORM]) -> Container:
    return Container.model_validate(
        {
            "id": row.id,
            "container_code": row.container_code,
            "container_type_id": row.container_type_id,
            "shape": container_type.shape if container_type else None,
            "volume_ml": container_type.volume_ml if container_type else None,
            "material": container_type.material if container_type else None,
            "note": row.note,
            "is_active": row.is_active,
        }
    )


def list_types() -> List[ContainerType]:
    with session_scope() as session:
        rows = (
            session.execute(
                select(ContainerTypeORM).order_by(
                    ContainerTypeORM.shape, ContainerTypeORM.volume_ml, ContainerTypeORM.id
                )
            )
            .scalars()
            .all()
        )
        return [_type_to_model(row) for row in rows]


def create_type(
    *,
    shape: str,
    volume_ml: int,
    height_mm: Optional[int] = None,
    width_mm: Optional[int] = None,
    length_mm: Optional[int] = None,
    material: Optional[str] = None,
    note: Optional[str] = None,
) -> ContainerType:
    with session_scope() as session:
        row = ContainerTypeORM(
            shape=shape,
            volume_ml=volume_ml,
            height_mm=height_mm,
            width_mm=width_mm,
            length_mm=length_mm,
            material=material,
            note=note,
        )
        session.add(row)
        session.flush()
        return _type_to_model(row)


def list_containers(active: str = "1") -> List[Container]:
    """Return containers filtered by status: ``"1"`` active, ``"0"`` inactive, ``"all"``."""

    if active not in ACTIVE_FILTERS:
        active = "1"

    stmt = select(ContainerORM, ContainerTypeORM).outerjoin(
        ContainerTypeORM, ContainerTypeORM.id == ContainerORM.container_type_id
    )
    if active != "all":
        stmt = stmt.where(ContainerORM.is_active.is_(active == "1"))
    stmt = stmt.order_by(ContainerORM.container_code, ContainerORM.id)

    with session_scope() as session:
        return [_to_model(row, container_type) for row, container_type in session.execute(stmt).all()]


def _check_type(session: Session, container_type_id: Optional[int]) -> Optional[ContainerTypeORM]:
    if container_type_id is None:
        return None
    container_type = session.get(ContainerTypeORM, container_type_id)
    if container_type is None:
        raise BusinessRuleError(
            "unknown_container_type", f"Container type {container_type_id} does not exist"
        )
    return container_type


def _check_code(session: Session, container_code: str, exclude_id: Optional[int] = None) -> None:
    stmt = select(ContainerORM.id).where(ContainerORM.container_code == container_code)
    if exclude_id is not None:
        stmt = stmt.where(ContainerORM.id != exclude_id)
    if session.execute(stmt.limit(1)).first() is not None:
        raise BusinessRuleError(
            "duplicate_container_code", f"Container code {container_code} is already in use"
        )


def create_container(
    *,
    container_code: str,
    container_type_id: Optional[int] = None,
    note: Optional[str] = None,
    is_active: bool = True,
) -> Container:
    with session_scope() as session:
        container_type = _check_type(session, container_type_id)
        _check_code(session, container_code)
        row = ContainerORM(
            container_code=container_code,
            container_type_id=container_type_id,
            note=note,
            is_active=is_active,
        )
        session.add(row)
        session.flush()
        return _to_model(row, container_type)


def update_container(
    container_id: int,
    *,
    container_code: Optional[str] = None,
    container_type_id: Optional[int] | object = _UNSET,
    note: Optional[str] | object = _UNSET,
    is_active: Optional[bool] = None,
) -> Container:
    with session_scope() as session:
        row = session.get(ContainerORM, container_id)
        if row is None:
            raise NotFoundError("container_not_found", f"Container {container_id} not found")

        if container_code is not None and container_code != row.container_code:
            _check_code(session, container_code, exclude_id=container_id)
            row.container_code = container_code
        if container_type_id is not _UNSET:
            _check_type(session, container_type_id)  # type: ignore[arg-type]
            row.container_type_id = container_type_id  # type: ignore[assignment]
        if note is not _UNSET:
            row.note = note  # type: ignore[assignment]
        if is_active is not None:
            row.is_active = is_active

        session.flush()
        container_type = (
            session.get(ContainerTypeORM, row.container_type_id) if row.container_type_id else None
        )
        return _to_model(row, container_type)
