"""Роуты /assets/components — комплектующие."""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from backend.core.errors import BusinessValidationError
from backend.modules.assets.dependencies import get_db, require_permission
from backend.modules.assets.models import INACTIVE_ASSET_STATUSES, Component
from backend.modules.assets.schemas.component import (
    ComponentCreate,
    ComponentOut,
    ComponentUpdate,
    InstallRequest,
)
from backend.modules.assets.services import assignment_service
from backend.modules.assets.services.persistence import commit_or_raise, reject_nulls

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/components", tags=["components"])


@router.get(
    "/",
    response_model=List[ComponentOut],
    dependencies=[Depends(require_permission("component:read"))],
)
def list_components(
    db: Session = Depends(get_db),
    status: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
    assigned_to_id: Optional[UUID] = Query(None),
    installed_in_id: Optional[UUID] = Query(None),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> List[Component]:
    q = db.query(Component)
    if status:
        q = q.filter(Component.status == status)
    if type:
        q = q.filter(Component.type == type)
    if assigned_to_id:
        q = q.filter(Component.assigned_to_id == assigned_to_id)
    if installed_in_id:
        q = q.filter(Component.installed_in_id == installed_in_id)
    if search and search.strip():
        s = f"%{search.strip()}%"
        q = q.filter(
            or_(
                Component.name.ilike(s),
                Component.serial_number.ilike(s),
                Component.manufacturer.ilike(s),
            )
        )
    q = q.order_by(Component.created_at.desc(), Component.id)
    offset = (page - 1) * page_size
    return q.offset(offset).limit(page_size).all()


@router.get(
    "/inactive",
    response_model=List[ComponentOut],
    dependencies=[Depends(require_permission("component:read"))],
)
def list_inactive_components(db: Session = Depends(get_db)) -> List[Component]:
    return (
        db.query(Component)
        .filter(Component.status.in_(INACTIVE_ASSET_STATUSES))
        .order_by(Component.updated_at.desc(), Component.id)
        .all()
    )


@router.get(
    "/{component_id}",
    response_model=ComponentOut,
    dependencies=[Depends(require_permission("component:read"))],
)
def get_component(component_id: UUID, db: Session = Depends(get_db)) -> Component:
    return assignment_service.get_asset(db, "component", component_id)


@router.post(
    "/",
    response_model=ComponentOut,
    status_code=201,
    dependencies=[Depends(require_permission("component:create"))],
)
def create_component(payload: ComponentCreate, db: Session = Depends(get_db)) -> Component:
    component = Component(**payload.model_dump())
    db.add(component)
    commit_or_raise(db)
    db.refresh(component)
    logger.info("Создано комплектующее %s", component.id)
    return component


@router.patch(
    "/{component_id}",
    response_model=ComponentOut,
    dependencies=[Depends(require_permission("component:update"))],
)
def update_component(
    component_id: UUID, payload: ComponentUpdate, db: Session = Depends(get_db)
) -> Component:
    component = assignment_service.get_asset(db, "component", component_id)
    data = payload.model_dump(exclude_unset=True)
    reject_nulls(Component, data)
    assignment_service.check_status_change(component, data.get("status"))
    for field, value in data.items():
        setattr(component, field, value)
    commit_or_raise(db)
    db.refresh(component)
    return component


@router.delete(
    "/{component_id}",
    dependencies=[Depends(require_permission("component:delete"))],
)
def delete_component(component_id: UUID, db: Session = Depends(get_db)) -> dict:
    component = assignment_service.get_asset(db, "component", component_id)
    if component.assigned_to_id is not None:
        raise BusinessValidationError(
            "Нельзя удалить комплектующее, выданное сотруднику", code="AssetInUse"
        )
    db.delete(component)
    commit_or_raise(db)
    logger.info("Удалено комплектующее %s", component_id)
    return {"message": "Комплектующее удалено"}


@router.post(
    "/{component_id}/install",
    response_model=ComponentOut,
    dependencies=[Depends(require_permission("assignment:write"))],
)
def install_component(
    component_id: UUID, payload: InstallRequest, db: Session = Depends(get_db)
) -> Component:
    return assignment_service.install(db, component_id, payload.device_id)


@router.post(
    "/{component_id}/uninstall",
    response_model=ComponentOut,
    dependencies=[Depends(require_permission("assignment:write"))],
)
def uninstall_component(component_id: UUID, db: Session = Depends(get_db)) -> Component:
    return assignment_service.uninstall(db, component_id)
