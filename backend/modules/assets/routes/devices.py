"""Роуты /assets/devices — устройства."""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from backend.core.errors import BusinessValidationError, DuplicateKeyError, NotFoundError
from backend.modules.assets.dependencies import get_db, require_permission
from backend.modules.assets.models import INACTIVE_ASSET_STATUSES, Device
from backend.modules.assets.schemas.device import (
    DeviceCreate,
    DeviceOut,
    DeviceUpdate,
    MaintenanceCreate,
)
from backend.modules.assets.services.assignment_service import check_status_change
from backend.modules.assets.services.maintenance_service import add_maintenance_record
from backend.modules.assets.services.persistence import commit_or_raise, reject_nulls

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/devices", tags=["devices"])

SORT_FIELDS = {
    "created_at": Device.created_at,
    "name": Device.name,
    "serial_number": Device.serial_number,
    "purchase_date": Device.purchase_date,
    "status": Device.status,
}


def _get_device(db: Session, device_id: UUID) -> Device:
    device = db.query(Device).filter(Device.id == device_id).first()
    if not device:
        raise NotFoundError("Устройство не найдено", code="DeviceNotFound")
    return device


def _ensure_serial_free(db: Session, serial_number: str, exclude_id: Optional[UUID] = None) -> None:
    q = db.query(Device.id).filter(Device.serial_number == serial_number)
    if exclude_id is not None:
        q = q.filter(Device.id != exclude_id)
    if q.first() is not None:
        raise DuplicateKeyError(
            "Устройство с таким серийным номером уже существует", code="DuplicateSerialNumber"
        )


@router.get(
    "/",
    response_model=List[DeviceOut],
    dependencies=[Depends(require_permission("device:read"))],
)
def list_devices(
    db: Session = Depends(get_db),
    status: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
    assigned_to_id: Optional[UUID] = Query(None),
    search: Optional[str] = Query(None),
    sort_by: str = Query("created_at"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> List[Device]:
    q = db.query(Device)
    if status:
        q = q.filter(Device.status == status)
    if type:
        q = q.filter(Device.type == type)
    if assigned_to_id:
        q = q.filter(Device.assigned_to_id == assigned_to_id)
    if search and search.strip():
        s = f"%{search.strip()}%"
        q = q.filter(
            or_(
                Device.name.ilike(s),
                Device.serial_number.ilike(s),
                Device.manufacturer.ilike(s),
                Device.model.ilike(s),
            )
        )
    column = SORT_FIELDS.get(sort_by, Device.created_at)
    q = q.order_by(column.asc() if sort_order == "asc" else column.desc(), Device.id)
    offset = (page - 1) * page_size
    return q.offset(offset).limit(page_size).all()


@router.get(
    "/inactive",
    response_model=List[DeviceOut],
    dependencies=[Depends(require_permission("device:read"))],
)
def list_inactive_devices(db: Session = Depends(get_db)) -> List[Device]:
    """Устройства в ремонте или списанные."""
    return (
        db.query(Device)
        .filter(Device.status.in_(INACTIVE_ASSET_STATUSES))
        .order_by(Device.updated_at.desc(), Device.id)
        .all()
    )


@router.get(
    "/{device_id}",
    response_model=DeviceOut,
    dependencies=[Depends(require_permission("device:read"))],
)
def get_device(device_id: UUID, db: Session = Depends(get_db)) -> Device:
    return _get_device(db, device_id)


@router.post(
    "/",
    response_model=DeviceOut,
    status_code=201,
    dependencies=[Depends(require_permission("device:create"))],
)
def create_device(payload: DeviceCreate, db: Session = Depends(get_db)) -> Device:
    _ensure_serial_free(db, payload.serial_number)
    device = Device(**payload.model_dump())
    db.add(device)
    commit_or_raise(db)
    db.refresh(device)
    logger.info("Создано устройство %s (%s)", device.id, device.serial_number)
    return device


@router.patch(
    "/{device_id}",
    response_model=DeviceOut,
    dependencies=[Depends(require_permission("device:update"))],
)
def update_device(
    device_id: UUID, payload: DeviceUpdate, db: Session = Depends(get_db)
) -> Device:
    device = _get_device(db, device_id)
    data = payload.model_dump(exclude_unset=True)
    reject_nulls(Device, data)
    if data.get("serial_number") and data["serial_number"] != device.serial_number:
        _ensure_serial_free(db, data["serial_number"], exclude_id=device.id)
    check_status_change(device, data.get("status"))
    for field, value in data.items():
        setattr(device, field, value)
    commit_or_raise(db)
    db.refresh(device)
    return device


@router.delete(
    "/{device_id}",
    dependencies=[Depends(require_permission("device:delete"))],
)
def delete_device(device_id: UUID, db: Session = Depends(get_db)) -> dict:
    device = _get_device(db, device_id)
    if device.assigned_to_id is not None:
        raise BusinessValidationError(
            "Нельзя удалить устройство, закреплённое за сотрудником", code="AssetInUse"
        )
    # Установленные комплектующие остаются на учёте без устройства
    for component in list(device.components):
        component.installed_in_id = None
    db.delete(device)
    commit_or_raise(db)
    logger.info("Удалено устройство %s", device_id)
    return {"message": "Устройство удалено"}


@router.post(
    "/{device_id}/maintenance",
    response_model=DeviceOut,
    dependencies=[Depends(require_permission("device:maintain"))],
)
def add_device_maintenance(
    device_id: UUID, payload: MaintenanceCreate, db: Session = Depends(get_db)
) -> Device:
    """Добавить запись обслуживания; дата следующего обслуживания пересчитывается."""
    return add_maintenance_record(db, device_id, payload)
