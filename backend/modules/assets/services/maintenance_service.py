"""Журнал обслуживания устройств."""
import calendar
import logging
from datetime import date
from uuid import UUID

from sqlalchemy.orm import Session

from backend.core.config import settings
from backend.core.errors import BusinessValidationError, NotFoundError
from backend.modules.assets.models import Device, DeviceMaintenance
from backend.modules.assets.schemas.device import MaintenanceCreate
from backend.modules.assets.services.persistence import commit_or_raise

logger = logging.getLogger(__name__)


def add_months(value: date, months: int) -> date:
    """Сдвигает дату на months месяцев; день прижимается к концу месяца (31.08 + 6 -> 28/29.02)."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def add_maintenance_record(db: Session, device_id: UUID, payload: MaintenanceCreate) -> Device:
    """Добавляет запись в журнал и пересчитывает даты обслуживания."""
    device = db.query(Device).filter(Device.id == device_id).first()
    if not device:
        raise NotFoundError("Устройство не найдено", code="DeviceNotFound")
    if device.status == "disposed":
        raise BusinessValidationError("Устройство списано", code="AssetDisposed")

    device.maintenance_history.append(
        DeviceMaintenance(
            position=len(device.maintenance_history),
            date=payload.date,
            description=payload.description,
            technician=payload.technician,
        )
    )
    device.last_maintenance_date = payload.date
    device.next_maintenance_date = add_months(payload.date, settings.maintenance_interval_months)
    commit_or_raise(db)
    db.refresh(device)
    logger.info(
        "Обслуживание устройства %s (%s), следующее: %s",
        device.id,
        payload.date,
        device.next_maintenance_date,
    )
    return device
