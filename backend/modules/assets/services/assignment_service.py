"""
Закрепление активов за сотрудниками и установка комплектующих в устройства.

Единственный источник истины о держателе актива — поле assigned_to_id самого актива.
Списки активов сотрудника строятся обратным поиском, отдельно не хранятся.
"""
import logging
from typing import Dict, List, Optional, Union
from uuid import UUID

from sqlalchemy.orm import Session

from backend.core.errors import (
    AlreadyAssignedError,
    BusinessValidationError,
    ConflictingAssignmentError,
    NotAssignedToEmployeeError,
    NotFoundError,
)
from backend.modules.assets.models import Account, Component, Device, Employee
from backend.modules.assets.services.persistence import commit_or_raise

logger = logging.getLogger(__name__)

Asset = Union[Device, Component, Account]

ASSET_MODELS = {
    "device": Device,
    "component": Component,
    "account": Account,
}

ASSET_LABELS = {
    "device": "Устройство",
    "component": "Комплектующее",
    "account": "Учётная запись",
}


def get_asset(db: Session, asset_type: str, asset_id: UUID) -> Asset:
    model = ASSET_MODELS.get(asset_type)
    if model is None:
        raise BusinessValidationError(
            f"Недопустимый тип актива: {asset_type}. Допустимо: device, component, account",
            code="InvalidAssetType",
        )
    asset = db.query(model).filter(model.id == asset_id).first()
    if not asset:
        raise NotFoundError(f"{ASSET_LABELS[asset_type]} не найдено", code="AssetNotFound")
    return asset


def get_employee(db: Session, employee_id: UUID) -> Employee:
    employee = db.query(Employee).filter(Employee.id == employee_id).first()
    if not employee:
        raise NotFoundError("Сотрудник не найден", code="EmployeeNotFound")
    return employee


def _holder_name(db: Session, employee_id: UUID) -> str:
    holder = db.query(Employee).filter(Employee.id == employee_id).first()
    return holder.name if holder else "неизвестный сотрудник"


def assign(db: Session, employee_id: UUID, asset_type: str, asset_id: UUID) -> Asset:
    """Закрепляет актив за сотрудником. Устройство и комплектующее переходят в статус in_use."""
    employee = get_employee(db, employee_id)
    asset = get_asset(db, asset_type, asset_id)

    if asset.assigned_to_id is not None:
        if asset.assigned_to_id == employee.id:
            raise AlreadyAssignedError(
                f"{ASSET_LABELS[asset_type]} уже закреплено за этим сотрудником"
            )
        raise AlreadyAssignedError(
            f"{ASSET_LABELS[asset_type]} уже закреплено за другим сотрудником: "
            f"{_holder_name(db, asset.assigned_to_id)}"
        )
    if asset_type == "component" and asset.installed_in_id is not None:
        raise ConflictingAssignmentError(
            "Комплектующее установлено в устройство. Сначала извлеките его"
        )
    if asset_type != "account" and asset.status == "disposed":
        raise BusinessValidationError(
            f"{ASSET_LABELS[asset_type]} списано и не может быть выдано", code="AssetDisposed"
        )

    asset.assigned_to_id = employee.id
    if asset_type != "account":
        asset.status = "in_use"
    commit_or_raise(db)
    db.refresh(asset)
    logger.info("%s %s закреплено за сотрудником %s", asset_type, asset.id, employee.id)
    return asset


def unassign(
    db: Session, asset_type: str, asset_id: UUID, employee_id: Optional[UUID] = None
) -> Asset:
    """
    Снимает закрепление актива.
    Если указан employee_id, актив должен быть закреплён именно за ним.
    """
    if employee_id is not None:
        get_employee(db, employee_id)
    asset = get_asset(db, asset_type, asset_id)

    if employee_id is not None and asset.assigned_to_id != employee_id:
        raise NotAssignedToEmployeeError(
            f"{ASSET_LABELS[asset_type]} не закреплено за этим сотрудником"
        )
    if asset.assigned_to_id is None:
        raise NotAssignedToEmployeeError(
            f"{ASSET_LABELS[asset_type]} ни за кем не закреплено", code="NotAssigned"
        )

    previous_holder = asset.assigned_to_id
    asset.assigned_to_id = None
    # Учётная запись сохраняет свой статус; статус ремонта не сбрасывается
    if asset_type != "account" and asset.status == "in_use":
        asset.status = "available"
    commit_or_raise(db)
    db.refresh(asset)
    logger.info("%s %s снято с сотрудника %s", asset_type, asset.id, previous_holder)
    return asset


def list_held_by(db: Session, employee_id: UUID) -> Dict[str, List[Asset]]:
    """Все активы сотрудника, по видам, в порядке добавления."""
    get_employee(db, employee_id)
    result: Dict[str, List[Asset]] = {}
    for key, model in (("devices", Device), ("components", Component), ("accounts", Account)):
        result[key] = (
            db.query(model)
            .filter(model.assigned_to_id == employee_id)
            .order_by(model.created_at, model.id)
            .all()
        )
    return result


def holds_any_assets(db: Session, employee_id: UUID) -> bool:
    return any(
        db.query(model.id).filter(model.assigned_to_id == employee_id).first() is not None
        for model in ASSET_MODELS.values()
    )


def install(db: Session, component_id: UUID, device_id: UUID) -> Component:
    """Устанавливает комплектующее в устройство."""
    component = get_asset(db, "component", component_id)
    if component.assigned_to_id is not None:
        raise ConflictingAssignmentError(
            "Комплектующее выдано сотруднику. Сначала снимите закрепление"
        )
    if component.status == "disposed":
        raise BusinessValidationError("Комплектующее списано", code="AssetDisposed")

    device = db.query(Device).filter(Device.id == device_id).first()
    if not device:
        raise NotFoundError("Устройство не найдено", code="DeviceNotFound")
    if device.status == "disposed":
        raise BusinessValidationError("Устройство списано", code="AssetDisposed")

    if component.installed_in_id is not None:
        if component.installed_in_id == device.id:
            raise AlreadyAssignedError("Комплектующее уже установлено в это устройство")
        raise AlreadyAssignedError("Комплектующее установлено в другое устройство")

    component.installed_in_id = device.id
    commit_or_raise(db)
    db.refresh(component)
    logger.info("Комплектующее %s установлено в устройство %s", component.id, device.id)
    return component


def uninstall(db: Session, component_id: UUID) -> Component:
    component = get_asset(db, "component", component_id)
    if component.installed_in_id is None:
        raise BusinessValidationError(
            "Комплектующее не установлено ни в одно устройство", code="NotInstalled"
        )
    device_id = component.installed_in_id
    component.installed_in_id = None
    commit_or_raise(db)
    db.refresh(component)
    logger.info("Комплектующее %s извлечено из устройства %s", component.id, device_id)
    return component


def check_status_change(asset: Union[Device, Component], new_status: Optional[str]) -> None:
    """Списание окончательно; списать можно только незакреплённый актив."""
    if new_status is None or new_status == asset.status:
        return
    if asset.status == "disposed":
        raise BusinessValidationError(
            "Списанный актив нельзя вернуть в работу", code="InvalidStatusTransition"
        )
    if new_status == "disposed" and asset.assigned_to_id is not None:
        raise BusinessValidationError(
            "Нельзя списать актив, закреплённый за сотрудником", code="AssetInUse"
        )
