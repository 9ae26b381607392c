"""Роуты закрепления активов: /employees/{id}/assets, /employees/{id}/assign, /unassign."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.core.errors import BusinessValidationError
from backend.modules.assets.dependencies import get_db, require_permission
from backend.modules.assets.schemas.account import AccountOut
from backend.modules.assets.schemas.assignment import (
    AssignmentResult,
    AssignRequest,
    HeldAssetsOut,
    UnassignRequest,
)
from backend.modules.assets.schemas.component import ComponentOut
from backend.modules.assets.schemas.device import DeviceOut
from backend.modules.assets.services import assignment_service

router = APIRouter(tags=["assignments"])

OUT_SCHEMAS = {
    "device": DeviceOut,
    "component": ComponentOut,
    "account": AccountOut,
}


def _result(message: str, asset_type: str, asset) -> dict:
    return {
        "success": True,
        "message": message,
        "asset_type": asset_type,
        "data": OUT_SCHEMAS[asset_type].model_validate(asset).model_dump(mode="json"),
    }


@router.get(
    "/employees/{employee_id}/assets",
    response_model=HeldAssetsOut,
    dependencies=[Depends(require_permission("employee:read"))],
)
def list_employee_assets(employee_id: UUID, db: Session = Depends(get_db)) -> dict:
    """Все устройства, комплектующие и учётные записи сотрудника."""
    return assignment_service.list_held_by(db, employee_id)


@router.post(
    "/employees/{employee_id}/assign",
    response_model=AssignmentResult,
    dependencies=[Depends(require_permission("assignment:write"))],
)
def assign_to_employee(
    employee_id: UUID, payload: AssignRequest, db: Session = Depends(get_db)
) -> dict:
    if payload.action == "assign":
        asset = assignment_service.assign(db, employee_id, payload.asset_type, payload.asset_id)
        return _result("Актив закреплён за сотрудником", payload.asset_type, asset)
    if payload.action == "unassign":
        asset = assignment_service.unassign(
            db, payload.asset_type, payload.asset_id, employee_id=employee_id
        )
        return _result("Закрепление снято", payload.asset_type, asset)
    raise BusinessValidationError(
        "Недопустимое действие. Допустимо: assign, unassign", code="InvalidAction"
    )


@router.post(
    "/unassign",
    response_model=AssignmentResult,
    dependencies=[Depends(require_permission("assignment:write"))],
)
def unassign_asset(payload: UnassignRequest, db: Session = Depends(get_db)) -> dict:
    """Снять актив с текущего держателя (или с указанного сотрудника)."""
    asset = assignment_service.unassign(
        db, payload.asset_type, payload.asset_id, employee_id=payload.employee_id
    )
    return _result("Закрепление снято", payload.asset_type, asset)
