"""Роуты /assets/employees — сотрудники."""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from backend.core.errors import BusinessValidationError, DuplicateKeyError
from backend.modules.assets.dependencies import get_db, require_permission
from backend.modules.assets.models import Device, Employee
from backend.modules.assets.schemas.employee import (
    EmployeeCreate,
    EmployeeDetailOut,
    EmployeeOut,
    EmployeeUpdate,
)
from backend.modules.assets.services.assignment_service import get_employee, holds_any_assets
from backend.modules.assets.services.persistence import commit_or_raise, reject_nulls

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/employees", tags=["employees"])


def _ensure_unique(
    db: Session,
    employee_code: Optional[str] = None,
    email: Optional[str] = None,
    exclude_id: Optional[UUID] = None,
) -> None:
    if employee_code is not None:
        q = db.query(Employee.id).filter(Employee.employee_code == employee_code)
        if exclude_id is not None:
            q = q.filter(Employee.id != exclude_id)
        if q.first() is not None:
            raise DuplicateKeyError(
                "Сотрудник с таким табельным номером уже существует", code="DuplicateEmployeeId"
            )
    if email is not None:
        q = db.query(Employee.id).filter(Employee.email == email)
        if exclude_id is not None:
            q = q.filter(Employee.id != exclude_id)
        if q.first() is not None:
            raise DuplicateKeyError("Этот email уже используется", code="DuplicateEmail")


def _check_manager(db: Session, manager_id: Optional[UUID], employee_id: Optional[UUID] = None) -> None:
    if manager_id is None:
        return
    if employee_id is not None and manager_id == employee_id:
        raise BusinessValidationError(
            "Сотрудник не может быть руководителем самому себе", code="InvalidManager"
        )
    get_employee(db, manager_id)


@router.get(
    "/",
    response_model=List[EmployeeOut],
    dependencies=[Depends(require_permission("employee:read"))],
)
def list_employees(
    db: Session = Depends(get_db),
    department: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> List[Employee]:
    q = db.query(Employee)
    if department:
        q = q.filter(Employee.department == department)
    if status:
        q = q.filter(Employee.status == status)
    if search and search.strip():
        s = f"%{search.strip()}%"
        q = q.filter(
            or_(
                Employee.name.ilike(s),
                Employee.employee_code.ilike(s),
                Employee.email.ilike(s),
            )
        )
    q = q.order_by(Employee.name, Employee.id)
    offset = (page - 1) * page_size
    return q.offset(offset).limit(page_size).all()


@router.get(
    "/{employee_id}",
    response_model=EmployeeDetailOut,
    dependencies=[Depends(require_permission("employee:read"))],
)
def get_employee_detail(employee_id: UUID, db: Session = Depends(get_db)) -> dict:
    """Карточка сотрудника и закреплённые за ним устройства."""
    employee = get_employee(db, employee_id)
    devices = (
        db.query(Device)
        .filter(Device.assigned_to_id == employee.id)
        .order_by(Device.created_at, Device.id)
        .all()
    )
    return {"employee": employee, "assigned_devices": devices}


@router.post(
    "/",
    response_model=EmployeeOut,
    status_code=201,
    dependencies=[Depends(require_permission("employee:create"))],
)
def create_employee(payload: EmployeeCreate, db: Session = Depends(get_db)) -> Employee:
    _ensure_unique(db, employee_code=payload.employee_code, email=payload.email)
    _check_manager(db, payload.manager_id)
    employee = Employee(**payload.model_dump())
    db.add(employee)
    commit_or_raise(db)
    db.refresh(employee)
    logger.info("Создан сотрудник %s (%s)", employee.id, employee.employee_code)
    return employee


@router.patch(
    "/{employee_id}",
    response_model=EmployeeOut,
    dependencies=[Depends(require_permission("employee:update"))],
)
def update_employee(
    employee_id: UUID, payload: EmployeeUpdate, db: Session = Depends(get_db)
) -> Employee:
    employee = get_employee(db, employee_id)
    data = payload.model_dump(exclude_unset=True)
    reject_nulls(Employee, data)
    _ensure_unique(
        db,
        employee_code=data.get("employee_code"),
        email=data.get("email"),
        exclude_id=employee.id,
    )
    if "manager_id" in data:
        _check_manager(db, data["manager_id"], employee.id)
    for field, value in data.items():
        setattr(employee, field, value)
    commit_or_raise(db)
    db.refresh(employee)
    return employee


@router.delete(
    "/{employee_id}",
    dependencies=[Depends(require_permission("employee:delete"))],
)
def delete_employee(employee_id: UUID, db: Session = Depends(get_db)) -> dict:
    employee = get_employee(db, employee_id)
    if holds_any_assets(db, employee.id):
        raise BusinessValidationError(
            "Нельзя удалить сотрудника, за которым закреплены активы. Сначала снимите закрепления",
            code="EmployeeHasAssets",
        )
    if db.query(Employee.id).filter(Employee.manager_id == employee.id).first() is not None:
        raise BusinessValidationError(
            "Нельзя удалить сотрудника, который является руководителем других сотрудников",
            code="EmployeeIsManager",
        )
    db.delete(employee)
    commit_or_raise(db)
    logger.info("Удалён сотрудник %s", employee_id)
    return {"message": "Сотрудник удалён"}
