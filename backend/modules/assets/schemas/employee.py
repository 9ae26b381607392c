"""Схемы для сотрудников."""

from datetime import date, datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr

EmployeeStatus = Literal["active", "inactive", "on_leave"]


class EmployeeBase(BaseModel):
    name: str
    employee_code: str  # табельный номер
    email: EmailStr
    department: str
    position: str
    phone: Optional[str] = None
    status: EmployeeStatus = "active"
    join_date: date
    leave_date: Optional[date] = None
    manager_id: Optional[UUID] = None
    notes: Optional[str] = None


class EmployeeCreate(EmployeeBase):
    pass


class EmployeeUpdate(BaseModel):
    name: Optional[str] = None
    employee_code: Optional[str] = None
    email: Optional[EmailStr] = None
    department: Optional[str] = None
    position: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[EmployeeStatus] = None
    join_date: Optional[date] = None
    leave_date: Optional[date] = None
    manager_id: Optional[UUID] = None
    notes: Optional[str] = None


class EmployeeShort(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    employee_code: str
    email: str
    department: str


class EmployeeOut(EmployeeBase):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    manager: Optional[EmployeeShort] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DeviceBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    type: str
    serial_number: str
    status: str


class EmployeeDetailOut(BaseModel):
    """Карточка сотрудника вместе с закреплёнными устройствами."""

    employee: EmployeeOut
    assigned_devices: List[DeviceBrief] = []
