"""Схемы для устройств и журнала обслуживания."""

import datetime
from typing import Any, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from .employee import EmployeeShort

AssetStatus = Literal["in_use", "available", "under_repair", "disposed"]


class DeviceBase(BaseModel):
    name: str
    type: str
    sub_type: Optional[str] = None
    category: Optional[str] = None
    serial_number: str
    manufacturer: str
    model: str
    purchase_date: datetime.date
    warranty_expiry_date: Optional[datetime.date] = None
    status: AssetStatus = "available"
    location: Optional[str] = None
    specs: Optional[dict[str, Any]] = None
    notes: Optional[str] = None


class DeviceCreate(DeviceBase):
    pass


class DeviceUpdate(BaseModel):
    """Закрепление за сотрудником меняется только через assign/unassign."""

    name: Optional[str] = None
    type: Optional[str] = None
    sub_type: Optional[str] = None
    category: Optional[str] = None
    serial_number: Optional[str] = None
    manufacturer: Optional[str] = None
    model: Optional[str] = None
    purchase_date: Optional[datetime.date] = None
    warranty_expiry_date: Optional[datetime.date] = None
    status: Optional[AssetStatus] = None
    location: Optional[str] = None
    specs: Optional[dict[str, Any]] = None
    notes: Optional[str] = None


class MaintenanceCreate(BaseModel):
    date: datetime.date
    description: str
    technician: str


class MaintenanceOut(MaintenanceCreate):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    position: int


class DeviceShort(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    type: str
    serial_number: str


class DeviceOut(DeviceBase):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    status: str
    assigned_to_id: Optional[UUID] = None
    assigned_to: Optional[EmployeeShort] = None
    last_maintenance_date: Optional[datetime.date] = None
    next_maintenance_date: Optional[datetime.date] = None
    maintenance_history: List[MaintenanceOut] = []
    created_at: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None
