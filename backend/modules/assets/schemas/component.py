"""Схемы для комплектующих."""

from datetime import date, datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from .device import AssetStatus, DeviceShort
from .employee import EmployeeShort


class ComponentBase(BaseModel):
    name: str
    type: str
    sub_type: Optional[str] = None
    category: Optional[str] = None
    serial_number: Optional[str] = None
    manufacturer: str
    model: str
    purchase_date: date
    warranty_expiry_date: Optional[date] = None
    status: AssetStatus = "available"
    location: Optional[str] = None
    specs: Optional[dict[str, Any]] = None
    notes: Optional[str] = None


class ComponentCreate(ComponentBase):
    pass


class ComponentUpdate(BaseModel):
    """Выдача и установка меняются только через assign/unassign и install/uninstall."""

    name: Optional[str] = None
    type: Optional[str] = None
    sub_type: Optional[str] = None
    category: Optional[str] = None
    serial_number: Optional[str] = None
    manufacturer: Optional[str] = None
    model: Optional[str] = None
    purchase_date: Optional[date] = None
    warranty_expiry_date: Optional[date] = None
    status: Optional[AssetStatus] = None
    location: Optional[str] = None
    specs: Optional[dict[str, Any]] = None
    notes: Optional[str] = None


class InstallRequest(BaseModel):
    device_id: UUID


class ComponentOut(ComponentBase):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    status: str
    assigned_to_id: Optional[UUID] = None
    assigned_to: Optional[EmployeeShort] = None
    installed_in_id: Optional[UUID] = None
    installed_in: Optional[DeviceShort] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
