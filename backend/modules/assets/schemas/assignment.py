"""Схемы для закрепления активов за сотрудниками."""

from typing import Any, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel

from .account import AccountOut
from .component import ComponentOut
from .device import DeviceOut


class AssignRequest(BaseModel):
    action: str = "assign"  # assign, unassign
    asset_type: str  # device, component, account
    asset_id: UUID


class UnassignRequest(BaseModel):
    asset_type: str
    asset_id: UUID
    employee_id: Optional[UUID] = None


class AssignmentResult(BaseModel):
    success: bool = True
    message: str
    asset_type: Literal["device", "component", "account"]
    data: dict[str, Any]  # DeviceOut, ComponentOut или AccountOut


class HeldAssetsOut(BaseModel):
    devices: List[DeviceOut] = []
    components: List[ComponentOut] = []
    accounts: List[AccountOut] = []
