"""Схемы модуля учёта активов."""
from .account import AccountCreate, AccountOut, AccountUpdate
from .assignment import AssignmentResult, AssignRequest, HeldAssetsOut, UnassignRequest
from .component import ComponentCreate, ComponentOut, ComponentUpdate, InstallRequest
from .device import DeviceCreate, DeviceOut, DeviceUpdate, MaintenanceCreate, MaintenanceOut
from .employee import EmployeeCreate, EmployeeDetailOut, EmployeeOut, EmployeeUpdate
from .invoice import (
    InvoiceCreate,
    InvoiceImport,
    InvoiceListResponse,
    InvoiceOut,
    InvoiceUpdate,
    ItemDetails,
    ProcessItemRequest,
    ProcessItemResponse,
)
from .user import UserCreate, UserOut, UserStatusUpdate, UserUpdate

__all__ = [
    "AccountCreate",
    "AccountOut",
    "AccountUpdate",
    "AssignmentResult",
    "AssignRequest",
    "HeldAssetsOut",
    "UnassignRequest",
    "ComponentCreate",
    "ComponentOut",
    "ComponentUpdate",
    "InstallRequest",
    "DeviceCreate",
    "DeviceOut",
    "DeviceUpdate",
    "MaintenanceCreate",
    "MaintenanceOut",
    "EmployeeCreate",
    "EmployeeDetailOut",
    "EmployeeOut",
    "EmployeeUpdate",
    "InvoiceCreate",
    "InvoiceImport",
    "InvoiceListResponse",
    "InvoiceOut",
    "InvoiceUpdate",
    "ItemDetails",
    "ProcessItemRequest",
    "ProcessItemResponse",
    "UserCreate",
    "UserOut",
    "UserStatusUpdate",
    "UserUpdate",
]
