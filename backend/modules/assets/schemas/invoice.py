"""Схемы для счетов на закупку."""

from datetime import date, datetime
from typing import Any, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from .user import UserShort

InvoiceStatus = Literal["pending", "processed", "cancelled"]


class InvoiceItemIn(BaseModel):
    """
    Позиция счёта на входе.
    Обязательность полей и допустимые значения проверяет сервис (код ошибки InvalidItem).
    """

    type: Optional[str] = None  # device, component
    name: Optional[str] = None
    quantity: Optional[int] = None
    unit_price: Optional[float] = None
    specifications: Optional[dict[str, Any]] = None


class InvoiceCreate(BaseModel):
    invoice_number: str
    vendor: str
    purchase_date: date
    items: List[InvoiceItemIn]
    total_amount: float
    currency: Optional[str] = None
    notes: Optional[str] = None
    attachment_url: Optional[str] = None


class InvoiceImport(BaseModel):
    """Импорт счёта из внешней системы: сумма по умолчанию считается по позициям."""

    invoice_number: str
    vendor: str
    purchase_date: date
    items: List[InvoiceItemIn]
    total_amount: Optional[float] = None
    currency: Optional[str] = None
    notes: Optional[str] = None
    attachment_url: Optional[str] = None


class InvoiceUpdate(BaseModel):
    invoice_number: Optional[str] = None
    vendor: Optional[str] = None
    purchase_date: Optional[date] = None
    total_amount: Optional[float] = None
    currency: Optional[str] = None
    status: Optional[InvoiceStatus] = None
    notes: Optional[str] = None
    attachment_url: Optional[str] = None
    items: Optional[List[InvoiceItemIn]] = None


class ItemDetails(BaseModel):
    """Данные для создания актива по позиции; пустые поля берутся из позиции и счёта."""

    name: Optional[str] = None
    type: Optional[str] = None
    sub_type: Optional[str] = None
    category: Optional[str] = None
    manufacturer: Optional[str] = None
    model: Optional[str] = None
    serial_number: Optional[str] = None
    warranty_expiry_date: Optional[date] = None
    location: Optional[str] = None
    specs: Optional[dict[str, Any]] = None


class ProcessItemRequest(BaseModel):
    item_index: int
    item_details: ItemDetails = ItemDetails()


class InvoiceItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    position: int
    type: str
    name: str
    quantity: int
    unit_price: float
    specifications: Optional[dict[str, Any]] = None
    processed: bool
    created_item_id: Optional[UUID] = None


class InvoiceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    invoice_number: str
    vendor: str
    purchase_date: date
    total_amount: float
    currency: str
    status: str
    notes: Optional[str] = None
    attachment_url: Optional[str] = None
    created_by_id: UUID
    created_by: Optional[UserShort] = None
    items: List[InvoiceItemOut] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int


class InvoiceListResponse(BaseModel):
    invoices: List[InvoiceOut]
    pagination: Pagination


class ProcessItemResponse(BaseModel):
    message: str
    asset_type: Literal["device", "component"]
    item: dict[str, Any]  # DeviceOut или ComponentOut в зависимости от asset_type
    invoice: InvoiceOut
