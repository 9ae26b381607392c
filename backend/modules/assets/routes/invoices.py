"""Роуты /assets/invoices — счета на закупку и приёмка позиций."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from backend.modules.assets.dependencies import get_db, require_permission
from backend.modules.assets.models import Device, User
from backend.modules.assets.schemas.component import ComponentOut
from backend.modules.assets.schemas.device import DeviceOut
from backend.modules.assets.schemas.invoice import (
    InvoiceCreate,
    InvoiceImport,
    InvoiceListResponse,
    InvoiceOut,
    InvoiceUpdate,
    ProcessItemRequest,
    ProcessItemResponse,
)
from backend.modules.assets.services import invoice_service

router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.get(
    "/",
    response_model=InvoiceListResponse,
    dependencies=[Depends(require_permission("invoice:read"))],
)
def list_invoices(
    db: Session = Depends(get_db),
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    vendor: Optional[str] = Query(None),
    sort_by: str = Query("created_at"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> dict:
    invoices, pagination = invoice_service.list_invoices(
        db,
        search=search,
        status=status,
        vendor=vendor,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    return {"invoices": invoices, "pagination": pagination}


@router.get(
    "/{invoice_id}",
    response_model=InvoiceOut,
    dependencies=[Depends(require_permission("invoice:read"))],
)
def get_invoice(invoice_id: UUID, db: Session = Depends(get_db)):
    return invoice_service.get_invoice(db, invoice_id)


@router.post("/", response_model=InvoiceOut, status_code=201)
def create_invoice(
    payload: InvoiceCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_permission("invoice:create")),
):
    return invoice_service.create_invoice(db, payload, user)


@router.post("/import", response_model=InvoiceOut, status_code=201)
def import_invoice(
    payload: InvoiceImport,
    db: Session = Depends(get_db),
    user: User = Depends(require_permission("invoice:import")),
):
    """Импорт распознанного счёта (файл разбирается на стороне клиента)."""
    return invoice_service.import_invoice(db, payload, user)


@router.patch(
    "/{invoice_id}",
    response_model=InvoiceOut,
    dependencies=[Depends(require_permission("invoice:update"))],
)
def update_invoice(invoice_id: UUID, payload: InvoiceUpdate, db: Session = Depends(get_db)):
    return invoice_service.update_invoice(db, invoice_id, payload)


@router.delete(
    "/{invoice_id}",
    dependencies=[Depends(require_permission("invoice:delete"))],
)
def delete_invoice(invoice_id: UUID, db: Session = Depends(get_db)) -> dict:
    invoice_service.delete_invoice(db, invoice_id)
    return {"message": "Счёт удалён"}


@router.post(
    "/{invoice_id}/process-item",
    response_model=ProcessItemResponse,
    dependencies=[Depends(require_permission("invoice:process"))],
)
def process_invoice_item(
    invoice_id: UUID, payload: ProcessItemRequest, db: Session = Depends(get_db)
) -> dict:
    """Создать устройство или комплектующее по позиции счёта."""
    asset, invoice = invoice_service.process_item(
        db, invoice_id, payload.item_index, payload.item_details
    )
    if isinstance(asset, Device):
        asset_type, item = "device", DeviceOut.model_validate(asset)
    else:
        asset_type, item = "component", ComponentOut.model_validate(asset)
    return {
        "message": f"Позиция {payload.item_index + 1} обработана",
        "asset_type": asset_type,
        "item": item.model_dump(mode="json"),
        "invoice": invoice,
    }
