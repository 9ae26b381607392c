"""
Жизненный цикл счёта на закупку: создание, обработка позиций, изменение, удаление.

Обработка позиции создаёт устройство или комплектующее и помечает позицию
одной транзакцией: либо изменилось всё, либо ничего.
"""
import logging
import math
from typing import List, Optional, Sequence, Tuple, Union
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from backend.core.config import settings
from backend.core.errors import (
    AlreadyProcessedError,
    AssetCreationFailedError,
    BusinessValidationError,
    ConcurrentModificationError,
    DuplicateKeyError,
    HasProcessedItemsError,
    NotFoundError,
)
from backend.modules.assets.models import Component, Device, Invoice, InvoiceItem, User
from backend.modules.assets.schemas.invoice import (
    InvoiceCreate,
    InvoiceImport,
    InvoiceItemIn,
    InvoiceUpdate,
    ItemDetails,
)
from backend.modules.assets.services.persistence import commit_or_raise, reject_nulls

logger = logging.getLogger(__name__)

ITEM_TYPES = ("device", "component")

# Обязательные поля создаваемого актива
REQUIRED_ASSET_FIELDS = {
    "device": ("name", "type", "manufacturer", "model", "serial_number"),
    "component": ("name", "type", "manufacturer", "model"),
}

SORT_FIELDS = {
    "created_at": Invoice.created_at,
    "purchase_date": Invoice.purchase_date,
    "invoice_number": Invoice.invoice_number,
    "vendor": Invoice.vendor,
    "total_amount": Invoice.total_amount,
    "status": Invoice.status,
}


def get_invoice(db: Session, invoice_id: UUID) -> Invoice:
    invoice = db.query(Invoice).filter(Invoice.id == invoice_id).first()
    if not invoice:
        raise NotFoundError("Счёт не найден", code="InvoiceNotFound")
    return invoice


def list_invoices(
    db: Session,
    search: Optional[str] = None,
    status: Optional[str] = None,
    vendor: Optional[str] = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    page: int = 1,
    limit: int = 10,
) -> Tuple[List[Invoice], dict]:
    q = db.query(Invoice)
    if status:
        q = q.filter(Invoice.status == status)
    if vendor:
        q = q.filter(Invoice.vendor.ilike(f"%{vendor.strip()}%"))
    if search and search.strip():
        s = f"%{search.strip()}%"
        q = q.filter(
            or_(
                Invoice.invoice_number.ilike(s),
                Invoice.vendor.ilike(s),
                Invoice.notes.ilike(s),
            )
        )
    total = q.count()
    column = SORT_FIELDS.get(sort_by, Invoice.created_at)
    q = q.order_by(column.asc() if sort_order == "asc" else column.desc(), Invoice.id)
    invoices = q.offset((page - 1) * limit).limit(limit).all()
    pagination = {
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit) if limit else 0,
    }
    return invoices, pagination


def _ensure_number_free(db: Session, invoice_number: str, exclude_id: Optional[UUID] = None) -> None:
    q = db.query(Invoice.id).filter(Invoice.invoice_number == invoice_number)
    if exclude_id is not None:
        q = q.filter(Invoice.id != exclude_id)
    if q.first() is not None:
        raise DuplicateKeyError(
            "Счёт с таким номером уже существует", code="DuplicateInvoiceNumber"
        )


def validate_items(items: Sequence[InvoiceItemIn]) -> None:
    """Каждая позиция: тип device/component, наименование, количество >= 1, цена >= 0."""
    if not items:
        raise BusinessValidationError(
            "Счёт должен содержать хотя бы одну позицию", code="InvalidItem"
        )
    for number, item in enumerate(items, start=1):
        if item.type not in ITEM_TYPES:
            raise BusinessValidationError(
                f"Позиция {number}: тип должен быть device или component", code="InvalidItem"
            )
        if not item.name or not item.name.strip():
            raise BusinessValidationError(
                f"Позиция {number}: не указано наименование", code="InvalidItem"
            )
        if item.quantity is None or item.quantity < 1:
            raise BusinessValidationError(
                f"Позиция {number}: количество должно быть не меньше 1", code="InvalidItem"
            )
        if item.unit_price is None or item.unit_price < 0:
            raise BusinessValidationError(
                f"Позиция {number}: не указана цена", code="InvalidItem"
            )


def _build_items(items: Sequence[InvoiceItemIn]) -> List[InvoiceItem]:
    return [
        InvoiceItem(
            position=position,
            type=item.type,
            name=item.name.strip(),
            quantity=item.quantity,
            unit_price=item.unit_price,
            specifications=item.specifications,
            processed=False,
        )
        for position, item in enumerate(items)
    ]


def _check_amount(total_amount: Optional[float]) -> None:
    if total_amount is not None and total_amount < 0:
        raise BusinessValidationError(
            "Сумма счёта не может быть отрицательной", code="InvalidAmount"
        )


def create_invoice(db: Session, payload: InvoiceCreate, created_by: User) -> Invoice:
    """Создаёт счёт в статусе pending; все позиции не обработаны."""
    _ensure_number_free(db, payload.invoice_number)
    validate_items(payload.items)
    _check_amount(payload.total_amount)

    invoice = Invoice(
        invoice_number=payload.invoice_number,
        vendor=payload.vendor,
        purchase_date=payload.purchase_date,
        total_amount=payload.total_amount,
        currency=payload.currency or settings.default_currency,
        status="pending",
        notes=payload.notes,
        attachment_url=payload.attachment_url,
        created_by_id=created_by.id,
        items=_build_items(payload.items),
    )
    db.add(invoice)
    commit_or_raise(db)
    db.refresh(invoice)
    logger.info(
        "Создан счёт %s (%s), позиций: %d", invoice.invoice_number, invoice.id, len(invoice.items)
    )
    return invoice


def import_invoice(db: Session, payload: InvoiceImport, created_by: User) -> Invoice:
    """Импорт счёта; без суммы она считается как сумма quantity * unit_price."""
    validate_items(payload.items)
    total = payload.total_amount
    if total is None:
        total = round(sum(item.quantity * item.unit_price for item in payload.items), 2)
    data = payload.model_dump(exclude={"total_amount"})
    return create_invoice(db, InvoiceCreate(**data, total_amount=total), created_by)


def _asset_fields(invoice: Invoice, item: InvoiceItem, details: ItemDetails) -> dict:
    """
    Поля нового актива: данные из запроса, затем из позиции, затем из самого счёта.
    Без item_details.type тип актива равен виду позиции (device или component).
    """
    if details.specs is not None:
        specs = details.specs
    else:
        specs = item.specifications or {}
    return {
        "name": details.name or item.name,
        "type": details.type or item.type,
        "sub_type": details.sub_type,
        "category": details.category,
        "manufacturer": details.manufacturer,
        "model": details.model,
        "serial_number": details.serial_number,
        "purchase_date": invoice.purchase_date,
        "warranty_expiry_date": details.warranty_expiry_date,
        "location": details.location,
        "status": "available",
        "notes": f"Закуплено у {invoice.vendor}. Счёт №{invoice.invoice_number}",
        "specs": specs,
    }


def process_item(
    db: Session, invoice_id: UUID, item_index: int, details: ItemDetails
) -> Tuple[Union[Device, Component], Invoice]:
    """
    Превращает позицию счёта в актив.

    Одна транзакция: создание актива, пометка позиции (processed, created_item_id)
    и, если обработаны все позиции, перевод счёта в processed.
    Повторная или параллельная обработка той же позиции -> AlreadyProcessed / ConcurrentModification.
    """
    invoice = get_invoice(db, invoice_id)
    if invoice.status == "cancelled":
        raise BusinessValidationError(
            "Счёт отменён, позиции не обрабатываются", code="InvoiceCancelled"
        )
    if item_index < 0 or item_index >= len(invoice.items):
        raise BusinessValidationError(
            f"Позиция с индексом {item_index} не найдена", code="InvalidItemIndex"
        )
    item = invoice.items[item_index]
    if item.processed:
        raise AlreadyProcessedError(code="ItemAlreadyProcessed")
    if item.type not in ITEM_TYPES:
        raise BusinessValidationError(
            f"Недопустимый тип позиции: {item.type}", code="InvalidItemType"
        )

    fields = _asset_fields(invoice, item, details)
    missing = [name for name in REQUIRED_ASSET_FIELDS[item.type] if not fields.get(name)]
    if missing:
        raise AssetCreationFailedError(
            f"Не заполнены обязательные поля актива: {', '.join(missing)}"
        )
    if item.type == "device" and (
        db.query(Device.id).filter(Device.serial_number == fields["serial_number"]).first()
    ):
        raise AssetCreationFailedError("Устройство с таким серийным номером уже существует")

    model = Device if item.type == "device" else Component
    asset = model(**fields)
    db.add(asset)
    try:
        db.flush()
        item.processed = True
        item.created_item_id = asset.id
        if invoice.all_items_processed:
            invoice.status = "processed"
        db.commit()
    except StaleDataError as e:
        db.rollback()
        raise ConcurrentModificationError() from e
    except IntegrityError as e:
        db.rollback()
        logger.warning("Позиция %d счёта %s: ошибка создания актива: %s", item_index, invoice_id, e.orig)
        raise AssetCreationFailedError() from e

    db.refresh(invoice)
    db.refresh(asset)
    logger.info(
        "Позиция %d счёта %s обработана: %s %s (статус счёта: %s)",
        item_index,
        invoice.invoice_number,
        item.type,
        asset.id,
        invoice.status,
    )
    return asset, invoice


def update_invoice(db: Session, invoice_id: UUID, patch: InvoiceUpdate) -> Invoice:
    """
    Частичное изменение счёта.
    Вручную статус можно только сменить на cancelled; отменённый счёт не меняется.
    Позиции заменяются целиком и только пока ни одна не обработана.
    """
    invoice = get_invoice(db, invoice_id)
    data = patch.model_dump(exclude_unset=True)
    items = data.pop("items", None)
    reject_nulls(Invoice, data)

    if invoice.status == "cancelled" and data:
        raise BusinessValidationError("Отменённый счёт не редактируется", code="InvoiceCancelled")
    new_status = data.get("status")
    if new_status is not None and new_status != invoice.status and new_status != "cancelled":
        raise BusinessValidationError(
            "Вручную статус счёта можно сменить только на cancelled",
            code="InvalidStatusTransition",
        )
    if "invoice_number" in data and data["invoice_number"] != invoice.invoice_number:
        _ensure_number_free(db, data["invoice_number"], exclude_id=invoice.id)
    _check_amount(data.get("total_amount"))

    if items is not None:
        if invoice.status == "cancelled":
            raise BusinessValidationError("Отменённый счёт не редактируется", code="InvoiceCancelled")
        if invoice.has_processed_items:
            raise HasProcessedItemsError(
                "Нельзя заменить позиции: часть позиций уже обработана"
            )
        validate_items(patch.items)
        # Сначала удаляем старые позиции, чтобы освободить (invoice_id, position)
        invoice.items.clear()
        db.flush()
        invoice.items = _build_items(patch.items)

    for key, value in data.items():
        setattr(invoice, key, value)

    commit_or_raise(db)
    db.refresh(invoice)
    logger.info("Счёт %s обновлён: %s", invoice.id, ", ".join(sorted(patch.model_fields_set)))
    return invoice


def delete_invoice(db: Session, invoice_id: UUID) -> None:
    """Удаляет счёт вместе с позициями. Счёт с обработанными позициями не удаляется."""
    invoice = get_invoice(db, invoice_id)
    if invoice.has_processed_items:
        raise HasProcessedItemsError(
            "Нельзя удалить счёт: часть позиций уже обработана, созданные активы ссылаются на него"
        )
    number = invoice.invoice_number
    db.delete(invoice)
    commit_or_raise(db)
    logger.info("Счёт %s удалён", number)
