"""Тесты жизненного цикла счёта: создание, обработка позиций, изменение, удаление."""
import pytest

from backend.core.errors import BusinessValidationError, ConcurrentModificationError
from backend.modules.assets.models import Device, Invoice, InvoiceItem
from backend.modules.assets.services.persistence import commit_or_raise

API = "/api/v1/assets"


def _invoice_payload(**overrides):
    payload = {
        "invoice_number": "INV-2024-001",
        "vendor": "ООО Техника",
        "purchase_date": "2024-05-20",
        "items": [
            {"type": "device", "name": "Ноутбук Dell", "quantity": 1, "unit_price": 1500},
            {"type": "component", "name": "SSD 1TB", "quantity": 2, "unit_price": 100},
        ],
        "total_amount": 1700,
    }
    payload.update(overrides)
    return payload


def _process(client, headers, invoice_id, index, **details):
    return client.post(
        f"{API}/invoices/{invoice_id}/process-item",
        json={"item_index": index, "item_details": details},
        headers=headers,
    )


def test_create_invoice_starts_pending(client, manager_headers, manager_user):
    response = client.post(f"{API}/invoices/", json=_invoice_payload(), headers=manager_headers)
    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "pending"
    assert body["currency"] == "VND"
    assert body["created_by_id"] == str(manager_user.id)
    assert [item["processed"] for item in body["items"]] == [False, False]
    assert [item["position"] for item in body["items"]] == [0, 1]


def test_duplicate_invoice_number(client, manager_headers):
    client.post(f"{API}/invoices/", json=_invoice_payload(), headers=manager_headers)
    response = client.post(f"{API}/invoices/", json=_invoice_payload(), headers=manager_headers)
    assert response.status_code == 400
    assert response.json()["code"] == "DuplicateInvoiceNumber"


@pytest.mark.parametrize(
    "items",
    [
        [],
        [{"type": "device", "quantity": 1, "unit_price": 10}],
        [{"type": "printer", "name": "Принтер", "quantity": 1, "unit_price": 10}],
        [{"type": "device", "name": "Ноутбук", "quantity": 0, "unit_price": 10}],
        [{"type": "component", "name": "RAM", "quantity": 1}],
    ],
)
def test_invalid_items_rejected(client, manager_headers, items):
    response = client.post(
        f"{API}/invoices/", json=_invoice_payload(items=items), headers=manager_headers
    )
    assert response.status_code == 400
    assert response.json()["code"] == "InvalidItem"


def test_process_device_item(client, manager_headers, manager_user, make_invoice):
    invoice = make_invoice(manager_user)

    response = _process(
        client,
        manager_headers,
        invoice.id,
        0,
        manufacturer="Dell",
        model="XPS 13",
        serial_number="SN-XPS-1",
        warranty_expiry_date="2027-05-20",
    )
    assert response.status_code == 200
    body = response.json()
    assert body["asset_type"] == "device"
    device = body["item"]
    assert device["name"] == "Ноутбук Dell"
    assert device["type"] == "device"
    assert device["purchase_date"] == "2024-05-20"
    assert device["status"] == "available"
    assert invoice.vendor in device["notes"] and invoice.invoice_number in device["notes"]

    item = body["invoice"]["items"][0]
    assert item["processed"] is True
    assert item["created_item_id"] == device["id"]
    assert body["invoice"]["status"] == "pending"


def test_processing_all_items_marks_invoice_processed(client, manager_headers, manager_user, make_invoice):
    invoice = make_invoice(manager_user)
    first = _process(client, manager_headers, invoice.id, 0, type="laptop", manufacturer="Dell", model="XPS", serial_number="SN-1")
    assert first.json()["item"]["type"] == "laptop"

    response = _process(client, manager_headers, invoice.id, 1, manufacturer="Kingston", model="Fury")
    assert response.status_code == 200
    assert response.json()["asset_type"] == "component"
    assert response.json()["invoice"]["status"] == "processed"


def test_process_same_item_twice(client, manager_headers, manager_user, make_invoice):
    invoice = make_invoice(manager_user)
    _process(client, manager_headers, invoice.id, 1, manufacturer="Kingston", model="Fury")

    response = _process(client, manager_headers, invoice.id, 1, manufacturer="Kingston", model="Fury")
    assert response.status_code == 400
    assert response.json()["kind"] == "AlreadyProcessed"
    assert response.json()["code"] == "ItemAlreadyProcessed"

    components = client.get(f"{API}/components/", headers=manager_headers).json()
    assert len(components) == 1


def test_process_uses_item_specifications_when_no_specs(client, manager_headers, manager_user, make_invoice):
    invoice = make_invoice(
        manager_user,
        items=[{"type": "component", "name": "RAM", "quantity": 1, "unit_price": 50, "specifications": {"size": "16GB"}}],
    )
    response = _process(client, manager_headers, invoice.id, 0, manufacturer="Kingston", model="Fury")
    assert response.json()["item"]["specs"] == {"size": "16GB"}


def test_invalid_item_index(client, manager_headers, manager_user, make_invoice):
    invoice = make_invoice(manager_user)
    response = _process(client, manager_headers, invoice.id, 5, manufacturer="X", model="Y")
    assert response.status_code == 400
    assert response.json()["code"] == "InvalidItemIndex"


def test_failed_asset_creation_leaves_nothing_behind(client, db, manager_headers, manager_user, make_invoice):
    invoice = make_invoice(manager_user)

    # У устройства нет серийного номера
    response = _process(client, manager_headers, invoice.id, 0, manufacturer="Dell", model="XPS")
    assert response.status_code == 400
    assert response.json()["kind"] == "AssetCreationFailed"

    db.expire_all()
    assert db.query(Device).count() == 0
    item = db.query(InvoiceItem).filter(InvoiceItem.invoice_id == invoice.id, InvoiceItem.position == 0).one()
    assert item.processed is False
    assert item.created_item_id is None


def test_duplicate_serial_fails_processing(client, manager_headers, manager_user, make_invoice, make_device):
    make_device(serial_number="SN-TAKEN")
    invoice = make_invoice(manager_user)

    response = _process(client, manager_headers, invoice.id, 0, manufacturer="Dell", model="XPS", serial_number="SN-TAKEN")
    assert response.status_code == 400
    assert response.json()["kind"] == "AssetCreationFailed"


def test_concurrent_processing_detected(db, manager_user, make_invoice):
    from backend.core.database import SessionLocal

    invoice = make_invoice(manager_user)
    stale = db.query(InvoiceItem).filter(InvoiceItem.invoice_id == invoice.id, InvoiceItem.position == 1).one()
    assert stale.version == 1

    other = SessionLocal()
    try:
        fresh = other.query(InvoiceItem).filter(InvoiceItem.id == stale.id).one()
        fresh.processed = True
        other.commit()
    finally:
        other.close()

    stale.processed = True
    with pytest.raises(ConcurrentModificationError):
        commit_or_raise(db)


def test_delete_invoice_with_processed_items(client, admin_headers, manager_headers, manager_user, make_invoice):
    invoice = make_invoice(manager_user)
    _process(client, manager_headers, invoice.id, 1, manufacturer="Kingston", model="Fury")

    response = client.delete(f"{API}/invoices/{invoice.id}", headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["kind"] == "HasProcessedItems"
    assert client.get(f"{API}/invoices/{invoice.id}", headers=admin_headers).status_code == 200


def test_delete_pending_invoice(client, db, admin_headers, admin_user, make_invoice):
    invoice = make_invoice(admin_user)
    response = client.delete(f"{API}/invoices/{invoice.id}", headers=admin_headers)
    assert response.status_code == 200

    response = client.get(f"{API}/invoices/{invoice.id}", headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["code"] == "InvoiceNotFound"
    db.expire_all()
    assert db.query(InvoiceItem).count() == 0


def test_status_cannot_be_set_to_processed_manually(client, manager_headers, manager_user, make_invoice):
    invoice = make_invoice(manager_user)
    response = client.patch(
        f"{API}/invoices/{invoice.id}", json={"status": "processed"}, headers=manager_headers
    )
    assert response.status_code == 400
    assert response.json()["code"] == "InvalidStatusTransition"


def test_cancelled_invoice_is_frozen(client, manager_headers, manager_user, make_invoice):
    invoice = make_invoice(manager_user)
    response = client.patch(
        f"{API}/invoices/{invoice.id}", json={"status": "cancelled"}, headers=manager_headers
    )
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"

    response = _process(client, manager_headers, invoice.id, 1, manufacturer="Kingston", model="Fury")
    assert response.json()["code"] == "InvoiceCancelled"

    response = client.patch(
        f"{API}/invoices/{invoice.id}", json={"notes": "ещё правка"}, headers=manager_headers
    )
    assert response.json()["code"] == "InvoiceCancelled"


def test_replace_items_while_unprocessed(client, manager_headers, manager_user, make_invoice):
    invoice = make_invoice(manager_user)
    items = [{"type": "device", "name": "Монитор", "quantity": 3, "unit_price": 200}]

    response = client.patch(
        f"{API}/invoices/{invoice.id}",
        json={"items": items, "total_amount": 600, "vendor": "Новый поставщик"},
        headers=manager_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert [item["name"] for item in body["items"]] == ["Монитор"]
    assert body["items"][0]["processed"] is False
    assert body["vendor"] == "Новый поставщик"
    assert body["total_amount"] == 600


def test_replace_items_after_processing_rejected(client, manager_headers, manager_user, make_invoice):
    invoice = make_invoice(manager_user)
    _process(client, manager_headers, invoice.id, 1, manufacturer="Kingston", model="Fury")

    response = client.patch(
        f"{API}/invoices/{invoice.id}",
        json={"items": [{"type": "device", "name": "Монитор", "quantity": 1, "unit_price": 1}]},
        headers=manager_headers,
    )
    assert response.status_code == 400
    assert response.json()["kind"] == "HasProcessedItems"


def test_rename_to_existing_number(client, manager_headers, manager_user, make_invoice):
    first = make_invoice(manager_user)
    second = make_invoice(manager_user)
    response = client.patch(
        f"{API}/invoices/{second.id}",
        json={"invoice_number": first.invoice_number},
        headers=manager_headers,
    )
    assert response.json()["code"] == "DuplicateInvoiceNumber"


def test_null_invoice_number_rejected(client, manager_headers, manager_user, make_invoice):
    invoice = make_invoice(manager_user)
    response = client.patch(
        f"{API}/invoices/{invoice.id}",
        json={"invoice_number": None},
        headers=manager_headers,
    )
    assert response.status_code == 400
    assert response.json()["kind"] == "ValidationError"
    assert response.json()["code"] == "RequiredField"

    body = client.get(f"{API}/invoices/{invoice.id}", headers=manager_headers).json()
    assert body["invoice_number"] == invoice.invoice_number


def test_not_null_violation_is_not_reported_as_duplicate(db, manager_user, make_invoice):
    invoice = make_invoice(manager_user)
    invoice.invoice_number = None
    with pytest.raises(BusinessValidationError) as exc:
        commit_or_raise(db)
    assert exc.value.code == "ConstraintViolation"


def test_import_computes_total(client, manager_headers):
    payload = _invoice_payload(invoice_number="IMP-1")
    del payload["total_amount"]
    response = client.post(f"{API}/invoices/import", json=payload, headers=manager_headers)
    assert response.status_code == 201
    assert response.json()["total_amount"] == 1700


def test_list_invoices_with_pagination(client, manager_headers, manager_user, make_invoice):
    for _ in range(3):
        make_invoice(manager_user)
    make_invoice(manager_user, vendor="Другой поставщик", status="cancelled")

    response = client.get(f"{API}/invoices/?limit=2&page=1", headers=manager_headers)
    body = response.json()
    assert body["pagination"] == {"total": 4, "page": 1, "limit": 2, "total_pages": 2}
    assert len(body["invoices"]) == 2

    response = client.get(f"{API}/invoices/?status=cancelled", headers=manager_headers)
    assert [i["vendor"] for i in response.json()["invoices"]] == ["Другой поставщик"]

    response = client.get(
        f"{API}/invoices/?search=inv-0001&sort_by=invoice_number&sort_order=asc",
        headers=manager_headers,
    )
    assert [i["invoice_number"] for i in response.json()["invoices"]] == ["INV-0001"]


def test_full_purchase_scenario(client, db, manager_headers, admin_headers, manager_user):
    """Счёт на ноутбук и память: обе позиции превращаются в активы, счёт закрывается."""
    response = client.post(f"{API}/invoices/", json=_invoice_payload(), headers=manager_headers)
    invoice_id = response.json()["id"]

    laptop = _process(
        client, manager_headers, invoice_id, 0,
        type="laptop", manufacturer="Dell", model="Latitude", serial_number="SN-LAT-1",
    ).json()
    ssd = _process(client, manager_headers, invoice_id, 1, manufacturer="Samsung", model="990 Pro").json()

    assert laptop["item"]["type"] == "laptop"
    assert ssd["invoice"]["status"] == "processed"
    created = {item["created_item_id"] for item in ssd["invoice"]["items"]}
    assert created == {laptop["item"]["id"], ssd["item"]["id"]}

    db.expire_all()
    assert db.query(Invoice).one().status == "processed"
    response = client.delete(f"{API}/invoices/{invoice_id}", headers=admin_headers)
    assert response.json()["kind"] == "HasProcessedItems"
