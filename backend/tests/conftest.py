"""
Общие фикстуры: in-memory SQLite, пользователи с разными ролями, фабрики сущностей.
"""
import os

# Настройки должны быть заданы до импорта приложения
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRETS_KDF_ITERATIONS"] = "1000"
os.environ["SEED_ADMIN_ENABLED"] = "false"
os.environ["CREATE_TABLES_ON_STARTUP"] = "false"

from datetime import date  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from backend.core.auth import create_access_token  # noqa: E402
from backend.core.database import Base, SessionLocal, engine  # noqa: E402
from backend.main import app  # noqa: E402
from backend.modules.assets.models import (  # noqa: E402
    Account,
    Component,
    Device,
    Employee,
    Invoice,
    InvoiceItem,
    User,
)

API = "/api/v1/assets"


@pytest.fixture
def schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(schema):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(schema):
    return TestClient(app)


def bearer(user: User) -> dict:
    token = create_access_token(user_id=user.id, email=user.email, role=user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role: str = "user", is_active: bool = True, password: str = "password123", **kwargs) -> User:
        counter["n"] += 1
        user = User(
            name=kwargs.pop("name", f"{role.title()} {counter['n']}"),
            email=kwargs.pop("email", f"{role}{counter['n']}@company.com"),
            password=password,
            role=role,
            is_active=is_active,
            **kwargs,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def admin_user(make_user) -> User:
    return make_user("admin")


@pytest.fixture
def manager_user(make_user) -> User:
    return make_user("manager")


@pytest.fixture
def regular_user(make_user) -> User:
    return make_user("user")


@pytest.fixture
def admin_headers(admin_user) -> dict:
    return bearer(admin_user)


@pytest.fixture
def manager_headers(manager_user) -> dict:
    return bearer(manager_user)


@pytest.fixture
def user_headers(regular_user) -> dict:
    return bearer(regular_user)


@pytest.fixture
def make_employee(db):
    counter = {"n": 0}

    def _make(**kwargs) -> Employee:
        counter["n"] += 1
        n = counter["n"]
        data = {
            "name": f"Сотрудник {n}",
            "employee_code": f"EMP{n:03d}",
            "email": f"employee{n}@company.com",
            "department": "IT",
            "position": "Инженер",
            "status": "active",
            "join_date": date(2022, 1, 10),
        }
        data.update(kwargs)
        employee = Employee(**data)
        db.add(employee)
        db.commit()
        db.refresh(employee)
        return employee

    return _make


@pytest.fixture
def make_device(db):
    counter = {"n": 0}

    def _make(**kwargs) -> Device:
        counter["n"] += 1
        n = counter["n"]
        data = {
            "name": f"Ноутбук {n}",
            "type": "laptop",
            "serial_number": f"SN-{n:05d}",
            "manufacturer": "Dell",
            "model": "Latitude 5440",
            "purchase_date": date(2024, 3, 1),
            "status": "available",
        }
        data.update(kwargs)
        device = Device(**data)
        db.add(device)
        db.commit()
        db.refresh(device)
        return device

    return _make


@pytest.fixture
def make_component(db):
    counter = {"n": 0}

    def _make(**kwargs) -> Component:
        counter["n"] += 1
        data = {
            "name": f"Память {counter['n']}",
            "type": "ram",
            "manufacturer": "Kingston",
            "model": "KVR32S22S8/16",
            "purchase_date": date(2024, 3, 1),
            "status": "available",
        }
        data.update(kwargs)
        component = Component(**data)
        db.add(component)
        db.commit()
        db.refresh(component)
        return component

    return _make


@pytest.fixture
def make_account(db):
    def _make(**kwargs) -> Account:
        data = {
            "name": "Корпоративный VPN",
            "type": "vpn",
            "username": "vpn.user",
            "status": "active",
        }
        data.update(kwargs)
        account = Account(**data)
        db.add(account)
        db.commit()
        db.refresh(account)
        return account

    return _make


@pytest.fixture
def make_invoice(db):
    counter = {"n": 0}

    def _make(created_by: User, items=None, **kwargs) -> Invoice:
        counter["n"] += 1
        if items is None:
            items = [
                {"type": "device", "name": "Ноутбук Dell", "quantity": 1, "unit_price": 1500.0},
                {"type": "component", "name": "Память 16GB", "quantity": 2, "unit_price": 80.0},
            ]
        data = {
            "invoice_number": f"INV-{counter['n']:04d}",
            "vendor": "ООО Поставщик",
            "purchase_date": date(2024, 5, 20),
            "total_amount": 1660.0,
            "currency": "VND",
            "status": "pending",
            "created_by_id": created_by.id,
        }
        data.update(kwargs)
        invoice = Invoice(
            items=[
                InvoiceItem(position=i, processed=False, **item) for i, item in enumerate(items)
            ],
            **data,
        )
        db.add(invoice)
        db.commit()
        db.refresh(invoice)
        return invoice

    return _make


@pytest.fixture
def headers_for():
    """Заголовок Authorization для произвольного пользователя."""
    return bearer
