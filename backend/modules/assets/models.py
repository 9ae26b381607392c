"""
Модели модуля учёта IT-активов
"""

from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    case,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from backend.core.auth import get_password_hash, verify_password
from backend.core.database import Base

# JSONB в PostgreSQL, обычный JSON в остальных СУБД
JSONType = JSON().with_variant(JSONB(), "postgresql")

ASSET_STATUSES = ("in_use", "available", "under_repair", "disposed")
INACTIVE_ASSET_STATUSES = ("under_repair", "disposed")
EMPLOYEE_STATUSES = ("active", "inactive", "on_leave")
ACCOUNT_STATUSES = ("active", "inactive", "expired")
INVOICE_STATUSES = ("pending", "processed", "cancelled")
USER_ROLES = ("admin", "manager", "user")


class Employee(Base):
    """
    Сотрудник — держатель устройств, комплектующих и учётных записей.
    Прямого списка активов не хранит: закрепления восстанавливаются обратным поиском по assigned_to_id.
    """

    __tablename__ = "employees"

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String(255), nullable=False, index=True)
    employee_code = Column(String(64), unique=True, nullable=False)  # табельный номер
    email = Column(String(255), unique=True, nullable=False)
    department = Column(String(255), nullable=False, index=True)
    position = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=True)
    status = Column(String(32), nullable=False, default="active", index=True)  # active, inactive, on_leave
    join_date = Column(Date, nullable=False)
    leave_date = Column(Date, nullable=True)
    manager_id = Column(Uuid, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    manager = relationship("Employee", remote_side=[id], foreign_keys=[manager_id])


class Device(Base):
    """Устройство (ноутбук, монитор, сервер...)"""

    __tablename__ = "devices"

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String(255), nullable=False)
    type = Column(String(100), nullable=False)  # основная категория
    sub_type = Column(String(100), nullable=True)  # подкатегория
    category = Column(String(100), nullable=True)  # группа верхнего уровня
    serial_number = Column(String(255), unique=True, nullable=False)
    manufacturer = Column(String(255), nullable=False)
    model = Column(String(255), nullable=False)
    purchase_date = Column(Date, nullable=False)
    warranty_expiry_date = Column(Date, nullable=True)
    status = Column(String(32), nullable=False, default="available")  # in_use, available, under_repair, disposed
    location = Column(String(255), nullable=True)
    assigned_to_id = Column(Uuid, ForeignKey("employees.id"), nullable=True, index=True)
    specs = Column(JSONType, nullable=True)
    notes = Column(Text, nullable=True)
    last_maintenance_date = Column(Date, nullable=True)
    next_maintenance_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    assigned_to = relationship("Employee", foreign_keys=[assigned_to_id])
    maintenance_history = relationship(
        "DeviceMaintenance",
        back_populates="device",
        order_by="DeviceMaintenance.position",
        cascade="all, delete-orphan",
    )
    components = relationship(
        "Component", back_populates="installed_in", foreign_keys="Component.installed_in_id"
    )


class DeviceMaintenance(Base):
    """Запись журнала обслуживания устройства"""

    __tablename__ = "device_maintenance"

    id = Column(Uuid, primary_key=True, default=uuid4)
    device_id = Column(
        Uuid, ForeignKey("devices.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position = Column(Integer, nullable=False)  # порядковый номер записи в журнале
    date = Column(Date, nullable=False)
    description = Column(Text, nullable=False)
    technician = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    device = relationship("Device", back_populates="maintenance_history")


class Component(Base):
    """
    Комплектующее. Либо выдано сотруднику (assigned_to_id), либо установлено
    в устройство (installed_in_id), но не то и другое одновременно.
    """

    __tablename__ = "components"

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String(255), nullable=False)
    type = Column(String(100), nullable=False)  # ram, storage, cpu, gpu, ...
    sub_type = Column(String(100), nullable=True)
    category = Column(String(100), nullable=True)
    serial_number = Column(String(255), nullable=True)
    manufacturer = Column(String(255), nullable=False)
    model = Column(String(255), nullable=False)
    purchase_date = Column(Date, nullable=False)
    warranty_expiry_date = Column(Date, nullable=True)
    status = Column(String(32), nullable=False, default="available")
    location = Column(String(255), nullable=True)
    assigned_to_id = Column(Uuid, ForeignKey("employees.id"), nullable=True, index=True)
    installed_in_id = Column(
        Uuid, ForeignKey("devices.id", ondelete="SET NULL"), nullable=True, index=True
    )
    specs = Column(JSONType, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    assigned_to = relationship("Employee", foreign_keys=[assigned_to_id])
    installed_in = relationship("Device", back_populates="components", foreign_keys=[installed_in_id])


class Account(Base):
    """
    Учётная запись во внешней системе (VPN, облако, репозиторий...).
    Секреты хранятся только в зашифрованном виде и никогда не отдаются наружу.
    """

    __tablename__ = "accounts"

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String(255), nullable=False)
    type = Column(String(64), nullable=False)
    sub_type = Column(String(100), nullable=True)
    category = Column(String(100), nullable=True)
    username = Column(String(255), nullable=False)
    password_enc = Column(Text, nullable=True)
    api_key_enc = Column(Text, nullable=True)
    access_token_enc = Column(Text, nullable=True)
    refresh_token_enc = Column(Text, nullable=True)
    url = Column(String(1024), nullable=True)
    expiry_date = Column(Date, nullable=True)
    assigned_to_id = Column(Uuid, ForeignKey("employees.id"), nullable=True, index=True)
    notes = Column(Text, nullable=True)
    last_password_change_date = Column(DateTime(timezone=True), nullable=True)
    status = Column(String(32), nullable=False, default="active")  # active, inactive, expired
    security_level = Column(String(16), nullable=True)  # low, medium, high
    organization = Column(String(255), nullable=True)
    department = Column(String(255), nullable=True)
    project_id = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    assigned_to = relationship("Employee", foreign_keys=[assigned_to_id])

    @hybrid_property
    def assignment_status(self) -> str:
        """Статус закрепления всегда вычисляется из assigned_to_id."""
        return "assigned" if self.assigned_to_id is not None else "available"

    @assignment_status.expression
    def assignment_status(cls):
        return case((cls.assigned_to_id.isnot(None), "assigned"), else_="available")

    @property
    def has_password(self) -> bool:
        return self.password_enc is not None

    @property
    def has_api_key(self) -> bool:
        return self.api_key_enc is not None

    @property
    def has_access_token(self) -> bool:
        return self.access_token_enc is not None

    @property
    def has_refresh_token(self) -> bool:
        return self.refresh_token_enc is not None


class Invoice(Base):
    """Счёт на закупку"""

    __tablename__ = "invoices"

    id = Column(Uuid, primary_key=True, default=uuid4)
    invoice_number = Column(String(128), unique=True, nullable=False)
    vendor = Column(String(255), nullable=False)
    purchase_date = Column(Date, nullable=False)
    total_amount = Column(Numeric(14, 2, asdecimal=False), nullable=False)
    currency = Column(String(8), nullable=False, default="VND")
    status = Column(String(32), nullable=False, default="pending")  # pending, processed, cancelled
    notes = Column(Text, nullable=True)
    attachment_url = Column(String(1024), nullable=True)
    created_by_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        order_by="InvoiceItem.position",
        cascade="all, delete-orphan",
    )
    created_by = relationship("User", foreign_keys=[created_by_id])

    @property
    def all_items_processed(self) -> bool:
        return bool(self.items) and all(item.processed for item in self.items)

    @property
    def has_processed_items(self) -> bool:
        return any(item.processed for item in self.items)


class InvoiceItem(Base):
    """
    Позиция счёта. После обработки (processed=True) неизменна,
    created_item_id указывает на созданное устройство или комплектующее.
    """

    __tablename__ = "invoice_items"

    id = Column(Uuid, primary_key=True, default=uuid4)
    invoice_id = Column(
        Uuid, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position = Column(Integer, nullable=False)
    type = Column(String(20), nullable=False)  # device, component
    name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(14, 2, asdecimal=False), nullable=False)
    specifications = Column(JSONType, nullable=True)
    processed = Column(Boolean, nullable=False, default=False)
    created_item_id = Column(Uuid, nullable=True)
    version = Column(Integer, nullable=False)

    invoice = relationship("Invoice", back_populates="items")

    __table_args__ = (
        UniqueConstraint("invoice_id", "position", name="unique_invoice_item_position"),
    )
    # Оптимистичная блокировка: параллельная обработка одной позиции не пройдёт дважды
    __mapper_args__ = {"version_id_col": version}


class User(Base):
    """Пользователь системы (отдельно от сотрудника)"""

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=True)  # пусто для внешнего провайдера
    role = Column(String(32), nullable=False, default="user")  # admin, manager, user
    employee_id = Column(Uuid, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    last_login = Column(DateTime(timezone=True), nullable=True)
    provider = Column(String(32), nullable=False, default="credentials")  # credentials, azure-ad
    provider_account_id = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    employee = relationship("Employee", foreign_keys=[employee_id])

    @property
    def password(self):
        raise AttributeError("Пароль пользователя недоступен для чтения")

    @password.setter
    def password(self, raw: str | None) -> None:
        # В БД попадает только bcrypt-хеш
        self.password_hash = get_password_hash(raw) if raw else None

    def check_password(self, raw: str) -> bool:
        return verify_password(raw, self.password_hash)
