"""
Схемы для учётных записей.

Секреты (пароль, API-ключ, токены) принимаются только на вход.
В выходной схеме их нет: наружу отдаются лишь флаги has_*.
"""

from datetime import date, datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

AccountType = Literal[
    "email",
    "vpn",
    "system",
    "software",
    "cloud",
    "social",
    "development",
    "database",
    "other",
]
AccountStatus = Literal["active", "inactive", "expired"]
SecurityLevel = Literal["low", "medium", "high"]


class AccountBase(BaseModel):
    name: str
    type: AccountType
    sub_type: Optional[str] = None
    category: Optional[str] = None
    username: str
    url: Optional[str] = None
    expiry_date: Optional[date] = None
    notes: Optional[str] = None
    status: AccountStatus = "active"
    security_level: Optional[SecurityLevel] = None
    organization: Optional[str] = None
    department: Optional[str] = None
    project_id: Optional[str] = None


class AccountSecrets(BaseModel):
    password: Optional[str] = None
    api_key: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None


class AccountCreate(AccountBase, AccountSecrets):
    pass


class AccountUpdate(AccountSecrets):
    name: Optional[str] = None
    type: Optional[AccountType] = None
    sub_type: Optional[str] = None
    category: Optional[str] = None
    username: Optional[str] = None
    url: Optional[str] = None
    expiry_date: Optional[date] = None
    notes: Optional[str] = None
    status: Optional[AccountStatus] = None
    security_level: Optional[SecurityLevel] = None
    organization: Optional[str] = None
    department: Optional[str] = None
    project_id: Optional[str] = None


class AccountOut(AccountBase):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    type: str
    status: str
    security_level: Optional[str] = None
    assigned_to_id: Optional[UUID] = None
    assignment_status: Literal["assigned", "available"]
    has_password: bool = False
    has_api_key: bool = False
    has_access_token: bool = False
    has_refresh_token: bool = False
    last_password_change_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
