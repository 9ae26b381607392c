"""Схемы для пользователей системы."""

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr

UserRole = Literal["admin", "manager", "user"]
UserProvider = Literal["credentials", "azure-ad"]


class UserCreate(BaseModel):
    name: str
    email: EmailStr
    password: Optional[str] = None
    role: UserRole = "user"
    employee_id: Optional[UUID] = None
    is_active: bool = True
    provider: UserProvider = "credentials"
    provider_account_id: Optional[str] = None


class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    role: Optional[UserRole] = None
    employee_id: Optional[UUID] = None


class UserStatusUpdate(BaseModel):
    is_active: bool


class UserShort(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str
    role: str
    employee_id: Optional[UUID] = None
    is_active: bool
    last_login: Optional[datetime] = None
    provider: str
    created_at: Optional[datetime] = None


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str
