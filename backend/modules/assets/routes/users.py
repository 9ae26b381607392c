"""Роуты /assets/users — управление пользователями системы (только admin)."""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from backend.core.errors import BusinessValidationError, DuplicateKeyError, NotFoundError
from backend.modules.assets.dependencies import get_db, require_permission
from backend.modules.assets.models import Invoice, User
from backend.modules.assets.schemas.user import (
    UserCreate,
    UserOut,
    UserStatusUpdate,
    UserUpdate,
)
from backend.modules.assets.services.assignment_service import get_employee
from backend.modules.assets.services.persistence import commit_or_raise, reject_nulls

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users", tags=["users"])

MIN_PASSWORD_LENGTH = 8


def _get_user(db: Session, user_id: UUID) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("Пользователь не найден", code="UserNotFound")
    return user


def _check_password(password: Optional[str]) -> None:
    if password is not None and len(password) < MIN_PASSWORD_LENGTH:
        raise BusinessValidationError(
            f"Пароль должен содержать не менее {MIN_PASSWORD_LENGTH} символов", code="WeakPassword"
        )


def _ensure_email_free(db: Session, email: str, exclude_id: Optional[UUID] = None) -> None:
    q = db.query(User.id).filter(User.email == email)
    if exclude_id is not None:
        q = q.filter(User.id != exclude_id)
    if q.first() is not None:
        raise DuplicateKeyError("Пользователь с таким email уже существует", code="DuplicateEmail")


@router.get(
    "/",
    response_model=List[UserOut],
    dependencies=[Depends(require_permission("user:read"))],
)
def list_users(
    db: Session = Depends(get_db),
    role: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    search: Optional[str] = Query(None),
) -> List[User]:
    q = db.query(User)
    if role:
        q = q.filter(User.role == role)
    if is_active is not None:
        q = q.filter(User.is_active == is_active)
    if search and search.strip():
        s = f"%{search.strip()}%"
        q = q.filter(or_(User.name.ilike(s), User.email.ilike(s)))
    return q.order_by(User.name, User.id).all()


@router.get(
    "/{user_id}",
    response_model=UserOut,
    dependencies=[Depends(require_permission("user:read"))],
)
def get_user(user_id: UUID, db: Session = Depends(get_db)) -> User:
    return _get_user(db, user_id)


@router.post(
    "/",
    response_model=UserOut,
    status_code=201,
    dependencies=[Depends(require_permission("user:create"))],
)
def create_user(payload: UserCreate, db: Session = Depends(get_db)) -> User:
    if payload.provider == "credentials" and not payload.password:
        raise BusinessValidationError(
            "Для входа по паролю необходимо задать пароль", code="WeakPassword"
        )
    _check_password(payload.password)
    _ensure_email_free(db, payload.email)
    if payload.employee_id is not None:
        get_employee(db, payload.employee_id)
    user = User(
        name=payload.name,
        email=payload.email,
        password=payload.password,
        role=payload.role,
        employee_id=payload.employee_id,
        is_active=payload.is_active,
        provider=payload.provider,
        provider_account_id=payload.provider_account_id,
    )
    db.add(user)
    commit_or_raise(db)
    db.refresh(user)
    logger.info("Создан пользователь %s (%s)", user.email, user.role)
    return user


@router.patch("/{user_id}", response_model=UserOut)
def update_user(
    user_id: UUID,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("user:update")),
) -> User:
    user = _get_user(db, user_id)
    data = payload.model_dump(exclude_unset=True)
    reject_nulls(User, data)
    if user.id == current_user.id and "role" in data and data["role"] != user.role:
        raise BusinessValidationError("Нельзя изменить собственную роль", code="SelfModification")
    if data.get("password") is None:
        data.pop("password", None)
    _check_password(data.get("password"))
    if data.get("email") and data["email"] != user.email:
        _ensure_email_free(db, data["email"], exclude_id=user.id)
    if data.get("employee_id") is not None:
        get_employee(db, data["employee_id"])
    for field, value in data.items():
        setattr(user, field, value)
    commit_or_raise(db)
    db.refresh(user)
    return user


@router.patch("/{user_id}/status", response_model=UserOut)
def set_user_status(
    user_id: UUID,
    payload: UserStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("user:update")),
) -> User:
    """Активировать или деактивировать пользователя."""
    user = _get_user(db, user_id)
    if user.id == current_user.id and not payload.is_active:
        raise BusinessValidationError(
            "Нельзя деактивировать собственную учётную запись", code="SelfModification"
        )
    user.is_active = payload.is_active
    commit_or_raise(db)
    db.refresh(user)
    logger.info("Пользователь %s: is_active=%s", user.email, user.is_active)
    return user


@router.delete("/{user_id}")
def delete_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("user:delete")),
) -> dict:
    user = _get_user(db, user_id)
    if user.id == current_user.id:
        raise BusinessValidationError(
            "Нельзя удалить собственную учётную запись", code="SelfModification"
        )
    if db.query(Invoice.id).filter(Invoice.created_by_id == user.id).first() is not None:
        raise BusinessValidationError(
            "Пользователь создавал счета. Деактивируйте его вместо удаления", code="UserHasInvoices"
        )
    db.delete(user)
    commit_or_raise(db)
    logger.info("Удалён пользователь %s", user_id)
    return {"message": "Пользователь удалён"}
