"""Роуты /assets/accounts — учётные записи во внешних системах."""

import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from backend.modules.assets.dependencies import get_db, require_permission
from backend.modules.assets.models import Account
from backend.modules.assets.schemas.account import AccountCreate, AccountOut, AccountUpdate
from backend.modules.assets.services import assignment_service
from backend.modules.assets.services.crypto import seal
from backend.modules.assets.services.persistence import commit_or_raise, reject_nulls

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/accounts", tags=["accounts"])

SECRET_FIELDS = ("password", "api_key", "access_token", "refresh_token")


def _apply_secrets(account: Account, data: dict) -> None:
    """Переносит секреты из запроса в зашифрованные поля. Пустая строка стирает секрет."""
    for field in SECRET_FIELDS:
        if field not in data:
            continue
        value = data.pop(field)
        setattr(account, f"{field}_enc", seal(value) if value else None)
        if field == "password" and value:
            account.last_password_change_date = datetime.now(timezone.utc)


@router.get(
    "/",
    response_model=List[AccountOut],
    dependencies=[Depends(require_permission("account:read"))],
)
def list_accounts(
    db: Session = Depends(get_db),
    type: Optional[str] = Query(None),
    sub_type: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    assignment_status: Optional[str] = Query(None, pattern="^(assigned|available)$"),
    assigned_to_id: Optional[UUID] = Query(None),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> List[Account]:
    q = db.query(Account)
    if type:
        q = q.filter(Account.type == type)
    if sub_type:
        q = q.filter(Account.sub_type == sub_type)
    if category:
        q = q.filter(Account.category == category)
    if status:
        q = q.filter(Account.status == status)
    if assignment_status:
        q = q.filter(Account.assignment_status == assignment_status)
    if assigned_to_id:
        q = q.filter(Account.assigned_to_id == assigned_to_id)
    if search and search.strip():
        s = f"%{search.strip()}%"
        q = q.filter(
            or_(
                Account.name.ilike(s),
                Account.username.ilike(s),
                Account.url.ilike(s),
            )
        )
    q = q.order_by(Account.created_at.desc(), Account.id)
    offset = (page - 1) * page_size
    return q.offset(offset).limit(page_size).all()


@router.get(
    "/{account_id}",
    response_model=AccountOut,
    dependencies=[Depends(require_permission("account:read"))],
)
def get_account(account_id: UUID, db: Session = Depends(get_db)) -> Account:
    return assignment_service.get_asset(db, "account", account_id)


@router.post(
    "/",
    response_model=AccountOut,
    status_code=201,
    dependencies=[Depends(require_permission("account:create"))],
)
def create_account(payload: AccountCreate, db: Session = Depends(get_db)) -> Account:
    data = payload.model_dump()
    account = Account()
    _apply_secrets(account, data)
    for field, value in data.items():
        setattr(account, field, value)
    db.add(account)
    commit_or_raise(db)
    db.refresh(account)
    logger.info("Создана учётная запись %s (%s)", account.id, account.type)
    return account


@router.patch(
    "/{account_id}",
    response_model=AccountOut,
    dependencies=[Depends(require_permission("account:update"))],
)
def update_account(
    account_id: UUID, payload: AccountUpdate, db: Session = Depends(get_db)
) -> Account:
    account = assignment_service.get_asset(db, "account", account_id)
    data = payload.model_dump(exclude_unset=True)
    reject_nulls(Account, data)
    _apply_secrets(account, data)
    for field, value in data.items():
        setattr(account, field, value)
    commit_or_raise(db)
    db.refresh(account)
    return account


@router.delete(
    "/{account_id}",
    dependencies=[Depends(require_permission("account:delete"))],
)
def delete_account(account_id: UUID, db: Session = Depends(get_db)) -> dict:
    account = assignment_service.get_asset(db, "account", account_id)
    db.delete(account)
    commit_or_raise(db)
    logger.info("Удалена учётная запись %s", account_id)
    return {"message": "Учётная запись удалена"}
