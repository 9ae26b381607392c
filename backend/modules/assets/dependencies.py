"""
Dependencies для модуля учёта активов.
get_db — общий с core; get_current_user по JWT; require_permission по таблице прав.
"""
from uuid import UUID

from fastapi import Depends
from sqlalchemy.orm import Session

from backend.core.auth import get_token_payload
from backend.core.database import get_db as core_get_db
from backend.core.errors import ForbiddenError, UnauthorizedError
from backend.modules.assets.models import User
from backend.modules.assets.permissions import allowed_roles, is_allowed

get_db = core_get_db


def get_current_user(
    db: Session = Depends(get_db),
    payload: dict = Depends(get_token_payload),
) -> User:
    """Текущий пользователь из JWT."""
    user_id_str = payload.get("sub")
    if not user_id_str:
        raise UnauthorizedError("Неверный формат токена")
    try:
        user_id = UUID(user_id_str)
    except ValueError:
        raise UnauthorizedError("Неверный формат user_id")
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise UnauthorizedError("Пользователь не найден")
    if not user.is_active:
        raise ForbiddenError("Пользователь деактивирован", code="UserInactive")
    return user


def require_permission(operation: str):
    """
    Проверяет право текущего пользователя на операцию.
    Неизвестная операция — ошибка при импорте роутов, а не при запросе.
    """
    roles = allowed_roles(operation)

    def _checker(user: User = Depends(get_current_user)) -> User:
        if is_allowed(operation, user.role):
            return user
        raise ForbiddenError(
            f"Недостаточно прав. Требуется одна из ролей: {', '.join(sorted(roles))}"
        )

    return _checker
