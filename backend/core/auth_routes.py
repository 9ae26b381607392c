"""
API роуты для аутентификации
"""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from backend.core.auth import create_access_token
from backend.core.config import settings
from backend.core.database import get_db
from backend.core.errors import BusinessValidationError, ForbiddenError, UnauthorizedError
from backend.modules.assets.dependencies import get_current_user
from backend.modules.assets.models import User
from backend.modules.assets.schemas.user import (
    ChangePasswordRequest,
    LoginRequest,
    TokenResponse,
    UserOut,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix=f"{settings.api_v1_prefix}/auth", tags=["auth"])

MIN_PASSWORD_LENGTH = 8


def _authenticate(db: Session, email: str, password: str) -> dict:
    user = db.query(User).filter(User.email == email).first()
    if not user:
        raise UnauthorizedError("Неверный email или пароль")

    if not user.password_hash:
        raise UnauthorizedError("Пароль не установлен. Обратитесь к администратору.")

    if not user.check_password(password):
        raise UnauthorizedError("Неверный email или пароль")

    if not user.is_active:
        raise ForbiddenError("Пользователь деактивирован", code="UserInactive")

    user.last_login = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)

    token = create_access_token(user_id=user.id, email=user.email, role=user.role)
    logger.info("Вход пользователя %s", user.email)
    return {"access_token": token, "token_type": "bearer", "user": user}


@router.post("/login", response_model=TokenResponse)
def login(login_data: LoginRequest, db: Session = Depends(get_db)) -> dict:
    """
    Вход в систему.
    Принимает email и password, возвращает JWT токен.
    """
    return _authenticate(db, login_data.email, login_data.password)


@router.post("/login/form", response_model=TokenResponse)
def login_form(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
) -> dict:
    """Вход через форму OAuth2 (для Swagger UI); username — это email."""
    return _authenticate(db, form_data.username, form_data.password)


@router.get("/me", response_model=UserOut)
def get_current_user_info(user: User = Depends(get_current_user)) -> User:
    return user


@router.post("/change-password")
def change_password(
    payload: ChangePasswordRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> dict:
    """Смена пароля текущего пользователя"""
    if not user.check_password(payload.current_password):
        raise BusinessValidationError("Неверный текущий пароль", code="InvalidPassword")
    if len(payload.new_password) < MIN_PASSWORD_LENGTH:
        raise BusinessValidationError(
            f"Пароль должен содержать не менее {MIN_PASSWORD_LENGTH} символов", code="WeakPassword"
        )
    user.password = payload.new_password
    db.commit()
    logger.info("Пользователь %s сменил пароль", user.email)
    return {"message": "Пароль изменён"}
