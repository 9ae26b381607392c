"""
Аутентификация сервиса Elements Assets: bcrypt-хеши паролей и JWT-токены
"""
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional
from uuid import UUID

import bcrypt
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from .config import settings
from .errors import UnauthorizedError

ALGORITHM = settings.algorithm

# OAuth2 схема для получения токена из заголовка Authorization
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.api_v1_prefix}/auth/login",
    auto_error=False
)


def _to_bytes(s: str, max_len: int = 72) -> bytes:
    b = s.encode("utf-8")
    return b[:max_len] if len(b) > max_len else b


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Проверяет пароль против хеша (bcrypt, до 72 байт)."""
    if not hashed_password:
        return False
    try:
        plain = _to_bytes(plain_password)
        h = hashed_password.encode("utf-8") if isinstance(hashed_password, str) else hashed_password
        return bcrypt.checkpw(plain, h)
    except ValueError:
        # Значение в БД не является bcrypt-хешем
        return False


def get_password_hash(password: str) -> str:
    """Хеширует пароль (bcrypt с солью, до 72 байт)."""
    plain = _to_bytes(password)
    return bcrypt.hashpw(plain, bcrypt.gensalt()).decode("utf-8")


def create_access_token(
    user_id: UUID | str,
    email: str,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Создаёт JWT токен.

    Payload структура:
        {
            "sub": "user_id",
            "email": "user@company.com",
            "role": "admin" | "manager" | "user",
            "exp": 1234567890,
            "iat": 1234567890
        }
    """
    now = datetime.now(timezone.utc)
    if expires_delta is not None:
        expire = now + expires_delta
    elif settings.access_token_expire_seconds:
        expire = now + timedelta(seconds=settings.access_token_expire_seconds)
    else:
        expire = now + timedelta(minutes=settings.access_token_expire_minutes)

    to_encode = {
        "sub": str(user_id),
        "email": email,
        "role": role,
        "exp": expire,
        "iat": now,
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def decode_token(token: str) -> Optional[Dict]:
    """Декодирует JWT токен. Возвращает payload или None при ошибке."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return None


def get_token_payload(token: Optional[str] = Depends(oauth2_scheme)) -> Dict:
    """
    Получает payload из JWT токена.
    Используется как dependency в FastAPI.

    Raises:
        UnauthorizedError: Если токен невалиден или отсутствует
    """
    if not token:
        raise UnauthorizedError()

    payload = decode_token(token)
    if payload is None:
        raise UnauthorizedError()

    return payload
