"""
Создание таблиц и первичного администратора.
Вызывается при старте приложения и из scripts/init_db.py.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from backend.core.config import settings
from backend.core.database import Base, SessionLocal, engine

logger = logging.getLogger(__name__)


def create_tables() -> None:
    """Создаёт все таблицы в БД"""
    # Регистрация моделей в Base
    import backend.modules.assets.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def seed_admin_user(db: Optional[Session] = None):
    """
    Создаёт первого администратора, если пользователей ещё нет.
    Возвращает созданного пользователя или None.
    """
    from backend.modules.assets.models import User

    own_session = db is None
    db = db or SessionLocal()
    try:
        existing = db.query(User).first()
        if existing:
            logger.info("Пользователи уже существуют. Первый пользователь: %s", existing.email)
            return None

        admin = User(
            name=settings.seed_admin_name,
            email=settings.seed_admin_email,
            password=settings.seed_admin_password,
            role="admin",
            is_active=True,
            provider="credentials",
        )
        db.add(admin)
        db.commit()
        db.refresh(admin)
        logger.info("Администратор создан: %s", admin.email)
        return admin
    except Exception:
        db.rollback()
        raise
    finally:
        if own_session:
            db.close()
