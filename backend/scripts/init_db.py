"""
Скрипт для создания таблиц и seed данных
"""

import logging
import sys
from pathlib import Path

# Добавляем корень проекта в путь
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from backend.core.config import settings  # noqa: E402
from backend.core.init_db import create_tables, seed_admin_user  # noqa: E402


def main() -> None:
    logging.basicConfig(level=settings.log_level)
    print("Инициализация базы данных Elements Assets")
    print("=" * 60)

    db_url_display = settings.database_url.split("@")[-1] if "@" in settings.database_url else settings.database_url
    print(f"\nПодключение к БД: {db_url_display}")

    print("Создание таблиц...")
    create_tables()
    print("Таблицы созданы успешно")

    admin = seed_admin_user()
    if admin is not None:
        print("Администратор создан:")
        print(f"   Email: {admin.email}")
        print(f"   ID: {admin.id}")

    print("\n" + "=" * 60)
    print("Инициализация завершена")
    print("=" * 60)


if __name__ == "__main__":
    main()
