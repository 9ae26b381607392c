"""
Главный файл сервиса Elements Assets
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.core import auth_routes
from backend.core.config import settings
from backend.core.errors import register_exception_handlers
from backend.modules.assets import api as assets_api

# Настройка логирования
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    description="Учёт IT-активов: устройства, комплектующие, учётные записи, счета",
    version="1.0.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Подключаем роутеры
app.include_router(auth_routes.router)
app.include_router(assets_api.router)


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "ok",
        "service": "elements-assets",
        "modules": ["assets"],
    }


@app.on_event("startup")
def on_startup():
    """Инициализация при старте приложения"""
    logger.info("Запуск %s...", settings.app_name)
    if settings.create_tables_on_startup:
        from backend.core.init_db import create_tables

        create_tables()
    if settings.seed_admin_enabled:
        from backend.core.init_db import seed_admin_user

        seed_admin_user()
    logger.info("%s запущен успешно", settings.app_name)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
