"""
API роуты модуля учёта активов.
Префикс: /api/v1/assets. Подроуты: /devices, /components, /employees, /accounts, /invoices, /users, /reports.
"""

from fastapi import APIRouter

from backend.core.config import settings

from .routes import accounts, assignments, components, devices, employees, invoices, reports, users

router = APIRouter(prefix=f"{settings.api_v1_prefix}/assets", tags=["assets"])

router.include_router(devices.router)
router.include_router(components.router)
router.include_router(employees.router)
router.include_router(assignments.router)
router.include_router(accounts.router)
router.include_router(invoices.router)
router.include_router(users.router)
router.include_router(reports.router)


@router.get("/")
async def assets_module_info():
    """Информация о модуле учёта активов"""
    return {
        "module": "assets",
        "name": "IT Asset Management",
        "version": "1.0.0",
        "status": "active",
        "resources": [
            "devices",
            "components",
            "employees",
            "accounts",
            "invoices",
            "users",
            "reports",
        ],
    }
