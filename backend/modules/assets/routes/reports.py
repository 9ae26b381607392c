"""Роуты /assets/reports — сводная статистика."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.modules.assets.dependencies import get_db, require_permission
from backend.modules.assets.services import report_service

router = APIRouter(
    prefix="/reports",
    tags=["reports"],
    dependencies=[Depends(require_permission("report:read"))],
)


@router.get("/devices/stats")
def get_device_stats(db: Session = Depends(get_db)) -> dict:
    return report_service.device_stats(db)


@router.get("/devices/analysis")
def get_device_analysis(db: Session = Depends(get_db)) -> dict:
    """Распределение по отделам, возрасту, гарантии и загрузка парка устройств."""
    return report_service.device_analysis(db)


@router.get("/components/stats")
def get_component_stats(db: Session = Depends(get_db)) -> dict:
    return report_service.component_stats(db)


@router.get("/accounts/stats")
def get_account_stats(db: Session = Depends(get_db)) -> dict:
    return report_service.account_stats(db)


@router.get("/employees/stats")
def get_employee_stats(db: Session = Depends(get_db)) -> dict:
    return report_service.employee_stats(db)


@router.get("/invoices/stats")
def get_invoice_stats(db: Session = Depends(get_db)) -> dict:
    return report_service.invoice_stats(db)
