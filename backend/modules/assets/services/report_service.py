"""
Отчёты по активам. Только чтение; дата "сегодня" передаётся явно для воспроизводимости.
"""
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from backend.core.config import settings
from backend.modules.assets.models import (
    INACTIVE_ASSET_STATUSES,
    Account,
    Component,
    Device,
    Employee,
    Invoice,
    InvoiceItem,
)

UNASSIGNED_DEPARTMENT = "Unassigned"

# (верхняя граница возраста в днях, корзина)
AGE_BUCKETS = (
    (180, "under_6_months"),
    (365, "under_1_year"),
    (730, "under_2_years"),
    (1095, "under_3_years"),
)
OVER_AGE_BUCKET = "over_3_years"
WARRANTY_BUCKETS = ("expired", "expiring_soon", "valid")


def age_bucket(purchase_date: date, today: date) -> str:
    days = (today - purchase_date).days
    for limit, name in AGE_BUCKETS:
        if days < limit:
            return name
    return OVER_AGE_BUCKET


def warranty_bucket(expiry_date: date, today: date, expiring_days: Optional[int] = None) -> str:
    if expiring_days is None:
        expiring_days = settings.warranty_expiring_days
    days_left = (expiry_date - today).days
    if days_left < 0:
        return "expired"
    if days_left < expiring_days:
        return "expiring_soon"
    return "valid"


def _group_count(db: Session, column, label: str) -> List[dict]:
    rows = (
        db.query(column, func.count().label("count"))
        .group_by(column)
        .order_by(func.count().desc(), column)
        .all()
    )
    return [{label: value, "count": count} for value, count in rows]


def device_stats(db: Session) -> dict:
    return {
        "total": db.query(Device).count(),
        "by_status": _group_count(db, Device.status, "status"),
        "by_type": _group_count(db, Device.type, "type"),
        "assigned": db.query(Device).filter(Device.assigned_to_id.isnot(None)).count(),
        "inactive": db.query(Device).filter(Device.status.in_(INACTIVE_ASSET_STATUSES)).count(),
    }


def device_analysis(db: Session, today: Optional[date] = None) -> dict:
    """Распределение устройств по отделам, возрасту, гарантии и доля используемых."""
    today = today or date.today()

    department_rows = (
        db.query(Employee.department, func.count(Device.id))
        .select_from(Device)
        .outerjoin(Employee, Device.assigned_to_id == Employee.id)
        .group_by(Employee.department)
        .all()
    )
    by_department = sorted(
        (
            {"department": department or UNASSIGNED_DEPARTMENT, "count": count}
            for department, count in department_rows
        ),
        key=lambda row: (-row["count"], row["department"]),
    )

    by_age: Dict[str, int] = {name: 0 for _, name in AGE_BUCKETS}
    by_age[OVER_AGE_BUCKET] = 0
    by_warranty: Dict[str, int] = {name: 0 for name in WARRANTY_BUCKETS}
    total = 0
    in_use = 0
    for purchase_date, warranty_expiry_date, status in db.query(
        Device.purchase_date, Device.warranty_expiry_date, Device.status
    ):
        total += 1
        if status == "in_use":
            in_use += 1
        by_age[age_bucket(purchase_date, today)] += 1
        if warranty_expiry_date is not None:
            by_warranty[warranty_bucket(warranty_expiry_date, today)] += 1

    return {
        "by_department": by_department,
        "by_age": by_age,
        "by_warranty": by_warranty,
        "utilization": {
            "total": total,
            "in_use": in_use,
            "utilization_rate": round(in_use / total * 100, 2) if total else 0.0,
        },
    }


def component_stats(db: Session) -> dict:
    return {
        "total": db.query(Component).count(),
        "by_status": _group_count(db, Component.status, "status"),
        "by_type": _group_count(db, Component.type, "type"),
        "assigned": db.query(Component).filter(Component.assigned_to_id.isnot(None)).count(),
        "installed": db.query(Component).filter(Component.installed_in_id.isnot(None)).count(),
        "inactive": db.query(Component)
        .filter(Component.status.in_(INACTIVE_ASSET_STATUSES))
        .count(),
    }


def account_stats(db: Session) -> dict:
    assigned = db.query(Account).filter(Account.assigned_to_id.isnot(None)).count()
    total = db.query(Account).count()
    return {
        "total": total,
        "by_status": _group_count(db, Account.status, "status"),
        "by_type": _group_count(db, Account.type, "type"),
        "by_assignment_status": {"assigned": assigned, "available": total - assigned},
    }


def employee_stats(db: Session) -> dict:
    counts = dict(
        db.query(Employee.status, func.count(Employee.id)).group_by(Employee.status).all()
    )
    return {
        "total": sum(counts.values()),
        "active": counts.get("active", 0),
        "inactive": counts.get("inactive", 0),
        "on_leave": counts.get("on_leave", 0),
        "by_department": _group_count(db, Employee.department, "department"),
    }


def invoice_stats(db: Session) -> dict:
    amounts = (
        db.query(Invoice.currency, func.sum(Invoice.total_amount))
        .filter(Invoice.status != "cancelled")
        .group_by(Invoice.currency)
        .all()
    )
    pending_items = (
        db.query(InvoiceItem)
        .join(Invoice, InvoiceItem.invoice_id == Invoice.id)
        .filter(InvoiceItem.processed.is_(False), Invoice.status != "cancelled")
        .count()
    )
    return {
        "total": db.query(Invoice).count(),
        "by_status": _group_count(db, Invoice.status, "status"),
        "total_amount": {currency: float(amount or 0) for currency, amount in amounts},
        "pending_items": pending_items,
    }
