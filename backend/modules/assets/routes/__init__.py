"""Подроуты модуля учёта активов."""
from . import accounts, assignments, components, devices, employees, invoices, reports, users

__all__ = ["accounts", "assignments", "components", "devices", "employees", "invoices", "reports", "users"]
