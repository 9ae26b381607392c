"""Сервисы модуля учёта активов."""

from .assignment_service import assign, install, list_held_by, unassign, uninstall
from .crypto import seal
from .invoice_service import create_invoice, delete_invoice, process_item, update_invoice
from .maintenance_service import add_maintenance_record
