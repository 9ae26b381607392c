"""Фиксация транзакций с переводом ошибок БД в ошибки сервиса."""
import logging

from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from backend.core.errors import (
    BusinessValidationError,
    ConcurrentModificationError,
    DuplicateKeyError,
)

logger = logging.getLogger(__name__)

# Поле уникального индекса -> (код ошибки, сообщение)
UNIQUE_FIELD_ERRORS = {
    "serial_number": ("DuplicateSerialNumber", "Устройство с таким серийным номером уже существует"),
    "employee_code": ("DuplicateEmployeeId", "Сотрудник с таким табельным номером уже существует"),
    "invoice_number": ("DuplicateInvoiceNumber", "Счёт с таким номером уже существует"),
    "email": ("DuplicateEmail", "Этот email уже используется"),
}


def commit_or_raise(db: Session) -> None:
    """
    Фиксирует транзакцию.
    Нарушение уникальности -> DuplicateKeyError, прочие нарушения -> ConstraintViolation,
    устаревшая версия строки -> ConcurrentModificationError.
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        err = str(e.orig).lower()
        if "unique" in err or "duplicate key" in err:
            for field, (code, message) in UNIQUE_FIELD_ERRORS.items():
                if field in err:
                    raise DuplicateKeyError(message, code=code) from e
        logger.warning("Нарушение ограничения БД: %s", e.orig)
        raise BusinessValidationError(
            "Нарушено ограничение целостности данных", code="ConstraintViolation"
        ) from e
    except StaleDataError as e:
        db.rollback()
        raise ConcurrentModificationError() from e


def reject_nulls(model, data: dict) -> None:
    """Явный null в обязательном поле -> ValidationError RequiredField."""
    columns = inspect(model).columns
    for field, value in data.items():
        if value is None and field in columns and not columns[field].nullable:
            raise BusinessValidationError(
                f"Поле {field} не может быть пустым", code="RequiredField"
            )
