"""
Единая таксономия ошибок сервиса и их преобразование в HTTP-ответы.

Каждая ошибка несёт:
    kind — стабильный вид ошибки (Unauthorized, Forbidden, NotFound, DuplicateKey, ...);
    code — конкретная причина (AssetNotFound, ItemAlreadyProcessed, ...), по умолчанию равна kind;
    message — человекочитаемое описание.

Ответ клиенту: {"detail": message, "code": code, "kind": kind}.
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Базовая ошибка сервиса"""

    status_code = 400
    kind = "OperationFailed"
    default_message = "Не удалось выполнить операцию"

    def __init__(self, message: Optional[str] = None, code: Optional[str] = None):
        self.message = message or self.default_message
        self.code = code or self.kind
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.code, "kind": self.kind}


class UnauthorizedError(AppError):
    status_code = 401
    kind = "Unauthorized"
    default_message = "Не удалось проверить учетные данные"


class ForbiddenError(AppError):
    status_code = 403
    kind = "Forbidden"
    default_message = "Недостаточно прав"


class NotFoundError(AppError):
    status_code = 404
    kind = "NotFound"
    default_message = "Объект не найден"


class DuplicateKeyError(AppError):
    kind = "DuplicateKey"
    default_message = "Значение уникального поля уже существует"


class BusinessValidationError(AppError):
    kind = "ValidationError"
    default_message = "Некорректные данные"


class AlreadyAssignedError(AppError):
    kind = "AlreadyAssigned"
    default_message = "Объект уже закреплён"


class NotAssignedToEmployeeError(AppError):
    kind = "NotAssignedToEmployee"
    default_message = "Объект не закреплён за этим сотрудником"


class ConflictingAssignmentError(AppError):
    kind = "ConflictingAssignment"
    default_message = "Комплектующее не может быть одновременно выдано сотруднику и установлено в устройство"


class AlreadyProcessedError(AppError):
    kind = "AlreadyProcessed"
    default_message = "Позиция счёта уже обработана"


class HasProcessedItemsError(AppError):
    kind = "HasProcessedItems"
    default_message = "В счёте есть обработанные позиции"


class AssetCreationFailedError(AppError):
    kind = "AssetCreationFailed"
    default_message = "Не удалось создать актив по позиции счёта"


class ConcurrentModificationError(AppError):
    status_code = 409
    kind = "ConcurrentModification"
    default_message = "Запись была изменена параллельным запросом, повторите операцию"


class OperationFailedError(AppError):
    status_code = 500
    kind = "OperationFailed"


def register_exception_handlers(app: FastAPI) -> None:
    """Подключает обработчики ошибок к приложению."""

    @app.exception_handler(AppError)
    async def _app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s %s: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def _validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content={
                "detail": jsonable_encoder(exc.errors()),
                "code": "ValidationError",
                "kind": "ValidationError",
            },
        )

    @app.exception_handler(IntegrityError)
    async def _integrity_error_handler(request: Request, exc: IntegrityError):
        logger.warning("Нарушение ограничения БД (%s %s): %s", request.method, request.url.path, exc.orig)
        if "unique" in str(exc.orig).lower():
            error = DuplicateKeyError()
        else:
            error = BusinessValidationError("Нарушено ограничение целостности данных", code="ConstraintViolation")
        return JSONResponse(status_code=400, content=error.to_dict())

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Необработанная ошибка %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content=OperationFailedError().to_dict())
