"""
Обработчики ошибок (Exception Handlers) для API.

Как это работает:
1. Сервис бросает доменное исключение (NotFoundError, ConflictError, ...)
2. FastAPI ищет подходящий handler для этого типа исключения
3. Handler преобразует исключение в HTTP ответ {"error": "..."}

Ни одна ошибка не уходит клиенту необработанной: всё неизвестное
становится 500 с общим сообщением, а подробности пишутся в лог.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..core.exceptions import (
    ConflictError,
    InternalError,
    NotFoundError,
    RateLimitExceeded,
    TaggerError,
    ValidationError,
)
from ..core.logging import get_logger
from .schemas import ErrorResponse

logger = get_logger(__name__)

# Доменное исключение → HTTP статус
STATUS_CODES: dict[type[TaggerError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    ConflictError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    RateLimitExceeded: status.HTTP_429_TOO_MANY_REQUESTS,
    InternalError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

INTERNAL_ERROR_MESSAGE = "Internal server error"


def error_response(status_code: int, message: str) -> JSONResponse:
    """Собрать JSON ответ с ошибкой в едином формате."""
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


def status_for(exc: TaggerError) -> int:
    """HTTP статус для доменного исключения (ищем по MRO, чтобы работали подклассы)."""
    for cls in type(exc).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================


async def tagger_error_handler(request: Request, exc: TaggerError) -> JSONResponse:
    """
    Обработчик для доменных ошибок (TaggerError).

    InternalError логируется как error, но клиент получает только общее сообщение.
    """
    status_code = status_for(exc)

    if status_code >= 500:
        logger.error(f"Internal Error: {exc.code} - {exc.message}", exc_info=exc)
        return error_response(status_code, exc.message or INTERNAL_ERROR_MESSAGE)

    logger.warning(f"API Error: {exc.code} - {exc.message}")
    return error_response(status_code, exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Обработчик для ошибок разбора запроса (нет тела, тело не JSON-объект).

    Pydantic по умолчанию отвечает 422, мы отвечаем 400 - как на пропущенное поле.
    """
    logger.warning(f"Validation Error: {exc.errors()}")

    fields = []
    for error in exc.errors():
        # loc - путь к полю, например ["body", "name"]; "body" отбрасываем
        loc = [str(p) for p in error.get("loc", []) if p != "body"]
        if loc:
            fields.append(".".join(loc))

    message = "Invalid request body"
    if fields:
        message = f"Invalid request: {', '.join(fields)}"
    return error_response(status.HTTP_400_BAD_REQUEST, message)


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Обработчик для всех остальных ошибок (500).

    ВАЖНО: Не показываем детали внутренних ошибок клиенту!
    """
    logger.error(f"Internal Error: {type(exc).__name__}: {exc}", exc_info=exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


# =============================================================================
# РЕГИСТРАЦИЯ HANDLERS
# =============================================================================


def register_error_handlers(app: FastAPI) -> None:
    """
    Регистрирует все error handlers в приложении FastAPI.

    Вызывается из main.py:
        from tagger.api.errors import register_error_handlers
        register_error_handlers(app)
    """
    app.add_exception_handler(TaggerError, tagger_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    logger.info("Error handlers registered")
