"""
Доменные исключения сервисного слоя.

Сервисы ничего не знают про HTTP: они бросают эти исключения,
а api/errors.py превращает их в ответы с нужным статус-кодом.
"""


class TaggerError(Exception):
    """
    Базовый класс для всех доменных ошибок.

    Использование:
        raise TaggerError(code="NOT_FOUND", message="Team not found")
    """

    code = "ERROR"

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        if code is not None:
            self.code = code
        super().__init__(message)


class ValidationError(TaggerError):
    """Не хватает обязательного поля или значение недопустимо (400)."""

    code = "VALIDATION_ERROR"


class NotFoundError(TaggerError):
    """Команда / участник / тег не найдены (404)."""

    code = "NOT_FOUND"


class ConflictError(TaggerError):
    """Ресурс уже существует, например тег с таким именем (400)."""

    code = "ALREADY_EXISTS"


class InternalError(TaggerError):
    """Ошибка хранилища или неожиданный сбой (500)."""

    code = "INTERNAL_ERROR"


class RateLimitExceeded(TaggerError):
    """Клиент превысил лимит запросов (429)."""

    code = "RATE_LIMIT_EXCEEDED"
