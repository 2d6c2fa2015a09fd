"""HTTP middleware: rate limiting, request logging and tracing."""

import time

from fastapi import Request, Response
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.config import settings
from ..core.exceptions import RateLimitExceeded
from ..core.logging import generate_request_id, get_logger, request_id_var
from .errors import error_response, status_for

logger = get_logger("api.requests")

# Эти пути не логируем, чтобы не шуметь
QUIET_PATHS = {"/api/health", "/docs", "/redoc", "/openapi.json"}


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Middleware для ограничения частоты запросов.

    Лимитер берётся из app.state.rate_limiter (создаётся в main.py),
    ключ клиента - его IP адрес.

    При превышении лимита:
        HTTP 429
        {"error": "Too many requests, please try again later"}
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        limiter = request.app.state.rate_limiter
        try:
            limiter.hit(get_remote_address(request))
        except RateLimitExceeded as exc:
            return error_response(status_for(exc), exc.message)

        return await call_next(request)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware для логирования HTTP запросов.

    Логирует:
    - Метод и путь запроса
    - Статус код ответа
    - Время выполнения (мс)
    - Request ID для трейсинга (также в заголовке X-Request-ID)
    - Origin, если запрос пришёл не со страниц Basecamp
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = generate_request_id()
        request_id_var.set(request_id)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"

        # Чужие Origin обслуживаем, но отмечаем в логе
        origin = request.headers.get("origin")
        if origin and not is_trusted_origin(origin):
            logger.info("Request from non-Basecamp origin", extra={"origin": origin})

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = int((time.perf_counter() - start_time) * 1000)
            logger.error(
                "Request failed",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": duration_ms,
                    "client_ip": client_ip,
                    "error": str(e),
                },
                exc_info=True,
            )
            raise

        duration_ms = int((time.perf_counter() - start_time) * 1000)
        response.headers["X-Request-ID"] = request_id

        if request.url.path not in QUIET_PATHS:
            log = logger.info if response.status_code < 400 else logger.warning
            log(
                "Request completed",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status": response.status_code,
                    "duration_ms": duration_ms,
                    "client_ip": client_ip,
                },
            )

        return response


def is_trusted_origin(origin: str) -> bool:
    """
    Проверить, что Origin принадлежит Basecamp.

    Примеры:
        is_trusted_origin("https://3.basecamp.com") → True
        is_trusted_origin("https://basecamp.com") → True
        is_trusted_origin("https://evil.example") → False
    """
    suffix = settings.TRUSTED_ORIGIN_SUFFIX
    return origin.endswith(suffix) or origin == f"https://{suffix.lstrip('.')}"
