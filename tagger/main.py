"""
Главный файл FastAPI приложения.

Точка входа в приложение Basecamp Tagger.

Запуск:
    python -m tagger
    uvicorn tagger.main:app --reload --port 3847

API документация:
    http://localhost:3847/docs       - Swagger UI
    http://localhost:3847/redoc      - ReDoc
"""

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from .api import card_tags_router, tags_router, teams_router
from .api.dependencies import get_db
from .api.errors import register_error_handlers
from .api.middleware import RateLimitMiddleware, RequestLoggingMiddleware
from .api.schemas import HealthResponse
from .core.config import settings
from .core.database import init_db
from .core.logging import get_logger, setup_logging
from .core.rate_limit import RateLimiter

# Инициализируем логирование при импорте модуля
setup_logging(log_level=settings.LOG_LEVEL, log_format=settings.LOG_FORMAT)

logger = get_logger(__name__)

APP_START_TIME: float = 0.0  # Will be set on startup


# ============================================================================
# LIFESPAN EVENT HANDLER
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for startup/shutdown events.

    Startup: создание таблиц, запуск фоновой очистки rate limiter
    Shutdown: остановка очистки
    """
    global APP_START_TIME
    APP_START_TIME = time.time()

    await init_db()
    app.state.rate_limiter.start()

    logger.info(
        "Application started",
        extra={
            "app_name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "database": settings.database_url,
            "rate_limit": settings.RATE_LIMIT,
        },
    )

    yield  # Application runs here

    await app.state.rate_limiter.stop()

    uptime = int(time.time() - APP_START_TIME)
    logger.info("Application stopped", extra={"uptime_seconds": uptime})


# ============================================================================
# CREATE APPLICATION
# ============================================================================

app = FastAPI(
    lifespan=lifespan,
    title=settings.APP_NAME,
    description="""
    Командные теги для карточек Basecamp.

    ## Возможности

    * **Команды** - создание, вступление по инвайт-коду, выход
    * **Теги** - название + эмодзи, уникальные в пределах команды
    * **Теги на карточках** - привязка тегов к внешним карточкам

    ## 3-Layer Architecture

    ```
    API Layer (FastAPI) → Service Layer (Business Logic) → Repository Layer (Database)
    ```

    ## Rate Limiting

    - **100 запросов/минуту** на IP
    - При превышении лимита вернётся ошибка 429 Too Many Requests
    """,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# Лимитер живёт в app.state, чтобы тесты могли подменить его свежим
app.state.rate_limiter = RateLimiter(
    limit=settings.RATE_LIMIT,
    window=settings.RATE_LIMIT_WINDOW_SECONDS,
    sweep_interval=settings.RATE_LIMIT_SWEEP_SECONDS,
)


# ============================================================================
# MIDDLEWARE
# ============================================================================
# Порядок: последний добавленный выполняется первым.
# CORS → логирование → rate limit → роутинг

app.add_middleware(RateLimitMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# INCLUDE ROUTERS
# ============================================================================

api_router = APIRouter(prefix="/api")
api_router.include_router(teams_router)
api_router.include_router(tags_router)
api_router.include_router(card_tags_router)

app.include_router(api_router)

# Регистрируем обработчики ошибок для единого формата
register_error_handlers(app)


# ============================================================================
# HEALTH CHECK
# ============================================================================


@app.get(
    "/api/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Проверка работоспособности API",
)
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Health check endpoint.

    Пример ответа (200 OK):
    ```json
    {"status": "ok", "version": "2.0.0", "database": "connected"}
    ```

    Если база недоступна - 503 и "status": "error".
    """
    db_status = "disconnected"
    try:
        await db.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception:
        logger.warning("Health check: database unavailable", exc_info=True)

    overall_status = "ok" if db_status == "connected" else "error"
    response = HealthResponse(
        status=overall_status, version=settings.APP_VERSION, database=db_status
    )
    return JSONResponse(
        status_code=200 if overall_status == "ok" else 503,
        content=response.model_dump(),
    )
