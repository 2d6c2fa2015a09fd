"""
Pytest fixtures для тестов.

Предоставляет:
- test_db: изолированная SQLite in-memory БД для каждого теста
- test_client: HTTP клиент для тестирования API endpoints
- rate_limiter: свежий rate limiter для каждого теста
- fake_time: управляемые часы (подменяют time.time)
"""

import time

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tagger.api.dependencies import get_db  # ВАЖНО: используем get_db из dependencies
from tagger.core.database import build_engine
from tagger.core.rate_limit import RateLimiter
from tagger.main import app
from tagger.models import Base

# Test database URL (SQLite in-memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeClock:
    """Часы, которые идут только по команде advance()."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_time(monkeypatch) -> FakeClock:
    """
    Подменяет time.time на FakeClock.

    Хранилище limits считает окна по time.time(), так тесты
    двигают время без sleep().
    """
    clock = FakeClock()
    monkeypatch.setattr(time, "time", clock)
    return clock


@pytest_asyncio.fixture
async def test_engine():
    """
    Создаёт async engine для тестовой БД (SQLite in-memory).

    build_engine выбирает StaticPool: одно соединение на всех,
    иначе in-memory данные теряются. Внешние ключи включены.
    """
    engine = build_engine(TEST_DATABASE_URL)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def test_db(test_engine):
    """
    Предоставляет async session для работы с тестовой БД.

    Каждый тест получает чистую БД.
    """
    TestSessionLocal = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()


@pytest.fixture
def rate_limiter():
    """Свежий лимитер на каждый тест, чтобы тесты не делили счётчики."""
    previous = app.state.rate_limiter
    limiter = RateLimiter(limit=100, window=60)
    app.state.rate_limiter = limiter
    yield limiter
    app.state.rate_limiter = previous


@pytest_asyncio.fixture
async def test_client(test_engine, rate_limiter):
    """
    Предоставляет HTTP клиент для тестирования API endpoints.

    Использует тестовую БД вместо production БД.
    """
    TestSessionLocal = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with TestSessionLocal() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture(scope="session")
def anyio_backend():
    """Используем asyncio для всех async тестов."""
    return "asyncio"
