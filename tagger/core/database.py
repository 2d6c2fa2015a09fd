"""
Подключение к БД: engine, фабрика сессий, создание таблиц.

Каждая сессия (= один HTTP запрос, см. api.dependencies.get_db) работает
в своём соединении и своей транзакции. Единственное исключение - SQLite
в памяти: там база живёт внутри соединения, поэтому оно одно на всех.
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from .config import settings

# Сколько секунд SQLite ждёт, пока другая транзакция отпустит блокировку записи
SQLITE_BUSY_TIMEOUT = 30


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """
    Включить PRAGMA foreign_keys для каждого нового SQLite соединения.

    Без этого SQLite игнорирует ON DELETE CASCADE.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """
    Создать async engine под конкретную БД.

    - sqlite в памяти: StaticPool (одно соединение, иначе данные теряются)
    - sqlite в файле: обычный пул, у каждой сессии своё соединение
    - PostgreSQL и прочие: NullPool
    """
    if not url.startswith("sqlite"):
        return create_async_engine(url, echo=echo, poolclass=NullPool)

    if ":memory:" in url:
        engine = create_async_engine(
            url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_async_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT},
        )

    enable_sqlite_foreign_keys(engine)
    return engine


engine = build_engine(settings.database_url, echo=settings.DATABASE_ECHO)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def init_db() -> None:
    """Создать недостающие таблицы (и каталог DATA_DIR для SQLite по умолчанию)."""
    from ..models import Base

    if settings.DATABASE_URL is None:
        settings.DATA_DIR.mkdir(parents=True, exist_ok=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db() -> None:
    """Удалить все таблицы. Только для init_db.py --reset и тестов."""
    from ..models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
