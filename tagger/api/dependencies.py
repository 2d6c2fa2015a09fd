"""
Dependencies для FastAPI endpoints.

Вместо того чтобы создавать сервисы вручную в каждом endpoint:
    async def create_team(...):
        async with AsyncSessionLocal() as db:
            service = TeamService(db)
            ...

Мы используем FastAPI Depends():
    async def create_team(
        service: TeamService = Depends(get_team_service)
    ):
        ...

Цепочка зависимостей:
    get_team_service зависит от get_db
    → FastAPI вызовет get_db() и передаст сессию в get_team_service()
    → одна сессия = одна транзакция на запрос
"""

from collections.abc import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import AsyncSessionLocal
from ..services import CardTagService, TagService, TeamService

# ============================================================================
# DATABASE SESSION DEPENDENCY
# ============================================================================


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency для получения сессии БД.

    Автоматически:
    1. Создаёт сессию
    2. Передаёт в endpoint
    3. Делает commit() при успехе
    4. Делает rollback() при ошибке (в том числе доменной: NotFoundError и т.п.)
    5. Закрывает сессию

    Так многошаговые операции (создание команды, каскадный выход)
    атомарны: либо видны целиком, либо не видны вовсе.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ============================================================================
# SERVICE DEPENDENCIES
# ============================================================================


async def get_team_service(db: AsyncSession = Depends(get_db)) -> TeamService:
    """Dependency для TeamService."""
    return TeamService(db)


async def get_tag_service(db: AsyncSession = Depends(get_db)) -> TagService:
    """Dependency для TagService."""
    return TagService(db)


async def get_card_tag_service(db: AsyncSession = Depends(get_db)) -> CardTagService:
    """Dependency для CardTagService."""
    return CardTagService(db)
