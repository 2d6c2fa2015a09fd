"""Base repository: общие операции над моделями со строковым id."""

from typing import Any, Generic, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    CRUD по первичному ключу для любой модели тэггера.

    Репозиторий не коммитит: flush() отправляет SQL в текущую транзакцию,
    а commit/rollback делает get_db() один раз на запрос.

    Пример:
        class TeamRepository(BaseRepository[Team]):
            def __init__(self, db):
                super().__init__(Team, db)
    """

    def __init__(self, model: type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    async def create(self, obj: ModelType) -> ModelType:
        """
        Вставить строку и вернуть её с заполненными default-полями.

        Нарушение UNIQUE всплывает отсюда как IntegrityError.
        """
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def create_many(self, objs: list[ModelType]) -> list[ModelType]:
        """Вставить несколько строк одним flush()."""
        self.db.add_all(objs)
        await self.db.flush()
        return objs

    async def get_by_id(self, id: str) -> ModelType | None:
        result = await self.db.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def update(self, id: str, **changes: Any) -> ModelType | None:
        """
        Применить changes к строке с этим id.

        Returns:
            Обновлённый объект или None, если строки нет
        """
        obj = await self.get_by_id(id)
        if obj is None:
            return None

        for field, value in changes.items():
            setattr(obj, field, value)

        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def delete(self, id: str) -> bool:
        """
        DELETE по id. Зависимые строки удаляет ON DELETE CASCADE в БД.

        Returns:
            True если строка была
        """
        result = await self.db.execute(delete(self.model).where(self.model.id == id))
        return result.rowcount > 0
