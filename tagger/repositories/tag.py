"""Tag repository with specific queries."""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Tag
from .base import BaseRepository


class TagRepository(BaseRepository[Tag]):
    """
    Репозиторий для работы с тегами.

    Теги всегда принадлежат команде, поэтому почти все запросы
    фильтруются по team_id.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Tag, db)

    async def get_by_team(self, team_id: str) -> list[Tag]:
        """
        Все теги команды в порядке создания.

        SQL эквивалент:
            SELECT * FROM tags WHERE team_id = {team_id} ORDER BY created_at;
        """
        result = await self.db.execute(
            select(Tag).where(Tag.team_id == team_id).order_by(Tag.created_at)
        )
        return list(result.scalars().all())

    async def get_by_name(self, team_id: str, name: str) -> Tag | None:
        """
        Найти тег команды по имени (точное совпадение).

        SQL эквивалент:
            SELECT * FROM tags WHERE team_id = {team_id} AND name = {name};
        """
        result = await self.db.execute(select(Tag).where(Tag.team_id == team_id, Tag.name == name))
        return result.scalar_one_or_none()

    async def get_for_team(self, tag_id: str, team_id: str) -> Tag | None:
        """
        Получить тег, только если он принадлежит команде.

        Используется для защиты от привязки чужого тега к карточке.
        """
        result = await self.db.execute(select(Tag).where(Tag.id == tag_id, Tag.team_id == team_id))
        return result.scalar_one_or_none()

    async def delete_by_team(self, team_id: str) -> int:
        """Удалить все теги команды. Возвращает количество строк."""
        result = await self.db.execute(delete(Tag).where(Tag.team_id == team_id))
        return result.rowcount
