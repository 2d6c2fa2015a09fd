"""Member repository with specific queries."""

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Member
from .base import BaseRepository


class MemberRepository(BaseRepository[Member]):
    """Репозиторий для работы с участниками команд."""

    def __init__(self, db: AsyncSession):
        super().__init__(Member, db)

    async def get_member(self, team_id: str, user_id: str) -> Member | None:
        """
        Найти участника по паре (team_id, user_id).

        SQL эквивалент:
            SELECT * FROM members WHERE team_id = {team_id} AND user_id = {user_id};
        """
        result = await self.db.execute(
            select(Member).where(Member.team_id == team_id, Member.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_by_team(self, team_id: str) -> list[Member]:
        """Все участники команды в порядке вступления."""
        result = await self.db.execute(
            select(Member).where(Member.team_id == team_id).order_by(Member.joined_at)
        )
        return list(result.scalars().all())

    async def count_by_team(self, team_id: str) -> int:
        """
        Количество участников команды.

        SQL эквивалент:
            SELECT COUNT(*) FROM members WHERE team_id = {team_id};
        """
        result = await self.db.execute(
            select(func.count()).select_from(Member).where(Member.team_id == team_id)
        )
        return result.scalar_one()

    async def remove_member(self, team_id: str, user_id: str) -> bool:
        """Удалить участника из команды. True если строка была удалена."""
        result = await self.db.execute(
            delete(Member).where(Member.team_id == team_id, Member.user_id == user_id)
        )
        return result.rowcount > 0

    async def delete_by_team(self, team_id: str) -> int:
        """Удалить всех участников команды. Возвращает количество строк."""
        result = await self.db.execute(delete(Member).where(Member.team_id == team_id))
        return result.rowcount
