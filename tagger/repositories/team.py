"""Team repository with specific queries."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Member, Team
from .base import BaseRepository


class TeamRepository(BaseRepository[Team]):
    """Репозиторий для работы с командами."""

    def __init__(self, db: AsyncSession):
        super().__init__(Team, db)

    async def get_by_invite_code(self, invite_code: str) -> Team | None:
        """
        Найти команду по инвайт-коду.

        Коды хранятся в верхнем регистре, поэтому вход тоже приводится к upper().

        SQL эквивалент:
            SELECT * FROM teams WHERE invite_code = UPPER({invite_code});
        """
        result = await self.db.execute(
            select(Team).where(Team.invite_code == invite_code.upper())
        )
        return result.scalar_one_or_none()

    async def get_teams_for_user(self, user_id: str) -> list[Team]:
        """
        Получить все команды, в которых состоит пользователь.

        SQL эквивалент:
            SELECT t.* FROM teams t
            JOIN members m ON t.id = m.team_id
            WHERE m.user_id = {user_id}
            ORDER BY m.joined_at;
        """
        result = await self.db.execute(
            select(Team)
            .join(Member, Team.id == Member.team_id)
            .where(Member.user_id == user_id)
            .order_by(Member.joined_at)
        )
        return list(result.scalars().all())

    async def get_for_update(self, team_id: str) -> Team | None:
        """
        Получить команду и заблокировать её строку до конца транзакции.

        Так выходы участников одной команды выполняются по очереди.
        SQLite FOR UPDATE не поддерживает, там запись и так сериализована
        блокировкой базы.

        SQL эквивалент (PostgreSQL):
            SELECT * FROM teams WHERE id = {team_id} FOR UPDATE;
        """
        result = await self.db.execute(
            select(Team).where(Team.id == team_id).with_for_update()
        )
        return result.scalar_one_or_none()
