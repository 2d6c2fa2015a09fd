"""Card-Tag repository with specific queries."""

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.ids import new_id
from ..models import CardTag, Tag
from .base import BaseRepository


class CardTagRepository(BaseRepository[CardTag]):
    """Репозиторий для привязок тегов к карточкам."""

    def __init__(self, db: AsyncSession):
        super().__init__(CardTag, db)

    async def get_by_team_with_tags(self, team_id: str) -> list[tuple[str, str, str, str]]:
        """
        Все привязки команды вместе с именем и цветом тега.

        Returns:
            Список кортежей (card_id, tag_id, tag_name, tag_color)

        SQL эквивалент:
            SELECT ct.card_id, ct.tag_id, t.name, t.color
            FROM card_tags ct
            JOIN tags t ON ct.tag_id = t.id
            WHERE ct.team_id = {team_id}
            ORDER BY ct.created_at;
        """
        result = await self.db.execute(
            select(CardTag.card_id, CardTag.tag_id, Tag.name, Tag.color)
            .join(Tag, CardTag.tag_id == Tag.id)
            .where(CardTag.team_id == team_id)
            .order_by(CardTag.created_at)
        )
        return [(row[0], row[1], row[2], row[3]) for row in result.all()]

    async def get_association(self, team_id: str, card_id: str, tag_id: str) -> CardTag | None:
        """Найти привязку по тройке (team_id, card_id, tag_id)."""
        result = await self.db.execute(
            select(CardTag).where(
                CardTag.team_id == team_id,
                CardTag.card_id == card_id,
                CardTag.tag_id == tag_id,
            )
        )
        return result.scalar_one_or_none()

    async def add_ignore(self, team_id: str, card_id: str, tag_id: str) -> bool:
        """
        Привязать тег к карточке, если такой привязки ещё нет.

        SQL эквивалент (SQLite):
            INSERT OR IGNORE INTO card_tags (id, team_id, card_id, tag_id) VALUES (...);

        Returns:
            True если строка вставлена, False если привязка уже была
        """
        values = {"id": new_id(), "team_id": team_id, "card_id": card_id, "tag_id": tag_id}
        dialect = self.db.get_bind().dialect.name

        if dialect in ("sqlite", "postgresql"):
            insert = sqlite.insert if dialect == "sqlite" else postgresql.insert
            stmt = (
                insert(CardTag)
                .values(**values)
                .on_conflict_do_nothing(index_elements=["team_id", "card_id", "tag_id"])
            )
            result = await self.db.execute(stmt)
            return result.rowcount > 0

        # Остальные диалекты: get-or-create
        if await self.get_association(team_id, card_id, tag_id):
            return False
        await self.create(CardTag(**values))
        return True

    async def remove(self, team_id: str, card_id: str, tag_id: str) -> bool:
        """Удалить привязку. True если строка была удалена."""
        result = await self.db.execute(
            delete(CardTag).where(
                CardTag.team_id == team_id,
                CardTag.card_id == card_id,
                CardTag.tag_id == tag_id,
            )
        )
        return result.rowcount > 0

    async def delete_by_tag(self, tag_id: str) -> int:
        """Удалить все привязки тега."""
        result = await self.db.execute(delete(CardTag).where(CardTag.tag_id == tag_id))
        return result.rowcount

    async def delete_by_team(self, team_id: str) -> int:
        """Удалить все привязки команды."""
        result = await self.db.execute(delete(CardTag).where(CardTag.team_id == team_id))
        return result.rowcount
