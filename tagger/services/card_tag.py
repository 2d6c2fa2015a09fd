"""Card-Tag service with business logic."""

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ValidationError
from ..core.sanitize import CARD_ID_MAX, TAG_ID_MAX, TEAM_ID_MAX, sanitize_string
from ..repositories import CardTagRepository, TagRepository


class CardTagService:
    """
    Сервис привязки тегов к внешним карточкам.

    Карточки живут во внешней системе, здесь хранится только связь
    (team_id, card_id, tag_id).
    """

    def __init__(self, db: AsyncSession):
        """Инициализация сервиса."""
        self.db = db
        self.card_tag_repo = CardTagRepository(db)
        self.tag_repo = TagRepository(db)

    async def get_team_card_tags(self, team_id: str) -> dict[str, list[dict[str, str]]]:
        """
        Все привязки команды, сгруппированные по карточкам.

        Returns:
            {card_id: [{"id": tag_id, "name": ..., "color": ...}, ...]}
            Карточек без тегов в словаре нет.

        Пример:
            {
                "card-42": [
                    {"id": "a1", "name": "Urgent", "color": "🔥"},
                    {"id": "b2", "name": "Bug", "color": "🐛"}
                ]
            }
        """
        rows = await self.card_tag_repo.get_by_team_with_tags(team_id)

        grouped: dict[str, list[dict[str, str]]] = {}
        for card_id, tag_id, name, color in rows:
            grouped.setdefault(card_id, []).append({"id": tag_id, "name": name, "color": color})
        return grouped

    async def attach_tag(self, team_id: str, card_id: str, tag_id: str) -> bool:
        """
        Привязать тег к карточке.

        Повторная привязка - успешный no-op.

        Returns:
            True если создана новая привязка, False если она уже была

        Raises:
            ValidationError: Если не хватает полей или тег чужой команды
        """
        team_id = sanitize_string(team_id, TEAM_ID_MAX)
        card_id = sanitize_string(card_id, CARD_ID_MAX)
        tag_id = sanitize_string(tag_id, TAG_ID_MAX)

        if not team_id or not card_id or not tag_id:
            raise ValidationError("teamId, cardId, and tagId required")

        # Тег должен принадлежать этой команде
        if not await self.tag_repo.get_for_team(tag_id, team_id):
            raise ValidationError("Invalid tag for this team")

        return await self.card_tag_repo.add_ignore(team_id, card_id, tag_id)

    async def detach_tag(self, team_id: str, card_id: str, tag_id: str) -> bool:
        """
        Отвязать тег от карточки.

        card_id приходит уже декодированным (в URL он может быть percent-encoded).
        Удаление несуществующей привязки - не ошибка.

        Returns:
            True если привязка была удалена
        """
        team_id = sanitize_string(team_id, TEAM_ID_MAX)
        card_id = sanitize_string(card_id, CARD_ID_MAX)
        tag_id = sanitize_string(tag_id, TAG_ID_MAX)

        if not team_id or not card_id or not tag_id:
            raise ValidationError("teamId, cardId, and tagId required")

        return await self.card_tag_repo.remove(team_id, card_id, tag_id)
