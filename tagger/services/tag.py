"""Tag service with business logic."""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConflictError, ValidationError
from ..core.logging import get_logger
from ..core.sanitize import TAG_COLOR_MAX, TAG_ID_MAX, TAG_NAME_MAX, TEAM_ID_MAX, sanitize_string
from ..models import Tag
from ..repositories import CardTagRepository, TagRepository

logger = get_logger(__name__)

DUPLICATE_TAG_MESSAGE = "A tag with this name already exists"


class TagService:
    """
    Сервис для работы с тегами команды.

    Имя тега уникально в пределах команды: проверка в сервисе даёт
    понятную ошибку, а UNIQUE(team_id, name) в БД страхует от гонки
    двух одновременных запросов.
    """

    def __init__(self, db: AsyncSession):
        """Инициализация сервиса."""
        self.db = db
        self.tag_repo = TagRepository(db)
        self.card_tag_repo = CardTagRepository(db)

    async def get_team_tags(self, team_id: str) -> list[Tag]:
        """Все теги команды в порядке создания."""
        return await self.tag_repo.get_by_team(team_id)

    async def create_tag(self, team_id: str, name: str, color: str) -> Tag:
        """
        Создать тег.

        Args:
            team_id: ID команды
            name: Название тега (до 50 символов)
            color: Цвет / эмодзи (до 10 символов)

        Returns:
            Созданный тег

        Raises:
            ValidationError: Если не хватает полей
            ConflictError: Если тег с таким названием уже есть в команде
        """
        # 1. ВАЛИДАЦИЯ: все поля обязательны
        team_id = sanitize_string(team_id, TEAM_ID_MAX)
        name = sanitize_string(name, TAG_NAME_MAX)
        color = sanitize_string(color, TAG_COLOR_MAX)

        if not team_id or not name or not color:
            raise ValidationError("teamId, name, and color required")

        # 2. ВАЛИДАЦИЯ: уникальность имени в команде
        if await self.tag_repo.get_by_name(team_id, name):
            raise ConflictError(DUPLICATE_TAG_MESSAGE)

        # 3. СОЗДАНИЕ
        try:
            tag = await self.tag_repo.create(Tag(team_id=team_id, name=name, color=color))
        except IntegrityError as e:
            # Параллельный запрос создал такой же тег между проверкой и INSERT
            await self.db.rollback()
            raise ConflictError(DUPLICATE_TAG_MESSAGE) from e

        logger.info("Tag created", extra={"team_id": team_id, "tag_id": tag.id})
        return tag

    async def update_tag(
        self, tag_id: str, name: str | None = None, color: str | None = None
    ) -> Tag | None:
        """
        Частичное обновление тега.

        Пустые или не переданные поля не меняются.
        Несуществующий tag_id - не ошибка: просто вернётся None.

        Raises:
            ConflictError: Если новое имя уже занято другим тегом команды
        """
        tag_id = sanitize_string(tag_id, TAG_ID_MAX)
        name = sanitize_string(name, TAG_NAME_MAX)
        color = sanitize_string(color, TAG_COLOR_MAX)

        changes = {}
        if name:
            changes["name"] = name
        if color:
            changes["color"] = color

        if not changes:
            return await self.tag_repo.get_by_id(tag_id)

        try:
            return await self.tag_repo.update(tag_id, **changes)
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictError(DUPLICATE_TAG_MESSAGE) from e

    async def delete_tag(self, tag_id: str) -> bool:
        """
        Удалить тег вместе с его привязками к карточкам.

        Удаление несуществующего тега - не ошибка.

        Returns:
            True если тег был удалён
        """
        tag_id = sanitize_string(tag_id, TAG_ID_MAX)
        if not tag_id:
            raise ValidationError("tagId required")

        await self.card_tag_repo.delete_by_tag(tag_id)
        deleted = await self.tag_repo.delete(tag_id)

        if deleted:
            logger.info("Tag deleted", extra={"tag_id": tag_id})
        return deleted
