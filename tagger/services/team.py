"""Team service with business logic."""

from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import InternalError, NotFoundError, ValidationError
from ..core.ids import new_invite_code
from ..core.logging import get_logger
from ..core.sanitize import (
    INVITE_CODE_MAX,
    TEAM_ID_MAX,
    TEAM_NAME_MAX,
    USER_ID_MAX,
    USER_NAME_MAX,
    sanitize_string,
)
from ..models import Member, Tag, Team, utc_now
from ..repositories import CardTagRepository, MemberRepository, TagRepository, TeamRepository

logger = get_logger(__name__)

# Теги, которые получает каждая новая команда (в этом порядке)
DEFAULT_TAGS: list[tuple[str, str]] = [
    ("Urgent", "🔥"),
    ("In Progress", "🟡"),
    ("Review", "🔵"),
    ("Done", "✅"),
    ("Blocked", "🔒"),
    ("Bug", "🐛"),
]

DEFAULT_OWNER_NAME = "Owner"
DEFAULT_MEMBER_NAME = "Member"


@dataclass
class JoinResult:
    """Результат вступления в команду."""

    team: Team
    already_member: bool = False


@dataclass
class LeaveResult:
    """Результат выхода из команды."""

    team_deleted: bool = False


class TeamService:
    """
    Сервис для работы с командами и участниками.

    Инварианты:
    - у команды всегда есть хотя бы один участник
      (последний вышедший удаляет команду целиком)
    - пользователь состоит в команде не более одного раза
    - инвайт-код уникален
    """

    def __init__(self, db: AsyncSession):
        """Инициализация сервиса."""
        self.db = db
        self.team_repo = TeamRepository(db)
        self.member_repo = MemberRepository(db)
        self.tag_repo = TagRepository(db)
        self.card_tag_repo = CardTagRepository(db)

    async def create_team(self, name: str, user_id: str, user_name: str | None = None) -> Team:
        """
        Создать команду.

        Args:
            name: Название команды
            user_id: Внешний ID создателя
            user_name: Отображаемое имя создателя (по умолчанию "Owner")

        Returns:
            Созданная команда

        Raises:
            ValidationError: Если нет названия или user_id
            InternalError: Если запись не удалась (например, коллизия инвайт-кода)

        Бизнес-правила:
        1. Создатель сразу становится участником
        2. Команда получает 6 тегов по умолчанию
        3. Всё это одна транзакция - команда без создателя или тегов не видна
        """
        # 1. ВАЛИДАЦИЯ
        name = sanitize_string(name, TEAM_NAME_MAX)
        user_id = sanitize_string(user_id, USER_ID_MAX)
        user_name = sanitize_string(user_name, USER_NAME_MAX)

        if not name or not user_id:
            raise ValidationError("Team name and userId required")

        # 2. СОЗДАНИЕ: команда, владелец, теги по умолчанию
        team = Team(name=name, invite_code=new_invite_code())
        try:
            team = await self.team_repo.create(team)

            await self.member_repo.create(
                Member(team_id=team.id, user_id=user_id, name=user_name or DEFAULT_OWNER_NAME)
            )

            # Сдвиг на микросекунды сохраняет порядок тегов при сортировке по created_at
            created_at = utc_now()
            await self.tag_repo.create_many(
                [
                    Tag(
                        team_id=team.id,
                        name=tag_name,
                        color=color,
                        created_at=created_at + timedelta(microseconds=i),
                    )
                    for i, (tag_name, color) in enumerate(DEFAULT_TAGS)
                ]
            )
        except IntegrityError as e:
            # Коллизия инвайт-кода не повторяется - вероятность пренебрежимо мала
            await self.db.rollback()
            logger.error("Failed to create team", extra={"error": str(e.orig)})
            raise InternalError("Failed to create team") from e

        logger.info(
            "Team created",
            extra={"team_id": team.id, "invite_code": team.invite_code, "user_id": user_id},
        )
        return team

    async def join_team(
        self, invite_code: str, user_id: str, user_name: str | None = None
    ) -> JoinResult:
        """
        Вступить в команду по инвайт-коду.

        Повторное вступление - не ошибка: возвращается already_member=True.

        Raises:
            ValidationError: Если нет кода или user_id
            NotFoundError: Если команды с таким кодом нет
        """
        invite_code = sanitize_string(invite_code, INVITE_CODE_MAX)
        user_id = sanitize_string(user_id, USER_ID_MAX)
        user_name = sanitize_string(user_name, USER_NAME_MAX)

        if not invite_code or not user_id:
            raise ValidationError("Invite code and userId required")

        team = await self.team_repo.get_by_invite_code(invite_code)
        if not team:
            raise NotFoundError("Invalid invite code")

        existing = await self.member_repo.get_member(team.id, user_id)
        if existing:
            return JoinResult(team=team, already_member=True)

        team_id = team.id
        try:
            await self.member_repo.create(
                Member(team_id=team_id, user_id=user_id, name=user_name or DEFAULT_MEMBER_NAME)
            )
        except IntegrityError as e:
            # Параллельный запрос того же пользователя успел первым
            await self.db.rollback()
            if await self.member_repo.get_member(team_id, user_id):
                return JoinResult(team=await self.team_repo.get_by_id(team_id), already_member=True)
            raise InternalError("Failed to join team") from e

        logger.info("Member joined team", extra={"team_id": team_id, "user_id": user_id})
        return JoinResult(team=team)

    async def get_teams_for_user(self, user_id: str) -> list[Team]:
        """Получить все команды пользователя."""
        return await self.team_repo.get_teams_for_user(user_id)

    async def get_team_details(self, team_id: str) -> tuple[Team, list[Member]]:
        """
        Получить команду вместе с участниками.

        Raises:
            NotFoundError: Если команда не найдена
        """
        team = await self.team_repo.get_by_id(team_id)
        if not team:
            raise NotFoundError("Team not found")

        members = await self.member_repo.get_by_team(team_id)
        return team, members

    async def leave_team(self, team_id: str, user_id: str) -> LeaveResult:
        """
        Выйти из команды.

        Args:
            team_id: ID команды
            user_id: Внешний ID пользователя

        Returns:
            LeaveResult(team_deleted=True), если вышел последний участник

        Raises:
            ValidationError: Если нет user_id
            NotFoundError: Если пользователь не состоит в команде

        Бизнес-правило:
        - Команда без участников не имеет смысла. Когда выходит последний,
          удаляется всё: привязки → теги → участники → команда.

        Одновременные выходы из одной команды сериализуются блокировкой
        строки команды. После удаления участника число оставшихся
        пересчитывается: если кто-то вышел раньше нас, команда не останется пустой.
        """
        team_id = sanitize_string(team_id, TEAM_ID_MAX)
        user_id = sanitize_string(user_id, USER_ID_MAX)

        if not user_id:
            raise ValidationError("userId required")

        # 1. Блокируем команду до конца транзакции
        await self.team_repo.get_for_update(team_id)

        # 2. ВАЛИДАЦИЯ: пользователь состоит в команде
        member = await self.member_repo.get_member(team_id, user_id)
        if not member:
            raise NotFoundError("Not a member of this team")

        # 3. Последний участник - удаляем команду целиком
        if await self.member_repo.count_by_team(team_id) == 1:
            await self._delete_team(team_id)
            return LeaveResult(team_deleted=True)

        # 4. Иначе удаляем только этого участника
        await self.member_repo.remove_member(team_id, user_id)

        if await self.member_repo.count_by_team(team_id) == 0:
            await self._delete_team(team_id)
            return LeaveResult(team_deleted=True)

        logger.info("Member left team", extra={"team_id": team_id, "user_id": user_id})
        return LeaveResult()

    async def _delete_team(self, team_id: str) -> None:
        """Удалить команду: привязки → теги → участники → команда."""
        await self.card_tag_repo.delete_by_team(team_id)
        await self.tag_repo.delete_by_team(team_id)
        await self.member_repo.delete_by_team(team_id)
        await self.team_repo.delete(team_id)

        logger.info("Team deleted (last member left)", extra={"team_id": team_id})
