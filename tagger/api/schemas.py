"""
Pydantic схемы для API.

Request-схемы принимают любые JSON значения: не-строки превращаются в "",
а обрезка пробелов и длины выполняется в сервисном слое.
Поэтому отсутствующее поле даёт 400 от сервиса, а не 422 от Pydantic.

Response-схемы повторяют формат ответов Basecamp Tagger API:
    {"team": {...}, "message": "..."}
    {"tags": [...]}
    {"cardTags": {"card-42": [...]}}
"""

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def _coerce_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


# Строка из JSON: всё, что не строка, считается пустым значением
LooseStr = Annotated[str, BeforeValidator(_coerce_str)]


class CamelModel(BaseModel):
    """Базовая схема запроса: поля в JSON в camelCase (userId, inviteCode...)."""

    model_config = ConfigDict(populate_by_name=True)


# ============================================================================
# TEAM SCHEMAS
# ============================================================================


class TeamCreate(CamelModel):
    """
    Схема для создания команды (POST /api/teams).

    Пример:
    {
        "name": "Engineering",
        "userId": "u1",
        "userName": "Alice"
    }
    """

    name: LooseStr = ""
    user_id: LooseStr = Field("", alias="userId")
    user_name: LooseStr = Field("", alias="userName")


class TeamJoin(CamelModel):
    """
    Схема для вступления в команду (POST /api/teams/join).

    Пример:
    {
        "inviteCode": "K7Q2XZ",
        "userId": "u2"
    }
    """

    invite_code: LooseStr = Field("", alias="inviteCode")
    user_id: LooseStr = Field("", alias="userId")
    user_name: LooseStr = Field("", alias="userName")


class TeamLeave(CamelModel):
    """Схема для выхода из команды (POST /api/teams/{team_id}/leave)."""

    user_id: LooseStr = Field("", alias="userId")


class TeamSummary(BaseModel):
    """Краткая информация о созданной команде."""

    id: str
    name: str
    invite_code: str

    model_config = ConfigDict(from_attributes=True)


class TeamResponse(TeamSummary):
    """Команда целиком (строка таблицы teams)."""

    created_at: datetime


class MemberResponse(BaseModel):
    """Участник команды."""

    id: str
    user_id: str
    name: str | None
    joined_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TeamCreatedResponse(BaseModel):
    """Ответ POST /api/teams."""

    team: TeamSummary
    message: str


class TeamJoinedResponse(BaseModel):
    """Ответ POST /api/teams/join."""

    team: TeamResponse
    message: str


class TeamListResponse(BaseModel):
    """Ответ GET /api/teams/{user_id}."""

    teams: list[TeamResponse]


class TeamDetailResponse(BaseModel):
    """Ответ GET /api/teams/{team_id}/details."""

    team: TeamResponse
    members: list[MemberResponse]


class LeaveResponse(BaseModel):
    """
    Ответ POST /api/teams/{team_id}/leave.

    teamDeleted присутствует только когда вышел последний участник.
    """

    success: bool
    team_deleted: bool | None = Field(None, alias="teamDeleted")
    message: str

    model_config = ConfigDict(populate_by_name=True)


# ============================================================================
# TAG SCHEMAS
# ============================================================================


class TagCreate(CamelModel):
    """
    Схема для создания тега (POST /api/tags).

    Пример:
    {
        "teamId": "V1StGXR8_Z5jdHi6B-myT",
        "name": "Needs QA",
        "color": "🧪"
    }
    """

    team_id: LooseStr = Field("", alias="teamId")
    name: LooseStr = ""
    color: LooseStr = ""


class TagUpdate(CamelModel):
    """Схема для обновления тега (PUT /api/tags/{tag_id}). Все поля опциональные."""

    name: LooseStr = ""
    color: LooseStr = ""


class TagResponse(BaseModel):
    """Тег в ответе."""

    id: str
    team_id: str
    name: str
    color: str
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class TagListResponse(BaseModel):
    """Ответ GET /api/tags/{team_id}."""

    tags: list[TagResponse]


class TagItemResponse(BaseModel):
    """Ответ POST / PUT /api/tags. tag = null, если тега нет."""

    tag: TagResponse | None


# ============================================================================
# CARD TAG SCHEMAS
# ============================================================================


class CardTagCreate(CamelModel):
    """
    Схема для привязки тега к карточке (POST /api/card-tags).

    Пример:
    {
        "teamId": "V1StGXR8_Z5jdHi6B-myT",
        "cardId": "card-42",
        "tagId": "3fJk2lQp9XbN0aZ7yV1cE"
    }
    """

    team_id: LooseStr = Field("", alias="teamId")
    card_id: LooseStr = Field("", alias="cardId")
    tag_id: LooseStr = Field("", alias="tagId")


class CardTagItem(BaseModel):
    """Тег на карточке."""

    id: str
    name: str
    color: str


class CardTagsResponse(BaseModel):
    """Ответ GET /api/card-tags/{team_id}."""

    card_tags: dict[str, list[CardTagItem]] = Field(alias="cardTags")

    model_config = ConfigDict(populate_by_name=True)


# ============================================================================
# COMMON SCHEMAS
# ============================================================================


class SuccessResponse(BaseModel):
    """Схема для успешных операций без возврата данных."""

    success: bool = True


class ErrorResponse(BaseModel):
    """
    Единый формат ответа для всех ошибок API.

    Пример:
    {
        "error": "A tag with this name already exists"
    }
    """

    error: str


class HealthResponse(BaseModel):
    """Ответ GET /api/health."""

    status: str
    version: str
    database: str
