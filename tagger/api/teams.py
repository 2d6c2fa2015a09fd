"""
API endpoints для работы с командами.

Команда создаётся одним пользователем, остальные вступают по инвайт-коду.
Когда команду покидает последний участник, она удаляется целиком.
"""

from fastapi import APIRouter, Depends

from ..services import TeamService
from .dependencies import get_team_service
from .schemas import (
    ErrorResponse,
    LeaveResponse,
    MemberResponse,
    TeamCreate,
    TeamCreatedResponse,
    TeamDetailResponse,
    TeamJoin,
    TeamJoinedResponse,
    TeamLeave,
    TeamListResponse,
    TeamResponse,
    TeamSummary,
)

router = APIRouter(prefix="/teams", tags=["teams"])


# ============================================================================
# CREATE TEAM
# ============================================================================


@router.post(
    "",
    response_model=TeamCreatedResponse,
    summary="Создать команду",
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def create_team(
    data: TeamCreate, service: TeamService = Depends(get_team_service)
) -> TeamCreatedResponse:
    """
    Создать команду.

    Создатель становится первым участником, команда получает 6 тегов
    по умолчанию (Urgent, In Progress, Review, Done, Blocked, Bug).

    Пример запроса:
    ```json
    {"name": "Engineering", "userId": "u1", "userName": "Alice"}
    ```

    Пример ответа:
    ```json
    {
        "team": {"id": "V1StGXR8_Z5jdHi6B-myT", "name": "Engineering", "invite_code": "K7Q2XZ"},
        "message": "Team created successfully"
    }
    ```
    """
    team = await service.create_team(name=data.name, user_id=data.user_id, user_name=data.user_name)
    return TeamCreatedResponse(
        team=TeamSummary.model_validate(team), message="Team created successfully"
    )


# ============================================================================
# JOIN TEAM
# ============================================================================


@router.post(
    "/join",
    response_model=TeamJoinedResponse,
    summary="Вступить в команду по инвайт-коду",
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def join_team(
    data: TeamJoin, service: TeamService = Depends(get_team_service)
) -> TeamJoinedResponse:
    """
    Вступить в команду.

    Код не чувствителен к регистру. Повторное вступление не ошибка:
    вернётся та же команда с сообщением "Already a member".
    """
    result = await service.join_team(
        invite_code=data.invite_code, user_id=data.user_id, user_name=data.user_name
    )
    message = "Already a member" if result.already_member else "Joined team successfully"
    return TeamJoinedResponse(team=TeamResponse.model_validate(result.team), message=message)


# ============================================================================
# GET USER TEAMS
# ============================================================================


@router.get("/{user_id}", response_model=TeamListResponse, summary="Команды пользователя")
async def get_user_teams(
    user_id: str, service: TeamService = Depends(get_team_service)
) -> TeamListResponse:
    """Получить все команды, в которых состоит пользователь."""
    teams = await service.get_teams_for_user(user_id)
    return TeamListResponse(teams=[TeamResponse.model_validate(t) for t in teams])


# ============================================================================
# GET TEAM DETAILS
# ============================================================================


@router.get(
    "/{team_id}/details",
    response_model=TeamDetailResponse,
    summary="Команда с участниками",
    responses={404: {"model": ErrorResponse}},
)
async def get_team_details(
    team_id: str, service: TeamService = Depends(get_team_service)
) -> TeamDetailResponse:
    """Получить команду и список её участников."""
    team, members = await service.get_team_details(team_id)
    return TeamDetailResponse(
        team=TeamResponse.model_validate(team),
        members=[MemberResponse.model_validate(m) for m in members],
    )


# ============================================================================
# LEAVE TEAM
# ============================================================================


@router.post(
    "/{team_id}/leave",
    response_model=LeaveResponse,
    response_model_exclude_none=True,
    summary="Выйти из команды",
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def leave_team(
    team_id: str, data: TeamLeave, service: TeamService = Depends(get_team_service)
) -> LeaveResponse:
    """
    Выйти из команды.

    Если вышел последний участник, команда удаляется вместе с тегами
    и привязками:
    ```json
    {"success": true, "teamDeleted": true, "message": "Team deleted (you were the last member)"}
    ```
    """
    result = await service.leave_team(team_id=team_id, user_id=data.user_id)
    if result.team_deleted:
        return LeaveResponse(
            success=True, team_deleted=True, message="Team deleted (you were the last member)"
        )
    return LeaveResponse(success=True, message="Left team successfully")
