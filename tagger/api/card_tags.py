"""API endpoints для привязки тегов к карточкам Basecamp."""

from fastapi import APIRouter, Depends

from ..services import CardTagService
from .dependencies import get_card_tag_service
from .schemas import CardTagCreate, CardTagsResponse, ErrorResponse, SuccessResponse

router = APIRouter(prefix="/card-tags", tags=["card-tags"])


@router.get("/{team_id}", response_model=CardTagsResponse, summary="Теги на карточках команды")
async def get_team_card_tags(
    team_id: str, service: CardTagService = Depends(get_card_tag_service)
) -> CardTagsResponse:
    """
    Получить все теги на карточках команды, сгруппированные по карточке.

    Пример ответа:
    ```json
    {"cardTags": {"card-42": [{"id": "...", "name": "Urgent", "color": "🔥"}]}}
    ```
    """
    grouped = await service.get_team_card_tags(team_id)
    return CardTagsResponse(card_tags=grouped)


@router.post(
    "",
    response_model=SuccessResponse,
    summary="Привязать тег к карточке",
    responses={400: {"model": ErrorResponse}},
)
async def attach_tag(
    data: CardTagCreate, service: CardTagService = Depends(get_card_tag_service)
) -> SuccessResponse:
    """
    Привязать тег к карточке.

    Тег должен принадлежать команде, иначе 400.
    Повторная привязка - успешный no-op.
    """
    await service.attach_tag(team_id=data.team_id, card_id=data.card_id, tag_id=data.tag_id)
    return SuccessResponse()


# card_id:path - ID карточки может содержать закодированный "/" (%2F)
@router.delete(
    "/{team_id}/{card_id:path}/{tag_id}",
    response_model=SuccessResponse,
    summary="Отвязать тег от карточки",
    responses={400: {"model": ErrorResponse}},
)
async def detach_tag(
    team_id: str,
    card_id: str,
    tag_id: str,
    service: CardTagService = Depends(get_card_tag_service),
) -> SuccessResponse:
    """Отвязать тег от карточки. Удаление несуществующей привязки не ошибка."""
    await service.detach_tag(team_id=team_id, card_id=card_id, tag_id=tag_id)
    return SuccessResponse()
