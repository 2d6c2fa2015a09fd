"""
API endpoints для работы с тегами команды.

Тег = название + цвет (эмодзи). Название уникально в пределах команды.
"""

from fastapi import APIRouter, Depends

from ..services import TagService
from .dependencies import get_tag_service
from .schemas import (
    ErrorResponse,
    SuccessResponse,
    TagCreate,
    TagItemResponse,
    TagListResponse,
    TagResponse,
    TagUpdate,
)

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("/{team_id}", response_model=TagListResponse, summary="Теги команды")
async def get_team_tags(
    team_id: str, service: TagService = Depends(get_tag_service)
) -> TagListResponse:
    """
    Получить теги команды в порядке создания.

    Пример запроса:
    ```
    GET /api/tags/V1StGXR8_Z5jdHi6B-myT
    ```
    """
    tags = await service.get_team_tags(team_id)
    return TagListResponse(tags=[TagResponse.model_validate(t) for t in tags])


@router.post(
    "",
    response_model=TagItemResponse,
    summary="Создать тег",
    responses={400: {"model": ErrorResponse}},
)
async def create_tag(
    data: TagCreate, service: TagService = Depends(get_tag_service)
) -> TagItemResponse:
    """
    Создать тег.

    Ошибки:
    - 400: не хватает teamId / name / color
    - 400: тег с таким названием уже есть в команде
    """
    tag = await service.create_tag(team_id=data.team_id, name=data.name, color=data.color)
    return TagItemResponse(tag=TagResponse.model_validate(tag))


@router.put("/{tag_id}", response_model=TagItemResponse, summary="Обновить тег")
async def update_tag(
    tag_id: str, data: TagUpdate, service: TagService = Depends(get_tag_service)
) -> TagItemResponse:
    """
    Частично обновить тег (name и/или color).

    Для несуществующего тега возвращается {"tag": null}.
    """
    tag = await service.update_tag(tag_id, name=data.name, color=data.color)
    return TagItemResponse(tag=TagResponse.model_validate(tag) if tag else None)


@router.delete(
    "/{tag_id}",
    response_model=SuccessResponse,
    summary="Удалить тег",
    responses={400: {"model": ErrorResponse}},
)
async def delete_tag(tag_id: str, service: TagService = Depends(get_tag_service)) -> SuccessResponse:
    """Удалить тег и все его привязки к карточкам. Повторное удаление не ошибка."""
    await service.delete_tag(tag_id)
    return SuccessResponse()
