"""API layer - FastAPI endpoints."""

from .card_tags import router as card_tags_router
from .tags import router as tags_router
from .teams import router as teams_router

__all__ = [
    "teams_router",
    "tags_router",
    "card_tags_router",
]
