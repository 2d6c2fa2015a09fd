"""Service layer with business logic."""

from .card_tag import CardTagService
from .tag import TagService
from .team import DEFAULT_TAGS, JoinResult, LeaveResult, TeamService

__all__ = [
    "TeamService",
    "TagService",
    "CardTagService",
    "JoinResult",
    "LeaveResult",
    "DEFAULT_TAGS",
]
