"""Repository layer for data access."""

from .base import BaseRepository
from .card_tag import CardTagRepository
from .member import MemberRepository
from .tag import TagRepository
from .team import TeamRepository

__all__ = [
    "BaseRepository",
    "TeamRepository",
    "MemberRepository",
    "TagRepository",
    "CardTagRepository",
]
