"""SQLAlchemy models for Basecamp Tagger."""

from .base import Base, utc_now
from .card_tag import CardTag
from .member import Member
from .tag import Tag
from .team import Team

__all__ = [
    "Base",
    "utc_now",
    "Team",
    "Member",
    "Tag",
    "CardTag",
]
