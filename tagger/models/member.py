"""Team member model."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, IdMixin, utc_now


class Member(Base, IdMixin):
    """Участник команды. user_id - внешний идентификатор пользователя."""

    __tablename__ = "members"
    # Пользователь состоит в команде не более одного раза
    __table_args__ = (UniqueConstraint("team_id", "user_id", name="uq_members_team_user"),)

    team_id: Mapped[str] = mapped_column(
        ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    joined_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)

    # Relationships
    team: Mapped["Team"] = relationship("Team", back_populates="members")

    def __repr__(self) -> str:
        return f"<Member(id={self.id}, team_id={self.team_id}, user_id='{self.user_id}')>"
