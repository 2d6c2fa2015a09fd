"""Tag model."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, IdMixin, utc_now


class Tag(Base, IdMixin):
    """Тег команды: имя + цвет (обычно эмодзи, например "🔥")."""

    __tablename__ = "tags"
    # Имя тега уникально в пределах команды
    __table_args__ = (UniqueConstraint("team_id", "name", name="uq_tags_team_name"),)

    team_id: Mapped[str] = mapped_column(
        ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    color: Mapped[str] = mapped_column(String(10), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)

    # Relationships
    team: Mapped["Team"] = relationship("Team", back_populates="tags")
    card_tags: Mapped[list["CardTag"]] = relationship(
        "CardTag", back_populates="tag", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, name='{self.name}', color='{self.color}')>"
