"""Card-Tag association model."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, IdMixin, utc_now


class CardTag(Base, IdMixin):
    """
    Привязка тега к внешней карточке.

    card_id - непрозрачная строка из внешней системы (Basecamp),
    сами карточки здесь не хранятся.
    """

    __tablename__ = "card_tags"
    # Повторная привязка того же тега к той же карточке - no-op
    __table_args__ = (
        UniqueConstraint("team_id", "card_id", "tag_id", name="uq_card_tags_team_card_tag"),
    )

    team_id: Mapped[str] = mapped_column(
        ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True
    )
    card_id: Mapped[str] = mapped_column(String(100), nullable=False)
    tag_id: Mapped[str] = mapped_column(
        ForeignKey("tags.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)

    # Relationships
    team: Mapped["Team"] = relationship("Team", back_populates="card_tags")
    tag: Mapped["Tag"] = relationship("Tag", back_populates="card_tags")

    def __repr__(self) -> str:
        return f"<CardTag(card_id='{self.card_id}', tag_id={self.tag_id})>"
