"""Team model."""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, IdMixin, utc_now


class Team(Base, IdMixin):
    """
    Команда - граница тенанта.

    Владеет участниками, тегами и привязками тегов к карточкам.
    Удаление команды каскадно удаляет всё это (ON DELETE CASCADE).
    """

    __tablename__ = "teams"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    invite_code: Mapped[str] = mapped_column(String(10), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, nullable=False)

    # Relationships
    # passive_deletes=True - дочерние строки удаляет сама БД
    members: Mapped[list["Member"]] = relationship(
        "Member", back_populates="team", cascade="all, delete-orphan", passive_deletes=True
    )
    tags: Mapped[list["Tag"]] = relationship(
        "Tag", back_populates="team", cascade="all, delete-orphan", passive_deletes=True
    )
    card_tags: Mapped[list["CardTag"]] = relationship(
        "CardTag", back_populates="team", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Team(id={self.id}, name='{self.name}', invite_code={self.invite_code})>"
