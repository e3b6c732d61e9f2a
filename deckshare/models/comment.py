from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, utcnow


class Comment(Base):
    """A comment on a decklist. text holds the rendered HTML."""

    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(Integer(), nullable=False, primary_key=True)
    text: Mapped[str] = mapped_column(Text(), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(), nullable=False, default=utcnow
    )
    is_hidden: Mapped[bool] = mapped_column(Boolean(), nullable=False, default=False)
    user_id: Mapped[int] = mapped_column(
        Integer(), ForeignKey("users.id"), nullable=False, index=True
    )
    decklist_id: Mapped[int] = mapped_column(
        Integer(), ForeignKey("decklists.id"), nullable=False, index=True
    )

    user: Mapped["User"] = relationship("User")
    decklist: Mapped["Decklist"] = relationship("Decklist", back_populates="comments")
