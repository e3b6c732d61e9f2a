from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Tournament(Base):
    """A tournament tier a decklist can be attached to."""

    __tablename__ = "tournaments"

    id: Mapped[int] = mapped_column(Integer(), nullable=False, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean(), nullable=False, default=True)
