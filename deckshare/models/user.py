from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, utcnow

ADMIN_ROLE = "ROLE_SUPER_ADMIN"


class User(Base):
    """
    A registered member of the site.
    Reputation is denormalized: it moves with votes and favorites received.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer(), nullable=False, primary_key=True)
    username: Mapped[str] = mapped_column(
        String(100), nullable=False, unique=True, index=True
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    reputation: Mapped[int] = mapped_column(Integer(), nullable=False, default=1)
    # Total donated to the site, in whole currency units
    donation: Mapped[int] = mapped_column(Integer(), nullable=False, default=0)

    # Space separated role names
    roles: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    # Notification opt-ins
    is_notif_author: Mapped[bool] = mapped_column(Boolean(), nullable=False, default=True)
    is_notif_commenter: Mapped[bool] = mapped_column(
        Boolean(), nullable=False, default=True
    )
    is_notif_mention: Mapped[bool] = mapped_column(
        Boolean(), nullable=False, default=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(), nullable=False, default=utcnow
    )

    decks: Mapped[list["Deck"]] = relationship("Deck", back_populates="user")
    decklists: Mapped[list["Decklist"]] = relationship(
        "Decklist", back_populates="user"
    )
    favorites: Mapped[list["Decklist"]] = relationship(
        "Decklist", secondary="favorite", back_populates="favorited_by"
    )
    votes: Mapped[list["Decklist"]] = relationship(
        "Decklist", secondary="vote", back_populates="voted_by"
    )

    def has_role(self, role: str) -> bool:
        return role in self.roles.split()

    @property
    def is_admin(self) -> bool:
        return self.has_role(ADMIN_ROLE)
