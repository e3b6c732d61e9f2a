from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, utcnow

favorite_table = Table(
    "favorite",
    Base.metadata,
    Column("user_id", Integer(), ForeignKey("users.id"), primary_key=True),
    Column("decklist_id", Integer(), ForeignKey("decklists.id"), primary_key=True),
)

vote_table = Table(
    "vote",
    Base.metadata,
    Column("user_id", Integer(), ForeignKey("users.id"), primary_key=True),
    Column("decklist_id", Integer(), ForeignKey("decklists.id"), primary_key=True),
)


class Decklist(Base):
    """
    Published snapshot of a deck.

    Slot content is frozen at publication. The version history is a chain of
    precedent links; successors are the decklists whose precedent is this one.
    """

    __tablename__ = "decklists"

    id: Mapped[int] = mapped_column(Integer(), nullable=False, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    name_canonical: Mapped[str] = mapped_column(String(255), nullable=False)
    version: Mapped[int] = mapped_column(Integer(), nullable=False, default=1)
    faction_code: Mapped[str] = mapped_column(
        String(20), nullable=False, default="neutral", index=True
    )
    description_md: Mapped[str] = mapped_column(Text(), nullable=False, default="")
    description_html: Mapped[str] = mapped_column(Text(), nullable=False, default="")
    signature: Mapped[str] = mapped_column(String(32), nullable=False, index=True)

    # Denormalized counters
    nb_votes: Mapped[int] = mapped_column(Integer(), nullable=False, default=0)
    nb_favorites: Mapped[int] = mapped_column(Integer(), nullable=False, default=0)
    nb_comments: Mapped[int] = mapped_column(Integer(), nullable=False, default=0)

    user_id: Mapped[int] = mapped_column(
        Integer(), ForeignKey("users.id"), nullable=False, index=True
    )
    last_pack_id: Mapped[int | None] = mapped_column(
        Integer(), ForeignKey("packs.id"), nullable=True
    )
    tournament_id: Mapped[int | None] = mapped_column(
        Integer(), ForeignKey("tournaments.id"), nullable=True
    )
    precedent_id: Mapped[int | None] = mapped_column(
        Integer(), ForeignKey("decklists.id"), nullable=True, index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(), nullable=False, default=utcnow
    )

    user: Mapped["User"] = relationship("User", back_populates="decklists")
    last_pack: Mapped[Optional["Pack"]] = relationship("Pack")
    tournament: Mapped[Optional["Tournament"]] = relationship("Tournament")
    precedent: Mapped[Optional["Decklist"]] = relationship(
        "Decklist", remote_side="Decklist.id", back_populates="successors"
    )
    successors: Mapped[list["Decklist"]] = relationship(
        "Decklist", back_populates="precedent"
    )
    children: Mapped[list["Deck"]] = relationship("Deck", back_populates="parent")
    slots: Mapped[list["DecklistSlot"]] = relationship(
        "DecklistSlot", back_populates="decklist", cascade="all, delete-orphan"
    )
    comments: Mapped[list["Comment"]] = relationship(
        "Comment",
        back_populates="decklist",
        cascade="all, delete-orphan",
        order_by="Comment.created_at",
    )
    favorited_by: Mapped[list["User"]] = relationship(
        "User", secondary="favorite", back_populates="favorites"
    )
    voted_by: Mapped[list["User"]] = relationship(
        "User", secondary="vote", back_populates="votes"
    )

    @property
    def content(self) -> dict[str, int]:
        """Card code -> quantity."""
        return {slot.card.code: slot.quantity for slot in self.slots}

    @property
    def is_deletable(self) -> bool:
        return not (self.nb_votes or self.nb_favorites or self.nb_comments)


class DecklistSlot(Base):
    __tablename__ = "decklist_slots"

    id: Mapped[int] = mapped_column(Integer(), nullable=False, primary_key=True)
    decklist_id: Mapped[int] = mapped_column(
        Integer(), ForeignKey("decklists.id"), nullable=False, index=True
    )
    card_id: Mapped[int] = mapped_column(
        Integer(), ForeignKey("cards.id"), nullable=False
    )
    quantity: Mapped[int] = mapped_column(Integer(), nullable=False, default=1)

    decklist: Mapped["Decklist"] = relationship("Decklist", back_populates="slots")
    card: Mapped["Card"] = relationship("Card")

    __table_args__ = (Index("idx_decklist_card", "decklist_id", "card_id"),)
