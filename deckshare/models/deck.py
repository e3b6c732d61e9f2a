import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, utcnow


class Deck(Base):
    """
    A user's work-in-progress card selection.
    Never versioned itself; each publication produces an independent Decklist.
    """

    __tablename__ = "decks"

    id: Mapped[int] = mapped_column(Integer(), nullable=False, primary_key=True)
    uuid: Mapped[str] = mapped_column(
        String(36), nullable=False, unique=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description_md: Mapped[str] = mapped_column(Text(), nullable=False, default="")
    version: Mapped[int] = mapped_column(Integer(), nullable=False, default=1)
    faction_code: Mapped[str] = mapped_column(
        String(20), nullable=False, default="neutral"
    )
    user_id: Mapped[int] = mapped_column(
        Integer(), ForeignKey("users.id"), nullable=False, index=True
    )
    last_pack_id: Mapped[int | None] = mapped_column(
        Integer(), ForeignKey("packs.id"), nullable=True
    )
    # Decklist this deck was copied from
    parent_id: Mapped[int | None] = mapped_column(
        Integer(), ForeignKey("decklists.id"), nullable=True, index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    user: Mapped["User"] = relationship("User", back_populates="decks")
    last_pack: Mapped[Optional["Pack"]] = relationship("Pack")
    parent: Mapped[Optional["Decklist"]] = relationship(
        "Decklist", back_populates="children"
    )
    slots: Mapped[list["DeckSlot"]] = relationship(
        "DeckSlot", back_populates="deck", cascade="all, delete-orphan"
    )

    @property
    def content(self) -> dict[str, int]:
        """Card code -> quantity."""
        return {slot.card.code: slot.quantity for slot in self.slots}


class DeckSlot(Base):
    __tablename__ = "deck_slots"

    id: Mapped[int] = mapped_column(Integer(), nullable=False, primary_key=True)
    deck_id: Mapped[int] = mapped_column(
        Integer(), ForeignKey("decks.id"), nullable=False, index=True
    )
    card_id: Mapped[int] = mapped_column(
        Integer(), ForeignKey("cards.id"), nullable=False
    )
    quantity: Mapped[int] = mapped_column(Integer(), nullable=False, default=1)

    deck: Mapped["Deck"] = relationship("Deck", back_populates="slots")
    card: Mapped["Card"] = relationship("Card")

    __table_args__ = (Index("idx_deck_card", "deck_id", "card_id"),)
