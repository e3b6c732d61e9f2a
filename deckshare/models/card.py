from datetime import date

from sqlalchemy import Date, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class Faction(Base):
    __tablename__ = "factions"

    id: Mapped[int] = mapped_column(Integer(), nullable=False, primary_key=True)
    code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)


class Cycle(Base):
    """A group of packs released together. Position 0 is reserved for promos."""

    __tablename__ = "cycles"

    id: Mapped[int] = mapped_column(Integer(), nullable=False, primary_key=True)
    code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    position: Mapped[int] = mapped_column(Integer(), nullable=False, default=0)

    packs: Mapped[list["Pack"]] = relationship(
        "Pack", back_populates="cycle", order_by="Pack.position"
    )


class Pack(Base):
    __tablename__ = "packs"

    id: Mapped[int] = mapped_column(Integer(), nullable=False, primary_key=True)
    code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    position: Mapped[int] = mapped_column(Integer(), nullable=False, default=0)
    # None means not announced for release yet
    date_release: Mapped[date | None] = mapped_column(Date(), nullable=True)
    cycle_id: Mapped[int] = mapped_column(
        Integer(), ForeignKey("cycles.id"), nullable=False, index=True
    )

    cycle: Mapped["Cycle"] = relationship("Cycle", back_populates="packs")
    cards: Mapped[list["Card"]] = relationship(
        "Card", back_populates="pack", order_by="Card.position"
    )

    def is_released(self, today: date | None = None) -> bool:
        if self.date_release is None:
            return False
        return self.date_release <= (today or date.today())


class Card(Base):
    __tablename__ = "cards"

    id: Mapped[int] = mapped_column(Integer(), nullable=False, primary_key=True)
    code: Mapped[str] = mapped_column(
        String(20), nullable=False, unique=True, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type_code: Mapped[str] = mapped_column(String(20), nullable=False)
    faction_code: Mapped[str] = mapped_column(
        String(20), nullable=False, default="neutral"
    )
    position: Mapped[int] = mapped_column(Integer(), nullable=False, default=0)
    deck_limit: Mapped[int] = mapped_column(Integer(), nullable=False, default=3)
    octgn_id: Mapped[str | None] = mapped_column(String(40), nullable=True)
    pack_id: Mapped[int] = mapped_column(
        Integer(), ForeignKey("packs.id"), nullable=False, index=True
    )

    pack: Mapped["Pack"] = relationship("Pack", back_populates="cards")
