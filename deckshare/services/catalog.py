from datetime import date
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from deckshare.config import LOGGER
from deckshare.models.card import Card, Cycle, Faction, Pack
from deckshare.models.tournament import Tournament


class CatalogService:
    """
    Service for the reference data decks are built from:
    factions, cycles, packs, cards and tournaments.
    """

    def __init__(self, sessionmaker_: sessionmaker[Session]) -> None:
        self.Session: sessionmaker[Session] = sessionmaker_

    def import_catalog(self, data: dict[str, Any]) -> dict[str, int]:
        """
        Create or update catalog entries from a parsed YAML document.
        Entries are matched on their code (tournaments on their name).
        Returns the number of entries processed per kind.
        """
        counts = {"factions": 0, "packs": 0, "cards": 0, "tournaments": 0}

        with self.Session.begin() as session:
            for entry in data.get("factions", []):
                faction = self._get_by_code(session, Faction, entry["code"])
                if faction is None:
                    faction = Faction(code=entry["code"])
                    session.add(faction)
                faction.name = entry["name"]
                counts["factions"] += 1

            for entry in data.get("cycles", []):
                cycle = self._get_by_code(session, Cycle, entry["code"])
                if cycle is None:
                    cycle = Cycle(code=entry["code"])
                    session.add(cycle)
                cycle.name = entry["name"]
                cycle.position = entry.get("position", 0)

                for pack_entry in entry.get("packs", []):
                    pack = self._get_by_code(session, Pack, pack_entry["code"])
                    if pack is None:
                        pack = Pack(code=pack_entry["code"])
                        session.add(pack)
                    pack.name = pack_entry["name"]
                    pack.position = pack_entry.get("position", 0)
                    pack.date_release = _parse_date(pack_entry.get("date_release"))
                    pack.cycle = cycle
                    counts["packs"] += 1

            session.flush()

            for entry in data.get("cards", []):
                pack = self._get_by_code(session, Pack, entry["pack"])
                if pack is None:
                    LOGGER.warning(
                        f"Skipping card {entry['code']}: unknown pack {entry['pack']}"
                    )
                    continue
                card = self._get_by_code(session, Card, entry["code"])
                if card is None:
                    card = Card(code=entry["code"])
                    session.add(card)
                card.name = entry["name"]
                card.type_code = entry["type"]
                card.faction_code = entry.get("faction", "neutral")
                card.position = entry.get("position", 0)
                card.deck_limit = entry.get("deck_limit", 3)
                card.octgn_id = entry.get("octgn_id")
                card.pack = pack
                counts["cards"] += 1

            for entry in data.get("tournaments", []):
                tournament = session.scalars(
                    select(Tournament).where(Tournament.name == entry["name"])
                ).first()
                if tournament is None:
                    tournament = Tournament(name=entry["name"])
                    session.add(tournament)
                tournament.active = entry.get("active", True)
                counts["tournaments"] += 1

        LOGGER.info(f"Catalog imported: {counts}")
        return counts

    def get_cards_by_codes(self, codes: list[str]) -> dict[str, Card]:
        with self.Session() as session:
            cards = session.scalars(select(Card).where(Card.code.in_(codes))).all()
            return {card.code: card for card in cards}

    def list_tournaments(self, active: bool | None = None) -> list[Tournament]:
        with self.Session() as session:
            query = select(Tournament).order_by(Tournament.name)
            if active is not None:
                query = query.where(Tournament.active == active)
            return list(session.scalars(query).all())

    @staticmethod
    def _get_by_code(session: Session, model: type, code: str) -> Any:
        return session.scalars(select(model).where(model.code == code)).first()


def _parse_date(value: object) -> date | None:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(str(value))
