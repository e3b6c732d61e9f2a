from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload, sessionmaker

from deckshare.config import LOGGER
from deckshare.errors import AuthorizationError, CardNotFoundError, NotFoundError
from deckshare.models.card import Card, Pack
from deckshare.models.deck import Deck, DeckSlot
from deckshare.models.decklist import Decklist
from deckshare.models.user import User


def latest_pack(cards: list[Card]) -> Pack | None:
    """The most recent pack among the cards, by cycle then pack position."""
    packs = [card.pack for card in cards]
    if not packs:
        return None
    return max(packs, key=lambda pack: (pack.cycle.position, pack.position))


class DeckService:
    """
    Service for managing users' private decks and their card slots.
    """

    def __init__(self, sessionmaker_: sessionmaker[Session]) -> None:
        self.Session: sessionmaker[Session] = sessionmaker_

    def create_deck(
        self,
        user_id: int,
        name: str,
        cards: dict[str, int],
        description_md: str = "",
        faction_code: str = "neutral",
        version: int = 1,
    ) -> Deck:
        """Create a deck from a card code -> quantity mapping."""
        with self.Session.begin() as session:
            if session.get(User, user_id) is None:
                raise NotFoundError("User", user_id)

            deck = Deck(
                user_id=user_id,
                name=name,
                description_md=description_md,
                faction_code=faction_code,
                version=version,
            )
            self._replace_slots(session, deck, cards)
            session.add(deck)
            session.flush()
            LOGGER.info(f"Created deck '{name}' ({deck.uuid}) for user {user_id}")
            return deck

    def update_deck_cards(self, deck_id: int, cards: dict[str, int]) -> None:
        """Replace all the slots of a deck."""
        with self.Session.begin() as session:
            deck = session.get(Deck, deck_id)
            if deck is None:
                raise NotFoundError("Deck", deck_id)
            self._replace_slots(session, deck, cards)

    def get_deck(self, deck_id: int) -> Deck | None:
        with self.Session() as session:
            return session.get(Deck, deck_id)

    def get_deck_by_uuid(self, deck_uuid: str) -> Deck | None:
        with self.Session() as session:
            return session.scalars(select(Deck).where(Deck.uuid == deck_uuid)).first()

    def get_deck_cards(self, deck_id: int) -> dict[str, int]:
        """Get all cards in a deck as a code->quantity dictionary."""
        with self.Session() as session:
            slots = session.scalars(
                select(DeckSlot)
                .where(DeckSlot.deck_id == deck_id)
                .options(selectinload(DeckSlot.card))
            ).all()
            return {slot.card.code: slot.quantity for slot in slots}

    def list_decks(self, user_id: int) -> list[Deck]:
        with self.Session() as session:
            decks = session.scalars(
                select(Deck).where(Deck.user_id == user_id).order_by(Deck.name)
            ).all()
            return list(decks)

    def create_deck_from_decklist(self, decklist_id: int, user_id: int) -> Deck:
        """
        Copy a published decklist into a new private deck.
        The new deck keeps the decklist as its parent.
        """
        with self.Session.begin() as session:
            if session.get(User, user_id) is None:
                raise AuthorizationError("You must be logged in for this operation.")
            decklist = session.get(Decklist, decklist_id)
            if decklist is None:
                raise NotFoundError("Decklist", decklist_id)

            deck = Deck(
                user_id=user_id,
                name=decklist.name,
                description_md=decklist.description_md,
                faction_code=decklist.faction_code,
                last_pack_id=decklist.last_pack_id,
                parent=decklist,
                slots=[
                    DeckSlot(card=slot.card, quantity=slot.quantity)
                    for slot in decklist.slots
                ],
            )
            session.add(deck)
            session.flush()
            LOGGER.info(f"Copied decklist {decklist_id} into deck {deck.id}")
            return deck

    def _replace_slots(self, session: Session, deck: Deck, cards: dict[str, int]) -> None:
        found = {
            card.code: card
            for card in session.scalars(
                select(Card).where(Card.code.in_(list(cards)))
            ).all()
        }
        missing = sorted(set(cards) - set(found))
        if missing:
            raise CardNotFoundError(missing)

        deck.slots = [
            DeckSlot(card=found[code], quantity=quantity)
            for code, quantity in cards.items()
            if quantity > 0
        ]
        last_pack = latest_pack(list(found.values()))
        deck.last_pack_id = last_pack.id if last_pack else None
