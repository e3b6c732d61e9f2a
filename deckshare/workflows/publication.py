from dataclasses import dataclass, field
from datetime import date
from typing import TextIO

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload, sessionmaker

from deckshare.authz import Operation, can_mutate, ensure_can_mutate
from deckshare.config import LOGGER
from deckshare.errors import AuthorizationError, NotFoundError, ValidationError
from deckshare.models.base import utcnow
from deckshare.models.card import Card, Pack
from deckshare.models.deck import Deck, DeckSlot
from deckshare.models.decklist import Decklist, DecklistSlot
from deckshare.models.tournament import Tournament
from deckshare.models.user import User
from deckshare.services.decklist import find_decklists_by_content
from deckshare.utils import (
    canonical_name,
    compute_signature,
    normalize_decklist_name,
    parse_int_ref,
    parse_precedent_ref,
    render_markdown,
)
from deckshare.validation import DeckValidator


def build_decklist_from_deck(deck: Deck, name: str, description_md: str) -> Decklist:
    """
    Snapshot a deck into a new, unsaved decklist.
    Slots are copied so later edits of the deck never reach the decklist.
    """
    name = normalize_decklist_name(name)
    description_md = (description_md or "").strip()
    content = deck.content
    now = utcnow()

    return Decklist(
        name=name,
        name_canonical=canonical_name(name, deck.version),
        version=deck.version,
        faction_code=deck.faction_code,
        description_md=description_md,
        description_html=render_markdown(description_md),
        signature=compute_signature(content),
        nb_votes=0,
        nb_favorites=0,
        nb_comments=0,
        user_id=deck.user_id,
        last_pack_id=deck.last_pack_id,
        created_at=now,
        updated_at=now,
        slots=[
            DecklistSlot(card=slot.card, quantity=slot.quantity) for slot in deck.slots
        ],
    )


@dataclass
class DuplicateWarning:
    """An existing decklist with exactly the same cards."""

    decklist_id: int
    name: str
    name_canonical: str
    username: str

    def __str__(self) -> str:
        return (
            f"This exact list was already published as '{self.name}' "
            f"(decklist {self.decklist_id}) by {self.username}"
        )


@dataclass
class PublicationPreview:
    """What publishing a deck would produce. Nothing is persisted."""

    deck_id: int
    draft: Decklist
    content: dict[str, int] = field(default_factory=dict)
    duplicates: list[DuplicateWarning] = field(default_factory=list)
    tournaments: list[Tournament] = field(default_factory=list)

    @property
    def has_duplicates(self) -> bool:
        return bool(self.duplicates)

    def to_dict(self) -> dict:
        """Convert to dictionary for easy serialization."""
        return {
            "deck_id": self.deck_id,
            "name": self.draft.name,
            "name_canonical": self.draft.name_canonical,
            "signature": self.draft.signature,
            "content": self.content,
            "duplicates": [str(warning) for warning in self.duplicates],
            "tournaments": [tournament.name for tournament in self.tournaments],
        }


class PublicationWorkflow:
    """
    Publication and versioning of decklists, with preview/apply pattern:
    prepare_publication checks a deck and shows the draft, publish saves it.
    """

    def __init__(self, sessionmaker_: sessionmaker[Session], validator: DeckValidator) -> None:
        self.Session: sessionmaker[Session] = sessionmaker_
        self.validator = validator

    def prepare_publication(
        self, deck_id: int, user_id: int | None, today: date | None = None
    ) -> PublicationPreview:
        """
        Check that a deck can be published and build the draft decklist.

        Raises AuthorizationError when the user does not own the deck, and
        ValidationError when its last pack is unreleased or the validator
        finds a problem. Identical published lists are reported as warnings.
        """
        with self.Session() as session:
            actor = self._require_actor(session, user_id, "You must be logged in to publish.")
            deck = self._load_deck(session, deck_id)
            if deck is None or not can_mutate(actor, deck, Operation.PUBLISH):
                raise AuthorizationError("You are not allowed to publish this deck.")

            last_pack = deck.last_pack
            if last_pack is None or not last_pack.is_released(today):
                raise ValidationError("unreleased")

            problem = self.validator.find_problem(deck)
            if problem:
                raise ValidationError("invalid", problem)

            preview = PublicationPreview(
                deck_id=deck.id,
                draft=build_decklist_from_deck(deck, deck.name, deck.description_md),
                content=deck.content,
            )
            for existing in find_decklists_by_content(session, preview.content):
                preview.duplicates.append(
                    DuplicateWarning(
                        decklist_id=existing.id,
                        name=existing.name,
                        name_canonical=existing.name_canonical,
                        username=existing.user.username,
                    )
                )
            preview.tournaments = list(
                session.scalars(select(Tournament).order_by(Tournament.id)).all()
            )

        for warning in preview.duplicates:
            LOGGER.warning(str(warning))
        return preview

    def publish(
        self,
        deck_id: int,
        user_id: int | None,
        name: str,
        description_md: str = "",
        tournament_ref: object = None,
        precedent_ref: object = None,
    ) -> Decklist:
        """
        Save a new decklist from the deck's current content.
        Ownership is checked again; validation is left to prepare_publication.
        """
        with self.Session.begin() as session:
            actor = self._require_actor(session, user_id, "You must be logged in to publish.")
            deck = self._load_deck(session, deck_id)
            if deck is None or not can_mutate(actor, deck, Operation.PUBLISH):
                raise AuthorizationError("You are not allowed to publish this deck.")

            decklist = build_decklist_from_deck(deck, name, description_md)
            decklist.tournament = self._resolve_tournament(session, tournament_ref)
            decklist.precedent = self._resolve_precedent(session, precedent_ref)
            session.add(decklist)
            session.flush()

            LOGGER.info(
                f"User {actor.username} published deck {deck.id} "
                f"as decklist {decklist.id} '{decklist.name_canonical}'"
            )
            return decklist

    def edit(
        self,
        decklist_id: int,
        user_id: int | None,
        name: str,
        description_md: str = "",
        tournament_ref: object = None,
        precedent_ref: object = None,
    ) -> Decklist:
        """
        Update the name, description, tournament and precedent of a decklist.
        Allowed to its owner and to administrators. The version never changes.
        """
        with self.Session.begin() as session:
            actor = self._require_actor(session, user_id, "Anonymous access denied")
            decklist = session.get(Decklist, decklist_id)
            if decklist is None:
                raise NotFoundError("Decklist", decklist_id)
            ensure_can_mutate(actor, decklist, Operation.EDIT, "Access denied")

            name = normalize_decklist_name(name)
            description_md = (description_md or "").strip()

            decklist.name = name
            decklist.name_canonical = canonical_name(name, decklist.version)
            decklist.description_md = description_md
            decklist.description_html = render_markdown(description_md)
            decklist.precedent = self._resolve_precedent(
                session, precedent_ref, decklist=decklist
            )
            decklist.tournament = self._resolve_tournament(session, tournament_ref)
            decklist.updated_at = utcnow()

            LOGGER.info(f"Decklist {decklist_id} edited by {actor.username}")
            return decklist

    def delete(self, decklist_id: int, user_id: int | None) -> None:
        """
        Delete a decklist that has no votes, favorites or comments.

        Decks copied from it and decklists succeeding it are relinked to its
        own precedent so that version history stays connected.
        """
        with self.Session.begin() as session:
            actor = self._require_actor(
                session, user_id, "You must be logged in for this operation."
            )
            decklist = session.scalars(
                select(Decklist).where(Decklist.id == decklist_id).with_for_update()
            ).first()
            if decklist is None or not can_mutate(actor, decklist, Operation.DELETE):
                raise AuthorizationError("You don't have access to this decklist.")
            if not decklist.is_deletable:
                raise AuthorizationError("Cannot delete this decklist.")

            precedent = decklist.precedent
            for child in list(decklist.children):
                child.parent = precedent
            for successor in list(decklist.successors):
                successor.precedent = precedent

            session.delete(decklist)

        LOGGER.info(
            f"Decklist {decklist_id} deleted by {actor.username}, "
            f"history relinked to {precedent.id if precedent else None}"
        )

    def write_preview_to_file(self, preview: PublicationPreview, file: TextIO) -> None:
        """Write a preview to a file in a human-readable format."""
        draft = preview.draft
        file.write(f"Decklist preview: {draft.name} ({draft.name_canonical})\n")
        file.write("=" * 50 + "\n\n")
        file.write(f"Faction: {draft.faction_code}\n")
        file.write(f"Signature: {draft.signature}\n")
        file.write(f"Cards: {sum(preview.content.values())}\n\n")

        for code, quantity in sorted(preview.content.items()):
            file.write(f"  {quantity} {code}\n")

        if preview.duplicates:
            file.write("\nWARNINGS:\n")
            for warning in preview.duplicates:
                file.write(f"  - {warning}\n")

        if preview.tournaments:
            file.write("\nTournaments:\n")
            for tournament in preview.tournaments:
                file.write(f"  [{tournament.id}] {tournament.name}\n")

    @staticmethod
    def _require_actor(session: Session, user_id: int | None, message: str) -> User:
        actor = session.get(User, user_id) if user_id is not None else None
        if actor is None:
            raise AuthorizationError(message)
        return actor

    @staticmethod
    def _load_deck(session: Session, deck_id: int) -> Deck | None:
        return session.scalars(
            select(Deck)
            .where(Deck.id == deck_id)
            .options(
                selectinload(Deck.slots)
                .selectinload(DeckSlot.card)
                .selectinload(Card.pack)
                .selectinload(Pack.cycle),
                selectinload(Deck.last_pack),
            )
        ).first()

    @staticmethod
    def _resolve_tournament(session: Session, tournament_ref: object) -> Tournament | None:
        tournament_id = parse_int_ref(tournament_ref)
        if tournament_id is None:
            return None
        return session.get(Tournament, tournament_id)

    @staticmethod
    def _resolve_precedent(
        session: Session, precedent_ref: object, decklist: Decklist | None = None
    ) -> Decklist | None:
        """
        Look up the precedent reference. Unknown ids resolve to None, and so
        does a precedent that would put the decklist in its own history.
        """
        precedent_id = parse_precedent_ref(precedent_ref)
        if precedent_id is None:
            return None
        if decklist is not None and precedent_id == decklist.id:
            return None

        precedent = session.get(Decklist, precedent_id)
        if precedent is None or decklist is None:
            return precedent

        ancestor = precedent.precedent
        seen = {precedent.id}
        while ancestor is not None and ancestor.id not in seen:
            if ancestor.id == decklist.id:
                LOGGER.warning(
                    f"Ignoring precedent {precedent_id} for decklist {decklist.id}: "
                    "it would create a loop in the version history"
                )
                return None
            seen.add(ancestor.id)
            ancestor = ancestor.precedent
        return precedent
