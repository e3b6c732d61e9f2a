"""Tests for the catalog, user and deck services."""

from datetime import date
from types import SimpleNamespace
from unittest.mock import Mock

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from deckshare.errors import AuthorizationError, CardNotFoundError, NotFoundError
from deckshare.models.card import Card, Pack
from deckshare.services.catalog import CatalogService
from deckshare.services.deck import latest_pack
from deckshare.services.user import UserService

from conftest import AGENDA, CHARACTERS, FUTURE_CARD, WESTEROS_CARD, catalog_data


@pytest.fixture
def mock_sessionmaker():
    """Create a mock sessionmaker for testing."""
    mock_session = Mock(spec=Session)
    mock_sessionmaker = Mock(spec=sessionmaker)
    mock_sessionmaker.return_value.__enter__ = Mock(return_value=mock_session)
    mock_sessionmaker.return_value.__exit__ = Mock(return_value=None)
    mock_sessionmaker.begin.return_value.__enter__ = Mock(return_value=mock_session)
    mock_sessionmaker.begin.return_value.__exit__ = Mock(return_value=None)
    return mock_sessionmaker


class TestCatalogService:
    """Test cases for CatalogService."""

    def test_init(self, mock_sessionmaker):
        service = CatalogService(mock_sessionmaker)
        assert service.Session == mock_sessionmaker

    def test_import_counts(self, session_factory):
        counts = CatalogService(session_factory).import_catalog(catalog_data())

        assert counts == {"factions": 3, "packs": 3, "cards": 30, "tournaments": 2}

    def test_import_is_an_upsert(self, catalog, session_factory):
        catalog.import_catalog(
            {
                "cycles": [
                    {
                        "code": "westeros",
                        "name": "Westeros",
                        "position": 2,
                        "packs": [
                            {
                                "code": "fut",
                                "name": "Future Pack",
                                "position": 2,
                                "date_release": "2030-01-01",
                            }
                        ],
                    }
                ]
            }
        )

        with session_factory() as session:
            packs = session.scalars(select(Pack).where(Pack.code == "fut")).all()
            assert len(packs) == 1
            assert packs[0].date_release == date(2030, 1, 1)

    def test_card_defaults(self, catalog):
        cards = catalog.get_cards_by_codes([WESTEROS_CARD, FUTURE_CARD, AGENDA])

        assert cards[WESTEROS_CARD].faction_code == "lannister"
        assert cards[WESTEROS_CARD].deck_limit == 3
        assert cards[WESTEROS_CARD].octgn_id is None
        assert cards[FUTURE_CARD].faction_code == "neutral"
        assert cards[AGENDA].deck_limit == 1

    def test_card_with_unknown_pack_is_skipped(self, catalog, session_factory, mock_logger):
        counts = catalog.import_catalog(
            {"cards": [{"code": "99999", "name": "Lost", "type": "event", "pack": "nope"}]}
        )

        assert counts["cards"] == 0
        mock_logger["warning"].assert_called_once()
        with session_factory() as session:
            assert session.scalars(select(Card).where(Card.code == "99999")).first() is None

    def test_list_tournaments(self, catalog):
        assert [t.name for t in catalog.list_tournaments()] == [
            "Old Regional",
            "Store Championship",
        ]
        assert [t.name for t in catalog.list_tournaments(active=True)] == ["Store Championship"]


class TestUserService:
    """Test cases for UserService."""

    def test_current_user_anonymous(self, mock_sessionmaker):
        service = UserService(mock_sessionmaker)

        assert service.current_user(None) is None
        assert service.current_user("") is None
        mock_sessionmaker.assert_not_called()

    def test_current_user(self, session_factory, users):
        service = UserService(session_factory)

        assert service.current_user("bob").id == users["bob"].id
        assert service.current_user("nobody") is None

    def test_new_user_defaults(self, users):
        alice = users["alice"]

        assert alice.reputation == 1
        assert alice.is_notif_author and alice.is_notif_commenter and alice.is_notif_mention
        assert not alice.is_admin
        assert users["admin"].is_admin
        assert alice.donation == 0

    def test_add_donation(self, session_factory, users):
        service = UserService(session_factory)

        service.add_donation("bob", 5)

        assert service.add_donation("bob", 10) == 15
        assert service.get_user_by_username("bob").donation == 15

    def test_add_donation_unknown_user(self, session_factory, users):
        with pytest.raises(NotFoundError):
            UserService(session_factory).add_donation("ghost", 5)

    def test_list_donators(self, session_factory, users):
        """Biggest donation first, ties broken by username; non-donators left out."""
        service = UserService(session_factory)
        service.add_donation("carol", 10)
        service.add_donation("bob", 10)
        service.add_donation("admin", 50)

        donators = service.list_donators()

        assert [(u.username, u.donation) for u in donators] == [
            ("admin", 50),
            ("bob", 10),
            ("carol", 10),
        ]


class TestLatestPack:
    def test_most_recent_by_cycle_then_pack(self):
        core = SimpleNamespace(cycle=SimpleNamespace(position=1), position=1)
        first = SimpleNamespace(cycle=SimpleNamespace(position=2), position=1)
        second = SimpleNamespace(cycle=SimpleNamespace(position=2), position=2)
        cards = [SimpleNamespace(pack=p) for p in (first, core, second, core)]

        assert latest_pack(cards) is second

    def test_no_cards(self):
        assert latest_pack([]) is None


class TestDeckService:
    """Test cases for DeckService."""

    def test_create_deck(self, deck_service, users, session_factory):
        deck = deck_service.create_deck(
            users["alice"].id, "Jaime", {CHARACTERS[0]: 2, WESTEROS_CARD: 1, CHARACTERS[1]: 0}
        )

        assert deck.uuid
        assert deck_service.get_deck_cards(deck.id) == {CHARACTERS[0]: 2, WESTEROS_CARD: 1}
        with session_factory() as session:
            assert session.get(Pack, deck.last_pack_id).code == "ttb"

    def test_unknown_cards(self, deck_service, users):
        with pytest.raises(CardNotFoundError) as exc_info:
            deck_service.create_deck(users["alice"].id, "Bad", {"zzz": 1, "aaa": 2})

        assert str(exc_info.value) == "Unknown card code(s): aaa, zzz"

    def test_unknown_user(self, deck_service):
        with pytest.raises(NotFoundError):
            deck_service.create_deck(9999, "Nobody's", {CHARACTERS[0]: 1})

    def test_update_deck_cards(self, deck_service, make_deck):
        deck = make_deck({WESTEROS_CARD: 1})

        deck_service.update_deck_cards(deck.id, {CHARACTERS[3]: 3})

        assert deck_service.get_deck_cards(deck.id) == {CHARACTERS[3]: 3}
        assert deck_service.get_deck(deck.id).last_pack_id != deck.last_pack_id

    def test_get_deck_by_uuid(self, deck_service, make_deck):
        deck = make_deck({CHARACTERS[0]: 1})
        assert deck_service.get_deck_by_uuid(deck.uuid).id == deck.id

    def test_list_decks(self, deck_service, make_deck, users):
        make_deck({CHARACTERS[0]: 1}, name="Zeta")
        make_deck({CHARACTERS[0]: 1}, name="Alpha")
        make_deck({CHARACTERS[0]: 1}, owner="bob", name="Other")

        assert [d.name for d in deck_service.list_decks(users["alice"].id)] == ["Alpha", "Zeta"]

    def test_copy_decklist(self, deck_service, published, users):
        decklist = published(cards={CHARACTERS[0]: 2, WESTEROS_CARD: 1}, name="Original")

        deck = deck_service.create_deck_from_decklist(decklist.id, users["bob"].id)

        assert deck.user_id == users["bob"].id
        assert deck.parent_id == decklist.id
        assert deck.name == "Original"
        assert deck.last_pack_id == decklist.last_pack_id
        assert deck_service.get_deck_cards(deck.id) == {CHARACTERS[0]: 2, WESTEROS_CARD: 1}

    def test_copy_missing_decklist(self, deck_service, users):
        with pytest.raises(NotFoundError):
            deck_service.create_deck_from_decklist(9999, users["bob"].id)

    def test_copy_anonymous(self, deck_service, published):
        decklist = published()

        with pytest.raises(AuthorizationError):
            deck_service.create_deck_from_decklist(decklist.id, 9999)
