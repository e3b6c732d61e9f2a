"""Pytest configuration and shared fixtures for deckshare tests."""

from datetime import date, timedelta
from unittest.mock import Mock, patch

import pytest

from deckshare.config import LOGGER, Settings
from deckshare.db import create_db_engine, make_sessionmaker
from deckshare.models.base import Base
from deckshare.services.catalog import CatalogService
from deckshare.services.comment import CommentService
from deckshare.services.deck import DeckService
from deckshare.services.decklist import DecklistService
from deckshare.services.export import ExportService
from deckshare.services.search import SearchFormService
from deckshare.services.social import SocialService
from deckshare.services.user import UserService
from deckshare.validation import StandardDeckValidator
from deckshare.workflows.publication import PublicationWorkflow

AGENDA = "01027"
PLOTS = [f"0100{i}" for i in range(1, 8)]
CHARACTERS = [f"011{i:02d}" for i in range(20)]
WESTEROS_CARD = "02001"
FUTURE_CARD = "02099"


def catalog_data() -> dict:
    """A small catalog: a core set, one cycle of two packs, one unreleased pack."""
    cards = [
        {
            "code": AGENDA,
            "name": "Fealty",
            "type": "agenda",
            "pack": "core",
            "position": 27,
            "deck_limit": 1,
            "octgn_id": "agenda-guid",
        }
    ]
    cards += [
        {
            "code": code,
            "name": f"Plot {i}",
            "type": "plot",
            "pack": "core",
            "position": i,
            "deck_limit": 2,
            "octgn_id": f"plot-guid-{i}",
        }
        for i, code in enumerate(PLOTS, start=1)
    ]
    cards += [
        {
            "code": code,
            "name": f"Character {i:02d}",
            "type": "character",
            "faction": "stark",
            "pack": "core",
            "position": 100 + i,
            "octgn_id": f"char-guid-{i}",
        }
        for i, code in enumerate(CHARACTERS)
    ]
    cards += [
        {
            "code": WESTEROS_CARD,
            "name": "Ser Jaime Lannister",
            "type": "character",
            "faction": "lannister",
            "pack": "ttb",
            "position": 1,
        },
        {
            "code": FUTURE_CARD,
            "name": "Tomorrow's Hero",
            "type": "event",
            "pack": "fut",
            "position": 99,
        },
    ]

    return {
        "factions": [
            {"code": "stark", "name": "House Stark"},
            {"code": "lannister", "name": "House Lannister"},
            {"code": "neutral", "name": "Neutral"},
        ],
        "cycles": [
            {"code": "promo", "name": "Promotional", "position": 0, "packs": []},
            {
                "code": "core",
                "name": "Core Set",
                "position": 1,
                "packs": [
                    {"code": "core", "name": "Core Set", "position": 1, "date_release": "2015-10-01"}
                ],
            },
            {
                "code": "westeros",
                "name": "Westeros",
                "position": 2,
                "packs": [
                    {
                        "code": "ttb",
                        "name": "Taking the Black",
                        "position": 1,
                        "date_release": "2016-02-01",
                    },
                    {"code": "fut", "name": "Future Pack", "position": 2},
                ],
            },
        ],
        "cards": cards,
        "tournaments": [
            {"name": "Store Championship", "active": True},
            {"name": "Old Regional", "active": False},
        ],
    }


@pytest.fixture
def session_factory(tmp_path):
    """A sessionmaker bound to a fresh SQLite database file."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'deckshare-test.db'}")
    Base.metadata.create_all(engine)
    yield make_sessionmaker(engine)
    engine.dispose()


@pytest.fixture
def catalog(session_factory):
    service = CatalogService(session_factory)
    service.import_catalog(catalog_data())
    return service


@pytest.fixture
def users(session_factory):
    service = UserService(session_factory)
    return {
        "alice": service.create_user("alice", "alice@example.com"),
        "bob": service.create_user("bob", "bob@example.com"),
        "carol": service.create_user("carol", "carol@example.com"),
        "admin": service.create_user("admin", "admin@example.com", roles="ROLE_SUPER_ADMIN"),
    }


@pytest.fixture
def settings():
    return Settings(site_url="https://decks.example.com")


@pytest.fixture
def deck_service(session_factory, catalog):
    return DeckService(session_factory)


@pytest.fixture
def decklist_service(session_factory, catalog):
    return DecklistService(session_factory, page_size=2)


@pytest.fixture
def social_service(session_factory):
    return SocialService(session_factory)


@pytest.fixture
def notifier():
    """Mock notification dispatcher."""
    return Mock()


@pytest.fixture
def comment_service(session_factory, notifier, settings):
    return CommentService(session_factory, notifier, settings)


@pytest.fixture
def search_form_service(session_factory, catalog):
    return SearchFormService(session_factory)


@pytest.fixture
def export_service(session_factory, catalog):
    return ExportService(session_factory)


@pytest.fixture
def workflow(session_factory, catalog):
    return PublicationWorkflow(session_factory, StandardDeckValidator())


@pytest.fixture
def valid_cards() -> dict[str, int]:
    """A legal deck: one agenda, seven different plots, sixty draw cards."""
    cards = {AGENDA: 1}
    cards.update({code: 1 for code in PLOTS})
    cards.update({code: 3 for code in CHARACTERS})
    return cards


@pytest.fixture
def make_deck(deck_service, users):
    """Create a deck for a user (alice by default)."""

    def _make_deck(cards, owner="alice", name="Aggro", **kwargs):
        return deck_service.create_deck(users[owner].id, name, cards, **kwargs)

    return _make_deck


@pytest.fixture
def published(workflow, make_deck, users):
    """Publish a deck for a user (alice by default) without the preview step."""

    def _publish(cards=None, owner="alice", name="Aggro", **kwargs):
        deck = make_deck(cards or {CHARACTERS[0]: 2, CHARACTERS[1]: 3}, owner=owner, name=name)
        return workflow.publish(deck.id, users[owner].id, name, **kwargs)

    return _publish


@pytest.fixture
def today() -> date:
    return date.today()


@pytest.fixture
def tomorrow(today) -> date:
    return today + timedelta(days=1)


@pytest.fixture
def mock_logger():
    """Mock logger to capture log messages."""
    with (
        patch.object(LOGGER, "info") as mock_info,
        patch.object(LOGGER, "error") as mock_error,
        patch.object(LOGGER, "warning") as mock_warning,
    ):
        yield {
            "info": mock_info,
            "error": mock_error,
            "warning": mock_warning,
        }


@pytest.fixture
def capture_exits():
    """Capture system exits to prevent tests from actually exiting."""
    with patch("sys.exit") as mock_exit:
        yield mock_exit
