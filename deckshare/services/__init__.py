"""
Service layer for deckshare.
Provides focused services for different responsibilities:
- UserService: Manages site members
- CatalogService: Imports and reads factions, cycles, packs, cards and tournaments
- DeckService: Manages private decks and their slots
- DecklistService: Reads published decklists, listings and duplicates
- SocialService: Votes and favorites
- CommentService: Comments and their notifications
- SearchFormService: Builds the decklist search form
- ExportService: Renders decklists for download
"""

from deckshare.config import SETTINGS
from deckshare.db import Session
from deckshare.services.catalog import CatalogService
from deckshare.services.comment import CommentService
from deckshare.services.deck import DeckService
from deckshare.services.decklist import DecklistService
from deckshare.services.export import ExportService
from deckshare.services.notification import build_notifier
from deckshare.services.search import SearchFormService
from deckshare.services.social import SocialService
from deckshare.services.user import UserService

# Create service instances with the shared session maker
user_service = UserService(Session)
catalog_service = CatalogService(Session)
deck_service = DeckService(Session)
decklist_service = DecklistService(Session, page_size=SETTINGS.page_size)
social_service = SocialService(Session)
comment_service = CommentService(Session, build_notifier(SETTINGS), SETTINGS)
search_form_service = SearchFormService(Session)
export_service = ExportService(Session)

# Export for easy importing
__all__ = [
    # Service instances
    "user_service",
    "catalog_service",
    "deck_service",
    "decklist_service",
    "social_service",
    "comment_service",
    "search_form_service",
    "export_service",
    # Service classes
    "UserService",
    "CatalogService",
    "DeckService",
    "DecklistService",
    "SocialService",
    "CommentService",
    "SearchFormService",
    "ExportService",
]
