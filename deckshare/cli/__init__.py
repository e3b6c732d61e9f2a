"""Command modules for deckshare CLI."""

from .commands import catalog, deck, decklist, social, user

# Registry of all command modules
COMMAND_MODULES = [
    user,  # Members
    catalog,  # Cards, packs and tournaments
    deck,  # Private decks (create, list, show, copy)
    decklist,  # Publication, edit, delete, listings, export
    social,  # Votes, favorites, comments
]


def setup_all_parsers(subparsers):
    """Set up all command parsers by calling each module's setup_parser function."""
    for module in COMMAND_MODULES:
        module.setup_parser(subparsers)
