"""Deck commands for deckshare CLI."""

import argparse
import sys

from deckshare.cli.helpers import read_cards, run_handler
from deckshare.cli.result import CommandResult, error, info, success
from deckshare.config import LOGGER
from deckshare.models.user import User
from deckshare.services import deck_service, decklist_service

COMMAND = "deck"


def setup_parser(subparsers: argparse._SubParsersAction) -> None:
    """Set up the deck command parser and its subcommands."""
    deck_parser = subparsers.add_parser("deck", help="Private deck commands")
    deck_subparsers = deck_parser.add_subparsers(dest="deck_command")

    create_parser = deck_subparsers.add_parser(
        "create", help="Create a deck from a card list"
    )
    create_parser.add_argument("name", help="Name of the deck")
    create_parser.add_argument(
        "card_entries",
        nargs="*",
        help="Card entries in format '<quantity> <card code>'",
    )
    create_parser.add_argument(
        "--file", "-f", help="File with one '<quantity> <card code>' per line"
    )
    create_parser.add_argument("--description", default="", help="Markdown description")
    create_parser.add_argument("--faction", default="neutral", help="Faction code")
    create_parser.add_argument(
        "--version", type=int, default=1, help="Major version of the deck"
    )

    deck_subparsers.add_parser("list", help="List your decks")

    show_parser = deck_subparsers.add_parser("show", help="Show cards in a deck")
    show_parser.add_argument("deck_ref", help="ID or UUID of the deck")

    copy_parser = deck_subparsers.add_parser(
        "copy", help="Copy a published decklist into a new deck"
    )
    copy_parser.add_argument("decklist_id", type=int, help="ID of the decklist")


def handle_command(args: argparse.Namespace) -> None:
    """Route deck subcommands to their appropriate handlers."""
    handlers = {
        "create": deck_create,
        "list": deck_list,
        "show": deck_show,
        "copy": deck_copy,
    }
    result = run_handler(handlers, args.deck_command, args, COMMAND)
    result.log()
    if result.exit_code != 0:
        sys.exit(result.exit_code)


def deck_create(args: argparse.Namespace, actor: User | None) -> CommandResult:
    if actor is None:
        return error("You must be logged in to create a deck. Use --user.")

    cards = read_cards(args)
    if not cards:
        return error("No cards provided. Use card entries or --file.")

    deck = deck_service.create_deck(
        actor.id,
        args.name,
        cards,
        description_md=args.description,
        faction_code=args.faction,
        version=args.version,
    )
    return success(
        f"Created deck '{deck.name}' (id {deck.id}) with {sum(cards.values())} cards",
        data=deck,
    )


def deck_list(args: argparse.Namespace, actor: User | None) -> CommandResult:
    if actor is None:
        return error("You must be logged in to list your decks. Use --user.")

    decks = deck_service.list_decks(actor.id)
    if not decks:
        return info("No decks found.")

    LOGGER.info(f"{'ID':>6} | {'Name':<30} | {'Faction':<12} | {'Updated':<16}")
    LOGGER.info("-" * 75)
    for deck in decks:
        updated = deck.updated_at.strftime("%Y-%m-%d %H:%M")
        LOGGER.info(f"{deck.id:>6} | {deck.name[:30]:<30} | {deck.faction_code:<12} | {updated}")

    return success(data=decks)


def deck_show(args: argparse.Namespace, actor: User | None) -> CommandResult:
    ref = str(args.deck_ref)
    if ref.isdigit():
        deck = deck_service.get_deck(int(ref))
    else:
        deck = deck_service.get_deck_by_uuid(ref)
    if deck is None or actor is None or deck.user_id != actor.id:
        return error(f"Deck {ref} not found")

    cards = deck_service.get_deck_cards(deck.id)
    LOGGER.info(f"Deck: {deck.name} (version {deck.version}, {deck.faction_code})")
    if deck.parent_id:
        LOGGER.info(f"Copied from decklist {deck.parent_id}")
    LOGGER.info("-" * 40)
    for code, quantity in sorted(cards.items()):
        LOGGER.info(f"{quantity} {code}")
    LOGGER.info("-" * 40)
    LOGGER.info(f"Total cards: {sum(cards.values())}")

    for published in decklist_service.find_by_content(cards):
        LOGGER.info(
            f"Published as decklist {published.id} '{published.name}' "
            f"by {published.user.username}"
        )

    return success(data=cards)


def deck_copy(args: argparse.Namespace, actor: User | None) -> CommandResult:
    if actor is None:
        return error("You must be logged in to copy a decklist. Use --user.")

    deck = deck_service.create_deck_from_decklist(args.decklist_id, actor.id)
    return success(
        f"Copied decklist {args.decklist_id} into deck '{deck.name}' (id {deck.id})",
        data=deck,
    )
