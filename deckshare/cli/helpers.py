"""Helper functions for CLI commands to reduce duplication."""

import argparse
from pathlib import Path
from typing import Callable

import yaml

from deckshare.cli.result import CommandResult, error, from_error
from deckshare.config import LOGGER
from deckshare.errors import Error
from deckshare.models.decklist import Decklist
from deckshare.models.user import User
from deckshare.services import user_service
from deckshare.utils import parse_cardlist, read_cardlist_from_file

Handler = Callable[[argparse.Namespace, User | None], CommandResult]


def load_yaml_config(yaml_file: str) -> dict[str, object] | None:
    """Load YAML configuration file."""
    yaml_path = Path(yaml_file)
    if not yaml_path.exists():
        # Don't log here - let caller handle via CommandResult
        return None

    with open(yaml_path) as f:
        return yaml.safe_load(f) or {}


def resolve_user(args: argparse.Namespace) -> User | None:
    """The acting user named by --user, or None when anonymous."""
    username = getattr(args, "user", None)
    user = user_service.current_user(username)
    if username and user is None:
        LOGGER.warning(f"Unknown user '{username}', acting anonymously")
    return user


def read_cards(args: argparse.Namespace) -> dict[str, int]:
    """Card code -> quantity from --file and/or positional entries."""
    lines: list[str] = []
    if getattr(args, "file", None):
        lines.extend(read_cardlist_from_file(args.file))
    lines.extend(getattr(args, "card_entries", None) or [])
    return parse_cardlist(lines)


def run_handler(
    handlers: dict[str, Handler], subcommand: str | None, args: argparse.Namespace, group: str
) -> CommandResult:
    """Run a subcommand handler, turning domain errors into error results."""
    handler = handlers.get(subcommand or "")
    if handler is None:
        return error(f"Unknown {group} subcommand: {subcommand}")

    try:
        return handler(args, resolve_user(args))
    except Error as e:
        return from_error(e)


def format_decklist_row(decklist: Decklist) -> str:
    created = decklist.created_at.strftime("%Y-%m-%d")
    return (
        f"{decklist.id:>6} | {decklist.name[:30]:<30} | {decklist.user.username:<15} | "
        f"{created} | {decklist.nb_votes:>4} | {decklist.nb_favorites:>4} | "
        f"{decklist.nb_comments:>4}"
    )
