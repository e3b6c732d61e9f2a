"""User commands for deckshare CLI."""

import argparse
import sys

from deckshare.cli.helpers import run_handler
from deckshare.cli.result import CommandResult, error, info, success
from deckshare.config import LOGGER
from deckshare.models.user import ADMIN_ROLE, User
from deckshare.services import user_service

COMMAND = "user"


def setup_parser(subparsers: argparse._SubParsersAction) -> None:
    """Set up the user command parser and its subcommands."""
    user_parser = subparsers.add_parser("user", help="User management commands")
    user_subparsers = user_parser.add_subparsers(dest="user_command")

    add_parser = user_subparsers.add_parser("add", help="Register a new user")
    add_parser.add_argument("username", help="Unique username")
    add_parser.add_argument("email", help="Email address for notifications")
    add_parser.add_argument(
        "--admin", action="store_true", help="Grant administrator privileges"
    )
    for kind in ("author", "commenter", "mention"):
        add_parser.add_argument(
            f"--no-notify-{kind}",
            action="store_true",
            help=f"Opt out of {kind} notifications",
        )

    show_parser = user_subparsers.add_parser("show", help="Show a user's profile")
    show_parser.add_argument("username", help="Username to show")

    donate_parser = user_subparsers.add_parser(
        "donate", help="Record a donation (administrators only)"
    )
    donate_parser.add_argument("username", help="Username of the donator")
    donate_parser.add_argument("amount", type=int, help="Amount donated")

    user_subparsers.add_parser("donators", help="List the users who donated")


def handle_command(args: argparse.Namespace) -> None:
    """Route user subcommands to their appropriate handlers."""
    handlers = {
        "add": user_add,
        "show": user_show,
        "donate": user_donate,
        "donators": user_donators,
    }
    result = run_handler(handlers, args.user_command, args, COMMAND)
    result.log()
    if result.exit_code != 0:
        sys.exit(result.exit_code)


def user_add(args: argparse.Namespace, actor: User | None) -> CommandResult:
    if user_service.get_user_by_username(args.username):
        return error(f"User '{args.username}' already exists")

    user = user_service.create_user(
        args.username,
        args.email,
        roles=ADMIN_ROLE if args.admin else "",
        notify_author=not args.no_notify_author,
        notify_commenter=not args.no_notify_commenter,
        notify_mention=not args.no_notify_mention,
    )
    return success(f"Created user '{user.username}' (id {user.id})", data=user)


def user_show(args: argparse.Namespace, actor: User | None) -> CommandResult:
    user = user_service.get_user_by_username(args.username)
    if user is None:
        return error(f"User '{args.username}' not found")

    LOGGER.info(f"User: {user.username} (id {user.id})")
    LOGGER.info(f"Email: {user.email}")
    LOGGER.info(f"Reputation: {user.reputation}")
    if user.donation:
        LOGGER.info(f"Donation: {user.donation}")
    LOGGER.info(f"Administrator: {'yes' if user.is_admin else 'no'}")
    LOGGER.info(
        "Notifications: "
        f"author={user.is_notif_author} "
        f"commenter={user.is_notif_commenter} "
        f"mention={user.is_notif_mention}"
    )
    return success(data=user)


def user_donate(args: argparse.Namespace, actor: User | None) -> CommandResult:
    if actor is None or not actor.is_admin:
        return error("Only administrators can record donations.")
    if args.amount <= 0:
        return error("Donation amount must be positive")

    total = user_service.add_donation(args.username, args.amount)
    return success(
        f"Recorded donation of {args.amount} from '{args.username}' (total {total})",
        data=total,
    )


def user_donators(args: argparse.Namespace, actor: User | None) -> CommandResult:
    donators = user_service.list_donators()
    if not donators:
        return info("No donators yet.")

    LOGGER.info("The Gracious Donators")
    for donator in donators:
        LOGGER.info(f"{donator.username:<20} {donator.donation:>6}")
    return success(data=donators)
