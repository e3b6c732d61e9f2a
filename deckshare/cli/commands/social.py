"""Vote, favorite and comment commands for deckshare CLI."""

import argparse
import sys

from deckshare.cli.helpers import run_handler
from deckshare.cli.result import CommandResult, error, info, success
from deckshare.models.user import User
from deckshare.services import comment_service, social_service

COMMAND = "social"


def setup_parser(subparsers: argparse._SubParsersAction) -> None:
    """Set up the social command parser and its subcommands."""
    social_parser = subparsers.add_parser(
        "social", help="Votes, favorites and comments"
    )
    social_subparsers = social_parser.add_subparsers(dest="social_command")

    vote_parser = social_subparsers.add_parser(
        "vote", help="Like a decklist, or take the like back"
    )
    vote_parser.add_argument("decklist_id", type=int)

    favorite_parser = social_subparsers.add_parser(
        "favorite", help="Add a decklist to your favorites, or remove it"
    )
    favorite_parser.add_argument("decklist_id", type=int)

    comment_parser = social_subparsers.add_parser(
        "comment", help="Comment on a decklist (markdown, `@user` mentions)"
    )
    comment_parser.add_argument("decklist_id", type=int)
    comment_parser.add_argument("text", help="Comment text")

    hide_parser = social_subparsers.add_parser(
        "hide-comment", help="Hide a comment on one of your decklists"
    )
    hide_parser.add_argument("comment_id", type=int)
    hide_parser.add_argument(
        "--show", action="store_true", help="Make the comment visible again"
    )


def handle_command(args: argparse.Namespace) -> None:
    handlers = {
        "vote": social_vote,
        "favorite": social_favorite,
        "comment": social_comment,
        "hide-comment": social_hide_comment,
    }
    result = run_handler(handlers, args.social_command, args, COMMAND)
    result.log()
    if result.exit_code != 0:
        sys.exit(result.exit_code)


def _login_required() -> CommandResult:
    return error("You must be logged in for this operation. Use --user.")


def social_vote(args: argparse.Namespace, actor: User | None) -> CommandResult:
    if actor is None:
        return _login_required()
    count = social_service.toggle_vote(args.decklist_id, actor.id)
    return success(f"Decklist {args.decklist_id} has {count} votes", data=count)


def social_favorite(args: argparse.Namespace, actor: User | None) -> CommandResult:
    if actor is None:
        return _login_required()
    count = social_service.toggle_favorite(args.decklist_id, actor.id)
    return success(f"Decklist {args.decklist_id} has {count} favorites", data=count)


def social_comment(args: argparse.Namespace, actor: User | None) -> CommandResult:
    if actor is None:
        return _login_required()
    comment = comment_service.post_comment(args.decklist_id, actor.id, args.text)
    if comment is None:
        return info("Empty comment, nothing posted.")
    return success(f"Posted comment {comment.id}", data=comment)


def social_hide_comment(args: argparse.Namespace, actor: User | None) -> CommandResult:
    if actor is None:
        return _login_required()
    hidden = not args.show
    comment_service.set_comment_visibility(args.comment_id, actor.id, hidden)
    return success(f"Comment {args.comment_id} {'hidden' if hidden else 'visible'}")
