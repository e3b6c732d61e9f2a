"""Decklist commands for deckshare CLI."""

import argparse
import sys
from pathlib import Path

from deckshare.cli.helpers import format_decklist_row, run_handler
from deckshare.cli.result import CommandResult, error, info, success, warning
from deckshare.config import LOGGER
from deckshare.models.user import User
from deckshare.services import (
    decklist_service,
    export_service,
    search_form_service,
    social_service,
)
from deckshare.services.decklist import LIST_TYPES, SORT_OPTIONS, SearchCriteria
from deckshare.services.export import EXPORT_FORMATS
from deckshare.workflows import publication_workflow

COMMAND = "decklist"


def _add_metadata_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--name", help="Decklist name (defaults to the deck's name)")
    parser.add_argument("--description", help="Markdown description")
    parser.add_argument("--tournament", help="Tournament ID")
    parser.add_argument(
        "--precedent", help="Previous version, as a decklist ID or its URL"
    )


def setup_parser(subparsers: argparse._SubParsersAction) -> None:
    """Set up the decklist command parser and its subcommands."""
    decklist_parser = subparsers.add_parser(
        "decklist", help="Published decklist commands"
    )
    decklist_subparsers = decklist_parser.add_subparsers(dest="decklist_command")

    publish_parser = decklist_subparsers.add_parser(
        "publish", help="Publish a deck (defaults to preview mode)"
    )
    publish_parser.add_argument("deck_id", type=int, help="ID of the deck to publish")
    _add_metadata_arguments(publish_parser)
    publish_parser.add_argument(
        "--save",
        action="store_true",
        help="Publish the decklist (defaults to preview mode)",
    )
    publish_parser.add_argument(
        "--output", "-o", help="Write the preview to this file"
    )

    edit_parser = decklist_subparsers.add_parser(
        "edit", help="Edit a decklist's name, description, tournament and precedent"
    )
    edit_parser.add_argument("decklist_id", type=int, help="ID of the decklist")
    _add_metadata_arguments(edit_parser)

    delete_parser = decklist_subparsers.add_parser(
        "delete", help="Delete a decklist without votes, favorites or comments"
    )
    delete_parser.add_argument("decklist_id", type=int, help="ID of the decklist")

    list_parser = decklist_subparsers.add_parser("list", help="Browse decklists")
    list_parser.add_argument(
        "--type", dest="list_type", choices=LIST_TYPES, default="popular"
    )
    list_parser.add_argument("--page", type=int, default=1)
    list_parser.add_argument("--author", help="Author username (find)")
    list_parser.add_argument("--name", help="Name contains (find)")
    list_parser.add_argument("--faction", help="Faction code (find)")
    list_parser.add_argument("--tournament", type=int, help="Tournament ID (find)")
    list_parser.add_argument(
        "--card", action="append", default=[], help="Required card code (find)"
    )
    list_parser.add_argument(
        "--pack", action="append", type=int, default=[], help="Allowed pack ID (find)"
    )
    list_parser.add_argument("--sort", choices=SORT_OPTIONS, default="date")

    show_parser = decklist_subparsers.add_parser("show", help="Show a decklist")
    show_parser.add_argument("decklist_id", type=int, help="ID of the decklist")

    export_parser = decklist_subparsers.add_parser(
        "export", help="Export a decklist for download"
    )
    export_parser.add_argument("decklist_id", type=int, help="ID of the decklist")
    export_parser.add_argument(
        "--format", dest="export_format", choices=EXPORT_FORMATS, default="text"
    )
    export_parser.add_argument(
        "--output", "-o", help="Output directory (defaults to the current one)"
    )

    decklist_subparsers.add_parser(
        "search-form", help="Show the packs and tournaments available to search"
    )


def handle_command(args: argparse.Namespace) -> None:
    """Route decklist subcommands to their appropriate handlers."""
    handlers = {
        "publish": decklist_publish,
        "edit": decklist_edit,
        "delete": decklist_delete,
        "list": decklist_list,
        "show": decklist_show,
        "export": decklist_export,
        "search-form": decklist_search_form,
    }
    result = run_handler(handlers, args.decklist_command, args, COMMAND)
    result.log()
    if result.exit_code != 0:
        sys.exit(result.exit_code)


def decklist_publish(args: argparse.Namespace, actor: User | None) -> CommandResult:
    """Preview the publication of a deck, and publish it with --save."""
    user_id = actor.id if actor else None
    preview = publication_workflow.prepare_publication(args.deck_id, user_id)

    if args.output:
        with open(args.output, "w") as f:
            publication_workflow.write_preview_to_file(preview, f)
    else:
        publication_workflow.write_preview_to_file(preview, sys.stdout)

    if not args.save:
        return info("Preview only. Use --save to publish.", data=preview)

    decklist = publication_workflow.publish(
        args.deck_id,
        user_id,
        args.name or preview.draft.name,
        args.description or preview.draft.description_md,
        tournament_ref=args.tournament,
        precedent_ref=args.precedent,
    )
    message = f"Published decklist {decklist.id} '{decklist.name_canonical}'"
    if preview.has_duplicates:
        return warning(f"{message}, identical to an existing decklist", data=decklist)
    return success(message, data=decklist)


def decklist_edit(args: argparse.Namespace, actor: User | None) -> CommandResult:
    """Edit a decklist. Options left out keep their current value."""
    current = decklist_service.get_decklist(args.decklist_id)
    if current is None:
        return error(f"Decklist {args.decklist_id} not found")

    decklist = publication_workflow.edit(
        args.decklist_id,
        actor.id if actor else None,
        args.name if args.name is not None else current.name,
        args.description if args.description is not None else current.description_md,
        tournament_ref=(
            args.tournament if args.tournament is not None else current.tournament_id
        ),
        precedent_ref=(
            args.precedent if args.precedent is not None else current.precedent_id
        ),
    )
    return success(
        f"Saved decklist {decklist.id} '{decklist.name_canonical}'", data=decklist
    )


def decklist_delete(args: argparse.Namespace, actor: User | None) -> CommandResult:
    publication_workflow.delete(args.decklist_id, actor.id if actor else None)
    return success(f"Deleted decklist {args.decklist_id}")


def decklist_list(args: argparse.Namespace, actor: User | None) -> CommandResult:
    criteria = SearchCriteria(
        author=args.author,
        name=args.name,
        faction=args.faction,
        tournament_id=args.tournament,
        cards=args.card,
        packs=args.pack,
        sort=args.sort,
    )
    page = decklist_service.list_decklists(
        args.list_type,
        user_id=actor.id if actor else None,
        page=args.page,
        criteria=criteria,
    )
    if not page.items:
        return info(f"No decklists found ({page.list_type}).", data=page)

    LOGGER.info(
        f"{'ID':>6} | {'Name':<30} | {'Author':<15} | {'Created':<10} | "
        f"{'Vote':>4} | {'Fav':>4} | {'Comm':>4}"
    )
    LOGGER.info("-" * 95)
    for decklist in page.items:
        LOGGER.info(format_decklist_row(decklist))

    pages = " ".join(
        f"[{number}]" if number == page.page else str(number)
        for number in page.close_pages
    )
    LOGGER.info(f"Page {page.page}/{page.nb_pages}: {pages}")
    return success(data=page)


def decklist_show(args: argparse.Namespace, actor: User | None) -> CommandResult:
    view = decklist_service.get_decklist_view(args.decklist_id)
    decklist = view.decklist

    LOGGER.info(f"Decklist: {decklist.name} by {decklist.user.username}")
    LOGGER.info(
        f"Votes: {decklist.nb_votes}  Favorites: {decklist.nb_favorites}  "
        f"Comments: {decklist.nb_comments}"
    )
    if actor is not None:
        voted = social_service.has_voted(decklist.id, actor.id)
        favorite = social_service.is_favorite(decklist.id, actor.id)
        LOGGER.info(
            f"You: {'voted' if voted else 'not voted'}, "
            f"{'in favorites' if favorite else 'not in favorites'}"
        )
    if decklist.tournament:
        LOGGER.info(f"Tournament: {decklist.tournament.name}")
    if view.duplicate:
        LOGGER.info(
            f"Same cards as decklist {view.duplicate.id} '{view.duplicate.name}' "
            f"by {view.duplicate.user.username}"
        )
    LOGGER.info("-" * 40)
    for code, quantity in sorted(view.content.items()):
        LOGGER.info(f"{quantity} {code}")
    LOGGER.info("-" * 40)

    if len(view.versions) > 1:
        LOGGER.info("Versions:")
        for version in view.versions:
            marker = "*" if version.id == decklist.id else " "
            LOGGER.info(f" {marker} {version.id} {version.name} ({version.name_canonical})")

    is_owner = actor is not None and actor.id == decklist.user_id
    for comment, username in zip(view.comments, view.commenters):
        if comment.is_hidden and not is_owner:
            continue
        hidden = " (hidden)" if comment.is_hidden else ""
        LOGGER.info(f"[{comment.id}] {username}{hidden}: {comment.text}")

    return success(data=view)


def decklist_export(args: argparse.Namespace, actor: User | None) -> CommandResult:
    export = export_service.export_decklist(args.decklist_id, args.export_format)

    output_dir = Path(args.output) if args.output else Path.cwd()
    if not output_dir.is_dir():
        return error(f"Output directory '{output_dir}' does not exist")

    path = output_dir / export.filename
    # newline="" keeps the CRLF line endings of text exports
    with open(path, "w", newline="") as f:
        f.write(export.content)

    return success(f"Exported decklist {args.decklist_id} to {path}", data=export)


def decklist_search_form(args: argparse.Namespace, actor: User | None) -> CommandResult:
    form = search_form_service.build_search_form()

    for category in form.categories:
        LOGGER.info(f"{category.label}:")
        for pack in category.packs:
            mark = "x" if pack.checked else " "
            future = " (not released)" if pack.future else ""
            LOGGER.info(f"  [{mark}] {pack.id} {pack.label}{future}")
    LOGGER.info(f"{form.on} packs selected, {form.off} unselected")

    if form.active_tournaments:
        LOGGER.info("Tournaments:")
        for tournament in form.active_tournaments:
            LOGGER.info(f"  {tournament.id} {tournament.name}")

    return success(data=form)
