"""Catalog commands for deckshare CLI."""

import argparse
import sys

from deckshare.cli.helpers import load_yaml_config, run_handler
from deckshare.cli.result import CommandResult, error, success
from deckshare.models.user import User
from deckshare.services import catalog_service

COMMAND = "catalog"


def setup_parser(subparsers: argparse._SubParsersAction) -> None:
    """Set up the catalog command parser and its subcommands."""
    catalog_parser = subparsers.add_parser(
        "catalog", help="Card catalog and tournament commands"
    )
    catalog_subparsers = catalog_parser.add_subparsers(dest="catalog_command")

    import_parser = catalog_subparsers.add_parser(
        "import",
        help="Import factions, cycles, packs, cards and tournaments from YAML",
    )
    import_parser.add_argument("yaml_file", help="YAML file with catalog data")


def handle_command(args: argparse.Namespace) -> None:
    handlers = {
        "import": catalog_import,
    }
    result = run_handler(handlers, args.catalog_command, args, COMMAND)
    result.log()
    if result.exit_code != 0:
        sys.exit(result.exit_code)


def catalog_import(args: argparse.Namespace, actor: User | None) -> CommandResult:
    """Import catalog entries from a YAML file."""
    data = load_yaml_config(args.yaml_file)
    if data is None:
        return error(f"YAML file '{args.yaml_file}' not found")

    counts = catalog_service.import_catalog(data)
    summary = ", ".join(f"{count} {kind}" for kind, count in counts.items())
    return success(f"Imported {summary}", data=counts)
