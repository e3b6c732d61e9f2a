import argparse
import os

from deckshare.cli import COMMAND_MODULES, setup_all_parsers
from deckshare.config import LOGGER
from deckshare.db import initialize_database


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments using modular command parsers."""
    parser = argparse.ArgumentParser(
        prog="deckshare",
        description="Publish, version and discuss card game decklists",
    )
    parser.formatter_class = argparse.RawDescriptionHelpFormatter
    parser.add_argument(
        "--user",
        "-u",
        default=os.environ.get("DECKSHARE_USER"),
        help="Username to act as (defaults to $DECKSHARE_USER)",
    )

    # Create subparsers for main commands
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    setup_all_parsers(subparsers)

    return parser.parse_args(argv)


def validate_args(args: argparse.Namespace) -> str | None:
    """
    Validate the parsed arguments.
    Returns an error message if validation fails, None otherwise.
    """
    if not args.command:
        return "No command specified. Use --help to see available commands."

    if not getattr(args, f"{args.command}_command", None):
        return (
            f"No {args.command} subcommand specified. "
            f"Use '{args.command} --help' to see available subcommands."
        )

    return None


def route_command(args: argparse.Namespace) -> None:
    """Route parsed arguments to the appropriate command handler."""
    # Initialize database once for all commands
    if not initialize_database():
        LOGGER.error("Failed to initialize database")
        return

    modules = {module.COMMAND: module for module in COMMAND_MODULES}
    module = modules.get(args.command)
    if module is None:
        LOGGER.error(f"Unknown command: {args.command}")
        LOGGER.error("Use --help to see available commands.")
        return

    module.handle_command(args)
