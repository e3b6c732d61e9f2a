import sys

from .cli.cli import parse_args, route_command, validate_args
from .cli.result import EXIT_FAILURE, from_error
from .config import LOGGER
from .errors import Error


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the application.

    Returns the process exit code: 0 on success, the handler's exit code
    when it exits, and a code matching the error kind when a domain error
    escapes a command.
    """
    args = parse_args(argv)

    problem = validate_args(args)
    if problem:
        LOGGER.error(f"Error: {problem}")
        return EXIT_FAILURE

    try:
        route_command(args)
        return 0
    except SystemExit as e:
        return int(e.code) if e.code is not None else EXIT_FAILURE
    except Error as e:
        result = from_error(e)
        result.log()
        return result.exit_code
    except Exception as e:
        LOGGER.error(f"Error executing command: {e}")
        return EXIT_FAILURE


def cli_main() -> None:
    sys.exit(main())


if __name__ == "__main__":
    sys.exit(main())
