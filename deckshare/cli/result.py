"""Command result handling for deckshare CLI."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from deckshare.config import LOGGER
from deckshare.errors import (
    AuthorizationError,
    CardListInputError,
    CardNotFoundError,
    Error,
    NotFoundError,
    ValidationError,
)

EXIT_FAILURE = 1
EXIT_INVALID_INPUT = 2
EXIT_FORBIDDEN = 3
EXIT_NOT_FOUND = 4

# First matching class wins
ERROR_EXIT_CODES: list[tuple[type[Error], int]] = [
    (AuthorizationError, EXIT_FORBIDDEN),
    (NotFoundError, EXIT_NOT_FOUND),
    (ValidationError, EXIT_INVALID_INPUT),
    (CardListInputError, EXIT_INVALID_INPUT),
    (CardNotFoundError, EXIT_INVALID_INPUT),
]


class MessageType(Enum):
    """Types of messages that can be logged."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


@dataclass
class CommandResult:
    """
    Outcome of a CLI handler.

    A failed result exits with failure_code, which from_error() narrows
    to the kind of domain error that was raised.
    """

    success: bool
    message: str | None = None
    message_type: MessageType = MessageType.INFO
    data: Any = None
    failure_code: int = EXIT_FAILURE

    @property
    def exit_code(self) -> int:
        return 0 if self.success else self.failure_code

    def log(self) -> None:
        if not self.message:
            return

        if self.message_type == MessageType.ERROR:
            LOGGER.error(self.message)
        elif self.message_type == MessageType.WARNING:
            LOGGER.warning(self.message)
        elif self.message_type == MessageType.SUCCESS:
            LOGGER.info(f"✓ {self.message}")
        else:
            LOGGER.info(self.message)


def success(message: str | None = None, data: Any = None) -> CommandResult:
    return CommandResult(
        success=True,
        message=message,
        message_type=MessageType.SUCCESS if message else MessageType.INFO,
        data=data,
    )


def error(message: str, data: Any = None) -> CommandResult:
    return CommandResult(
        success=False, message=message, message_type=MessageType.ERROR, data=data
    )


def warning(message: str, data: Any = None) -> CommandResult:
    """Successful, but worth the user's attention (e.g. a duplicate publish)."""
    return CommandResult(
        success=True, message=message, message_type=MessageType.WARNING, data=data
    )


def info(message: str, data: Any = None) -> CommandResult:
    return CommandResult(
        success=True, message=message, message_type=MessageType.INFO, data=data
    )


def exit_code_for(exc: Error) -> int:
    for error_class, code in ERROR_EXIT_CODES:
        if isinstance(exc, error_class):
            return code
    return EXIT_FAILURE


def from_error(exc: Error) -> CommandResult:
    """Turn a domain error into a failed result carrying the exception."""
    result = error(str(exc), data=exc)
    result.failure_code = exit_code_for(exc)
    return result
