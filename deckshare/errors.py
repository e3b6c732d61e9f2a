"""Exception classes for deckshare."""


class Error(Exception):
    """Base class for exceptions in this module."""

    pass


class AuthorizationError(Error):
    """
    Exception raised when the acting user may not perform an operation.
    Never retried; surfaced to the caller as a rejected request.
    """

    def __init__(self, message: str = "Access denied") -> None:
        self.message = message

    def __str__(self) -> str:
        return self.message


class ValidationError(Error):
    """
    Exception raised when a deck cannot be published.

    reason is either "unreleased" (the last pack used is not out yet) or
    "invalid" (the deck validator reported a problem, kept in detail).
    """

    MESSAGES = {
        "unreleased": "This deck uses cards from a pack that is not released yet",
        "invalid": "This deck is not valid and cannot be published",
    }

    def __init__(self, reason: str, detail: str | None = None) -> None:
        self.reason = reason
        self.detail = detail

    def __str__(self) -> str:
        message = self.MESSAGES.get(self.reason, self.reason)
        if self.detail:
            message += f" ({self.detail})"
        return message


class NotFoundError(Error):
    """Exception raised when a referenced entity does not exist."""

    def __init__(self, entity: str, identifier: object) -> None:
        self.entity = entity
        self.identifier = identifier

    def __str__(self) -> str:
        return f"{self.entity} '{self.identifier}' not found"


class CardListInputError(Error):
    """
    Exception raised for errors in parsing card lists.
    Used when reading deck slots in "<quantity> <card code>" format.
    """

    def __init__(self, line_errors: list[str]) -> None:
        self.line_errors = line_errors

    def __str__(self) -> str:
        message = (
            "Error parsing provided card list.\n\n"
            "Please ensure all lines follow the format: <quantity> <card code>\n\n"
            "The following lines raised errors:\n```\n"
        )
        message += "\n".join(self.line_errors)
        message += "\n```"
        return message


class CardNotFoundError(Error):
    """
    Exception raised when card codes in a deck are missing from the catalog.
    """

    def __init__(self, codes: list[str]) -> None:
        self.codes = codes

    def __str__(self) -> str:
        return "Unknown card code(s): " + ", ".join(self.codes)
