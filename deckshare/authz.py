"""Authorization rules for mutating operations."""

from enum import Enum

from deckshare.errors import AuthorizationError
from deckshare.models.comment import Comment
from deckshare.models.deck import Deck
from deckshare.models.decklist import Decklist
from deckshare.models.user import User


class Operation(Enum):
    PUBLISH = "publish"
    EDIT = "edit"
    DELETE = "delete"
    HIDE_COMMENT = "hide_comment"


def _owner_id(resource: Deck | Decklist | Comment) -> int:
    if isinstance(resource, Comment):
        # Visibility belongs to the decklist owner, not the comment author
        return resource.decklist.user_id
    return resource.user_id


def can_mutate(
    actor: User | None, resource: Deck | Decklist | Comment, operation: Operation
) -> bool:
    if actor is None or resource is None:
        return False

    if actor.id == _owner_id(resource):
        return True

    if operation is Operation.EDIT:
        return actor.is_admin

    return False


def ensure_can_mutate(
    actor: User | None,
    resource: Deck | Decklist | Comment,
    operation: Operation,
    message: str = "Access denied",
) -> None:
    if not can_mutate(actor, resource, operation):
        raise AuthorizationError(message)
