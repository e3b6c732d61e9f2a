from sqlalchemy import Table, delete, func, insert, select, update
from sqlalchemy.orm import Session, sessionmaker

from deckshare.config import LOGGER
from deckshare.errors import AuthorizationError, NotFoundError
from deckshare.models.base import utcnow
from deckshare.models.decklist import Decklist, favorite_table, vote_table
from deckshare.models.user import User

FAVORITE_REPUTATION = 5
VOTE_REPUTATION = 1


class SocialService:
    """
    Service for votes and favorites.

    Counters and reputation move through atomic UPDATE statements, and the
    membership test is made inside the same transaction as the write.
    """

    def __init__(self, sessionmaker_: sessionmaker[Session]) -> None:
        self.Session: sessionmaker[Session] = sessionmaker_

    def toggle_favorite(self, decklist_id: int, user_id: int) -> int:
        """
        Add the decklist to the user's favorites, or remove it if present.
        Returns the new favorite count.
        """
        with self.Session.begin() as session:
            decklist = self._lock_decklist(session, decklist_id)
            self._require_user(session, user_id, "You must be logged in to favorite.")

            if self._is_member(session, favorite_table, decklist_id, user_id):
                self._remove_member(session, favorite_table, decklist_id, user_id)
                session.execute(
                    update(Decklist)
                    .where(Decklist.id == decklist_id)
                    .values(nb_favorites=Decklist.nb_favorites - 1)
                )
                delta = -FAVORITE_REPUTATION
            else:
                self._add_member(session, favorite_table, decklist_id, user_id)
                session.execute(
                    update(Decklist)
                    .where(Decklist.id == decklist_id)
                    .values(nb_favorites=Decklist.nb_favorites + 1, updated_at=utcnow())
                )
                delta = FAVORITE_REPUTATION

            if decklist.user_id != user_id:
                self._adjust_reputation(session, decklist.user_id, delta)

            count = session.scalar(
                select(Decklist.nb_favorites).where(Decklist.id == decklist_id)
            )

        LOGGER.info(
            f"User {user_id} {'added' if delta > 0 else 'removed'} favorite "
            f"on decklist {decklist_id} ({count} favorites)"
        )
        return count

    def toggle_vote(self, decklist_id: int, user_id: int) -> int:
        """
        Like the decklist, or take the like back if already given.
        Votes from the decklist's owner are ignored.
        Returns the new vote count.
        """
        with self.Session.begin() as session:
            decklist = self._lock_decklist(session, decklist_id)
            self._require_user(session, user_id, "You must be logged in to vote.")

            if decklist.user_id == user_id:
                return decklist.nb_votes

            if self._is_member(session, vote_table, decklist_id, user_id):
                self._remove_member(session, vote_table, decklist_id, user_id)
                step = -1
            else:
                self._add_member(session, vote_table, decklist_id, user_id)
                step = 1

            session.execute(
                update(Decklist)
                .where(Decklist.id == decklist_id)
                .values(nb_votes=Decklist.nb_votes + step, updated_at=utcnow())
            )
            self._adjust_reputation(session, decklist.user_id, step * VOTE_REPUTATION)

            count = session.scalar(
                select(Decklist.nb_votes).where(Decklist.id == decklist_id)
            )

        LOGGER.info(
            f"User {user_id} {'added' if step > 0 else 'removed'} vote "
            f"on decklist {decklist_id} ({count} votes)"
        )
        return count

    def is_favorite(self, decklist_id: int, user_id: int) -> bool:
        with self.Session() as session:
            return self._is_member(session, favorite_table, decklist_id, user_id)

    def has_voted(self, decklist_id: int, user_id: int) -> bool:
        with self.Session() as session:
            return self._is_member(session, vote_table, decklist_id, user_id)

    @staticmethod
    def _lock_decklist(session: Session, decklist_id: int) -> Decklist:
        decklist = session.scalars(
            select(Decklist).where(Decklist.id == decklist_id).with_for_update()
        ).first()
        if decklist is None:
            raise NotFoundError("Decklist", decklist_id)
        return decklist

    @staticmethod
    def _require_user(session: Session, user_id: int, message: str) -> User:
        user = session.get(User, user_id)
        if user is None:
            raise AuthorizationError(message)
        return user

    @staticmethod
    def _is_member(session: Session, table: Table, decklist_id: int, user_id: int) -> bool:
        count = session.scalar(
            select(func.count())
            .select_from(table)
            .where(table.c.decklist_id == decklist_id, table.c.user_id == user_id)
        )
        return bool(count)

    @staticmethod
    def _add_member(session: Session, table: Table, decklist_id: int, user_id: int) -> None:
        session.execute(insert(table).values(decklist_id=decklist_id, user_id=user_id))

    @staticmethod
    def _remove_member(
        session: Session, table: Table, decklist_id: int, user_id: int
    ) -> None:
        session.execute(
            delete(table).where(
                table.c.decklist_id == decklist_id, table.c.user_id == user_id
            )
        )

    @staticmethod
    def _adjust_reputation(session: Session, user_id: int, delta: int) -> None:
        session.execute(
            update(User)
            .where(User.id == user_id)
            .values(reputation=User.reputation + delta)
        )
