from sqlalchemy import select, update
from sqlalchemy.orm import Session, sessionmaker

from deckshare.errors import NotFoundError
from deckshare.models.user import User


class UserService:
    """
    Service for user accounts.
    Also acts as the identity provider for the command-line surface.
    """

    def __init__(self, sessionmaker_: sessionmaker[Session]) -> None:
        self.Session: sessionmaker[Session] = sessionmaker_

    def create_user(
        self,
        username: str,
        email: str,
        roles: str = "",
        notify_author: bool = True,
        notify_commenter: bool = True,
        notify_mention: bool = True,
        donation: int = 0,
    ) -> User:
        """Create a new user and return it."""
        with self.Session.begin() as session:
            user = User(
                username=username,
                email=email,
                roles=roles,
                is_notif_author=notify_author,
                is_notif_commenter=notify_commenter,
                is_notif_mention=notify_mention,
                donation=donation,
            )
            session.add(user)
            session.flush()
            return user

    def get_user(self, user_id: int) -> User | None:
        with self.Session() as session:
            return session.get(User, user_id)

    def get_user_by_username(self, username: str) -> User | None:
        with self.Session() as session:
            return session.scalars(
                select(User).where(User.username == username)
            ).first()

    def current_user(self, username: str | None) -> User | None:
        """Resolve the acting user; None means anonymous."""
        if not username:
            return None
        return self.get_user_by_username(username)

    def add_donation(self, username: str, amount: int) -> int:
        """Add to a user's donation total and return the new total."""
        with self.Session.begin() as session:
            user_id = session.scalar(select(User.id).where(User.username == username))
            if user_id is None:
                raise NotFoundError("User", username)
            session.execute(
                update(User)
                .where(User.id == user_id)
                .values(donation=User.donation + amount)
            )
            return session.scalar(select(User.donation).where(User.id == user_id))

    def list_donators(self) -> list[User]:
        """Users who donated, biggest donation first, then by username."""
        with self.Session() as session:
            return list(
                session.scalars(
                    select(User)
                    .where(User.donation > 0)
                    .order_by(User.donation.desc(), User.username)
                ).all()
            )
