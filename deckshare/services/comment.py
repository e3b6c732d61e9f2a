from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload, sessionmaker

from deckshare.authz import Operation, ensure_can_mutate
from deckshare.config import LOGGER, Settings
from deckshare.errors import AuthorizationError, NotFoundError
from deckshare.models.base import utcnow
from deckshare.models.comment import Comment
from deckshare.models.decklist import Decklist
from deckshare.models.user import User
from deckshare.services.notification import Notifier
from deckshare.utils import autolink_urls, extract_mentions, render_markdown


class CommentService:
    """
    Service for decklist comments.
    Notifications go out after the comment is committed and never fail the post.
    """

    def __init__(
        self,
        sessionmaker_: sessionmaker[Session],
        notifier: Notifier,
        settings: Settings,
    ) -> None:
        self.Session: sessionmaker[Session] = sessionmaker_
        self.notifier = notifier
        self.settings = settings

    def post_comment(self, decklist_id: int, user_id: int, raw_text: str) -> Comment | None:
        """
        Post a comment on a decklist. Blank text posts nothing and returns None.

        Bare URLs become markdown links, `@username` mentions are collected
        for notifications, then the text is rendered to HTML.
        """
        text = (raw_text or "").strip()

        with self.Session.begin() as session:
            user = session.get(User, user_id)
            if user is None:
                raise AuthorizationError("You must be logged in to comment.")
            decklist = session.scalars(
                select(Decklist)
                .where(Decklist.id == decklist_id)
                .options(
                    selectinload(Decklist.user),
                    selectinload(Decklist.comments).selectinload(Comment.user),
                )
            ).first()
            if decklist is None:
                raise NotFoundError("Decklist", decklist_id)
            if not text:
                return None

            text = autolink_urls(text)
            mentions = extract_mentions(text)
            html = render_markdown(text)

            spool = self._build_spool(session, decklist, mentions)
            spool.pop(user.email, None)

            comment = Comment(text=html, user=user, decklist_id=decklist.id)
            session.add(comment)
            session.execute(
                update(Decklist)
                .where(Decklist.id == decklist.id)
                .values(nb_comments=Decklist.nb_comments + 1, updated_at=utcnow())
            )
            session.flush()

            data = {
                "username": user.username,
                "decklist_name": decklist.name,
                "url": self.settings.decklist_url(decklist.id, decklist.name_canonical)
                + f"#{comment.id}",
                "comment": html,
                "profile": self.settings.profile_url,
            }

        LOGGER.info(f"User {user.username} commented on decklist {decklist_id}")
        self._dispatch(spool, data)
        return comment

    def set_comment_visibility(self, comment_id: int, user_id: int, hidden: bool) -> None:
        """Hide or show a comment. Only the decklist's owner may do this."""
        with self.Session.begin() as session:
            comment = session.get(Comment, comment_id)
            if comment is None:
                raise NotFoundError("Comment", comment_id)
            ensure_can_mutate(
                session.get(User, user_id),
                comment,
                Operation.HIDE_COMMENT,
                "You don't have permission to change the visibility of this comment.",
            )
            comment.is_hidden = bool(hidden)

        LOGGER.info(f"Comment {comment_id} {'hidden' if hidden else 'shown'}")

    def list_comments(self, decklist_id: int, include_hidden: bool = False) -> list[Comment]:
        with self.Session() as session:
            query = (
                select(Comment)
                .where(Comment.decklist_id == decklist_id)
                .options(selectinload(Comment.user))
                .order_by(Comment.created_at, Comment.id)
            )
            if not include_hidden:
                query = query.where(Comment.is_hidden.is_(False))
            return list(session.scalars(query).all())

    @staticmethod
    def _build_spool(
        session: Session, decklist: Decklist, mentions: list[str]
    ) -> dict[str, str]:
        """Email -> template. The first template given to an address wins."""
        spool: dict[str, str] = {}

        author = decklist.user
        if author.is_notif_author:
            spool.setdefault(author.email, "newcomment_author")

        for previous in decklist.comments:
            commenter = previous.user
            if commenter.is_notif_commenter:
                spool.setdefault(commenter.email, "newcomment_commenter")

        if mentions:
            mentioned = session.scalars(
                select(User).where(User.username.in_(mentions))
            ).all()
            for target in mentioned:
                if target.is_notif_mention:
                    spool.setdefault(target.email, "newcomment_mentioned")

        return spool

    def _dispatch(self, spool: dict[str, str], data: dict) -> None:
        for email, template_ref in spool.items():
            try:
                self.notifier.send(email, template_ref, data)
            except Exception as e:
                LOGGER.warning(f"Failed to notify {email} ({template_ref}): {e}")
