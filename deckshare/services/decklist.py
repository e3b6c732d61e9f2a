import math
from dataclasses import dataclass, field

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload, sessionmaker

from deckshare.errors import NotFoundError
from deckshare.models.card import Card
from deckshare.models.comment import Comment
from deckshare.models.decklist import Decklist, DecklistSlot, favorite_table
from deckshare.models.user import User
from deckshare.utils import compute_signature

LIST_TYPES = (
    "find",
    "favorites",
    "mine",
    "recent",
    "halloffame",
    "hottopics",
    "tournament",
    "popular",
)
HALL_OF_FAME_MIN_VOTES = 10
CLOSE_PAGES_WINDOW = 2
SORT_OPTIONS = ("date", "likes", "reputation", "name")


def find_decklists_by_content(session: Session, content: dict[str, int]) -> list[Decklist]:
    """
    The signature narrows the search, the slot comparison confirms it.
    """
    candidates = session.scalars(
        select(Decklist)
        .where(Decklist.signature == compute_signature(content))
        .options(
            selectinload(Decklist.slots).selectinload(DecklistSlot.card),
            selectinload(Decklist.user),
        )
        .order_by(Decklist.created_at, Decklist.id)
    ).all()
    return [decklist for decklist in candidates if decklist.content == content]


@dataclass
class SearchCriteria:
    """Filters of the complex decklist search."""

    author: str | None = None
    name: str | None = None
    faction: str | None = None
    tournament_id: int | None = None
    cards: list[str] = field(default_factory=list)
    packs: list[int] = field(default_factory=list)
    sort: str = "date"


@dataclass
class DecklistPage:
    """One page of a decklist listing."""

    list_type: str
    items: list[Decklist] = field(default_factory=list)
    page: int = 1
    limit: int = 30
    total: int = 0

    @property
    def nb_pages(self) -> int:
        return max(1, math.ceil(self.total / self.limit))

    @property
    def previous_page(self) -> int | None:
        return self.page - 1 if self.page > 1 else None

    @property
    def next_page(self) -> int | None:
        return self.page + 1 if self.page < self.nb_pages else None

    @property
    def close_pages(self) -> list[int]:
        """First and last page plus a window around the current one."""
        pages = {1, self.nb_pages}
        start = max(1, self.page - CLOSE_PAGES_WINDOW)
        end = min(self.nb_pages, self.page + CLOSE_PAGES_WINDOW)
        pages.update(range(start, end + 1))
        return sorted(pages)


@dataclass
class DecklistView:
    """Everything needed to display a decklist."""

    decklist: Decklist
    content: dict[str, int]
    comments: list[Comment]
    commenters: list[str]
    versions: list[Decklist]
    duplicate: Decklist | None = None


class DecklistService:
    """
    Service for reading published decklists: lookups, duplicate detection,
    version chains and the various listings.
    """

    def __init__(self, sessionmaker_: sessionmaker[Session], page_size: int = 30) -> None:
        self.Session: sessionmaker[Session] = sessionmaker_
        self.page_size = page_size

    def get_decklist(self, decklist_id: int) -> Decklist | None:
        """Get a decklist by ID."""
        with self.Session() as session:
            return session.get(Decklist, decklist_id)

    def find_by_content(self, content: dict[str, int]) -> list[Decklist]:
        """Decklists whose slots are exactly the given content, oldest first."""
        with self.Session() as session:
            return find_decklists_by_content(session, content)

    def get_decklist_view(self, decklist_id: int) -> DecklistView:
        with self.Session() as session:
            decklist = session.get(Decklist, decklist_id)
            if decklist is None:
                raise NotFoundError("Decklist", decklist_id)

            comments = list(decklist.comments)
            view = DecklistView(
                decklist=decklist,
                content=decklist.content,
                comments=comments,
                commenters=[comment.user.username for comment in comments],
                versions=self._find_versions(decklist),
                duplicate=self._find_duplicate(session, decklist),
            )
            # Load what the caller displays before the session closes
            _ = decklist.tournament
            for item in [decklist, *view.versions]:
                _ = item.user.username
            if view.duplicate is not None:
                _ = view.duplicate.user.username
            return view

    def list_decklists(
        self,
        list_type: str = "popular",
        user_id: int | None = None,
        page: int = 1,
        criteria: SearchCriteria | None = None,
    ) -> DecklistPage:
        """
        List decklists of a given type, one page at a time.
        Unknown types fall back to "popular".
        """
        if list_type not in LIST_TYPES:
            list_type = "popular"
        page = max(1, page)
        result = DecklistPage(list_type=list_type, page=page, limit=self.page_size)

        if list_type in ("mine", "favorites") and user_id is None:
            return result

        query = self._list_query(list_type, user_id, criteria or SearchCriteria())

        with self.Session() as session:
            result.total = session.scalar(
                select(func.count()).select_from(query.subquery())
            )
            result.items = list(
                session.scalars(
                    query.options(selectinload(Decklist.user))
                    .offset((page - 1) * self.page_size)
                    .limit(self.page_size)
                ).all()
            )
        return result

    def _list_query(self, list_type: str, user_id: int | None, criteria: SearchCriteria):
        query = select(Decklist)

        if list_type == "find":
            return self._search_query(criteria)
        if list_type == "mine":
            return query.where(Decklist.user_id == user_id).order_by(
                Decklist.created_at.desc()
            )
        if list_type == "favorites":
            return (
                query.join(favorite_table, favorite_table.c.decklist_id == Decklist.id)
                .where(favorite_table.c.user_id == user_id)
                .order_by(Decklist.created_at.desc())
            )
        if list_type == "recent":
            return query.order_by(Decklist.created_at.desc())
        if list_type == "halloffame":
            return query.where(Decklist.nb_votes >= HALL_OF_FAME_MIN_VOTES).order_by(
                Decklist.nb_votes.desc(), Decklist.created_at.desc()
            )
        if list_type == "hottopics":
            return query.where(Decklist.nb_comments > 0).order_by(
                Decklist.nb_comments.desc(), Decklist.updated_at.desc()
            )
        if list_type == "tournament":
            return query.where(Decklist.tournament_id.is_not(None)).order_by(
                Decklist.created_at.desc()
            )
        return query.order_by(
            Decklist.nb_votes.desc(),
            Decklist.nb_favorites.desc(),
            Decklist.created_at.desc(),
        )

    def _search_query(self, criteria: SearchCriteria):
        query = select(Decklist).join(User, User.id == Decklist.user_id)

        if criteria.author:
            query = query.where(User.username == criteria.author)
        if criteria.name:
            query = query.where(Decklist.name.ilike(f"%{criteria.name}%"))
        if criteria.faction:
            query = query.where(Decklist.faction_code == criteria.faction)
        if criteria.tournament_id:
            query = query.where(Decklist.tournament_id == criteria.tournament_id)
        for code in criteria.cards:
            query = query.where(
                Decklist.id.in_(
                    select(DecklistSlot.decklist_id)
                    .join(Card, Card.id == DecklistSlot.card_id)
                    .where(Card.code == code)
                )
            )
        if criteria.packs:
            query = query.where(Decklist.last_pack_id.in_(criteria.packs))

        if criteria.sort == "likes":
            order = [Decklist.nb_votes.desc()]
        elif criteria.sort == "reputation":
            order = [User.reputation.desc()]
        elif criteria.sort == "name":
            order = [Decklist.name.asc()]
        else:
            order = [Decklist.created_at.desc()]
        return query.order_by(*order, Decklist.id.desc())

    @staticmethod
    def _find_duplicate(session: Session, decklist: Decklist) -> Decklist | None:
        """The earliest decklist with the same content, if older than this one."""
        candidates = find_decklists_by_content(session, decklist.content)
        if not candidates:
            return None
        earliest = candidates[0]
        if earliest.id == decklist.id or earliest.created_at >= decklist.created_at:
            return None
        return earliest

    @staticmethod
    def _find_versions(decklist: Decklist) -> list[Decklist]:
        """The whole version chain the decklist belongs to, oldest first."""
        root = decklist
        seen = {root.id}
        while root.precedent is not None and root.precedent.id not in seen:
            root = root.precedent
            seen.add(root.id)

        versions: list[Decklist] = []
        visited: set[int] = set()
        pending = [root]
        while pending:
            node = pending.pop()
            if node.id in visited:
                continue
            visited.add(node.id)
            versions.append(node)
            pending.extend(node.successors)

        return sorted(versions, key=lambda item: (item.created_at, item.id))
