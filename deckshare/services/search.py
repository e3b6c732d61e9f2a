"""
Payload of the decklist search form: allowed packs grouped by cycle,
tournaments, factions and the echoed criteria.
"""

from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload, sessionmaker

from deckshare.models.card import Card, Cycle, Faction, Pack
from deckshare.models.tournament import Tournament
from deckshare.services.decklist import SearchCriteria

CORE_CATEGORY_LABEL = "Core Set / Deluxe Expansions"
CORE_CYCLE_CODE = "core"


@dataclass
class PackOption:
    id: int
    label: str
    checked: bool
    future: bool


@dataclass
class PackCategory:
    label: str
    packs: list[PackOption] = field(default_factory=list)


@dataclass
class SearchForm:
    categories: list[PackCategory] = field(default_factory=list)
    on: int = 0
    off: int = 0
    author: str = ""
    name: str = ""
    sort: str = "date"
    faction_selected: str | None = None
    selected_tournament: int | None = None
    factions: list[Faction] = field(default_factory=list)
    active_tournaments: list[Tournament] = field(default_factory=list)
    inactive_tournaments: list[Tournament] = field(default_factory=list)
    cards: list[Card] = field(default_factory=list)


class SearchFormService:
    def __init__(self, sessionmaker_: sessionmaker[Session]) -> None:
        self.Session: sessionmaker[Session] = sessionmaker_

    def build_search_form(self, criteria: SearchCriteria | None = None) -> SearchForm:
        """
        Build the search form.

        Without criteria every pack with a release date is checked. With
        criteria, the packs in criteria.packs are checked, or all of them
        when that list is empty.
        """
        form = SearchForm(categories=[PackCategory(label=CORE_CATEGORY_LABEL)])

        with self.Session() as session:
            allowed = None if criteria is None else set(criteria.packs)

            cycles = session.scalars(
                select(Cycle).options(selectinload(Cycle.packs)).order_by(Cycle.position)
            ).all()
            for cycle in cycles:
                if cycle.position == 0 or not cycle.packs:
                    continue

                first_pack = cycle.packs[0]
                if cycle.code == CORE_CYCLE_CODE or (
                    len(cycle.packs) == 1 and first_pack.name == cycle.name
                ):
                    form.categories[0].packs.append(self._pack_option(form, first_pack, allowed))
                    continue

                category = PackCategory(label=cycle.name)
                for pack in cycle.packs:
                    category.packs.append(self._pack_option(form, pack, allowed))
                form.categories.append(category)

            form.factions = list(
                session.scalars(select(Faction).order_by(Faction.name)).all()
            )
            form.active_tournaments = list(
                session.scalars(
                    select(Tournament).where(Tournament.active.is_(True)).order_by(Tournament.id)
                ).all()
            )
            form.inactive_tournaments = list(
                session.scalars(
                    select(Tournament).where(Tournament.active.is_(False)).order_by(Tournament.id)
                ).all()
            )

            if criteria is not None:
                form.author = criteria.author or ""
                form.name = criteria.name or ""
                form.sort = criteria.sort
                form.faction_selected = criteria.faction
                form.selected_tournament = criteria.tournament_id
                if criteria.cards:
                    form.cards = list(
                        session.scalars(
                            select(Card)
                            .where(Card.code.in_(criteria.cards))
                            .order_by(Card.code)
                        ).all()
                    )

        return form

    @staticmethod
    def _pack_option(form: SearchForm, pack: Pack, allowed: set[int] | None) -> PackOption:
        if allowed is None:
            checked = pack.date_release is not None
        else:
            checked = not allowed or pack.id in allowed
        if checked:
            form.on += 1
        else:
            form.off += 1
        return PackOption(
            id=pack.id,
            label=pack.name,
            checked=checked,
            future=pack.date_release is None,
        )
