"""
Downloadable renditions of a decklist: plain text, plain text grouped by
cycle, and OCTGN deck files.
"""

from dataclasses import dataclass
from itertools import groupby

from jinja2 import DictLoader, Environment, select_autoescape
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload, sessionmaker

from deckshare.config import LOGGER
from deckshare.errors import NotFoundError
from deckshare.models.card import Card, Pack
from deckshare.models.decklist import Decklist, DecklistSlot
from deckshare.utils import slugify

EXPORT_FORMATS = ("text", "text_cycle", "octgn")
OCTGN_GAME_ID = "30c200c9-6c98-49a4-a293-106c06295c05"

# Draw deck sections, in display order
DRAW_DECK_TYPES = ("character", "attachment", "location", "event")

TEMPLATES = {
    "default.txt": (
        "{{ name }}\n"
        "\n"
        "{{ faction }}\n"
        "{% for line in agendas %}{{ line }}\n{% endfor %}"
        "{% if packs %}\nPacks: From {{ packs[0] }} to {{ packs[-1] }}\n{% endif %}"
        "\n"
        "Plot deck ({{ plot_count }} cards):\n"
        "{% for line in plots %}{{ line }}\n{% endfor %}"
        "\n"
        "Draw deck ({{ draw_count }} cards):\n"
        "{% for section in sections %}"
        "\n{{ section.title }} ({{ section.count }}):\n"
        "{% for line in section.lines %}{{ line }}\n{% endfor %}"
        "{% endfor %}"
    ),
    "sortedbycycle.txt": (
        "{{ name }}\n"
        "\n"
        "{{ faction }}\n"
        "{% for section in sections %}"
        "\n{{ section.title }}:\n"
        "{% for line in section.lines %}{{ line }}\n{% endfor %}"
        "{% endfor %}"
    ),
    "octgn.xml": (
        '<?xml version="1.0" encoding="utf-8" standalone="yes"?>\n'
        '<deck game="{{ game_id }}">\n'
        "{% for section in sections %}"
        '  <section name="{{ section.title }}" shared="False">\n'
        "{% for card in section.cards %}"
        '    <card qty="{{ card.quantity }}" id="{{ card.octgn_id }}">{{ card.name }}</card>\n'
        "{% endfor %}"
        "  </section>\n"
        "{% endfor %}"
        "  <notes>{{ description }}</notes>\n"
        "</deck>\n"
    ),
}

_environment = Environment(
    loader=DictLoader(TEMPLATES),
    autoescape=select_autoescape(enabled_extensions=("xml",)),
    keep_trailing_newline=True,
)


@dataclass
class DecklistExport:
    filename: str
    content_type: str
    content: str


def _card_line(card: Card, quantity: int) -> str:
    return f"{quantity}x {card.name} ({card.pack.name})"


def _pack_order(pack: Pack) -> tuple[int, int]:
    return (pack.cycle.position, pack.position)


class ExportService:
    def __init__(self, sessionmaker_: sessionmaker[Session]) -> None:
        self.Session: sessionmaker[Session] = sessionmaker_

    def export_decklist(self, decklist_id: int, fmt: str = "text") -> DecklistExport:
        """Render a decklist for download. Unknown formats fall back to text."""
        with self.Session() as session:
            decklist = session.scalars(
                select(Decklist)
                .where(Decklist.id == decklist_id)
                .options(
                    selectinload(Decklist.slots)
                    .selectinload(DecklistSlot.card)
                    .selectinload(Card.pack)
                    .selectinload(Pack.cycle)
                )
            ).first()
            if decklist is None:
                raise NotFoundError("Decklist", decklist_id)

            slots = sorted(
                decklist.slots,
                key=lambda slot: (*_pack_order(slot.card.pack), slot.card.position),
            )

            if fmt == "octgn":
                export = self._octgn(decklist, slots)
            elif fmt == "text_cycle":
                export = self._text_by_cycle(decklist, slots)
            else:
                export = self._text(decklist, slots)

        LOGGER.debug(f"Exported decklist {decklist_id} as {fmt}")
        return export

    def _text(self, decklist: Decklist, slots: list[DecklistSlot]) -> DecklistExport:
        by_type = {}
        for slot in slots:
            by_type.setdefault(slot.card.type_code, []).append(slot)

        sections = []
        for type_code in DRAW_DECK_TYPES:
            type_slots = sorted(by_type.get(type_code, []), key=lambda slot: slot.card.name)
            if type_slots:
                sections.append(
                    {
                        "title": type_code.capitalize(),
                        "count": sum(slot.quantity for slot in type_slots),
                        "lines": [_card_line(slot.card, slot.quantity) for slot in type_slots],
                    }
                )

        packs = []
        for slot in slots:
            if slot.card.pack.name not in packs:
                packs.append(slot.card.pack.name)

        plots = by_type.get("plot", [])
        content = _environment.get_template("default.txt").render(
            name=decklist.name,
            faction=decklist.faction_code,
            agendas=[slot.card.name for slot in by_type.get("agenda", [])],
            packs=packs,
            plot_count=sum(slot.quantity for slot in plots),
            plots=[_card_line(slot.card, slot.quantity) for slot in plots],
            draw_count=sum(section["count"] for section in sections),
            sections=sections,
        )
        return self._text_export(decklist, content)

    def _text_by_cycle(self, decklist: Decklist, slots: list[DecklistSlot]) -> DecklistExport:
        sections = [
            {
                "title": cycle_name,
                "lines": [_card_line(slot.card, slot.quantity) for slot in cycle_slots],
            }
            for cycle_name, cycle_slots in groupby(
                slots, key=lambda slot: slot.card.pack.cycle.name
            )
        ]
        content = _environment.get_template("sortedbycycle.txt").render(
            name=decklist.name,
            faction=decklist.faction_code,
            sections=sections,
        )
        return self._text_export(decklist, content)

    def _octgn(self, decklist: Decklist, slots: list[DecklistSlot]) -> DecklistExport:
        sections = {"Agenda": [], "Plot": [], "Main": []}
        for slot in slots:
            card = slot.card
            if not card.octgn_id:
                LOGGER.warning(f"Card {card.code} has no OCTGN id, left out of export")
                continue
            if card.type_code == "agenda":
                title = "Agenda"
            elif card.type_code == "plot":
                title = "Plot"
            else:
                title = "Main"
            sections[title].append(
                {"quantity": slot.quantity, "octgn_id": card.octgn_id, "name": card.name}
            )

        content = _environment.get_template("octgn.xml").render(
            game_id=OCTGN_GAME_ID,
            sections=[{"title": title, "cards": cards} for title, cards in sections.items()],
            description=decklist.description_md,
        )
        return DecklistExport(
            filename=f"{slugify(decklist.name)}.o8d",
            content_type="application/octgn",
            content=content,
        )

    @staticmethod
    def _text_export(decklist: Decklist, content: str) -> DecklistExport:
        return DecklistExport(
            filename=f"{slugify(decklist.name)}.txt",
            content_type="text/plain",
            content=content.replace("\n", "\r\n"),
        )
