"""Deck construction rules checked before a deck can be published."""

from collections.abc import Iterable
from typing import Protocol

from deckshare.models.card import Card
from deckshare.models.deck import Deck

PLOT_DECK_SIZE = 7
MIN_DRAW_DECK_SIZE = 60
MAX_AGENDAS = 1

NON_DRAW_TYPES = {"agenda", "plot"}


class DeckValidator(Protocol):
    def find_problem(self, deck: Deck) -> str | None: ...


class StandardDeckValidator:
    """
    Checks the standard construction rules.
    find_problem returns the first problem code found, or None.
    """

    def find_problem(self, deck: Deck) -> str | None:
        return self.find_problem_in_slots(
            (slot.card, slot.quantity) for slot in deck.slots
        )

    def find_problem_in_slots(self, slots: Iterable[tuple[Card, int]]) -> str | None:
        agendas = 0
        plots: dict[str, int] = {}
        draw_deck = 0

        for card, quantity in slots:
            if quantity > card.deck_limit:
                return "too_many_copies"
            if card.type_code == "agenda":
                agendas += quantity
            elif card.type_code == "plot":
                plots[card.code] = plots.get(card.code, 0) + quantity
            else:
                draw_deck += quantity

        plot_deck = sum(plots.values())

        if agendas > MAX_AGENDAS:
            return "too_many_agendas"
        if plot_deck > PLOT_DECK_SIZE:
            return "too_many_plots"
        if plot_deck < PLOT_DECK_SIZE:
            return "too_few_plots"
        # Only one plot may be included twice
        if len(plots) < PLOT_DECK_SIZE - 1:
            return "too_many_different_plots"
        if draw_deck < MIN_DRAW_DECK_SIZE:
            return "too_few_cards"

        return None
