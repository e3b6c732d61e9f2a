from .card import Card, Cycle, Faction, Pack
from .comment import Comment
from .deck import Deck, DeckSlot
from .decklist import Decklist, DecklistSlot, favorite_table, vote_table
from .tournament import Tournament
from .user import User


def register_models() -> list:
    return [
        User,
        Faction,
        Cycle,
        Pack,
        Card,
        Tournament,
        Deck,
        DeckSlot,
        Decklist,
        DecklistSlot,
        Comment,
    ]
