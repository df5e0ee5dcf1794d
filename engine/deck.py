"""Deck creation utilities for Misfits."""

from __future__ import annotations

from random import Random
from typing import List, Optional, Sequence

from .cards import RANKS, Card, Suit

DECK_SIZE = 52


def build_deck() -> List[Card]:
    """Return the ordered 52-card deck."""
    return [Card(suit, rank) for suit in Suit for rank in RANKS]


def shuffled_deck(
    *,
    rng: Optional[Random] = None,
    deck: Optional[Sequence[Card]] = None,
) -> List[Card]:
    """Return a shuffled copy of the full deck, or a copy of a preset order."""
    if deck is not None:
        cards = list(deck)
    else:
        cards = build_deck()
        if rng is None:
            rng = Random()
        rng.shuffle(cards)
    if len(cards) != DECK_SIZE or len(set(cards)) != DECK_SIZE:
        raise ValueError("Deck must contain exactly 52 unique cards.")
    return cards


def draw(deck: List[Card]) -> Card:
    """Draw from the top of the deck, which is the end of the list."""
    if not deck:
        raise IndexError("Cannot draw from an empty deck.")
    return deck.pop()
