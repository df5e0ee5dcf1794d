"""Card-related data structures and helpers for Misfits."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Mapping


class Suit(Enum):
    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"
    SPADES = "spades"

    def __str__(self) -> str:
        return self.value


TWO = 2
JACK = 11
QUEEN = 12
KING = 13
ACE = 14

RANKS: list[int] = list(range(TWO, ACE + 1))

RANK_NAMES: dict[int, str] = {JACK: "Jack", QUEEN: "Queen", KING: "King", ACE: "Ace"}
RANK_SHORT: dict[int, str] = {JACK: "J", QUEEN: "Q", KING: "K", ACE: "A"}


@dataclass(frozen=True)
class Card:
    """Immutable playing card. Identity is (suit, rank) and never changes."""

    suit: Suit
    rank: int

    def __post_init__(self) -> None:
        if not TWO <= self.rank <= ACE:
            raise ValueError(f"Rank must be within {TWO}..{ACE}, got {self.rank}.")

    def __str__(self) -> str:
        return f"{RANK_SHORT.get(self.rank, str(self.rank))}{self.suit.value[0].upper()}"

    @property
    def is_wild(self) -> bool:
        return self.rank == TWO

    @property
    def is_ace(self) -> bool:
        return self.rank == ACE


def card_sort_key(card: Card) -> tuple[int, str]:
    """Ascending rank, suit name as a stable tie-break."""
    return card.rank, card.suit.value


def sort_cards(cards: Iterable[Card]) -> List[Card]:
    return sorted(cards, key=card_sort_key)


def rank_label(rank: int) -> str:
    return RANK_NAMES.get(rank, str(rank))


def card_label(card: Card) -> str:
    return f"{rank_label(card.rank)} of {card.suit.name.title()}"


def serialize_card(card: Card) -> dict[str, object]:
    return {"suit": card.suit.value, "rank": card.rank}


def deserialize_card(payload: Mapping[str, object]) -> Card:
    suit_name = str(payload["suit"]).lower()
    rank = payload["rank"]
    if not isinstance(rank, int) or isinstance(rank, bool):
        raise ValueError(f"Card rank must be an integer, got {rank!r}.")
    return Card(Suit(suit_name), rank)
