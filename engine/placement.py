"""Placement shapes and stack legality."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from .cards import Card, card_label, sort_cards

MIN_STRAIGHT_LENGTH = 3


class RuleViolation(RuntimeError):
    """Base class for rejected actions. The match is left unchanged."""

    @property
    def rule(self) -> str:
        return type(self).__name__


class InvalidShape(RuleViolation):
    """Raised when cards are not a single, a same-rank multiple or a straight."""


class IllegalForStack(RuleViolation):
    """Raised when a valid placement is too low for the current stack top."""


class InvalidIndexes(RuleViolation):
    """Raised when submitted indexes do not name distinct cards in the hand."""


def cards_at(hand: Sequence[Card], indexes: Sequence[int]) -> List[Card]:
    """Resolve hand indexes to cards, rejecting duplicates and out-of-range values."""
    if len(set(indexes)) != len(indexes):
        raise InvalidIndexes("Each card index may be used only once.")
    for index in indexes:
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(hand):
            raise InvalidIndexes(f"Index {index!r} is outside a hand of {len(hand)} cards.")
    return [hand[index] for index in indexes]


class PlacementKind(Enum):
    SINGLE = "single"
    MULTIPLE = "multiple"
    STRAIGHT = "straight"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Placement:
    kind: PlacementKind
    cards: Tuple[Card, ...]

    def __post_init__(self) -> None:
        if not self.cards:
            raise ValueError("A placement needs at least one card.")

    @property
    def low(self) -> Card:
        return min(self.cards, key=lambda card: card.rank)

    @property
    def has_ace(self) -> bool:
        return any(card.is_ace for card in self.cards)

    def __len__(self) -> int:
        return len(self.cards)

    def describe(self) -> str:
        return f"{self.kind} of " + ", ".join(card_label(card) for card in self.cards)


def _is_consecutive(ranks: Sequence[int]) -> bool:
    return all(later == earlier + 1 for earlier, later in zip(ranks, ranks[1:]))


def classify(cards: Sequence[Card], *, min_straight_length: int = MIN_STRAIGHT_LENGTH) -> Optional[PlacementKind]:
    """Return the placement kind for the cards, or None when the shape is illegal."""
    if not cards:
        return None
    if len(cards) == 1:
        return PlacementKind.SINGLE
    ranks = sorted(card.rank for card in cards)
    if ranks[0] == ranks[-1]:
        return PlacementKind.MULTIPLE
    if len(ranks) >= min_straight_length and _is_consecutive(ranks):
        return PlacementKind.STRAIGHT
    return None


def validate_placement(
    cards: Iterable[Card], *, min_straight_length: int = MIN_STRAIGHT_LENGTH
) -> Optional[Placement]:
    """Return a Placement with cards in ascending rank, or None when invalid."""
    ordered = sort_cards(cards)
    kind = classify(ordered, min_straight_length=min_straight_length)
    if kind is None:
        return None
    return Placement(kind=kind, cards=tuple(ordered))


def shape_problem(cards: Sequence[Card], *, min_straight_length: int = MIN_STRAIGHT_LENGTH) -> str:
    """One-line reason a set of cards fails the shape rule, empty when it passes."""
    if not cards:
        return "it is empty"
    if classify(cards, min_straight_length=min_straight_length) is not None:
        return ""
    if len(cards) < min_straight_length:
        return f"{len(cards)} cards of different ranks are not a multiple and too short for a straight"
    return "it is not a straight or a multiple of one rank"


def require_placement(
    cards: Sequence[Card], *, min_straight_length: int = MIN_STRAIGHT_LENGTH
) -> Placement:
    placement = validate_placement(cards, min_straight_length=min_straight_length)
    if placement is None:
        raise InvalidShape(
            f"Invalid placement: {shape_problem(cards, min_straight_length=min_straight_length)}."
        )
    return placement


def can_play_on_stack(placement: Placement, stack: Sequence[Card]) -> bool:
    """Return True if the placement may go on top of the stack."""
    if not stack:
        return True
    top = stack[-1]
    low = placement.low
    if low.is_wild or low.is_ace:
        return True
    return low.rank >= top.rank


def require_playable(placement: Placement, stack: Sequence[Card]) -> None:
    if not can_play_on_stack(placement, stack):
        top = stack[-1]
        raise IllegalForStack(
            f"Cannot play {card_label(placement.low)} on {card_label(top)}: "
            "the lowest card must be at least the top of the stack."
        )
