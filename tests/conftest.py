from typing import Iterable, List, Optional, Sequence

import pytest

from engine.cards import Card, Suit
from engine.deck import build_deck
from engine.game import MatchEngine
from engine.placement import validate_placement
from engine.state import GamePhase, Match, PlayerState, Side


def card(rank: int, suit: Suit = Suit.HEARTS) -> Card:
    return Card(suit, rank)


def build_match(
    *,
    human_hand: Sequence[Card] = (),
    computer_hand: Sequence[Card] = (),
    stack: Sequence[Card] = (),
    human_hidden: Sequence[Card] = (),
    computer_hidden: Sequence[Card] = (),
    human_visible: Iterable[Sequence[Card]] = (),
    computer_visible: Iterable[Sequence[Card]] = (),
    deck: Optional[Sequence[Card]] = None,
    phase: GamePhase = GamePhase.PLAYER_TURN,
) -> Match:
    """Match with the given layout. Unlisted cards fill the deck, or the discard pile when a deck is given."""

    def placements(groups: Iterable[Sequence[Card]]):
        result = []
        for group in groups:
            placement = validate_placement(group)
            assert placement is not None
            result.append(placement)
        return result

    players = {
        Side.HUMAN: PlayerState(
            hand=list(human_hand), hidden_reserve=list(human_hidden), visible_reserve=placements(human_visible)
        ),
        Side.COMPUTER: PlayerState(
            hand=list(computer_hand),
            hidden_reserve=list(computer_hidden),
            visible_reserve=placements(computer_visible),
        ),
    }
    placed: List[Card] = list(stack) + (list(deck) if deck is not None else [])
    for player in players.values():
        placed.extend(c for _, c in player.holdings())
    remaining = [c for c in build_deck() if c not in placed]

    if deck is None:
        return Match(deck=remaining, stack=list(stack), phase=phase, players=players)
    return Match(deck=list(deck), stack=list(stack), discard=remaining, phase=phase, players=players)


@pytest.fixture
def make_engine():
    def factory(**kwargs) -> MatchEngine:
        return MatchEngine(match=build_match(**kwargs))

    return factory
