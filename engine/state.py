"""Match state for Misfits."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from .cards import Card
from .deck import DECK_SIZE
from .placement import Placement


class InvariantViolation(RuntimeError):
    """Raised when the match state is corrupted. The match must be abandoned."""


class GamePhase(Enum):
    SELECTING_HIDDEN_RESERVE = "selecting-hidden-reserve"
    SELECTING_VISIBLE_RESERVE = "selecting-visible-reserve"
    PLAYER_TURN = "player-turn"
    COMPUTER_TURN = "computer-turn"
    GAME_OVER = "game-over"

    def __str__(self) -> str:
        return self.value


class Side(Enum):
    HUMAN = "human"
    COMPUTER = "computer"

    @property
    def opponent(self) -> "Side":
        return Side.COMPUTER if self is Side.HUMAN else Side.HUMAN

    @property
    def turn_phase(self) -> GamePhase:
        return GamePhase.PLAYER_TURN if self is Side.HUMAN else GamePhase.COMPUTER_TURN

    def __str__(self) -> str:
        return self.value


@dataclass
class ChatMessage:
    role: str
    content: str


@dataclass
class PlayerState:
    hand: List[Card] = field(default_factory=list)
    hidden_reserve: List[Card] = field(default_factory=list)
    visible_reserve: List[Placement] = field(default_factory=list)

    def holdings(self) -> Iterator[Tuple[str, Card]]:
        for card in self.hand:
            yield "hand", card
        for card in self.hidden_reserve:
            yield "hidden_reserve", card
        for placement in self.visible_reserve:
            for card in placement.cards:
                yield "visible_reserve", card


@dataclass
class Match:
    deck: List[Card]
    stack: List[Card] = field(default_factory=list)
    discard: List[Card] = field(default_factory=list)
    phase: GamePhase = GamePhase.SELECTING_HIDDEN_RESERVE
    players: Dict[Side, PlayerState] = field(
        default_factory=lambda: {Side.HUMAN: PlayerState(), Side.COMPUTER: PlayerState()}
    )
    owes_placement: bool = False
    winner: Optional[Side] = None
    chat_history: List[ChatMessage] = field(default_factory=list)
    log: List[str] = field(default_factory=list)

    def player(self, side: Side) -> PlayerState:
        return self.players[side]

    def acting_side(self) -> Optional[Side]:
        if self.phase is GamePhase.PLAYER_TURN:
            return Side.HUMAN
        if self.phase is GamePhase.COMPUTER_TURN:
            return Side.COMPUTER
        return None

    def locations(self) -> Iterator[Tuple[str, Card]]:
        for card in self.deck:
            yield "deck", card
        for card in self.stack:
            yield "stack", card
        for card in self.discard:
            yield "discard", card
        for side, player in self.players.items():
            for container, card in player.holdings():
                yield f"{side.value}.{container}", card


def check_conservation(match: Match) -> None:
    """Every card of the deck must sit in exactly one container."""
    seen: Dict[Card, str] = {}
    for container, card in match.locations():
        if card in seen:
            raise InvariantViolation(f"{card} is in both {seen[card]} and {container}.")
        seen[card] = container
    if len(seen) != DECK_SIZE:
        counts = Counter(seen.values())
        raise InvariantViolation(f"Expected {DECK_SIZE} cards in play, found {len(seen)}: {dict(counts)}.")
