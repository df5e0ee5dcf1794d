"""Per-side views of a match for decision sources and UI consumers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .cards import card_label, serialize_card
from .placement import Placement
from .reserve import hidden_reserve_forced
from .state import GamePhase, Match, Side


@dataclass
class PlacementView:
    kind: str
    cards: list[dict]
    labels: list[str]


@dataclass
class StateView:
    """What the acting side may legitimately see."""

    side: str
    hand: list[dict]
    opponent_hand_size: int
    stack: list[dict]
    own_visible_reserve: list[PlacementView]
    opponent_visible_reserve: list[PlacementView]
    own_hidden_count: int
    opponent_hidden_count: int
    deck_size: int
    owes_placement: bool

    @property
    def stack_top(self) -> Optional[dict]:
        return self.stack[-1] if self.stack else None


@dataclass
class PlayerView:
    phase: str
    side: str
    current_player: Optional[str]
    winner: Optional[str]
    hand: list[dict]
    hand_labels: list[str]
    hand_face_down: bool
    hand_size: int
    opponent_hand_size: int
    stack: list[dict]
    stack_labels: list[str]
    discard_size: int
    deck_size: int
    own_visible_reserve: list[PlacementView]
    opponent_visible_reserve: list[PlacementView]
    own_hidden_count: int
    opponent_hidden_count: int
    owes_placement: bool
    must_use_hidden: bool
    log: list[str]


def placement_view(placement: Placement) -> PlacementView:
    return PlacementView(
        kind=placement.kind.value,
        cards=[serialize_card(card) for card in placement.cards],
        labels=[card_label(card) for card in placement.cards],
    )


def _reserve_view(placements: List[Placement]) -> list[PlacementView]:
    return [placement_view(placement) for placement in placements]


def build_state_view(match: Match, side: Side) -> StateView:
    own = match.player(side)
    other = match.player(side.opponent)
    return StateView(
        side=side.value,
        hand=[serialize_card(card) for card in own.hand],
        opponent_hand_size=len(other.hand),
        stack=[serialize_card(card) for card in match.stack],
        own_visible_reserve=_reserve_view(own.visible_reserve),
        opponent_visible_reserve=_reserve_view(other.visible_reserve),
        own_hidden_count=len(own.hidden_reserve),
        opponent_hidden_count=len(other.hidden_reserve),
        deck_size=len(match.deck),
        owes_placement=match.owes_placement and match.acting_side() is side,
    )


def build_player_view(match: Match, side: Side = Side.HUMAN, *, log_tail: int = 20) -> PlayerView:
    own = match.player(side)
    other = match.player(side.opponent)
    face_down = match.phase is GamePhase.SELECTING_HIDDEN_RESERVE
    visible_hand = [] if face_down else list(own.hand)
    acting = match.acting_side()
    return PlayerView(
        phase=match.phase.value,
        side=side.value,
        current_player=acting.value if acting else None,
        winner=match.winner.value if match.winner else None,
        hand=[serialize_card(card) for card in visible_hand],
        hand_labels=[card_label(card) for card in visible_hand],
        hand_face_down=face_down,
        hand_size=len(own.hand),
        opponent_hand_size=len(other.hand),
        stack=[serialize_card(card) for card in match.stack],
        stack_labels=[card_label(card) for card in match.stack],
        discard_size=len(match.discard),
        deck_size=len(match.deck),
        own_visible_reserve=_reserve_view(own.visible_reserve),
        opponent_visible_reserve=_reserve_view(other.visible_reserve),
        own_hidden_count=len(own.hidden_reserve),
        opponent_hidden_count=len(other.hidden_reserve),
        owes_placement=match.owes_placement and acting is side,
        must_use_hidden=hidden_reserve_forced(own),
        log=list(match.log[-log_tail:]) if log_tail else [],
    )
