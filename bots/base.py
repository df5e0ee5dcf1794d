"""Common decision source interfaces."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Literal, Mapping, Sequence, Union

from engine.cards import Card, deserialize_card
from engine.game import MatchEngine
from engine.mechanics import candidate_placements
from engine.placement import RuleViolation
from engine.state import GamePhase, Side
from engine.view import StateView

logger = logging.getLogger(__name__)

RawAnswer = Union[str, Mapping[str, Any]]


class OracleError(RuntimeError):
    """Base class for failures while asking a decision source for an action."""


class OracleTransportError(OracleError):
    """Raised by a source when the underlying call fails or returns nothing."""


@dataclass
class Message:
    role: Literal["user", "assistant"]
    content: str


def hand_cards(view: StateView) -> List[Card]:
    return [deserialize_card(card) for card in view.hand]


def stack_cards(view: StateView) -> List[Card]:
    return [deserialize_card(card) for card in view.stack]


class DecisionSource:
    """Base class for action sources driving a player.

    ``propose`` returns a raw answer, either a JSON string or a mapping, in
    the shape ``{"action", "indexes"?, "rationale"}``. The oracle adapter
    validates it, so sources are free to be wrong.
    """

    name: str = "BaseSource"

    def propose(self, view: StateView, conversation: Sequence[Message]) -> RawAnswer:
        raise NotImplementedError

    def choose_hidden_reserve(self, hand_size: int, count: int) -> Sequence[int]:
        """Pick face-down hand indexes for the hidden reserve."""
        return list(range(count))

    def choose_visible_placement(self, hand: Sequence[Card]) -> Sequence[int]:
        """Return hand indexes of one placement for the visible reserve."""
        candidates = candidate_placements(hand)
        if not candidates:
            raise RuntimeError("No placement can be formed from an empty hand.")
        group, _ = max(candidates, key=lambda item: (item[1].low.rank, len(item[1])))
        return list(group)


def complete_setup(engine: MatchEngine, side: Side, source: DecisionSource) -> None:
    """Make every setup choice the current phase still needs from this side."""
    rules = engine.rules
    player = engine.match.player(side)
    if engine.match.phase is GamePhase.SELECTING_HIDDEN_RESERVE and not engine.setup_complete(side):
        indexes = source.choose_hidden_reserve(len(player.hand), rules.hidden_reserve_size)
        engine.select_hidden_reserve(side, indexes)
    while engine.match.phase is GamePhase.SELECTING_VISIBLE_RESERVE and not engine.setup_complete(side):
        indexes = source.choose_visible_placement(list(player.hand))
        try:
            engine.add_visible_placement(side, indexes)
        except RuleViolation as exc:
            logger.warning("%s proposed an invalid visible placement (%s), laying a single", source.name, exc)
            engine.add_visible_placement(side, [0])
