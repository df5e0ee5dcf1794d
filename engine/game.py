"""High-level match orchestration for Misfits."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from random import Random
from typing import Optional, Sequence

from .actions import ActionKind, ProposedAction
from .cards import Card, card_label
from .deck import shuffled_deck
from .placement import (
    Placement,
    RuleViolation,
    can_play_on_stack,
    cards_at,
    require_placement,
    require_playable,
    validate_placement,
)
from .reserve import (
    add_visible_placement,
    deal_initial,
    promote_visible_reserve,
    reveal_hidden,
    select_hidden_reserve,
)
from .rules_schema import DEFAULT_RULES, RuleSet
from .stack import draw_to_minimum, push_placement, take_stack
from .state import GamePhase, Match, Side, check_conservation
from .win import detect_winner

logger = logging.getLogger(__name__)


class PhaseError(RuleViolation):
    """Raised when an action is not allowed in the current phase."""


class NotYourTurn(RuleViolation):
    """Raised when the side that is not on turn submits an action."""


class MatchOver(RuleViolation):
    """Raised for any action after the match has been won."""


@dataclass
class TurnResult:
    side: Side
    action: ActionKind
    placement: Optional[Placement] = None
    revealed: Optional[Card] = None
    cleared: bool = False
    picked_up: int = 0
    owes_placement: bool = False
    winner: Optional[Side] = None

    def describe(self) -> str:
        if self.action is ActionKind.STACK:
            return f"{self.side} took the stack ({self.picked_up} cards)"
        if self.revealed is not None and self.placement is None:
            return (
                f"{self.side} revealed {card_label(self.revealed)} from the hidden reserve "
                f"and took the stack ({self.picked_up} cards)"
            )
        assert self.placement is not None
        text = f"{self.side} played {self.placement.describe()}"
        if self.revealed is not None:
            text += " from the hidden reserve"
        if self.cleared:
            text += "; the Ace cleared the stack"
        return text


@dataclass
class MatchEngine:
    """Phase state machine over a single match."""

    match: Match
    rules: RuleSet = field(default=DEFAULT_RULES)

    @classmethod
    def new_match(
        cls,
        *,
        rng: Optional[Random] = None,
        deck: Optional[Sequence[Card]] = None,
        rules: RuleSet = DEFAULT_RULES,
    ) -> "MatchEngine":
        match = Match(deck=shuffled_deck(rng=rng, deck=deck))
        deal_initial(match, rules.initial_deal)
        check_conservation(match)
        return cls(match=match, rules=rules)

    # Setup -------------------------------------------------------------

    def select_hidden_reserve(self, side: Side, indexes: Sequence[int]) -> None:
        self._ensure_phase(GamePhase.SELECTING_HIDDEN_RESERVE)
        select_hidden_reserve(self.match, side, indexes, self.rules.hidden_reserve_size)
        self.match.log.append(f"{side} chose a hidden reserve")
        if all(len(p.hidden_reserve) == self.rules.hidden_reserve_size for p in self.match.players.values()):
            self.match.phase = GamePhase.SELECTING_VISIBLE_RESERVE
        check_conservation(self.match)

    def add_visible_placement(self, side: Side, indexes: Sequence[int]) -> Placement:
        self._ensure_phase(GamePhase.SELECTING_VISIBLE_RESERVE)
        add_visible_placement(
            self.match,
            side,
            indexes,
            max_placements=self.rules.visible_reserve_placements,
            hand_minimum=self.rules.hand_minimum,
            min_straight_length=self.rules.min_straight_length,
        )
        placement = self.match.player(side).visible_reserve[-1]
        self.match.log.append(f"{side} added {placement.describe()} to the visible reserve")
        if all(
            len(p.visible_reserve) == self.rules.visible_reserve_placements
            for p in self.match.players.values()
        ):
            self.match.phase = GamePhase.PLAYER_TURN
            logger.info("Setup complete, human to move")
        check_conservation(self.match)
        return placement

    def setup_complete(self, side: Side) -> bool:
        player = self.match.player(side)
        if self.match.phase is GamePhase.SELECTING_HIDDEN_RESERVE:
            return len(player.hidden_reserve) == self.rules.hidden_reserve_size
        if self.match.phase is GamePhase.SELECTING_VISIBLE_RESERVE:
            return len(player.visible_reserve) == self.rules.visible_reserve_placements
        return True

    # Turns -------------------------------------------------------------

    def play(self, side: Side, indexes: Sequence[int]) -> TurnResult:
        self._ensure_turn(side)
        player = self.match.player(side)
        cards = cards_at(player.hand, indexes)
        placement = require_placement(cards, min_straight_length=self.rules.min_straight_length)
        require_playable(placement, self.match.stack)

        for card in cards:
            player.hand.remove(card)
        cleared = push_placement(self.match, placement)
        result = TurnResult(side=side, action=ActionKind.PLAY, placement=placement, cleared=cleared)
        return self._resolve(result, chain=cleared)

    def take_stack(self, side: Side) -> TurnResult:
        self._ensure_turn(side)
        taken = take_stack(self.match, side)
        return self._resolve(TurnResult(side=side, action=ActionKind.STACK, picked_up=taken), chain=False)

    def reveal_hidden(self, side: Side, index: int) -> TurnResult:
        self._ensure_turn(side)
        card = reveal_hidden(self.match, side, index)
        placement = validate_placement([card])
        assert placement is not None
        if can_play_on_stack(placement, self.match.stack):
            cleared = push_placement(self.match, placement)
            result = TurnResult(
                side=side, action=ActionKind.HIDDEN, placement=placement, revealed=card, cleared=cleared
            )
            return self._resolve(result, chain=cleared)

        self.match.player(side).hand.append(card)
        taken = take_stack(self.match, side)
        result = TurnResult(side=side, action=ActionKind.HIDDEN, revealed=card, picked_up=taken)
        return self._resolve(result, chain=False)

    def apply(self, side: Side, action: ProposedAction) -> TurnResult:
        if action.action is ActionKind.PLAY:
            return self.play(side, action.indexes or [])
        if action.action is ActionKind.HIDDEN:
            assert action.indexes is not None
            return self.reveal_hidden(side, action.indexes[0])
        return self.take_stack(side)

    # Helpers -----------------------------------------------------------

    def _resolve(self, result: TurnResult, *, chain: bool) -> TurnResult:
        match = self.match
        side = result.side
        draw_to_minimum(match, side, self.rules.hand_minimum)
        promote_visible_reserve(match, side)
        check_conservation(match)

        winner = detect_winner(match, side)
        if winner is not None:
            match.winner = winner
            match.owes_placement = False
            match.phase = GamePhase.GAME_OVER
        elif chain:
            match.owes_placement = True
            match.phase = side.turn_phase
        else:
            match.owes_placement = False
            match.phase = side.opponent.turn_phase

        result.owes_placement = match.owes_placement
        result.winner = winner
        match.log.append(result.describe())
        logger.info("%s", result.describe())
        if winner is not None:
            match.log.append(f"{winner} wins")
            logger.info("Match over, %s wins", winner)
        return result

    def _ensure_phase(self, expected: GamePhase) -> None:
        if self.match.phase is GamePhase.GAME_OVER:
            raise MatchOver("The match is over.")
        if self.match.phase is not expected:
            raise PhaseError(f"Action not allowed in phase {self.match.phase}. Expected {expected}.")

    def _ensure_turn(self, side: Side) -> None:
        if self.match.phase is GamePhase.GAME_OVER:
            raise MatchOver("The match is over.")
        acting = self.match.acting_side()
        if acting is None:
            raise PhaseError(f"Turn actions are not allowed in phase {self.match.phase}.")
        if acting is not side:
            raise NotYourTurn(f"It is the {acting} player's turn.")
