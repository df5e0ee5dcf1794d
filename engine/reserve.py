"""Hidden and visible reserve handling."""

from __future__ import annotations

import logging
from typing import Sequence

from .cards import Card
from .deck import draw
from .placement import MIN_STRAIGHT_LENGTH, InvalidShape, RuleViolation, cards_at, validate_placement, shape_problem
from .stack import draw_to_minimum
from .state import Match, PlayerState, Side

logger = logging.getLogger(__name__)


class InvalidReserveOperation(RuleViolation):
    """Raised when reserve setup rules are violated."""


class IllegalHiddenDraw(RuleViolation):
    """Raised when a hidden card is revealed while other cards remain playable."""


def deal_initial(match: Match, cards_each: int = 9) -> None:
    """Deal face down to both players, alternating from the top of the deck."""
    for player in match.players.values():
        if player.hand or player.hidden_reserve or player.visible_reserve:
            raise InvalidReserveOperation("Cards have already been dealt.")
    for _ in range(cards_each):
        match.player(Side.HUMAN).hand.append(draw(match.deck))
        match.player(Side.COMPUTER).hand.append(draw(match.deck))


def select_hidden_reserve(match: Match, side: Side, indexes: Sequence[int], size: int = 3) -> None:
    """Move the chosen face-down hand cards into the hidden reserve."""
    player = match.player(side)
    if player.hidden_reserve:
        raise InvalidReserveOperation("Hidden reserve has already been chosen.")
    if len(indexes) != size:
        raise InvalidReserveOperation(f"Exactly {size} cards must be chosen for the hidden reserve.")
    chosen = cards_at(player.hand, indexes)
    for card in chosen:
        player.hand.remove(card)
    player.hidden_reserve.extend(chosen)


def add_visible_placement(
    match: Match,
    side: Side,
    indexes: Sequence[int],
    *,
    max_placements: int = 3,
    hand_minimum: int = 3,
    min_straight_length: int = MIN_STRAIGHT_LENGTH,
) -> None:
    """Lay one placement into the visible reserve and refill the hand.

    Only the shape is checked: visible reserve placements never touch the stack.
    """
    player = match.player(side)
    if not player.hidden_reserve:
        raise InvalidReserveOperation("Choose the hidden reserve before the visible reserve.")
    if len(player.visible_reserve) >= max_placements:
        raise InvalidReserveOperation(f"Visible reserve already holds {max_placements} placements.")
    chosen = cards_at(player.hand, indexes)
    placement = validate_placement(chosen, min_straight_length=min_straight_length)
    if placement is None:
        raise InvalidShape(f"Invalid placement: {shape_problem(chosen, min_straight_length=min_straight_length)}.")
    for card in chosen:
        player.hand.remove(card)
    player.visible_reserve.append(placement)
    draw_to_minimum(match, side, hand_minimum)


def promote_visible_reserve(match: Match, side: Side) -> bool:
    """Move the whole visible reserve into an empty hand in one step."""
    player = match.player(side)
    if player.hand or not player.visible_reserve:
        return False
    for placement in player.visible_reserve:
        player.hand.extend(placement.cards)
    player.visible_reserve.clear()
    logger.debug("%s took the visible reserve into hand (%d cards)", side, len(player.hand))
    return True


def hidden_reserve_forced(player: PlayerState) -> bool:
    """True when the only move left is revealing a hidden card."""
    return not player.hand and not player.visible_reserve and bool(player.hidden_reserve)


def ensure_hidden_draw_allowed(match: Match, side: Side, index: int) -> None:
    player = match.player(side)
    if player.hand:
        raise IllegalHiddenDraw("Hidden reserve is only available once the hand is empty.")
    if player.visible_reserve:
        raise IllegalHiddenDraw("Hidden reserve is only available once the visible reserve is used.")
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(player.hidden_reserve):
        raise IllegalHiddenDraw(
            f"Hidden index {index!r} is outside a reserve of {len(player.hidden_reserve)} cards."
        )


def reveal_hidden(match: Match, side: Side, index: int) -> Card:
    """Remove and return one hidden reserve card. The caller decides where it goes."""
    ensure_hidden_draw_allowed(match, side, index)
    return match.player(side).hidden_reserve.pop(index)
