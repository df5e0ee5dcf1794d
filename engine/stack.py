"""Stack handling: placing, Ace clears, pickups and refills."""

from __future__ import annotations

import logging

from .deck import draw
from .placement import Placement
from .state import Match, Side

logger = logging.getLogger(__name__)


def push_placement(match: Match, placement: Placement) -> bool:
    """Push the placement onto the stack, lowest rank first.

    Returns True when the placement held an Ace and the whole stack went to
    the discard pile.
    """
    match.stack.extend(placement.cards)
    if not placement.has_ace:
        return False
    logger.debug("Ace played, discarding %d stack cards", len(match.stack))
    match.discard.extend(match.stack)
    match.stack.clear()
    return True


def take_stack(match: Match, side: Side) -> int:
    """Move the whole stack into the player's hand and return the card count."""
    taken = len(match.stack)
    match.player(side).hand.extend(match.stack)
    match.stack.clear()
    return taken


def draw_to_minimum(match: Match, side: Side, minimum: int = 3) -> int:
    """Refill the hand from the deck up to the minimum, returning cards drawn."""
    hand = match.player(side).hand
    drawn = 0
    while len(hand) < minimum and match.deck:
        hand.append(draw(match.deck))
        drawn += 1
    return drawn
