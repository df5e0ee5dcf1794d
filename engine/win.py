"""Win detection."""

from __future__ import annotations

from typing import Optional

from .state import Match, PlayerState, Side


def has_won(player: PlayerState) -> bool:
    return not player.hand and not player.visible_reserve and not player.hidden_reserve


def detect_winner(match: Match, acting: Side) -> Optional[Side]:
    """Return the winning side, checking the acting side first."""
    for side in (acting, acting.opponent):
        if has_won(match.player(side)):
            return side
    return None
