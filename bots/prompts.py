"""Rules text and prompt rendering for generative sources."""

from __future__ import annotations

import json
from typing import Iterable

from engine.view import PlacementView, PlayerView, StateView

RULES = """
Each player has a hand. In the middle of the table are the deck and the stack.
Whenever a hand drops below 3 cards the player draws from the deck, unless the
deck is empty.

A placement is one or more cards: a single card, several cards of the same rank,
or a straight of three or more consecutive ranks. Multiples and straights cannot
be mixed in one placement. Ranks run 2 to 14 (11 Jack, 12 Queen, 13 King, 14 Ace).

At the start each player is dealt 9 cards face down and sets 3 of them aside
unseen as the hidden reserve. From the remaining 6 the player builds 3 placements
as the visible reserve, drawing back up to 3 cards as needed.

On a turn the player makes a placement onto the stack. If the stack is empty any
placement is legal. Otherwise the lowest card of the placement must be at least
the rank of the card on top of the stack. A 2 can always be played, so a
straight starting at 2 can always be played too. An Ace can always be played; it
discards the whole stack for the rest of the game and the same player places
again. Aces chain: two Aces and then a third placement can all happen in one turn.

A player who cannot or will not place takes the whole stack into their hand.

Visible reserve cards can never be played directly. When the hand is empty, the
whole visible reserve moves into the hand. When the hand and the visible reserve
are both empty, the turn consists of revealing one hidden card and trying to
place it; if it is too low, the player takes the stack and the revealed card.

The first player with an empty hand, an empty visible reserve and an empty
hidden reserve wins.

Reminders:
- Cards can only be played together if they share a rank or form a straight.
- Low cards are hard to get rid of, so play them early. 2 is the exception.
- Playing a high card on a big stack can force the opponent to pick it up.
""".strip()

ORACLE_INSTRUCTIONS = (
    "You are playing a card game called Misfits against a human. You need to win. "
    "Answer with a single JSON object and nothing else. The rules are as follows:\n" + RULES
)

ADVISOR_INSTRUCTIONS = (
    "You are a helpful assistant for a card game called Misfits. Give the player "
    "concise strategic advice in plain text without decoration. The rules are as follows:\n" + RULES
)


def _json(value: object) -> str:
    return json.dumps(value, separators=(",", ":"))


def _reserve(placements: Iterable[PlacementView]) -> str:
    return _json([{"type": p.kind, "cards": p.cards} for p in placements])


def render_state_prompt(view: StateView) -> str:
    lines = [
        "Current game state:",
        f"- Your hand: {_json(view.hand)}",
        f"- Your opponent's hand size: {view.opponent_hand_size}",
        f"- The stack (last is on top): {_json(view.stack)}",
        f"- Your visible reserve: {_reserve(view.own_visible_reserve)}",
        f"- Your opponent's visible reserve: {_reserve(view.opponent_visible_reserve)}",
        f"- Your hidden reserve size: {view.own_hidden_count}",
        f"- Your opponent's hidden reserve size: {view.opponent_hidden_count}",
        f"- Deck size: {view.deck_size}",
    ]
    if view.owes_placement:
        lines.append("- You just played an Ace, so you place again.")
    lines += [
        "",
        'To play cards, use the "play" action with the index(es) of the card(s) in your hand, starting at 0.',
        'To pick up the stack, use the "stack" action.',
        f'To reveal a hidden card, use the "hidden" action with one index from 0 to {max(view.own_hidden_count - 1, 0)}.',
        'Always include a short "rationale".',
        "",
        "What is your move?",
    ]
    return "\n".join(lines)


def render_player_state(view: PlayerView) -> str:
    lines = [
        "Current game state:",
        f"- Player's hand: {_json(view.hand)}",
        f"- Opponent's hand size: {view.opponent_hand_size} cards",
        f"- The stack (last is on top): {_json(view.stack)}",
        f"- Player's visible reserve: {_reserve(view.own_visible_reserve)}",
        f"- Opponent's visible reserve: {_reserve(view.opponent_visible_reserve)}",
        f"- Player's hidden reserve size: {view.own_hidden_count}",
        f"- Opponent's hidden reserve size: {view.opponent_hidden_count}",
        f"- Game phase: {view.phase}",
        f"- Cards remaining in deck: {view.deck_size}",
    ]
    return "\n".join(lines)


def retry_feedback(reason: str) -> str:
    """One-line correction appended after an invalid answer."""
    return f"That move is invalid because {reason.rstrip('.')}. Try again!"
