"""Baseline source that always plays the lowest legal placement."""

from __future__ import annotations

from typing import Sequence

from engine.mechanics import legal_placements
from engine.view import StateView

from .base import DecisionSource, Message, RawAnswer, hand_cards, stack_cards


class LowestPlacementSource(DecisionSource):
    name = "Lowest"

    def propose(self, view: StateView, conversation: Sequence[Message]) -> RawAnswer:
        hand = hand_cards(view)
        if not hand and not view.own_visible_reserve and view.own_hidden_count:
            return {"action": "hidden", "indexes": [0], "rationale": "Hand and visible reserve are empty."}

        legal = legal_placements(hand, stack_cards(view))
        if not legal:
            return {"action": "stack", "rationale": "Nothing in hand beats the stack."}

        group, placement = legal[0]
        return {
            "action": "play",
            "indexes": list(group),
            "rationale": f"Lowest legal placement: {placement.describe()}.",
        }
