"""Random baseline source."""

from __future__ import annotations

import random
from typing import Optional, Sequence

from engine.cards import Card
from engine.mechanics import candidate_placements, legal_placements
from engine.view import StateView

from .base import DecisionSource, Message, RawAnswer, hand_cards, stack_cards


class RandomSource(DecisionSource):
    name = "Random"

    def __init__(self, seed: Optional[int] = None, pickup_rate: float = 0.05) -> None:
        self._rng = random.Random(seed)
        self.pickup_rate = pickup_rate

    def propose(self, view: StateView, conversation: Sequence[Message]) -> RawAnswer:
        hand = hand_cards(view)
        if not hand and not view.own_visible_reserve and view.own_hidden_count:
            index = self._rng.randrange(view.own_hidden_count)
            return {"action": "hidden", "indexes": [index], "rationale": "Forced to use the hidden reserve."}

        legal = legal_placements(hand, stack_cards(view))
        if not legal or (view.stack and self._rng.random() < self.pickup_rate):
            return {"action": "stack", "rationale": "Random pickup."}
        group, _ = self._rng.choice(legal)
        return {"action": "play", "indexes": list(group), "rationale": "Random legal placement."}

    def choose_hidden_reserve(self, hand_size: int, count: int) -> Sequence[int]:
        return self._rng.sample(range(hand_size), count)

    def choose_visible_placement(self, hand: Sequence[Card]) -> Sequence[int]:
        group, _ = self._rng.choice(candidate_placements(hand))
        return list(group)
