"""Simple arena pitting two decision sources against each other."""

from __future__ import annotations

import argparse
import logging
from random import Random
from typing import Dict, Iterable, Optional

from engine.actions import ProposedAction
from engine.game import MatchEngine
from engine.rules_schema import DEFAULT_RULES, RuleSet
from engine.state import GamePhase, Side
from engine.win import has_won

from .base import DecisionSource, complete_setup
from .baseline_lowest import LowestPlacementSource
from .oracle import OracleAdapter, OracleExhausted
from .random_bot import RandomSource

logger = logging.getLogger(__name__)

SOURCE_REGISTRY: Dict[str, type[DecisionSource]] = {
    "lowest": LowestPlacementSource,
    "random": RandomSource,
}


class ArenaStalled(RuntimeError):
    """Raised when a match exceeds the turn limit."""


def run_match(
    human: DecisionSource,
    computer: DecisionSource,
    *,
    seed: Optional[int] = None,
    max_turns: int = 10_000,
    rules: RuleSet = DEFAULT_RULES,
) -> dict:
    engine = MatchEngine.new_match(rng=Random(seed), rules=rules)
    sources = {Side.HUMAN: human, Side.COMPUTER: computer}
    oracles = {side: OracleAdapter(source, rules=rules) for side, source in sources.items()}

    complete_setup(engine, Side.HUMAN, human)
    complete_setup(engine, Side.COMPUTER, computer)
    complete_setup(engine, Side.HUMAN, human)

    actions = 0
    fallbacks = 0
    while engine.match.phase is not GamePhase.GAME_OVER:
        if actions >= max_turns:
            raise ArenaStalled(f"No winner after {max_turns} actions.")
        side = engine.match.acting_side()
        assert side is not None
        try:
            action = oracles[side].decide(engine.match, side).action
        except OracleExhausted:
            fallbacks += 1
            action = ProposedAction.take_stack("Fallback after the decision source failed.")
        engine.apply(side, action)
        actions += 1

    winner = engine.match.winner
    assert winner is not None
    logger.info("%s wins after %d actions", winner, actions)
    return {
        "winner": winner.value,
        "actions": actions,
        "fallbacks": fallbacks,
        "winners": [side.value for side in Side if has_won(engine.match.player(side))],
        "discarded": len(engine.match.discard),
    }


def main(argv: Iterable[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run simulated Misfits matches.")
    parser.add_argument("--human", default="lowest", choices=SOURCE_REGISTRY.keys())
    parser.add_argument("--computer", default="random", choices=SOURCE_REGISTRY.keys())
    parser.add_argument("--n", type=int, default=10, help="Number of matches to play.")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    tally = {side.value: 0 for side in Side}
    for index in range(args.n):
        result = run_match(
            SOURCE_REGISTRY[args.human](),
            SOURCE_REGISTRY[args.computer](),
            seed=args.seed + index,
        )
        tally[result["winner"]] += 1

    print(f"Wins after {args.n} matches: {tally}")


if __name__ == "__main__":
    main()
