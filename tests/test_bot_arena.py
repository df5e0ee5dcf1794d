from random import Random

import pytest

from bots.base import complete_setup
from bots.bot_arena import ArenaStalled, run_match
from bots.baseline_lowest import LowestPlacementSource
from bots.oracle import OracleAdapter
from bots.random_bot import RandomSource
from engine.game import MatchEngine
from engine.state import GamePhase, Side


@pytest.mark.parametrize("seed", range(3))
def test_arena_match_has_exactly_one_winner(seed):
    result = run_match(LowestPlacementSource(), RandomSource(seed=seed), seed=seed)

    assert result["winner"] in ("human", "computer")
    assert result["winners"] == [result["winner"]]
    assert result["fallbacks"] == 0
    assert result["actions"] > 0


@pytest.mark.parametrize("seed", [0, 1, 2, 4, 5])
def test_lowest_against_lowest_ends_with_one_winner(seed):
    result = run_match(LowestPlacementSource(), LowestPlacementSource(), seed=seed)

    assert result["winner"] in ("human", "computer")
    assert result["winners"] == [result["winner"]]
    assert result["fallbacks"] == 0


def test_lowest_against_lowest_can_cycle():
    # This deal never finishes under deterministic lowest play.
    with pytest.raises(ArenaStalled):
        run_match(LowestPlacementSource(), LowestPlacementSource(), seed=3, max_turns=5000)


def test_arena_turn_limit():
    with pytest.raises(ArenaStalled):
        run_match(LowestPlacementSource(), LowestPlacementSource(), seed=0, max_turns=1)


@pytest.mark.parametrize("source", [LowestPlacementSource(), RandomSource(seed=3)])
def test_baseline_sources_always_answer_legally(source):
    engine = MatchEngine.new_match(rng=Random(13))
    complete_setup(engine, Side.HUMAN, source)
    complete_setup(engine, Side.COMPUTER, source)
    complete_setup(engine, Side.HUMAN, source)
    oracle = OracleAdapter(source)

    for _ in range(150):
        if engine.match.phase is GamePhase.GAME_OVER:
            break
        side = engine.match.acting_side()
        decision = oracle.decide(engine.match, side)
        assert decision.attempts == 1
        engine.apply(side, decision.action)
