import pytest

from bots.baseline_lowest import LowestPlacementSource
from engine.cards import Suit
from engine.game import MatchEngine, NotYourTurn, PhaseError
from engine.placement import InvalidShape
from engine.snapshot import snapshot_match
from engine.service import MatchService
from engine.state import GamePhase, Side
from engine.store import InMemorySnapshotStore

from conftest import build_match, card


def started_service(store=None, seed=7):
    return MatchService.start(source=LowestPlacementSource(), seed=seed, store=store or InMemorySnapshotStore())


def finish_setup(service):
    service.select_hidden_reserve([0, 1, 2])
    for _ in range(3):
        service.add_visible_placement([0])


def test_start_makes_the_computer_setup_choices():
    store = InMemorySnapshotStore()
    service = started_service(store)

    match = service.match
    assert match.phase is GamePhase.SELECTING_HIDDEN_RESERVE
    assert len(match.player(Side.COMPUTER).hidden_reserve) == 3
    assert match.player(Side.HUMAN).hidden_reserve == []
    assert service.match_id in store

    view = service.select_hidden_reserve([0, 1, 2])
    assert view.phase == "selecting-visible-reserve"
    assert len(match.player(Side.COMPUTER).visible_reserve) == 3


def test_full_setup_then_turns():
    service = started_service()
    finish_setup(service)
    assert service.view().current_player == "human"

    with pytest.raises(PhaseError):
        service.play_computer_turn()

    view = service.take_stack()
    assert view.current_player == "computer"
    with pytest.raises(NotYourTurn):
        service.take_stack()

    report = service.play_computer_turn()

    assert report.results
    assert report.attempts >= len(report.results)
    assert all(result.side is Side.COMPUTER for result in report.results)
    assert service.match.phase in (GamePhase.PLAYER_TURN, GamePhase.GAME_OVER)


def test_empty_play_is_a_shape_violation():
    store = InMemorySnapshotStore()
    service = started_service(store)
    finish_setup(service)
    before = store.load(service.match_id)

    with pytest.raises(InvalidShape):
        service.play([])

    assert store.load(service.match_id) == before
    assert service.view().current_player == "human"


def test_resume_restores_the_saved_match():
    store = InMemorySnapshotStore()
    service = started_service(store)
    finish_setup(service)

    resumed = MatchService.resume(service.match_id, source=LowestPlacementSource(), store=store)

    assert resumed is not None
    assert snapshot_match(resumed.match) == snapshot_match(service.match)
    assert MatchService.resume("missing", source=LowestPlacementSource(), store=store) is None


def test_reset_deals_a_new_match():
    store = InMemorySnapshotStore()
    service = started_service(store)
    finish_setup(service)

    view = service.reset(seed=9)

    assert view.phase == "selecting-hidden-reserve"
    assert view.hand_size == 9
    assert service.match_id in store


def test_finished_match_is_removed_from_the_store():
    store = InMemorySnapshotStore()
    match = build_match(human_hand=[card(9)], computer_hand=[card(4, Suit.SPADES)], deck=[])
    store.save("done", snapshot_match(match))
    service = MatchService("done", MatchEngine(match=match), source=LowestPlacementSource(), store=store)

    view = service.play([0])

    assert view.winner == "human"
    assert view.phase == "game-over"
    assert "done" not in store


def test_chat_requires_an_advisor():
    with pytest.raises(RuntimeError):
        started_service().chat("hello")
