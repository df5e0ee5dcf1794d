import pytest

from engine.cards import Suit
from engine.game import MatchOver
from engine.state import GamePhase, PlayerState, Side
from engine.view import build_player_view
from engine.win import detect_winner, has_won

from conftest import build_match, card


def test_has_won_needs_every_container_empty():
    assert has_won(PlayerState())
    assert not has_won(PlayerState(hand=[card(5)]))
    assert not has_won(PlayerState(hidden_reserve=[card(5)]))


def test_last_card_wins_and_the_match_ends(make_engine):
    engine = make_engine(
        human_hand=[card(9)],
        computer_hand=[card(4, Suit.SPADES)],
        stack=[card(3, Suit.CLUBS)],
        deck=[],
    )

    result = engine.play(Side.HUMAN, [0])

    assert result.winner is Side.HUMAN
    assert engine.match.winner is Side.HUMAN
    assert engine.match.phase is GamePhase.GAME_OVER
    assert engine.match.acting_side() is None
    assert engine.match.log[-1] == "human wins"

    view = build_player_view(engine.match)
    assert view.winner == "human"
    assert view.current_player is None


def test_no_win_while_the_deck_refills_the_hand(make_engine):
    engine = make_engine(human_hand=[card(9)], computer_hand=[card(4, Suit.SPADES)])

    result = engine.play(Side.HUMAN, [0])

    assert result.winner is None
    assert len(engine.match.player(Side.HUMAN).hand) == 3


def test_actions_after_the_win_are_rejected(make_engine):
    engine = make_engine(human_hand=[card(9)], computer_hand=[card(4, Suit.SPADES)], deck=[])
    engine.play(Side.HUMAN, [0])

    with pytest.raises(MatchOver):
        engine.take_stack(Side.COMPUTER)
    with pytest.raises(MatchOver):
        engine.play(Side.HUMAN, [0])


def test_acting_side_is_checked_first():
    match = build_match(deck=[])
    assert detect_winner(match, Side.COMPUTER) is Side.COMPUTER
    assert detect_winner(match, Side.HUMAN) is Side.HUMAN

    match = build_match(human_hand=[card(9)], deck=[])
    assert detect_winner(match, Side.HUMAN) is Side.COMPUTER
