import pytest

from engine.cards import ACE, KING, QUEEN, Suit
from engine.game import NotYourTurn
from engine.placement import IllegalForStack, InvalidIndexes, InvalidShape
from engine.snapshot import snapshot_match
from engine.state import GamePhase, Side

from conftest import card


def test_ace_clears_stack_and_player_places_again(make_engine):
    engine = make_engine(
        human_hand=[card(ACE, Suit.HEARTS), card(5, Suit.CLUBS), card(9, Suit.DIAMONDS)],
        computer_hand=[card(4, Suit.SPADES), card(6, Suit.SPADES), card(8, Suit.SPADES)],
        stack=[card(KING, Suit.CLUBS), card(10, Suit.CLUBS)],
    )
    discarded_before = len(engine.match.discard)

    result = engine.play(Side.HUMAN, [0])

    assert result.cleared
    assert result.owes_placement
    assert engine.match.stack == []
    assert len(engine.match.discard) == discarded_before + 3
    assert engine.match.phase is GamePhase.PLAYER_TURN
    assert engine.match.owes_placement


def test_two_aces_then_a_third_placement_in_one_turn(make_engine):
    engine = make_engine(
        human_hand=[card(ACE, Suit.HEARTS), card(ACE, Suit.SPADES), card(5, Suit.CLUBS), card(9, Suit.DIAMONDS)],
        computer_hand=[card(4, Suit.SPADES), card(6, Suit.SPADES), card(8, Suit.SPADES)],
        stack=[card(KING, Suit.CLUBS)],
    )
    hand = engine.match.player(Side.HUMAN).hand

    engine.play(Side.HUMAN, [hand.index(card(ACE, Suit.HEARTS))])
    assert engine.match.phase is GamePhase.PLAYER_TURN
    engine.play(Side.HUMAN, [hand.index(card(ACE, Suit.SPADES))])
    assert engine.match.phase is GamePhase.PLAYER_TURN
    assert engine.match.owes_placement

    result = engine.play(Side.HUMAN, [hand.index(card(5, Suit.CLUBS))])

    assert not result.cleared
    assert engine.match.stack == [card(5, Suit.CLUBS)]
    assert engine.match.phase is GamePhase.COMPUTER_TURN
    assert not engine.match.owes_placement


def test_taking_the_stack_ends_the_chain(make_engine):
    engine = make_engine(
        human_hand=[card(ACE, Suit.HEARTS), card(5, Suit.CLUBS), card(9, Suit.DIAMONDS)],
        computer_hand=[card(4, Suit.SPADES)],
        stack=[card(KING, Suit.CLUBS)],
    )
    engine.play(Side.HUMAN, [0])

    result = engine.take_stack(Side.HUMAN)

    assert result.picked_up == 0
    assert engine.match.phase is GamePhase.COMPUTER_TURN
    assert not engine.match.owes_placement


def test_ace_in_a_straight_clears_too(make_engine):
    engine = make_engine(
        human_hand=[card(QUEEN), card(KING), card(ACE), card(3, Suit.CLUBS)],
        computer_hand=[card(4, Suit.SPADES)],
        stack=[card(10, Suit.CLUBS)],
    )

    result = engine.play(Side.HUMAN, [0, 1, 2])

    assert result.placement.low.rank == QUEEN
    assert result.cleared
    assert engine.match.stack == []
    assert engine.match.phase is GamePhase.PLAYER_TURN


@pytest.mark.parametrize(
    "indexes, error",
    [
        ([0, 1], InvalidShape),
        ([1], IllegalForStack),
        ([0, 0], InvalidIndexes),
        ([7], InvalidIndexes),
    ],
)
def test_rejected_placements_leave_the_match_unchanged(make_engine, indexes, error):
    engine = make_engine(
        human_hand=[card(9, Suit.HEARTS), card(4, Suit.CLUBS), card(KING, Suit.DIAMONDS)],
        computer_hand=[card(4, Suit.SPADES)],
        stack=[card(8, Suit.CLUBS)],
    )
    before = snapshot_match(engine.match)

    with pytest.raises(error):
        engine.play(Side.HUMAN, indexes)

    assert snapshot_match(engine.match) == before


def test_out_of_turn_action_is_rejected(make_engine):
    engine = make_engine(
        human_hand=[card(9, Suit.HEARTS)],
        computer_hand=[card(4, Suit.SPADES)],
    )
    before = snapshot_match(engine.match)

    with pytest.raises(NotYourTurn):
        engine.play(Side.COMPUTER, [0])
    with pytest.raises(NotYourTurn):
        engine.take_stack(Side.COMPUTER)

    assert snapshot_match(engine.match) == before


def test_pickup_on_empty_stack_passes_the_turn(make_engine):
    engine = make_engine(human_hand=[card(9, Suit.HEARTS)], computer_hand=[card(4, Suit.SPADES)])

    result = engine.take_stack(Side.HUMAN)

    assert result.picked_up == 0
    assert engine.match.phase is GamePhase.COMPUTER_TURN
    assert "took the stack (0 cards)" in engine.match.log[-1]
