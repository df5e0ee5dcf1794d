import pytest

from bots.advisor import EMPTY_REPLY, FALLBACK_REPLY, ChatAdvisor
from bots.prompts import ADVISOR_INSTRUCTIONS
from engine.cards import KING, Suit

from conftest import build_match, card


class FakeClient:
    def __init__(self, reply):
        self.reply = reply
        self.calls = []

    def complete(self, *, instructions, messages, response_schema=None):
        self.calls.append({"instructions": instructions, "messages": list(messages)})
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply


def advisor_match():
    return build_match(
        human_hand=[card(4, Suit.HEARTS), card(9, Suit.CLUBS)],
        computer_hand=[card(KING, Suit.SPADES), card(2, Suit.DIAMONDS)],
        stack=[card(3, Suit.CLUBS)],
    )


def test_advisor_sees_only_what_the_player_sees():
    client = FakeClient("Get rid of the four while you can.")
    match = advisor_match()

    reply = ChatAdvisor(client).ask(match, "  What should I play?  ")

    assert reply == "Get rid of the four while you can."
    call = client.calls[0]
    assert call["instructions"] == ADVISOR_INSTRUCTIONS
    state = call["messages"][0].content
    assert '{"suit":"hearts","rank":4}' in state
    assert "Opponent's hand size: 2 cards" in state
    for message in call["messages"]:
        assert '"spades","rank":13' not in message.content
        assert '"diamonds","rank":2' not in message.content
    assert call["messages"][-1].content == "What should I play?"
    assert [(m.role, m.content) for m in match.chat_history] == [
        ("player", "What should I play?"),
        ("assistant", "Get rid of the four while you can."),
    ]


def test_history_is_replayed_on_the_next_question():
    client = FakeClient("Keep the nine.")
    match = advisor_match()
    advisor = ChatAdvisor(client)

    advisor.ask(match, "First?")
    advisor.ask(match, "Second?")

    roles = [m.role for m in client.calls[1]["messages"]]
    assert roles == ["user", "user", "assistant", "user"]


@pytest.mark.parametrize("error", [OSError("unreachable"), ValueError("malformed body"), RuntimeError("quota")])
def test_failed_call_returns_a_fallback_reply(error):
    match = advisor_match()

    reply = ChatAdvisor(FakeClient(error)).ask(match, "Help?")

    assert reply == FALLBACK_REPLY
    assert [m.role for m in match.chat_history] == ["player"]


def test_empty_reply_is_replaced():
    match = advisor_match()
    assert ChatAdvisor(FakeClient("  ")).ask(match, "Help?") == EMPTY_REPLY


def test_empty_question_is_rejected():
    with pytest.raises(ValueError):
        ChatAdvisor(FakeClient("unused")).ask(advisor_match(), "   ")
