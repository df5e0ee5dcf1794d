"""Strategy advisor the human can chat with during a match."""

from __future__ import annotations

import logging
from typing import List

from engine.state import ChatMessage, Match, Side
from engine.view import build_player_view

from .base import Message
from .generative import CompletionClient
from .prompts import ADVISOR_INSTRUCTIONS, render_player_state

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "Sorry, I ran into a problem while thinking about your question."
EMPTY_REPLY = "Sorry, I could not come up with an answer."


class ChatAdvisor:
    """Answers questions using only what the human player can see."""

    def __init__(self, client: CompletionClient, *, instructions: str = ADVISOR_INSTRUCTIONS) -> None:
        self.client = client
        self.instructions = instructions

    def ask(self, match: Match, question: str) -> str:
        question = question.strip()
        if not question:
            raise ValueError("Question must not be empty.")

        match.chat_history.append(ChatMessage(role="player", content=question))
        state_text = render_player_state(build_player_view(match, Side.HUMAN, log_tail=0))
        messages: List[Message] = [
            Message(
                role="user",
                content=f"{state_text}\n\n(The game state above is refreshed with every message. The conversation so far follows.)",
            )
        ]
        for entry in match.chat_history:
            messages.append(Message(role="user" if entry.role == "player" else "assistant", content=entry.content))

        try:
            reply = self.client.complete(instructions=self.instructions, messages=messages)
        except Exception as exc:
            logger.error("Advisor call failed: %r", exc)
            return FALLBACK_REPLY

        reply = (reply or "").strip() or EMPTY_REPLY
        match.chat_history.append(ChatMessage(role="assistant", content=reply))
        return reply
