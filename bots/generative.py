"""Decision source backed by an externally queried generative model."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol, Sequence

from engine.actions import action_json_schema
from engine.view import StateView

from .base import DecisionSource, Message, OracleTransportError, RawAnswer
from .prompts import ORACLE_INSTRUCTIONS

logger = logging.getLogger(__name__)


class CompletionClient(Protocol):
    """Transport to a generative model. Returns the model's text output.

    Any exception raised by ``complete`` is treated as a transport failure:
    the decision source reports it as ``OracleTransportError`` so the oracle
    retries, and the advisor answers with its fallback reply.
    """

    def complete(
        self,
        *,
        instructions: str,
        messages: Sequence[Message],
        response_schema: Optional[Dict[str, Any]] = None,
    ) -> str:
        ...


class GenerativeSource(DecisionSource):
    name = "Generative"

    def __init__(self, client: CompletionClient, *, instructions: str = ORACLE_INSTRUCTIONS) -> None:
        self.client = client
        self.instructions = instructions

    def propose(self, view: StateView, conversation: Sequence[Message]) -> RawAnswer:
        try:
            text = self.client.complete(
                instructions=self.instructions,
                messages=list(conversation),
                response_schema=action_json_schema(),
            )
        except OracleTransportError:
            raise
        except Exception as exc:
            raise OracleTransportError(f"Completion call failed: {exc!r}") from exc
        if not text or not text.strip():
            raise OracleTransportError("No output text received from the model")
        logger.debug("Model answered: %s", text)
        return text
