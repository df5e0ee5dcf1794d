"""Decision oracle adapter: validate and retry a source's proposed action."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from pydantic import ValidationError

from engine.actions import ActionKind, ProposedAction
from engine.placement import RuleViolation, can_play_on_stack, cards_at, shape_problem, validate_placement
from engine.reserve import ensure_hidden_draw_allowed
from engine.rules_schema import DEFAULT_RULES, RuleSet
from engine.state import Match, Side
from engine.view import build_state_view

from .base import DecisionSource, Message, OracleError, OracleTransportError, RawAnswer
from .prompts import render_state_prompt, retry_feedback

logger = logging.getLogger(__name__)


class OracleSchemaError(OracleError):
    """The answer is not a well-formed action object."""


class OracleSemanticError(OracleError):
    """The answer is well formed but not legal in the current match."""


class OracleExhausted(OracleError):
    """Every attempt failed."""

    def __init__(self, attempts: int, last_error: str) -> None:
        super().__init__(f"Decision source failed after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


@dataclass
class OracleFailure:
    attempt: int
    kind: str
    reason: str
    answer: Optional[str] = None


@dataclass
class OracleDecision:
    action: ProposedAction
    attempts: int
    failures: List[OracleFailure] = field(default_factory=list)


def _answer_text(raw: RawAnswer) -> str:
    if isinstance(raw, str):
        return raw
    try:
        return json.dumps(raw)
    except (TypeError, ValueError):
        return repr(raw)


def _describe_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "invalid value")
    if location:
        return f"{location}: {message}"
    return message


def parse_answer(raw: RawAnswer) -> ProposedAction:
    """Structural validation. Raises OracleSchemaError."""
    payload: Any = raw
    if isinstance(raw, (str, bytes)):
        try:
            payload = json.loads(raw)
        except ValueError as exc:
            raise OracleSchemaError(f"the answer is not valid JSON ({exc})") from exc
    if not isinstance(payload, Mapping):
        raise OracleSchemaError("the answer must be a JSON object")
    try:
        return ProposedAction.model_validate(dict(payload))
    except ValidationError as exc:
        raise OracleSchemaError(f"schema validation failed, {_describe_validation_error(exc)}") from exc


def check_semantics(match: Match, side: Side, action: ProposedAction, rules: RuleSet = DEFAULT_RULES) -> None:
    """Legality of a well-formed action against the live match. Raises OracleSemanticError."""
    player = match.player(side)
    if action.action is ActionKind.PLAY:
        try:
            cards = cards_at(player.hand, action.indexes or [])
        except RuleViolation as exc:
            raise OracleSemanticError(str(exc)) from exc
        placement = validate_placement(cards, min_straight_length=rules.min_straight_length)
        if placement is None:
            problem = shape_problem(cards, min_straight_length=rules.min_straight_length)
            raise OracleSemanticError(f"the placement {problem}")
        if not can_play_on_stack(placement, match.stack):
            raise OracleSemanticError(
                f"the lowest card (rank {placement.low.rank}) is below the top of the stack "
                f"(rank {match.stack[-1].rank})"
            )
    elif action.action is ActionKind.HIDDEN:
        assert action.indexes is not None
        try:
            ensure_hidden_draw_allowed(match, side, action.indexes[0])
        except RuleViolation as exc:
            raise OracleSemanticError(str(exc)) from exc


class OracleAdapter:
    """Query a decision source until it proposes a legal action.

    Each failed attempt appends the invalid answer and a one-line reason to
    the conversation so a generative source can correct itself.
    """

    def __init__(
        self,
        source: DecisionSource,
        *,
        max_attempts: Optional[int] = None,
        rules: RuleSet = DEFAULT_RULES,
    ) -> None:
        self.source = source
        self.rules = rules
        self.max_attempts = max_attempts if max_attempts is not None else rules.oracle_max_attempts
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def decide(self, match: Match, side: Side) -> OracleDecision:
        view = build_state_view(match, side)
        conversation: List[Message] = [Message(role="user", content=render_state_prompt(view))]
        failures: List[OracleFailure] = []

        for attempt in range(1, self.max_attempts + 1):
            try:
                raw = self.source.propose(view, list(conversation))
            except OracleTransportError as exc:
                failures.append(OracleFailure(attempt=attempt, kind="transport", reason=str(exc)))
                logger.warning("Attempt %d/%d: %s", attempt, self.max_attempts, exc)
                continue

            answer = _answer_text(raw)
            try:
                action = parse_answer(raw)
                check_semantics(match, side, action, self.rules)
            except OracleSchemaError as exc:
                failure = OracleFailure(attempt=attempt, kind="schema", reason=str(exc), answer=answer)
            except OracleSemanticError as exc:
                failure = OracleFailure(attempt=attempt, kind="semantic", reason=str(exc), answer=answer)
            else:
                logger.debug("%s chose %s on attempt %d", side, action.to_payload(), attempt)
                return OracleDecision(action=action, attempts=attempt, failures=failures)

            failures.append(failure)
            logger.warning("Attempt %d/%d: %s", attempt, self.max_attempts, failure.reason)
            conversation.append(Message(role="assistant", content=answer))
            conversation.append(Message(role="user", content=retry_feedback(failure.reason)))

        last_error = failures[-1].reason if failures else "no answer"
        logger.error("All %d attempts failed. Last error: %s", self.max_attempts, last_error)
        raise OracleExhausted(self.max_attempts, last_error)
