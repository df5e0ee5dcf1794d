"""Convenience service layer for the play server and tests."""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from random import Random
from typing import Callable, List, Optional, Sequence

from bots.advisor import ChatAdvisor
from bots.base import DecisionSource, complete_setup
from bots.oracle import OracleAdapter, OracleExhausted

from .actions import ProposedAction
from .cards import Card
from .game import MatchEngine, PhaseError, TurnResult
from .rules_schema import DEFAULT_RULES, RuleSet
from .snapshot import restore_match, snapshot_match
from .state import GamePhase, Match, Side
from .store import InMemorySnapshotStore, SnapshotStore
from .view import PlayerView, build_player_view

logger = logging.getLogger(__name__)


@dataclass
class ComputerTurnReport:
    results: List[TurnResult] = field(default_factory=list)
    notices: List[str] = field(default_factory=list)
    attempts: int = 0


class MatchService:
    """Facade around one match: human intents, computer turns, persistence.

    Every mutating call holds the match lock, so only one oracle query is in
    flight per match and snapshots are never written during play.
    """

    def __init__(
        self,
        match_id: str,
        engine: MatchEngine,
        *,
        source: DecisionSource,
        store: Optional[SnapshotStore] = None,
        advisor: Optional[ChatAdvisor] = None,
    ) -> None:
        self.match_id = match_id
        self.engine = engine
        self.source = source
        self.store = store if store is not None else InMemorySnapshotStore()
        self.advisor = advisor
        self.oracle = OracleAdapter(source, rules=engine.rules)
        self._lock = threading.RLock()

    # Session lifecycle -------------------------------------------------

    @classmethod
    def start(
        cls,
        *,
        source: DecisionSource,
        match_id: Optional[str] = None,
        seed: Optional[int] = None,
        deck: Optional[Sequence[Card]] = None,
        store: Optional[SnapshotStore] = None,
        advisor: Optional[ChatAdvisor] = None,
        rules: RuleSet = DEFAULT_RULES,
    ) -> "MatchService":
        engine = MatchEngine.new_match(rng=Random(seed), deck=deck, rules=rules)
        service = cls(match_id or uuid.uuid4().hex, engine, source=source, store=store, advisor=advisor)
        with service._lock:
            service._computer_setup()
            service._persist()
        logger.info("Started match %s", service.match_id)
        return service

    @classmethod
    def resume(
        cls,
        match_id: str,
        *,
        source: DecisionSource,
        store: SnapshotStore,
        advisor: Optional[ChatAdvisor] = None,
        rules: RuleSet = DEFAULT_RULES,
    ) -> Optional["MatchService"]:
        snapshot = store.load(match_id)
        if snapshot is None:
            return None
        engine = MatchEngine(match=restore_match(snapshot), rules=rules)
        logger.info("Resumed match %s in phase %s", match_id, engine.match.phase)
        return cls(match_id, engine, source=source, store=store, advisor=advisor)

    def reset(self, seed: Optional[int] = None) -> PlayerView:
        with self._lock:
            self.store.clear(self.match_id)
            self.engine = MatchEngine.new_match(rng=Random(seed), rules=self.engine.rules)
            self._computer_setup()
            self._persist()
            return self.view()

    @property
    def match(self) -> Match:
        return self.engine.match

    def view(self) -> PlayerView:
        return build_player_view(self.engine.match, Side.HUMAN)

    # Human intents -----------------------------------------------------

    def select_hidden_reserve(self, indexes: Sequence[int]) -> PlayerView:
        with self._lock:
            self.engine.select_hidden_reserve(Side.HUMAN, indexes)
            self._computer_setup()
            self._persist()
            return self.view()

    def add_visible_placement(self, indexes: Sequence[int]) -> PlayerView:
        with self._lock:
            self.engine.add_visible_placement(Side.HUMAN, indexes)
            self._persist()
            return self.view()

    def play(self, indexes: Sequence[int]) -> PlayerView:
        return self._human_turn(lambda: self.engine.play(Side.HUMAN, list(indexes)))

    def take_stack(self) -> PlayerView:
        return self._human_turn(lambda: self.engine.take_stack(Side.HUMAN))

    def reveal_hidden(self, index: int) -> PlayerView:
        return self._human_turn(lambda: self.engine.reveal_hidden(Side.HUMAN, index))

    def submit(self, action: ProposedAction) -> PlayerView:
        """Apply an already validated action for the human."""
        return self._human_turn(lambda: self.engine.apply(Side.HUMAN, action))

    def _human_turn(self, step: Callable[[], TurnResult]) -> PlayerView:
        with self._lock:
            step()
            self._persist()
            return self.view()

    # Computer ----------------------------------------------------------

    def play_computer_turn(self) -> ComputerTurnReport:
        """Drive the computer until its turn ends, including Ace chains."""
        with self._lock:
            match = self.engine.match
            if match.phase is not GamePhase.COMPUTER_TURN:
                raise PhaseError(f"It is not the computer's turn (phase {match.phase}).")

            report = ComputerTurnReport()
            while match.phase is GamePhase.COMPUTER_TURN:
                try:
                    decision = self.oracle.decide(match, Side.COMPUTER)
                    action = decision.action
                    report.attempts += decision.attempts
                except OracleExhausted as exc:
                    report.attempts += exc.attempts
                    notice = f"The computer could not decide on a move ({exc.last_error}); it takes the stack."
                    report.notices.append(notice)
                    match.log.append(notice)
                    action = ProposedAction.take_stack("Fallback after the decision source failed.")
                report.results.append(self.engine.apply(Side.COMPUTER, action))
                self._persist()
            return report

    def chat(self, message: str) -> str:
        if self.advisor is None:
            raise RuntimeError("No advisor is configured for this match.")
        with self._lock:
            reply = self.advisor.ask(self.engine.match, message)
            self._persist()
            return reply

    # Helpers -----------------------------------------------------------

    def _computer_setup(self) -> None:
        complete_setup(self.engine, Side.COMPUTER, self.source)

    def _persist(self) -> None:
        if self.engine.match.phase is GamePhase.GAME_OVER:
            self.store.clear(self.match_id)
            return
        self.store.save(self.match_id, snapshot_match(self.engine.match))
