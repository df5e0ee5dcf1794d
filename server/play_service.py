"""REST service to play Misfits against the computer."""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import asdict
from pathlib import Path
from typing import Callable, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from bots.advisor import ChatAdvisor
from bots.base import DecisionSource
from bots.baseline_lowest import LowestPlacementSource
from engine.placement import RuleViolation
from engine.rules_schema import RuleSet, load_rules
from engine.service import ComputerTurnReport, MatchService
from engine.state import InvariantViolation
from engine.store import InMemorySnapshotStore, JsonFileSnapshotStore, SnapshotStore
from engine.view import PlayerView

logger = logging.getLogger(__name__)


class StartRequest(BaseModel):
    seed: Optional[int] = None


class IndexesRequest(BaseModel):
    indexes: List[int] = Field(min_length=1)


class HiddenRequest(BaseModel):
    index: int


class ChatRequest(BaseModel):
    message: str = Field(min_length=1, max_length=2000)


class ResetRequest(BaseModel):
    seed: Optional[int] = None


def _default_store() -> SnapshotStore:
    directory = os.environ.get("MISFITS_STORE_DIR")
    if directory:
        return JsonFileSnapshotStore(Path(directory))
    return InMemorySnapshotStore()


def create_app(
    *,
    source_factory: Callable[[], DecisionSource] = LowestPlacementSource,
    store: Optional[SnapshotStore] = None,
    advisor: Optional[ChatAdvisor] = None,
    rules: Optional[RuleSet] = None,
) -> FastAPI:
    rules = rules or load_rules(os.environ.get("MISFITS_RULES"))
    store = store if store is not None else _default_store()
    sessions: Dict[str, MatchService] = {}
    # One MatchService per match id, even when requests race to resume it.
    sessions_lock = threading.Lock()

    app = FastAPI(title="Misfits Play Service")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.sessions = sessions
    app.state.store = store

    @app.exception_handler(RuleViolation)
    async def rule_violation_handler(_request, exc: RuleViolation) -> JSONResponse:
        return JSONResponse(status_code=400, content={"rule": exc.rule, "message": str(exc)})

    def abandon(match_id: str, exc: InvariantViolation) -> HTTPException:
        logger.error("Match %s aborted: %s", match_id, exc)
        sessions.pop(match_id, None)
        store.clear(match_id)
        return HTTPException(status_code=500, detail="Match state corrupted; the match was abandoned")

    def ensure_session(match_id: str) -> MatchService:
        with sessions_lock:
            session = sessions.get(match_id)
            if session is not None:
                return session
            try:
                session = MatchService.resume(
                    match_id, source=source_factory(), store=store, advisor=advisor, rules=rules
                )
            except InvariantViolation as exc:
                raise abandon(match_id, exc) from exc
            except ValueError as exc:
                raise HTTPException(status_code=404, detail="Match not found") from exc
            if session is None:
                raise HTTPException(status_code=404, detail="Match not found")
            sessions[match_id] = session
            return session

    def guarded(match_id: str, step: Callable[[MatchService], object]) -> object:
        session = ensure_session(match_id)
        try:
            return step(session)
        except InvariantViolation as exc:
            with sessions_lock:
                raise abandon(match_id, exc) from exc

    def state_payload(view: PlayerView) -> Dict[str, object]:
        return asdict(view)

    @app.post("/match/start")
    def start_match(request: StartRequest) -> Dict[str, object]:
        session = MatchService.start(
            source=source_factory(), seed=request.seed, store=store, advisor=advisor, rules=rules
        )
        with sessions_lock:
            sessions[session.match_id] = session
        return {"match_id": session.match_id, "state": state_payload(session.view())}

    @app.get("/match/{match_id}")
    def get_match(match_id: str) -> Dict[str, object]:
        return {"state": state_payload(ensure_session(match_id).view())}

    @app.post("/match/{match_id}/hidden-reserve")
    def choose_hidden_reserve(match_id: str, request: IndexesRequest) -> Dict[str, object]:
        view = guarded(match_id, lambda s: s.select_hidden_reserve(request.indexes))
        return {"state": state_payload(view)}

    @app.post("/match/{match_id}/visible-reserve")
    def add_visible_reserve(match_id: str, request: IndexesRequest) -> Dict[str, object]:
        view = guarded(match_id, lambda s: s.add_visible_placement(request.indexes))
        return {"state": state_payload(view)}

    @app.post("/match/{match_id}/play")
    def play_cards(match_id: str, request: IndexesRequest) -> Dict[str, object]:
        view = guarded(match_id, lambda s: s.play(request.indexes))
        return {"state": state_payload(view)}

    @app.post("/match/{match_id}/take-stack")
    def take_stack(match_id: str) -> Dict[str, object]:
        view = guarded(match_id, lambda s: s.take_stack())
        return {"state": state_payload(view)}

    @app.post("/match/{match_id}/hidden")
    def reveal_hidden(match_id: str, request: HiddenRequest) -> Dict[str, object]:
        view = guarded(match_id, lambda s: s.reveal_hidden(request.index))
        return {"state": state_payload(view)}

    @app.post("/match/{match_id}/computer-turn")
    def computer_turn(match_id: str) -> Dict[str, object]:
        session = ensure_session(match_id)
        report: ComputerTurnReport = guarded(match_id, lambda s: s.play_computer_turn())
        return {
            "state": state_payload(session.view()),
            "actions": [result.describe() for result in report.results],
            "notices": report.notices,
        }

    @app.post("/match/{match_id}/chat")
    def chat(match_id: str, request: ChatRequest) -> Dict[str, object]:
        session = ensure_session(match_id)
        if session.advisor is None:
            raise HTTPException(status_code=404, detail="No advisor configured")
        return {"message": guarded(match_id, lambda s: s.chat(request.message))}

    @app.post("/match/{match_id}/reset")
    def reset_match(match_id: str, request: ResetRequest) -> Dict[str, object]:
        view = guarded(match_id, lambda s: s.reset(request.seed))
        return {"state": state_payload(view)}

    return app


app = create_app()
