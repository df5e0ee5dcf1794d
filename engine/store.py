"""Snapshot persistence collaborators."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

from .snapshot import MatchSnapshot

logger = logging.getLogger(__name__)

_MATCH_ID = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


class SnapshotStore(Protocol):
    def load(self, match_id: str) -> Optional[MatchSnapshot]:
        ...

    def save(self, match_id: str, snapshot: MatchSnapshot) -> None:
        ...

    def clear(self, match_id: str) -> None:
        ...


class InMemorySnapshotStore:
    def __init__(self) -> None:
        self._snapshots: Dict[str, str] = {}

    def load(self, match_id: str) -> Optional[MatchSnapshot]:
        payload = self._snapshots.get(match_id)
        if payload is None:
            return None
        return MatchSnapshot.model_validate_json(payload)

    def save(self, match_id: str, snapshot: MatchSnapshot) -> None:
        self._snapshots[match_id] = snapshot.model_dump_json()

    def clear(self, match_id: str) -> None:
        self._snapshots.pop(match_id, None)

    def __contains__(self, match_id: str) -> bool:
        return match_id in self._snapshots


class JsonFileSnapshotStore:
    """One JSON file per match under a directory."""

    def __init__(self, directory: Union[str, Path]) -> None:
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, match_id: str) -> Path:
        if not _MATCH_ID.match(match_id):
            raise ValueError(f"Invalid match id: {match_id!r}")
        return self.directory / f"{match_id}.json"

    def load(self, match_id: str) -> Optional[MatchSnapshot]:
        path = self._path(match_id)
        if not path.exists():
            return None
        return MatchSnapshot.model_validate_json(path.read_text(encoding="utf-8"))

    def save(self, match_id: str, snapshot: MatchSnapshot) -> None:
        path = self._path(match_id)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(snapshot.model_dump_json(indent=2), encoding="utf-8")
        tmp.replace(path)
        logger.debug("Saved snapshot for match %s", match_id)

    def clear(self, match_id: str) -> None:
        path = self._path(match_id)
        if path.exists():
            path.unlink()
