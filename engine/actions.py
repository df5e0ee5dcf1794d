"""Action schema shared by move-intents and decision sources."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr, model_validator


class ActionKind(str, Enum):
    PLAY = "play"
    STACK = "stack"
    HIDDEN = "hidden"

    def __str__(self) -> str:
        return self.value


class ProposedAction(BaseModel):
    """One action: play hand cards, take the stack, or reveal a hidden card.

    ``indexes`` point into the acting hand for ``play`` and into the remaining
    hidden reserve for ``hidden``. They are dropped for ``stack``. ``rationale``
    is informational only.
    """

    model_config = ConfigDict(extra="forbid")

    action: ActionKind
    indexes: Optional[List[StrictInt]] = None
    rationale: StrictStr

    @model_validator(mode="after")
    def check_indexes_for_action(self) -> "ProposedAction":
        if self.action is ActionKind.PLAY and not self.indexes:
            raise ValueError("Action 'play' requires a non-empty 'indexes' array")
        if self.action is ActionKind.HIDDEN and (self.indexes is None or len(self.indexes) != 1):
            raise ValueError("Action 'hidden' requires an 'indexes' array with exactly one element")
        if self.action is ActionKind.STACK and self.indexes is not None:
            self.indexes = None
        return self

    @classmethod
    def play(cls, indexes: Sequence[int], rationale: str = "") -> "ProposedAction":
        return cls(action=ActionKind.PLAY, indexes=list(indexes), rationale=rationale)

    @classmethod
    def take_stack(cls, rationale: str = "") -> "ProposedAction":
        return cls(action=ActionKind.STACK, rationale=rationale)

    @classmethod
    def hidden(cls, index: int, rationale: str = "") -> "ProposedAction":
        return cls(action=ActionKind.HIDDEN, indexes=[index], rationale=rationale)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"action": self.action.value, "rationale": self.rationale}
        if self.indexes is not None:
            payload["indexes"] = list(self.indexes)
        return payload


def action_json_schema() -> Dict[str, Any]:
    """JSON schema handed to generative sources for structured output."""
    return {
        "type": "object",
        "properties": {
            "action": {"type": "string", "enum": [kind.value for kind in ActionKind]},
            "indexes": {"type": "array", "items": {"type": "integer"}},
            "rationale": {"type": "string"},
        },
        "required": ["action", "rationale"],
        "additionalProperties": False,
    }
