"""Validation schema for Misfits rules configuration."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RuleSet(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    hand_minimum: int = Field(3, ge=0, description="Hands are refilled to this size while the deck lasts.")
    initial_deal: int = Field(9, ge=1, description="Cards dealt to each player before reserves are chosen.")
    hidden_reserve_size: int = Field(3, ge=1, description="Face-down cards each player sets aside.")
    visible_reserve_placements: int = Field(3, ge=1, description="Placements each player lays face up.")
    min_straight_length: int = Field(3, ge=2, description="Shortest run accepted as a straight.")
    oracle_max_attempts: int = Field(5, ge=1, description="Attempts the oracle gets before the fallback.")

    @model_validator(mode="after")
    def check_deal_covers_reserves(self) -> "RuleSet":
        if self.initial_deal * 2 > 52:
            raise ValueError("Initial deal cannot exceed half of the deck.")
        if self.hidden_reserve_size + self.visible_reserve_placements > self.initial_deal:
            raise ValueError("Initial deal is too small to build both reserves.")
        return self


DEFAULT_RULES = RuleSet()


def load_rules(path: Optional[Union[str, Path]] = None) -> RuleSet:
    """Read a RuleSet from a JSON file, or return the defaults."""
    if path is None:
        return DEFAULT_RULES
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    return RuleSet.model_validate(payload)
