"""Full-state snapshots exchanged with the persistence collaborator."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from .cards import Card, Suit
from .placement import Placement, validate_placement
from .state import ChatMessage, GamePhase, Match, PlayerState, Side, check_conservation

SNAPSHOT_VERSION = 1


class CardModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    suit: Suit
    rank: StrictInt = Field(ge=2, le=14)

    @classmethod
    def from_card(cls, card: Card) -> "CardModel":
        return cls(suit=card.suit, rank=card.rank)

    def to_card(self) -> Card:
        return Card(self.suit, self.rank)


class PlacementModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: Literal["single", "multiple", "straight"]
    cards: List[CardModel] = Field(min_length=1)


class PlayerModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    hand: List[CardModel] = Field(default_factory=list)
    hidden_reserve: List[CardModel] = Field(default_factory=list)
    visible_reserve: List[PlacementModel] = Field(default_factory=list)


class ChatMessageModel(BaseModel):
    role: Literal["player", "assistant"]
    content: str


class MatchSnapshot(BaseModel):
    model_config = ConfigDict(extra="forbid")

    version: int = SNAPSHOT_VERSION
    deck: List[CardModel]
    stack: List[CardModel] = Field(default_factory=list)
    discard: List[CardModel] = Field(default_factory=list)
    human: PlayerModel
    computer: PlayerModel
    phase: GamePhase
    owes_placement: bool = False
    winner: Optional[Side] = None
    chat_history: List[ChatMessageModel] = Field(default_factory=list)
    log: List[str] = Field(default_factory=list)


def _cards(cards: List[Card]) -> List[CardModel]:
    return [CardModel.from_card(card) for card in cards]


def _player_model(player: PlayerState) -> PlayerModel:
    return PlayerModel(
        hand=_cards(player.hand),
        hidden_reserve=_cards(player.hidden_reserve),
        visible_reserve=[
            PlacementModel(type=placement.kind.value, cards=_cards(list(placement.cards)))
            for placement in player.visible_reserve
        ],
    )


def _restore_placement(model: PlacementModel) -> Placement:
    placement = validate_placement([card.to_card() for card in model.cards])
    if placement is None or placement.kind.value != model.type:
        raise ValueError(f"Snapshot holds a malformed {model.type} placement.")
    return placement


def _restore_player(model: PlayerModel) -> PlayerState:
    return PlayerState(
        hand=[card.to_card() for card in model.hand],
        hidden_reserve=[card.to_card() for card in model.hidden_reserve],
        visible_reserve=[_restore_placement(placement) for placement in model.visible_reserve],
    )


def snapshot_match(match: Match) -> MatchSnapshot:
    return MatchSnapshot(
        deck=_cards(match.deck),
        stack=_cards(match.stack),
        discard=_cards(match.discard),
        human=_player_model(match.player(Side.HUMAN)),
        computer=_player_model(match.player(Side.COMPUTER)),
        phase=match.phase,
        owes_placement=match.owes_placement,
        winner=match.winner,
        chat_history=[ChatMessageModel(role=m.role, content=m.content) for m in match.chat_history],
        log=list(match.log),
    )


def restore_match(snapshot: MatchSnapshot) -> Match:
    """Rebuild a Match from a snapshot. Raises InvariantViolation on corrupted card sets."""
    match = Match(
        deck=[card.to_card() for card in snapshot.deck],
        stack=[card.to_card() for card in snapshot.stack],
        discard=[card.to_card() for card in snapshot.discard],
        phase=snapshot.phase,
        players={
            Side.HUMAN: _restore_player(snapshot.human),
            Side.COMPUTER: _restore_player(snapshot.computer),
        },
        owes_placement=snapshot.owes_placement,
        winner=snapshot.winner,
        chat_history=[ChatMessage(role=m.role, content=m.content) for m in snapshot.chat_history],
        log=list(snapshot.log),
    )
    check_conservation(match)
    return match
