"""
Request/response records for the room service.

Every action takes one request model and returns one of:
- RoomSnapshot: the room as the requesting player may see it
- Unchanged: the client already holds the latest state_version
- RoomDeleted: the room is gone; clients must stop polling it

Rejected actions raise (see unosync.engine.errors) instead of returning.
"""

import re
import time
import uuid
from enum import Enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from unosync.engine.card import Card, CardType, Color

ROOM_CODE_RE = re.compile(r"^[A-Z0-9]{3,10}$")


# =============================================================================
# Enums
# =============================================================================

class GameEventType(str, Enum):
    CARD_PLAYED = "CARD_PLAYED"
    CARD_DRAWN = "CARD_DRAWN"
    TURN_ADVANCED = "TURN_ADVANCED"
    UNO_CALLED = "UNO_CALLED"
    UNO_PENALTY = "UNO_PENALTY"
    WINNER_DECLARED = "WINNER_DECLARED"
    PLAYER_JOINED = "PLAYER_JOINED"
    PLAYER_LEFT = "PLAYER_LEFT"
    HOST_CHANGED = "HOST_CHANGED"
    ROOM_DELETED = "ROOM_DELETED"


class DeleteReason(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    HOST_LEFT = "HOST_LEFT"
    NO_PLAYERS = "NO_PLAYERS"
    DELETED = "DELETED"


# =============================================================================
# Shared Models
# =============================================================================

class CardModel(BaseModel):
    """Wire form of a card. Invalid combinations fail validation."""
    color: Color
    type: CardType
    number: Optional[int] = None

    model_config = {"from_attributes": True}

    @model_validator(mode="after")
    def _check_card(self) -> "CardModel":
        self.to_card()
        return self

    def to_card(self) -> Card:
        return Card(self.color, self.type, self.number)

    @classmethod
    def from_card(cls, card: Card) -> "CardModel":
        return cls(color=card.color, type=card.type, number=card.number)


class GameEvent(BaseModel):
    type: GameEventType
    player_id: Optional[str] = None
    data: dict[str, Any] = Field(default_factory=dict)
    timestamp: float = Field(default_factory=time.time)
    event_id: str = Field(default_factory=lambda: uuid.uuid4().hex)


class PlayerInfo(BaseModel):
    id: str
    name: str
    seat: Optional[int] = None
    is_host: bool = False
    is_spectator: bool = False
    card_count: int = 0
    uno_called: bool = False
    last_seen: float = 0.0
    hand: Optional[list[CardModel]] = Field(
        default=None, description="Only filled in for the requesting player"
    )


class GameInfo(BaseModel):
    top_card: Optional[CardModel] = None
    active_color: Color
    current_player: Optional[str] = None
    direction: int = 1
    pending_draws: int = 0
    pending_kind: Optional[CardType] = None
    draw_count: int = 0
    discard_count: int = 0
    player_order: list[str] = Field(default_factory=list)
    winner: Optional[str] = None
    winner_at: Optional[float] = None
    last_played_card: Optional[CardModel] = None
    last_play_id: Optional[str] = None
    history: list[str] = Field(default_factory=list)


# =============================================================================
# Request Models
# =============================================================================

class RoomRequest(BaseModel):
    room_code: str
    player_id: str = Field(min_length=1)

    @field_validator("room_code")
    @classmethod
    def _normalize_code(cls, value: str) -> str:
        code = value.strip().upper()
        if not ROOM_CODE_RE.match(code):
            raise ValueError("Room code must be 3-10 alphanumeric characters")
        return code


class CreateRoomRequest(RoomRequest):
    player_name: str = Field(min_length=1)


class JoinRoomRequest(RoomRequest):
    player_name: str = Field(min_length=1)
    spectator: bool = False


class PlayCardRequest(RoomRequest):
    card: CardModel
    chosen_color: Optional[Color] = None

    @field_validator("chosen_color")
    @classmethod
    def _playable_color(cls, value: Optional[Color]) -> Optional[Color]:
        if value is Color.WILD:
            raise ValueError("Chosen color must be red, blue, green or yellow")
        return value


class SyncRequest(RoomRequest):
    state_version: int = Field(default=0, description="Last version the client saw")


class PollRequest(SyncRequest):
    spectator: bool = False


# =============================================================================
# Response Models
# =============================================================================

class RoomSnapshot(BaseModel):
    type: Literal["ROOM"] = "ROOM"
    code: str
    host_id: str
    status: str
    state_version: int
    last_activity: float
    players: list[PlayerInfo] = Field(default_factory=list)
    game: Optional[GameInfo] = None
    events: list[GameEvent] = Field(default_factory=list)

    def player(self, player_id: str) -> Optional[PlayerInfo]:
        return next((p for p in self.players if p.id == player_id), None)


class Unchanged(BaseModel):
    type: Literal["UNCHANGED"] = "UNCHANGED"
    changed: bool = False
    state_version: int


class RoomDeleted(BaseModel):
    type: Literal["ROOM_DELETED"] = "ROOM_DELETED"
    reason: DeleteReason = DeleteReason.NOT_FOUND
    events: list[GameEvent] = Field(default_factory=list)


RoomResult = Union[RoomSnapshot, RoomDeleted]
SyncResult = Union[RoomSnapshot, Unchanged, RoomDeleted]
