"""Request/response records exchanged with clients."""

from unosync.api.schemas import (
    CardModel,
    CreateRoomRequest,
    DeleteReason,
    GameEvent,
    GameEventType,
    GameInfo,
    JoinRoomRequest,
    PlayCardRequest,
    PlayerInfo,
    PollRequest,
    RoomDeleted,
    RoomRequest,
    RoomResult,
    RoomSnapshot,
    SyncRequest,
    SyncResult,
    Unchanged,
)

__all__ = [
    "CardModel",
    "CreateRoomRequest",
    "DeleteReason",
    "GameEvent",
    "GameEventType",
    "GameInfo",
    "JoinRoomRequest",
    "PlayCardRequest",
    "PlayerInfo",
    "PollRequest",
    "RoomDeleted",
    "RoomRequest",
    "RoomResult",
    "RoomSnapshot",
    "SyncRequest",
    "SyncResult",
    "Unchanged",
]
