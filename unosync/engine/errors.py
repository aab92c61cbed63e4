"""Errors raised by the engine and the room service."""


class UnoError(Exception):
    """Base class for every rejected action."""

    code = "UNO_ERROR"


class InvalidRequest(UnoError, ValueError):
    """Missing or malformed request fields."""

    code = "INVALID_REQUEST"


class NotAuthorized(UnoError):
    """Requester may not perform this action (not your turn, not the host)."""

    code = "NOT_AUTHORIZED"


class IllegalMove(UnoError, ValueError):
    """The move breaks the game rules. State is left unchanged."""

    code = "ILLEGAL_MOVE"


class RoomNotFound(UnoError, LookupError):
    code = "ROOM_NOT_FOUND"


class PlayerNotFound(UnoError, LookupError):
    code = "PLAYER_NOT_FOUND"


class VersionConflict(UnoError):
    """A commit was attempted against a stale base version."""

    code = "VERSION_CONFLICT"

    def __init__(self, room_code: str, expected: int, actual: int):
        super().__init__(
            f"Room {room_code} moved from version {expected} to {actual}"
        )
        self.room_code = room_code
        self.expected = expected
        self.actual = actual
