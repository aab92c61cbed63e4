"""Rooms and the players seated in them."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Optional

from unosync.engine.game_state import GameState
from unosync.engine.turn_order import seat_order


class RoomStatus(str, Enum):
    LOBBY = "lobby"
    PLAYING = "playing"
    FINISHED = "finished"


@dataclass
class Player:
    id: str
    name: str
    seat: Optional[int] = None  # None for spectators
    is_host: bool = False
    is_spectator: bool = False
    last_seen: float = 0.0


@dataclass
class Room:
    """A room and everything it owns.

    While a game exists, ``state_version`` equals ``game.state_version``.
    Lobby changes (joins, leaves, host changes) bump both.
    """

    code: str
    host_id: str
    status: RoomStatus = RoomStatus.LOBBY
    players: Dict[str, Player] = field(default_factory=dict)
    game: Optional[GameState] = None
    state_version: int = 0
    last_activity: float = 0.0

    def seat_order(self) -> tuple[str, ...]:
        return seat_order(self.players.values())

    def next_seat(self) -> int:
        seats = [p.seat for p in self.players.values() if p.seat is not None]
        return max(seats, default=0) + 1

    def bump(self, now: float) -> None:
        """Record a lobby-level change."""
        self.state_version += 1
        self.last_activity = now
        if self.game is not None:
            self.game = replace(self.game, state_version=self.state_version, last_activity=now)

    def set_game(self, game: GameState) -> None:
        """Adopt a game transition, finishing the room if somebody won."""
        self.game = game
        self.state_version = game.state_version
        self.last_activity = game.last_activity
        if game.winner is not None:
            self.status = RoomStatus.FINISHED
