"""Rooms: storage, deferred tasks and the action surface."""

from unosync.rooms.models import Player, Room, RoomStatus
from unosync.rooms.scheduler import ScheduledTask, Scheduler
from unosync.rooms.service import RoomService
from unosync.rooms.store import RoomStore

__all__ = [
    "Player",
    "Room",
    "RoomStatus",
    "RoomService",
    "RoomStore",
    "ScheduledTask",
    "Scheduler",
]
