"""In-memory room store with per-room transactions and change notification.

Each room code gets its own write lock and its own condition variable,
kept while the room exists or a transaction or poller still holds them.
Writers serialize on the write lock; long-poll readers wait on the
condition, so a waiting poller never blocks a writer. Commits are
compare-and-swap on ``state_version``.
"""

import logging
import threading
from contextlib import contextmanager
from copy import deepcopy
from typing import Dict, Iterator, List, Optional

from unosync.engine.errors import RoomNotFound, VersionConflict
from unosync.rooms.models import Room

logger = logging.getLogger(__name__)


class _Slot:
    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.changed = threading.Condition()
        self.users = 0


class RoomStore:
    """Keyed record store for rooms. Reads return private copies."""

    def __init__(self) -> None:
        self._rooms: Dict[str, Room] = {}
        self._slots: Dict[str, _Slot] = {}
        self._registry = threading.Lock()

    @contextmanager
    def _using(self, code: str) -> Iterator[_Slot]:
        with self._registry:
            slot = self._slots.get(code)
            if slot is None:
                slot = self._slots[code] = _Slot()
            slot.users += 1
        try:
            yield slot
        finally:
            with self._registry:
                slot.users -= 1
                self._release(code)

    def _release(self, code: str) -> None:
        # Caller holds the registry lock
        slot = self._slots.get(code)
        if slot is not None and slot.users == 0 and code not in self._rooms:
            del self._slots[code]

    @contextmanager
    def transaction(self, code: str) -> Iterator[None]:
        """Hold the single-writer lock for ``code``."""
        with self._using(code) as slot, slot.lock:
            yield

    def get(self, code: str) -> Optional[Room]:
        with self._registry:
            room = self._rooms.get(code)
        return deepcopy(room) if room is not None else None

    def version(self, code: str) -> Optional[int]:
        with self._registry:
            room = self._rooms.get(code)
            return room.state_version if room is not None else None

    def codes(self) -> List[str]:
        with self._registry:
            return list(self._rooms)

    def insert(self, room: Room) -> None:
        with self._registry:
            if room.code in self._rooms:
                raise KeyError(f"Room {room.code} already exists")
            self._rooms[room.code] = deepcopy(room)
        self._notify(room.code)

    def commit(self, room: Room, expected_version: int) -> None:
        """Store ``room`` if the stored version is still ``expected_version``.

        A commit that keeps the version (heartbeats) is stored without waking
        pollers.
        """
        if room.state_version < expected_version:
            raise ValueError("state_version may not go backwards")
        with self._registry:
            current = self._rooms.get(room.code)
            if current is None:
                raise RoomNotFound(f"Room {room.code} not found")
            if current.state_version != expected_version:
                logger.warning(
                    "Rejected stale write to %s (base %d, stored %d)",
                    room.code, expected_version, current.state_version,
                )
                raise VersionConflict(room.code, expected_version, current.state_version)
            self._rooms[room.code] = deepcopy(room)
        if room.state_version > expected_version:
            self._notify(room.code)

    def delete(self, code: str) -> bool:
        with self._registry:
            existed = self._rooms.pop(code, None) is not None
        self._notify(code)
        with self._registry:
            self._release(code)
        return existed

    def wait_for_change(self, code: str, version: int, timeout: float) -> Optional[int]:
        """Block until ``code`` is past ``version`` or gone, at most ``timeout`` seconds.

        Returns the stored version, or None once the room is deleted.
        """
        def ready() -> bool:
            current = self.version(code)
            return current is None or current > version

        with self._using(code) as slot, slot.changed:
            slot.changed.wait_for(ready, timeout)
        return self.version(code)

    def tracked_codes(self) -> List[str]:
        """Codes that currently hold a lock and condition."""
        with self._registry:
            return list(self._slots)

    def _notify(self, code: str) -> None:
        with self._registry:
            slot = self._slots.get(code)
        if slot is None:
            # Nobody is waiting
            return
        with slot.changed:
            slot.changed.notify_all()
