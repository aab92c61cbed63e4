"""Version-based sync and long-poll."""

import threading
import time

from unosync.api.schemas import (
    CreateRoomRequest,
    DeleteReason,
    JoinRoomRequest,
    PollRequest,
    RoomDeleted,
    RoomRequest,
    RoomSnapshot,
    SyncRequest,
    Unchanged,
)
from unosync.config import Settings

CODE = "SYNC1"


def open_room(service) -> None:
    service.create_room(CreateRoomRequest(room_code=CODE, player_id="H", player_name="h"))
    service.join_room(JoinRoomRequest(room_code=CODE, player_id="P", player_name="p"))


def test_sync_unchanged_when_up_to_date(service) -> None:
    open_room(service)
    result = service.sync(SyncRequest(room_code=CODE, player_id="P", state_version=1))
    assert isinstance(result, Unchanged)
    assert result.changed is False
    assert result.state_version == 1


def test_sync_returns_snapshot_when_behind(service) -> None:
    open_room(service)
    result = service.sync(SyncRequest(room_code=CODE, player_id="P", state_version=0))
    assert isinstance(result, RoomSnapshot)
    assert result.state_version == 1


def test_sync_sees_every_write(service) -> None:
    open_room(service)
    seen = 1
    service.start_game(RoomRequest(room_code=CODE, player_id="H"))
    result = service.sync(SyncRequest(room_code=CODE, player_id="P", state_version=seen))
    assert isinstance(result, RoomSnapshot)
    assert result.state_version > seen
    assert result.player("P").hand is not None
    assert result.player("H").hand is None


def test_sync_missing_room(service) -> None:
    result = service.sync(SyncRequest(room_code="GONE", player_id="P"))
    assert isinstance(result, RoomDeleted)
    assert result.reason is DeleteReason.NOT_FOUND


def test_poll_returns_immediately_when_behind(service) -> None:
    open_room(service)
    result = service.poll(PollRequest(room_code=CODE, player_id="P", state_version=0))
    assert isinstance(result, RoomSnapshot)


def test_poll_times_out_unchanged(service) -> None:
    open_room(service)
    started = time.monotonic()
    result = service.poll(PollRequest(room_code=CODE, player_id="P", state_version=1))
    assert isinstance(result, Unchanged)
    assert result.state_version == 1
    assert time.monotonic() - started < 2.0


def test_spectator_poll_times_out_unchanged(service) -> None:
    open_room(service)
    result = service.poll(PollRequest(room_code=CODE, player_id="P", state_version=1, spectator=True))
    assert isinstance(result, Unchanged)


def test_poll_wakes_on_commit(service) -> None:
    open_room(service)
    service.settings = Settings(poll_interval_seconds=1.0, poll_attempts=5)
    timer = threading.Timer(
        0.05,
        service.join_room,
        args=(JoinRoomRequest(room_code=CODE, player_id="Q", player_name="q"),),
    )
    started = time.monotonic()
    timer.start()
    try:
        result = service.poll(PollRequest(room_code=CODE, player_id="P", state_version=1))
    finally:
        timer.join()
    assert isinstance(result, RoomSnapshot)
    assert result.state_version == 2
    assert result.player("Q") is not None
    assert time.monotonic() - started < 1.0


def test_poll_sees_deletion_mid_wait(service) -> None:
    open_room(service)
    service.settings = Settings(poll_interval_seconds=1.0, poll_attempts=5)
    timer = threading.Timer(0.05, service.leave_room, args=(RoomRequest(room_code=CODE, player_id="H"),))
    timer.start()
    try:
        result = service.poll(PollRequest(room_code=CODE, player_id="P", state_version=1))
    finally:
        timer.join()
    assert isinstance(result, RoomDeleted)


def test_heartbeat_does_not_wake_pollers(service) -> None:
    open_room(service)
    timer = threading.Timer(0.005, service.heartbeat, args=(RoomRequest(room_code=CODE, player_id="P"),))
    timer.start()
    try:
        result = service.poll(PollRequest(room_code=CODE, player_id="H", state_version=1))
    finally:
        timer.join()
    assert isinstance(result, Unchanged)
