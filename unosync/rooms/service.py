"""
Room Service - the action surface clients talk to.

The service:
1. Validates requests against the authoritative room
2. Runs the engine (old state + action -> new state)
3. Commits under the room's write lock, compare-and-swap on state_version
4. Answers sync/poll by comparing versions

Transport-agnostic: an HTTP layer maps RoomSnapshot / Unchanged /
RoomDeleted to responses and UnoError subclasses to error statuses.
"""

import functools
import logging
import random
import time
from typing import Callable, List, Optional

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
from unosync.config import Settings
from unosync.engine import accounting
from unosync.engine.card import Card
from unosync.engine.deck import create_deck, shuffle_deck
from unosync.engine.errors import (
    IllegalMove,
    InvalidRequest,
    NotAuthorized,
    PlayerNotFound,
    RoomNotFound,
    VersionConflict,
)
from unosync.engine.game_state import GameState, PlayerView
from unosync.engine.rules import (
    Action,
    CallUno,
    DrawCard,
    PassTurn,
    PlayCard,
    apply_action,
    get_legal_actions,
    init_game,
)
from unosync.rooms.models import Player, Room, RoomStatus
from unosync.rooms.scheduler import ScheduledTask, Scheduler
from unosync.rooms.store import RoomStore

logger = logging.getLogger(__name__)


def _event(event_type: GameEventType, player_id: Optional[str] = None, **data) -> GameEvent:
    return GameEvent(type=event_type, player_id=player_id, data=data)


def _deleted(reason: DeleteReason, player_id: Optional[str] = None) -> RoomDeleted:
    return RoomDeleted(
        reason=reason,
        events=[_event(GameEventType.ROOM_DELETED, player_id, reason=reason.value)],
    )


def room_result(method):
    """A missing room or player is reported as RoomDeleted, never as an error."""

    @functools.wraps(method)
    def wrapper(self, request, *args, **kwargs):
        try:
            return method(self, request, *args, **kwargs)
        except (RoomNotFound, PlayerNotFound):
            return _deleted(DeleteReason.NOT_FOUND, getattr(request, "player_id", None))

    return wrapper


class RoomService:
    """
    Authoritative owner of every room's state.

    Usage:
        service = RoomService()
        service.start()  # runs UNO penalties and post-win cleanup in the background
        service.create_room(CreateRoomRequest(room_code="ABCD", player_id="h", player_name="Host"))
        service.join_room(JoinRoomRequest(room_code="ABCD", player_id="p", player_name="P"))
        service.start_game(RoomRequest(room_code="ABCD", player_id="h"))
        result = service.poll(PollRequest(room_code="ABCD", player_id="p", state_version=2))
        service.stop()

    Without start(), deferred tasks only run when run_pending() is called
    on the scheduler, which is how tests drive a SimulatedClock.
    """

    def __init__(
        self,
        store: Optional[RoomStore] = None,
        scheduler: Optional[Scheduler] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], float] = time.time,
        rng: Optional[random.Random] = None,
        deck_factory: Optional[Callable[[], List[Card]]] = None,
    ):
        self.store = store or RoomStore()
        self.scheduler = scheduler or Scheduler(clock)
        self.settings = settings or Settings()
        self._clock = clock
        self._rng = rng or random.Random()
        self._deck_factory = deck_factory or (lambda: shuffle_deck(create_deck(), self._rng))

    def start(self, tick: float = 0.1) -> None:
        """Run scheduled tasks on a background thread."""
        self.scheduler.start(tick)

    def stop(self) -> None:
        self.scheduler.stop()

    # ------------------------------------------------------------------
    # Room lifecycle
    # ------------------------------------------------------------------

    def create_room(self, request: CreateRoomRequest) -> RoomSnapshot:
        now = self._clock()
        code = request.room_code
        with self.store.transaction(code):
            if self.store.version(code) is not None:
                raise InvalidRequest("Room code already exists. Please choose a different code.")
            room = Room(
                code=code,
                host_id=request.player_id,
                players={
                    request.player_id: Player(
                        id=request.player_id,
                        name=request.player_name,
                        seat=1,
                        is_host=True,
                        last_seen=now,
                    ),
                },
                last_activity=now,
            )
            self.store.insert(room)
        logger.info("Room %s created by %s", code, request.player_id)
        return self._snapshot(room, request.player_id)

    @room_result
    def join_room(self, request: JoinRoomRequest) -> RoomResult:
        now = self._clock()
        code = request.room_code
        pid = request.player_id
        with self.store.transaction(code):
            room = self._load(code)
            base = room.state_version
            player = room.players.get(pid)
            if player is not None:
                player.name = request.player_name
                player.last_seen = now
            else:
                # Anyone arriving mid-game watches until the next one
                spectator = request.spectator or room.status is not RoomStatus.LOBBY
                room.players[pid] = Player(
                    id=pid,
                    name=request.player_name,
                    seat=None if spectator else room.next_seat(),
                    is_spectator=spectator,
                    last_seen=now,
                )
            room.bump(now)
            try:
                self.store.commit(room, base)
            except VersionConflict:
                # Lost a race with another join for the same id: fine if it landed
                room = self._load(code)
                if pid not in room.players:
                    raise
        logger.info("%s joined room %s", pid, code)
        return self._snapshot(room, pid, [_event(GameEventType.PLAYER_JOINED, pid, player_name=request.player_name)])

    @room_result
    def leave_room(self, request: RoomRequest) -> RoomResult:
        now = self._clock()
        code = request.room_code
        pid = request.player_id
        with self.store.transaction(code):
            room = self._load(code)
            player = room.players.get(pid)
            if player is None:
                raise PlayerNotFound(f"Player {pid} not in room {code}")

            if player.is_host:
                self.store.delete(code)
                logger.info("Room %s deleted: host %s left", code, pid)
                return _deleted(DeleteReason.HOST_LEFT, pid)

            base = room.state_version
            was_playing = room.status is RoomStatus.PLAYING
            del room.players[pid]
            if not room.players:
                self.store.delete(code)
                logger.info("Room %s deleted: no players left", code)
                return _deleted(DeleteReason.NO_PLAYERS, pid)

            game = room.game
            if game is not None and room.status is RoomStatus.PLAYING and pid in game.player_order:
                game = accounting.remove_player(game, pid, room.seat_order(), now=now)
                room.set_game(game)
            room.bump(now)
            self.store.commit(room, base)
        if was_playing and room.status is RoomStatus.FINISHED:
            self._schedule_cleanup(room)
        logger.info("%s left room %s", pid, code)
        return self._snapshot(room, pid, [_event(GameEventType.PLAYER_LEFT, pid, player_name=player.name)])

    @room_result
    def resign_host(self, request: RoomRequest) -> RoomResult:
        now = self._clock()
        code = request.room_code
        with self.store.transaction(code):
            room = self._load(code)
            if room.host_id != request.player_id:
                raise NotAuthorized("Not the host")
            others = sorted(pid for pid in room.players if pid != request.player_id)
            if not others:
                raise InvalidRequest("No other players")
            base = room.state_version
            new_host = room.players[self._rng.choice(others)]
            room.players[request.player_id].is_host = False
            new_host.is_host = True
            room.host_id = new_host.id
            room.bump(now)
            self.store.commit(room, base)
        logger.info("Room %s host moved from %s to %s", code, request.player_id, new_host.id)
        return self._snapshot(room, request.player_id, [
            _event(
                GameEventType.HOST_CHANGED,
                new_host.id,
                old_host_id=request.player_id,
                new_host_id=new_host.id,
                new_host_name=new_host.name,
            ),
        ])

    def delete_room(self, room_code: str) -> RoomDeleted:
        code = room_code.strip().upper()
        with self.store.transaction(code):
            self.store.delete(code)
        logger.info("Room %s deleted", code)
        return _deleted(DeleteReason.DELETED)

    @room_result
    def heartbeat(self, request: RoomRequest) -> RoomResult:
        """Refresh the player's last-seen time. Not a visible change."""
        with self.store.transaction(request.room_code):
            room = self._load(request.room_code)
            player = room.players.get(request.player_id)
            if player is None:
                raise PlayerNotFound(f"Player {request.player_id} not in room {request.room_code}")
            player.last_seen = self._clock()
            self.store.commit(room, room.state_version)
        return self._snapshot(room, request.player_id)

    def reclaim_idle_rooms(self, now: Optional[float] = None) -> List[str]:
        """Delete rooms without activity for ``settings.idle_room_seconds``."""
        now = self._clock() if now is None else now
        cutoff = now - self.settings.idle_room_seconds
        removed = []
        for code in self.store.codes():
            with self.store.transaction(code):
                room = self.store.get(code)
                if room is not None and room.last_activity < cutoff:
                    self.store.delete(code)
                    removed.append(code)
        if removed:
            logger.info("Reclaimed %d idle rooms: %s", len(removed), ", ".join(removed))
        return removed

    # ------------------------------------------------------------------
    # Game actions
    # ------------------------------------------------------------------

    @room_result
    def start_game(self, request: RoomRequest) -> RoomResult:
        now = self._clock()
        code = request.room_code
        with self.store.transaction(code):
            room = self._load(code)
            if room.host_id != request.player_id:
                raise NotAuthorized("Not the host")
            if room.status is RoomStatus.PLAYING:
                raise InvalidRequest("Game already started")
            order = room.seat_order()
            if len(order) < self.settings.min_players:
                raise InvalidRequest(f"Need at least {self.settings.min_players} players")
            base = room.state_version
            game = init_game(
                order,
                self._deck_factory(),
                now=now,
                state_version=base,
                settings=self.settings,
            )
            room.status = RoomStatus.PLAYING
            room.set_game(game)
            self.store.commit(room, base)
        logger.info("Game started in room %s with %d players", code, len(order))
        self._schedule_uno_checks(room, {})
        return self._snapshot(room, request.player_id, [
            _event(GameEventType.CARD_PLAYED, order[0], card=str(game.last_played_card)),
        ])

    @room_result
    def play_card(self, request: PlayCardRequest) -> RoomResult:
        action = PlayCard(card=request.card.to_card(), chosen_color=request.chosen_color)
        return self._game_action(request, action)

    @room_result
    def draw_card(self, request: RoomRequest) -> RoomResult:
        return self._game_action(request, DrawCard())

    @room_result
    def call_uno(self, request: RoomRequest) -> RoomResult:
        return self._game_action(request, CallUno())

    @room_result
    def pass_turn(self, request: RoomRequest) -> RoomResult:
        return self._game_action(request, PassTurn())

    def _game_action(self, request: RoomRequest, action: Action) -> RoomSnapshot:
        now = self._clock()
        code = request.room_code
        pid = request.player_id
        with self.store.transaction(code):
            room = self._load(code)
            player = room.players.get(pid)
            if player is None:
                raise PlayerNotFound(f"Player {pid} not in room {code}")
            if player.is_spectator:
                raise IllegalMove("Spectators cannot act")
            if room.status is not RoomStatus.PLAYING or room.game is None:
                raise IllegalMove("Game not in progress")
            base = room.state_version
            before = room.game
            game = apply_action(before, pid, action, now=now, rng=self._rng, settings=self.settings)
            room.set_game(game)
            self.store.commit(room, base)

        logger.debug("Room %s v%d: %s by %s", code, room.state_version, type(action).__name__, pid)
        if game.winner is not None:
            self._schedule_cleanup(room)
        else:
            self._schedule_uno_checks(room, before.one_card_since)
        return self._snapshot(room, pid, self._events_for(action, pid, before, game))

    def _events_for(
        self, action: Action, pid: str, before: GameState, after: GameState
    ) -> List[GameEvent]:
        events = []
        if isinstance(action, PlayCard):
            events.append(_event(
                GameEventType.CARD_PLAYED, pid,
                card=str(action.card),
                chosen_color=after.active_color.value if action.card.is_wild else None,
                animation_id=after.last_play_id,
            ))
        elif isinstance(action, DrawCard):
            drawn = len(after.hands[pid]) - len(before.hands[pid])
            events.append(_event(GameEventType.CARD_DRAWN, pid, count=drawn))
        elif isinstance(action, CallUno):
            events.append(_event(GameEventType.UNO_CALLED, pid))

        for other in before.one_card_since:
            if other != pid and len(after.hands.get(other, [])) > len(before.hands.get(other, [])):
                events.append(_event(GameEventType.UNO_PENALTY, other))
        if after.winner is not None:
            events.append(_event(GameEventType.WINNER_DECLARED, after.winner))
        elif after.current_player != before.current_player:
            events.append(_event(GameEventType.TURN_ADVANCED, after.current_player))
        return events

    # ------------------------------------------------------------------
    # Sync protocol
    # ------------------------------------------------------------------

    def sync(self, request: SyncRequest) -> SyncResult:
        room = self.store.get(request.room_code)
        if room is None:
            return _deleted(DeleteReason.NOT_FOUND, request.player_id)
        if room.state_version <= request.state_version:
            return Unchanged(state_version=room.state_version)
        return self._snapshot(room, request.player_id)

    def poll(self, request: PollRequest) -> SyncResult:
        """Long-poll: answer as soon as the room moves past the client's version.

        Waits never hold the room's write lock.
        """
        code = request.room_code
        if request.spectator:
            interval = self.settings.spectator_poll_interval_seconds
            attempts = self.settings.spectator_poll_attempts
        else:
            interval = self.settings.poll_interval_seconds
            attempts = self.settings.poll_attempts

        version = self.store.version(code)
        attempt = 0
        while True:
            if version is None:
                return _deleted(DeleteReason.NOT_FOUND, request.player_id)
            if version > request.state_version:
                room = self.store.get(code)
                if room is None:
                    return _deleted(DeleteReason.NOT_FOUND, request.player_id)
                return self._snapshot(room, request.player_id)
            if attempt >= attempts:
                return Unchanged(state_version=version)
            version = self.store.wait_for_change(code, request.state_version, interval)
            attempt += 1

    def player_view(self, room_code: str, player_id: str) -> PlayerView:
        room = self._load(room_code)
        if room.game is None:
            raise IllegalMove("Game not started")
        return PlayerView.from_state(room.game, player_id)

    def legal_actions(self, room_code: str, player_id: str) -> List[Action]:
        room = self._load(room_code)
        if room.game is None or room.status is not RoomStatus.PLAYING:
            return []
        return get_legal_actions(room.game, player_id, self.settings.wild_draw_four_threshold)

    # ------------------------------------------------------------------
    # Deferred side effects
    # ------------------------------------------------------------------

    def _schedule_uno_checks(self, room: Room, previous: dict) -> None:
        if room.game is None:
            return
        for pid, since in room.game.one_card_since.items():
            if previous.get(pid) == since:
                continue
            delay = max(0.0, since + self.settings.uno_grace_seconds - self._clock())
            self.scheduler.schedule(
                delay,
                "uno-grace",
                room.code,
                room.state_version,
                functools.partial(self._expire_uno_grace, player_id=pid),
            )

    def _expire_uno_grace(self, task: ScheduledTask, player_id: str) -> None:
        now = self._clock()
        with self.store.transaction(task.room_code):
            room = self.store.get(task.room_code)
            if room is None or room.game is None or room.status is not RoomStatus.PLAYING:
                logger.debug("Dropping %s for %s: room gone or idle", task.name, task.room_code)
                return
            if not accounting.uno_penalty_due(room.game, player_id, now, self.settings.uno_grace_seconds):
                logger.debug("Dropping %s for %s: %s is safe", task.name, task.room_code, player_id)
                return
            base = room.state_version
            game = accounting.penalize_uno(
                room.game, player_id, now=now, rng=self._rng, cards=self.settings.uno_penalty_cards
            )
            room.set_game(game)
            self.store.commit(room, base)

    def _schedule_cleanup(self, room: Room) -> None:
        winner_at = room.game.winner_at if room.game is not None else None
        self.scheduler.schedule(
            self.settings.winner_cleanup_seconds,
            "winner-cleanup",
            room.code,
            room.state_version,
            functools.partial(self._cleanup_finished, winner_at=winner_at),
        )

    def _cleanup_finished(self, task: ScheduledTask, winner_at: Optional[float]) -> None:
        with self.store.transaction(task.room_code):
            room = self.store.get(task.room_code)
            if (
                room is None
                or room.status is not RoomStatus.FINISHED
                or room.game is None
                or room.game.winner_at != winner_at
            ):
                logger.debug("Dropping %s for %s: precondition changed", task.name, task.room_code)
                return
            self.store.delete(task.room_code)
        logger.info("Room %s deleted after game end", task.room_code)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _load(self, code: str) -> Room:
        room = self.store.get(code)
        if room is None:
            raise RoomNotFound(f"Room {code} not found")
        return room

    def _snapshot(
        self, room: Room, viewer_id: Optional[str], events: Optional[List[GameEvent]] = None
    ) -> RoomSnapshot:
        game = room.game
        players = []
        for pid in sorted(room.players, key=lambda p: (room.players[p].seat or 999, p)):
            player = room.players[pid]
            hand = game.hands.get(pid, []) if game is not None else []
            players.append(PlayerInfo(
                id=player.id,
                name=player.name,
                seat=player.seat,
                is_host=player.is_host,
                is_spectator=player.is_spectator,
                card_count=len(hand),
                uno_called=bool(game.uno_called.get(pid)) if game is not None else False,
                last_seen=player.last_seen,
                hand=[CardModel.from_card(c) for c in hand] if pid == viewer_id else None,
            ))

        info = None
        if game is not None:
            top = game.top_discard()
            info = GameInfo(
                top_card=CardModel.from_card(top) if top else None,
                active_color=game.active_color,
                current_player=game.current_player,
                direction=game.direction,
                pending_draws=game.pending_draws,
                pending_kind=game.pending_kind,
                draw_count=len(game.draw_pile),
                discard_count=len(game.discard_pile),
                player_order=list(game.player_order),
                winner=game.winner,
                winner_at=game.winner_at,
                last_played_card=CardModel.from_card(game.last_played_card) if game.last_played_card else None,
                last_play_id=game.last_play_id,
                history=list(game.history[-10:]),
            )

        return RoomSnapshot(
            code=room.code,
            host_id=room.host_id,
            status=room.status.value,
            state_version=room.state_version,
            last_activity=room.last_activity,
            players=players,
            game=info,
            events=events or [],
        )
