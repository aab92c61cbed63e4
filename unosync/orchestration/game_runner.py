"""Single game runner: plays a whole game through the room service."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from unosync.api.schemas import (
    CardModel,
    CreateRoomRequest,
    JoinRoomRequest,
    PlayCardRequest,
    RoomDeleted,
    RoomRequest,
    SyncRequest,
)
from unosync.config import Settings
from unosync.engine import Action, CallUno, DrawCard, PassTurn, PlayCard
from unosync.rooms.service import RoomService

if TYPE_CHECKING:
    from unosync.agent.protocol import AgentProtocol

logger = logging.getLogger(__name__)


class SimulatedClock:
    """Clock that only moves when told to, so grace windows are reproducible."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class GameResult:
    """Result of a completed game."""

    winner: Optional[str]
    num_turns: int
    player_ids: tuple[str, ...]
    final_version: int = 0


class GameRunner:
    """Runs a single UNO game to completion, one agent per player."""

    def __init__(
        self,
        agents: dict[str, "AgentProtocol"],
        seed: Optional[int] = None,
        settings: Optional[Settings] = None,
        room_code: str = "SIM1",
        seconds_per_turn: float = 1.0,
        max_turns: int = 1000,
    ):
        self._agents = agents
        self._seed = seed
        self._settings = settings or Settings()
        self._code = room_code
        self._seconds_per_turn = seconds_per_turn
        self._max_turns = max_turns
        self.clock = SimulatedClock()
        self.service = RoomService(
            settings=self._settings,
            clock=self.clock,
            rng=random.Random(seed),
        )

    @property
    def room_code(self) -> str:
        return self._code

    def run(self) -> GameResult:
        """Run the game and return the result."""
        player_ids = list(self._agents.keys())
        host, *guests = player_ids
        self.service.create_room(CreateRoomRequest(
            room_code=self._code, player_id=host, player_name=self._agents[host].name,
        ))
        for pid in guests:
            self.service.join_room(JoinRoomRequest(
                room_code=self._code, player_id=pid, player_name=self._agents[pid].name,
            ))
        snapshot = self.service.start_game(RoomRequest(room_code=self._code, player_id=host))

        num_turns = 0
        while num_turns < self._max_turns:
            if isinstance(snapshot, RoomDeleted) or snapshot.game is None:
                break
            if snapshot.game.winner is not None:
                break
            pid = snapshot.game.current_player
            legal = self.service.legal_actions(self._code, pid)
            view = self.service.player_view(self._code, pid)
            action = self._agents[pid].get_action(view, legal, pid)
            if action is None:
                action = DrawCard()

            snapshot = self._submit(pid, action)
            if not isinstance(action, CallUno):
                num_turns += 1
                self._offer_uno_calls(pid)
                self.clock.advance(self._seconds_per_turn)
                self.service.scheduler.run_pending()
                snapshot = self._refresh(pid)

        winner = None
        final_version = 0
        if not isinstance(snapshot, RoomDeleted) and snapshot.game is not None:
            winner = snapshot.game.winner
            final_version = snapshot.state_version
        logger.info("Game in %s finished after %d turns, winner %s", self._code, num_turns, winner)
        return GameResult(
            winner=winner,
            num_turns=num_turns,
            player_ids=tuple(player_ids),
            final_version=final_version,
        )

    def _offer_uno_calls(self, acted: str) -> None:
        """Give the player who just acted the chance to call UNO."""
        legal = self.service.legal_actions(self._code, acted)
        if not any(isinstance(a, CallUno) for a in legal):
            return
        view = self.service.player_view(self._code, acted)
        if isinstance(self._agents[acted].get_action(view, [CallUno()], acted), CallUno):
            self._submit(acted, CallUno())

    def _refresh(self, pid: str):
        # Version -1 always comes back as a full snapshot (or RoomDeleted)
        return self.service.sync(SyncRequest(room_code=self._code, player_id=pid, state_version=-1))

    def _submit(self, pid: str, action: Action):
        request = RoomRequest(room_code=self._code, player_id=pid)
        if isinstance(action, PlayCard):
            return self.service.play_card(PlayCardRequest(
                room_code=self._code,
                player_id=pid,
                card=CardModel.from_card(action.card),
                chosen_color=action.chosen_color,
            ))
        if isinstance(action, DrawCard):
            return self.service.draw_card(request)
        if isinstance(action, PassTurn):
            return self.service.pass_turn(request)
        return self.service.call_uno(request)
