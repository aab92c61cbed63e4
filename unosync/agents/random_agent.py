"""Random agent - plays any legal card, otherwise draws."""

import random
from typing import Optional

from unosync.engine import Action, CallUno, DrawCard, PlayCard, PlayerView


class RandomAgent:
    """Prefers playing over drawing so games make progress.

    ``forget_uno`` is the chance of not calling UNO when it could.
    """

    def __init__(self, name: str, seed: Optional[int] = None, forget_uno: float = 0.0):
        self._name = name
        self._rng = random.Random(seed)
        self._forget_uno = forget_uno

    @property
    def name(self) -> str:
        return self._name

    def get_action(self, player_view: PlayerView, legal_actions: list[Action], player_id: str) -> Action | None:
        if not legal_actions:
            return None

        if any(isinstance(a, CallUno) for a in legal_actions):
            if self._rng.random() >= self._forget_uno:
                return CallUno()

        play_actions = [a for a in legal_actions if isinstance(a, PlayCard)]
        if play_actions:
            return self._rng.choice(play_actions)
        if player_view.current_player == player_id:
            return DrawCard()
        return None
