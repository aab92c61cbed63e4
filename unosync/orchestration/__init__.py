"""Game orchestration."""

from unosync.orchestration.game_runner import GameResult, GameRunner, SimulatedClock
from unosync.orchestration.tournament import run_tournament

__all__ = ["GameResult", "GameRunner", "SimulatedClock", "run_tournament"]
