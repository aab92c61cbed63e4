"""Runtime settings, read from the environment (and a .env file)."""

import os
from dataclasses import dataclass, fields
from typing import Optional

from dotenv import load_dotenv

ENV_PREFIX = "UNOSYNC_"
PLAYABLE_COLOR_NAMES = ("red", "blue", "green", "yellow")


@dataclass(frozen=True)
class Settings:
    """House rules and timing knobs.

    Defaults reproduce the rules the clients were built against.
    """

    hand_size: int = 7
    min_players: int = 2
    discard_recycle_threshold: int = 6  # cards allowed beneath the top card
    wild_draw_four_threshold: int = 8  # pending count that opens a drawTwo chain to wildDrawFour
    default_wild_color: str = "red"
    uno_grace_seconds: float = 2.0
    uno_penalty_cards: int = 2
    winner_cleanup_seconds: float = 10.0
    idle_room_seconds: float = 300.0
    poll_interval_seconds: float = 1.0
    poll_attempts: int = 15
    spectator_poll_interval_seconds: float = 2.0
    spectator_poll_attempts: int = 5

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "Settings":
        """Build settings from ``UNOSYNC_<FIELD>`` variables.

        Unset variables keep their defaults, e.g. ``UNOSYNC_HAND_SIZE=5``.
        """
        load_dotenv(dotenv_path)
        values = {}
        for f in fields(cls):
            raw = os.environ.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            default = f.default
            try:
                if isinstance(default, str):
                    values[f.name] = raw.lower()
                elif isinstance(default, int):
                    values[f.name] = int(raw)
                else:
                    values[f.name] = float(raw)
            except ValueError as e:
                raise ValueError(f"Invalid value for {ENV_PREFIX}{f.name.upper()}: {raw!r}") from e
        settings = cls(**values)
        if settings.default_wild_color not in PLAYABLE_COLOR_NAMES:
            raise ValueError("default_wild_color must be a playable color")
        return settings
