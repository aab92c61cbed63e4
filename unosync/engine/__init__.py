"""Game engine for UNO."""

from unosync.engine.card import Card, CardType, Color
from unosync.engine.deck import DECK_SIZE, create_deck, shuffle_deck
from unosync.engine.errors import (
    IllegalMove,
    InvalidRequest,
    NotAuthorized,
    PlayerNotFound,
    RoomNotFound,
    UnoError,
    VersionConflict,
)
from unosync.engine.game_state import GameState, PlayerView
from unosync.engine.rules import (
    Action,
    PlayCard,
    DrawCard,
    CallUno,
    PassTurn,
    is_legal,
    legal_plays,
    get_legal_actions,
    apply_action,
    init_game,
)
from unosync.engine.turn_order import next_player, seat_order

__all__ = [
    "Card",
    "CardType",
    "Color",
    "DECK_SIZE",
    "create_deck",
    "shuffle_deck",
    "UnoError",
    "InvalidRequest",
    "NotAuthorized",
    "IllegalMove",
    "RoomNotFound",
    "PlayerNotFound",
    "VersionConflict",
    "GameState",
    "PlayerView",
    "Action",
    "PlayCard",
    "DrawCard",
    "CallUno",
    "PassTurn",
    "is_legal",
    "legal_plays",
    "get_legal_actions",
    "apply_action",
    "init_game",
    "next_player",
    "seat_order",
]
