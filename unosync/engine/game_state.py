"""Game state for UNO."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from unosync.engine.card import Card, CardType, Color


@dataclass(frozen=True)
class GameState:
    """Immutable UNO game state. Every transition returns a new instance."""

    hands: Dict[str, List[Card]]  # player_id -> list of cards
    discard_pile: List[Card]  # top is last
    draw_pile: List[Card]  # head is the next draw
    current_player: Optional[str]  # None once the game is finished
    direction: int  # 1 = clockwise, -1 = counter-clockwise
    active_color: Color
    pending_draws: int = 0  # accumulated drawTwo / wildDrawFour penalty
    pending_kind: Optional[CardType] = None  # which card opened the chain
    uno_called: Dict[str, bool] = field(default_factory=dict)
    one_card_since: Dict[str, float] = field(default_factory=dict)  # uncalled one-card hands
    state_version: int = 0
    last_activity: float = 0.0
    winner: Optional[str] = None
    winner_at: Optional[float] = None
    player_order: tuple[str, ...] = field(default_factory=tuple)
    last_played_card: Optional[Card] = None
    last_play_id: Optional[str] = None  # client animation dedup only
    history: tuple[str, ...] = field(default_factory=tuple)  # Log of events

    def top_discard(self) -> Optional[Card]:
        """Return the top card on the discard pile."""
        return self.discard_pile[-1] if self.discard_pile else None

    def card_count(self) -> int:
        """Total cards in hands, draw pile and discard pile."""
        return (
            len(self.draw_pile)
            + len(self.discard_pile)
            + sum(len(hand) for hand in self.hands.values())
        )


@dataclass
class PlayerView:
    """Filtered game state visible to a single player.

    Contains only that player's hand and public info. Spectators get an
    empty hand.
    """

    my_hand: List[Card]
    top_discard: Optional[Card]
    discard_count: int
    draw_count: int
    current_player: Optional[str]
    direction: int
    active_color: Color
    pending_draws: int
    pending_kind: Optional[CardType]
    winner: Optional[str]
    player_order: tuple[str, ...]
    num_cards_per_player: Dict[str, int]  # player_id -> count
    uno_called: Dict[str, bool]
    state_version: int
    last_play_id: Optional[str]
    history: List[str]  # Recent game events

    @classmethod
    def from_state(cls, state: GameState, player_id: str) -> "PlayerView":
        """Create a player view from full game state, hiding other players' hands."""
        num_cards = {
            pid: len(cards) for pid, cards in state.hands.items()
        }
        return cls(
            my_hand=list(state.hands.get(player_id, [])),
            top_discard=state.top_discard(),
            discard_count=len(state.discard_pile),
            draw_count=len(state.draw_pile),
            current_player=state.current_player,
            direction=state.direction,
            active_color=state.active_color,
            pending_draws=state.pending_draws,
            pending_kind=state.pending_kind,
            winner=state.winner,
            player_order=state.player_order,
            num_cards_per_player=num_cards,
            uno_called=dict(state.uno_called),
            state_version=state.state_version,
            last_play_id=state.last_play_id,
            history=list(state.history[-10:]),  # Last 10 events
        )
