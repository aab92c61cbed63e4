"""Draws, reshuffles, discard recycling and UNO-call bookkeeping."""

import logging
import random
from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Tuple

from unosync.engine.card import Card
from unosync.engine.deck import shuffle_deck
from unosync.engine.errors import IllegalMove, NotAuthorized
from unosync.engine.game_state import GameState
from unosync.engine.turn_order import next_player

logger = logging.getLogger(__name__)


def _check_turn(state: GameState, player_id: str) -> None:
    if state.winner is not None:
        raise IllegalMove("Game is over")
    if state.current_player != player_id:
        raise NotAuthorized("Not your turn")


def _replenish(
    draw: List[Card],
    discard: List[Card],
    needed: int,
    rng: random.Random,
) -> Tuple[List[Card], List[Card]]:
    """Shuffle everything beneath the top discard into the draw pile if it is short."""
    if len(draw) >= needed or len(discard) <= 1:
        return draw, discard
    recycled = shuffle_deck(discard[:-1], rng)
    logger.debug("Reshuffling %d discarded cards into the draw pile", len(recycled))
    return draw + recycled, [discard[-1]]


def _take_cards(
    state: GameState,
    player_id: str,
    count: int,
    rng: random.Random,
) -> Tuple[Dict[str, List[Card]], List[Card], List[Card], int]:
    draw, discard = _replenish(list(state.draw_pile), list(state.discard_pile), count, rng)
    drawn = draw[:count]
    hands = dict(state.hands)
    hands[player_id] = list(hands.get(player_id, [])) + drawn
    return hands, draw[count:], discard, len(drawn)


def _clear_uno(state: GameState, player_id: str) -> Tuple[Dict[str, bool], Dict[str, float]]:
    uno_called = dict(state.uno_called)
    uno_called[player_id] = False
    one_card_since = dict(state.one_card_since)
    one_card_since.pop(player_id, None)
    return uno_called, one_card_since


def draw_cards(state: GameState, player_id: str, *, now: float, rng: random.Random) -> GameState:
    """Draw the pending penalty (or one card) and end the turn.

    There is no draw-and-play: the turn always passes on.
    """
    _check_turn(state, player_id)
    count = state.pending_draws if state.pending_draws > 0 else 1
    hands, draw, discard, got = _take_cards(state, player_id, count, rng)
    if got < count:
        logger.warning("Draw pile exhausted: %s drew %d of %d", player_id, got, count)
    uno_called, one_card_since = _clear_uno(state, player_id)
    reason = " (penalty)" if state.pending_draws > 0 else ""
    return replace(
        state,
        hands=hands,
        draw_pile=draw,
        discard_pile=discard,
        pending_draws=0,
        pending_kind=None,
        uno_called=uno_called,
        one_card_since=one_card_since,
        current_player=next_player(player_id, state.player_order, state.direction),
        state_version=state.state_version + 1,
        last_activity=now,
        history=state.history + (f"{player_id} drew {got} card{'s' if got != 1 else ''}{reason}",),
    )


def recycle_discard(state: GameState, threshold: int, rng: random.Random) -> GameState:
    """Shuffle the discard pile back under the draw pile once it grows past ``threshold``.

    The top card stays. This is part of the play that triggered it, so the
    version is not bumped here.
    """
    if len(state.discard_pile) - 1 <= threshold:
        return state
    recycled = shuffle_deck(state.discard_pile[:-1], rng)
    return replace(
        state,
        draw_pile=list(state.draw_pile) + recycled,
        discard_pile=[state.discard_pile[-1]],
    )


def pass_turn(state: GameState, player_id: str, *, now: float) -> GameState:
    """Hand the turn on without playing. A pending penalty has to be drawn first."""
    _check_turn(state, player_id)
    if state.pending_draws > 0:
        raise IllegalMove(f"Must draw {state.pending_draws} cards before passing")
    return replace(
        state,
        current_player=next_player(player_id, state.player_order, state.direction),
        state_version=state.state_version + 1,
        last_activity=now,
        history=state.history + (f"{player_id} passed",),
    )


def call_uno(state: GameState, player_id: str, *, now: float) -> GameState:
    if state.winner is not None:
        raise IllegalMove("Game is over")
    if len(state.hands.get(player_id, [])) != 1:
        raise IllegalMove("Must have exactly 1 card")
    if state.uno_called.get(player_id):
        raise IllegalMove("UNO already called")
    uno_called = dict(state.uno_called)
    uno_called[player_id] = True
    one_card_since = dict(state.one_card_since)
    one_card_since.pop(player_id, None)
    return replace(
        state,
        uno_called=uno_called,
        one_card_since=one_card_since,
        state_version=state.state_version + 1,
        last_activity=now,
        history=state.history + (f"{player_id} called UNO",),
    )


def track_one_card(state: GameState, player_id: str, now: float) -> GameState:
    """Start (or stop) the UNO grace window after ``player_id``'s hand changed."""
    one_card_since = dict(state.one_card_since)
    if len(state.hands.get(player_id, [])) == 1 and not state.uno_called.get(player_id):
        one_card_since.setdefault(player_id, now)
    else:
        one_card_since.pop(player_id, None)
    return replace(state, one_card_since=one_card_since)


def uno_penalty_due(state: GameState, player_id: str, now: float, grace: float) -> bool:
    """True when ``player_id`` sat on one card without calling for longer than ``grace``."""
    since = state.one_card_since.get(player_id)
    return (
        state.winner is None
        and since is not None
        and now - since >= grace
        and len(state.hands.get(player_id, [])) == 1
        and not state.uno_called.get(player_id)
    )


def penalize_uno(
    state: GameState,
    player_id: str,
    *,
    now: float,
    rng: random.Random,
    cards: int = 2,
) -> GameState:
    hands, draw, discard, got = _take_cards(state, player_id, cards, rng)
    uno_called, one_card_since = _clear_uno(state, player_id)
    logger.info("%s forgot to call UNO and draws %d", player_id, got)
    return replace(
        state,
        hands=hands,
        draw_pile=draw,
        discard_pile=discard,
        uno_called=uno_called,
        one_card_since=one_card_since,
        state_version=state.state_version + 1,
        last_activity=now,
        history=state.history + (f"{player_id} drew {got} cards (no UNO call)",),
    )


def enforce_uno_penalties(
    state: GameState,
    *,
    now: float,
    grace: float,
    rng: random.Random,
    cards: int = 2,
    exclude: Optional[str] = None,
) -> GameState:
    """Penalize every player whose UNO grace window ran out."""
    for pid in sorted(state.one_card_since):
        if pid != exclude and uno_penalty_due(state, pid, now, grace):
            state = penalize_uno(state, pid, now=now, rng=rng, cards=cards)
    return state


def remove_player(
    state: GameState,
    player_id: str,
    order: Sequence[str],
    *,
    now: float,
) -> GameState:
    """Take a leaving player out of the game.

    Their hand goes under the draw pile. ``order`` is the seat order without
    them; if it was their turn, the turn passes to whoever followed them.
    A lone remaining player wins.
    """
    hands = dict(state.hands)
    returned = hands.pop(player_id, [])
    uno_called = dict(state.uno_called)
    uno_called.pop(player_id, None)
    one_card_since = dict(state.one_card_since)
    one_card_since.pop(player_id, None)

    current = state.current_player
    if current == player_id:
        current = next_player(player_id, state.player_order, state.direction)

    state = replace(
        state,
        hands=hands,
        draw_pile=list(state.draw_pile) + list(returned),
        uno_called=uno_called,
        one_card_since=one_card_since,
        player_order=tuple(order),
        current_player=current,
        last_activity=now,
        history=state.history + (f"{player_id} left",),
    )
    if state.winner is None and len(order) == 1:
        return replace(
            state,
            winner=order[0],
            winner_at=now,
            current_player=None,
            history=state.history + (f"{order[0]} WON!",),
        )
    return state
