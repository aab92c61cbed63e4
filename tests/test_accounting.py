"""Draws, reshuffles, passing and UNO bookkeeping."""

import random

import pytest

from unosync.engine import Card, CardType, Color, IllegalMove, NotAuthorized
from unosync.engine import accounting
from unosync.engine.game_state import GameState


def num(color: Color, n: int) -> Card:
    return Card(color, CardType.NUMBER, n)


def make_state(**overrides) -> GameState:
    values = dict(
        hands={"a": [num(Color.RED, 1), num(Color.RED, 2)], "b": [num(Color.BLUE, 3)]},
        discard_pile=[num(Color.GREEN, 4)],
        draw_pile=[num(Color.YELLOW, n) for n in range(1, 6)],
        current_player="a",
        direction=1,
        active_color=Color.GREEN,
        player_order=("a", "b"),
    )
    values.update(overrides)
    return GameState(**values)


def test_draw_one_card() -> None:
    state = make_state()
    new_state = accounting.draw_cards(state, "a", now=1.0, rng=random.Random(1))
    assert new_state.hands["a"][-1] == num(Color.YELLOW, 1)
    assert new_state.draw_pile[0] == num(Color.YELLOW, 2)
    assert new_state.current_player == "b"
    assert new_state.state_version == state.state_version + 1
    assert new_state.history[-1] == "a drew 1 card"


def test_draw_consumes_pending_penalty() -> None:
    state = make_state(pending_draws=4, pending_kind=CardType.DRAW_TWO)
    new_state = accounting.draw_cards(state, "a", now=1.0, rng=random.Random(1))
    assert len(new_state.hands["a"]) == 6
    assert new_state.pending_draws == 0
    assert new_state.pending_kind is None
    assert "(penalty)" in new_state.history[-1]


def test_draw_out_of_turn() -> None:
    with pytest.raises(NotAuthorized):
        accounting.draw_cards(make_state(), "b", now=1.0, rng=random.Random(1))


def test_reshuffle_keeps_existing_draw_cards() -> None:
    beneath = [num(Color.BLUE, n) for n in range(5, 10)]
    top = num(Color.GREEN, 4)
    state = make_state(
        draw_pile=[num(Color.YELLOW, 1)],
        discard_pile=beneath + [top],
        pending_draws=4,
        pending_kind=CardType.WILD_DRAW_FOUR,
    )
    total = state.card_count()
    new_state = accounting.draw_cards(state, "a", now=1.0, rng=random.Random(3))
    assert new_state.discard_pile == [top]
    # The card already on the draw pile is drawn first
    assert new_state.hands["a"][2] == num(Color.YELLOW, 1)
    assert len(new_state.hands["a"]) == 6
    assert len(new_state.draw_pile) == 2
    assert new_state.card_count() == total


def test_draw_with_nothing_left_takes_what_exists() -> None:
    state = make_state(draw_pile=[], pending_draws=2, pending_kind=CardType.DRAW_TWO)
    new_state = accounting.draw_cards(state, "a", now=1.0, rng=random.Random(1))
    assert len(new_state.hands["a"]) == 2
    assert new_state.pending_draws == 0
    assert new_state.history[-1] == "a drew 0 cards (penalty)"


def test_recycle_discard_threshold() -> None:
    beneath = [num(Color.BLUE, n) for n in range(1, 7)]
    state = make_state(discard_pile=beneath + [num(Color.GREEN, 4)])
    assert accounting.recycle_discard(state, 6, random.Random(1)) is state

    state = make_state(discard_pile=beneath + [num(Color.BLUE, 9), num(Color.GREEN, 4)])
    new_state = accounting.recycle_discard(state, 6, random.Random(1))
    assert new_state.discard_pile == [num(Color.GREEN, 4)]
    assert len(new_state.draw_pile) == 5 + 7
    assert new_state.draw_pile[:5] == state.draw_pile
    assert new_state.state_version == state.state_version


def test_pass_turn() -> None:
    state = make_state()
    new_state = accounting.pass_turn(state, "a", now=1.0)
    assert new_state.current_player == "b"
    assert new_state.hands == state.hands


def test_pass_rejected_with_pending_penalty() -> None:
    with pytest.raises(IllegalMove):
        accounting.pass_turn(make_state(pending_draws=2, pending_kind=CardType.DRAW_TWO), "a", now=1.0)


def test_call_uno_once() -> None:
    state = make_state(one_card_since={"b": 0.5})
    called = accounting.call_uno(state, "b", now=1.0)
    assert called.uno_called["b"] is True
    assert "b" not in called.one_card_since
    with pytest.raises(IllegalMove):
        accounting.call_uno(called, "b", now=1.5)


def test_call_uno_needs_one_card() -> None:
    with pytest.raises(IllegalMove):
        accounting.call_uno(make_state(), "a", now=1.0)


def test_uno_penalty_after_grace() -> None:
    state = make_state(one_card_since={"b": 10.0})
    assert not accounting.uno_penalty_due(state, "b", 11.0, 2.0)
    assert accounting.uno_penalty_due(state, "b", 12.0, 2.0)

    penalized = accounting.enforce_uno_penalties(state, now=12.0, grace=2.0, rng=random.Random(1))
    assert len(penalized.hands["b"]) == 3
    assert "b" not in penalized.one_card_since
    assert penalized.state_version == state.state_version + 1

    untouched = accounting.enforce_uno_penalties(
        state, now=12.0, grace=2.0, rng=random.Random(1), exclude="b"
    )
    assert untouched is state


def test_track_one_card() -> None:
    state = accounting.track_one_card(make_state(), "b", 3.0)
    assert state.one_card_since == {"b": 3.0}
    # The window does not restart on later checks
    assert accounting.track_one_card(state, "b", 4.0).one_card_since == {"b": 3.0}
    assert accounting.track_one_card(state, "a", 4.0).one_card_since == {"b": 3.0}


def test_drawing_clears_uno_flag() -> None:
    state = make_state(current_player="b", uno_called={"b": True})
    new_state = accounting.draw_cards(state, "b", now=1.0, rng=random.Random(1))
    assert new_state.uno_called["b"] is False


def test_remove_player_mid_turn() -> None:
    state = make_state(
        hands={"a": [num(Color.RED, 1)], "b": [num(Color.BLUE, 3)], "c": [num(Color.BLUE, 4)]},
        player_order=("a", "b", "c"),
    )
    new_state = accounting.remove_player(state, "a", ("b", "c"), now=2.0)
    assert new_state.current_player == "b"
    assert "a" not in new_state.hands
    assert new_state.draw_pile[-1] == num(Color.RED, 1)
    assert new_state.card_count() == state.card_count()
    assert new_state.winner is None


def test_last_player_standing_wins() -> None:
    new_state = accounting.remove_player(make_state(), "a", ("b",), now=2.0)
    assert new_state.winner == "b"
    assert new_state.current_player is None
