"""Unit tests for the game engine."""

import random

import pytest

from unosync.engine import (
    Card,
    CardType,
    Color,
    DECK_SIZE,
    CallUno,
    DrawCard,
    IllegalMove,
    NotAuthorized,
    PassTurn,
    PlayCard,
    apply_action,
    create_deck,
    get_legal_actions,
    init_game,
    shuffle_deck,
)
from unosync.engine.game_state import GameState, PlayerView


def num(color: Color, n: int) -> Card:
    return Card(color, CardType.NUMBER, n)


def test_create_deck_size() -> None:
    deck = create_deck()
    assert len(deck) == 108
    assert DECK_SIZE == 108
    assert sum(1 for c in deck if c.type is CardType.WILD_DRAW_FOUR) == 4
    assert sum(1 for c in deck if c == num(Color.RED, 0)) == 1
    assert sum(1 for c in deck if c == num(Color.RED, 7)) == 2


def test_shuffle_reproducible() -> None:
    d1 = shuffle_deck(create_deck(), random.Random(123))
    d2 = shuffle_deck(create_deck(), random.Random(123))
    assert [str(c) for c in d1] == [str(c) for c in d2]
    assert sorted(map(str, d1)) == sorted(map(str, create_deck()))


def test_card_validation() -> None:
    with pytest.raises(ValueError):
        Card(Color.RED, CardType.NUMBER)
    with pytest.raises(ValueError):
        Card(Color.RED, CardType.WILD)
    with pytest.raises(ValueError):
        Card(Color.WILD, CardType.SKIP)
    assert str(Card(Color.BLUE, CardType.DRAW_TWO)) == "blue_drawTwo"


def test_init_game() -> None:
    # Unshuffled: p1 gets red 0,1,2,3,4,5,6 and opens with red 0
    state = init_game(["p1", "p2"], create_deck())
    assert len(state.hands["p1"]) == 6
    assert len(state.hands["p2"]) == 7
    assert state.top_discard() == num(Color.RED, 0)
    assert state.active_color is Color.RED
    assert state.current_player == "p2"
    assert state.state_version == 1
    assert state.winner is None
    assert len(state.draw_pile) == 108 - 7 * 2
    assert state.card_count() == 108


def test_init_game_needs_two_players() -> None:
    with pytest.raises(IllegalMove):
        init_game(["solo"], seed=1)


def test_opening_wild_gets_default_color() -> None:
    wild = Card(Color.WILD, CardType.WILD)
    deck = create_deck()
    deck.remove(wild)
    state = init_game(["p1", "p2"], [wild] + deck)
    assert state.top_discard() == wild
    assert state.active_color is Color.RED


def test_get_legal_actions() -> None:
    state = init_game(["p1", "p2"], create_deck())
    actions = get_legal_actions(state, "p2")
    assert PlayCard(card=num(Color.RED, 1)) in actions
    assert DrawCard() in actions
    assert PassTurn() in actions
    assert get_legal_actions(state, "p1") == []


def test_apply_play_card() -> None:
    state = init_game(["p1", "p2"], create_deck())
    new_state = apply_action(state, "p2", PlayCard(card=num(Color.RED, 1)), now=1.0)
    assert new_state.current_player == "p1"
    assert len(new_state.hands["p2"]) == 6
    assert new_state.top_discard() == num(Color.RED, 1)
    assert new_state.state_version == state.state_version + 1
    assert new_state.card_count() == 108
    # Original state untouched
    assert len(state.hands["p2"]) == 7


def test_apply_draw_card() -> None:
    state = init_game(["p1", "p2"], create_deck())
    new_state = apply_action(state, "p2", DrawCard(), now=1.0)
    assert new_state.current_player == "p1"
    assert len(new_state.hands["p2"]) == 8
    assert new_state.card_count() == 108


def test_out_of_turn_rejected() -> None:
    state = init_game(["p1", "p2"], create_deck())
    with pytest.raises(NotAuthorized):
        apply_action(state, "p1", DrawCard(), now=1.0)


def test_card_not_in_hand_rejected() -> None:
    state = init_game(["p1", "p2"], create_deck())
    with pytest.raises(IllegalMove):
        apply_action(state, "p2", PlayCard(card=num(Color.GREEN, 9)), now=1.0)


def test_wild_requires_color() -> None:
    wild = Card(Color.WILD, CardType.WILD)
    state = GameState(
        hands={"p1": [wild, num(Color.RED, 2)], "p2": [num(Color.BLUE, 2)]},
        discard_pile=[num(Color.BLUE, 5)],
        draw_pile=[],
        current_player="p1",
        direction=1,
        active_color=Color.BLUE,
        player_order=("p1", "p2"),
    )
    with pytest.raises(IllegalMove):
        apply_action(state, "p1", PlayCard(card=wild), now=1.0)
    new_state = apply_action(state, "p1", PlayCard(card=wild, chosen_color=Color.GREEN), now=1.0)
    assert new_state.active_color is Color.GREEN


def test_win_condition() -> None:
    state = GameState(
        hands={"p1": [num(Color.RED, 3)], "p2": [num(Color.BLUE, 2)]},
        discard_pile=[num(Color.RED, 5)],
        draw_pile=[],
        current_player="p1",
        direction=1,
        active_color=Color.RED,
        uno_called={"p1": True},
        player_order=("p1", "p2"),
    )
    new_state = apply_action(state, "p1", PlayCard(card=num(Color.RED, 3)), now=5.0)
    assert new_state.winner == "p1"
    assert new_state.winner_at == 5.0
    assert new_state.current_player is None
    assert get_legal_actions(new_state, "p2") == []
    with pytest.raises(IllegalMove):
        apply_action(new_state, "p2", DrawCard(), now=6.0)


def test_call_uno_offered_off_turn() -> None:
    state = GameState(
        hands={"p1": [num(Color.RED, 3)], "p2": [num(Color.BLUE, 2), num(Color.BLUE, 4)]},
        discard_pile=[num(Color.RED, 5)],
        draw_pile=[],
        current_player="p2",
        direction=1,
        active_color=Color.RED,
        player_order=("p1", "p2"),
    )
    assert get_legal_actions(state, "p1") == [CallUno()]


def test_player_view_hides_other_hands() -> None:
    state = init_game(["p1", "p2"], create_deck())
    view = PlayerView.from_state(state, "p2")
    assert view.my_hand == state.hands["p2"]
    assert view.num_cards_per_player == {"p1": 6, "p2": 7}
    assert view.draw_count == len(state.draw_pile)
    assert PlayerView.from_state(state, "watcher").my_hand == []


def test_random_play_conserves_cards() -> None:
    rng = random.Random(99)
    state = init_game(["a", "b", "c"], seed=99)
    for step in range(300):
        if state.winner is not None:
            break
        pid = state.current_player
        actions = [a for a in get_legal_actions(state, pid) if not isinstance(a, PassTurn)]
        state = apply_action(state, pid, rng.choice(actions), now=float(step), rng=rng)
        assert state.card_count() == 108
        assert state.pending_draws >= 0
