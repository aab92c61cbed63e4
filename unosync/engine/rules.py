"""UNO rules: legality, card effects and state transitions."""

import logging
import random
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Union

from unosync.config import Settings
from unosync.engine import accounting
from unosync.engine.card import Card, CardType, Color, PLAYABLE_COLORS, STACKING_TYPES
from unosync.engine.deck import create_deck, deal, shuffle_deck
from unosync.engine.errors import IllegalMove, NotAuthorized
from unosync.engine.game_state import GameState
from unosync.engine.turn_order import advance

logger = logging.getLogger(__name__)


@dataclass
class PlayCard:
    """Action: play a card. For wilds, chosen_color is required."""

    card: Card
    chosen_color: Optional[Color] = None


@dataclass
class DrawCard:
    """Action: draw the pending penalty, or one card. Ends the turn."""

    pass


@dataclass
class CallUno:
    """Action: declare the last card. Allowed off-turn."""

    pass


@dataclass
class PassTurn:
    """Action: end the turn without playing."""

    pass


Action = Union[PlayCard, DrawCard, CallUno, PassTurn]


def _chain_locked(pending_draws: int, threshold: int) -> bool:
    """A chain at or over the threshold may only be continued with wildDrawFour."""
    return pending_draws >= threshold > 0


def is_legal(
    card: Card,
    top: Optional[Card],
    active_color: Color,
    pending_draws: int = 0,
    hand: Optional[Sequence[Card]] = None,
    threshold: int = 8,
) -> bool:
    """Check if ``card`` may be played on ``top``.

    ``hand`` enables the wildDrawFour bluff restriction; forced plays
    leave it out.
    """
    if top is None:
        raise IllegalMove("No card on discard pile")
    locked = _chain_locked(pending_draws, threshold)

    if card.type is CardType.WILD_DRAW_FOUR:
        if hand and any(not c.is_wild and c.color == active_color for c in hand):
            return False
        return pending_draws == 0 or locked
    if card.type is CardType.WILD:
        return True

    if card.type is CardType.DRAW_TWO and (locked or pending_draws % 2):
        return False

    if card.color == active_color:
        return True
    if top.is_wild:
        # Only the chosen color matches a wild
        return False
    if card.is_action and card.type is top.type:
        return True
    return (
        card.type is CardType.NUMBER
        and top.type is CardType.NUMBER
        and card.number == top.number
    )


def resolve_play(
    state: GameState,
    player_id: str,
    card: Card,
    chosen_color: Optional[Color],
    *,
    now: float,
    threshold: int = 8,
    default_color: Color = Color.RED,
) -> GameState:
    """Put ``card`` on the discard pile and apply its effect.

    Pure: the hand is not touched and legality is not checked.
    """
    order = state.player_order
    direction = state.direction
    pending = state.pending_draws
    kind = state.pending_kind

    if card.is_wild:
        if chosen_color is None:
            logger.warning("Wild played by %s without a color, using %s", player_id, default_color.value)
        active_color = chosen_color or default_color
    else:
        active_color = card.color

    if card.type is CardType.SKIP:
        next_up = advance(player_id, order, direction, 2)
    elif card.type is CardType.REVERSE:
        direction = -direction
        if len(order) == 2:
            # Acts as a skip: the player who reversed goes again
            next_up = advance(player_id, order, direction, 2)
        else:
            next_up = advance(player_id, order, direction)
    elif card.type is CardType.DRAW_TWO:
        if 0 < pending < threshold and pending % 2 == 0:
            pending += 2
        else:
            pending = 2
        kind = CardType.DRAW_TWO
        next_up = advance(player_id, order, direction)
    elif card.type is CardType.WILD_DRAW_FOUR:
        if _chain_locked(pending, threshold):
            pending += 4
        else:
            pending = 4
        kind = CardType.WILD_DRAW_FOUR
        next_up = advance(player_id, order, direction)
    else:
        next_up = advance(player_id, order, direction)

    if card.type not in STACKING_TYPES:
        pending = 0
        kind = None

    desc = f"{player_id} played {card}"
    if card.is_wild:
        desc += f" (chose {active_color.value})"

    return replace(
        state,
        discard_pile=list(state.discard_pile) + [card],
        active_color=active_color,
        direction=direction,
        pending_draws=pending,
        pending_kind=kind,
        current_player=next_up,
        last_played_card=card,
        last_play_id=f"{player_id}|{card}|{int(now * 1000)}",
        state_version=state.state_version + 1,
        last_activity=now,
        history=state.history + (desc,),
    )


def play_card(
    state: GameState,
    player_id: str,
    card: Card,
    chosen_color: Optional[Color],
    *,
    now: float,
    rng: random.Random,
    settings: Settings,
) -> GameState:
    """Validate and apply a play, including win detection and discard recycling."""
    if state.winner is not None:
        raise IllegalMove("Game is over")
    if state.current_player != player_id:
        raise NotAuthorized("Not your turn")

    hand = list(state.hands.get(player_id, []))
    try:
        hand.remove(card)
    except ValueError:
        raise IllegalMove(f"Card {card} not in hand") from None

    if not is_legal(
        card,
        state.top_discard(),
        state.active_color,
        state.pending_draws,
        state.hands[player_id],
        settings.wild_draw_four_threshold,
    ):
        raise IllegalMove(f"Cannot play {card} on {state.top_discard()}")
    if card.is_wild and chosen_color is None:
        raise IllegalMove("Wild card requires chosen_color")
    if chosen_color is Color.WILD:
        raise IllegalMove("Chosen color must be red, blue, green or yellow")

    hands = dict(state.hands)
    hands[player_id] = hand
    state = resolve_play(
        replace(state, hands=hands),
        player_id,
        card,
        chosen_color if card.is_wild else None,
        now=now,
        threshold=settings.wild_draw_four_threshold,
        default_color=Color(settings.default_wild_color),
    )

    if not hand:
        one_card_since = dict(state.one_card_since)
        one_card_since.pop(player_id, None)
        logger.info("%s won", player_id)
        return replace(
            state,
            winner=player_id,
            winner_at=now,
            current_player=None,
            one_card_since=one_card_since,
            history=state.history + (f"{player_id} WON!",),
        )

    state = accounting.recycle_discard(state, settings.discard_recycle_threshold, rng)
    return accounting.track_one_card(state, player_id, now)


def init_game(
    player_ids: Sequence[str],
    deck: Optional[List[Card]] = None,
    seed: Optional[int] = None,
    *,
    now: float = 0.0,
    state_version: int = 0,
    settings: Optional[Settings] = None,
) -> GameState:
    """Deal and make the opening play.

    The first seat (the host) deals; the first card of their hand starts the
    discard pile and its effect is resolved as if they had played it.
    """
    settings = settings or Settings()
    if len(player_ids) < 2:
        raise IllegalMove("Need at least 2 players")
    if deck is None:
        deck = shuffle_deck(create_deck(), random.Random(seed))
    deck = list(deck)
    dealt = deal(deck, len(player_ids), settings.hand_size)
    hands = dict(zip(player_ids, dealt))

    dealer = player_ids[0]
    if not hands[dealer]:
        raise IllegalMove("Dealer has no cards")
    first_card = hands[dealer].pop(0)

    state = GameState(
        hands=hands,
        discard_pile=[],
        draw_pile=deck,
        current_player=dealer,
        direction=1,
        active_color=Color(settings.default_wild_color),
        uno_called={pid: False for pid in player_ids},
        state_version=state_version,
        last_activity=now,
        player_order=tuple(player_ids),
    )
    state = resolve_play(
        state,
        dealer,
        first_card,
        Color(settings.default_wild_color) if first_card.is_wild else None,
        now=now,
        threshold=settings.wild_draw_four_threshold,
        default_color=Color(settings.default_wild_color),
    )
    return accounting.track_one_card(state, dealer, now)


def legal_plays(state: GameState, player_id: str, threshold: int = 8) -> List[PlayCard]:
    """Every legal play for ``player_id``; wilds are offered once per color."""
    if state.winner is not None or state.current_player != player_id:
        return []
    hand = state.hands.get(player_id, [])
    top = state.top_discard()
    plays: List[PlayCard] = []
    seen = set()
    for card in hand:
        if card in seen:
            continue
        seen.add(card)
        if not is_legal(card, top, state.active_color, state.pending_draws, hand, threshold):
            continue
        if card.is_wild:
            plays.extend(PlayCard(card=card, chosen_color=color) for color in PLAYABLE_COLORS)
        else:
            plays.append(PlayCard(card=card))
    return plays


def get_legal_actions(state: GameState, player_id: str, threshold: int = 8) -> List[Action]:
    """Return all legal actions for ``player_id``.

    Off-turn the only possible action is calling UNO.
    """
    if state.winner is not None:
        return []
    actions: List[Action] = []
    hand = state.hands.get(player_id, [])
    if len(hand) == 1 and not state.uno_called.get(player_id):
        actions.append(CallUno())
    if state.current_player != player_id:
        return actions

    actions.extend(legal_plays(state, player_id, threshold))
    actions.append(DrawCard())
    if state.pending_draws == 0:
        actions.append(PassTurn())
    return actions


def apply_action(
    state: GameState,
    player_id: str,
    action: Action,
    *,
    now: float,
    rng: Optional[random.Random] = None,
    settings: Optional[Settings] = None,
) -> GameState:
    """Apply an action and return the new game state.

    Players whose UNO grace window expired are penalized as part of any
    other player's move.
    """
    settings = settings or Settings()
    rng = rng or random.Random()

    if isinstance(action, CallUno):
        return accounting.call_uno(state, player_id, now=now)
    if isinstance(action, PlayCard):
        state = play_card(state, player_id, action.card, action.chosen_color,
                          now=now, rng=rng, settings=settings)
    elif isinstance(action, DrawCard):
        state = accounting.draw_cards(state, player_id, now=now, rng=rng)
    elif isinstance(action, PassTurn):
        state = accounting.pass_turn(state, player_id, now=now)
    else:
        raise TypeError(f"Unknown action: {action!r}")

    if state.winner is not None:
        return state
    return accounting.enforce_uno_penalties(
        state,
        now=now,
        grace=settings.uno_grace_seconds,
        rng=rng,
        cards=settings.uno_penalty_cards,
        exclude=player_id,
    )
