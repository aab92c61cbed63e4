"""Deck creation, shuffling and dealing."""

import random
from typing import List, Optional, Sequence

from unosync.engine.card import Card, CardType, Color, PLAYABLE_COLORS

COLORED_ACTIONS = (CardType.SKIP, CardType.REVERSE, CardType.DRAW_TWO)


def create_deck() -> List[Card]:
    """Create a standard 108-card UNO deck, unshuffled.

    - 4 colors x (one 0, two each of 1-9, skip, reverse, drawTwo): 100 cards
    - 4 wild, 4 wildDrawFour: 8 cards
    """
    cards: List[Card] = []

    for color in PLAYABLE_COLORS:
        cards.append(Card(color, CardType.NUMBER, 0))
        for number in range(1, 10):
            cards.append(Card(color, CardType.NUMBER, number))
            cards.append(Card(color, CardType.NUMBER, number))
        for card_type in COLORED_ACTIONS:
            cards.append(Card(color, card_type))
            cards.append(Card(color, card_type))

    for _ in range(4):
        cards.append(Card(Color.WILD, CardType.WILD))
        cards.append(Card(Color.WILD, CardType.WILD_DRAW_FOUR))

    return cards


DECK_SIZE = len(create_deck())


def shuffle_deck(cards: Sequence[Card], rng: Optional[random.Random] = None) -> List[Card]:
    """Return a uniformly shuffled copy (Fisher-Yates)."""
    rng = rng or random.Random()
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def deal(deck: List[Card], num_players: int, hand_size: int = 7) -> List[List[Card]]:
    """Deal round-robin from the head of ``deck``, removing the dealt cards."""
    hands: List[List[Card]] = [[] for _ in range(num_players)]
    for _ in range(hand_size):
        for hand in hands:
            if deck:
                hand.append(deck.pop(0))
    return hands
