"""Card, Color and CardType for UNO."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Color(str, Enum):
    """Card colors. WILD is only ever the color of an unplayed wild card."""

    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    WILD = "wild"


PLAYABLE_COLORS = (Color.RED, Color.BLUE, Color.GREEN, Color.YELLOW)


class CardType(str, Enum):
    NUMBER = "number"
    SKIP = "skip"
    REVERSE = "reverse"
    DRAW_TWO = "drawTwo"
    WILD = "wild"
    WILD_DRAW_FOUR = "wildDrawFour"


WILD_TYPES = (CardType.WILD, CardType.WILD_DRAW_FOUR)
STACKING_TYPES = (CardType.DRAW_TWO, CardType.WILD_DRAW_FOUR)


@dataclass(frozen=True)
class Card:
    """A UNO card.

    Number cards carry a color and a number 0-9. Skip, reverse and drawTwo
    carry a color only. Wild and wildDrawFour always have color WILD.
    Two cards with the same (color, type, number) are interchangeable.
    """

    color: Color
    type: CardType
    number: Optional[int] = None

    def __post_init__(self) -> None:
        if self.type is CardType.NUMBER:
            if self.number is None or not 0 <= self.number <= 9:
                raise ValueError(f"Number card needs a number 0-9, got {self.number}")
        elif self.number is not None:
            raise ValueError(f"{self.type.value} cards have no number")
        if self.type in WILD_TYPES and self.color is not Color.WILD:
            raise ValueError("Wild cards must have color=wild")
        if self.type not in WILD_TYPES and self.color is Color.WILD:
            raise ValueError("Non-wild cards must have a playable color")

    @property
    def is_wild(self) -> bool:
        return self.type in WILD_TYPES

    @property
    def is_action(self) -> bool:
        return self.type is not CardType.NUMBER

    def __str__(self) -> str:
        if self.is_wild:
            return self.type.value
        if self.type is CardType.NUMBER:
            return f"{self.color.value}_{self.number}"
        return f"{self.color.value}_{self.type.value}"
