"""Seat ordering and next-player lookup, independent of card effects."""

from typing import Iterable, Optional, Protocol, Sequence

NO_SEAT = 999


class Seated(Protocol):
    id: str
    name: str
    seat: Optional[int]
    is_host: bool
    is_spectator: bool


def seat_order(players: Iterable[Seated]) -> tuple[str, ...]:
    """Ids of the acting (non-spectator) players in turn order.

    Sorted by seat number, then host first, then name. Call this again
    whenever the player set may have changed; the result is never cached.
    """
    active = [p for p in players if not p.is_spectator]
    active.sort(key=lambda p: (
        p.seat if p.seat is not None else NO_SEAT,
        not p.is_host,
        p.name,
    ))
    return tuple(p.id for p in active)


def next_player(current: Optional[str], order: Sequence[str], direction: int) -> str:
    """Player after ``current`` going in ``direction``.

    An unknown current player falls back to the first seat.
    """
    if not order:
        raise ValueError("No players to take a turn")
    try:
        idx = order.index(current)
    except ValueError:
        return order[0]
    return order[(idx + direction) % len(order)]


def advance(current: str, order: Sequence[str], direction: int, steps: int = 1) -> str:
    for _ in range(steps):
        current = next_player(current, order, direction)
    return current
