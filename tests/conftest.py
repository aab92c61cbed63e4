"""Shared fixtures: a hand-driven clock, fast poll settings and rigged decks."""

import random

import pytest

from unosync.config import Settings
from unosync.engine import Card, create_deck
from unosync.orchestration.game_runner import SimulatedClock
from unosync.rooms.service import RoomService


@pytest.fixture
def clock() -> SimulatedClock:
    return SimulatedClock(start=1000.0)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        poll_interval_seconds=0.01,
        poll_attempts=3,
        spectator_poll_interval_seconds=0.01,
        spectator_poll_attempts=2,
    )


@pytest.fixture
def rig_deck():
    """Build a full 108-card deck whose first cards are ``head``."""

    def build(*head: Card) -> list[Card]:
        rest = create_deck()
        for card in head:
            rest.remove(card)
        return list(head) + rest

    return build


@pytest.fixture
def service(clock, settings) -> RoomService:
    return RoomService(settings=settings, clock=clock, rng=random.Random(7))
