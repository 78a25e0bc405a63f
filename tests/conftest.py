"""Pytest fixtures for casino engine tests."""

import os

# Tests never need a Redis server or the rate limiter
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest

from casino.cards import Card
from casino.hand import Hand
from casino.rng import RandomSource


@pytest.fixture
def rng():
    """Seeded random source for reproducible tests."""
    return RandomSource(42)


def make_hand(*codes: str) -> Hand:
    """Build a hand from card codes like 'AS', '10H'."""
    return Hand([Card.from_string(code) for code in codes])


@pytest.fixture
def blackjack_hand():
    """A natural blackjack hand."""
    return make_hand("AS", "KH")


@pytest.fixture
def soft_17_hand():
    """A soft 17 hand (A-6)."""
    return make_hand("AS", "6H")


@pytest.fixture
def hard_16_hand():
    """A hard 16 hand (10-6)."""
    return make_hand("10S", "6H")


@pytest.fixture
def bust_hand():
    """A busted hand."""
    return make_hand("10S", "6H", "KC")
