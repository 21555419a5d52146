"""
Pytest fixtures for the scoring engine tests.
Provides teams, formats and helpers that bowl runs of deliveries into a game.
"""

import os
import sys

import pytest

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from cricket_scoring.delivery import delivery
from cricket_scoring.format_config import get_format
from cricket_scoring.game import Game, Team


# ==================== Teams & Formats ====================

def _squad(prefix):
    return tuple(f"{prefix}{i}" for i in range(1, 12))


@pytest.fixture
def home():
    return Team("Home", _squad("H"))


@pytest.fixture
def away():
    return Team("Away", _squad("A"))


@pytest.fixture
def t20():
    return get_format("T20")


@pytest.fixture
def five_day():
    return get_format("Test")


@pytest.fixture
def t20_game(home, away, t20):
    return Game(home, away, t20, match_id="t20-1")


@pytest.fixture
def five_day_game(home, away, five_day):
    return Game(home, away, five_day, match_id="test-1")


# ==================== Delivery Helpers ====================

@pytest.fixture
def ball():
    """Factory for a single delivery with fixed batters and bowler."""
    def _make(over=0, number=1, **kwargs):
        kwargs.setdefault("striker", "bat1")
        kwargs.setdefault("non_striker", "bat2")
        kwargs.setdefault("bowler", "bowl1")
        return delivery(over, number, **kwargs)
    return _make


@pytest.fixture
def bowl():
    """
    Bowl `count` identical deliveries into the game's open innings, numbering
    them from the innings' legal ball count.  Returns the last Innings value.
    """
    def _bowl(game, count, runs=0, **kwargs):
        innings = None
        for _ in range(count):
            current = game.current_innings
            over, number = divmod(current.score.legal_balls, current.rules.balls_per_over)
            innings = game.bowl(
                delivery(over, number + 1, "bat1", "bat2", "bowl1", runs=runs, **kwargs)
            )
        return innings
    return _bowl


@pytest.fixture
def all_out():
    """Bowl the open innings out: `runs` singles first, then wickets."""
    def _all_out(game, runs=0):
        innings = game.current_innings
        bpo = innings.rules.balls_per_over
        for i in range(runs + innings.wickets_remaining):
            current = game.current_innings
            if current is None:
                break
            over, number = divmod(current.score.legal_balls, bpo)
            if i < runs:
                d = delivery(over, number + 1, "bat1", "bat2", "bowl1", runs=1)
            else:
                d = delivery(over, number + 1, "bat1", "bat2", "bowl1", wicket="bowled")
            innings = game.bowl(d)
        return innings
    return _all_out
