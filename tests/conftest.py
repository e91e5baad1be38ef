"""
Shared pytest fixtures for EV calculator tests.

Provides convenience wrappers around Rank.from_abbreviation for building known
hands, and count vectors for common shoes.
"""

from __future__ import annotations

import pytest

from src.engine.cards import Rank
from src.engine.config import DEFAULT_RULES
from src.engine.shoe import SINGLE_DECK_COUNTS
from src.solvers.ev_engine import EVCalculator


def hand(*abbrevs: str) -> tuple[Rank, ...]:
    """Build a hand tuple from rank abbreviations.

    Examples:
        >>> hand('A', 'K')
        (<Rank.ACE: ('Ace', 'A', 1)>, <Rank.KING: ('King', 'K', 10)>)
    """
    return tuple(Rank.from_abbreviation(a) for a in abbrevs)


def counts_without(*hands: tuple[Rank, ...], base: tuple[int, ...] = SINGLE_DECK_COUNTS) -> tuple[int, ...]:
    """Count vector of base with every card of the given hands removed."""
    counts = list(base)
    for h in hands:
        for rank in h:
            counts[rank.slot] -= 1
    return tuple(counts)


EMPTY_COUNTS: tuple[int, ...] = (0,) * 10


@pytest.fixture
def single_deck() -> tuple[int, ...]:
    """Return the count vector of one full 52-card deck."""
    return SINGLE_DECK_COUNTS


@pytest.fixture
def calc() -> EVCalculator:
    """Fresh calculator under the default rules (H17, peek, DAS, 3:2)."""
    return EVCalculator(DEFAULT_RULES)


@pytest.fixture
def h():
    """Expose the hand() helper as a fixture for convenience."""
    return hand
