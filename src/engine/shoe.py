"""
Shoe composition and card-count operations.

The shoe is a numpy int16 array of length 10, indexed by point value:
    shoe[0] = aces, shoe[1] = twos, ..., shoe[8] = nines,
    shoe[9] = ten-valued cards (10, J, Q, K aggregated)

The live shoe is mutated in place as cards are seen at the table. The EV
engine never mutates it: it takes an immutable tuple snapshot (value_counts)
and produces a fresh tuple per branch with decrement_count.

Hi-Lo tags for the running count (cards already dealt):
    2–6 -> +1,  7–9 -> 0,  10-valued and ace -> -1
"""

from __future__ import annotations

import numpy as np

from .cards import Rank

# Composition of a single 52-card deck by point value.
SINGLE_DECK_COUNTS: tuple[int, ...] = (4, 4, 4, 4, 4, 4, 4, 4, 4, 16)

CARDS_PER_DECK: int = 52

# Hi-Lo tag per slot (ace, 2, ..., 9, ten-valued).
HI_LO_TAGS: tuple[int, ...] = (-1, 1, 1, 1, 1, 1, 0, 0, 0, -1)


def create_shoe(num_decks: int = 1) -> np.ndarray:
    """Create a fresh shoe of num_decks complete decks.

    Returns:
        np.ndarray: int16 array of shape (10,).

    Raises:
        ValueError: If num_decks is not positive.

    Examples:
        >>> shoe = create_shoe(6)
        >>> int(shoe.sum())
        312
        >>> int(shoe[9])
        96
    """
    if num_decks < 1:
        raise ValueError(f"A shoe needs at least one deck, got {num_decks}.")
    return np.array(SINGLE_DECK_COUNTS, dtype=np.int16) * num_decks


def value_counts(shoe: np.ndarray) -> tuple[int, ...]:
    """Return an immutable snapshot of the shoe, as consumed by the EV engine.

    Examples:
        >>> value_counts(create_shoe())
        (4, 4, 4, 4, 4, 4, 4, 4, 4, 16)
    """
    return tuple(int(c) for c in shoe)


def cards_remaining(shoe: np.ndarray) -> int:
    """Return the number of undealt cards in the shoe.

    Examples:
        >>> cards_remaining(create_shoe(2))
        104
    """
    return int(shoe.sum())


def remove_rank(shoe: np.ndarray, rank: Rank) -> None:
    """Mark one card of the given rank as dealt.

    Args:
        shoe: Mutable shoe array, modified in place.
        rank: Rank of the card seen at the table.

    Raises:
        ValueError: If no card of that value remains.

    Examples:
        >>> shoe = create_shoe()
        >>> remove_rank(shoe, Rank.KING)
        >>> int(shoe[9])
        15
    """
    if shoe[rank.slot] <= 0:
        raise ValueError(f"No {rank.display_name} left in the shoe.")
    shoe[rank.slot] -= 1


def add_rank(shoe: np.ndarray, rank: Rank) -> None:
    """Return one card of the given rank to the shoe (in place)."""
    shoe[rank.slot] += 1


def build_shoe_from_hands(num_decks: int, *hands: tuple[Rank, ...]) -> np.ndarray:
    """Create a shoe with all cards from the given hands already removed.

    Useful for building the shoe behind a specific decision point.

    Args:
        num_decks: Number of decks in the fresh shoe.
        *hands: Any number of rank tuples (player hand, dealer hand, etc.)

    Returns:
        np.ndarray: shoe with those cards marked as dealt.

    Examples:
        >>> shoe = build_shoe_from_hands(1, (Rank.TEN, Rank.QUEEN), (Rank.NINE,))
        >>> value_counts(shoe)
        (4, 4, 4, 4, 4, 4, 4, 4, 3, 14)
    """
    shoe = create_shoe(num_decks)
    for hand in hands:
        for rank in hand:
            remove_rank(shoe, rank)
    return shoe


def decrement_count(counts: tuple[int, ...], index: int) -> tuple[int, ...]:
    """Return a copy of counts with one card removed from slot index.

    Raises:
        ValueError: If the slot is already empty. Counts are never clamped.

    Examples:
        >>> decrement_count((1, 0, 2), 2)
        (1, 0, 1)
    """
    if counts[index] <= 0:
        raise ValueError(f"Cannot draw from empty slot {index} (value {index + 1}).")
    return counts[:index] + (counts[index] - 1,) + counts[index + 1:]


def running_count(shoe: np.ndarray, num_decks: int) -> int:
    """Hi-Lo running count of every card dealt from a num_decks shoe.

    Examples:
        >>> shoe = create_shoe()
        >>> remove_rank(shoe, Rank.FIVE)
        >>> remove_rank(shoe, Rank.SIX)
        >>> remove_rank(shoe, Rank.ACE)
        >>> running_count(shoe, 1)
        1
    """
    full = np.array(SINGLE_DECK_COUNTS, dtype=np.int64) * num_decks
    dealt = full - shoe.astype(np.int64)
    return int(np.dot(dealt, np.array(HI_LO_TAGS, dtype=np.int64)))


def true_count(shoe: np.ndarray, num_decks: int) -> float:
    """Running count divided by the number of decks still in the shoe.

    Returns 0.0 for an empty shoe.
    """
    remaining = cards_remaining(shoe)
    if remaining == 0:
        return 0.0
    return running_count(shoe, num_decks) / (remaining / CARDS_PER_DECK)

