"""
Hand evaluation: total calculation and ace resolution.

Blackjack ace valuation:
    Each ace counts 1 or 11. At most one ace can ever count 11 without busting,
    so the best total is the hard sum plus 10 when that stays at or below 21.

A hand is "soft" when its best total uses an ace at 11.

Hands are immutable tuples of Rank. Functions that "modify" a hand return a
new tuple, so callers never share mutable state across recursive branches.
"""

from __future__ import annotations

from .cards import Rank


def _hard_total(hand: tuple[Rank, ...]) -> tuple[int, bool]:
    """Return (sum with every ace at 1, whether the hand holds an ace)."""
    total = 0
    has_ace = False
    for rank in hand:
        total += rank.points
        if rank is Rank.ACE:
            has_ace = True
    return total, has_ace


def calculate_total(hand: tuple[Rank, ...]) -> int:
    """Calculate the best achievable total for a hand without busting, if possible.

    If even the all-aces-at-1 assignment busts, returns that minimum total,
    which will be > 21.

    Args:
        hand: Tuple of ranks.

    Returns:
        Best total <= 21, or minimum bust total if hand is unavoidably bust.

    Examples:
        >>> calculate_total((Rank.ACE, Rank.SEVEN))
        18
        >>> calculate_total((Rank.ACE, Rank.ACE))
        12
        >>> calculate_total((Rank.ACE, Rank.SEVEN, Rank.FIVE))
        13
        >>> calculate_total((Rank.KING, Rank.QUEEN, Rank.FIVE))
        25
    """
    total, has_ace = _hard_total(hand)
    if has_ace and total + 10 <= 21:
        return total + 10
    return total


def is_bust(total: int) -> bool:
    """Return True if a total exceeds 21 (bust).

    Examples:
        >>> is_bust(21)
        False
        >>> is_bust(22)
        True
    """
    return total > 21


def is_soft(hand: tuple[Rank, ...]) -> bool:
    """Return True if the hand's best total counts an ace as 11.

    Examples:
        >>> is_soft((Rank.ACE, Rank.SIX))
        True
        >>> is_soft((Rank.ACE, Rank.SEVEN, Rank.EIGHT))  # ace must be 1
        False
    """
    total, has_ace = _hard_total(hand)
    return has_ace and total + 10 <= 21


def is_natural_blackjack(
    hand: tuple[Rank, ...],
    is_split: bool = False,
    natural_on_split: bool = False,
) -> bool:
    """Return True if the hand is a natural: two cards totalling 21.

    A two-card 21 made after a split only counts as a natural when the
    table pays it as one (natural_on_split).

    Examples:
        >>> is_natural_blackjack((Rank.ACE, Rank.KING))
        True
        >>> is_natural_blackjack((Rank.ACE, Rank.KING), is_split=True)
        False
        >>> is_natural_blackjack((Rank.SEVEN, Rank.FOUR, Rank.KING))
        False
    """
    if len(hand) != 2 or calculate_total(hand) != 21:
        return False
    return not is_split or natural_on_split


def can_split(hand: tuple[Rank, ...]) -> bool:
    """Return True if the hand is a splittable pair (two cards of equal value).

    Ten-valued ranks pair with each other, so K-Q splits like 10-10.

    Examples:
        >>> can_split((Rank.EIGHT, Rank.EIGHT))
        True
        >>> can_split((Rank.KING, Rank.TEN))
        True
        >>> can_split((Rank.TEN, Rank.SEVEN))
        False
    """
    return len(hand) == 2 and hand[0].points == hand[1].points


def add_card(hand: tuple[Rank, ...], rank: Rank) -> tuple[Rank, ...]:
    """Return a new hand with rank appended."""
    return hand + (rank,)


def remove_card(hand: tuple[Rank, ...], rank: Rank) -> tuple[Rank, ...]:
    """Return a new hand with the first occurrence of rank removed.

    Raises:
        ValueError: If the hand does not contain rank.

    Examples:
        >>> remove_card((Rank.EIGHT, Rank.EIGHT), Rank.EIGHT)
        (<Rank.EIGHT: ('Eight', '8', 8)>,)
    """
    if rank not in hand:
        raise ValueError(f"Card {rank.abbreviation} is not in the hand.")
    index = hand.index(rank)
    return hand[:index] + hand[index + 1:]
