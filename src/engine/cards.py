"""
Card ranks, point values, and human-readable I/O helpers.

Suits never affect Blackjack play, so a card is represented by its Rank alone.
Every rank carries a display name, a short abbreviation, and a point value:

    ACE = 1, TWO .. NINE = face value, TEN / JACK / QUEEN / KING = 10

The point value doubles as the slot key of the shoe's count vector
(slot index = points - 1), so the four ten-valued ranks share one slot.
Strings are used exclusively at I/O boundaries.
"""

from __future__ import annotations

from enum import Enum

# Number of distinct point values (ace=1 .. ten-valued=10).
NUM_VALUES: int = 10


class Rank(Enum):
    ACE = ("Ace", "A", 1)
    TWO = ("Two", "2", 2)
    THREE = ("Three", "3", 3)
    FOUR = ("Four", "4", 4)
    FIVE = ("Five", "5", 5)
    SIX = ("Six", "6", 6)
    SEVEN = ("Seven", "7", 7)
    EIGHT = ("Eight", "8", 8)
    NINE = ("Nine", "9", 9)
    TEN = ("Ten", "10", 10)
    JACK = ("Jack", "J", 10)
    QUEEN = ("Queen", "Q", 10)
    KING = ("King", "K", 10)

    def __init__(self, display_name: str, abbreviation: str, points: int) -> None:
        self.display_name = display_name
        self.abbreviation = abbreviation
        self.points = points

    @property
    def slot(self) -> int:
        """Index of this rank's point value in a count vector (0–9)."""
        return self.points - 1

    @classmethod
    def from_value(cls, points: int) -> Rank:
        """Return the first rank with the given point value.

        Ten-valued cards resolve to TEN.

        Raises:
            ValueError: If no rank has that value.

        Examples:
            >>> Rank.from_value(1)
            <Rank.ACE: ('Ace', 'A', 1)>
            >>> Rank.from_value(10).abbreviation
            '10'
        """
        for rank in cls:
            if rank.points == points:
                return rank
        raise ValueError(f"No rank has point value {points}.")

    @classmethod
    def from_abbreviation(cls, text: str) -> Rank:
        """Parse a rank abbreviation ('A', '2'–'10', 'J', 'Q', 'K'), case-insensitive.

        Raises:
            ValueError: If the abbreviation is unknown.

        Examples:
            >>> Rank.from_abbreviation('q')
            <Rank.QUEEN: ('Queen', 'Q', 10)>
        """
        key = text.strip().upper()
        for rank in cls:
            if rank.abbreviation == key:
                return rank
        raise ValueError(f"Unknown card abbreviation {text!r}.")


# Representative rank drawn for each count-vector slot (slot 9 -> TEN).
RANK_BY_SLOT: tuple[Rank, ...] = tuple(Rank.from_value(v) for v in range(1, NUM_VALUES + 1))


def parse_hand(text: str) -> tuple[Rank, ...]:
    """Parse a whitespace- or comma-separated list of abbreviations into a hand.

    Examples:
        >>> parse_hand('A 10')
        (<Rank.ACE: ('Ace', 'A', 1)>, <Rank.TEN: ('Ten', '10', 10)>)
        >>> parse_hand('')
        ()
    """
    tokens = text.replace(",", " ").split()
    return tuple(Rank.from_abbreviation(tok) for tok in tokens)


def hand_to_str(hand: tuple[Rank, ...]) -> str:
    """Convert a hand to a human-readable string.

    Examples:
        >>> hand_to_str((Rank.ACE, Rank.KING))
        'A K'
    """
    return " ".join(rank.abbreviation for rank in hand)
