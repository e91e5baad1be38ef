"""
Memoization keys for the exact-EV search.

A StateKey captures everything that can change the EV of a (shoe, hands,
action) state for a fixed rule set:

    counts            — full remaining composition, all 10 slots in order
    player_total      — best player total
    player_soft       — player total uses an ace at 11
    player_cards      — player card count, capped at 3 (0 or 1 = a natural
                        is still reachable, 2 = natural possible, 3+ = neither)
    dealer_total      — best dealer total
    dealer_soft       — dealer total uses an ace at 11 (H17 terminal test)
    dealer_cards      — dealer card count, capped at 3 (1 = peek applies,
                        2 = natural possible, 3+ = neither)
    is_split          — player hand came from a split
    action            — "stand" | "hit" | "double" | "split"

Two states with equal keys have equal EVs, so a soft-17 dealer and a hard-17
dealer never share an entry, and neither do a two-card 21 and a multi-card 21,
nor a one-card 10 and a three-card 10 (only the first can still draw a natural).
"""

from __future__ import annotations

from typing import NamedTuple

from src.engine.cards import Rank
from src.engine.hand import calculate_total, is_soft

# Action tags used in StateKey.action.
STAND: str = "stand"
HIT: str = "hit"
DOUBLE: str = "double"
SPLIT: str = "split"


class StateKey(NamedTuple):
    """Hashable cache key for one engine state.

    Example:
        >>> StateKey((4,) * 9 + (16,), 20, False, 2, 9, False, 1, False, "stand").action
        'stand'
    """
    counts: tuple[int, ...]
    player_total: int
    player_soft: bool
    player_cards: int
    dealer_total: int
    dealer_soft: bool
    dealer_cards: int
    is_split: bool
    action: str


def make_state_key(
    counts: tuple[int, ...],
    player_hand: tuple[Rank, ...],
    dealer_hand: tuple[Rank, ...],
    is_split: bool,
    action: str,
) -> StateKey:
    """Build the StateKey for a state.

    Example:
        >>> key = make_state_key((0,) * 10, (Rank.ACE, Rank.SIX), (Rank.NINE,), False, HIT)
        >>> (key.player_total, key.player_soft, key.dealer_cards)
        (17, True, 1)
    """
    return StateKey(
        counts=counts,
        player_total=calculate_total(player_hand),
        player_soft=is_soft(player_hand),
        player_cards=min(len(player_hand), 3),
        dealer_total=calculate_total(dealer_hand),
        dealer_soft=is_soft(dealer_hand),
        dealer_cards=min(len(dealer_hand), 3),
        is_split=is_split,
        action=action,
    )
