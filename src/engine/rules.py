"""
Settlement, dealer policy, and payout calculation.

Settlement priority (first match wins), for finished hands:
    1. Both naturals               → push, 0
    2. Player natural              → player wins blackjack_odds (default 1.5)
    3. Dealer natural              → player loses 1 unit
    4. Player bust (>21)           → player loses 1 unit
    5. Dealer bust (>21)           → player wins 1 unit
    6. Total comparison            → higher total wins 1 unit, equal pushes

A player natural requires two cards totalling 21 on an unsplit hand, unless
the table pays naturals after splits. The dealer's natural ignores the split
flag: it belongs to the dealer's hand, not the player's.

Payout convention (from player's perspective):
    +N  = player wins N units
    -N  = player loses N units
     0  = push (bet returned)
"""

from __future__ import annotations

from enum import Enum, auto

from .cards import Rank
from .config import DEFAULT_RULES, GameRules
from .hand import calculate_total, is_bust, is_natural_blackjack, is_soft


class Outcome(Enum):
    WIN = auto()
    LOSS = auto()
    PUSH = auto()


# ─── Core outcome function ────────────────────────────────────────────────────

def evaluate_outcome(
    player_hand: tuple[Rank, ...],
    dealer_hand: tuple[Rank, ...],
    is_split: bool = False,
    rules: GameRules = DEFAULT_RULES,
) -> float:
    """Return the signed payout multiple for two finished hands.

    Args:
        player_hand: Player's final hand.
        dealer_hand: Dealer's final hand.
        is_split: True if the player hand came from a split.
        rules: Table rules (blackjack_odds, natural_blackjack_splits).

    Returns:
        Payout in units from the player's perspective.

    Examples:
        >>> evaluate_outcome((Rank.ACE, Rank.KING), (Rank.TEN, Rank.SEVEN))
        1.5
        >>> evaluate_outcome((Rank.TEN, Rank.NINE), (Rank.TEN, Rank.SIX, Rank.NINE))
        1.0
        >>> evaluate_outcome((Rank.TEN, Rank.SEVEN), (Rank.TEN, Rank.SEVEN))
        0.0
    """
    player_natural = is_natural_blackjack(
        player_hand, is_split, rules.natural_blackjack_splits
    )
    dealer_natural = is_natural_blackjack(dealer_hand)

    # ── Naturals ──────────────────────────────────────────────────────────────
    if player_natural and dealer_natural:
        return 0.0
    if player_natural:
        return rules.blackjack_odds
    if dealer_natural:
        return -1.0

    # ── Busts: player busts first, so a double bust is a loss ─────────────────
    player_total = calculate_total(player_hand)
    if is_bust(player_total):
        return -1.0
    dealer_total = calculate_total(dealer_hand)
    if is_bust(dealer_total):
        return 1.0

    # ── Total comparison ──────────────────────────────────────────────────────
    if player_total > dealer_total:
        return 1.0
    if player_total < dealer_total:
        return -1.0
    return 0.0


def settle_hand(
    player_hand: tuple[Rank, ...],
    dealer_hand: tuple[Rank, ...],
    is_split: bool = False,
    rules: GameRules = DEFAULT_RULES,
) -> tuple[Outcome, float]:
    """Determine the outcome and payout for a completed hand.

    Returns:
        (Outcome, payout) where payout is from the player's perspective.
    """
    payout = evaluate_outcome(player_hand, dealer_hand, is_split, rules)
    if payout > 0:
        return Outcome.WIN, payout
    if payout < 0:
        return Outcome.LOSS, payout
    return Outcome.PUSH, payout


# ─── Dealer policy ────────────────────────────────────────────────────────────

def dealer_should_hit(dealer_hand: tuple[Rank, ...], rules: GameRules = DEFAULT_RULES) -> bool:
    """Return True if the dealer must draw another card.

    The dealer stands on 18+, hard 17, and on soft 17 unless the table
    hits soft 17.

    Examples:
        >>> dealer_should_hit((Rank.TEN, Rank.SIX))
        True
        >>> dealer_should_hit((Rank.ACE, Rank.SIX))           # soft 17, H17
        True
        >>> dealer_should_hit((Rank.ACE, Rank.SIX), GameRules(dealer_hits_soft_17=False))
        False
    """
    total = calculate_total(dealer_hand)
    if total < 17:
        return True
    if total == 17:
        return rules.dealer_hits_soft_17 and is_soft(dealer_hand)
    return False


def dealer_plays_out(
    player_hands: list[tuple[Rank, ...]],
    rules: GameRules = DEFAULT_RULES,
) -> bool:
    """Return True if the dealer must play out their hand at the end of a round.

    The dealer only draws when some player hand is still live (not bust, not
    an unsplit natural), unless the table always plays out.
    """
    if rules.dealer_always_plays_out:
        return True
    split = len(player_hands) > 1
    for hand in player_hands:
        if is_bust(calculate_total(hand)):
            continue
        if is_natural_blackjack(hand, split, rules.natural_blackjack_splits):
            continue
        return True
    return False


# ─── Convenience helpers ──────────────────────────────────────────────────────

def calculate_payout(payout_units: float, bet: float = 1.0) -> float:
    """Convert a payout in units to a dollar amount given the bet size.

    Examples:
        >>> calculate_payout(1.5, 10.0)   # natural, $10 bet
        15.0
        >>> calculate_payout(-2.0, 10.0)  # lost double, $10 bet
        -20.0
    """
    return payout_units * bet
