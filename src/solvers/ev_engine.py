"""
Exact expected-value engine for Blackjack player decisions.

Every EV is an exact probability-weighted average over all future draws from
a finite shoe. There is no sampling: the shoe's 10-slot count vector is
decremented along each branch, and each branch is weighted by the number of
cards of that value remaining before the draw.

Entry points (all on EVCalculator):

    stand_ev(counts, player, dealer, is_split)   — dealer plays out, then settle
    hit_ev(counts, player, dealer, is_split)     — one card, then best of stand/hit
    double_ev(counts, player, dealer, is_split)  — exactly one card, stakes ×2
    split_ev(counts, player, dealer)             — pair split into two hands
    surrender_ev(player, dealer)                 — always -0.5

Dealer policy (stand recursion):
    Terminal on 18+, hard 17, and soft 17 unless the table hits soft 17.
    With peek enabled and a single dealer card showing, hole cards that would
    complete a dealer natural are excluded: the player is only ever asked to
    act once the dealer is known not to hold blackjack.

Degenerate states (no cards left to draw) evaluate to 0.0. A busted player
evaluates to exactly -1.0 regardless of the shoe.

Results are memoised per calculator in a dict keyed by StateKey. A calculator
is bound to one GameRules for life, so cached values never go stale; reuse one
calculator for every query against the same table.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from src.engine.cards import NUM_VALUES, RANK_BY_SLOT, Rank
from src.engine.config import DEFAULT_RULES, GameRules
from src.engine.hand import calculate_total, can_split, is_bust
from src.engine.rules import dealer_should_hit, evaluate_outcome
from src.engine.shoe import decrement_count
from src.solvers.state_keys import DOUBLE, HIT, SPLIT, STAND, StateKey, make_state_key

# ─── Constants ────────────────────────────────────────────────────────────────

SURRENDER_EV: float = -0.5
"""Late surrender forfeits half the wager."""

_ACE_SLOT: int = Rank.ACE.slot
_TEN_SLOT: int = Rank.TEN.slot


# ─── Argument validation ──────────────────────────────────────────────────────


def _as_counts(counts: Sequence[int] | np.ndarray | None) -> tuple[int, ...]:
    """Normalise a count vector to a tuple of 10 non-negative ints."""
    if counts is None:
        raise ValueError("Count vector is required.")
    result = tuple(int(c) for c in counts)
    if len(result) != NUM_VALUES:
        raise ValueError(f"Count vector must have {NUM_VALUES} slots, got {len(result)}.")
    if any(c < 0 for c in result):
        raise ValueError(f"Count vector has a negative slot: {result}.")
    return result


def _as_hand(hand: Sequence[Rank] | None, owner: str, allow_empty: bool = True) -> tuple[Rank, ...]:
    if hand is None:
        raise ValueError(f"{owner} hand is required.")
    result = tuple(hand)
    if not all(isinstance(rank, Rank) for rank in result):
        raise ValueError(f"{owner} hand must contain Rank values, got {result!r}.")
    if not allow_empty and not result:
        raise ValueError(f"{owner} hand must hold at least one card.")
    return result


def _completes_dealer_natural(up_slot: int, drawn_slot: int) -> bool:
    """True if drawing drawn_slot onto a lone up card makes a natural."""
    return (
        (up_slot == _TEN_SLOT and drawn_slot == _ACE_SLOT)
        or (up_slot == _ACE_SLOT and drawn_slot == _TEN_SLOT)
    )


# ─── Engine ───────────────────────────────────────────────────────────────────


class EVCalculator:
    """Exact-EV search over a finite shoe under a fixed rule set.

    Attributes:
        rules: Table rules this calculator's cache is valid for.

    Example:
        >>> calc = EVCalculator()
        >>> calc.surrender_ev((Rank.TEN, Rank.SIX), (Rank.TEN,))
        -0.5
    """

    def __init__(self, rules: GameRules = DEFAULT_RULES) -> None:
        self.rules = rules
        self._cache: dict[StateKey, float] = {}

    @property
    def cache_size(self) -> int:
        """Number of memoised states."""
        return len(self._cache)

    def clear_cache(self) -> None:
        self._cache.clear()

    # ── Public entry points ──────────────────────────────────────────────────

    def stand_ev(
        self,
        counts: Sequence[int] | np.ndarray,
        player_hand: Sequence[Rank],
        dealer_hand: Sequence[Rank],
        is_split: bool = False,
    ) -> float:
        """EV of standing: the dealer draws to a terminal hand, then settle.

        Args:
            counts: 10-slot count vector of the undealt cards.
            player_hand: Player's current hand.
            dealer_hand: Dealer's visible hand (at least the up card).
            is_split: True if the player hand came from a split.

        Returns:
            Expected payout in units of the original wager.

        Raises:
            ValueError: On a missing or malformed argument.
        """
        return self._stand(
            _as_counts(counts),
            _as_hand(player_hand, "Player"),
            _as_hand(dealer_hand, "Dealer", allow_empty=False),
            is_split,
        )

    def hit_ev(
        self,
        counts: Sequence[int] | np.ndarray,
        player_hand: Sequence[Rank],
        dealer_hand: Sequence[Rank],
        is_split: bool = False,
    ) -> float:
        """EV of taking one card, then continuing optimally (stand or hit again).

        Raises:
            ValueError: On a missing or malformed argument.
        """
        return self._hit(
            _as_counts(counts),
            _as_hand(player_hand, "Player"),
            _as_hand(dealer_hand, "Dealer", allow_empty=False),
            is_split,
        )

    def double_ev(
        self,
        counts: Sequence[int] | np.ndarray,
        player_hand: Sequence[Rank],
        dealer_hand: Sequence[Rank],
        is_split: bool = False,
    ) -> float:
        """EV of doubling: exactly one more card, all results at twice the stake.

        Raises:
            ValueError: On a missing or malformed argument.
        """
        return self._double(
            _as_counts(counts),
            _as_hand(player_hand, "Player"),
            _as_hand(dealer_hand, "Dealer", allow_empty=False),
            is_split,
        )

    def split_ev(
        self,
        counts: Sequence[int] | np.ndarray,
        player_hand: Sequence[Rank],
        dealer_hand: Sequence[Rank],
    ) -> float:
        """EV of splitting a pair, valued as twice one post-split hand.

        Each split hand receives one card and then plays its best available
        option. After splitting aces, hitting needs hit_split_aces; doubling
        needs double_after_split and, for aces, hit_split_aces and
        double_split_aces as well.

        Raises:
            ValueError: On a missing or malformed argument, or if the hand is
                not a pair.
        """
        counts = _as_counts(counts)
        player = _as_hand(player_hand, "Player")
        dealer = _as_hand(dealer_hand, "Dealer", allow_empty=False)
        if not can_split(player):
            raise ValueError(
                "Split requires exactly two cards of equal value, got "
                f"{' '.join(r.abbreviation for r in player) or 'an empty hand'}."
            )
        return self._split(counts, player, dealer)

    def surrender_ev(
        self,
        player_hand: Sequence[Rank],
        dealer_hand: Sequence[Rank],
    ) -> float:
        """EV of late surrender: always -0.5.

        Raises:
            ValueError: If either hand is missing.
        """
        _as_hand(player_hand, "Player")
        _as_hand(dealer_hand, "Dealer")
        return SURRENDER_EV

    # ── Recursion ────────────────────────────────────────────────────────────

    def _stand(
        self,
        counts: tuple[int, ...],
        player: tuple[Rank, ...],
        dealer: tuple[Rank, ...],
        is_split: bool,
    ) -> float:
        # Every continuation of a busted hand loses.
        if is_bust(calculate_total(player)):
            return -1.0

        key = make_state_key(counts, player, dealer, is_split, STAND)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        if not dealer_should_hit(dealer, self.rules):
            ev = evaluate_outcome(player, dealer, is_split, self.rules)
            self._cache[key] = ev
            return ev

        peek = self.rules.dealer_peeks_for_21 and len(dealer) == 1
        up_slot = dealer[0].slot
        total = 0.0
        weight = 0
        for slot in range(NUM_VALUES):
            count = counts[slot]
            if count == 0:
                continue
            if peek and _completes_dealer_natural(up_slot, slot):
                continue
            next_dealer = dealer + (RANK_BY_SLOT[slot],)
            total += count * self._stand(decrement_count(counts, slot), player, next_dealer, is_split)
            weight += count

        ev = total / weight if weight else 0.0
        self._cache[key] = ev
        return ev

    def _hit(
        self,
        counts: tuple[int, ...],
        player: tuple[Rank, ...],
        dealer: tuple[Rank, ...],
        is_split: bool,
    ) -> float:
        key = make_state_key(counts, player, dealer, is_split, HIT)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        total = 0.0
        weight = 0
        for slot in range(NUM_VALUES):
            count = counts[slot]
            if count == 0:
                continue
            next_counts = decrement_count(counts, slot)
            next_player = player + (RANK_BY_SLOT[slot],)
            if is_bust(calculate_total(next_player)):
                total -= count
            else:
                best = max(
                    self._stand(next_counts, next_player, dealer, is_split),
                    self._hit(next_counts, next_player, dealer, is_split),
                )
                total += count * best
            weight += count

        ev = total / weight if weight else 0.0
        self._cache[key] = ev
        return ev

    def _double(
        self,
        counts: tuple[int, ...],
        player: tuple[Rank, ...],
        dealer: tuple[Rank, ...],
        is_split: bool,
    ) -> float:
        key = make_state_key(counts, player, dealer, is_split, DOUBLE)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        total = 0.0
        weight = 0
        for slot in range(NUM_VALUES):
            count = counts[slot]
            if count == 0:
                continue
            next_player = player + (RANK_BY_SLOT[slot],)
            if is_bust(calculate_total(next_player)):
                total -= 2 * count
            else:
                stand = self._stand(decrement_count(counts, slot), next_player, dealer, is_split)
                total += 2 * count * stand
            weight += count

        ev = total / weight if weight else 0.0
        self._cache[key] = ev
        return ev

    def _split(
        self,
        counts: tuple[int, ...],
        player: tuple[Rank, ...],
        dealer: tuple[Rank, ...],
    ) -> float:
        key = make_state_key(counts, player, dealer, True, SPLIT)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        split_card = player[0]
        aces = split_card is Rank.ACE
        rules = self.rules
        can_hit = not aces or rules.hit_split_aces
        can_double = rules.double_after_split and (
            not aces or (rules.hit_split_aces and rules.double_split_aces)
        )

        total = 0.0
        weight = 0
        for slot in range(NUM_VALUES):
            count = counts[slot]
            if count == 0:
                continue
            next_counts = decrement_count(counts, slot)
            split_hand = (split_card, RANK_BY_SLOT[slot])
            stand = self._stand(next_counts, split_hand, dealer, True)
            hit = self._hit(next_counts, split_hand, dealer, True) if can_hit else -math.inf
            double = self._double(next_counts, split_hand, dealer, True) if can_double else -math.inf
            total += 2 * count * max(stand, hit, double)
            weight += count

        ev = total / weight if weight else 0.0
        self._cache[key] = ev
        return ev
