"""Tests for src/solvers/ev_engine.py — exact EV of stand, hit, double, split, surrender.

Reference scenarios use a single 52-card deck under the default rules
(dealer hits soft 17, peeks for blackjack, double after split, no hitting or
doubling split aces, 3:2 naturals). Where a scenario removes the visible cards
from the shoe, the test says so; otherwise the full deck is used as the
remaining composition. Tolerances of ±0.05 cover rounding of the published
reference figures.
"""

from __future__ import annotations

import math

import numpy as np
import pytest

from src.engine.config import DEFAULT_RULES, GameRules
from src.engine.shoe import SINGLE_DECK_COUNTS
from src.solvers.ev_engine import SURRENDER_EV, EVCalculator
from tests.conftest import EMPTY_COUNTS, counts_without, hand


@pytest.fixture(scope="module")
def engine() -> EVCalculator:
    """One calculator shared by the reference scenarios (same rules throughout)."""
    return EVCalculator(DEFAULT_RULES)


# ─── Argument validation ──────────────────────────────────────────────────────


class TestArgumentValidation:
    @pytest.mark.parametrize("method", ["stand_ev", "hit_ev", "double_ev", "split_ev"])
    def test_all_none_raises(self, calc: EVCalculator, method: str) -> None:
        with pytest.raises(ValueError):
            getattr(calc, method)(None, None, None)

    @pytest.mark.parametrize("method", ["stand_ev", "hit_ev", "double_ev", "split_ev"])
    def test_none_counts_raises(self, calc: EVCalculator, method: str) -> None:
        with pytest.raises(ValueError, match="Count vector"):
            getattr(calc, method)(None, hand('8', '8'), hand('9'))

    @pytest.mark.parametrize("method", ["stand_ev", "hit_ev", "double_ev", "split_ev"])
    def test_none_player_raises(self, calc: EVCalculator, method: str) -> None:
        with pytest.raises(ValueError, match="Player"):
            getattr(calc, method)(SINGLE_DECK_COUNTS, None, hand('9'))

    @pytest.mark.parametrize("method", ["stand_ev", "hit_ev", "double_ev", "split_ev"])
    def test_none_dealer_raises(self, calc: EVCalculator, method: str) -> None:
        with pytest.raises(ValueError, match="Dealer"):
            getattr(calc, method)(SINGLE_DECK_COUNTS, hand('8', '8'), None)

    def test_short_count_vector_raises(self, calc: EVCalculator) -> None:
        with pytest.raises(ValueError, match="10 slots"):
            calc.stand_ev((4, 4, 4), hand('10', '8'), hand('9'))

    def test_negative_count_raises(self, calc: EVCalculator) -> None:
        with pytest.raises(ValueError, match="negative"):
            calc.stand_ev((-1,) + (4,) * 8 + (16,), hand('10', '8'), hand('9'))

    def test_non_rank_card_raises(self, calc: EVCalculator) -> None:
        with pytest.raises(ValueError, match="Rank"):
            calc.stand_ev(SINGLE_DECK_COUNTS, ("10", "8"), hand('9'))

    def test_empty_dealer_hand_raises(self, calc: EVCalculator) -> None:
        with pytest.raises(ValueError, match="at least one card"):
            calc.stand_ev(SINGLE_DECK_COUNTS, hand('10', '8'), ())

    def test_numpy_counts_accepted(self, calc: EVCalculator) -> None:
        counts = np.array(counts_without(hand('10', 'Q'), hand('9')), dtype=np.int16)
        assert calc.stand_ev(counts, hand('10', 'Q'), hand('9')) == pytest.approx(
            calc.stand_ev(tuple(int(c) for c in counts), hand('10', 'Q'), hand('9'))
        )


# ─── stand_ev ─────────────────────────────────────────────────────────────────


class TestStandEV:
    def test_twenty_vs_nine(self, engine: EVCalculator) -> None:
        player, dealer = hand('10', 'Q'), hand('9')
        ev = engine.stand_ev(counts_without(player, dealer), player, dealer)
        assert ev == pytest.approx(0.74, abs=0.05)

    def test_player_bust(self, engine: EVCalculator) -> None:
        assert engine.stand_ev(SINGLE_DECK_COUNTS, hand('K', 'Q', '2'), hand('5')) == -1.0

    def test_player_natural_vs_small_card(self, engine: EVCalculator) -> None:
        ev = engine.stand_ev(SINGLE_DECK_COUNTS, hand('A', '10'), hand('5'))
        assert ev == pytest.approx(DEFAULT_RULES.blackjack_odds)

    def test_dealer_natural(self, engine: EVCalculator) -> None:
        assert engine.stand_ev(SINGLE_DECK_COUNTS, hand('10', 'Q'), hand('A', '10')) == -1.0

    def test_both_naturals(self, engine: EVCalculator) -> None:
        assert engine.stand_ev(SINGLE_DECK_COUNTS, hand('A', '10'), hand('A', '10')) == 0.0

    def test_dealer_already_bust(self, engine: EVCalculator) -> None:
        assert engine.stand_ev(SINGLE_DECK_COUNTS, hand('10', '8'), hand('6', '10', 'Q')) == 1.0

    def test_empty_shoe(self, engine: EVCalculator) -> None:
        assert engine.stand_ev(EMPTY_COUNTS, hand('10', '8'), hand('7')) == 0.0

    def test_soft_17_vs_two(self, engine: EVCalculator) -> None:
        ev = engine.stand_ev(SINGLE_DECK_COUNTS, hand('A', '6'), hand('2'))
        assert ev == pytest.approx(-0.13, abs=0.05)

    def test_result_within_payout_bounds(self, engine: EVCalculator) -> None:
        ev = engine.stand_ev(SINGLE_DECK_COUNTS, hand('10', '6'), hand('7'))
        assert -1.0 <= ev <= 1.5


# ─── hit_ev ───────────────────────────────────────────────────────────────────


class TestHitEV:
    def test_twenty_vs_nine(self, engine: EVCalculator) -> None:
        player, dealer = hand('10', 'Q'), hand('9')
        ev = engine.hit_ev(counts_without(player, dealer), player, dealer)
        assert ev == pytest.approx(-0.84, abs=0.05)

    def test_already_bust(self, engine: EVCalculator) -> None:
        assert engine.hit_ev(SINGLE_DECK_COUNTS, hand('K', 'Q', '2'), hand('5')) == pytest.approx(-1.0)

    def test_hitting_a_natural(self, engine: EVCalculator) -> None:
        ev = engine.hit_ev(SINGLE_DECK_COUNTS, hand('A', '10'), hand('5'))
        assert ev == pytest.approx(0.33, abs=0.05)

    def test_vs_dealer_natural(self, engine: EVCalculator) -> None:
        assert engine.hit_ev(SINGLE_DECK_COUNTS, hand('10', 'Q'), hand('A', '10')) == pytest.approx(-1.0)

    def test_hitting_natural_vs_dealer_natural_loses(self, engine: EVCalculator) -> None:
        # The drawn card destroys the player's natural.
        assert engine.hit_ev(SINGLE_DECK_COUNTS, hand('A', '10'), hand('A', '10')) == pytest.approx(-1.0)

    def test_vs_dealer_already_bust(self, engine: EVCalculator) -> None:
        ev = engine.hit_ev(SINGLE_DECK_COUNTS, hand('K', '7'), hand('9', '10', '3'))
        assert ev == pytest.approx(-0.39, abs=0.05)

    def test_empty_shoe(self, engine: EVCalculator) -> None:
        assert engine.hit_ev(EMPTY_COUNTS, hand('2', '3'), hand('7')) == 0.0

    def test_soft_17_vs_two(self, engine: EVCalculator) -> None:
        ev = engine.hit_ev(SINGLE_DECK_COUNTS, hand('A', '6'), hand('2'))
        assert ev == pytest.approx(0.01, abs=0.05)


# ─── double_ev ────────────────────────────────────────────────────────────────


class TestDoubleEV:
    def test_eleven_vs_six(self, engine: EVCalculator) -> None:
        player, dealer = hand('5', '6'), hand('6')
        ev = engine.double_ev(counts_without(player, dealer), player, dealer)
        assert ev == pytest.approx(0.76, abs=0.05)

    def test_already_bust(self, engine: EVCalculator) -> None:
        assert engine.double_ev(SINGLE_DECK_COUNTS, hand('3', 'J', '9'), hand('10')) == pytest.approx(-2.0)

    def test_doubling_a_natural(self, engine: EVCalculator) -> None:
        ev = engine.double_ev(SINGLE_DECK_COUNTS, hand('A', '10'), hand('10'))
        assert ev == pytest.approx(0.18, abs=0.05)

    def test_vs_dealer_natural(self, engine: EVCalculator) -> None:
        assert engine.double_ev(SINGLE_DECK_COUNTS, hand('K', '2'), hand('A', '10')) == pytest.approx(-2.0)

    def test_natural_vs_dealer_natural(self, engine: EVCalculator) -> None:
        assert engine.double_ev(SINGLE_DECK_COUNTS, hand('A', '10'), hand('A', '10')) == pytest.approx(-2.0)

    def test_vs_dealer_already_bust(self, engine: EVCalculator) -> None:
        # 13 + draw: nines and tens bust (20 of 52), everything else wins double.
        ev = engine.double_ev(SINGLE_DECK_COUNTS, hand('4', '9'), hand('J', 'Q', 'K'))
        assert ev == pytest.approx((2 * 32 - 2 * 20) / 52)

    def test_empty_shoe(self, engine: EVCalculator) -> None:
        assert engine.double_ev(EMPTY_COUNTS, hand('A', '3'), hand('3')) == 0.0

    def test_soft_14_vs_ten(self, engine: EVCalculator) -> None:
        ev = engine.double_ev(SINGLE_DECK_COUNTS, hand('A', '3'), hand('10'))
        assert ev == pytest.approx(-0.55, abs=0.05)


# ─── split_ev ─────────────────────────────────────────────────────────────────


class TestSplitEV:
    def test_eights_vs_nine(self, engine: EVCalculator) -> None:
        ev = engine.split_ev(SINGLE_DECK_COUNTS, hand('8', '8'), hand('9'))
        assert ev == pytest.approx(-0.41, abs=0.05)

    def test_aces_vs_eight(self, engine: EVCalculator) -> None:
        ev = engine.split_ev(SINGLE_DECK_COUNTS, hand('A', 'A'), hand('8'))
        assert ev == pytest.approx(0.39, abs=0.05)

    def test_non_pair_raises(self, engine: EVCalculator) -> None:
        with pytest.raises(ValueError, match="equal value"):
            engine.split_ev(SINGLE_DECK_COUNTS, hand('10', '7'), hand('5'))

    def test_three_cards_raises(self, engine: EVCalculator) -> None:
        with pytest.raises(ValueError):
            engine.split_ev(SINGLE_DECK_COUNTS, hand('8', '8', '8'), hand('5'))

    def test_empty_shoe(self, engine: EVCalculator) -> None:
        assert engine.split_ev(EMPTY_COUNTS, hand('3', '3'), hand('2')) == 0.0

    def test_mixed_ten_values_split(self, engine: EVCalculator) -> None:
        counts = (0,) * 9 + (6,)
        # Each K/Q hand draws a ten (20); dealer 7 draws a ten (17): both hands win.
        assert engine.split_ev(counts, hand('K', 'Q'), hand('7')) == pytest.approx(2.0)


class TestSplitRules:
    TENS_ONLY = (0,) * 9 + (8,)

    def test_split_aces_21_is_not_a_natural(self) -> None:
        # A+10 on each hand is a plain 21; dealer 7+10 = 17. Two wins at 1:1.
        calc = EVCalculator(GameRules())
        assert calc.split_ev(self.TENS_ONLY, hand('A', 'A'), hand('7')) == pytest.approx(2.0)

    def test_split_aces_natural_when_table_pays(self) -> None:
        calc = EVCalculator(GameRules(natural_blackjack_splits=True))
        assert calc.split_ev(self.TENS_ONLY, hand('A', 'A'), hand('7')) == pytest.approx(3.0)

    def test_hitting_split_aces_never_hurts(self) -> None:
        counts = (2, 2, 2, 2, 2, 2, 2, 2, 2, 6)
        without = EVCalculator(GameRules(hit_split_aces=False)).split_ev(counts, hand('A', 'A'), hand('10'))
        with_hsa = EVCalculator(GameRules(hit_split_aces=True)).split_ev(counts, hand('A', 'A'), hand('10'))
        assert with_hsa >= without - 1e-12

    def test_double_after_split_never_hurts(self) -> None:
        counts = (2, 2, 2, 2, 2, 2, 2, 2, 2, 6)
        no_das = EVCalculator(GameRules(double_after_split=False)).split_ev(counts, hand('5', '5'), hand('6'))
        das = EVCalculator(GameRules(double_after_split=True)).split_ev(counts, hand('5', '5'), hand('6'))
        assert das >= no_das - 1e-12

    def test_doubling_split_aces_never_hurts(self) -> None:
        # Doubling a split ace needs hit_split_aces + double_split_aces.
        counts = (0, 0, 0, 0, 3, 0, 0, 0, 0, 3)
        base = EVCalculator(GameRules()).split_ev(counts, hand('A', 'A'), hand('6'))
        dsa = EVCalculator(
            GameRules(hit_split_aces=True, double_split_aces=True)
        ).split_ev(counts, hand('A', 'A'), hand('6'))
        assert dsa >= base - 1e-12


# ─── surrender_ev ─────────────────────────────────────────────────────────────


class TestSurrenderEV:
    def test_sixteen_vs_ten(self, calc: EVCalculator) -> None:
        assert calc.surrender_ev(hand('10', '6'), hand('10')) == -0.5

    def test_empty_hands(self, calc: EVCalculator) -> None:
        assert calc.surrender_ev((), ()) == SURRENDER_EV == -0.5

    def test_none_raises(self, calc: EVCalculator) -> None:
        with pytest.raises(ValueError):
            calc.surrender_ev(None, None)
        with pytest.raises(ValueError):
            calc.surrender_ev(hand('10', '6'), None)
        with pytest.raises(ValueError):
            calc.surrender_ev(None, hand('10'))


# ─── Dealer peek ──────────────────────────────────────────────────────────────


class TestDealerPeek:
    ACES_ONLY = (4,) + (0,) * 9

    def test_peek_excludes_hole_ace_under_ten(self) -> None:
        # Only aces remain, and every one would give the dealer a natural.
        calc = EVCalculator(GameRules(dealer_peeks_for_21=True))
        assert calc.stand_ev(self.ACES_ONLY, hand('10', 'Q'), hand('10')) == 0.0

    def test_no_peek_lets_dealer_complete_natural(self) -> None:
        calc = EVCalculator(GameRules(dealer_peeks_for_21=False))
        assert calc.stand_ev(self.ACES_ONLY, hand('10', 'Q'), hand('10')) == -1.0

    def test_peek_excludes_hole_ten_under_ace(self) -> None:
        tens_only = (0,) * 9 + (5,)
        calc = EVCalculator(GameRules(dealer_peeks_for_21=True))
        assert calc.stand_ev(tens_only, hand('10', 'Q'), hand('A')) == 0.0

    def test_peek_only_applies_to_single_card(self) -> None:
        # Dealer A+5 (soft 16) may still draw a ten: A+5+10 = hard 16, then bust.
        tens_only = (0,) * 9 + (5,)
        calc = EVCalculator(GameRules(dealer_peeks_for_21=True))
        assert calc.stand_ev(tens_only, hand('10', '8'), hand('A', '5')) == 1.0


# ─── Cache ────────────────────────────────────────────────────────────────────


class TestCache:
    def test_cache_grows_and_clears(self, calc: EVCalculator) -> None:
        assert calc.cache_size == 0
        calc.hit_ev((2, 2, 2, 2, 2, 2, 2, 2, 2, 6), hand('10', '6'), hand('7'))
        assert calc.cache_size > 0
        calc.clear_cache()
        assert calc.cache_size == 0

    def test_repeat_call_identical(self) -> None:
        calc = EVCalculator()
        first = calc.split_ev(SINGLE_DECK_COUNTS, hand('6', '6'), hand('2'))
        second = calc.split_ev(SINGLE_DECK_COUNTS, hand('6', '6'), hand('2'))
        assert first == second

    def test_cached_matches_fresh(self) -> None:
        counts = (2, 2, 2, 2, 2, 2, 2, 2, 2, 6)
        warm = EVCalculator()
        warm.stand_ev(counts, hand('10', '7'), hand('9'))
        warm.hit_ev(counts, hand('10', '2'), hand('9'))
        fresh = EVCalculator()
        assert warm.hit_ev(counts, hand('10', '3'), hand('9')) == fresh.hit_ev(
            counts, hand('10', '3'), hand('9')
        )

    def test_unavailable_split_options_are_not_nan(self) -> None:
        ev = EVCalculator().split_ev((2, 2, 2, 2, 2, 2, 2, 2, 2, 6), hand('A', 'A'), hand('6'))
        assert math.isfinite(ev)
