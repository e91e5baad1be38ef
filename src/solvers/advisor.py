"""
Decision advisor: EVs for every legal action at one decision point.

Availability (unavailable actions are reported as None):
    STAND      always
    HIT        always, except on split aces unless hit_split_aces
    DOUBLE     first two cards only; on split hands needs double_after_split
               (and hit_split_aces + double_split_aces for split aces)
    SPLIT      a pair (two cards of equal value)
    SURRENDER  first two cards of an unsplit hand, when the table offers it

Usage:
    python -m src.solvers.advisor A 7 vs 9 [--decks N]
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

import numpy as np

from src.engine.cards import Rank
from src.engine.hand import can_split
from src.solvers.ev_engine import EVCalculator


class Action(Enum):
    """Player actions the advisor evaluates."""

    STAND = "STAND"
    HIT = "HIT"
    DOUBLE = "DOUBLE"
    SPLIT = "SPLIT"
    SURRENDER = "SURRENDER"


# Ties resolve to the earlier action in this order.
ACTION_ORDER: tuple[Action, ...] = (
    Action.STAND, Action.HIT, Action.DOUBLE, Action.SPLIT, Action.SURRENDER,
)


@dataclass(frozen=True)
class ActionEVs:
    """EV of each action at a decision point; None = not available.

    Attributes:
        stand:     EV of standing.
        hit:       EV of hitting with optimal continuation, or None.
        double:    EV of doubling, or None.
        split:     EV of splitting, or None.
        surrender: EV of surrendering (-0.5), or None.
    """

    stand: float
    hit: float | None = None
    double: float | None = None
    split: float | None = None
    surrender: float | None = None

    def as_dict(self) -> dict[Action, float | None]:
        return {
            Action.STAND: self.stand,
            Action.HIT: self.hit,
            Action.DOUBLE: self.double,
            Action.SPLIT: self.split,
            Action.SURRENDER: self.surrender,
        }

    def available(self) -> dict[Action, float]:
        """Only the actions that can be taken, in ACTION_ORDER."""
        return {a: ev for a, ev in self.as_dict().items() if ev is not None}

    @property
    def best_action(self) -> Action:
        options = self.available()
        return max(ACTION_ORDER, key=lambda a: options.get(a, -np.inf))

    @property
    def best_ev(self) -> float:
        return self.available()[self.best_action]


def evaluate_actions(
    calculator: EVCalculator,
    counts: Sequence[int] | np.ndarray,
    player_hand: Sequence[Rank],
    dealer_hand: Sequence[Rank],
    is_split: bool = False,
) -> ActionEVs:
    """Compute the EV of every legal action for one player hand.

    Args:
        calculator: Engine holding the rules and the shared cache.
        counts: 10-slot count vector of the undealt cards.
        player_hand: Player's hand at the decision point.
        dealer_hand: Dealer's visible cards.
        is_split: True if the hand came from a split.

    Returns:
        ActionEVs with None for actions the rules do not allow here.
    """
    rules = calculator.rules
    player = tuple(player_hand)
    first_two = len(player) == 2
    split_aces = is_split and bool(player) and player[0] is Rank.ACE

    can_hit = not split_aces or rules.hit_split_aces
    if is_split:
        can_double = first_two and rules.double_after_split and (
            not split_aces or (rules.hit_split_aces and rules.double_split_aces)
        )
    else:
        can_double = first_two

    stand = calculator.stand_ev(counts, player, dealer_hand, is_split)
    return ActionEVs(
        stand=stand,
        hit=calculator.hit_ev(counts, player, dealer_hand, is_split) if can_hit else None,
        double=calculator.double_ev(counts, player, dealer_hand, is_split) if can_double else None,
        split=calculator.split_ev(counts, player, dealer_hand) if can_split(player) else None,
        surrender=(
            calculator.surrender_ev(player, dealer_hand)
            if rules.surrender and first_two and not is_split
            else None
        ),
    )


# ─── __main__ ─────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import time

    from src.analysis.ev_report import print_action_evs, print_shoe_summary
    from src.engine.cards import parse_hand
    from src.engine.config import DEFAULT_RULES, GameRules
    from src.engine.shoe import build_shoe_from_hands, value_counts

    args = sys.argv[1:]
    num_decks = DEFAULT_RULES.num_decks
    if "--decks" in args:
        i = args.index("--decks")
        num_decks = int(args[i + 1])
        del args[i:i + 2]
    if "vs" not in args:
        print("Usage: python -m src.solvers.advisor <player cards> vs <dealer cards> [--decks N]")
        sys.exit(2)

    split_at = args.index("vs")
    player = parse_hand(" ".join(args[:split_at]))
    dealer = parse_hand(" ".join(args[split_at + 1:]))
    shoe = build_shoe_from_hands(num_decks, player, dealer)

    calc = EVCalculator(GameRules(num_decks=num_decks))
    t0 = time.time()
    evs = evaluate_actions(calc, value_counts(shoe), player, dealer)
    elapsed = time.time() - t0

    print_shoe_summary(shoe, num_decks)
    print_action_evs(evs, player, dealer, calc.rules)
    print(f"Solved in {elapsed:.2f}s ({calc.cache_size} cached states)")
