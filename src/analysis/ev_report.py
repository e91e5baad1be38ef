"""Console reports for the exact-EV calculator.

Three public functions format engine results into human-readable tables:

    print_action_evs(evs, player, dealer, rules) — EV per action, best marked
    print_shoe_summary(shoe, num_decks)          — remaining composition + Hi-Lo count
    print_rules(rules)                           — active table rules
"""

from __future__ import annotations

import dataclasses

import numpy as np

from src.engine.cards import RANK_BY_SLOT, Rank, hand_to_str
from src.engine.config import GameRules
from src.engine.hand import calculate_total, is_soft
from src.engine.rules import dealer_plays_out
from src.engine.shoe import cards_remaining, running_count, true_count
from src.solvers.advisor import ActionEVs


def _describe(hand: tuple[Rank, ...]) -> str:
    total = calculate_total(hand)
    kind = "soft" if is_soft(hand) else "hard"
    return f"{hand_to_str(hand)}  ({kind} {total})"


def print_action_evs(
    evs: ActionEVs,
    player: tuple[Rank, ...] = (),
    dealer: tuple[Rank, ...] = (),
    rules: GameRules | None = None,
) -> None:
    """Print the EV of each action; the best available action is marked.

    Unavailable actions print as N/A.

    Args:
        evs: Result of advisor.evaluate_actions().
        player: Player hand, shown in the header when given.
        dealer: Dealer hand, shown in the header when given.
        rules: When given with a player hand, also report whether the dealer
            still has to draw against that hand as it stands.
    """
    best = evs.best_action
    print("=" * 56)
    print("Action EVs")
    print("=" * 56)
    if player:
        print(f"  Player: {_describe(player)}")
    if dealer:
        print(f"  Dealer: {_describe(dealer)}")
    if rules is not None and player:
        draws = dealer_plays_out([player], rules)
        print(f"  Dealer draws: {'yes' if draws else 'no'}")
    if player or dealer:
        print()
    for action, ev in evs.as_dict().items():
        marker = "  <-- best" if action is best else ""
        if ev is None:
            print(f"  {action.value:<10} {'N/A':>9}")
        else:
            print(f"  {action.value:<10} {ev:+9.4f}  ({ev * 100:+.2f}%){marker}")
    print()


def print_shoe_summary(shoe: np.ndarray, num_decks: int) -> None:
    """Print remaining cards per value and the Hi-Lo running/true count."""
    print("=" * 56)
    print(f"Shoe  ({num_decks} deck{'s' if num_decks != 1 else ''})")
    print("=" * 56)
    labels = ["A" if r is Rank.ACE else ("T" if r.points == 10 else r.abbreviation)
              for r in RANK_BY_SLOT]
    print("  " + " ".join(f"{lbl:>4}" for lbl in labels))
    print("  " + " ".join(f"{int(c):>4}" for c in shoe))
    print()
    print(f"  Cards remaining: {cards_remaining(shoe)}")
    print(f"  Running count:   {running_count(shoe, num_decks):+d}")
    print(f"  True count:      {true_count(shoe, num_decks):+.2f}")
    print()


def print_rules(rules: GameRules) -> None:
    """Print the active table rules, one per line."""
    print("=" * 56)
    print("Table rules")
    print("=" * 56)
    for field in dataclasses.fields(rules):
        value = getattr(rules, field.name)
        if isinstance(value, bool):
            value = "yes" if value else "no"
        print(f"  {field.name:<26} {value}")
    print()
