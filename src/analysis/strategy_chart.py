"""Composition-dependent strategy charts from the exact-EV engine.

One public data builder returns NumPy matrices that can be used
programmatically or passed to the plot helper:

    build_strategy_chart(counts, rules, rows, upcards)  — StrategyChart

One public plot function renders a matplotlib figure:

    plot_strategy_chart(chart, title, ...)  — best action per cell, annotated

Matrix convention:
    Shape  : (len(rows), len(upcards)) — rows = starting player hands,
                                         cols = dealer up cards [2 … 10, A]
    actions: index into advisor.ACTION_ORDER
             (0=STAND, 1=HIT, 2=DOUBLE, 3=SPLIT, 4=SURRENDER)
    evs    : EV of that best action
    np.nan = the cell's cards are not all available in the shoe

Each cell is solved against the given shoe with the player's two cards and
the dealer's up card removed. One EVCalculator is shared across cells, so
states reached from several cells are only solved once.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import matplotlib
import matplotlib.colors
import matplotlib.figure
import matplotlib.patches
import matplotlib.pyplot as plt
import numpy as np

from src.engine.cards import Rank
from src.engine.config import DEFAULT_RULES, GameRules
from src.engine.shoe import decrement_count
from src.solvers.advisor import ACTION_ORDER, evaluate_actions
from src.solvers.ev_engine import EVCalculator

# ─── Constants ────────────────────────────────────────────────────────────────

DEALER_UPCARDS: tuple[Rank, ...] = (
    Rank.TWO, Rank.THREE, Rank.FOUR, Rank.FIVE, Rank.SIX,
    Rank.SEVEN, Rank.EIGHT, Rank.NINE, Rank.TEN, Rank.ACE,
)

HARD_ROWS: tuple[tuple[str, tuple[Rank, ...]], ...] = (
    ("Hard 8", (Rank.SIX, Rank.TWO)),
    ("Hard 9", (Rank.SEVEN, Rank.TWO)),
    ("Hard 10", (Rank.SEVEN, Rank.THREE)),
    ("Hard 11", (Rank.SEVEN, Rank.FOUR)),
    ("Hard 12", (Rank.TEN, Rank.TWO)),
    ("Hard 13", (Rank.TEN, Rank.THREE)),
    ("Hard 14", (Rank.TEN, Rank.FOUR)),
    ("Hard 15", (Rank.TEN, Rank.FIVE)),
    ("Hard 16", (Rank.TEN, Rank.SIX)),
    ("Hard 17", (Rank.TEN, Rank.SEVEN)),
)

SOFT_ROWS: tuple[tuple[str, tuple[Rank, ...]], ...] = tuple(
    (f"Soft {rank.points + 11}", (Rank.ACE, rank))
    for rank in (Rank.TWO, Rank.THREE, Rank.FOUR, Rank.FIVE,
                 Rank.SIX, Rank.SEVEN, Rank.EIGHT, Rank.NINE)
)

PAIR_ROWS: tuple[tuple[str, tuple[Rank, ...]], ...] = tuple(
    (f"{rank.abbreviation},{rank.abbreviation}", (rank, rank))
    for rank in (Rank.TWO, Rank.THREE, Rank.FOUR, Rank.FIVE, Rank.SIX,
                 Rank.SEVEN, Rank.EIGHT, Rank.NINE, Rank.TEN, Rank.ACE)
)

DEFAULT_ROWS: tuple[tuple[str, tuple[Rank, ...]], ...] = HARD_ROWS + SOFT_ROWS + PAIR_ROWS

ACTION_LETTERS: tuple[str, ...] = ("S", "H", "D", "P", "R")
ACTION_COLORS: list[str] = ["#d62728", "#2ca02c", "#1f77b4", "#9467bd", "#7f7f7f"]
_NAN_COLOR: str = "#cccccc"


def _make_action_cmap() -> matplotlib.colors.ListedColormap:
    """One colour per action code, grey for undealable cells (NaN)."""
    cmap = matplotlib.colors.ListedColormap(ACTION_COLORS)
    cmap.set_bad(color=_NAN_COLOR)
    return cmap


_ACTION_CMAP: matplotlib.colors.Colormap = _make_action_cmap()


# ─── Data builder ─────────────────────────────────────────────────────────────


@dataclass
class StrategyChart:
    """Best action and its EV for each (starting hand, dealer up card) cell.

    Attributes:
        row_labels: Label per row, e.g. "Hard 16", "Soft 18", "8,8".
        col_labels: Dealer up card abbreviation per column.
        actions:    (rows, cols) float array of action codes, NaN = absent.
        evs:        (rows, cols) float array of best EVs, NaN = absent.
    """

    row_labels: list[str]
    col_labels: list[str]
    actions: np.ndarray
    evs: np.ndarray


def _remove_cards(counts: tuple[int, ...], ranks: Sequence[Rank]) -> tuple[int, ...]:
    for rank in ranks:
        counts = decrement_count(counts, rank.slot)
    return counts


def build_strategy_chart(
    counts: Sequence[int],
    rules: GameRules = DEFAULT_RULES,
    rows: Sequence[tuple[str, tuple[Rank, ...]]] = DEFAULT_ROWS,
    upcards: Sequence[Rank] = DEALER_UPCARDS,
    calculator: EVCalculator | None = None,
) -> StrategyChart:
    """Solve every (row, up card) cell against a shoe.

    Args:
        counts:     10-slot count vector of the shoe before the deal.
        rules:      Table rules (ignored when calculator is given).
        rows:       (label, two-card hand) pairs.
        upcards:    Dealer up cards, one column each.
        calculator: Optional engine to reuse; a fresh one is built otherwise.

    Returns:
        StrategyChart of shape (len(rows), len(upcards)).
    """
    calc = calculator if calculator is not None else EVCalculator(rules)
    base = tuple(int(c) for c in counts)
    actions = np.full((len(rows), len(upcards)), np.nan)
    evs = np.full((len(rows), len(upcards)), np.nan)

    for r, (_, hand) in enumerate(rows):
        for c, upcard in enumerate(upcards):
            try:
                cell_counts = _remove_cards(base, hand + (upcard,))
            except ValueError:
                # Shoe cannot deal this cell.
                continue
            result = evaluate_actions(calc, cell_counts, hand, (upcard,))
            actions[r, c] = ACTION_ORDER.index(result.best_action)
            evs[r, c] = result.best_ev

    return StrategyChart(
        row_labels=[label for label, _ in rows],
        col_labels=[rank.abbreviation for rank in upcards],
        actions=actions,
        evs=evs,
    )


# ─── Public plot function ─────────────────────────────────────────────────────


def plot_strategy_chart(
    chart: StrategyChart,
    title: str,
    *,
    show_ev: bool = False,
    show: bool = True,
    save_path: str | None = None,
) -> matplotlib.figure.Figure:
    """Plot the best-action grid as an annotated heat map.

    Args:
        chart:     StrategyChart from build_strategy_chart().
        title:     Figure title.
        show_ev:   If True, annotate each cell with its EV below the letter.
        show:      If True, call plt.show() after rendering.
        save_path: If not None, save the figure to this path before showing.

    Returns:
        matplotlib.figure.Figure.
    """
    n_rows, n_cols = chart.actions.shape
    fig, ax = plt.subplots(figsize=(1.0 + 0.7 * n_cols, 1.0 + 0.38 * n_rows))
    ax.set_title(title, fontsize=12, fontweight="bold")

    masked = np.ma.masked_invalid(chart.actions)
    ax.imshow(masked, cmap=_ACTION_CMAP, vmin=-0.5, vmax=len(ACTION_ORDER) - 0.5, aspect="auto")

    ax.set_xticks(range(n_cols))
    ax.set_xticklabels(chart.col_labels, fontsize=9)
    ax.set_yticks(range(n_rows))
    ax.set_yticklabels(chart.row_labels, fontsize=9)
    ax.set_xlabel("Dealer up card", fontsize=9)
    ax.set_ylabel("Player hand", fontsize=9)

    for r in range(n_rows):
        for c in range(n_cols):
            code = chart.actions[r, c]
            if np.isnan(code):
                continue
            text = ACTION_LETTERS[int(code)]
            if show_ev:
                text = f"{text}\n{chart.evs[r, c]:+.2f}"
            ax.text(c, r, text, ha="center", va="center", fontsize=7 if show_ev else 9,
                    color="white", fontweight="bold")

    handles = [
        matplotlib.patches.Patch(color=color, label=f"{letter} = {action.value}")
        for letter, color, action in zip(ACTION_LETTERS, ACTION_COLORS, ACTION_ORDER)
    ]
    ax.legend(handles=handles, loc="upper left", bbox_to_anchor=(1.01, 1.0), fontsize=8)

    plt.tight_layout()

    if save_path is not None:
        fig.savefig(save_path, bbox_inches="tight", dpi=120)
    if show:
        plt.show()

    return fig


# ─── Entry point ──────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import sys
    import time

    from src.engine.shoe import create_shoe, value_counts

    num_decks = int(sys.argv[1]) if len(sys.argv) > 1 else 1
    counts = value_counts(create_shoe(num_decks))

    print(f"Solving strategy chart for a fresh {num_decks}-deck shoe …")
    t0 = time.time()
    chart = build_strategy_chart(counts, GameRules(num_decks=num_decks))
    print(f"Solved {chart.actions.size} cells in {time.time() - t0:.1f}s")

    plot_strategy_chart(chart, f"Exact-EV strategy ({num_decks} deck)", show=False,
                        save_path="strategy_chart.png")
    print("Saved: strategy_chart.png")
