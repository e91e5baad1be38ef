"""Blackjack Exact-EV Calculator — Streamlit Dashboard.

Two-tab interactive dashboard on top of the exact-EV engine:
  Tab 1 — Decision EVs      (EV of every action for one hand, shoe + count)
  Tab 2 — Strategy Chart    (best action per starting hand vs up card)

Table rules are seeded from game_rules.txt and can be changed in the sidebar.

Run:
    PYTHONPATH=. streamlit run app.py
"""

from __future__ import annotations

import contextlib
import dataclasses
import io
from pathlib import Path

import matplotlib

matplotlib.use("Agg")  # must be set before any other matplotlib imports

import streamlit as st

RULES_PATH = Path(__file__).parent / "game_rules.txt"

# ─── Page config ──────────────────────────────────────────────────────────────

st.set_page_config(
    page_title="Blackjack EV Calculator",
    page_icon="🃏",
    layout="wide",
)

# ─── Lazy imports (inside functions to keep startup fast) ─────────────────────


@st.cache_resource
def _load_modules():
    """Import engine and analysis modules once (cached for the process lifetime)."""
    from src.analysis import strategy_chart
    from src.analysis.ev_report import print_action_evs, print_rules, print_shoe_summary
    from src.analysis.plotly_lookup import build_action_ev_figure, build_strategy_lookup_figure
    from src.engine import cards, shoe
    from src.engine.config import load_rules
    from src.solvers.advisor import evaluate_actions

    return {
        "cards": cards,
        "shoe": shoe,
        "chart": strategy_chart,
        "load_rules": load_rules,
        "evaluate_actions": evaluate_actions,
        "print_action_evs": print_action_evs,
        "print_rules": print_rules,
        "print_shoe_summary": print_shoe_summary,
        "build_action_ev_figure": build_action_ev_figure,
        "build_strategy_lookup_figure": build_strategy_lookup_figure,
    }


@st.cache_resource
def _calculator(rule_values: tuple):
    """One EVCalculator per rule set (keyed on its field values), so its cache survives reruns."""
    from src.engine.config import GameRules
    from src.solvers.ev_engine import EVCalculator

    return EVCalculator(GameRules(*rule_values))


m = _load_modules()
file_rules = m["load_rules"](RULES_PATH)

# ─── Sidebar controls ─────────────────────────────────────────────────────────

with st.sidebar:
    st.title("🃏 Blackjack EV Calculator")
    st.markdown("---")

    num_decks = st.slider("Decks", min_value=1, max_value=8, value=file_rules.num_decks)
    payouts = {1.5: "3:2", 1.2: "6:5", 1.0: "1:1"}
    if file_rules.blackjack_odds not in payouts:
        payouts[file_rules.blackjack_odds] = f"{file_rules.blackjack_odds:g}:1"
    blackjack_odds = st.selectbox(
        "Blackjack pays",
        options=list(payouts),
        format_func=payouts.get,
        index=list(payouts).index(file_rules.blackjack_odds),
    )
    h17 = st.checkbox("Dealer hits soft 17", value=file_rules.dealer_hits_soft_17)
    peek = st.checkbox("Dealer peeks for blackjack", value=file_rules.dealer_peeks_for_21)
    surrender = st.checkbox("Late surrender", value=file_rules.surrender)

    st.markdown("---")
    das = st.checkbox("Double after split", value=file_rules.double_after_split)
    hsa = st.checkbox("Hit split aces", value=file_rules.hit_split_aces)
    dsa = st.checkbox("Double split aces", value=file_rules.double_split_aces, disabled=not (hsa and das))
    nbj = st.checkbox("Naturals after split pay 3:2", value=file_rules.natural_blackjack_splits)
    plays_out = st.checkbox("Dealer always plays out", value=file_rules.dealer_always_plays_out)

    st.markdown("---")
    st.caption("Exact EV by full enumeration of the remaining shoe")

rules = dataclasses.replace(
    file_rules,
    num_decks=num_decks,
    blackjack_odds=blackjack_odds,
    dealer_hits_soft_17=h17,
    dealer_peeks_for_21=peek,
    dealer_always_plays_out=plays_out,
    surrender=surrender,
    double_after_split=das,
    hit_split_aces=hsa,
    double_split_aces=dsa and hsa and das,
    natural_blackjack_splits=nbj,
)
calc = _calculator(dataclasses.astuple(rules))

# ─── Tabs ─────────────────────────────────────────────────────────────────────

tab1, tab2 = st.tabs(["Decision EVs", "Strategy Chart"])

# ── Tab 1: Decision EVs ───────────────────────────────────────────────────────

with tab1:
    st.header("Decision EVs")
    st.caption("Cards: A, 2–10, J, Q, K separated by spaces. Seen cards are removed from the shoe.")

    col1, col2, col3 = st.columns(3)
    player_text = col1.text_input("Player cards", value="10 6")
    dealer_text = col2.text_input("Dealer cards", value="10")
    seen_text = col3.text_input("Other cards seen", value="")

    try:
        player = m["cards"].parse_hand(player_text)
        dealer = m["cards"].parse_hand(dealer_text)
        seen = m["cards"].parse_hand(seen_text)
        live_shoe = m["shoe"].build_shoe_from_hands(num_decks, player, dealer, seen)
        if not player or not dealer:
            raise ValueError("Enter at least one player card and the dealer up card.")
    except ValueError as exc:
        st.error(str(exc))
    else:
        running = m["shoe"].running_count(live_shoe, num_decks)
        true = m["shoe"].true_count(live_shoe, num_decks)
        c1, c2, c3 = st.columns(3)
        c1.metric("Cards remaining", m["shoe"].cards_remaining(live_shoe))
        c2.metric("Running count", f"{running:+d}")
        c3.metric("True count", f"{true:+.2f}")

        with st.spinner("Enumerating the shoe …"):
            evs = m["evaluate_actions"](calc, m["shoe"].value_counts(live_shoe), player, dealer)

        st.success(f"Best action: **{evs.best_action.value}**  ({evs.best_ev:+.4f})")
        st.plotly_chart(m["build_action_ev_figure"](evs), use_container_width=True)

        import pandas as pd

        ev_df = pd.DataFrame(
            [
                {"Action": action.value, "EV": "N/A" if ev is None else f"{ev:+.4f}"}
                for action, ev in evs.as_dict().items()
            ]
        )
        st.dataframe(ev_df, use_container_width=True, hide_index=True)

        st.subheader("Report (stdout capture)")
        buf = io.StringIO()
        with contextlib.redirect_stdout(buf):
            m["print_shoe_summary"](live_shoe, num_decks)
            m["print_action_evs"](evs, player, dealer, rules)
            m["print_rules"](rules)
        st.code(buf.getvalue(), language=None)

# ── Tab 2: Strategy Chart ─────────────────────────────────────────────────────

with tab2:
    st.header("Strategy Chart")
    st.caption(
        "Rows = starting hand | Cols = dealer up card | "
        "S = stand, H = hit, D = double, P = split, R = surrender, grey = not dealable"
    )

    groups = {
        "Hard totals": m["chart"].HARD_ROWS,
        "Soft totals": m["chart"].SOFT_ROWS,
        "Pairs": m["chart"].PAIR_ROWS,
    }
    group = st.radio("Hands", options=list(groups), horizontal=True)
    chart_decks = st.slider("Chart decks (fresh shoe)", min_value=1, max_value=8, value=1)

    if st.button("Solve chart", type="primary"):
        chart_rules = dataclasses.replace(rules, num_decks=chart_decks)
        counts = m["shoe"].value_counts(m["shoe"].create_shoe(chart_decks))
        with st.spinner(f"Solving {group.lower()} for a {chart_decks}-deck shoe …"):
            chart = m["chart"].build_strategy_chart(
                counts, chart_rules, rows=groups[group], calculator=_calculator(dataclasses.astuple(chart_rules))
            )

        fig = m["chart"].plot_strategy_chart(chart, f"{group} ({chart_decks} deck)", show_ev=True, show=False)
        st.pyplot(fig)

        st.markdown("---")
        st.subheader("Interactive lookup")
        st.plotly_chart(m["build_strategy_lookup_figure"](chart, f"{group} ({chart_decks} deck)"),
                        use_container_width=True)
    else:
        st.info("Press **Solve chart** to enumerate every cell.")
