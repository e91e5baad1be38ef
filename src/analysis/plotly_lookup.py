"""Interactive Plotly figures for the exact-EV calculator.

Three public functions:

    build_action_ev_figure(evs, title)
        — Bar chart of the EV of each available action at one decision point.
    build_strategy_lookup_figure(chart, title)
        — Side-by-side heatmaps of a StrategyChart: best action and best EV.
    save_lookup_html(fig, path)
        — Export any figure to a self-contained HTML file.

Hovering over a chart cell shows the player hand, dealer up card, best action
and its EV. Figures open in a browser via ``fig.show()``, embed in Jupyter
notebooks, or render in the Streamlit dashboard with ``st.plotly_chart``.
"""

from __future__ import annotations

import numpy as np
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from src.analysis.strategy_chart import ACTION_COLORS, ACTION_LETTERS, StrategyChart
from src.solvers.advisor import ACTION_ORDER, ActionEVs

# ─── Constants ────────────────────────────────────────────────────────────────

_BEST_COLOR: str = "#2ca02c"
_OTHER_COLOR: str = "#9e9e9e"
_EV_COLORSCALE: str = "RdYlGn"


def _make_action_colorscale() -> list[list]:
    """Stepped colorscale mapping action codes 0..4 (zmin=-0.5, zmax=4.5) to bands."""
    n = len(ACTION_COLORS)
    scale: list[list] = []
    for i, color in enumerate(ACTION_COLORS):
        scale.append([i / n, color])
        scale.append([(i + 1) / n, color])
    return scale


ACTION_COLORSCALE: list[list] = _make_action_colorscale()


# ─── Hover text builder ───────────────────────────────────────────────────────


def _build_chart_hover(chart: StrategyChart) -> list[list[str]]:
    """Return a rows×cols list of hover strings for a StrategyChart.

    Absent (NaN) cells get an empty string.
    """
    rows: list[list[str]] = []
    for r, row_label in enumerate(chart.row_labels):
        row: list[str] = []
        for c, col_label in enumerate(chart.col_labels):
            code = chart.actions[r, c]
            if np.isnan(code):
                row.append("")
                continue
            action = ACTION_ORDER[int(code)]
            lines = [
                f"Player: <b>{row_label}</b>",
                f"Dealer up: {col_label}",
                f"Action: <b>{action.value}</b>",
                f"EV: {chart.evs[r, c]:+.4f}",
            ]
            row.append("<br>".join(lines))
        rows.append(row)
    return rows


# ─── Trace builder ─────────────────────────────────────────────────────────────


def _make_heatmap_trace(
    data: np.ndarray,
    hover_text: list[list[str]],
    chart: StrategyChart,
    *,
    colorscale: list[list] | str,
    zmin: float,
    zmax: float,
    name: str,
    showscale: bool = True,
    colorbar_title: str = "",
    colorbar_x: float = 1.02,
    annotate: bool = False,
) -> go.Heatmap:
    """Build one go.Heatmap trace for a chart panel.

    NaN values in *data* are converted to None so Plotly renders them as
    blank (transparent) cells. Rows are listed top-down as in the chart.
    """
    z = [[None if np.isnan(v) else v for v in row] for row in data.tolist()]
    if annotate:
        # Letters drawn in the cells; hover strings move to hovertext.
        letters = [
            ["" if np.isnan(v) else ACTION_LETTERS[int(v)] for v in row]
            for row in data.tolist()
        ]
        text_kwargs: dict = {
            "text": letters,
            "texttemplate": "%{text}",
            "hovertext": hover_text,
            "hoverinfo": "text",
        }
    else:
        text_kwargs = {"text": hover_text, "hovertemplate": "%{text}<extra></extra>"}
    return go.Heatmap(
        z=z,
        x=chart.col_labels,
        y=chart.row_labels,
        colorscale=colorscale,
        zmin=zmin,
        zmax=zmax,
        showscale=showscale,
        colorbar={"title": colorbar_title, "x": colorbar_x},
        name=name,
        **text_kwargs,
    )


# ─── Public figure builders ───────────────────────────────────────────────────


def build_action_ev_figure(evs: ActionEVs, title: str = "Action EVs") -> go.Figure:
    """Bar chart of the EV of each available action; the best bar is highlighted.

    Args:
        evs:   Result of advisor.evaluate_actions().
        title: Figure title.

    Returns:
        go.Figure with a single bar trace.
    """
    options = evs.available()
    best = evs.best_action
    names = [action.value for action in options]
    values = list(options.values())
    colors = [_BEST_COLOR if action is best else _OTHER_COLOR for action in options]

    fig = go.Figure(
        go.Bar(
            x=names,
            y=values,
            marker_color=colors,
            text=[f"{v:+.4f}" for v in values],
            textposition="outside",
            hovertemplate="%{x}: %{y:+.4f}<extra></extra>",
        )
    )
    fig.add_hline(y=0.0, line_width=1, line_color="black")
    fig.update_layout(
        title_text=title,
        title_font_size=15,
        height=380,
        yaxis_title="EV (units of wager)",
        showlegend=False,
    )
    return fig


def build_strategy_lookup_figure(chart: StrategyChart, title: str = "Strategy Lookup") -> go.Figure:
    """Build an interactive figure for a StrategyChart (action + EV panels).

    Args:
        chart: StrategyChart from strategy_chart.build_strategy_chart().
        title: Figure title.

    Returns:
        go.Figure with two heatmap traces in a 1×2 subplot layout.
    """
    hover = _build_chart_hover(chart)
    fig = make_subplots(
        rows=1,
        cols=2,
        subplot_titles=["Best action", "Best EV"],
        horizontal_spacing=0.14,
    )

    fig.add_trace(
        _make_heatmap_trace(
            chart.actions,
            hover,
            chart,
            colorscale=ACTION_COLORSCALE,
            zmin=-0.5,
            zmax=len(ACTION_ORDER) - 0.5,
            name="Action",
            showscale=False,
            annotate=True,
        ),
        row=1,
        col=1,
    )

    finite = chart.evs[~np.isnan(chart.evs)]
    span = float(np.max(np.abs(finite))) if finite.size else 1.0
    fig.add_trace(
        _make_heatmap_trace(
            chart.evs,
            hover,
            chart,
            colorscale=_EV_COLORSCALE,
            zmin=-span,
            zmax=span,
            name="EV",
            showscale=True,
            colorbar_title="EV",
        ),
        row=1,
        col=2,
    )

    fig.update_layout(
        title_text=title,
        title_font_size=15,
        height=max(360, 26 * len(chart.row_labels) + 140),
        width=980,
    )
    fig.update_yaxes(autorange="reversed")
    fig.update_yaxes(title_text="Player hand", col=1)
    fig.update_xaxes(title_text="Dealer up card")
    return fig


# ─── HTML export ───────────────────────────────────────────────────────────────


def save_lookup_html(fig: go.Figure, path: str) -> None:
    """Save a Plotly figure to a self-contained HTML file.

    Plotly JS is loaded from the CDN so the file itself remains compact.

    Args:
        fig:  Any go.Figure produced by this module.
        path: Destination file path (e.g. ``"strategy_lookup.html"``).
    """
    fig.write_html(path, include_plotlyjs="cdn")


# ─── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import sys

    from src.analysis.strategy_chart import HARD_ROWS, build_strategy_chart
    from src.engine.config import GameRules
    from src.engine.shoe import create_shoe, value_counts

    num_decks = int(sys.argv[1]) if len(sys.argv) > 1 else 1
    print(f"Solving hard-total chart for a fresh {num_decks}-deck shoe …")
    chart = build_strategy_chart(
        value_counts(create_shoe(num_decks)), GameRules(num_decks=num_decks), rows=HARD_ROWS
    )
    save_lookup_html(build_strategy_lookup_figure(chart), "strategy_lookup.html")
    print("Saved: strategy_lookup.html")
