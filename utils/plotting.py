"""
utils/plotting.py
=================
Plotly figures for the results page.
"""
from __future__ import annotations

import pandas as pd
import plotly.graph_objects as go
from plotly import express as px

from config import CHART_HEIGHT_PX

LOSS_COLUMNS = {
    "Transmission (kW)": "Transmission",
    "Ventilation (kW)": "Lüftung",
    "Thermal bridges (kW)": "Wärmebrücken",
    "Safety margin (kW)": "Zuschlag",
}
LOSS_COLORS = ["#2c7fb8", "#7fcdbb", "#fdae61", "#bdbdbd"]


def fix_fig(fig, title=None, height=CHART_HEIGHT_PX):
    """Apply consistent styling to figures."""
    fig.update_layout(
        height=height,
        autosize=False,
        margin=dict(l=60, r=40, t=60, b=60),
        legend=dict(
            orientation='h',
            yanchor='bottom',
            y=1.02,
            xanchor='right',
            x=1,
            bgcolor='rgba(255,255,255,0.8)',
            bordercolor='#ddd',
            borderwidth=1
        ),
        paper_bgcolor='rgba(0,0,0,0)',
        plot_bgcolor='rgba(0,0,0,0)',
        font=dict(family="Arial, sans-serif", size=12, color="#333"),
        hoverlabel=dict(bgcolor="white", font_size=13, font_family="Arial, sans-serif"),
    )
    if title:
        fig.update_layout(
            title=dict(text=title, x=0.5, xanchor='center',
                       font=dict(size=16, family="Arial, sans-serif", color="#2c3e50"))
        )
    fig.update_yaxes(automargin=True, showline=True, linewidth=1, linecolor='#ddd',
                     gridcolor='#eee', zeroline=False)
    fig.update_xaxes(automargin=True, showline=True, linewidth=1, linecolor='#ddd',
                     gridcolor='#eee')
    return fig


def empty_fig(title="", height=CHART_HEIGHT_PX):
    return fix_fig(px.scatter(), title=title, height=height)


def room_load_bar(df: pd.DataFrame, title: str = "Heizlast je Raum") -> go.Figure:
    """Stacked bar of the loss components per room (summary table rows)."""
    if df is None or df.empty:
        return empty_fig(title)
    labels = df["Floor"].astype(str) + " – " + df["Room"].astype(str)
    fig = go.Figure()
    for (col, name), color in zip(LOSS_COLUMNS.items(), LOSS_COLORS):
        fig.add_bar(x=labels, y=df[col], name=name, marker_color=color,
                    hovertemplate="%{x}<br>" + name + ": %{y:.2f} kW<extra></extra>")
    fig.update_layout(barmode="stack", yaxis_title="kW", xaxis_title="")
    return fix_fig(fig, title=title)


def loss_share_pie(din_totals: dict, title: str = "Verlustanteile (DIN)") -> go.Figure:
    """Share of transmission, thermal bridges and ventilation in the DIN totals [W]."""
    parts = {
        "Transmission": din_totals.get("transmissionW", 0.0),
        "Wärmebrücken": din_totals.get("thermalBridgeW", 0.0),
        "Lüftung": din_totals.get("ventilationW", 0.0),
    }
    if sum(v for v in parts.values() if v > 0) <= 0:
        return empty_fig(title)
    fig = px.pie(names=list(parts), values=[max(0.0, v) for v in parts.values()], hole=0.45,
                 color_discrete_sequence=[LOSS_COLORS[0], LOSS_COLORS[2], LOSS_COLORS[1]])
    fig.update_traces(textinfo="percent+label")
    return fix_fig(fig, title=title)
