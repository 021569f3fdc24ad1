"""Interactive downtime / satisfaction chart over a production table.

Reads the table only; nothing in the generator or analysis modules depends on
this module.
"""

from pathlib import Path
from typing import List, Optional

import pandas as pd
import plotly.graph_objects as go

from line_analytics.errors import InvalidArgument, MalformedInput
from line_analytics.production_sim import LINE_IDS

METRICS = ["Downtime_Hours", "Worker_Satisfaction"]

LINE_COLORS = {
    "Assembly": "#29B5E8",
    "Painting": "#FF9800",
    "Welding": "#4CAF50",
}


def timeseries_view(table: pd.DataFrame, line_id: Optional[str] = None) -> pd.DataFrame:
    """Return a date-sorted copy of the chart columns, optionally for one line."""
    missing = [c for c in ["Date", "Line_ID", *METRICS] if c not in table.columns]
    if missing:
        raise MalformedInput(f"table is missing required columns: {', '.join(missing)}")
    if line_id is not None and line_id not in LINE_IDS:
        raise InvalidArgument(f"unknown line {line_id!r}, expected one of {', '.join(LINE_IDS)}")

    view = table[["Date", "Line_ID", *METRICS]].copy()
    view["Date"] = pd.to_datetime(view["Date"], format="%Y-%m-%d")
    if line_id is not None:
        view = view[view["Line_ID"] == line_id]
    return view.sort_values("Date", kind="stable").reset_index(drop=True)


def _visibility(trace_lines: List[str], selected: Optional[str]) -> List[bool]:
    return [selected is None or line == selected for line in trace_lines]


def build_dashboard(table: pd.DataFrame) -> go.Figure:
    """Line chart of downtime and satisfaction with per-line toggle buttons."""
    view = timeseries_view(table)

    fig = go.Figure()
    trace_lines = []
    for line_id in LINE_IDS:
        subset = view[view["Line_ID"] == line_id]
        color = LINE_COLORS[line_id]
        fig.add_trace(go.Scatter(
            x=subset["Date"], y=subset["Downtime_Hours"], mode="lines",
            name=f"{line_id} - Downtime (h)", line=dict(color=color, width=2),
        ))
        fig.add_trace(go.Scatter(
            x=subset["Date"], y=subset["Worker_Satisfaction"], mode="lines",
            name=f"{line_id} - Satisfaction", yaxis="y2",
            line=dict(color=color, width=1, dash="dot"),
        ))
        trace_lines.extend([line_id, line_id])

    buttons = [dict(
        label="All Lines", method="update",
        args=[{"visible": _visibility(trace_lines, None)}, {"title": "All Lines"}],
    )]
    for line_id in LINE_IDS:
        buttons.append(dict(
            label=line_id, method="update",
            args=[{"visible": _visibility(trace_lines, line_id)}, {"title": f"{line_id} Line"}],
        ))

    fig.update_layout(
        title="All Lines",
        xaxis=dict(title="Date"),
        yaxis=dict(title="Downtime (hours)"),
        yaxis2=dict(title="Worker Satisfaction", overlaying="y", side="right"),
        updatemenus=[dict(type="buttons", direction="right", x=0, y=1.15, xanchor="left", buttons=buttons)],
        legend=dict(orientation="h", y=-0.2),
        template="plotly_white",
    )
    return fig


def write_dashboard(fig: go.Figure, path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.write_html(str(path), include_plotlyjs="cdn")
    return path
