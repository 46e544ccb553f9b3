from __future__ import annotations

from pathlib import Path

import plotly.graph_objects as go

from celestial_sim.simulation.engine import SimulationLog


def build_track_figure(log: SimulationLog, title: str = "Star System Playback") -> go.Figure:
    """
    Static top-down plot of the recorded log:
      - Track (line) for each body
      - Last position marker for each body
    """
    if not log.positions_km:
        raise ValueError("No body positions found in log.")

    fig = go.Figure()

    for path, samples in log.positions_km.items():
        xs = [r[0] for (_t, r) in samples]
        ys = [r[1] for (_t, r) in samples]

        fig.add_trace(go.Scatter(
            x=xs, y=ys,
            mode="lines",
            name=f"{path} track",
        ))

        # last point
        fig.add_trace(go.Scatter(
            x=[xs[-1]], y=[ys[-1]],
            mode="markers",
            name=f"{path} now",
            marker=dict(size=7),
        ))

    fig.update_layout(
        title=title,
        xaxis_title="X (km)",
        yaxis_title="Y (km)",
        yaxis=dict(scaleanchor="x", scaleratio=1),
        margin=dict(l=0, r=0, t=40, b=0),
        legend=dict(orientation="h"),
    )
    return fig


def render_tracks(log: SimulationLog, out_html: str = "out/tracks.html") -> str:
    fig = build_track_figure(log)
    Path(out_html).parent.mkdir(parents=True, exist_ok=True)
    fig.write_html(out_html, auto_open=False)
    return out_html
