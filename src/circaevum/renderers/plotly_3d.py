"""Plotly 3D interactive orrery renderer.

Draws worldlines, time-marker lines, parent curves, labels and moon phases
from already-computed primitives. Height (scene y) is mapped to plotly's
z axis so time runs upward.
"""

import math

import numpy as np
import plotly.graph_objects as go

from circaevum.models import Highlight, TimeMarkerSet, Worldline

_BG_DARK = "#050a1a"
_BG_LIGHT = "#ffffff"
_TEXT_DARK = "#dddddd"
_TEXT_LIGHT = "#222222"
_HIGHLIGHT_ORDER = (Highlight.NONE, Highlight.SELECTED, Highlight.CURRENT)


def hex_color(color: int) -> str:
    return f"#{color:06x}"


def _xyz(points: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    # Scene y is height; plotly z is up
    return points[:, 0], points[:, 2], points[:, 1]


def _worldline_trace(worldline: Worldline) -> go.Scatter3d:
    x, y, z = _xyz(worldline.points)
    return go.Scatter3d(
        x=x,
        y=y,
        z=z,
        mode="lines",
        line=dict(color=hex_color(worldline.color), width=worldline.width),
        opacity=worldline.opacity,
        hoverinfo="name",
        name=worldline.name,
    )


def _segments_trace(segments: list[np.ndarray], color: int, width: float, opacity: float,
                    name: str) -> go.Scatter3d:
    """Many polylines in one trace using None separators."""
    xs: list[float | None] = []
    ys: list[float | None] = []
    zs: list[float | None] = []
    for points in segments:
        x, y, z = _xyz(points)
        xs += [*x.tolist(), None]
        ys += [*y.tolist(), None]
        zs += [*z.tolist(), None]
    return go.Scatter3d(
        x=xs,
        y=ys,
        z=zs,
        mode="lines",
        line=dict(color=hex_color(color), width=width),
        opacity=opacity,
        hoverinfo="skip",
        name=name,
    )


def _marker_traces(markers: TimeMarkerSet) -> list[go.Scatter3d]:
    # Plotly styles per trace, so group primitives by their look
    groups: dict[tuple[int, float, float, str], list[np.ndarray]] = {}
    for curve in markers.curves:
        groups.setdefault((curve.color, curve.width, curve.opacity, curve.kind), []).append(curve.points)
    for highlight in _HIGHLIGHT_ORDER:
        for line in markers.lines:
            if line.highlight is highlight:
                key = (line.color, line.width, line.opacity, line.kind)
                groups.setdefault(key, []).append(line.points)
    return [
        _segments_trace(segments, color, width, opacity, kind)
        for (color, width, opacity, kind), segments in groups.items()
    ]


def _label_trace(markers: TimeMarkerSet, default_color: str) -> go.Scatter3d:
    labels = markers.labels
    return go.Scatter3d(
        x=[math.cos(label.angle) * label.radius for label in labels],
        y=[math.sin(label.angle) * label.radius for label in labels],
        z=[label.height for label in labels],
        mode="text",
        text=[f"<b>{label.text}</b>" if label.bold else label.text for label in labels],
        textfont=dict(
            color=[label.color or default_color for label in labels],
            size=[12 * label.size for label in labels],
        ),
        hoverinfo="skip",
        name="labels",
    )


def _moon_phase_trace(markers: TimeMarkerSet) -> go.Scatter3d:
    phases = markers.moon_phases
    # 0 at new moon, 1 at full moon
    illumination = [(1 - math.cos(p.phase * math.tau)) / 2 for p in phases]
    return go.Scatter3d(
        x=[math.cos(p.angle) * p.radius for p in phases],
        y=[math.sin(p.angle) * p.radius for p in phases],
        z=[p.height for p in phases],
        mode="markers",
        marker=dict(size=5, color=illumination, colorscale="Greys", reversescale=True, cmin=0, cmax=1),
        hovertext=[f"phase {p.phase:.2f}" for p in phases],
        hoverinfo="text",
        name="moon phases",
    )


def render_plotly_scene(
    worldlines: tuple[Worldline, ...],
    markers: TimeMarkerSet,
    light_mode: bool = False,
) -> go.Figure:
    """Render worldlines and time markers as a Plotly 3D figure.

    Args:
        worldlines: Helices from WorldlineBuilder (Moon and connector included).
        markers: Output of one TimeMarkers.create_time_markers call.
        light_mode: White background and dark text when True.

    Returns:
        Plotly Figure object.
    """
    background = _BG_LIGHT if light_mode else _BG_DARK
    text_color = _TEXT_LIGHT if light_mode else _TEXT_DARK

    traces = [_worldline_trace(w) for w in worldlines]
    traces += _marker_traces(markers)
    if markers.labels:
        traces.append(_label_trace(markers, text_color))
    if markers.moon_phases:
        traces.append(_moon_phase_trace(markers))

    fig = go.Figure(data=traces)
    hidden_axis = dict(visible=False, showbackground=False)
    fig.update_layout(
        paper_bgcolor=background,
        plot_bgcolor=background,
        showlegend=False,
        margin=dict(l=0, r=0, t=0, b=0),
        width=900,
        height=900,
        scene=dict(
            xaxis=hidden_axis,
            yaxis=hidden_axis,
            zaxis=hidden_axis,
            aspectmode="data",
            bgcolor=background,
        ),
    )
    fig._config = {"scrollZoom": True, "displayModeBar": False}  # type: ignore[attr-defined]

    return fig
