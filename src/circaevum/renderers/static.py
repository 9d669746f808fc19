"""Matplotlib static PNG renderer."""

import math
from datetime import datetime
from pathlib import Path

import matplotlib.pyplot as plt
from matplotlib.figure import Figure

from circaevum.models import TimeMarkerSet, Worldline
from circaevum.renderers.plotly_3d import hex_color

_ROOT = Path(__file__).parent.parent.parent.parent


def render_static_scene(
    worldlines: tuple[Worldline, ...],
    markers: TimeMarkerSet,
    light_mode: bool = False,
    chart_size: int = 10,
) -> Figure:
    """Render worldlines and time markers as a static 3D matplotlib image.

    Args:
        worldlines: Helices from WorldlineBuilder.
        markers: Output of one TimeMarkers.create_time_markers call.
        light_mode: White background when True.
        chart_size: Output image size in inches.

    Returns:
        matplotlib Figure object.
    """
    background = "white" if light_mode else "black"
    text_color = "#222222" if light_mode else "#dddddd"

    fig = plt.figure(figsize=(chart_size, chart_size))
    ax = fig.add_subplot(projection="3d")
    fig.patch.set_facecolor(background)
    ax.set_facecolor(background)

    # Scene y is height; matplotlib z is up
    for worldline in worldlines:
        pts = worldline.points
        ax.plot(
            pts[:, 0], pts[:, 2], pts[:, 1],
            color=hex_color(worldline.color),
            linewidth=worldline.width / 2,
            alpha=worldline.opacity,
        )  # fmt: skip

    for curve in markers.curves:
        pts = curve.points
        ax.plot(
            pts[:, 0], pts[:, 2], pts[:, 1],
            color=hex_color(curve.color),
            linewidth=curve.width / 2,
            alpha=curve.opacity,
        )  # fmt: skip

    for line in markers.lines:
        pts = line.points
        ax.plot(
            pts[:, 0], pts[:, 2], pts[:, 1],
            color=hex_color(line.color),
            linewidth=line.width / 2,
            alpha=line.opacity,
        )  # fmt: skip

    for label in markers.labels:
        ax.text(
            math.cos(label.angle) * label.radius,
            math.sin(label.angle) * label.radius,
            label.height,
            label.text,
            color=label.color or text_color,
            fontsize=8 * label.size,
            fontweight="bold" if label.bold else "normal",
        )

    if markers.moon_phases:
        phases = markers.moon_phases
        ax.scatter(
            [math.cos(p.angle) * p.radius for p in phases],
            [math.sin(p.angle) * p.radius for p in phases],
            [p.height for p in phases],
            c=[(1 - math.cos(p.phase * math.tau)) / 2 for p in phases],
            cmap="gray",
            vmin=0,
            vmax=1,
            s=20,
        )

    ax.axis("off")

    return fig


def save_static_scene(
    worldlines: tuple[Worldline, ...],
    markers: TimeMarkerSet,
    output_path: Path | None = None,
    light_mode: bool = False,
    when: datetime | None = None,
) -> Path:
    """Save the scene as a PNG file.

    Args:
        worldlines: Helices from WorldlineBuilder.
        markers: Time markers for the same zoom level.
        output_path: Destination path. Auto-generated under results/ if None.
        light_mode: White background when True.
        when: Timestamp used in the auto-generated filename.

    Returns:
        Path to the saved file.
    """
    if output_path is None:
        when_str = (when or datetime.now()).strftime("%Y_%m_%d_%H_%M")
        filename = f"zoom{markers.zoom_level}__{when_str}.png"
        output_path = _ROOT / "results" / filename

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig = render_static_scene(worldlines, markers, light_mode)
    fig.savefig(output_path, facecolor=fig.get_facecolor())
    plt.close(fig)
    return output_path
