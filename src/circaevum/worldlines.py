"""Worldline construction: one helix per body, plus the Moon and the current-to-selected connector."""

import math
from datetime import datetime
from logging import Logger

import numpy as np

from circaevum.config import (
    EARTH,
    LUNAR_PERIOD_YEARS,
    MOON_DISTANCE,
    MOON_WORLDLINE_COLOR,
    WORLDLINE_OPACITY,
    find_body,
    selected_color,
)
from circaevum.geometry import current_height_for_zoom, helix
from circaevum.logger import get_logger
from circaevum.models import OrbitingBody, Worldline, ZoomLevelConfig
from circaevum.timescale import HeightScale

_EXTENSION_FACTOR = 2.5  # Visible span multiple for zoom >= 4
_MOON_EXTENSION_FACTOR = 5.0
_MOON_SEGMENTS = 1000
_CONNECTOR_SEGMENTS = 100


def light_mode_color(color: int) -> int:
    """Darken a 0xRRGGBB colour for visibility on a light background."""
    factor = 1.3 * 0.7
    r = min(255, round(((color >> 16) & 0xFF) * factor))
    g = min(255, round(((color >> 8) & 0xFF) * factor))
    b = min(255, round((color & 0xFF) * factor))
    return (r << 16) | (g << 8) | b


class WorldlineBuilder:
    """Builds worldlines for a planet table at a given zoom level."""

    def __init__(
        self,
        bodies: tuple[OrbitingBody, ...],
        zoom_levels: dict[int, ZoomLevelConfig],
        scale: HeightScale | None = None,
        light_mode: bool = False,
        logger: Logger | None = None,
    ) -> None:
        self.bodies = bodies
        self.zoom_levels = zoom_levels
        self.scale = scale or HeightScale()
        self.light_mode = light_mode
        self.log = logger or get_logger(__name__)

    def worldline_span(self, zoom_level: int, now: datetime) -> tuple[float, float] | None:
        """(start_height, end_height) of the worldlines at this zoom.

        Returns:
            None when the zoom level is not configured.
        """
        config = self.zoom_levels.get(zoom_level)
        if config is None:
            return None
        if config.fixed_range is not None:
            first, last = config.fixed_range
            return self.scale.height_for_year(first), self.scale.height_for_year(last)

        current = current_height_for_zoom(zoom_level, now, self.scale)
        year_height = self.scale.height_per_year
        if zoom_level == 3:
            progress = self.scale.year_progress(now.year, now.month - 1, now.day, 0)
            start = current - progress * year_height
            return start, start + year_height

        half_span = config.time_years * year_height * _EXTENSION_FACTOR / 2
        return current - half_span, current + half_span

    def build(
        self, body: OrbitingBody, zoom_level: int, now: datetime
    ) -> Worldline | None:
        span = self.worldline_span(zoom_level, now)
        if span is None:
            self.log.warning("No zoom config for level %s; skipping %s", zoom_level, body.name)
            return None

        current = current_height_for_zoom(zoom_level, now, self.scale)
        segments = 400 if zoom_level >= 4 else 200
        points = helix(
            span[0],
            span[1],
            body.distance,
            current,
            body.orbital_period_years,
            body.start_angle,
            segments,
        )

        prominent = body.name == EARTH and zoom_level >= 3
        opacity = 0.9 if prominent else WORLDLINE_OPACITY
        width = 3.0 if prominent else 2.0
        color = body.color
        if self.light_mode:
            color = light_mode_color(color)
            opacity = 0.95
            width += 1

        return Worldline(
            name=body.name, points=points, color=color, opacity=opacity, width=width
        )

    def build_all(self, zoom_level: int, now: datetime) -> tuple[Worldline, ...]:
        built = (self.build(body, zoom_level, now) for body in self.bodies)
        return tuple(w for w in built if w is not None)

    def connector(
        self, body: OrbitingBody, current_height: float, selected_height: float
    ) -> Worldline:
        """Short helix joining the current and the selected time."""
        points = helix(
            min(current_height, selected_height),
            max(current_height, selected_height),
            body.distance,
            current_height,
            body.orbital_period_years,
            body.start_angle,
            _CONNECTOR_SEGMENTS,
        )
        return Worldline(
            name=f"{body.name} connector",
            points=points,
            color=selected_color(self.light_mode),
            opacity=0.5,
            width=2.0,
        )

    def moon(self, current_height: float, zoom_level: int) -> Worldline | None:
        """Moon worldline traced around Earth's own helix.

        Each sample starts from Earth's position at that height; the Moon is
        offset from it with its phase locked to the Sun–Earth direction
        (new moon on the sunward side).
        """
        config = self.zoom_levels.get(zoom_level)
        earth = find_body(self.bodies, EARTH)
        if config is None or earth is None:
            self.log.warning("Moon worldline needs zoom %s config and Earth", zoom_level)
            return None

        total_span = config.time_years * self.scale.height_per_year * _MOON_EXTENSION_FACTOR
        start_height = current_height - total_span / 2

        earth_points = helix(
            start_height,
            start_height + total_span,
            earth.distance,
            current_height,
            earth.orbital_period_years,
            earth.start_angle,
            _MOON_SEGMENTS,
        )
        t = np.linspace(0.0, 1.0, _MOON_SEGMENTS + 1)
        moon_orbits = total_span / self.scale.height_per_year / LUNAR_PERIOD_YEARS
        phase_progress = np.mod(t * moon_orbits, 1.0)

        sun_to_earth = np.arctan2(earth_points[:, 2], earth_points[:, 0])
        moon_angle = sun_to_earth + math.pi - phase_progress * math.tau
        points = np.column_stack(
            (
                earth_points[:, 0] + np.cos(moon_angle) * MOON_DISTANCE,
                earth_points[:, 1],
                earth_points[:, 2] + np.sin(moon_angle) * MOON_DISTANCE,
            )
        )
        return Worldline(
            name="Moon", points=points, color=MOON_WORLDLINE_COLOR, opacity=0.4, width=1.0
        )
