"""Scene geometry: height/angle projection and helix/line sampling.

Every time-unit boundary, parent curve and worldline goes through the same
two equations, so markers always sit exactly on the bodies' paths:

    angle = start_angle - ((height - current_height) / 100 / period) * 2π
    (x, y, z) = (cos(angle) * r, height, sin(angle) * r)

Angles decrease as height increases (forward in time is clockwise).
"""

import math
from dataclasses import dataclass
from datetime import datetime

import numpy as np

from circaevum.config import HEIGHT_PER_YEAR
from circaevum.models import OrbitingBody
from circaevum.timescale import HeightScale


def angle_at(
    height: float, current_height: float, orbital_period: float, start_angle: float
) -> float:
    """Orbital angle (radians) at `height`, relative to the current height."""
    orbits = (height - current_height) / HEIGHT_PER_YEAR / orbital_period
    return start_angle - orbits * math.tau


def position_at(height: float, angle: float, radius: float) -> tuple[float, float, float]:
    """Cylindrical → Cartesian. Height is the y axis."""
    return math.cos(angle) * radius, height, math.sin(angle) * radius


def helix(
    start_height: float,
    end_height: float,
    radius: float,
    current_height: float,
    orbital_period: float,
    start_angle: float,
    segments: int = 64,
) -> np.ndarray:
    """Sample a helical path between two heights at constant radius.

    Rotation is interpolated linearly over the span, starting from the
    rotation accumulated between `current_height` and `start_height`.

    Returns:
        Array of shape (segments + 1, 3); first row at `start_height`,
        last row at `end_height`.
    """
    t = np.linspace(0.0, 1.0, segments + 1)
    total_height = end_height - start_height
    orbits_in_span = total_height / HEIGHT_PER_YEAR / orbital_period
    orbits_before_current = (current_height - start_height) / HEIGHT_PER_YEAR / orbital_period
    curve_start_angle = start_angle + orbits_before_current * math.tau

    angles = curve_start_angle - t * orbits_in_span * math.tau
    heights = start_height + t * total_height
    return np.column_stack(
        (np.cos(angles) * radius, heights, np.sin(angles) * radius)
    )


def line(
    height: float,
    start_radius: float,
    end_radius: float,
    current_height: float,
    orbital_period: float,
    start_angle: float,
) -> np.ndarray:
    """Radial separator segment at one height; shape (2, 3)."""
    angle = angle_at(height, current_height, orbital_period, start_angle)
    return np.array(
        [position_at(height, angle, start_radius), position_at(height, angle, end_radius)]
    )


def current_height_for_zoom(zoom_level: int, now: datetime, scale: HeightScale) -> float:
    """Reference height for angle calculations at a zoom level.

    Year and quarter views use midnight of today so boundaries don't creep
    through the day; finer views include the hour; the linear views anchor
    at the start of the current year.
    """
    if zoom_level in (3, 4):
        return scale.date_to_height(now.year, now.month - 1, now.day, 0)
    if zoom_level >= 3:
        return scale.current_height(now)
    return scale.height_for_year(now.year)


@dataclass(frozen=True)
class SceneGeometry:
    """Projection bound to a reference body (Earth) for default arguments."""

    reference: OrbitingBody

    def angle_at(
        self,
        height: float,
        current_height: float,
        orbital_period: float | None = None,
        start_angle: float | None = None,
    ) -> float:
        period = (
            self.reference.orbital_period_years if orbital_period is None else orbital_period
        )
        start = self.reference.start_angle if start_angle is None else start_angle
        return angle_at(height, current_height, period, start)

    def body_angle(self, height: float, current_height: float, body: OrbitingBody) -> float:
        return angle_at(height, current_height, body.orbital_period_years, body.start_angle)

    def helix(
        self,
        start_height: float,
        end_height: float,
        radius: float,
        current_height: float,
        segments: int = 64,
    ) -> np.ndarray:
        return helix(
            start_height,
            end_height,
            radius,
            current_height,
            self.reference.orbital_period_years,
            self.reference.start_angle,
            segments,
        )

    def line(
        self, height: float, start_radius: float, end_radius: float, current_height: float
    ) -> np.ndarray:
        return line(
            height,
            start_radius,
            end_radius,
            current_height,
            self.reference.orbital_period_years,
            self.reference.start_angle,
        )
