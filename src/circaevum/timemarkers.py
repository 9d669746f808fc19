"""Time-marker emission for every active granularity (boundary lines, parent curves, labels).

`TimeMarkers.create_time_markers(zoom)` is the entry point: it snapshots the
clock and the navigation offsets into a TimeState, resolves each active
granularity, and returns a fresh TimeMarkerSet. Nothing carries over
between calls.
"""

import math
from datetime import date, datetime, timedelta
from logging import Logger

import numpy as np

from circaevum.config import (
    CURRENT_COLOR,
    DAY_ABBREVIATIONS,
    DAY_NAMES,
    EARTH,
    KNOWN_NEW_MOON,
    SYNODIC_MONTH_DAYS,
    TIME_MARKERS,
    ZOOM_LEVELS,
    find_body,
    marker_color,
    selected_color,
)
from circaevum.geometry import SceneGeometry, position_at
from circaevum.logger import get_logger
from circaevum.models import (
    CurvePrimitive,
    Highlight,
    LabelRequest,
    LinePrimitive,
    MoonPhaseMarker,
    NavigationOffsets,
    OrbitingBody,
    ResolvedUnit,
    TimeMarkerSet,
    TimeState,
    ZoomLevelConfig,
)
from circaevum.timescale import Clock, HeightScale, wall_clock
from circaevum.timeunits import (
    GRANULARITIES,
    MONTHS,
    QUARTERS,
    TimeUnitResolver,
    add_months,
    build_time_state,
    day_in_week,
    parent_months,
)

KINDS = ("quarter", "month", "week", "day")

_LABEL_COLORS = {Highlight.CURRENT: "red", Highlight.SELECTED: "blue", Highlight.NONE: None}
_TEXT_ZOOM = {"quarter": 4, "month": 4, "week": 5}  # Text scaling reference per granularity
_CURVE_OPACITY = 0.6
_HOUR_SPIRAL_FRACTION = 0.1 * 0.9
_MOON_PHASE_FRACTION = 8 / 9


def moon_phase(moment: datetime) -> float:
    """Fraction of the synodic month elapsed at `moment` (0=new, 0.5=full)."""
    days = (moment - KNOWN_NEW_MOON).total_seconds() / 86400
    return (days % SYNODIC_MONTH_DAYS) / SYNODIC_MONTH_DAYS


class TimeFrameEmitter:
    """Turns resolved units into line, curve, and label requests."""

    def __init__(
        self,
        geometry: SceneGeometry,
        scale: HeightScale,
        earth_distance: float,
        light_mode: bool = False,
    ) -> None:
        self.geometry = geometry
        self.scale = scale
        self.earth_distance = earth_distance
        self.light_mode = light_mode
        self.lines: list[LinePrimitive] = []
        self.curves: list[CurvePrimitive] = []
        self.labels: list[LabelRequest] = []
        self.moon_phases: list[MoonPhaseMarker] = []

    def color_for(self, highlight: Highlight) -> int:
        if highlight is Highlight.CURRENT:
            return CURRENT_COLOR
        if highlight is Highlight.SELECTED:
            return selected_color(self.light_mode)
        return marker_color(self.light_mode)

    def band(self, config: ZoomLevelConfig, kind: str) -> tuple[float, float]:
        inner, outer = config.bands[kind]
        return inner * self.earth_distance, outer * self.earth_distance

    # --- Unit boundaries and labels ---

    def emit_frame(
        self,
        kind: str,
        units: tuple[ResolvedUnit, ...],
        state: TimeState,
        config: ZoomLevelConfig,
    ) -> None:
        granularity = GRANULARITIES[kind]
        inner, outer = self.band(config, kind)
        label_radius = (inner + outer) / 2
        if kind == "day":
            label_radius = inner + (outer - inner) / 4

        for resolved in units:
            start_radius, end_radius = inner, outer
            # Quarter starts cut through every band out to Earth's path
            if kind == "month" and resolved.start.month in (1, 4, 7, 10):
                start_radius, end_radius = 0.0, self.earth_distance
            if kind == "week" and state.zoom_level >= 7:
                end_radius = self.earth_distance

            emphasized = resolved.is_current or resolved.is_selected
            self.lines.append(
                LinePrimitive(
                    points=self.geometry.line(
                        resolved.height, start_radius, end_radius, state.current_height
                    ),
                    color=self.color_for(resolved.boundary_highlight),
                    opacity=0.9 if emphasized else 0.7,
                    width=3.0 if emphasized else 2.0,
                    kind=kind,
                    highlight=resolved.boundary_highlight,
                )
            )

            if not granularity.label_eligible(resolved.unit, state):
                continue
            center_height = self.scale.height_of(granularity.label_center(resolved.unit))
            self.labels.append(
                LabelRequest(
                    text=granularity.label_text(resolved.unit),
                    height=center_height,
                    radius=label_radius,
                    angle=self.geometry.angle_at(center_height, state.current_height),
                    color=_LABEL_COLORS[resolved.highlight],
                    zoom=_TEXT_ZOOM.get(kind, state.zoom_level),
                    size=0.85,
                )
            )

    def emit_day_names(
        self, units: tuple[ResolvedUnit, ...], state: TimeState, config: ZoomLevelConfig
    ) -> None:
        """Weekday names beside the day numbers; full name when highlighted."""
        inner, outer = self.band(config, "day")
        radius = inner + (outer - inner) * 3 / 4
        for resolved in units:
            dow = day_in_week(resolved.start)
            highlighted = resolved.highlight is not Highlight.NONE
            center_height = self.scale.height_of(GRANULARITIES["day"].label_center(resolved.unit))
            self.labels.append(
                LabelRequest(
                    text=DAY_NAMES[dow] if highlighted else DAY_ABBREVIATIONS[dow],
                    height=center_height,
                    radius=radius,
                    angle=self.geometry.angle_at(center_height, state.current_height),
                    color=_LABEL_COLORS[resolved.highlight],
                    zoom=7,
                    size=0.85,
                )
            )

    # --- Parent curves ---

    def _curve(self, start: date, end: date, radius: float, state: TimeState, kind: str,
               shift: float = 0.0) -> None:
        start_height = self.scale.height_of(start) + shift
        end_height = self.scale.height_of(end) + shift
        self.curves.append(
            CurvePrimitive(
                points=self.geometry.helix(start_height, end_height, radius, state.current_height),
                color=marker_color(self.light_mode),
                opacity=_CURVE_OPACITY,
                width=2.0,
                kind=kind,
            )
        )

    def emit_parent_curves(
        self,
        kind: str,
        units: tuple[ResolvedUnit, ...],
        state: TimeState,
        config: ZoomLevelConfig,
    ) -> None:
        """Arcs along the outer edge of a band, one per unit (weeks: per month)."""
        _, outer = self.band(config, kind)
        if kind == "quarter":
            for resolved in units:
                self._curve(resolved.start, QUARTERS.increment(resolved.unit).start, outer, state, kind)
        elif kind == "month":
            for resolved in units:
                # Index 12 only remains as the closing boundary of the year
                if resolved.unit.index == 12:
                    continue
                self._curve(resolved.start, MONTHS.increment(resolved.unit).start, outer, state, kind)
        elif kind == "week":
            for year, month in parent_months(state):
                next_year, next_month = add_months(year, month, 1)
                start = date(year, month + 1, 1)
                end = date(next_year, next_month + 1, 1)
                self._curve(start, end, outer, state, kind)
        elif kind == "day":
            sundays = sorted({r.start - timedelta(days=day_in_week(r.start)) for r in units})
            for sunday in sundays:
                end = sunday + timedelta(days=7)
                # Shifted half a day to line up with the noon-anchored day labels
                half_day = (self.scale.height_of(end) - self.scale.height_of(sunday)) / 14
                self._curve(sunday, end, outer, state, kind, shift=half_day)

    # --- Supplementary markers ---

    def emit_year_markers(self, state: TimeState, config: ZoomLevelConfig) -> None:
        """Vertical year markers on the time axis."""
        current_year = state.now.year
        if config.level in TIME_MARKERS:
            years = TIME_MARKERS[config.level]
            length = (years[1] - years[0]) * self.scale.height_per_year
            label_radius = -100.0 if config.level == 1 else -80.0
            opacity, width, bold, size = 0.6, 1.0, False, 1.0
        else:
            years = (state.selected_year,)
            length = self.scale.height_per_year
            label_radius = -100.0
            opacity, width, bold, size = 0.8, 2.0, True, 2.0

        for year in years:
            if year == current_year:
                highlight = Highlight.CURRENT
            elif year == state.selected_year:
                highlight = Highlight.SELECTED
            else:
                highlight = Highlight.NONE
            height = self.scale.height_for_year(year)
            self.lines.append(
                LinePrimitive(
                    points=np.array([[0.0, height, 0.0], [0.0, height + length, 0.0]]),
                    color=self.color_for(highlight),
                    opacity=opacity,
                    width=width,
                    kind="year",
                    highlight=highlight,
                )
            )
            self.labels.append(
                LabelRequest(
                    text=str(year),
                    height=height,
                    radius=label_radius,
                    angle=0.0,
                    color=_LABEL_COLORS[highlight],
                    zoom=config.level,
                    size=size,
                    bold=bold,
                )
            )

    def emit_moon_phases(self, state: TimeState, lunar_time_years: float) -> None:
        """Daily moon-phase markers across one lunar window around the selection."""
        lunar_height = lunar_time_years * self.scale.height_per_year
        low = state.selected_height - lunar_height / 2
        high = state.selected_height + lunar_height / 2
        center = datetime(state.selected_day.year, state.selected_day.month, state.selected_day.day, 12)
        radius = self.earth_distance * _MOON_PHASE_FRACTION

        for offset in range(-14, 14):
            moment = center + timedelta(days=offset)
            height = self.scale.height_of(moment)
            if not low <= height <= high:
                continue
            self.moon_phases.append(
                MoonPhaseMarker(
                    phase=moon_phase(moment),
                    height=height,
                    angle=self.geometry.angle_at(height, state.current_height),
                    radius=radius,
                )
            )

    def emit_hour_dial(self, state: TimeState, earth: OrbitingBody, config: ZoomLevelConfig) -> None:
        """One-turn 24-hour spiral around Earth with hour labels and a hand.

        Midnight points away from the Sun; hours advance clockwise.
        """
        earth_x, earth_y, earth_z = position_at(state.current_height, earth.start_angle, earth.distance)
        sun_to_earth = math.atan2(earth_z, earth_x)
        spiral_radius = self.earth_distance * _HOUR_SPIRAL_FRACTION
        day_height = config.time_years * self.scale.height_per_year

        def dial_point(t: float, radius: float) -> tuple[float, float, float]:
            angle = sun_to_earth - t * math.tau
            return (
                earth_x + math.cos(angle) * radius,
                earth_y + t * day_height - day_height / 2,
                earth_z + math.sin(angle) * radius,
            )

        t = np.linspace(0.0, 1.0, 201)
        spiral = np.array([dial_point(ti, spiral_radius * (1 + ti * 0.1)) for ti in t])
        self.curves.append(
            CurvePrimitive(
                points=spiral, color=marker_color(self.light_mode), opacity=0.5, width=2.0, kind="hour"
            )
        )

        current_hour = state.now.hour
        offsets = state.offsets
        has_offset = state.selected_hour != current_hour or offsets.day != 0 or offsets.hour != 0
        for hour in range(24):
            x, y, z = dial_point(hour / 24, spiral_radius)
            if hour == current_hour:
                highlight = Highlight.CURRENT
            elif has_offset and hour == state.selected_hour:
                highlight = Highlight.SELECTED
            else:
                highlight = Highlight.NONE
            self.labels.append(
                LabelRequest(
                    text=f"{hour:02d}",
                    height=y,
                    radius=math.hypot(x, z),
                    angle=math.atan2(z, x),
                    color=_LABEL_COLORS[highlight],
                    zoom=config.level,
                    size=0.8,
                )
            )

        hand_end = dial_point(state.selected_hour / 24, spiral_radius)
        self.lines.append(
            LinePrimitive(
                points=np.array([[earth_x, earth_y, earth_z], hand_end]),
                color=CURRENT_COLOR,
                opacity=0.8,
                width=2.0,
                kind="hour",
                highlight=Highlight.CURRENT,
            )
        )

    def result(self, state: TimeState, units: dict[str, tuple[ResolvedUnit, ...]]) -> TimeMarkerSet:
        return TimeMarkerSet(
            zoom_level=state.zoom_level,
            lines=tuple(self.lines),
            curves=tuple(self.curves),
            labels=tuple(self.labels),
            moon_phases=tuple(self.moon_phases),
            units=units,
            state=state,
        )


class TimeMarkers:
    """Owns navigation state and rebuilds the marker set on request."""

    def __init__(
        self,
        bodies: tuple[OrbitingBody, ...],
        zoom_levels: dict[int, ZoomLevelConfig] | None = None,
        scale: HeightScale | None = None,
        light_mode: bool = False,
        clock: Clock | None = None,
        logger: Logger | None = None,
    ) -> None:
        self.bodies = bodies
        self.zoom_levels = ZOOM_LEVELS if zoom_levels is None else zoom_levels
        self.scale = scale or HeightScale()
        self.light_mode = light_mode
        self.clock = clock or wall_clock()
        self.log = logger or get_logger(__name__)
        self._offsets = NavigationOffsets()

    @property
    def offsets(self) -> NavigationOffsets:
        return self._offsets

    def update_offsets(self, offsets: NavigationOffsets) -> None:
        """Replace the whole navigation snapshot at once."""
        self._offsets = offsets

    def time_state(self, zoom_level: int) -> TimeState:
        return build_time_state(zoom_level, self.clock(), self._offsets, self.scale)

    def create_time_markers(self, zoom_level: int) -> TimeMarkerSet:
        """Resolve and emit every marker for `zoom_level`.

        Returns:
            An empty TimeMarkerSet when the zoom level is not configured or
            the body table has no Earth.
        """
        config = self.zoom_levels.get(zoom_level)
        earth = find_body(self.bodies, EARTH)
        if config is None or earth is None:
            self.log.warning(
                "Time markers skipped: zoom config %s, Earth %s",
                "found" if config else "missing",
                "found" if earth else "missing",
            )
            return TimeMarkerSet(zoom_level=zoom_level)

        state = self.time_state(zoom_level)
        geometry = SceneGeometry(reference=earth)
        resolver = TimeUnitResolver(geometry, self.scale, self.log)
        emitter = TimeFrameEmitter(geometry, self.scale, earth.distance, self.light_mode)

        emitter.emit_year_markers(state, config)

        resolved: dict[str, tuple[ResolvedUnit, ...]] = {}
        for kind in KINDS:
            if kind not in config.bands:
                continue
            resolved[kind] = resolver.resolve(kind, state)
            emitter.emit_parent_curves(kind, resolved[kind], state, config)
            emitter.emit_frame(kind, resolved[kind], state, config)

        if "day" in resolved:
            emitter.emit_day_names(resolved["day"], state, config)
        if zoom_level == 6:
            emitter.emit_moon_phases(state, config.time_years)
        if zoom_level in (8, 9):
            emitter.emit_hour_dial(state, earth, config)

        self.log.info(
            "Zoom %s: %d lines, %d curves, %d labels",
            zoom_level,
            len(emitter.lines),
            len(emitter.curves),
            len(emitter.labels),
        )
        return emitter.result(state, resolved)
