"""Data model definitions — explicit boundaries between config, resolution, and render layers."""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import ClassVar

import numpy as np


@dataclass(frozen=True)
class OrbitingBody:
    """Immutable reference data for one body on the orrery."""

    name: str  # "Earth", "Mars", ...
    orbital_period_years: float  # Sidereal period (years)
    start_angle: float  # Angle at the current height (radians)
    distance: float  # Orbital radius (scene units)
    color: int  # 0xRRGGBB
    size: float = 1.0  # Mesh radius hint for renderers


@dataclass(frozen=True)
class ZoomLevelConfig:
    """Static configuration for a single zoom level."""

    level: int
    name: str  # "YEAR", "QUARTER", ...
    span: str  # Human-readable span ("3 months")
    time_years: float  # Nominal visible time span (years)
    height: float = 0.0  # Camera height hint, also the year-marker line length
    bands: dict[str, tuple[float, float]] = field(default_factory=dict)
    fixed_range: tuple[int, int] | None = None  # Absolute year range (century/decade)


@dataclass(frozen=True)
class NavigationOffsets:
    """Navigation deltas plus the auxiliary cursors, applied as one value.

    Cursors left as None are derived from the wall clock when a TimeState
    is built.
    """

    year: int = 0
    quarter: int = 0
    month: int = 0  # Whole months at zoom 5, lunar cycles at zoom 6
    week: int = 0
    day: int = 0  # Whole weeks at zoom 7
    hour: int = 0  # Whole days at zoom 8/9
    week_in_month: int | None = None
    day_in_week: int | None = None  # 0=Sunday
    hour_in_day: int | None = None

    def __post_init__(self) -> None:
        if self.week_in_month is not None and not 0 <= self.week_in_month <= 5:
            raise ValueError(f"week_in_month out of range: {self.week_in_month}")
        if self.day_in_week is not None and not 0 <= self.day_in_week <= 6:
            raise ValueError(f"day_in_week out of range: {self.day_in_week}")
        if self.hour_in_day is not None and not 0 <= self.hour_in_day <= 23:
            raise ValueError(f"hour_in_day out of range: {self.hour_in_day}")


@dataclass(frozen=True)
class TimeState:
    """Snapshot for one resolution pass. Recomputed on every call."""

    zoom_level: int
    now: datetime  # Naive local wall-clock time
    current_height: float
    selected_year: int
    selected_quarter: int  # 0-3
    selected_month: int  # 0-11
    selected_week: date  # Sunday of the selected week
    selected_day: date
    selected_height: float
    selected_hour: int
    offsets: NavigationOffsets

    @property
    def today(self) -> date:
        return self.now.date()


# --- Time-unit variants ---


def sunday_on_or_before(day: date) -> date:
    """Week start (Sunday) of the week containing `day`."""
    # date.weekday(): Monday=0 ... Sunday=6
    return day - timedelta(days=(day.weekday() + 1) % 7)


@dataclass(frozen=True)
class Quarter:
    year: int
    index: int  # 0-3

    kind: ClassVar[str] = "quarter"

    @property
    def start(self) -> date:
        return date(self.year, self.index * 3 + 1, 1)

    def normalized(self) -> "Quarter":
        return self


@dataclass(frozen=True)
class Month:
    year: int
    index: int  # 0-11; 12 is the trailing boundary of `year`

    kind: ClassVar[str] = "month"

    @property
    def start(self) -> date:
        if self.index == 12:
            return date(self.year + 1, 1, 1)
        return date(self.year, self.index + 1, 1)

    def normalized(self) -> "Month":
        if self.index == 12:
            return Month(self.year + 1, 0)
        return self


@dataclass(frozen=True)
class Week:
    start: date  # Always a Sunday

    kind: ClassVar[str] = "week"

    @property
    def year(self) -> int:
        return self.start.year

    def normalized(self) -> "Week":
        return self


@dataclass(frozen=True)
class Day:
    day: date

    kind: ClassVar[str] = "day"

    @property
    def start(self) -> date:
        return self.day

    @property
    def year(self) -> int:
        return self.day.year

    def normalized(self) -> "Day":
        return self


TimeUnit = Quarter | Month | Week | Day


def unit_key(unit: TimeUnit) -> tuple[str, date]:
    """Identity of a unit for dedup and ordering: (kind, start date)."""
    return unit.kind, unit.start


class Highlight(Enum):
    """Total priority order: CURRENT > SELECTED > NONE."""

    CURRENT = "current"
    SELECTED = "selected"
    NONE = "none"


@dataclass(frozen=True)
class ResolvedUnit:
    """A unit with its resolved start, position and classification."""

    unit: TimeUnit
    start: date
    height: float
    angle: float
    is_current: bool
    is_selected: bool
    has_offset: bool
    boundary_highlight: Highlight

    @property
    def highlight(self) -> Highlight:
        """Highlight of the region itself (not the shared boundary)."""
        if self.is_current:
            return Highlight.CURRENT
        if self.is_selected and self.has_offset:
            return Highlight.SELECTED
        return Highlight.NONE


# --- Emitted primitives (the only product consumed by renderers) ---


@dataclass(frozen=True)
class LinePrimitive:
    """A straight segment; `points` has shape (2, 3)."""

    points: np.ndarray = field(compare=False)
    color: int
    opacity: float
    width: float
    kind: str  # "quarter", "month", "week", "day", "year", "hour"
    highlight: Highlight = Highlight.NONE


@dataclass(frozen=True)
class CurvePrimitive:
    """An ordered polyline; `points` has shape (n, 3)."""

    points: np.ndarray = field(compare=False)
    color: int
    opacity: float
    width: float
    kind: str


@dataclass(frozen=True)
class LabelRequest:
    """Text placement request for the external label collaborator."""

    text: str
    height: float
    radius: float
    angle: float
    color: str | None  # "red", "blue" or None for the default
    zoom: int  # Zoom level whose text sizing applies
    size: float = 1.0
    bold: bool = False


@dataclass(frozen=True)
class MoonPhaseMarker:
    phase: float  # 0=new, 0.5=full
    height: float
    angle: float
    radius: float


@dataclass(frozen=True)
class TimeMarkerSet:
    """Everything emitted by one `create_time_markers` call."""

    zoom_level: int
    lines: tuple[LinePrimitive, ...] = ()
    curves: tuple[CurvePrimitive, ...] = ()
    labels: tuple[LabelRequest, ...] = ()
    moon_phases: tuple[MoonPhaseMarker, ...] = ()
    units: dict[str, tuple[ResolvedUnit, ...]] = field(default_factory=dict)
    state: TimeState | None = None  # The snapshot this set was resolved from

    def __len__(self) -> int:
        return len(self.lines) + len(self.curves) + len(self.labels) + len(
            self.moon_phases
        )


@dataclass(frozen=True)
class Worldline:
    """A body's sampled helical path with styling hints."""

    name: str
    points: np.ndarray = field(compare=False)  # (n, 3)
    color: int
    opacity: float
    width: float
