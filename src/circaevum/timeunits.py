"""Time-unit resolution: which calendar boundaries exist at a zoom level, and how each is classified.

Each granularity (quarter, month, week, day) is a strategy that knows how
to decode the selected and current unit from a TimeState, step to the
previous/next unit with year carry, and enumerate the units to show. One
shared routine classifies every unit against those strategies.
"""

import math
from collections.abc import Iterable
from datetime import date, datetime, timedelta
from logging import Logger

from circaevum.config import (
    LABEL_ZOOM,
    MIN_ZOOM,
    MONTH_ABBREVIATIONS,
    QUARTER_NAMES,
    SYNODIC_MONTH_DAYS,
)
from circaevum.geometry import SceneGeometry, current_height_for_zoom
from circaevum.logger import get_logger
from circaevum.models import (
    Day,
    Highlight,
    Month,
    NavigationOffsets,
    Quarter,
    ResolvedUnit,
    TimeState,
    TimeUnit,
    Week,
    sunday_on_or_before,
    unit_key,
)
from circaevum.timescale import HeightScale, days_in_month

_WEEK = timedelta(days=7)


# --- Calendar arithmetic (always modulo + carry) ---


def add_months(year: int, month: int, delta: int) -> tuple[int, int]:
    """Shift a 0-indexed (year, month) by `delta` months."""
    carry, month = divmod(month + delta, 12)
    return year + carry, month


def day_in_week(day: date) -> int:
    """0=Sunday ... 6=Saturday."""
    return (day.weekday() + 1) % 7


def _noon(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, 12)


def week_in_month(day: date) -> int:
    """Index of `day`'s Sunday-anchored week within its month."""
    first_sunday = sunday_on_or_before(day.replace(day=1))
    return (sunday_on_or_before(day) - first_sunday).days // 7


def month_sundays(year: int, month: int) -> list[date]:
    """Every Sunday whose week intersects the 0-indexed month.

    Runs from the Sunday on or before day 1 through the Sunday on or
    before the last day; both may fall in adjacent months.
    """
    first = sunday_on_or_before(date(year, month + 1, 1))
    last = sunday_on_or_before(date(year, month + 1, days_in_month(year, month)))
    return [first + _WEEK * i for i in range((last - first).days // 7 + 1)]


# --- TimeState ---


def build_time_state(
    zoom_level: int,
    now: datetime,
    offsets: NavigationOffsets,
    scale: HeightScale,
) -> TimeState:
    """Decode the navigated selection for one resolution pass.

    Offsets mean different things per zoom level: zoom 3 moves by years,
    zoom 4 by quarters, zoom 5 by months, zoom 6 by lunar cycles, zoom 7
    by whole weeks (with `day_in_week` picking the day), and zoom 8/9 by
    days via the hour offset. The cursors only feed this decoding; every
    later comparison uses the decoded dates.
    """
    today = now.date()
    actual_year, actual_month = today.year, today.month - 1
    this_sunday = sunday_on_or_before(today)
    cursor_day = offsets.day_in_week if offsets.day_in_week is not None else day_in_week(today)
    selected_hour = offsets.hour_in_day if offsets.hour_in_day is not None else now.hour

    selected_week: date | None = None
    selected_day: date | None = None
    year, month = actual_year, actual_month

    if zoom_level == 1:
        year = int(math.floor((actual_year + offsets.year) / 10 + 0.5)) * 10
    elif zoom_level in (2, 3):
        year = actual_year + offsets.year
    elif zoom_level == 4:
        carry, quarter = divmod(actual_month // 3 + offsets.quarter, 4)
        year, month = actual_year + carry, quarter * 3 + actual_month % 3
    elif zoom_level == 5:
        year, month = add_months(actual_year, actual_month, offsets.month)
        wim = offsets.week_in_month if offsets.week_in_month is not None else week_in_month(today)
        selected_week = sunday_on_or_before(date(year, month + 1, 1)) + _WEEK * wim
    elif zoom_level == 6:
        selected_day = today + timedelta(days=round(offsets.month * SYNODIC_MONTH_DAYS))
    elif zoom_level == 7:
        selected_week = this_sunday + _WEEK * offsets.day
        selected_day = selected_week + timedelta(days=cursor_day)
    elif zoom_level in (8, 9):
        selected_day = today + timedelta(days=offsets.hour)

    if selected_day is not None:
        year, month = selected_day.year, selected_day.month - 1
    if selected_week is None:
        if selected_day is not None:
            selected_week = sunday_on_or_before(selected_day)
        else:
            selected_week = this_sunday + _WEEK * offsets.week
    if selected_day is None:
        selected_day = selected_week + timedelta(days=cursor_day)

    if zoom_level in (1, 2):
        selected_height = scale.height_for_year(year)
    elif zoom_level >= 6:
        selected_height = scale.height_of(_noon(selected_day))
    else:
        selected_height = scale.date_to_height(year, month, 1)

    return TimeState(
        zoom_level=zoom_level,
        now=now,
        current_height=current_height_for_zoom(zoom_level, now, scale),
        selected_year=year,
        selected_quarter=month // 3,
        selected_month=month,
        selected_week=selected_week,
        selected_day=selected_day,
        selected_height=selected_height,
        selected_hour=selected_hour,
        offsets=offsets,
    )


def parent_months(state: TimeState) -> list[tuple[int, int]]:
    """(year, month) pairs whose weeks/days are shown at zoom >= 4.

    The months of the selected quarter, the months of the current quarter,
    and the selected month itself, deduplicated in that order.
    """
    months: list[tuple[int, int]] = []
    today = state.now.date()
    quarters = (
        (state.selected_year, state.selected_quarter),
        (today.year, (today.month - 1) // 3),
    )
    for year, quarter in quarters:
        months.extend((year, m) for m in range(quarter * 3, quarter * 3 + 3))
    months.append((state.selected_year, state.selected_month))
    return list(dict.fromkeys(months))


def dedupe_sorted(units: Iterable[TimeUnit]) -> tuple[TimeUnit, ...]:
    """Drop units sharing a (kind, start). Sorted by start.

    The first occurrence wins, except that a normalized unit replaces an
    alias such as Month(y, 12), so a trailing index-12 boundary only
    survives when January of the next year is not itself shown.
    """
    unique: dict[tuple[str, date], TimeUnit] = {}
    for unit in units:
        key = unit_key(unit)
        kept = unique.get(key)
        if kept is None or (kept != kept.normalized() and unit == unit.normalized()):
            unique[key] = unit
    return tuple(sorted(unique.values(), key=lambda u: u.start))


# --- Granularity strategies ---


class Granularity:
    """Per-granularity strategy consumed by the shared classification routine."""

    kind: str = ""
    offset_field: str = ""

    def current(self, state: TimeState) -> TimeUnit:
        raise NotImplementedError

    def selected(self, state: TimeState) -> TimeUnit:
        raise NotImplementedError

    def decrement(self, unit: TimeUnit) -> TimeUnit:
        raise NotImplementedError

    def increment(self, unit: TimeUnit) -> TimeUnit:
        raise NotImplementedError

    def natural_units(self, state: TimeState) -> list[TimeUnit]:
        raise NotImplementedError

    def label_text(self, unit: TimeUnit) -> str:
        raise NotImplementedError

    def label_center(self, unit: TimeUnit) -> datetime:
        raise NotImplementedError

    def relevant_offset(self, offsets: NavigationOffsets) -> int:
        return getattr(offsets, self.offset_field)

    def label_eligible(self, unit: TimeUnit, state: TimeState) -> bool:
        return state.zoom_level >= LABEL_ZOOM[self.kind]

    def units_to_show(self, state: TimeState) -> tuple[TimeUnit, ...]:
        """Natural window plus the selected and current units and their successors."""
        selected = self.selected(state)
        current = self.current(state)
        forced = [selected, self.increment(selected), current, self.increment(current)]
        return dedupe_sorted([*self.natural_units(state), *forced])


class QuarterGranularity(Granularity):
    kind = "quarter"
    offset_field = "quarter"

    def current(self, state: TimeState) -> Quarter:
        return Quarter(state.now.year, (state.now.month - 1) // 3)

    def selected(self, state: TimeState) -> Quarter:
        return Quarter(state.selected_year, state.selected_quarter)

    def decrement(self, unit: Quarter) -> Quarter:
        carry, index = divmod(unit.index - 1, 4)
        return Quarter(unit.year + carry, index)

    def increment(self, unit: Quarter) -> Quarter:
        carry, index = divmod(unit.index + 1, 4)
        return Quarter(unit.year + carry, index)

    def units_to_show(self, state: TimeState) -> tuple[TimeUnit, ...]:
        if state.zoom_level == MIN_ZOOM[self.kind]:
            # Introductory zoom: the whole selected year, no trailing boundary
            year_quarters = [Quarter(state.selected_year, i) for i in range(4)]
            return dedupe_sorted([*year_quarters, self.selected(state), self.current(state)])
        return super().units_to_show(state)

    def natural_units(self, state: TimeState) -> list[TimeUnit]:
        return []

    def label_text(self, unit: Quarter) -> str:
        return QUARTER_NAMES[unit.index]

    def label_center(self, unit: Quarter) -> datetime:
        return datetime(unit.year, unit.index * 3 + 2, 15)


class MonthGranularity(Granularity):
    kind = "month"
    offset_field = "month"

    def current(self, state: TimeState) -> Month:
        return Month(state.now.year, state.now.month - 1)

    def selected(self, state: TimeState) -> Month:
        return Month(state.selected_year, state.selected_month)

    def decrement(self, unit: Month) -> Month:
        unit = unit.normalized()
        return Month(*add_months(unit.year, unit.index, -1))

    def increment(self, unit: Month) -> Month:
        unit = unit.normalized()
        return Month(*add_months(unit.year, unit.index, 1))

    def units_to_show(self, state: TimeState) -> tuple[TimeUnit, ...]:
        if state.zoom_level == MIN_ZOOM[self.kind]:
            # 13 boundaries: January through the trailing index-12 boundary
            year_months = [Month(state.selected_year, i) for i in range(13)]
            return dedupe_sorted([*year_months, self.selected(state), self.current(state)])
        return super().units_to_show(state)

    def natural_units(self, state: TimeState) -> list[TimeUnit]:
        today = state.now.date()
        units: list[TimeUnit] = []
        for year, quarter in (
            (state.selected_year, state.selected_quarter),
            (today.year, (today.month - 1) // 3),
        ):
            # Index 12 closes Q4 with its own boundary
            units.extend(Month(year, m) for m in range(quarter * 3, quarter * 3 + 4))
        return units

    def label_text(self, unit: Month) -> str:
        return MONTH_ABBREVIATIONS[unit.index % 12]

    def label_center(self, unit: Month) -> datetime:
        unit = unit.normalized()
        return datetime(unit.year, unit.index + 1, days_in_month(unit.year, unit.index) // 2 + 1)

    def label_eligible(self, unit: Month, state: TimeState) -> bool:
        """Only months in the selected or current quarter get labels."""
        if not super().label_eligible(unit, state):
            return False
        unit = unit.normalized()
        quarter = Quarter(unit.year, unit.index // 3)
        return quarter in (QUARTERS.selected(state), QUARTERS.current(state))


class WeekGranularity(Granularity):
    kind = "week"
    offset_field = "week"

    def current(self, state: TimeState) -> Week:
        return Week(sunday_on_or_before(state.now.date()))

    def selected(self, state: TimeState) -> Week:
        return Week(state.selected_week)

    def decrement(self, unit: Week) -> Week:
        return Week(unit.start - _WEEK)

    def increment(self, unit: Week) -> Week:
        return Week(unit.start + _WEEK)

    def natural_units(self, state: TimeState) -> list[TimeUnit]:
        return [
            Week(sunday)
            for year, month in parent_months(state)
            for sunday in month_sundays(year, month)
        ]

    def label_text(self, unit: Week) -> str:
        return f"{unit.start.day}-{(unit.start + timedelta(days=6)).day}"

    def label_center(self, unit: Week) -> datetime:
        return _noon(unit.start) + timedelta(days=3)


class DayGranularity(Granularity):
    kind = "day"
    offset_field = "day"

    def current(self, state: TimeState) -> Day:
        return Day(state.now.date())

    def selected(self, state: TimeState) -> Day:
        return Day(state.selected_day)

    def decrement(self, unit: Day) -> Day:
        return Day(unit.day - timedelta(days=1))

    def increment(self, unit: Day) -> Day:
        return Day(unit.day + timedelta(days=1))

    def natural_units(self, state: TimeState) -> list[TimeUnit]:
        return [
            Day(week.start + timedelta(days=d))
            for week in WEEKS.units_to_show(state)
            for d in range(7)
        ]

    def label_text(self, unit: Day) -> str:
        return str(unit.day.day)

    def label_center(self, unit: Day) -> datetime:
        return _noon(unit.day)


QUARTERS = QuarterGranularity()
MONTHS = MonthGranularity()
WEEKS = WeekGranularity()
DAYS = DayGranularity()

GRANULARITIES: dict[str, Granularity] = {
    g.kind: g for g in (QUARTERS, MONTHS, WEEKS, DAYS)
}


# --- Classification ---


def boundary_highlight(
    is_current: bool, is_selected: bool, prev_current: bool, prev_selected: bool, has_offset: bool
) -> Highlight:
    """Highlight of the line shared by a unit and its predecessor."""
    if is_current or prev_current:
        return Highlight.CURRENT
    if has_offset and (is_selected or prev_selected):
        return Highlight.SELECTED
    return Highlight.NONE


class TimeUnitResolver:
    """Resolves and classifies the visible units of each granularity."""

    def __init__(
        self,
        geometry: SceneGeometry,
        scale: HeightScale | None = None,
        logger: Logger | None = None,
    ) -> None:
        self.geometry = geometry
        self.scale = scale or HeightScale()
        self.log = logger or get_logger(__name__)

    def resolve(self, kind: str, state: TimeState) -> tuple[ResolvedUnit, ...]:
        """Units of `kind` to draw for this TimeState, in chronological order.

        Returns:
            An empty tuple when the granularity is inactive at this zoom.
        """
        granularity = GRANULARITIES[kind]
        if state.zoom_level < MIN_ZOOM[kind]:
            return ()

        selected = granularity.selected(state).normalized()
        current = granularity.current(state).normalized()
        has_offset = granularity.relevant_offset(state.offsets) != 0 or selected != current

        resolved = []
        for unit in granularity.units_to_show(state):
            normalized = unit.normalized()
            previous = granularity.decrement(normalized)
            is_current = normalized == current
            is_selected = normalized == selected
            highlight = boundary_highlight(
                is_current,
                is_selected,
                previous == current,
                previous == selected,
                has_offset,
            )
            height = self.scale.height_of(unit.start)
            resolved.append(
                ResolvedUnit(
                    unit=unit,
                    start=unit.start,
                    height=height,
                    angle=self.geometry.angle_at(height, state.current_height),
                    is_current=is_current,
                    is_selected=is_selected,
                    has_offset=has_offset,
                    boundary_highlight=highlight,
                )
            )
            self.log.debug(
                "%s %s current=%s selected=%s offset=%s boundary=%s",
                kind,
                unit.start.isoformat(),
                is_current,
                is_selected,
                has_offset,
                highlight.value,
            )
        return tuple(resolved)
