"""Date ↔ height mapping and wall-clock access.

Height is the vertical scene coordinate: 100 units per calendar year,
anchored at the century start. Each month gets an equal 1/12 of the year,
and days subdivide their own month evenly, so month boundaries land on
exact multiples of 100/12 regardless of month length.
"""

import calendar
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime

from pytz import timezone, utc

from circaevum.config import CENTURY_START, HEIGHT_PER_YEAR

Clock = Callable[[], datetime]


def days_in_month(year: int, month: int) -> int:
    """Days in a 0-indexed month, leap years included."""
    return calendar.monthrange(year, month + 1)[1]


@dataclass(frozen=True)
class HeightScale:
    """Default date → height collaborator. Pure and monotonic in date."""

    century_start: int = CENTURY_START
    height_per_year: float = HEIGHT_PER_YEAR

    def height_for_year(self, year: int, fractional_month: float = 0.0) -> float:
        return (year - self.century_start + fractional_month / 12) * self.height_per_year

    def date_to_height(
        self, year: int, month: int, day: int = 1, hour: float = 0.0
    ) -> float:
        """Height of a calendar instant. `month` is 0-indexed."""
        return self.height_for_year(year) + self.year_progress(
            year, month, day, hour
        ) * self.height_per_year

    def year_progress(
        self, year: int, month: int, day: int = 1, hour: float = 0.0
    ) -> float:
        dim = days_in_month(year, month)
        return (month + (day - 1) / dim + hour / (24 * dim)) / 12

    def height_of(self, moment: date | datetime) -> float:
        """Height of a date (midnight) or datetime (with fractional hour)."""
        hour = 0.0
        if isinstance(moment, datetime):
            hour = moment.hour + moment.minute / 60 + moment.second / 3600
        return self.date_to_height(moment.year, moment.month - 1, moment.day, hour)

    def current_height(self, now: datetime) -> float:
        return self.date_to_height(now.year, now.month - 1, now.day, now.hour)


def wall_clock(tz_name: str = "UTC") -> Clock:
    """Return a clock yielding naive local time in the given pytz zone.

    Raises:
        pytz.UnknownTimeZoneError: For an unknown zone name.
    """
    local_tz = timezone(tz_name)

    def _now() -> datetime:
        return datetime.now(utc).astimezone(local_tz).replace(tzinfo=None)

    return _now


def fixed_clock(moment: datetime) -> Clock:
    """Clock frozen at `moment`; used for reproducible renders and tests."""
    return lambda: moment
