"""Static orrery configuration — planets, zoom levels, calendar names, and runtime settings."""

import math
import os
from dataclasses import dataclass
from datetime import datetime

from dotenv import load_dotenv

from circaevum.models import OrbitingBody, ZoomLevelConfig

load_dotenv()

HEIGHT_PER_YEAR = 100.0
CENTURY_START = 2000
CENTURY_END = 2100

# Day of year (0-based) of the March equinox; Earth sits at angle 0 there
_VERNAL_EQUINOX_DAY = 79

# --- Colors ---
CURRENT_COLOR = 0xFF0000
SELECTED_COLOR_DARK = 0x00FFFF
SELECTED_COLOR_LIGHT = 0x0066CC
MOON_WORLDLINE_COLOR = 0x888888
WORLDLINE_OPACITY = 0.6


def marker_color(light_mode: bool) -> int:
    return 0x000000 if light_mode else 0xFFFFFF


def selected_color(light_mode: bool) -> int:
    return SELECTED_COLOR_LIGHT if light_mode else SELECTED_COLOR_DARK


# --- Planets ---

# Planet angles at the vernal equinox, relative to Earth
PLANET_REFERENCE_ANGLES: dict[str, float] = {
    "Mercury": 0.0,
    "Venus": math.pi,
    "Earth": 0.0,
    "Mars": math.pi / 2,
    "Jupiter": math.pi,
    "Saturn": math.pi * 1.5,
    "Uranus": math.pi / 4,
    "Neptune": math.pi * 0.75,
}

# name, distance, size, color, orbital period (years)
_PLANET_ROWS: tuple[tuple[str, float, float, int, float], ...] = (
    ("Mercury", 19.5, 2.5, 0x8C7853, 0.24),
    ("Venus", 36.0, 6.0, 0xFFC649, 0.615),
    ("Earth", 50.0, 6.5, 0x4A90E2, 1.0),
    ("Mars", 76.0, 3.5, 0xDC4C3E, 1.88),
    ("Jupiter", 260.0, 14.0, 0xC88B3A, 11.86),
    ("Saturn", 477.0, 12.0, 0xFAD5A5, 29.46),
    ("Uranus", 958.0, 8.0, 0x4FD0E7, 84.01),
    ("Neptune", 1506.0, 7.5, 0x4169E1, 164.79),
)

EARTH = "Earth"
LUNAR_PERIOD_YEARS = 0.0767
MOON_DISTANCE = 15.0


def planet_start_angle(
    now: datetime, orbital_period: float, reference_angle: float = 0.0
) -> float:
    """Orbital angle of a planet at `now`, normalized to [0, 2π).

    Earth is at angle 0 on the vernal equinox; other planets are offset by
    their reference angle and advance at 1/period of Earth's rate.
    """
    day_of_year = now.timetuple().tm_yday - 1
    fraction_of_year = (day_of_year - _VERNAL_EQUINOX_DAY) / 365.25
    angle = reference_angle + (fraction_of_year / orbital_period) * math.tau
    return angle % math.tau


def build_planets(now: datetime) -> tuple[OrbitingBody, ...]:
    """Planet table with start angles resolved for `now`."""
    return tuple(
        OrbitingBody(
            name=name,
            orbital_period_years=period,
            start_angle=planet_start_angle(
                now, period, PLANET_REFERENCE_ANGLES.get(name, 0.0)
            ),
            distance=distance,
            color=color,
            size=size,
        )
        for name, distance, size, color, period in _PLANET_ROWS
    )


def find_body(bodies: tuple[OrbitingBody, ...], name: str) -> OrbitingBody | None:
    return next((b for b in bodies if b.name == name), None)


# --- Zoom levels ---

# Radial bands as fractions of Earth's orbital distance, coarsest innermost
BANDS: dict[str, tuple[float, float]] = {
    "quarter": (0.0, 1 / 3),
    "month": (1 / 3, 2 / 3),
    "week": (2 / 3, 5 / 6),
    "day": (5 / 6, 11 / 12),
}

# Minimum zoom at which each granularity is active / labelled
MIN_ZOOM: dict[str, int] = {"quarter": 3, "month": 3, "week": 4, "day": 7}
LABEL_ZOOM: dict[str, int] = {"quarter": 3, "month": 4, "week": 5, "day": 7}


def _bands_for(level: int) -> dict[str, tuple[float, float]]:
    return {kind: band for kind, band in BANDS.items() if level >= MIN_ZOOM[kind]}


_ZOOM_ROWS: tuple[tuple[int, str, str, float, float, tuple[int, int] | None], ...] = (
    (1, "CENTURY", "100 years", 100, 5000, (CENTURY_START, CENTURY_END)),
    (2, "DECADE", "10 years", 10, 1600, (2020, 2030)),
    (3, "YEAR", "1 year", 1, 800, None),
    (4, "QUARTER", "3 months", 0.25, 400, None),
    (5, "MONTH", "1 month", 0.0833, 300, None),
    (6, "LUNAR CYCLE", "28 days", 0.0767, 240, None),
    (7, "WEEK", "7 days", 0.0192, 200, None),
    (8, "DAY", "24 hours", 0.00274, 160, None),
    (9, "CLOCK", "24 hours", 0.00274, 160, None),
)

ZOOM_LEVELS: dict[int, ZoomLevelConfig] = {
    level: ZoomLevelConfig(
        level=level,
        name=name,
        span=span,
        time_years=time_years,
        height=height,
        bands=_bands_for(level),
        fixed_range=fixed_range,
    )
    for level, name, span, time_years, height, fixed_range in _ZOOM_ROWS
}

# Year markers for the linear (century / decade) views
TIME_MARKERS: dict[int, tuple[int, ...]] = {
    1: tuple(range(CENTURY_START, CENTURY_END + 1, 10)),
    2: tuple(range(2020, 2031)),
}

# --- Calendar names ---
MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)  # fmt: skip
MONTH_ABBREVIATIONS = tuple(name[:3] for name in MONTH_NAMES)
DAY_NAMES = (
    "Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday",
)  # fmt: skip
DAY_ABBREVIATIONS = tuple(name[:3] for name in DAY_NAMES)
QUARTER_NAMES = ("Q1", "Q2", "Q3", "Q4")

# Moon phase reference
SYNODIC_MONTH_DAYS = 29.53059
KNOWN_NEW_MOON = datetime(2000, 1, 6, 18, 14)


# --- Runtime settings ---


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Process-level settings read from the environment (.env supported)."""

    timezone: str = "UTC"
    light_mode: bool = False
    century_start: int = CENTURY_START
    zoom_level: int = 3


def load_settings() -> Settings:
    """Read Settings from CIRCAEVUM_* environment variables.

    Raises:
        ValueError: When a numeric variable is not an integer.
    """
    return Settings(
        timezone=os.environ.get("CIRCAEVUM_TIMEZONE", "UTC"),
        light_mode=_env_flag("CIRCAEVUM_LIGHT_MODE"),
        century_start=int(os.environ.get("CIRCAEVUM_CENTURY_START", CENTURY_START)),
        zoom_level=int(os.environ.get("CIRCAEVUM_ZOOM_LEVEL", 3)),
    )
