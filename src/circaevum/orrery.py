"""CLI entry point for orrery scene generation.

Settings come from the environment (or .env): CIRCAEVUM_TIMEZONE,
CIRCAEVUM_ZOOM_LEVEL, CIRCAEVUM_LIGHT_MODE, CIRCAEVUM_CENTURY_START. Run:
    uv run python src/circaevum/orrery.py
"""

from dotenv import load_dotenv

load_dotenv()

from circaevum.config import EARTH, ZOOM_LEVELS, build_planets, find_body, load_settings  # noqa: E402
from circaevum.renderers.static import save_static_scene  # noqa: E402
from circaevum.timemarkers import TimeMarkers  # noqa: E402
from circaevum.timescale import HeightScale, fixed_clock, wall_clock  # noqa: E402
from circaevum.worldlines import WorldlineBuilder  # noqa: E402

settings = load_settings()
now = wall_clock(settings.timezone)()
scale = HeightScale(century_start=settings.century_start)
zoom = settings.zoom_level

planets = build_planets(now)
builder = WorldlineBuilder(planets, ZOOM_LEVELS, scale, settings.light_mode)
# One frozen "now" so markers, worldlines and connector agree
time_markers = TimeMarkers(planets, ZOOM_LEVELS, scale, settings.light_mode, fixed_clock(now))
markers = time_markers.create_time_markers(zoom)
state = markers.state

worldlines = list(builder.build_all(zoom, now))
earth = find_body(planets, EARTH)
if state is not None:
    moon = builder.moon(state.current_height, zoom)
    if moon is not None:
        worldlines.append(moon)
if state is not None and earth is not None and state.selected_height != state.current_height:
    worldlines.append(builder.connector(earth, state.current_height, state.selected_height))

path = save_static_scene(tuple(worldlines), markers, light_mode=settings.light_mode, when=now)
print(f"Saved: {path}")
