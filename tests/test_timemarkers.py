import math
import unittest
from datetime import datetime, timedelta

import numpy as np

from circaevum.config import (
    CURRENT_COLOR,
    EARTH,
    SELECTED_COLOR_DARK,
    SELECTED_COLOR_LIGHT,
    SYNODIC_MONTH_DAYS,
    ZOOM_LEVELS,
    build_planets,
    find_body,
)
from circaevum.geometry import SceneGeometry
from circaevum.models import Highlight, Month, NavigationOffsets, Quarter
from circaevum.timemarkers import TimeFrameEmitter, TimeMarkers, moon_phase
from circaevum.timescale import HeightScale, fixed_clock
from circaevum.timeunits import build_time_state

NOW = datetime(2024, 3, 15, 10)


def make_markers(now: datetime = NOW, **kwargs) -> TimeMarkers:
    return TimeMarkers(build_planets(now), clock=fixed_clock(now), **kwargs)


class TestYearView(unittest.TestCase):
    def setUp(self) -> None:
        self.markers = make_markers().create_time_markers(3)

    def test_units_per_granularity(self) -> None:
        self.assertEqual(set(self.markers.units), {"quarter", "month"})
        self.assertEqual(len(self.markers.units["quarter"]), 4)
        self.assertEqual(len(self.markers.units["month"]), 13)

    def test_quarter_labels_only(self) -> None:
        texts = [label.text for label in self.markers.labels]
        self.assertEqual(sorted(texts), ["2024", "Q1", "Q2", "Q3", "Q4"])
        q1 = next(label for label in self.markers.labels if label.text == "Q1")
        self.assertEqual(q1.color, "red")

    def test_quarter_start_months_cut_through_to_centre(self) -> None:
        month_lines = [line for line in self.markers.lines if line.kind == "month"]
        self.assertEqual(len(month_lines), 13)
        january = month_lines[0]
        self.assertAlmostEqual(math.hypot(january.points[0, 0], january.points[0, 2]), 0.0)
        self.assertAlmostEqual(math.hypot(january.points[1, 0], january.points[1, 2]), 50.0)

        february = month_lines[1]
        self.assertAlmostEqual(math.hypot(february.points[0, 0], february.points[0, 2]), 50 / 3)

    def test_current_boundaries_are_red(self) -> None:
        quarter_lines = [line for line in self.markers.lines if line.kind == "quarter"]
        self.assertEqual(quarter_lines[0].color, CURRENT_COLOR)
        self.assertEqual(quarter_lines[0].highlight, Highlight.CURRENT)
        self.assertEqual((quarter_lines[0].opacity, quarter_lines[0].width), (0.9, 3.0))
        self.assertEqual((quarter_lines[2].opacity, quarter_lines[2].width), (0.7, 2.0))

    def test_parent_curves(self) -> None:
        kinds = [curve.kind for curve in self.markers.curves]
        self.assertEqual(kinds.count("quarter"), 4)
        # The trailing index-12 boundary has no month of its own
        self.assertEqual(kinds.count("month"), 12)


class TestCreateTimeMarkers(unittest.TestCase):
    def test_repeated_calls_are_identical(self) -> None:
        markers = make_markers()
        first = markers.create_time_markers(7)
        second = markers.create_time_markers(7)
        self.assertEqual(first.labels, second.labels)
        self.assertEqual(first.units, second.units)
        self.assertEqual(len(first.lines), len(second.lines))
        for a, b in zip(first.lines, second.lines):
            self.assertEqual(a, b)
            np.testing.assert_array_equal(a.points, b.points)

    def test_offsets_are_replaced_as_a_whole(self) -> None:
        markers = make_markers()
        markers.update_offsets(NavigationOffsets(month=1, week_in_month=2))
        markers.update_offsets(NavigationOffsets(year=-1))
        self.assertEqual(markers.offsets, NavigationOffsets(year=-1))
        self.assertEqual(markers.time_state(3).selected_year, 2023)

    def test_missing_earth_returns_empty_set(self) -> None:
        planets = tuple(p for p in build_planets(NOW) if p.name != EARTH)
        markers = TimeMarkers(planets, clock=fixed_clock(NOW))
        with self.assertLogs("circaevum", level="WARNING"):
            result = markers.create_time_markers(3)
        self.assertEqual(len(result), 0)

    def test_unknown_zoom_returns_empty_set(self) -> None:
        with self.assertLogs("circaevum", level="WARNING"):
            result = make_markers().create_time_markers(12)
        self.assertEqual(len(result), 0)
        self.assertEqual(result.zoom_level, 12)

    def test_century_view_decade_markers(self) -> None:
        result = make_markers().create_time_markers(1)
        texts = [label.text for label in result.labels]
        self.assertEqual(texts, [str(year) for year in range(2000, 2101, 10)])
        selected = next(label for label in result.labels if label.text == "2020")
        self.assertEqual(selected.color, "blue")
        self.assertEqual(result.units, {})

    def test_month_navigation_labels_selected_month(self) -> None:
        now = datetime(2024, 12, 31, 10)
        markers = make_markers(now)
        markers.update_offsets(NavigationOffsets(month=1))
        result = markers.create_time_markers(5)
        labels = {label.text: label for label in result.labels}
        self.assertEqual(labels["Jan"].color, "blue")
        self.assertEqual(labels["Dec"].color, "red")

    def test_week_view_has_day_names(self) -> None:
        result = make_markers().create_time_markers(7)
        texts = {label.text for label in result.labels}
        # Today (Friday) is spelled out; other days are abbreviated
        self.assertIn("Friday", texts)
        self.assertIn("Mon", texts)
        self.assertNotIn("Monday", texts)

    def test_result_carries_its_time_state(self) -> None:
        markers = make_markers()
        markers.update_offsets(NavigationOffsets(quarter=1))
        result = markers.create_time_markers(4)
        self.assertEqual(result.state, markers.time_state(4))
        self.assertEqual(result.state.now, NOW)
        self.assertEqual(result.state.selected_quarter, 1)

    def test_empty_set_has_no_state(self) -> None:
        with self.assertLogs("circaevum", level="WARNING"):
            result = make_markers().create_time_markers(12)
        self.assertIsNone(result.state)

    def test_january_curve_survives_year_rollover(self) -> None:
        now = datetime(2025, 1, 15, 10)
        markers = make_markers(now)
        markers.update_offsets(NavigationOffsets(quarter=-1))
        result = markers.create_time_markers(4)

        january = next(r for r in result.units["month"] if r.start.year == 2025 and r.start.month == 1)
        self.assertEqual(january.unit, Month(2025, 0))
        self.assertTrue(january.is_current)

        month_curves = [curve for curve in result.curves if curve.kind == "month"]
        starts = sorted(round(float(curve.points[0, 1]), 6) for curve in month_curves)
        self.assertIn(2500.0, starts)
        # October through April, one curve each
        self.assertEqual(len(month_curves), 7)


class TestLightMode(unittest.TestCase):
    def quarter_lines(self, light_mode: bool):
        markers = make_markers(light_mode=light_mode)
        markers.update_offsets(NavigationOffsets(quarter=1))
        result = markers.create_time_markers(4)
        self.assertEqual(
            [r.unit for r in result.units["quarter"]],
            [Quarter(2024, 0), Quarter(2024, 1), Quarter(2024, 2)],
        )
        return result, [line for line in result.lines if line.kind == "quarter"]

    def test_selected_boundary_uses_light_palette(self) -> None:
        result, lines = self.quarter_lines(light_mode=True)
        self.assertEqual(lines[0].color, CURRENT_COLOR)
        # The line opening Q3 closes the selected Q2
        self.assertIs(lines[2].highlight, Highlight.SELECTED)
        self.assertEqual(lines[2].color, SELECTED_COLOR_LIGHT)

    def test_selected_boundary_uses_dark_palette(self) -> None:
        _, lines = self.quarter_lines(light_mode=False)
        self.assertEqual(lines[2].color, SELECTED_COLOR_DARK)

    def test_plain_markers_are_black(self) -> None:
        result, _ = self.quarter_lines(light_mode=True)
        january = next(line for line in result.lines if line.kind == "month")
        self.assertIs(january.highlight, Highlight.NONE)
        self.assertEqual(january.color, 0x000000)
        self.assertTrue(result.curves)
        self.assertEqual({curve.color for curve in result.curves}, {0x000000})


class TestSupplementaryMarkers(unittest.TestCase):
    def test_moon_phases_in_lunar_view(self) -> None:
        markers = make_markers()
        result = markers.create_time_markers(6)
        state = markers.time_state(6)
        self.assertGreater(len(result.moon_phases), 0)
        half_window = ZOOM_LEVELS[6].time_years * 100 / 2
        for marker in result.moon_phases:
            self.assertLessEqual(abs(marker.height - state.selected_height), half_window)
            self.assertGreaterEqual(marker.phase, 0.0)
            self.assertLess(marker.phase, 1.0)
            self.assertAlmostEqual(marker.radius, 50 * 8 / 9)

    def test_moon_phase_reference(self) -> None:
        self.assertAlmostEqual(moon_phase(datetime(2000, 1, 6, 18, 14)), 0.0)
        full = datetime(2000, 1, 6, 18, 14) + timedelta(days=SYNODIC_MONTH_DAYS / 2)
        self.assertAlmostEqual(moon_phase(full), 0.5, places=6)

    def test_hour_dial(self) -> None:
        planets = build_planets(NOW)
        earth = find_body(planets, EARTH)
        scale = HeightScale()
        state = build_time_state(8, NOW, NavigationOffsets(hour_in_day=15), scale)
        emitter = TimeFrameEmitter(SceneGeometry(reference=earth), scale, earth.distance)
        emitter.emit_hour_dial(state, earth, ZOOM_LEVELS[8])

        self.assertEqual([label.text for label in emitter.labels], [f"{h:02d}" for h in range(24)])
        self.assertEqual(emitter.labels[10].color, "red")
        self.assertEqual(emitter.labels[15].color, "blue")
        self.assertEqual(len(emitter.curves), 1)
        self.assertEqual(emitter.curves[0].points.shape, (201, 3))
        self.assertEqual([line.kind for line in emitter.lines], ["hour"])

    def test_hour_dial_only_at_clock_zooms(self) -> None:
        markers = make_markers()
        self.assertEqual([c for c in markers.create_time_markers(7).curves if c.kind == "hour"], [])
        self.assertEqual(len([c for c in markers.create_time_markers(8).curves if c.kind == "hour"]), 1)


if __name__ == "__main__":
    unittest.main(verbosity=2)
