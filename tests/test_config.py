import math
import os
import unittest
from datetime import datetime
from unittest import mock

from circaevum.config import (
    EARTH,
    ZOOM_LEVELS,
    build_planets,
    find_body,
    load_settings,
    planet_start_angle,
)


class TestPlanets(unittest.TestCase):
    def test_earth_at_zero_on_vernal_equinox(self) -> None:
        self.assertAlmostEqual(planet_start_angle(datetime(2024, 3, 20), 1.0), 0.0)

    def test_start_angles_are_normalized(self) -> None:
        for body in build_planets(datetime(2024, 11, 3)):
            self.assertGreaterEqual(body.start_angle, 0.0)
            self.assertLess(body.start_angle, math.tau)

    def test_find_body(self) -> None:
        planets = build_planets(datetime(2024, 1, 1))
        self.assertEqual(len(planets), 8)
        self.assertEqual(find_body(planets, EARTH).distance, 50.0)
        self.assertIsNone(find_body(planets, "Pluto"))


class TestZoomLevels(unittest.TestCase):
    def test_bands_follow_minimum_zoom(self) -> None:
        self.assertEqual(set(ZOOM_LEVELS[1].bands), set())
        self.assertEqual(set(ZOOM_LEVELS[3].bands), {"quarter", "month"})
        self.assertEqual(set(ZOOM_LEVELS[5].bands), {"quarter", "month", "week"})
        self.assertEqual(set(ZOOM_LEVELS[7].bands), {"quarter", "month", "week", "day"})

    def test_bands_are_nested_outward(self) -> None:
        bands = ZOOM_LEVELS[9].bands
        order = ["quarter", "month", "week", "day"]
        for inner, outer in zip(order, order[1:]):
            self.assertAlmostEqual(bands[inner][1], bands[outer][0])
        self.assertLess(bands["day"][1], 1.0)


class TestSettings(unittest.TestCase):
    def test_defaults(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            settings = load_settings()
        self.assertEqual(settings.timezone, "UTC")
        self.assertFalse(settings.light_mode)
        self.assertEqual(settings.zoom_level, 3)

    def test_environment_overrides(self) -> None:
        env = {
            "CIRCAEVUM_TIMEZONE": "Asia/Seoul",
            "CIRCAEVUM_LIGHT_MODE": "true",
            "CIRCAEVUM_CENTURY_START": "1900",
            "CIRCAEVUM_ZOOM_LEVEL": "7",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            settings = load_settings()
        self.assertEqual(settings.timezone, "Asia/Seoul")
        self.assertTrue(settings.light_mode)
        self.assertEqual(settings.century_start, 1900)
        self.assertEqual(settings.zoom_level, 7)

    def test_non_integer_zoom_raises(self) -> None:
        with mock.patch.dict(os.environ, {"CIRCAEVUM_ZOOM_LEVEL": "close"}, clear=True):
            with self.assertRaises(ValueError):
                load_settings()


if __name__ == "__main__":
    unittest.main(verbosity=2)
