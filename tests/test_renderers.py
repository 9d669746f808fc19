import tempfile
import unittest
from datetime import datetime
from pathlib import Path

import plotly.graph_objects as go

from circaevum.config import ZOOM_LEVELS, build_planets
from circaevum.renderers.plotly_3d import hex_color, render_plotly_scene
from circaevum.renderers.static import save_static_scene
from circaevum.timemarkers import TimeMarkers
from circaevum.timescale import fixed_clock
from circaevum.worldlines import WorldlineBuilder

NOW = datetime(2024, 3, 15, 10)


def build_scene(zoom: int):
    planets = build_planets(NOW)
    worldlines = WorldlineBuilder(planets, ZOOM_LEVELS).build_all(zoom, NOW)
    markers = TimeMarkers(planets, clock=fixed_clock(NOW)).create_time_markers(zoom)
    return worldlines, markers


class TestPlotlyRenderer(unittest.TestCase):
    def test_hex_color(self) -> None:
        self.assertEqual(hex_color(0x4A90E2), "#4a90e2")
        self.assertEqual(hex_color(0x00FFFF), "#00ffff")

    def test_scene_traces(self) -> None:
        worldlines, markers = build_scene(6)
        fig = render_plotly_scene(worldlines, markers)
        self.assertIsInstance(fig, go.Figure)
        names = [trace.name for trace in fig.data]
        self.assertEqual(names[: len(worldlines)], [w.name for w in worldlines])
        self.assertIn("labels", names)
        self.assertIn("moon phases", names)

    def test_height_is_plotly_z(self) -> None:
        worldlines, markers = build_scene(3)
        fig = render_plotly_scene(worldlines, markers, light_mode=True)
        earth = next(trace for trace in fig.data if trace.name == "Earth")
        self.assertAlmostEqual(min(earth.z), 2400.0)
        self.assertEqual(fig.layout.paper_bgcolor, "#ffffff")


class TestStaticRenderer(unittest.TestCase):
    def test_save_png(self) -> None:
        worldlines, markers = build_scene(4)
        with tempfile.TemporaryDirectory() as tmp:
            path = save_static_scene(worldlines, markers, Path(tmp) / "out" / "scene.png")
            self.assertTrue(path.exists())
            self.assertGreater(path.stat().st_size, 0)


if __name__ == "__main__":
    unittest.main(verbosity=2)
