"""
Test suite for the circular and linear renderers
Rendering runs on the Agg backend; artists are inspected by gid
"""

import os
import sys
import tempfile
import unittest

import matplotlib
matplotlib.use("Agg")
import numpy as np
from matplotlib.path import Path

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from config import STROKE_NORMAL, STROKE_SELECTED_CIRCULAR, STROKE_SELECTED_LINEAR
from interaction import WindingController
from view_state import ViewTransform, WindingSnapshot
from visualization import WindingVisualizer, create_surface_figure
from winding_parameters import MachineSpec


def coil_artists(ax, index):
    """Main stroke artist(s) of a coil, looked up by gid"""
    gid = f"coil-{index}"
    return [artist for artist in list(ax.lines) + list(ax.patches) if artist.get_gid() == gid]


def main_stroke(ax, index):
    artists = coil_artists(ax, index)
    assert len(artists) == 1, f"expected one stroke for coil {index}, got {len(artists)}"
    return artists[0]


class RendererTestCase(unittest.TestCase):

    def setUp(self):
        """Fresh visualizer, surfaces and a computed 24-slot design"""
        self.visualizer = WindingVisualizer()
        self.circular_ax = create_surface_figure((560, 560)).axes[0]
        self.linear_ax = create_surface_figure((960, 420)).axes[0]
        self.controller = WindingController()
        self.controller.recalculate(MachineSpec())

    def render(self, snapshot):
        self.visualizer.plot_circular_view(self.circular_ax, snapshot)
        self.visualizer.plot_linear_view(self.linear_ax, snapshot)


class TestSurface(RendererTestCase):

    def test_pixel_coordinates(self):
        """Data limits match the surface size with y pointing down"""
        self.render(self.controller.snapshot())
        self.assertEqual(self.circular_ax.get_xlim(), (0.0, 560.0))
        self.assertEqual(self.circular_ax.get_ylim(), (560.0, 0.0))
        self.assertEqual(self.linear_ax.get_ylim(), (420.0, 0.0))

    def test_empty_snapshot_draws_placeholder(self):
        self.render(WindingSnapshot())
        self.assertEqual(len(self.circular_ax.patches), 0)
        self.assertEqual(len(self.linear_ax.lines), 0)
        self.assertIn("No winding computed", self.circular_ax.texts[0].get_text())

    def test_redraw_is_full_repaint(self):
        snapshot = self.controller.snapshot()
        self.render(snapshot)
        counts = (len(self.circular_ax.patches), len(self.linear_ax.lines))
        self.render(snapshot)
        self.assertEqual((len(self.circular_ax.patches), len(self.linear_ax.lines)), counts)


class TestCircularView(RendererTestCase):

    def test_double_layer_markers_and_coils(self):
        self.render(self.controller.snapshot())
        # stator ring + outer and inner marker per slot
        self.assertEqual(len(self.circular_ax.patches), 1 + 2 * 24)
        for i in range(24):
            self.assertEqual(main_stroke(self.circular_ax, i).get_linewidth(), STROKE_NORMAL)

    def test_single_layer_curved_chords(self):
        self.controller.recalculate(MachineSpec(layer_type="single"))
        self.render(self.controller.snapshot())
        stroke = main_stroke(self.circular_ax, 0)
        codes = list(stroke.get_path().codes)
        self.assertEqual(len(codes), 3)
        self.assertEqual(codes[1], Path.CURVE3)
        self.assertEqual(coil_artists(self.circular_ax, 12), [])

    def test_slot_numbers_toggle(self):
        self.controller.set_options(show_slot_numbers=True)
        self.visualizer.plot_circular_view(self.circular_ax, self.controller.snapshot())
        labels = {t.get_text() for t in self.circular_ax.texts}
        self.assertTrue({str(s) for s in range(1, 25)} <= labels)

        self.controller.set_options(show_slot_numbers=False)
        self.visualizer.plot_circular_view(self.circular_ax, self.controller.snapshot())
        self.assertEqual(len(self.circular_ax.texts), 0)

    def test_coil_labels_and_arrows(self):
        self.controller.set_options(show_slot_numbers=False, show_coil_indices=True,
                                    show_phase_labels=True, show_direction_arrows=True)
        self.visualizer.plot_circular_view(self.circular_ax, self.controller.snapshot())
        labels = [t.get_text() for t in self.circular_ax.texts]
        self.assertIn("1 A+", labels)
        self.assertIn("24 C-", labels)
        arrows = [p for p in self.circular_ax.patches if p.get_gid() == "coil-0-arrow"]
        self.assertEqual(len(arrows), 1)


class TestLinearView(RendererTestCase):

    def test_every_coil_drawn_with_markers(self):
        self.render(self.controller.snapshot())
        for i in range(24):
            self.assertEqual(main_stroke(self.linear_ax, i).get_linewidth(), STROKE_NORMAL)
        gids = {p.get_gid() for p in self.linear_ax.patches}
        self.assertIn("coil-0-start", gids)
        self.assertIn("coil-0-end", gids)

    def test_u_shape_reaches_slot_positions(self):
        self.render(self.controller.snapshot())
        xs, ys = main_stroke(self.linear_ax, 0).get_data()
        slot_xs = self.visualizer.linear_layout.slot_positions(24)
        self.assertAlmostEqual(xs[0], slot_xs[0])
        self.assertAlmostEqual(xs[-1], slot_xs[6])
        self.assertAlmostEqual(ys[0], self.visualizer.linear_layout.axis_y)
        self.assertAlmostEqual(min(ys), 270)  # phase A row

    def test_phase_filter_keeps_indices(self):
        self.controller.set_options(phase_filter='A')
        self.visualizer.plot_linear_view(self.linear_ax, self.controller.snapshot())
        drawn = sorted(int(line.get_gid().split('-')[1]) for line in self.linear_ax.lines
                       if line.get_gid() and line.get_gid().count('-') == 1)
        self.assertEqual(drawn, [0, 1, 6, 7, 12, 13, 18, 19])

    def test_sequential_stacking(self):
        self.controller.set_options(row_stacking='sequential')
        self.visualizer.plot_linear_view(self.linear_ax, self.controller.snapshot())
        tops = {round(min(main_stroke(self.linear_ax, i).get_data()[1]), 6) for i in range(24)}
        self.assertEqual(len(tops), 6)

    def test_viewport_transform_applied(self):
        snapshot = self.controller.snapshot()
        panned = WindingSnapshot(spec=snapshot.spec, figures=snapshot.figures,
                                 coils=snapshot.coils,
                                 transform=ViewTransform(2.0, 10.0, 5.0),
                                 options=snapshot.options)
        self.visualizer.plot_linear_view(self.linear_ax, panned)
        stroke = main_stroke(self.linear_ax, 0)
        x, y = stroke.get_data()[0][0], stroke.get_data()[1][0]
        expected = self.linear_ax.transData.transform((10.0 + 2.0 * x, 5.0 + 2.0 * y))
        np.testing.assert_allclose(stroke.get_transform().transform((x, y)), expected)


class TestSelectionHighlight(RendererTestCase):

    def test_selected_coil_bold_in_both_views(self):
        self.controller.select_row(5)
        self.render(self.controller.snapshot())
        for i in range(24):
            circular = main_stroke(self.circular_ax, i).get_linewidth()
            linear = main_stroke(self.linear_ax, i).get_linewidth()
            if i == 5:
                self.assertEqual(circular, STROKE_SELECTED_CIRCULAR)
                self.assertEqual(linear, STROKE_SELECTED_LINEAR)
            else:
                self.assertEqual(circular, STROKE_NORMAL)
                self.assertEqual(linear, STROKE_NORMAL)

    def test_single_layer_selection(self):
        self.controller.recalculate(MachineSpec(layer_type="single"))
        self.controller.click_circular(280, 60)
        self.render(self.controller.snapshot())
        self.assertEqual(main_stroke(self.circular_ax, 0).get_linewidth(), STROKE_SELECTED_CIRCULAR)
        self.assertEqual(main_stroke(self.circular_ax, 1).get_linewidth(), STROKE_NORMAL)


class TestExport(RendererTestCase):

    def test_export_views(self):
        with tempfile.TemporaryDirectory() as tmp:
            prefix = os.path.join(tmp, "out", "design")
            paths = self.visualizer.export_views(self.controller.snapshot(), prefix)
            self.assertEqual(paths, [prefix + "_circular.png", prefix + "_linear.png"])
            for path in paths:
                self.assertTrue(os.path.exists(path))
                self.assertGreater(os.path.getsize(path), 0)


if __name__ == '__main__':
    unittest.main()
