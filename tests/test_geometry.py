"""
Test suite for slot projection and linear-view row stacking
"""

import os
import sys
import unittest

import numpy as np

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from geometry import (CircularLayout, LinearLayout, PhaseRowStacking,
                      SequentialRowStacking, angle_for_slot, make_row_stacking)
from winding_model import Coil


class TestCircularProjection(unittest.TestCase):
    """Test slot angles and ring positions"""

    def setUp(self):
        self.layout = CircularLayout(560, 560)

    def test_slot_one_at_top(self):
        self.assertAlmostEqual(angle_for_slot(1, 24), -np.pi / 2)
        x, y = self.layout.outer_point(1, 24)
        self.assertAlmostEqual(x, 280.0)
        self.assertAlmostEqual(y, 280.0 - 220.0)

    def test_angles_injective(self):
        for Z in (6, 24, 37, 96):
            angles = np.mod(angle_for_slot(np.arange(1, Z + 1), Z), 2 * np.pi)
            rounded = np.round(angles, 9)
            with self.subTest(Z=Z):
                self.assertEqual(len(set(rounded)), Z)

    def test_angles_periodic(self):
        Z = 24
        slots = np.arange(1, Z + 1)
        diff = angle_for_slot(slots + Z, Z) - angle_for_slot(slots, Z)
        np.testing.assert_allclose(diff, 2 * np.pi)

    def test_points_on_rings(self):
        cx, cy = self.layout.center
        for slot in range(1, 25):
            xo, yo = self.layout.outer_point(slot, 24)
            xi, yi = self.layout.inner_point(slot, 24)
            self.assertAlmostEqual(np.hypot(xo - cx, yo - cy), self.layout.outer_radius)
            self.assertAlmostEqual(np.hypot(xi - cx, yi - cy), self.layout.inner_radius)

    def test_stator_ring_outside_slots(self):
        self.assertEqual(self.layout.stator_radius, 235)

    def test_chord_control_point_pushed_outward(self):
        start = self.layout.outer_point(1, 24)
        end = self.layout.outer_point(4, 24)
        cx, cy = self.layout.center
        mid = ((start[0] + end[0]) / 2, (start[1] + end[1]) / 2)
        control = self.layout.chord_control_point(start, end, 0.3)
        self.assertAlmostEqual(np.hypot(control[0] - cx, control[1] - cy),
                               1.3 * np.hypot(mid[0] - cx, mid[1] - cy))


class TestLinearProjection(unittest.TestCase):
    """Test the unrolled slot axis"""

    def setUp(self):
        self.layout = LinearLayout(960, 420)

    def test_axis_endpoints(self):
        xs = self.layout.slot_positions(24)
        self.assertAlmostEqual(xs[0], 40.0)
        self.assertAlmostEqual(xs[-1], 920.0)
        self.assertEqual(len(xs), 24)

    def test_even_spacing(self):
        xs = self.layout.slot_positions(36)
        np.testing.assert_allclose(np.diff(xs), (960 - 80) / 35)

    def test_single_slot(self):
        self.assertAlmostEqual(float(self.layout.slot_x(1, 1)), 40.0)

    def test_axis_height(self):
        self.assertEqual(self.layout.axis_y, 380)
        self.assertEqual(self.layout.row_floor, 360)
        self.assertEqual(self.layout.row_ceiling, 50)


class TestRowStacking(unittest.TestCase):
    """Test both row-stacking policies"""

    def setUp(self):
        self.layout = LinearLayout(960, 420)

    def test_phase_rows(self):
        stacking = PhaseRowStacking()
        tops = [stacking.row_top(0, Coil(1, 7, phase), 24, self.layout)
                for phase in ('A+', 'B-', 'C+', 'A-')]
        self.assertEqual(tops, [270, 180, 90, 270])

    def test_phase_rows_clamped(self):
        short = LinearLayout(960, 200)
        top = PhaseRowStacking().row_top(0, Coil(1, 7, 'C+'), 24, short)
        self.assertEqual(top, short.row_ceiling)

    def test_sequential_rows_wrap(self):
        stacking = SequentialRowStacking(max_rows=6)
        coil = Coil(1, 7, 'A+')
        tops = [stacking.row_top(i, coil, 24, self.layout) for i in range(12)]
        self.assertEqual(len(set(np.round(tops, 6))), 6)
        self.assertAlmostEqual(tops[0], tops[6])
        self.assertAlmostEqual(tops[5], self.layout.row_ceiling)
        for top in tops:
            self.assertGreaterEqual(top, self.layout.row_ceiling - 1e-9)
            self.assertLess(top, self.layout.row_floor)

    def test_sequential_fewer_coils_than_rows(self):
        stacking = SequentialRowStacking(max_rows=6)
        top = stacking.row_top(1, Coil(2, 3, 'A+'), 2, self.layout)
        self.assertAlmostEqual(top, self.layout.row_ceiling)

    def test_factory(self):
        self.assertIsInstance(make_row_stacking('phase'), PhaseRowStacking)
        self.assertIsInstance(make_row_stacking('sequential'), SequentialRowStacking)
        with self.assertRaises(ValueError):
            make_row_stacking('spiral')
        with self.assertRaises(ValueError):
            SequentialRowStacking(max_rows=0)


if __name__ == '__main__':
    unittest.main()
