#!/usr/bin/env python
"""
Test suite for control lattice construction and indexing.
"""

import os
import sys
import unittest

import numpy as np

# Add src directory to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from ffdsculpt.core.errors import DimensionMismatchError, InvalidBoundsError, OutOfRangeError
from ffdsculpt.core.lattice import ControlLattice, LatticeFrame, build_lattice

BOX = ((-100.0, -100.0, -100.0), (100.0, 100.0, 100.0))


class TestBuildLattice(unittest.TestCase):
    """Test the lattice builder."""

    def test_scenario_a_centre_point(self):
        lattice = build_lattice(BOX, (2, 2, 2))
        self.assertEqual(lattice.total_count(), 27)
        np.testing.assert_array_equal(lattice.get_position(lattice.index(1, 1, 1)), [0.0, 0.0, 0.0])

    def test_positions_interpolate_per_axis(self):
        lattice = build_lattice(((0, 0, 0), (4, 6, 9)), (4, 2, 3))
        for k in range(4):
            for j in range(3):
                for i in range(5):
                    expected = [i * 4 / 4, j * 6 / 2, k * 9 / 3]
                    np.testing.assert_allclose(lattice.get_position_ternary(i, j, k), expected)

    def test_corners_match_box(self):
        lattice = build_lattice(BOX, (3, 1, 2))
        np.testing.assert_allclose(lattice.get_position_ternary(0, 0, 0), BOX[0])
        np.testing.assert_allclose(lattice.get_position_ternary(3, 1, 2), BOX[1])
        np.testing.assert_allclose(lattice.get_position(lattice.total_count() - 1), BOX[1])

    def test_accepts_frame(self):
        frame = LatticeFrame(*BOX)
        lattice = build_lattice(frame, (1, 1, 1))
        self.assertIs(lattice.frame, frame)
        self.assertEqual(lattice.total_count(), 8)

    def test_rejects_inverted_box(self):
        with self.assertRaises(InvalidBoundsError):
            build_lattice(((0, 0, 0), (1, -1, 1)), (2, 2, 2))

    def test_rejects_point_box(self):
        with self.assertRaises(InvalidBoundsError):
            build_lattice(((1, 1, 1), (1, 1, 1)), (2, 2, 2))

    def test_rejects_non_finite_box(self):
        with self.assertRaises(InvalidBoundsError):
            build_lattice(((0, 0, 0), (1, np.inf, 1)), (2, 2, 2))

    def test_rejects_bad_span_counts(self):
        for spans in [(0, 2, 2), (2, -1, 2), (2, 2), (2, 2, 2, 2), (1.5, 2, 2)]:
            with self.subTest(spans=spans):
                with self.assertRaises(DimensionMismatchError):
                    build_lattice(BOX, spans)

    def test_errors_are_value_errors(self):
        with self.assertRaises(ValueError):
            build_lattice(BOX, (0, 1, 1))

    def test_flat_axis_is_accepted(self):
        lattice = build_lattice(((0, 0, 5), (10, 10, 5)), (2, 2, 2))
        self.assertEqual(lattice.frame.flat_axes, (False, False, True))
        self.assertTrue(np.all(lattice.positions[:, 2] == 5.0))


class TestControlLattice(unittest.TestCase):
    """Test the lattice store accessors."""

    def setUp(self):
        self.lattice = build_lattice(BOX, (3, 2, 4))

    def test_counts(self):
        self.assertEqual(self.lattice.axis_count(0), 4)
        self.assertEqual(self.lattice.axis_count(1), 3)
        self.assertEqual(self.lattice.axis_count(2), 5)
        self.assertEqual(self.lattice.total_count(), 60)
        with self.assertRaises(OutOfRangeError):
            self.lattice.axis_count(3)

    def test_index_formula(self):
        self.assertEqual(self.lattice.index(1, 2, 3), 1 + 2 * 4 + 3 * 4 * 3)

    def test_index_bijection(self):
        nx, ny, nz = self.lattice.span_counts
        seen = set()
        for k in range(nz + 1):
            for j in range(ny + 1):
                for i in range(nx + 1):
                    index = self.lattice.index(i, j, k)
                    self.assertEqual(self.lattice.ternary(index), (i, j, k))
                    np.testing.assert_array_equal(
                        self.lattice.get_position_ternary(i, j, k), self.lattice.get_position(index)
                    )
                    seen.add(index)
        self.assertEqual(seen, set(range(self.lattice.total_count())))

    def test_ternary_out_of_range(self):
        for ijk in [(4, 0, 0), (0, 3, 0), (0, 0, 5), (-1, 0, 0)]:
            with self.subTest(ijk=ijk):
                with self.assertRaises(OutOfRangeError):
                    self.lattice.get_position_ternary(*ijk)

    def test_non_integer_indices_are_rejected(self):
        with self.assertRaises(OutOfRangeError):
            self.lattice.get_position_ternary(0.5, 0, 0)
        with self.assertRaises(OutOfRangeError):
            self.lattice.index(1, 2.0, 0)
        with self.assertRaises(OutOfRangeError):
            self.lattice.set_position(1.5, (0.0, 0.0, 0.0))
        np.testing.assert_array_equal(
            self.lattice.get_position(np.int64(5)), self.lattice.get_position(5)
        )

    def test_out_of_range_is_index_error(self):
        with self.assertRaises(IndexError):
            self.lattice.get_position(self.lattice.total_count())

    def test_set_position_round_trip(self):
        self.lattice.set_position_ternary(2, 1, 3, (1.0, 2.0, 3.0))
        index = self.lattice.index(2, 1, 3)
        np.testing.assert_array_equal(self.lattice.get_position(index), [1.0, 2.0, 3.0])
        self.assertFalse(self.lattice.is_pristine())

    def test_set_position_rejects_bad_shape(self):
        with self.assertRaises(ValueError):
            self.lattice.set_position(0, (1.0, 2.0))

    def test_get_position_returns_copy(self):
        position = self.lattice.get_position(5)
        position[:] = 999.0
        self.assertFalse(np.any(self.lattice.get_position(5) == 999.0))

    def test_positions_view_is_read_only(self):
        with self.assertRaises(ValueError):
            self.lattice.positions[0, 0] = 1.0

    def test_reset_restores_grid(self):
        original = self.lattice.positions.copy()
        self.lattice.set_position(7, (50.0, 50.0, 50.0))
        self.lattice.reset()
        np.testing.assert_array_equal(self.lattice.positions, original)
        self.assertTrue(self.lattice.is_pristine())

    def test_as_grid_matches_ternary(self):
        grid = self.lattice.as_grid()
        self.assertEqual(grid.shape, (4, 3, 5, 3))
        np.testing.assert_array_equal(grid[3, 1, 2], self.lattice.get_position_ternary(3, 1, 2))

    def test_lattice_edges(self):
        nx, ny, nz = self.lattice.span_counts
        edges = self.lattice.lattice_edges()
        expected = nx * (ny + 1) * (nz + 1) + (nx + 1) * ny * (nz + 1) + (nx + 1) * (ny + 1) * nz
        self.assertEqual(edges.shape, (expected, 2))
        lengths = np.linalg.norm(
            self.lattice.positions[edges[:, 0]] - self.lattice.positions[edges[:, 1]], axis=1
        )
        spacing = 200.0 / np.array([nx, ny, nz])
        for length in lengths:
            self.assertTrue(np.any(np.isclose(length, spacing)))
        self.assertEqual(tuple(edges[0]), (self.lattice.index(0, 0, 0), self.lattice.index(1, 0, 0)))

    def test_rejects_wrong_position_count(self):
        with self.assertRaises(ValueError):
            ControlLattice(LatticeFrame(*BOX), (1, 1, 1), np.zeros((7, 3)))


class TestLatticeFrame(unittest.TestCase):
    """Test bounding box helpers."""

    def test_from_points_with_margin(self):
        points = np.array([[0, 0, 0], [1, 2, 3], [-1, 5, 2]], dtype=float)
        frame = LatticeFrame.from_points(points, margin=0.5)
        np.testing.assert_allclose(frame.min_corner, [-1.5, -0.5, -0.5])
        np.testing.assert_allclose(frame.max_corner, [1.5, 5.5, 3.5])

    def test_from_points_rejects_empty(self):
        with self.assertRaises(InvalidBoundsError):
            LatticeFrame.from_points(np.empty((0, 3)))

    def test_as_tuple_is_a_copy(self):
        frame = LatticeFrame(*BOX)
        min_corner, _ = frame.as_tuple()
        min_corner[0] = 5.0
        self.assertEqual(frame.min_corner[0], -100.0)


if __name__ == '__main__':
    unittest.main()
