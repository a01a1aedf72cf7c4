#!/usr/bin/env python
"""
Test suite for guide surface authoring.
"""

import itertools
import os
import sys
import unittest

import numpy as np

# Add src directory to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from ffdsculpt.core.errors import FFDError, GuideSurfaceError
from ffdsculpt.mesh.guide import MIN_GUIDE_POINTS, GuideSurface, GuideSurfaceBuilder

CUBE = [np.array(corner, dtype=float) * 10.0 for corner in itertools.product((-1, 1), repeat=3)]


class TestGuideSurfaceBuilder(unittest.TestCase):
    """Test collecting points and building the hull."""

    def setUp(self):
        self.builder = GuideSurfaceBuilder()

    def test_too_few_points(self):
        for point in CUBE[:MIN_GUIDE_POINTS - 1]:
            self.builder.add_point(point)
        self.assertIsNone(self.builder.build())

    def test_cube_hull(self):
        for point in CUBE:
            self.builder.add_point(point)
        surface = self.builder.build()

        self.assertIsInstance(surface, GuideSurface)
        self.assertEqual(len(surface.triangles), 12)
        self.assertEqual(len(np.unique(surface.triangles)), 8)

    def test_interior_point_is_not_a_hull_vertex(self):
        for point in CUBE + [np.zeros(3)]:
            self.builder.add_point(point)
        surface = self.builder.build()
        self.assertNotIn(8, surface.triangles)

    def test_coplanar_points(self):
        for point in ([0, 0, 0], [1, 0, 0], [0, 1, 0], [1, 1, 0]):
            self.builder.add_point(point)
        with self.assertRaises(GuideSurfaceError):
            self.builder.build()
        self.assertTrue(issubclass(GuideSurfaceError, FFDError))

    def test_clear(self):
        self.builder.add_point([1, 2, 3])
        self.builder.clear()
        self.assertEqual(len(self.builder), 0)
        self.assertEqual(self.builder.points.shape, (0, 3))

    def test_rejects_invalid_point(self):
        with self.assertRaises(ValueError):
            self.builder.add_point([1, 2])
        with self.assertRaises(ValueError):
            self.builder.add_point([1, np.nan, 3])


class TestGuideSurfaceSamples(unittest.TestCase):
    """Test sampling positions on the hull."""

    def setUp(self):
        builder = GuideSurfaceBuilder()
        for point in CUBE:
            builder.add_point(point)
        self.surface = builder.build()

    def test_hull_vertices_without_duplicates(self):
        samples = self.surface.samples()
        self.assertEqual(samples.shape, (8, 3))
        self.assertEqual(len(np.unique(samples, axis=0)), 8)
        np.testing.assert_array_equal(samples[0], self.surface.points[self.surface.triangles[0, 0]])

    def test_density_adds_edge_and_interior_points(self):
        samples = self.surface.samples(density=1)
        # Three edge midpoints per facet
        self.assertEqual(samples.shape, (8 + 12 * 3, 3))
        self.assertTrue(np.all(np.abs(samples) <= 10.0 + 1e-9))

    def test_samples_lie_on_the_hull(self):
        samples = self.surface.samples(density=3)
        self.assertTrue(np.allclose(np.max(np.abs(samples), axis=1), 10.0))

    def test_negative_density(self):
        with self.assertRaises(ValueError):
            self.surface.samples(density=-1)

    def test_arrays_are_read_only(self):
        with self.assertRaises(ValueError):
            self.surface.points[0, 0] = 1.0


if __name__ == '__main__':
    unittest.main()
