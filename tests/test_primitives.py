#!/usr/bin/env python
"""
Test suite for the primitive shape library and mesh welding.
"""

import os
import sys
import unittest
from collections import Counter

import numpy as np

# Add src directory to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from ffdsculpt.mesh.geometry import TriMesh, drop_degenerate_faces, merge_vertices
from ffdsculpt.mesh.primitives import (
    BoxShape, CylinderShape, IcosahedronShape, OctahedronShape, SphereShape, TorusShape,
    build_primitive,
)


def signed_volume(mesh):
    a, b, c = (mesh.vertices[mesh.faces[:, n]] for n in range(3))
    return float(np.sum(np.einsum('ij,ij->i', a, np.cross(b, c))) / 6.0)


def directed_edges(mesh):
    edges = Counter()
    for a, b, c in mesh.faces:
        edges.update([(a, b), (b, c), (c, a)])
    return edges


class TestPrimitiveShapes(unittest.TestCase):
    """Test tessellation of each stock shape."""

    EXPECTED_COUNTS = [
        (BoxShape(), 26, 48),
        (SphereShape(), 8, 12),
        (TorusShape(), 32, 64),
        (CylinderShape(), 34, 64),
        (IcosahedronShape(), 42, 80),
        (OctahedronShape(), 6, 8),
    ]

    def test_vertex_and_face_counts(self):
        for shape, n_vertices, n_faces in self.EXPECTED_COUNTS:
            with self.subTest(shape=type(shape).__name__):
                mesh = build_primitive(shape)
                self.assertEqual(mesh.n_vertices, n_vertices)
                self.assertEqual(mesh.n_faces, n_faces)

    def test_meshes_are_closed_and_consistently_oriented(self):
        for shape, _, _ in self.EXPECTED_COUNTS:
            with self.subTest(shape=type(shape).__name__):
                edges = directed_edges(build_primitive(shape))
                self.assertTrue(all(count == 1 for count in edges.values()))
                for a, b in edges:
                    self.assertIn((b, a), edges)

    def test_normals_point_outward(self):
        for shape, _, _ in self.EXPECTED_COUNTS:
            with self.subTest(shape=type(shape).__name__):
                self.assertGreater(signed_volume(build_primitive(shape)), 0.0)

    def test_box_volume_and_bounds(self):
        mesh = build_primitive(BoxShape())
        self.assertAlmostEqual(signed_volume(mesh), 200.0 ** 3, places=3)
        min_corner, max_corner = mesh.bounds()
        np.testing.assert_allclose(min_corner, [-100.0, -100.0, -100.0])
        np.testing.assert_allclose(max_corner, [100.0, 100.0, 100.0])

    def test_mesh_scale_is_applied(self):
        mesh = build_primitive(SphereShape())
        np.testing.assert_allclose(np.linalg.norm(mesh.vertices, axis=1), 150.0)
        mesh = build_primitive(SphereShape(mesh_scale=1.0))
        np.testing.assert_allclose(np.linalg.norm(mesh.vertices, axis=1), 100.0)

    def test_polyhedra_lie_on_their_sphere(self):
        mesh = build_primitive(OctahedronShape())
        np.testing.assert_allclose(np.linalg.norm(mesh.vertices, axis=1), 200.0)

    def test_subdivided_box(self):
        mesh = build_primitive(BoxShape(width_segments=1, height_segments=1, depth_segments=1))
        self.assertEqual(mesh.n_vertices, 8)
        self.assertEqual(mesh.n_faces, 12)

    def test_invalid_parameters(self):
        with self.assertRaises(ValueError):
            build_primitive(BoxShape(width=0.0))
        with self.assertRaises(ValueError):
            build_primitive(SphereShape(radius=-1.0))
        with self.assertRaises(ValueError):
            build_primitive(OctahedronShape(mesh_scale=0.0))

    def test_unknown_shape(self):
        with self.assertRaises(TypeError):
            build_primitive("box")


class TestTriMesh(unittest.TestCase):
    """Test the mesh container and welding helpers."""

    def test_buffers_are_read_only(self):
        mesh = TriMesh([[0, 0, 0], [1, 0, 0], [0, 1, 0]], [[0, 1, 2]])
        with self.assertRaises(ValueError):
            mesh.vertices[0, 0] = 5.0

    def test_rejects_out_of_range_faces(self):
        with self.assertRaises(ValueError):
            TriMesh([[0, 0, 0], [1, 0, 0], [0, 1, 0]], [[0, 1, 3]])

    def test_drop_degenerate_faces(self):
        faces = drop_degenerate_faces([[0, 1, 2], [0, 0, 1], [3, 4, 3]])
        np.testing.assert_array_equal(faces, [[0, 1, 2]])

    def test_merge_vertices_keeps_first_appearance_order(self):
        vertices = np.array([
            [1.0, 0.0, 0.0], [0.0, 0.0, 0.0], [0.0, 1.0, 0.0],
            [1.0, 0.0, 0.0], [-0.0, 1.0, 0.0], [1.0, 1.0, 0.0],
        ])
        faces = np.array([[1, 0, 2], [3, 5, 4]])
        mesh = merge_vertices(vertices, faces)
        np.testing.assert_array_equal(mesh.vertices, [[1, 0, 0], [0, 0, 0], [0, 1, 0], [1, 1, 0]])
        np.testing.assert_array_equal(mesh.faces, [[1, 0, 2], [0, 3, 2]])

    def test_merge_vertices_drops_collapsed_faces(self):
        vertices = np.array([[0.0, 0.0, 0.0], [0.0, 0.0, 1e-12], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
        mesh = merge_vertices(vertices, [[0, 1, 2], [0, 2, 3]])
        self.assertEqual(mesh.n_vertices, 3)
        np.testing.assert_array_equal(mesh.faces, [[0, 1, 2]])


if __name__ == '__main__':
    unittest.main()
