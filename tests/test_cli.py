#!/usr/bin/env python
"""
Test suite for the command-line interface.
"""

import os
import sys
import tempfile
import unittest

import matplotlib
matplotlib.use('Agg')
import numpy as np

# Add src directory to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from ffdsculpt.cli.app import apply_moves, main, parse_arguments
from ffdsculpt.mesh.primitives import BoxShape, build_primitive
from ffdsculpt.session import EditingSession


class TestArgumentParsing(unittest.TestCase):
    """Test argument defaults and repeated options."""

    def test_defaults(self):
        args = parse_arguments([])
        self.assertEqual(args.shape, 'box')
        self.assertEqual(args.dims, [2, 2, 2])
        self.assertEqual(args.subdivision, 2)
        self.assertEqual(args.smoothing_factor, 0.5)
        self.assertEqual(args.blend_radius, 20.0)

    def test_moves_keep_command_line_order(self):
        args = parse_arguments(['--move-ijk', '2', '2', '2', '1', '1', '1', '--move', '26', '150', '150', '150'])
        self.assertEqual(args.moves, [
            ('--move-ijk', ['2', '2', '2', '1', '1', '1']),
            ('--move', ['26', '150', '150', '150']),
        ])

    def test_last_edit_of_a_point_wins(self):
        session = EditingSession()
        session.set_mesh(build_primitive(BoxShape()))
        args = parse_arguments(['--move-ijk', '2', '2', '2', '1', '1', '1', '--move', '26', '150', '150', '150'])
        self.assertEqual(apply_moves(session, args), 2)
        np.testing.assert_array_equal(session.get_position(26), [150.0, 150.0, 150.0])

    def test_unknown_shape_exits(self):
        with self.assertRaises(SystemExit):
            parse_arguments(['--shape', 'teapot'])


class TestMain(unittest.TestCase):
    """Test running the pipeline end to end."""

    def test_move_and_eval(self):
        self.assertEqual(main([
            '--shape', 'box', '-s', '0',
            '--move', '26', '150', '150', '150',
            '--eval', '100', '100', '100',
        ]), 0)

    def test_guide_points(self):
        argv = ['--shape', 'octahedron', '-s', '0', '--move-ijk', '1', '1', '2', '0', '0', '260',
                '--smoothing-factor', '1.0']
        for point in ((-10, -10, 190), (10, -10, 190), (0, 10, 190), (0, 0, 210)):
            argv += ['--guide-point'] + [str(value) for value in point]
        self.assertEqual(main(argv), 0)

    def test_invalid_blend_radius(self):
        self.assertEqual(main(['-s', '0', '--blend-radius', 'nan']), 1)

    def test_invalid_dims(self):
        self.assertEqual(main(['-s', '0', '-d', '0', '2', '2']), 1)

    def test_invalid_subdivision(self):
        self.assertEqual(main(['-s', '9']), 1)

    def test_out_of_range_move(self):
        self.assertEqual(main(['-s', '0', '--move', '27', '0', '0', '0']), 1)

    def test_non_integer_index(self):
        self.assertEqual(main(['-s', '0', '--move', 'top', '0', '0', '0']), 1)

    def test_missing_mesh_file(self):
        self.assertEqual(main(['--mesh-file', 'does_not_exist.stl', '-s', '0']), 1)

    def test_save_plot(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            path = os.path.join(temp_dir, 'plots', 'box.png')
            self.assertEqual(main(['-s', '0', '--move', '26', '150', '150', '150', '--save-plot', path]), 0)
            self.assertTrue(os.path.exists(path))


if __name__ == '__main__':
    unittest.main()
