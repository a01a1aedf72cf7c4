"""Command-line interface for ffdsculpt.

This module provides the main entry point for the ffdsculpt command-line
application: load a base shape, sculpt it by moving lattice control points,
optionally blend toward a guide surface, and report or plot the result.
"""

import argparse
import logging
import sys
import traceback
from typing import List, Optional

import numpy as np

from ffdsculpt.core.config import DEFAULT_BLEND_RADIUS, EditorSettings
from ffdsculpt.core.errors import FFDError
from ffdsculpt.mesh.source import MeshFileShape, available_shapes, shape_from_name
from ffdsculpt.session import EditingSession


def setup_logging(debug_mode: bool = False) -> None:
    """Configure logging based on debug mode.

    Args:
        debug_mode: If True, set logging level to DEBUG, otherwise INFO
    """
    log_level = logging.DEBUG if debug_mode else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


class _AppendMove(argparse.Action):
    """Collect --move and --move-ijk edits into one list, keeping their order."""

    def __call__(self, parser, namespace, values, option_string=None):
        moves = list(getattr(namespace, self.dest, None) or [])
        moves.append((option_string, values))
        setattr(namespace, self.dest, moves)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='ffdsculpt',
        description='Sculpt a refined base mesh with a free-form deformation lattice'
    )

    # Mesh source group
    mesh_group = parser.add_argument_group('mesh', 'Choose and refine the base mesh')
    mesh_group.add_argument('--shape', default='box', choices=available_shapes(), help='Built-in base shape')
    mesh_group.add_argument('--mesh-file', default=None, help='Surface mesh file to edit instead of a built-in shape')
    mesh_group.add_argument('--mesh-scale', type=float, default=1.0, help='Scale applied to --mesh-file')
    mesh_group.add_argument('-s', '--subdivision', type=int, default=2, help='Loop subdivision level (0-4)')

    # Lattice group
    lattice_group = parser.add_argument_group('lattice', 'Control the FFD lattice')
    lattice_group.add_argument('-d', '--dims', nargs=3, type=int, default=[2, 2, 2],
                               metavar=('NX', 'NY', 'NZ'), help='Lattice span counts')
    lattice_group.add_argument('--move', nargs=4, action=_AppendMove, dest='moves', default=[],
                               metavar=('INDEX', 'X', 'Y', 'Z'),
                               help='Move the control point with linear INDEX to (X, Y, Z); repeatable')
    lattice_group.add_argument('--move-ijk', nargs=6, action=_AppendMove, dest='moves', default=[],
                               metavar=('I', 'J', 'K', 'X', 'Y', 'Z'),
                               help='Move the control point at lattice coordinates (I, J, K); repeatable')
    lattice_group.add_argument('--eval', nargs=3, type=float, action='append', default=[], metavar=('X', 'Y', 'Z'),
                               help='Report the deformed position of a world point; repeatable')

    # Guide surface group
    guide_group = parser.add_argument_group('guide', 'Restrict the deformation to a guide region')
    guide_group.add_argument('--guide-point', nargs=3, type=float, action='append', default=[],
                             metavar=('X', 'Y', 'Z'), help='Add a guide point; four or more build the surface')
    guide_group.add_argument('--smoothing-factor', type=float, default=0.5, help='Region blend factor (0-1)')
    guide_group.add_argument('--blend-radius', type=float, default=DEFAULT_BLEND_RADIUS,
                             help='Distance to the guide samples inside which vertices are blended')
    guide_group.add_argument('--guide-density', type=int, default=0,
                             help='Extra samples per guide triangle edge (0 = hull vertices only)')

    # Visualization group
    viz_group = parser.add_argument_group('visualization', 'Control visualization options')
    viz_group.add_argument('--plot', action='store_true', help='Show the deformed mesh and lattice')
    viz_group.add_argument('--save-plot', type=str, default=None, help='Save visualization to specified file path')
    viz_group.add_argument('--show-rest', action='store_true', help='Overlay the undeformed mesh')
    viz_group.add_argument('--view-angle', type=float, nargs=2, help='View angle as elevation azimuth')

    # Advanced settings
    adv_group = parser.add_argument_group('advanced', 'Advanced settings')
    adv_group.add_argument('--debug', action='store_true', help='Enable debug output')

    return parser


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed command line arguments
    """
    return build_parser().parse_args(argv)


def _parse_index(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"control point index must be an integer, got '{value}'")


def apply_moves(session: EditingSession, args: argparse.Namespace) -> int:
    """Apply --move and --move-ijk edits in command-line order.

    Returns:
        Number of control points moved
    """
    logger = logging.getLogger(__name__)
    count = 0

    for option, values in args.moves:
        position = [float(value) for value in values[-3:]]
        if option == '--move':
            index = _parse_index(values[0])
            session.move_control_point(index, position)
            logger.info(f"Moved control point {index} to {position}")
        else:
            i, j, k = (_parse_index(value) for value in values[:3])
            session.move_control_point_ternary(i, j, k, position)
            logger.info(f"Moved control point ({i}, {j}, {k}) to {position}")
        count += 1

    return count


def main(argv: Optional[List[str]] = None) -> int:
    """Main function to run the sculpting pipeline.

    Returns:
        Exit code: 0 for success, non-zero for error
    """
    args = parse_arguments(argv)

    # Set up logging
    setup_logging(args.debug)
    logger = logging.getLogger(__name__)

    try:
        settings = EditorSettings(
            span_counts=tuple(args.dims),
            smoothing_factor=args.smoothing_factor,
            blend_radius=args.blend_radius,
            subdivision_level=args.subdivision,
            guide_sample_density=args.guide_density,
        )
    except ValueError as e:
        logger.error(f"Invalid settings: {e}")
        return 1

    session = EditingSession(settings)

    try:
        if args.mesh_file:
            shape = MeshFileShape(args.mesh_file, mesh_scale=args.mesh_scale)
        else:
            shape = shape_from_name(args.shape)
        session.load_shape(shape)
    except ImportError as e:
        logger.error(f"Missing dependency: {e}")
        return 1
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Error loading mesh: {e}")
        if args.debug:
            logger.debug(traceback.format_exc())
        return 1

    bbox_min, bbox_max = session.get_bounding_box()
    logger.info(f"Lattice has {session.get_total_ctrl_pt_count()} control points")
    logger.info(f"Bounding box min: {bbox_min}, max: {bbox_max}")

    try:
        moved = apply_moves(session, args)

        for point in args.guide_point:
            session.add_guide_point(point)
        if args.guide_point:
            if session.build_guide_surface() is None:
                logger.warning("Fewer than four guide points given; applying the full deformation")

        for point in args.eval:
            logger.info(f"eval {point} -> {session.eval_world(point)}")
    except FFDError as e:
        logger.error(f"Error editing lattice: {e}")
        if args.debug:
            logger.debug(traceback.format_exc())
        return 1
    except ValueError as e:
        logger.error(f"Invalid argument: {e}")
        return 1

    snapshot = session.snapshot()
    displacement = np.linalg.norm(snapshot.deformed_vertices - snapshot.rest_vertices, axis=1)
    logger.info(
        f"Moved {moved} control points; {int(np.count_nonzero(displacement > 0))} of "
        f"{len(displacement)} vertices displaced (max {displacement.max():.4f})"
    )

    if args.plot or args.save_plot:
        try:
            from ffdsculpt.visualization.lattice_viz import visualize_session
            visualize_session(
                snapshot,
                save_path=args.save_plot,
                show_rest=args.show_rest,
                view_angle=tuple(args.view_angle) if args.view_angle else None,
            )
        except Exception as e:
            logger.error(f"Error visualizing session: {e}")
            if args.debug:
                logger.debug(traceback.format_exc())
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
