"""
Visualization utilities for editing sessions.

This module draws a :class:`~ffdsculpt.session.SessionSnapshot` with
matplotlib: the deformed mesh, the control lattice and, when present, the
guide surface samples.
"""

import logging
import os
from typing import Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np
from mpl_toolkits.mplot3d.art3d import Line3DCollection, Poly3DCollection

from ffdsculpt.session import SessionSnapshot

# Configure logging
logger = logging.getLogger(__name__)


def _set_equal_aspect(ax, points: np.ndarray) -> None:
    min_coords = np.min(points, axis=0)
    max_coords = np.max(points, axis=0)
    center = (min_coords + max_coords) / 2
    half = max(np.max(max_coords - min_coords) / 2, 1e-9) * 1.05
    ax.set_xlim(center[0] - half, center[0] + half)
    ax.set_ylim(center[1] - half, center[1] + half)
    ax.set_zlim(center[2] - half, center[2] + half)


def visualize_session(
    snapshot: SessionSnapshot,
    title: Optional[str] = None,
    save_path: Optional[str] = None,
    show_rest: bool = False,
    show_lattice: bool = True,
    show_guide: bool = True,
    surface_color: str = 'lightgray',
    surface_alpha: float = 0.8,
    edge_color: str = 'black',
    lattice_color: str = '#4d4dff',
    control_point_size: float = 30.0,
    lattice_width: float = 1.0,
    guide_color: str = 'cyan',
    view_angle: Optional[Tuple[float, float]] = None,
    figsize: Tuple[float, float] = (10, 8),
):
    """Plot a session snapshot.

    Args:
        snapshot: Snapshot returned by ``EditingSession.snapshot()``
        title: Optional custom title for the plot
        save_path: Optional path to save the figure instead of showing it
        show_rest: Also draw the undeformed mesh as a wireframe
        show_lattice: Draw control points and lattice edges
        show_guide: Draw guide surface samples, if any
        surface_color: Face color of the deformed mesh
        surface_alpha: Transparency of the deformed mesh (0.0-1.0)
        edge_color: Color of mesh edges
        lattice_color: Color of control points and lattice edges
        control_point_size: Marker size of control points
        lattice_width: Width of lattice edges
        guide_color: Color of guide samples
        view_angle: Optional (elevation, azimuth) for the camera
        figsize: Figure size in inches

    Returns:
        The matplotlib figure

    Raises:
        IOError: If the figure cannot be saved to save_path
    """
    fig = plt.figure(figsize=figsize)
    ax = fig.add_subplot(111, projection='3d')

    vertices = snapshot.deformed_vertices
    triangles = vertices[snapshot.faces]
    surface = Poly3DCollection(triangles, facecolors=surface_color, edgecolors=edge_color,
                               linewidths=0.2, alpha=surface_alpha)
    ax.add_collection3d(surface)
    extent_points = [vertices]

    if show_rest:
        rest_edges = snapshot.rest_vertices[snapshot.faces[:, [0, 1, 1, 2, 2, 0]].reshape(-1, 2)]
        ax.add_collection3d(Line3DCollection(rest_edges, colors='gray', linewidths=0.3, linestyles='dotted'))
        extent_points.append(snapshot.rest_vertices)

    if show_lattice:
        points = snapshot.control_points
        ax.scatter(points[:, 0], points[:, 1], points[:, 2], s=control_point_size, c=lattice_color, depthshade=False)
        segments = points[snapshot.lattice_edges]
        ax.add_collection3d(Line3DCollection(segments, colors=lattice_color, linewidths=lattice_width))
        extent_points.append(points)

    if show_guide and len(snapshot.guide_samples):
        samples = snapshot.guide_samples
        ax.scatter(samples[:, 0], samples[:, 1], samples[:, 2], s=10.0, c=guide_color, marker='^')
        extent_points.append(samples)

    _set_equal_aspect(ax, np.vstack(extent_points))
    ax.set_xlabel('X')
    ax.set_ylabel('Y')
    ax.set_zlabel('Z')

    if title:
        ax.set_title(title)
    else:
        nx, ny, nz = snapshot.span_counts
        ax.set_title(f"FFD lattice {nx}x{ny}x{nz} ({len(vertices)} vertices)")

    if view_angle is not None:
        ax.view_init(elev=view_angle[0], azim=view_angle[1])

    if save_path:
        output_dir = os.path.dirname(os.path.abspath(save_path))
        os.makedirs(output_dir, exist_ok=True)
        try:
            fig.savefig(save_path, dpi=150, bbox_inches='tight')
            logger.info(f"Saved visualization to {save_path}")
        except Exception as e:
            logger.error(f"Failed to save visualization: {e}")
            raise IOError(f"Failed to save visualization to {save_path}: {e}")
        finally:
            plt.close(fig)
    else:
        plt.show()

    return fig
