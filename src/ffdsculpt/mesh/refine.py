"""
Smooth refinement of base meshes.

Loop subdivision is delegated to PyVista; this module only converts between
:class:`TriMesh` and ``pyvista.PolyData`` and validates the refinement level.
"""

import logging
import time

import numpy as np

from ffdsculpt.core.config import MAX_SUBDIVISION_LEVEL, MIN_SUBDIVISION_LEVEL
from ffdsculpt.mesh.geometry import TriMesh

# Configure logging
logger = logging.getLogger(__name__)

# Try importing PyVista for subdivision
try:
    import pyvista as pv
    PYVISTA_AVAILABLE = True
except ImportError:
    PYVISTA_AVAILABLE = False
    logger.warning("PyVista not available. Install with 'pip install pyvista' to refine meshes.")


def to_polydata(mesh: TriMesh) -> "pv.PolyData":
    """Convert a TriMesh into a triangulated PyVista surface."""
    if not PYVISTA_AVAILABLE:
        raise ImportError("PyVista is required for mesh refinement. Install it with 'pip install pyvista'")

    cells = np.hstack([np.full((mesh.n_faces, 1), 3, dtype=int), mesh.faces]).ravel()
    return pv.PolyData(np.array(mesh.vertices), cells)


def from_polydata(polydata: "pv.PolyData") -> TriMesh:
    """Convert a triangulated PyVista surface back into a TriMesh."""
    surface = polydata.triangulate()
    faces = np.asarray(surface.faces).reshape(-1, 4)[:, 1:]
    return TriMesh(np.asarray(surface.points, dtype=float), faces)


def refine_mesh(mesh: TriMesh, level: int) -> TriMesh:
    """Apply ``level`` iterations of Loop subdivision.

    Args:
        mesh: Base triangle mesh
        level: Number of subdivision iterations; 0 returns the mesh unchanged

    Returns:
        Refined TriMesh

    Raises:
        ValueError: If level lies outside the supported range
        ImportError: If PyVista is needed but not installed
    """
    if not MIN_SUBDIVISION_LEVEL <= level <= MAX_SUBDIVISION_LEVEL:
        raise ValueError(
            f"subdivision level must be between {MIN_SUBDIVISION_LEVEL} and {MAX_SUBDIVISION_LEVEL}, got {level}"
        )

    if level == 0:
        return mesh

    start_time = time.time()
    refined = from_polydata(to_polydata(mesh).subdivide(level, subfilter='loop'))

    logger.info(
        f"Refined mesh from {mesh.n_vertices} to {refined.n_vertices} vertices "
        f"(level {level}) in {time.time() - start_time:.2f} seconds"
    )
    return refined
