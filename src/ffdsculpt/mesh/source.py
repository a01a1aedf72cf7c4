"""
Mesh source for editing sessions.

Resolves a base shape (one of the built-in primitives or a surface mesh file)
into a triangle mesh and refines it to the requested subdivision level. Only
the resulting vertex buffer is consumed by the deformation engine.
"""

import logging
import os
from dataclasses import dataclass
from typing import Dict, List, Union

import numpy as np

from ffdsculpt.mesh.geometry import TriMesh, merge_vertices
from ffdsculpt.mesh.primitives import (
    BoxShape,
    CylinderShape,
    IcosahedronShape,
    OctahedronShape,
    SphereShape,
    TorusShape,
    build_primitive,
)
from ffdsculpt.mesh.refine import refine_mesh

logger = logging.getLogger(__name__)

# Check for meshio availability
try:
    import meshio
    MESHIO_AVAILABLE = True
except ImportError:
    MESHIO_AVAILABLE = False
    logger.debug("meshio not available. Install with 'pip install meshio' to load mesh files.")


@dataclass(frozen=True)
class MeshFileShape:
    """Surface mesh read from disk (any format meshio understands)."""

    path: str
    mesh_scale: float = 1.0

    def __post_init__(self) -> None:
        if not self.mesh_scale > 0:
            raise ValueError(f"mesh_scale must be positive, got {self.mesh_scale}")


BaseShape = Union[BoxShape, TorusShape, SphereShape, IcosahedronShape, CylinderShape, OctahedronShape, MeshFileShape]

# Default shape catalog, in menu order
SHAPE_LIBRARY: Dict[str, BaseShape] = {
    'box': BoxShape(),
    'torus': TorusShape(),
    'sphere': SphereShape(),
    'icosahedron': IcosahedronShape(),
    'cylinder': CylinderShape(),
    'octahedron': OctahedronShape(),
}


def available_shapes() -> List[str]:
    return list(SHAPE_LIBRARY)


def shape_from_name(name: str) -> BaseShape:
    """Look up the default variant for a shape name.

    Raises:
        ValueError: If the name is not in the shape library
    """
    key = name.strip().lower()
    if key not in SHAPE_LIBRARY:
        raise ValueError(f"Unknown shape '{name}'. Available shapes: {', '.join(available_shapes())}")
    return SHAPE_LIBRARY[key]


def read_surface_mesh(shape: MeshFileShape) -> TriMesh:
    """Read the triangle and quad cells of a mesh file.

    Quads are split into two triangles; volume cells are ignored.

    Raises:
        ImportError: If meshio is not available
        FileNotFoundError: If the file does not exist
        ValueError: If the file contains no surface cells
    """
    if not MESHIO_AVAILABLE:
        raise ImportError("meshio is required to read mesh files. Install it with 'pip install meshio'")

    if not os.path.exists(shape.path):
        raise FileNotFoundError(f"Mesh file not found: {shape.path}")

    logger.info(f"Reading mesh file: {shape.path}")
    mesh = meshio.read(shape.path)

    triangles = []
    for block in mesh.cells:
        data = np.asarray(block.data, dtype=int)
        if block.type == 'triangle':
            triangles.append(data)
        elif block.type == 'quad':
            triangles.append(data[:, [0, 1, 2]])
            triangles.append(data[:, [0, 2, 3]])

    if not triangles:
        raise ValueError(f"No triangle or quad cells found in {shape.path}")

    points = np.asarray(mesh.points, dtype=float)
    if points.shape[1] == 2:
        points = np.column_stack([points, np.zeros(len(points))])

    surface = merge_vertices(points, np.vstack(triangles))
    logger.info(f"Read {surface.n_vertices} vertices and {surface.n_faces} triangles from {shape.path}")
    return surface.scaled(shape.mesh_scale)


def build_base_mesh(shape: BaseShape) -> TriMesh:
    """Tessellate any base shape variant."""
    if isinstance(shape, MeshFileShape):
        return read_surface_mesh(shape)
    return build_primitive(shape)


def load_mesh(shape: BaseShape, subdivision_level: int) -> TriMesh:
    """Build a base shape and refine it to ``subdivision_level``."""
    return refine_mesh(build_base_mesh(shape), subdivision_level)
