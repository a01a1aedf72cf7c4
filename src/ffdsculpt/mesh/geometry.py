"""Indexed triangle mesh container and vertex welding helpers."""

import logging
from dataclasses import dataclass

import numpy as np

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class TriMesh:
    """Triangle mesh with shared vertices.

    Attributes:
        vertices: Vertex positions with shape (n, 3)
        faces: Triangle vertex indices with shape (m, 3)
    """

    vertices: np.ndarray
    faces: np.ndarray

    def __post_init__(self) -> None:
        vertices = np.array(self.vertices, dtype=float).reshape(-1, 3)
        faces = np.array(self.faces, dtype=int).reshape(-1, 3)

        if faces.size and (faces.min() < 0 or faces.max() >= len(vertices)):
            raise ValueError(f"face indices must lie in [0, {len(vertices) - 1}]")

        vertices.flags.writeable = False
        faces.flags.writeable = False
        object.__setattr__(self, 'vertices', vertices)
        object.__setattr__(self, 'faces', faces)

    @property
    def n_vertices(self) -> int:
        return len(self.vertices)

    @property
    def n_faces(self) -> int:
        return len(self.faces)

    def bounds(self):
        """Return (min_coords, max_coords) of the vertex buffer."""
        return np.min(self.vertices, axis=0), np.max(self.vertices, axis=0)

    def scaled(self, factor: float) -> 'TriMesh':
        if factor == 1.0:
            return self
        return TriMesh(self.vertices * factor, self.faces)


def drop_degenerate_faces(faces: np.ndarray) -> np.ndarray:
    """Remove triangles that reference the same vertex more than once."""
    faces = np.asarray(faces, dtype=int).reshape(-1, 3)
    keep = (faces[:, 0] != faces[:, 1]) & (faces[:, 1] != faces[:, 2]) & (faces[:, 0] != faces[:, 2])
    return faces[keep]


def merge_vertices(vertices: np.ndarray, faces: np.ndarray, decimals: int = 9) -> TriMesh:
    """Weld coincident vertices and drop the triangles that collapse.

    Vertices keep the order of their first appearance.

    Args:
        vertices: Vertex positions with shape (n, 3)
        faces: Triangle indices with shape (m, 3)
        decimals: Rounding applied before comparing positions

    Returns:
        Welded TriMesh
    """
    vertices = np.asarray(vertices, dtype=float).reshape(-1, 3)
    faces = np.asarray(faces, dtype=int).reshape(-1, 3)

    # Adding 0.0 folds -0.0 into 0.0 before comparison
    keys = np.round(vertices, decimals) + 0.0
    _, first, inverse = np.unique(keys, axis=0, return_index=True, return_inverse=True)
    inverse = np.asarray(inverse).reshape(-1)

    order = np.argsort(first)
    remap = np.empty_like(order)
    remap[order] = np.arange(len(order))

    welded_vertices = vertices[first[order]]
    welded_faces = drop_degenerate_faces(remap[inverse][faces])

    logger.debug(f"Welded {len(vertices)} vertices into {len(welded_vertices)}")
    return TriMesh(welded_vertices, welded_faces)
