"""
Base shapes that seed an editing session.

Every supported solid is its own frozen dataclass with typed parameters; the
set of variants is closed and :func:`build_primitive` dispatches over it
exhaustively. The defaults reproduce the editor's stock shape library.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Tuple, Union

import numpy as np

from ffdsculpt.mesh.geometry import TriMesh, merge_vertices

# Configure logging
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoxShape:
    width: float = 200.0
    height: float = 200.0
    depth: float = 200.0
    width_segments: int = 2
    height_segments: int = 2
    depth_segments: int = 2
    mesh_scale: float = 1.0


@dataclass(frozen=True)
class TorusShape:
    radius: float = 100.0
    tube: float = 60.0
    radial_segments: int = 4
    tubular_segments: int = 8
    arc: float = 2.0 * math.pi
    mesh_scale: float = 1.0


@dataclass(frozen=True)
class SphereShape:
    radius: float = 100.0
    width_segments: int = 3
    height_segments: int = 3
    mesh_scale: float = 1.5


@dataclass(frozen=True)
class IcosahedronShape:
    radius: float = 100.0
    detail: int = 1
    mesh_scale: float = 1.5


@dataclass(frozen=True)
class CylinderShape:
    radius_top: float = 25.0
    radius_bottom: float = 75.0
    height: float = 200.0
    radial_segments: int = 8
    height_segments: int = 3
    mesh_scale: float = 1.5


@dataclass(frozen=True)
class OctahedronShape:
    radius: float = 200.0
    detail: int = 0
    mesh_scale: float = 1.0


PrimitiveShape = Union[BoxShape, TorusShape, SphereShape, IcosahedronShape, CylinderShape, OctahedronShape]


def _require_positive(name: str, value: float) -> None:
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")


def _grid_faces(n_u: int, n_v: int, offset: int = 0) -> np.ndarray:
    """Two triangles per cell of a (n_v+1) x (n_u+1) row-major vertex grid."""
    faces = []
    for b in range(n_v):
        for a in range(n_u):
            p00 = offset + b * (n_u + 1) + a
            p10 = p00 + 1
            p01 = p00 + n_u + 1
            p11 = p01 + 1
            faces.append((p00, p10, p11))
            faces.append((p00, p11, p01))
    return np.array(faces, dtype=int).reshape(-1, 3)


def _plane(corner, u_vec, v_vec, n_u: int, n_v: int) -> np.ndarray:
    a = np.arange(n_u + 1) / n_u
    b = np.arange(n_v + 1) / n_v
    bb, aa = np.meshgrid(b, a, indexing='ij')
    return (np.asarray(corner, dtype=float)
            + aa.reshape(-1, 1) * np.asarray(u_vec, dtype=float)
            + bb.reshape(-1, 1) * np.asarray(v_vec, dtype=float))


def build_box(shape: BoxShape) -> TriMesh:
    w, h, d = shape.width, shape.height, shape.depth
    for name, value in (('width', w), ('height', h), ('depth', d)):
        _require_positive(name, value)
    sw, sh, sd = shape.width_segments, shape.height_segments, shape.depth_segments
    for name, value in (('width_segments', sw), ('height_segments', sh), ('depth_segments', sd)):
        _require_positive(name, value)

    hw, hh, hd = w / 2.0, h / 2.0, d / 2.0
    # (corner, u, v, segments along u, segments along v), u x v points outward
    sides = [
        ((hw, -hh, hd), (0, 0, -d), (0, h, 0), sd, sh),
        ((-hw, -hh, -hd), (0, 0, d), (0, h, 0), sd, sh),
        ((-hw, hh, hd), (w, 0, 0), (0, 0, -d), sw, sd),
        ((-hw, -hh, -hd), (w, 0, 0), (0, 0, d), sw, sd),
        ((-hw, -hh, hd), (w, 0, 0), (0, h, 0), sw, sh),
        ((hw, -hh, -hd), (-w, 0, 0), (0, h, 0), sw, sh),
    ]

    vertices: List[np.ndarray] = []
    faces: List[np.ndarray] = []
    offset = 0
    for corner, u_vec, v_vec, n_u, n_v in sides:
        points = _plane(corner, u_vec, v_vec, n_u, n_v)
        vertices.append(points)
        faces.append(_grid_faces(n_u, n_v, offset))
        offset += len(points)

    return merge_vertices(np.vstack(vertices), np.vstack(faces))


def build_sphere(shape: SphereShape) -> TriMesh:
    _require_positive('radius', shape.radius)
    ws = max(3, int(shape.width_segments))
    hs = max(2, int(shape.height_segments))
    r = shape.radius

    vertices = []
    for iy in range(hs + 1):
        v = iy / hs
        for ix in range(ws + 1):
            u = ix / ws
            vertices.append((
                -r * math.cos(u * 2.0 * math.pi) * math.sin(v * math.pi),
                r * math.cos(v * math.pi),
                r * math.sin(u * 2.0 * math.pi) * math.sin(v * math.pi),
            ))

    faces = []
    for iy in range(hs):
        for ix in range(ws):
            a = iy * (ws + 1) + ix + 1
            b = iy * (ws + 1) + ix
            c = (iy + 1) * (ws + 1) + ix
            d = (iy + 1) * (ws + 1) + ix + 1
            if iy != 0:
                faces.append((a, b, d))
            if iy != hs - 1:
                faces.append((b, c, d))

    return merge_vertices(np.array(vertices), np.array(faces))


def build_torus(shape: TorusShape) -> TriMesh:
    _require_positive('radius', shape.radius)
    _require_positive('tube', shape.tube)
    _require_positive('arc', shape.arc)
    radial = max(3, int(shape.radial_segments))
    tubular = max(3, int(shape.tubular_segments))

    vertices = []
    for j in range(radial + 1):
        for i in range(tubular + 1):
            u = i / tubular * shape.arc
            v = j / radial * 2.0 * math.pi
            ring = shape.radius + shape.tube * math.cos(v)
            vertices.append((ring * math.cos(u), ring * math.sin(u), shape.tube * math.sin(v)))

    faces = []
    for j in range(1, radial + 1):
        for i in range(1, tubular + 1):
            a = (tubular + 1) * j + i - 1
            b = (tubular + 1) * (j - 1) + i - 1
            c = (tubular + 1) * (j - 1) + i
            d = (tubular + 1) * j + i
            faces.append((a, b, d))
            faces.append((b, c, d))

    return merge_vertices(np.array(vertices), np.array(faces))


def build_cylinder(shape: CylinderShape) -> TriMesh:
    if shape.radius_top < 0 or shape.radius_bottom < 0:
        raise ValueError("cylinder radii must be non-negative")
    if shape.radius_top == 0 and shape.radius_bottom == 0:
        raise ValueError("at least one cylinder radius must be positive")
    _require_positive('height', shape.height)
    radial = max(3, int(shape.radial_segments))
    height_segments = max(1, int(shape.height_segments))
    half_height = shape.height / 2.0

    vertices = []
    for y in range(height_segments + 1):
        v = y / height_segments
        radius = v * (shape.radius_bottom - shape.radius_top) + shape.radius_top
        for x in range(radial + 1):
            theta = x / radial * 2.0 * math.pi
            vertices.append((radius * math.sin(theta), -v * shape.height + half_height, radius * math.cos(theta)))

    def ring(y: int, x: int) -> int:
        return y * (radial + 1) + x

    faces = []
    for y in range(height_segments):
        for x in range(radial):
            a, b = ring(y, x), ring(y + 1, x)
            c, d = ring(y + 1, x + 1), ring(y, x + 1)
            faces.append((a, b, d))
            faces.append((b, c, d))

    top_center = len(vertices)
    vertices.append((0.0, half_height, 0.0))
    bottom_center = len(vertices)
    vertices.append((0.0, -half_height, 0.0))
    for x in range(radial):
        faces.append((top_center, ring(0, x), ring(0, x + 1)))
        faces.append((bottom_center, ring(height_segments, x + 1), ring(height_segments, x)))

    return merge_vertices(np.array(vertices), np.array(faces))


_ICOSAHEDRON_T = (1.0 + math.sqrt(5.0)) / 2.0

_ICOSAHEDRON_VERTICES = np.array([
    (-1, _ICOSAHEDRON_T, 0), (1, _ICOSAHEDRON_T, 0), (-1, -_ICOSAHEDRON_T, 0), (1, -_ICOSAHEDRON_T, 0),
    (0, -1, _ICOSAHEDRON_T), (0, 1, _ICOSAHEDRON_T), (0, -1, -_ICOSAHEDRON_T), (0, 1, -_ICOSAHEDRON_T),
    (_ICOSAHEDRON_T, 0, -1), (_ICOSAHEDRON_T, 0, 1), (-_ICOSAHEDRON_T, 0, -1), (-_ICOSAHEDRON_T, 0, 1),
], dtype=float)

_ICOSAHEDRON_FACES = np.array([
    (0, 11, 5), (0, 5, 1), (0, 1, 7), (0, 7, 10), (0, 10, 11),
    (1, 5, 9), (5, 11, 4), (11, 10, 2), (10, 7, 6), (7, 1, 8),
    (3, 9, 4), (3, 4, 2), (3, 2, 6), (3, 6, 8), (3, 8, 9),
    (4, 9, 5), (2, 4, 11), (6, 2, 10), (8, 6, 7), (9, 8, 1),
], dtype=int)

_OCTAHEDRON_VERTICES = np.array([
    (1, 0, 0), (-1, 0, 0), (0, 1, 0), (0, -1, 0), (0, 0, 1), (0, 0, -1),
], dtype=float)

_OCTAHEDRON_FACES = np.array([
    (0, 2, 4), (0, 4, 3), (0, 3, 5), (0, 5, 2), (1, 2, 5), (1, 5, 3), (1, 3, 4), (1, 4, 2),
], dtype=int)


def _split_triangle(a: np.ndarray, b: np.ndarray, c: np.ndarray, n: int) -> Tuple[np.ndarray, np.ndarray]:
    """Split one triangle into n*n smaller ones on a barycentric grid."""
    index = {}
    points = []
    for i in range(n + 1):
        for j in range(n + 1 - i):
            index[(i, j)] = len(points)
            points.append(a + (b - a) * (j / n) + (c - a) * (i / n))

    faces = []
    for i in range(n):
        for j in range(n - i):
            faces.append((index[(i, j)], index[(i, j + 1)], index[(i + 1, j)]))
            if j < n - 1 - i:
                faces.append((index[(i, j + 1)], index[(i + 1, j + 1)], index[(i + 1, j)]))

    return np.array(points), np.array(faces, dtype=int)


def _polyhedron(base_vertices: np.ndarray, base_faces: np.ndarray, radius: float, detail: int) -> TriMesh:
    _require_positive('radius', radius)
    if detail < 0:
        raise ValueError(f"detail must be non-negative, got {detail}")

    vertices, faces = [], []
    offset = 0
    for face in base_faces:
        a, b, c = base_vertices[face]
        points, tris = _split_triangle(a, b, c, detail + 1)
        vertices.append(points)
        faces.append(tris + offset)
        offset += len(points)

    vertices = np.vstack(vertices)
    vertices = vertices / np.linalg.norm(vertices, axis=1, keepdims=True) * radius
    return merge_vertices(vertices, np.vstack(faces))


def build_icosahedron(shape: IcosahedronShape) -> TriMesh:
    return _polyhedron(_ICOSAHEDRON_VERTICES, _ICOSAHEDRON_FACES, shape.radius, int(shape.detail))


def build_octahedron(shape: OctahedronShape) -> TriMesh:
    return _polyhedron(_OCTAHEDRON_VERTICES, _OCTAHEDRON_FACES, shape.radius, int(shape.detail))


def build_primitive(shape: PrimitiveShape) -> TriMesh:
    """Tessellate a primitive shape, applying its mesh scale.

    Args:
        shape: One of the primitive shape variants

    Returns:
        Welded TriMesh centred on the origin

    Raises:
        TypeError: If shape is not a primitive shape variant
    """
    if isinstance(shape, BoxShape):
        mesh = build_box(shape)
    elif isinstance(shape, TorusShape):
        mesh = build_torus(shape)
    elif isinstance(shape, SphereShape):
        mesh = build_sphere(shape)
    elif isinstance(shape, IcosahedronShape):
        mesh = build_icosahedron(shape)
    elif isinstance(shape, CylinderShape):
        mesh = build_cylinder(shape)
    elif isinstance(shape, OctahedronShape):
        mesh = build_octahedron(shape)
    else:
        raise TypeError(f"Unsupported shape type: {type(shape).__name__}")

    _require_positive('mesh_scale', shape.mesh_scale)
    logger.debug(f"Built {type(shape).__name__} with {mesh.n_vertices} vertices and {mesh.n_faces} faces")
    return mesh.scaled(shape.mesh_scale)
