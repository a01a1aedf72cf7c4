"""
ffdsculpt Mesh Module

This module provides the mesh side of an editing session:
- Base shape variants and their tessellation
- Loop subdivision refinement through PyVista
- Mesh file loading through meshio
- Guide surface authoring from placed points
"""

from ffdsculpt.mesh.geometry import TriMesh, merge_vertices
from ffdsculpt.mesh.guide import GuideSurface, GuideSurfaceBuilder
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
from ffdsculpt.mesh.source import (
    SHAPE_LIBRARY,
    MeshFileShape,
    available_shapes,
    build_base_mesh,
    load_mesh,
    shape_from_name,
)

__all__ = [
    "TriMesh", "merge_vertices",
    "GuideSurface", "GuideSurfaceBuilder",
    "BoxShape", "CylinderShape", "IcosahedronShape", "OctahedronShape", "SphereShape", "TorusShape",
    "build_primitive", "refine_mesh",
    "SHAPE_LIBRARY", "MeshFileShape", "available_shapes", "build_base_mesh", "load_mesh", "shape_from_name",
]
