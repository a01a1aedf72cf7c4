"""Core functionality for ffdsculpt."""

from ffdsculpt.core.bernstein import (
    bernstein_basis,
    evaluate,
    evaluate_parametric,
    parametric_coordinates,
    trivariate_weights,
)
from ffdsculpt.core.config import EditorSettings
from ffdsculpt.core.deformation import deform_all
from ffdsculpt.core.errors import (
    DimensionMismatchError,
    FFDError,
    GuideSurfaceError,
    InvalidBoundsError,
    OutOfRangeError,
    SessionStateError,
)
from ffdsculpt.core.lattice import ControlLattice, LatticeFrame, build_lattice
from ffdsculpt.core.region_blend import blend, classify_region

__all__ = [
    "bernstein_basis", "evaluate", "evaluate_parametric", "parametric_coordinates",
    "trivariate_weights", "EditorSettings", "deform_all",
    "DimensionMismatchError", "FFDError", "GuideSurfaceError", "InvalidBoundsError",
    "OutOfRangeError", "SessionStateError",
    "ControlLattice", "LatticeFrame", "build_lattice",
    "blend", "classify_region",
]
