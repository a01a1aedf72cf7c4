"""
ffdsculpt - Interactive free-form deformation for surface meshes.

Refine a base solid into a smooth mesh, enclose it in a control lattice,
sculpt it by moving lattice control points, and blend the result toward a
guide surface.
"""

__version__ = "1.0.0"

from ffdsculpt.core import (
    ControlLattice,
    EditorSettings,
    LatticeFrame,
    blend,
    build_lattice,
    deform_all,
    evaluate,
)
from ffdsculpt.session import EditingSession, SessionSnapshot

__all__ = [
    "ControlLattice", "EditorSettings", "LatticeFrame",
    "blend", "build_lattice", "deform_all", "evaluate",
    "EditingSession", "SessionSnapshot",
]
