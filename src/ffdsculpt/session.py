"""
Editing session for interactive free-form deformation.

The :class:`EditingSession` is the sole owner of the control lattice, the rest
vertex buffer, the deformed vertex buffer and the guide surface. Every edit
recomputes the affected buffer completely before returning; presentation
code only ever receives read-only :class:`SessionSnapshot` values.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from ffdsculpt.core.bernstein import evaluate
from ffdsculpt.core.config import EditorSettings, validate_span_counts
from ffdsculpt.core.deformation import deform_all
from ffdsculpt.core.errors import FFDError, SessionStateError
from ffdsculpt.core.lattice import BoundsLike, ControlLattice, LatticeFrame, build_lattice
from ffdsculpt.core.region_blend import blend
from ffdsculpt.mesh.geometry import TriMesh
from ffdsculpt.mesh.guide import GuideSurface, GuideSurfaceBuilder
from ffdsculpt.mesh.source import BaseShape, load_mesh

# Configure logging
logger = logging.getLogger(__name__)


def _frozen(array: np.ndarray) -> np.ndarray:
    array = np.array(array, copy=True)
    array.flags.writeable = False
    return array


@dataclass(frozen=True, eq=False)
class SessionSnapshot:
    """Read-only view of a session after its last recompute."""

    control_points: np.ndarray
    span_counts: Tuple[int, int, int]
    bounding_box: Tuple[np.ndarray, np.ndarray]
    rest_vertices: np.ndarray
    deformed_vertices: np.ndarray
    faces: np.ndarray
    lattice_edges: np.ndarray
    guide_points: np.ndarray
    guide_triangles: np.ndarray
    guide_samples: np.ndarray
    region_blend_applied: bool


class EditingSession:
    """Lattice, rest buffer and guide surface of the active mesh."""

    def __init__(self, settings: Optional[EditorSettings] = None):
        self._settings = settings or EditorSettings()
        self._shape: Optional[BaseShape] = None
        self._mesh: Optional[TriMesh] = None
        self._rest_vertices: Optional[np.ndarray] = None
        self._deformed_vertices: Optional[np.ndarray] = None
        self._lattice: Optional[ControlLattice] = None
        self._guide_builder = GuideSurfaceBuilder()
        self._guide_surface: Optional[GuideSurface] = None
        self._region_blend_applied = False

    @property
    def settings(self) -> EditorSettings:
        return self._settings

    @property
    def shape(self) -> Optional[BaseShape]:
        return self._shape

    @property
    def mesh(self) -> Optional[TriMesh]:
        return self._mesh

    @property
    def lattice(self) -> Optional[ControlLattice]:
        return self._lattice

    @property
    def guide_surface(self) -> Optional[GuideSurface]:
        return self._guide_surface

    @property
    def rest_vertices(self) -> np.ndarray:
        self._require_mesh()
        return self._rest_vertices

    @property
    def deformed_vertices(self) -> np.ndarray:
        """Copy of the current deformed vertex buffer."""
        self._require_mesh()
        return self._deformed_vertices.copy()

    def _require_mesh(self) -> None:
        if self._mesh is None:
            raise SessionStateError("No mesh loaded; call load_shape() or set_mesh() first")

    def _require_lattice(self) -> ControlLattice:
        if self._lattice is None:
            raise SessionStateError("No control lattice built; load a mesh or call rebuild_lattice() first")
        return self._lattice

    # Mesh management

    def load_shape(self, shape: BaseShape, subdivision_level: Optional[int] = None) -> None:
        """Load a base shape, refine it and fit a fresh lattice around it.

        Args:
            shape: Base shape variant
            subdivision_level: Loop subdivision level (defaults to the current setting)
        """
        level = self._settings.subdivision_level if subdivision_level is None else subdivision_level
        settings = self._settings.with_changes(subdivision_level=level)

        logger.info(f"Loading {type(shape).__name__} at subdivision level {level}")
        mesh = load_mesh(shape, level)

        previous = (self._settings, self._shape)
        self._settings = settings
        self._shape = shape
        try:
            self.set_mesh(mesh)
        except ValueError:
            self._settings, self._shape = previous
            raise

    def set_mesh(self, mesh: TriMesh) -> None:
        """Capture ``mesh`` as the new rest pose and rebuild the lattice from its bounds."""
        if mesh.n_vertices == 0:
            raise ValueError("Cannot edit an empty mesh")

        previous = (self._mesh, self._rest_vertices)
        self._mesh = mesh
        self._rest_vertices = _frozen(mesh.vertices)
        try:
            self.rebuild(span_change_only=False)
        except FFDError:
            self._mesh, self._rest_vertices = previous
            raise

        logger.info(f"Captured rest pose with {mesh.n_vertices} vertices")

    def set_subdivision_level(self, level: int) -> None:
        """Reload the current shape at a new refinement level."""
        if self._shape is None:
            raise SessionStateError("No base shape loaded")
        self.load_shape(self._shape, level)

    def set_span_counts(self, span_counts: Sequence[int]) -> None:
        """Change span counts, keeping the recorded lattice extents."""
        spans = validate_span_counts(span_counts)
        previous = self._settings
        self._settings = self._settings.with_changes(span_counts=spans)
        try:
            self.rebuild(span_change_only=True)
        except FFDError:
            self._settings = previous
            raise

    def rebuild(self, span_change_only: bool = False) -> ControlLattice:
        """Rebuild the lattice and re-deform the mesh.

        Args:
            span_change_only: Reuse the recorded bounding box instead of
                recomputing it from the mesh

        Returns:
            The new lattice
        """
        self._require_mesh()

        if span_change_only and self._lattice is not None:
            frame = self._lattice.frame
        else:
            frame = LatticeFrame.from_points(self._rest_vertices)

        return self.rebuild_lattice(frame, self._settings.span_counts)

    # Engine facade

    def rebuild_lattice(self, box: BoundsLike, span_counts: Sequence[int]) -> ControlLattice:
        """Replace the lattice with a fresh one spanning ``box``.

        Prior control point edits are discarded. On failure the previous
        lattice is kept.
        """
        try:
            lattice = build_lattice(box, span_counts)
        except FFDError as e:
            logger.error(f"Error rebuilding lattice: {e}")
            raise

        self._lattice = lattice
        self._settings = self._settings.with_changes(span_counts=lattice.span_counts)
        if self._mesh is not None:
            self.deform()
        return lattice

    def get_position(self, index: int) -> np.ndarray:
        return self._require_lattice().get_position(index)

    def set_position(self, index: int, position: Sequence[float]) -> None:
        """Move one control point and recompute the deformed mesh."""
        self._require_lattice().set_position(index, position)
        if self._mesh is not None:
            self.deform()

    def get_position_ternary(self, i: int, j: int, k: int) -> np.ndarray:
        return self._require_lattice().get_position_ternary(i, j, k)

    def get_index(self, i: int, j: int, k: int) -> int:
        return self._require_lattice().index(i, j, k)

    def get_ctrl_pt_count(self, axis: int) -> int:
        return self._require_lattice().axis_count(axis)

    def get_total_ctrl_pt_count(self) -> int:
        return self._require_lattice().total_count()

    def get_bounding_box(self) -> Tuple[np.ndarray, np.ndarray]:
        return self._require_lattice().frame.as_tuple()

    def eval_world(self, point: Sequence[float]) -> np.ndarray:
        """Deformed position of a world point under the current lattice."""
        return evaluate(np.asarray(point, dtype=float), self._require_lattice())

    # Editing

    def move_control_point(self, index: int, position: Sequence[float]) -> None:
        self.set_position(index, position)

    def move_control_point_ternary(self, i: int, j: int, k: int, position: Sequence[float]) -> None:
        self.set_position(self.get_index(i, j, k), position)

    def reset_lattice(self) -> None:
        """Undo every control point edit since the last rebuild."""
        self._require_lattice().reset()
        if self._mesh is not None:
            self.deform()

    def deform(self) -> np.ndarray:
        """Recompute the full deformed buffer from the rest pose."""
        self._require_mesh()
        lattice = self._require_lattice()
        self._deformed_vertices = deform_all(self._rest_vertices, lattice, self._settings.chunk_size)
        self._region_blend_applied = False
        return self._deformed_vertices.copy()

    # Guide surface

    def add_guide_point(self, position: Sequence[float]) -> None:
        self._guide_builder.add_point(position)

    def clear_guide_points(self) -> None:
        self._guide_builder.clear()
        self._guide_surface = None
        self._drop_region_blend()

    def _drop_region_blend(self) -> None:
        # Without a guide surface the buffer falls back to the full deformation
        if self._region_blend_applied and self._mesh is not None and self._lattice is not None:
            self.deform()

    def guide_samples(self) -> np.ndarray:
        if self._guide_surface is None:
            return np.empty((0, 3))
        return self._guide_surface.samples(self._settings.guide_sample_density)

    def build_guide_surface(self) -> Optional[GuideSurface]:
        """Rebuild the guide surface from the placed points and re-blend.

        Returns:
            The new guide surface, or None while too few points are placed
        """
        self._guide_surface = self._guide_builder.build()
        if self._guide_surface is not None and self._mesh is not None:
            self.apply_region_blend()
        else:
            self._drop_region_blend()
        return self._guide_surface

    def set_smoothing_factor(self, factor: float) -> None:
        """Change the blend factor and re-blend if a guide surface exists."""
        self._settings = self._settings.with_changes(smoothing_factor=factor)
        if self._guide_surface is not None and self._mesh is not None:
            self.apply_region_blend()

    def set_blend_radius(self, radius: float) -> None:
        self._settings = self._settings.with_changes(blend_radius=radius)
        if self._guide_surface is not None and self._mesh is not None:
            self.apply_region_blend()

    def apply_region_blend(self) -> np.ndarray:
        """Blend only the vertices near the guide surface toward the FFD result.

        Without a guide surface the deformed buffer is left untouched.
        """
        self._require_mesh()
        lattice = self._require_lattice()

        if self._guide_surface is None:
            logger.info("No guide surface built; region blend skipped")
            return self._deformed_vertices.copy()

        self._deformed_vertices = blend(
            self._rest_vertices,
            self.guide_samples(),
            lattice,
            radius=self._settings.blend_radius,
            factor=self._settings.smoothing_factor,
            chunk_size=self._settings.chunk_size,
        )
        self._region_blend_applied = True
        return self._deformed_vertices.copy()

    def snapshot(self) -> SessionSnapshot:
        """Read-only copy of everything the presentation layer draws."""
        self._require_mesh()
        lattice = self._require_lattice()
        guide = self._guide_surface

        return SessionSnapshot(
            control_points=_frozen(lattice.positions),
            span_counts=lattice.span_counts,
            bounding_box=tuple(_frozen(corner) for corner in lattice.frame.as_tuple()),
            rest_vertices=self._rest_vertices,
            deformed_vertices=_frozen(self._deformed_vertices),
            faces=self._mesh.faces,
            lattice_edges=_frozen(lattice.lattice_edges()),
            guide_points=_frozen(guide.points if guide is not None else np.empty((0, 3))),
            guide_triangles=_frozen(guide.triangles if guide is not None else np.empty((0, 3), dtype=int)),
            guide_samples=_frozen(self.guide_samples()),
            region_blend_applied=self._region_blend_applied,
        )
