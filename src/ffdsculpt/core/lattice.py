"""
Control lattice storage and construction.

This module provides the axis-aligned :class:`LatticeFrame`, the
:class:`ControlLattice` store with its index arithmetic, and
:func:`build_lattice`, which fills a store with a regular grid of control
points spanning a bounding box.

Control points are stored in linear-index order, where the x index varies
fastest::

    index(i, j, k) = i + j * (nx + 1) + k * (nx + 1) * (ny + 1)
"""

import logging
import operator
from dataclasses import dataclass
from typing import Sequence, Tuple, Union

import numpy as np

from ffdsculpt.core.config import validate_span_counts
from ffdsculpt.core.errors import InvalidBoundsError, OutOfRangeError

# Configure logging
logger = logging.getLogger(__name__)

AXIS_NAMES = ('x', 'y', 'z')

BoundsLike = Union['LatticeFrame', Tuple[Sequence[float], Sequence[float]]]


def _readonly(array: np.ndarray) -> np.ndarray:
    view = array.view()
    view.flags.writeable = False
    return view


def _as_index(value) -> int:
    try:
        return operator.index(value)
    except TypeError:
        raise OutOfRangeError(f"control point indices must be integers, got {value!r}") from None


@dataclass(frozen=True, eq=False)
class LatticeFrame:
    """Axis-aligned bounding box defining the lattice coordinate system.

    Attributes:
        min_corner: Minimum coordinates (x, y, z)
        max_corner: Maximum coordinates (x, y, z)
    """

    min_corner: np.ndarray
    max_corner: np.ndarray

    def __post_init__(self) -> None:
        min_corner = np.array(self.min_corner, dtype=float).reshape(-1)
        max_corner = np.array(self.max_corner, dtype=float).reshape(-1)

        if min_corner.shape != (3,) or max_corner.shape != (3,):
            raise InvalidBoundsError(
                f"Bounding box corners must have 3 components, got {min_corner.shape} and {max_corner.shape}"
            )

        if not (np.all(np.isfinite(min_corner)) and np.all(np.isfinite(max_corner))):
            raise InvalidBoundsError(f"Bounding box must be finite, got min={min_corner}, max={max_corner}")

        for axis in range(3):
            if min_corner[axis] > max_corner[axis]:
                raise InvalidBoundsError(
                    f"Inverted {AXIS_NAMES[axis]} axis: min {min_corner[axis]} > max {max_corner[axis]}"
                )

        if np.all(min_corner == max_corner):
            raise InvalidBoundsError(f"Bounding box collapses to a single point {min_corner}")

        object.__setattr__(self, 'min_corner', _readonly(min_corner))
        object.__setattr__(self, 'max_corner', _readonly(max_corner))

    @classmethod
    def from_points(cls, points: np.ndarray, margin: float = 0.0) -> 'LatticeFrame':
        """Compute the bounding box of a point cloud.

        Args:
            points: Array of point coordinates with shape (n, 3)
            margin: Padding added on every side (must be non-negative)

        Returns:
            LatticeFrame enclosing all points

        Raises:
            InvalidBoundsError: If points is empty or has the wrong shape
            ValueError: If margin is negative
        """
        points = np.asarray(points, dtype=float)
        if points.size == 0:
            raise InvalidBoundsError("Cannot compute a bounding box from an empty point set")
        if points.ndim != 2 or points.shape[1] != 3:
            raise InvalidBoundsError(f"points must have shape (n, 3), got {points.shape}")
        if margin < 0:
            raise ValueError(f"margin must be non-negative, got {margin}")

        return cls(np.min(points, axis=0) - margin, np.max(points, axis=0) + margin)

    @property
    def extents(self) -> np.ndarray:
        """Edge lengths of the box along x, y and z."""
        return self.max_corner - self.min_corner

    @property
    def flat_axes(self) -> Tuple[bool, bool, bool]:
        """Per-axis flags marking zero-thickness axes."""
        return tuple(bool(flag) for flag in self.extents == 0.0)

    def as_tuple(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return the frame as a (min_coords, max_coords) tuple."""
        return self.min_corner.copy(), self.max_corner.copy()


def as_frame(bounds: BoundsLike) -> LatticeFrame:
    """Coerce a (min, max) pair or a frame into a :class:`LatticeFrame`."""
    if isinstance(bounds, LatticeFrame):
        return bounds
    try:
        min_corner, max_corner = bounds
    except (TypeError, ValueError):
        raise InvalidBoundsError(f"bounds must be a (min, max) pair, got {bounds!r}")
    return LatticeFrame(min_corner, max_corner)


class ControlLattice:
    """Control points of an FFD lattice plus their index arithmetic.

    The lattice knows nothing about the mesh it deforms. Its topology (span
    counts and frame) is fixed at construction; only positions change until
    the next rebuild replaces the whole object.
    """

    def __init__(self, frame: LatticeFrame, span_counts: Sequence[int], positions: np.ndarray):
        self._frame = frame
        self._span_counts = validate_span_counts(span_counts)

        positions = np.array(positions, dtype=float)
        expected = (self.total_count(), 3)
        if positions.shape != expected:
            raise ValueError(f"positions must have shape {expected}, got {positions.shape}")

        self._built_positions = _readonly(positions.copy())
        self._positions = positions

    def __repr__(self) -> str:
        return f"ControlLattice(span_counts={self._span_counts}, total={self.total_count()})"

    @property
    def frame(self) -> LatticeFrame:
        return self._frame

    @property
    def span_counts(self) -> Tuple[int, int, int]:
        return self._span_counts

    @property
    def positions(self) -> np.ndarray:
        """Read-only view of all control point positions in linear-index order."""
        return _readonly(self._positions)

    def axis_count(self, axis: int) -> int:
        """Number of control points along ``axis`` (span count + 1)."""
        if axis not in (0, 1, 2):
            raise OutOfRangeError(f"axis must be 0, 1 or 2, got {axis}")
        return self._span_counts[axis] + 1

    def total_count(self) -> int:
        nx, ny, nz = self._span_counts
        return (nx + 1) * (ny + 1) * (nz + 1)

    def _check_ternary(self, i: int, j: int, k: int) -> Tuple[int, int, int]:
        checked = []
        for axis, value in enumerate((i, j, k)):
            value = _as_index(value)
            if value < 0 or value > self._span_counts[axis]:
                raise OutOfRangeError(
                    f"{AXIS_NAMES[axis]} index {value} outside [0, {self._span_counts[axis]}]"
                )
            checked.append(value)
        return tuple(checked)

    def _check_linear(self, index: int) -> int:
        index = _as_index(index)
        if index < 0 or index >= self.total_count():
            raise OutOfRangeError(f"control point index {index} outside [0, {self.total_count() - 1}]")
        return index

    def index(self, i: int, j: int, k: int) -> int:
        """Linear index of the control point at ternary coordinates (i, j, k)."""
        i, j, k = self._check_ternary(i, j, k)
        nx, ny, _ = self._span_counts
        return int(i + j * (nx + 1) + k * (nx + 1) * (ny + 1))

    def ternary(self, index: int) -> Tuple[int, int, int]:
        """Inverse of :meth:`index`."""
        index = self._check_linear(index)
        nx, ny, _ = self._span_counts
        k, remainder = divmod(index, (nx + 1) * (ny + 1))
        j, i = divmod(remainder, nx + 1)
        return i, j, k

    def get_position(self, index: int) -> np.ndarray:
        index = self._check_linear(index)
        return self._positions[index].copy()

    def set_position(self, index: int, position: Sequence[float]) -> None:
        index = self._check_linear(index)
        position = np.asarray(position, dtype=float)
        if position.shape != (3,):
            raise ValueError(f"position must have 3 components, got shape {position.shape}")
        self._positions[index] = position

    def get_position_ternary(self, i: int, j: int, k: int) -> np.ndarray:
        return self.get_position(self.index(i, j, k))

    def set_position_ternary(self, i: int, j: int, k: int, position: Sequence[float]) -> None:
        self.set_position(self.index(i, j, k), position)

    def as_grid(self) -> np.ndarray:
        """Control points as an array indexed ``[i, j, k]`` with shape (nx+1, ny+1, nz+1, 3)."""
        nx, ny, nz = self._span_counts
        return self._positions.reshape(nz + 1, ny + 1, nx + 1, 3).transpose(2, 1, 0, 3)

    def reset(self) -> None:
        """Discard edits and restore the as-built grid."""
        self._positions[:] = self._built_positions

    def is_pristine(self) -> bool:
        """True when no control point has moved since the lattice was built."""
        return bool(np.array_equal(self._positions, self._built_positions))

    def displacements(self) -> np.ndarray:
        """Per control point offset from the as-built grid."""
        return self._positions - self._built_positions

    def lattice_edges(self) -> np.ndarray:
        """Index pairs of all lattice edges, x edges first, then y, then z.

        Returns:
            Integer array with shape (n_edges, 2)
        """
        nx, ny, nz = self._span_counts
        edges = []
        for i in range(nx):
            for j in range(ny + 1):
                for k in range(nz + 1):
                    edges.append((self.index(i, j, k), self.index(i + 1, j, k)))
        for i in range(nx + 1):
            for j in range(ny):
                for k in range(nz + 1):
                    edges.append((self.index(i, j, k), self.index(i, j + 1, k)))
        for i in range(nx + 1):
            for j in range(ny + 1):
                for k in range(nz):
                    edges.append((self.index(i, j, k), self.index(i, j, k + 1)))
        return np.array(edges, dtype=int).reshape(-1, 2)


def build_lattice(bounds: BoundsLike, span_counts: Sequence[int]) -> ControlLattice:
    """Create a regular control lattice spanning a bounding box.

    Args:
        bounds: LatticeFrame or (min_coords, max_coords) pair
        span_counts: Number of lattice cells along each axis (nx, ny, nz)

    Returns:
        A new ControlLattice with (nx+1)*(ny+1)*(nz+1) control points

    Raises:
        DimensionMismatchError: If span_counts is malformed or contains values < 1
        InvalidBoundsError: If the box is inverted, non-finite or collapsed to a point
    """
    spans = validate_span_counts(span_counts)
    frame = as_frame(bounds)
    nx, ny, nz = spans

    logger.info(f"Creating control lattice with span counts {spans}")
    logger.debug(f"Bounding box: min={frame.min_corner}, max={frame.max_corner}")

    for axis, flat in enumerate(frame.flat_axes):
        if flat:
            logger.warning(f"Zero-thickness {AXIS_NAMES[axis]} axis, parametric coordinate fixed at 0")

    extents = frame.extents
    xs = frame.min_corner[0] + extents[0] * (np.arange(nx + 1) / nx)
    ys = frame.min_corner[1] + extents[1] * (np.arange(ny + 1) / ny)
    zs = frame.min_corner[2] + extents[2] * (np.arange(nz + 1) / nz)

    # Meshgrid over (z, y, x) so that the C-order ravel makes x vary fastest
    z, y, x = np.meshgrid(zs, ys, xs, indexing='ij')
    positions = np.column_stack([x.ravel(), y.ravel(), z.ravel()])

    lattice = ControlLattice(frame, spans, positions)
    logger.info(f"Created control lattice with {lattice.total_count()} control points")
    return lattice
