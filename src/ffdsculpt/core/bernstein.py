"""
Trivariate Bernstein evaluation for free-form deformation.

This module implements the Sederberg-Parry mapping from a rest-pose point to
its deformed position. A world point is first mapped into the lattice's
parametric cube, then blended over all control points with tensor-product
Bernstein weights::

    X'(s, t, u) = sum_ijk B(nx, i, s) * B(ny, j, t) * B(nz, k, u) * P(i, j, k)

Parametric coordinates are not clamped: points outside the lattice frame
extrapolate through the same polynomials.
"""

import logging
from typing import Sequence

import numpy as np
from scipy.special import comb

from ffdsculpt.core.lattice import ControlLattice, LatticeFrame

# Configure logging
logger = logging.getLogger(__name__)


def _as_point_array(points: np.ndarray) -> np.ndarray:
    points = np.asarray(points, dtype=float)
    if points.ndim == 1:
        points = points.reshape(1, -1)
    if points.ndim != 2 or points.shape[1] != 3:
        raise ValueError(f"points must have shape (3,) or (n, 3), got {points.shape}")
    return points


def bernstein_basis(degree: int, params: np.ndarray) -> np.ndarray:
    """Return all Bernstein basis values of ``degree`` at each parameter.

    Args:
        degree: Polynomial degree n (the span count of the axis)
        params: Parameter values with shape (m,)

    Returns:
        Array with shape (m, n + 1) holding C(n, i) * s^i * (1 - s)^(n - i)
    """
    if degree < 0:
        raise ValueError(f"degree must be non-negative, got {degree}")

    params = np.asarray(params, dtype=float).reshape(-1, 1)
    powers = np.arange(degree + 1)
    coeffs = comb(degree, powers)
    return coeffs * np.power(params, powers) * np.power(1.0 - params, degree - powers)


def parametric_coordinates(points: np.ndarray, frame: LatticeFrame) -> np.ndarray:
    """Map world points into the lattice's parametric cube.

    A zero-thickness axis has no extent to divide by; its coordinate is
    defined as 0 so that its basis collapses to a single weight of 1.

    Args:
        points: World coordinates with shape (n, 3)
        frame: Lattice frame defining the parametric space

    Returns:
        Array of (s, t, u) coordinates with shape (n, 3)
    """
    points = _as_point_array(points)
    extents = frame.extents
    flat = extents == 0.0
    safe_extents = np.where(flat, 1.0, extents)

    stu = (points - frame.min_corner) / safe_extents
    stu[:, flat] = 0.0
    return stu


def trivariate_weights(span_counts: Sequence[int], stu: np.ndarray) -> np.ndarray:
    """Tensor-product weights of every control point for each parametric point.

    Args:
        span_counts: Lattice span counts (nx, ny, nz)
        stu: Parametric coordinates with shape (3,) or (n, 3)

    Returns:
        Array with shape (n, nx+1, ny+1, nz+1); for a single point the leading
        axis is dropped
    """
    single = np.ndim(stu) == 1
    stu = _as_point_array(stu)
    nx, ny, nz = span_counts

    bx = bernstein_basis(nx, stu[:, 0])
    by = bernstein_basis(ny, stu[:, 1])
    bz = bernstein_basis(nz, stu[:, 2])

    weights = np.einsum('pi,pj,pk->pijk', bx, by, bz)
    return weights[0] if single else weights


def evaluate_parametric(stu: np.ndarray, lattice: ControlLattice) -> np.ndarray:
    """Blend the lattice control points at the given parametric coordinates.

    Args:
        stu: Parametric coordinates with shape (3,) or (n, 3)
        lattice: Control lattice supplying the control points

    Returns:
        Deformed world coordinates with the same shape as ``stu``
    """
    single = np.ndim(stu) == 1
    stu = _as_point_array(stu)
    nx, ny, nz = lattice.span_counts

    bx = bernstein_basis(nx, stu[:, 0])
    by = bernstein_basis(ny, stu[:, 1])
    bz = bernstein_basis(nz, stu[:, 2])

    # Contract one axis at a time to keep intermediates at O(n * lattice) size
    grid = lattice.as_grid()
    along_z = np.einsum('pk,ijkc->pijc', bz, grid)
    along_y = np.einsum('pj,pijc->pic', by, along_z)
    deformed = np.einsum('pi,pic->pc', bx, along_y)

    return deformed[0] if single else deformed


def evaluate(points: np.ndarray, lattice: ControlLattice) -> np.ndarray:
    """Compute the deformed position of rest-pose points.

    Args:
        points: World coordinates with shape (3,) or (n, 3)
        lattice: Control lattice in its current configuration

    Returns:
        Deformed world coordinates with the same shape as ``points``
    """
    single = np.ndim(points) == 1
    stu = parametric_coordinates(points, lattice.frame)

    outside = np.any((stu < 0.0) | (stu > 1.0), axis=1)
    if np.any(outside):
        logger.debug(f"{int(np.sum(outside))} points lie outside the lattice frame and will be extrapolated")

    deformed = evaluate_parametric(stu, lattice)
    return deformed[0] if single else deformed
