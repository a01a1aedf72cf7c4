"""
Region-restricted blending toward the FFD result.

Only rest vertices close to the guide surface move: each one is compared
with the guide samples in input order and the first sample closer than the
blend radius claims it. Claimed vertices are interpolated between their rest
position and their fully deformed position by the blend factor; every other
vertex stays at rest.
"""

import logging
import time

import numpy as np
from scipy.spatial.distance import cdist

from ffdsculpt.core.bernstein import evaluate
from ffdsculpt.core.config import DEFAULT_BLEND_RADIUS, validate_blend_factor
from ffdsculpt.core.deformation import DEFAULT_CHUNK_SIZE, chunk_ranges
from ffdsculpt.core.lattice import ControlLattice

# Configure logging
logger = logging.getLogger(__name__)

NO_MATCH = -1


def classify_region(
    rest_vertices: np.ndarray,
    guide_samples: np.ndarray,
    radius: float = DEFAULT_BLEND_RADIUS,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> np.ndarray:
    """Find, for each vertex, the first guide sample strictly within ``radius``.

    Args:
        rest_vertices: Rest-pose positions with shape (n, 3)
        guide_samples: Guide surface samples with shape (m, 3), scanned in order
        radius: Proximity radius (must be positive)
        chunk_size: Number of vertices compared per batch

    Returns:
        Integer array with shape (n,) holding the matching sample index, or -1
    """
    rest_vertices = np.asarray(rest_vertices, dtype=float)
    guide_samples = np.asarray(guide_samples, dtype=float).reshape(-1, 3)
    if not radius > 0:
        raise ValueError(f"radius must be positive, got {radius}")

    matches = np.full(len(rest_vertices), NO_MATCH, dtype=int)
    if len(guide_samples) == 0 or len(rest_vertices) == 0:
        return matches

    # Bound the distance matrix to chunk_size * m entries
    rows = max(1, chunk_size // max(1, len(guide_samples)))
    for start, stop in chunk_ranges(len(rest_vertices), rows):
        within = cdist(rest_vertices[start:stop], guide_samples) < radius
        hit = np.any(within, axis=1)
        first = np.argmax(within, axis=1)
        matches[start:stop] = np.where(hit, first, NO_MATCH)

    return matches


def blend(
    rest_vertices: np.ndarray,
    guide_samples: np.ndarray,
    lattice: ControlLattice,
    radius: float = DEFAULT_BLEND_RADIUS,
    factor: float = 0.5,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> np.ndarray:
    """Blend vertices near the guide surface toward their deformed positions.

    Args:
        rest_vertices: Rest-pose positions with shape (n, 3); never modified
        guide_samples: Guide surface samples with shape (m, 3)
        lattice: Control lattice in its current configuration
        radius: Proximity radius classifying a vertex as inside the region
        factor: Blend factor in [0, 1]; 0 keeps rest, 1 gives the full FFD result
        chunk_size: Batch size for the proximity scan

    Returns:
        New array of partially deformed positions with shape (n, 3)

    Raises:
        ValueError: If factor lies outside [0, 1] or radius is not positive
    """
    factor = validate_blend_factor(factor)
    rest_vertices = np.asarray(rest_vertices, dtype=float)
    if rest_vertices.ndim != 2 or rest_vertices.shape[1] != 3:
        raise ValueError(f"rest_vertices must have shape (n, 3), got {rest_vertices.shape}")

    start_time = time.time()
    result = rest_vertices.copy()

    region = classify_region(rest_vertices, guide_samples, radius, chunk_size) != NO_MATCH
    affected = int(np.count_nonzero(region))

    if affected and factor > 0.0:
        source = rest_vertices[region]
        target = evaluate(source, lattice)
        if factor == 1.0:
            result[region] = target
        else:
            result[region] = source + factor * (target - source)

    logger.info(
        f"Region blend moved {affected} of {len(rest_vertices)} vertices "
        f"(radius={radius}, factor={factor}) in {time.time() - start_time:.4f} seconds"
    )
    return result
