"""
Deformation driver.

Recomputes the full deformed vertex buffer from the immutable rest buffer.
Every call starts again from the rest positions, so repeated calls with an
unchanged lattice produce identical output and edits never accumulate drift.
"""

import logging
import time

import numpy as np

from ffdsculpt.core.bernstein import evaluate
from ffdsculpt.core.lattice import ControlLattice

# Configure logging
logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 65536


def chunk_ranges(total: int, chunk_size: int):
    """Yield (start, stop) pairs covering ``range(total)`` in chunks."""
    for start in range(0, total, chunk_size):
        yield start, min(start + chunk_size, total)


def deform_all(
    rest_vertices: np.ndarray,
    lattice: ControlLattice,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> np.ndarray:
    """Deform every rest vertex through the lattice.

    Args:
        rest_vertices: Rest-pose vertex positions with shape (n, 3); never modified
        lattice: Control lattice in its current configuration
        chunk_size: Number of vertices evaluated per batch

    Returns:
        New array of deformed positions with shape (n, 3)
    """
    rest_vertices = np.asarray(rest_vertices, dtype=float)
    if rest_vertices.ndim != 2 or rest_vertices.shape[1] != 3:
        raise ValueError(f"rest_vertices must have shape (n, 3), got {rest_vertices.shape}")
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    start_time = time.time()
    deformed = np.empty_like(rest_vertices)

    for start, stop in chunk_ranges(len(rest_vertices), chunk_size):
        deformed[start:stop] = evaluate(rest_vertices[start:stop], lattice)

    logger.debug(
        f"Deformed {len(rest_vertices)} vertices with lattice {lattice.span_counts} "
        f"in {time.time() - start_time:.4f} seconds"
    )
    return deformed
