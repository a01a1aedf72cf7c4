"""
Guide surface authoring.

Users place points on the mesh; once more than three are placed their convex
hull becomes the guide surface, whose sampled positions drive the region
blend.
"""

import logging
from typing import List, Optional, Sequence

import numpy as np
from scipy.spatial import ConvexHull, QhullError

from ffdsculpt.core.errors import GuideSurfaceError

# Configure logging
logger = logging.getLogger(__name__)

MIN_GUIDE_POINTS = 4


class GuideSurface:
    """Convex hull of the placed guide points.

    Attributes:
        points: Placed points with shape (n, 3)
        triangles: Hull facets as indices into ``points`` with shape (m, 3)
    """

    def __init__(self, points: np.ndarray, triangles: np.ndarray):
        self.points = np.array(points, dtype=float).reshape(-1, 3)
        self.triangles = np.array(triangles, dtype=int).reshape(-1, 3)
        self.points.flags.writeable = False
        self.triangles.flags.writeable = False

    def __repr__(self) -> str:
        return f"GuideSurface(points={len(self.points)}, triangles={len(self.triangles)})"

    def samples(self, density: int = 0) -> np.ndarray:
        """Sample positions on the hull.

        Hull vertices come first, in facet order with the first appearance
        kept. With ``density > 0`` every facet is additionally sampled on a
        barycentric grid with ``density + 1`` steps per edge (interior and
        edge points only).

        Args:
            density: Extra subdivisions per facet edge

        Returns:
            Array of sample positions with shape (k, 3)
        """
        if density < 0:
            raise ValueError(f"density must be non-negative, got {density}")

        order = []
        seen = set()
        for index in self.triangles.ravel():
            if index not in seen:
                seen.add(index)
                order.append(index)
        samples = [self.points[order]]

        if density > 0:
            steps = density + 1
            weights = [
                (i / steps, j / steps, (steps - i - j) / steps)
                for i in range(steps + 1)
                for j in range(steps + 1 - i)
                if max(i, j, steps - i - j) < steps
            ]
            weights = np.array(weights)
            corners = self.points[self.triangles]
            extra = np.einsum('wc,tcd->twd', weights, corners).reshape(-1, 3)
            samples.append(extra)

        return np.vstack(samples)


class GuideSurfaceBuilder:
    """Collects placed points and builds the guide surface from them."""

    def __init__(self):
        self._points: List[np.ndarray] = []

    @property
    def points(self) -> np.ndarray:
        if not self._points:
            return np.empty((0, 3))
        return np.array(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def add_point(self, position: Sequence[float]) -> None:
        position = np.asarray(position, dtype=float)
        if position.shape != (3,) or not np.all(np.isfinite(position)):
            raise ValueError(f"guide point must be 3 finite coordinates, got {position}")
        self._points.append(position)
        logger.debug(f"Guide point added: {position}")

    def clear(self) -> None:
        self._points.clear()

    def build(self) -> Optional[GuideSurface]:
        """Compute the convex hull of the placed points.

        Returns:
            GuideSurface, or None while fewer than four points are placed

        Raises:
            GuideSurfaceError: If the points are coplanar or otherwise degenerate
        """
        if len(self._points) < MIN_GUIDE_POINTS:
            logger.info(f"Need at least {MIN_GUIDE_POINTS} guide points to build a surface, have {len(self._points)}")
            return None

        points = self.points
        try:
            hull = ConvexHull(points)
        except QhullError as e:
            logger.error(f"Error computing guide surface hull: {e}")
            raise GuideSurfaceError(f"Guide points do not span a volume: {e}") from e

        surface = GuideSurface(points, hull.simplices)
        logger.info(f"Guide surface created with {len(hull.vertices)} hull vertices and {len(hull.simplices)} facets")
        return surface
