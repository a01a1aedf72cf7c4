"""Configuration module for ffdsculpt.

This module provides the immutable settings value that is passed into every
editing operation. Changing a setting means building a new value with
:func:`dataclasses.replace`, never mutating a shared instance.
"""

from dataclasses import dataclass, replace
from typing import Any, Tuple

from ffdsculpt.core.errors import DimensionMismatchError

MIN_SUBDIVISION_LEVEL = 0
MAX_SUBDIVISION_LEVEL = 4

# Distance below which a rest vertex counts as being near a guide sample
DEFAULT_BLEND_RADIUS = 20.0


def validate_span_counts(span_counts: Any) -> Tuple[int, int, int]:
    """Check span counts and return them as a tuple of three ints.

    Args:
        span_counts: Sequence of lattice cell counts (nx, ny, nz)

    Returns:
        Tuple of three positive integers

    Raises:
        DimensionMismatchError: If there are not exactly three counts or any is < 1
    """
    try:
        spans = tuple(span_counts)
    except TypeError:
        raise DimensionMismatchError(f"span counts must be a sequence of 3 integers, got {span_counts!r}")

    if len(spans) != 3:
        raise DimensionMismatchError(f"span counts must have exactly 3 values, got {len(spans)}")

    for value in spans:
        if isinstance(value, bool) or int(value) != value:
            raise DimensionMismatchError(f"span counts must be integers, got {spans}")
        if value < 1:
            raise DimensionMismatchError(f"All span counts must be >= 1, got {spans}")

    return tuple(int(value) for value in spans)


def validate_blend_factor(factor: float) -> float:
    """Return ``factor`` as a float, rejecting values outside [0, 1]."""
    factor = float(factor)
    if not 0.0 <= factor <= 1.0:
        raise ValueError(f"blend factor must lie in [0, 1], got {factor}")
    return factor


@dataclass(frozen=True)
class EditorSettings:
    """Settings shared by the editing operations.

    Attributes:
        span_counts: Number of lattice cells along each axis (nx, ny, nz)
        smoothing_factor: Blend factor used by the region blend, in [0, 1]
        blend_radius: Proximity radius used to classify vertices near the guide surface
        subdivision_level: Loop subdivision iterations applied to the base shape
        guide_sample_density: Extra samples per guide triangle edge (0 = hull vertices only)
        chunk_size: Number of vertices evaluated per batch by the deformation driver
    """

    span_counts: Tuple[int, int, int] = (2, 2, 2)
    smoothing_factor: float = 0.5
    blend_radius: float = DEFAULT_BLEND_RADIUS
    subdivision_level: int = 2
    guide_sample_density: int = 0
    chunk_size: int = 65536

    def __post_init__(self) -> None:
        """Validate the settings after initialization."""
        object.__setattr__(self, 'span_counts', validate_span_counts(self.span_counts))
        object.__setattr__(self, 'smoothing_factor', validate_blend_factor(self.smoothing_factor))

        if not self.blend_radius > 0:
            raise ValueError(f"blend_radius must be positive, got {self.blend_radius}")

        if not MIN_SUBDIVISION_LEVEL <= self.subdivision_level <= MAX_SUBDIVISION_LEVEL:
            raise ValueError(
                f"subdivision_level must be between {MIN_SUBDIVISION_LEVEL} and "
                f"{MAX_SUBDIVISION_LEVEL}, got {self.subdivision_level}"
            )

        if self.guide_sample_density < 0:
            raise ValueError(f"guide_sample_density must be non-negative, got {self.guide_sample_density}")

        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")

    def with_changes(self, **changes: Any) -> 'EditorSettings':
        """Return a copy of the settings with the given fields replaced."""
        return replace(self, **changes)
