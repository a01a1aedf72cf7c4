"""Exception types raised by the FFD engine.

All errors derive from :class:`FFDError`, which is itself a ``ValueError``.
"""


class FFDError(ValueError):
    """Base class for all ffdsculpt errors."""


class InvalidBoundsError(FFDError):
    """Raised when a lattice is built from an inverted or collapsed box."""


class OutOfRangeError(FFDError, IndexError):
    """Raised when a control point index exceeds the lattice extents."""


class DimensionMismatchError(FFDError):
    """Raised when span counts are malformed or smaller than 1."""


class GuideSurfaceError(FFDError):
    """Raised when guide points cannot be turned into a surface."""


class SessionStateError(FFDError):
    """Raised when a session operation needs a mesh or lattice that is not loaded."""
