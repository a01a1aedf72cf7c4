"""Visualization utilities for ffdsculpt."""

from ffdsculpt.visualization.lattice_viz import visualize_session

__all__ = ["visualize_session"]
