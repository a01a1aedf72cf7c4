#!/usr/bin/env python3
"""
Example demonstrating interactive-style FFD sculpting without a GUI.

This example shows how to:
1. Load a base shape into an editing session
2. Drag lattice control points and inspect the deformed mesh
3. Restrict the deformation to a guide region
4. Save before/after plots of the session
"""

import os

import matplotlib
matplotlib.use('Agg')

# Import ffdsculpt modules
from ffdsculpt.core.config import EditorSettings
from ffdsculpt.mesh.primitives import SphereShape
from ffdsculpt.session import EditingSession
from ffdsculpt.visualization.lattice_viz import visualize_session

# Set up logging
import logging
logging.basicConfig(level=logging.INFO)


def main():
    """Run the sculpting example."""
    output_dir = "./output_sculpt"
    os.makedirs(output_dir, exist_ok=True)

    settings = EditorSettings(span_counts=(3, 3, 3), smoothing_factor=0.8, subdivision_level=0)
    session = EditingSession(settings)

    print("Loading sphere...")
    session.load_shape(SphereShape(width_segments=24, height_segments=16))
    print(f"Lattice has {session.get_total_ctrl_pt_count()} control points")
    bbox_min, bbox_max = session.get_bounding_box()
    print(f"Bounding box: {bbox_min} -> {bbox_max}")

    visualize_session(session.snapshot(), title="Rest pose",
                      save_path=os.path.join(output_dir, "rest.png"))

    # Pull the two top-centre control points upward
    for i, j in ((1, 1), (2, 2)):
        position = session.get_position_ternary(i, j, 3)
        position[2] += 80.0
        session.move_control_point_ternary(i, j, 3, position)

    visualize_session(session.snapshot(), title="Full deformation", show_rest=True,
                      save_path=os.path.join(output_dir, "deformed.png"))

    # Keep the bulge only around the north pole
    for point in ((0, 0, 160), (40, 0, 120), (-40, 30, 120), (0, -40, 120), (0, 40, 110)):
        session.add_guide_point(point)
    session.build_guide_surface()
    session.set_blend_radius(40.0)

    snapshot = session.snapshot()
    print(f"Region blend applied: {snapshot.region_blend_applied}")
    visualize_session(snapshot, title="Region blend", show_rest=True,
                      save_path=os.path.join(output_dir, "region_blend.png"))

    print(f"\nPlots saved to {output_dir}")


if __name__ == "__main__":
    main()
