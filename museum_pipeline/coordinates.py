"""Object-space geometry of a square ArUco marker."""

import numpy as np


def build_object_points(marker_length: float) -> np.ndarray:
    """
    Corners of a square marker centered at the origin on the Z=0 plane.

    Args:
        marker_length: Side length of the marker (any unit; poses come out in the same unit)

    Returns:
        (4, 3) float32 array ordered top-left, top-right, bottom-right, bottom-left,
        matching the corner order returned by the ArUco detector.
    """
    half = marker_length / 2.0
    return np.array(
        [
            [-half, half, 0.0],
            [half, half, 0.0],
            [half, -half, 0.0],
            [-half, -half, 0.0],
        ],
        dtype=np.float32,
    )


def marker_length_of(object_points: np.ndarray) -> float:
    """Side length of the marker described by `object_points` (TL -> TR edge)."""
    pts = np.asarray(object_points, dtype=np.float64).reshape(-1, 3)
    return float(np.linalg.norm(pts[1] - pts[0]))
