"""
Planar geometry helpers.

Pure numpy functions on (n, 2) point arrays.
"""

from __future__ import annotations

import numpy as np


def as_points(points: np.ndarray) -> np.ndarray:
    """
    Coerce OpenCV-style (n, 1, 2) or flat (n, 2) input to float64 (n, 2).
    """
    pts = np.asarray(points, dtype=np.float64)
    return pts.reshape(-1, 2)


def quad_centre(corners: np.ndarray) -> np.ndarray:
    """Centroid of the corner points."""
    return as_points(corners).mean(axis=0)


def order_corners(corners: np.ndarray) -> np.ndarray:
    """
    Sort four corners clockwise (image coordinates, y down) around their
    centroid, starting from the one with the smallest polar angle.

    Raises:
        ValueError: If corners does not hold exactly four points
    """
    pts = as_points(corners)
    if pts.shape[0] != 4:
        raise ValueError(f"A quad needs 4 corners, got {pts.shape[0]}")

    centre = pts.mean(axis=0)
    angles = np.arctan2(pts[:, 1] - centre[1], pts[:, 0] - centre[0])
    return pts[np.argsort(angles, kind="stable")].copy()


def distance(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.linalg.norm(np.asarray(a, dtype=np.float64) - b))


def longest_diagonal(corners: np.ndarray) -> float:
    """Length of the longer of the two diagonals (corners 0-2 and 1-3)."""
    pts = as_points(corners)
    return max(distance(pts[0], pts[2]), distance(pts[1], pts[3]))


def within_centre_rect(point: np.ndarray, centre_a: np.ndarray, centre_b: np.ndarray) -> bool:
    """
    Whether point lies in the axis-aligned rectangle spanned by two centres.

    Boundaries count as inside.
    """
    lo = np.minimum(centre_a, centre_b)
    hi = np.maximum(centre_a, centre_b)
    return bool(np.all(point >= lo) and np.all(point <= hi))


def project_points(homography: np.ndarray, points: np.ndarray) -> np.ndarray:
    """
    Map points through a 3x3 homography, dividing by the homogeneous term.

    Args:
        homography: (3, 3) projective transform
        points: (n, 2) or (2,) points

    Returns:
        Projected points with the same leading shape as the input
    """
    h = np.asarray(homography, dtype=np.float64)
    if h.shape != (3, 3):
        raise ValueError(f"Homography must be 3x3, got {h.shape}")

    single = np.ndim(points) == 1
    pts = as_points(points)
    homogeneous = np.hstack([pts, np.ones((pts.shape[0], 1))]) @ h.T
    projected = homogeneous[:, :2] / homogeneous[:, 2:3]

    return projected[0] if single else projected
